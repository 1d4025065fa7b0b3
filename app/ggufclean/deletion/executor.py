"""Deletion of confirmed candidate files.

Each path gets exactly one removal attempt. Failures are isolated per
path and reported in the returned mapping; the batch itself never
raises because of a single failing file. A path that is already gone
counts as a success since the desired end state is reached.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ggufclean.core.fs import (
    AccessDenied,
    EntryType,
    EntryVanished,
    FileAccessError,
    FileSystem,
    LocalFileSystem,
)

logger = logging.getLogger(__name__)


class DeleteErrorKind(str, Enum):
    """Classification of deletion failures.

    Attributes:
        NOT_FOUND: File was already gone (reported as success).
        PERMISSION_DENIED: The operating system refused the removal.
        OTHER_IO_ERROR: Any other failure, including non-regular files.
    """

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    OTHER_IO_ERROR = "other_io_error"


@dataclass(frozen=True, slots=True)
class DeleteResult:
    """Result of deleting a single path.

    Attributes:
        path: Path that was operated on.
        error_kind: Failure classification, None on a clean removal.
        message: Error message if something went wrong, None otherwise.
    """

    path: str
    error_kind: DeleteErrorKind | None = None
    message: str | None = None

    @property
    def success(self) -> bool:
        """Whether the file is gone from storage."""
        return self.error_kind in (None, DeleteErrorKind.NOT_FOUND)

    @property
    def already_gone(self) -> bool:
        """Whether the file had disappeared before the removal attempt."""
        return self.error_kind == DeleteErrorKind.NOT_FOUND


ResultCallback = Callable[[str, DeleteResult], None]


class DeletionExecutor:
    """Removes confirmed files from storage.

    Only regular files are removed. A path that turned into a symlink,
    directory or device since it was scanned is refused rather than
    followed.

    Args:
        fs: Filesystem access. Defaults to the local filesystem.
    """

    def __init__(self, fs: FileSystem | None = None) -> None:
        self._fs = fs or LocalFileSystem()

    def delete_all(
        self,
        paths: Iterable[str],
        on_result: ResultCallback | None = None,
    ) -> dict[str, DeleteResult]:
        """Delete every path, one attempt each.

        Args:
            paths: Absolute paths of the files to delete.
            on_result: Called with each result as soon as it is known.

        Returns:
            Mapping from path to its DeleteResult, in input order.
        """
        results: dict[str, DeleteResult] = {}
        for path in paths:
            if path in results:
                continue
            result = self._delete_single(path)
            results[path] = result
            if on_result is not None:
                on_result(path, result)

        failed = sum(1 for r in results.values() if not r.success)
        logger.info("Deleted %d of %d file(s)", len(results) - failed, len(results))
        return results

    def _delete_single(self, path: str) -> DeleteResult:
        """Delete one file and classify the outcome."""
        target = Path(path)
        try:
            info = self._fs.stat(target)
            if info.entry_type != EntryType.FILE:
                logger.warning("Refusing to delete %s: not a regular file", path)
                return DeleteResult(
                    path=path,
                    error_kind=DeleteErrorKind.OTHER_IO_ERROR,
                    message=f"Not a regular file ({info.entry_type.value})",
                )
            self._fs.remove(target)
        except EntryVanished as e:
            logger.info("Already gone: %s", path)
            return DeleteResult(path=path, error_kind=DeleteErrorKind.NOT_FOUND, message=str(e))
        except AccessDenied as e:
            logger.warning("Permission denied deleting %s: %s", path, e)
            return DeleteResult(
                path=path, error_kind=DeleteErrorKind.PERMISSION_DENIED, message=str(e)
            )
        except FileAccessError as e:
            logger.warning("Failed to delete %s: %s", path, e)
            return DeleteResult(
                path=path, error_kind=DeleteErrorKind.OTHER_IO_ERROR, message=str(e)
            )

        logger.info("Deleted %s", path)
        return DeleteResult(path=path)
