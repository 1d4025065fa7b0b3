"""Scan engine for model-weight files.

Walks a directory tree, reads only the leading bytes of every regular
file, and yields a Candidate for each file whose header matches an
enabled signature. Symlinks are never followed or reported, per-entry
errors are yielded as ScanError records without stopping the scan,
and a CancellationToken is checked before each directory entry.

Two traversal modes are supported:
- Sequential (workers=1): depth-first in name order, fully deterministic.
- Parallel (workers>1): directories are processed by a bounded thread
  pool whose workers feed a bounded queue drained by the caller's
  thread, the single writer of session state and results.
"""

import fnmatch
import logging
import queue
import threading
from collections.abc import Generator, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from ggufclean.core.cancellation import CancellationToken
from ggufclean.core.fs import (
    AccessDenied,
    EntryType,
    EntryVanished,
    FileAccessError,
    FileSystem,
    LocalFileSystem,
)
from ggufclean.core.signatures import SignatureDetector
from ggufclean.scanning.models import (
    Candidate,
    InvalidRootError,
    ScanError,
    ScanErrorKind,
    ScanSession,
)

logger = logging.getLogger(__name__)

ScanItem = Candidate | ScanError


@dataclass(frozen=True, slots=True)
class _DirectoryEntered:
    path: str


@dataclass(frozen=True, slots=True)
class _FileVisited:
    pass


@dataclass(frozen=True, slots=True)
class _Interrupted:
    pass


@dataclass(frozen=True, slots=True)
class _TaskSpawned:
    pass


@dataclass(frozen=True, slots=True)
class _TaskDone:
    pass


@dataclass(frozen=True, slots=True)
class _WorkerFailed:
    error: BaseException


_FILE_VISITED = _FileVisited()
_INTERRUPTED = _Interrupted()
_TASK_SPAWNED = _TaskSpawned()
_TASK_DONE = _TaskDone()

_Event = ScanItem | _DirectoryEntered | _FileVisited | _Interrupted
_QueueEvent = _Event | _TaskSpawned | _TaskDone | _WorkerFailed

# Seconds a worker waits on a full queue before re-checking for shutdown
_PUT_TIMEOUT = 0.1


class ModelScanner:
    """Finds files whose leading bytes match a known model signature.

    Args:
        fs: Filesystem access. Defaults to the local filesystem.
        detector: Signature detector. Defaults to GGUF only.
        workers: Number of traversal threads; 1 selects sequential mode.
        min_size_bytes: Matching files smaller than this are not reported.
        exclude: Glob patterns of directories that are not descended into.
        queue_size: Capacity of the result queue in parallel mode.

    Example:
        >>> scanner = ModelScanner(workers=4)
        >>> for item in scanner.scan(Path.home()):
        ...     if isinstance(item, Candidate):
        ...         print(item.path, item.size_human)
    """

    def __init__(
        self,
        *,
        fs: FileSystem | None = None,
        detector: SignatureDetector | None = None,
        workers: int = 1,
        min_size_bytes: int = 0,
        exclude: Iterable[str] = (),
        queue_size: int = 256,
    ) -> None:
        if workers < 1:
            msg = f"workers must be at least 1, got {workers}"
            raise ValueError(msg)
        self._fs = fs or LocalFileSystem()
        self._detector = detector or SignatureDetector()
        self._workers = workers
        self._min_size_bytes = min_size_bytes
        self._exclude = tuple(exclude)
        self._queue_size = queue_size

    @property
    def workers(self) -> int:
        """Number of traversal threads."""
        return self._workers

    def validate_root(self, root: Path | str) -> Path:
        """Check that ``root`` is an existing directory.

        Args:
            root: Directory to scan.

        Returns:
            Absolute path of the root.

        Raises:
            InvalidRootError: If the root does not exist or is not a directory.
        """
        root_path = Path(root).expanduser().absolute()
        if self._fs.is_dir(root_path):
            return root_path
        try:
            self._fs.stat(root_path)
        except EntryVanished as e:
            raise InvalidRootError(root_path, f"Directory does not exist: {root_path}") from e
        except FileAccessError as e:
            raise InvalidRootError(root_path, f"Cannot access {root_path}: {e}") from e
        raise InvalidRootError(root_path, f"Not a directory: {root_path}")

    def scan(
        self,
        root: Path | str,
        cancel_token: CancellationToken | None = None,
        session: ScanSession | None = None,
    ) -> Iterator[ScanItem]:
        """Scan a directory tree for model-weight files.

        The root is validated eagerly; traversal itself is lazy and
        happens as the returned iterator is consumed.

        Args:
            root: Directory to scan.
            cancel_token: Token checked before each directory entry.
            session: Session updated with progress. A new one is created if None.

        Returns:
            Iterator of Candidate and non-fatal ScanError records.

        Raises:
            InvalidRootError: If the root does not exist or is not a directory.
        """
        root_path = self.validate_root(root)
        token = cancel_token or CancellationToken()
        if session is None:
            session = ScanSession(root_path=str(root_path))
        return self._run(root_path, token, session)

    def _run(
        self,
        root: Path,
        token: CancellationToken,
        session: ScanSession,
    ) -> Iterator[ScanItem]:
        session.start()
        logger.info("Scanning %s with %d worker(s)", root, self._workers)

        if self._workers > 1:
            events = self._walk_parallel(root, token)
        else:
            events = self._walk_sequential(root, token)

        # COMPLETED only when the whole tree was walked; a late cancel
        # that skipped nothing does not make the results partial.
        exhausted = False
        interrupted = False
        try:
            for event in events:
                if isinstance(event, _DirectoryEntered):
                    session.dirs_visited += 1
                    session.current_dir = event.path
                elif isinstance(event, _FileVisited):
                    session.files_visited += 1
                elif isinstance(event, _Interrupted):
                    interrupted = True
                elif isinstance(event, ScanError):
                    session.errors_encountered += 1
                    logger.debug("Skipped %s: %s", event.path, event.message)
                    yield event
                else:
                    session.candidates_found += 1
                    session.bytes_found += event.size_bytes
                    yield event
            exhausted = True
        finally:
            events.close()
            self._finish(root, session, complete=exhausted and not interrupted)

    def _finish(self, root: Path, session: ScanSession, *, complete: bool) -> None:
        if complete:
            session.complete()
            logger.info(
                "Scan of %s completed: %d file(s), %d match(es), %d error(s)",
                root,
                session.files_visited,
                session.candidates_found,
                session.errors_encountered,
            )
        else:
            session.cancel()
            logger.info("Scan of %s stopped after %d file(s)", root, session.files_visited)

    def _walk_sequential(
        self, root: Path, token: CancellationToken
    ) -> Generator[_Event, None, None]:
        """Depth-first traversal in name order."""
        stack = [root]
        while stack:
            if token.cancelled:
                yield _INTERRUPTED
                return
            directory = stack.pop()
            subdirs = yield from self._process_directory(directory, token)
            stack.extend(reversed(subdirs))

    def _walk_parallel(
        self, root: Path, token: CancellationToken
    ) -> Generator[_Event, None, None]:
        """Traverse with a bounded pool; this generator is the only consumer."""
        results: queue.Queue[_QueueEvent] = queue.Queue(maxsize=self._queue_size)
        stop = threading.Event()
        executor = ThreadPoolExecutor(
            max_workers=self._workers, thread_name_prefix="ggufclean-scan"
        )

        def put(event: _QueueEvent) -> bool:
            while not stop.is_set():
                try:
                    results.put(event, timeout=_PUT_TIMEOUT)
                    return True
                except queue.Full:
                    continue
            return False

        def submit(directory: Path) -> bool:
            # Announce before submitting so the consumer never sees a
            # child finish before its spawn was counted.
            if stop.is_set() or not put(_TASK_SPAWNED):
                return False
            try:
                executor.submit(work, directory)
            except RuntimeError:
                # Executor already shut down by the consumer
                return False
            return True

        def work(directory: Path) -> None:
            try:
                walker = self._process_directory(directory, token)
                subdirs: list[Path] = []
                while True:
                    try:
                        event = next(walker)
                    except StopIteration as done:
                        subdirs = done.value or []
                        break
                    if not put(event):
                        return
                for subdir in subdirs:
                    if token.cancelled:
                        put(_INTERRUPTED)
                        break
                    if not submit(subdir):
                        break
            except Exception as e:  # noqa: BLE001 - re-raised in the consumer thread
                put(_WorkerFailed(e))
            finally:
                put(_TASK_DONE)

        outstanding = 1
        executor.submit(work, root)
        try:
            while outstanding:
                event = results.get()
                if isinstance(event, _TaskSpawned):
                    outstanding += 1
                elif isinstance(event, _TaskDone):
                    outstanding -= 1
                elif isinstance(event, _WorkerFailed):
                    raise event.error
                else:
                    yield event
        finally:
            stop.set()
            executor.shutdown(wait=False, cancel_futures=True)

    def _process_directory(
        self, directory: Path, token: CancellationToken
    ) -> Generator[_Event, None, list[Path]]:
        """List one directory, inspect its files and return its subdirectories."""
        subdirs: list[Path] = []
        if token.cancelled:
            yield _INTERRUPTED
            return subdirs

        yield _DirectoryEntered(str(directory))
        try:
            entries = self._fs.list_dir(directory)
        except FileAccessError as e:
            yield _to_scan_error(e)
            return subdirs

        for entry in entries:
            if token.cancelled:
                yield _INTERRUPTED
                break
            if entry.entry_type == EntryType.DIRECTORY:
                if self._is_excluded(entry.path):
                    logger.debug("Excluded directory: %s", entry.path)
                    continue
                subdirs.append(entry.path)
            elif entry.entry_type == EntryType.FILE:
                yield _FILE_VISITED
                item = self._inspect_file(entry.path)
                if item is not None:
                    yield item
            # Symlinks, devices, FIFOs and sockets are never candidates

        return subdirs

    def _inspect_file(self, path: Path) -> ScanItem | None:
        """Classify one regular file by its header.

        Returns:
            Candidate on match, ScanError on access failure, None otherwise.
        """
        try:
            header = self._fs.read_header(path, self._detector.header_length)
            kind = self._detector.detect(header)
            if kind is None:
                return None
            info = self._fs.stat(path)
        except FileAccessError as e:
            return _to_scan_error(e)

        if info.entry_type != EntryType.FILE:
            return None
        if info.size_bytes < self._min_size_bytes:
            return None

        return Candidate(
            path=str(path),
            size_bytes=info.size_bytes,
            modified_at=info.modified_at,
            kind=kind,
        )

    def _is_excluded(self, path: Path) -> bool:
        path_str = str(path)
        return any(fnmatch.fnmatch(path_str, pattern) for pattern in self._exclude)


def _to_scan_error(error: FileAccessError) -> ScanError:
    """Map a filesystem access failure onto a non-fatal ScanError."""
    if isinstance(error, AccessDenied):
        kind = ScanErrorKind.PERMISSION_DENIED
    elif isinstance(error, EntryVanished):
        kind = ScanErrorKind.VANISHED
    else:
        kind = ScanErrorKind.IO_ERROR
    return ScanError(kind=kind, path=str(error.path), message=str(error))
