"""Filesystem access used by the scanner and the deletion executor.

All OS-level failures are translated into FileAccessError subclasses
so that callers deal with a small, typed set of errors instead of
raw OSError instances. Symlinks are never followed.
"""

import errno
import os
import stat as stat_module
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path


class EntryType(str, Enum):
    """Type of a directory entry, determined without following symlinks.

    Attributes:
        FILE: Regular file.
        DIRECTORY: Directory.
        SYMLINK: Symbolic link (to anything, dead or alive).
        OTHER: Device, FIFO, socket or anything else.
    """

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class DirEntry:
    """A single entry returned by a directory listing.

    Attributes:
        path: Absolute path of the entry.
        entry_type: Entry type (not following symlinks).
    """

    path: Path
    entry_type: EntryType

    @property
    def name(self) -> str:
        """Base name of the entry."""
        return self.path.name


@dataclass(frozen=True, slots=True)
class FileStat:
    """Metadata of a file.

    Attributes:
        size_bytes: File size in bytes.
        modified_at: Last modification time (UTC).
        entry_type: Entry type (not following symlinks).
    """

    size_bytes: int
    modified_at: datetime
    entry_type: EntryType


class FileAccessError(Exception):
    """Base exception for filesystem access failures.

    Attributes:
        path: Path the failed operation was applied to.
    """

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(message)
        self.path = Path(path)


class AccessDenied(FileAccessError):
    """Raised when the operating system denies access to a path."""


class EntryVanished(FileAccessError):
    """Raised when a path no longer exists."""


class FileIOError(FileAccessError):
    """Raised for any other I/O failure."""


def translate_os_error(path: Path | str, exc: OSError) -> FileAccessError:
    """Convert an OSError into the matching FileAccessError.

    Args:
        path: Path the failed operation was applied to.
        exc: Original exception.

    Returns:
        FileAccessError subclass instance describing the failure.
    """
    message = exc.strerror or str(exc)
    if exc.errno in (errno.EACCES, errno.EPERM):
        return AccessDenied(path, message)
    if exc.errno in (errno.ENOENT, errno.ENOTDIR):
        return EntryVanished(path, message)
    return FileIOError(path, message)


def _entry_type_from_mode(mode: int) -> EntryType:
    if stat_module.S_ISLNK(mode):
        return EntryType.SYMLINK
    if stat_module.S_ISDIR(mode):
        return EntryType.DIRECTORY
    if stat_module.S_ISREG(mode):
        return EntryType.FILE
    return EntryType.OTHER


class FileSystem(ABC):
    """Abstract filesystem access.

    Implementations raise FileAccessError subclasses on failure and
    never follow symbolic links.
    """

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        """Check whether ``path`` is an existing directory (following symlinks)."""

    @abstractmethod
    def list_dir(self, path: Path) -> list[DirEntry]:
        """List the entries of a directory, sorted by name.

        Raises:
            FileAccessError: If the directory cannot be listed.
        """

    @abstractmethod
    def read_header(self, path: Path, length: int) -> bytes:
        """Read at most ``length`` leading bytes of a file.

        Raises:
            FileAccessError: If the file cannot be opened or read.
        """

    @abstractmethod
    def stat(self, path: Path) -> FileStat:
        """Read file metadata without following symlinks.

        Raises:
            FileAccessError: If the metadata cannot be read.
        """

    @abstractmethod
    def remove(self, path: Path) -> None:
        """Remove a single file.

        Raises:
            FileAccessError: If the file cannot be removed.
        """


class LocalFileSystem(FileSystem):
    """FileSystem implementation backed by the local operating system."""

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def list_dir(self, path: Path) -> list[DirEntry]:
        entries: list[DirEntry] = []
        try:
            with os.scandir(path) as it:
                for entry in it:
                    entry_type = self._classify(entry)
                    entries.append(DirEntry(path=path / entry.name, entry_type=entry_type))
        except OSError as e:
            raise translate_os_error(path, e) from e
        entries.sort(key=lambda e: e.name)
        return entries

    def read_header(self, path: Path, length: int) -> bytes:
        # The entry may have been swapped since listing: O_NOFOLLOW refuses a
        # symlink and O_NONBLOCK keeps a FIFO from blocking the open.
        flags = os.O_RDONLY | getattr(os, "O_NOFOLLOW", 0) | getattr(os, "O_NONBLOCK", 0)
        try:
            fd = os.open(path, flags)
        except OSError as e:
            if e.errno == errno.ELOOP:
                raise FileIOError(path, "Path became a symlink") from e
            raise translate_os_error(path, e) from e
        try:
            if not stat_module.S_ISREG(os.fstat(fd).st_mode):
                raise FileIOError(path, "No longer a regular file")
            return os.read(fd, length)
        except OSError as e:
            raise translate_os_error(path, e) from e
        finally:
            os.close(fd)

    def stat(self, path: Path) -> FileStat:
        try:
            st = path.lstat()
        except OSError as e:
            raise translate_os_error(path, e) from e
        return FileStat(
            size_bytes=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=UTC),
            entry_type=_entry_type_from_mode(st.st_mode),
        )

    def remove(self, path: Path) -> None:
        try:
            path.unlink()
        except OSError as e:
            raise translate_os_error(path, e) from e

    @staticmethod
    def _classify(entry: os.DirEntry[str]) -> EntryType:
        """Classify a scandir entry without following symlinks."""
        try:
            if entry.is_symlink():
                return EntryType.SYMLINK
            if entry.is_dir(follow_symlinks=False):
                return EntryType.DIRECTORY
            if entry.is_file(follow_symlinks=False):
                return EntryType.FILE
        except OSError:
            return EntryType.OTHER
        return EntryType.OTHER
