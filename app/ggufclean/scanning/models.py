"""Scanning domain models.

This module defines the records produced by the scan engine: the
candidates themselves, per-entry scan errors, and the scan session
state that tracks progress for the terminal UI.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from ggufclean.core.signatures import SignatureKind
from ggufclean.utils.formatting import format_size


class CandidateStatus(str, Enum):
    """Lifecycle status of a candidate.

    Attributes:
        PENDING: Discovered and still on disk.
        DELETED: Removed from storage.
        FAILED: Deletion was attempted and failed.
    """

    PENDING = "pending"
    DELETED = "deleted"
    FAILED = "failed"


@dataclass(slots=True)
class Candidate:
    """A discovered file that matches a known signature.

    Candidates are mutable: the registry updates selection and status
    as the operator works through the list.

    Attributes:
        path: Absolute filesystem path (unique key within a registry).
        size_bytes: File size at scan time.
        modified_at: Last modification time at scan time.
        kind: Signature kind that matched.
        selected: Whether the operator marked it for deletion.
        status: Lifecycle status.
        failure_reason: Why deletion failed (only set when FAILED).
    """

    path: str
    size_bytes: int
    modified_at: datetime
    kind: SignatureKind = SignatureKind.GGUF
    selected: bool = False
    status: CandidateStatus = CandidateStatus.PENDING
    failure_reason: str | None = None

    def __post_init__(self) -> None:
        """Validate candidate data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if not Path(self.path).is_absolute():
            msg = f"Path must be absolute, got {self.path}"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)

    @property
    def size_human(self) -> str:
        """File size in human-readable form."""
        return format_size(self.size_bytes)

    @property
    def is_visible(self) -> bool:
        """Whether the candidate still belongs on the visible list."""
        return self.status != CandidateStatus.DELETED


class ScanStatus(str, Enum):
    """Status of a scan session."""

    IDLE = "idle"
    SCANNING = "scanning"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ScanErrorKind(str, Enum):
    """Classification of scan errors.

    Attributes:
        INVALID_ROOT: Root path missing or not a directory (fatal).
        PERMISSION_DENIED: Entry could not be accessed.
        IO_ERROR: Any other read failure.
        VANISHED: Entry disappeared between listing and reading.
    """

    INVALID_ROOT = "invalid_root"
    PERMISSION_DENIED = "permission_denied"
    IO_ERROR = "io_error"
    VANISHED = "vanished"


@dataclass(frozen=True, slots=True)
class ScanError:
    """An error encountered while scanning a single entry.

    Attributes:
        kind: Error classification.
        path: Path of the offending entry.
        message: Human-readable description.
    """

    kind: ScanErrorKind
    path: str
    message: str

    @property
    def fatal(self) -> bool:
        """Whether the error prevents the scan from running at all."""
        return self.kind == ScanErrorKind.INVALID_ROOT


class InvalidRootError(Exception):
    """Raised when the scan root does not exist or is not a directory."""

    def __init__(self, path: Path | str, message: str | None = None) -> None:
        self.path = str(path)
        super().__init__(message or f"Not a directory: {self.path}")

    def to_scan_error(self) -> ScanError:
        """Convert into a fatal ScanError record."""
        return ScanError(kind=ScanErrorKind.INVALID_ROOT, path=self.path, message=str(self))


_TERMINAL_STATUSES = (ScanStatus.COMPLETED, ScanStatus.CANCELLED)


@dataclass(slots=True)
class ScanSession:
    """Progress and outcome of a single scan.

    Only counts are kept for errors so memory stays bounded on
    trees with many unreadable entries.

    Attributes:
        root_path: Directory being scanned.
        status: Current status.
        files_visited: Regular files inspected so far.
        dirs_visited: Directories listed so far.
        errors_encountered: Entries skipped because of errors.
        candidates_found: Matching files emitted so far.
        bytes_found: Total size of emitted candidates.
        current_dir: Directory most recently entered.
    """

    root_path: str
    status: ScanStatus = ScanStatus.IDLE
    files_visited: int = 0
    dirs_visited: int = 0
    errors_encountered: int = 0
    candidates_found: int = 0
    bytes_found: int = 0
    current_dir: str = field(default="")

    @property
    def finished(self) -> bool:
        """Whether the session reached a terminal status."""
        return self.status in _TERMINAL_STATUSES

    def start(self) -> None:
        """Move the session into SCANNING."""
        self._transition(ScanStatus.SCANNING)

    def complete(self) -> None:
        """Mark the scan as completed."""
        self._transition(ScanStatus.COMPLETED)

    def cancel(self) -> None:
        """Mark the scan as cancelled."""
        self._transition(ScanStatus.CANCELLED)

    def _transition(self, status: ScanStatus) -> None:
        if self.finished:
            msg = f"Scan session already {self.status.value}"
            raise ValueError(msg)
        self.status = status
