"""Unit tests for scanning domain models."""

from datetime import UTC, datetime

import pytest
from ggufclean.scanning.models import (
    Candidate,
    CandidateStatus,
    InvalidRootError,
    ScanError,
    ScanErrorKind,
    ScanSession,
    ScanStatus,
)

NOW = datetime(2024, 1, 15, 10, 0, tzinfo=UTC)


class TestCandidate:
    """Tests for the Candidate dataclass."""

    def test_defaults(self) -> None:
        """New candidates are pending and unselected."""
        candidate = Candidate(path="/models/a.gguf", size_bytes=10, modified_at=NOW)

        assert candidate.selected is False
        assert candidate.status == CandidateStatus.PENDING
        assert candidate.failure_reason is None
        assert candidate.is_visible is True

    def test_size_human(self) -> None:
        """size_human formats the byte count."""
        candidate = Candidate(path="/m", size_bytes=3 * 1024**3, modified_at=NOW)
        assert candidate.size_human == "3.00 GB"

    def test_empty_path_rejected(self) -> None:
        """Empty paths are invalid."""
        with pytest.raises(ValueError, match="empty"):
            Candidate(path="", size_bytes=0, modified_at=NOW)

    def test_relative_path_rejected(self) -> None:
        """Paths must be absolute."""
        with pytest.raises(ValueError, match="absolute"):
            Candidate(path="models/a.gguf", size_bytes=0, modified_at=NOW)

    def test_negative_size_rejected(self) -> None:
        """Sizes cannot be negative."""
        with pytest.raises(ValueError, match="negative"):
            Candidate(path="/m", size_bytes=-1, modified_at=NOW)

    def test_deleted_not_visible(self) -> None:
        """Deleted candidates leave the visible list; failed ones stay."""
        deleted = Candidate(
            path="/a", size_bytes=1, modified_at=NOW, status=CandidateStatus.DELETED
        )
        failed = Candidate(path="/b", size_bytes=1, modified_at=NOW, status=CandidateStatus.FAILED)

        assert deleted.is_visible is False
        assert failed.is_visible is True


class TestScanErrors:
    """Tests for ScanError and InvalidRootError."""

    def test_only_invalid_root_is_fatal(self) -> None:
        """Per-entry errors never stop a scan."""
        assert ScanError(ScanErrorKind.INVALID_ROOT, "/x", "m").fatal is True
        kinds = (ScanErrorKind.PERMISSION_DENIED, ScanErrorKind.IO_ERROR, ScanErrorKind.VANISHED)
        for kind in kinds:
            assert ScanError(kind, "/x", "m").fatal is False

    def test_invalid_root_default_message(self) -> None:
        """InvalidRootError names the path."""
        error = InvalidRootError("/nope")
        assert error.path == "/nope"
        assert "Not a directory: /nope" in str(error)

    def test_invalid_root_to_scan_error(self) -> None:
        """InvalidRootError converts into a fatal ScanError."""
        record = InvalidRootError("/nope", "Directory does not exist: /nope").to_scan_error()

        assert record.kind == ScanErrorKind.INVALID_ROOT
        assert record.path == "/nope"
        assert record.message == "Directory does not exist: /nope"
        assert record.fatal is True


class TestScanSession:
    """Tests for ScanSession status transitions."""

    def test_initial_state(self) -> None:
        """A new session is idle with zero counters."""
        session = ScanSession(root_path="/models")

        assert session.status == ScanStatus.IDLE
        assert session.files_visited == 0
        assert session.errors_encountered == 0
        assert session.finished is False

    def test_complete(self) -> None:
        """start then complete reaches COMPLETED."""
        session = ScanSession(root_path="/models")
        session.start()
        assert session.status == ScanStatus.SCANNING

        session.complete()

        assert session.status == ScanStatus.COMPLETED
        assert session.finished is True

    def test_cancel(self) -> None:
        """cancel reaches CANCELLED."""
        session = ScanSession(root_path="/models")
        session.start()
        session.cancel()
        assert session.status == ScanStatus.CANCELLED

    def test_terminal_status_is_final(self) -> None:
        """A finished session cannot change status again."""
        session = ScanSession(root_path="/models")
        session.start()
        session.complete()

        with pytest.raises(ValueError, match="already completed"):
            session.cancel()
        with pytest.raises(ValueError):
            session.start()
