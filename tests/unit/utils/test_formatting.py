"""Unit tests for formatting helpers."""

from datetime import UTC, datetime

import pytest
from ggufclean.core.signatures import SignatureKind
from ggufclean.scanning.models import Candidate
from ggufclean.utils.formatting import (
    create_candidate_table,
    format_candidate_row,
    format_size,
)


class TestFormatSize:
    """Tests for format_size."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (None, "0 B"),
            (0, "0 B"),
            (1, "1 B"),
            (1023, "1023 B"),
            (1024, "1.00 KB"),
            (1536, "1.50 KB"),
            (1024**2, "1.00 MB"),
            (int(4.37 * 1024**3), "4.37 GB"),
            (2 * 1024**4, "2.00 TB"),
        ],
    )
    def test_units(self, size: int | None, expected: str) -> None:
        """Sizes use the largest fitting binary unit with two decimals."""
        assert format_size(size) == expected


class TestCandidateTable:
    """Tests for the candidate table helpers."""

    def test_columns(self) -> None:
        """The table has Size, Kind, Modified and Path columns."""
        table = create_candidate_table()
        assert [c.header for c in table.columns] == ["Size", "Kind", "Modified", "Path"]

    def test_row(self) -> None:
        """A row carries the formatted values in column order."""
        candidate = Candidate(
            path="/models/[x].gguf",
            size_bytes=2048,
            modified_at=datetime(2024, 1, 15, 10, 0, tzinfo=UTC),
            kind=SignatureKind.GGJT,
        )

        size, kind, modified, path = format_candidate_row(candidate)

        assert size == "2.00 KB"
        assert kind == "GGJT"
        assert modified.startswith("2024-01-1")
        assert path == "/models/\\[x].gguf"
