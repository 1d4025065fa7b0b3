"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Literal

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ggufclean.core.theme import get_theme

if TYPE_CHECKING:
    from ggufclean.scanning.models import Candidate

_KB = 1024
_MB = 1024 * _KB
_GB = 1024 * _MB
_TB = 1024 * _GB


def _detect_color_system() -> Literal["auto", "truecolor"]:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    "auto" otherwise to let Rich decide.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return "auto"


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int | None) -> str:
    """Format a byte count as a human-readable string.

    Args:
        size_bytes: Number of bytes, or None if unknown.

    Returns:
        String such as "512 B", "3.20 MB" or "7.45 GB".
    """
    if not size_bytes:
        return "0 B"
    if size_bytes >= _TB:
        return f"{size_bytes / _TB:.2f} TB"
    if size_bytes >= _GB:
        return f"{size_bytes / _GB:.2f} GB"
    if size_bytes >= _MB:
        return f"{size_bytes / _MB:.2f} MB"
    if size_bytes >= _KB:
        return f"{size_bytes / _KB:.2f} KB"
    return f"{size_bytes} B"


def create_candidate_table(title: str = "Model Files") -> Table:
    """Create a pre-configured table for listing candidates.

    Args:
        title: Table title.

    Returns:
        Rich Table with Size, Kind, Modified and Path columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],  # Zebra striping for readability
    )
    table.add_column("Size", style="size", justify="right", width=10)
    table.add_column("Kind", style="muted", width=6)
    table.add_column("Modified", style="muted", width=16)
    table.add_column("Path", style="text", overflow="fold")
    return table


def format_candidate_row(candidate: Candidate) -> tuple[str, str, str, str]:
    """Format a candidate as a table row.

    Args:
        candidate: Candidate to format.

    Returns:
        Tuple of (size, kind, modified, path).
    """
    return (
        candidate.size_human,
        candidate.kind.value,
        candidate.modified_at.astimezone().strftime("%Y-%m-%d %H:%M"),
        escape(candidate.path),
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
