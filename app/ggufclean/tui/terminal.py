"""Terminal rendering and input for the interactive session.

The controller talks to the terminal only through the Terminal
interface: it hands over immutable view objects to draw and asks for
the next Key. RichTerminal is the real implementation; tests drive the
controller with a scripted fake.
"""

from __future__ import annotations

import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import TracebackType

import click
from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from ggufclean.registry import RegistryStats, SortKey
from ggufclean.scanning.models import Candidate, CandidateStatus, ScanSession
from ggufclean.tui.keys import HELP_TEXT, Key, decode_key
from ggufclean.utils.formatting import console as default_console
from ggufclean.utils.formatting import format_size

# Rows taken by the header, footer and table borders
_CHROME_ROWS = 10
_MAX_CONFIRM_PATHS = 10


@dataclass(frozen=True, slots=True)
class ListView:
    """Everything needed to draw the candidate list.

    Attributes:
        rows: Visible candidates in display order.
        cursor: Index of the highlighted row.
        stats: Registry aggregates.
        session: Scan progress.
        sort_key: Current display order.
        message: One-line status message (e.g. the last deletion summary).
        failures: Failure reasons by path, shown when ``show_details`` is set.
        show_details: Whether to show the failure details panel.
        dry_run: Whether deletions are simulated.
    """

    rows: list[Candidate]
    cursor: int
    stats: RegistryStats
    session: ScanSession
    sort_key: SortKey = SortKey.DISCOVERY
    message: str | None = None
    failures: dict[str, str] = field(default_factory=lambda: {})
    show_details: bool = False
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class ConfirmationView:
    """Summary shown before anything is deleted.

    Attributes:
        paths: Paths about to be deleted.
        total_bytes: Combined size of those files.
        dry_run: Whether the deletion will only be simulated.
    """

    paths: list[str]
    total_bytes: int
    dry_run: bool = False

    @property
    def count(self) -> int:
        return len(self.paths)


class Terminal(ABC):
    """Rendering and input collaborator of the interaction controller."""

    def __enter__(self) -> Terminal:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def open(self) -> None:
        """Prepare the terminal for the session."""

    def close(self) -> None:
        """Restore the terminal after the session."""

    @property
    def page_size(self) -> int:
        """Number of list rows that fit on one screen."""
        return 10

    @abstractmethod
    def render_progress(self, view: ListView) -> None:
        """Draw the list while a scan is running, with a progress indicator."""

    @abstractmethod
    def render_list(self, view: ListView) -> None:
        """Draw the candidate list with one highlighted row."""

    @abstractmethod
    def render_confirmation(self, view: ConfirmationView) -> None:
        """Draw the modal deletion confirmation prompt."""

    @abstractmethod
    def read_key(self) -> Key:
        """Block until the next key event."""

    @abstractmethod
    def poll_key(self, timeout: float) -> Key | None:
        """Wait at most ``timeout`` seconds for a key event."""


class RichTerminal(Terminal):
    """Terminal drawn with Rich on the alternate screen.

    Keys are read with ``click.getchar`` on a helper thread, one key per
    request, so that polling during a scan never leaves a read pending
    once the session has ended.

    Args:
        console: Console to draw on. Defaults to the shared console.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or default_console
        self._live: Live | None = None
        self._offset = 0
        self._keys: queue.Queue[Key] = queue.Queue()
        self._wanted = threading.Semaphore(0)
        self._pending = False
        self._reader: threading.Thread | None = None

    @property
    def page_size(self) -> int:
        return max(self._console.size.height - _CHROME_ROWS, 3)

    def open(self) -> None:
        self._live = Live(
            console=self._console,
            screen=True,
            auto_refresh=False,
            transient=True,
        )
        self._live.start()
        self._reader = threading.Thread(
            target=self._read_loop, name="ggufclean-keys", daemon=True
        )
        self._reader.start()

    def close(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

    def render_progress(self, view: ListView) -> None:
        session = view.session
        found = format_size(view.stats.total_reclaimable_bytes)
        header = Spinner(
            "dots",
            text=Text.from_markup(
                f"[info]Scanning:[/] {escape(session.current_dir or session.root_path)}\n"
                f"[muted]Directories: {session.dirs_visited} | "
                f"Files checked: {session.files_visited} | "
                f"Found: {view.stats.total_count} ({found})"
                f"{_errors_suffix(session)}[/]"
            ),
        )
        footer = Text.from_markup("[muted]Esc/Q: stop scanning and browse results[/]")
        self._update(Group(Panel(header, border_style="border"), self._build_table(view), footer))

    def render_list(self, view: ListView) -> None:
        status = view.session.status.value
        header = Text.from_markup(
            f"[bold_header]Scan {status}[/] | {escape(view.session.root_path)}\n"
            f"[muted]Found {view.stats.total_count} model file(s), "
            f"{format_size(view.stats.total_reclaimable_bytes)} reclaimable"
            f"{_errors_suffix(view.session)} | sort: {view.sort_key.value}[/]"
        )
        parts: list[RenderableType] = [Panel(header, border_style="border")]
        parts.append(self._build_table(view))
        if view.show_details:
            parts.append(_build_failures(view.failures))

        selected = (
            f"Selected: {view.stats.selected_count} "
            f"({format_size(view.stats.selected_bytes)})"
        )
        if view.dry_run:
            selected += " [warning](dry run)[/]"
        footer_lines = [f"[muted]{HELP_TEXT}[/]", selected]
        if view.message:
            footer_lines.append(f"[info]{escape(view.message)}[/]")
        parts.append(Panel(Text.from_markup("\n".join(footer_lines)), border_style="border"))
        self._update(Group(*parts))

    def render_confirmation(self, view: ConfirmationView) -> None:
        lines = [
            f"[warning]Delete {view.count} file(s), {format_size(view.total_bytes)} total?[/]",
            "[muted]Files are removed permanently, not moved to a trash.[/]"
            if not view.dry_run
            else "[muted]Dry run: nothing will be removed.[/]",
            "",
        ]
        for path in view.paths[:_MAX_CONFIRM_PATHS]:
            lines.append(f"  {escape(path)}")
        if view.count > _MAX_CONFIRM_PATHS:
            lines.append(f"  [muted]... and {view.count - _MAX_CONFIRM_PATHS} more[/]")
        lines.append("")
        lines.append("[success]y/Enter[/]: delete   [error]n/Esc[/]: back")
        self._update(
            Panel(
                Text.from_markup("\n".join(lines)),
                title="Confirm deletion",
                border_style="warning",
            )
        )

    def read_key(self) -> Key:
        self._request()
        key = self._keys.get()
        self._pending = False
        return key

    def poll_key(self, timeout: float) -> Key | None:
        self._request()
        try:
            key = self._keys.get(timeout=timeout)
        except queue.Empty:
            return None
        self._pending = False
        return key

    def _request(self) -> None:
        if not self._pending:
            self._pending = True
            self._wanted.release()

    def _read_loop(self) -> None:
        while True:
            self._wanted.acquire()
            try:
                raw = click.getchar()
            except (KeyboardInterrupt, EOFError):
                self._keys.put(Key.QUIT)
                continue
            self._keys.put(decode_key(raw))

    def _update(self, renderable: RenderableType) -> None:
        if self._live is None:
            self._console.print(renderable)
            return
        self._live.update(renderable, refresh=True)

    def _build_table(self, view: ListView) -> Table:
        height = self.page_size
        rows = view.rows
        # Keep the cursor inside the window
        if view.cursor < self._offset:
            self._offset = view.cursor
        elif view.cursor >= self._offset + height:
            self._offset = view.cursor - height + 1
        self._offset = max(0, min(self._offset, max(len(rows) - height, 0)))

        table = Table(
            show_header=True,
            header_style="bold_header",
            border_style="border",
            expand=True,
            title=None,
        )
        table.add_column("", width=3, no_wrap=True)
        table.add_column("Size", style="size", justify="right", width=10, no_wrap=True)
        table.add_column("Path", overflow="ellipsis", no_wrap=True)

        for index, candidate in enumerate(rows[self._offset : self._offset + height]):
            absolute = self._offset + index
            if candidate.selected:
                marker = Text("[x]", style="selected")
            else:
                marker = Text("[ ]")
            if candidate.status == CandidateStatus.FAILED:
                path = Text(f"{candidate.path} (delete failed)", style="error")
            else:
                path = Text(candidate.path)
            style = "cursor" if absolute == view.cursor else None
            table.add_row(marker, candidate.size_human, path, style=style)
        if not rows:
            table.add_row("", "", Text("No model files found yet", style="muted"))
        return table


def _errors_suffix(session: ScanSession) -> str:
    if not session.errors_encountered:
        return ""
    return f" | {session.errors_encountered} files skipped due to errors"


def _build_failures(failures: dict[str, str]) -> Panel:
    if not failures:
        return Panel(Text("No failed deletions.", style="muted"), title="Failures")
    table = Table(show_header=True, header_style="bold_header", border_style="border", expand=True)
    table.add_column("Path", overflow="fold")
    table.add_column("Reason", style="error")
    for path, reason in failures.items():
        table.add_row(path, reason)
    return Panel(table, title="Failures", border_style="error")
