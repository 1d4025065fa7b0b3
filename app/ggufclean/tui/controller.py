"""Interactive session state machine.

The controller owns the session context (registry, scan session,
cursor) and moves through these states:

    IDLE -> SCANNING -> BROWSING -> CONFIRMING_DELETION -> DELETING -> BROWSING
                        BROWSING -> EXITED

Nothing is ever deleted without passing through CONFIRMING_DELETION
and an explicit affirmative key, and leaving the session never
triggers a pending deletion.
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ggufclean.core.cancellation import CancellationToken
from ggufclean.deletion.executor import DeleteResult, DeletionExecutor
from ggufclean.registry import CandidateRegistry
from ggufclean.scanning.models import Candidate, ScanSession, ScanStatus
from ggufclean.scanning.scanner import ModelScanner, ScanItem
from ggufclean.tui.keys import Key
from ggufclean.tui.terminal import ConfirmationView, ListView, Terminal
from ggufclean.utils.formatting import format_size

logger = logging.getLogger(__name__)


class AppState(str, Enum):
    """States of the interactive session."""

    IDLE = "idle"
    SCANNING = "scanning"
    BROWSING = "browsing"
    CONFIRMING_DELETION = "confirming_deletion"
    DELETING = "deleting"
    EXITED = "exited"


@dataclass(slots=True)
class DeletionSummary:
    """Outcome of one confirmed deletion batch.

    Attributes:
        deleted: Paths removed from storage (including already-gone files).
        failed: Failure reason by path.
        bytes_freed: Combined size of the removed files.
        dry_run: Whether the batch was only simulated.
    """

    deleted: list[str] = field(default_factory=lambda: [])
    failed: dict[str, str] = field(default_factory=lambda: {})
    bytes_freed: int = 0
    dry_run: bool = False

    def describe(self) -> str:
        """One-line summary such as "3 deleted, 1 failed (7.20 GB freed)"."""
        if self.dry_run:
            return (
                f"Dry run: {len(self.deleted)} file(s) would be deleted "
                f"({format_size(self.bytes_freed)})"
            )
        return (
            f"{len(self.deleted)} deleted, {len(self.failed)} failed "
            f"({format_size(self.bytes_freed)} freed)"
        )


@dataclass(slots=True)
class SessionContext:
    """State owned by the controller for the lifetime of a session.

    Attributes:
        root: Directory being scanned.
        session: Scan progress.
        registry: Discovered candidates.
        state: Current state of the session.
        cursor: Index of the highlighted row in the visible list.
        summaries: Deletion batches executed so far.
        message: Status line shown under the list.
        show_details: Whether failure details are shown.
    """

    root: Path
    session: ScanSession
    registry: CandidateRegistry = field(default_factory=CandidateRegistry)
    state: AppState = AppState.IDLE
    cursor: int = 0
    summaries: list[DeletionSummary] = field(default_factory=lambda: [])
    message: str | None = None
    show_details: bool = False

    @classmethod
    def create(cls, root: Path) -> "SessionContext":
        return cls(root=root, session=ScanSession(root_path=str(root)))

    @property
    def failures(self) -> dict[str, str]:
        """Failure reasons of candidates still on the list."""
        return {c.path: c.failure_reason or "unknown error" for c in self.registry.failed}

    @property
    def total_deleted(self) -> int:
        return sum(len(s.deleted) for s in self.summaries if not s.dry_run)

    @property
    def total_freed(self) -> int:
        return sum(s.bytes_freed for s in self.summaries if not s.dry_run)


@dataclass(frozen=True, slots=True)
class _ScanFinished:
    error: BaseException | None = None


class InteractionController:
    """Drives one interactive session from scan to exit.

    Args:
        terminal: Rendering and input collaborator.
        scanner: Scan engine.
        executor: Deletion executor.
        root: Directory to scan.
        dry_run: Withhold the executor call and only report what would be deleted.
        refresh_interval: Seconds between progress redraws while scanning.
        context: Existing session context to continue (a new one if None).
    """

    def __init__(
        self,
        terminal: Terminal,
        scanner: ModelScanner,
        executor: DeletionExecutor,
        root: Path,
        *,
        dry_run: bool = False,
        refresh_interval: float = 0.1,
        context: SessionContext | None = None,
    ) -> None:
        self._terminal = terminal
        self._scanner = scanner
        self._executor = executor
        self._dry_run = dry_run
        self._refresh_interval = refresh_interval
        self._ctx = context or SessionContext.create(root)
        self._cancel_token = CancellationToken()

    @property
    def context(self) -> SessionContext:
        return self._ctx

    @property
    def state(self) -> AppState:
        return self._ctx.state

    def run(self) -> SessionContext:
        """Run the session until the operator quits.

        Returns:
            The final session context.

        Raises:
            InvalidRootError: If the scan root is not a directory.
        """
        with self._terminal:
            self.start_scan()
            while self._ctx.state != AppState.EXITED:
                self.render()
                self.handle_key(self._terminal.read_key())
        logger.info(
            "Session ended: %d file(s) deleted, %s freed",
            self._ctx.total_deleted,
            format_size(self._ctx.total_freed),
        )
        return self._ctx

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def start_scan(self) -> None:
        """Scan the root, streaming candidates into the registry.

        The scan runs on a producer thread; this thread is the single
        consumer and the only writer of the registry. Esc or Q cancels
        the scan and keeps the partial results.

        Raises:
            InvalidRootError: If the scan root is not a directory.
        """
        if self._ctx.state != AppState.IDLE:
            msg = f"Cannot start a scan from state {self._ctx.state.value}"
            raise RuntimeError(msg)

        items = self._scanner.scan(self._ctx.root, self._cancel_token, self._ctx.session)
        self._ctx.state = AppState.SCANNING

        results: queue.Queue[ScanItem | _ScanFinished] = queue.Queue(maxsize=1024)

        def produce() -> None:
            try:
                for item in items:
                    results.put(item)
            except Exception as e:  # noqa: BLE001 - re-raised by the consumer
                results.put(_ScanFinished(error=e))
                return
            results.put(_ScanFinished())

        producer = threading.Thread(target=produce, name="ggufclean-scan", daemon=True)
        producer.start()

        while True:
            finished = self._drain(results)
            if finished is not None:
                break
            self._terminal.render_progress(self._list_view())
            key = self._terminal.poll_key(self._refresh_interval)
            if key in (Key.CANCEL, Key.QUIT) and not self._cancel_token.cancelled:
                logger.info("Scan cancelled by operator")
                self._cancel_token.cancel()

        producer.join()
        if finished.error is not None:
            raise finished.error

        self._ctx.state = AppState.BROWSING
        if self._ctx.session.status == ScanStatus.CANCELLED:
            self._ctx.message = "Scan cancelled, showing partial results"

    def _drain(self, results: "queue.Queue[ScanItem | _ScanFinished]") -> _ScanFinished | None:
        """Move everything currently queued into the registry."""
        while True:
            try:
                item = results.get_nowait()
            except queue.Empty:
                return None
            if isinstance(item, _ScanFinished):
                return item
            if isinstance(item, Candidate):
                self._ctx.registry.add(item)

    # ------------------------------------------------------------------
    # Key handling
    # ------------------------------------------------------------------

    def handle_key(self, key: Key) -> None:
        """Apply one key event to the current state."""
        state = self._ctx.state
        if state == AppState.BROWSING:
            self._handle_browsing(key)
        elif state == AppState.CONFIRMING_DELETION:
            self._handle_confirming(key)
        else:
            logger.debug("Ignoring %s in state %s", key.value, state.value)

    def _handle_browsing(self, key: Key) -> None:
        ctx = self._ctx
        registry = ctx.registry
        rows = registry.visible
        count = len(rows)

        if key == Key.QUIT:
            ctx.state = AppState.EXITED
        elif key == Key.UP and count:
            ctx.cursor = count - 1 if ctx.cursor <= 0 else ctx.cursor - 1
        elif key == Key.DOWN and count:
            ctx.cursor = 0 if ctx.cursor >= count - 1 else ctx.cursor + 1
        elif key == Key.PAGE_UP:
            ctx.cursor = max(ctx.cursor - self._terminal.page_size, 0)
        elif key == Key.PAGE_DOWN:
            ctx.cursor = min(ctx.cursor + self._terminal.page_size, max(count - 1, 0))
        elif key == Key.HOME:
            ctx.cursor = 0
        elif key == Key.END:
            ctx.cursor = max(count - 1, 0)
        elif key == Key.TOGGLE and count:
            registry.toggle_selection(rows[ctx.cursor].path)
        elif key == Key.SELECT_ALL:
            registry.select_all()
        elif key == Key.SELECT_NONE:
            registry.select_none()
        elif key == Key.SORT:
            current = rows[ctx.cursor].path if count else None
            registry.sort_by(registry.sort_key.next())
            if current is not None:
                ctx.cursor = [c.path for c in registry.visible].index(current)
            ctx.message = f"Sorted by {registry.sort_key.value}"
        elif key == Key.DETAILS:
            ctx.show_details = not ctx.show_details
        elif key == Key.DELETE:
            if registry.selected_count > 0:
                ctx.state = AppState.CONFIRMING_DELETION
            else:
                ctx.message = "Nothing selected"

    def _handle_confirming(self, key: Key) -> None:
        if key == Key.CONFIRM:
            self.execute_deletion()
        else:
            self._ctx.state = AppState.BROWSING
            self._ctx.message = "Deletion cancelled"

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def execute_deletion(self) -> DeletionSummary:
        """Delete the selected files and update the registry per result.

        The batch always runs to completion; individual failures stay on
        the list with their reason.

        Returns:
            Summary of the batch.
        """
        ctx = self._ctx
        registry = ctx.registry
        paths = registry.selected_paths
        ctx.state = AppState.DELETING

        if self._dry_run:
            summary = DeletionSummary(
                deleted=paths,
                bytes_freed=registry.selected_bytes,
                dry_run=True,
            )
            logger.info("Dry run: would delete %d file(s)", len(paths))
        else:
            summary = DeletionSummary()

            def record(path: str, result: DeleteResult) -> None:
                candidate = registry.get(path)
                size = candidate.size_bytes if candidate is not None else 0
                if result.success:
                    registry.mark_deleted(path)
                    summary.deleted.append(path)
                    summary.bytes_freed += size
                else:
                    reason = result.message or (
                        result.error_kind.value if result.error_kind else "unknown error"
                    )
                    registry.mark_failed(path, reason)
                    summary.failed[path] = reason
                done = len(summary.deleted) + len(summary.failed)
                self._terminal.render_list(
                    self._list_view(message=f"Deleting... {done}/{len(paths)}")
                )

            self._executor.delete_all(paths, on_result=record)

        ctx.summaries.append(summary)
        ctx.message = summary.describe()
        if summary.failed:
            ctx.message += " - press E for details"
        ctx.cursor = min(ctx.cursor, max(len(registry) - 1, 0))
        ctx.state = AppState.BROWSING
        return summary

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> None:
        """Draw the screen for the current state."""
        state = self._ctx.state
        if state == AppState.CONFIRMING_DELETION:
            registry = self._ctx.registry
            self._terminal.render_confirmation(
                ConfirmationView(
                    paths=registry.selected_paths,
                    total_bytes=registry.selected_bytes,
                    dry_run=self._dry_run,
                )
            )
        elif state == AppState.SCANNING:
            self._terminal.render_progress(self._list_view())
        else:
            self._terminal.render_list(self._list_view())

    def _list_view(self, message: str | None = None) -> ListView:
        ctx = self._ctx
        return ListView(
            rows=ctx.registry.visible,
            cursor=ctx.cursor,
            stats=ctx.registry.stats,
            session=ctx.session,
            sort_key=ctx.registry.sort_key,
            message=message or ctx.message,
            failures=ctx.failures,
            show_details=ctx.show_details,
            dry_run=self._dry_run,
        )
