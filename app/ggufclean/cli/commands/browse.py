"""Interactive browse command.

Scans a directory tree and opens the terminal session in which the
operator selects and deletes model files.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from ggufclean.cli.common import EXIT_INVALID_ROOT, build_scanner, get_config, resolve_root
from ggufclean.deletion.executor import DeletionExecutor
from ggufclean.scanning.models import InvalidRootError
from ggufclean.tui.controller import InteractionController, SessionContext
from ggufclean.tui.terminal import RichTerminal
from ggufclean.utils.formatting import (
    console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)


def browse(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Argument(help="Directory to scan (default: configured root or home)."),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", "-w", min=1, max=64, help="Traversal threads."),
    ] = None,
    all_kinds: Annotated[
        bool,
        typer.Option("--all-kinds", help="Also look for legacy GGML/GGJT/GGLA files."),
    ] = False,
    min_size: Annotated[
        int | None,
        typer.Option("--min-size", min=0, help="Ignore files smaller than this many bytes."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted without deleting."),
    ] = False,
) -> None:
    """Scan for model files and select which to delete, interactively."""
    config = get_config(ctx)
    scanner = build_scanner(config, workers=workers, all_kinds=all_kinds, min_size=min_size)
    scan_root = resolve_root(root, config, scanner)

    controller = InteractionController(
        RichTerminal(console),
        scanner,
        DeletionExecutor(),
        scan_root,
        dry_run=dry_run,
    )
    try:
        session_ctx = controller.run()
    except InvalidRootError as e:
        # Root removed between validation and the start of the scan
        print_error(str(e))
        raise typer.Exit(code=EXIT_INVALID_ROOT) from e
    _print_session_summary(session_ctx)


def _print_session_summary(session_ctx: SessionContext) -> None:
    """Print what happened once the terminal session has closed."""
    session = session_ctx.session
    stats = session_ctx.registry.stats
    console.print(
        f"[dim]Scan {session.status.value}: {session.files_visited} file(s) checked, "
        f"{stats.total_count} model file(s) remaining "
        f"({format_size(stats.total_reclaimable_bytes)})[/dim]"
    )
    if session.errors_encountered:
        print_warning(f"{session.errors_encountered} files skipped due to errors")

    if session_ctx.total_deleted:
        print_success(
            f"Deleted {session_ctx.total_deleted} file(s), "
            f"{format_size(session_ctx.total_freed)} freed."
        )
    elif not session_ctx.summaries:
        print_info("Nothing deleted.")

    for summary in session_ctx.summaries:
        if summary.dry_run:
            print_info(summary.describe())

    failures = session_ctx.failures
    if failures:
        print_warning(f"{len(failures)} file(s) could not be deleted:")
        for path, reason in failures.items():
            console.print(f"  [error]{escape(path)}[/]: {escape(reason)}", highlight=False)
