"""Non-interactive find command.

Scans a directory tree and prints the model files found as a table or
as JSON, without offering to delete anything.
"""

import json
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from ggufclean.cli.common import build_scanner, get_config, resolve_root
from ggufclean.registry import CandidateRegistry, SortKey
from ggufclean.scanning.models import Candidate, ScanError, ScanSession
from ggufclean.utils.formatting import (
    console,
    create_candidate_table,
    format_candidate_row,
    format_size,
    print_success,
    print_warning,
)


class OutputFormat(str, Enum):
    """Output format options for find."""

    TABLE = "table"
    JSON = "json"


def find(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Argument(help="Directory to scan (default: configured root or home)."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    sort: Annotated[
        SortKey,
        typer.Option("--sort", "-s", help="Order of results.", case_sensitive=False),
    ] = SortKey.SIZE,
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
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-l", min=1, help="Limit number of results."),
    ] = None,
) -> None:
    """List model files under a directory without deleting anything."""
    config = get_config(ctx)
    scanner = build_scanner(config, workers=workers, all_kinds=all_kinds, min_size=min_size)
    scan_root = resolve_root(root, config, scanner)

    registry = CandidateRegistry()
    session = ScanSession(root_path=str(scan_root))

    if output_format == OutputFormat.TABLE:
        with console.status(f"Scanning {scan_root}..."):
            _collect(scanner.scan(scan_root, session=session), registry)
    else:
        _collect(scanner.scan(scan_root, session=session), registry)

    registry.sort_by(sort)
    candidates = registry.visible
    display = candidates[:limit] if limit else candidates

    if output_format == OutputFormat.JSON:
        _print_json(display, session)
        return

    if not candidates:
        print_success(f"No model files found under {escape(str(scan_root))}.")
    else:
        _print_table(display)
        console.print(
            f"\n[dim]Found {registry.total_count} model file(s) "
            f"({format_size(registry.total_reclaimable_bytes)} total)[/dim]"
        )
        if limit and len(display) < len(candidates):
            console.print(
                f"[dim](showing {len(display)} of {len(candidates)}, limited to {limit})[/dim]"
            )

    if session.errors_encountered:
        print_warning(f"{session.errors_encountered} files skipped due to errors")


# === Private helper functions ===


def _collect(items: Iterable[Candidate | ScanError], registry: CandidateRegistry) -> None:
    """Drain scan results into the registry; errors are only counted by the session."""
    for item in items:
        if isinstance(item, Candidate):
            registry.add(item)


def _print_table(candidates: list[Candidate]) -> None:
    """Display candidates as a Rich table."""
    table = create_candidate_table()
    for candidate in candidates:
        table.add_row(*format_candidate_row(candidate))
    console.print(table)


def _print_json(candidates: list[Candidate], session: ScanSession) -> None:
    """Display candidates and scan totals as JSON."""
    data = {
        "root": session.root_path,
        "status": session.status.value,
        "files_visited": session.files_visited,
        "errors_encountered": session.errors_encountered,
        "total_bytes": sum(c.size_bytes for c in candidates),
        "files": [
            {
                "path": c.path,
                "size_bytes": c.size_bytes,
                "modified_at": c.modified_at.isoformat(),
                "kind": c.kind.value,
            }
            for c in candidates
        ],
    }
    console.print_json(json.dumps(data))
