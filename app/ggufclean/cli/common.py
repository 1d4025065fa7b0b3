"""Shared helpers for CLI commands.

Loads configuration, applies command-line overrides and validates the
scan root, turning failures into error messages and exit codes.
"""

from pathlib import Path

import typer

from ggufclean.core.config import AppConfig, ConfigError, load_config
from ggufclean.core.signatures import SignatureDetector, SignatureKind
from ggufclean.scanning.models import InvalidRootError
from ggufclean.scanning.scanner import ModelScanner
from ggufclean.utils.formatting import print_error

# Exit code used when the scan root is missing or not a directory
EXIT_INVALID_ROOT = 2


def get_config(ctx: typer.Context) -> AppConfig:
    """Load the configuration selected by the global ``--config`` option.

    Raises:
        typer.Exit: With code 1 if the configuration is invalid.
    """
    path: Path | None = None
    if ctx.obj:
        path = ctx.obj.get("config_path")
    try:
        return load_config(path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def build_scanner(
    config: AppConfig,
    *,
    workers: int | None = None,
    all_kinds: bool = False,
    min_size: int | None = None,
) -> ModelScanner:
    """Create a scanner from configuration and command-line overrides.

    Args:
        config: Loaded configuration.
        workers: Worker count override.
        all_kinds: Look for every known signature, not just the configured ones.
        min_size: Minimum file size override in bytes.

    Returns:
        Configured ModelScanner.
    """
    detector = SignatureDetector(list(SignatureKind)) if all_kinds else config.build_detector()
    return ModelScanner(
        detector=detector,
        workers=workers if workers is not None else config.workers,
        min_size_bytes=min_size if min_size is not None else config.min_size_bytes,
        exclude=config.exclude,
    )


def resolve_root(root: Path | None, config: AppConfig, scanner: ModelScanner) -> Path:
    """Pick and validate the scan root.

    Args:
        root: Root given on the command line, if any.
        config: Loaded configuration (supplies the default root).
        scanner: Scanner used for validation.

    Returns:
        Absolute path of a directory to scan.

    Raises:
        typer.Exit: With EXIT_INVALID_ROOT if the root is not a directory.
    """
    try:
        return scanner.validate_root(root if root is not None else config.effective_root)
    except InvalidRootError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_INVALID_ROOT) from e
