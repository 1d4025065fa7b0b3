"""Configuration commands.

Shows the effective configuration, writes a default config file and
prints where the configuration lives.
"""

from enum import Enum
from pathlib import Path
from typing import Annotated

import tomli_w
import typer
from rich.markup import escape
from rich.table import Table

from ggufclean.cli.common import get_config
from ggufclean.core.config import AppConfig, ConfigError, config_to_dict, save_config
from ggufclean.core.paths import get_config_path
from ggufclean.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and create the ggufclean configuration.",
    no_args_is_help=True,
)


class ConfigFormat(str, Enum):
    """Output format options for config show."""

    TABLE = "table"
    TOML = "toml"


@app.command()
def show(
    ctx: typer.Context,
    output_format: Annotated[
        ConfigFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = ConfigFormat.TABLE,
) -> None:
    """Show the effective configuration (file values merged with defaults)."""
    config = get_config(ctx)

    if output_format == ConfigFormat.TOML:
        typer.echo(tomli_w.dumps(config_to_dict(config)), nl=False)
        return

    table = Table(title="Configuration", header_style="bold_header", border_style="border")
    table.add_column("Key", style="info")
    table.add_column("Value", style="text")
    for key, value in _display_rows(config):
        table.add_row(key, escape(value))
    console.print(table)
    console.print(f"[dim]Source: {escape(str(_selected_path(ctx)))}[/dim]")


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file containing the default settings."""
    config_path = _selected_path(ctx)
    if config_path.exists() and not force:
        print_error(f"Config file already exists: {escape(str(config_path))}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(AppConfig(), config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Config written to {escape(str(saved))}")


@app.command(name="path")
def show_path(ctx: typer.Context) -> None:
    """Print the path of the config file in use."""
    typer.echo(str(_selected_path(ctx)))


# === Private helper functions ===


def _selected_path(ctx: typer.Context) -> Path:
    """Config file chosen with the global --config option, or the default."""
    root_obj = ctx.find_root().obj or {}
    return root_obj.get("config_path") or get_config_path()


def _display_rows(config: AppConfig) -> list[tuple[str, str]]:
    root = str(config.default_root) if config.default_root else f"{config.effective_root} (home)"
    return [
        ("default_root", root),
        ("workers", str(config.workers)),
        ("min_size_bytes", str(config.min_size_bytes)),
        ("kinds", ", ".join(kind.value for kind in config.kinds)),
        ("exclude", ", ".join(config.exclude) or "-"),
    ]
