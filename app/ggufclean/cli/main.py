"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from pathlib import Path
from typing import Annotated

import typer

from ggufclean import __version__
from ggufclean.cli.commands import browse, config, find
from ggufclean.core.log import configure_logging

# Create main Typer app
app = typer.Typer(
    name="ggufclean",
    help="Find model-weight files by their magic bytes and reclaim disk space.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"ggufclean version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Configuration file to use instead of the default.",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """ggufclean - find large model files by signature and delete them safely.

    Files are recognised by their leading magic bytes, so models are found
    whatever their name or extension.
    """
    configure_logging(verbose=verbose, quiet=quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path


# Register commands
app.command(name="browse")(browse.browse)
app.command(name="find")(find.find)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
