"""CLI package for ggufclean.

This package contains the Typer application and all subcommands.
"""

from ggufclean.cli.main import app

__all__ = ["app"]
