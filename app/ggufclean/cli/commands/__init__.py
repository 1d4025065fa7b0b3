"""CLI commands for ggufclean.

This package contains all subcommand implementations.
"""

from ggufclean.cli.commands import browse, config, find

__all__ = ["browse", "config", "find"]
