"""Logging setup for the CLI.

Modules log through ``logging.getLogger(__name__)``; this module only
wires the root logger to a Rich handler on stderr.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

_FORMAT = "%(message)s"


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    console: Console | None = None,
) -> int:
    """Configure the root logger.

    Args:
        verbose: Log INFO and above.
        quiet: Log ERROR and above. Ignored when ``verbose`` is set.
        console: Console the handler writes to. Defaults to a stderr console.

    Returns:
        The effective log level.
    """
    if verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    return level
