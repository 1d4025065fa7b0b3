"""Unit tests for logging setup."""

import logging
from collections.abc import Iterator

import pytest
from ggufclean.core.log import configure_logging
from rich.logging import RichHandler


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """Undo handler and level changes made by configure_logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_default_level_is_warning(self) -> None:
        """Without flags only warnings and errors are shown."""
        assert configure_logging() == logging.WARNING
        assert logging.getLogger().level == logging.WARNING

    def test_verbose(self) -> None:
        """--verbose enables INFO."""
        assert configure_logging(verbose=True) == logging.INFO

    def test_quiet(self) -> None:
        """--quiet restricts output to errors."""
        assert configure_logging(quiet=True) == logging.ERROR

    def test_verbose_wins_over_quiet(self) -> None:
        """verbose takes precedence when both are given."""
        assert configure_logging(verbose=True, quiet=True) == logging.INFO

    def test_single_rich_handler(self) -> None:
        """Repeated calls replace the handler instead of stacking them."""
        configure_logging()
        configure_logging(verbose=True)

        rich_handlers = [h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
