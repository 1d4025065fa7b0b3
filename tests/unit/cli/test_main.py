"""Unit tests for the main CLI application."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from ggufclean import __version__
from ggufclean.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """Undo the logging setup done by the CLI callback."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestMain:
    """Tests for global options."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"ggufclean version {__version__}" in result.stdout

    def test_help_lists_commands(self) -> None:
        """--help shows every command."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("browse", "find", "config"):
            assert command in result.stdout

    def test_verbose_sets_info_level(self, isolated_config: Path, tmp_path: Path) -> None:
        """-v enables INFO logging for the command."""
        runner.invoke(app, ["-v", "find", str(tmp_path), "--format", "json"])

        assert logging.getLogger().level == logging.INFO

    def test_quiet_sets_error_level(self, isolated_config: Path, tmp_path: Path) -> None:
        """-q restricts logging to errors."""
        runner.invoke(app, ["-q", "find", str(tmp_path), "--format", "json"])

        assert logging.getLogger().level == logging.ERROR
