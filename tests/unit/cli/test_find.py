"""Unit tests for the find command."""

import json
from pathlib import Path

import pytest
from ggufclean.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolate(isolated_config: Path) -> None:
    """Never read the developer's own config file."""


def _find_json(*args: str) -> dict:
    result = runner.invoke(app, ["find", "--format", "json", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestFindJson:
    """Tests for find --format json."""

    def test_lists_model_files(self, model_tree: Path) -> None:
        """Only files with a GGUF header are listed, largest first."""
        data = _find_json(str(model_tree))

        assert [Path(f["path"]).name for f in data["files"]] == ["model.bin", "llama.q4"]
        assert data["files"][0]["size_bytes"] == 108
        assert data["files"][0]["kind"] == "GGUF"
        assert data["total_bytes"] == 166
        assert data["status"] == "completed"
        assert data["root"] == str(model_tree)
        assert data["files_visited"] == 6
        assert data["errors_encountered"] == 0

    def test_all_kinds(self, model_tree: Path) -> None:
        """--all-kinds includes legacy ggml files."""
        data = _find_json(str(model_tree), "--all-kinds")

        kinds = {Path(f["path"]).name: f["kind"] for f in data["files"]}
        assert kinds == {"model.bin": "GGUF", "llama.q4": "GGUF", "legacy.bin": "GGJT"}

    def test_sort_by_path(self, model_tree: Path) -> None:
        """--sort path orders results alphabetically."""
        data = _find_json(str(model_tree), "--sort", "path")

        paths = [f["path"] for f in data["files"]]
        assert paths == sorted(paths)

    def test_limit(self, model_tree: Path) -> None:
        """--limit truncates the list."""
        data = _find_json(str(model_tree), "--limit", "1")

        assert len(data["files"]) == 1
        assert Path(data["files"][0]["path"]).name == "model.bin"

    def test_min_size(self, model_tree: Path) -> None:
        """--min-size drops small matches."""
        data = _find_json(str(model_tree), "--min-size", "100")

        assert [Path(f["path"]).name for f in data["files"]] == ["model.bin"]

    def test_parallel_workers(self, model_tree: Path) -> None:
        """Parallel scans find the same files."""
        data = _find_json(str(model_tree), "--workers", "4")

        assert {Path(f["path"]).name for f in data["files"]} == {"model.bin", "llama.q4"}

    def test_default_root_from_config(self, model_tree: Path, isolated_config: Path) -> None:
        """Without an argument the configured default root is scanned."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(f'default_root = "{model_tree}"\nworkers = 1\n')

        data = _find_json()

        assert data["root"] == str(model_tree)
        assert len(data["files"]) == 2

    def test_config_kinds_and_excludes(self, model_tree: Path, tmp_path: Path) -> None:
        """Kinds and exclude patterns come from the --config file."""
        config = tmp_path / "custom.toml"
        config.write_text('kinds = ["ggjt"]\nexclude = ["*/deep"]\n')

        result = runner.invoke(
            app, ["--config", str(config), "find", str(model_tree), "--format", "json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [Path(f["path"]).name for f in data["files"]] == ["legacy.bin"]


class TestFindTable:
    """Tests for the default table output."""

    def test_table_summary(self, model_tree: Path) -> None:
        """The table is followed by a count and total size."""
        result = runner.invoke(app, ["find", str(model_tree)])

        assert result.exit_code == 0, result.output
        assert "Model Files" in result.output
        assert "Found 2 model file(s) (166 B total)" in result.output

    def test_limit_note(self, model_tree: Path) -> None:
        """Limited output says how many were hidden."""
        result = runner.invoke(app, ["find", str(model_tree), "--limit", "1"])

        assert "showing 1 of 2, limited to 1" in result.output

    def test_nothing_found(self, tmp_path: Path) -> None:
        """An empty tree reports that nothing was found."""
        empty = tmp_path / "empty"
        empty.mkdir()

        result = runner.invoke(app, ["find", str(empty)])

        assert result.exit_code == 0
        assert "No model files found" in result.output


class TestFindErrors:
    """Tests for invalid roots and configuration."""

    def test_missing_root(self, tmp_path: Path) -> None:
        """A missing root exits with code 2."""
        result = runner.invoke(app, ["find", str(tmp_path / "missing")])

        assert result.exit_code == 2
        assert "Directory does not exist" in result.output

    def test_file_root(self, model_tree: Path) -> None:
        """A file root exits with code 2."""
        result = runner.invoke(app, ["find", str(model_tree / "model.bin")])

        assert result.exit_code == 2
        assert "Not a directory" in result.output

    def test_invalid_config(self, model_tree: Path, isolated_config: Path) -> None:
        """A broken config file exits with code 1."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("workers = 0\n")

        result = runner.invoke(app, ["find", str(model_tree)])

        assert result.exit_code == 1
        assert "Invalid config content" in result.output
