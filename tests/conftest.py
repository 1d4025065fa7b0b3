"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

GGUF_HEADER = b"GGUF\x03\x00\x00\x00"


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a file below tmp_path with the given content."""

    def _make(relative: str, content: bytes = b"", root: Path | None = None) -> Path:
        path = (root or tmp_path) / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _make


@pytest.fixture
def model_tree(tmp_path: Path, make_file: Callable[..., Path]) -> Path:
    """Directory tree mixing model files with unrelated files.

    Layout:
        models/model.bin            GGUF, 108 bytes
        models/notes.txt            plain text
        models/empty.gguf           empty file
        models/sub/deep/llama.q4    GGUF, 58 bytes
        models/sub/legacy.bin       GGJT (legacy)
        models/sub/readme.md        plain text
    """
    root = tmp_path / "models"
    make_file("model.bin", GGUF_HEADER + b"\x00" * 100, root=root)
    make_file("notes.txt", b"some notes about models", root=root)
    make_file("empty.gguf", b"", root=root)
    make_file("sub/deep/llama.q4", GGUF_HEADER + b"\x01" * 50, root=root)
    make_file("sub/legacy.bin", b"tjgg" + b"\x00" * 20, root=root)
    make_file("sub/readme.md", b"# readme", root=root)
    return root


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at an empty directory and return the config file path."""
    xdg = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    return xdg / "ggufclean" / "config.toml"
