"""XDG-compliant path management for ggufclean.

This module provides standardized paths following the XDG Base Directory
Specification for configuration storage, plus the default scan root.

XDG defaults:
- Config: ~/.config/ggufclean/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "ggufclean"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/ggufclean/ (or XDG_CONFIG_HOME/ggufclean/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_config_path() -> Path:
    """Get the main configuration file path.

    Returns:
        Path to ~/.config/ggufclean/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme file path.

    Returns:
        Path to ~/.config/ggufclean/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_default_scan_root() -> Path:
    """Get the directory scanned when no root is given.

    Model downloads end up in many places under the home directory
    (~/.cache/huggingface, ~/.ollama, ~/.lmstudio, ~/Downloads), so the
    whole home directory is the default.

    Returns:
        Path to the user's home directory.
    """
    return Path.home()

