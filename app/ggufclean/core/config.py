"""Application configuration.

This module provides the configuration model and I/O functions for
ggufclean. Configuration is stored in ~/.config/ggufclean/config.toml
and every key is optional; a missing file means all defaults.

Example config.toml:

    default_root = "/data/models"
    workers = 8
    min_size_bytes = 104857600
    kinds = ["GGUF", "GGJT"]
    exclude = ["/proc", "/sys", "*/node_modules"]
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ggufclean.core.paths import get_config_path, get_default_scan_root
from ggufclean.core.signatures import SignatureDetector, SignatureKind

logger = logging.getLogger(__name__)

MAX_WORKERS = 64

# Pseudo filesystems that never hold model files and can hang traversal
DEFAULT_EXCLUDES: tuple[str, ...] = ("/proc", "/sys", "/dev", "/run")


def default_workers() -> int:
    """Default traversal worker count: the available CPUs, capped at 32."""
    return min(os.cpu_count() or 1, 32)


class AppConfig(BaseModel):
    """Configuration for scanning and the terminal session.

    Attributes:
        default_root: Directory scanned when none is given (None = home directory).
        workers: Traversal threads; 1 gives a deterministic sequential scan.
        min_size_bytes: Matching files smaller than this are ignored.
        kinds: Signature kinds to look for.
        exclude: Glob patterns of directories that are never descended into.
    """

    model_config = ConfigDict(extra="forbid")

    default_root: Annotated[
        Path | None,
        Field(description="Directory scanned when none is given"),
    ] = None
    workers: int = Field(
        default_factory=default_workers,
        ge=1,
        le=MAX_WORKERS,
        description=f"Traversal threads (1-{MAX_WORKERS})",
    )
    min_size_bytes: Annotated[
        int,
        Field(ge=0, description="Minimum size of reported files"),
    ] = 0
    kinds: list[SignatureKind] = Field(
        default_factory=lambda: [SignatureKind.GGUF],
        min_length=1,
        description="Signature kinds to look for",
    )
    exclude: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDES),
        description="Glob patterns of excluded directories",
    )

    @field_validator("kinds", mode="before")
    @classmethod
    def normalize_kinds(cls, v: object) -> object:
        """Accept kind names in any letter case."""
        if isinstance(v, list):
            return [item.upper() if isinstance(item, str) else item for item in v]
        return v

    @property
    def effective_root(self) -> Path:
        """Configured default root, or the home directory."""
        if self.default_root is not None:
            return self.default_root.expanduser()
        return get_default_scan_root()

    def build_detector(self) -> SignatureDetector:
        """Create a SignatureDetector for the configured kinds."""
        return SignatureDetector(self.kinds)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated AppConfig; defaults if the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return AppConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def save_config(config: AppConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The AppConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config_to_dict(config), f)
        # os.replace() is atomic on POSIX
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def config_to_dict(config: AppConfig) -> dict[str, object]:
    """Convert AppConfig to a dictionary for TOML serialization.

    TOML has no null value, so an unset default_root is omitted.

    Args:
        config: The AppConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    result: dict[str, object] = {}
    if config.default_root is not None:
        result["default_root"] = str(config.default_root)
    result["workers"] = config.workers
    result["min_size_bytes"] = config.min_size_bytes
    result["kinds"] = [kind.value for kind in config.kinds]
    result["exclude"] = list(config.exclude)
    return result
