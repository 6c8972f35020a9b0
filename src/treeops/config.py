"""Configuration for tree operations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from treeops.copier import DEFAULT_CHUNK_SIZE, DEFAULT_DIRECTORY_MODE
from treeops.types import ErrorPolicy, SymlinkPolicy

logger = logging.getLogger(__name__)

# Default configuration location
CONFIG_DIR = Path.home() / ".treeops"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_mode(value: str | int) -> int:
    """Parse a permission mode given as an int or an octal string.

    Accepts ``"755"``, ``"0755"`` and ``"0o755"``.

    Raises:
        ValueError: If the value is not an octal mode within 0..0o7777.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid mode: {value!r}")
    if isinstance(value, int):
        mode = value
    else:
        text = value.strip().lower()
        if text.startswith("0o"):
            text = text[2:]
        try:
            mode = int(text, 8)
        except ValueError as e:
            raise ValueError(f"Invalid octal mode: {value!r}") from e
    if not 0 <= mode <= 0o7777:
        raise ValueError(f"Mode out of range: {oct(mode)}")
    return mode


class TreeOpsConfig(BaseModel):
    """Settings shared by the tree operations."""

    model_config = ConfigDict(extra="forbid")

    directory_mode: int = DEFAULT_DIRECTORY_MODE
    symlinks: SymlinkPolicy = SymlinkPolicy.COPY
    on_error: ErrorPolicy = ErrorPolicy.ABORT
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)
    log_level: str = "WARNING"

    @field_validator("directory_mode", mode="before")
    @classmethod
    def _validate_mode(cls, value: Any) -> int:
        if not isinstance(value, (str, int)):
            raise ValueError(f"Invalid mode: {value!r}")
        return parse_mode(value)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_file(cls, path: Path) -> TreeOpsConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML file.

        Returns:
            Parsed TreeOpsConfig.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the YAML or its values are invalid.
        """
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e


def load_config(path: Path | None = None) -> TreeOpsConfig:
    """Load configuration from an explicit path or the default location.

    A missing default file yields the default settings; a missing explicit
    file is an error.

    Args:
        path: Optional config file path.

    Returns:
        Loaded TreeOpsConfig.
    """
    if path is not None:
        return TreeOpsConfig.from_file(path)
    if not CONFIG_FILE.exists():
        logger.debug("No config at %s, using defaults", CONFIG_FILE)
        return TreeOpsConfig()
    return TreeOpsConfig.from_file(CONFIG_FILE)
