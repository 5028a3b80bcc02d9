"""User configuration for mole.

The configuration lives in ~/.config/mole/config.toml and is validated
with pydantic. A missing file yields defaults; a broken file is an error
the CLI reports before touching anything.
"""

from __future__ import annotations

import logging
import re
import tomllib
from pathlib import Path
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mole.core.paths import ensure_config_dir, get_config_path

logger = logging.getLogger(__name__)

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMGT]?)(?:I?B)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4}

DEFAULT_PROJECT_PATHS: tuple[str, ...] = (
    "~/Projects",
    "~/Development",
    "~/dev",
    "~/code",
    "~/GitHub",
)


class ConfigError(Exception):
    """Configuration file could not be loaded or saved."""


def parse_size(value: str) -> int:
    """Parse a human size string into bytes.

    Accepts an optional binary unit suffix: ``512``, ``100M``, ``1.5G``,
    ``2GiB``, ``10kb``.

    Args:
        value: Size string.

    Returns:
        Size in bytes.

    Raises:
        ValueError: If the string is not a valid size.
    """
    match = _SIZE_PATTERN.match(value)
    if match is None:
        msg = f"Invalid size: {value!r}"
        raise ValueError(msg)
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit.upper()])


class MoleConfig(BaseModel):
    """Contents of config.toml.

    Attributes:
        whitelist: Extra path patterns to protect, merged after the
            whitelist file.
        project_paths: Directories scanned for development artifacts.
        skip_recent_days: Candidates modified more recently than this are
            filtered out by discovery before reaching the safety engine.
        journal_max_size: Maximum system journal size to keep (e.g. "100M").
    """

    model_config = ConfigDict(extra="forbid")

    whitelist: Annotated[
        list[str],
        Field(default_factory=list, description="Additional protected paths"),
    ]
    project_paths: Annotated[
        list[str],
        Field(
            default_factory=lambda: list(DEFAULT_PROJECT_PATHS),
            description="Directories scanned for dev artifacts",
        ),
    ]
    skip_recent_days: Annotated[int, Field(ge=0, description="Minimum candidate age")] = 7
    journal_max_size: Annotated[str, Field(description="Journal size cap")] = "100M"

    @field_validator("journal_max_size")
    @classmethod
    def validate_journal_max_size(cls, v: str) -> str:
        """Validate that journal_max_size is a parseable size string."""
        parse_size(v)
        return v

    @property
    def journal_max_bytes(self) -> int:
        """journal_max_size in bytes."""
        return parse_size(self.journal_max_size)


def load_config(path: Path | None = None) -> MoleConfig:
    """Load configuration from TOML.

    Args:
        path: Config file (defaults to ~/.config/mole/config.toml).

    Returns:
        The validated configuration, or defaults if the file is missing.

    Raises:
        ConfigError: If the file cannot be read, parsed, or validated.
    """
    path = path if path is not None else get_config_path()

    try:
        with open(path, "rb") as f:
            data: dict[str, Any] = tomllib.load(f)
    except FileNotFoundError:
        logger.debug("No config file at %s, using defaults", path)
        return MoleConfig()
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse {path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Failed to read {path}: {e}"
        raise ConfigError(msg) from e

    try:
        return MoleConfig(**data)
    except ValidationError as e:
        msg = f"Invalid configuration in {path}: {e}"
        raise ConfigError(msg) from e


def save_config(config: MoleConfig, path: Path | None = None) -> Path:
    """Write configuration as TOML.

    Args:
        config: Configuration to save.
        path: Destination (defaults to ~/.config/mole/config.toml).

    Returns:
        The path written to.

    Raises:
        ConfigError: If the file cannot be written.
    """
    if path is None:
        try:
            path = ensure_config_dir() / get_config_path().name
        except RuntimeError as e:
            raise ConfigError(str(e)) from e

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(tomli_w.dumps(config.model_dump()), encoding="utf-8")
    except OSError as e:
        msg = f"Failed to write {path}: {e}"
        raise ConfigError(msg) from e
    return path
