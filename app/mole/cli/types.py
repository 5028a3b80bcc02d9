"""Shared types and utilities for CLI commands.

This module provides helpers used across multiple CLI command modules:
loading configuration and the protection registry, and turning command
line input into deletion candidates.
"""

from pathlib import Path

import typer
from rich.markup import escape

from mole.core.config import ConfigError, MoleConfig, load_config
from mole.safety.models import Origin, PathCandidate
from mole.safety.registry import ProtectionRegistry
from mole.utils.formatting import print_error

# Exit code when a plan is abandoned because a path resolves to the root.
EXIT_FATAL_ABORT = 3


def require_config() -> MoleConfig:
    """Load the configuration or exit with an error.

    Returns:
        The loaded configuration (defaults if no file exists).

    Raises:
        typer.Exit: If the configuration file is invalid.
    """
    try:
        return load_config()
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e


def load_registry(config: MoleConfig) -> ProtectionRegistry:
    """Build the protection registry from the whitelist file and config."""
    return ProtectionRegistry.load(extra_patterns=config.whitelist)


def read_candidate_file(path: Path) -> list[str]:
    """Read candidate paths from a file, one per line.

    Blank lines and lines starting with ``#`` are ignored. Lines are not
    stripped of spaces, since spaces are legal in file names.

    Args:
        path: File to read.

    Returns:
        Raw candidate paths in file order.

    Raises:
        typer.Exit: If the file cannot be read.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print_error(f"Cannot read candidates from {escape(str(path))}: {escape(str(e))}")
        raise typer.Exit(code=1) from e

    return [line for line in content.splitlines() if line.strip() and not line.startswith("#")]


def build_candidates(
    paths: list[str] | None,
    from_file: Path | None,
    origin: Origin,
) -> list[PathCandidate]:
    """Combine command line paths and a candidates file into candidates.

    Args:
        paths: Paths given as arguments.
        from_file: Optional file with one path per line.
        origin: Origin tag applied to every candidate.

    Returns:
        Candidates in argument order, followed by file order.
    """
    raw_paths = list(paths or [])
    if from_file is not None:
        raw_paths.extend(read_candidate_file(from_file))
    return [PathCandidate(raw_path=raw, origin=origin) for raw in raw_paths]
