"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from mole.safety.registry import ProtectionRegistry


@pytest.fixture
def registry() -> ProtectionRegistry:
    """Registry with the system denylist and an empty whitelist."""
    return ProtectionRegistry()


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    """Fake home directory under the test temp dir."""
    home = tmp_path / "home" / "tester"
    home.mkdir(parents=True)
    return home


@pytest.fixture
def cache_dir(home_dir: Path) -> Path:
    """Application cache directory holding 3000 bytes in two files."""
    cache = home_dir / ".cache" / "app"
    (cache / "sub").mkdir(parents=True)
    (cache / "a.bin").write_bytes(b"x" * 1000)
    (cache / "sub" / "b.bin").write_bytes(b"y" * 2000)
    return cache


@pytest.fixture
def xdg_env(tmp_path: Path) -> Iterator[dict[str, Path]]:
    """Point XDG config and state directories at the test temp dir."""
    dirs = {
        "config": tmp_path / "xdg-config",
        "state": tmp_path / "xdg-state",
    }
    env = {
        "XDG_CONFIG_HOME": str(dirs["config"]),
        "XDG_STATE_HOME": str(dirs["state"]),
    }
    with patch.dict(os.environ, env):
        yield dirs


def snapshot(root: Path) -> set[tuple[str, bool, int]]:
    """Record every entry below root as (relative path, is symlink, size)."""
    entries: set[tuple[str, bool, int]] = set()
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            path = Path(dirpath) / name
            st = path.lstat()
            entries.add((str(path.relative_to(root)), path.is_symlink(), st.st_size))
    return entries


@pytest.fixture
def fs_snapshot():
    """Factory that snapshots a directory tree for before/after comparison."""
    return snapshot
