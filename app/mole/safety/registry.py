"""Protected paths that must never be deleted.

This module defines the static system denylist and the user whitelist,
and the immutable :class:`ProtectionRegistry` that answers whether a
canonical path is protected. Matching is component-wise: ``/etcbackup``
does not match ``/etc``.

The denylist is a ceiling: the whitelist only adds protection and can
never unblock a system path.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from mole.core.paths import get_whitelist_path, invoking_home

logger = logging.getLogger(__name__)

ROOT = "/"

# System path prefixes that can never be deleted, nor anything below them.
# The root entry matches only the root itself.
BLOCKED_PATHS: tuple[str, ...] = (
    # Root filesystem
    ROOT,
    # Core binaries
    "/bin",
    "/sbin",
    "/usr",
    "/usr/bin",
    "/usr/sbin",
    "/usr/lib",
    "/usr/local/bin",
    # Boot
    "/boot",
    "/efi",
    # Virtual filesystems
    "/proc",
    "/sys",
    "/dev",
    "/run",
    # System configuration
    "/etc",
    # System libraries
    "/lib",
    "/lib32",
    "/lib64",
    "/libx32",
    # Variable data
    "/var",
    "/var/lib",
    "/var/log",
    "/var/run",
    "/var/lib/dpkg",
    "/var/lib/apt",
    "/var/lib/rpm",
    "/var/lib/pacman",
    # Superuser home
    "/root",
    # Service data and filesystem metadata
    "/srv",
    "/lost+found",
    # Snap runtime
    "/snap/core",
    "/snap/snapd",
)

# Cache directories below blocked prefixes whose contents may be cleaned.
# Only strict descendants qualify; the directories themselves stay protected.
SYSTEM_CACHE_EXCEPTIONS: tuple[str, ...] = ("/var/cache/apt/archives",)

# Regenerable cache files below blocked prefixes. Exact matches only.
SYSTEM_CACHE_FILES: tuple[str, ...] = (
    "/var/cache/apt/pkgcache.bin",
    "/var/cache/apt/srcpkgcache.bin",
)

# Broad locations that may be deleted but warrant a warning first.
# Exact matches only; anything below them is ordinary.
CAUTION_PATHS: tuple[str, ...] = (
    "/opt",
    "/home",
    "/tmp",
    "/var/tmp",
    "/var/cache",
)


def normalize(path: str) -> str:
    """Collapse redundant separators and dot components of an absolute path.

    POSIX keeps a leading ``//`` distinct; it is folded into ``/`` here so
    ``//etc`` cannot slip past ``/etc``.

    Args:
        path: Absolute path.

    Returns:
        Normalized absolute path.
    """
    return ROOT + os.path.normpath(path).lstrip("/")


def is_under(path: str, prefix: str) -> bool:
    """Check if ``path`` equals ``prefix`` or lies below it, component-wise."""
    return PurePosixPath(normalize(path)).is_relative_to(normalize(prefix))


def expand_pattern(pattern: str, home: str | None = None) -> str | None:
    """Expand a whitelist pattern to an absolute path.

    A leading ``~`` expands to the invoking user's home directory.

    Args:
        pattern: Pattern from the whitelist file or configuration.
        home: Home directory override (defaults to :func:`invoking_home`).

    Returns:
        Normalized absolute path, or None if the pattern is unusable.
    """
    pattern = pattern.strip()
    if not pattern:
        return None

    if pattern == "~" or pattern.startswith("~/"):
        base = home if home is not None else str(invoking_home())
        pattern = base + pattern[1:]

    if not pattern.startswith("/") or any(not c.isprintable() for c in pattern):
        logger.warning("Ignoring whitelist entry that is not an absolute path: %r", pattern)
        return None

    return normalize(pattern)


def load_whitelist_file(path: Path | None = None) -> list[str]:
    """Read raw whitelist patterns from a file.

    One pattern per line; blank lines and ``#`` comments are ignored.
    A missing or unreadable file yields an empty list.

    Args:
        path: Whitelist file (defaults to the per-user whitelist).

    Returns:
        Patterns in file order.
    """
    path = path if path is not None else get_whitelist_path()

    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read whitelist %s, continuing without it: %s", path, e)
        return []

    patterns: list[str] = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


@dataclass(frozen=True, slots=True)
class ProtectionRegistry:
    """Immutable denylist and whitelist for one invocation.

    Safe to share across threads: nothing mutates it after construction.

    Attributes:
        blocked_prefixes: Absolute paths that are never deleted.
        whitelist_entries: Expanded user whitelist entries, in load order.
        cache_exceptions: Cleanable directories below blocked prefixes.
        cache_files: Cleanable files below blocked prefixes.
        caution_paths: Deletable locations that warrant a warning.
    """

    blocked_prefixes: frozenset[str] = frozenset(BLOCKED_PATHS)
    whitelist_entries: tuple[str, ...] = ()
    cache_exceptions: tuple[str, ...] = SYSTEM_CACHE_EXCEPTIONS
    cache_files: tuple[str, ...] = SYSTEM_CACHE_FILES
    caution_paths: tuple[str, ...] = CAUTION_PATHS
    _resolved_whitelist: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Resolve whitelist entries so they match canonical paths."""
        resolved: list[str] = []
        for entry in self.whitelist_entries:
            resolved.append(entry)
            real = normalize(os.path.realpath(entry))
            if real != entry:
                resolved.append(real)
        object.__setattr__(self, "_resolved_whitelist", tuple(resolved))

    @classmethod
    def load(
        cls,
        whitelist_file: Path | None = None,
        extra_patterns: Iterable[str] = (),
        home: str | None = None,
    ) -> ProtectionRegistry:
        """Build a registry from the whitelist file and extra patterns.

        Args:
            whitelist_file: Whitelist file (defaults to the per-user whitelist).
            extra_patterns: Additional patterns, e.g. from configuration,
                appended after the file entries.
            home: Home directory used for ``~`` expansion.

        Returns:
            A ready-to-use registry.
        """
        patterns = [*load_whitelist_file(whitelist_file), *extra_patterns]
        return cls.from_patterns(patterns, home=home)

    @classmethod
    def from_patterns(cls, patterns: Iterable[str], home: str | None = None) -> ProtectionRegistry:
        """Build a registry from whitelist patterns, keeping the first occurrence."""
        entries: list[str] = []
        for pattern in patterns:
            expanded = expand_pattern(pattern, home=home)
            if expanded is not None and expanded not in entries:
                entries.append(expanded)

        logger.debug("Loaded %d whitelist entries", len(entries))
        return cls(whitelist_entries=tuple(entries))

    def is_root(self, path: str) -> bool:
        """Check if a path is the filesystem root."""
        return normalize(path) == ROOT

    def needs_caution(self, path: str) -> bool:
        """Check if a path is exactly one of the broad caution locations.

        Caution never blocks; it only marks the path for a warning.
        """
        return normalize(path) in self.caution_paths

    def blocking_prefix(self, path: str) -> str | None:
        """Return the blocked prefix that covers ``path``, if any."""
        if self.is_root(path):
            return ROOT

        normalized = normalize(path)
        if normalized in self.cache_files:
            return None
        for exception in self.cache_exceptions:
            if normalized != normalize(exception) and is_under(path, exception):
                return None

        matches = [
            prefix
            for prefix in self.blocked_prefixes
            if prefix != ROOT and is_under(path, prefix)
        ]
        if not matches:
            return None
        return max(matches, key=len)

    def is_denied(self, path: str) -> bool:
        """Check if a canonical path is system-protected.

        Args:
            path: Canonical absolute path.

        Returns:
            True if the path is the root, a blocked prefix, or below one.
        """
        return self.blocking_prefix(path) is not None

    def whitelist_match(self, path: str) -> str | None:
        """Return the whitelist entry that covers ``path``, if any."""
        for entry in self._resolved_whitelist:
            if is_under(path, entry):
                return entry
        return None

    def is_whitelisted(self, path: str) -> bool:
        """Check if the user whitelist protects a canonical path.

        Args:
            path: Canonical absolute path.

        Returns:
            True if the path equals, or is a descendant of, a whitelist entry.
        """
        return self.whitelist_match(path) is not None
