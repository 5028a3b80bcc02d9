"""Path canonicalization for deletion candidates.

Turns a raw candidate path into its symlink-free real path. Malformed
input is rejected rather than repaired: a path with ``..`` components or
control characters never reaches the denylist.
"""

from __future__ import annotations

import logging
import os
import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mole.safety.exceptions import UnsafePathError
from mole.safety.models import BlockReason
from mole.safety.registry import normalize

if TYPE_CHECKING:
    from mole.safety.registry import ProtectionRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolvedPath:
    """A raw path after canonicalization.

    Attributes:
        apparent: The raw path with separators and ``.`` normalized.
        canonical: Real path with every symlink resolved.
        location: Entry that removal acts on: ``apparent`` with its parent
            directories resolved but its final component kept as-is.
    """

    apparent: str
    canonical: str
    location: str

    @property
    def redirected(self) -> bool:
        """True if resolving symlinks changed the path."""
        return self.canonical != self.apparent


def has_control_chars(path: str) -> bool:
    """Check for control characters (NUL, newline, carriage return, ...)."""
    return any(unicodedata.category(c) == "Cc" for c in path)


def check_raw_path(raw: str) -> str:
    """Reject malformed raw paths.

    Args:
        raw: Path as proposed by discovery.

    Returns:
        The apparent (normalized) path.

    Raises:
        UnsafePathError: If the path is empty, contains control characters,
            is relative, or has a ``..`` component.
    """
    if not raw or not raw.strip():
        raise UnsafePathError(raw, BlockReason.MALFORMED, "Empty path")

    if has_control_chars(raw):
        raise UnsafePathError(raw, BlockReason.MALFORMED, "Path contains control characters")

    if not raw.startswith("/"):
        raise UnsafePathError(raw, BlockReason.MALFORMED, "Path must be absolute")

    if ".." in raw.split("/"):
        raise UnsafePathError(raw, BlockReason.MALFORMED, "Path traversal detected")

    return normalize(raw)


def canonicalize(raw: str, registry: ProtectionRegistry) -> ResolvedPath:
    """Resolve a raw path to its real path.

    Symlinks are resolved along the whole path. Paths that no longer exist
    still canonicalize, so a vanished candidate is reported rather than
    rejected here.

    Args:
        raw: Path as proposed by discovery.
        registry: Registry used to detect redirection into protected areas.

    Returns:
        The resolved path.

    Raises:
        UnsafePathError: If the path is malformed, cannot be resolved, or
            is a symlink redirect into a denylisted location.
    """
    apparent = check_raw_path(raw)

    try:
        canonical = normalize(os.path.realpath(apparent))
        parent, name = os.path.split(apparent)
        location = normalize(os.path.join(os.path.realpath(parent), name)) if name else canonical
    except (OSError, ValueError) as e:
        raise UnsafePathError(raw, BlockReason.MALFORMED, f"Cannot resolve path ({e})") from e

    resolved = ResolvedPath(apparent=apparent, canonical=canonical, location=location)

    if resolved.redirected and registry.is_denied(canonical):
        logger.debug("Symlink redirect: %s -> %s", apparent, canonical)
        raise UnsafePathError(
            raw,
            BlockReason.SYMLINK_REDIRECT,
            f"Resolves to protected path {canonical}",
            canonical=canonical,
        )

    return resolved
