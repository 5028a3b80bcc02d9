"""Verdicts for deletion candidates.

Checks run in a fixed order: sanitize and canonicalize, denylist,
whitelist, existence. The denylist is consulted before the whitelist so
a whitelist entry can never turn a system path into a mere skip.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace

from mole.safety.canonical import canonicalize
from mole.safety.exceptions import UnsafePathError
from mole.safety.models import BlockReason, PathCandidate, PlanEntry, Verdict
from mole.safety.registry import ProtectionRegistry

logger = logging.getLogger(__name__)


def validate(candidate: PathCandidate, registry: ProtectionRegistry) -> PlanEntry:
    """Assign a verdict to a candidate.

    Depends only on the candidate's path, the registry, and what the
    filesystem currently holds at that path. Candidates never influence
    each other.

    Args:
        candidate: Candidate as produced by discovery.
        registry: Protection registry for this invocation.

    Returns:
        The candidate with ``canonical_path`` and ``location`` filled in,
        paired with its verdict.
    """
    try:
        resolved = canonicalize(candidate.raw_path, registry)
    except UnsafePathError as e:
        logger.debug("Blocked %r: %s", candidate.raw_path, e.detail)
        return PlanEntry(
            candidate=replace(candidate, canonical_path=e.canonical),
            verdict=Verdict.blocked(e.reason, e.detail),
        )

    candidate = replace(
        candidate,
        canonical_path=resolved.canonical,
        location=resolved.location,
    )

    for path in (resolved.canonical, resolved.location):
        prefix = registry.blocking_prefix(path)
        if prefix is not None:
            logger.debug("Blocked %s: system path %s", path, prefix)
            return PlanEntry(
                candidate=candidate,
                verdict=Verdict.blocked(
                    BlockReason.SYSTEM_PROTECTED,
                    f"System path protected: {prefix}",
                ),
            )

    for path in (resolved.canonical, resolved.location):
        entry = registry.whitelist_match(path)
        if entry is not None:
            logger.debug("Whitelisted %s via %s", path, entry)
            return PlanEntry(
                candidate=candidate,
                verdict=Verdict.whitelisted(f"Protected by whitelist entry {entry}"),
            )

    if not os.path.lexists(resolved.location):
        return PlanEntry(
            candidate=candidate,
            verdict=Verdict.blocked(BlockReason.EMPTY, "Nothing exists at this path"),
        )

    return PlanEntry(candidate=candidate, verdict=Verdict.allowed())


@dataclass(frozen=True, slots=True)
class Recheck:
    """Fresh resolution of an allowed candidate just before removal.

    Attributes:
        canonical_path: Real path now (None if it no longer resolves).
        location: Removal location now (None if it no longer resolves).
        problem: Why the candidate must not be removed, or None if safe.
    """

    canonical_path: str | None
    location: str | None
    problem: str | None = None

    @property
    def safe(self) -> bool:
        """True if removal may proceed."""
        return self.problem is None


def recheck(candidate: PathCandidate, registry: ProtectionRegistry) -> Recheck:
    """Re-run the symlink and denylist checks on a planned candidate.

    Guards the window between planning and removal: if the path was
    swapped for a symlink, or now resolves somewhere else, removal is
    refused.

    Args:
        candidate: Candidate from an executed plan entry.
        registry: Protection registry for this invocation.

    Returns:
        The fresh resolution and any problem found.
    """
    try:
        resolved = canonicalize(candidate.raw_path, registry)
    except UnsafePathError as e:
        return Recheck(canonical_path=e.canonical, location=None, problem=e.detail)

    if (resolved.canonical, resolved.location) != (candidate.canonical_path, candidate.location):
        return Recheck(
            canonical_path=resolved.canonical,
            location=resolved.location,
            problem=f"Path changed since planning (now resolves to {resolved.canonical})",
        )

    for path in (resolved.canonical, resolved.location):
        prefix = registry.blocking_prefix(path)
        if prefix is not None:
            return Recheck(
                canonical_path=resolved.canonical,
                location=resolved.location,
                problem=f"System path protected: {prefix}",
            )

    return Recheck(canonical_path=resolved.canonical, location=resolved.location)
