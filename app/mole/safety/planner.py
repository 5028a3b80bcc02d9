"""Execution planning.

Builds the :class:`OperationPlan` shared by dry-run and real execution.
Every decision is made here; the executor only acts on it, so a preview
and the run that follows it cannot disagree about what gets skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from mole.safety.models import OperationPlan, PathCandidate, PlanEntry
from mole.safety.registry import ProtectionRegistry
from mole.safety.sizing import is_large_deletion, measure
from mole.safety.validator import validate

logger = logging.getLogger(__name__)


def _with_size(entry: PlanEntry) -> PlanEntry:
    """Measure an allowed entry and record its size on the candidate."""
    candidate = entry.candidate
    report = measure(candidate.location or candidate.raw_path)
    sized = replace(
        candidate,
        declared_size=report.total_bytes,
        size_complete=report.complete,
    )
    return PlanEntry(candidate=sized, verdict=entry.verdict)


def build_plan(
    candidates: Iterable[PathCandidate],
    registry: ProtectionRegistry,
    *,
    max_workers: int = 1,
) -> OperationPlan:
    """Validate and size candidates into an operation plan.

    Candidates are handled independently. With ``max_workers > 1`` the
    directory walks for sizing run in a thread pool; entry order always
    matches input order.

    Args:
        candidates: Candidates from discovery.
        registry: Protection registry for this invocation.
        max_workers: Number of threads used for sizing.

    Returns:
        The operation plan.
    """
    entries = [validate(candidate, registry) for candidate in candidates]
    allowed_idx = [i for i, entry in enumerate(entries) if entry.verdict.is_allowed]

    if max_workers > 1 and len(allowed_idx) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            sized = list(pool.map(_with_size, (entries[i] for i in allowed_idx)))
    else:
        sized = [_with_size(entries[i]) for i in allowed_idx]

    for i, entry in zip(allowed_idx, sized, strict=True):
        entries[i] = entry

    sizes = [entry.candidate.declared_size or 0 for entry in sized]
    total = sum(sizes)
    large = is_large_deletion(total) or any(is_large_deletion(size) for size in sizes)

    if large:
        logger.warning("Large deletion planned: %d bytes across %d paths", total, len(sized))

    caution = tuple(
        entry.candidate.raw_path
        for entry in sized
        if registry.needs_caution(entry.candidate.location or entry.candidate.raw_path)
    )
    for path in caution:
        logger.warning("Caution: deleting %s, a broad system location", path)

    logger.debug(
        "Planned %d candidates: %d allowed, %d skipped",
        len(entries),
        len(sized),
        len(entries) - len(sized),
    )

    return OperationPlan(
        entries=tuple(entries),
        total_allowed_size=total,
        large_deletion=large,
        caution_paths=caution,
    )
