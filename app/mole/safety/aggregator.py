"""Folding per-candidate outcomes into an operation result."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import replace
from functools import reduce

from mole.safety.models import OperationOutcome, OperationResult


class ResultAggregator:
    """Thread-safe accumulator for execution outcomes.

    The only mutable state shared during execution. Contributions are
    merged under a lock, and merging is associative, so outcomes may
    arrive in any order from any thread.
    """

    def __init__(self, dry_run: bool = False) -> None:
        self._lock = threading.Lock()
        self._result = OperationResult(dry_run=dry_run)

    def add(self, outcome: OperationOutcome) -> None:
        """Record a single outcome."""
        self.merge(OperationResult.from_outcome(outcome))

    def merge(self, result: OperationResult) -> None:
        """Fold a partial result into the accumulator."""
        with self._lock:
            self._result = self._result.merge(result)

    def result(
        self,
        *,
        elapsed_seconds: float | None = None,
        interrupted: bool = False,
    ) -> OperationResult:
        """Snapshot of everything recorded so far.

        Args:
            elapsed_seconds: Wall time to report, if known.
            interrupted: Mark the result as stopped early.

        Returns:
            The aggregated result.
        """
        with self._lock:
            result = self._result
        if elapsed_seconds is not None:
            result = replace(result, elapsed_seconds=elapsed_seconds)
        if interrupted:
            result = replace(result, interrupted=True)
        return result


def aggregate(outcomes: Iterable[OperationOutcome], dry_run: bool = False) -> OperationResult:
    """Fold outcomes into a result without an accumulator."""
    return reduce(
        lambda acc, outcome: acc.merge(OperationResult.from_outcome(outcome)),
        outcomes,
        OperationResult(dry_run=dry_run),
    )
