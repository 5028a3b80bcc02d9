"""Plan execution.

Handles removal of allowed candidates with dry-run support, re-checks
each path immediately before removal, and isolates failures per path.
The single exception is a candidate resolving to the filesystem root,
which abandons the whole plan.
"""

import logging
import shutil
import threading
import time
from pathlib import Path

from mole.safety.aggregator import ResultAggregator
from mole.safety.exceptions import FatalAbortError, PlanConsumedError
from mole.safety.models import (
    BlockReason,
    OperationOutcome,
    OperationPlan,
    OperationResult,
    PlanEntry,
)
from mole.safety.registry import ProtectionRegistry
from mole.safety.validator import recheck

logger = logging.getLogger(__name__)


class _RootTarget(Exception):
    """Internal signal that a plan entry resolves to the root."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(path)


class Executor:
    """Executes an operation plan.

    Attributes:
        _registry: Protection registry used for re-checks.
        _dry_run: If True, record what would be deleted without deleting.
    """

    def __init__(self, registry: ProtectionRegistry, dry_run: bool = False) -> None:
        """Initialize the Executor.

        Args:
            registry: Protection registry for this invocation.
            dry_run: If True, report what would be deleted without deleting.
        """
        self._registry = registry
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Whether this executor mutates the filesystem."""
        return self._dry_run

    def execute(
        self,
        plan: OperationPlan,
        cancel: threading.Event | None = None,
    ) -> OperationResult:
        """Execute a plan and return the aggregated result.

        Blocked and whitelisted entries are skipped without being touched.
        Failures are recorded and execution continues with the next entry.
        If ``cancel`` is set, no further entry is started and the partial
        result is returned with ``interrupted`` set.

        Args:
            plan: Plan from :func:`~mole.safety.planner.build_plan`.
            cancel: Optional event requesting an early stop.

        Returns:
            The aggregated result.

        Raises:
            PlanConsumedError: If the plan was already executed.
            FatalAbortError: If any entry resolves to the filesystem root.
        """
        if plan.consumed:
            msg = "Operation plan has already been executed"
            raise PlanConsumedError(msg)
        plan.consumed = True

        started = time.monotonic()
        aggregator = ResultAggregator(dry_run=self._dry_run)

        for entry in plan.entries:
            path = entry.candidate.canonical_path
            if path is not None and self._registry.is_root(path):
                logger.error(
                    "Plan contains the filesystem root (%r), aborting",
                    entry.candidate.raw_path,
                )
                raise FatalAbortError(entry.candidate.raw_path, aggregator.result())

        interrupted = False
        for index, entry in enumerate(plan.entries):
            if cancel is not None and cancel.is_set():
                logger.info(
                    "Execution interrupted, %d entries not started",
                    len(plan.entries) - index,
                )
                interrupted = True
                break

            try:
                aggregator.add(self._execute_entry(entry))
            except _RootTarget as e:
                logger.error("%s resolves to the filesystem root, aborting", e.path)
                result = aggregator.result(elapsed_seconds=time.monotonic() - started)
                raise FatalAbortError(e.path, result) from None

        return aggregator.result(
            elapsed_seconds=time.monotonic() - started,
            interrupted=interrupted,
        )

    def _execute_entry(self, entry: PlanEntry) -> OperationOutcome:
        """Execute a single plan entry.

        Args:
            entry: Candidate and verdict.

        Returns:
            The outcome for this entry.

        Raises:
            _RootTarget: If the re-check finds the path resolves to the root.
        """
        candidate = entry.candidate
        path = candidate.raw_path

        if not entry.verdict.is_allowed:
            return OperationOutcome.skipped(path, entry.verdict.skip_reason, dry_run=self._dry_run)

        freed = candidate.declared_size or 0

        if self._dry_run:
            logger.info("Dry-run: would delete %s", path)
            return OperationOutcome.deleted(path, freed, dry_run=True)

        check = recheck(candidate, self._registry)
        if check.canonical_path is not None and self._registry.is_root(check.canonical_path):
            raise _RootTarget(candidate.raw_path)
        if not check.safe:
            logger.warning("Refusing to delete %s: %s", path, check.problem)
            return OperationOutcome.skipped(path, BlockReason.SYSTEM_PROTECTED)

        try:
            self._remove(check.location or path)
        except OSError as e:
            logger.warning("Failed to delete %s: %s", path, e)
            return OperationOutcome.failed(path, str(e))

        logger.info("Deleted %s (%d bytes)", path, freed)
        return OperationOutcome.deleted(path, freed)

    def _remove(self, location: str) -> None:
        """Remove a filesystem entry.

        - Directories: shutil.rmtree
        - Files, symlinks, and dead symlinks: Path.unlink

        Args:
            location: Entry to remove (never followed if it is a symlink).

        Raises:
            OSError: If removal fails or nothing exists at the location.
        """
        target = Path(location)

        # Directories (but not symlinks to directories)
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
            return

        if target.exists() or target.is_symlink():
            target.unlink()
            return

        msg = f"Path does not exist: {location}"
        raise FileNotFoundError(msg)
