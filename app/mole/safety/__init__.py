"""Deletion safety engine.

Every delete request passes through this package: candidates are
canonicalized, checked against the protection registry, sized, planned,
and only then executed (or recorded, in dry-run mode).
"""

from mole.safety.aggregator import ResultAggregator, aggregate
from mole.safety.canonical import ResolvedPath, canonicalize
from mole.safety.exceptions import (
    FatalAbortError,
    PlanConsumedError,
    SafetyError,
    UnsafePathError,
)
from mole.safety.executor import Executor
from mole.safety.models import (
    BlockReason,
    OperationOutcome,
    OperationPlan,
    OperationResult,
    Origin,
    OutcomeKind,
    PathCandidate,
    PlanEntry,
    Verdict,
    VerdictKind,
)
from mole.safety.planner import build_plan
from mole.safety.registry import BLOCKED_PATHS, CAUTION_PATHS, ProtectionRegistry
from mole.safety.sizing import LARGE_DELETION_THRESHOLD, SizeReport, is_large_deletion, measure
from mole.safety.validator import recheck, validate

__all__ = [
    "BLOCKED_PATHS",
    "CAUTION_PATHS",
    "LARGE_DELETION_THRESHOLD",
    "BlockReason",
    "Executor",
    "FatalAbortError",
    "OperationOutcome",
    "OperationPlan",
    "OperationResult",
    "Origin",
    "OutcomeKind",
    "PathCandidate",
    "PlanConsumedError",
    "PlanEntry",
    "ProtectionRegistry",
    "ResolvedPath",
    "ResultAggregator",
    "SafetyError",
    "SizeReport",
    "UnsafePathError",
    "Verdict",
    "VerdictKind",
    "aggregate",
    "build_plan",
    "canonicalize",
    "is_large_deletion",
    "measure",
    "recheck",
    "validate",
]
