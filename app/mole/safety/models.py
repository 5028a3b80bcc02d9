"""Data models for the deletion safety engine.

This module defines the immutable records that flow through the engine:
candidates proposed for deletion, the verdict assigned to each one, the
plan built from them, and the per-candidate outcomes and aggregated
result produced by execution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Origin(str, Enum):
    """Where a candidate was discovered.

    Origin is reporting metadata only. No safety decision depends on it.

    Attributes:
        CACHE: Application or system cache directory.
        TRASH: Desktop trash contents.
        TEMP: Temporary files.
        DEV_ARTIFACT: Development build output (node_modules, target, venv).
        APP_LEFTOVER: Files left behind by an uninstalled application.
    """

    CACHE = "cache"
    TRASH = "trash"
    TEMP = "temp"
    DEV_ARTIFACT = "dev-artifact"
    APP_LEFTOVER = "app-leftover"


class BlockReason(str, Enum):
    """Reason a candidate was blocked or skipped.

    Attributes:
        MALFORMED: Empty, relative, traversing, or control-character path.
        SYSTEM_PROTECTED: Path is, or lies under, a denylisted prefix.
        SYMLINK_REDIRECT: Path resolves through a symlink into a protected area.
        EMPTY: Nothing exists at the path.
        WHITELISTED: User whitelist protects the path (skip outcomes only).
    """

    MALFORMED = "malformed"
    SYSTEM_PROTECTED = "system_protected"
    SYMLINK_REDIRECT = "symlink_redirect"
    EMPTY = "empty"
    WHITELISTED = "whitelisted"


class VerdictKind(str, Enum):
    """Decision taken for a candidate."""

    ALLOWED = "allowed"
    BLOCKED = "blocked"
    WHITELISTED = "whitelisted"


@dataclass(frozen=True, slots=True)
class Verdict:
    """Decision for a single candidate.

    Attributes:
        kind: Allowed, blocked, or whitelisted.
        reason: Why the candidate was blocked (None unless blocked).
        detail: Human-readable explanation.
    """

    kind: VerdictKind
    reason: BlockReason | None = None
    detail: str | None = None

    def __post_init__(self) -> None:
        """Validate verdict consistency after initialization."""
        if self.kind == VerdictKind.BLOCKED and self.reason is None:
            msg = "Blocked verdict requires a reason"
            raise ValueError(msg)
        if self.kind != VerdictKind.BLOCKED and self.reason is not None:
            msg = f"{self.kind.value} verdict cannot carry a reason"
            raise ValueError(msg)

    @classmethod
    def allowed(cls) -> Verdict:
        return cls(kind=VerdictKind.ALLOWED)

    @classmethod
    def whitelisted(cls, detail: str | None = None) -> Verdict:
        return cls(kind=VerdictKind.WHITELISTED, detail=detail)

    @classmethod
    def blocked(cls, reason: BlockReason, detail: str | None = None) -> Verdict:
        return cls(kind=VerdictKind.BLOCKED, reason=reason, detail=detail)

    @property
    def is_allowed(self) -> bool:
        """Check if the candidate may be deleted."""
        return self.kind == VerdictKind.ALLOWED

    @property
    def skip_reason(self) -> BlockReason:
        """Reason recorded when this verdict is skipped by the executor."""
        if self.kind == VerdictKind.WHITELISTED:
            return BlockReason.WHITELISTED
        if self.reason is None:
            msg = "Allowed verdict has no skip reason"
            raise ValueError(msg)
        return self.reason

    def describe(self) -> str:
        """Short label for display, e.g. ``blocked (system_protected)``."""
        if self.reason is not None:
            return f"{self.kind.value} ({self.reason.value})"
        return self.kind.value


@dataclass(frozen=True, slots=True)
class PathCandidate:
    """A filesystem path proposed for deletion.

    Candidates are created by discovery code with ``raw_path`` and
    ``origin`` only. The engine fills the remaining fields by producing
    replaced copies; a candidate is never mutated in place.

    Attributes:
        raw_path: Path exactly as proposed.
        origin: Discovery origin tag.
        canonical_path: Fully symlink-resolved real path.
        location: The entry removal acts on: the raw path with its parent
            directories resolved. Differs from canonical_path only when the
            final component is itself a symlink.
        declared_size: Size in bytes of everything removal would free.
        size_complete: False if part of the subtree could not be read.
    """

    raw_path: str
    origin: Origin = Origin.CACHE
    canonical_path: str | None = None
    location: str | None = None
    declared_size: int | None = None
    size_complete: bool = True

    @property
    def display_path(self) -> str:
        """Path to show in reports (canonical when known)."""
        return self.canonical_path or self.raw_path


@dataclass(frozen=True, slots=True)
class PlanEntry:
    """A candidate paired with its verdict."""

    candidate: PathCandidate
    verdict: Verdict


@dataclass(slots=True)
class OperationPlan:
    """Validated candidates ready for execution.

    The plan is identical for dry-run and real execution and may only be
    executed once.

    Attributes:
        entries: Candidates with verdicts, in input order.
        total_allowed_size: Sum of declared sizes of allowed candidates.
        large_deletion: Advisory flag for the reporting layer.
        caution_paths: Allowed paths that are broad locations such as
            ``/home`` or ``/tmp``. Advisory only.
    """

    entries: tuple[PlanEntry, ...]
    total_allowed_size: int = 0
    large_deletion: bool = False
    caution_paths: tuple[str, ...] = ()
    consumed: bool = field(default=False, compare=False)

    @property
    def allowed(self) -> list[PlanEntry]:
        """Entries that will be deleted."""
        return [e for e in self.entries if e.verdict.is_allowed]

    @property
    def skipped(self) -> list[PlanEntry]:
        """Entries that will never be attempted."""
        return [e for e in self.entries if not e.verdict.is_allowed]


class OutcomeKind(str, Enum):
    """Per-candidate execution outcome."""

    DELETED = "deleted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class OperationOutcome:
    """Result of executing a single plan entry.

    Attributes:
        path: Candidate path the outcome refers to.
        kind: Deleted, skipped, or failed.
        freed_bytes: Bytes freed (or that would be freed in dry-run).
        reason: Skip reason (skipped outcomes only).
        error: Error message (failed outcomes only).
        dry_run: Whether no filesystem mutation took place.
    """

    path: str
    kind: OutcomeKind
    freed_bytes: int = 0
    reason: BlockReason | None = None
    error: str | None = None
    dry_run: bool = False

    @classmethod
    def deleted(cls, path: str, freed_bytes: int, dry_run: bool = False) -> OperationOutcome:
        return cls(path=path, kind=OutcomeKind.DELETED, freed_bytes=freed_bytes, dry_run=dry_run)

    @classmethod
    def skipped(cls, path: str, reason: BlockReason, dry_run: bool = False) -> OperationOutcome:
        return cls(path=path, kind=OutcomeKind.SKIPPED, reason=reason, dry_run=dry_run)

    @classmethod
    def failed(cls, path: str, error: str, dry_run: bool = False) -> OperationOutcome:
        return cls(path=path, kind=OutcomeKind.FAILED, error=error, dry_run=dry_run)


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Aggregated outcome of executing a plan.

    Results combine with :meth:`merge`, which is associative and
    insensitive to the order of failures, so partial results computed
    independently can be folded together in any grouping.

    Attributes:
        freed_bytes: Total bytes freed (or that would be freed in dry-run).
        deleted_count: Number of deleted candidates.
        skipped_count: Number of skipped candidates.
        failed: Tuple of (path, error) pairs.
        dry_run: Whether this was a dry-run.
        outcomes: Every per-candidate outcome.
        elapsed_seconds: Wall time spent executing.
        interrupted: True if execution stopped early on request.
    """

    freed_bytes: int = 0
    deleted_count: int = 0
    skipped_count: int = 0
    failed: tuple[tuple[str, str], ...] = ()
    dry_run: bool = False
    outcomes: tuple[OperationOutcome, ...] = ()
    elapsed_seconds: float = 0.0
    interrupted: bool = False

    @property
    def failed_count(self) -> int:
        """Number of failed candidates."""
        return len(self.failed)

    @property
    def success(self) -> bool:
        """True if no candidate failed."""
        return not self.failed

    @classmethod
    def from_outcome(cls, outcome: OperationOutcome) -> OperationResult:
        """Lift a single outcome into a result."""
        failed: tuple[tuple[str, str], ...] = ()
        if outcome.kind == OutcomeKind.FAILED:
            failed = ((outcome.path, outcome.error or "unknown error"),)
        return cls(
            freed_bytes=outcome.freed_bytes if outcome.kind == OutcomeKind.DELETED else 0,
            deleted_count=1 if outcome.kind == OutcomeKind.DELETED else 0,
            skipped_count=1 if outcome.kind == OutcomeKind.SKIPPED else 0,
            failed=failed,
            dry_run=outcome.dry_run,
            outcomes=(outcome,),
        )

    def merge(self, other: OperationResult) -> OperationResult:
        """Combine two results."""
        return OperationResult(
            freed_bytes=self.freed_bytes + other.freed_bytes,
            deleted_count=self.deleted_count + other.deleted_count,
            skipped_count=self.skipped_count + other.skipped_count,
            failed=self.failed + other.failed,
            dry_run=self.dry_run or other.dry_run,
            outcomes=self.outcomes + other.outcomes,
            elapsed_seconds=max(self.elapsed_seconds, other.elapsed_seconds),
            interrupted=self.interrupted or other.interrupted,
        )
