"""Exceptions raised by the deletion safety engine.

Per-candidate rejections never escape the engine: the validator turns
:class:`UnsafePathError` into a blocked verdict. Only
:class:`FatalAbortError` stops a whole plan.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mole.safety.models import BlockReason, OperationResult


class SafetyError(Exception):
    """Base class for safety engine errors."""


class UnsafePathError(SafetyError):
    """A raw path failed canonicalization.

    Attributes:
        path: The offending raw path.
        reason: Block reason to record for the candidate.
        detail: Human-readable explanation.
        canonical: Real path, when resolution got that far.
    """

    def __init__(
        self,
        path: str,
        reason: BlockReason,
        detail: str,
        canonical: str | None = None,
    ) -> None:
        self.path = path
        self.reason = reason
        self.detail = detail
        self.canonical = canonical
        super().__init__(f"{detail}: {path!r}")


class FatalAbortError(SafetyError):
    """A candidate resolved to the filesystem root.

    The whole plan is abandoned. ``partial_result`` holds the outcomes
    recorded before the abort.
    """

    def __init__(self, path: str, partial_result: OperationResult) -> None:
        self.path = path
        self.partial_result = partial_result
        super().__init__(f"Refusing to continue: {path!r} resolves to the filesystem root")


class PlanConsumedError(SafetyError):
    """An operation plan was executed more than once."""
