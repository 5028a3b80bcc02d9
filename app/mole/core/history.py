"""Deletion history.

Each real (non-dry) run is appended as one JSON line to
~/.local/state/mole/history.jsonl, giving an audit trail of what was
removed. History is a record only; deletions cannot be undone.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from mole.core.paths import ensure_state_dir, get_state_dir
from mole.safety.models import OperationResult, OutcomeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Record of one deletion run.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the run finished (ISO 8601, UTC).
        command: Command that triggered the run.
        freed_bytes: Total bytes freed.
        deleted: Paths that were deleted.
        failed: Paths that could not be deleted, with the error.
        interrupted: Whether the run was stopped early.
        metadata: Additional context (skipped count, ...).
    """

    id: str
    timestamp: str
    command: str
    freed_bytes: int
    deleted: tuple[str, ...] = ()
    failed: tuple[tuple[str, str], ...] = ()
    interrupted: bool = False
    metadata: dict[str, Any] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.id:
            msg = "History entry ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "command": self.command,
            "freed_bytes": self.freed_bytes,
            "deleted": list(self.deleted),
            "failed": [list(pair) for pair in self.failed],
            "interrupted": self.interrupted,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            command=data["command"],
            freed_bytes=int(data["freed_bytes"]),
            deleted=tuple(data.get("deleted", [])),
            failed=tuple((str(p), str(e)) for p, e in data.get("failed", [])),
            interrupted=bool(data.get("interrupted", False)),
            metadata=data.get("metadata", {}),
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> HistoryEntry:
        """Deserialize from a JSON line."""
        return cls.from_dict(json.loads(line.strip()))


def create_history_entry(result: OperationResult, command: str) -> HistoryEntry:
    """Create a history entry from an execution result.

    Args:
        result: Result of a real (non-dry) run.
        command: Command that triggered the run.

    Returns:
        New HistoryEntry with a fresh ID and current UTC timestamp.

    Raises:
        ValueError: If the result is from a dry-run.
    """
    if result.dry_run:
        msg = "Dry-run results are not recorded to history"
        raise ValueError(msg)

    deleted = tuple(o.path for o in result.outcomes if o.kind == OutcomeKind.DELETED)
    return HistoryEntry(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(UTC).isoformat(),
        command=command,
        freed_bytes=result.freed_bytes,
        deleted=deleted,
        failed=result.failed,
        interrupted=result.interrupted,
        metadata={"skipped": result.skipped_count},
    )


class HistoryStore:
    """Append-only JSONL store for deletion history.

    Storage location: ~/.local/state/mole/history.jsonl
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize HistoryStore.

        Args:
            state_dir: Optional override for state directory.
                      Default: ~/.local/state/mole
        """
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        """Path to the history file."""
        return self._state_dir / self.HISTORY_FILENAME

    def record(self, entry: HistoryEntry) -> None:
        """Append an entry to the history file.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        if self._state_dir == get_state_dir():
            ensure_state_dir()
        else:
            self._state_dir.mkdir(parents=True, exist_ok=True)

        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(entry.to_json_line() + "\n")
            f.flush()

    def entries(self, limit: int | None = None) -> list[HistoryEntry]:
        """Read history entries, newest first.

        Corrupt lines are skipped with a warning.

        Args:
            limit: Maximum number of entries to return (None for all).

        Returns:
            List of HistoryEntry, newest first. Empty if no history exists.
        """
        if not self.history_path.exists():
            return []

        entries: list[HistoryEntry] = []
        with self.history_path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(HistoryEntry.from_json_line(line))
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                    logger.warning("Skipping corrupt history line %d: %s", line_num, e)

        entries.reverse()
        if limit is not None:
            return entries[:limit]
        return entries
