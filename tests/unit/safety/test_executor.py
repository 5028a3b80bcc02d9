"""Unit tests for plan execution.

Tests deletion of directories, files, and symlinks, dry-run mode,
failure isolation, the root guard, re-checks, and cancellation.
"""

import threading
from pathlib import Path
from unittest.mock import patch

import pytest
from mole.safety.exceptions import FatalAbortError, PlanConsumedError
from mole.safety.executor import Executor
from mole.safety.models import (
    BlockReason,
    OperationPlan,
    OutcomeKind,
    PathCandidate,
    PlanEntry,
    Verdict,
)
from mole.safety.planner import build_plan
from mole.safety.registry import ProtectionRegistry


def _plan(registry: ProtectionRegistry, *paths: Path | str) -> OperationPlan:
    return build_plan([PathCandidate(raw_path=str(p)) for p in paths], registry)


class TestExecutor:
    """Tests for real execution."""

    def test_delete_directory(self, cache_dir: Path, registry: ProtectionRegistry) -> None:
        result = Executor(registry).execute(_plan(registry, cache_dir))

        assert result.deleted_count == 1
        assert result.freed_bytes == 3000
        assert result.dry_run is False
        assert not cache_dir.exists()

    def test_delete_file(self, tmp_path: Path, registry: ProtectionRegistry) -> None:
        target = tmp_path / "stale.log"
        target.write_text("content")

        result = Executor(registry).execute(_plan(registry, target))

        assert result.deleted_count == 1
        assert not target.exists()

    def test_delete_symlink_keeps_target(
        self, tmp_path: Path, registry: ProtectionRegistry
    ) -> None:
        real_dir = tmp_path / "real"
        real_dir.mkdir()
        (real_dir / "data").write_text("keep me")
        link = tmp_path / "link"
        link.symlink_to(real_dir)

        result = Executor(registry).execute(_plan(registry, link))

        assert result.deleted_count == 1
        assert not link.is_symlink()
        assert (real_dir / "data").read_text() == "keep me"

    def test_delete_dead_symlink(self, tmp_path: Path, registry: ProtectionRegistry) -> None:
        link = tmp_path / "dead"
        link.symlink_to(tmp_path / "nowhere")

        result = Executor(registry).execute(_plan(registry, link))

        assert result.deleted_count == 1
        assert not link.is_symlink()

    def test_blocked_entries_are_skipped(
        self, cache_dir: Path, registry: ProtectionRegistry
    ) -> None:
        result = Executor(registry).execute(_plan(registry, "/etc", cache_dir, "relative"))

        assert result.deleted_count == 1
        assert result.skipped_count == 2
        reasons = [o.reason for o in result.outcomes if o.kind == OutcomeKind.SKIPPED]
        assert reasons == [BlockReason.SYSTEM_PROTECTED, BlockReason.MALFORMED]

    def test_whitelisted_entry_untouched(self, cache_dir: Path) -> None:
        registry = ProtectionRegistry.from_patterns([str(cache_dir)])

        result = Executor(registry).execute(_plan(registry, cache_dir))

        assert result.outcomes[0].reason == BlockReason.WHITELISTED
        assert cache_dir.exists()

    def test_vanished_path_fails_without_stopping(
        self, tmp_path: Path, registry: ProtectionRegistry
    ) -> None:
        a = tmp_path / "a"
        a.write_text("a")
        b = tmp_path / "b"
        b.write_text("b")
        c = tmp_path / "c"
        c.write_text("c")
        plan = _plan(registry, a, b, c)

        b.unlink()
        result = Executor(registry).execute(plan)

        assert result.deleted_count == 2
        assert result.failed_count == 1
        assert result.failed[0][0] == str(b)
        assert not a.exists()
        assert not c.exists()

    def test_removal_error_recorded(self, cache_dir: Path, registry: ProtectionRegistry) -> None:
        with patch(
            "mole.safety.executor.shutil.rmtree",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            result = Executor(registry).execute(_plan(registry, cache_dir))

        assert result.failed_count == 1
        assert "Permission denied" in result.failed[0][1]
        assert result.freed_bytes == 0

    def test_outcome_paths_are_raw_paths(
        self, tmp_path: Path, registry: ProtectionRegistry
    ) -> None:
        target = tmp_path / "x"
        target.write_text("x")
        raw = f"{tmp_path}//x"

        result = Executor(registry).execute(_plan(registry, raw))

        assert result.outcomes[0].path == raw

    def test_elapsed_seconds_recorded(self, cache_dir: Path, registry: ProtectionRegistry) -> None:
        result = Executor(registry).execute(_plan(registry, cache_dir))
        assert result.elapsed_seconds >= 0.0


class TestExecutorDryRun:
    """Tests for dry-run execution."""

    def test_dry_run_deletes_nothing(self, cache_dir: Path, registry: ProtectionRegistry) -> None:
        executor = Executor(registry, dry_run=True)
        result = executor.execute(_plan(registry, cache_dir))

        assert executor.dry_run is True
        assert result.dry_run is True
        assert result.deleted_count == 1
        assert result.freed_bytes == 3000
        assert result.outcomes[0].dry_run is True
        assert cache_dir.exists()

    def test_dry_run_skips_same_entries(self, cache_dir: Path) -> None:
        registry = ProtectionRegistry.from_patterns([str(cache_dir / "keep")])
        (cache_dir / "keep").mkdir()
        paths = ("/etc", cache_dir / "keep", cache_dir / "a.bin", "relative")

        dry = Executor(registry, dry_run=True).execute(_plan(registry, *paths))
        real = Executor(registry).execute(_plan(registry, *paths))

        assert [o.reason for o in dry.outcomes] == [o.reason for o in real.outcomes]
        assert dry.freed_bytes == real.freed_bytes


class TestExecutorSafety:
    """Tests for the root guard, re-checks, and plan lifecycle."""

    @pytest.mark.parametrize("dry_run", [True, False])
    def test_root_candidate_aborts(self, cache_dir: Path, dry_run: bool) -> None:
        registry = ProtectionRegistry.from_patterns(["/"])
        plan = _plan(registry, cache_dir, "/")

        with pytest.raises(FatalAbortError) as exc_info:
            Executor(registry, dry_run=dry_run).execute(plan)

        assert exc_info.value.path == "/"
        assert exc_info.value.partial_result.deleted_count == 0
        assert cache_dir.exists()

    def test_symlink_to_root_aborts(
        self, tmp_path: Path, cache_dir: Path, registry: ProtectionRegistry
    ) -> None:
        link = tmp_path / "rootlink"
        link.symlink_to("/")
        plan = _plan(registry, cache_dir, link)

        with pytest.raises(FatalAbortError):
            Executor(registry).execute(plan)

        assert cache_dir.exists()
        assert link.is_symlink()

    def test_swap_to_root_during_execution_aborts(
        self, tmp_path: Path, registry: ProtectionRegistry
    ) -> None:
        first = tmp_path / "first"
        first.write_text("1")
        swapped = tmp_path / "swapped"
        swapped.mkdir()
        last = tmp_path / "last"
        last.write_text("3")
        plan = _plan(registry, first, swapped, last)

        swapped.rmdir()
        swapped.symlink_to("/")

        with pytest.raises(FatalAbortError) as exc_info:
            Executor(registry).execute(plan)

        partial = exc_info.value.partial_result
        assert partial.deleted_count == 1
        assert partial.outcomes[0].path == str(first)
        assert swapped.is_symlink()
        assert last.exists()

    def test_swap_to_symlink_is_skipped(
        self, tmp_path: Path, registry: ProtectionRegistry
    ) -> None:
        target = tmp_path / "cache"
        target.mkdir()
        precious = tmp_path / "precious"
        precious.mkdir()
        (precious / "data").write_text("keep")
        plan = _plan(registry, target)

        target.rmdir()
        target.symlink_to(precious)
        result = Executor(registry).execute(plan)

        assert result.skipped_count == 1
        assert result.outcomes[0].reason == BlockReason.SYSTEM_PROTECTED
        assert (precious / "data").exists()

    def test_plan_executes_once(self, cache_dir: Path, registry: ProtectionRegistry) -> None:
        plan = _plan(registry, cache_dir)
        executor = Executor(registry, dry_run=True)
        executor.execute(plan)

        with pytest.raises(PlanConsumedError):
            executor.execute(plan)

    def test_cancel_stops_before_next_entry(
        self, tmp_path: Path, registry: ProtectionRegistry
    ) -> None:
        files = []
        for name in ("a", "b", "c"):
            f = tmp_path / name
            f.write_text(name)
            files.append(f)
        plan = _plan(registry, *files)
        cancel = threading.Event()
        executor = Executor(registry)
        original = executor._execute_entry

        def execute_then_cancel(entry: PlanEntry):
            outcome = original(entry)
            cancel.set()
            return outcome

        with patch.object(executor, "_execute_entry", side_effect=execute_then_cancel):
            result = executor.execute(plan, cancel=cancel)

        assert result.interrupted is True
        assert result.deleted_count == 1
        assert not files[0].exists()
        assert files[1].exists()
        assert files[2].exists()

    def test_cancel_before_start(self, cache_dir: Path, registry: ProtectionRegistry) -> None:
        cancel = threading.Event()
        cancel.set()

        result = Executor(registry).execute(_plan(registry, cache_dir), cancel=cancel)

        assert result.interrupted is True
        assert result.outcomes == ()
        assert cache_dir.exists()

    def test_handcrafted_blocked_entry_never_removed(
        self, cache_dir: Path, registry: ProtectionRegistry
    ) -> None:
        """Only the verdict decides: a blocked entry is never touched."""
        candidate = PathCandidate(
            raw_path=str(cache_dir),
            canonical_path=str(cache_dir),
            location=str(cache_dir),
        )
        plan = OperationPlan(
            entries=(PlanEntry(candidate, Verdict.blocked(BlockReason.EMPTY)),),
        )

        result = Executor(registry).execute(plan)

        assert result.skipped_count == 1
        assert cache_dir.exists()
