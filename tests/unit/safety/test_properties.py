"""End-to-end safety guarantees of the validate, plan, execute pipeline.

Each test drives real files under a temporary directory through
build_plan and Executor, the way ``mole rm`` does.
"""

from pathlib import Path

import pytest
from mole.safety.exceptions import FatalAbortError
from mole.safety.executor import Executor
from mole.safety.models import BlockReason, Origin, OutcomeKind, PathCandidate, VerdictKind
from mole.safety.planner import build_plan
from mole.safety.registry import ProtectionRegistry
from mole.safety.sizing import LARGE_DELETION_THRESHOLD

GIB = 1024**3


@pytest.fixture
def cleanup_scene(home_dir: Path) -> dict[str, Path]:
    """A 2 GiB cache directory and a whitelisted document folder."""
    cache = home_dir / ".cache" / "app"
    cache.mkdir(parents=True)
    with (cache / "blob.bin").open("wb") as f:
        f.truncate(2 * GIB)

    important = home_dir / "Documents" / "important"
    important.mkdir(parents=True)
    (important / "thesis.odt").write_text("do not delete")

    return {"home": home_dir, "cache": cache, "important": important}


def _scene_candidates(scene: dict[str, Path]) -> list[PathCandidate]:
    return [
        PathCandidate(raw_path=str(scene["cache"]), origin=Origin.CACHE),
        PathCandidate(raw_path="/etc", origin=Origin.CACHE),
        PathCandidate(raw_path=str(scene["important"]), origin=Origin.CACHE),
    ]


class TestCleanupScenario:
    """Dry-run over a mixed candidate set."""

    def test_dry_run_report(self, cleanup_scene: dict[str, Path], fs_snapshot) -> None:
        registry = ProtectionRegistry.from_patterns(
            ["~/Documents/important"], home=str(cleanup_scene["home"])
        )
        before = fs_snapshot(cleanup_scene["home"])

        plan = build_plan(_scene_candidates(cleanup_scene), registry, max_workers=4)
        result = Executor(registry, dry_run=True).execute(plan)

        assert plan.large_deletion is True
        assert plan.total_allowed_size == 2 * GIB

        cache_out, etc_out, important_out = result.outcomes
        assert cache_out.kind == OutcomeKind.DELETED
        assert cache_out.freed_bytes == 2 * GIB
        assert etc_out.kind == OutcomeKind.SKIPPED
        assert etc_out.reason == BlockReason.SYSTEM_PROTECTED
        assert important_out.kind == OutcomeKind.SKIPPED
        assert important_out.reason == BlockReason.WHITELISTED

        assert fs_snapshot(cleanup_scene["home"]) == before

    def test_real_run_matches_dry_run(self, cleanup_scene: dict[str, Path]) -> None:
        registry = ProtectionRegistry.from_patterns(
            ["~/Documents/important"], home=str(cleanup_scene["home"])
        )

        dry = Executor(registry, dry_run=True).execute(
            build_plan(_scene_candidates(cleanup_scene), registry)
        )
        real = Executor(registry).execute(build_plan(_scene_candidates(cleanup_scene), registry))

        def partition(result):
            return [(o.path, o.kind, o.reason) for o in result.outcomes]

        assert partition(dry) == partition(real)
        assert dry.freed_bytes == real.freed_bytes
        assert not cleanup_scene["cache"].exists()
        assert (cleanup_scene["important"] / "thesis.odt").exists()


class TestDenylistGuarantees:
    """System paths stay protected whatever else is configured."""

    @pytest.mark.parametrize("dry_run", [True, False])
    def test_whitelisted_system_paths_stay_protected(self, dry_run: bool) -> None:
        registry = ProtectionRegistry.from_patterns(["/etc", "/usr/lib", "/boot"])
        candidates = [
            PathCandidate(raw_path=p) for p in ("/etc", "/etc/mole-test-missing", "/usr/lib")
        ]

        plan = build_plan(candidates, registry)
        result = Executor(registry, dry_run=dry_run).execute(plan)

        assert all(e.verdict.reason == BlockReason.SYSTEM_PROTECTED for e in plan.entries)
        assert result.deleted_count == 0
        assert result.skipped_count == 3

    def test_symlink_into_system_dir_blocked(
        self, tmp_path: Path, registry: ProtectionRegistry
    ) -> None:
        link = tmp_path / "looks-like-cache"
        link.symlink_to("/etc")

        plan = build_plan([PathCandidate(raw_path=str(link))], registry)
        result = Executor(registry).execute(plan)

        assert plan.entries[0].verdict.reason == BlockReason.SYMLINK_REDIRECT
        assert result.outcomes[0].reason == BlockReason.SYMLINK_REDIRECT
        assert link.is_symlink()

    @pytest.mark.parametrize("dry_run", [True, False])
    def test_root_aborts_whole_plan(self, cache_dir: Path, dry_run: bool) -> None:
        registry = ProtectionRegistry.from_patterns(["/"])
        candidates = [PathCandidate(raw_path=str(cache_dir)), PathCandidate(raw_path="//")]

        plan = build_plan(candidates, registry)

        with pytest.raises(FatalAbortError):
            Executor(registry, dry_run=dry_run).execute(plan)
        assert cache_dir.exists()


class TestFailureIsolation:
    """One failing path does not affect the others."""

    def test_other_candidates_still_deleted(
        self, tmp_path: Path, registry: ProtectionRegistry
    ) -> None:
        dirs = []
        for name in ("one", "two", "three", "four"):
            d = tmp_path / name
            d.mkdir()
            (d / "f").write_bytes(b"x" * 100)
            dirs.append(d)
        plan = build_plan([PathCandidate(raw_path=str(d)) for d in dirs], registry)

        # Vanishes between planning and execution
        (dirs[1] / "f").unlink()
        dirs[1].rmdir()
        result = Executor(registry).execute(plan)

        assert result.deleted_count == 3
        assert result.freed_bytes == 300
        assert [path for path, _ in result.failed] == [str(dirs[1])]
        assert not any(d.exists() for d in dirs)


class TestLargeDeletionBoundary:
    """The advisory flag trips strictly above 1 GiB."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (LARGE_DELETION_THRESHOLD - 1, False),
            (LARGE_DELETION_THRESHOLD + 1, True),
        ],
    )
    def test_boundary(
        self, tmp_path: Path, registry: ProtectionRegistry, size: int, expected: bool
    ) -> None:
        f = tmp_path / "blob"
        with f.open("wb") as fh:
            fh.truncate(size)

        plan = build_plan([PathCandidate(raw_path=str(f))], registry)

        assert plan.large_deletion is expected
        assert plan.entries[0].verdict.kind == VerdictKind.ALLOWED
