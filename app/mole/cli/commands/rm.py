"""Delete command.

Provides ``mole rm``, which runs the given paths through the safety
engine and deletes the ones that pass. ``--dry-run`` runs the identical
pipeline and stops short of touching the filesystem.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from mole.cli.display import (
    create_plan_table,
    create_results_table,
    print_plan_summary,
    print_result_summary,
)
from mole.cli.types import EXIT_FATAL_ABORT, build_candidates, load_registry, require_config
from mole.core.history import HistoryStore, create_history_entry
from mole.safety.exceptions import FatalAbortError
from mole.safety.executor import Executor
from mole.safety.models import OperationPlan, OperationResult, Origin
from mole.safety.planner import build_plan
from mole.utils.formatting import console, print_error, print_info, print_warning

logger = logging.getLogger(__name__)


def rm(
    paths: Annotated[
        list[str] | None,
        typer.Argument(help="Absolute paths to delete."),
    ] = None,
    from_file: Annotated[
        Path | None,
        typer.Option("--from-file", "-f", help="Read paths from a file, one per line."),
    ] = None,
    origin: Annotated[
        Origin,
        typer.Option("--origin", "-o", help="Origin tag for reporting.", case_sensitive=False),
    ] = Origin.CACHE,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    workers: Annotated[
        int,
        typer.Option("--workers", "-w", min=1, help="Threads used to measure sizes."),
    ] = 4,
) -> None:
    """Delete paths after safety validation."""
    config = require_config()
    candidates = build_candidates(paths, from_file, origin)
    if not candidates:
        print_info("No paths given.")
        return

    registry = load_registry(config)
    plan = build_plan(candidates, registry, max_workers=workers)

    console.print(create_plan_table(plan, dry_run=dry_run))
    print_plan_summary(plan)

    if not plan.allowed:
        print_info("Nothing to delete.")

    # Confirm unless --yes or --dry-run
    if plan.allowed and not dry_run and not yes:
        confirmed = typer.confirm(
            f"\nProceed with deleting {len(plan.allowed)} path(s)?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    executor = Executor(registry, dry_run=dry_run)
    try:
        result = _run_plan(executor, plan)
    except FatalAbortError as e:
        print_error(escape(str(e)))
        _record_history(e.partial_result)
        raise typer.Exit(code=EXIT_FATAL_ABORT) from e

    console.print(create_results_table(result))
    print_result_summary(result)
    _record_history(result)


# === Private helper functions ===


def _run_plan(executor: Executor, plan: OperationPlan) -> OperationResult:
    """Execute a plan, turning Ctrl-C into a graceful stop.

    Execution runs in a worker thread. An interrupt sets the cancel event:
    the path being removed is finished, nothing new is started, and the
    partial result is returned.
    """
    cancel = threading.Event()
    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(executor.execute, plan, cancel)
        while True:
            try:
                return future.result()
            except KeyboardInterrupt:
                if not cancel.is_set():
                    print_warning("Interrupted: finishing the current path...")
                cancel.set()


def _record_history(result: OperationResult) -> None:
    """Record a real run to history (dry-runs and no-op runs are not recorded)."""
    if result.dry_run or not (result.deleted_count or result.failed):
        return

    try:
        HistoryStore().record(create_history_entry(result, command="mole rm"))
        logger.debug("Recorded run to history")
    except (OSError, RuntimeError) as e:
        print_warning(f"Could not record to history: {escape(str(e))}")
