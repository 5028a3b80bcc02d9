"""Check command.

Provides ``mole check``, which shows the verdict the safety engine
would assign to each path without deleting anything.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from mole.cli.display import create_plan_table, print_plan_summary
from mole.cli.types import build_candidates, load_registry, require_config
from mole.safety.models import OperationPlan, Origin
from mole.safety.planner import build_plan
from mole.utils.formatting import console, print_info


def check(
    paths: Annotated[
        list[str] | None,
        typer.Argument(help="Paths to check."),
    ] = None,
    from_file: Annotated[
        Path | None,
        typer.Option("--from-file", "-f", help="Read paths from a file, one per line."),
    ] = None,
    origin: Annotated[
        Origin,
        typer.Option("--origin", "-o", help="Origin tag for reporting.", case_sensitive=False),
    ] = Origin.CACHE,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
    workers: Annotated[
        int,
        typer.Option("--workers", "-w", min=1, help="Threads used to measure sizes."),
    ] = 4,
) -> None:
    """Show what the safety engine decides for each path."""
    config = require_config()
    candidates = build_candidates(paths, from_file, origin)
    if not candidates:
        print_info("No paths given.")
        return

    plan = build_plan(candidates, load_registry(config), max_workers=workers)

    if json_output:
        _print_json(plan)
        return

    console.print(create_plan_table(plan))
    print_plan_summary(plan)


def _print_json(plan: OperationPlan) -> None:
    """Display a plan as JSON."""
    data = {
        "total_allowed_size": plan.total_allowed_size,
        "large_deletion": plan.large_deletion,
        "caution_paths": list(plan.caution_paths),
        "entries": [
            {
                "path": entry.candidate.raw_path,
                "canonical_path": entry.candidate.canonical_path,
                "origin": entry.candidate.origin.value,
                "verdict": entry.verdict.kind.value,
                "reason": entry.verdict.reason.value if entry.verdict.reason else None,
                "detail": entry.verdict.detail,
                "size_bytes": entry.candidate.declared_size,
                "size_complete": entry.candidate.size_complete,
            }
            for entry in plan.entries
        ],
    }
    console.print_json(json.dumps(data))
