"""Shared Rich display functions for plans and results.

Provides reusable table builders and summary printers for displaying
operation plans and execution results across CLI commands (check, rm).
"""

from rich.markup import escape
from rich.table import Table

from mole.safety.models import OperationPlan, OperationResult
from mole.safety.sizing import LARGE_DELETION_THRESHOLD
from mole.utils.formatting import (
    console,
    create_table,
    format_outcome,
    format_size,
    format_verdict,
    print_info,
    print_success,
    print_warning,
    printable_path,
)


def create_plan_table(plan: OperationPlan, dry_run: bool = False) -> Table:
    """Create a Rich table displaying an operation plan.

    Args:
        plan: Plan to display.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table with Path, Origin, Verdict, Size, and Details columns.
    """
    table = create_table("Planned Deletions (Dry Run)" if dry_run else "Planned Deletions")
    table.add_column("Path", no_wrap=True)
    table.add_column("Origin", style="muted")
    table.add_column("Verdict")
    table.add_column("Size", justify="right", style="info")
    table.add_column("Details", style="muted")

    for entry in plan.entries:
        candidate = entry.candidate
        size = format_size(candidate.declared_size)
        if candidate.declared_size is not None and not candidate.size_complete:
            size += " (partial)"
        table.add_row(
            printable_path(candidate.raw_path),
            candidate.origin.value,
            format_verdict(entry.verdict),
            size,
            escape(entry.verdict.detail or ""),
        )

    return table


def print_plan_summary(plan: OperationPlan) -> None:
    """Print totals and the large-deletion and caution warnings for a plan."""
    allowed = len(plan.allowed)
    skipped = len(plan.skipped)
    console.print(
        f"\n[muted]{allowed} path(s) to delete ({format_size(plan.total_allowed_size)}), "
        f"{skipped} skipped[/muted]"
    )
    if plan.large_deletion:
        print_warning(
            f"Large deletion: more than {format_size(LARGE_DELETION_THRESHOLD)} "
            f"({format_size(plan.total_allowed_size)} total)"
        )
    for path in plan.caution_paths:
        print_warning(f"Caution: {printable_path(path)} is a broad system location")


def create_results_table(result: OperationResult) -> Table:
    """Create a Rich table displaying execution outcomes."""
    table = create_table("Deletion Results")
    table.add_column("Path", no_wrap=True)
    table.add_column("Status", width=14)
    table.add_column("Details", style="muted")

    for outcome in result.outcomes:
        status, detail = format_outcome(outcome)
        table.add_row(
            printable_path(outcome.path),
            status,
            escape(detail),
        )

    return table


def print_result_summary(result: OperationResult) -> None:
    """Print a one-line summary of an execution result."""
    freed = format_size(result.freed_bytes)
    if result.dry_run:
        print_info(
            f"Dry-run: {result.deleted_count} path(s) would be deleted, "
            f"freeing {freed}. {result.skipped_count} skipped."
        )
    elif result.failed:
        print_warning(
            f"{result.deleted_count} deleted ({freed} freed), "
            f"{result.skipped_count} skipped, {result.failed_count} failed"
        )
    else:
        print_success(
            f"{result.deleted_count} path(s) deleted, {freed} freed. "
            f"{result.skipped_count} skipped."
        )

    if result.interrupted:
        print_warning("Interrupted: remaining paths were not processed.")
