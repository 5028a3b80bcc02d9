"""History command for viewing past deletion runs.

This module provides the `mole history` command for viewing the
record of real (non-dry) deletion runs.
"""

import json
from typing import Annotated

import typer

from mole.core.history import HistoryEntry, HistoryStore
from mole.utils.formatting import console, create_table, format_size, print_info

app = typer.Typer(
    name="history",
    help="View history of deletion runs.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show history of deletion runs.

    Examples:
        mole history              # Show last 20 runs
        mole history -n 50        # Show last 50 runs
        mole history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    entries = HistoryStore().entries(limit=limit)

    if not entries:
        print_info("No deletion history recorded.")
        return

    if json_output:
        console.print_json(json.dumps([e.to_dict() for e in entries]))
        return

    _print_table(entries)


def _print_table(entries: list[HistoryEntry]) -> None:
    """Display history entries as a Rich table."""
    table = create_table("Deletion History")
    table.add_column("ID", style="muted", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    table.add_column("Freed", justify="right", style="info")
    table.add_column("Deleted", justify="right")
    table.add_column("Failed", justify="right")

    for entry in entries:
        failed = f"[error]{len(entry.failed)}[/]" if entry.failed else "0"
        date = entry.timestamp[:19].replace("T", " ")
        if entry.interrupted:
            date += " [warning](interrupted)[/]"
        table.add_row(
            entry.id,
            date,
            format_size(entry.freed_bytes),
            str(len(entry.deleted)),
            failed,
        )

    console.print(table)
