"""Whitelist management commands.

Provides commands to list, add, and remove user whitelist entries.
Whitelisted paths are never deleted, but the whitelist cannot unblock
a system path.
"""

from typing import Annotated

import typer
from rich.markup import escape

from mole.cli.types import load_registry, require_config
from mole.core.paths import get_whitelist_path
from mole.safety.registry import expand_pattern, load_whitelist_file
from mole.utils.formatting import console, create_table, print_error, print_info, print_success

app = typer.Typer(
    help="Manage paths protected from deletion.",
    no_args_is_help=True,
)

_HEADER = "# mole whitelist: one path per line, ~ expands to your home directory\n"


@app.command("list")
def list_entries() -> None:
    """List whitelist entries from the whitelist file and config."""
    config = require_config()
    file_patterns = load_whitelist_file()

    if not file_patterns and not config.whitelist:
        print_info("Whitelist is empty.")
        return

    table = create_table("Whitelist")
    table.add_column("Pattern", no_wrap=True)
    table.add_column("Expands To")
    table.add_column("Source", style="muted")

    for source, patterns in (("whitelist", file_patterns), ("config", config.whitelist)):
        for pattern in patterns:
            expanded = expand_pattern(pattern)
            table.add_row(
                escape(pattern),
                escape(expanded) if expanded else "[error]invalid[/]",
                source,
            )

    console.print(table)

    registry = load_registry(config)
    console.print(f"\n[muted]{len(registry.whitelist_entries)} effective entries[/muted]")


@app.command()
def add(
    pattern: Annotated[str, typer.Argument(help="Path to protect (may start with ~).")],
) -> None:
    """Add a path to the whitelist file."""
    pattern = pattern.strip()
    if expand_pattern(pattern) is None:
        print_error(f"Not an absolute path: {escape(pattern)}")
        raise typer.Exit(code=1)

    if pattern in load_whitelist_file():
        print_info(f"Already whitelisted: {escape(pattern)}")
        return

    path = get_whitelist_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        new_file = not path.exists()
        with path.open("a", encoding="utf-8") as f:
            if new_file:
                f.write(_HEADER)
            f.write(pattern + "\n")
    except OSError as e:
        print_error(f"Failed to update {escape(str(path))}: {escape(str(e))}")
        raise typer.Exit(code=1) from e

    print_success(f"Whitelisted: {escape(pattern)}")


@app.command()
def remove(
    pattern: Annotated[str, typer.Argument(help="Whitelist entry to remove.")],
) -> None:
    """Remove a path from the whitelist file."""
    pattern = pattern.strip()
    path = get_whitelist_path()
    if pattern not in load_whitelist_file(path):
        print_error(f"Not in whitelist: {escape(pattern)}")
        raise typer.Exit(code=1)

    try:
        lines = path.read_text(encoding="utf-8").splitlines(keepends=True)
        kept = [line for line in lines if line.strip() != pattern]
        path.write_text("".join(kept), encoding="utf-8")
    except OSError as e:
        print_error(f"Failed to update {escape(str(path))}: {escape(str(e))}")
        raise typer.Exit(code=1) from e

    print_success(f"Removed from whitelist: {escape(pattern)}")


@app.command("path")
def show_path() -> None:
    """Print the whitelist file location."""
    typer.echo(str(get_whitelist_path()))
