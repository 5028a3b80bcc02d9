"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from mole.safety.models import OutcomeKind

if TYPE_CHECKING:
    from mole.safety.models import OperationOutcome, Verdict

# Semantic styles shared by every command
THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
        "verdict.allowed": "#03b971",
        "verdict.blocked": "#f53263",
        "verdict.whitelisted": "#0e8ac8",
    }
)


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=THEME, color_system=_detect_color_system())
err_console = Console(theme=THEME, stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int | None) -> str:
    """Format byte count as human-readable string (binary units)."""
    if size_bytes is None:
        return "-"
    if size_bytes == 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TiB"


def printable_path(path: str) -> str:
    """Escape a path for Rich output, showing control characters as escapes."""
    shown = "".join(c if c.isprintable() else repr(c)[1:-1] for c in path)
    return escape(shown)


def format_verdict(verdict: Verdict) -> str:
    """Format a verdict with color markup."""
    return f"[verdict.{verdict.kind.value}]{verdict.describe()}[/]"


def format_outcome(outcome: OperationOutcome) -> tuple[str, str]:
    """Format an outcome as (status, detail) with color markup.

    Args:
        outcome: Outcome to format.

    Returns:
        Tuple of status label and detail text.
    """
    if outcome.kind == OutcomeKind.DELETED:
        if outcome.dry_run:
            return "[info]would delete[/]", format_size(outcome.freed_bytes)
        return "[success]deleted[/]", format_size(outcome.freed_bytes)
    if outcome.kind == OutcomeKind.SKIPPED:
        reason = outcome.reason.value if outcome.reason else "-"
        return "[warning]skipped[/]", reason
    return "[error]failed[/]", outcome.error or "Unknown error"


def create_table(title: str) -> Table:
    """Create a pre-configured table for path listings."""
    return Table(
        title=title,
        show_header=True,
        header_style="header",
        border_style="border",
        show_lines=False,
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
