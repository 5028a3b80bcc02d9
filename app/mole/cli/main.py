"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from mole import __version__
from mole.cli.commands import check, config, history, rm, whitelist
from mole.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="mole",
    help="Safe disk cleanup: every deletion is validated before anything is removed.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"mole version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr.

    Args:
        verbose: Show DEBUG records instead of warnings only.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, markup=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
) -> None:
    """mole - Safe disk cleanup for Linux.

    Paths are canonicalized, checked against the system denylist and your
    whitelist, and sized before anything is deleted. Use --dry-run to
    preview exactly what a run would do.
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# Register commands
app.command("rm")(rm.rm)
app.command("check")(check.check)
app.add_typer(whitelist.app, name="whitelist")
app.add_typer(config.app, name="config")
app.add_typer(history.app, name="history")


if __name__ == "__main__":
    app()
