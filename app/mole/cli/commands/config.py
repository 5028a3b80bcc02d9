"""Configuration commands.

Provides commands to show, initialize, and locate config.toml.
"""

from typing import Annotated

import tomli_w
import typer
from rich.markup import escape

from mole.cli.types import require_config
from mole.core.config import ConfigError, MoleConfig, save_config
from mole.core.paths import get_config_path
from mole.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage mole configuration.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show the effective configuration as TOML."""
    config = require_config()
    console.print(tomli_w.dumps(config.model_dump()), markup=False, highlight=False)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    path = get_config_path()
    if path.exists() and not force:
        print_info(f"Config already exists: {escape(str(path))} (use --force to overwrite)")
        return

    try:
        written = save_config(MoleConfig())
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {escape(str(written))}")


@app.command("path")
def show_path() -> None:
    """Print the config file location."""
    typer.echo(str(get_config_path()))
