"""Allow running mole as ``python -m mole``."""

from mole.cli.main import app

app(prog_name="mole")
