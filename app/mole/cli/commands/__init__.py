"""CLI commands for mole.

This package contains all subcommand implementations.
"""

from mole.cli.commands import check, config, history, rm, whitelist

__all__ = ["check", "config", "history", "rm", "whitelist"]
