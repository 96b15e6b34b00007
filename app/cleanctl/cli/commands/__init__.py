"""CLI commands for cleanctl.

This package contains all subcommand implementations.
"""

from cleanctl.cli.commands import check, history, items, run, select

__all__ = ["check", "history", "items", "run", "select"]
