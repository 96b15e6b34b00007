"""Check command for inspecting how paths would be treated."""

import os
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from cleanctl.core.orchestrator import build_classifier
from cleanctl.core.settings import load_settings
from cleanctl.filesystem.locations import SystemLocations
from cleanctl.filesystem.locks import is_file_locked
from cleanctl.utils.formatting import console


def check(
    paths: Annotated[
        list[Path],
        typer.Argument(help="Paths to check."),
    ],
) -> None:
    """Show whether paths are protected or locked.

    Nothing is modified. A critical path is never deleted by any cleanup
    item; a locked file is skipped and counted as a failure.
    """
    classifier = build_classifier(load_settings(), SystemLocations.detect())

    table = Table(
        title="Path Check",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", no_wrap=True)
    table.add_column("Verdict", no_wrap=True)
    table.add_column("Locked", justify="center")
    table.add_column("Reason", style="muted")

    for path in paths:
        absolute = os.path.abspath(os.path.expanduser(str(path)))
        reason = classifier.explain(absolute)
        verdict = "[critical]critical[/]" if reason else "[success]safe[/]"

        if os.path.isfile(absolute):
            locked = "[warning]yes[/]" if is_file_locked(absolute) else "no"
        elif os.path.lexists(absolute):
            locked = "-"
        else:
            locked = "[muted]missing[/]"

        table.add_row(escape(absolute), verdict, locked, escape(reason or ""))

    console.print(table)
