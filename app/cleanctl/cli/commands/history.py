"""History command for viewing past cleanup runs.

This module provides the `cleanctl history` command.
"""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.table import Table

from cleanctl.core.state import StateManager
from cleanctl.models.history import RunRecord
from cleanctl.models.result import format_size
from cleanctl.utils.formatting import console, print_info


def history(
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    failed_only: Annotated[
        bool,
        typer.Option("--failed", help="Only show runs with failures."),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show past cleanup runs.

    Examples:
        cleanctl history              # Show last 20 runs
        cleanctl history -n 50        # Show last 50 runs
        cleanctl history --json       # JSON output for scripting
    """
    records = StateManager().get_history(limit=limit, failed_only=failed_only)

    if not records:
        print_info("No history entries found.")
        return

    if json_output:
        console.print(json.dumps([r.to_dict() for r in records], indent=2))
    else:
        _print_table(records)


def _print_table(records: list[RunRecord]) -> None:
    """Print run records as a Rich table."""
    table = Table(
        title="Cleanup History",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", style="dim")
    table.add_column("Timestamp", style="info")
    table.add_column("Category")
    table.add_column("Removed", style="removed", justify="right")
    table.add_column("Freed", justify="right")
    table.add_column("Failed", justify="right")

    for record in records:
        failed = f"[error]{record.items_failed}[/]" if record.items_failed else "0"
        if record.error:
            failed += " [error](aborted)[/]"
        table.add_row(
            record.id[:8],
            _format_timestamp(record.timestamp),
            record.category,
            str(record.items_removed),
            format_size(record.bytes_freed),
            failed,
        )

    console.print(table)


def _format_timestamp(iso_timestamp: str) -> str:
    """Format an ISO 8601 timestamp as local YYYY-MM-DD HH:MM."""
    dt = datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00"))
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")
