"""Run command for cleaning a category.

This module provides the `cleanctl run` command: it confirms the plan,
streams the cleanup log, prints per-item results and records the run in
the history file.
"""

from typing import Annotated

import typer
from rich.markup import escape

from cleanctl.cli.display import create_plan_table, create_results_table, print_run_summary
from cleanctl.cli.types import (
    build_selection,
    require_catalog,
    require_known_names,
    require_settings,
)
from cleanctl.core.orchestrator import is_enabled, run_cleanup
from cleanctl.core.state import StateManager, record_from_report
from cleanctl.filesystem.locations import SystemLocations
from cleanctl.models.catalog import Category
from cleanctl.utils.formatting import console, print_info, print_warning


def run(
    ctx: typer.Context,
    category: Annotated[
        Category,
        typer.Argument(
            help="Category to clean.",
            case_sensitive=False,
        ),
    ] = Category.ALL,
    only: Annotated[
        list[str] | None,
        typer.Option(
            "--only",
            "-o",
            help="Clean only this item (repeatable).",
        ),
    ] = None,
    skip: Annotated[
        list[str] | None,
        typer.Option(
            "--skip",
            "-s",
            help="Leave this item out (repeatable).",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Delete caches, temporary files and downloads.

    Items disabled with `cleanctl select` are skipped unless named
    with --only.

    Examples:
        cleanctl run                     # Clean every enabled item
        cleanctl run download            # Clean download items only
        cleanctl run --only chrome-cache --yes
        cleanctl run system --skip recycle-bin
    """
    quiet = bool((ctx.obj or {}).get("quiet"))
    settings = require_settings()
    locations = SystemLocations.detect()
    catalog = require_catalog(locations)
    require_known_names(catalog, [*(only or []), *(skip or [])])

    selection = build_selection(catalog, settings.selection, only, skip)
    planned = [item for item in catalog.items_for(category) if is_enabled(selection, item.name)]

    if planned and not yes:
        console.print(create_plan_table(planned))
        confirmed = typer.confirm(
            f"\nDelete files for {len(planned)} item(s)?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    def _stream(line: str) -> None:
        console.print(f"[muted]{escape(line)}[/]")

    report = run_cleanup(
        category,
        selection,
        catalog=catalog,
        settings=settings,
        locations=locations,
        listener=None if quiet else _stream,
    )

    if report.items and not quiet:
        console.print(create_results_table(report))
    print_run_summary(report)

    try:
        StateManager().record_run(record_from_report(report))
    except (OSError, RuntimeError) as e:
        print_warning(f"Could not record to history: {e}")

    if report.has_failures:
        raise typer.Exit(code=1)
