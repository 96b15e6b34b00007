"""Items command for listing the cleanup catalog."""

import json
from typing import Annotated, Any

import typer
from rich.markup import escape
from rich.table import Table

from cleanctl.cli.display import describe_target_count
from cleanctl.cli.types import OutputFormat, require_catalog
from cleanctl.core.orchestrator import is_enabled
from cleanctl.core.settings import load_settings
from cleanctl.filesystem.locations import SystemLocations
from cleanctl.models.catalog import Category, CleanupItem
from cleanctl.utils.formatting import console, print_info


def items(
    category: Annotated[
        Category,
        typer.Argument(help="Category to list.", case_sensitive=False),
    ] = Category.ALL,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    show_targets: Annotated[
        bool,
        typer.Option("--targets", "-t", help="Show resolved locations."),
    ] = False,
) -> None:
    """List cleanup items with their locations and selection state."""
    settings = load_settings()
    catalog = require_catalog(SystemLocations.detect())
    selected = catalog.items_for(category)

    if not selected:
        print_info("No cleanup items for this platform.")
        return

    if output_format == OutputFormat.JSON:
        data = [_item_to_dict(item, is_enabled(settings.selection, item.name)) for item in selected]
        console.print_json(json.dumps(data))
        return

    table = Table(
        title="Cleanup Items",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Name", no_wrap=True)
    table.add_column("Label")
    table.add_column("Category", style="muted")
    table.add_column("Scope", style="muted")

    for item in selected:
        enabled = is_enabled(settings.selection, item.name)
        icon = "[success]●[/]" if enabled else "[muted]○[/]"
        scope = describe_target_count(item)
        if show_targets and item.targets:
            scope = "\n".join(
                escape(f"{t.root} [{t.pattern}]" if t.pattern != "*" else t.root)
                for t in item.targets
            )
        table.add_row(icon, item.name, escape(item.label), item.category.value, scope)

    console.print(table)
    disabled = sum(1 for item in selected if not is_enabled(settings.selection, item.name))
    console.print(f"\n[dim]{len(selected)} item(s), {disabled} disabled[/dim]")


def _item_to_dict(item: CleanupItem, enabled: bool) -> dict[str, Any]:
    return {
        "name": item.name,
        "label": item.label,
        "category": item.category.value,
        "kind": item.kind.value,
        "enabled": enabled,
        "description": item.description,
        "targets": [
            {
                "root": t.root,
                "pattern": t.pattern,
                "recursive": t.recursive,
                "mode": t.mode.value,
            }
            for t in item.targets
        ],
    }
