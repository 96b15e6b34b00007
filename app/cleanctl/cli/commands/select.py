"""Select command for persisting which items run by default."""

from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from cleanctl.cli.types import require_catalog, require_known_names, require_settings
from cleanctl.core.errors import SettingsError
from cleanctl.core.orchestrator import is_enabled
from cleanctl.core.settings import Settings, save_settings
from cleanctl.filesystem.locations import SystemLocations
from cleanctl.utils.formatting import console, print_error, print_success


def select(
    names: Annotated[
        list[str] | None,
        typer.Argument(help="Item names to change."),
    ] = None,
    enable: Annotated[
        bool | None,
        typer.Option(
            "--enable/--disable",
            help="Enable or disable the named items.",
            show_default=False,
        ),
    ] = None,
    reset: Annotated[
        bool,
        typer.Option("--reset", help="Enable every item again."),
    ] = False,
) -> None:
    """Show or change the persisted item selection.

    Without arguments the current selection is shown.

    Examples:
        cleanctl select                          # Show selection
        cleanctl select downloads --disable      # Never empty Downloads
        cleanctl select downloads --enable
        cleanctl select --reset
    """
    settings = require_settings()
    catalog = require_catalog(SystemLocations.detect())

    if reset:
        if names:
            print_error("--reset does not take item names.")
            raise typer.Exit(code=1)
        _save(settings.model_copy(update={"selection": {}}))
        print_success("Selection reset: every item is enabled.")
        return

    if not names:
        _print_selection(catalog.names(), settings.selection)
        return

    if enable is None:
        print_error("Specify --enable or --disable.")
        raise typer.Exit(code=1)

    require_known_names(catalog, names)
    selection = dict(settings.selection)
    for name in names:
        if enable:
            # Absent means enabled
            selection.pop(name, None)
        else:
            selection[name] = False

    _save(settings.model_copy(update={"selection": selection}))
    state = "Enabled" if enable else "Disabled"
    print_success(f"{state}: {', '.join(names)}")


def _save(settings: Settings) -> None:
    try:
        save_settings(settings)
    except SettingsError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e


def _print_selection(names: list[str], selection: dict[str, bool]) -> None:
    table = Table(
        title="Item Selection",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Name", no_wrap=True)
    table.add_column("Enabled", justify="center")

    for name in names:
        enabled = is_enabled(selection, name)
        table.add_row(escape(name), "[success]yes[/]" if enabled else "[muted]no[/]")

    console.print(table)
