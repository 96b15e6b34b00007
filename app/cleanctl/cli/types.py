"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from collections.abc import Iterable, Mapping
from enum import Enum

import typer
from rich.markup import escape

from cleanctl.core.catalog import PathCatalog, load_catalog
from cleanctl.core.errors import CatalogError, SettingsError
from cleanctl.core.settings import Settings, load_settings
from cleanctl.filesystem.locations import SystemLocations
from cleanctl.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options for listing commands."""

    TABLE = "table"
    JSON = "json"


def require_catalog(locations: SystemLocations) -> PathCatalog:
    """Load the catalog or exit with an error message.

    Args:
        locations: Special folders of the running system.

    Returns:
        Resolved PathCatalog.

    Raises:
        typer.Exit: If the catalog cannot be loaded.
    """
    try:
        return load_catalog(locations=locations)
    except CatalogError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e


def require_settings() -> Settings:
    """Load the settings file strictly or exit with an error message.

    Used by commands that delete files or rewrite the settings file.

    Raises:
        typer.Exit: If the file exists but is unreadable or invalid.
    """
    try:
        return load_settings(strict=True)
    except SettingsError as e:
        print_error(escape(str(e)))
        print_error("Fix or remove the settings file and try again.")
        raise typer.Exit(code=1) from e


def require_known_names(catalog: PathCatalog, names: Iterable[str]) -> None:
    """Exit with an error if any name is not in the catalog."""
    unknown = sorted({name for name in names if name not in catalog})
    if unknown:
        print_error(f"Unknown item(s): {', '.join(unknown)}")
        print_error(f"Known items: {', '.join(catalog.names())}")
        raise typer.Exit(code=1)


def build_selection(
    catalog: PathCatalog,
    persisted: Mapping[str, bool],
    only: list[str] | None = None,
    skip: list[str] | None = None,
) -> dict[str, bool]:
    """Combine the persisted selection with command-line flags.

    ``--only`` disables every item that is not named; ``--skip`` disables
    the named items. Both win over the persisted selection.

    Args:
        catalog: Resolved catalog.
        persisted: Selection map from the settings file.
        only: Names to restrict the run to.
        skip: Names to leave out.

    Returns:
        Selection map covering every catalog item.
    """
    selection = {name: bool(persisted.get(name, True)) for name in catalog.names()}
    if only:
        wanted = set(only)
        selection = {name: name in wanted for name in selection}
    for name in skip or []:
        selection[name] = False
    return selection
