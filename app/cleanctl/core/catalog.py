"""Cleanup catalog loading and resolution.

The catalog is a data table of named cleanup items. The bundled
``cleanctl/data/catalog.toml`` can be extended or overridden by a user
catalog at ``~/.config/cleanctl/catalog.toml``: items with the same name
replace bundled items, new names are appended.

Roots are templates resolved against SystemLocations when the catalog is
loaded; the engine only ever sees concrete CleanupItem definitions.
"""

import logging
import os
import sys
import tomllib
from collections.abc import Iterable, Iterator
from importlib import resources
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from cleanctl.core.errors import CatalogError
from cleanctl.core.paths import get_user_catalog_path
from cleanctl.filesystem.locations import SystemLocations
from cleanctl.models.catalog import Category, CleanupItem, CleanupTarget, ItemKind, WalkMode

logger = logging.getLogger(__name__)


class TargetSpec(BaseModel):
    """One target as written in a catalog file."""

    model_config = ConfigDict(extra="forbid")

    root: Annotated[str, Field(min_length=1, description="Root template")]
    pattern: Annotated[str, Field(min_length=1)] = "*"
    patterns: Annotated[list[str], Field(min_length=1)] | None = None
    recursive: bool = True
    mode: WalkMode = WalkMode.PATTERN

    @model_validator(mode="after")
    def check_patterns(self) -> "TargetSpec":
        """Reject ``pattern`` and ``patterns`` used together."""
        if self.patterns is not None and "pattern" in self.model_fields_set:
            msg = "Use either 'pattern' or 'patterns', not both"
            raise ValueError(msg)
        if self.mode == WalkMode.EMPTY and (self.patterns or self.pattern != "*"):
            msg = "Targets in empty mode cannot have a pattern"
            raise ValueError(msg)
        return self

    def pattern_list(self) -> list[str]:
        """Return every filename pattern of this target."""
        return list(self.patterns) if self.patterns is not None else [self.pattern]


class ItemSpec(BaseModel):
    """One item as written in a catalog file."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(pattern=r"^[a-z0-9][a-z0-9-]*$")]
    label: Annotated[str, Field(min_length=1)]
    category: Category
    kind: ItemKind = ItemKind.FILESYSTEM
    description: str | None = None
    platforms: list[str] = Field(default_factory=list)
    targets: list[TargetSpec] = Field(default_factory=list)

    @field_validator("category")
    @classmethod
    def concrete_category(cls, v: Category) -> Category:
        """Items must belong to a concrete category."""
        if v == Category.ALL:
            msg = "category must be system, software or download"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def check_targets(self) -> "ItemSpec":
        """Filesystem and hibernation items need at least one target."""
        if self.kind in (ItemKind.FILESYSTEM, ItemKind.HIBERNATION) and not self.targets:
            msg = f"{self.kind.value} item {self.name!r} needs at least one target"
            raise ValueError(msg)
        return self

    def supports(self, platform: str) -> bool:
        """Check if the item applies to a platform."""
        return not self.platforms or any(platform.startswith(p) for p in self.platforms)


class CatalogFile(BaseModel):
    """Complete catalog file."""

    model_config = ConfigDict(extra="forbid")

    items: list[ItemSpec] = Field(default_factory=list)

    @field_validator("items")
    @classmethod
    def unique_names(cls, v: list[ItemSpec]) -> list[ItemSpec]:
        """Item names must be unique within one file."""
        seen: set[str] = set()
        for item in v:
            if item.name in seen:
                msg = f"duplicate item name {item.name!r}"
                raise ValueError(msg)
            seen.add(item.name)
        return v


class PathCatalog:
    """Ordered, immutable collection of resolved cleanup items.

    Args:
        items: Items in processing order. Names must be unique.

    Raises:
        CatalogError: If two items share a name.
    """

    def __init__(self, items: Iterable[CleanupItem]) -> None:
        self._items = tuple(items)
        self._by_name: dict[str, CleanupItem] = {}
        for item in self._items:
            if item.name in self._by_name:
                msg = f"Duplicate catalog item {item.name!r}"
                raise CatalogError(msg)
            self._by_name[item.name] = item

    def __iter__(self) -> Iterator[CleanupItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def items(self) -> tuple[CleanupItem, ...]:
        """All items in processing order."""
        return self._items

    def items_for(self, category: Category) -> list[CleanupItem]:
        """Resolve a category to its ordered item list.

        Args:
            category: Requested category; ``ALL`` selects every item.

        Returns:
            Items belonging to the category, in catalog order.
        """
        return [item for item in self._items if category.includes(item.category)]

    def get(self, name: str) -> CleanupItem | None:
        """Look up an item by name."""
        return self._by_name.get(name)

    def names(self) -> list[str]:
        """Return all item names in catalog order."""
        return [item.name for item in self._items]


def get_bundled_catalog_path() -> Path:
    """Get the bundled catalog path.

    Returns:
        Path to the bundled data/catalog.toml.
    """
    return resources.files("cleanctl.data").joinpath("catalog.toml")  # type: ignore[return-value]


def read_catalog_file(path: Path) -> CatalogFile:
    """Read and validate one catalog file.

    Args:
        path: Catalog TOML file.

    Returns:
        Validated CatalogFile.

    Raises:
        CatalogError: If the file cannot be read, parsed or validated.
    """
    try:
        with open(path, "rb") as f:
            data: dict[str, Any] = tomllib.load(f)
    except OSError as e:
        msg = f"Cannot read catalog {path}: {e}"
        raise CatalogError(msg) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in catalog {path}: {e}"
        raise CatalogError(msg) from e

    try:
        return CatalogFile.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid catalog {path}: {e}"
        raise CatalogError(msg) from e


def merge_specs(base: list[ItemSpec], overrides: list[ItemSpec]) -> list[ItemSpec]:
    """Merge override items into base items by name.

    Overrides with a known name replace the base item in place; unknown
    names are appended in override order.
    """
    merged = list(base)
    index = {spec.name: i for i, spec in enumerate(merged)}
    for spec in overrides:
        if spec.name in index:
            merged[index[spec.name]] = spec
        else:
            index[spec.name] = len(merged)
            merged.append(spec)
    return merged


def resolve_item(spec: ItemSpec, locations: SystemLocations) -> CleanupItem:
    """Resolve an item's root templates into concrete targets.

    Targets whose placeholders cannot be resolved are dropped. Targets
    that resolve to the same root, pattern and mode are kept once.

    Args:
        spec: Item as written in the catalog.
        locations: Special folders of the running system.

    Returns:
        Immutable CleanupItem.

    Raises:
        CatalogError: If a root uses an unknown placeholder.
    """
    targets: list[CleanupTarget] = []
    seen: set[tuple[str, str, bool, WalkMode]] = set()

    for target in spec.targets:
        root = locations.expand(target.root)
        if root is None:
            logger.debug("Dropping target %s of %s", target.root, spec.name)
            continue
        for pattern in target.pattern_list():
            key = (os.path.normcase(root), pattern.lower(), target.recursive, target.mode)
            if key in seen:
                continue
            seen.add(key)
            targets.append(
                CleanupTarget(
                    root=root,
                    pattern=pattern,
                    recursive=target.recursive,
                    mode=target.mode,
                )
            )

    return CleanupItem(
        name=spec.name,
        label=spec.label,
        category=spec.category,
        kind=spec.kind,
        targets=tuple(targets),
        description=spec.description,
    )


def load_catalog(
    path: Path | None = None,
    *,
    user_path: Path | None = None,
    locations: SystemLocations | None = None,
    platform: str | None = None,
) -> PathCatalog:
    """Load, merge and resolve the cleanup catalog.

    Args:
        path: Base catalog. Defaults to the bundled catalog.
        user_path: Override catalog. Defaults to ~/.config/cleanctl/catalog.toml;
            a missing file is ignored.
        locations: Special folders. Defaults to detection from the environment.
        platform: Platform identifier. Defaults to ``sys.platform``.

    Returns:
        PathCatalog with the items that apply to the platform.

    Raises:
        CatalogError: If a catalog file is invalid or a root cannot be resolved.
    """
    platform = sys.platform if platform is None else platform
    locations = SystemLocations.detect(platform=platform) if locations is None else locations

    specs = read_catalog_file(get_bundled_catalog_path() if path is None else path).items

    user_path = get_user_catalog_path() if user_path is None else user_path
    if user_path.is_file():
        logger.debug("Loading user catalog %s", user_path)
        specs = merge_specs(specs, read_catalog_file(user_path).items)

    return PathCatalog(
        resolve_item(spec, locations) for spec in specs if spec.supports(platform)
    )
