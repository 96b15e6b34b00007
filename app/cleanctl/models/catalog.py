"""Catalog domain models.

Defines the categories, traversal modes and immutable item definitions
that the cleanup engine consumes as injected configuration.
"""

from dataclasses import dataclass
from enum import Enum


class Category(str, Enum):
    """Grouping of cleanup items.

    Attributes:
        ALL: Every category.
        SYSTEM: OS temp files, logs, browser caches and system stores.
        SOFTWARE: Application caches.
        DOWNLOAD: Download folders and partial downloads.
    """

    ALL = "all"
    SYSTEM = "system"
    SOFTWARE = "software"
    DOWNLOAD = "download"

    def includes(self, other: "Category") -> bool:
        """Check if this requested category covers an item's category."""
        return self == Category.ALL or self == other


class WalkMode(str, Enum):
    """Traversal mode for a filesystem target.

    Attributes:
        PATTERN: Delete matching files only, keep every directory.
        EMPTY: Delete all contents, keep only the root directory.
    """

    PATTERN = "pattern"
    EMPTY = "empty"


class ItemKind(str, Enum):
    """How a cleanup item is executed.

    Attributes:
        FILESYSTEM: Walk the item's targets with the directory walker.
        REGISTRY: Prune stale auto-start entries.
        RECYCLE_BIN: Empty the recycle bin in one call.
        HIBERNATION: Report the hibernation file size (read-only).
    """

    FILESYSTEM = "filesystem"
    REGISTRY = "registry"
    RECYCLE_BIN = "recycle_bin"
    HIBERNATION = "hibernation"


@dataclass(frozen=True, slots=True)
class CleanupTarget:
    """One concrete location of a cleanup item.

    Attributes:
        root: Absolute root directory (may contain glob wildcards).
        pattern: Filename glob used in pattern mode.
        recursive: Whether pattern mode descends into subdirectories.
        mode: Traversal mode.
    """

    root: str
    pattern: str = "*"
    recursive: bool = True
    mode: WalkMode = WalkMode.PATTERN

    def __post_init__(self) -> None:
        """Validate target data after initialization."""
        if not self.root:
            msg = "Target root cannot be empty"
            raise ValueError(msg)
        if not self.pattern:
            msg = "Target pattern cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class CleanupItem:
    """A named unit of cleanup work.

    Attributes:
        name: Unique item identifier, also the selection key.
        label: Human-readable name.
        category: Category the item belongs to (never ALL).
        kind: Execution kind.
        targets: Concrete locations, in processing order.
        description: Optional longer explanation.
    """

    name: str
    label: str
    category: Category
    kind: ItemKind = ItemKind.FILESYSTEM
    targets: tuple[CleanupTarget, ...] = ()
    description: str | None = None

    def __post_init__(self) -> None:
        """Validate item data after initialization."""
        if not self.name:
            msg = "Item name cannot be empty"
            raise ValueError(msg)
        if self.category == Category.ALL:
            msg = f"Item {self.name!r} must belong to a concrete category"
            raise ValueError(msg)
