"""Result models for cleanup operations.

This module defines the per-path outcome of a deletion attempt and the
additive statistics accumulated per path, per item, and per run.
"""

from dataclasses import dataclass, field
from enum import Enum

# Number of failed names kept for display
MAX_FAILED_NAMES = 5


def format_size(size_bytes: int) -> str:
    """Return a human-readable size string."""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


class OutcomeKind(str, Enum):
    """Kind of outcome for a single attempted path.

    Attributes:
        REMOVED: Path was deleted (or was already absent).
        SKIPPED_CRITICAL: Path is critical and was never handed to deletion.
        SKIPPED_LOCKED: Path is held open by another process.
        FAILED: Deletion was attempted and did not succeed.
    """

    REMOVED = "removed"
    SKIPPED_CRITICAL = "skipped_critical"
    SKIPPED_LOCKED = "skipped_locked"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PathOutcome:
    """Outcome of processing exactly one path.

    Attributes:
        kind: Outcome classification.
        bytes_freed: Bytes released by the deletion (only for REMOVED).
    """

    kind: OutcomeKind
    bytes_freed: int = 0

    def __post_init__(self) -> None:
        """Validate outcome data after initialization."""
        if self.bytes_freed < 0:
            msg = f"bytes_freed cannot be negative, got {self.bytes_freed}"
            raise ValueError(msg)
        if self.kind != OutcomeKind.REMOVED and self.bytes_freed:
            msg = f"Only removed paths can free bytes, got {self.kind.value}"
            raise ValueError(msg)

    @classmethod
    def removed(cls, bytes_freed: int = 0) -> "PathOutcome":
        """Create a REMOVED outcome."""
        return cls(OutcomeKind.REMOVED, bytes_freed)

    @property
    def is_removed(self) -> bool:
        """Check if the path was removed."""
        return self.kind == OutcomeKind.REMOVED


SKIPPED_CRITICAL = PathOutcome(OutcomeKind.SKIPPED_CRITICAL)
SKIPPED_LOCKED = PathOutcome(OutcomeKind.SKIPPED_LOCKED)
FAILED = PathOutcome(OutcomeKind.FAILED)


@dataclass(slots=True)
class CleanupResult:
    """Additive cleanup statistics.

    Produced per path, per catalog item and per run. Counters only ever
    grow; combining two results adds them.

    Attributes:
        bytes_freed: Total bytes released.
        items_removed: Files and directories removed, each counted once.
        items_failed: Paths that could not be removed (locked or failed).
        items_skipped: Critical paths that were left untouched.
        failed_names: Names of the first failed paths, for display.
    """

    bytes_freed: int = 0
    items_removed: int = 0
    items_failed: int = 0
    items_skipped: int = 0
    failed_names: list[str] = field(default_factory=list)

    def record(self, outcome: PathOutcome, name: str) -> None:
        """Accumulate the outcome of a single path.

        Args:
            outcome: Outcome of the attempted path.
            name: Display name of the path (usually its basename).
        """
        if outcome.kind == OutcomeKind.REMOVED:
            self.bytes_freed += outcome.bytes_freed
            self.items_removed += 1
        elif outcome.kind == OutcomeKind.SKIPPED_CRITICAL:
            self.items_skipped += 1
        else:
            self.record_failure(name)

    def record_failure(self, name: str) -> None:
        """Count a failure and remember its name if there is room."""
        self.items_failed += 1
        if len(self.failed_names) < MAX_FAILED_NAMES:
            self.failed_names.append(name)

    def merge(self, other: "CleanupResult") -> None:
        """Add another result into this one."""
        self.bytes_freed += other.bytes_freed
        self.items_removed += other.items_removed
        self.items_failed += other.items_failed
        self.items_skipped += other.items_skipped
        room = MAX_FAILED_NAMES - len(self.failed_names)
        if room > 0:
            self.failed_names.extend(other.failed_names[:room])

    @property
    def is_empty(self) -> bool:
        """True when nothing was removed and nothing failed."""
        return self.items_removed == 0 and self.items_failed == 0

    @property
    def size_human(self) -> str:
        """Return the freed size as a human-readable string."""
        return format_size(self.bytes_freed)

    def failed_summary(self) -> str:
        """Format the remembered failed names for display.

        Returns:
            Comma-separated names, suffixed with "..." when more paths
            failed than names were kept.
        """
        summary = ", ".join(self.failed_names)
        if self.items_failed > len(self.failed_names):
            summary += "..."
        return summary
