"""Run history model.

This module defines the record written to the run history file after
every cleanup run.
"""

import json
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class RunRecord:
    """Summary of one completed cleanup run.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the run started (ISO 8601 format with timezone).
        category: Requested category.
        state: Final run state.
        bytes_freed: Total bytes released.
        items_removed: Files and directories removed.
        items_failed: Paths that could not be removed.
        items_skipped: Protected paths left untouched.
        failed_names: First failed names, for display.
        skipped_items: Items disabled by selection.
        error: Run-level error message, if any.
    """

    id: str
    timestamp: str
    category: str
    state: str
    bytes_freed: int = 0
    items_removed: int = 0
    items_failed: int = 0
    items_skipped: int = 0
    failed_names: tuple[str, ...] = ()
    skipped_items: tuple[str, ...] = ()
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.id:
            msg = "Run record ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)

    @property
    def success(self) -> bool:
        """True when nothing failed during the run."""
        return self.items_failed == 0 and self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        result: dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "category": self.category,
            "state": self.state,
            "bytes_freed": self.bytes_freed,
            "items_removed": self.items_removed,
            "items_failed": self.items_failed,
            "items_skipped": self.items_skipped,
            "failed_names": list(self.failed_names),
            "skipped_items": list(self.skipped_items),
        }
        if self.error is not None:
            result["error"] = self.error
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunRecord":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            category=data["category"],
            state=data["state"],
            bytes_freed=int(data.get("bytes_freed", 0)),
            items_removed=int(data.get("items_removed", 0)),
            items_failed=int(data.get("items_failed", 0)),
            items_skipped=int(data.get("items_skipped", 0)),
            failed_names=tuple(data.get("failed_names", ())),
            skipped_items=tuple(data.get("skipped_items", ())),
            error=data.get("error"),
        )

    def to_json_line(self) -> str:
        """Serialize to JSON line for JSONL storage (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> "RunRecord":
        """Deserialize from JSON line.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls.from_dict(json.loads(line.strip()))


def create_run_record(
    category: str,
    state: str,
    *,
    timestamp: datetime | None = None,
    **stats: Any,
) -> RunRecord:
    """Create a run record with a generated ID.

    Args:
        category: Requested category.
        state: Final run state.
        timestamp: Start time. Defaults to now.
        **stats: Remaining RunRecord fields.

    Returns:
        New RunRecord.
    """
    when = timestamp if timestamp is not None else datetime.now(UTC)
    if when.tzinfo is None:
        when = when.astimezone(UTC)
    return RunRecord(
        id=uuid.uuid4().hex[:12],
        timestamp=when.isoformat(),
        category=category,
        state=state,
        **stats,
    )
