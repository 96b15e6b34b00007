"""Run history persistence.

This module provides the StateManager class for appending and querying
run records in a JSONL file.
"""

import json
import logging
from pathlib import Path

from cleanctl.core.orchestrator import ItemStatus, RunReport
from cleanctl.core.paths import ensure_dir, get_state_dir
from cleanctl.models.history import RunRecord, create_run_record

logger = logging.getLogger(__name__)


def record_from_report(report: RunReport) -> RunRecord:
    """Summarize a run report as a history record."""
    result = report.result
    return create_run_record(
        report.category,
        report.state.value,
        timestamp=report.started_at,
        bytes_freed=result.bytes_freed,
        items_removed=result.items_removed,
        items_failed=result.items_failed,
        items_skipped=result.items_skipped,
        failed_names=tuple(result.failed_names),
        skipped_items=tuple(r.item.name for r in report.items if r.status == ItemStatus.SKIPPED),
        error=report.error,
    )


class StateManager:
    """Manages the run history in a JSONL file.

    Storage location: ~/.local/state/cleanctl/history.jsonl

    Each line is one RunRecord. The file is only ever appended to.

    Args:
        state_dir: Optional override for the state directory.
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        """Path to the history file."""
        return self._state_dir / self.HISTORY_FILENAME

    def record_run(self, record: RunRecord) -> None:
        """Append a run record to the history file.

        Args:
            record: The record to append.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        ensure_dir(self._state_dir, "state")
        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(record.to_json_line() + "\n")
            f.flush()

    def get_history(
        self, limit: int | None = None, *, failed_only: bool = False
    ) -> list[RunRecord]:
        """Read run records, newest first.

        Corrupt lines are logged and skipped.

        Args:
            limit: Maximum number of records to return. None returns all.
            failed_only: Only return runs that had failures.

        Returns:
            List of RunRecord, newest first. Empty if no history exists.
        """
        if not self.history_path.exists():
            return []

        records: list[RunRecord] = []
        with self.history_path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = RunRecord.from_json_line(line)
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                    logger.warning("Skipping corrupt history line %d: %s", line_num, e)
                    continue
                if failed_only and record.success:
                    continue
                records.append(record)

        records.reverse()
        if limit is not None:
            return records[:limit]
        return records
