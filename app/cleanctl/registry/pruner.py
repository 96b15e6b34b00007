"""Pruning of stale auto-start entries.

An entry is stale when the executable it launches no longer exists.
Machine-wide stores usually require elevation; access failures there are
reported as notes and do not count as errors.
"""

import logging
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from cleanctl.core.errors import RegistryAccessDenied
from cleanctl.models.result import MAX_FAILED_NAMES
from cleanctl.registry.stores import AutoStartEntry, AutoStartScope, AutoStartStore

logger = logging.getLogger(__name__)


def _target_exists(path: str) -> bool:
    return os.path.isfile(path) or os.path.isdir(path)


@dataclass(slots=True)
class PruneResult:
    """Result of one prune pass.

    Attributes:
        removed: Number of entries removed.
        removed_names: Display names of the first removed entries.
        notes: Informational messages (e.g. missing privileges).
    """

    removed: int = 0
    removed_names: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def record_removed(self, entry: AutoStartEntry) -> None:
        """Count a removed entry and remember its name if there is room."""
        self.removed += 1
        if len(self.removed_names) < MAX_FAILED_NAMES:
            self.removed_names.append(entry.display_name)

    def removed_summary(self) -> str:
        """Format the remembered names, with "..." when truncated."""
        summary = ", ".join(self.removed_names)
        if self.removed > len(self.removed_names):
            summary += "..."
        return summary


class RegistryPruner:
    """Removes auto-start entries pointing at missing executables.

    Args:
        stores: Stores to scan, user scope first.
        exists: Predicate deciding whether a target still exists.
    """

    def __init__(
        self,
        stores: Sequence[AutoStartStore],
        *,
        exists: Callable[[str], bool] = _target_exists,
    ) -> None:
        self._stores = list(stores)
        self._exists = exists

    def prune(self) -> PruneResult:
        """Scan every store and remove stale entries.

        Returns:
            PruneResult with the removal count, names and notes.

        Raises:
            RegistryAccessDenied: If the current-user store cannot be read.
        """
        result = PruneResult()
        for store in self._stores:
            try:
                self._prune_store(store, result)
            except RegistryAccessDenied as e:
                if store.scope != AutoStartScope.MACHINE:
                    raise
                logger.info("Machine-wide auto-start entries not accessible: %s", e)
                result.notes.append(
                    "Administrator rights are required to clean machine-wide startup entries"
                )
        return result

    def prune_stale_autostart_entries(self) -> int:
        """Remove stale entries and return how many were removed."""
        return self.prune().removed

    def _prune_store(self, store: AutoStartStore, result: PruneResult) -> None:
        for entry in store.entries():
            if entry.target_path is None:
                continue
            if self._exists(entry.target_path):
                continue

            try:
                store.remove(entry)
            except RegistryAccessDenied as e:
                if store.scope == AutoStartScope.MACHINE:
                    raise
                logger.warning("Cannot remove %s: %s", entry.display_name, e)
                result.notes.append(f"Could not remove {entry.display_name}")
                continue

            logger.info(
                "Removed stale auto-start entry %s -> %s",
                entry.display_name,
                entry.target_path,
            )
            result.record_removed(entry)
