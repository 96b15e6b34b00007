"""Cleanup run orchestration.

The orchestrator resolves a category to its ordered item list, checks
each item against the selection map and dispatches it by kind:

- filesystem items to the DirectoryWalker, target by target;
- registry items to the RegistryPruner;
- the recycle bin and hibernation file to single-call primitives.

Per-item exceptions are logged and never abort the run. Totals are only
ever merged, so they never decrease while a run is in progress.
"""

import logging
import os
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import partial

from cleanctl.core.catalog import PathCatalog, load_catalog
from cleanctl.core.settings import Settings, load_settings
from cleanctl.core.system import (
    HibernationReport,
    RecycleBinInfo,
    empty_recycle_bin,
    hibernation_report,
)
from cleanctl.filesystem.locations import SystemLocations
from cleanctl.filesystem.operator import DeletionExecutor
from cleanctl.filesystem.protected import ProtectedLayout, SafetyClassifier
from cleanctl.filesystem.walker import DirectoryWalker
from cleanctl.models.catalog import Category, CleanupItem, ItemKind
from cleanctl.models.result import CleanupResult, PathOutcome
from cleanctl.registry.pruner import RegistryPruner
from cleanctl.registry.stores import default_stores

logger = logging.getLogger(__name__)

SelectionMap = Mapping[str, bool]


class RunState(str, Enum):
    """Lifecycle of a cleanup run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    COMPLETED_WITH_FAILURES = "completed_with_failures"


class ItemStatus(str, Enum):
    """What happened to one catalog item during a run.

    Attributes:
        CLEANED: Something was removed or failed to be removed.
        NOTHING: Nothing was found to clean.
        SKIPPED: Disabled in the selection map.
        REPORTED: Read-only item; a report was produced.
        FAILED: The item raised an unexpected error.
    """

    CLEANED = "cleaned"
    NOTHING = "nothing"
    SKIPPED = "skipped"
    REPORTED = "reported"
    FAILED = "failed"


def _now() -> datetime:
    return datetime.now()


class CleanupLog:
    """Append-only, timestamped log-line sink.

    Every line is mirrored to the module logger and, if set, passed to a
    listener. The listener runs on the calling thread; a listener that
    raises is logged and detached, and the line is still recorded.

    Args:
        listener: Callback receiving each formatted line.
        clock: Time source, injectable for tests.
    """

    def __init__(
        self,
        listener: Callable[[str], None] | None = None,
        *,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self._lines: list[str] = []
        self._listener = listener
        self._clock = clock

    def add(self, message: str, *, level: int = logging.INFO) -> str:
        """Append a message and return the formatted line."""
        line = f"[{self._clock():%H:%M:%S}] {message}"
        self._lines.append(line)
        logger.log(level, message)
        if self._listener is not None:
            try:
                self._listener(line)
            except Exception:
                logger.warning("Log listener failed, detaching it", exc_info=True)
                self._listener = None
        return line

    @property
    def lines(self) -> tuple[str, ...]:
        """All lines written so far."""
        return tuple(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


@dataclass(slots=True)
class ItemReport:
    """Outcome of one catalog item.

    Attributes:
        item: The catalog item.
        status: What happened to it.
        result: Statistics of the item.
        notes: Informational messages (e.g. missing privileges).
        error: Error message when the item failed unexpectedly.
    """

    item: CleanupItem
    status: ItemStatus
    result: CleanupResult = field(default_factory=CleanupResult)
    notes: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass(slots=True)
class RunReport:
    """Outcome of one cleanup run.

    Always complete, even after a run-level failure: ``result`` then
    holds the totals accumulated before the failure.

    Attributes:
        category: Requested category.
        state: Final run state.
        result: Aggregate statistics.
        log: Log lines of the run.
        items: Per-item reports in processing order.
        error: Run-level error message, if any.
        started_at: When the run started.
    """

    category: str
    state: RunState = RunState.IDLE
    result: CleanupResult = field(default_factory=CleanupResult)
    log: CleanupLog = field(default_factory=CleanupLog)
    items: list[ItemReport] = field(default_factory=list)
    error: str | None = None
    started_at: datetime = field(default_factory=_now)

    @property
    def has_failures(self) -> bool:
        """Check if the run completed with failures."""
        return self.state == RunState.COMPLETED_WITH_FAILURES

    def summary(self) -> str:
        """Format the aggregate for display."""
        result = self.result
        text = (
            f"removed {result.items_removed} item(s), freed {result.size_human}, "
            f"{result.items_failed} failed"
        )
        if result.items_skipped:
            text += f", {result.items_skipped} protected skipped"
        return text


def is_enabled(selection: SelectionMap | None, name: str) -> bool:
    """Check if an item is enabled; absent names are enabled."""
    if selection is None:
        return True
    return bool(selection.get(name, True))


class CleanupOrchestrator:
    """Sequences catalog items for a category and selection.

    One run at a time; callers serialize runs.

    Args:
        catalog: Resolved catalog.
        walker: Walker for filesystem items.
        pruner: Pruner for registry items. Defaults to the platform's stores.
        listener: Receives every log line as it is written.
        recycle_bin: Empties the recycle bin, returning what it held.
        hibernation: Reports on the hibernation file at a path.
    """

    def __init__(
        self,
        catalog: PathCatalog,
        walker: DirectoryWalker,
        pruner: RegistryPruner | None = None,
        *,
        listener: Callable[[str], None] | None = None,
        recycle_bin: Callable[[], RecycleBinInfo] = empty_recycle_bin,
        hibernation: Callable[[str], HibernationReport] = hibernation_report,
    ) -> None:
        self._catalog = catalog
        self._walker = walker
        self._pruner = pruner
        self._listener = listener
        self._recycle_bin = recycle_bin
        self._hibernation = hibernation
        self._state = RunState.IDLE

    @property
    def state(self) -> RunState:
        """State of the most recent run."""
        return self._state

    def run(self, category: Category | str, selection: SelectionMap | None = None) -> RunReport:
        """Run every enabled item of a category.

        Args:
            category: Category to clean (``all`` for every item).
            selection: Item name to enabled state; absent names are enabled.

        Returns:
            RunReport with totals, log and per-item reports.
        """
        log = CleanupLog(self._listener)
        report = RunReport(category=str(getattr(category, "value", category)), log=log)
        self._state = report.state = RunState.RUNNING

        try:
            resolved = Category(category)
            items = self._catalog.items_for(resolved)
            log.add(f"Cleaning {resolved.value}: {len(items)} item(s)")
            for item in items:
                if not is_enabled(selection, item.name):
                    log.add(f"{item.label}: skipped by selection")
                    report.items.append(ItemReport(item=item, status=ItemStatus.SKIPPED))
                    continue
                item_report = self._run_item(item, log)
                report.items.append(item_report)
                report.result.merge(item_report.result)
        except Exception as e:
            logger.debug("Run aborted while resolving items", exc_info=True)
            report.error = str(e)
            log.add(f"Run aborted: {e}", level=logging.ERROR)

        failed = (
            report.error is not None
            or report.result.items_failed > 0
            or any(r.status == ItemStatus.FAILED for r in report.items)
        )
        self._state = report.state = (
            RunState.COMPLETED_WITH_FAILURES if failed else RunState.COMPLETED
        )
        log.add(f"Finished: {report.summary()}")
        return report

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    def _run_item(self, item: CleanupItem, log: CleanupLog) -> ItemReport:
        try:
            if item.kind == ItemKind.REGISTRY:
                report = self._run_registry(item)
            elif item.kind == ItemKind.RECYCLE_BIN:
                report = self._run_recycle_bin(item)
            elif item.kind == ItemKind.HIBERNATION:
                report = self._run_hibernation(item)
            else:
                report = self._run_filesystem(item)
        except Exception as e:
            logger.debug("Item %s failed", item.name, exc_info=True)
            result = CleanupResult()
            result.record_failure(item.name)
            log.add(f"{item.label}: failed: {e}", level=logging.ERROR)
            return ItemReport(item=item, status=ItemStatus.FAILED, result=result, error=str(e))

        level = logging.WARNING if report.result.items_failed else logging.INFO
        log.add(_describe(report), level=level)
        return report

    def _run_filesystem(self, item: CleanupItem) -> ItemReport:
        result = CleanupResult()
        for target in item.targets:
            result.merge(self._walker.clean_target(target))
        return ItemReport(item=item, status=_status_for(result), result=result)

    def _run_registry(self, item: CleanupItem) -> ItemReport:
        if self._pruner is None:
            self._pruner = RegistryPruner(default_stores())
        pruned = self._pruner.prune()

        result = CleanupResult(items_removed=pruned.removed)
        notes = list(pruned.notes)
        if pruned.removed:
            notes.insert(0, pruned.removed_summary())
        return ItemReport(item=item, status=_status_for(result), result=result, notes=notes)

    def _run_recycle_bin(self, item: CleanupItem) -> ItemReport:
        info = self._recycle_bin()
        result = CleanupResult()
        if not info.is_empty:
            result.record(PathOutcome.removed(info.size), item.label)
        return ItemReport(item=item, status=_status_for(result), result=result)

    def _run_hibernation(self, item: CleanupItem) -> ItemReport:
        notes: list[str] = []
        for target in item.targets:
            hibernation = self._hibernation(os.path.join(target.root, target.pattern))
            if hibernation.exists:
                notes.append(hibernation.message())
        if not notes:
            return ItemReport(item=item, status=ItemStatus.NOTHING)
        return ItemReport(item=item, status=ItemStatus.REPORTED, notes=notes)


def _status_for(result: CleanupResult) -> ItemStatus:
    return ItemStatus.NOTHING if result.is_empty else ItemStatus.CLEANED


def _describe(report: ItemReport) -> str:
    """Format the single log line of an item."""
    result = report.result
    if report.status == ItemStatus.REPORTED:
        parts = list(report.notes)
    elif report.status == ItemStatus.NOTHING:
        parts = ["nothing to clean", *report.notes]
    else:
        parts = [f"removed {result.items_removed} item(s), freed {result.size_human}"]
        if result.items_failed:
            parts.append(f"{result.items_failed} failed ({result.failed_summary()})")
        parts.extend(report.notes)
    if result.items_skipped:
        parts.append(f"{result.items_skipped} protected path(s) skipped")
    return f"{report.item.label}: " + "; ".join(parts)


def build_classifier(settings: Settings, locations: SystemLocations) -> SafetyClassifier:
    """Build the safety classifier for this system and settings."""
    layout = ProtectedLayout.for_system(
        locations,
        protected_patterns=tuple(settings.safety.protected_patterns),
    )
    return SafetyClassifier(layout)


def build_walker(settings: Settings, locations: SystemLocations) -> DirectoryWalker:
    """Build a walker configured from settings."""
    return DirectoryWalker(
        build_classifier(settings, locations),
        DeletionExecutor(settings.retry.to_policy()),
    )


def run_cleanup(
    category: Category | str = Category.ALL,
    selection: SelectionMap | None = None,
    *,
    catalog: PathCatalog | None = None,
    settings: Settings | None = None,
    locations: SystemLocations | None = None,
    listener: Callable[[str], None] | None = None,
) -> RunReport:
    """Run one cleanup with the engine built from settings.

    Args:
        category: Category to clean.
        selection: Item name to enabled state. Defaults to the persisted selection.
        catalog: Resolved catalog. Defaults to the bundled and user catalogs.
        settings: Settings. Defaults to the settings file, loaded strictly.
        locations: Special folders. Defaults to detection from the environment.
        listener: Receives every log line as it is written.

    Returns:
        RunReport of the run.

    Raises:
        CatalogError: If the catalog cannot be loaded.
        SettingsError: If the settings file exists but is invalid.
    """
    settings = load_settings(strict=True) if settings is None else settings
    locations = SystemLocations.detect() if locations is None else locations
    catalog = load_catalog(locations=locations) if catalog is None else catalog
    selection = settings.selection if selection is None else selection

    orchestrator = CleanupOrchestrator(
        catalog,
        build_walker(settings, locations),
        listener=listener,
        recycle_bin=partial(empty_recycle_bin, locations=locations),
    )
    return orchestrator.run(category, selection)
