"""Directory walker driving classification, lock probing and deletion.

Two traversal modes are supported per catalog target:

- pattern mode deletes matching files and never removes a directory;
- empty mode deletes everything below a root, bottom-up, and keeps the
  root itself.

Per-path failures are always handled locally and never abort the walk.
"""

import fnmatch
import glob
import logging
import os

from cleanctl.filesystem.operator import DeletionExecutor, is_link
from cleanctl.filesystem.protected import SafetyClassifier
from cleanctl.models.catalog import CleanupTarget, WalkMode
from cleanctl.models.result import SKIPPED_CRITICAL, SKIPPED_LOCKED, CleanupResult, PathOutcome

logger = logging.getLogger(__name__)


def _match_all(pattern: str) -> bool:
    return pattern in ("*", "*.*")


class DirectoryWalker:
    """Walks catalog targets and deletes what they select.

    Args:
        classifier: Safety classifier; critical paths are never deleted.
        executor: Deletion executor (also provides the lock probe).
    """

    def __init__(self, classifier: SafetyClassifier, executor: DeletionExecutor) -> None:
        self._classifier = classifier
        self._executor = executor

    def expand_roots(self, root: str) -> list[str]:
        """Expand a target root into existing directories.

        Args:
            root: Root path, possibly containing glob wildcards.

        Returns:
            Sorted list of existing directories the root refers to.
        """
        return sorted(p for p in glob.glob(root) if os.path.isdir(p))

    def clean_target(self, target: CleanupTarget) -> CleanupResult:
        """Clean every directory a catalog target refers to.

        Args:
            target: Catalog target.

        Returns:
            Accumulated CleanupResult for the target.
        """
        result = CleanupResult()
        for root in self.expand_roots(target.root):
            if target.mode == WalkMode.EMPTY:
                result.merge(self.empty_directory(root))
            else:
                result.merge(self.clean_pattern(root, target.pattern, recursive=target.recursive))
        return result

    # -------------------------------------------------------------------------
    # Pattern mode
    # -------------------------------------------------------------------------

    def clean_pattern(self, root: str, pattern: str, *, recursive: bool = True) -> CleanupResult:
        """Delete files matching a pattern below a root.

        Directories are never deleted in this mode.

        Args:
            root: Directory to search.
            pattern: Case-insensitive filename glob (``*.*`` matches all files).
            recursive: Whether to descend into subdirectories.

        Returns:
            CleanupResult for the matched files.
        """
        result = CleanupResult()
        if not os.path.isdir(root):
            return result

        for path in self._iter_matches(root, pattern, recursive):
            name = os.path.basename(path)
            result.record(self._process_file(path), name)

        return result

    def _iter_matches(self, root: str, pattern: str, recursive: bool) -> list[str]:
        lowered = pattern.lower()
        match_all = _match_all(lowered)

        def _matches(name: str) -> bool:
            return match_all or fnmatch.fnmatchcase(name.lower(), lowered)

        matches: list[str] = []
        if recursive:
            for dirpath, _dirnames, filenames in os.walk(root, onerror=self._log_walk_error):
                matches.extend(os.path.join(dirpath, f) for f in filenames if _matches(f))
            return matches

        try:
            with os.scandir(root) as entries:
                for entry in entries:
                    try:
                        is_dir = entry.is_dir(follow_symlinks=False)
                    except OSError:
                        continue
                    if not is_dir and _matches(entry.name):
                        matches.append(entry.path)
        except OSError as e:
            self._log_walk_error(e)
        return matches

    @staticmethod
    def _log_walk_error(error: OSError) -> None:
        logger.warning("Cannot list directory %s: %s", error.filename, error.strerror)

    # -------------------------------------------------------------------------
    # Empty mode
    # -------------------------------------------------------------------------

    def empty_directory(self, root: str) -> CleanupResult:
        """Delete everything below a root, keeping the root itself.

        Files are processed before directories at every level. Each child
        directory is emptied recursively before it is deleted.

        Args:
            root: Directory to empty.

        Returns:
            CleanupResult; ``items_removed`` counts files and directories.
        """
        if not os.path.isdir(root) or is_link(root):
            return CleanupResult()
        result = self._empty(root)
        if result is None:
            result = CleanupResult()
            result.record_failure(os.path.basename(root))
        return result

    def _empty(self, root: str) -> CleanupResult | None:
        """Empty a directory; None if it cannot be listed."""
        try:
            with os.scandir(root) as it:
                entries = list(it)
        except OSError as e:
            logger.warning("Cannot list directory %s: %s", root, e)
            return None

        result = CleanupResult()
        files: list[str] = []
        directories: list[str] = []
        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False) and not is_link(entry.path)
            except OSError:
                is_dir = False
            (directories if is_dir else files).append(entry.path)

        for path in files:
            result.record(self._process_file(path), os.path.basename(path))

        for path in directories:
            name = os.path.basename(path)
            if self._classifier.is_critical(path):
                logger.debug("Skipping critical directory: %s", path)
                result.record(SKIPPED_CRITICAL, name)
                continue

            child = self._empty(path)
            if child is None:
                result.record_failure(name)
                continue

            result.merge(child)
            if child.items_failed or child.items_skipped:
                # Remaining content must not be reached by the recursive fallback.
                logger.debug("Keeping directory with remaining content: %s", path)
                result.record_failure(name)
            elif os.path.lexists(path):
                result.record(self._executor.delete_directory(path), name)

        return result

    # -------------------------------------------------------------------------
    # Shared
    # -------------------------------------------------------------------------

    def _process_file(self, path: str) -> PathOutcome:
        if self._classifier.is_critical(path):
            logger.debug("Skipping critical file: %s", path)
            return SKIPPED_CRITICAL
        if self._executor.is_locked(path):
            logger.debug("Skipping locked file: %s", path)
            return SKIPPED_LOCKED
        return self._executor.delete_file(path)
