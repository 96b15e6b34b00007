"""Filesystem deletion executor.

Deletes a single file or directory with a bounded number of attempts,
normalizing read-only/hidden/system attributes before every attempt.
Errors never propagate: each call resolves to exactly one PathOutcome.
"""

import logging
import os
import shutil
import stat
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass

from cleanctl.filesystem.locks import is_file_locked
from cleanctl.models.result import FAILED, SKIPPED_LOCKED, PathOutcome

logger = logging.getLogger(__name__)

_CLEARED_ATTRIBUTES = (
    stat.FILE_ATTRIBUTE_READONLY | stat.FILE_ATTRIBUTE_HIDDEN | stat.FILE_ATTRIBUTE_SYSTEM
)
_REPARSE_POINT = stat.FILE_ATTRIBUTE_REPARSE_POINT


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded retry policy for deletions.

    Attributes:
        attempts: Maximum number of attempts per path.
        backoff: Seconds to sleep between attempts.
    """

    attempts: int = 3
    backoff: float = 0.1

    def __post_init__(self) -> None:
        """Validate policy values after initialization."""
        if self.attempts < 1:
            msg = f"attempts must be at least 1, got {self.attempts}"
            raise ValueError(msg)
        if self.backoff < 0:
            msg = f"backoff cannot be negative, got {self.backoff}"
            raise ValueError(msg)


def is_link(path: str) -> bool:
    """Check if a path is a symlink or a Windows junction."""
    if os.path.islink(path):
        return True
    if sys.platform == "win32":
        try:
            attributes = os.lstat(path).st_file_attributes
        except OSError:
            return False
        return bool(attributes & _REPARSE_POINT)
    return False


def normalize_attributes(path: str) -> None:
    """Clear attributes that prevent deletion.

    On Windows the read-only, hidden and system bits are cleared. On
    POSIX the owner write bit is restored (and the search bit for
    directories). Links are left untouched.

    Args:
        path: Path to normalize.

    Raises:
        OSError: If the attributes cannot be read or changed.
    """
    if is_link(path):
        return

    st = os.stat(path)

    if sys.platform == "win32":
        attributes = st.st_file_attributes
        if attributes & _CLEARED_ATTRIBUTES:
            import ctypes

            if not ctypes.windll.kernel32.SetFileAttributesW(
                path, attributes & ~_CLEARED_ATTRIBUTES
            ):
                raise ctypes.WinError()
        return

    wanted = stat.S_IWUSR
    if stat.S_ISDIR(st.st_mode):
        wanted |= stat.S_IXUSR | stat.S_IRUSR
    if st.st_mode & wanted != wanted:
        os.chmod(path, stat.S_IMODE(st.st_mode) | wanted)


def _remove_file(path: str) -> None:
    try:
        os.unlink(path)
    except (IsADirectoryError, PermissionError):
        # Directory links on Windows are removed with rmdir.
        if is_link(path) and os.path.isdir(path):
            os.rmdir(path)
        else:
            raise


class DeletionExecutor:
    """Retrying primitive that deletes one file or one directory.

    Backoff sleeps run on the calling thread.

    Args:
        policy: Retry policy. Defaults to 3 attempts with 100ms backoff.
        lock_probe: Predicate reporting whether a file is locked.
        sleep: Sleep function, injectable for tests.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        lock_probe: Callable[[str], bool] = is_file_locked,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._policy = policy or RetryPolicy()
        self._lock_probe = lock_probe
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        """Retry policy in use."""
        return self._policy

    def is_locked(self, path: str) -> bool:
        """Check if a file is locked using the configured probe."""
        return self._lock_probe(path)

    def delete_file(self, path: str) -> PathOutcome:
        """Delete a single file.

        Args:
            path: Absolute path of the file (or link) to delete.

        Returns:
            REMOVED with the file size, SKIPPED_LOCKED if the file stayed
            locked for every attempt, or FAILED.
        """
        attempts = self._policy.attempts
        locked = False

        for attempt in range(1, attempts + 1):
            last = attempt == attempts
            try:
                if not os.path.lexists(path):
                    return PathOutcome.removed(0)

                locked = self._lock_probe(path)
                if locked:
                    logger.debug("File locked (attempt %d/%d): %s", attempt, attempts, path)
                else:
                    size = os.lstat(path).st_size
                    normalize_attributes(path)
                    _remove_file(path)
                    return PathOutcome.removed(size)
            except FileNotFoundError:
                return PathOutcome.removed(0)
            except OSError as e:
                locked = False
                logger.debug("Delete failed (attempt %d/%d) for %s: %s", attempt, attempts, path, e)

            if not last:
                self._sleep(self._policy.backoff)

        if locked:
            logger.info("Skipping locked file: %s", path)
            return SKIPPED_LOCKED
        logger.info("Failed to delete file: %s", path)
        return FAILED

    def delete_directory(self, path: str) -> PathOutcome:
        """Delete a directory.

        A non-recursive delete is tried first; if the directory is not
        empty (content appeared after enumeration) a recursive delete
        follows.

        Args:
            path: Absolute path of the directory to delete.

        Returns:
            REMOVED (0 bytes, contents are accounted by the walker) or FAILED.
        """
        attempts = self._policy.attempts

        for attempt in range(1, attempts + 1):
            try:
                if not os.path.lexists(path):
                    return PathOutcome.removed(0)

                if is_link(path):
                    _remove_file(path)
                    return PathOutcome.removed(0)

                normalize_attributes(path)
                try:
                    os.rmdir(path)
                except OSError:
                    shutil.rmtree(path)
                return PathOutcome.removed(0)
            except FileNotFoundError:
                return PathOutcome.removed(0)
            except OSError as e:
                logger.debug(
                    "Directory delete failed (attempt %d/%d) for %s: %s",
                    attempt,
                    attempts,
                    path,
                    e,
                )

            if attempt < attempts:
                self._sleep(self._policy.backoff)

        logger.info("Failed to delete directory: %s", path)
        return FAILED
