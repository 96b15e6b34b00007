"""Single-call system primitives.

Emptying the recycle bin is one atomic operation delegated to the OS
(the shell API on Windows, ``gio`` on freedesktop systems). The
hibernation file is only ever reported: removing it means disabling
hibernation, which requires administrator rights.
"""

import logging
import os
import subprocess
import sys
from dataclasses import dataclass

from cleanctl.core.errors import SystemOperationError, UnsupportedPlatformError
from cleanctl.filesystem.locations import SystemLocations
from cleanctl.models.result import format_size
from cleanctl.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

# SHEmptyRecycleBinW flags: no confirmation, no progress UI, no sound
_SHERB_SILENT = 0x1 | 0x2 | 0x4

HIBERNATION_COMMAND = "powercfg -h off"


@dataclass(frozen=True, slots=True)
class RecycleBinInfo:
    """Size and entry count of the recycle bin.

    Attributes:
        size: Total size in bytes.
        count: Number of top-level entries.
    """

    size: int = 0
    count: int = 0

    @property
    def is_empty(self) -> bool:
        """True when the bin holds nothing."""
        return self.count == 0


@dataclass(frozen=True, slots=True)
class HibernationReport:
    """Read-only report about the hibernation file.

    Attributes:
        path: Location of the hibernation file.
        size: Size in bytes, or None if the file does not exist.
    """

    path: str
    size: int | None = None

    @property
    def exists(self) -> bool:
        """Check if the hibernation file exists."""
        return self.size is not None

    def message(self) -> str:
        """Format the report for the cleanup log."""
        if self.size is None:
            return "Hibernation is disabled"
        return (
            f"Hibernation file uses {format_size(self.size)}; "
            f"run '{HIBERNATION_COMMAND}' as administrator to remove it"
        )


# =============================================================================
# Recycle bin
# =============================================================================


def _trash_dir(locations: SystemLocations) -> str:
    data_home = locations.data_home or os.path.join(locations.user_profile, ".local", "share")
    return os.path.join(data_home, "Trash")


def _tree_size(path: str) -> int:
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for name in filenames:
            try:
                total += os.lstat(os.path.join(dirpath, name)).st_size
            except OSError:
                continue
    return total


def _query_trash(locations: SystemLocations) -> RecycleBinInfo:
    files_dir = os.path.join(_trash_dir(locations), "files")
    try:
        with os.scandir(files_dir) as it:
            entries = list(it)
    except FileNotFoundError:
        return RecycleBinInfo()
    except OSError as e:
        msg = f"Cannot read trash {files_dir}: {e}"
        raise SystemOperationError(msg) from e

    size = 0
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                size += _tree_size(entry.path)
            else:
                size += entry.stat(follow_symlinks=False).st_size
        except OSError:
            continue
    return RecycleBinInfo(size=size, count=len(entries))


def _empty_trash() -> None:
    if not command_exists("gio"):
        msg = "Emptying the trash requires 'gio' (GLib)"
        raise UnsupportedPlatformError(msg)
    try:
        result = run_command(["gio", "trash", "--empty"], timeout=300.0)
    except (OSError, subprocess.TimeoutExpired) as e:
        msg = f"gio trash --empty failed: {e}"
        raise SystemOperationError(msg) from e
    if not result.success:
        msg = f"gio trash --empty failed: {result.stderr.strip() or result.returncode}"
        raise SystemOperationError(msg)


def _query_windows() -> RecycleBinInfo:
    import ctypes
    from ctypes import wintypes

    class SHQUERYRBINFO(ctypes.Structure):
        if ctypes.sizeof(ctypes.c_void_p) == 4:
            _pack_ = 1
        _fields_ = [
            ("cbSize", wintypes.DWORD),
            ("i64Size", ctypes.c_longlong),
            ("i64NumItems", ctypes.c_longlong),
        ]

    info = SHQUERYRBINFO()
    info.cbSize = ctypes.sizeof(SHQUERYRBINFO)
    hresult = ctypes.windll.shell32.SHQueryRecycleBinW(None, ctypes.byref(info))
    if hresult != 0:
        msg = f"SHQueryRecycleBinW failed with HRESULT {hresult & 0xFFFFFFFF:#010x}"
        raise SystemOperationError(msg)
    return RecycleBinInfo(size=info.i64Size, count=info.i64NumItems)


def _empty_windows() -> None:
    import ctypes

    hresult = ctypes.windll.shell32.SHEmptyRecycleBinW(None, None, _SHERB_SILENT)
    if hresult != 0:
        msg = f"SHEmptyRecycleBinW failed with HRESULT {hresult & 0xFFFFFFFF:#010x}"
        raise SystemOperationError(msg)


def query_recycle_bin(
    *,
    locations: SystemLocations | None = None,
    platform: str | None = None,
) -> RecycleBinInfo:
    """Get the size and entry count of the recycle bin.

    Args:
        locations: Special folders (used for the freedesktop trash).
        platform: Platform identifier. Defaults to ``sys.platform``.

    Returns:
        RecycleBinInfo for the current user.

    Raises:
        SystemOperationError: If the bin cannot be queried.
    """
    platform = sys.platform if platform is None else platform
    if platform == "win32":
        return _query_windows()
    locations = SystemLocations.detect(platform=platform) if locations is None else locations
    return _query_trash(locations)


def empty_recycle_bin(
    *,
    locations: SystemLocations | None = None,
    platform: str | None = None,
) -> RecycleBinInfo:
    """Empty the recycle bin in one operation.

    Args:
        locations: Special folders (used for the freedesktop trash).
        platform: Platform identifier. Defaults to ``sys.platform``.

    Returns:
        What the bin held before it was emptied. An empty bin is left
        alone and reported as empty.

    Raises:
        SystemOperationError: If the bin cannot be queried or emptied.
        UnsupportedPlatformError: If no backend exists on this system.
    """
    platform = sys.platform if platform is None else platform
    info = query_recycle_bin(locations=locations, platform=platform)
    if info.is_empty:
        return info

    logger.info("Emptying recycle bin (%d entries, %s)", info.count, format_size(info.size))
    if platform == "win32":
        _empty_windows()
    else:
        _empty_trash()
    return info


# =============================================================================
# Hibernation
# =============================================================================


def hibernation_report(path: str) -> HibernationReport:
    """Report the size of the hibernation file without touching it.

    Args:
        path: Location of the hibernation file.

    Returns:
        HibernationReport; ``size`` is None when the file does not exist.

    Raises:
        OSError: If the file exists but cannot be inspected.
    """
    try:
        size = os.stat(path).st_size
    except FileNotFoundError:
        return HibernationReport(path=path)
    return HibernationReport(path=path, size=size)
