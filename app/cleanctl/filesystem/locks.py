"""Lock probing for files held open by other processes.

A file is considered locked when it cannot be opened exclusively. The
probe releases the file immediately and never modifies its content,
timestamps or attributes.
"""

import logging
import os
import sys

logger = logging.getLogger(__name__)

if sys.platform == "win32":
    import ctypes
    from ctypes import wintypes

    _GENERIC_READ = 0x80000000
    _GENERIC_WRITE = 0x40000000
    _OPEN_EXISTING = 3
    _FILE_ATTRIBUTE_NORMAL = 0x80
    _INVALID_HANDLE_VALUE = wintypes.HANDLE(-1).value

    _kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
    _kernel32.CreateFileW.restype = wintypes.HANDLE
    _kernel32.CreateFileW.argtypes = (
        wintypes.LPCWSTR,
        wintypes.DWORD,
        wintypes.DWORD,
        wintypes.LPVOID,
        wintypes.DWORD,
        wintypes.DWORD,
        wintypes.HANDLE,
    )
    _kernel32.CloseHandle.argtypes = (wintypes.HANDLE,)

    def _probe(path: str) -> bool:
        # Share mode 0: fails if anyone else has the file open.
        handle = _kernel32.CreateFileW(
            path,
            _GENERIC_READ | _GENERIC_WRITE,
            0,
            None,
            _OPEN_EXISTING,
            _FILE_ATTRIBUTE_NORMAL,
            None,
        )
        if handle == _INVALID_HANDLE_VALUE:
            logger.debug("CreateFileW failed for %s (error %d)", path, ctypes.get_last_error())
            return True
        _kernel32.CloseHandle(handle)
        return False

else:
    import fcntl

    def _probe(path: str) -> bool:
        # Read-only mode bits are normalized by the executor, so open for
        # reading and test for an exclusive lock held elsewhere.
        try:
            fd = os.open(path, os.O_RDONLY | os.O_NONBLOCK)
        except OSError as e:
            logger.debug("Cannot open %s for lock probe: %s", path, e)
            return True
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            return True
        else:
            fcntl.flock(fd, fcntl.LOCK_UN)
            return False
        finally:
            os.close(fd)


def is_file_locked(path: str) -> bool:
    """Check if a file is currently held open exclusively elsewhere.

    Absence is not a lock: callers treat a missing file as already
    deleted.

    Args:
        path: Path of the file to probe.

    Returns:
        True if the file is locked or cannot be opened, False otherwise.
    """
    if not os.path.lexists(path):
        return False
    if os.path.islink(path):
        # Links are removed without opening their target.
        return False
    return _probe(path)
