"""Auto-start registration cleanup.

This module provides the auto-start stores (Windows registry Run keys,
freedesktop autostart directories) and the pruner that removes entries
pointing at executables that no longer exist.
"""

from cleanctl.registry.pruner import PruneResult, RegistryPruner
from cleanctl.registry.stores import (
    RUN_KEY_PATH,
    AutoStartEntry,
    AutoStartScope,
    AutoStartStore,
    WinregAutoStartStore,
    XdgAutostartStore,
    default_stores,
    extract_target,
)

__all__ = [
    "RUN_KEY_PATH",
    "AutoStartEntry",
    "AutoStartScope",
    "AutoStartStore",
    "PruneResult",
    "RegistryPruner",
    "WinregAutoStartStore",
    "XdgAutostartStore",
    "default_stores",
    "extract_target",
]
