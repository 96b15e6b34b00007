"""Filesystem cleanup engine.

This module provides special-folder resolution, critical path
classification, lock probing, retrying deletion and the directory
walker that drives them.
"""

from cleanctl.filesystem.locations import SystemLocations
from cleanctl.filesystem.locks import is_file_locked
from cleanctl.filesystem.operator import DeletionExecutor, RetryPolicy, normalize_attributes
from cleanctl.filesystem.protected import (
    CRITICAL_FILENAMES,
    ProtectedLayout,
    SafetyClassifier,
)
from cleanctl.filesystem.walker import DirectoryWalker

__all__ = [
    "CRITICAL_FILENAMES",
    "DeletionExecutor",
    "DirectoryWalker",
    "ProtectedLayout",
    "RetryPolicy",
    "SafetyClassifier",
    "SystemLocations",
    "is_file_locked",
    "normalize_attributes",
]
