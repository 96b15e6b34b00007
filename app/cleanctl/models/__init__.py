"""Data models for cleanctl.

This module exports the catalog definitions and cleanup result types
shared by the engine and the CLI.
"""

from cleanctl.models.catalog import Category, CleanupItem, CleanupTarget, ItemKind, WalkMode
from cleanctl.models.history import RunRecord, create_run_record
from cleanctl.models.result import (
    FAILED,
    MAX_FAILED_NAMES,
    SKIPPED_CRITICAL,
    SKIPPED_LOCKED,
    CleanupResult,
    OutcomeKind,
    PathOutcome,
    format_size,
)

__all__ = [
    "FAILED",
    "MAX_FAILED_NAMES",
    "SKIPPED_CRITICAL",
    "SKIPPED_LOCKED",
    "Category",
    "CleanupItem",
    "CleanupResult",
    "CleanupTarget",
    "ItemKind",
    "OutcomeKind",
    "PathOutcome",
    "RunRecord",
    "WalkMode",
    "create_run_record",
    "format_size",
]
