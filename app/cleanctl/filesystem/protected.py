"""Critical paths that must never be deleted.

This module decides whether a path is safe to hand to the deletion
executor. The decision is an ordered list of rules evaluated
case-insensitively; anything that cannot be resolved is treated as
critical.
"""

import fnmatch
import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path

from cleanctl.filesystem.locations import SystemLocations

logger = logging.getLogger(__name__)

# Filenames that are critical regardless of location.
CRITICAL_FILENAMES: frozenset[str] = frozenset(
    {
        # User profile hives
        "ntuser.dat",
        "ntuser.dat.log",
        "ntuser.ini",
        "usrclass.dat",
        # Registry hives
        "sam",
        "system",
        "security",
        "software",
        # Boot loader
        "boot.ini",
        "bootmgr",
        "bootmgr.efi",
        # Paging and hibernation
        "pagefile.sys",
        "swapfile.sys",
        "hiberfil.sys",
    }
)

# Directory words that make a Program Files path cleanable.
ALLOWED_PROGRAM_SEGMENTS: frozenset[str] = frozenset({"cache", "temp", "tmp", "log", "logs"})

# Desktop metadata that is only critical inside the OS tree.
OS_METADATA_FILENAMES: frozenset[str] = frozenset({"thumbs.db", "desktop.ini"})

_WINDOWS_PROTECTED_SUBDIRS: tuple[str, ...] = ("System32", "SysWOW64", "Boot", "WinSxS")

_POSIX_PROTECTED_ROOTS: tuple[str, ...] = (
    "/bin",
    "/sbin",
    "/boot",
    "/lib",
    "/lib32",
    "/lib64",
    "/usr/bin",
    "/usr/sbin",
    "/usr/lib",
    "/etc",
)

_WORD_SPLIT = re.compile(r"[^0-9a-z]+")


@dataclass(frozen=True, slots=True)
class ProtectedLayout:
    """Platform locations the safety rules are evaluated against.

    Attributes:
        protected_roots: OS subtrees that are always critical.
        program_roots: Installed-program trees (critical unless cache-like).
        start_menu: Roaming start menu folder.
        os_root: OS installation root (for desktop metadata files).
        protected_patterns: Extra glob patterns; ``~`` expands to home.
    """

    protected_roots: tuple[str, ...] = ()
    program_roots: tuple[str, ...] = ()
    start_menu: str | None = None
    os_root: str | None = None
    protected_patterns: tuple[str, ...] = ()

    @classmethod
    def for_system(
        cls,
        locations: SystemLocations,
        *,
        protected_patterns: tuple[str, ...] = (),
        platform: str | None = None,
    ) -> "ProtectedLayout":
        """Build the layout for the running platform.

        Args:
            locations: Resolved special folders.
            protected_patterns: Extra user-configured glob patterns.
            platform: Platform identifier. Defaults to ``sys.platform``.

        Returns:
            ProtectedLayout for the platform.
        """
        platform = sys.platform if platform is None else platform

        if platform == "win32":
            windows = locations.windows or "C:\\Windows"
            start_menu = None
            if locations.app_data:
                start_menu = os.path.join(
                    locations.app_data, "Microsoft", "Windows", "Start Menu"
                )
            return cls(
                protected_roots=tuple(os.path.join(windows, d) for d in _WINDOWS_PROTECTED_SUBDIRS),
                program_roots=tuple(
                    p for p in (locations.program_files, locations.program_files_x86) if p
                ),
                start_menu=start_menu,
                os_root=windows,
                protected_patterns=protected_patterns,
            )

        data_home = locations.data_home or os.path.join(
            locations.user_profile, ".local", "share"
        )
        return cls(
            protected_roots=_POSIX_PROTECTED_ROOTS,
            program_roots=("/opt",),
            start_menu=os.path.join(data_home, "applications"),
            os_root="/usr",
            protected_patterns=protected_patterns,
        )


def _normalize(path: str) -> str:
    return os.path.normpath(os.path.abspath(path)).lower()


def _is_under(path: str, root: str) -> bool:
    """Check if a normalized path equals or lies below a root."""
    root = _normalize(root)
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


class SafetyClassifier:
    """Pure predicate deciding whether a path must never be touched.

    Args:
        layout: Platform locations to evaluate the rules against.
    """

    def __init__(self, layout: ProtectedLayout) -> None:
        self._layout = layout

    @property
    def layout(self) -> ProtectedLayout:
        """Layout the classifier evaluates against."""
        return self._layout

    def is_critical(self, path: str) -> bool:
        """Check if a path is critical and must not be deleted.

        Args:
            path: Absolute filesystem path to check.

        Returns:
            True if the path is critical (or could not be resolved).
        """
        return self.explain(path) is not None

    def explain(self, path: str) -> str | None:
        """Return the reason a path is critical.

        Args:
            path: Absolute filesystem path to check.

        Returns:
            Human-readable reason, or None if the path is safe to delete.
        """
        if not path:
            return "empty path"
        try:
            return self._evaluate(path)
        except (OSError, ValueError) as e:
            logger.debug("Cannot resolve %s, treating as critical: %s", path, e)
            return "path cannot be resolved"

    def _evaluate(self, path: str) -> str | None:
        layout = self._layout
        normalized = _normalize(path)
        filename = os.path.basename(normalized)
        directory = os.path.dirname(normalized)

        # 1. Deny-listed filenames
        if filename in CRITICAL_FILENAMES:
            return f"system file {filename!r}"

        # 2. Protected OS subtrees and configured patterns
        for root in layout.protected_roots:
            if _is_under(normalized, root):
                return f"inside protected system directory {root}"
        if self._matches_pattern(normalized):
            return "matches a protected path pattern"

        # 3. Program trees, unless a cache-like directory is involved
        for root in layout.program_roots:
            if _is_under(normalized, root):
                relative = os.path.relpath(directory, _normalize(root))
                if not _has_cache_segment(relative):
                    return f"inside installed programs {root}"
                break

        # 4. Start menu
        if layout.start_menu and _is_under(normalized, layout.start_menu):
            return "inside the start menu"

        # 5. Desktop metadata inside the OS tree
        if (
            filename in OS_METADATA_FILENAMES
            and layout.os_root
            and _is_under(normalized, layout.os_root)
        ):
            return f"{filename!r} inside the OS directory"

        return None

    def _matches_pattern(self, normalized: str) -> bool:
        home = str(Path.home())
        for pattern in self._layout.protected_patterns:
            expanded = home + pattern[1:] if pattern.startswith("~") else pattern
            if fnmatch.fnmatch(normalized, _normalize(expanded)):
                return True
        return False


def _has_cache_segment(relative_dir: str) -> bool:
    """Check if any directory segment is, or splits into, a cache-like word."""
    if relative_dir in ("", os.curdir):
        return False
    for segment in relative_dir.split(os.sep):
        if segment in ALLOWED_PROGRAM_SEGMENTS:
            return True
        if any(word in ALLOWED_PROGRAM_SEGMENTS for word in _WORD_SPLIT.split(segment)):
            return True
    return False
