"""Auto-start entry stores.

A store exposes the auto-start registrations of one scope (current user
or machine-wide) as AutoStartEntry records and can remove them. Two
backends are provided: the Windows ``Run`` registry keys and the
freedesktop autostart directories used on Linux desktops.
"""

import configparser
import logging
import os
import shlex
import sys
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from cleanctl.core.errors import RegistryAccessDenied, UnsupportedPlatformError

logger = logging.getLogger(__name__)

RUN_KEY_PATH = r"Software\Microsoft\Windows\CurrentVersion\Run"

# Extensions that end the executable part of an unquoted command line.
_EXECUTABLE_SUFFIXES: tuple[str, ...] = (".exe", ".bat", ".cmd", ".com", ".lnk", ".vbs", ".ps1")


class AutoStartScope(str, Enum):
    """Scope of an auto-start store.

    Attributes:
        USER: Registrations of the current user.
        MACHINE: Machine-wide registrations (usually needs elevation).
    """

    USER = "user"
    MACHINE = "machine"


@dataclass(frozen=True, slots=True)
class AutoStartEntry:
    """A single auto-start registration.

    Attributes:
        hive: Store identifier (e.g. ``HKCU`` or ``~/.config/autostart``).
        key_path: Key or directory holding the value.
        value_name: Name of the value (registry value or .desktop file).
        target_path: Executable path the entry launches, or None when the
            data is not a filesystem path.
    """

    hive: str
    key_path: str
    value_name: str
    target_path: str | None

    @property
    def display_name(self) -> str:
        """Short name used in logs, e.g. ``HKCU\\Run\\Updater``."""
        key = self.key_path.replace("/", "\\").rstrip("\\").rsplit("\\", 1)[-1]
        return f"{self.hive}\\{key}\\{self.value_name}"


class AutoStartStore(Protocol):
    """Interface of an auto-start store."""

    @property
    def scope(self) -> AutoStartScope: ...

    def entries(self) -> list[AutoStartEntry]:
        """Read all entries.

        Raises:
            RegistryAccessDenied: If the store cannot be opened.
        """
        ...

    def remove(self, entry: AutoStartEntry) -> None:
        """Remove one entry.

        Raises:
            RegistryAccessDenied: If the entry cannot be removed.
        """
        ...


def extract_target(command: str) -> str | None:
    """Extract the executable path from an auto-start command line.

    Handles quoted paths, trailing arguments and environment variables.

    Args:
        command: Raw command line stored in the entry.

    Returns:
        Absolute executable path, or None if the command does not start
        with an absolute filesystem path.
    """
    command = os.path.expandvars(command.strip())
    if not command:
        return None

    if command[0] in "\"'":
        quote = command[0]
        end = command.find(quote, 1)
        candidate = command[1:end] if end != -1 else command[1:]
    elif os.path.exists(command):
        candidate = command
    else:
        candidate = _unquoted_executable(command)

    candidate = candidate.strip()
    if not candidate or not _is_absolute(candidate):
        return None
    return candidate


def _unquoted_executable(command: str) -> str:
    # Prefer the shortest whitespace-delimited prefix that exists, then the
    # prefix ending in an executable extension, then the first token.
    parts = command.split(" ")
    for i in range(1, len(parts) + 1):
        prefix = " ".join(parts[:i])
        if os.path.exists(prefix):
            return prefix
    lowered = command.lower()
    for suffix in _EXECUTABLE_SUFFIXES:
        index = lowered.find(suffix)
        if index != -1:
            return command[: index + len(suffix)]
    return parts[0]


def _is_absolute(path: str) -> bool:
    if os.path.isabs(path):
        return True
    # Drive-letter paths are absolute even when read on another platform.
    return len(path) > 2 and path[1] == ":" and path[2] in "\\/"


# =============================================================================
# Windows registry
# =============================================================================


class WinregAutoStartStore:
    """The ``Run`` key of one registry hive.

    Args:
        scope: USER reads HKEY_CURRENT_USER, MACHINE reads HKEY_LOCAL_MACHINE.
        key_path: Key below the hive.
    """

    def __init__(self, scope: AutoStartScope, key_path: str = RUN_KEY_PATH) -> None:
        if sys.platform != "win32":
            msg = "The Windows registry is only available on Windows"
            raise UnsupportedPlatformError(msg)
        self._scope = scope
        self._key_path = key_path

    @property
    def scope(self) -> AutoStartScope:
        """Scope of this store."""
        return self._scope

    @property
    def hive_name(self) -> str:
        """Short hive name."""
        return "HKCU" if self._scope == AutoStartScope.USER else "HKLM"

    def _hive(self) -> int:
        import winreg

        if self._scope == AutoStartScope.USER:
            return winreg.HKEY_CURRENT_USER
        return winreg.HKEY_LOCAL_MACHINE

    def entries(self) -> list[AutoStartEntry]:
        """Read the string values of the Run key."""
        import winreg

        result: list[AutoStartEntry] = []
        try:
            with winreg.OpenKey(self._hive(), self._key_path, 0, winreg.KEY_READ) as key:
                for name, data, value_type in self._iter_values(key):
                    if value_type not in (winreg.REG_SZ, winreg.REG_EXPAND_SZ):
                        continue
                    result.append(
                        AutoStartEntry(
                            hive=self.hive_name,
                            key_path=self._key_path,
                            value_name=name,
                            target_path=extract_target(str(data)),
                        )
                    )
        except FileNotFoundError:
            return []
        except PermissionError as e:
            msg = f"Cannot open {self.hive_name}\\{self._key_path}: {e}"
            raise RegistryAccessDenied(msg) from e
        return result

    @staticmethod
    def _iter_values(key: object) -> Iterator[tuple[str, object, int]]:
        import winreg

        index = 0
        while True:
            try:
                yield winreg.EnumValue(key, index)  # type: ignore[arg-type]
            except OSError:
                return
            index += 1

    def remove(self, entry: AutoStartEntry) -> None:
        """Delete a value from the Run key."""
        import winreg

        try:
            with winreg.OpenKey(self._hive(), entry.key_path, 0, winreg.KEY_SET_VALUE) as key:
                winreg.DeleteValue(key, entry.value_name)
        except FileNotFoundError:
            return
        except PermissionError as e:
            msg = f"Cannot delete {entry.display_name}: {e}"
            raise RegistryAccessDenied(msg) from e


# =============================================================================
# freedesktop autostart
# =============================================================================


class XdgAutostartStore:
    """A freedesktop autostart directory of ``.desktop`` files.

    Args:
        scope: Scope the directory belongs to.
        directory: Directory holding the ``.desktop`` files.
    """

    def __init__(self, scope: AutoStartScope, directory: Path) -> None:
        self._scope = scope
        self._directory = directory

    @classmethod
    def for_scope(cls, scope: AutoStartScope) -> "XdgAutostartStore":
        """Create the store for the standard directory of a scope."""
        if scope == AutoStartScope.USER:
            config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
            return cls(scope, Path(config_home) / "autostart")
        return cls(scope, Path("/etc/xdg/autostart"))

    @property
    def scope(self) -> AutoStartScope:
        """Scope of this store."""
        return self._scope

    def entries(self) -> list[AutoStartEntry]:
        """Read the ``.desktop`` files of the directory."""
        try:
            files = sorted(self._directory.glob("*.desktop"))
        except PermissionError as e:
            msg = f"Cannot read {self._directory}: {e}"
            raise RegistryAccessDenied(msg) from e

        hive = self._hive_label()
        result: list[AutoStartEntry] = []
        for path in files:
            command = self._read_command(path)
            if command is None:
                continue
            result.append(
                AutoStartEntry(
                    hive=hive,
                    key_path=str(self._directory),
                    value_name=path.name,
                    target_path=_desktop_target(command),
                )
            )
        return result

    def remove(self, entry: AutoStartEntry) -> None:
        """Delete the ``.desktop`` file of an entry."""
        path = Path(entry.key_path) / entry.value_name
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            msg = f"Cannot delete {path}: {e}"
            raise RegistryAccessDenied(msg) from e

    def _hive_label(self) -> str:
        try:
            return f"~/{self._directory.relative_to(Path.home())}"
        except ValueError:
            return str(self._directory)

    @staticmethod
    def _read_command(path: Path) -> str | None:
        parser = configparser.ConfigParser(interpolation=None, strict=False)
        parser.optionxform = str  # type: ignore[assignment,method-assign]
        try:
            parser.read(path, encoding="utf-8")
        except (configparser.Error, OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot parse autostart file %s: %s", path, e)
            return None
        if not parser.has_section("Desktop Entry"):
            return None
        section = parser["Desktop Entry"]
        # Disabling overrides are not registrations
        if section.get("Hidden", "").strip().lower() == "true":
            logger.debug("Skipping hidden autostart entry %s", path)
            return None
        if section.get("X-GNOME-Autostart-enabled", "").strip().lower() == "false":
            logger.debug("Skipping disabled autostart entry %s", path)
            return None
        # TryExec only gates visibility; the target is the Exec command
        return section.get("Exec")


def _desktop_target(command: str) -> str | None:
    try:
        tokens = shlex.split(command)
    except ValueError:
        return None
    if not tokens:
        return None
    return tokens[0] if os.path.isabs(tokens[0]) else None


def default_stores(platform: str | None = None) -> list[AutoStartStore]:
    """Create the user and machine stores for the running platform.

    Args:
        platform: Platform identifier. Defaults to ``sys.platform``.

    Returns:
        Stores in processing order: user scope first, then machine scope.
    """
    platform = sys.platform if platform is None else platform
    if platform == "win32":
        return [
            WinregAutoStartStore(AutoStartScope.USER),
            WinregAutoStartStore(AutoStartScope.MACHINE),
        ]
    return [
        XdgAutostartStore.for_scope(AutoStartScope.USER),
        XdgAutostartStore.for_scope(AutoStartScope.MACHINE),
    ]
