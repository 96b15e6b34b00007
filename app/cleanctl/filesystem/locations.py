"""Special-folder resolution for catalog placeholders.

Catalog roots are written as templates such as
``{local_app_data}/Google/Chrome/User Data/Default/Cache``. This module
resolves the placeholders for the running system from the environment,
falling back to locations under the user's home directory.
"""

import glob
import logging
import os
import re
import sys
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from pathlib import Path

from cleanctl.core.errors import CatalogError

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True, slots=True)
class SystemLocations:
    """Resolved special folders of the running system.

    Any field may be None when the folder does not exist as a concept on
    this platform (e.g. ``program_files`` on Linux). Targets that use an
    unresolved placeholder are dropped from the catalog.
    """

    user_profile: str
    windows: str | None = None
    system_drive: str | None = None
    program_files: str | None = None
    program_files_x86: str | None = None
    app_data: str | None = None
    local_app_data: str | None = None
    documents: str | None = None
    downloads: str | None = None
    temp: str | None = None
    tmp: str | None = None
    cache_home: str | None = None
    data_home: str | None = None
    config_home: str | None = None

    @classmethod
    def detect(
        cls,
        environ: Mapping[str, str] | None = None,
        platform: str | None = None,
    ) -> "SystemLocations":
        """Resolve special folders from the environment.

        Args:
            environ: Environment mapping. Defaults to ``os.environ``.
            platform: Platform identifier. Defaults to ``sys.platform``.

        Returns:
            SystemLocations for the given platform.
        """
        env = os.environ if environ is None else environ
        platform = sys.platform if platform is None else platform

        if platform == "win32":
            return cls._detect_windows(env)
        return cls._detect_posix(env)

    @classmethod
    def _detect_windows(cls, env: Mapping[str, str]) -> "SystemLocations":
        profile = env.get("USERPROFILE") or str(Path.home())
        windows = env.get("SystemRoot") or env.get("WINDIR")
        drive = env.get("SystemDrive")
        if drive:
            drive = drive.rstrip("\\/") + "\\"
        elif windows:
            drive = os.path.splitdrive(windows)[0] + "\\"

        temp = env.get("TEMP")
        tmp = env.get("TMP")

        return cls(
            user_profile=profile,
            windows=windows,
            system_drive=drive,
            program_files=env.get("ProgramFiles"),
            program_files_x86=env.get("ProgramFiles(x86)"),
            app_data=env.get("APPDATA") or os.path.join(profile, "AppData", "Roaming"),
            local_app_data=env.get("LOCALAPPDATA") or os.path.join(profile, "AppData", "Local"),
            documents=os.path.join(profile, "Documents"),
            downloads=os.path.join(profile, "Downloads"),
            temp=temp,
            tmp=tmp if tmp != temp else None,
        )

    @classmethod
    def _detect_posix(cls, env: Mapping[str, str]) -> "SystemLocations":
        home = env.get("HOME") or str(Path.home())
        return cls(
            user_profile=home,
            documents=os.path.join(home, "Documents"),
            downloads=os.path.join(home, "Downloads"),
            temp=env.get("TMPDIR"),
            cache_home=env.get("XDG_CACHE_HOME") or os.path.join(home, ".cache"),
            data_home=env.get("XDG_DATA_HOME") or os.path.join(home, ".local", "share"),
            config_home=env.get("XDG_CONFIG_HOME") or os.path.join(home, ".config"),
        )

    def placeholders(self) -> dict[str, str | None]:
        """Return the placeholder name to folder mapping."""
        return asdict(self)

    def expand(self, template: str) -> str | None:
        """Substitute placeholders in a catalog root template.

        Substituted folder names are glob-escaped so that only wildcards
        written in the template itself are expanded later.

        Args:
            template: Root template, e.g. ``{app_data}/ShareX``.

        Returns:
            Normalized absolute path, or None if a placeholder has no
            value on this system.

        Raises:
            CatalogError: If the template uses an unknown placeholder.
        """
        values = self.placeholders()
        missing: list[str] = []

        def _substitute(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in values:
                msg = f"Unknown placeholder {{{key}}} in {template!r}"
                raise CatalogError(msg)
            value = values[key]
            if value is None:
                missing.append(key)
                return ""
            return glob.escape(value)

        expanded = _PLACEHOLDER.sub(_substitute, template)
        if missing:
            logger.debug("Unresolved placeholder(s) %s in %s", missing, template)
            return None

        expanded = os.path.normpath(expanded)
        if not os.path.isabs(expanded):
            logger.debug("Template %s does not resolve to an absolute path", template)
            return None
        return expanded
