"""User settings for cleanctl.

Settings live in ``~/.config/cleanctl/settings.toml``::

    [selection]
    windows-old = false

    [retry]
    attempts = 3
    backoff_ms = 100

    [safety]
    protected_patterns = ["~/.ssh/*"]

    [colors]
    success = "#03b971"

A missing file means defaults. An invalid file is reported and ignored.
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cleanctl.core.errors import SettingsError
from cleanctl.core.paths import ensure_dir, get_settings_path
from cleanctl.core.theme import ThemeColors
from cleanctl.filesystem.operator import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_PROTECTED_PATTERNS: tuple[str, ...] = (
    "~/.ssh/*",
    "~/.gnupg/*",
    "~/.local/share/keyrings/*",
    "~/.config/cleanctl/*",
)


class RetrySettings(BaseModel):
    """Deletion retry settings."""

    model_config = ConfigDict(extra="forbid")

    attempts: Annotated[int, Field(ge=1, le=10, description="Attempts per path")] = 3
    backoff_ms: Annotated[int, Field(ge=0, le=5000, description="Sleep between attempts")] = 100

    def to_policy(self) -> RetryPolicy:
        """Convert to the executor's retry policy."""
        return RetryPolicy(attempts=self.attempts, backoff=self.backoff_ms / 1000)


class SafetySettings(BaseModel):
    """Extra safety rules."""

    model_config = ConfigDict(extra="forbid")

    protected_patterns: Annotated[
        list[str],
        Field(
            default_factory=lambda: list(DEFAULT_PROTECTED_PATTERNS),
            description="Glob patterns that are never deleted (~ expands to home)",
        ),
    ]


class Settings(BaseModel):
    """Complete settings file."""

    model_config = ConfigDict(extra="forbid")

    selection: Annotated[
        dict[str, bool],
        Field(default_factory=dict, description="Item name to enabled state"),
    ]
    retry: Annotated[RetrySettings, Field(default_factory=RetrySettings)]
    safety: Annotated[SafetySettings, Field(default_factory=SafetySettings)]
    colors: Annotated[ThemeColors, Field(default_factory=ThemeColors)]


def load_settings(path: Path | None = None, *, strict: bool = False) -> Settings:
    """Load settings, falling back to defaults.

    Commands that delete files load strictly: an unreadable or invalid
    file then raises instead of silently re-enabling every item.

    Args:
        path: Settings file. Defaults to ~/.config/cleanctl/settings.toml.
        strict: Raise instead of falling back when the file exists but
            cannot be read or validated.

    Returns:
        Validated Settings (defaults if the file is missing, or invalid
        and not strict).

    Raises:
        SettingsError: If ``strict`` and the file is unreadable or invalid.
    """
    path = get_settings_path() if path is None else path
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return Settings.model_validate(data)
    except FileNotFoundError:
        return Settings()
    except (tomllib.TOMLDecodeError, OSError, ValidationError) as e:
        if strict:
            msg = f"Invalid settings in {path}: {e}"
            raise SettingsError(msg) from e
        logger.warning("Invalid settings in %s, using defaults: %s", path, e)
        return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Write settings to disk.

    Args:
        settings: Settings to write.
        path: Settings file. Defaults to ~/.config/cleanctl/settings.toml.

    Returns:
        Path the settings were written to.

    Raises:
        SettingsError: If the file cannot be written.
    """
    path = get_settings_path() if path is None else path
    try:
        ensure_dir(path.parent, "config")
        path.write_text(tomli_w.dumps(settings.model_dump(mode="json")), encoding="utf-8")
    except (OSError, RuntimeError) as e:
        msg = f"Cannot write settings to {path}: {e}"
        raise SettingsError(msg) from e
    return path
