"""Theme management for cleanctl CLI.

Colors come from the ``[colors]`` table of the settings file and fall
back to the built-in palette. Outcome styles (removed, skipped,
critical) color the cleanup tables.
"""

import logging
import re
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from cleanctl.core.paths import get_settings_path

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})")

# Styles rendered bold on top of their color
_BOLD_STYLES = frozenset({"error", "critical"})


class ThemeColors(BaseModel):
    """Color configuration for cleanctl CLI.

    All colors must be hex codes (#RRGGBB or #RGB).
    """

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Path outcomes
    removed: str = "#c1ff62"
    skipped: str = "#0e8ac8"
    critical: str = "#d44ebc"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        """Reject anything that is not a hex color."""
        if not isinstance(v, str) or not _HEX_COLOR.fullmatch(v.strip()):
            msg = f"{info.field_name}: expected #RGB or #RRGGBB, got {v!r}"
            raise ValueError(msg)
        return v.strip()


def load_colors(path: Path | None = None) -> ThemeColors:
    """Load theme colors from the settings file.

    Only the ``[colors]`` table is read; other sections are validated
    by ``load_settings``.

    Args:
        path: Settings file. Defaults to ~/.config/cleanctl/settings.toml.

    Returns:
        ThemeColors with user overrides applied.
    """
    path = get_settings_path() if path is None else path
    try:
        with open(path, "rb") as f:
            table = tomllib.load(f).get("colors", {})
    except FileNotFoundError:
        return ThemeColors()
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Failed to read colors from %s: %s", path, e)
        return ThemeColors()

    if not isinstance(table, dict):
        logger.warning("Invalid 'colors' section in %s", path)
        return ThemeColors()

    try:
        return ThemeColors.model_validate(table)
    except ValidationError as e:
        logger.warning("Theme validation failed, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Convert ThemeColors to a Rich Theme.

    Args:
        colors: Colors to convert. Loaded from the settings file if None.

    Returns:
        Rich Theme with one style per color plus ``bold_header`` and ``dim``.
    """
    colors = load_colors() if colors is None else colors

    styles = {
        name: f"bold {value}" if name in _BOLD_STYLES else value
        for name, value in colors.model_dump().items()
    }
    styles["bold_header"] = f"bold {colors.header}"
    styles["dim"] = colors.muted
    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme, loading and caching it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
