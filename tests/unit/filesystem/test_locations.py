"""Unit tests for special-folder resolution."""

import os

import pytest
from cleanctl.core.errors import CatalogError
from cleanctl.filesystem.locations import SystemLocations


class TestDetect:
    """Tests for SystemLocations.detect."""

    def test_posix_defaults(self) -> None:
        """XDG folders fall back to locations under HOME."""
        locations = SystemLocations.detect(environ={"HOME": "/home/alice"}, platform="linux")

        assert locations.user_profile == "/home/alice"
        assert locations.cache_home == os.path.join("/home/alice", ".cache")
        assert locations.data_home == os.path.join("/home/alice", ".local", "share")
        assert locations.downloads == os.path.join("/home/alice", "Downloads")
        assert locations.windows is None
        assert locations.program_files is None

    def test_posix_xdg_overrides(self) -> None:
        """XDG environment variables win over defaults."""
        locations = SystemLocations.detect(
            environ={"HOME": "/home/alice", "XDG_CACHE_HOME": "/var/cache/alice"},
            platform="linux",
        )

        assert locations.cache_home == "/var/cache/alice"

    def test_windows_environment(self) -> None:
        """Windows folders come from the environment."""
        locations = SystemLocations.detect(
            environ={
                "USERPROFILE": "C:\\Users\\alice",
                "SystemRoot": "C:\\Windows",
                "SystemDrive": "C:",
                "LOCALAPPDATA": "C:\\Users\\alice\\AppData\\Local",
                "TEMP": "C:\\Users\\alice\\AppData\\Local\\Temp",
                "TMP": "C:\\Users\\alice\\AppData\\Local\\Temp",
            },
            platform="win32",
        )

        assert locations.windows == "C:\\Windows"
        assert locations.system_drive == "C:\\"
        assert locations.local_app_data == "C:\\Users\\alice\\AppData\\Local"
        assert locations.temp == "C:\\Users\\alice\\AppData\\Local\\Temp"
        # Same folder as TEMP
        assert locations.tmp is None
        assert locations.cache_home is None


class TestExpand:
    """Tests for SystemLocations.expand."""

    @pytest.fixture
    def locations(self) -> SystemLocations:
        """POSIX locations for a fixed home."""
        return SystemLocations.detect(environ={"HOME": "/home/alice"}, platform="linux")

    def test_substitutes_placeholder(self, locations: SystemLocations) -> None:
        """Placeholders are replaced with the resolved folder."""
        assert locations.expand("{cache_home}/thumbnails") == os.path.normpath(
            "/home/alice/.cache/thumbnails"
        )

    def test_unresolved_placeholder_returns_none(self, locations: SystemLocations) -> None:
        """Folders that do not exist on this platform drop the template."""
        assert locations.expand("{windows}/Temp") is None

    def test_unknown_placeholder_raises(self, locations: SystemLocations) -> None:
        """Unknown placeholders are catalog errors."""
        with pytest.raises(CatalogError, match="Unknown placeholder"):
            locations.expand("{nowhere}/x")

    def test_relative_result_returns_none(self, locations: SystemLocations) -> None:
        """Templates must resolve to absolute paths."""
        assert locations.expand("relative/dir") is None

    def test_folder_names_are_glob_escaped(self) -> None:
        """Wildcards inside resolved folders are escaped, template wildcards are kept."""
        locations = SystemLocations.detect(environ={"HOME": "/home/a[1]"}, platform="linux")

        expanded = locations.expand("{user_profile}/profiles/*/cache2")

        assert expanded is not None
        assert "[[]1]" in expanded
        assert expanded.endswith(os.path.join("profiles", "*", "cache2"))

    def test_placeholders_cover_every_field(self, locations: SystemLocations) -> None:
        """Every field is available as a placeholder."""
        names = locations.placeholders()

        assert {"user_profile", "local_app_data", "cache_home", "downloads"} <= set(names)
