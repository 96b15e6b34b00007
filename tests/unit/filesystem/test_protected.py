"""Unit tests for critical path classification."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from cleanctl.filesystem.locations import SystemLocations
from cleanctl.filesystem.protected import ProtectedLayout, SafetyClassifier


@pytest.fixture
def home() -> str:
    """Fake POSIX home directory."""
    return "/home/alice"


@pytest.fixture
def posix_classifier(home: str) -> SafetyClassifier:
    """Classifier for a Linux system."""
    locations = SystemLocations.detect(environ={"HOME": home}, platform="linux")
    return SafetyClassifier(ProtectedLayout.for_system(locations, platform="linux"))


class TestLayout:
    """Tests for ProtectedLayout.for_system."""

    def test_linux_layout(self, home: str) -> None:
        """Linux layouts protect system binaries and installed programs."""
        locations = SystemLocations.detect(environ={"HOME": home}, platform="linux")

        layout = ProtectedLayout.for_system(locations, platform="linux")

        assert "/usr/bin" in layout.protected_roots
        assert layout.program_roots == ("/opt",)
        assert layout.start_menu == os.path.join(home, ".local", "share", "applications")
        assert layout.os_root == "/usr"

    def test_windows_layout(self) -> None:
        """Windows layouts protect System32 and Program Files."""
        locations = SystemLocations.detect(
            environ={
                "USERPROFILE": "C:\\Users\\alice",
                "SystemRoot": "C:\\Windows",
                "ProgramFiles": "C:\\Program Files",
                "ProgramFiles(x86)": "C:\\Program Files (x86)",
                "APPDATA": "C:\\Users\\alice\\AppData\\Roaming",
            },
            platform="win32",
        )

        layout = ProtectedLayout.for_system(locations, platform="win32")

        assert any(root.endswith("System32") for root in layout.protected_roots)
        assert any(root.endswith("WinSxS") for root in layout.protected_roots)
        assert layout.program_roots == ("C:\\Program Files", "C:\\Program Files (x86)")
        assert layout.os_root == "C:\\Windows"
        assert layout.start_menu is not None
        assert layout.start_menu.endswith("Start Menu")

    def test_patterns_passed_through(self, home: str) -> None:
        """Configured patterns end up in the layout."""
        locations = SystemLocations.detect(environ={"HOME": home}, platform="linux")

        layout = ProtectedLayout.for_system(
            locations, protected_patterns=("~/.ssh/*",), platform="linux"
        )

        assert layout.protected_patterns == ("~/.ssh/*",)


class TestSafetyClassifier:
    """Tests for SafetyClassifier rules."""

    def test_system_binary_is_critical(self, posix_classifier: SafetyClassifier) -> None:
        """Paths below the OS binary subtree are critical."""
        assert posix_classifier.is_critical("/usr/bin/ls") is True

    def test_user_cache_is_safe(self, posix_classifier: SafetyClassifier, home: str) -> None:
        """Paths below a user application cache are safe."""
        path = f"{home}/.cache/google-chrome/Default/Cache/data_0"

        assert posix_classifier.is_critical(path) is False
        assert posix_classifier.explain(path) is None

    def test_protected_root_itself_is_critical(self, posix_classifier: SafetyClassifier) -> None:
        """The protected root directory itself is critical."""
        assert posix_classifier.is_critical("/etc") is True

    def test_sibling_prefix_is_not_protected(self, posix_classifier: SafetyClassifier) -> None:
        """A root prefix alone does not make a sibling critical."""
        assert posix_classifier.is_critical("/etcetera/file.tmp") is False

    @pytest.mark.parametrize("name", ["NTUSER.DAT", "pagefile.sys", "hiberfil.sys", "UsrClass.dat"])
    def test_deny_listed_filenames(self, posix_classifier: SafetyClassifier, name: str) -> None:
        """Deny-listed filenames are critical anywhere, in any case."""
        reason = posix_classifier.explain(f"/tmp/anywhere/{name}")

        assert reason is not None
        assert "system file" in reason

    def test_program_tree_is_critical(self, posix_classifier: SafetyClassifier) -> None:
        """Installed program files are critical."""
        reason = posix_classifier.explain("/opt/app/bin/tool")

        assert reason is not None
        assert "installed programs" in reason

    @pytest.mark.parametrize(
        "path",
        [
            "/opt/app/cache/blob",
            "/opt/app/Temp/x.tmp",
            "/opt/app/logs/today.log",
            "/opt/app/Code_Cache/js/index",
        ],
    )
    def test_program_cache_segments_are_safe(
        self, posix_classifier: SafetyClassifier, path: str
    ) -> None:
        """Cache-like directories inside program trees are cleanable."""
        assert posix_classifier.is_critical(path) is False

    @pytest.mark.parametrize(
        "path",
        [
            "/opt/app/GPUCache/data_1",
            "/opt/app/cache2/entries/blob",
            "/opt/app/CachedData/abc/x.js",
        ],
    )
    def test_cache_words_must_stand_alone(
        self, posix_classifier: SafetyClassifier, path: str
    ) -> None:
        """Segments that only embed a cache word stay critical in program trees."""
        assert posix_classifier.is_critical(path) is True

    def test_program_root_file_is_critical(self, posix_classifier: SafetyClassifier) -> None:
        """Files directly in a program root are critical."""
        assert posix_classifier.is_critical("/opt/cache.bin") is True

    def test_start_menu_is_critical(self, posix_classifier: SafetyClassifier, home: str) -> None:
        """Start menu entries are critical."""
        path = f"{home}/.local/share/applications/editor.desktop"

        assert posix_classifier.explain(path) == "inside the start menu"

    def test_os_metadata_inside_os_root(self, posix_classifier: SafetyClassifier) -> None:
        """Desktop metadata files are critical inside the OS tree only."""
        assert posix_classifier.is_critical("/usr/share/icons/Thumbs.db") is True

    def test_os_metadata_elsewhere_is_safe(
        self, posix_classifier: SafetyClassifier, home: str
    ) -> None:
        """Desktop metadata files outside the OS tree are safe."""
        assert posix_classifier.is_critical(f"{home}/Pictures/Thumbs.db") is False

    def test_empty_path_is_critical(self, posix_classifier: SafetyClassifier) -> None:
        """An empty path is never safe."""
        assert posix_classifier.explain("") == "empty path"

    def test_unresolvable_path_is_critical(self, posix_classifier: SafetyClassifier) -> None:
        """Paths that cannot be resolved are treated as critical."""
        with patch(
            "cleanctl.filesystem.protected._normalize", side_effect=ValueError("embedded null")
        ):
            assert posix_classifier.explain("/tmp/x") == "path cannot be resolved"


class TestProtectedPatterns:
    """Tests for configured protected patterns."""

    def test_absolute_pattern(self, tmp_path: Path) -> None:
        """Absolute patterns protect matching paths."""
        classifier = SafetyClassifier(
            ProtectedLayout(protected_patterns=(str(tmp_path / "vault" / "*"),))
        )

        assert classifier.is_critical(str(tmp_path / "vault" / "key.pem")) is True
        assert classifier.is_critical(str(tmp_path / "other" / "key.pem")) is False

    def test_home_pattern(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Patterns starting with ~ expand to the home directory."""
        monkeypatch.setenv("HOME", str(tmp_path))
        classifier = SafetyClassifier(ProtectedLayout(protected_patterns=("~/.ssh/*",)))

        reason = classifier.explain(str(tmp_path / ".ssh" / "id_ed25519"))

        assert reason == "matches a protected path pattern"

    def test_classification_is_pure(self, tmp_path: Path) -> None:
        """Classification never touches the filesystem."""
        classifier = SafetyClassifier(ProtectedLayout())
        path = tmp_path / "does-not-exist" / "x"

        classifier.is_critical(str(path))

        assert not path.parent.exists()
