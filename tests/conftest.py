"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from cleanctl.filesystem.locations import SystemLocations
from cleanctl.filesystem.operator import DeletionExecutor, RetryPolicy
from cleanctl.filesystem.protected import ProtectedLayout, SafetyClassifier
from cleanctl.filesystem.walker import DirectoryWalker


@pytest.fixture
def make_file() -> Callable[..., Path]:
    """Factory creating a file of the given size (parents included)."""

    def _make(path: Path, size: int = 10) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
        return path

    return _make


@pytest.fixture
def sleeps() -> list[float]:
    """Recorded backoff sleeps (nothing actually sleeps)."""
    return []


@pytest.fixture
def locked_paths() -> set[str]:
    """Paths the fake lock probe reports as locked."""
    return set()


@pytest.fixture
def executor(sleeps: list[float], locked_paths: set[str]) -> DeletionExecutor:
    """Deletion executor with a fake lock probe and no real sleeping."""
    return DeletionExecutor(
        RetryPolicy(attempts=3, backoff=0.1),
        lock_probe=lambda path: path in locked_paths,
        sleep=sleeps.append,
    )


@pytest.fixture
def protected_root(tmp_path: Path) -> Path:
    """Directory that the test classifier treats as an OS subtree."""
    root = tmp_path / "os-root" / "bin"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def classifier(protected_root: Path) -> SafetyClassifier:
    """Classifier protecting only ``protected_root`` and the filename deny-list."""
    return SafetyClassifier(ProtectedLayout(protected_roots=(str(protected_root),)))


@pytest.fixture
def walker(classifier: SafetyClassifier, executor: DeletionExecutor) -> DirectoryWalker:
    """Walker wired to the fake executor."""
    return DirectoryWalker(classifier, executor)


@pytest.fixture
def locations(tmp_path: Path) -> SystemLocations:
    """POSIX special folders rooted in a temporary home directory."""
    home = tmp_path / "home"
    home.mkdir(exist_ok=True)
    return SystemLocations.detect(environ={"HOME": str(home)}, platform="linux")


@pytest.fixture
def xdg_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[[str], Path]:
    """Point the XDG config and state directories into tmp_path.

    Returns:
        Function mapping "config" or "state" to the cleanctl directory.
    """
    config_home = tmp_path / "xdg-config"
    state_home = tmp_path / "xdg-state"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("XDG_STATE_HOME", str(state_home))

    def _dir(kind: str) -> Path:
        base = config_home if kind == "config" else state_home
        return base / "cleanctl"

    return _dir


@pytest.fixture
def isolated_home(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    xdg_env: Callable[[str], Path],
) -> Path:
    """Run against a temporary home with no system temp override.

    Returns:
        The temporary home directory.
    """
    home = tmp_path / "home"
    home.mkdir(exist_ok=True)
    monkeypatch.setenv("HOME", str(home))
    for name in ("XDG_CACHE_HOME", "XDG_DATA_HOME", "TMPDIR"):
        monkeypatch.delenv(name, raising=False)
    return home
