"""Unit tests for items command."""

import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest
from cleanctl.cli.main import app
from cleanctl.core.catalog import PathCatalog
from cleanctl.models.catalog import Category, CleanupItem, CleanupTarget, ItemKind, WalkMode
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def catalog() -> PathCatalog:
    """Small catalog across categories."""
    return PathCatalog(
        [
            CleanupItem(
                name="chrome-cache",
                label="Chrome cache",
                category=Category.SYSTEM,
                targets=(CleanupTarget(root="/home/alice/.cache/google-chrome/Default/Cache"),),
                description="Browser cache",
            ),
            CleanupItem(
                name="startup-entries",
                label="Stale startup entries",
                category=Category.SYSTEM,
                kind=ItemKind.REGISTRY,
            ),
            CleanupItem(
                name="downloads",
                label="Downloads folder",
                category=Category.DOWNLOAD,
                targets=(CleanupTarget(root="/home/alice/Downloads", mode=WalkMode.EMPTY),),
            ),
        ]
    )


@pytest.mark.usefixtures("isolated_home")
class TestItemsCommand:
    """Tests for cleanctl items command."""

    def test_items_table(self, catalog: PathCatalog) -> None:
        """The table lists every item."""
        with patch("cleanctl.cli.commands.items.require_catalog", return_value=catalog):
            result = runner.invoke(app, ["items"])

        assert result.exit_code == 0
        assert "Cleanup Items" in result.output
        assert "chrome-cache" in result.output
        assert "startup-entries" in result.output
        assert "3 item(s), 0 disabled" in result.output

    def test_items_by_category(self, catalog: PathCatalog) -> None:
        """The category argument filters the list."""
        with patch("cleanctl.cli.commands.items.require_catalog", return_value=catalog):
            result = runner.invoke(app, ["items", "download"])

        assert result.exit_code == 0
        assert "downloads" in result.output
        assert "chrome-cache" not in result.output

    def test_items_json(self, catalog: PathCatalog, xdg_env: Callable[[str], Path]) -> None:
        """JSON output includes targets and selection state."""
        config = xdg_env("config")
        config.mkdir(parents=True)
        (config / "settings.toml").write_text("[selection]\ndownloads = false\n")

        with patch("cleanctl.cli.commands.items.require_catalog", return_value=catalog):
            result = runner.invoke(app, ["items", "--format", "json"])

        assert result.exit_code == 0
        data = {entry["name"]: entry for entry in json.loads(result.output)}
        assert data["downloads"]["enabled"] is False
        assert data["chrome-cache"]["enabled"] is True
        assert data["downloads"]["targets"][0]["mode"] == "empty"
        assert data["startup-entries"]["kind"] == "registry"
        assert data["startup-entries"]["targets"] == []

    def test_items_empty(self) -> None:
        """An empty catalog prints a message."""
        with patch("cleanctl.cli.commands.items.require_catalog", return_value=PathCatalog([])):
            result = runner.invoke(app, ["items"])

        assert result.exit_code == 0
        assert "No cleanup items" in result.output

    def test_bundled_catalog(self) -> None:
        """Without patches the bundled catalog is listed."""
        result = runner.invoke(app, ["items", "-f", "json"])

        assert result.exit_code == 0
        names = [entry["name"] for entry in json.loads(result.output)]
        assert "startup-entries" in names

    def test_invalid_user_catalog(self, xdg_env: Callable[[str], Path]) -> None:
        """A broken user catalog is reported and exits 1."""
        config = xdg_env("config")
        config.mkdir(parents=True)
        (config / "catalog.toml").write_text("[[items]\n")

        result = runner.invoke(app, ["items"])

        assert result.exit_code == 1
        assert "Invalid TOML" in result.output
