"""Unit tests for select command."""

import tomllib
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from cleanctl.cli.main import app
from cleanctl.core.catalog import PathCatalog
from cleanctl.core.errors import SettingsError
from cleanctl.models.catalog import Category, CleanupItem
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture(autouse=True)
def use_catalog(isolated_home: Path) -> Iterator[PathCatalog]:
    """Make the select command use a two-item catalog."""
    catalog = PathCatalog(
        [
            CleanupItem(name="thumbnails", label="Thumbnails", category=Category.SYSTEM),
            CleanupItem(name="downloads", label="Downloads folder", category=Category.DOWNLOAD),
        ]
    )
    with patch("cleanctl.cli.commands.select.require_catalog", return_value=catalog):
        yield catalog


def _read_selection(xdg_env: Callable[[str], Path]) -> dict[str, bool]:
    with open(xdg_env("config") / "settings.toml", "rb") as f:
        return tomllib.load(f).get("selection", {})


class TestSelectCommand:
    """Tests for cleanctl select command."""

    def test_show_selection(self) -> None:
        """Without arguments the selection table is shown."""
        result = runner.invoke(app, ["select"])

        assert result.exit_code == 0
        assert "Item Selection" in result.output
        assert "thumbnails" in result.output
        assert "downloads" in result.output

    def test_disable(self, xdg_env: Callable[[str], Path]) -> None:
        """--disable persists a false entry."""
        result = runner.invoke(app, ["select", "downloads", "--disable"])

        assert result.exit_code == 0
        assert "Disabled: downloads" in result.output
        assert _read_selection(xdg_env) == {"downloads": False}

    def test_enable_removes_entry(self, xdg_env: Callable[[str], Path]) -> None:
        """--enable drops the entry again."""
        runner.invoke(app, ["select", "downloads", "thumbnails", "--disable"])

        result = runner.invoke(app, ["select", "downloads", "--enable"])

        assert result.exit_code == 0
        assert "Enabled: downloads" in result.output
        assert _read_selection(xdg_env) == {"thumbnails": False}

    def test_disabled_shown_in_table(self) -> None:
        """Disabled items show as not enabled."""
        runner.invoke(app, ["select", "downloads", "--disable"])

        result = runner.invoke(app, ["select"])

        row = next(line for line in result.output.splitlines() if "downloads" in line)
        assert "no" in row

    def test_reset(self, xdg_env: Callable[[str], Path]) -> None:
        """--reset enables every item."""
        runner.invoke(app, ["select", "downloads", "--disable"])

        result = runner.invoke(app, ["select", "--reset"])

        assert result.exit_code == 0
        assert "Selection reset" in result.output
        assert _read_selection(xdg_env) == {}

    def test_reset_with_names(self) -> None:
        """--reset does not accept item names."""
        result = runner.invoke(app, ["select", "downloads", "--reset"])

        assert result.exit_code == 1
        assert "does not take item names" in result.output

    def test_names_without_flag(self) -> None:
        """Changing items requires --enable or --disable."""
        result = runner.invoke(app, ["select", "downloads"])

        assert result.exit_code == 1
        assert "Specify --enable or --disable." in result.output

    def test_unknown_name(self, xdg_env: Callable[[str], Path]) -> None:
        """Unknown names are rejected and nothing is written."""
        result = runner.invoke(app, ["select", "nope", "--disable"])

        assert result.exit_code == 1
        assert "Unknown item(s): nope" in result.output
        assert not (xdg_env("config") / "settings.toml").exists()

    def test_invalid_settings_not_overwritten(self, xdg_env: Callable[[str], Path]) -> None:
        """An invalid settings file is reported and left untouched."""
        config = xdg_env("config")
        config.mkdir(parents=True)
        content = "[selection]\ndownloads = false\n\n[retry]\nattempts = 0\n"
        (config / "settings.toml").write_text(content, encoding="utf-8")

        result = runner.invoke(app, ["select", "thumbnails", "--disable"])

        assert result.exit_code == 1
        assert "Invalid settings" in result.output
        assert (config / "settings.toml").read_text(encoding="utf-8") == content

    def test_save_failure(self) -> None:
        """A settings write failure exits 1."""
        with patch(
            "cleanctl.cli.commands.select.save_settings",
            side_effect=SettingsError("Cannot write settings"),
        ):
            result = runner.invoke(app, ["select", "downloads", "--disable"])

        assert result.exit_code == 1
        assert "Cannot write settings" in result.output
