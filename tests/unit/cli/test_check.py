"""Unit tests for check command."""

import io
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from cleanctl.cli.main import app
from cleanctl.core.theme import get_theme
from rich.console import Console
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def wide_output() -> Iterator[io.StringIO]:
    """Render the check table into a wide buffer."""
    buf = io.StringIO()
    test_console = Console(theme=get_theme(), file=buf, color_system=None, width=300)
    with patch("cleanctl.cli.commands.check.console", test_console):
        yield buf


@pytest.mark.usefixtures("isolated_home")
class TestCheckCommand:
    """Tests for cleanctl check command."""

    def test_safe_file(self, tmp_path: Path, wide_output: io.StringIO) -> None:
        """Ordinary files are safe and unlocked."""
        path = tmp_path / "cache.bin"
        path.write_bytes(b"x")

        result = runner.invoke(app, ["check", str(path)])

        assert result.exit_code == 0
        row = next(line for line in wide_output.getvalue().splitlines() if "cache.bin" in line)
        assert "safe" in row
        assert " no " in row

    def test_critical_path(self, wide_output: io.StringIO) -> None:
        """System binaries are critical."""
        result = runner.invoke(app, ["check", "/usr/bin/env"])

        assert result.exit_code == 0
        output = wide_output.getvalue()
        assert "critical" in output
        assert "protected system directory" in output

    def test_missing_path(self, tmp_path: Path, wide_output: io.StringIO) -> None:
        """Missing paths are marked as such."""
        result = runner.invoke(app, ["check", str(tmp_path / "nope.bin")])

        assert result.exit_code == 0
        assert "missing" in wide_output.getvalue()

    def test_deny_listed_file(self, tmp_path: Path, wide_output: io.StringIO) -> None:
        """Deny-listed filenames are critical anywhere."""
        result = runner.invoke(app, ["check", str(tmp_path / "pagefile.sys")])

        assert result.exit_code == 0
        assert "system file" in wide_output.getvalue()

    def test_protected_pattern(self, isolated_home: Path, wide_output: io.StringIO) -> None:
        """Default protected patterns cover SSH keys."""
        key = isolated_home / ".ssh" / "id_ed25519"
        key.parent.mkdir()
        key.write_text("secret")

        result = runner.invoke(app, ["check", str(key)])

        assert result.exit_code == 0
        assert "matches a protected path pattern" in wide_output.getvalue()
        assert key.exists()

    def test_requires_path(self) -> None:
        """At least one path is required."""
        result = runner.invoke(app, ["check"])

        assert result.exit_code != 0
