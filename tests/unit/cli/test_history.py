"""Unit tests for history command.

Tests for the CLI history command implementation.
"""

import json
from unittest.mock import MagicMock, patch

from cleanctl.cli.main import app
from cleanctl.models.history import RunRecord
from typer.testing import CliRunner

runner = CliRunner()


def _records() -> list[RunRecord]:
    return [
        RunRecord(
            id="abc123def456",
            timestamp="2026-01-15T10:30:00Z",
            category="all",
            state="completed_with_failures",
            bytes_freed=2048,
            items_removed=4,
            items_failed=1,
            failed_names=("locked.bin",),
        ),
        RunRecord(
            id="fed987cba654",
            timestamp="2026-01-14T08:00:00Z",
            category="download",
            state="completed",
            items_removed=2,
        ),
    ]


class TestHistoryCommand:
    """Tests for cleanctl history command."""

    def test_history_help(self) -> None:
        """History command shows help."""
        result = runner.invoke(app, ["history", "--help"])

        assert result.exit_code == 0
        assert "--limit" in result.output
        assert "--json" in result.output

    @patch("cleanctl.cli.commands.history.StateManager")
    def test_history_empty(self, mock_state: MagicMock) -> None:
        """Empty history prints a message."""
        mock_state.return_value.get_history.return_value = []

        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "No history entries found." in result.output

    @patch("cleanctl.cli.commands.history.StateManager")
    def test_history_table(self, mock_state: MagicMock) -> None:
        """Runs are listed in a table."""
        mock_state.return_value.get_history.return_value = _records()

        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "Cleanup History" in result.output
        assert "abc123de" in result.output
        assert "download" in result.output

    @patch("cleanctl.cli.commands.history.StateManager")
    def test_history_json(self, mock_state: MagicMock) -> None:
        """--json prints the stored records."""
        mock_state.return_value.get_history.return_value = _records()

        result = runner.invoke(app, ["history", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [entry["id"] for entry in data] == ["abc123def456", "fed987cba654"]
        assert data[0]["failed_names"] == ["locked.bin"]

    @patch("cleanctl.cli.commands.history.StateManager")
    def test_history_options_passed(self, mock_state: MagicMock) -> None:
        """--limit and --failed reach the state manager."""
        mock_state.return_value.get_history.return_value = []

        runner.invoke(app, ["history", "-n", "5", "--failed"])

        mock_state.return_value.get_history.assert_called_once_with(limit=5, failed_only=True)

    @patch("cleanctl.cli.commands.history.StateManager")
    def test_aborted_run_marked(self, mock_state: MagicMock) -> None:
        """Runs with a run-level error are flagged."""
        mock_state.return_value.get_history.return_value = [
            RunRecord(
                id="0123456789ab",
                timestamp="2026-01-15T10:30:00Z",
                category="bogus",
                state="completed_with_failures",
                error="unknown category",
            )
        ]

        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "aborted" in result.output
