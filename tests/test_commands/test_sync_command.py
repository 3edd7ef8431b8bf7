"""Tests for sync command module."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from conftest import make_response, strip_ansi

from destiny_cache.__main__ import main
from destiny_cache.core.config import AppConfig
from destiny_cache.core.errors import CacheError, FetchError
from destiny_cache.core.sync import SyncResult
from destiny_cache.core.types import DefinitionType


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def sync_result():
    return SyncResult(
        counts={
            DefinitionType.RACE: 3,
            DefinitionType.CLASS: 3,
            DefinitionType.GENDER: 2,
            DefinitionType.ACTIVITY: 5,
        },
        activity_mode=4,
        filtered_activities=2,
        merged=10,
        written=10,
        elapsed=0.5,
    )


class TestSyncCommand:
    """Test sync command."""

    @patch("destiny_cache.commands.sync.run_sync")
    def test_sync_summary(self, mock_run_sync, runner, sync_result):
        """Test a successful run prints the summary."""
        mock_run_sync.return_value = sync_result

        result = runner.invoke(main, ["sync"])

        assert result.exit_code == 0
        assert "Sync Summary" in strip_ansi(result.output)
        assert "Merged" in strip_ansi(result.output)
        assert "Sync completed" in strip_ansi(result.output)
        mock_run_sync.assert_called_once()

    @patch("destiny_cache.commands.sync.run_sync")
    def test_sync_json(self, mock_run_sync, runner, sync_result):
        """Test JSON output."""
        mock_run_sync.return_value = sync_result

        result = runner.invoke(main, ["--output", "json", "sync"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["merged"] == 10
        assert data["counts"]["activity"] == 5

    @patch("destiny_cache.commands.sync.run_sync")
    def test_sync_overrides(self, mock_run_sync, runner, sync_result):
        """Test options override the configuration."""
        mock_run_sync.return_value = sync_result

        result = runner.invoke(main, ["sync", "--mode", "3", "--workers", "1", "--deadline", "90"])

        assert result.exit_code == 0
        config: AppConfig = mock_run_sync.call_args.args[0]
        assert config.activity_mode == 3
        assert config.max_workers == 1
        assert config.deadline == 90.0

    def test_sync_invalid_workers(self, runner):
        """Test a worker count below one is rejected."""
        result = runner.invoke(main, ["sync", "--workers", "0"])
        assert result.exit_code == 2

    @patch("destiny_cache.commands.sync.run_sync")
    def test_sync_cache_failure(self, mock_run_sync, runner):
        """Test a cache failure exits non-zero naming the stage and key."""
        mock_run_sync.side_effect = CacheError("Failed to write key [42]: down", key="42", stage="cache:write")

        result = runner.invoke(main, ["sync"])

        assert result.exit_code == 1
        assert "cache:write" in strip_ansi(result.output)
        assert "[42]" in strip_ansi(result.output)

    @patch("destiny_cache.commands.sync.run_sync")
    def test_sync_fetch_failure(self, mock_run_sync, runner):
        """Test a fetch failure exits non-zero."""
        mock_run_sync.side_effect = FetchError(
            "https://www.bungie.net/x.json returned HTTP 503",
            url="https://www.bungie.net/x.json",
            status_code=503,
            stage="entities:race",
        )

        result = runner.invoke(main, ["sync"])

        assert result.exit_code == 1
        assert "entities:race" in strip_ansi(result.output)


class TestManifestCommand:
    """Test manifest command."""

    @patch("httpx.Client.stream")
    def test_manifest_json(self, mock_stream, runner, manifest_payload):
        """Test the resolved URLs are printed."""
        mock_stream.return_value = make_response(manifest_payload)

        result = runner.invoke(main, ["--output", "json", "manifest"])

        assert result.exit_code == 0
        urls = json.loads(result.stdout)
        assert set(urls) == {"race", "class", "gender", "activity"}
        assert urls["race"].startswith("https://www.bungie.net/common/")

    @patch("httpx.Client.stream")
    def test_manifest_table(self, mock_stream, runner, manifest_payload):
        """Test the rich table output."""
        mock_stream.return_value = make_response(manifest_payload)

        result = runner.invoke(main, ["manifest"])

        assert result.exit_code == 0
        assert "Content Paths" in strip_ansi(result.output)

    @patch("httpx.Client.stream")
    def test_manifest_failure(self, mock_stream, runner):
        """Test a manifest failure exits non-zero."""
        mock_stream.return_value = make_response({}, status_code=500)

        result = runner.invoke(main, ["manifest"])

        assert result.exit_code == 1
        assert "manifest" in strip_ansi(result.output)
