"""Tests for the trend-monitor CLI."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from trend_monitor.alerts.schemas import Alert, AlertSettings
from trend_monitor.cli import main
from trend_monitor.errors import ConfigurationError
from trend_monitor.services.collection_service import CollectionSummary


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_db():
    db = AsyncMock()
    db.fetch = AsyncMock(return_value=[])
    db.fetchval = AsyncMock(return_value=None)
    db.fetchrow = AsyncMock(return_value=None)
    db.execute = AsyncMock(return_value="UPDATE 1")
    return db


def _invoke(runner, mock_db, args, **kwargs):
    with patch("trend_monitor.storage.database.Database", return_value=mock_db):
        return runner.invoke(main, args, **kwargs)


def _keyword_row(name="galaxy", active=True):
    return {
        "id": f"kw_{name}",
        "name": name,
        "category": "product",
        "description": "",
        "active": active,
        "created_at": datetime(2026, 1, 10, tzinfo=timezone.utc),
    }


# ── Collection commands ─────────────────────────────────


class TestCollect:
    def test_prints_summary(self, runner, mock_db):
        service = AsyncMock()
        service.run.return_value = CollectionSummary(
            successful_sources=5, failed_sources=1, items_stored=12, adapter_failures=3
        )

        with patch(
            "trend_monitor.services.collection_service.CollectionService.from_database",
            return_value=service,
        ):
            result = _invoke(runner, mock_db, ["collect"])

        assert result.exit_code == 0, result.output
        assert "Successful sources: 5" in result.output
        assert "Items stored:       12" in result.output
        mock_db.connect.assert_awaited_once()
        mock_db.close.assert_awaited_once()

    def test_configuration_error(self, runner, mock_db):
        service = AsyncMock()
        service.run.side_effect = ConfigurationError("Failed to load keywords/sources: boom")

        with patch(
            "trend_monitor.services.collection_service.CollectionService.from_database",
            return_value=service,
        ):
            result = _invoke(runner, mock_db, ["collect"])

        assert result.exit_code == 1
        assert "boom" in result.output
        mock_db.close.assert_awaited_once()


class TestAnalyze:
    def test_lists_surges(self, runner, mock_db):
        service = AsyncMock()
        service.analyze.return_value = [
            Alert(keyword="galaxy", recent_count=15, previous_count=10,
                  percentage_change=50, sources=("Clien",)),
        ]

        with patch(
            "trend_monitor.trends.service.TrendAnalysisService.from_database",
            return_value=service,
        ):
            result = _invoke(runner, mock_db, ["analyze"])

        assert result.exit_code == 0, result.output
        assert "galaxy: 10 -> 15 (+50%)  [Clien]" in result.output

    def test_no_surges(self, runner, mock_db):
        service = AsyncMock()
        service.analyze.return_value = []

        with patch(
            "trend_monitor.trends.service.TrendAnalysisService.from_database",
            return_value=service,
        ):
            result = _invoke(runner, mock_db, ["analyze"])

        assert "No surges detected" in result.output


class TestRunCycle:
    def test_failed_cycle_exits_nonzero(self, runner, mock_db):
        collection = AsyncMock()
        collection.run.side_effect = ConfigurationError("db down")

        with patch(
            "trend_monitor.services.collection_service.CollectionService.from_database",
            return_value=collection,
        ), patch(
            "trend_monitor.trends.service.TrendAnalysisService.from_database",
            return_value=AsyncMock(),
        ):
            result = _invoke(runner, mock_db, ["run-cycle"])

        assert result.exit_code == 1
        assert "Cycle failed: db down" in result.output


class TestCleanup:
    def test_dry_run(self, runner, mock_db):
        mock_db.fetchval.return_value = 4

        result = _invoke(runner, mock_db, ["cleanup", "--days", "30", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "would delete 4 items older than 30 days" in result.output
        mock_db.execute.assert_not_awaited()

    def test_delete(self, runner, mock_db):
        mock_db.execute.return_value = "DELETE 9"

        result = _invoke(runner, mock_db, ["cleanup", "--days", "30"])

        assert "Deleted 9 items older than 30 days" in result.output


class TestStats:
    def test_counts_only_by_default(self, runner, mock_db):
        mock_db.fetchval.return_value = 7
        mock_db.fetch.return_value = [{"keyword_name": "galaxy", "n": 5}]

        result = _invoke(runner, mock_db, ["stats"])

        assert result.exit_code == 0, result.output
        assert "Total items: 7" in result.output
        assert "galaxy: 5" in result.output
        assert "Most recent items" not in result.output
        assert mock_db.fetch.await_count == 1

    def test_recent_lists_newest_items(self, runner, mock_db):
        stamp = datetime(2026, 3, 1, 11, 30, tzinfo=timezone.utc)
        item_row = {
            "id": 1,
            "source_name": "Naver News",
            "source_type": "news",
            "keyword_name": "galaxy",
            "keyword_id": "kw_galaxy",
            "title": "Galaxy launch date set",
            "url": "https://news.example.com/a/1",
            "content": "",
            "published_at": None,
            "collected_at": stamp,
            "timestamp": stamp,
        }
        mock_db.fetch.side_effect = [[{"keyword_name": "galaxy", "n": 1}], [item_row]]

        result = _invoke(
            runner, mock_db, ["stats", "--recent", "5", "--keyword", "galaxy"]
        )

        assert result.exit_code == 0, result.output
        assert "[2026-03-01 11:30] galaxy | Naver News | Galaxy launch date set" in result.output
        assert "https://news.example.com/a/1" in result.output
        recent_call = mock_db.fetch.await_args_list[1]
        assert recent_call.args[2:] == ("galaxy", 5)


# ── Keywords ────────────────────────────────────────────


class TestKeywords:
    def test_add(self, runner, mock_db):
        result = _invoke(runner, mock_db, ["keywords", "add", "galaxy", "--category", "product"])

        assert result.exit_code == 0, result.output
        assert "Added keyword 'galaxy' (product)" in result.output
        mock_db.fetchval.assert_awaited_once()

    def test_add_duplicate(self, runner, mock_db):
        mock_db.fetchrow.return_value = _keyword_row()

        result = _invoke(runner, mock_db, ["keywords", "add", "galaxy"])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_add_blank_name(self, runner, mock_db):
        result = _invoke(runner, mock_db, ["keywords", "add", "   "])
        assert result.exit_code == 2

    def test_list(self, runner, mock_db):
        mock_db.fetch.return_value = [_keyword_row(), _keyword_row("iphone", active=False)]

        result = _invoke(runner, mock_db, ["keywords", "list"])

        assert "galaxy" in result.output
        assert "inactive" in result.output

    def test_deactivate_missing(self, runner, mock_db):
        result = _invoke(runner, mock_db, ["keywords", "deactivate", "nothing"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_delete_confirmed(self, runner, mock_db):
        mock_db.fetchrow.return_value = _keyword_row()

        result = _invoke(runner, mock_db, ["keywords", "delete", "galaxy", "--yes"])

        assert result.exit_code == 0, result.output
        assert mock_db.execute.call_args.args[1] == "kw_galaxy"


# ── Sources ─────────────────────────────────────────────


class TestSources:
    def test_add_video_source(self, runner, mock_db):
        result = _invoke(
            runner, mock_db,
            ["sources", "add", "Tech Channel", "--type", "video", "--url", "@techchannel"],
        )

        assert result.exit_code == 0, result.output
        assert "Added video source 'Tech Channel'" in result.output

    def test_add_rejects_unknown_type(self, runner, mock_db):
        result = _invoke(runner, mock_db, ["sources", "add", "Radio", "--type", "radio"])
        assert result.exit_code == 2

    def test_list_marks_unsupported(self, runner, mock_db):
        mock_db.fetch.return_value = [{
            "id": "s1", "name": "Legacy", "type": "podcast", "url": "", "notes": "",
            "active": True, "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        }]

        result = _invoke(runner, mock_db, ["sources", "list"])

        assert "podcast (unsupported)" in result.output


# ── Alert settings ──────────────────────────────────────


class TestAlertSettings:
    def test_show_defaults(self, runner, mock_db):
        result = _invoke(runner, mock_db, ["alerts", "show"])

        assert result.exit_code == 0, result.output
        assert "Threshold: 50%" in result.output

    def test_configure_threshold(self, runner, mock_db):
        result = _invoke(runner, mock_db, ["alerts", "configure", "--threshold", "80"])

        assert result.exit_code == 0, result.output
        assert "threshold 80%" in result.output

    def test_configure_out_of_range(self, runner, mock_db):
        result = _invoke(runner, mock_db, ["alerts", "configure", "--threshold", "5"])

        assert result.exit_code == 2
        assert "between 10 and 500" in result.output

    def test_configure_nothing(self, runner, mock_db):
        result = _invoke(runner, mock_db, ["alerts", "configure"])
        assert result.exit_code == 2

    def test_clear_webhook(self, runner, mock_db):
        with patch(
            "trend_monitor.alerts.repository.AlertSettingsRepository.update",
            new_callable=AsyncMock,
            return_value=AlertSettings(),
        ) as update:
            result = _invoke(runner, mock_db, ["alerts", "configure", "--clear-webhook"])

        assert result.exit_code == 0, result.output
        update.assert_awaited_once_with(webhook=None)
