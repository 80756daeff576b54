"""Tests for AlertSettingsRepository."""

from datetime import datetime, timezone

import pytest

from trend_monitor.alerts.repository import SETTINGS_ID, AlertSettingsRepository
from trend_monitor.errors import InvalidAlertSettingsError


def _row(**overrides):
    row = {
        "threshold": 80,
        "email": "ops@example.com",
        "webhook": None,
        "enabled": True,
        "updated_at": datetime(2026, 2, 1, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


@pytest.fixture
def repo(mock_database):
    return AlertSettingsRepository(mock_database)


class TestGet:
    @pytest.mark.asyncio
    async def test_defaults_when_missing(self, repo, mock_database):
        settings = await repo.get()

        assert settings.threshold == 50
        assert settings.email is None
        assert settings.webhook is None
        assert settings.enabled is True
        mock_database.fetchrow.assert_awaited_once()
        assert mock_database.fetchrow.call_args.args[1] == SETTINGS_ID

    @pytest.mark.asyncio
    async def test_reads_row(self, repo, mock_database):
        mock_database.fetchrow.return_value = _row()

        settings = await repo.get()

        assert settings.threshold == 80
        assert settings.email == "ops@example.com"


class TestUpdate:
    @pytest.mark.asyncio
    async def test_merges_with_current(self, repo, mock_database):
        mock_database.fetchrow.return_value = _row()

        settings = await repo.update(webhook="https://hooks.example.com/abc")

        assert settings.threshold == 80
        assert settings.email == "ops@example.com"
        assert settings.webhook == "https://hooks.example.com/abc"
        args = mock_database.execute.call_args.args
        assert "ON CONFLICT" in args[0]
        assert args[1:6] == (SETTINGS_ID, 80, "ops@example.com", "https://hooks.example.com/abc", True)

    @pytest.mark.asyncio
    async def test_clear_email(self, repo, mock_database):
        mock_database.fetchrow.return_value = _row()

        settings = await repo.update(email=None)

        assert settings.email is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("threshold", [9, 501])
    async def test_threshold_out_of_range(self, repo, mock_database, threshold):
        with pytest.raises(InvalidAlertSettingsError):
            await repo.update(threshold=threshold)
        mock_database.execute.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("threshold", [10, 500])
    async def test_threshold_bounds_accepted(self, repo, threshold):
        settings = await repo.update(threshold=threshold)
        assert settings.threshold == threshold

    @pytest.mark.asyncio
    async def test_unknown_field(self, repo, mock_database):
        with pytest.raises(InvalidAlertSettingsError, match="cooldown"):
            await repo.update(cooldown=5)
        mock_database.fetchrow.assert_not_awaited()


class TestCreateTable:
    @pytest.mark.asyncio
    async def test_create_table(self, repo, mock_database):
        await repo.create_table()
        assert "CREATE TABLE IF NOT EXISTS alert_settings" in mock_database.execute.call_args.args[0]
