"""Tests for surge detection."""

from unittest.mock import AsyncMock

import pytest

from trend_monitor.alerts.schemas import AlertSettings
from trend_monitor.trends.aggregation import KeywordWindowCount, TrendWindows
from trend_monitor.trends.detector import SurgeDetector, detect_surges, percentage_change


def _counts(**counts: int) -> dict[str, KeywordWindowCount]:
    return {k: KeywordWindowCount(count=n, sources=("Clien",)) for k, n in counts.items()}


class TestPercentageChange:
    def test_previous_floored_at_one(self):
        assert percentage_change(5, 0) == 400

    def test_rounding(self):
        assert percentage_change(9, 8) == 13  # 12.5
        assert percentage_change(2, 3) == -33
        assert percentage_change(3, 3) == 0


class TestDetectSurges:
    def test_threshold_selects_surging_keywords(self):
        alerts = detect_surges(
            _counts(A=15, B=3),
            _counts(A=10, B=3),
            AlertSettings(threshold=50),
        )

        assert [a.keyword for a in alerts] == ["A"]
        assert alerts[0].percentage_change == 50
        assert alerts[0].previous_count == 10

    def test_new_keyword_uses_floor(self):
        alerts = detect_surges(_counts(A=5), {}, AlertSettings(threshold=50))

        assert len(alerts) == 1
        assert alerts[0].previous_count == 1
        assert alerts[0].percentage_change == 400

    def test_disabled_settings_yield_no_alerts(self):
        alerts = detect_surges(
            _counts(A=100), _counts(A=1), AlertSettings(threshold=10, enabled=False)
        )
        assert alerts == []

    def test_keywords_only_in_previous_ignored(self):
        assert detect_surges({}, _counts(A=10), AlertSettings()) == []

    def test_below_threshold(self):
        assert detect_surges(_counts(A=14), _counts(A=10), AlertSettings(threshold=50)) == []

    def test_sources_carried_over(self):
        recent = {"A": KeywordWindowCount(count=4, sources=("Clien", "Google News"))}
        alerts = detect_surges(recent, {}, AlertSettings(threshold=50))
        assert alerts[0].sources == ("Clien", "Google News")

    def test_idempotent(self):
        recent, previous = _counts(A=15, B=9), _counts(A=10, B=3)
        settings = AlertSettings(threshold=50)
        assert detect_surges(recent, previous, settings) == detect_surges(recent, previous, settings)


class TestSurgeDetector:
    @pytest.mark.asyncio
    async def test_reads_settings_when_not_given(self, fixed_now):
        repo = AsyncMock()
        repo.get = AsyncMock(return_value=AlertSettings(threshold=100))
        windows = TrendWindows(recent=_counts(A=15), previous=_counts(A=10), now=fixed_now)

        alerts = await SurgeDetector(repo).detect(windows)

        assert alerts == []
        repo.get.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_uses_given_settings(self, fixed_now):
        repo = AsyncMock()
        windows = TrendWindows(recent=_counts(A=15), previous=_counts(A=10), now=fixed_now)

        alerts = await SurgeDetector(repo).detect(windows, AlertSettings(threshold=50))

        assert [a.keyword for a in alerts] == ["A"]
        repo.get.assert_not_awaited()
