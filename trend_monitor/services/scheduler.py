"""
Periodic trend monitoring cycles.

A cycle is one collection run followed by one trend analysis pass. Cycles
fire at wall-clock boundaries (every ``COLLECTION_INTERVAL_HOURS`` counted
from local midnight in ``SCHEDULE_TIMEZONE``), so a 2-hour interval runs at
00:00, 02:00, 04:00 ... local time regardless of when the process started.

``stop()`` prevents the next cycle; a cycle already running is allowed to
finish. Manual triggers (CLI, HTTP) are not coordinated with scheduled
cycles.
"""

import asyncio
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

import structlog

from trend_monitor.config.settings import get_settings
from trend_monitor.observability.logging import bind_context, clear_context
from trend_monitor.services.collection_service import CollectionService
from trend_monitor.trends.service import TrendAnalysisService

logger = structlog.get_logger(__name__)


@dataclass
class CycleResult:
    """Outcome of one scheduled cycle."""

    success: bool
    successful_sources: int = 0
    failed_sources: int = 0
    alerts: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "successful_sources": self.successful_sources,
            "failed_sources": self.failed_sources,
            "alerts": self.alerts,
        }


def next_run_time(now: datetime, interval_hours: int, tz: ZoneInfo) -> datetime:
    """First boundary strictly after ``now``.

    Boundaries are local midnight plus multiples of ``interval_hours``; when
    the interval does not divide 24 the last slot of the day is cut short at
    the next midnight.
    """
    local = now.astimezone(tz)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    elapsed_hours = (local - midnight) / timedelta(hours=1)

    slot = int(elapsed_hours // interval_hours) + 1
    candidate = midnight + timedelta(hours=slot * interval_hours)
    next_midnight = midnight + timedelta(days=1)
    return min(candidate, next_midnight)


class TrendMonitorScheduler:
    """
    Runs trend monitoring cycles on a fixed wall-clock schedule.

    Usage:
        scheduler = TrendMonitorScheduler(collection, analysis)
        await scheduler.start()  # Runs until stop() is called
    """

    def __init__(
        self,
        collection_service: CollectionService,
        analysis_service: TrendAnalysisService,
        interval_hours: int | None = None,
        timezone_name: str | None = None,
    ):
        settings = get_settings()

        self._collection = collection_service
        self._analysis = analysis_service
        self._interval_hours = interval_hours or settings.collection_interval_hours
        self._tz = ZoneInfo(timezone_name or settings.schedule_timezone)
        self._stop_event = asyncio.Event()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def next_run_time(self, now: datetime | None = None) -> datetime:
        now = now or datetime.now(timezone.utc)
        return next_run_time(now, self._interval_hours, self._tz)

    async def run_cycle(self) -> CycleResult:
        """
        Run one full cycle: collect, then analyze.

        Never raises; a fatal failure is reported in the result.
        """
        cycle_id = uuid.uuid4().hex[:12]
        bind_context(cycle_id=cycle_id)
        logger.info("Cycle started")

        try:
            summary = await self._collection.run()
            alerts = await self._analysis.analyze()

            result = CycleResult(
                success=True,
                successful_sources=summary.successful_sources,
                failed_sources=summary.failed_sources,
                alerts=len(alerts),
            )
            logger.info("Cycle finished", **result.to_dict())
            return result

        except Exception as e:
            logger.error("Cycle failed", error=str(e), error_type=type(e).__name__)
            return CycleResult(success=False, error=str(e))
        finally:
            clear_context()

    async def start(self, run_immediately: bool = False) -> None:
        """
        Run cycles until stop() is called.

        Args:
            run_immediately: Run one cycle before waiting for the first boundary
        """
        self._running = True
        self._stop_event.clear()

        logger.info(
            "Scheduler started",
            interval_hours=self._interval_hours,
            timezone=str(self._tz),
        )

        try:
            if run_immediately:
                await self.run_cycle()

            while not self._stop_event.is_set():
                next_run = self.next_run_time()
                delay = (next_run - datetime.now(timezone.utc)).total_seconds()
                logger.info("Next cycle scheduled", at=next_run.isoformat())

                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=max(delay, 0))
                    break
                except asyncio.TimeoutError:
                    pass

                await self.run_cycle()
        finally:
            self._running = False
            logger.info("Scheduler stopped")

    def stop(self) -> None:
        """Prevent the next cycle. An in-flight cycle is not cancelled."""
        logger.info("Stopping scheduler")
        self._stop_event.set()
