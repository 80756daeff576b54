"""
Command-line interface for trend-monitor.

Provides commands to run collection and trend analysis, manage the
keyword/source/alert configuration, and serve the manual trigger API.

Usage:
    trend-monitor init-db     # Create tables and seed default sources
    trend-monitor collect     # Run one collection pass
    trend-monitor run-cycle   # Collect, then analyze and notify
    trend-monitor scheduler   # Run cycles every COLLECTION_INTERVAL_HOURS
    trend-monitor serve       # Start the manual trigger API
"""

import asyncio
import signal
import sys
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import click

from trend_monitor.config.settings import get_settings
from trend_monitor.observability.logging import setup_logging
from trend_monitor.observability.metrics import get_metrics


def _run_with_database(callback: Callable[[Any], Awaitable[None]]) -> None:
    """Open the database, run ``callback(db)`` and always close it."""
    from trend_monitor.storage.database import Database

    async def run():
        db = Database()
        await db.connect()
        try:
            await callback(db)
        finally:
            await db.close()

    asyncio.run(run())


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Trend Monitor - keyword mention collection and surge alerts."""
    setup_logging("DEBUG" if debug else None)


@main.command("init-db")
@click.option("--seed/--no-seed", default=True, help="Seed default sources into an empty table")
def init_db(seed: bool) -> None:
    """Initialize the database schema."""
    from trend_monitor.alerts.repository import AlertSettingsRepository
    from trend_monitor.keywords.repository import KeywordsRepository
    from trend_monitor.sources.service import SourcesService
    from trend_monitor.storage.repository import ItemRepository

    async def run(db):
        await ItemRepository(db).create_tables()
        await KeywordsRepository(db).create_table()
        await AlertSettingsRepository(db).create_table()

        sources = SourcesService(db)
        await sources.repository.create_table()
        if seed:
            await sources.ensure_seeded()

        click.echo("Database initialized successfully")

    _run_with_database(run)


@main.command("seed-sources")
@click.option("--file", "path", default=None, type=click.Path(exists=True, path_type=Path),
              help="JSON catalogue (defaults to the bundled seed file)")
def seed_sources(path: Path | None) -> None:
    """Insert the default source catalogue. Existing names are kept."""
    from trend_monitor.sources.service import SourcesService

    async def run(db):
        service = SourcesService(db)
        count = await service.seed_from_json(path)
        total = await service.repository.count()
        click.echo(f"Read {count} seed sources; {total} sources in catalogue")

    _run_with_database(run)


@main.command()
def collect() -> None:
    """Run one collection pass over all active sources and keywords."""
    from trend_monitor.errors import ConfigurationError
    from trend_monitor.services.collection_service import CollectionService

    async def run(db):
        try:
            summary = await CollectionService.from_database(db).run()
        except ConfigurationError as e:
            raise click.ClickException(str(e)) from e

        click.echo("\nCollection Results:")
        click.echo(f"  Successful sources: {summary.successful_sources}")
        click.echo(f"  Failed sources:     {summary.failed_sources}")
        click.echo(f"  Items stored:       {summary.items_stored}")
        click.echo(f"  Adapter failures:   {summary.adapter_failures}")

    _run_with_database(run)


@main.command()
def analyze() -> None:
    """Compare the recent window with the previous one and send alerts."""
    from trend_monitor.trends.service import TrendAnalysisService

    async def run(db):
        alerts = await TrendAnalysisService.from_database(db).analyze()

        if not alerts:
            click.echo("No surges detected")
            return

        click.echo(f"\n{len(alerts)} surge(s) detected:")
        for alert in alerts:
            click.echo(
                f"  {alert.keyword}: {alert.previous_count} -> {alert.recent_count} "
                f"(+{alert.percentage_change}%)  [{', '.join(alert.sources)}]"
            )

    _run_with_database(run)


@main.command("run-cycle")
def run_cycle() -> None:
    """Run one full cycle: collect, then analyze and notify."""
    from trend_monitor.services.collection_service import CollectionService
    from trend_monitor.services.scheduler import TrendMonitorScheduler
    from trend_monitor.trends.service import TrendAnalysisService

    outcome: dict[str, Any] = {}

    async def run(db):
        scheduler = TrendMonitorScheduler(
            CollectionService.from_database(db),
            TrendAnalysisService.from_database(db),
        )
        result = await scheduler.run_cycle()
        outcome.update(result.to_dict())

    _run_with_database(run)

    if not outcome.get("success"):
        click.echo(click.style(f"Cycle failed: {outcome.get('error')}", fg="red"))
        sys.exit(1)

    click.echo("\nCycle Results:")
    click.echo(f"  Successful sources: {outcome['successful_sources']}")
    click.echo(f"  Failed sources:     {outcome['failed_sources']}")
    click.echo(f"  Alerts:             {outcome['alerts']}")


@main.command()
@click.option("--run-now", is_flag=True, help="Run one cycle before waiting for the first slot")
@click.option("--metrics/--no-metrics", default=True, help="Enable metrics server")
def scheduler(run_now: bool, metrics: bool) -> None:
    """Run collection cycles on the configured wall-clock schedule."""
    from trend_monitor.services.collection_service import CollectionService
    from trend_monitor.services.scheduler import TrendMonitorScheduler
    from trend_monitor.trends.service import TrendAnalysisService

    async def run(db):
        service = TrendMonitorScheduler(
            CollectionService.from_database(db),
            TrendAnalysisService.from_database(db),
        )

        if metrics:
            get_metrics().start_server()

        # Handle shutdown signals
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, service.stop)

        await service.start(run_immediately=run_now)

    _run_with_database(run)


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the manual trigger API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    # Start metrics server on separate port
    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "trend_monitor.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


@main.command()
@click.option("--hours", default=24, type=int, help="Per-keyword counts over the last N hours")
@click.option("--recent", default=0, type=int, help="Also list the N newest items in that window")
@click.option("--keyword", default=None, help="Restrict the recent listing to one keyword")
def stats(hours: int, recent: int, keyword: str | None) -> None:
    """Show item counts for operators."""
    from trend_monitor.storage.repository import ItemRepository

    async def run(db):
        repo = ItemRepository(db)
        since = datetime.now(timezone.utc) - timedelta(hours=hours)

        total = await repo.count()
        latest = await repo.latest_timestamp()
        per_keyword = await repo.count_by_keyword_since(since)

        click.echo(f"\nTotal items: {total}")
        click.echo(f"Last collected: {latest.isoformat() if latest else 'never'}")
        click.echo(f"\nItems per keyword (last {hours}h):")
        if not per_keyword:
            click.echo("  (none)")
        for name, count in per_keyword.items():
            click.echo(f"  {name}: {count}")

        if recent > 0:
            items = await repo.list_recent(since, keyword=keyword, limit=recent)
            click.echo(f"\nMost recent items (last {hours}h):")
            if not items:
                click.echo("  (none)")
            for item in items:
                stamp = item.timestamp or item.collected_at
                click.echo(
                    f"  [{stamp:%Y-%m-%d %H:%M}] {item.keyword_name} | "
                    f"{item.source_name} | {item.title}"
                )
                click.echo(f"    {item.url}")

    _run_with_database(run)


@main.command()
@click.option("--days", default=90, help="Days of data to keep")
@click.option("--dry-run", is_flag=True, help="Show count without deleting")
def cleanup(days: int, dry_run: bool) -> None:
    """Remove items older than specified days.

    Example:
        trend-monitor cleanup --days 30              # Delete items older than 30 days
        trend-monitor cleanup --days 30 --dry-run   # Preview without deleting
    """
    from trend_monitor.storage.repository import ItemRepository

    async def run(db):
        repo = ItemRepository(db)

        if dry_run:
            count = await repo.count_older_than(days)
            click.echo(f"\nDry run - would delete {count} items older than {days} days")
            click.echo("\nRun without --dry-run to actually delete.")
        else:
            deleted = await repo.cleanup_older_than(days)
            click.echo(f"\nDeleted {deleted} items older than {days} days")

    _run_with_database(run)


# ── Keywords ────────────────────────────────────────────

@main.group()
def keywords() -> None:
    """Tracked keyword management commands."""


@keywords.command("add")
@click.argument("name")
@click.option("--category", default="other",
              type=click.Choice(["product", "brand", "trend", "event", "other"]))
@click.option("--description", default="", help="Free-text description")
def keywords_add(name: str, category: str, description: str) -> None:
    """Start tracking a keyword."""
    from trend_monitor.keywords.repository import KeywordsRepository
    from trend_monitor.keywords.schemas import Keyword

    try:
        keyword = Keyword(name=name, category=category, description=description)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="NAME") from e

    async def run(db):
        repo = KeywordsRepository(db)
        if await repo.get_by_name(keyword.name) is not None:
            raise click.ClickException(f"Keyword '{keyword.name}' already exists")
        await repo.create(keyword)
        click.echo(f"Added keyword '{keyword.name}' ({keyword.category})")

    _run_with_database(run)


@keywords.command("list")
@click.option("--active-only", is_flag=True, help="Only keywords targeted by collection")
def keywords_list(active_only: bool) -> None:
    """List keywords, newest first."""
    from trend_monitor.keywords.repository import KeywordsRepository

    async def run(db):
        rows = await KeywordsRepository(db).list_keywords(active_only=active_only)
        if not rows:
            click.echo("No keywords")
            return
        for kw in rows:
            state = "active" if kw.active else "inactive"
            line = f"  {kw.name:<24} {kw.category:<8} {state:<8} {kw.created_at:%Y-%m-%d}"
            if kw.description:
                line += f"  {kw.description}"
            click.echo(line)

    _run_with_database(run)


def _set_keyword_active(name: str, active: bool) -> None:
    from trend_monitor.keywords.repository import KeywordsRepository

    async def run(db):
        repo = KeywordsRepository(db)
        keyword = await repo.get_by_name(name)
        if keyword is None:
            raise click.ClickException(f"Keyword '{name}' not found")
        await repo.set_active(keyword.id, active)
        click.echo(f"Keyword '{keyword.name}' {'activated' if active else 'deactivated'}")

    _run_with_database(run)


@keywords.command("activate")
@click.argument("name")
def keywords_activate(name: str) -> None:
    """Resume collecting a keyword."""
    _set_keyword_active(name, True)


@keywords.command("deactivate")
@click.argument("name")
def keywords_deactivate(name: str) -> None:
    """Pause collecting a keyword. Stored items are kept."""
    _set_keyword_active(name, False)


@keywords.command("delete")
@click.argument("name")
@click.confirmation_option(prompt="Delete this keyword? Collected items are kept.")
def keywords_delete(name: str) -> None:
    """Stop tracking a keyword."""
    from trend_monitor.keywords.repository import KeywordsRepository

    async def run(db):
        repo = KeywordsRepository(db)
        keyword = await repo.get_by_name(name)
        if keyword is None:
            raise click.ClickException(f"Keyword '{name}' not found")
        await repo.delete(keyword.id)
        click.echo(f"Deleted keyword '{keyword.name}'")

    _run_with_database(run)


# ── Sources ─────────────────────────────────────────────

@main.group()
def sources() -> None:
    """Source catalogue management commands."""


@sources.command("add")
@click.argument("name")
@click.option("--type", "source_type", required=True,
              type=click.Choice(["news", "community", "video"]))
@click.option("--url", default="", help="Site URL, channel URL, @handle or channel id")
@click.option("--notes", default="", help="Operator notes")
def sources_add(name: str, source_type: str, url: str, notes: str) -> None:
    """Add a collection source."""
    from trend_monitor.sources.repository import SourcesRepository
    from trend_monitor.sources.schemas import Source

    async def run(db):
        repo = SourcesRepository(db)
        if await repo.get_by_name(name) is not None:
            raise click.ClickException(f"Source '{name}' already exists")
        source = await repo.create(Source(name=name, type=source_type, url=url, notes=notes))
        click.echo(f"Added {source.type} source '{source.name}'")

    _run_with_database(run)


@sources.command("list")
@click.option("--active-only", is_flag=True, help="Only sources targeted by collection")
def sources_list(active_only: bool) -> None:
    """List sources."""
    from trend_monitor.sources.repository import SourcesRepository

    async def run(db):
        rows = await SourcesRepository(db).list_sources(active_only=active_only)
        if not rows:
            click.echo("No sources")
            return
        for src in rows:
            state = "active" if src.active else "inactive"
            kind = src.type if src.kind else f"{src.type} (unsupported)"
            click.echo(f"  {src.name:<24} {kind:<12} {state:<8} {src.url}")

    _run_with_database(run)


def _set_source_active(name: str, active: bool) -> None:
    from trend_monitor.sources.repository import SourcesRepository

    async def run(db):
        repo = SourcesRepository(db)
        source = await repo.get_by_name(name)
        if source is None:
            raise click.ClickException(f"Source '{name}' not found")
        await repo.set_active(source.id, active)
        click.echo(f"Source '{source.name}' {'activated' if active else 'deactivated'}")

    _run_with_database(run)


@sources.command("activate")
@click.argument("name")
def sources_activate(name: str) -> None:
    """Resume collecting from a source."""
    _set_source_active(name, True)


@sources.command("deactivate")
@click.argument("name")
def sources_deactivate(name: str) -> None:
    """Pause collecting from a source."""
    _set_source_active(name, False)


@sources.command("delete")
@click.argument("name")
@click.confirmation_option(prompt="Delete this source? Collected items are kept.")
def sources_delete(name: str) -> None:
    """Remove a source from the catalogue."""
    from trend_monitor.sources.repository import SourcesRepository

    async def run(db):
        repo = SourcesRepository(db)
        source = await repo.get_by_name(name)
        if source is None:
            raise click.ClickException(f"Source '{name}' not found")
        await repo.delete(source.id)
        click.echo(f"Deleted source '{source.name}'")

    _run_with_database(run)


# ── Alert settings ──────────────────────────────────────

@main.group()
def alerts() -> None:
    """Surge alert settings commands."""


@alerts.command("show")
def alerts_show() -> None:
    """Print the current alert settings."""
    from trend_monitor.alerts.repository import AlertSettingsRepository

    async def run(db):
        settings = await AlertSettingsRepository(db).get()
        click.echo(f"\nThreshold: {settings.threshold}%")
        click.echo(f"Enabled:   {settings.enabled}")
        click.echo(f"Email:     {settings.email or '-'}")
        click.echo(f"Webhook:   {settings.webhook or '-'}")
        if settings.updated_at:
            click.echo(f"Updated:   {settings.updated_at.isoformat()}")

    _run_with_database(run)


@alerts.command("configure")
@click.option("--threshold", type=int, default=None, help="Surge threshold in percent")
@click.option("--email", default=None, help="Alert recipient address")
@click.option("--webhook", default=None, help="Webhook URL receiving {\"text\": message}")
@click.option("--clear-email", is_flag=True, help="Stop sending email alerts")
@click.option("--clear-webhook", is_flag=True, help="Stop sending webhook alerts")
@click.option("--enable/--disable", "enabled", default=None, help="Turn alerting on or off")
def alerts_configure(
    threshold: int | None,
    email: str | None,
    webhook: str | None,
    clear_email: bool,
    clear_webhook: bool,
    enabled: bool | None,
) -> None:
    """Update alert settings. Unspecified fields keep their value."""
    from trend_monitor.alerts.repository import AlertSettingsRepository
    from trend_monitor.errors import InvalidAlertSettingsError

    changes: dict[str, Any] = {}
    if threshold is not None:
        changes["threshold"] = threshold
    if email is not None:
        changes["email"] = email
    if webhook is not None:
        changes["webhook"] = webhook
    if clear_email:
        changes["email"] = None
    if clear_webhook:
        changes["webhook"] = None
    if enabled is not None:
        changes["enabled"] = enabled

    if not changes:
        raise click.UsageError("Nothing to change")

    async def run(db):
        repo = AlertSettingsRepository(db)
        try:
            settings = await repo.update(**changes)
        except InvalidAlertSettingsError as e:
            raise click.BadParameter(str(e)) from e
        click.echo(
            f"Alert settings saved (threshold {settings.threshold}%, "
            f"{'enabled' if settings.enabled else 'disabled'})"
        )

    _run_with_database(run)


if __name__ == "__main__":
    main()
