"""
Command-line entry point: `akashic init-db | reconcile | serve`.
"""

import asyncio
import logging

import click

from akashic.core.config import get_settings
from akashic.core.logging import configure_logging
from akashic.db.session import Database
from akashic.services import ReconciliationReport, Services

logger = logging.getLogger(__name__)


def _database(url: str | None) -> Database:
    settings = get_settings()
    return Database(url or settings.database_url, echo=settings.database_echo)


@click.group()
@click.option("--log-level", default=None, help="Overrides AKASHIC_LOG_LEVEL.")
def cli(log_level: str | None) -> None:
    """Administration commands for the Akashic Archive."""
    configure_logging(log_level or get_settings().log_level)


@cli.command("init-db")
@click.option("--database-url", default=None, help="Overrides AKASHIC_DATABASE_URL.")
def init_db(database_url: str | None) -> None:
    """Create tables and seed the default scrolls, packages and recipes."""
    from akashic.api.main import prepare_database

    async def run() -> None:
        database = _database(database_url)
        try:
            await prepare_database(database)
        finally:
            await database.dispose()

    asyncio.run(run())
    click.echo("Database initialized.")


async def _reconcile(database: Database) -> list[ReconciliationReport]:
    async with database.sessionmaker() as session:
        return await Services.build(session, get_settings()).ledger.reconcile_all()


@cli.command()
@click.option("--database-url", default=None, help="Overrides AKASHIC_DATABASE_URL.")
def reconcile(database_url: str | None) -> None:
    """Compare every cached balance with its transaction log. Exits 1 on drift."""

    async def run() -> list[ReconciliationReport]:
        database = _database(database_url)
        try:
            return await _reconcile(database)
        finally:
            await database.dispose()

    reports = asyncio.run(run())
    drifted = [report for report in reports if report.drift]
    for report in drifted:
        click.echo(
            f"user {report.user_id}: cached {report.cached_balance}, "
            f"ledger {report.ledger_sum}, drift {report.drift:+d}"
        )
    click.echo(f"{len(reports)} users checked, {len(drifted)} with drift.")
    if drifted:
        raise SystemExit(1)


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Reload on code changes (development).")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("akashic.api.main:create_app", factory=True, host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
