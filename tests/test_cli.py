import asyncio
from pathlib import Path

import pytest
from click.testing import CliRunner
from sqlalchemy import update

from akashic.cli import cli
from akashic.core.config import Settings
from akashic.db.session import Database
from akashic.models.definitions import User
from akashic.services import Services
from conftest import PASSWORD


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"


def _register_and_tamper(database_url: str, balance: int) -> int:
    async def run() -> int:
        database = Database(database_url)
        try:
            async with database.sessionmaker() as session:
                services = Services.build(session, Settings(database_url=database_url))
                user = await services.users.register("seeker", "seeker@example.com", PASSWORD)
                user_id = user.id
                await session.execute(update(User).where(User.id == user_id).values(mana_balance=balance))
                await session.commit()
                return user_id
        finally:
            await database.dispose()

    return asyncio.run(run())


class TestCli:
    """Administration commands against a scratch database."""

    def test_init_db_is_repeatable(self, database_url):
        runner = CliRunner()

        first = runner.invoke(cli, ["init-db", "--database-url", database_url])
        second = runner.invoke(cli, ["init-db", "--database-url", database_url])

        assert first.exit_code == 0, first.output
        assert second.exit_code == 0, second.output
        assert "Database initialized." in second.output

    def test_reconcile_clean_database(self, database_url):
        runner = CliRunner()
        runner.invoke(cli, ["init-db", "--database-url", database_url])

        result = runner.invoke(cli, ["reconcile", "--database-url", database_url])

        assert result.exit_code == 0, result.output
        assert "0 users checked, 0 with drift." in result.output

    def test_reconcile_reports_drift(self, database_url):
        runner = CliRunner()
        runner.invoke(cli, ["init-db", "--database-url", database_url])
        user_id = _register_and_tamper(database_url, balance=999)

        result = runner.invoke(cli, ["reconcile", "--database-url", database_url])

        assert result.exit_code == 1
        assert f"user {user_id}: cached 999, ledger 50, drift +949" in result.output
        assert "1 users checked, 1 with drift." in result.output
