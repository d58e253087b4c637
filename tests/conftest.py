"""Shared fixtures: a throwaway SQLite database per test, services bound to it, and an HTTP client."""

import random
from pathlib import Path

import httpx
import pytest

from akashic.api import create_app, prepare_database
from akashic.core.config import Settings
from akashic.db.session import Database
from akashic.services import LoreResponder, Services

PASSWORD = "correct horse battery"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'archive.db'}",
        seed_on_startup=False,
        log_level="WARNING",
    )


@pytest.fixture
async def database(settings: Settings):
    database = Database(settings.database_url)
    await prepare_database(database)
    yield database
    await database.dispose()


@pytest.fixture
async def session(database: Database):
    async with database.sessionmaker() as session:
        yield session


@pytest.fixture
def responder() -> LoreResponder:
    return LoreResponder(rng=random.Random(7))


@pytest.fixture
def services(session, settings: Settings, responder: LoreResponder) -> Services:
    return Services.build(session, settings, responder)


@pytest.fixture
async def user_id(services: Services) -> int:
    """A freshly registered user, by id. Ids stay valid after a rolled-back operation; ORM objects do not."""
    user = await services.users.register("seeker", "seeker@example.com", PASSWORD)
    return user.id


@pytest.fixture
def app(settings: Settings, database: Database, responder: LoreResponder):
    return create_app(settings, database, responder)


@pytest.fixture
async def client(app):
    # ASGITransport does not run the lifespan; the database fixture already prepared the schema.
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest.fixture
async def signed_in(client: httpx.AsyncClient) -> httpx.AsyncClient:
    response = await client.post(
        "/api/register", json={"username": "seeker", "email": "seeker@example.com", "password": PASSWORD}
    )
    assert response.status_code == 201, response.text
    return client


@pytest.fixture
def in_own_session(database: Database, settings: Settings, responder: LoreResponder):
    """Runs `operation(services)` on a session of its own, the way a separate request would."""

    async def run(operation):
        async with database.sessionmaker() as session:
            return await operation(Services.build(session, settings, responder))

    return run
