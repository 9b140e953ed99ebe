"""Shared test fixtures: a throwaway SQLite database per test."""

from datetime import date

import pytest

from afterparty.database.session import DatabaseSessionManager
from afterparty.services.event_service import EventService
from afterparty.utils.roles import RoleResolver


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'afterparty.db'}"


@pytest.fixture
async def db(database_url):
    """Initialized session manager with the schema in place."""
    manager = DatabaseSessionManager()
    manager.init(database_url)
    await manager.ensure_schema()

    yield manager

    await manager.close()


@pytest.fixture
async def session(db):
    """One session (one transaction) for the whole test."""
    async with db.session() as session:
        yield session


@pytest.fixture
def resolver() -> RoleResolver:
    """Resolver for an empty roster, built-in presets only."""
    return RoleResolver()


@pytest.fixture
async def event(session):
    """Event E with manager "Kim" and account "110-1"."""
    return await EventService(session).create_event(
        title="October meetup",
        event_date=date(2026, 10, 20),
        start_time="19:30",
        location="Seongsu",
        manager="Kim",
        account="110-1"
    )
