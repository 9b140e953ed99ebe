"""Tests for the aiogram middlewares."""

from types import SimpleNamespace

import pytest
from sqlalchemy import func, select

from afterparty.config.settings import Settings
from afterparty.database.models import Event
from afterparty.middlewares import auth as auth_module
from afterparty.middlewares import database as database_module
from afterparty.middlewares.auth import AuthMiddleware
from afterparty.middlewares.database import DatabaseMiddleware
from afterparty.services.event_service import EventService


async def _event_count(db) -> int:
    async with db.session() as session:
        return (await session.execute(select(func.count()).select_from(Event))).scalar_one()


async def test_auth_middleware_injects_user(monkeypatch):
    monkeypatch.setenv("ADMIN_USER_IDS", "42")
    monkeypatch.setattr(auth_module, "settings", Settings(_env_file=None))

    async def handler(event, data):
        return data

    user = SimpleNamespace(id=42, full_name="Kim Min")
    data = await AuthMiddleware()(handler, object(), {"event_from_user": user})
    assert (data["user_id"], data["full_name"], data["is_admin"]) == (42, "Kim Min", True)

    data = await AuthMiddleware()(handler, object(), {"event_from_user": SimpleNamespace(id=7, full_name="Lee")})
    assert data["is_admin"] is False

    data = await AuthMiddleware()(handler, object(), {})
    assert (data["user_id"], data["is_admin"]) == (None, False)


async def test_database_middleware_commits(monkeypatch, db):
    monkeypatch.setattr(database_module, "sessionmanager", db)

    async def handler(event, data):
        await EventService(data["session"]).create_event("Meetup", "2026-10-20", None, "Seongsu")
        return "ok"

    assert await DatabaseMiddleware()(handler, object(), {}) == "ok"
    assert await _event_count(db) == 1


async def test_database_middleware_rolls_back(monkeypatch, db):
    monkeypatch.setattr(database_module, "sessionmanager", db)

    async def handler(event, data):
        await EventService(data["session"]).create_event("Meetup", "2026-10-20", None, "Seongsu")
        raise RuntimeError("handler failed")

    with pytest.raises(RuntimeError):
        await DatabaseMiddleware()(handler, object(), {})
    assert await _event_count(db) == 0
