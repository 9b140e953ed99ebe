"""Tests for environment-driven settings."""

from afterparty.config.settings import Settings


def test_database_url_from_parts(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DB_HOST", "db")
    monkeypatch.setenv("DB_PASSWORD", "secret")

    settings = Settings(_env_file=None)

    assert settings.database_url == "postgresql+asyncpg://postgres:secret@db:5432/afterparty"


def test_database_url_override(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///local.db")

    assert Settings(_env_file=None).database_url == "sqlite+aiosqlite:///local.db"


def test_redis_url(monkeypatch):
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.setenv("REDIS_DB", "3")
    assert Settings(_env_file=None).redis_url == "redis://localhost:6379/3"

    monkeypatch.setenv("REDIS_URL", "redis://cache:6380/1")
    assert Settings(_env_file=None).redis_url == "redis://cache:6380/1"


def test_admin_ids(monkeypatch):
    monkeypatch.setenv("ADMIN_USER_IDS", " 42, 7,,")

    settings = Settings(_env_file=None)

    assert settings.admin_ids == frozenset({42, 7})
    assert settings.is_admin(42)
    assert not settings.is_admin(1)
