"""Tests for the global engine and session factory."""

import pytest

from hr_compliance import database
from hr_compliance.config import get_settings


@pytest.fixture
def sqlite_settings(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite://")
    monkeypatch.setattr(database, "_engine", None)
    monkeypatch.setattr(database, "_session_factory", None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestInitDb:
    """Test lazy creation of the shared engine."""

    async def test_created_once_and_reused(self, sqlite_settings):
        engine, factory = database.init_db()

        assert database.init_db() == (engine, factory)
        assert str(engine.url) == "sqlite+aiosqlite://"
        await database.close_db()

    async def test_recreated_after_close(self, sqlite_settings):
        first, _ = database.init_db()
        await database.close_db()

        assert database._engine is None
        assert database._session_factory is None
        second, _ = database.init_db()
        assert second is not first
        await database.close_db()

    async def test_session_round_trip(self, sqlite_settings):
        async with database.get_session() as session:
            assert await database.check_connection(session) is True
        await database.close_db()
