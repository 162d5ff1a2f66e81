"""Pytest fixtures for compliance engine tests."""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hr_compliance.database import create_schema, make_session_factory
from hr_compliance.models import Company
from tests.factories import add_employee

# In-memory SQLite shared across sessions through a single static connection
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def engine():
    """Create test database engine with schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Let SQLAlchemy own BEGIN so SAVEPOINTs behave as on Postgres
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def company(session: AsyncSession) -> Company:
    """Create a test company."""
    company = Company(name="Test Trading Co.", sector="retail", entity_size="small")
    session.add(company)
    await session.flush()
    return company


@pytest.fixture
async def ten_person_company(session: AsyncSession, company: Company) -> Company:
    """2 full-count Saudis, 1 half-count Saudi and 7 expatriates."""
    cid = company.company_id
    await add_employee(session, cid, "S01", is_saudi=True, basic="5000", housing="2000")
    await add_employee(session, cid, "S02", is_saudi=True, basic="4000", housing="1000")
    await add_employee(session, cid, "S03", is_saudi=True, basic="3000", housing="750")
    for n in range(7):
        await add_employee(session, cid, f"X{n:02d}", basic="6000", housing="1000")
    return company
