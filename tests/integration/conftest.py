"""Fixtures for API tests.

API requests open their own sessions on the shared test connection, so
seeding happens in a separate session that is committed and closed
before any request is made.
"""

from __future__ import annotations

from datetime import date
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from hr_compliance.api.app import create_app
from hr_compliance.api.dependencies import get_db_session
from hr_compliance.models import Company
from tests.factories import add_advance, add_employee, add_loan


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with sessions from the test engine."""
    app = create_app()

    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
async def seeded(session_factory) -> dict:
    """Committed ten-person company plus one long-serving employee with debts."""
    async with session_factory() as session:
        company = Company(name="Riyadh Logistics", sector="logistics", entity_size="small")
        session.add(company)
        await session.flush()
        cid = company.company_id

        await add_employee(session, cid, "S01", is_saudi=True, basic="5000", housing="2000")
        await add_employee(session, cid, "S02", is_saudi=True, basic="4000", housing="1000")
        await add_employee(session, cid, "S03", is_saudi=True, basic="3000", housing="750")
        for n in range(6):
            await add_employee(session, cid, f"X{n:02d}", basic="6000", housing="1000")
        veteran = await add_employee(
            session, cid, "X99", basic="10000", hire_date=date(2015, 1, 1)
        )
        await add_loan(session, veteran, installment="1000", remaining="9000")
        await add_advance(session, veteran, deduction="500", remaining="1500")
        await session.commit()

    return {
        "company_id": cid,
        "veteran_id": veteran.employee_id,
        "headers": {"X-Company-ID": str(cid)},
    }
