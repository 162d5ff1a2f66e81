"""Nitaqat snapshot and GOSI summary service tests."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from hr_compliance.calculators.engine import PayrollBatchAggregator
from hr_compliance.calculators.types import NitaqatZone
from hr_compliance.errors import ImmutableRecordError, NotFoundError
from hr_compliance.services.compliance_service import ComplianceService
from hr_compliance.services.payroll_batch_service import PayrollBatchService
from tests.factories import add_employee


class TestNitaqatSnapshots:
    """Test classification of the stored roster."""

    async def test_classify_ten_person_company(self, session, ten_person_company):
        result = await ComplianceService(session).classify_company(ten_person_company.company_id)

        assert result.total_employees == 10
        assert result.saudi_count == 3
        assert result.effective_saudi_count == Decimal("2.5")
        assert result.saudization_percentage == Decimal("25.00")
        assert result.zone == NitaqatZone.HIGH_GREEN
        assert result.next_zone == NitaqatZone.PLATINUM
        # ceil(10 * 26.52 / 100) = 3
        assert result.employees_needed_for_next_zone == Decimal("0.5")

    async def test_inactive_employees_ignored(self, session, ten_person_company):
        await add_employee(
            session, ten_person_company.company_id, "T01", is_saudi=True, status="terminated"
        )

        result = await ComplianceService(session).classify_company(ten_person_company.company_id)
        assert result.total_employees == 10

    async def test_record_snapshot(self, session, ten_person_company):
        result, snapshot = await ComplianceService(session).record_snapshot(
            ten_person_company.company_id, date(2025, 1, 31)
        )

        assert snapshot.snapshot_id is not None
        assert snapshot.nitaqat_color == "high-green"
        assert snapshot.saudization_percentage == result.saudization_percentage
        assert snapshot.sector == "retail"
        assert snapshot.entity_size == "small"

    async def test_history_newest_first(self, session, ten_person_company):
        service = ComplianceService(session)
        cid = ten_person_company.company_id
        await service.record_snapshot(cid, date(2025, 1, 31))
        await add_employee(session, cid, "X07", basic="6000")
        await service.record_snapshot(cid, date(2025, 2, 28))

        history = await service.list_snapshots(cid)
        assert [s.calculation_date for s in history] == [date(2025, 2, 28), date(2025, 1, 31)]
        assert history[0].total_employees == 11

    async def test_snapshot_cannot_be_rewritten(self, session, ten_person_company):
        _, snapshot = await ComplianceService(session).record_snapshot(
            ten_person_company.company_id, date(2025, 1, 31)
        )

        snapshot.nitaqat_color = "red"
        with pytest.raises(ImmutableRecordError) as exc_info:
            await session.flush()
        assert exc_info.value.entity_id == snapshot.snapshot_id

    async def test_snapshot_cannot_be_deleted(self, session, ten_person_company):
        service = ComplianceService(session)
        cid = ten_person_company.company_id
        _, snapshot = await service.record_snapshot(cid, date(2025, 1, 31))

        await session.delete(snapshot)
        with pytest.raises(ImmutableRecordError):
            await session.flush()

        assert len(await service.list_snapshots(cid, limit=1)) == 1

    async def test_small_company_exempt(self, session, company):
        await add_employee(session, company.company_id, "S01", is_saudi=True)

        _, snapshot = await ComplianceService(session).record_snapshot(company.company_id)
        assert snapshot.nitaqat_color == "exempt"
        assert snapshot.calculation_date == date.today()

    async def test_unknown_company(self, session):
        with pytest.raises(NotFoundError):
            await ComplianceService(session).record_snapshot(uuid4())


class TestGOSISummary:
    """Test monthly contribution summaries."""

    async def test_summary_from_batch(self, session, ten_person_company):
        cid = ten_person_company.company_id
        aggregator = PayrollBatchAggregator(engine_version="test")
        batch = await PayrollBatchService(session, aggregator).create_batch(cid, "2025-01")

        summary = await ComplianceService(session).gosi_summary(cid, "2025-01")

        assert len(summary.lines) == 10
        assert summary.total_employee == Decimal("1575.00")
        assert summary.total_employer == Decimal("2870.00")
        assert summary.saudi_total == Decimal("3465.00")
        assert summary.non_saudi_total == Decimal("980.00")
        assert summary.grand_total == summary.saudi_total + summary.non_saudi_total
        assert batch.total_gosi_employer == summary.total_employer

    async def test_missing_batch(self, session, ten_person_company):
        with pytest.raises(NotFoundError):
            await ComplianceService(session).gosi_summary(ten_person_company.company_id, "2025-01")
