"""Nitaqat snapshots and GOSI monthly summaries."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hr_compliance.calculators.gosi_calculator import (
    ContributionSummary,
    EmployeeContribution,
    summarize_contributions,
)
from hr_compliance.calculators.nitaqat_classifier import NitaqatClassifier
from hr_compliance.calculators.types import NitaqatResult
from hr_compliance.errors import NotFoundError, PersistenceError
from hr_compliance.models import Employee, NitaqatSnapshot, PayrollBatch, PayrollItem
from hr_compliance.services.snapshot_loader import SnapshotLoader

logger = logging.getLogger(__name__)


class ComplianceService:
    """Persists Nitaqat classifications and reports GOSI contributions."""

    def __init__(self, session: AsyncSession, classifier: NitaqatClassifier | None = None):
        self.session = session
        self.classifier = classifier or NitaqatClassifier()
        self.loader = SnapshotLoader(session)

    async def classify_company(self, company_id: UUID) -> NitaqatResult:
        """Classify the company's current active roster without saving."""
        if await self.loader.get_company(company_id) is None:
            raise NotFoundError("Company", company_id)
        employees = await self.loader.load_employees(company_id)
        return self.classifier.classify([e.to_snapshot() for e in employees])

    async def record_snapshot(
        self,
        company_id: UUID,
        calculation_date: date | None = None,
    ) -> tuple[NitaqatResult, NitaqatSnapshot]:
        """Classify the active roster and append a snapshot row."""
        company = await self.loader.get_company(company_id)
        if company is None:
            raise NotFoundError("Company", company_id)

        employees = await self.loader.load_employees(company_id)
        result = self.classifier.classify([e.to_snapshot() for e in employees])
        config = company.compliance_config()

        snapshot = NitaqatSnapshot(
            company_id=company_id,
            calculation_date=calculation_date or date.today(),
            total_employees=result.total_employees,
            saudi_employees=result.saudi_count,
            effective_saudi_count=result.effective_saudi_count,
            saudization_percentage=result.saudization_percentage,
            nitaqat_color=result.zone.value,
            sector=config.sector,
            entity_size=config.entity_size,
        )
        try:
            self.session.add(snapshot)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.exception("Failed to save Nitaqat snapshot for company %s", company_id)
            raise PersistenceError(e) from e

        logger.info(
            "Company %s classified %s at %s%%",
            company_id,
            result.zone.value,
            result.saudization_percentage,
        )
        return result, snapshot

    async def list_snapshots(
        self, company_id: UUID, limit: int | None = None
    ) -> list[NitaqatSnapshot]:
        """Snapshot history, newest first."""
        query = (
            select(NitaqatSnapshot)
            .where(NitaqatSnapshot.company_id == company_id)
            .order_by(
                NitaqatSnapshot.calculation_date.desc(),
                NitaqatSnapshot.created_at.desc(),
            )
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def gosi_summary(self, company_id: UUID, month: str) -> ContributionSummary:
        """GOSI contributions for a month, read from that month's batch items."""
        batch_result = await self.session.execute(
            select(PayrollBatch.batch_id).where(
                PayrollBatch.company_id == company_id,
                PayrollBatch.month == month,
            )
        )
        batch_id = batch_result.scalar_one_or_none()
        if batch_id is None:
            raise NotFoundError("Payroll batch for month", month)

        rows = await self.session.execute(
            select(
                PayrollItem.employee_id,
                Employee.is_saudi,
                PayrollItem.gosi_employee,
                PayrollItem.gosi_employer,
            )
            .join(Employee, Employee.employee_id == PayrollItem.employee_id)
            .where(PayrollItem.batch_id == batch_id)
            .order_by(Employee.employee_number)
        )
        lines = [
            EmployeeContribution(
                employee_id=employee_id,
                is_saudi=is_saudi,
                employee_contribution=gosi_employee,
                employer_contribution=gosi_employer,
            )
            for employee_id, is_saudi, gosi_employee, gosi_employer in rows.all()
        ]
        return summarize_contributions(month, lines)
