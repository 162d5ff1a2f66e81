"""Read-only input snapshots for the calculators."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_compliance.calculators.types import (
    ADVANCE_RECOVERABLE_STATUSES,
    LOAN_RECOVERABLE_STATUSES,
    DebtRecord,
    EmployeeSnapshot,
    EmployeeStatus,
    SalaryComponents,
)
from hr_compliance.models import Advance, Company, Employee, Loan, SalaryRecord


@dataclass
class CompanySnapshot:
    """Everything the payroll aggregator needs for one company-month."""

    roster: list[EmployeeSnapshot]
    salaries: dict[UUID, SalaryComponents] = field(default_factory=dict)
    loans: list[DebtRecord] = field(default_factory=list)
    advances: list[DebtRecord] = field(default_factory=list)


class SnapshotLoader:
    """Fetches roster, salary and debt ledger rows for a company.

    Rows come back in a stable order (creation time, then id) so that
    first-match debt recovery is repeatable.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_company(self, company_id: UUID) -> Company | None:
        return await self.session.get(Company, company_id)

    async def load_employees(
        self, company_id: UUID, active_only: bool = True
    ) -> list[Employee]:
        query = select(Employee).where(Employee.company_id == company_id)
        if active_only:
            query = query.where(Employee.status == EmployeeStatus.ACTIVE.value)
        result = await self.session.execute(query.order_by(Employee.employee_number))
        return list(result.scalars().all())

    async def load_employee(self, company_id: UUID, employee_id: UUID) -> Employee | None:
        result = await self.session.execute(
            select(Employee).where(
                Employee.company_id == company_id,
                Employee.employee_id == employee_id,
            )
        )
        return result.scalar_one_or_none()

    async def load_latest_salaries(
        self, company_id: UUID, as_of: date | None = None
    ) -> dict[UUID, SalaryComponents]:
        """Most recent salary record per employee, effective on or before as_of."""
        query = select(SalaryRecord).where(SalaryRecord.company_id == company_id)
        if as_of is not None:
            query = query.where(SalaryRecord.effective_from <= as_of)
        result = await self.session.execute(
            query.order_by(
                SalaryRecord.employee_id,
                SalaryRecord.effective_from.desc(),
                SalaryRecord.created_at.desc(),
            )
        )

        latest: dict[UUID, SalaryComponents] = {}
        for record in result.scalars():
            latest.setdefault(record.employee_id, record.to_components())
        return latest

    async def load_loans(
        self, company_id: UUID, employee_id: UUID | None = None
    ) -> list[DebtRecord]:
        query = select(Loan).where(
            Loan.company_id == company_id,
            Loan.status.in_([s.value for s in LOAN_RECOVERABLE_STATUSES]),
        )
        if employee_id is not None:
            query = query.where(Loan.employee_id == employee_id)
        result = await self.session.execute(query.order_by(Loan.created_at, Loan.loan_id))
        return [loan.to_debt_record() for loan in result.scalars()]

    async def load_advances(
        self, company_id: UUID, employee_id: UUID | None = None
    ) -> list[DebtRecord]:
        query = select(Advance).where(
            Advance.company_id == company_id,
            Advance.status.in_([s.value for s in ADVANCE_RECOVERABLE_STATUSES]),
        )
        if employee_id is not None:
            query = query.where(Advance.employee_id == employee_id)
        result = await self.session.execute(
            query.order_by(Advance.created_at, Advance.advance_id)
        )
        return [advance.to_debt_record() for advance in result.scalars()]

    async def load_company_snapshot(
        self, company_id: UUID, as_of: date | None = None
    ) -> CompanySnapshot:
        """Load the full payroll input snapshot for a company."""
        employees = await self.load_employees(company_id)
        salaries = await self.load_latest_salaries(company_id, as_of)
        return CompanySnapshot(
            roster=[e.to_snapshot() for e in employees],
            salaries=salaries,
            loans=await self.load_loans(company_id),
            advances=await self.load_advances(company_id),
        )
