"""End-of-service calculation persistence and lifecycle."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hr_compliance.calculators.eos_calculator import EndOfServiceCalculator, parse_reason
from hr_compliance.calculators.types import EOSResult, TerminationFacts
from hr_compliance.config import get_settings
from hr_compliance.errors import NotFoundError, PersistenceError, ValidationError
from hr_compliance.models import EOSCalculation, EOSCalculationDetail
from hr_compliance.services.snapshot_loader import SnapshotLoader
from hr_compliance.services.state_machine import (
    EOSCalculationStateMachine,
    EOSStatus,
    InvalidTransitionError,
)

logger = logging.getLogger(__name__)


class EndOfServiceService:
    """Runs the gratuity calculator against stored employee data.

    A calculation is saved as draft and then moves forward through
    approved and paid; amounts are never recomputed after saving.
    """

    def __init__(
        self,
        session: AsyncSession,
        calculator: EndOfServiceCalculator | None = None,
    ):
        self.session = session
        self.calculator = calculator or EndOfServiceCalculator(
            get_settings().eos_accrual_policy
        )
        self.loader = SnapshotLoader(session)

    async def preview(
        self,
        company_id: UUID,
        employee_id: UUID | None,
        termination_date: date | None,
        termination_reason: str | None,
    ) -> tuple[TerminationFacts, EOSResult]:
        """Compute a benefit without saving it."""
        if employee_id is None:
            raise ValidationError("employee_id is required", field="employee_id")
        parse_reason(termination_reason)

        employee = await self.loader.load_employee(company_id, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)

        salaries = await self.loader.load_latest_salaries(company_id, as_of=termination_date)
        salary = salaries.get(employee_id)
        facts = TerminationFacts(
            hire_date=employee.hire_date,
            termination_date=termination_date,
            basic_salary=salary.basic_salary if salary is not None else employee.basic_salary,
            contract_type=employee.contract_type,
            termination_reason=termination_reason,
        )
        result = self.calculator.calculate(
            facts,
            loans=await self.loader.load_loans(company_id, employee_id),
            advances=await self.loader.load_advances(company_id, employee_id),
        )
        return facts, result

    async def calculate(
        self,
        company_id: UUID,
        employee_id: UUID | None,
        termination_date: date | None,
        termination_reason: str | None,
        actor_user_id: UUID | None = None,
    ) -> EOSCalculation:
        """Compute and save a draft calculation with its yearly breakdown."""
        facts, result = await self.preview(
            company_id, employee_id, termination_date, termination_reason
        )

        calculation = EOSCalculation(
            company_id=company_id,
            employee_id=employee_id,
            calculation_date=date.today(),
            hire_date=facts.hire_date,
            termination_date=facts.termination_date,
            termination_reason=parse_reason(facts.termination_reason).value,
            contract_type=result.contract_type.value,
            basic_salary=facts.basic_salary,
            total_service_years=result.service.years,
            total_service_months=result.service.months,
            total_service_days=result.service.days,
            eligible_for_full_benefits=result.eligible_for_full_benefits,
            gross_benefit_amount=result.gross_benefit,
            loans_deduction=result.loans_deduction,
            advances_deduction=result.advances_deduction,
            other_deductions=result.other_deductions,
            net_benefit_amount=result.net_benefit,
            status=EOSStatus.DRAFT.value,
            created_by=actor_user_id,
        )
        calculation.details = [
            EOSCalculationDetail(
                year_number=row.year,
                benefit_rate=row.rate,
                service_months=row.months,
                benefit_amount=row.amount,
            )
            for row in result.yearly_breakdown
        ]

        try:
            self.session.add(calculation)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.exception("Failed to save EOS calculation for employee %s", employee_id)
            raise PersistenceError(e) from e

        logger.info(
            "EOS calculation %s for employee %s: gross %s net %s",
            calculation.eos_calculation_id,
            employee_id,
            result.gross_benefit,
            result.net_benefit,
        )
        return calculation

    async def get_calculation(self, company_id: UUID, calculation_id: UUID) -> EOSCalculation:
        result = await self.session.execute(
            select(EOSCalculation)
            .where(
                EOSCalculation.eos_calculation_id == calculation_id,
                EOSCalculation.company_id == company_id,
            )
            .options(selectinload(EOSCalculation.details))
        )
        calculation = result.scalar_one_or_none()
        if calculation is None:
            raise NotFoundError("EOS calculation", calculation_id)
        return calculation

    async def list_calculations(
        self, company_id: UUID, employee_id: UUID | None = None
    ) -> list[EOSCalculation]:
        query = (
            select(EOSCalculation)
            .where(EOSCalculation.company_id == company_id)
            .options(selectinload(EOSCalculation.details))
            .order_by(EOSCalculation.calculation_date.desc(), EOSCalculation.created_at.desc())
        )
        if employee_id is not None:
            query = query.where(EOSCalculation.employee_id == employee_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def transition_status(
        self, company_id: UUID, calculation_id: UUID, to_status: str
    ) -> EOSCalculation:
        """Move a calculation one step forward (draft → approved → paid)."""
        calculation = await self.get_calculation(company_id, calculation_id)
        from_status = calculation.status
        if not EOSCalculationStateMachine.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

        calculation.status = EOSStatus(to_status).value
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.exception("Failed to update EOS calculation %s", calculation_id)
            raise PersistenceError(e) from e

        logger.info("EOS calculation %s: %s -> %s", calculation_id, from_status, to_status)
        return calculation
