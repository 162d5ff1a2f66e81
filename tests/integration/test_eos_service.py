"""End-of-service service tests."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from hr_compliance.calculators.eos_calculator import EndOfServiceCalculator
from hr_compliance.config import EOSAccrualPolicy
from hr_compliance.errors import NotFoundError, ValidationError
from hr_compliance.services.eos_service import EndOfServiceService
from hr_compliance.services.state_machine import InvalidTransitionError
from tests.factories import add_advance, add_employee, add_loan

TERMINATION_DATE = date(2025, 7, 1)


def make_service(session, policy=EOSAccrualPolicy.TIERED) -> EndOfServiceService:
    return EndOfServiceService(session, EndOfServiceCalculator(policy))


@pytest.fixture
async def long_serving(session, company):
    """Unlimited-contract employee, 10 years 6 months at termination."""
    return await add_employee(
        session, company.company_id, "E100", basic="10000", hire_date=date(2015, 1, 1)
    )


class TestCalculate:
    """Test persisted calculations."""

    async def test_employer_termination_tiered(self, session, company, long_serving):
        calculation = await make_service(session).calculate(
            company.company_id, long_serving.employee_id, TERMINATION_DATE, "employer_termination"
        )

        assert calculation.status == "draft"
        assert calculation.total_service_years == 10
        assert calculation.total_service_months == 6
        assert calculation.eligible_for_full_benefits is True
        # 5 * 5000 + 5 * 10000 + 0.5 * 10000
        assert calculation.gross_benefit_amount == Decimal("80000.00")
        assert calculation.net_benefit_amount == Decimal("80000.00")
        assert len(calculation.details) == 11
        assert sum(d.benefit_amount for d in calculation.details) == Decimal("80000.00")
        assert [d.service_months for d in calculation.details] == [12] * 10 + [6]

    async def test_full_rate_after_ten_years_policy(self, session, company, long_serving):
        calculation = await make_service(
            session, EOSAccrualPolicy.FULL_RATE_AFTER_TEN_YEARS
        ).calculate(
            company.company_id, long_serving.employee_id, TERMINATION_DATE, "retirement"
        )
        assert calculation.gross_benefit_amount == Decimal("105000.00")

    async def test_resignation_half_rate(self, session, company, long_serving):
        calculation = await make_service(session).calculate(
            company.company_id, long_serving.employee_id, TERMINATION_DATE, "employee_resignation"
        )
        assert calculation.eligible_for_full_benefits is False
        assert calculation.gross_benefit_amount == Decimal("52500.00")

    async def test_active_debts_deducted(self, session, company, long_serving):
        await add_loan(session, long_serving, installment="1000", remaining="9000")
        await add_advance(session, long_serving, deduction="500", remaining="700", status="active")
        await add_advance(session, long_serving, deduction="500", remaining="1500")

        calculation = await make_service(session).calculate(
            company.company_id, long_serving.employee_id, TERMINATION_DATE, "employer_termination"
        )

        assert calculation.loans_deduction == Decimal("9000.00")
        assert calculation.advances_deduction == Decimal("700.00")
        assert calculation.net_benefit_amount == Decimal("70300.00")

    async def test_net_floored_at_zero(self, session, company):
        employee = await add_employee(
            session, company.company_id, "E200", basic="3000", hire_date=date(2022, 1, 1)
        )
        await add_loan(session, employee, installment="500", remaining="20000")

        calculation = await make_service(session).calculate(
            company.company_id, employee.employee_id, TERMINATION_DATE, "mutual_agreement"
        )
        assert calculation.gross_benefit_amount > 0
        assert calculation.net_benefit_amount == Decimal("0.00")

    async def test_cause_pays_nothing(self, session, company, long_serving):
        calculation = await make_service(session).calculate(
            company.company_id, long_serving.employee_id, TERMINATION_DATE, "termination_for_cause"
        )
        assert calculation.gross_benefit_amount == Decimal("0.00")
        assert calculation.details == []

    async def test_fixed_term_contract(self, session, company):
        employee = await add_employee(
            session,
            company.company_id,
            "E300",
            basic="6000",
            hire_date=date(2024, 1, 1),
            employment_type="fixed_term",
        )
        calculation = await make_service(session).calculate(
            company.company_id, employee.employee_id, TERMINATION_DATE, "contract_completion"
        )
        assert calculation.contract_type == "limited"
        # 1 * 6000 + 6/12 * 6000
        assert calculation.gross_benefit_amount == Decimal("9000.00")

    async def test_missing_reason(self, session, company, long_serving):
        with pytest.raises(ValidationError) as exc_info:
            await make_service(session).calculate(
                company.company_id, long_serving.employee_id, TERMINATION_DATE, None
            )
        assert exc_info.value.field == "termination_reason"

    async def test_termination_before_hire(self, session, company, long_serving):
        with pytest.raises(ValidationError):
            await make_service(session).calculate(
                company.company_id, long_serving.employee_id, date(2014, 1, 1), "retirement"
            )

    async def test_unknown_employee(self, session, company):
        with pytest.raises(NotFoundError):
            await make_service(session).calculate(
                company.company_id, uuid4(), TERMINATION_DATE, "retirement"
            )


class TestLifecycle:
    """Test draft -> approved -> paid."""

    async def test_forward_transitions(self, session, company, long_serving):
        service = make_service(session)
        calculation = await service.calculate(
            company.company_id, long_serving.employee_id, TERMINATION_DATE, "retirement"
        )

        await service.transition_status(company.company_id, calculation.eos_calculation_id, "approved")
        paid = await service.transition_status(
            company.company_id, calculation.eos_calculation_id, "paid"
        )
        assert paid.status == "paid"

        with pytest.raises(InvalidTransitionError):
            await service.transition_status(
                company.company_id, calculation.eos_calculation_id, "draft"
            )

    async def test_cannot_skip_approval(self, session, company, long_serving):
        service = make_service(session)
        calculation = await service.calculate(
            company.company_id, long_serving.employee_id, TERMINATION_DATE, "retirement"
        )
        with pytest.raises(InvalidTransitionError):
            await service.transition_status(company.company_id, calculation.eos_calculation_id, "paid")

    async def test_list_by_employee(self, session, company, long_serving):
        service = make_service(session)
        other = await add_employee(session, company.company_id, "E400", hire_date=date(2020, 1, 1))
        await service.calculate(
            company.company_id, long_serving.employee_id, TERMINATION_DATE, "retirement"
        )
        await service.calculate(company.company_id, other.employee_id, TERMINATION_DATE, "retirement")

        assert len(await service.list_calculations(company.company_id)) == 2
        only = await service.list_calculations(company.company_id, long_serving.employee_id)
        assert [c.employee_id for c in only] == [long_serving.employee_id]

    async def test_scoped_to_company(self, session, company, long_serving):
        service = make_service(session)
        calculation = await service.calculate(
            company.company_id, long_serving.employee_id, TERMINATION_DATE, "retirement"
        )
        with pytest.raises(NotFoundError):
            await service.get_calculation(uuid4(), calculation.eos_calculation_id)
