"""Tests for end-of-service gratuity calculation."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from hr_compliance.calculators.eos_calculator import (
    EndOfServiceCalculator,
    TerminationReason,
    parse_reason,
    service_period,
)
from hr_compliance.calculators.types import (
    ContractType,
    DebtRecord,
    DebtStatus,
    TerminationFacts,
)
from hr_compliance.config import EOSAccrualPolicy
from hr_compliance.errors import ValidationError


def facts(
    years: int,
    months: int = 0,
    salary: str = "4000",
    contract: ContractType = ContractType.UNLIMITED,
    reason: str | None = TerminationReason.EMPLOYER_TERMINATION.value,
) -> TerminationFacts:
    hire = date(2010, 1, 1)
    return TerminationFacts(
        hire_date=hire,
        termination_date=date(hire.year + years, hire.month + months, 1),
        basic_salary=Decimal(salary),
        contract_type=contract,
        termination_reason=reason,
    )


def debt(remaining: str, status: DebtStatus = DebtStatus.ACTIVE) -> DebtRecord:
    return DebtRecord(
        record_id=uuid4(),
        employee_id=uuid4(),
        remaining_amount=Decimal(remaining),
        installment_amount=Decimal("100"),
        status=status,
    )


class TestServicePeriod:
    """Test calendar-correct service length."""

    def test_calendar_difference(self):
        period = service_period(date(2015, 3, 15), date(2021, 9, 14))
        assert (period.years, period.months, period.days) == (6, 5, 30)

    def test_leap_day_hire(self):
        period = service_period(date(2016, 2, 29), date(2020, 2, 28))
        assert period.years == 3
        assert period.months == 11

    def test_total_months(self):
        period = service_period(date(2020, 1, 1), date(2023, 7, 1))
        assert period.total_months == 42


class TestReasons:
    """Test reason parsing."""

    def test_missing_reason(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_reason(None)
        assert exc_info.value.field == "termination_reason"

    def test_unknown_reason(self):
        with pytest.raises(ValidationError):
            parse_reason("walked_out")

    def test_known_reason(self):
        assert parse_reason("retirement") == TerminationReason.RETIREMENT


class TestUnlimitedContract:
    """Test the tiered schedule for indefinite contracts."""

    def test_six_years_eligible(self):
        """5 x 4000 x 0.5 + 1 x 4000 x 1.0 = 14,000."""
        result = EndOfServiceCalculator().calculate(facts(6))

        assert result.gross_benefit == Decimal("14000.00")
        assert result.eligible_for_full_benefits is True
        assert [row.rate for row in result.yearly_breakdown] == [Decimal("0.5")] * 5 + [
            Decimal("1")
        ]

    def test_under_two_years_is_zero(self):
        result = EndOfServiceCalculator().calculate(facts(1, months=11))

        assert result.gross_benefit == Decimal("0.00")
        assert result.yearly_breakdown == []

    def test_two_to_five_years_half_rate(self):
        """3.5 years x 4000 x 0.5 = 7,000."""
        result = EndOfServiceCalculator().calculate(facts(3, months=6))

        assert result.gross_benefit == Decimal("7000.00")
        assert len(result.yearly_breakdown) == 4
        assert result.yearly_breakdown[-1].fraction == Decimal("0.5")
        assert result.yearly_breakdown[-1].months == 6
        assert result.yearly_breakdown[-1].amount == Decimal("1000.00")

    def test_resignation_after_five_years_stays_half(self):
        """7 years resignation: every year at 0.5."""
        result = EndOfServiceCalculator().calculate(
            facts(7, reason=TerminationReason.EMPLOYEE_RESIGNATION.value)
        )

        assert result.eligible_for_full_benefits is False
        assert result.gross_benefit == Decimal("14000.00")

    def test_twelve_years_tiered(self):
        """Default policy: 5 x 2000 + 7 x 4000 = 38,000."""
        result = EndOfServiceCalculator().calculate(facts(12))
        assert result.gross_benefit == Decimal("38000.00")

    def test_twelve_years_full_rate_policy(self):
        """Legacy policy: all 12 years at full rate."""
        calculator = EndOfServiceCalculator(EOSAccrualPolicy.FULL_RATE_AFTER_TEN_YEARS)
        result = calculator.calculate(facts(12))

        assert result.gross_benefit == Decimal("48000.00")
        assert all(row.rate == Decimal("1") for row in result.yearly_breakdown)

    def test_tiered_policy_is_continuous_at_ten_years(self):
        calculator = EndOfServiceCalculator()
        just_before = calculator.calculate(facts(9, months=11)).gross_benefit
        at_ten = calculator.calculate(facts(10)).gross_benefit

        assert at_ten - just_before == Decimal("333.33")

    def test_ineligible_after_ten_years_two_tier(self):
        result = EndOfServiceCalculator(EOSAccrualPolicy.FULL_RATE_AFTER_TEN_YEARS).calculate(
            facts(11, reason=TerminationReason.EMPLOYEE_RESIGNATION.value)
        )
        assert result.gross_benefit == Decimal("22000.00")

    def test_breakdown_sums_to_gross(self):
        result = EndOfServiceCalculator().calculate(facts(8, months=7, salary="5123.45"))
        total = sum(row.amount for row in result.yearly_breakdown)
        assert total == result.gross_benefit

    def test_gross_rounded_once(self):
        """4 x 3333.33 x 0.5 = 6,666.66, not 4 x round(1666.665)."""
        result = EndOfServiceCalculator().calculate(
            facts(4, salary="3333.33", reason=TerminationReason.EMPLOYEE_RESIGNATION.value)
        )

        assert result.gross_benefit == Decimal("6666.66")
        assert sum(row.amount for row in result.yearly_breakdown) == Decimal("6666.66")
        assert [row.amount for row in result.yearly_breakdown] == [
            Decimal("1666.67"),
            Decimal("1666.66"),
            Decimal("1666.67"),
            Decimal("1666.66"),
        ]


class TestLimitedContract:
    """Test fixed-term contract accrual."""

    def test_resignation_half_rate(self):
        """3 x 3000 x 0.5 = 4,500."""
        result = EndOfServiceCalculator().calculate(
            facts(
                3,
                salary="3000",
                contract=ContractType.LIMITED,
                reason=TerminationReason.EMPLOYEE_RESIGNATION.value,
            )
        )

        assert result.gross_benefit == Decimal("4500.00")
        assert result.contract_type == ContractType.LIMITED

    def test_completion_full_rate(self):
        result = EndOfServiceCalculator().calculate(
            facts(
                3,
                salary="3000",
                contract=ContractType.LIMITED,
                reason=TerminationReason.CONTRACT_COMPLETION.value,
            )
        )
        assert result.gross_benefit == Decimal("9000.00")

    def test_short_limited_contract_still_accrues(self):
        """The two-year minimum only applies to unlimited contracts."""
        result = EndOfServiceCalculator().calculate(
            facts(1, months=6, salary="4000", contract=ContractType.LIMITED)
        )
        assert result.gross_benefit == Decimal("6000.00")

    def test_gross_rounded_once(self):
        """10 x 1000.01 x 0.5 = 5,000.05, not 10 x round(500.005)."""
        result = EndOfServiceCalculator().calculate(
            facts(
                10,
                salary="1000.01",
                contract=ContractType.LIMITED,
                reason=TerminationReason.EMPLOYEE_RESIGNATION.value,
            )
        )

        assert result.gross_benefit == Decimal("5000.05")
        assert sum(row.amount for row in result.yearly_breakdown) == Decimal("5000.05")
        assert {row.amount for row in result.yearly_breakdown} == {
            Decimal("500.00"),
            Decimal("500.01"),
        }


class TestDisqualifyingReasons:
    """Test cause and probation terminations."""

    @pytest.mark.parametrize(
        "reason",
        [TerminationReason.TERMINATION_FOR_CAUSE, TerminationReason.PROBATION_PERIOD],
    )
    @pytest.mark.parametrize("contract", [ContractType.LIMITED, ContractType.UNLIMITED])
    def test_zero_benefit(self, reason, contract):
        result = EndOfServiceCalculator().calculate(
            facts(15, contract=contract, reason=reason.value)
        )

        assert result.gross_benefit == Decimal("0.00")
        assert result.net_benefit == Decimal("0.00")
        assert result.yearly_breakdown == []


class TestDeductions:
    """Test loan and advance netting."""

    def test_active_balances_deducted(self):
        result = EndOfServiceCalculator().calculate(
            facts(6),
            loans=[debt("3000"), debt("500", DebtStatus.COMPLETED)],
            advances=[debt("1000")],
        )

        assert result.loans_deduction == Decimal("3000.00")
        assert result.advances_deduction == Decimal("1000.00")
        assert result.net_benefit == Decimal("10000.00")

    def test_approved_advance_not_deducted(self):
        result = EndOfServiceCalculator().calculate(
            facts(6), advances=[debt("1000", DebtStatus.APPROVED)]
        )

        assert result.advances_deduction == Decimal("0.00")
        assert result.net_benefit == result.gross_benefit

    def test_net_never_negative(self):
        result = EndOfServiceCalculator().calculate(facts(3), loans=[debt("50000")])

        assert result.gross_benefit == Decimal("6000.00")
        assert result.net_benefit == Decimal("0.00")

    def test_other_deductions_zero(self):
        assert EndOfServiceCalculator().calculate(facts(3)).other_deductions == Decimal("0")


class TestValidation:
    """Test input validation."""

    def test_termination_before_hire(self):
        bad = TerminationFacts(
            hire_date=date(2020, 1, 1),
            termination_date=date(2019, 1, 1),
            basic_salary=Decimal("4000"),
            contract_type=ContractType.UNLIMITED,
            termination_reason="retirement",
        )
        with pytest.raises(ValidationError):
            EndOfServiceCalculator().calculate(bad)

    def test_missing_termination_date(self):
        bad = TerminationFacts(
            hire_date=date(2020, 1, 1),
            termination_date=None,
            basic_salary=Decimal("4000"),
            contract_type=ContractType.UNLIMITED,
            termination_reason="retirement",
        )
        with pytest.raises(ValidationError) as exc_info:
            EndOfServiceCalculator().calculate(bad)
        assert exc_info.value.field == "termination_date"

    def test_missing_reason_checked_first(self):
        with pytest.raises(ValidationError) as exc_info:
            EndOfServiceCalculator().calculate(facts(3, reason=None))
        assert exc_info.value.field == "termination_reason"
