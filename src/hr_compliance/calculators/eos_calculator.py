"""End-of-Service gratuity calculation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Iterable

from dateutil.relativedelta import relativedelta

from hr_compliance.calculators.item_builder import round_to_halalas
from hr_compliance.calculators.types import (
    EOS_DEDUCTIBLE_STATUSES,
    ContractType,
    DebtRecord,
    EOSResult,
    ServicePeriod,
    TerminationFacts,
    YearlyBenefit,
)
from hr_compliance.config import EOSAccrualPolicy
from hr_compliance.errors import ValidationError

HALF_RATE = Decimal("0.5")
FULL_RATE = Decimal("1")

MINIMUM_UNLIMITED_YEARS = 2
HALF_RATE_YEARS = 5
FULL_RATE_ALL_YEARS_AFTER = 10


class TerminationReason(str, Enum):
    """Enumerated termination reasons."""

    RETIREMENT = "retirement"
    DEATH = "death"
    DISABILITY = "disability"
    EMPLOYER_TERMINATION = "employer_termination"
    MUTUAL_AGREEMENT = "mutual_agreement"
    FEMALE_MARRIAGE = "female_marriage"
    CONTRACT_COMPLETION = "contract_completion"
    EMPLOYEE_RESIGNATION = "employee_resignation"
    TERMINATION_FOR_CAUSE = "termination_for_cause"
    PROBATION_PERIOD = "probation_period"


@dataclass(frozen=True)
class ReasonPolicy:
    label: str
    full_benefit: bool
    disqualifying: bool = False


REASON_POLICIES = MappingProxyType(
    {
        TerminationReason.RETIREMENT: ReasonPolicy("Retirement", True),
        TerminationReason.DEATH: ReasonPolicy("Death", True),
        TerminationReason.DISABILITY: ReasonPolicy("Disability", True),
        TerminationReason.EMPLOYER_TERMINATION: ReasonPolicy("Employer Termination", True),
        TerminationReason.MUTUAL_AGREEMENT: ReasonPolicy("Mutual Agreement", True),
        TerminationReason.FEMALE_MARRIAGE: ReasonPolicy("Female Marriage", True),
        TerminationReason.CONTRACT_COMPLETION: ReasonPolicy("Contract Completion", True),
        TerminationReason.EMPLOYEE_RESIGNATION: ReasonPolicy("Employee Resignation", False),
        TerminationReason.TERMINATION_FOR_CAUSE: ReasonPolicy(
            "Termination for Cause", False, disqualifying=True
        ),
        TerminationReason.PROBATION_PERIOD: ReasonPolicy(
            "Probation Period", False, disqualifying=True
        ),
    }
)


def parse_reason(value: str | TerminationReason | None) -> TerminationReason:
    """Coerce a raw reason, raising ValidationError when missing or unknown."""
    if value is None or value == "":
        raise ValidationError("termination_reason is required", field="termination_reason")
    try:
        return TerminationReason(value)
    except ValueError:
        raise ValidationError(
            f"Unknown termination_reason '{value}'", field="termination_reason"
        ) from None


def service_period(hire_date: date, termination_date: date) -> ServicePeriod:
    """Calendar-correct years/months/days between two dates."""
    delta = relativedelta(termination_date, hire_date)
    return ServicePeriod(years=delta.years, months=delta.months, days=delta.days)


def sum_remaining(records: Iterable[DebtRecord], statuses: frozenset) -> Decimal:
    return sum(
        (r.remaining_amount for r in records if r.status in statuses),
        Decimal("0"),
    )


@dataclass(frozen=True)
class AccrualTiers:
    """Benefit rate for the first `early_years` of service and for the rest."""

    early_rate: Decimal
    later_rate: Decimal
    early_years: int = HALF_RATE_YEARS

    def rate_for_year(self, year: int) -> Decimal:
        return self.early_rate if year <= self.early_years else self.later_rate

    def gross(self, service: ServicePeriod, salary: Decimal) -> Decimal:
        """(early years x early rate + remaining years x later rate) x salary.

        Worked in whole months so the result is rounded exactly once.
        """
        total_months = service.total_months
        early_months = min(total_months, self.early_years * 12)
        later_months = total_months - early_months
        weighted = early_months * self.early_rate + later_months * self.later_rate
        return round_to_halalas(weighted * salary / Decimal(12))

    def schedule(self, service: ServicePeriod, salary: Decimal) -> list[YearlyBenefit]:
        """One row per completed year plus a trailing row for leftover months.

        Each row is the step between rounded running totals, so no row is
        negative and the last one closes exactly on the gross benefit.
        """
        periods = [(year, 12) for year in range(1, service.years + 1)]
        if service.months:
            periods.append((service.years + 1, service.months))

        rows: list[YearlyBenefit] = []
        accrued = Decimal("0")
        paid = Decimal("0.00")
        for year, months in periods:
            rate = self.rate_for_year(year)
            accrued += months * rate
            running = round_to_halalas(accrued * salary / Decimal(12))
            rows.append(
                YearlyBenefit(year=year, rate=rate, amount=running - paid, months=months)
            )
            paid = running
        return rows


class EndOfServiceCalculator:
    """Computes statutory gratuity for a termination event.

    Rules:
    - termination_for_cause / probation_period: zero, unconditionally
    - limited contract: all service at 0.5 (resignation) or 1.0
    - unlimited contract: nothing under 2 years; 0.5 for the first 5 years;
      later years at 1.0 when eligible, else 0.5
    - net = max(0, gross - active loans - active advances)
    """

    def __init__(self, accrual_policy: EOSAccrualPolicy = EOSAccrualPolicy.TIERED):
        self.accrual_policy = accrual_policy

    def calculate(
        self,
        facts: TerminationFacts,
        loans: Iterable[DebtRecord] = (),
        advances: Iterable[DebtRecord] = (),
    ) -> EOSResult:
        reason = parse_reason(facts.termination_reason)
        self._validate(facts)

        service = service_period(facts.hire_date, facts.termination_date)
        policy = REASON_POLICIES[reason]
        salary = facts.basic_salary

        tiers: AccrualTiers | None
        if policy.disqualifying:
            eligible = False
            tiers = None
        elif facts.contract_type == ContractType.LIMITED:
            eligible = reason != TerminationReason.EMPLOYEE_RESIGNATION
            rate = FULL_RATE if eligible else HALF_RATE
            tiers = AccrualTiers(rate, rate)
        else:
            eligible = policy.full_benefit
            tiers = self._unlimited_tiers(service, eligible)

        if tiers is None:
            gross = Decimal("0.00")
            breakdown: list[YearlyBenefit] = []
        else:
            gross = tiers.gross(service, salary)
            breakdown = tiers.schedule(service, salary)

        loans_deduction = sum_remaining(loans, EOS_DEDUCTIBLE_STATUSES)
        advances_deduction = sum_remaining(advances, EOS_DEDUCTIBLE_STATUSES)
        net = max(Decimal("0.00"), gross - loans_deduction - advances_deduction)

        return EOSResult(
            service=service,
            contract_type=facts.contract_type,
            eligible_for_full_benefits=eligible,
            gross_benefit=gross,
            loans_deduction=round_to_halalas(loans_deduction),
            advances_deduction=round_to_halalas(advances_deduction),
            net_benefit=round_to_halalas(net),
            yearly_breakdown=breakdown,
        )

    def _unlimited_tiers(self, service: ServicePeriod, eligible: bool) -> AccrualTiers | None:
        if service.years < MINIMUM_UNLIMITED_YEARS:
            return None

        if service.years < HALF_RATE_YEARS:
            return AccrualTiers(HALF_RATE, HALF_RATE)

        if (
            eligible
            and service.years >= FULL_RATE_ALL_YEARS_AFTER
            and self.accrual_policy == EOSAccrualPolicy.FULL_RATE_AFTER_TEN_YEARS
        ):
            return AccrualTiers(FULL_RATE, FULL_RATE)

        return AccrualTiers(HALF_RATE, FULL_RATE if eligible else HALF_RATE)

    @staticmethod
    def _validate(facts: TerminationFacts) -> None:
        if facts.hire_date is None:
            raise ValidationError("hire_date is required", field="hire_date")
        if facts.termination_date is None:
            raise ValidationError("termination_date is required", field="termination_date")
        if facts.termination_date < facts.hire_date:
            raise ValidationError(
                "termination_date precedes hire_date", field="termination_date"
            )
        if facts.basic_salary < 0:
            raise ValidationError("basic_salary must not be negative", field="basic_salary")
