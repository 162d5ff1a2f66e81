"""GOSI social-insurance contribution calculation."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from uuid import UUID

from hr_compliance.calculators.types import GOSIContribution

# Monthly contributory wage cap (basic + housing), SAR.
GOSI_WAGE_CAP = Decimal("45000")


@dataclass(frozen=True)
class GOSIRate:
    """Contribution rates as decimals, e.g. 0.10 for 10%."""

    employee: Decimal
    employer: Decimal


# Saudi: annuities + unemployment (employee 10%, employer 12%).
# Non-Saudi: occupational hazards only, employer-paid (2%).
GOSI_RATES = MappingProxyType(
    {
        True: GOSIRate(employee=Decimal("0.10"), employer=Decimal("0.12")),
        False: GOSIRate(employee=Decimal("0"), employer=Decimal("0.02")),
    }
)


class GOSICalculator:
    """Computes employee and employer GOSI contributions.

    wage_base = min(basic + housing, 45000); each side is wage_base * rate,
    rounded half-up to 2 decimals. Negative inputs are rejected upstream.
    """

    @staticmethod
    def wage_base(basic_salary: Decimal, housing_allowance: Decimal) -> Decimal:
        """Contributory wage, capped."""
        return min(basic_salary + housing_allowance, GOSI_WAGE_CAP)

    @classmethod
    def calculate(
        cls,
        basic_salary: Decimal,
        housing_allowance: Decimal,
        is_saudi: bool,
    ) -> GOSIContribution:
        """Calculate monthly contributions for one employee."""
        base = cls.wage_base(basic_salary, housing_allowance)
        rate = GOSI_RATES[bool(is_saudi)]

        return GOSIContribution(
            wage_base=base,
            employee=(base * rate.employee).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
            employer=(base * rate.employer).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        )


# ===== Monthly contribution summary =====


@dataclass(frozen=True)
class EmployeeContribution:
    """One employee's contribution line in a monthly summary."""

    employee_id: UUID
    is_saudi: bool
    employee_contribution: Decimal
    employer_contribution: Decimal

    @property
    def total(self) -> Decimal:
        return self.employee_contribution + self.employer_contribution


@dataclass
class ContributionSummary:
    """GOSI totals for a month, split by nationality."""

    month: str
    lines: list[EmployeeContribution] = field(default_factory=list)
    total_employee: Decimal = Decimal("0.00")
    total_employer: Decimal = Decimal("0.00")
    saudi_total: Decimal = Decimal("0.00")
    non_saudi_total: Decimal = Decimal("0.00")

    @property
    def grand_total(self) -> Decimal:
        return self.total_employee + self.total_employer


def summarize_contributions(
    month: str, lines: list[EmployeeContribution]
) -> ContributionSummary:
    """Aggregate per-employee contributions into a monthly summary."""
    summary = ContributionSummary(month=month, lines=list(lines))
    for line in lines:
        summary.total_employee += line.employee_contribution
        summary.total_employer += line.employer_contribution
        if line.is_saudi:
            summary.saudi_total += line.total
        else:
            summary.non_saudi_total += line.total
    return summary
