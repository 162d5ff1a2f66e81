"""Nitaqat Saudization classification."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType

from hr_compliance.calculators.types import (
    EmployeeSnapshot,
    NitaqatResult,
    NitaqatZone,
)
from hr_compliance.errors import ValidationError

FULL_COUNT_SALARY = Decimal("4000")
EXEMPT_BELOW_EMPLOYEES = 6

WEIGHT_DISABLED = Decimal("4.0")
WEIGHT_FULL = Decimal("1.0")
WEIGHT_HALF = Decimal("0.5")
WEIGHT_NONE = Decimal("0")


@dataclass(frozen=True)
class NitaqatBand:
    """Percentage band, both bounds inclusive at 2-decimal precision."""

    zone: NitaqatZone
    min_percentage: Decimal
    max_percentage: Decimal | None  # None = no upper limit


# Ordered lowest first. Seams at 19.25/19.26, 23.11/23.12, 26.51/26.52 are
# exact at 2 decimals; percentages are rounded before lookup.
NITAQAT_BANDS: tuple[NitaqatBand, ...] = (
    NitaqatBand(NitaqatZone.RED, Decimal("0"), Decimal("16.21")),
    NitaqatBand(NitaqatZone.LOW_GREEN, Decimal("16.22"), Decimal("19.25")),
    NitaqatBand(NitaqatZone.MID_GREEN, Decimal("19.26"), Decimal("23.11")),
    NitaqatBand(NitaqatZone.HIGH_GREEN, Decimal("23.12"), Decimal("26.51")),
    NitaqatBand(NitaqatZone.PLATINUM, Decimal("26.52"), None),
)

ZONE_REQUIREMENTS = MappingProxyType(
    {
        NitaqatZone.EXEMPT: (
            "Fewer than 6 employees: exempt from Nitaqat classification, "
            "but at least 1 Saudi national must be employed."
        ),
        NitaqatZone.RED: (
            "Red zone: new expatriate hiring, work permit renewals and transfers "
            "are blocked. Saudization must increase immediately."
        ),
        NitaqatZone.LOW_GREEN: (
            "Low green zone: basic compliance with limited flexibility for visa services."
        ),
        NitaqatZone.MID_GREEN: (
            "Medium green zone: good compliance with standard visa services available."
        ),
        NitaqatZone.HIGH_GREEN: (
            "High green zone: excellent compliance with full access to visa services."
        ),
        NitaqatZone.PLATINUM: (
            "Platinum zone: highest Saudization rate with priority access to "
            "government services."
        ),
    }
)


def saudi_weight(employee: EmployeeSnapshot) -> Decimal:
    """Weight an employee contributes to the effective Saudi count."""
    if employee.basic_salary < 0:
        raise ValidationError(
            f"Negative basic_salary for employee {employee.employee_id}",
            field="basic_salary",
        )
    if not employee.is_saudi:
        return WEIGHT_NONE
    if employee.basic_salary >= FULL_COUNT_SALARY:
        return WEIGHT_DISABLED if employee.has_disability else WEIGHT_FULL
    if employee.basic_salary > 0:
        return WEIGHT_HALF
    return WEIGHT_NONE


def round_percentage(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def band_for_percentage(percentage: Decimal) -> NitaqatBand:
    """Find the single band containing a percentage."""
    rounded = round_percentage(percentage)
    for band in reversed(NITAQAT_BANDS):
        if rounded >= band.min_percentage:
            return band
    return NITAQAT_BANDS[0]


def next_band(band: NitaqatBand) -> NitaqatBand | None:
    index = NITAQAT_BANDS.index(band)
    if index + 1 < len(NITAQAT_BANDS):
        return NITAQAT_BANDS[index + 1]
    return None


class NitaqatClassifier:
    """Classifies an active roster into a Nitaqat zone.

    Pipeline:
    1) Weight each Saudi employee (4.0 disabled >= 4000, 1.0 >= 4000,
       0.5 below 4000, 0 unpaid)
    2) percentage = effective / total * 100 (0 when the roster is empty)
    3) Exempt below 6 employees, else band lookup
    4) Distance to the next band's lower bound
    """

    def classify(self, roster: list[EmployeeSnapshot]) -> NitaqatResult:
        total_employees = len(roster)
        saudi_count = 0
        full_count = 0
        half_count = 0
        disabled_count = 0
        effective = Decimal("0")

        for employee in roster:
            weight = saudi_weight(employee)
            if employee.is_saudi:
                saudi_count += 1
            if weight == WEIGHT_DISABLED:
                disabled_count += 1
            elif weight == WEIGHT_FULL:
                full_count += 1
            elif weight == WEIGHT_HALF:
                half_count += 1
            effective += weight

        if total_employees > 0:
            percentage = round_percentage(effective / Decimal(total_employees) * 100)
        else:
            percentage = Decimal("0.00")

        result = NitaqatResult(
            total_employees=total_employees,
            saudi_count=saudi_count,
            full_count_saudis=full_count,
            half_count_saudis=half_count,
            disabled_saudis=disabled_count,
            effective_saudi_count=effective,
            saudization_percentage=percentage,
            zone=NitaqatZone.EXEMPT,
            requirements=ZONE_REQUIREMENTS[NitaqatZone.EXEMPT],
        )
        if total_employees < EXEMPT_BELOW_EMPLOYEES:
            return result

        band = band_for_percentage(percentage)
        result.zone = band.zone
        result.requirements = ZONE_REQUIREMENTS[band.zone]

        upper = next_band(band)
        if upper is not None:
            result.next_zone = upper.zone
            result.next_zone_percentage = upper.min_percentage
            result.employees_needed_for_next_zone = self.employees_needed(
                total_employees, effective, upper.min_percentage
            )
        return result

    @staticmethod
    def employees_needed(
        total_employees: int, effective_saudi_count: Decimal, threshold: Decimal
    ) -> Decimal:
        """Effective Saudi headcount still missing to reach a threshold."""
        target = math.ceil(Decimal(total_employees) * threshold / 100)
        return max(Decimal("0"), Decimal(target) - effective_saudi_count)
