"""Payroll item builder with idempotent hashing."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from hr_compliance.calculators.types import PayrollItemCandidate, SalaryComponents

OUTPUT_PRECISION = Decimal("0.01")  # halalas


def round_to_halalas(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (round-half-up)."""
    return amount.quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_UP)


@dataclass
class BatchTotals:
    """Batch-level rollups over payroll items."""

    total_gross: Decimal = Decimal("0.00")
    total_net: Decimal = Decimal("0.00")
    total_deductions: Decimal = Decimal("0.00")
    total_gosi_employer: Decimal = Decimal("0.00")
    total_employees: int = 0


class PayrollItemBuilder:
    """Builds payroll items with deterministic hashing for idempotency.

    Every component is rounded to halalas before totals are taken, so
    net_salary == total_earnings - total_deductions holds exactly.
    """

    @staticmethod
    def compute_item_hash(item: PayrollItemCandidate) -> str:
        """Compute deterministic hash over the item's defining amounts."""
        canonical = item.to_canonical_dict()
        json_str = json.dumps(canonical, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    @staticmethod
    def create_item(
        employee_id: UUID,
        salary: SalaryComponents,
        gosi_employee: Decimal,
        gosi_employer: Decimal,
        loan_deduction: Decimal = Decimal("0"),
        advance_deduction: Decimal = Decimal("0"),
    ) -> PayrollItemCandidate:
        """Create a payroll item from earnings and deductions."""
        basic = round_to_halalas(salary.basic_salary)
        housing = round_to_halalas(salary.housing_allowance)
        transportation = round_to_halalas(salary.transportation_allowance)
        other = round_to_halalas(salary.other_allowances)
        total_earnings = basic + housing + transportation + other

        gosi_employee = round_to_halalas(gosi_employee)
        loan_deduction = round_to_halalas(abs(loan_deduction))
        advance_deduction = round_to_halalas(abs(advance_deduction))
        total_deductions = gosi_employee + loan_deduction + advance_deduction

        item = PayrollItemCandidate(
            employee_id=employee_id,
            basic_salary=basic,
            housing_allowance=housing,
            transportation_allowance=transportation,
            other_allowances=other,
            total_earnings=total_earnings,
            gosi_employee=gosi_employee,
            gosi_employer=round_to_halalas(gosi_employer),
            loan_deduction=loan_deduction,
            advance_deduction=advance_deduction,
            total_deductions=total_deductions,
            net_salary=total_earnings - total_deductions,
        )
        item.item_hash = PayrollItemBuilder.compute_item_hash(item)
        return item

    @staticmethod
    def validate_item(item: PayrollItemCandidate) -> list[str]:
        """Validate item arithmetic, returning error messages (empty if valid)."""
        errors: list[str] = []

        earnings = (
            item.basic_salary
            + item.housing_allowance
            + item.transportation_allowance
            + item.other_allowances
        )
        if earnings != item.total_earnings:
            errors.append(f"total_earnings {item.total_earnings} != components {earnings}")

        deductions = item.gosi_employee + item.loan_deduction + item.advance_deduction
        if deductions != item.total_deductions:
            errors.append(f"total_deductions {item.total_deductions} != components {deductions}")

        if item.net_salary != item.total_earnings - item.total_deductions:
            errors.append(
                f"net_salary {item.net_salary} != {item.total_earnings} - {item.total_deductions}"
            )

        for name in ("gosi_employee", "gosi_employer", "loan_deduction", "advance_deduction"):
            if getattr(item, name) < 0:
                errors.append(f"{name} is negative")

        return errors

    @staticmethod
    def sum_items(items: list[PayrollItemCandidate]) -> BatchTotals:
        """Roll item amounts up to batch totals."""
        totals = BatchTotals(total_employees=len(items))
        for item in items:
            totals.total_gross += item.total_earnings
            totals.total_net += item.net_salary
            totals.total_deductions += item.total_deductions
            totals.total_gosi_employer += item.gosi_employer
        return totals
