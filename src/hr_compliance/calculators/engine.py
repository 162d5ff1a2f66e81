"""Payroll batch aggregation - composes GOSI and debt recovery per employee."""

from __future__ import annotations

import hashlib
import json
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from dateutil.relativedelta import relativedelta

from hr_compliance.calculators.gosi_calculator import GOSICalculator
from hr_compliance.calculators.item_builder import (
    BatchTotals,
    PayrollItemBuilder,
)
from hr_compliance.calculators.types import (
    ADVANCE_RECOVERABLE_STATUSES,
    LOAN_RECOVERABLE_STATUSES,
    DebtRecord,
    EmployeeSnapshot,
    EmployeeStatus,
    PayrollItemCandidate,
    SalaryComponents,
)
from hr_compliance.config import DebtRecoveryPolicy, get_settings
from hr_compliance.errors import ValidationError

MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
ZERO_SALARY = SalaryComponents()


def parse_month(month: str | None) -> tuple[date, date]:
    """Parse 'YYYY-MM' into (period_start, period_end)."""
    if not month:
        raise ValidationError("month is required", field="month")
    match = MONTH_PATTERN.match(month)
    if match is None or not 1 <= int(match.group(2)) <= 12:
        raise ValidationError(f"month must be YYYY-MM, got '{month}'", field="month")
    period_start = date(int(match.group(1)), int(match.group(2)), 1)
    period_end = period_start + relativedelta(months=1, days=-1)
    return period_start, period_end


@dataclass
class PayrollBatchResult:
    """Result of aggregating one company-month."""

    company_id: UUID
    month: str
    period_start: date
    period_end: date
    calculation_id: UUID
    items: list[PayrollItemCandidate]
    totals: BatchTotals
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0


class PayrollBatchAggregator:
    """Builds payroll items and rollups for a company-month.

    Calculation pipeline (stable order per employee):
    1) Earnings from the latest salary record (all zero when missing)
    2) GOSI contributions on basic + housing
    3) Loan installment and advance deduction recovery
    4) net = earnings - (gosi_employee + loan + advance)

    Employees are independent, so items may be computed in any order.
    """

    def __init__(
        self,
        debt_recovery_policy: DebtRecoveryPolicy | None = None,
        engine_version: str | None = None,
    ):
        settings = get_settings()
        self.debt_recovery_policy = debt_recovery_policy or settings.debt_recovery_policy
        self.engine_version = engine_version or settings.engine_version

    def aggregate(
        self,
        company_id: UUID,
        month: str,
        roster: Iterable[EmployeeSnapshot],
        salaries: dict[UUID, SalaryComponents],
        loans: Iterable[DebtRecord] = (),
        advances: Iterable[DebtRecord] = (),
    ) -> PayrollBatchResult:
        period_start, period_end = parse_month(month)
        loans_by_employee = self._group_by_employee(loans)
        advances_by_employee = self._group_by_employee(advances)

        items: list[PayrollItemCandidate] = []
        errors: list[str] = []
        for employee in roster:
            if employee.status != EmployeeStatus.ACTIVE:
                continue

            item = self.calculate_employee(
                employee,
                salaries.get(employee.employee_id, ZERO_SALARY),
                loans_by_employee.get(employee.employee_id, []),
                advances_by_employee.get(employee.employee_id, []),
            )
            errors.extend(
                f"{employee.employee_id}: {e}" for e in PayrollItemBuilder.validate_item(item)
            )
            items.append(item)

        return PayrollBatchResult(
            company_id=company_id,
            month=month,
            period_start=period_start,
            period_end=period_end,
            calculation_id=self._generate_calculation_id(company_id, month, items),
            items=items,
            totals=PayrollItemBuilder.sum_items(items),
            errors=errors,
        )

    def calculate_employee(
        self,
        employee: EmployeeSnapshot,
        salary: SalaryComponents,
        loans: list[DebtRecord],
        advances: list[DebtRecord],
    ) -> PayrollItemCandidate:
        """Calculate a single employee's payroll item."""
        for name in (
            "basic_salary",
            "housing_allowance",
            "transportation_allowance",
            "other_allowances",
        ):
            if getattr(salary, name) < 0:
                raise ValidationError(
                    f"Negative {name} for employee {employee.employee_id}", field=name
                )

        gosi = GOSICalculator.calculate(
            salary.basic_salary, salary.housing_allowance, employee.is_saudi
        )
        return PayrollItemBuilder.create_item(
            employee_id=employee.employee_id,
            salary=salary,
            gosi_employee=gosi.employee,
            gosi_employer=gosi.employer,
            loan_deduction=self.recovery_amount(loans, LOAN_RECOVERABLE_STATUSES),
            advance_deduction=self.recovery_amount(advances, ADVANCE_RECOVERABLE_STATUSES),
        )

    def recovery_amount(self, records: list[DebtRecord], statuses: frozenset) -> Decimal:
        """Monthly amount recovered from an employee's loans or advances."""
        recoverable = [r for r in records if r.status in statuses]
        if not recoverable:
            return Decimal("0")

        if self.debt_recovery_policy == DebtRecoveryPolicy.FIRST_MATCH:
            return recoverable[0].installment_amount

        # Never recover more than is still owed on a record
        return sum(
            (min(r.installment_amount, r.remaining_amount) for r in recoverable),
            Decimal("0"),
        )

    @staticmethod
    def _group_by_employee(records: Iterable[DebtRecord]) -> dict[UUID, list[DebtRecord]]:
        grouped: dict[UUID, list[DebtRecord]] = {}
        for record in records:
            grouped.setdefault(record.employee_id, []).append(record)
        return grouped

    def _generate_calculation_id(
        self,
        company_id: UUID,
        month: str,
        items: list[PayrollItemCandidate],
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "company_id": str(company_id),
            "month": month,
            "engine_version": self.engine_version,
            "item_hashes": sorted(item.item_hash for item in items),
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])
