"""Type definitions for the calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


class EmployeeStatus(str, Enum):
    """Employee status values."""

    ACTIVE = "active"
    ON_LEAVE = "on_leave"
    TERMINATED = "terminated"


class ContractType(str, Enum):
    """Employment contract duration."""

    LIMITED = "limited"
    UNLIMITED = "unlimited"


class DebtStatus(str, Enum):
    """Loan and advance ledger statuses."""

    PENDING = "pending"
    ACTIVE = "active"
    APPROVED = "approved"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


# Loans recover while active; advances recover once active or approved.
LOAN_RECOVERABLE_STATUSES = frozenset({DebtStatus.ACTIVE})
ADVANCE_RECOVERABLE_STATUSES = frozenset({DebtStatus.ACTIVE, DebtStatus.APPROVED})
# Only active balances are netted against end-of-service benefits.
EOS_DEDUCTIBLE_STATUSES = frozenset({DebtStatus.ACTIVE})


class NitaqatZone(str, Enum):
    """Nitaqat compliance zones, lowest first."""

    EXEMPT = "exempt"
    RED = "red"
    LOW_GREEN = "low-green"
    MID_GREEN = "mid-green"
    HIGH_GREEN = "high-green"
    PLATINUM = "platinum"


# ===== Inputs =====


@dataclass(frozen=True)
class EmployeeSnapshot:
    """Read-only roster row for one employee."""

    employee_id: UUID
    is_saudi: bool
    basic_salary: Decimal = Decimal("0")
    has_disability: bool = False
    hire_date: date | None = None
    contract_type: ContractType = ContractType.UNLIMITED
    status: EmployeeStatus = EmployeeStatus.ACTIVE


@dataclass(frozen=True)
class SalaryComponents:
    """Latest time-scoped salary record for an employee."""

    basic_salary: Decimal = Decimal("0")
    housing_allowance: Decimal = Decimal("0")
    transportation_allowance: Decimal = Decimal("0")
    other_allowances: Decimal = Decimal("0")
    effective_from: date | None = None

    @property
    def total(self) -> Decimal:
        return (
            self.basic_salary
            + self.housing_allowance
            + self.transportation_allowance
            + self.other_allowances
        )


@dataclass(frozen=True)
class DebtRecord:
    """Outstanding loan or advance.

    `installment_amount` is the loan's monthly installment or the
    advance's deduction amount.
    """

    record_id: UUID
    employee_id: UUID
    remaining_amount: Decimal
    installment_amount: Decimal
    status: DebtStatus


@dataclass(frozen=True)
class TerminationFacts:
    """Facts about one termination event for the gratuity calculation."""

    hire_date: date | None
    termination_date: date | None
    basic_salary: Decimal
    contract_type: ContractType
    termination_reason: str | None


@dataclass(frozen=True)
class CompanyComplianceConfig:
    """Company facts echoed on compliance snapshots."""

    entity_size: str | None = None
    sector: str | None = None


# ===== Outputs =====


@dataclass(frozen=True)
class GOSIContribution:
    """Monthly GOSI split for one employee."""

    wage_base: Decimal
    employee: Decimal
    employer: Decimal

    @property
    def total(self) -> Decimal:
        return self.employee + self.employer


@dataclass
class NitaqatResult:
    """Saudization classification for a roster."""

    total_employees: int
    saudi_count: int
    full_count_saudis: int
    half_count_saudis: int
    disabled_saudis: int
    effective_saudi_count: Decimal
    saudization_percentage: Decimal
    zone: NitaqatZone
    requirements: str
    next_zone: NitaqatZone | None = None
    next_zone_percentage: Decimal | None = None
    employees_needed_for_next_zone: Decimal | None = None


@dataclass(frozen=True)
class ServicePeriod:
    """Calendar-correct length of service."""

    years: int
    months: int
    days: int

    @property
    def total_months(self) -> int:
        """Completed months of service; leftover days do not accrue."""
        return self.years * 12 + self.months


@dataclass(frozen=True)
class YearlyBenefit:
    """One row of the end-of-service rate schedule.

    `months` is 12 for a completed year and the leftover months for the
    trailing partial year.
    """

    year: int
    rate: Decimal
    amount: Decimal
    months: int = 12

    @property
    def fraction(self) -> Decimal:
        return Decimal(self.months) / Decimal(12)


@dataclass
class EOSResult:
    """End-of-service gratuity for one termination event."""

    service: ServicePeriod
    contract_type: ContractType
    eligible_for_full_benefits: bool
    gross_benefit: Decimal
    loans_deduction: Decimal
    advances_deduction: Decimal
    net_benefit: Decimal
    yearly_breakdown: list[YearlyBenefit] = field(default_factory=list)
    other_deductions: Decimal = Decimal("0")


@dataclass
class PayrollItemCandidate:
    """A computed payroll item before persistence."""

    employee_id: UUID
    basic_salary: Decimal
    housing_allowance: Decimal
    transportation_allowance: Decimal
    other_allowances: Decimal
    total_earnings: Decimal
    gosi_employee: Decimal
    gosi_employer: Decimal
    loan_deduction: Decimal
    advance_deduction: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    item_hash: str = ""

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for hashing (deterministic ordering)."""
        return {
            "employee_id": str(self.employee_id),
            "basic_salary": str(self.basic_salary),
            "housing_allowance": str(self.housing_allowance),
            "transportation_allowance": str(self.transportation_allowance),
            "other_allowances": str(self.other_allowances),
            "gosi_employee": str(self.gosi_employee),
            "gosi_employer": str(self.gosi_employer),
            "loan_deduction": str(self.loan_deduction),
            "advance_deduction": str(self.advance_deduction),
            "net_salary": str(self.net_salary),
        }
