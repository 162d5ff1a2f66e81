"""Employee, salary and debt ledger models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_compliance.calculators.types import (
    ContractType,
    DebtRecord,
    DebtStatus,
    EmployeeSnapshot,
    EmployeeStatus,
    SalaryComponents,
)
from hr_compliance.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from hr_compliance.models.company import Company


class Employee(Base, TimestampMixin):
    """Employee record."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_number: Mapped[str] = mapped_column(String, nullable=False)
    full_name: Mapped[str] = mapped_column(String, nullable=False)
    is_saudi: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_disability: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    basic_salary: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    hire_date: Mapped[date] = mapped_column(Date, nullable=False)
    employment_type: Mapped[str] = mapped_column(String, nullable=False, default="permanent")
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    __table_args__ = (
        UniqueConstraint("company_id", "employee_number", name="employee_company_number_unique"),
        CheckConstraint(
            "status IN ('active', 'on_leave', 'terminated')",
            name="employee_status_check",
        ),
        CheckConstraint(
            "employment_type IN ('permanent', 'fixed_term')",
            name="employee_employment_type_check",
        ),
        CheckConstraint("basic_salary >= 0", name="employee_basic_salary_check"),
    )

    # Relationships
    company: Mapped[Company] = relationship(back_populates="employees")
    salary_records: Mapped[list[SalaryRecord]] = relationship(back_populates="employee")

    @property
    def contract_type(self) -> ContractType:
        """Fixed-term employment is a limited contract."""
        if self.employment_type == "fixed_term":
            return ContractType.LIMITED
        return ContractType.UNLIMITED

    def to_snapshot(self) -> EmployeeSnapshot:
        return EmployeeSnapshot(
            employee_id=self.employee_id,
            is_saudi=self.is_saudi,
            basic_salary=self.basic_salary,
            has_disability=self.has_disability,
            hire_date=self.hire_date,
            contract_type=self.contract_type,
            status=EmployeeStatus(self.status),
        )


class SalaryRecord(Base, TimestampMixin):
    """Time-scoped salary components."""

    __tablename__ = "salary_record"

    salary_record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    basic_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    housing_allowance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    transportation_allowance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    other_allowances: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "basic_salary >= 0 AND housing_allowance >= 0 "
            "AND transportation_allowance >= 0 AND other_allowances >= 0",
            name="salary_record_non_negative",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="salary_records")

    def to_components(self) -> SalaryComponents:
        return SalaryComponents(
            basic_salary=self.basic_salary,
            housing_allowance=self.housing_allowance,
            transportation_allowance=self.transportation_allowance,
            other_allowances=self.other_allowances,
            effective_from=self.effective_from,
        )


class Loan(Base, TimestampMixin):
    """Employee loan repaid by monthly installment."""

    __tablename__ = "loan"

    loan_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    loan_type: Mapped[str] = mapped_column(String, nullable=False, default="personal")
    loan_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    remaining_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    monthly_installment: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    __table_args__ = (
        CheckConstraint(
            "loan_type IN ('personal', 'housing', 'emergency', 'other')",
            name="loan_type_check",
        ),
        CheckConstraint(
            "status IN ('pending', 'active', 'completed', 'cancelled')",
            name="loan_status_check",
        ),
        CheckConstraint("remaining_amount >= 0", name="loan_remaining_non_negative"),
    )

    def to_debt_record(self) -> DebtRecord:
        return DebtRecord(
            record_id=self.loan_id,
            employee_id=self.employee_id,
            remaining_amount=self.remaining_amount,
            installment_amount=self.monthly_installment,
            status=DebtStatus(self.status),
        )


class Advance(Base, TimestampMixin):
    """Salary advance recovered by a fixed monthly deduction."""

    __tablename__ = "advance"

    advance_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    remaining_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    deduction_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    request_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'active', 'approved', 'rejected', 'completed', 'cancelled')",
            name="advance_status_check",
        ),
        CheckConstraint("remaining_amount >= 0", name="advance_remaining_non_negative"),
    )

    def to_debt_record(self) -> DebtRecord:
        return DebtRecord(
            record_id=self.advance_id,
            employee_id=self.employee_id,
            remaining_amount=self.remaining_amount,
            installment_amount=self.deduction_amount,
            status=DebtStatus(self.status),
        )
