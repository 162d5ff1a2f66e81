"""Nitaqat snapshot and end-of-service calculation models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_compliance.errors import ImmutableRecordError
from hr_compliance.models.base import Base, TimestampMixin


class NitaqatSnapshot(Base, TimestampMixin):
    """Append-only Saudization classification record.

    Rows are never updated or deleted through the ORM; a new classification
    is a new row.
    """

    __tablename__ = "nitaqat_snapshot"

    snapshot_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    calculation_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_employees: Mapped[int] = mapped_column(Integer, nullable=False)
    saudi_employees: Mapped[int] = mapped_column(Integer, nullable=False)
    effective_saudi_count: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    saudization_percentage: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    nitaqat_color: Mapped[str] = mapped_column(String, nullable=False)
    sector: Mapped[str | None] = mapped_column(String, nullable=True)
    entity_size: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "nitaqat_color IN ('exempt', 'red', 'low-green', 'mid-green', 'high-green', 'platinum')",
            name="nitaqat_snapshot_color_check",
        ),
    )


@event.listens_for(NitaqatSnapshot, "before_update")
def prevent_snapshot_update(mapper, connection, target):
    raise ImmutableRecordError("Nitaqat snapshot", target.snapshot_id)


@event.listens_for(NitaqatSnapshot, "before_delete")
def prevent_snapshot_delete(mapper, connection, target):
    raise ImmutableRecordError("Nitaqat snapshot", target.snapshot_id)


class EOSCalculation(Base, TimestampMixin):
    """End-of-service gratuity calculation for a terminated employee."""

    __tablename__ = "eos_calculation"

    eos_calculation_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    calculation_date: Mapped[date] = mapped_column(Date, nullable=False)
    hire_date: Mapped[date] = mapped_column(Date, nullable=False)
    termination_date: Mapped[date] = mapped_column(Date, nullable=False)
    termination_reason: Mapped[str] = mapped_column(String, nullable=False)
    contract_type: Mapped[str] = mapped_column(String, nullable=False)
    basic_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_service_years: Mapped[int] = mapped_column(Integer, nullable=False)
    total_service_months: Mapped[int] = mapped_column(Integer, nullable=False)
    total_service_days: Mapped[int] = mapped_column(Integer, nullable=False)
    eligible_for_full_benefits: Mapped[bool] = mapped_column(Boolean, nullable=False)
    gross_benefit_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    loans_deduction: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    advances_deduction: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    other_deductions: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
    net_benefit_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    created_by: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint("status IN ('draft', 'approved', 'paid')", name="eos_calculation_status_check"),
        CheckConstraint("contract_type IN ('limited', 'unlimited')", name="eos_contract_type_check"),
        CheckConstraint("net_benefit_amount >= 0", name="eos_net_non_negative"),
        CheckConstraint(
            "total_service_months BETWEEN 0 AND 11", name="eos_service_months_check"
        ),
    )

    # Relationships
    details: Mapped[list[EOSCalculationDetail]] = relationship(
        back_populates="calculation",
        cascade="all, delete-orphan",
        order_by="EOSCalculationDetail.year_number",
    )


class EOSCalculationDetail(Base):
    """One row of the yearly rate schedule."""

    __tablename__ = "eos_calculation_detail"

    detail_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    eos_calculation_id: Mapped[UUID] = mapped_column(
        ForeignKey("eos_calculation.eos_calculation_id", ondelete="CASCADE"),
        nullable=False,
    )
    year_number: Mapped[int] = mapped_column(Integer, nullable=False)
    benefit_rate: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=False)
    service_months: Mapped[int] = mapped_column(Integer, nullable=False, default=12)
    benefit_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    __table_args__ = (
        UniqueConstraint("eos_calculation_id", "year_number", name="eos_detail_year_unique"),
        CheckConstraint(
            "service_months BETWEEN 1 AND 12", name="eos_detail_service_months_check"
        ),
    )

    # Relationships
    calculation: Mapped[EOSCalculation] = relationship(back_populates="details")
