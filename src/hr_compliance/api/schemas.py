"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Error payload returned by the exception handlers."""

    detail: str
    code: str
    field: str | None = None


# ============================================================================
# Payroll batch schemas
# ============================================================================


class PayrollBatchCreate(BaseModel):
    """Schema for creating a payroll batch."""

    month: str = Field(..., examples=["2025-01"])
    notes: str | None = None


class PayrollBatchResponse(BaseModel):
    """Schema for payroll batch response."""

    model_config = ConfigDict(from_attributes=True)

    batch_id: UUID
    company_id: UUID
    month: str
    period_start: date
    period_end: date
    status: str
    total_employees: int
    total_gross: Decimal
    total_net: Decimal
    total_deductions: Decimal
    total_gosi_employer: Decimal
    calculation_id: UUID
    created_by: UUID | None = None
    approved_by: UUID | None = None
    approved_at: datetime | None = None
    processed_at: datetime | None = None
    paid_at: datetime | None = None
    notes: str | None = None
    created_at: datetime


class PayrollBatchListResponse(BaseModel):
    """Schema for listing payroll batches."""

    items: list[PayrollBatchResponse]
    total: int


class PayrollItemResponse(BaseModel):
    """Schema for one employee's payroll item."""

    model_config = ConfigDict(from_attributes=True)

    payroll_item_id: UUID
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
    item_hash: str


class PayrollItemListResponse(BaseModel):
    items: list[PayrollItemResponse]
    total: int


class TransitionRequest(BaseModel):
    """Request to move a batch or calculation to its next status."""

    to_status: str
    comments: str | None = None


class ProcessingLogResponse(BaseModel):
    """Schema for a batch processing log entry."""

    model_config = ConfigDict(from_attributes=True)

    log_id: UUID
    action: str
    description: str
    actor_user_id: UUID | None = None
    details_json: dict[str, Any] | None = None
    created_at: datetime


# ============================================================================
# Compliance schemas
# ============================================================================


class NitaqatResultResponse(BaseModel):
    """Schema for a Nitaqat classification."""

    model_config = ConfigDict(from_attributes=True)

    total_employees: int
    saudi_count: int
    full_count_saudis: int
    half_count_saudis: int
    disabled_saudis: int
    effective_saudi_count: Decimal
    saudization_percentage: Decimal
    zone: str
    requirements: str
    next_zone: str | None = None
    next_zone_percentage: Decimal | None = None
    employees_needed_for_next_zone: Decimal | None = None


class NitaqatSnapshotResponse(BaseModel):
    """Schema for a stored Nitaqat snapshot."""

    model_config = ConfigDict(from_attributes=True)

    snapshot_id: UUID
    calculation_date: date
    total_employees: int
    saudi_employees: int
    effective_saudi_count: Decimal
    saudization_percentage: Decimal
    nitaqat_color: str
    sector: str | None = None
    entity_size: str | None = None


class NitaqatSnapshotCreate(BaseModel):
    calculation_date: date | None = None


class NitaqatSnapshotCreated(BaseModel):
    result: NitaqatResultResponse
    snapshot: NitaqatSnapshotResponse


class GOSIContributionRequest(BaseModel):
    """Schema for a one-off contribution calculation."""

    basic_salary: Decimal = Field(..., ge=0)
    housing_allowance: Decimal = Field(Decimal("0"), ge=0)
    is_saudi: bool


class GOSIContributionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    wage_base: Decimal
    employee: Decimal
    employer: Decimal
    total: Decimal


class GOSISummaryLine(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    is_saudi: bool
    employee_contribution: Decimal
    employer_contribution: Decimal
    total: Decimal


class GOSISummaryResponse(BaseModel):
    """Schema for a month's GOSI contributions."""

    model_config = ConfigDict(from_attributes=True)

    month: str
    lines: list[GOSISummaryLine]
    total_employee: Decimal
    total_employer: Decimal
    saudi_total: Decimal
    non_saudi_total: Decimal
    grand_total: Decimal


# ============================================================================
# End-of-service schemas
# ============================================================================


class EOSCalculateRequest(BaseModel):
    """Schema for requesting an end-of-service calculation."""

    employee_id: UUID | None = None
    termination_date: date | None = None
    termination_reason: str | None = None


class EOSDetailResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    year_number: int
    benefit_rate: Decimal
    service_months: int
    benefit_amount: Decimal


class EOSCalculationResponse(BaseModel):
    """Schema for a stored end-of-service calculation."""

    model_config = ConfigDict(from_attributes=True)

    eos_calculation_id: UUID
    employee_id: UUID
    calculation_date: date
    hire_date: date
    termination_date: date
    termination_reason: str
    contract_type: str
    basic_salary: Decimal
    total_service_years: int
    total_service_months: int
    total_service_days: int
    eligible_for_full_benefits: bool
    gross_benefit_amount: Decimal
    loans_deduction: Decimal
    advances_deduction: Decimal
    other_deductions: Decimal
    net_benefit_amount: Decimal
    status: str
    details: list[EOSDetailResponse] = []
