"""Nitaqat and GOSI API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from hr_compliance.api.dependencies import CompanyId, DbSession
from hr_compliance.api.schemas import (
    ErrorResponse,
    GOSIContributionRequest,
    GOSIContributionResponse,
    GOSISummaryLine,
    GOSISummaryResponse,
    NitaqatResultResponse,
    NitaqatSnapshotCreate,
    NitaqatSnapshotCreated,
    NitaqatSnapshotResponse,
)
from hr_compliance.calculators.gosi_calculator import ContributionSummary, GOSICalculator
from hr_compliance.calculators.types import NitaqatResult
from hr_compliance.services.compliance_service import ComplianceService

router = APIRouter(prefix="/compliance", tags=["compliance"])


def _nitaqat_response(result: NitaqatResult) -> NitaqatResultResponse:
    return NitaqatResultResponse(
        total_employees=result.total_employees,
        saudi_count=result.saudi_count,
        full_count_saudis=result.full_count_saudis,
        half_count_saudis=result.half_count_saudis,
        disabled_saudis=result.disabled_saudis,
        effective_saudi_count=result.effective_saudi_count,
        saudization_percentage=result.saudization_percentage,
        zone=result.zone.value,
        requirements=result.requirements,
        next_zone=result.next_zone.value if result.next_zone else None,
        next_zone_percentage=result.next_zone_percentage,
        employees_needed_for_next_zone=result.employees_needed_for_next_zone,
    )


def _summary_response(summary: ContributionSummary) -> GOSISummaryResponse:
    return GOSISummaryResponse(
        month=summary.month,
        lines=[GOSISummaryLine.model_validate(line) for line in summary.lines],
        total_employee=summary.total_employee,
        total_employer=summary.total_employer,
        saudi_total=summary.saudi_total,
        non_saudi_total=summary.non_saudi_total,
        grand_total=summary.grand_total,
    )


@router.get(
    "/nitaqat",
    response_model=NitaqatResultResponse,
    responses={404: {"model": ErrorResponse}},
)
async def classify_nitaqat(db: DbSession, company_id: CompanyId) -> NitaqatResultResponse:
    """Classify the current active roster without storing a snapshot."""
    result = await ComplianceService(db).classify_company(company_id)
    return _nitaqat_response(result)


@router.post(
    "/nitaqat/snapshots",
    response_model=NitaqatSnapshotCreated,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def record_nitaqat_snapshot(
    db: DbSession,
    company_id: CompanyId,
    payload: NitaqatSnapshotCreate,
) -> NitaqatSnapshotCreated:
    result, snapshot = await ComplianceService(db).record_snapshot(
        company_id, payload.calculation_date
    )
    await db.commit()
    return NitaqatSnapshotCreated(
        result=_nitaqat_response(result),
        snapshot=NitaqatSnapshotResponse.model_validate(snapshot),
    )


@router.get("/nitaqat/snapshots", response_model=list[NitaqatSnapshotResponse])
async def list_nitaqat_snapshots(
    db: DbSession,
    company_id: CompanyId,
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
) -> list[NitaqatSnapshotResponse]:
    """Snapshot history, newest first."""
    snapshots = await ComplianceService(db).list_snapshots(company_id, limit)
    return [NitaqatSnapshotResponse.model_validate(s) for s in snapshots]


@router.post("/gosi/calculate", response_model=GOSIContributionResponse)
async def calculate_gosi(payload: GOSIContributionRequest) -> GOSIContributionResponse:
    contribution = GOSICalculator.calculate(
        payload.basic_salary, payload.housing_allowance, payload.is_saudi
    )
    return GOSIContributionResponse.model_validate(contribution)


@router.get(
    "/gosi/{month}",
    response_model=GOSISummaryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def gosi_monthly_summary(
    db: DbSession,
    company_id: CompanyId,
    month: str,
) -> GOSISummaryResponse:
    """Contributions due for a month, from that month's payroll batch."""
    summary = await ComplianceService(db).gosi_summary(company_id, month)
    return _summary_response(summary)
