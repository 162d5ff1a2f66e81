"""End-of-service API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from hr_compliance.api.dependencies import ActorId, CompanyId, DbSession
from hr_compliance.api.schemas import (
    EOSCalculateRequest,
    EOSCalculationResponse,
    ErrorResponse,
    TransitionRequest,
)
from hr_compliance.services.eos_service import EndOfServiceService

router = APIRouter(prefix="/end-of-service", tags=["end-of-service"])


@router.post(
    "",
    response_model=EOSCalculationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def calculate_end_of_service(
    db: DbSession,
    company_id: CompanyId,
    actor_id: ActorId,
    payload: EOSCalculateRequest,
) -> EOSCalculationResponse:
    """Calculate and store a draft gratuity for a terminating employee."""
    calculation = await EndOfServiceService(db).calculate(
        company_id,
        payload.employee_id,
        payload.termination_date,
        payload.termination_reason,
        actor_id,
    )
    await db.commit()
    return EOSCalculationResponse.model_validate(calculation)


@router.get("", response_model=list[EOSCalculationResponse])
async def list_end_of_service(
    db: DbSession,
    company_id: CompanyId,
    employee_id: Annotated[UUID | None, Query()] = None,
) -> list[EOSCalculationResponse]:
    calculations = await EndOfServiceService(db).list_calculations(company_id, employee_id)
    return [EOSCalculationResponse.model_validate(c) for c in calculations]


@router.get(
    "/{calculation_id}",
    response_model=EOSCalculationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_end_of_service(
    db: DbSession,
    company_id: CompanyId,
    calculation_id: Annotated[UUID, Path()],
) -> EOSCalculationResponse:
    calculation = await EndOfServiceService(db).get_calculation(company_id, calculation_id)
    return EOSCalculationResponse.model_validate(calculation)


@router.post(
    "/{calculation_id}/transition",
    response_model=EOSCalculationResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def transition_end_of_service(
    db: DbSession,
    company_id: CompanyId,
    calculation_id: Annotated[UUID, Path()],
    payload: TransitionRequest,
) -> EOSCalculationResponse:
    calculation = await EndOfServiceService(db).transition_status(
        company_id, calculation_id, payload.to_status
    )
    await db.commit()
    return EOSCalculationResponse.model_validate(calculation)
