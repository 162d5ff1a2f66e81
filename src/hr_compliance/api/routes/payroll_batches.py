"""Payroll batch API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Response, status

from hr_compliance.api.dependencies import ActorId, CompanyId, DbSession
from hr_compliance.api.schemas import (
    ErrorResponse,
    PayrollBatchCreate,
    PayrollBatchListResponse,
    PayrollBatchResponse,
    PayrollItemListResponse,
    PayrollItemResponse,
    ProcessingLogResponse,
    TransitionRequest,
)
from hr_compliance.services.payroll_batch_service import PayrollBatchService

router = APIRouter(prefix="/payroll-batches", tags=["payroll-batches"])


@router.post(
    "",
    response_model=PayrollBatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def create_payroll_batch(
    db: DbSession,
    company_id: CompanyId,
    actor_id: ActorId,
    payload: PayrollBatchCreate,
) -> PayrollBatchResponse:
    """Compute and store a draft batch for every active employee."""
    service = PayrollBatchService(db)
    batch = await service.create_batch(company_id, payload.month, actor_id, payload.notes)
    await db.commit()
    await db.refresh(batch)
    return PayrollBatchResponse.model_validate(batch)


@router.get("", response_model=PayrollBatchListResponse)
async def list_payroll_batches(
    db: DbSession,
    company_id: CompanyId,
) -> PayrollBatchListResponse:
    """List batches for a company, latest month first."""
    batches = await PayrollBatchService(db).list_batches(company_id)
    return PayrollBatchListResponse(
        items=[PayrollBatchResponse.model_validate(b) for b in batches],
        total=len(batches),
    )


@router.get(
    "/{batch_id}",
    response_model=PayrollBatchResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll_batch(
    db: DbSession,
    company_id: CompanyId,
    batch_id: Annotated[UUID, Path()],
) -> PayrollBatchResponse:
    batch = await PayrollBatchService(db).get_batch(company_id, batch_id)
    return PayrollBatchResponse.model_validate(batch)


@router.delete(
    "/{batch_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_payroll_batch(
    db: DbSession,
    company_id: CompanyId,
    batch_id: Annotated[UUID, Path()],
) -> Response:
    """Delete a draft batch."""
    await PayrollBatchService(db).delete_batch(company_id, batch_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{batch_id}/items",
    response_model=PayrollItemListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_payroll_items(
    db: DbSession,
    company_id: CompanyId,
    batch_id: Annotated[UUID, Path()],
) -> PayrollItemListResponse:
    items = await PayrollBatchService(db).list_items(company_id, batch_id)
    return PayrollItemListResponse(
        items=[PayrollItemResponse.model_validate(i) for i in items],
        total=len(items),
    )


@router.get(
    "/{batch_id}/log",
    response_model=list[ProcessingLogResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_processing_log(
    db: DbSession,
    company_id: CompanyId,
    batch_id: Annotated[UUID, Path()],
) -> list[ProcessingLogResponse]:
    logs = await PayrollBatchService(db).list_logs(company_id, batch_id)
    return [ProcessingLogResponse.model_validate(entry) for entry in logs]


@router.post(
    "/{batch_id}/transition",
    response_model=PayrollBatchResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def transition_payroll_batch(
    db: DbSession,
    company_id: CompanyId,
    actor_id: ActorId,
    batch_id: Annotated[UUID, Path()],
    payload: TransitionRequest,
) -> PayrollBatchResponse:
    """Move a batch to its next lifecycle status."""
    service = PayrollBatchService(db)
    batch = await service.advance(
        company_id, batch_id, payload.to_status, actor_id, payload.comments
    )
    await db.commit()
    await db.refresh(batch)
    return PayrollBatchResponse.model_validate(batch)
