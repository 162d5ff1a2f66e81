"""Payroll batch service - creation, lifecycle and audit trail."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hr_compliance.calculators.engine import (
    PayrollBatchAggregator,
    PayrollBatchResult,
    parse_month,
)
from hr_compliance.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from hr_compliance.models import PayrollBatch, PayrollItem, PayrollProcessingLog, Payslip
from hr_compliance.services.snapshot_loader import SnapshotLoader
from hr_compliance.services.state_machine import (
    InvalidTransitionError,
    PayrollBatchStateMachine,
    PayrollBatchStatus,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PayrollBatchService:
    """Service for managing payroll batch lifecycle.

    Operations:
    - create_batch: compute every active employee's item and persist the
      header, items and rollups as one unit
    - transition_status: move a batch one step forward, with side effects
    - submit / approve / process / mark_paid: named transitions
    - delete_batch: drop a draft batch so it can be recreated
    """

    def __init__(
        self,
        session: AsyncSession,
        aggregator: PayrollBatchAggregator | None = None,
    ):
        self.session = session
        self.aggregator = aggregator or PayrollBatchAggregator()
        self.loader = SnapshotLoader(session)

    async def find_batch(self, company_id: UUID, month: str) -> PayrollBatch | None:
        result = await self.session.execute(
            select(PayrollBatch).where(
                PayrollBatch.company_id == company_id,
                PayrollBatch.month == month,
            )
        )
        return result.scalar_one_or_none()

    async def get_batch(
        self,
        company_id: UUID,
        batch_id: UUID,
        load_items: bool = False,
    ) -> PayrollBatch:
        """Load a batch scoped to its company, raising NotFoundError."""
        query = select(PayrollBatch).where(
            PayrollBatch.batch_id == batch_id,
            PayrollBatch.company_id == company_id,
        )
        if load_items:
            query = query.options(selectinload(PayrollBatch.items))
        result = await self.session.execute(query)
        batch = result.scalar_one_or_none()
        if batch is None:
            raise NotFoundError("Payroll batch", batch_id)
        return batch

    async def list_batches(self, company_id: UUID) -> list[PayrollBatch]:
        result = await self.session.execute(
            select(PayrollBatch)
            .where(PayrollBatch.company_id == company_id)
            .order_by(PayrollBatch.month.desc())
        )
        return list(result.scalars().all())

    async def list_items(self, company_id: UUID, batch_id: UUID) -> list[PayrollItem]:
        await self.get_batch(company_id, batch_id)
        result = await self.session.execute(
            select(PayrollItem)
            .where(PayrollItem.batch_id == batch_id)
            .order_by(PayrollItem.employee_id)
        )
        return list(result.scalars().all())

    async def list_logs(self, company_id: UUID, batch_id: UUID) -> list[PayrollProcessingLog]:
        await self.get_batch(company_id, batch_id)
        result = await self.session.execute(
            select(PayrollProcessingLog)
            .where(PayrollProcessingLog.batch_id == batch_id)
            .order_by(PayrollProcessingLog.created_at, PayrollProcessingLog.log_id)
        )
        return list(result.scalars().all())

    # ===== Creation =====

    async def preview_batch(self, company_id: UUID, month: str) -> PayrollBatchResult:
        """Compute a batch without persisting anything."""
        _, period_end = parse_month(month)
        if await self.loader.get_company(company_id) is None:
            raise NotFoundError("Company", company_id)

        snapshot = await self.loader.load_company_snapshot(company_id, as_of=period_end)
        return self.aggregator.aggregate(
            company_id,
            month,
            snapshot.roster,
            snapshot.salaries,
            snapshot.loans,
            snapshot.advances,
        )

    async def create_batch(
        self,
        company_id: UUID,
        month: str,
        actor_user_id: UUID | None = None,
        notes: str | None = None,
    ) -> PayrollBatch:
        """Create a draft batch with all items and rollups.

        Raises:
            ValidationError: month malformed or an item failed validation
            ConflictError: a batch already exists for (company_id, month)
            PersistenceError: the storage layer failed
        """
        parse_month(month)
        if await self.find_batch(company_id, month) is not None:
            raise ConflictError(company_id, month)

        result = await self.preview_batch(company_id, month)
        if not result.success:
            raise ValidationError("; ".join(result.errors))

        batch = await self._insert_batch(result, actor_user_id, notes)
        logger.info(
            "Created payroll batch %s for company %s month %s (%d items, net %s)",
            batch.batch_id,
            company_id,
            month,
            result.totals.total_employees,
            result.totals.total_net,
        )
        return batch

    async def _insert_batch(
        self,
        result: PayrollBatchResult,
        actor_user_id: UUID | None,
        notes: str | None,
    ) -> PayrollBatch:
        """Write header and items inside one savepoint.

        The unique (company_id, month) constraint is the final arbiter when
        two creations race past the existence check.
        """
        totals = result.totals
        batch = PayrollBatch(
            company_id=result.company_id,
            month=result.month,
            period_start=result.period_start,
            period_end=result.period_end,
            status=PayrollBatchStatus.DRAFT.value,
            total_employees=totals.total_employees,
            total_gross=totals.total_gross,
            total_net=totals.total_net,
            total_deductions=totals.total_deductions,
            total_gosi_employer=totals.total_gosi_employer,
            calculation_id=result.calculation_id,
            created_by=actor_user_id,
            notes=notes,
        )
        batch.items = [
            PayrollItem(
                employee_id=item.employee_id,
                company_id=result.company_id,
                basic_salary=item.basic_salary,
                housing_allowance=item.housing_allowance,
                transportation_allowance=item.transportation_allowance,
                other_allowances=item.other_allowances,
                total_earnings=item.total_earnings,
                gosi_employee=item.gosi_employee,
                gosi_employer=item.gosi_employer,
                loan_deduction=item.loan_deduction,
                advance_deduction=item.advance_deduction,
                total_deductions=item.total_deductions,
                net_salary=item.net_salary,
                item_hash=item.item_hash,
            )
            for item in result.items
        ]

        try:
            async with self.session.begin_nested():
                self.session.add(batch)
                await self.session.flush()
        except IntegrityError as e:
            logger.warning(
                "Payroll batch for company %s month %s lost creation race",
                result.company_id,
                result.month,
            )
            raise ConflictError(result.company_id, result.month) from e
        except SQLAlchemyError as e:
            logger.exception("Failed to persist payroll batch for %s", result.month)
            raise PersistenceError(e) from e

        return batch

    async def delete_batch(self, company_id: UUID, batch_id: UUID) -> None:
        """Delete a draft batch and its items."""
        batch = await self.get_batch(company_id, batch_id)
        if not PayrollBatchStateMachine.can_delete(batch.status):
            raise InvalidTransitionError(
                batch.status, "deleted", "Only draft batches can be deleted"
            )
        for model in (PayrollProcessingLog, PayrollItem, PayrollBatch):
            await self.session.execute(delete(model).where(model.batch_id == batch_id))
        logger.info("Deleted draft payroll batch %s", batch_id)

    # ===== Lifecycle =====

    async def transition_status(
        self,
        batch: PayrollBatch,
        to_status: str,
        actor_user_id: UUID | None = None,
        comments: str | None = None,
    ) -> PayrollBatch:
        """Transition a batch to a new status.

        Handles all side effects of transitions:
        - approved: set approved_at / approved_by
        - processed: set processed_at, issue one payslip per item
        - paid: set paid_at

        Raises InvalidTransitionError if transition is not allowed.
        """
        from_status = batch.status
        item_count = await self._count_items(batch.batch_id)

        errors = PayrollBatchStateMachine.validate_batch_for_transition(
            batch, to_status, item_count
        )
        if errors:
            raise InvalidTransitionError(from_status, to_status, "; ".join(errors))

        now = _utcnow()
        if to_status == PayrollBatchStatus.APPROVED:
            batch.approved_at = now
            batch.approved_by = actor_user_id

        elif to_status == PayrollBatchStatus.PROCESSED:
            batch.processed_at = now
            await self._issue_payslips(batch, now)

        elif to_status == PayrollBatchStatus.PAID:
            batch.paid_at = now

        batch.status = PayrollBatchStatus(to_status).value

        self._record_log(
            batch=batch,
            action="status_change",
            description=f"Batch {from_status} → {batch.status}",
            actor_user_id=actor_user_id,
            details={
                "previous_status": from_status,
                "new_status": batch.status,
                "comments": comments,
            },
        )

        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.exception("Failed to transition payroll batch %s", batch.batch_id)
            raise PersistenceError(e) from e

        logger.info("Payroll batch %s: %s -> %s", batch.batch_id, from_status, batch.status)
        return batch

    async def advance(
        self,
        company_id: UUID,
        batch_id: UUID,
        to_status: str,
        actor_user_id: UUID | None = None,
        comments: str | None = None,
    ) -> PayrollBatch:
        batch = await self.get_batch(company_id, batch_id)
        return await self.transition_status(batch, to_status, actor_user_id, comments)

    async def submit_for_approval(
        self, company_id: UUID, batch_id: UUID, actor_user_id: UUID | None = None
    ) -> PayrollBatch:
        return await self.advance(
            company_id, batch_id, PayrollBatchStatus.PENDING_APPROVAL, actor_user_id
        )

    async def approve(
        self, company_id: UUID, batch_id: UUID, actor_user_id: UUID | None = None
    ) -> PayrollBatch:
        return await self.advance(company_id, batch_id, PayrollBatchStatus.APPROVED, actor_user_id)

    async def process(
        self, company_id: UUID, batch_id: UUID, actor_user_id: UUID | None = None
    ) -> PayrollBatch:
        return await self.advance(
            company_id, batch_id, PayrollBatchStatus.PROCESSED, actor_user_id
        )

    async def mark_paid(
        self, company_id: UUID, batch_id: UUID, actor_user_id: UUID | None = None
    ) -> PayrollBatch:
        return await self.advance(company_id, batch_id, PayrollBatchStatus.PAID, actor_user_id)

    async def _count_items(self, batch_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(PayrollItem).where(PayrollItem.batch_id == batch_id)
        )
        return int(result.scalar_one())

    async def _issue_payslips(self, batch: PayrollBatch, generated_at: datetime) -> int:
        """Create one payslip per item that does not have one yet."""
        result = await self.session.execute(
            select(PayrollItem)
            .where(PayrollItem.batch_id == batch.batch_id)
            .options(selectinload(PayrollItem.payslip))
        )
        issued = 0
        for item in result.scalars():
            if item.payslip is not None:
                continue
            self.session.add(
                Payslip(
                    payroll_item_id=item.payroll_item_id,
                    employee_id=item.employee_id,
                    company_id=item.company_id,
                    generated_at=generated_at,
                    net_pay=item.net_salary,
                )
            )
            issued += 1
        logger.info("Issued %d payslips for payroll batch %s", issued, batch.batch_id)
        return issued

    def _record_log(
        self,
        batch: PayrollBatch,
        action: str,
        description: str,
        actor_user_id: UUID | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Append a processing log entry for a batch action."""
        self.session.add(
            PayrollProcessingLog(
                batch_id=batch.batch_id,
                company_id=batch.company_id,
                actor_user_id=actor_user_id,
                action=action,
                description=description,
                details_json=details,
            )
        )
