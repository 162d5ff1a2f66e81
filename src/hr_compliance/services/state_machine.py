"""Forward-only state machines for payroll batches and EOS calculations."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from hr_compliance.errors import HRComplianceError

if TYPE_CHECKING:
    from hr_compliance.models import PayrollBatch


class PayrollBatchStatus(str, Enum):
    """Payroll batch status values."""

    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    PROCESSED = "processed"
    PAID = "paid"


class EOSStatus(str, Enum):
    """End-of-service calculation status values."""

    DRAFT = "draft"
    APPROVED = "approved"
    PAID = "paid"


class InvalidTransitionError(HRComplianceError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class _ForwardStateMachine:
    """Shared transition checks over a VALID_TRANSITIONS table."""

    VALID_TRANSITIONS: dict[str, list[str]] = {}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return not cls.get_next_statuses(status)


class PayrollBatchStateMachine(_ForwardStateMachine):
    """State machine for payroll batch status transitions.

    Allowed transitions:
    - draft → pending_approval
    - pending_approval → approved
    - approved → processed
    - processed → paid

    There is no way back; a batch that needs changes is deleted while in
    draft and recreated.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayrollBatchStatus.DRAFT: [PayrollBatchStatus.PENDING_APPROVAL],
        PayrollBatchStatus.PENDING_APPROVAL: [PayrollBatchStatus.APPROVED],
        PayrollBatchStatus.APPROVED: [PayrollBatchStatus.PROCESSED],
        PayrollBatchStatus.PROCESSED: [PayrollBatchStatus.PAID],
        PayrollBatchStatus.PAID: [],  # Terminal state
    }

    @classmethod
    def can_delete(cls, status: str) -> bool:
        return status == PayrollBatchStatus.DRAFT

    @classmethod
    def validate_batch_for_transition(
        cls, batch: PayrollBatch, to_status: str, item_count: int
    ) -> list[str]:
        """Validate a batch for a specific transition, returning any errors.

        Returns list of error messages (empty if valid).
        """
        errors: list[str] = []
        from_status = batch.status

        if not cls.can_transition(from_status, to_status):
            errors.append(f"Cannot transition from '{from_status}' to '{to_status}'")
            return errors

        if to_status == PayrollBatchStatus.PENDING_APPROVAL and item_count == 0:
            errors.append("Payroll batch has no items")

        elif to_status == PayrollBatchStatus.PROCESSED and batch.approved_at is None:
            errors.append("Payroll batch has no approval record")

        return errors


class EOSCalculationStateMachine(_ForwardStateMachine):
    """State machine for end-of-service calculations.

    Allowed transitions:
    - draft → approved
    - approved → paid
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        EOSStatus.DRAFT: [EOSStatus.APPROVED],
        EOSStatus.APPROVED: [EOSStatus.PAID],
        EOSStatus.PAID: [],  # Terminal state
    }
