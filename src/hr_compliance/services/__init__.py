"""Services that load snapshots, run the calculators and persist results."""

from hr_compliance.services.compliance_service import ComplianceService
from hr_compliance.services.eos_service import EndOfServiceService
from hr_compliance.services.payroll_batch_service import PayrollBatchService
from hr_compliance.services.snapshot_loader import CompanySnapshot, SnapshotLoader
from hr_compliance.services.state_machine import (
    EOSCalculationStateMachine,
    EOSStatus,
    InvalidTransitionError,
    PayrollBatchStateMachine,
    PayrollBatchStatus,
)

__all__ = [
    "ComplianceService",
    "EndOfServiceService",
    "PayrollBatchService",
    "SnapshotLoader",
    "CompanySnapshot",
    "InvalidTransitionError",
    "PayrollBatchStateMachine",
    "PayrollBatchStatus",
    "EOSCalculationStateMachine",
    "EOSStatus",
]
