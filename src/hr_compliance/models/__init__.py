"""ORM models."""

from hr_compliance.models.base import Base, TimestampMixin
from hr_compliance.models.company import Company
from hr_compliance.models.compliance import EOSCalculation, EOSCalculationDetail, NitaqatSnapshot
from hr_compliance.models.employee import Advance, Employee, Loan, SalaryRecord
from hr_compliance.models.payroll import (
    PayrollBatch,
    PayrollItem,
    PayrollProcessingLog,
    Payslip,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "Company",
    "Employee",
    "SalaryRecord",
    "Loan",
    "Advance",
    "NitaqatSnapshot",
    "EOSCalculation",
    "EOSCalculationDetail",
    "PayrollBatch",
    "PayrollItem",
    "PayrollProcessingLog",
    "Payslip",
]
