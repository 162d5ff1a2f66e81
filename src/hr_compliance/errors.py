"""Domain errors raised by the compliance engine services."""

from __future__ import annotations


class HRComplianceError(Exception):
    """Base class for compliance engine errors."""


class ValidationError(HRComplianceError):
    """Raised when a required input is missing or invalid.

    Raised before any computation runs, so nothing has been written.
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class ConflictError(HRComplianceError):
    """Raised when a payroll batch already exists for a company and month."""

    def __init__(self, company_id: object, month: str):
        self.company_id = company_id
        self.month = month
        super().__init__(f"Payroll batch for company {company_id} and month {month} already exists")


class NotFoundError(HRComplianceError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ImmutableRecordError(HRComplianceError):
    """Raised when a stored history record would be changed or removed."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} is immutable")


class PersistenceError(HRComplianceError):
    """Raised when the storage layer fails.

    The original driver error is chained and its message is kept verbatim.
    """

    def __init__(self, original: BaseException):
        self.original = original
        super().__init__(str(original))
