"""API routes."""

from hr_compliance.api.routes.compliance import router as compliance_router
from hr_compliance.api.routes.end_of_service import router as end_of_service_router
from hr_compliance.api.routes.health import router as health_router
from hr_compliance.api.routes.payroll_batches import router as payroll_batches_router

__all__ = [
    "compliance_router",
    "end_of_service_router",
    "health_router",
    "payroll_batches_router",
]
