"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hr_compliance import __version__
from hr_compliance.api.routes import (
    compliance_router,
    end_of_service_router,
    health_router,
    payroll_batches_router,
)
from hr_compliance.database import close_db, init_db
from hr_compliance.errors import (
    ConflictError,
    HRComplianceError,
    ImmutableRecordError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from hr_compliance.services.state_machine import InvalidTransitionError

logger = logging.getLogger(__name__)

# Domain error -> (HTTP status, error code)
ERROR_STATUS: dict[type[HRComplianceError], tuple[int, str]] = {
    ValidationError: (422, "VALIDATION_ERROR"),
    NotFoundError: (status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
    ConflictError: (status.HTTP_409_CONFLICT, "CONFLICT"),
    InvalidTransitionError: (status.HTTP_409_CONFLICT, "INVALID_TRANSITION"),
    ImmutableRecordError: (status.HTTP_409_CONFLICT, "IMMUTABLE_RECORD"),
    PersistenceError: (status.HTTP_500_INTERNAL_SERVER_ERROR, "PERSISTENCE_ERROR"),
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    init_db()
    yield
    # Shutdown
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="HR Compliance Engine API",
        description="Saudi labor compliance: Nitaqat, GOSI, end-of-service and payroll batches",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(HRComplianceError)
    async def domain_exception_handler(
        request: Request, exc: HRComplianceError
    ) -> JSONResponse:
        """Translate domain errors into HTTP responses."""
        status_code, code = status.HTTP_400_BAD_REQUEST, "ERROR"
        for error_type, mapped in ERROR_STATUS.items():
            if isinstance(exc, error_type):
                status_code, code = mapped
                break

        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)

        return JSONResponse(
            status_code=status_code,
            content={
                "detail": str(exc),
                "code": code,
                "field": getattr(exc, "field", None),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(payroll_batches_router, prefix="/api/v1")
    app.include_router(compliance_router, prefix="/api/v1")
    app.include_router(end_of_service_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
