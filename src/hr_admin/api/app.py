"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hr_admin import __version__
from hr_admin.api.routes import (
    audit_router,
    departments_router,
    employees_router,
    health_router,
    payrolls_router,
    stats_router,
    users_router,
)
from hr_admin.database import dispose_db, init_db
from hr_admin.exceptions import HRAdminError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    init_db()
    yield
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="HR Admin API",
        description="Users, employee profiles, departments and payroll with an audit trail",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HRAdminError)
    async def engine_error_handler(request: Request, exc: HRAdminError) -> JSONResponse:
        """Map engine errors to their stable code and status."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Something went very wrong!",
                "code": "INTERNAL_ERROR",
            },
        )

    app.include_router(health_router)
    for router in (
        users_router,
        employees_router,
        departments_router,
        payrolls_router,
        audit_router,
        stats_router,
    ):
        app.include_router(router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
