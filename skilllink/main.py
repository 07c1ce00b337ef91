"""
Main FastAPI application entry point.
Configures the app, middleware, routers, and startup/shutdown events.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from skilllink.application.dto.base_dto import HealthCheckResponseDTO
from skilllink.config import settings
from skilllink.infrastructure.db.database import engine
from skilllink.infrastructure.events.event_setup import initialize_event_system
from skilllink.infrastructure.rate_limiting.limiter import init_rate_limiter
from skilllink.infrastructure.web.middleware.error_handler import ErrorHandlerMiddleware, not_found_handler
from skilllink.infrastructure.web.routers import (
    auth,
    profiles,
    jobs,
    contracts,
    payments,
    disputes,
    verification,
    admin,
    tasks,
)

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle.
    Setup and teardown operations.
    """
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")
    logger.info(f"Environment: {settings.environment}")

    if settings.sentry_dsn and not settings.is_development:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            environment=settings.environment,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                SqlalchemyIntegration(),
            ],
        )
        logger.info("Sentry initialized")

    initialize_event_system()
    init_rate_limiter(settings.redis_url)

    yield

    logger.info("Shutting down application")
    engine.dispose()


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        debug=settings.debug,
        docs_url=f"{settings.api_prefix}/docs" if settings.debug else None,
        redoc_url=f"{settings.api_prefix}/redoc" if settings.debug else None,
        openapi_url=f"{settings.api_prefix}/openapi.json" if settings.debug else None,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(ErrorHandlerMiddleware)

    routers = [
        (auth.router, "auth", "Authentication"),
        (profiles.router, "profiles", "Profiles"),
        (jobs.router, "jobs", "Jobs"),
        (contracts.router, "contracts", "Contracts"),
        (payments.router, "payments", "Payments"),
        (disputes.router, "disputes", "Disputes"),
        (verification.router, "verification", "Verification"),
        (admin.router, "admin", "Administration"),
        (tasks.router, "tasks", "Scheduled Tasks"),
    ]
    for router, path, tag in routers:
        app.include_router(router, prefix=f"{settings.api_prefix}/{path}", tags=[tag])

    @app.get("/")
    async def root() -> Dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "environment": settings.environment,
            "docs": f"{settings.api_prefix}/docs" if settings.debug else None,
            "health": f"{settings.api_prefix}/health"
        }

    @app.get(f"{settings.api_prefix}/health", response_model=HealthCheckResponseDTO)
    async def health_check() -> HealthCheckResponseDTO:
        """Health check endpoint for monitoring."""
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            database = "ok"
        except SQLAlchemyError as e:
            logger.error(f"Health check could not reach the database: {str(e)}")
            database = "unavailable"

        return HealthCheckResponseDTO(
            status="healthy" if database == "ok" else "degraded",
            version=settings.api_version,
            dependencies={"database": database}
        )

    app.add_exception_handler(404, not_found_handler)

    return app


# Create the FastAPI app instance
app = create_application()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "skilllink.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level="debug" if settings.debug else "info",
    )
