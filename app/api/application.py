"""FastAPI application factory for the job invocation service."""

from fastapi import FastAPI

from app.config import AppSettings
from app.db import (
    BookmarkRepositoryPort,
    DatabaseHealthPort,
    JobInvocationRepositoryPort,
    JobTemplateRepositoryPort,
)

from .routers import api_create_health_router, api_create_job_invocation_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    job_template_repository: JobTemplateRepositoryPort,
    bookmark_repository: BookmarkRepositoryPort,
    job_invocation_repository: JobInvocationRepositoryPort,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        job_template_repository: Job template lookup service.
        bookmark_repository: Bookmark lookup service.
        job_invocation_repository: Invocation graph persistence service.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when a router dependency is invalid.
    """
    application = FastAPI(title="Job Invocation Composer")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal service identification response."""

        return {
            "service": "job-invocation-composer",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(
        api_create_job_invocation_router(
            settings=settings,
            job_template_repository=job_template_repository,
            bookmark_repository=bookmark_repository,
            job_invocation_repository=job_invocation_repository,
        )
    )

    return application
