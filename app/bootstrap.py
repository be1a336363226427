"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI

from app.api import create_api_application
from app.config import AppSettings, config_load_settings
from app.db import (
    SQLAlchemyBookmarkService,
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyJobInvocationService,
    SQLAlchemyJobTemplateService,
    db_create_engine,
)
from app.domain import JobInvocation, Principal
from app.jobs import JobInvocationComposer


@dataclass(frozen=True)
class BootstrapRepositories:
    """SQLAlchemy repository services sharing one engine.

    Attributes:
        db_health_service: Database health service.
        job_template_repository: Job template lookup service.
        bookmark_repository: Bookmark lookup service.
        job_invocation_repository: Invocation graph persistence service.
    """

    db_health_service: SQLAlchemyDatabaseHealthService
    job_template_repository: SQLAlchemyJobTemplateService
    bookmark_repository: SQLAlchemyBookmarkService
    job_invocation_repository: SQLAlchemyJobInvocationService


def bootstrap_create_repositories(settings: AppSettings) -> BootstrapRepositories:
    """Build db-layer services for the configured database.

    Args:
        settings: Validated runtime settings.

    Returns:
        BootstrapRepositories: Repository services bound to one engine.

    Raises:
        ValueError: Raised when the database URL is blank.
    """

    engine = db_create_engine(database_url=settings.database_url)
    return BootstrapRepositories(
        db_health_service=SQLAlchemyDatabaseHealthService(engine=engine),
        job_template_repository=SQLAlchemyJobTemplateService(engine=engine),
        bookmark_repository=SQLAlchemyBookmarkService(engine=engine),
        job_invocation_repository=SQLAlchemyJobInvocationService(engine=engine),
    )


def bootstrap_create_application() -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    repositories = bootstrap_create_repositories(settings)
    return create_api_application(
        settings=settings,
        db_health_service=repositories.db_health_service,
        job_template_repository=repositories.job_template_repository,
        bookmark_repository=repositories.bookmark_repository,
        job_invocation_repository=repositories.job_invocation_repository,
    )


def bootstrap_create_composer(
    invocation: JobInvocation,
    principal: Principal,
    params: Mapping[str, Any],
) -> JobInvocationComposer:
    """Build a composer wired to the configured database for non-HTTP surfaces.

    Args:
        invocation: Unsaved invocation populated by the composer.
        principal: Requesting user.
        params: Raw request parameters.

    Returns:
        JobInvocationComposer: Composer with the invocation graph assembled.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
        TargetingConflictError: Raised when targeting parameters conflict.
        LookupError: Raised when a referenced template or bookmark does not exist.
    """

    repositories = bootstrap_create_repositories(config_load_settings())
    return JobInvocationComposer(
        invocation=invocation,
        principal=principal,
        params=params,
        job_template_repository=repositories.job_template_repository,
        bookmark_repository=repositories.bookmark_repository,
        job_invocation_repository=repositories.job_invocation_repository,
    )
