"""Job invocation API router composition for compose, list and detail endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Query, Request, status
from fastapi.responses import JSONResponse

from app.config import AppSettings
from app.db import BookmarkRepositoryPort, JobInvocationRepositoryPort, JobTemplateRepositoryPort
from app.domain import JobInvocation, Principal
from app.jobs import (
    INVOCATION_NOT_SAVED_CODE,
    TARGETING_CONFLICT_CODE,
    InvocationNotSavedError,
    JobInvocationComposer,
    TargetingConflictError,
)


def api_create_job_invocation_router(
    settings: AppSettings,
    job_template_repository: JobTemplateRepositoryPort,
    bookmark_repository: BookmarkRepositoryPort,
    job_invocation_repository: JobInvocationRepositoryPort,
) -> APIRouter:
    """Create job invocation router with compose and read endpoints.

    Args:
        settings: Runtime settings used for principal header and pagination defaults.
        job_template_repository: DB-layer job template lookup service.
        bookmark_repository: DB-layer bookmark lookup service.
        job_invocation_repository: DB-layer invocation graph persistence service.

    Returns:
        APIRouter: Router exposing job invocation APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if job_template_repository is None:
        raise ValueError("job_template_repository must not be None")
    if bookmark_repository is None:
        raise ValueError("bookmark_repository must not be None")
    if job_invocation_repository is None:
        raise ValueError("job_invocation_repository must not be None")

    router = APIRouter(prefix="/job-invocations", tags=["job-invocations"])

    @router.post("")
    def api_job_invocation_create(
        request: Request,
        params: dict[str, Any] | None = Body(default=None),
    ) -> JSONResponse:
        """Compose and persist one job invocation from the request body.

        Returns:
            JSONResponse: Created invocation payload or structured error payload.

        Raises:
            RuntimeError: Raised when persistence fails unexpectedly.
        """

        principal_login = (request.headers.get(settings.principal_header_name) or "").strip()
        if not principal_login:
            payload = {
                "status": "error",
                "code": "PRINCIPAL_REQUIRED",
                "message": f"{settings.principal_header_name} header must not be blank",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_401_UNAUTHORIZED)

        invocation = JobInvocation()
        try:
            composer = JobInvocationComposer(
                invocation=invocation,
                principal=Principal(login=principal_login),
                params=params or {},
                job_template_repository=job_template_repository,
                bookmark_repository=bookmark_repository,
                job_invocation_repository=job_invocation_repository,
            )
            composer.job_invocation_save()
        except TargetingConflictError as error:
            payload = {"status": "error", "code": TARGETING_CONFLICT_CODE, "message": str(error)}
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)
        except ValueError as error:
            payload = {"status": "error", "code": "INVALID_PARAMS", "message": str(error)}
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)
        except LookupError as error:
            payload = {"status": "error", "code": "NOT_FOUND", "message": str(error)}
            return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)
        except InvocationNotSavedError as error:
            payload = {
                "status": "error",
                "code": INVOCATION_NOT_SAVED_CODE,
                "message": str(error),
                "errors": [issue.issue_to_payload() for issue in error.issues],
            }
            return JSONResponse(content=payload, status_code=422)

        return JSONResponse(
            content=api_serialize_job_invocation(invocation),
            status_code=status.HTTP_201_CREATED,
        )

    @router.get("")
    def api_job_invocation_list(
        limit: int = Query(default=settings.api_default_limit, ge=1),
        offset: int = Query(default=0, ge=0),
    ) -> JSONResponse:
        """Return persisted invocations ordered by latest first.

        Args:
            limit: Max rows to return.
            offset: Rows to skip.

        Returns:
            JSONResponse: Invocation list payload.
        """

        applied_limit = min(limit, settings.api_max_limit)
        invocations = job_invocation_repository.db_job_invocation_list(limit=applied_limit, offset=offset)
        payload = {
            "items": [api_serialize_job_invocation(invocation) for invocation in invocations],
            "page": {
                "limit": limit,
                "applied_limit": applied_limit,
                "offset": offset,
                "returned": len(invocations),
            },
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/{job_invocation_id}")
    def api_job_invocation_detail(job_invocation_id: str) -> JSONResponse:
        """Return one persisted invocation or 404 when absent."""

        invocation = job_invocation_repository.db_job_invocation_get_by_id(job_invocation_id)
        if invocation is None:
            payload = {
                "status": "error",
                "code": "NOT_FOUND",
                "message": f"job invocation not found: job_invocation_id={job_invocation_id}",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)
        return JSONResponse(content=api_serialize_job_invocation(invocation), status_code=status.HTTP_200_OK)

    return router


def api_serialize_job_invocation(invocation: JobInvocation) -> dict[str, Any]:
    """Serialize one invocation graph into a JSON-compatible payload.

    Args:
        invocation: Invocation graph.

    Returns:
        dict[str, Any]: Response payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    targeting_payload = None
    if invocation.targeting is not None:
        targeting = invocation.targeting
        targeting_payload = {
            "targeting_id": targeting.targeting_id,
            "targeting_type": targeting.targeting_type,
            "bookmark_id": targeting.bookmark.bookmark_id if targeting.bookmark is not None else None,
            "search_query": targeting.search_query,
            "resolved_search_query": targeting.targeting_resolved_search_query(),
            "user": targeting.user.login,
        }

    return {
        "job_invocation_id": invocation.job_invocation_id,
        "job_name": invocation.job_name,
        "job_template_id": invocation.job_template.job_template_id if invocation.job_template is not None else None,
        "targeting": targeting_payload,
        "template_invocations": [
            {
                "template_invocation_id": template_invocation.template_invocation_id,
                "job_template_id": template_invocation.job_template.job_template_id,
                "template_name": template_invocation.job_template.name,
                "input_values": [
                    {
                        "input_value_id": input_value.input_value_id,
                        "name": input_value.template_input.name,
                        "value": input_value.value,
                    }
                    for input_value in template_invocation.input_values
                ],
            }
            for template_invocation in invocation.template_invocations
        ],
    }
