"""API router package for endpoint composition."""

from .health import api_create_health_router
from .job_invocation import api_create_job_invocation_router, api_serialize_job_invocation

__all__ = ["api_create_health_router", "api_create_job_invocation_router", "api_serialize_job_invocation"]
