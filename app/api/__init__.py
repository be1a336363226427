"""API layer package exposing the job invocation HTTP application."""

from .application import create_api_application
from .routers import api_serialize_job_invocation

__all__ = ["api_serialize_job_invocation", "create_api_application"]
