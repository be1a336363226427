"""Database layer package for all SQL and persistence boundaries."""

from .bookmark import SQLAlchemyBookmarkService
from .health import SQLAlchemyDatabaseHealthService
from .interfaces import (
	BookmarkRepositoryPort,
	DatabaseHealthPort,
	JobInvocationRepositoryPort,
	JobTemplateRepositoryPort,
)
from .job_invocation import SQLAlchemyJobInvocationService
from .job_template import SQLAlchemyJobTemplateService
from .session import db_create_engine

__all__ = [
	"BookmarkRepositoryPort",
	"DatabaseHealthPort",
	"JobInvocationRepositoryPort",
	"JobTemplateRepositoryPort",
	"SQLAlchemyBookmarkService",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyJobInvocationService",
	"SQLAlchemyJobTemplateService",
	"db_create_engine",
]
