"""Typed interfaces for database-layer services.

All SQL and ORM access must remain in the db package and its submodules.
"""

from typing import Protocol

from app.domain import Bookmark, HealthStatus, JobInvocation, JobTemplate


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


class JobTemplateRepositoryPort(Protocol):
    """Port definition for read-only job template lookups."""

    def db_job_template_get_by_id(self, job_template_id: str) -> JobTemplate:
        """Fetch one job template with its declared inputs by identifier.

        Args:
            job_template_id: Job template identifier.

        Returns:
            JobTemplate: Matching template.

        Raises:
            LookupError: Raised when the template does not exist.
            RuntimeError: Raised when the database read fails.
        """

    def db_job_template_get_by_job_name(self, job_name: str) -> JobTemplate:
        """Fetch one job template with its declared inputs by job name.

        Args:
            job_name: Job name implemented by the template.

        Returns:
            JobTemplate: Matching template.

        Raises:
            LookupError: Raised when no template implements the job name.
            RuntimeError: Raised when the database read fails.
        """


class BookmarkRepositoryPort(Protocol):
    """Port definition for read-only bookmark lookups."""

    def db_bookmark_get_by_id(self, bookmark_id: str) -> Bookmark:
        """Fetch one bookmark by identifier.

        Args:
            bookmark_id: Bookmark identifier.

        Returns:
            Bookmark: Matching bookmark.

        Raises:
            LookupError: Raised when the bookmark does not exist.
            RuntimeError: Raised when the database read fails.
        """


class JobInvocationRepositoryPort(Protocol):
    """Port definition for atomic job invocation graph persistence and reads."""

    def db_job_invocation_create(self, invocation: JobInvocation) -> JobInvocation:
        """Persist invocation, targeting, template invocations and input values atomically.

        Args:
            invocation: Validated, unsaved invocation graph.

        Returns:
            JobInvocation: Same invocation with identifiers assigned.

        Raises:
            ValueError: Raised when the graph is already persisted or lacks targeting.
            RuntimeError: Raised when persistence fails; nothing is written.
        """

    def db_job_invocation_get_by_id(self, job_invocation_id: str) -> JobInvocation | None:
        """Fetch one persisted invocation graph by identifier.

        Args:
            job_invocation_id: Invocation identifier.

        Returns:
            JobInvocation | None: Rebuilt invocation graph, or None when absent.

        Raises:
            RuntimeError: Raised when the database read fails.
        """

    def db_job_invocation_list(self, limit: int, offset: int) -> list[JobInvocation]:
        """List persisted invocation graphs ordered by latest creation first.

        Args:
            limit: Max rows to return.
            offset: Rows to skip.

        Returns:
            list[JobInvocation]: Deterministically ordered invocation graphs.

        Raises:
            ValueError: Raised when pagination arguments are invalid.
            RuntimeError: Raised when the database read fails.
        """
