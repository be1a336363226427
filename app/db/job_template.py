"""Database service for read-only job template and template input lookups."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Connection, Engine, text
from sqlalchemy.exc import SQLAlchemyError

from app.domain import JobTemplate, TemplateInput

from .interfaces import JobTemplateRepositoryPort


class SQLAlchemyJobTemplateService(JobTemplateRepositoryPort):
    """SQLAlchemy-backed job template lookup service."""

    def __init__(self, engine: Engine):
        """Initialize job template lookup service.

        Args:
            engine: SQLAlchemy engine used for all reads.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_job_template_get_by_id(self, job_template_id: str) -> JobTemplate:
        """Fetch one job template with declared inputs by identifier.

        Args:
            job_template_id: Job template identifier.

        Returns:
            JobTemplate: Matching template.

        Raises:
            ValueError: Raised when the identifier is blank.
            LookupError: Raised when the template does not exist.
            RuntimeError: Raised when the database read fails.
        """

        normalized_job_template_id = str(job_template_id).strip()
        if not normalized_job_template_id:
            raise ValueError("job_template_id must not be blank")

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        "SELECT job_template_id, name, job_name "
                        "FROM job_template "
                        "WHERE job_template_id = :job_template_id"
                    ),
                    {"job_template_id": normalized_job_template_id},
                ).mappings().first()
                if row is None:
                    raise LookupError(f"job template not found: job_template_id={normalized_job_template_id}")
                return self._db_map_job_template(connection=connection, row=row)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch job template by id") from error

    def db_job_template_get_by_job_name(self, job_name: str) -> JobTemplate:
        """Fetch one job template with declared inputs by job name.

        When several templates implement the same job name, the one with the
        lowest template name wins.

        Args:
            job_name: Job name implemented by the template.

        Returns:
            JobTemplate: Matching template.

        Raises:
            ValueError: Raised when the job name is blank.
            LookupError: Raised when no template implements the job name.
            RuntimeError: Raised when the database read fails.
        """

        normalized_job_name = str(job_name).strip()
        if not normalized_job_name:
            raise ValueError("job_name must not be blank")

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        "SELECT job_template_id, name, job_name "
                        "FROM job_template "
                        "WHERE job_name = :job_name "
                        "ORDER BY name ASC, job_template_id ASC "
                        "LIMIT 1"
                    ),
                    {"job_name": normalized_job_name},
                ).mappings().first()
                if row is None:
                    raise LookupError(f"job template not found: job_name={normalized_job_name}")
                return self._db_map_job_template(connection=connection, row=row)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch job template by job name") from error

    def _db_map_job_template(self, connection: Connection, row: Any) -> JobTemplate:
        """Map a template row and its input rows to a typed template.

        Args:
            connection: Active SQLAlchemy connection.
            row: Template row mapping.

        Returns:
            JobTemplate: Template with inputs in declaration order.

        Raises:
            SQLAlchemyError: Raised when the input read fails.
        """

        return JobTemplate(
            job_template_id=row["job_template_id"],
            name=row["name"],
            job_name=row["job_name"],
            template_inputs=db_job_template_fetch_inputs(
                connection=connection,
                job_template_id=row["job_template_id"],
            ),
        )


def db_job_template_fetch_inputs(connection: Connection, job_template_id: str) -> tuple[TemplateInput, ...]:
    """Read declared inputs of one template inside an active connection.

    Args:
        connection: Active SQLAlchemy connection.
        job_template_id: Job template identifier.

    Returns:
        tuple[TemplateInput, ...]: Inputs ordered by declaration position.

    Raises:
        SQLAlchemyError: Raised when the read fails.
    """

    input_rows = connection.execute(
        text(
            "SELECT template_input_id, name, required "
            "FROM template_input "
            "WHERE job_template_id = :job_template_id "
            "ORDER BY position ASC, name ASC"
        ),
        {"job_template_id": job_template_id},
    ).mappings().all()

    return tuple(
        TemplateInput(
            template_input_id=input_row["template_input_id"],
            name=input_row["name"],
            required=bool(input_row["required"]),
        )
        for input_row in input_rows
    )
