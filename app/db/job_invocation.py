"""Database service for atomic job invocation graph persistence and reads."""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

from sqlalchemy import Connection, Engine, text
from sqlalchemy.exc import SQLAlchemyError

from app.domain import (
    Bookmark,
    InputValue,
    JobInvocation,
    JobTemplate,
    Principal,
    Targeting,
    TemplateInvocation,
)

from .interfaces import JobInvocationRepositoryPort
from .job_template import db_job_template_fetch_inputs

logger = logging.getLogger(__name__)


class SQLAlchemyJobInvocationService(JobInvocationRepositoryPort):
    """SQLAlchemy-backed job invocation persistence service.

    The whole invocation graph is written inside a single `engine.begin()`
    transaction. Identifiers are attached to the in-memory graph only after
    the transaction commits, so a failed write leaves the graph unsaved.
    """

    def __init__(self, engine: Engine):
        """Initialize job invocation persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_job_invocation_create(self, invocation: JobInvocation) -> JobInvocation:
        """Persist the invocation graph in one transaction.

        Args:
            invocation: Validated, unsaved invocation graph.

        Returns:
            JobInvocation: Same invocation with identifiers assigned.

        Raises:
            ValueError: Raised when the graph is already persisted or lacks targeting.
            RuntimeError: Raised when persistence fails; the transaction is rolled back.
        """

        if invocation is None:
            raise ValueError("invocation must not be None")
        if invocation.is_persisted:
            raise ValueError("invocation is already persisted")
        if invocation.targeting is None:
            raise ValueError("invocation.targeting must not be None")

        job_invocation_id = str(uuid4())
        targeting_id = str(uuid4())
        template_invocation_ids: list[str] = []
        input_value_ids: list[list[str]] = []

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO job_invocation (job_invocation_id, job_name, job_template_id) "
                        "VALUES (:job_invocation_id, :job_name, :job_template_id)"
                    ),
                    {
                        "job_invocation_id": job_invocation_id,
                        "job_name": invocation.job_name,
                        "job_template_id": (
                            invocation.job_template.job_template_id if invocation.job_template is not None else None
                        ),
                    },
                )

                targeting = invocation.targeting
                connection.execute(
                    text(
                        "INSERT INTO targeting ("
                        "targeting_id, job_invocation_id, targeting_type, bookmark_id, search_query, user_login"
                        ") VALUES ("
                        ":targeting_id, :job_invocation_id, :targeting_type, :bookmark_id, :search_query, :user_login"
                        ")"
                    ),
                    {
                        "targeting_id": targeting_id,
                        "job_invocation_id": job_invocation_id,
                        "targeting_type": targeting.targeting_type,
                        "bookmark_id": targeting.bookmark.bookmark_id if targeting.bookmark is not None else None,
                        "search_query": targeting.search_query,
                        "user_login": targeting.user.login,
                    },
                )

                for template_position, template_invocation in enumerate(invocation.template_invocations):
                    template_invocation_id = str(uuid4())
                    connection.execute(
                        text(
                            "INSERT INTO template_invocation ("
                            "template_invocation_id, job_invocation_id, job_template_id, position"
                            ") VALUES ("
                            ":template_invocation_id, :job_invocation_id, :job_template_id, :position"
                            ")"
                        ),
                        {
                            "template_invocation_id": template_invocation_id,
                            "job_invocation_id": job_invocation_id,
                            "job_template_id": template_invocation.job_template.job_template_id,
                            "position": template_position,
                        },
                    )

                    value_ids: list[str] = []
                    for value_position, input_value in enumerate(template_invocation.input_values):
                        input_value_id = str(uuid4())
                        connection.execute(
                            text(
                                "INSERT INTO template_invocation_input_value ("
                                "input_value_id, template_invocation_id, template_input_id, value, position"
                                ") VALUES ("
                                ":input_value_id, :template_invocation_id, :template_input_id, :value, :position"
                                ")"
                            ),
                            {
                                "input_value_id": input_value_id,
                                "template_invocation_id": template_invocation_id,
                                "template_input_id": input_value.template_input.template_input_id,
                                "value": input_value.value,
                                "position": value_position,
                            },
                        )
                        value_ids.append(input_value_id)

                    template_invocation_ids.append(template_invocation_id)
                    input_value_ids.append(value_ids)
        except SQLAlchemyError as error:
            logger.error("job invocation graph persistence rolled back: job_name=%s", invocation.job_name)
            raise RuntimeError("failed to persist job invocation") from error

        invocation.job_invocation_id = job_invocation_id
        invocation.targeting.targeting_id = targeting_id
        for template_invocation, template_invocation_id, value_ids in zip(
            invocation.template_invocations, template_invocation_ids, input_value_ids
        ):
            template_invocation.template_invocation_id = template_invocation_id
            for input_value, input_value_id in zip(template_invocation.input_values, value_ids):
                input_value.input_value_id = input_value_id

        return invocation

    def db_job_invocation_get_by_id(self, job_invocation_id: str) -> JobInvocation | None:
        """Fetch one invocation graph by id.

        Args:
            job_invocation_id: Invocation identifier.

        Returns:
            JobInvocation | None: Rebuilt graph or None.

        Raises:
            RuntimeError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        "SELECT job_invocation_id, job_name, job_template_id "
                        "FROM job_invocation "
                        "WHERE job_invocation_id = :job_invocation_id"
                    ),
                    {"job_invocation_id": str(job_invocation_id)},
                ).mappings().first()
                if row is None:
                    return None
                return self._db_map_job_invocation(connection=connection, row=row)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch job invocation by id") from error

    def db_job_invocation_list(self, limit: int, offset: int) -> list[JobInvocation]:
        """List invocation graphs with deterministic default ordering.

        Args:
            limit: Maximum number of rows.
            offset: Number of rows to skip.

        Returns:
            list[JobInvocation]: Ordered invocation graphs.

        Raises:
            ValueError: Raised when limit or offset are invalid.
            RuntimeError: Raised when database read fails.
        """

        if limit < 1:
            raise ValueError("limit must be >= 1")
        if offset < 0:
            raise ValueError("offset must be >= 0")

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text(
                        "SELECT job_invocation_id, job_name, job_template_id "
                        "FROM job_invocation "
                        "ORDER BY created_at_utc DESC, job_invocation_id DESC "
                        "LIMIT :limit OFFSET :offset"
                    ),
                    {"limit": limit, "offset": offset},
                ).mappings().all()

                return [self._db_map_job_invocation(connection=connection, row=row) for row in rows]
        except SQLAlchemyError as error:
            raise RuntimeError("failed to list job invocations") from error

    def _db_map_job_invocation(self, connection: Connection, row: Any) -> JobInvocation:
        """Rebuild one invocation graph from its root row.

        Args:
            connection: Active SQLAlchemy connection.
            row: Invocation root row mapping.

        Returns:
            JobInvocation: Graph with targeting, template invocations and input values.

        Raises:
            SQLAlchemyError: Raised when a nested read fails.
        """

        job_invocation_id = row["job_invocation_id"]
        templates_by_id: dict[str, JobTemplate] = {}

        template_rows = connection.execute(
            text(
                "SELECT ti.template_invocation_id, jt.job_template_id, jt.name, jt.job_name "
                "FROM template_invocation ti "
                "JOIN job_template jt ON jt.job_template_id = ti.job_template_id "
                "WHERE ti.job_invocation_id = :job_invocation_id "
                "ORDER BY ti.position ASC"
            ),
            {"job_invocation_id": job_invocation_id},
        ).mappings().all()

        template_invocations: list[TemplateInvocation] = []
        for template_row in template_rows:
            job_template = self._db_resolve_template(connection, templates_by_id, template_row)
            inputs_by_id = {template_input.template_input_id: template_input for template_input in job_template.template_inputs}
            value_rows = connection.execute(
                text(
                    "SELECT input_value_id, template_input_id, value "
                    "FROM template_invocation_input_value "
                    "WHERE template_invocation_id = :template_invocation_id "
                    "ORDER BY position ASC"
                ),
                {"template_invocation_id": template_row["template_invocation_id"]},
            ).mappings().all()
            template_invocations.append(
                TemplateInvocation(
                    job_template=job_template,
                    input_values=[
                        InputValue(
                            template_input=inputs_by_id[value_row["template_input_id"]],
                            value=value_row["value"],
                            input_value_id=value_row["input_value_id"],
                        )
                        for value_row in value_rows
                        if value_row["template_input_id"] in inputs_by_id
                    ],
                    template_invocation_id=template_row["template_invocation_id"],
                )
            )

        primary_template = None
        if row["job_template_id"] is not None:
            primary_row = connection.execute(
                text("SELECT job_template_id, name, job_name FROM job_template WHERE job_template_id = :job_template_id"),
                {"job_template_id": row["job_template_id"]},
            ).mappings().first()
            if primary_row is not None:
                primary_template = self._db_resolve_template(connection, templates_by_id, primary_row)

        return JobInvocation(
            job_name=row["job_name"],
            job_template=primary_template,
            targeting=self._db_fetch_targeting(connection=connection, job_invocation_id=job_invocation_id),
            template_invocations=template_invocations,
            job_invocation_id=job_invocation_id,
        )

    def _db_resolve_template(self, connection: Connection, templates_by_id: dict[str, JobTemplate], row: Any) -> JobTemplate:
        """Return a cached template for the row, loading its inputs once."""

        job_template_id = row["job_template_id"]
        if job_template_id not in templates_by_id:
            templates_by_id[job_template_id] = JobTemplate(
                job_template_id=job_template_id,
                name=row["name"],
                job_name=row["job_name"],
                template_inputs=db_job_template_fetch_inputs(connection=connection, job_template_id=job_template_id),
            )
        return templates_by_id[job_template_id]

    def _db_fetch_targeting(self, connection: Connection, job_invocation_id: str) -> Targeting | None:
        """Read the targeting row of one invocation with its optional bookmark.

        Args:
            connection: Active SQLAlchemy connection.
            job_invocation_id: Invocation identifier.

        Returns:
            Targeting | None: Targeting, or None when no row exists.

        Raises:
            SQLAlchemyError: Raised when the read fails.
        """

        targeting_row = connection.execute(
            text(
                "SELECT t.targeting_id, t.targeting_type, t.search_query, t.user_login, "
                "b.bookmark_id, b.name AS bookmark_name, b.query AS bookmark_query, b.owner_login "
                "FROM targeting t "
                "LEFT JOIN bookmark b ON b.bookmark_id = t.bookmark_id "
                "WHERE t.job_invocation_id = :job_invocation_id"
            ),
            {"job_invocation_id": job_invocation_id},
        ).mappings().first()
        if targeting_row is None:
            return None

        bookmark = None
        if targeting_row["bookmark_id"] is not None:
            bookmark = Bookmark(
                bookmark_id=targeting_row["bookmark_id"],
                name=targeting_row["bookmark_name"],
                query=targeting_row["bookmark_query"],
                owner_login=targeting_row["owner_login"],
            )

        return Targeting(
            targeting_type=targeting_row["targeting_type"],
            user=Principal(login=targeting_row["user_login"]),
            bookmark=bookmark,
            search_query=targeting_row["search_query"],
            targeting_id=targeting_row["targeting_id"],
        )
