"""Database health service implementations for connectivity and schema checks."""

from sqlalchemy import Engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError

from app.domain import HealthStatus

from .interfaces import DatabaseHealthPort

INVOCATION_SCHEMA_TABLES = (
    "job_invocation",
    "targeting",
    "template_invocation",
    "template_invocation_input_value",
)


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Database health service backed by SQLAlchemy engine connectivity checks."""

    def __init__(self, engine: Engine):
        """Initialize database health service.

        Args:
            engine: SQLAlchemy engine used for connectivity checks.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the target database URL with the password masked."""

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Verify connectivity and that invocation tables are migrated.

        Returns:
            HealthStatus: `ok` when reachable and migrated, `degraded` when tables are missing.

        Raises:
            ConnectionError: Raised when connectivity check fails.
        """

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                table_names = set(inspect(connection).get_table_names())
        except SQLAlchemyError as error:
            raise ConnectionError("database connectivity check failed") from error

        missing_tables = [table_name for table_name in INVOCATION_SCHEMA_TABLES if table_name not in table_names]
        if missing_tables:
            return HealthStatus(status="degraded", detail=f"missing tables: {', '.join(missing_tables)}")
        return HealthStatus(status="ok", detail="database connectivity verified")
