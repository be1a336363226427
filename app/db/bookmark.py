"""Database service for read-only bookmark lookups."""

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from app.domain import Bookmark

from .interfaces import BookmarkRepositoryPort


class SQLAlchemyBookmarkService(BookmarkRepositoryPort):
    """SQLAlchemy-backed bookmark lookup service."""

    def __init__(self, engine: Engine):
        """Initialize bookmark lookup service.

        Args:
            engine: SQLAlchemy engine used for all reads.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_bookmark_get_by_id(self, bookmark_id: str) -> Bookmark:
        """Fetch one bookmark by identifier.

        Args:
            bookmark_id: Bookmark identifier.

        Returns:
            Bookmark: Matching bookmark.

        Raises:
            ValueError: Raised when the identifier is blank.
            LookupError: Raised when the bookmark does not exist.
            RuntimeError: Raised when the database read fails.
        """

        normalized_bookmark_id = str(bookmark_id).strip()
        if not normalized_bookmark_id:
            raise ValueError("bookmark_id must not be blank")

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        "SELECT bookmark_id, name, query, owner_login "
                        "FROM bookmark "
                        "WHERE bookmark_id = :bookmark_id"
                    ),
                    {"bookmark_id": normalized_bookmark_id},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch bookmark by id") from error

        if row is None:
            raise LookupError(f"bookmark not found: bookmark_id={normalized_bookmark_id}")
        return Bookmark(
            bookmark_id=row["bookmark_id"],
            name=row["name"],
            query=row["query"],
            owner_login=row["owner_login"],
        )
