"""Shared fixtures for SQLite-backed repository and API tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import Engine, text

from app.db import db_create_engine

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def migrated_database_url(tmp_path, monkeypatch) -> str:
    """Create a temporary SQLite database migrated to the latest revision.

    Args:
        tmp_path: Pytest temporary directory.
        monkeypatch: Pytest environment patcher.

    Returns:
        str: SQLAlchemy URL of the migrated database.

    Raises:
        RuntimeError: Raised when migrations fail.
    """

    database_url = f"sqlite:///{tmp_path / 'composer.db'}"
    monkeypatch.setenv("DATABASE_URL", database_url)
    command.upgrade(Config(str(PROJECT_ROOT / "alembic.ini")), "head")
    return database_url


@pytest.fixture
def migrated_engine(migrated_database_url: str) -> Iterator[Engine]:
    """Yield an engine bound to the migrated database.

    Args:
        migrated_database_url: Migrated SQLite URL.

    Yields:
        Engine: SQLAlchemy engine, disposed after the test.
    """

    engine = db_create_engine(database_url=migrated_database_url)
    yield engine
    engine.dispose()


@pytest.fixture
def seeded_engine(migrated_engine: Engine) -> Engine:
    """Seed reference templates, inputs and bookmarks.

    Seeded rows:
        - template `tpl-1` named `testing1` for job `testing_job_template_1`
          with required `Command` and optional `Timeout_Seconds`;
        - template `tpl-2` named `testing2` for job `testing_job_template_2`
          with required `Package`;
        - bookmark `bm-1` with query `name ~ web*`.

    Args:
        migrated_engine: Engine bound to the migrated database.

    Returns:
        Engine: Same engine with reference rows inserted.
    """

    with migrated_engine.begin() as connection:
        connection.execute(
            text("INSERT INTO job_template (job_template_id, name, job_name) VALUES (:id, :name, :job_name)"),
            [
                {"id": "tpl-1", "name": "testing1", "job_name": "testing_job_template_1"},
                {"id": "tpl-2", "name": "testing2", "job_name": "testing_job_template_2"},
            ],
        )
        connection.execute(
            text(
                "INSERT INTO template_input (template_input_id, job_template_id, name, required, position) "
                "VALUES (:id, :job_template_id, :name, :required, :position)"
            ),
            [
                {"id": "in-1", "job_template_id": "tpl-1", "name": "Command", "required": True, "position": 0},
                {"id": "in-2", "job_template_id": "tpl-1", "name": "Timeout_Seconds", "required": False, "position": 1},
                {"id": "in-3", "job_template_id": "tpl-2", "name": "Package", "required": True, "position": 0},
            ],
        )
        connection.execute(
            text("INSERT INTO bookmark (bookmark_id, name, query, owner_login) VALUES (:id, :name, :query, :owner)"),
            {"id": "bm-1", "name": "web servers", "query": "name ~ web*", "owner": "admin"},
        )
    return migrated_engine
