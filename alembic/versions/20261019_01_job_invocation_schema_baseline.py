"""Job invocation schema baseline

Revision ID: 20261019_01
Revises: None
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_IDENTIFIER_TYPE = sa.String(36)


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "job_template",
        sa.Column("job_template_id", _IDENTIFIER_TYPE, primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("job_name", sa.Text(), nullable=False),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.UniqueConstraint("name", name="uq_job_template_name"),
    )
    op.create_index("ix_job_template_job_name", "job_template", ["job_name"])

    op.create_table(
        "template_input",
        sa.Column("template_input_id", _IDENTIFIER_TYPE, primary_key=True),
        sa.Column(
            "job_template_id",
            _IDENTIFIER_TYPE,
            sa.ForeignKey("job_template.job_template_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.UniqueConstraint("job_template_id", "name", name="uq_template_input_template_name"),
    )

    op.create_table(
        "bookmark",
        sa.Column("bookmark_id", _IDENTIFIER_TYPE, primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("query", sa.Text(), nullable=False),
        sa.Column("owner_login", sa.Text(), nullable=True),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
    )

    op.create_table(
        "job_invocation",
        sa.Column("job_invocation_id", _IDENTIFIER_TYPE, primary_key=True),
        sa.Column("job_name", sa.Text(), nullable=False),
        sa.Column(
            "job_template_id",
            _IDENTIFIER_TYPE,
            sa.ForeignKey("job_template.job_template_id"),
            nullable=True,
        ),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
    )
    op.create_index("ix_job_invocation_created_at_utc", "job_invocation", ["created_at_utc"])

    op.create_table(
        "targeting",
        sa.Column("targeting_id", _IDENTIFIER_TYPE, primary_key=True),
        sa.Column(
            "job_invocation_id",
            _IDENTIFIER_TYPE,
            sa.ForeignKey("job_invocation.job_invocation_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("targeting_type", sa.Text(), nullable=False),
        sa.Column("bookmark_id", _IDENTIFIER_TYPE, sa.ForeignKey("bookmark.bookmark_id"), nullable=True),
        sa.Column("search_query", sa.Text(), nullable=True),
        sa.Column("user_login", sa.Text(), nullable=False),
        sa.UniqueConstraint("job_invocation_id", name="uq_targeting_job_invocation"),
        sa.CheckConstraint(
            "(bookmark_id IS NULL) <> (search_query IS NULL)",
            name="ck_targeting_exactly_one_mode",
        ),
    )

    op.create_table(
        "template_invocation",
        sa.Column("template_invocation_id", _IDENTIFIER_TYPE, primary_key=True),
        sa.Column(
            "job_invocation_id",
            _IDENTIFIER_TYPE,
            sa.ForeignKey("job_invocation.job_invocation_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("job_template_id", _IDENTIFIER_TYPE, sa.ForeignKey("job_template.job_template_id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.UniqueConstraint("job_invocation_id", "job_template_id", name="uq_template_invocation_invocation_template"),
    )

    op.create_table(
        "template_invocation_input_value",
        sa.Column("input_value_id", _IDENTIFIER_TYPE, primary_key=True),
        sa.Column(
            "template_invocation_id",
            _IDENTIFIER_TYPE,
            sa.ForeignKey("template_invocation.template_invocation_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "template_input_id",
            _IDENTIFIER_TYPE,
            sa.ForeignKey("template_input.template_input_id"),
            nullable=False,
        ),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.UniqueConstraint(
            "template_invocation_id",
            "template_input_id",
            name="uq_template_invocation_input_value_invocation_input",
        ),
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("template_invocation_input_value")
    op.drop_table("template_invocation")
    op.drop_table("targeting")
    op.drop_table("job_invocation")
    op.drop_table("bookmark")
    op.drop_table("template_input")
    op.drop_table("job_template")
