"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "assessment_sessions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.String(length=128), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("composite_result", sa.JSON(none_as_null=True), nullable=True),
        sa.Column("catalog_version", sa.String(length=16), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "status IN ('in_progress', 'completed', 'abandoned')", name="ck_session_status"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_assessment_sessions_owner_id", "assessment_sessions", ["owner_id"], unique=False
    )
    op.create_table(
        "section_results",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("session_id", sa.Integer(), nullable=False),
        sa.Column("section", sa.String(length=32), nullable=False),
        sa.Column("raw_responses", sa.JSON(), nullable=False),
        sa.Column("scores", sa.JSON(), nullable=False),
        sa.Column("time_spent_minutes", sa.Float(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=False),
        sa.Column("interpretation", sa.Text(), nullable=False),
        sa.Column("recommendations", sa.JSON(), nullable=False),
        sa.CheckConstraint(
            "section IN ('riasec', 'brain_profile', 'employability', 'personal_insights')",
            name="ck_section_name",
        ),
        sa.CheckConstraint("time_spent_minutes >= 0", name="ck_section_time_spent"),
        sa.ForeignKeyConstraint(["session_id"], ["assessment_sessions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("session_id", "section", name="uq_session_section"),
    )
    op.create_index(
        "ix_section_results_session_id", "section_results", ["session_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_section_results_session_id", table_name="section_results")
    op.drop_table("section_results")
    op.drop_index("ix_assessment_sessions_owner_id", table_name="assessment_sessions")
    op.drop_table("assessment_sessions")
