"""Create mock_exam_status_history and mock_exam_stage_progress tables.

Revision ID: 002
Revises: 001
Create Date: 2026-10-13
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Statuses as of this revision; later statuses get their own revision
STATUS_VALUES = (
    "'draft', 'planned', 'scheduled', 'materials_ready', 'in_progress', "
    "'grading', 'moderation', 'analytics_released', 'completed', 'cancelled'"
)


def upgrade() -> None:
    op.create_table(
        "mock_exam_status_history",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("mock_exam_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("mock_exams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("old_status", sa.Text(), nullable=True),
        sa.Column("new_status", sa.Text(), nullable=False),
        sa.Column("change_reason", sa.Text(), nullable=True),
        sa.Column("changed_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint(
            f"old_status IS NULL OR old_status IN ({STATUS_VALUES})",
            name="ck_status_history_old",
        ),
        sa.CheckConstraint(f"new_status IN ({STATUS_VALUES})", name="ck_status_history_new"),
    )
    op.create_index(
        "idx_mock_exam_status_history_exam",
        "mock_exam_status_history",
        ["mock_exam_id", "created_at"],
    )

    op.create_table(
        "mock_exam_stage_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("mock_exam_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("mock_exams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("stage", sa.Text(), nullable=False),
        sa.Column("requirements", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint(f"stage IN ({STATUS_VALUES})", name="ck_stage_progress_stage"),
        sa.UniqueConstraint("mock_exam_id", "stage", name="uq_stage_progress_exam_stage"),
    )


def downgrade() -> None:
    op.drop_table("mock_exam_stage_progress")
    op.drop_index("idx_mock_exam_status_history_exam", table_name="mock_exam_status_history")
    op.drop_table("mock_exam_status_history")
