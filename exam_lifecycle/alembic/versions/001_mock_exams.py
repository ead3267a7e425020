"""Create mock_exams table.

Revision ID: 001
Revises:
Create Date: 2026-10-12
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Statuses as of this revision; later statuses get their own revision
STATUS_VALUES = (
    "'draft', 'planned', 'scheduled', 'materials_ready', 'in_progress', "
    "'grading', 'moderation', 'analytics_released', 'completed', 'cancelled'"
)


def upgrade() -> None:
    op.create_table(
        "mock_exams",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("company_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'draft'")),
        sa.Column("subject", sa.Text(), nullable=True),
        sa.Column("paper_type", sa.Text(), nullable=True),
        sa.Column("paper_number", sa.Integer(), nullable=True),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("scheduled_time", sa.Time(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default=sa.text("120")),
        sa.Column("delivery_mode", sa.Text(), nullable=False, server_default=sa.text("'In-person'")),
        sa.Column("exam_window", sa.Text(), nullable=False, server_default=sa.text("'Term 1'")),
        sa.Column("total_marks", sa.Integer(), nullable=True),
        sa.Column("readiness_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("ai_proctoring_enabled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("release_analytics", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("allow_retakes", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint(f"status IN ({STATUS_VALUES})", name="ck_mock_exam_status"),
        sa.CheckConstraint("duration_minutes > 0", name="ck_mock_exam_duration"),
        sa.CheckConstraint("readiness_score >= 0 AND readiness_score <= 100", name="ck_mock_exam_readiness"),
        sa.CheckConstraint("total_marks IS NULL OR total_marks > 0", name="ck_mock_exam_total_marks"),
        sa.CheckConstraint(
            "delivery_mode IN ('In-person', 'Digital (exam hall)', 'Remote proctored')",
            name="ck_mock_exam_delivery_mode",
        ),
        sa.CheckConstraint(
            "exam_window IN ('Term 1', 'Term 2', 'Term 3', 'Trial Exams', 'Mock Series')",
            name="ck_mock_exam_window",
        ),
    )
    op.create_index("idx_mock_exams_status", "mock_exams", ["status"])
    op.create_index("idx_mock_exams_status_date", "mock_exams", ["status", "scheduled_date"])
    op.create_index("idx_mock_exams_company", "mock_exams", ["company_id"])


def downgrade() -> None:
    op.drop_index("idx_mock_exams_company", table_name="mock_exams")
    op.drop_index("idx_mock_exams_status_date", table_name="mock_exams")
    op.drop_index("idx_mock_exams_status", table_name="mock_exams")
    op.drop_table("mock_exams")
