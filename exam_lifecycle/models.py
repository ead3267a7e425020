"""SQLAlchemy ORM models for mock exams and their lifecycle records."""

from datetime import date, datetime, time
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import Boolean, Date, DateTime, Integer, Time

from exam_lifecycle.config import DELIVERY_MODES, EXAM_WINDOWS
from exam_lifecycle.state_machine import status_check_clause


class Base(DeclarativeBase):
    pass


def _in_clause(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


# ---------------------------------------------------------------------------
# Mock exams
# ---------------------------------------------------------------------------


class MockExam(Base):
    __tablename__ = "mock_exams"
    __table_args__ = (
        Index("idx_mock_exams_status", "status"),
        Index("idx_mock_exams_status_date", "status", "scheduled_date"),
        Index("idx_mock_exams_company", "company_id"),
        CheckConstraint(status_check_clause("status"), name="ck_mock_exam_status"),
        CheckConstraint("duration_minutes > 0", name="ck_mock_exam_duration"),
        CheckConstraint(
            "readiness_score >= 0 AND readiness_score <= 100",
            name="ck_mock_exam_readiness",
        ),
        CheckConstraint(
            "total_marks IS NULL OR total_marks > 0", name="ck_mock_exam_total_marks"
        ),
        CheckConstraint(
            _in_clause("delivery_mode", DELIVERY_MODES), name="ck_mock_exam_delivery_mode"
        ),
        CheckConstraint(
            _in_clause("exam_window", EXAM_WINDOWS), name="ck_mock_exam_window"
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    company_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'draft'")
    )
    subject: Mapped[str | None] = mapped_column(Text)
    paper_type: Mapped[str | None] = mapped_column(Text)
    paper_number: Mapped[int | None] = mapped_column(Integer)
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)
    scheduled_time: Mapped[time | None] = mapped_column(Time)
    duration_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("120")
    )
    delivery_mode: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'In-person'")
    )
    exam_window: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'Term 1'")
    )
    total_marks: Mapped[int | None] = mapped_column(Integer)
    readiness_score: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    ai_proctoring_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    release_analytics: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    allow_retakes: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    notes: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    status_history: Mapped[list["MockExamStatusHistory"]] = relationship(
        back_populates="mock_exam",
        cascade="all, delete-orphan",
        order_by="MockExamStatusHistory.created_at.desc()",
    )
    stage_progress: Mapped[list["MockExamStageProgress"]] = relationship(
        back_populates="mock_exam", cascade="all, delete-orphan"
    )


# ---------------------------------------------------------------------------
# Status history
# ---------------------------------------------------------------------------


class MockExamStatusHistory(Base):
    __tablename__ = "mock_exam_status_history"
    __table_args__ = (
        Index("idx_mock_exam_status_history_exam", "mock_exam_id", "created_at"),
        CheckConstraint(
            f"old_status IS NULL OR {status_check_clause('old_status')}",
            name="ck_status_history_old",
        ),
        CheckConstraint(status_check_clause("new_status"), name="ck_status_history_new"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    mock_exam_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("mock_exams.id", ondelete="CASCADE"),
        nullable=False,
    )
    old_status: Mapped[str | None] = mapped_column(Text)
    new_status: Mapped[str] = mapped_column(Text, nullable=False)
    change_reason: Mapped[str | None] = mapped_column(Text)
    changed_by: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    mock_exam: Mapped["MockExam"] = relationship(back_populates="status_history")


# ---------------------------------------------------------------------------
# Stage progress (per-status checklist)
# ---------------------------------------------------------------------------


class MockExamStageProgress(Base):
    __tablename__ = "mock_exam_stage_progress"
    __table_args__ = (
        UniqueConstraint("mock_exam_id", "stage", name="uq_stage_progress_exam_stage"),
        CheckConstraint(status_check_clause("stage"), name="ck_stage_progress_stage"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    mock_exam_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("mock_exams.id", ondelete="CASCADE"),
        nullable=False,
    )
    stage: Mapped[str] = mapped_column(Text, nullable=False)
    requirements: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )
    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_by: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    mock_exam: Mapped["MockExam"] = relationship(back_populates="stage_progress")
