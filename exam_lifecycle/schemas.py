"""Pydantic v2 request/response schemas for the mock exam endpoints."""

from datetime import date, datetime, time
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Mock exams
# ---------------------------------------------------------------------------


class MockExamCreate(BaseModel):
    company_id: UUID
    title: str = Field(..., min_length=1, max_length=300)
    scheduled_date: date
    status: str = Field(default="draft", max_length=50)
    subject: str | None = Field(default=None, max_length=200)
    paper_type: str | None = Field(default=None, max_length=100)
    paper_number: int | None = Field(default=None, ge=1)
    scheduled_time: time | None = None
    duration_minutes: int = Field(default=120, gt=0)
    delivery_mode: Literal["In-person", "Digital (exam hall)", "Remote proctored"] = "In-person"
    exam_window: Literal["Term 1", "Term 2", "Term 3", "Trial Exams", "Mock Series"] = "Term 1"
    total_marks: int | None = Field(default=None, gt=0)
    readiness_score: int = Field(default=0, ge=0, le=100)
    ai_proctoring_enabled: bool = False
    release_analytics: bool = True
    allow_retakes: bool = False
    notes: str | None = None
    created_by: UUID | None = None


class MockExamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    title: str
    status: str
    subject: str | None
    paper_type: str | None
    paper_number: int | None
    scheduled_date: date
    scheduled_time: time | None
    duration_minutes: int
    delivery_mode: str
    exam_window: str
    total_marks: int | None
    readiness_score: int
    ai_proctoring_enabled: bool
    release_analytics: bool
    allow_retakes: bool
    notes: str | None
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime


class PaginatedResponse(BaseModel):
    items: list[Any]
    total: int
    page: int
    per_page: int


class MockExamStatisticsResponse(BaseModel):
    total: int
    upcoming: int
    ai_enabled: int
    avg_readiness: int
    by_status: dict[str, int]


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


class StageDataRequest(BaseModel):
    requirements: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = None
    completed: bool | None = None


class TransitionRequest(BaseModel):
    target_status: str = Field(..., min_length=1, max_length=50)
    expected_status: str | None = Field(
        default=None,
        max_length=50,
        description="Status the client last saw; the transition fails if it has changed",
    )
    reason: str | None = Field(default=None, max_length=2000)
    changed_by: UUID | None = None
    stage_data: StageDataRequest | None = None


class StageProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    mock_exam_id: UUID
    stage: str
    requirements: dict[str, Any]
    completed: bool
    completed_at: datetime | None
    completed_by: UUID | None
    notes: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TransitionResponse(BaseModel):
    exam: MockExamResponse
    previous_status: str
    stage_progress: StageProgressResponse | None = None
    event_published: bool = False


class StatusHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    old_status: str | None
    new_status: str
    change_reason: str | None
    changed_by: UUID | None
    created_at: datetime


class StageDefinitionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str
    label: str
    description: str
    required: list[str]
    optional: list[str]


class AllowedTransitionsResponse(BaseModel):
    mock_exam_id: UUID
    current_status: str
    is_terminal: bool
    allowed: list[StageDefinitionResponse]


class StatusTableEntry(BaseModel):
    status: str
    label: str
    order: int
    allowed_targets: list[str]


class TransitionCheckResponse(BaseModel):
    current: str
    proposed: str
    allowed: bool
    reason: Literal["allowed", "not_allowed", "unknown_status"]
