"""Mock exam endpoints: CRUD, status transitions, history and stage checklists."""

from datetime import date
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from exam_lifecycle.database import get_db
from exam_lifecycle.exceptions import ExamServiceError, raise_http_exception
from exam_lifecycle.logging_config import get_logger
from exam_lifecycle.redis import get_redis
from exam_lifecycle.schemas import (
    AllowedTransitionsResponse,
    MockExamCreate,
    MockExamResponse,
    MockExamStatisticsResponse,
    PaginatedResponse,
    StageDefinitionResponse,
    StageProgressResponse,
    StatusHistoryResponse,
    StatusTableEntry,
    TransitionCheckResponse,
    TransitionRequest,
    TransitionResponse,
)
from exam_lifecycle.services.exam_service import ExamService
from exam_lifecycle.services.transition_service import StageData, TransitionService
from exam_lifecycle.stages import STAGE_DEFINITIONS
from exam_lifecycle.state_machine import (
    ALL_STATUSES,
    STATUS_ORDER,
    ExamStatus,
    allowed_targets,
    is_transition_allowed,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/mock-exams", tags=["mock-exams"])


def _stage_response(definition) -> StageDefinitionResponse:
    return StageDefinitionResponse(
        status=definition.status.value,
        label=definition.label,
        description=definition.description,
        required=list(definition.required),
        optional=list(definition.optional),
    )


# ===========================================
# STATUS REFERENCE
# ===========================================


@router.get("/statuses", response_model=list[StatusTableEntry])
async def list_statuses():
    """Every lifecycle status with its stage label and one-step targets."""
    return [
        StatusTableEntry(
            status=s.value,
            label=STAGE_DEFINITIONS[s].label,
            order=STATUS_ORDER[s],
            allowed_targets=[t.value for t in allowed_targets(s)],
        )
        for s in ExamStatus
    ]


@router.get("/transitions/check", response_model=TransitionCheckResponse)
async def check_transition(
    current: str = Query(..., max_length=50),
    proposed: str = Query(..., max_length=50),
):
    """Evaluate a transition without touching any exam."""
    allowed = is_transition_allowed(current, proposed)
    if allowed:
        reason = "allowed"
    elif current not in ALL_STATUSES or proposed not in ALL_STATUSES:
        reason = "unknown_status"
    else:
        reason = "not_allowed"
    return TransitionCheckResponse(
        current=current, proposed=proposed, allowed=allowed, reason=reason
    )


# ===========================================
# MOCK EXAM CRUD
# ===========================================


@router.post("", response_model=MockExamResponse, status_code=status.HTTP_201_CREATED)
async def create_mock_exam(
    body: MockExamCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a mock exam in draft or planned."""
    try:
        service = ExamService(db)
        exam = await service.create_exam(**body.model_dump())
        await db.commit()
        return exam
    except ExamServiceError as e:
        raise_http_exception(e)


@router.get("", response_model=PaginatedResponse)
async def list_mock_exams(
    company_id: UUID | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status", max_length=50),
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """List mock exams, newest scheduled date first."""
    try:
        service = ExamService(db)
        page = await service.list_exams(company_id, status_filter, offset, limit)
    except ExamServiceError as e:
        raise_http_exception(e)
    page["items"] = [MockExamResponse.model_validate(e) for e in page["items"]]
    return page


@router.get("/statistics", response_model=MockExamStatisticsResponse)
async def get_statistics(
    company_id: UUID | None = Query(default=None),
    today: date | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Dashboard counts: total, upcoming, AI proctored, average readiness."""
    service = ExamService(db)
    return await service.get_statistics(company_id, today=today)


@router.get("/{exam_id}", response_model=MockExamResponse)
async def get_mock_exam(
    exam_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    try:
        service = ExamService(db)
        return await service.get_exam(exam_id)
    except ExamServiceError as e:
        raise_http_exception(e)


# ===========================================
# STATUS TRANSITIONS
# ===========================================


@router.get("/{exam_id}/transitions", response_model=AllowedTransitionsResponse)
async def get_allowed_transitions(
    exam_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Stages the exam can move into next, with their checklists."""
    try:
        service = TransitionService(db)
        result = await service.describe_transitions(exam_id)
    except ExamServiceError as e:
        raise_http_exception(e)
    result["allowed"] = [_stage_response(d) for d in result["allowed"]]
    return result


@router.post("/{exam_id}/status", response_model=TransitionResponse)
async def transition_mock_exam_status(
    exam_id: UUID,
    body: TransitionRequest,
    db: AsyncSession = Depends(get_db),
):
    """Move a mock exam to a new status."""
    stage_data = None
    if body.stage_data is not None:
        stage_data = StageData(
            requirements=body.stage_data.requirements,
            notes=body.stage_data.notes,
            completed=body.stage_data.completed,
        )
    try:
        service = TransitionService(db, redis=get_redis())
        result = await service.transition_status(
            exam_id,
            body.target_status,
            changed_by=body.changed_by,
            reason=body.reason,
            expected_status=body.expected_status,
            stage_data=stage_data,
        )
        await db.commit()
    except ExamServiceError as e:
        raise_http_exception(e)

    published = await service.publish_transition(result)

    return TransitionResponse(
        exam=MockExamResponse.model_validate(result.exam),
        previous_status=result.previous_status,
        stage_progress=(
            StageProgressResponse.model_validate(result.stage_progress)
            if result.stage_progress is not None
            else None
        ),
        event_published=published,
    )


@router.get("/{exam_id}/history", response_model=list[StatusHistoryResponse])
async def get_status_history(
    exam_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Status changes for an exam, newest first."""
    try:
        service = ExamService(db)
        return await service.get_status_history(exam_id)
    except ExamServiceError as e:
        raise_http_exception(e)


@router.get("/{exam_id}/stages", response_model=list[StageProgressResponse])
async def get_stage_progress(
    exam_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    try:
        service = ExamService(db)
        return await service.get_stage_progress(exam_id)
    except ExamServiceError as e:
        raise_http_exception(e)
