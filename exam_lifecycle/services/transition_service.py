"""Transition Service: moves mock exams through their lifecycle.

Wraps the repository layer with:
- State machine validation
- Stage checklist enforcement
- Compare-and-swap status updates (no lost updates between read and write)
- Status history and change events
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from exam_lifecycle.exceptions import (
    InvalidTransitionError,
    MockExamNotFoundError,
    StaleStatusError,
    UnknownStatusError,
)
from exam_lifecycle.logging_config import get_logger
from exam_lifecycle.models import MockExam, MockExamStageProgress
from exam_lifecycle.repository import (
    MockExamRepository,
    StageProgressRepository,
    StatusHistoryRepository,
)
from exam_lifecycle.services.activity_service import publish_status_change
from exam_lifecycle.stages import STAGE_DEFINITIONS, ensure_stage_complete
from exam_lifecycle.state_machine import (
    TERMINAL_STATUSES,
    allowed_targets,
    parse_status,
    validate_transition,
)

logger = get_logger(__name__)


@dataclass
class StageData:
    """Checklist data captured alongside a transition."""

    requirements: dict[str, Any]
    notes: str | None = None
    completed: bool | None = None

    def has_content(self) -> bool:
        return bool(self.requirements) or self.notes is not None or self.completed is not None


@dataclass
class TransitionResult:
    exam: MockExam
    previous_status: str
    stage_progress: MockExamStageProgress | None = None
    event_published: bool = False
    new_status: str | None = None
    changed_by: UUID | None = None
    reason: str | None = None


class TransitionService:
    """Orchestrates status transitions for mock exams."""

    def __init__(self, session: AsyncSession, redis=None):
        self.session = session
        self.redis = redis
        self.exam_repo = MockExamRepository(session)
        self.history_repo = StatusHistoryRepository(session)
        self.stage_repo = StageProgressRepository(session)

    async def _get_exam(self, exam_id: str | UUID) -> MockExam:
        exam = await self.exam_repo.get_by_id(exam_id)
        if exam is None:
            raise MockExamNotFoundError(str(exam_id))
        return exam

    async def transition_status(
        self,
        exam_id: str | UUID,
        target_status: str,
        *,
        changed_by: UUID | None = None,
        reason: str | None = None,
        expected_status: str | None = None,
        stage_data: StageData | None = None,
    ) -> TransitionResult:
        """Move an exam to target_status.

        The caller owns the transaction; nothing is committed here. Once the
        caller has committed, it hands the result to publish_transition.
        """
        exam = await self._get_exam(exam_id)
        current = exam.status

        if expected_status is not None:
            parse_status(expected_status)
            if expected_status != current:
                raise StaleStatusError(str(exam_id), expected_status, current)

        try:
            validate_transition(current, target_status)
        except (InvalidTransitionError, UnknownStatusError) as e:
            logger.info(
                "status_transition_rejected",
                mock_exam_id=str(exam_id),
                current_status=current,
                target_status=target_status,
                error_type=e.error_type,
            )
            raise
        target = parse_status(target_status).value

        progress = None
        if stage_data is not None and stage_data.has_content():
            if stage_data.completed:
                ensure_stage_complete(target, stage_data.requirements)
            progress = await self.stage_repo.upsert(
                exam.id,
                target,
                stage_data.requirements,
                notes=stage_data.notes,
                completed=stage_data.completed,
                completed_by=changed_by,
            )

        swapped = await self.exam_repo.compare_and_set_status(exam.id, current, target)
        if not swapped:
            raise StaleStatusError(str(exam_id), current)

        await self.history_repo.create(
            mock_exam_id=exam.id,
            old_status=current,
            new_status=target,
            change_reason=reason,
            changed_by=changed_by,
        )

        await self.session.refresh(exam)

        logger.info(
            "status_transitioned",
            mock_exam_id=str(exam.id),
            previous_status=current,
            new_status=target,
            changed_by=str(changed_by) if changed_by else None,
        )

        return TransitionResult(
            exam=exam,
            previous_status=current,
            stage_progress=progress,
            new_status=target,
            changed_by=changed_by,
            reason=reason,
        )

    async def publish_transition(self, result: TransitionResult) -> bool:
        """Announce a committed transition; sets result.event_published."""
        result.event_published = await publish_status_change(
            self.redis,
            result.exam.id,
            result.exam.company_id,
            result.previous_status,
            result.new_status or result.exam.status,
            changed_by=result.changed_by,
            reason=result.reason,
        )
        return result.event_published

    async def describe_transitions(self, exam_id: str | UUID) -> dict[str, Any]:
        """Current status, whether it is terminal, and the stages reachable from it."""
        exam = await self._get_exam(exam_id)
        current = parse_status(exam.status)
        return {
            "mock_exam_id": exam.id,
            "current_status": current.value,
            "is_terminal": current in TERMINAL_STATUSES,
            "allowed": [STAGE_DEFINITIONS[s] for s in allowed_targets(current)],
        }
