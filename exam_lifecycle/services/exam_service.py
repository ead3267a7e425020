"""Service layer for mock exam records, history and statistics."""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from exam_lifecycle.config import INITIAL_STATUSES, get_settings
from exam_lifecycle.exceptions import InitialStatusError, MockExamNotFoundError
from exam_lifecycle.logging_config import get_logger
from exam_lifecycle.models import MockExam, MockExamStageProgress, MockExamStatusHistory
from exam_lifecycle.repository import (
    MockExamRepository,
    StageProgressRepository,
    StatusHistoryRepository,
)
from exam_lifecycle.state_machine import ExamStatus, parse_status

logger = get_logger(__name__)
settings = get_settings()


class ExamService:
    """Handles mock exam creation and read models."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.exam_repo = MockExamRepository(session)
        self.history_repo = StatusHistoryRepository(session)
        self.stage_repo = StageProgressRepository(session)

    async def create_exam(
        self,
        company_id: UUID,
        title: str,
        scheduled_date: date,
        status: str = ExamStatus.draft.value,
        created_by: UUID | None = None,
        **fields: Any,
    ) -> MockExam:
        """Create a mock exam and record its initial status in the history."""
        initial = parse_status(status)
        if initial.value not in INITIAL_STATUSES:
            raise InitialStatusError(initial.value, list(INITIAL_STATUSES))

        exam = await self.exam_repo.create(
            id=uuid4(),
            company_id=company_id,
            title=title,
            scheduled_date=scheduled_date,
            status=initial.value,
            created_by=created_by,
            **{k: v for k, v in fields.items() if v is not None},
        )
        await self.history_repo.create(
            mock_exam_id=exam.id,
            old_status=None,
            new_status=initial.value,
            change_reason="created",
            changed_by=created_by,
        )
        logger.info(
            "mock_exam_created",
            mock_exam_id=str(exam.id),
            company_id=str(company_id),
            status=initial.value,
        )
        return exam

    async def get_exam(self, exam_id: str | UUID) -> MockExam:
        exam = await self.exam_repo.get_by_id(exam_id)
        if exam is None:
            raise MockExamNotFoundError(str(exam_id))
        return exam

    async def list_exams(
        self,
        company_id: UUID | None = None,
        status: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> dict[str, Any]:
        if status is not None:
            status = parse_status(status).value
        limit = min(limit or settings.default_page_size, settings.max_page_size)
        items, total = await self.exam_repo.list_exams(company_id, status, offset, limit)
        return {
            "items": items,
            "total": total,
            "page": offset // limit + 1,
            "per_page": limit,
        }

    async def get_statistics(
        self,
        company_id: UUID | None = None,
        today: date | None = None,
    ) -> dict[str, Any]:
        stats = await self.exam_repo.aggregate_statistics(company_id, today=today)
        counts = await self.exam_repo.count_by_status(company_id)
        stats["by_status"] = {s.value: counts.get(s.value, 0) for s in ExamStatus}
        return stats

    async def get_status_history(self, exam_id: str | UUID) -> list[MockExamStatusHistory]:
        await self.get_exam(exam_id)
        return await self.history_repo.list_for_exam(exam_id)

    async def get_stage_progress(self, exam_id: str | UUID) -> list[MockExamStageProgress]:
        await self.get_exam(exam_id)
        return await self.stage_repo.list_for_exam(exam_id)
