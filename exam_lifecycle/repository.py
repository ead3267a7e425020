"""Repository layer for mock exam database operations."""

import math
from datetime import date, datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import and_, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from exam_lifecycle.logging_config import get_logger
from exam_lifecycle.models import MockExam, MockExamStageProgress, MockExamStatusHistory

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MockExamRepository:
    """Repository for mock exam rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> MockExam:
        exam = MockExam(**kwargs)
        self.session.add(exam)
        await self.session.flush()
        await self.session.refresh(exam)
        return exam

    async def get_by_id(self, exam_id: str | UUID) -> MockExam | None:
        result = await self.session.execute(select(MockExam).where(MockExam.id == exam_id))
        return result.scalar_one_or_none()

    async def list_exams(
        self,
        company_id: str | UUID | None = None,
        status: str | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[MockExam], int]:
        conditions = []
        if company_id:
            conditions.append(MockExam.company_id == company_id)
        if status:
            conditions.append(MockExam.status == status)

        base_query = select(MockExam)
        if conditions:
            base_query = base_query.where(and_(*conditions))

        count_query = select(func.count()).select_from(base_query.subquery())
        total = (await self.session.execute(count_query)).scalar() or 0

        base_query = base_query.order_by(
            MockExam.scheduled_date.desc(), MockExam.created_at.desc()
        ).offset(offset).limit(limit)
        result = await self.session.execute(base_query)
        return list(result.scalars().all()), total

    async def compare_and_set_status(
        self,
        exam_id: str | UUID,
        expected_status: str,
        new_status: str,
    ) -> bool:
        """Move exam_id to new_status only if it is still in expected_status.

        Returns False when a concurrent writer changed the status first.
        """
        result = await self.session.execute(
            update(MockExam)
            .where(MockExam.id == exam_id, MockExam.status == expected_status)
            .values(status=new_status, updated_at=_utc_now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def count_by_status(self, company_id: str | UUID | None = None) -> dict[str, int]:
        query = select(MockExam.status, func.count()).group_by(MockExam.status)
        if company_id:
            query = query.where(MockExam.company_id == company_id)
        result = await self.session.execute(query)
        return {row[0]: row[1] for row in result.all()}

    async def aggregate_statistics(
        self,
        company_id: str | UUID | None = None,
        today: date | None = None,
    ) -> dict[str, Any]:
        today = today or date.today()
        upcoming = and_(MockExam.scheduled_date >= today, MockExam.status != "cancelled")
        query = select(
            func.count().label("total"),
            func.count().filter(upcoming).label("upcoming"),
            func.count().filter(MockExam.ai_proctoring_enabled.is_(True)).label("ai_enabled"),
            func.coalesce(func.avg(MockExam.readiness_score), 0).label("avg_readiness"),
        )
        if company_id:
            query = query.where(MockExam.company_id == company_id)
        row = (await self.session.execute(query)).one()
        return {
            "total": row.total or 0,
            "upcoming": row.upcoming or 0,
            "ai_enabled": row.ai_enabled or 0,
            # halves round up
            "avg_readiness": math.floor(float(row.avg_readiness or 0) + 0.5),
        }


class StatusHistoryRepository:
    """Repository for the append-only status history."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> MockExamStatusHistory:
        entry = MockExamStatusHistory(**kwargs)
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_for_exam(self, exam_id: str | UUID) -> list[MockExamStatusHistory]:
        result = await self.session.execute(
            select(MockExamStatusHistory)
            .where(MockExamStatusHistory.mock_exam_id == exam_id)
            .order_by(MockExamStatusHistory.created_at.desc())
        )
        return list(result.scalars().all())


class StageProgressRepository:
    """Repository for per-stage checklist progress."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(
        self,
        exam_id: str | UUID,
        stage: str,
        requirements: dict[str, Any],
        *,
        notes: str | None = None,
        completed: bool | None = None,
        completed_by: str | UUID | None = None,
    ) -> MockExamStageProgress:
        """Insert or update the (exam, stage) row.

        Only given fields are overwritten; an empty requirements dict keeps
        the saved checklist.
        """
        values: dict[str, Any] = {
            "mock_exam_id": exam_id,
            "stage": stage,
            "updated_at": _utc_now(),
        }
        if requirements:
            values["requirements"] = requirements
        if notes is not None:
            values["notes"] = notes
        if completed is not None:
            values["completed"] = completed
            values["completed_at"] = _utc_now() if completed else None
            values["completed_by"] = completed_by if completed else None

        stmt = pg_insert(MockExamStageProgress).values(**values)
        stmt = stmt.on_conflict_do_update(
            constraint="uq_stage_progress_exam_stage",
            set_={k: stmt.excluded[k] for k in values if k not in ("mock_exam_id", "stage")},
        ).returning(MockExamStageProgress)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def list_for_exam(self, exam_id: str | UUID) -> list[MockExamStageProgress]:
        result = await self.session.execute(
            select(MockExamStageProgress)
            .where(MockExamStageProgress.mock_exam_id == exam_id)
            .order_by(MockExamStageProgress.created_at)
        )
        return list(result.scalars().all())
