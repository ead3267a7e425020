"""Shared pytest fixtures for the mock exam lifecycle service.

- Mock database session and Redis client for unit tests
- ASGI test client with the database dependency overridden
- Model factories that build detached ORM instances
"""

from collections.abc import AsyncGenerator
from datetime import date, datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ===========================================
# DATABASE SESSION FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncMock, None]:
    """Mock async database session for unit tests."""
    session = AsyncMock()
    session.add = MagicMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    yield session


# ===========================================
# REDIS MOCK FIXTURES
# ===========================================


@pytest.fixture
def mock_redis_client() -> MagicMock:
    """Mock Redis client exposing the pub/sub calls the service makes."""
    redis = MagicMock()
    redis.publish = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    return redis


# ===========================================
# HTTP CLIENT FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def async_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """ASGI client; lifespan is not run so no database or Redis is needed."""
    from exam_lifecycle.database import get_db
    from exam_lifecycle.main import app

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ===========================================
# MODEL FACTORIES
# ===========================================


@pytest.fixture
def make_exam():
    """Build a detached MockExam with every column populated."""
    from exam_lifecycle.models import MockExam

    def _make(**overrides: Any) -> MockExam:
        now = utcnow()
        values: dict[str, Any] = {
            "id": uuid4(),
            "company_id": uuid4(),
            "title": "Year 11 Maths Mock",
            "status": "draft",
            "subject": "Mathematics",
            "paper_type": "Paper 1",
            "paper_number": 1,
            "scheduled_date": date(2026, 11, 20),
            "scheduled_time": None,
            "duration_minutes": 90,
            "delivery_mode": "In-person",
            "exam_window": "Term 1",
            "total_marks": 80,
            "readiness_score": 40,
            "ai_proctoring_enabled": False,
            "release_analytics": True,
            "allow_retakes": False,
            "notes": None,
            "created_by": None,
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        return MockExam(**values)

    return _make


@pytest.fixture
def make_history():
    from exam_lifecycle.models import MockExamStatusHistory

    def _make(**overrides: Any) -> MockExamStatusHistory:
        values: dict[str, Any] = {
            "id": uuid4(),
            "mock_exam_id": uuid4(),
            "old_status": "draft",
            "new_status": "planned",
            "change_reason": None,
            "changed_by": None,
            "created_at": utcnow(),
        }
        values.update(overrides)
        return MockExamStatusHistory(**values)

    return _make


@pytest.fixture
def make_stage_progress():
    from exam_lifecycle.models import MockExamStageProgress

    def _make(**overrides: Any) -> MockExamStageProgress:
        now = utcnow()
        values: dict[str, Any] = {
            "id": uuid4(),
            "mock_exam_id": uuid4(),
            "stage": "planned",
            "requirements": {"scope_confirmed": True},
            "completed": False,
            "completed_at": None,
            "completed_by": None,
            "notes": None,
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        return MockExamStageProgress(**values)

    return _make
