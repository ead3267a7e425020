"""Status change events: publish to Redis pub/sub."""

import json
from datetime import datetime, timezone
from uuid import UUID

from exam_lifecycle.logging_config import get_logger

logger = get_logger(__name__)


def status_channel(company_id: UUID | str) -> str:
    return f"mock_exams:{company_id}:status"


async def publish_status_change(
    redis,
    exam_id: UUID,
    company_id: UUID,
    old_status: str,
    new_status: str,
    changed_by: UUID | None = None,
    reason: str | None = None,
) -> bool:
    """
    Publish a status_changed event for a mock exam.

    Args:
        redis: Redis connection, or None when publishing is disabled
        exam_id: Mock exam UUID
        company_id: Owning company (selects the channel)
        old_status: Status before the transition
        new_status: Status after the transition
        changed_by: User who made the change (optional)
        reason: Free-text change reason (optional)

    Returns True when the event was handed to Redis.
    """
    if redis is None:
        return False

    channel = status_channel(company_id)
    event = json.dumps({
        "event": "status_changed",
        "mock_exam_id": str(exam_id),
        "old_status": old_status,
        "new_status": new_status,
        "changed_by": str(changed_by) if changed_by else None,
        "reason": reason,
        "occurred_at": datetime.now(timezone.utc).isoformat(),
    })
    try:
        await redis.publish(channel, event)
    except Exception as e:
        logger.warning("redis_publish_failed", channel=channel, error=str(e))
        return False

    logger.debug("status_event_published", channel=channel, mock_exam_id=str(exam_id))
    return True
