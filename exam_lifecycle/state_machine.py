"""State machine for the mock exam lifecycle.

draft → planned → scheduled → materials_ready → in_progress → grading
      → moderation → analytics_released → completed
also: any → cancelled, cancelled → draft
"""

from __future__ import annotations

import enum
from functools import lru_cache

from exam_lifecycle.exceptions import InvalidTransitionError, UnknownStatusError


class ExamStatus(str, enum.Enum):
    draft = "draft"
    planned = "planned"
    scheduled = "scheduled"
    materials_ready = "materials_ready"
    in_progress = "in_progress"
    grading = "grading"
    moderation = "moderation"
    analytics_released = "analytics_released"
    completed = "completed"
    cancelled = "cancelled"


ALL_STATUSES: tuple[str, ...] = tuple(s.value for s in ExamStatus)

STATUS_ORDER: dict[ExamStatus, int] = {s: i for i, s in enumerate(ExamStatus, start=1)}

# completed is fully terminal; cancelled can only be revived to draft
TERMINAL_STATUSES: frozenset[ExamStatus] = frozenset(
    {ExamStatus.completed, ExamStatus.cancelled}
)

# Map of current_status → statuses it may move to
VALID_TRANSITIONS: dict[ExamStatus, frozenset[ExamStatus]] = {
    ExamStatus.draft: frozenset({ExamStatus.planned, ExamStatus.cancelled}),
    ExamStatus.planned: frozenset(
        {ExamStatus.draft, ExamStatus.scheduled, ExamStatus.cancelled}
    ),
    ExamStatus.scheduled: frozenset(
        {
            ExamStatus.planned,
            ExamStatus.materials_ready,
            ExamStatus.in_progress,
            ExamStatus.cancelled,
        }
    ),
    ExamStatus.materials_ready: frozenset(
        {ExamStatus.scheduled, ExamStatus.in_progress, ExamStatus.cancelled}
    ),
    ExamStatus.in_progress: frozenset({ExamStatus.grading, ExamStatus.cancelled}),
    ExamStatus.grading: frozenset(
        {ExamStatus.moderation, ExamStatus.analytics_released, ExamStatus.cancelled}
    ),
    ExamStatus.moderation: frozenset(
        {ExamStatus.grading, ExamStatus.analytics_released, ExamStatus.cancelled}
    ),
    ExamStatus.analytics_released: frozenset(
        {ExamStatus.completed, ExamStatus.cancelled}
    ),
    ExamStatus.completed: frozenset(),
    ExamStatus.cancelled: frozenset({ExamStatus.draft}),
}


def parse_status(value: str | ExamStatus) -> ExamStatus:
    """Convert raw text into an ExamStatus, raising UnknownStatusError if unrecognised."""
    if isinstance(value, ExamStatus):
        return value
    try:
        return ExamStatus(value)
    except ValueError:
        raise UnknownStatusError(value) from None


@lru_cache(maxsize=256)
def is_transition_allowed(current: str, proposed: str) -> bool:
    """Check whether a mock exam may move from current to proposed.

    Rules are evaluated in order and the first match wins:

    1. anything may be cancelled;
    2. a cancelled exam may be revived to draft;
    3. completed and cancelled are otherwise terminal;
    4. every other status may only move into its VALID_TRANSITIONS set.

    Unrecognised values are denied, never raised.
    """
    if proposed == ExamStatus.cancelled:
        return True
    if current == ExamStatus.cancelled and proposed == ExamStatus.draft:
        return True
    if current in TERMINAL_STATUSES:
        return False
    try:
        source = ExamStatus(current)
    except ValueError:
        return False
    return proposed in VALID_TRANSITIONS[source]


def allowed_targets(current: str | ExamStatus) -> list[ExamStatus]:
    """Every status reachable from current in one step, in lifecycle order."""
    return [s for s in ExamStatus if is_transition_allowed(current, s.value)]


def validate_transition(current: str | ExamStatus, proposed: str | ExamStatus) -> None:
    """Validate a status transition.

    Raises UnknownStatusError when either value is not a known status and
    InvalidTransitionError when the move is not permitted.
    """
    source = parse_status(current)
    target = parse_status(proposed)
    if not is_transition_allowed(source.value, target.value):
        raise InvalidTransitionError(
            source.value,
            target.value,
            [s.value for s in allowed_targets(source)],
        )


def status_check_clause(column: str = "status") -> str:
    """SQL CHECK expression restricting column to the known statuses."""
    values = ", ".join(f"'{s}'" for s in ALL_STATUSES)
    return f"{column} IN ({values})"
