"""Stage checklists for each lifecycle status.

Every status doubles as a stage whose checklist is captured while an exam is
moved into it. A stage can only be marked completed once its required items
are filled in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from exam_lifecycle.exceptions import StageRequirementsError
from exam_lifecycle.state_machine import ExamStatus, parse_status


@dataclass(frozen=True)
class StageDefinition:
    status: ExamStatus
    label: str
    description: str
    required: tuple[str, ...]
    optional: tuple[str, ...] = field(default_factory=tuple)


STAGE_DEFINITIONS: dict[ExamStatus, StageDefinition] = {
    d.status: d
    for d in (
        StageDefinition(
            ExamStatus.draft,
            "Draft",
            "Capture the core exam brief before sharing with stakeholders.",
            required=("briefing_complete",),
            optional=("intended_cohort", "notes"),
        ),
        StageDefinition(
            ExamStatus.planned,
            "Planned",
            "Confirm timing, communication, and staffing before publishing the mock.",
            required=("scope_confirmed",),
            optional=("communication_date", "teacher_briefing_date", "notes"),
        ),
        StageDefinition(
            ExamStatus.scheduled,
            "Scheduled",
            "Lock in venues, invigilators, and operational readiness.",
            required=("venue_confirmed", "invigilators_assigned"),
            optional=("access_arrangement_checks", "notes"),
        ),
        StageDefinition(
            ExamStatus.materials_ready,
            "Materials ready",
            "Finalise papers, mark schemes, and briefing packs.",
            required=("paper_version", "mark_scheme_ready", "qa_checks_complete"),
            optional=("notes",),
        ),
        StageDefinition(
            ExamStatus.in_progress,
            "In progress",
            "Track exam delivery and any incidents requiring intervention.",
            required=("exam_start_time",),
            optional=("incidents_reported", "notes"),
        ),
        StageDefinition(
            ExamStatus.grading,
            "Grading",
            "Assign markers and agree the marking deadline.",
            required=("markers_assigned", "marking_deadline"),
            optional=("notes",),
        ),
        StageDefinition(
            ExamStatus.moderation,
            "Moderation",
            "Moderate a sample of scripts and record the findings.",
            required=("moderation_lead",),
            optional=("moderation_summary", "notes"),
        ),
        StageDefinition(
            ExamStatus.analytics_released,
            "Analytics released",
            "Publish results and analytics to students and staff.",
            required=("release_date",),
            optional=("release_channels", "notes"),
        ),
        StageDefinition(
            ExamStatus.completed,
            "Completed",
            "Close the mock with a post-exam review.",
            required=("post_exam_review",),
            optional=("intervention_plan", "notes"),
        ),
        StageDefinition(
            ExamStatus.cancelled,
            "Cancelled",
            "Record why the mock was cancelled.",
            required=("cancellation_reason",),
        ),
    )
}


def get_stage(stage: str | ExamStatus) -> StageDefinition:
    return STAGE_DEFINITIONS[parse_status(stage)]


def _is_filled(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) > 0
    return True


def missing_requirements(stage: str | ExamStatus, requirements: dict[str, Any] | None) -> list[str]:
    """Required checklist keys that are absent, unchecked, or blank."""
    data = requirements or {}
    return [key for key in get_stage(stage).required if not _is_filled(data.get(key))]


def ensure_stage_complete(stage: str | ExamStatus, requirements: dict[str, Any] | None) -> None:
    """Raise StageRequirementsError when the stage checklist is incomplete."""
    missing = missing_requirements(stage, requirements)
    if missing:
        raise StageRequirementsError(parse_status(stage).value, missing)
