"""Tests for the mock exam status state machine."""

import random

import pytest

from exam_lifecycle.exceptions import InvalidTransitionError, UnknownStatusError
from exam_lifecycle.state_machine import (
    ALL_STATUSES,
    STATUS_ORDER,
    TERMINAL_STATUSES,
    VALID_TRANSITIONS,
    ExamStatus,
    allowed_targets,
    is_transition_allowed,
    parse_status,
    status_check_clause,
    validate_transition,
)

NON_TERMINAL = [s.value for s in ExamStatus if s not in TERMINAL_STATUSES]


class TestIsTransitionAllowed:
    """Test is_transition_allowed against the lifecycle table."""

    def test_draft_to_planned(self):
        assert is_transition_allowed("draft", "planned") is True

    def test_draft_to_scheduled_invalid(self):
        assert is_transition_allowed("draft", "scheduled") is False

    def test_planned_back_to_draft(self):
        assert is_transition_allowed("planned", "draft") is True

    def test_scheduled_skips_materials(self):
        assert is_transition_allowed("scheduled", "in_progress") is True

    def test_materials_ready_back_to_scheduled(self):
        assert is_transition_allowed("materials_ready", "scheduled") is True

    def test_in_progress_to_scheduled_invalid(self):
        assert is_transition_allowed("in_progress", "scheduled") is False

    def test_grading_moderation_round_trip(self):
        assert is_transition_allowed("grading", "moderation") is True
        assert is_transition_allowed("moderation", "grading") is True

    def test_grading_skips_moderation(self):
        assert is_transition_allowed("grading", "analytics_released") is True

    def test_analytics_released_to_completed(self):
        assert is_transition_allowed("analytics_released", "completed") is True

    def test_grading_to_completed_invalid(self):
        assert is_transition_allowed("grading", "completed") is False

    def test_self_transition_invalid(self):
        assert is_transition_allowed("draft", "draft") is False
        assert is_transition_allowed("grading", "grading") is False

    def test_cancelled_revives_to_draft(self):
        assert is_transition_allowed("cancelled", "draft") is True

    def test_cancelled_to_planned_invalid(self):
        assert is_transition_allowed("cancelled", "planned") is False

    def test_completed_to_draft_invalid(self):
        assert is_transition_allowed("completed", "draft") is False

    def test_completed_to_cancelled_allowed(self):
        """Cancellation is checked before terminality."""
        assert is_transition_allowed("completed", "cancelled") is True

    def test_cancelled_to_cancelled_allowed(self):
        assert is_transition_allowed("cancelled", "cancelled") is True

    def test_unknown_current_denied(self):
        assert is_transition_allowed("archived", "planned") is False

    def test_unknown_proposed_denied(self):
        assert is_transition_allowed("draft", "archived") is False

    def test_unknown_current_can_still_cancel(self):
        assert is_transition_allowed("archived", "cancelled") is True

    def test_empty_strings_denied(self):
        assert is_transition_allowed("", "") is False
        assert is_transition_allowed("draft", "") is False

    def test_case_sensitive(self):
        assert is_transition_allowed("Draft", "planned") is False
        assert is_transition_allowed("draft", "Planned") is False

    def test_accepts_enum_members(self):
        assert is_transition_allowed(ExamStatus.draft, ExamStatus.planned) is True


class TestLifecycleProperties:
    """Properties that must hold across every status pair."""

    def test_cancel_from_anywhere(self):
        for current in [*ALL_STATUSES, "unknown", ""]:
            assert is_transition_allowed(current, "cancelled") is True

    def test_completed_only_leaves_to_cancelled(self):
        for proposed in ALL_STATUSES:
            expected = proposed == "cancelled"
            assert is_transition_allowed("completed", proposed) is expected

    def test_cancelled_only_leaves_to_draft_or_cancelled(self):
        for proposed in ALL_STATUSES:
            expected = proposed in ("draft", "cancelled")
            assert is_transition_allowed("cancelled", proposed) is expected

    def test_table_matches_predicate_for_non_terminal_sources(self):
        for current in NON_TERMINAL:
            for proposed in ALL_STATUSES:
                expected = ExamStatus(proposed) in VALID_TRANSITIONS[ExamStatus(current)]
                if proposed == "cancelled":
                    expected = True
                assert is_transition_allowed(current, proposed) is expected, (current, proposed)

    def test_every_non_terminal_status_can_be_cancelled_by_table(self):
        for current in NON_TERMINAL:
            assert ExamStatus.cancelled in VALID_TRANSITIONS[ExamStatus(current)]

    def test_forward_path_reaches_completed(self):
        path = [
            "draft", "planned", "scheduled", "materials_ready", "in_progress",
            "grading", "moderation", "analytics_released", "completed",
        ]
        for current, proposed in zip(path, path[1:]):
            assert is_transition_allowed(current, proposed) is True

    def test_repeat_calls_agree(self):
        rng = random.Random(1234)
        pool = [*ALL_STATUSES, "unknown", ""]
        for _ in range(500):
            current, proposed = rng.choice(pool), rng.choice(pool)
            first = is_transition_allowed(current, proposed)
            assert is_transition_allowed(current, proposed) is first


class TestTransitionTable:
    """Structural checks on VALID_TRANSITIONS and friends."""

    def test_every_status_has_an_entry(self):
        assert set(VALID_TRANSITIONS) == set(ExamStatus)

    def test_targets_are_known_statuses(self):
        for targets in VALID_TRANSITIONS.values():
            assert targets <= set(ExamStatus)

    def test_completed_has_no_targets(self):
        assert VALID_TRANSITIONS[ExamStatus.completed] == frozenset()

    def test_status_order_is_lifecycle_order(self):
        assert STATUS_ORDER[ExamStatus.draft] == 1
        assert STATUS_ORDER[ExamStatus.cancelled] == 10
        assert sorted(STATUS_ORDER.values()) == list(range(1, 11))

    def test_all_statuses(self):
        assert len(ALL_STATUSES) == 10
        assert ALL_STATUSES[0] == "draft"


class TestAllowedTargets:
    def test_draft(self):
        assert allowed_targets("draft") == [ExamStatus.planned, ExamStatus.cancelled]

    def test_in_lifecycle_order(self):
        targets = allowed_targets("scheduled")
        assert targets == sorted(targets, key=lambda s: STATUS_ORDER[s])
        assert targets == [
            ExamStatus.planned,
            ExamStatus.materials_ready,
            ExamStatus.in_progress,
            ExamStatus.cancelled,
        ]

    def test_completed(self):
        assert allowed_targets("completed") == [ExamStatus.cancelled]

    def test_cancelled(self):
        assert allowed_targets("cancelled") == [ExamStatus.draft, ExamStatus.cancelled]


class TestParseStatus:
    def test_known(self):
        assert parse_status("grading") is ExamStatus.grading

    def test_enum_passthrough(self):
        assert parse_status(ExamStatus.moderation) is ExamStatus.moderation

    def test_unknown_raises(self):
        with pytest.raises(UnknownStatusError) as exc_info:
            parse_status("archived")
        assert exc_info.value.error_type == "unknown_status"
        assert exc_info.value.value == "archived"


class TestValidateTransition:
    """validate_transition raises instead of returning False."""

    def test_valid_transition_no_error(self):
        validate_transition("draft", "planned")

    def test_invalid_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_transition("draft", "grading")
        assert exc_info.value.current_status == "draft"
        assert exc_info.value.target_status == "grading"
        assert exc_info.value.allowed == ["planned", "cancelled"]
        assert "draft" in exc_info.value.message

    def test_unknown_target_raises_unknown(self):
        with pytest.raises(UnknownStatusError):
            validate_transition("draft", "archived")

    def test_unknown_source_raises_unknown_even_for_cancel(self):
        with pytest.raises(UnknownStatusError):
            validate_transition("archived", "cancelled")

    def test_terminal_completed(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_transition("completed", "analytics_released")
        assert exc_info.value.allowed == ["cancelled"]


class TestStatusCheckClause:
    def test_default_column(self):
        clause = status_check_clause()
        assert clause.startswith("status IN (")
        for status in ALL_STATUSES:
            assert f"'{status}'" in clause

    def test_custom_column(self):
        assert status_check_clause("new_status").startswith("new_status IN ('draft', ")
