"""PL/pgSQL rendition of the status state machine.

The SQL is generated from VALID_TRANSITIONS so the database-side guard and
the Python validator evaluate the same table in the same rule order. Alembic
revisions keep a frozen copy of this output; tests compare the two.
"""

from __future__ import annotations

from exam_lifecycle.state_machine import (
    STATUS_ORDER,
    TERMINAL_STATUSES,
    VALID_TRANSITIONS,
    ExamStatus,
)

TRANSITION_FUNCTION = "validate_status_transition"
GUARD_FUNCTION = "mock_exams_status_guard"
GUARD_TRIGGER = "trg_mock_exams_status_guard"


def _quote_list(statuses) -> str:
    ordered = sorted(statuses, key=lambda s: STATUS_ORDER[s])
    return ", ".join(f"'{s.value}'" for s in ordered)


def render_transition_function(name: str = TRANSITION_FUNCTION) -> str:
    """CREATE OR REPLACE statement for the boolean transition function."""
    branches = []
    for status in ExamStatus:
        if status in TERMINAL_STATUSES:
            continue
        branches.append(
            f"    WHEN '{status.value}' THEN new_status IN ({_quote_list(VALID_TRANSITIONS[status])})"
        )
    case_body = "\n".join(branches)
    return f"""CREATE OR REPLACE FUNCTION {name}(current_status text, new_status text)
RETURNS boolean
LANGUAGE plpgsql
IMMUTABLE
AS $$
BEGIN
  IF new_status = '{ExamStatus.cancelled.value}' THEN
    RETURN true;
  END IF;

  IF current_status = '{ExamStatus.cancelled.value}' AND new_status = '{ExamStatus.draft.value}' THEN
    RETURN true;
  END IF;

  IF current_status IN ({_quote_list(TERMINAL_STATUSES)}) THEN
    RETURN false;
  END IF;

  RETURN COALESCE(CASE current_status
{case_body}
    ELSE false
  END, false);
END;
$$"""


def render_status_guard_trigger(
    table: str = "mock_exams",
    function_name: str = TRANSITION_FUNCTION,
) -> list[str]:
    """Statements installing a BEFORE UPDATE trigger that rejects invalid status changes."""
    return [
        f"""CREATE OR REPLACE FUNCTION {GUARD_FUNCTION}()
RETURNS trigger
LANGUAGE plpgsql
AS $$
BEGIN
  IF NEW.status IS DISTINCT FROM OLD.status
     AND NOT {function_name}(OLD.status, NEW.status) THEN
    RAISE EXCEPTION 'invalid status transition: % -> %', OLD.status, NEW.status
      USING ERRCODE = 'check_violation';
  END IF;
  RETURN NEW;
END;
$$""",
        f"DROP TRIGGER IF EXISTS {GUARD_TRIGGER} ON {table}",
        f"""CREATE TRIGGER {GUARD_TRIGGER}
  BEFORE UPDATE OF status ON {table}
  FOR EACH ROW EXECUTE FUNCTION {GUARD_FUNCTION}()""",
    ]


def drop_statements(
    table: str = "mock_exams",
    function_name: str = TRANSITION_FUNCTION,
) -> list[str]:
    return [
        f"DROP TRIGGER IF EXISTS {GUARD_TRIGGER} ON {table}",
        f"DROP FUNCTION IF EXISTS {GUARD_FUNCTION}()",
        f"DROP FUNCTION IF EXISTS {function_name}(text, text)",
    ]
