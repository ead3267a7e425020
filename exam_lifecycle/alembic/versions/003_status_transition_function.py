"""Add validate_status_transition() and the mock_exams status guard trigger.

Revision ID: 003
Revises: 002
Create Date: 2026-10-14
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Frozen output of exam_lifecycle.sql_functions at this revision. A changed
# transition table ships as a new revision that replaces the function.
TRANSITION_FUNCTION_SQL = """CREATE OR REPLACE FUNCTION validate_status_transition(current_status text, new_status text)
RETURNS boolean
LANGUAGE plpgsql
IMMUTABLE
AS $$
BEGIN
  IF new_status = 'cancelled' THEN
    RETURN true;
  END IF;

  IF current_status = 'cancelled' AND new_status = 'draft' THEN
    RETURN true;
  END IF;

  IF current_status IN ('completed', 'cancelled') THEN
    RETURN false;
  END IF;

  RETURN COALESCE(CASE current_status
    WHEN 'draft' THEN new_status IN ('planned', 'cancelled')
    WHEN 'planned' THEN new_status IN ('draft', 'scheduled', 'cancelled')
    WHEN 'scheduled' THEN new_status IN ('planned', 'materials_ready', 'in_progress', 'cancelled')
    WHEN 'materials_ready' THEN new_status IN ('scheduled', 'in_progress', 'cancelled')
    WHEN 'in_progress' THEN new_status IN ('grading', 'cancelled')
    WHEN 'grading' THEN new_status IN ('moderation', 'analytics_released', 'cancelled')
    WHEN 'moderation' THEN new_status IN ('grading', 'analytics_released', 'cancelled')
    WHEN 'analytics_released' THEN new_status IN ('completed', 'cancelled')
    ELSE false
  END, false);
END;
$$"""

GUARD_STATEMENTS = [
    """CREATE OR REPLACE FUNCTION mock_exams_status_guard()
RETURNS trigger
LANGUAGE plpgsql
AS $$
BEGIN
  IF NEW.status IS DISTINCT FROM OLD.status
     AND NOT validate_status_transition(OLD.status, NEW.status) THEN
    RAISE EXCEPTION 'invalid status transition: % -> %', OLD.status, NEW.status
      USING ERRCODE = 'check_violation';
  END IF;
  RETURN NEW;
END;
$$""",
    "DROP TRIGGER IF EXISTS trg_mock_exams_status_guard ON mock_exams",
    """CREATE TRIGGER trg_mock_exams_status_guard
  BEFORE UPDATE OF status ON mock_exams
  FOR EACH ROW EXECUTE FUNCTION mock_exams_status_guard()""",
]

DROP_STATEMENTS = [
    "DROP TRIGGER IF EXISTS trg_mock_exams_status_guard ON mock_exams",
    "DROP FUNCTION IF EXISTS mock_exams_status_guard()",
    "DROP FUNCTION IF EXISTS validate_status_transition(text, text)",
]


def upgrade() -> None:
    op.execute(TRANSITION_FUNCTION_SQL)
    for statement in GUARD_STATEMENTS:
        op.execute(statement)


def downgrade() -> None:
    for statement in DROP_STATEMENTS:
        op.execute(statement)
