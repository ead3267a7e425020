"""Custom exceptions for the mock exam service."""

from fastapi import HTTPException, status


class ExamServiceError(Exception):
    """Base exception for mock exam service errors."""

    def __init__(self, message: str, error_type: str = "exam_service_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(message)


class MockExamNotFoundError(ExamServiceError):
    """Raised when a mock exam is not found."""

    def __init__(self, identifier: str):
        super().__init__(
            f"Mock exam '{identifier}' not found",
            "mock_exam_not_found",
        )
        self.identifier = identifier


class UnknownStatusError(ExamServiceError):
    """Raised when a value is not one of the known exam statuses."""

    def __init__(self, value: object):
        super().__init__(
            f"Unknown exam status: {value!r}",
            "unknown_status",
        )
        self.value = value


class InvalidTransitionError(ExamServiceError):
    """Raised when a status transition is not permitted."""

    def __init__(
        self,
        current_status: str,
        target_status: str,
        allowed: list[str] | None = None,
    ):
        self.allowed = allowed or []
        super().__init__(
            f"Invalid status transition: '{current_status}' → '{target_status}'. "
            f"Allowed from '{current_status}': {self.allowed}",
            "invalid_status_transition",
        )
        self.current_status = current_status
        self.target_status = target_status


class StaleStatusError(ExamServiceError):
    """Raised when the stored status changed between read and write."""

    def __init__(self, exam_id: str, expected_status: str, actual_status: str | None = None):
        detail = f"Mock exam '{exam_id}' is no longer in status '{expected_status}'"
        if actual_status is not None:
            detail += f" (now '{actual_status}')"
        super().__init__(detail, "stale_status")
        self.exam_id = exam_id
        self.expected_status = expected_status
        self.actual_status = actual_status


class StageRequirementsError(ExamServiceError):
    """Raised when a stage is marked complete with required items missing."""

    def __init__(self, stage: str, missing: list[str]):
        super().__init__(
            f"Stage '{stage}' cannot be completed, missing: {', '.join(missing)}",
            "stage_requirements_missing",
        )
        self.stage = stage
        self.missing = missing


class InitialStatusError(ExamServiceError):
    """Raised when a mock exam is created in a status past planning."""

    def __init__(self, requested: str, allowed: list[str]):
        super().__init__(
            f"New mock exams must start in one of {allowed}, not '{requested}'",
            "invalid_initial_status",
        )
        self.requested = requested
        self.allowed = allowed


def raise_http_exception(error: ExamServiceError) -> None:
    """Convert ExamServiceError to HTTPException."""
    status_map = {
        "mock_exam_not_found": status.HTTP_404_NOT_FOUND,
        "unknown_status": status.HTTP_422_UNPROCESSABLE_ENTITY,
        "invalid_status_transition": status.HTTP_409_CONFLICT,
        "stale_status": status.HTTP_409_CONFLICT,
        "stage_requirements_missing": status.HTTP_422_UNPROCESSABLE_ENTITY,
        "invalid_initial_status": status.HTTP_400_BAD_REQUEST,
        "exam_service_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
    }

    raise HTTPException(
        status_code=status_map.get(error.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={
            "type": error.error_type,
            "title": error.error_type.replace("_", " ").title(),
            "status": status_map.get(error.error_type, 500),
            "detail": error.message,
        },
    )
