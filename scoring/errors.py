"""
Typed failures raised by the scoring engine.

Every expected rejection carries a stable ``error_code`` and the HTTP status
the route layer answers with, so callers never have to parse messages.
"""

from typing import Any, Dict, Optional


class ScoringError(Exception):
    """Base class for all expected scoring-engine failures."""

    status_code = 400
    default_code = "scoring_error"

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "code": self.error_code,
            "details": self.details,
        }


class AttemptLimitExceeded(ScoringError):
    """Raised when a student has used every attempt a quiz allows."""

    status_code = 403
    default_code = "attempt_limit_exceeded"

    def __init__(self, limit: int):
        super().__init__(
            f"You have reached the maximum number of attempts ({limit}) for this quiz",
            details={"max_attempts": limit},
        )
        self.limit = limit


class AttemptAlreadyCompleted(ScoringError):
    """Raised when answers are submitted for an attempt that is already finalized."""

    status_code = 409
    default_code = "attempt_already_completed"

    def __init__(self, attempt_id: Optional[int] = None):
        super().__init__(
            "This attempt has already been submitted",
            details={"attempt_id": attempt_id},
        )


class AssignmentNotOpen(ScoringError):
    default_code = "assignment_not_open"

    def __init__(self, status: Optional[str] = None):
        super().__init__("Assignment is not available for submission", details={"status": status})


class PastDueDate(ScoringError):
    default_code = "past_due_date"

    def __init__(self, due_date=None):
        super().__init__(
            "Assignment submission is past the due date",
            details={"due_date": due_date.isoformat() if due_date else None},
        )


class NotEnrolled(ScoringError):
    status_code = 403
    default_code = "not_enrolled"

    def __init__(self, message: str = "You are not enrolled in this class"):
        super().__init__(message)


class InvalidGrade(ScoringError):
    default_code = "invalid_grade"

    def __init__(self, message: str = "Grade must be a non-negative number"):
        super().__init__(message)


class AccessDenied(ScoringError):
    status_code = 403
    default_code = "access_denied"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class InvalidAttendanceStatus(ScoringError):
    default_code = "invalid_attendance_status"

    def __init__(self, status):
        super().__init__(f"Unknown attendance status: {status}", details={"status": status})
