import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from models.assignment_submission import AssignmentSubmission
from scoring.attempt_ledger import is_valid_number
from scoring.constants import PublishStatus
from scoring.errors import AccessDenied, AssignmentNotOpen, InvalidGrade, NotEnrolled, PastDueDate
from scoring.settings import EngineSettings

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    submission: AssignmentSubmission
    is_resubmission: bool


class SubmissionLifecycle:
    """One live submission per (assignment, student).

    A resubmission overwrites the live row and clears any grade on it; no
    earlier version is kept.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()

    def submit(self, assignment, student_id, enrolled: bool, existing, file_url, feedback=None,
               original_file_name=None, now: Optional[datetime] = None) -> SubmissionResult:
        now = now or datetime.utcnow()

        status = getattr(assignment.status, "value", assignment.status)
        if status != PublishStatus.PUBLISHED.value:
            raise AssignmentNotOpen(status)
        if not enrolled:
            raise NotEnrolled()
        if assignment.due_date is not None and now > assignment.due_date:
            raise PastDueDate(assignment.due_date)

        if existing is not None:
            existing.file_url = file_url
            existing.original_file_name = original_file_name
            existing.feedback = feedback or None
            existing.submitted_at = now
            self._reset_grade(existing)
            logger.info("Student %s resubmitted assignment %s; grade reset", student_id, assignment.id)
            return SubmissionResult(submission=existing, is_resubmission=True)

        submission = AssignmentSubmission(
            assignment_id=assignment.id,
            student_id=student_id,
            file_url=file_url,
            original_file_name=original_file_name,
            feedback=feedback or None,
            submitted_at=now,
        )
        logger.info("Student %s submitted assignment %s", student_id, assignment.id)
        return SubmissionResult(submission=submission, is_resubmission=False)

    def grade(self, submission, assignment, grader_id, grade_value, feedback=None,
              now: Optional[datetime] = None) -> AssignmentSubmission:
        if assignment.professor_id != grader_id:
            raise AccessDenied("Submission not found or access denied")
        if grade_value is None:
            raise InvalidGrade("Grade is required")
        if not is_valid_number(grade_value) or grade_value < 0:
            raise InvalidGrade()

        submission.grade = float(grade_value)
        submission.grader_feedback = feedback or None
        submission.graded_at = now or datetime.utcnow()
        submission.graded_by = grader_id
        logger.info("Submission %s graded %s by %s", submission.id, grade_value, grader_id)
        return submission

    @staticmethod
    def _reset_grade(submission):
        submission.grade = None
        submission.grader_feedback = None
        submission.graded_at = None
        submission.graded_by = None

    @staticmethod
    def ungraded_count(submissions: Iterable) -> int:
        return sum(1 for submission in submissions if not submission.is_graded)

    def average_grade(self, values: Iterable, count_zero: Optional[bool] = None) -> float:
        """Mean of the recorded grades.

        Zero grades are dropped unless ``count_zero`` (or the settings) say
        otherwise.
        """
        if count_zero is None:
            count_zero = self.settings.count_zero_grades
        grades = [value for value in values if value is not None]
        if not count_zero:
            grades = [value for value in grades if value > 0]
        if not grades:
            return 0
        return round(sum(grades) / len(grades), 2)

    @staticmethod
    def summarize_submissions(enrolled_student_ids, submissions):
        submissions = list(submissions)
        submitted_ids = {submission.student_id for submission in submissions}
        enrolled = list(enrolled_student_ids)
        graded = sum(1 for submission in submissions if submission.is_graded)
        return {
            "total_enrolled": len(enrolled),
            "total_submitted": len(submissions),
            "total_graded": graded,
            "total_ungraded": SubmissionLifecycle.ungraded_count(submissions),
            "students_without_submission": [
                student_id for student_id in enrolled if student_id not in submitted_ids
            ],
        }
