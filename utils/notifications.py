"""In-app and email notifications for grading and submission events.

Every dispatch is best-effort: failures are logged and never reach the caller.
"""

import logging

from models import db
from models.notifications import Notification
from utils.email import send_email

logger = logging.getLogger(__name__)


def create_user_notification(user_id, title, message, notification_type="message"):
    try:
        db.session.add(Notification(user_id=user_id, title=title, message=message, type=notification_type))
        db.session.commit()
        return True
    except Exception:
        db.session.rollback()
        logger.exception("Error creating notification for user %s", user_id)
        return False


def notify_submission(assignment, student, professor, is_resubmission):
    try:
        verb = "resubmitted" if is_resubmission else "submitted"
        message = f'{student.full_name} has {verb} assignment "{assignment.title}"'
        create_user_notification(assignment.professor_id, "Assignment Submission", message, "assignment")
        if professor is not None and professor.email:
            if not send_email(professor.email, f"Assignment {verb}: {assignment.title}", message):
                logger.error("Failed to send assignment submission email for assignment %s", assignment.id)
    except Exception:
        logger.exception("Error notifying submission on assignment %s", getattr(assignment, "id", None))


def notify_graded(submission, assignment, student):
    try:
        message = f'Your assignment "{assignment.title}" has been graded: {submission.grade:g}'
        create_user_notification(student.id, "Assignment Graded", message, "assignment_graded")
        if student.email:
            body = message
            if submission.grader_feedback:
                body += f"\n\nFeedback:\n{submission.grader_feedback}"
            if not send_email(student.email, f"Assignment graded: {assignment.title}", body):
                logger.error("Failed to send graded email for submission %s", submission.id)
    except Exception:
        logger.exception("Error notifying grade for submission %s", getattr(submission, "id", None))
