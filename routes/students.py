import logging
from datetime import date, datetime, timedelta
from flask import Blueprint, jsonify, request, current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.users import User
from models.quizzes import Quiz
from models.quiz_attempts import QuizAttempt
from models.enrolments import Enrolment
from models.assignment import Assignment
from models.assignment_submission import AssignmentSubmission
from models.attendance import AttendanceSession
from scoring import report_projector
from scoring.attempt_ledger import AttemptLedger
from scoring.attendance_aggregator import AttendanceAggregator
from scoring.constants import PublishStatus, ROLE_STUDENT
from scoring.errors import NotEnrolled
from scoring.score_rules import SubmittedAnswer
from scoring.submission_lifecycle import SubmissionLifecycle
from utils.helpers import engine_settings, parse_bool, parse_client_timestamp
from utils.notifications import notify_submission
from utils.uploads import UploadRejected, build_file_url, file_size, remove_upload, store_upload, validate_upload
from utils.utils import role_required, current_user_id

logger = logging.getLogger(__name__)

student_bp = Blueprint("student", __name__)


def _is_enrolled(student_id, class_id):
    return Enrolment.query.filter_by(student_id=student_id, class_id=class_id).first() is not None


def _existing_submission(assignment_id, student_id):
    return AssignmentSubmission.query.filter_by(assignment_id=assignment_id, student_id=student_id).first()


#Start a new quiz attempt
@student_bp.route("/quizzes/<int:quiz_id>/start", methods=["POST"])
@role_required(ROLE_STUDENT)
def start_quiz(quiz_id):
    student_id = current_user_id()

    quiz = db.session.get(Quiz, quiz_id)
    if not quiz or quiz.status != PublishStatus.PUBLISHED.value:
        return jsonify({"error": "Quiz not found or not available"}), 404
    if not _is_enrolled(student_id, quiz.class_id):
        raise NotEnrolled()

    ledger = AttemptLedger(engine_settings())
    prior = QuizAttempt.query.filter_by(quiz_id=quiz.id, student_id=student_id).count()
    attempt = ledger.start_attempt(quiz, student_id, prior)

    db.session.add(attempt)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request took the same attempt number first
        db.session.rollback()
        logger.warning("Concurrent start on quiz %s for student %s", quiz.id, student_id)
        return jsonify({"error": "An attempt for this quiz was started concurrently"}), 409

    return jsonify({
        "attempt_id": attempt.id,
        "attempt_number": attempt.attempt_number,
        "started_at": attempt.started_at.isoformat(),
        "attempts_left": ledger.attempts_left(quiz, attempt.attempt_number),
        "time_limit": quiz.time_limit,
        "questions": [question.to_dict() for question in quiz.questions],
    }), 201


#Submit answers for an open attempt
@student_bp.route("/quizzes/attempts/<int:attempt_id>/submit", methods=["POST"])
@role_required(ROLE_STUDENT)
def submit_quiz(attempt_id):
    student_id = current_user_id()
    data = request.get_json(silent=True) or {}

    attempt = db.session.get(QuizAttempt, attempt_id)
    if not attempt or attempt.student_id != student_id:
        return jsonify({"error": "Attempt not found"}), 404

    try:
        answers = [SubmittedAnswer.from_payload(item) for item in data.get("answers", [])]
    except (TypeError, ValueError, AttributeError):
        return jsonify({"error": "Malformed answers payload"}), 400

    quiz = attempt.quiz
    ledger = AttemptLedger(engine_settings())
    started_at = parse_client_timestamp(data.get("start_time") or data.get("started_at"))
    result = ledger.submit_answers(attempt, quiz, answers, started_at=started_at)
    db.session.commit()

    used = QuizAttempt.query.filter_by(quiz_id=quiz.id, student_id=student_id).count()
    return jsonify(report_projector.quiz_submission(attempt, result, ledger.attempts_left(quiz, used)))


#Student's own attempt history for a quiz
@student_bp.route("/quizzes/<int:quiz_id>/attempts", methods=["GET"])
@role_required(ROLE_STUDENT)
def get_quiz_attempts(quiz_id):
    student_id = current_user_id()
    quiz = db.session.get(Quiz, quiz_id)
    if not quiz:
        return jsonify({"error": "Quiz not found"}), 404

    attempts = QuizAttempt.query.filter_by(quiz_id=quiz.id, student_id=student_id).all()
    return jsonify({
        "quiz_id": quiz.id,
        "max_attempts": quiz.max_attempts,
        "attempts_left": AttemptLedger.attempts_left(quiz, len(attempts)),
        "attempts": report_projector.attempt_history(attempts, AttemptLedger.effective_score),
    })


#Upload or replace an assignment submission
@student_bp.route("/assignments/<int:assignment_id>/submit", methods=["POST"])
@role_required(ROLE_STUDENT)
def submit_assignment(assignment_id):
    student_id = current_user_id()

    assignment = db.session.get(Assignment, assignment_id)
    if not assignment:
        return jsonify({"error": "Assignment not found"}), 404

    file = request.files.get("file")
    if file is None:
        return jsonify({"error": "Assignment file is required"}), 400

    try:
        filename = validate_upload(file.filename, file_size(file), current_app.config)
    except UploadRejected as e:
        return jsonify({"error": str(e)}), 400

    now = datetime.utcnow()
    upload_folder = current_app.config["UPLOAD_FOLDER"]
    lifecycle = SubmissionLifecycle(engine_settings())
    existing = _existing_submission(assignment.id, student_id)
    replaced_url = existing.file_url if existing is not None else None
    file_url = build_file_url(assignment.id, student_id, filename, now)

    result = lifecycle.submit(
        assignment,
        student_id,
        enrolled=_is_enrolled(student_id, assignment.class_id),
        existing=existing,
        file_url=file_url,
        feedback=request.form.get("feedback"),
        original_file_name=file.filename,
        now=now,
    )

    store_upload(file, upload_folder, file_url)
    db.session.add(result.submission)
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent first submission for the same student won the unique row
        db.session.rollback()
        remove_upload(upload_folder, file_url)
        logger.warning("Concurrent submission on assignment %s for student %s", assignment_id, student_id)
        return jsonify({"error": "A submission for this assignment was made concurrently"}), 409

    if replaced_url and replaced_url != file_url:
        remove_upload(upload_folder, replaced_url)

    notify_submission(assignment, db.session.get(User, student_id), assignment.professor, result.is_resubmission)

    status = 200 if result.is_resubmission else 201
    return jsonify(report_projector.submission_result(result)), status


#Student's attendance in one class
@student_bp.route("/attendance/<int:class_id>", methods=["GET"])
@role_required(ROLE_STUDENT)
def get_my_attendance(class_id):
    student_id = current_user_id()
    if not _is_enrolled(student_id, class_id):
        raise NotEnrolled()

    days = request.args.get("period", 30, type=int)
    include_not_marked = parse_bool(request.args.get("include_not_marked", "true"))
    since = date.today() - timedelta(days=days)

    sessions = (AttendanceSession.query
                .filter(AttendanceSession.class_id == class_id, AttendanceSession.date >= since)
                .order_by(AttendanceSession.date.desc())
                .all())

    tally = AttendanceAggregator(engine_settings()).compute_rate(sessions, student_id, include_not_marked)
    return jsonify(report_projector.student_attendance(tally, sessions))
