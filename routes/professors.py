import logging
from datetime import date, timedelta
from flask import Blueprint, jsonify, request

from models import db
from models.users import User
from models.classrooms import Classroom
from models.enrolments import Enrolment
from models.quizzes import Quiz
from models.quiz_attempts import QuizAttempt
from models.quiz_attempts_answers import QuizAttemptAnswer
from models.assignment import Assignment
from models.assignment_submission import AssignmentSubmission
from models.attendance import AttendanceSession, AttendanceRecord
from scoring import report_projector
from scoring.attempt_ledger import AttemptLedger
from scoring.attendance_aggregator import AttendanceAggregator
from scoring.constants import ROLE_PROFESSOR
from scoring.errors import NotEnrolled
from scoring.submission_lifecycle import SubmissionLifecycle
from utils.helpers import engine_settings, parse_bool, parse_date
from utils.notifications import notify_graded
from utils.utils import role_required, current_user_id

logger = logging.getLogger(__name__)

professor_bp = Blueprint("professor", __name__)


def _owned_class(class_id, professor_id):
    return Classroom.query.filter_by(id=class_id, professor_id=professor_id).first()


def _enrolled_students(class_id):
    return (User.query
            .join(Enrolment, Enrolment.student_id == User.id)
            .filter(Enrolment.class_id == class_id)
            .order_by(User.id)
            .all())


def _sessions_between(class_id, start, end=None):
    query = AttendanceSession.query.filter(AttendanceSession.class_id == class_id,
                                           AttendanceSession.date >= start)
    if end is not None:
        query = query.filter(AttendanceSession.date <= end)
    return query.order_by(AttendanceSession.date.desc()).all()


#__________________________________________________________________________________________ * Quizzes *__________________________________________________

@professor_bp.route("/quizzes/<int:quiz_id>/stats", methods=["GET"])
@role_required(ROLE_PROFESSOR)
def get_quiz_stats(quiz_id):
    quiz = Quiz.query.filter_by(id=quiz_id, professor_id=current_user_id()).first()
    if not quiz:
        return jsonify({"error": "Quiz not found or access denied"}), 404

    ledger = AttemptLedger(engine_settings())
    stats = ledger.compute_assessment_stats(quiz, list(quiz.attempts))
    return jsonify(report_projector.assessment_stats(quiz, stats))


# Manual points for a short-answer question
@professor_bp.route("/quizzes/attempts/<int:attempt_id>/answers/<int:answer_id>/grade", methods=["POST"])
@role_required(ROLE_PROFESSOR)
def grade_answer(attempt_id, answer_id):
    data = request.get_json(silent=True) or {}

    attempt = db.session.get(QuizAttempt, attempt_id)
    answer = db.session.get(QuizAttemptAnswer, answer_id)
    if not attempt or not answer or answer.attempt_id != attempt.id:
        return jsonify({"error": "Answer not found"}), 404

    ledger = AttemptLedger(engine_settings())
    ledger.override_answer(attempt, answer, answer.question, attempt.quiz, current_user_id(), data.get("points"))
    db.session.commit()

    return jsonify({
        "answer": answer.to_dict(),
        "score": attempt.score,
        "effective_score": ledger.effective_score(attempt),
    })


#__________________________________________________________________________________________ * Assignments *__________________________________________________

@professor_bp.route("/assignments/<int:assignment_id>/submissions", methods=["GET"])
@role_required(ROLE_PROFESSOR)
def get_assignment_submissions(assignment_id):
    assignment = Assignment.query.filter_by(id=assignment_id, professor_id=current_user_id()).first()
    if not assignment:
        return jsonify({"error": "Assignment not found or access denied"}), 404

    students = _enrolled_students(assignment.class_id)
    students_by_id = {student.id: student for student in students}
    submissions = list(assignment.submissions)
    for submission in submissions:
        students_by_id.setdefault(submission.student_id, submission.student)

    summary = SubmissionLifecycle.summarize_submissions([s.id for s in students], submissions)
    return jsonify(report_projector.submission_overview(assignment, summary, submissions, students_by_id))


@professor_bp.route("/submissions/<int:submission_id>/grade", methods=["POST"])
@role_required(ROLE_PROFESSOR)
def grade_submission(submission_id):
    data = request.get_json(silent=True) or {}

    submission = db.session.get(AssignmentSubmission, submission_id)
    if not submission:
        return jsonify({"error": "Submission not found"}), 404

    assignment = submission.assignment
    lifecycle = SubmissionLifecycle(engine_settings())
    lifecycle.grade(submission, assignment, current_user_id(), data.get("grade"), data.get("feedback"))
    db.session.commit()

    notify_graded(submission, assignment, submission.student)
    return jsonify(report_projector.graded_submission(submission))


#__________________________________________________________________________________________ * Attendance *__________________________________________________

@professor_bp.route("/attendance/sessions", methods=["POST"])
@role_required(ROLE_PROFESSOR)
def create_attendance_session():
    data = request.get_json(silent=True) or {}
    professor_id = current_user_id()

    classroom = _owned_class(data.get("class_id"), professor_id)
    if not classroom:
        return jsonify({"error": "Class not found or access denied"}), 404

    session_date = parse_date(data.get("date")) or date.today()
    session = AttendanceSession(
        class_id=classroom.id,
        professor_id=professor_id,
        date=session_date,
        title=data.get("title") or f"Class Session - {session_date.isoformat()}",
    )
    db.session.add(session)
    db.session.commit()
    return jsonify(session.to_dict()), 201


def _owned_session(session_id, professor_id):
    session = db.session.get(AttendanceSession, session_id) if session_id else None
    if not session or session.classroom.professor_id != professor_id:
        return None
    return session


def _existing_record(session_id, student_id):
    return AttendanceRecord.query.filter_by(session_id=session_id, student_id=student_id).first()


# Mark a single student
@professor_bp.route("/attendance/mark", methods=["POST"])
@role_required(ROLE_PROFESSOR)
def mark_attendance():
    data = request.get_json(silent=True) or {}
    professor_id = current_user_id()

    session = _owned_session(data.get("session_id"), professor_id)
    if not session:
        return jsonify({"error": "Session not found or access denied"}), 404

    student_id = data.get("student_id")
    if Enrolment.query.filter_by(student_id=student_id, class_id=session.class_id).first() is None:
        raise NotEnrolled("Student is not enrolled in this class")

    aggregator = AttendanceAggregator(engine_settings())
    record = aggregator.mark(session, student_id, data.get("status"),
                             _existing_record(session.id, student_id), professor_id, data.get("notes"))
    db.session.commit()
    return jsonify(record.to_dict())


# Mark a whole class in one go; students outside the class are skipped
@professor_bp.route("/attendance/mark", methods=["PUT"])
@role_required(ROLE_PROFESSOR)
def bulk_mark_attendance():
    data = request.get_json(silent=True) or {}
    professor_id = current_user_id()

    session = _owned_session(data.get("session_id"), professor_id)
    if not session:
        return jsonify({"error": "Session not found or access denied"}), 404

    enrolled_ids = {student.id for student in _enrolled_students(session.class_id)}
    aggregator = AttendanceAggregator(engine_settings())

    marked, skipped = [], []
    try:
        for entry in data.get("records", []):
            student_id = entry.get("student_id")
            if student_id not in enrolled_ids:
                skipped.append(student_id)
                continue
            record = aggregator.mark(session, student_id, entry.get("status"),
                                     _existing_record(session.id, student_id), professor_id, entry.get("notes"))
            marked.append(record)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    if skipped:
        logger.info("Skipped %s students not enrolled in class %s", len(skipped), session.class_id)
    return jsonify({
        "session_id": session.id,
        "marked": [record.to_dict() for record in marked],
        "skipped_student_ids": skipped,
    })


@professor_bp.route("/attendance/analytics", methods=["GET"])
@role_required(ROLE_PROFESSOR)
def get_attendance_analytics():
    class_id = request.args.get("class_id", type=int)
    classroom = _owned_class(class_id, current_user_id())
    if not classroom:
        return jsonify({"error": "Class not found or access denied"}), 404

    days = request.args.get("period", 30, type=int)
    include_not_marked = parse_bool(request.args.get("include_not_marked", "true"))
    sessions = _sessions_between(classroom.id, date.today() - timedelta(days=days))
    aggregator = AttendanceAggregator(engine_settings())

    student_id = request.args.get("student_id", type=int)
    if student_id is not None:
        tally = aggregator.compute_rate(sessions, student_id, include_not_marked)
        return jsonify(report_projector.student_attendance(tally, sessions))

    students = _enrolled_students(classroom.id)
    summary = aggregator.class_summary(sessions, [s.id for s in students], include_not_marked)
    return jsonify(report_projector.class_attendance(summary, sessions, {s.id: s for s in students}))


@professor_bp.route("/attendance/reports", methods=["GET"])
@role_required(ROLE_PROFESSOR)
def get_attendance_reports():
    class_id = request.args.get("class_id", type=int)
    classroom = _owned_class(class_id, current_user_id())
    if not classroom:
        return jsonify({"error": "Class not found or access denied"}), 404

    period = request.args.get("period", "monthly")
    include_not_marked = parse_bool(request.args.get("include_not_marked", "false"))
    start, end = report_projector.resolve_report_range(
        period,
        parse_date(request.args.get("start_date")),
        parse_date(request.args.get("end_date")),
    )

    sessions = _sessions_between(classroom.id, start, end)
    students = _enrolled_students(classroom.id)
    aggregator = AttendanceAggregator(engine_settings())
    summary = aggregator.class_summary(sessions, [s.id for s in students], include_not_marked)
    return jsonify(report_projector.attendance_report(
        summary, sessions, {s.id: s for s in students}, (start, end), include_not_marked,
    ))


#__________________________________________________________________________________________ * Students *__________________________________________________

@professor_bp.route("/students/<int:student_id>", methods=["GET"])
@role_required(ROLE_PROFESSOR)
def get_student_detail(student_id):
    professor_id = current_user_id()

    student = db.session.get(User, student_id)
    classes = (Classroom.query
               .join(Enrolment, Enrolment.class_id == Classroom.id)
               .filter(Enrolment.student_id == student_id, Classroom.professor_id == professor_id)
               .order_by(Classroom.id)
               .all())
    if not student or not classes:
        return jsonify({"error": "Student not found or access denied"}), 404

    attempts = (QuizAttempt.query
                .join(Quiz, Quiz.id == QuizAttempt.quiz_id)
                .filter(QuizAttempt.student_id == student_id, Quiz.professor_id == professor_id)
                .order_by(QuizAttempt.started_at.desc())
                .all())
    submissions = (AssignmentSubmission.query
                   .join(Assignment, Assignment.id == AssignmentSubmission.assignment_id)
                   .filter(AssignmentSubmission.student_id == student_id, Assignment.professor_id == professor_id)
                   .order_by(AssignmentSubmission.submitted_at.desc())
                   .all())

    settings = engine_settings()
    sessions = _sessions_between(classes[0].id, date.today() - timedelta(days=90))
    tally = AttendanceAggregator(settings).compute_rate(sessions, student_id)

    return jsonify(report_projector.student_detail(
        student, classes, attempts, submissions, tally, SubmissionLifecycle(settings),
    ))
