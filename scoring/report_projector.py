"""Shapes engine results into the JSON payloads served by the routes."""

from datetime import date, datetime, timedelta

from scoring.attendance_aggregator import AttendanceAggregator, record_for, status_for


def _iso(value):
    return value.isoformat() if value else None


def _name(user):
    return user.full_name if user is not None else None


def quiz_submission(attempt, result, attempts_left):
    return {
        "success": True,
        "attempt_id": attempt.id,
        "attempt_number": attempt.attempt_number,
        "score": result.score,
        "total_points": result.total_possible,
        "percentage": result.percentage,
        "time_spent": attempt.time_spent,
        "completed_at": _iso(attempt.completed_at),
        "attempts_left": attempts_left,
        "answers": [
            {
                "question_id": answer.question_id,
                "is_correct": answer.is_correct,
                "points": answer.points,
            }
            for answer in result.answers
        ],
    }


def attempt_history(attempts, effective_score):
    return [
        {
            "id": attempt.id,
            "attempt_number": attempt.attempt_number,
            "score": attempt.score,
            "effective_score": effective_score(attempt),
            "time_spent": attempt.time_spent,
            "started_at": _iso(attempt.started_at),
            "completed_at": _iso(attempt.completed_at),
        }
        for attempt in sorted(attempts, key=lambda a: a.attempt_number, reverse=True)
    ]


def assessment_stats(quiz, stats):
    data = dict(stats)
    data["id"] = quiz.id
    data["title"] = quiz.title
    data["recent_attempts"] = [
        {
            "id": attempt.id,
            "student_id": attempt.student_id,
            "student_name": _name(attempt.student),
            "score": attempt.score,
            "time_spent": attempt.time_spent or 0,
            "completed_at": _iso(attempt.completed_at),
        }
        for attempt in stats["recent_attempts"]
    ]
    return data


def submission_result(result):
    submission = result.submission
    return {
        "success": True,
        "submission_id": submission.id,
        "file_url": submission.file_url,
        "submitted_at": _iso(submission.submitted_at),
        "is_resubmission": result.is_resubmission,
    }


def graded_submission(submission):
    return {
        "message": "Submission graded successfully",
        "submission": {
            "id": submission.id,
            "student_id": submission.student_id,
            "student_name": _name(submission.student),
            "grade": submission.grade,
            "feedback": submission.grader_feedback,
            "graded_at": _iso(submission.graded_at),
            "assignment_title": submission.assignment.title if submission.assignment else None,
        },
    }


def submission_overview(assignment, summary, submissions, students_by_id):
    return {
        "assignment": assignment.to_dict(),
        "submissions": [
            dict(submission.to_dict(), student_name=_name(students_by_id.get(submission.student_id)))
            for submission in sorted(submissions, key=lambda s: s.submitted_at or datetime.min, reverse=True)
        ],
        "students_without_submission": [
            students_by_id[student_id].to_dict()
            for student_id in summary["students_without_submission"]
            if student_id in students_by_id
        ],
        "total_enrolled": summary["total_enrolled"],
        "total_submitted": summary["total_submitted"],
        "total_graded": summary["total_graded"],
        "total_ungraded": summary["total_ungraded"],
    }


def _session_line(session, student_id):
    record = record_for(session, student_id)
    return {
        "id": session.id,
        "date": _iso(session.date),
        "title": session.title,
        "status": status_for(session, student_id),
        "marked_at": _iso(record.marked_at) if record else None,
    }


def student_attendance(tally, sessions):
    data = tally.to_dict()
    data["attendance_rate"] = data.pop("rate")
    data["sessions"] = [_session_line(session, tally.student_id) for session in sessions]
    return data


def class_attendance(summary, sessions, students_by_id):
    """Class overview: ``overall_attendance_rate`` is the pooled rate, students are ranked."""
    return {
        "total_sessions": summary.total_sessions,
        "total_students": len(summary.students),
        "total_present": summary.total_present,
        "total_absent": summary.total_absent,
        "total_late": summary.total_late,
        "total_excused": summary.total_excused,
        "overall_attendance_rate": summary.pooled_rate,
        "average_attendance_rate": summary.mean_rate,
        "student_stats": [
            dict(
                tally.to_dict(),
                student=students_by_id[tally.student_id].to_dict() if tally.student_id in students_by_id else None,
            )
            for tally in summary.students
        ],
        "sessions": [
            dict(session.to_dict(), **AttendanceAggregator.session_breakdown(session))
            for session in sessions
        ],
    }


def resolve_report_range(period, start=None, end=None, today=None):
    """Turn a report period into an inclusive (start, end) date pair."""
    today = today or date.today()
    if period == "custom" and start and end:
        return start, end
    if period == "daily":
        return today, today
    if period == "weekly":
        return today - timedelta(days=7), today
    # monthly
    return today.replace(day=1), today


def attendance_report(summary, sessions, students_by_id, date_range, include_not_marked):
    reports = []
    for tally in summary.students:
        student = students_by_id.get(tally.student_id)
        reports.append({
            "student_id": tally.student_id,
            "student_name": _name(student),
            "student_email": student.email if student else None,
            "total_sessions": tally.total_sessions,
            "present": tally.present,
            "absent": tally.absent,
            "late": tally.late,
            "excused": tally.excused,
            "not_marked": tally.not_marked if include_not_marked else 0,
            "attendance_rate": tally.rate,
            "sessions": [
                {
                    "date": _iso(session.date),
                    "title": session.title,
                    "status": status_for(session, tally.student_id),
                }
                for session in sessions
            ],
        })

    start, end = date_range
    return {
        "reports": reports,
        "summary": {
            "total_students": len(reports),
            "average_attendance_rate": summary.mean_rate,
            "pooled_attendance_rate": summary.pooled_rate,
            "date_range": {"start": _iso(start), "end": _iso(end)},
        },
    }


def student_detail(student, classes, attempts, submissions, tally, lifecycle):
    grades = [attempt.score for attempt in attempts] + [submission.grade for submission in submissions]
    return {
        "id": student.id,
        "name": student.full_name,
        "email": student.email,
        "enrolled_classes": len(classes),
        "average_grade": lifecycle.average_grade(grades),
        "classes": [classroom.to_dict() for classroom in classes],
        "quiz_attempts": [
            {
                "id": attempt.id,
                "quiz_title": attempt.quiz.title if attempt.quiz else None,
                "score": attempt.score or 0,
                "completed_at": _iso(attempt.completed_at or attempt.started_at),
            }
            for attempt in attempts
        ],
        "assignment_submissions": [
            {
                "id": submission.id,
                "assignment_title": submission.assignment.title if submission.assignment else None,
                "grade": submission.grade,
                "submitted_at": _iso(submission.submitted_at),
            }
            for submission in submissions
        ],
        "attendance_stats": dict(tally.to_dict(), primary_class_id=classes[0].id) if tally else None,
    }
