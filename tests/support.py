"""Builders for unsaved model rows used by the engine tests."""

from datetime import datetime, timedelta

from models.quizzes import Quiz
from models.quiz_questions import QuizQuestion
from models.question_options import QuestionOption
from models.quiz_attempts import QuizAttempt
from models.assignment import Assignment
from models.attendance import AttendanceSession
from scoring.constants import PublishStatus

PROFESSOR_ID = 100


def make_question(question_id, question_type, points=1, options=()):
    question = QuizQuestion(id=question_id, question_text=f"Question {question_id}",
                            question_type=question_type, points=points)
    for option_id, text, is_correct in options:
        question.options.append(QuestionOption(id=option_id, text=text, is_correct=is_correct))
    return question


def make_quiz(questions, max_attempts=1, quiz_id=1):
    quiz = Quiz(id=quiz_id, title="Quiz", class_id=1, professor_id=PROFESSOR_ID,
                max_attempts=max_attempts, status=PublishStatus.PUBLISHED.value)
    for question in questions:
        quiz.questions.append(question)
    return quiz


def make_completed_attempt(attempt_id, score, completed_at, time_spent=None, student_id=1):
    return QuizAttempt(id=attempt_id, quiz_id=1, student_id=student_id, attempt_number=1,
                       score=score, started_at=completed_at - timedelta(minutes=5),
                       completed_at=completed_at, time_spent=time_spent)


def make_assignment(status=PublishStatus.PUBLISHED.value, due_date=None):
    return Assignment(id=1, title="Essay", class_id=1, professor_id=PROFESSOR_ID,
                      status=status, due_date=due_date)


def make_session(session_id, day_offset=0):
    return AttendanceSession(id=session_id, class_id=1, professor_id=PROFESSOR_ID,
                             date=(datetime(2024, 3, 1) + timedelta(days=day_offset)).date(),
                             title=f"Session {session_id}")
