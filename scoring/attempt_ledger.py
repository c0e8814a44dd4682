import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from models.quiz_attempts import QuizAttempt
from models.quiz_attempts_answers import QuizAttemptAnswer
from scoring import score_rules
from scoring.constants import QuestionType
from scoring.errors import AccessDenied, AttemptAlreadyCompleted, AttemptLimitExceeded, InvalidGrade
from scoring.settings import EngineSettings

logger = logging.getLogger(__name__)


@dataclass
class AttemptResult:
    score: float
    total_possible: float
    percentage: float
    answers: List[QuizAttemptAnswer] = field(default_factory=list)


def percentage_of(score, total_possible):
    return (score / total_possible) * 100 if total_possible > 0 else 0


class AttemptLedger:
    """Counts, scores and finalizes quiz attempts for one (quiz, student) pair at a time.

    Rows are built and mutated here; adding them to the session and
    committing stays with the caller.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()

    @staticmethod
    def attempts_left(quiz, prior_attempts: int) -> int:
        return max(0, quiz.max_attempts - prior_attempts)

    def start_attempt(self, quiz, student_id, prior_attempts: int, now: Optional[datetime] = None) -> QuizAttempt:
        if prior_attempts >= quiz.max_attempts:
            logger.warning(
                "Student %s exhausted attempts for quiz %s (%s/%s)",
                student_id, quiz.id, prior_attempts, quiz.max_attempts,
            )
            raise AttemptLimitExceeded(quiz.max_attempts)

        attempt = QuizAttempt(
            quiz_id=quiz.id,
            student_id=student_id,
            attempt_number=prior_attempts + 1,
            score=0,
            started_at=now or datetime.utcnow(),
        )
        logger.info("Started attempt %s of %s on quiz %s for student %s",
                    attempt.attempt_number, quiz.max_attempts, quiz.id, student_id)
        return attempt

    def submit_answers(self, attempt, quiz, answers, started_at: Optional[datetime] = None,
                       now: Optional[datetime] = None) -> AttemptResult:
        """Score every answer, then freeze the attempt.

        ``started_at`` is the client-reported start time; without it the
        time spent is left unknown.
        """
        if attempt.is_completed:
            logger.warning("Rejected resubmission of completed attempt %s", attempt.id)
            raise AttemptAlreadyCompleted(attempt.id)

        now = now or datetime.utcnow()
        questions = {question.id: question for question in quiz.questions}

        total_score = 0
        scored = []
        seen = set()
        for answer in answers:
            question = questions.get(answer.question_id)
            if question is None or answer.question_id in seen:
                continue
            seen.add(answer.question_id)

            outcome = score_rules.evaluate(question, answer)
            row = QuizAttemptAnswer(
                question_id=question.id,
                selected_options=list(answer.selected_options) or None,
                text_answer=answer.text_answer,
                is_correct=outcome.is_correct,
                points=outcome.points,
            )
            attempt.answers.append(row)
            scored.append(row)
            total_score += outcome.points

        total_possible = quiz.total_points

        attempt.score = total_score
        attempt.completed_at = now
        attempt.time_spent = elapsed_seconds(started_at, now)

        logger.info("Finalized attempt %s on quiz %s: %s/%s",
                    attempt.id, quiz.id, total_score, total_possible)
        return AttemptResult(
            score=total_score,
            total_possible=total_possible,
            percentage=percentage_of(total_score, total_possible),
            answers=scored,
        )

    def override_answer(self, attempt, answer, question, quiz, grader_id, points,
                        now: Optional[datetime] = None):
        """Layer a manual point value on top of an auto-scored short answer."""
        if quiz.professor_id != grader_id:
            raise AccessDenied("Only the quiz owner can grade its answers")
        if not attempt.is_completed:
            raise InvalidGrade("Answers can only be graded after the attempt is submitted")
        question_type = getattr(question.question_type, "value", question.question_type)
        if question_type != QuestionType.SHORT_ANSWER.value:
            raise InvalidGrade("Only short-answer questions accept manual points")
        if not is_valid_number(points) or points < 0 or points > question.points:
            raise InvalidGrade(f"Points must be between 0 and {question.points}")

        answer.override_points = float(points)
        answer.overridden_by = grader_id
        answer.overridden_at = now or datetime.utcnow()
        logger.info("Answer %s on attempt %s manually graded: %s", answer.id, attempt.id, points)
        return answer

    @staticmethod
    def effective_score(attempt) -> float:
        """Stored score plus any manual adjustments made after finalization."""
        adjustment = sum(
            answer.effective_points - (answer.points or 0)
            for answer in attempt.answers
            if answer.override_points is not None
        )
        return (attempt.score or 0) + adjustment

    def compute_assessment_stats(self, quiz, attempts):
        """Aggregate statistics over every attempt made on ``quiz``.

        Scores come from the stored attempt score, never from the answer rows.
        """
        total_attempts = len(attempts)
        completed = [attempt for attempt in attempts if attempt.is_completed]
        scores = [attempt.score or 0 for attempt in completed]
        total_possible = quiz.total_points

        average_score = sum(scores) / len(scores) if scores else 0
        timed = [attempt.time_spent for attempt in completed if attempt.time_spent is not None]

        question_stats = []
        for question in quiz.questions:
            touched = [
                answer
                for attempt in completed
                for answer in attempt.answers
                if answer.question_id == question.id
            ]
            correct = sum(1 for answer in touched if answer.is_correct)
            question_stats.append({
                "question_id": question.id,
                "question_text": question.question_text,
                "correct_answers": correct,
                "total_answers": len(touched),
                "success_rate": round(correct / len(touched) * 100, 1) if touched else 0,
            })

        recent = sorted(completed, key=lambda attempt: attempt.completed_at, reverse=True)
        return {
            "total_attempts": total_attempts,
            "completed_attempts": len(completed),
            "completion_rate": round(len(completed) / total_attempts * 100, 1) if total_attempts else 0,
            "total_possible": total_possible,
            "average_score": round(average_score, 1),
            "highest_score": max(scores) if scores else 0,
            "lowest_score": min(scores) if scores else 0,
            "average_percentage": round(percentage_of(average_score, total_possible), 1),
            "average_time_spent": round(sum(timed) / len(timed)) if timed else 0,
            "question_stats": question_stats,
            "recent_attempts": recent[:self.settings.recent_attempts_limit],
        }


def elapsed_seconds(started_at, now):
    if started_at is None:
        return None
    return max(0, int((now - started_at).total_seconds()))


def is_valid_number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
