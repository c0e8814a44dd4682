import unittest
from datetime import datetime, timedelta

from scoring.attempt_ledger import AttemptLedger, elapsed_seconds, is_valid_number
from scoring.constants import QuestionType
from scoring.errors import AccessDenied, AttemptAlreadyCompleted, AttemptLimitExceeded, InvalidGrade
from scoring.score_rules import SubmittedAnswer
from scoring.settings import EngineSettings
from tests.support import PROFESSOR_ID, make_completed_attempt, make_question, make_quiz

NOW = datetime(2024, 3, 1, 12, 0, 0)


def build_quiz(max_attempts=2):
    return make_quiz([
        make_question(1, QuestionType.MULTIPLE_CHOICE.value, points=2, options=[
            (11, "A", True), (12, "B", False),
        ]),
        make_question(2, QuestionType.TRUE_FALSE.value, points=1, options=[
            (21, "True", True), (22, "False", False),
        ]),
        make_question(3, QuestionType.SHORT_ANSWER.value, points=5),
    ], max_attempts=max_attempts)


class StartAttemptTests(unittest.TestCase):
    def setUp(self):
        self.ledger = AttemptLedger()
        self.quiz = build_quiz(max_attempts=2)

    def test_attempts_are_numbered_from_prior_count(self):
        first = self.ledger.start_attempt(self.quiz, 7, prior_attempts=0, now=NOW)
        second = self.ledger.start_attempt(self.quiz, 7, prior_attempts=1, now=NOW)
        self.assertEqual(first.attempt_number, 1)
        self.assertEqual(second.attempt_number, 2)
        self.assertEqual(first.score, 0)
        self.assertEqual(first.started_at, NOW)
        self.assertIsNone(first.completed_at)

    def test_limit_is_enforced(self):
        with self.assertRaises(AttemptLimitExceeded) as ctx:
            self.ledger.start_attempt(self.quiz, 7, prior_attempts=2)
        self.assertEqual(ctx.exception.limit, 2)
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertEqual(ctx.exception.to_dict()["code"], "attempt_limit_exceeded")

    def test_attempts_left_never_negative(self):
        self.assertEqual(AttemptLedger.attempts_left(self.quiz, 1), 1)
        self.assertEqual(AttemptLedger.attempts_left(self.quiz, 5), 0)


class SubmitAnswersTests(unittest.TestCase):
    def setUp(self):
        self.ledger = AttemptLedger()
        self.quiz = build_quiz()
        self.attempt = self.ledger.start_attempt(self.quiz, 7, prior_attempts=0, now=NOW)
        self.attempt.id = 50

    def test_scores_and_freezes_attempt(self):
        result = self.ledger.submit_answers(self.attempt, self.quiz, [
            SubmittedAnswer(1, ["A"]),
            SubmittedAnswer(2, ["False"]),
            SubmittedAnswer(3, [], "an essay"),
        ], started_at=NOW, now=NOW + timedelta(seconds=95))

        self.assertEqual(result.score, 2)
        self.assertEqual(result.total_possible, 8)
        self.assertEqual(result.percentage, 25.0)
        self.assertEqual(self.attempt.score, 2)
        self.assertEqual(self.attempt.time_spent, 95)
        self.assertEqual(self.attempt.completed_at, NOW + timedelta(seconds=95))
        self.assertEqual(len(self.attempt.answers), 3)
        self.assertEqual([a.is_correct for a in result.answers], [True, False, False])

    def test_unanswered_questions_still_count_toward_total(self):
        result = self.ledger.submit_answers(self.attempt, self.quiz, [SubmittedAnswer(2, ["True"])], now=NOW)
        self.assertEqual(result.score, 1)
        self.assertEqual(result.total_possible, 8)
        self.assertEqual(result.percentage, 12.5)

    def test_duplicate_and_foreign_answers_are_ignored(self):
        result = self.ledger.submit_answers(self.attempt, self.quiz, [
            SubmittedAnswer(1, ["A"]),
            SubmittedAnswer(1, ["A"]),
            SubmittedAnswer(99, ["A"]),
        ], now=NOW)
        self.assertEqual(result.score, 2)
        self.assertEqual(len(self.attempt.answers), 1)

    def test_time_spent_unknown_without_start(self):
        self.ledger.submit_answers(self.attempt, self.quiz, [], now=NOW)
        self.assertIsNone(self.attempt.time_spent)

    def test_completed_attempt_cannot_be_resubmitted(self):
        self.ledger.submit_answers(self.attempt, self.quiz, [SubmittedAnswer(1, ["A"])], now=NOW)
        with self.assertRaises(AttemptAlreadyCompleted):
            self.ledger.submit_answers(self.attempt, self.quiz, [SubmittedAnswer(2, ["True"])], now=NOW)
        self.assertEqual(self.attempt.score, 2)
        self.assertEqual(len(self.attempt.answers), 1)


class OverrideAnswerTests(unittest.TestCase):
    def setUp(self):
        self.ledger = AttemptLedger()
        self.quiz = build_quiz()
        self.attempt = self.ledger.start_attempt(self.quiz, 7, prior_attempts=0, now=NOW)
        self.ledger.submit_answers(self.attempt, self.quiz, [
            SubmittedAnswer(1, ["A"]),
            SubmittedAnswer(3, [], "chlorophyll"),
        ], now=NOW)
        self.short_answer = self.attempt.answers[1]
        self.short_question = self.quiz.questions[2]

    def test_override_layers_on_top_of_stored_score(self):
        self.ledger.override_answer(self.attempt, self.short_answer, self.short_question,
                                    self.quiz, PROFESSOR_ID, 4, now=NOW)
        self.assertEqual(self.short_answer.override_points, 4.0)
        self.assertEqual(self.short_answer.overridden_by, PROFESSOR_ID)
        self.assertEqual(self.short_answer.points, 0)
        self.assertEqual(self.attempt.score, 2)
        self.assertEqual(AttemptLedger.effective_score(self.attempt), 6)

    def test_only_quiz_owner_can_override(self):
        with self.assertRaises(AccessDenied):
            self.ledger.override_answer(self.attempt, self.short_answer, self.short_question,
                                        self.quiz, PROFESSOR_ID + 1, 4)

    def test_points_must_fit_question(self):
        for points in (-1, 6, "4", float("nan"), True):
            with self.assertRaises(InvalidGrade):
                self.ledger.override_answer(self.attempt, self.short_answer, self.short_question,
                                            self.quiz, PROFESSOR_ID, points)

    def test_auto_scored_questions_are_not_overridable(self):
        with self.assertRaises(InvalidGrade):
            self.ledger.override_answer(self.attempt, self.attempt.answers[0], self.quiz.questions[0],
                                        self.quiz, PROFESSOR_ID, 1)


class AssessmentStatsTests(unittest.TestCase):
    def setUp(self):
        self.quiz = make_quiz([make_question(1, QuestionType.MULTIPLE_CHOICE.value, points=100, options=[
            (11, "A", True),
        ])])
        self.attempts = [
            make_completed_attempt(i + 1, score, NOW + timedelta(minutes=i), time_spent=60 * (i + 1))
            for i, score in enumerate([40, 60, 80, 100])
        ]

    def test_aggregates_stored_scores(self):
        stats = AttemptLedger().compute_assessment_stats(self.quiz, self.attempts)
        self.assertEqual(stats["average_score"], 70)
        self.assertEqual(stats["highest_score"], 100)
        self.assertEqual(stats["lowest_score"], 40)
        self.assertEqual(stats["average_percentage"], 70)
        self.assertEqual(stats["average_time_spent"], 150)
        self.assertEqual(stats["completion_rate"], 100)

    def test_open_attempts_only_affect_completion_rate(self):
        open_attempt = make_completed_attempt(9, 0, NOW)
        open_attempt.completed_at = None
        stats = AttemptLedger().compute_assessment_stats(self.quiz, self.attempts + [open_attempt])
        self.assertEqual(stats["total_attempts"], 5)
        self.assertEqual(stats["completed_attempts"], 4)
        self.assertEqual(stats["completion_rate"], 80.0)
        self.assertEqual(stats["average_score"], 70)

    def test_recent_attempts_newest_first_and_limited(self):
        ledger = AttemptLedger(EngineSettings(recent_attempts_limit=2))
        stats = ledger.compute_assessment_stats(self.quiz, self.attempts)
        self.assertEqual([a.id for a in stats["recent_attempts"]], [4, 3])

    def test_no_attempts(self):
        stats = AttemptLedger().compute_assessment_stats(self.quiz, [])
        self.assertEqual(stats["average_score"], 0)
        self.assertEqual(stats["completion_rate"], 0)
        self.assertEqual(stats["recent_attempts"], [])


class HelperTests(unittest.TestCase):
    def test_elapsed_seconds_clamps_clock_skew(self):
        self.assertEqual(elapsed_seconds(NOW + timedelta(seconds=30), NOW), 0)
        self.assertIsNone(elapsed_seconds(None, NOW))

    def test_is_valid_number(self):
        self.assertTrue(is_valid_number(3.5))
        self.assertFalse(is_valid_number(False))
        self.assertFalse(is_valid_number(float("inf")))
        self.assertFalse(is_valid_number("10"))


if __name__ == "__main__":
    unittest.main()
