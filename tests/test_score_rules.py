import unittest

from scoring import score_rules
from scoring.constants import QuestionType
from scoring.score_rules import SubmittedAnswer
from tests.support import make_question


class MultipleChoiceTests(unittest.TestCase):
    def setUp(self):
        self.question = make_question(1, QuestionType.MULTIPLE_CHOICE.value, points=3, options=[
            (11, "Paris", True),
            (12, "Lyon", False),
            (13, "Nice", False),
        ])

    def test_correct_option_by_text(self):
        outcome = score_rules.evaluate(self.question, SubmittedAnswer(1, ["Paris"]))
        self.assertTrue(outcome.is_correct)
        self.assertEqual(outcome.points, 3)

    def test_option_id_is_not_an_answer(self):
        outcome = score_rules.evaluate(self.question, SubmittedAnswer(1, ["11"]))
        self.assertFalse(outcome.is_correct)

    def test_wrong_option_scores_zero(self):
        outcome = score_rules.evaluate(self.question, SubmittedAnswer(1, ["Lyon"]))
        self.assertFalse(outcome.is_correct)
        self.assertEqual(outcome.points, 0)

    def test_empty_selection_scores_zero(self):
        self.assertEqual(score_rules.evaluate(self.question, SubmittedAnswer(1, [])), score_rules.INCORRECT)

    def test_more_than_one_selection_scores_zero(self):
        outcome = score_rules.evaluate(self.question, SubmittedAnswer(1, ["Paris", "Lyon"]))
        self.assertFalse(outcome.is_correct)
        self.assertEqual(outcome.points, 0)

    def test_numeric_texts_never_match_other_option_ids(self):
        question = make_question(6, QuestionType.MULTIPLE_CHOICE.value, points=2, options=[
            (3, "4", True),
            (4, "3", False),
        ])
        right = score_rules.evaluate(question, SubmittedAnswer(6, ["4"]))
        wrong = score_rules.evaluate(question, SubmittedAnswer(6, ["3"]))
        self.assertTrue(right.is_correct)
        self.assertEqual(right.points, 2)
        self.assertFalse(wrong.is_correct)
        self.assertEqual(wrong.points, 0)


class MultipleSelectionTests(unittest.TestCase):
    def setUp(self):
        self.question = make_question(2, QuestionType.MULTIPLE_SELECTION.value, points=4, options=[
            (21, "2", True),
            (22, "4", False),
            (23, "3", True),
        ])

    def test_exact_set_is_correct(self):
        outcome = score_rules.evaluate(self.question, SubmittedAnswer(2, ["3", "2"]))
        self.assertTrue(outcome.is_correct)
        self.assertEqual(outcome.points, 4)

    def test_subset_earns_nothing(self):
        outcome = score_rules.evaluate(self.question, SubmittedAnswer(2, ["2"]))
        self.assertFalse(outcome.is_correct)
        self.assertEqual(outcome.points, 0)

    def test_superset_earns_nothing(self):
        outcome = score_rules.evaluate(self.question, SubmittedAnswer(2, ["2", "4", "3"]))
        self.assertFalse(outcome.is_correct)
        self.assertEqual(outcome.points, 0)

    def test_unknown_option_earns_nothing(self):
        outcome = score_rules.evaluate(self.question, SubmittedAnswer(2, ["2", "3", "99"]))
        self.assertFalse(outcome.is_correct)

    def test_numeric_texts_never_match_other_option_ids(self):
        question = make_question(7, QuestionType.MULTIPLE_SELECTION.value, points=2, options=[
            (3, "4", True),
            (4, "3", False),
            (5, "8", True),
        ])
        self.assertTrue(score_rules.evaluate(question, SubmittedAnswer(7, ["4", "8"])).is_correct)
        self.assertFalse(score_rules.evaluate(question, SubmittedAnswer(7, ["3", "5"])).is_correct)


class TrueFalseAndShortAnswerTests(unittest.TestCase):
    def test_true_false_matches_single_correct_option(self):
        question = make_question(3, QuestionType.TRUE_FALSE.value, points=1, options=[
            (31, "True", False),
            (32, "False", True),
        ])
        self.assertTrue(score_rules.evaluate(question, SubmittedAnswer(3, ["False"])).is_correct)
        self.assertFalse(score_rules.evaluate(question, SubmittedAnswer(3, ["True"])).is_correct)

    def test_short_answer_is_never_auto_scored(self):
        question = make_question(4, QuestionType.SHORT_ANSWER.value, points=5)
        outcome = score_rules.evaluate(question, SubmittedAnswer(4, [], "photosynthesis"))
        self.assertFalse(outcome.is_correct)
        self.assertEqual(outcome.points, 0)

    def test_unknown_question_type_scores_zero(self):
        question = make_question(5, "ESSAY", points=5)
        self.assertEqual(score_rules.evaluate(question, SubmittedAnswer(5, ["x"])), score_rules.INCORRECT)


class SubmittedAnswerPayloadTests(unittest.TestCase):
    def test_accepts_camel_case_and_scalar_selection(self):
        answer = SubmittedAnswer.from_payload({"questionId": "7", "selectedOptions": 12})
        self.assertEqual(answer.question_id, 7)
        self.assertEqual(answer.selected_options, ["12"])
        self.assertIsNone(answer.text_answer)

    def test_accepts_snake_case(self):
        answer = SubmittedAnswer.from_payload({"question_id": 8, "text_answer": "mitochondria"})
        self.assertEqual(answer.question_id, 8)
        self.assertEqual(answer.selected_options, [])
        self.assertEqual(answer.text_answer, "mitochondria")

    def test_missing_question_id_is_rejected(self):
        with self.assertRaises(TypeError):
            SubmittedAnswer.from_payload({"selected_options": ["1"]})


if __name__ == "__main__":
    unittest.main()
