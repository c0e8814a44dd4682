"""Per-question scoring rules.

Pure functions: they read a question and what the student sent, and never
touch the database.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from scoring.constants import QuestionType


@dataclass
class SubmittedAnswer:
    """One answer as sent by the client for a single question."""

    question_id: int
    selected_options: List[str] = field(default_factory=list)
    text_answer: Optional[str] = None

    @classmethod
    def from_payload(cls, payload):
        selected = payload.get("selected_options")
        if selected is None:
            selected = payload.get("selectedOptions") or []
        if isinstance(selected, (str, int)):
            selected = [selected]
        return cls(
            question_id=int(payload.get("question_id", payload.get("questionId"))),
            selected_options=[str(option) for option in selected],
            text_answer=payload.get("text_answer", payload.get("textAnswer")),
        )


@dataclass(frozen=True)
class AnswerOutcome:
    is_correct: bool
    points: float


INCORRECT = AnswerOutcome(is_correct=False, points=0)


def resolve_option(question, submitted):
    """Match a submitted value to one of the question's options by its text."""
    value = str(submitted)
    for option in question.options:
        if option.text == value:
            return option
    return None


def correct_options(question):
    return [option for option in question.options if option.is_correct]


def _score_single_choice(question, answer):
    if len(answer.selected_options) != 1:
        return INCORRECT
    chosen = resolve_option(question, answer.selected_options[0])
    expected = correct_options(question)
    if chosen is None or len(expected) != 1 or chosen is not expected[0]:
        return INCORRECT
    return AnswerOutcome(is_correct=True, points=question.points)


def _score_multiple_selection(question, answer):
    if not answer.selected_options:
        return INCORRECT
    chosen = set()
    for value in answer.selected_options:
        option = resolve_option(question, value)
        if option is None:
            return INCORRECT
        chosen.add(id(option))
    expected = {id(option) for option in correct_options(question)}
    if not expected or chosen != expected:
        return INCORRECT
    return AnswerOutcome(is_correct=True, points=question.points)


def _score_short_answer(question, answer):
    # Left for a human grader, see AttemptLedger.override_answer
    return INCORRECT


_RULES = {
    QuestionType.MULTIPLE_CHOICE.value: _score_single_choice,
    QuestionType.TRUE_FALSE.value: _score_single_choice,
    QuestionType.MULTIPLE_SELECTION.value: _score_multiple_selection,
    QuestionType.SHORT_ANSWER.value: _score_short_answer,
}


def evaluate(question, answer):
    """Score one submitted answer against its question."""
    question_type = getattr(question.question_type, "value", question.question_type)
    rule = _RULES.get(question_type)
    if rule is None:
        return INCORRECT
    return rule(question, answer)
