"""Direct grading of multiple-choice and true/false questions.

No LLM call is made; scores are 100 or 0.
"""

from __future__ import annotations

import re

from neuroleaf.testmode.models import GradingResult, ObjectiveSummary, QuestionType
from neuroleaf.textutil import round_half_up

OBJECTIVE_MODEL = "objective_grading_v1"

_LETTER_RE = re.compile(r"^[A-Z]$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

_TRUE_ANSWERS = frozenset({"true", "t", "1", "yes", "y"})
_FALSE_ANSWERS = frozenset({"false", "f", "0", "no", "n"})


def _append_explanation(feedback: str, explanation: str | None) -> str:
    return f"{feedback} {explanation}" if explanation else feedback


def _parse_choice(user_answer: str) -> int | None:
    if _LETTER_RE.match(user_answer):
        return ord(user_answer) - ord("A")
    match = _LEADING_INT_RE.match(user_answer)
    if not match:
        return None
    index = int(match.group(1))
    return index if index >= 0 else None


def grade_multiple_choice(
    user_answer: str,
    correct_answer: int,
    *,
    options: list[str] | None = None,
    explanation: str | None = None,
) -> GradingResult:
    """Grade a choice given as a capital letter ("B") or a 0-based index ("1")."""
    opts = options or []
    user_index = _parse_choice(user_answer)
    if user_index is None:
        return GradingResult(
            score=0,
            feedback="Invalid answer format. Please select a valid option.",
            is_correct=False,
            model_used=OBJECTIVE_MODEL,
        )

    is_correct = user_index == correct_answer
    correct_option = (
        opts[correct_answer] if 0 <= correct_answer < len(opts) else f"Option {correct_answer + 1}"
    )
    user_option = opts[user_index] if user_index < len(opts) else f"Option {user_index + 1}"

    if is_correct:
        feedback = f'Correct! You selected "{user_option}".'
    else:
        feedback = (
            f'Incorrect. You selected "{user_option}" but the correct answer '
            f'is "{correct_option}".'
        )

    return GradingResult(
        score=100 if is_correct else 0,
        feedback=_append_explanation(feedback, explanation),
        is_correct=is_correct,
        model_used=OBJECTIVE_MODEL,
    )


def grade_true_false(
    user_answer: str,
    correct_answer: bool,
    *,
    explanation: str | None = None,
) -> GradingResult:
    """Grade true/false answers given as true/t/1/yes/y or false/f/0/no/n."""
    normalized = user_answer.strip().lower()
    if normalized in _TRUE_ANSWERS:
        user_bool = True
    elif normalized in _FALSE_ANSWERS:
        user_bool = False
    else:
        return GradingResult(
            score=0,
            feedback="Invalid answer format. Please answer with 'true' or 'false'.",
            is_correct=False,
            model_used=OBJECTIVE_MODEL,
        )

    is_correct = user_bool == correct_answer
    expected = "true" if correct_answer else "false"
    if is_correct:
        feedback = f"Correct! The statement is {expected}."
    else:
        given = "true" if user_bool else "false"
        feedback = f"Incorrect. The statement is {expected}, not {given}."

    return GradingResult(
        score=100 if is_correct else 0,
        feedback=_append_explanation(feedback, explanation),
        is_correct=is_correct,
        model_used=OBJECTIVE_MODEL,
    )


def can_grade_objectively(
    question_type: QuestionType | str | None,
    correct_answer: int | bool | None,
) -> bool:
    """True for multiple choice with an int answer or true/false with a bool."""
    if question_type == QuestionType.MULTIPLE_CHOICE:
        return isinstance(correct_answer, int) and not isinstance(correct_answer, bool)
    if question_type == QuestionType.TRUE_FALSE:
        return isinstance(correct_answer, bool)
    return False


def grade_objective_question(
    question_type: QuestionType | str,
    user_answer: str,
    correct_answer: int | bool,
    *,
    options: list[str] | None = None,
    explanation: str | None = None,
) -> GradingResult:
    """Route to the grader for the question type.

    Raises:
        ValueError: If the question type cannot be graded objectively.
    """
    if not can_grade_objectively(question_type, correct_answer):
        raise ValueError(
            f"Unsupported question type for objective grading: {question_type}"
        )
    if question_type == QuestionType.MULTIPLE_CHOICE:
        return grade_multiple_choice(
            user_answer, int(correct_answer), options=options, explanation=explanation
        )
    return grade_true_false(user_answer, bool(correct_answer), explanation=explanation)


def objective_performance_summary(results: list[GradingResult]) -> ObjectiveSummary:
    total = len(results)
    correct = sum(1 for r in results if r.is_correct)
    if total == 0:
        return ObjectiveSummary(correct_count=0, total_count=0, percentage=0, average_score=0)
    return ObjectiveSummary(
        correct_count=correct,
        total_count=total,
        percentage=round_half_up(correct / total * 100),
        average_score=round_half_up(sum(r.score for r in results) / total),
    )
