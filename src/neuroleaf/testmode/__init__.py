"""Test mode for neuroleaf.

Generates open questions from a deck, grades answers with the LLM or
objectively, and turns graded tests into layered feedback.
"""

from neuroleaf.testmode.analysis import (
    aggregate_topics,
    build_feedback_hierarchy,
    grade_test,
    letter_grade,
)
from neuroleaf.testmode.grading import (
    fallback_grading,
    grade_response,
    grade_response_comprehensive,
)
from neuroleaf.testmode.models import (
    ComprehensiveGradingResult,
    FeedbackHierarchy,
    GradingResult,
    LetterGrade,
    Performance,
    QuestionType,
    TestAnswer,
    TestQuestion,
    TestResults,
    TopicPerformance,
)
from neuroleaf.testmode.objective import (
    can_grade_objectively,
    grade_multiple_choice,
    grade_objective_question,
    grade_true_false,
    objective_performance_summary,
)
from neuroleaf.testmode.questions import generate_questions

__all__ = [
    "ComprehensiveGradingResult",
    "FeedbackHierarchy",
    "GradingResult",
    "LetterGrade",
    "Performance",
    "QuestionType",
    "TestAnswer",
    "TestQuestion",
    "TestResults",
    "TopicPerformance",
    "aggregate_topics",
    "build_feedback_hierarchy",
    "can_grade_objectively",
    "fallback_grading",
    "generate_questions",
    "grade_multiple_choice",
    "grade_objective_question",
    "grade_response",
    "grade_response_comprehensive",
    "grade_test",
    "grade_true_false",
    "letter_grade",
    "objective_performance_summary",
]
