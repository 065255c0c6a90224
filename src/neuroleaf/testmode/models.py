"""Pydantic models for neuroleaf test mode.

Covers generated questions, per-answer grading results, topic and
question analyses, the overall test analysis, and the progressive
disclosure feedback hierarchy. All models are frozen.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from neuroleaf.schemas import Difficulty


class LetterGrade(StrEnum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class Performance(StrEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class QuestionType(StrEnum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    OPEN_ENDED = "open_ended"


class TestQuestion(BaseModel, frozen=True):
    """A generated open-ended test question."""

    __test__ = False  # not a pytest test class

    question: str = Field(min_length=1)
    suggested_answer: str | None = None
    difficulty: Difficulty = Difficulty.MEDIUM


class GradingResult(BaseModel, frozen=True):
    """Score (0-100) and feedback for one answer."""

    score: int = Field(ge=0, le=100)
    feedback: str
    is_correct: bool
    model_used: str


class TopicPerformance(BaseModel, frozen=True):
    topic: str
    performance: Performance
    understanding_level: int = Field(ge=0, le=100)
    specific_gaps: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)


class ComprehensiveGradingResult(GradingResult, frozen=True):
    """Grading result with topic analysis and actionable guidance."""

    topic_analysis: list[TopicPerformance] = Field(default_factory=list)
    improvement_suggestions: list[str] = Field(default_factory=list)
    reasoning_chain: list[str] = Field(default_factory=list)
    confidence_level: int = Field(default=50, ge=0, le=100)


class TestAnswer(BaseModel, frozen=True):
    """A user's answer to one question, ready for grading."""

    __test__ = False  # not a pytest test class

    question_id: str
    question: str
    user_answer: str
    expected_answer: str = ""


class QuestionAnalysis(BaseModel, frozen=True):
    question_id: str
    question_text: str
    user_answer: str
    expected_answer: str = ""
    individual_score: int = Field(ge=0, le=100)
    individual_grade: LetterGrade
    detailed_feedback: str
    topic_areas: list[str] = Field(default_factory=list)
    specific_mistakes: list[str] = Field(default_factory=list)
    what_went_well: list[str] = Field(default_factory=list)
    improvement_tips: list[str] = Field(default_factory=list)
    confidence_level: int = Field(ge=0, le=100)


class OverallTestAnalysis(BaseModel, frozen=True):
    overall_grade: LetterGrade
    overall_percentage: int = Field(ge=0, le=100)
    grade_explanation: str
    topic_breakdown: list[TopicPerformance] = Field(default_factory=list)
    strengths_summary: list[str] = Field(default_factory=list)
    weaknesses_summary: list[str] = Field(default_factory=list)
    priority_study_areas: list[str] = Field(default_factory=list)
    improvement_recommendations: list[str] = Field(default_factory=list)
    study_plan_suggestions: list[str] = Field(default_factory=list)
    confidence_assessment: int = Field(ge=0, le=100)


class TestResults(BaseModel, frozen=True):
    """Graded test: overall analysis plus one analysis per question."""

    __test__ = False  # not a pytest test class

    overall_analysis: OverallTestAnalysis
    individual_questions: list[QuestionAnalysis]
    time_spent_minutes: float = 0
    completion_date: str


class PrimaryFeedback(BaseModel, frozen=True):
    grade: LetterGrade
    percentage: int
    key_insight: str
    celebration_message: str


class QuickStats(BaseModel, frozen=True):
    strong_answers: int
    total_questions: int
    confidence_level: int


class AtGlanceFeedback(BaseModel, frozen=True):
    performance_summary: str
    primary_strength: str
    primary_improvement: str
    quick_stats: QuickStats


class TopicsFeedback(BaseModel, frozen=True):
    main_topics: list[TopicPerformance] = Field(max_length=5)
    topic_summary: str


class GrowthPlan(BaseModel, frozen=True):
    priority_areas: list[str] = Field(max_length=3)
    action_steps: list[str] = Field(max_length=4)
    study_tips: list[str] = Field(max_length=3)


class FeedbackHierarchy(BaseModel, frozen=True):
    """Test feedback ordered from headline to full per-question detail."""

    primary: PrimaryFeedback
    at_glance: AtGlanceFeedback
    topics: TopicsFeedback
    growth_plan: GrowthPlan
    question_details: list[QuestionAnalysis]


class ObjectiveSummary(BaseModel, frozen=True):
    correct_count: int
    total_count: int
    percentage: int
    average_score: int
