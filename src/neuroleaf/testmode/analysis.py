"""Whole-test analysis and progressive-disclosure feedback.

grade_test() grades every answer with the comprehensive grader, aggregates
topics across questions and derives the overall assessment.
build_feedback_hierarchy() reshapes the results from a headline grade
down to per-question detail.
"""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime, timezone

from neuroleaf.llm import LLMClient
from neuroleaf.testmode.grading import grade_response_comprehensive
from neuroleaf.testmode.models import (
    AtGlanceFeedback,
    ComprehensiveGradingResult,
    FeedbackHierarchy,
    GrowthPlan,
    LetterGrade,
    OverallTestAnalysis,
    Performance,
    PrimaryFeedback,
    QuestionAnalysis,
    QuickStats,
    TestAnswer,
    TestResults,
    TopicPerformance,
    TopicsFeedback,
)
from neuroleaf.textutil import round_half_up

logger = logging.getLogger(__name__)

_STRONG_ANSWER_SCORE = 80
_WEAK_TOPIC_LEVEL = 70

_PERFORMANCE_LEVEL: dict[LetterGrade, str] = {
    LetterGrade.A: "excellent",
    LetterGrade.B: "good",
    LetterGrade.C: "fair",
    LetterGrade.D: "poor",
    LetterGrade.F: "very poor",
}

_CELEBRATIONS: dict[LetterGrade, list[str]] = {
    LetterGrade.A: ["Outstanding work!", "Exceptional performance!", "Excellence achieved!"],
    LetterGrade.B: ["Great job!", "Well done!", "Strong performance!"],
    LetterGrade.C: ["Good effort!", "You're learning!", "Keep improving!"],
    LetterGrade.D: ["Nice try!", "Growing stronger!", "Learning in progress!"],
    LetterGrade.F: [
        "Ready to improve!",
        "Every expert was once a beginner!",
        "Learning journey continues!",
    ],
}


def letter_grade(score: int) -> LetterGrade:
    if score >= 90:
        return LetterGrade.A
    if score >= 80:
        return LetterGrade.B
    if score >= 70:
        return LetterGrade.C
    if score >= 60:
        return LetterGrade.D
    return LetterGrade.F


def _topic_performance(average: float) -> Performance:
    if average >= 90:
        return Performance.EXCELLENT
    if average >= 80:
        return Performance.GOOD
    if average >= 60:
        return Performance.FAIR
    return Performance.POOR


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


# ============================================================
# Per-question and topic analysis
# ============================================================


def to_question_analysis(
    answer: TestAnswer,
    grading: ComprehensiveGradingResult,
) -> QuestionAnalysis:
    topics = grading.topic_analysis
    return QuestionAnalysis(
        question_id=answer.question_id,
        question_text=answer.question,
        user_answer=answer.user_answer,
        expected_answer=answer.expected_answer,
        individual_score=grading.score,
        individual_grade=letter_grade(grading.score),
        detailed_feedback=grading.feedback,
        topic_areas=[t.topic for t in topics],
        specific_mistakes=[gap for t in topics for gap in t.specific_gaps],
        what_went_well=[s for t in topics for s in t.strengths],
        improvement_tips=list(grading.improvement_suggestions),
        confidence_level=grading.confidence_level,
    )


def aggregate_topics(analyses: list[QuestionAnalysis]) -> list[TopicPerformance]:
    """Merge topics across questions, averaging scores and deduplicating notes.

    Topics keep the order of their first appearance.
    """
    scores: dict[str, list[int]] = {}
    gaps: dict[str, list[str]] = {}
    strengths: dict[str, list[str]] = {}
    for analysis in analyses:
        for topic in analysis.topic_areas:
            scores.setdefault(topic, []).append(analysis.individual_score)
            gaps.setdefault(topic, []).extend(analysis.specific_mistakes)
            strengths.setdefault(topic, []).extend(analysis.what_went_well)

    topics: list[TopicPerformance] = []
    for topic, topic_scores in scores.items():
        average = sum(topic_scores) / len(topic_scores)
        topics.append(
            TopicPerformance(
                topic=topic,
                performance=_topic_performance(average),
                understanding_level=round_half_up(average),
                specific_gaps=_unique(gaps[topic]),
                strengths=_unique(strengths[topic]),
            )
        )
    return topics


# ============================================================
# Overall assessment
# ============================================================


def _grade_explanation(grade: LetterGrade, percentage: int, question_count: int) -> str:
    return (
        f"You achieved a {grade} grade ({percentage}%) on this "
        f"{question_count}-question test, demonstrating {_PERFORMANCE_LEVEL[grade]} "
        "understanding of the material."
    )


def _improvement_recommendations(
    weak_topics: list[TopicPerformance],
    average: int,
) -> list[str]:
    recommendations: list[str] = []
    if weak_topics:
        names = ", ".join(t.topic for t in weak_topics)
        recommendations.append(f"Focus on improving your understanding of: {names}")
        worst = min(weak_topics, key=lambda t: t.understanding_level)
        recommendations.append(
            f"Priority: Review {worst.topic} - consider seeking additional help or resources"
        )

    if average < 70:
        recommendations.append(
            "Schedule regular study sessions and practice with similar questions"
        )
        recommendations.append("Consider forming a study group or working with a tutor")
    elif average < 85:
        recommendations.append(
            "Practice more challenging questions to deepen your understanding"
        )

    return recommendations or [
        "Continue your excellent work and maintain consistent study habits"
    ]


def _study_plan(topics: list[TopicPerformance], average: int) -> list[str]:
    if average < 60:
        plan = ["Dedicate 1-2 hours daily to reviewing fundamental concepts"]
    elif average < 80:
        plan = ["Study 30-45 minutes daily focusing on weaker topic areas"]
    else:
        plan = ["Maintain current study routine with 15-30 minutes daily review"]

    weak = [t.topic for t in topics if t.understanding_level < _WEAK_TOPIC_LEVEL]
    if weak:
        plan.append(f"Create flashcards or notes for: {', '.join(weak)}")
        plan.append("Take practice quizzes on your weakest topics weekly")

    plan.append("Retake this test in 1-2 weeks to measure improvement")
    plan.append("Practice explaining concepts out loud to improve understanding")
    return plan


def score_spread(scores: list[int]) -> float:
    """Population standard deviation; 0 for fewer than two scores."""
    if len(scores) <= 1:
        return 0.0
    mean = sum(scores) / len(scores)
    return math.sqrt(sum((s - mean) ** 2 for s in scores) / len(scores))


def overall_analysis(
    analyses: list[QuestionAnalysis],
    topics: list[TopicPerformance],
) -> OverallTestAnalysis:
    scores = [a.individual_score for a in analyses]
    average = round_half_up(sum(scores) / len(scores))
    grade = letter_grade(average)

    strong = [t for t in topics if t.performance in (Performance.EXCELLENT, Performance.GOOD)]
    weak = [t for t in topics if t.performance in (Performance.FAIR, Performance.POOR)]

    return OverallTestAnalysis(
        overall_grade=grade,
        overall_percentage=average,
        grade_explanation=_grade_explanation(grade, average, len(analyses)),
        topic_breakdown=topics,
        strengths_summary=(
            [f"Strong understanding of {t.topic}" for t in strong]
            or ["Shows effort and engagement with the material"]
        ),
        weaknesses_summary=(
            [f"Needs improvement in {t.topic}" for t in weak]
            or ["Continue practicing to maintain strong performance"]
        ),
        priority_study_areas=[
            t.topic for t in sorted(topics, key=lambda t: t.understanding_level)[:3]
        ],
        improvement_recommendations=_improvement_recommendations(weak, average),
        study_plan_suggestions=_study_plan(topics, average),
        confidence_assessment=round_half_up(max(50.0, 100 - score_spread(scores))),
    )


def grade_test(
    answers: list[TestAnswer],
    *,
    client: LLMClient,
    time_spent_minutes: float = 0,
) -> TestResults:
    """Grade a full test and build the overall analysis.

    Args:
        answers: One entry per answered question.
        client: LLM client used for comprehensive grading.
        time_spent_minutes: Recorded on the results as-is.

    Returns:
        TestResults with per-question analyses and the overall assessment.

    Raises:
        ValueError: If answers is empty.
    """
    if not answers:
        raise ValueError("Cannot grade a test with no answers")

    analyses: list[QuestionAnalysis] = []
    for answer in answers:
        grading = grade_response_comprehensive(
            answer.question,
            answer.user_answer,
            client=client,
            expected_answer=answer.expected_answer,
        )
        analyses.append(to_question_analysis(answer, grading))

    topics = aggregate_topics(analyses)
    overall = overall_analysis(analyses, topics)
    logger.info(
        "Graded %d answers: %s (%d%%), %d topics",
        len(analyses),
        overall.overall_grade,
        overall.overall_percentage,
        len(topics),
    )

    return TestResults(
        overall_analysis=overall,
        individual_questions=analyses,
        time_spent_minutes=time_spent_minutes,
        completion_date=datetime.now(timezone.utc).isoformat(),
    )


# ============================================================
# Feedback hierarchy
# ============================================================


def key_insight(analysis: OverallTestAnalysis) -> str:
    """One-line headline for the overall percentage."""
    pct = analysis.overall_percentage
    weakness = analysis.weaknesses_summary[0] if analysis.weaknesses_summary else ""
    strength = analysis.strengths_summary[0] if analysis.strengths_summary else ""
    if pct >= 90:
        return "Excellent mastery demonstrated across all areas!"
    if pct >= 80:
        return f"Strong performance with room to excel in {weakness or 'advanced topics'}"
    if pct >= 70:
        return f"Good foundation established. Focus on {weakness or 'key concepts'}"
    if pct >= 60:
        return f"Basic understanding shown. Strengthen {weakness or 'fundamental concepts'}"
    return f"Great effort! Build confidence with {strength or 'consistent practice'}"


def celebration_message(grade: LetterGrade, rng: random.Random | None = None) -> str:
    return (rng or random).choice(_CELEBRATIONS[grade])


def topic_summary(topics: list[TopicPerformance]) -> str:
    if not topics:
        return "Assessment completed successfully."

    excellent = sum(1 for t in topics if t.performance == Performance.EXCELLENT)
    good = sum(1 for t in topics if t.performance == Performance.GOOD)
    needs_work = sum(1 for t in topics if t.performance in (Performance.FAIR, Performance.POOR))

    if excellent > good + needs_work:
        tail = f" Focus on {needs_work} topics for improvement." if needs_work else ""
        return f"Excellent understanding in {excellent} areas.{tail}"
    if good > 0:
        tail = f" {needs_work} areas need attention." if needs_work else ""
        return f"Good grasp of {good} concepts.{tail}"
    return f"{len(topics)} topics reviewed. Focus on strengthening fundamental understanding."


def build_feedback_hierarchy(
    results: TestResults,
    rng: random.Random | None = None,
) -> FeedbackHierarchy:
    """Arrange test results from headline grade down to question detail."""
    overall = results.overall_analysis
    questions = results.individual_questions

    return FeedbackHierarchy(
        primary=PrimaryFeedback(
            grade=overall.overall_grade,
            percentage=overall.overall_percentage,
            key_insight=key_insight(overall),
            celebration_message=celebration_message(overall.overall_grade, rng),
        ),
        at_glance=AtGlanceFeedback(
            performance_summary=overall.grade_explanation,
            primary_strength=(
                overall.strengths_summary[0]
                if overall.strengths_summary
                else "Completed the assessment"
            ),
            primary_improvement=(
                overall.weaknesses_summary[0]
                if overall.weaknesses_summary
                else "Continue practicing"
            ),
            quick_stats=QuickStats(
                strong_answers=sum(
                    1 for q in questions if q.individual_score >= _STRONG_ANSWER_SCORE
                ),
                total_questions=len(questions),
                confidence_level=overall.confidence_assessment,
            ),
        ),
        topics=TopicsFeedback(
            main_topics=overall.topic_breakdown[:5],
            topic_summary=topic_summary(overall.topic_breakdown),
        ),
        growth_plan=GrowthPlan(
            priority_areas=overall.priority_study_areas[:3],
            action_steps=overall.improvement_recommendations[:4],
            study_tips=overall.study_plan_suggestions[:3],
        ),
        question_details=questions,
    )
