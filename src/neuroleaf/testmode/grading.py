"""LLM grading of open-ended answers for neuroleaf test mode.

grade_response() asks for a score and feedback; the comprehensive variant
also asks for topic analysis and improvement steps. Unparseable output
falls back to a "score: N" scan, and LLM failures fall back to word
overlap with the expected answer.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from neuroleaf.errors import AIServiceError
from neuroleaf.llm import LLMClient
from neuroleaf.parser import parse_json_object
from neuroleaf.testmode.models import (
    ComprehensiveGradingResult,
    GradingResult,
    Performance,
    TopicPerformance,
)
from neuroleaf.textutil import round_half_up

logger = logging.getLogger(__name__)

FALLBACK_MODEL = "fallback"

_SCORE_RE = re.compile(r"score[\":\s]*(\d+)", re.IGNORECASE)
_PASSING_SCORE = 70
_SIMILARITY_CORRECT_THRESHOLD = 0.6


def _clamp_score(value: Any) -> int:
    try:
        score = float(value or 0)
    except (TypeError, ValueError):
        score = 0.0
    return int(max(0.0, min(100.0, score)))


def performance_for_score(score: int) -> Performance:
    """Coarse performance band used when no topic analysis is available."""
    if score >= 80:
        return Performance.GOOD
    if score >= 60:
        return Performance.FAIR
    return Performance.POOR


def _general_topic(score: int, gap: str, strength: str) -> TopicPerformance:
    return TopicPerformance(
        topic="General Knowledge",
        performance=performance_for_score(score),
        understanding_level=score,
        specific_gaps=[gap],
        strengths=[strength] if score >= _PASSING_SCORE else [],
    )


# ============================================================
# Prompts
# ============================================================


def build_grading_prompt(
    question: str,
    user_response: str,
    *,
    expected_answer: str = "",
    context: str = "",
) -> str:
    expected = f"EXPECTED ANSWER: {expected_answer}\n\n" if expected_answer else ""
    ctx = f"CONTEXT: {context}\n\n" if context else ""
    return f"""\
You are an expert tutor grading a student's response. Provide a score from 0-100 and constructive feedback.

QUESTION: {question}

{expected}STUDENT'S RESPONSE: {user_response}

{ctx}Please respond in the following JSON format:
{{
  "score": <number 0-100>,
  "feedback": "<constructive feedback explaining the score and how to improve>",
  "is_correct": <boolean>
}}

Grading Criteria:
- 90-100: Excellent understanding, complete and accurate
- 80-89: Good understanding, mostly correct with minor issues
- 70-79: Fair understanding, correct main points but missing details
- 60-69: Basic understanding, some correct elements but significant gaps
- 50-59: Limited understanding, major misconceptions
- 0-49: Incorrect or no meaningful understanding

Provide specific, actionable feedback that helps the student improve their understanding."""


def build_comprehensive_grading_prompt(
    question: str,
    user_response: str,
    *,
    expected_answer: str = "",
    context: str = "",
) -> str:
    expected = f"EXPECTED RESPONSE: {expected_answer}\n" if expected_answer else ""
    ctx = f"CONTEXT: {context}\n" if context else ""
    return f"""\
You are an expert educator providing focused, learner-friendly assessment feedback.

QUESTION: {question}
{expected}STUDENT'S ANSWER: {user_response}
{ctx}
ANALYSIS FRAMEWORK:
Provide clear, chunked feedback focusing on the 3 most important insights.

1. PERFORMANCE ASSESSMENT:
   - Evaluate accuracy and understanding depth
   - Assign score (0-100) with clear reasoning
   - Identify the ONE primary strength
   - Identify the ONE key improvement area

2. TOPIC UNDERSTANDING:
   - Focus on 2-3 main topics maximum
   - Rate understanding level for each topic (0-100)
   - Note specific gaps and strengths concisely

3. ACTIONABLE GUIDANCE:
   - Provide exactly 3 improvement suggestions
   - Lead with positive feedback
   - Focus on next steps, not comprehensive analysis

OUTPUT FORMAT (JSON):
{{
  "score": <0-100>,
  "feedback": "<concise, encouraging explanation of performance>",
  "is_correct": <boolean>,
  "topic_analysis": [
    {{
      "topic": "<main concept>",
      "performance": "<excellent|good|fair|poor>",
      "understanding_level": <0-100>,
      "specific_gaps": ["<most important gap>"],
      "strengths": ["<key strength>"]
    }}
  ],
  "improvement_suggestions": ["<actionable tip 1>", "<actionable tip 2>", "<actionable tip 3>"],
  "reasoning_chain": [
    "Assessment: <brief reasoning>",
    "Key insight: <main takeaway>",
    "Next step: <priority action>"
  ],
  "confidence_level": <0-100>
}}

GRADING SCALE:
90-100: Excellent mastery  |  80-89: Good understanding  |  70-79: Fair grasp
60-69: Basic knowledge     |  50-59: Limited understanding |  0-49: Needs review

FEEDBACK PRINCIPLES:
- Start with positive observations
- Use simple, clear language
- Limit to 3-5 key points maximum
- Focus on actionable next steps, not exhaustive analysis"""


# ============================================================
# Parsing
# ============================================================


def _scan_score(text: str) -> int:
    match = _SCORE_RE.search(text)
    return _clamp_score(match.group(1)) if match else 0


def parse_grading_response(text: str, *, model: str) -> GradingResult:
    """Read score/feedback/is_correct JSON, else scan for "score: N"."""
    try:
        data = parse_json_object(text)
    except ValueError:
        score = _scan_score(text)
        return GradingResult(
            score=score,
            feedback=text or "Unable to process response.",
            is_correct=score >= _PASSING_SCORE,
            model_used=model,
        )

    return GradingResult(
        score=_clamp_score(data.get("score")),
        feedback=str(data.get("feedback") or "No feedback provided."),
        is_correct=bool(data.get("is_correct")),
        model_used=model,
    )


def _parse_topic(item: Any) -> TopicPerformance | None:
    if not isinstance(item, dict):
        return None
    try:
        performance = Performance(item.get("performance"))
    except ValueError:
        performance = Performance.FAIR
    gaps = item.get("specific_gaps")
    strengths = item.get("strengths")
    return TopicPerformance(
        topic=str(item.get("topic") or "Unknown Topic"),
        performance=performance,
        understanding_level=_clamp_score(item.get("understanding_level")),
        specific_gaps=[str(g) for g in gaps] if isinstance(gaps, list) else [],
        strengths=[str(s) for s in strengths] if isinstance(strengths, list) else [],
    )


def _string_list(value: Any, default: list[str]) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value]
    return default


def parse_comprehensive_grading_response(
    text: str,
    *,
    model: str,
) -> ComprehensiveGradingResult:
    """Read the comprehensive grading JSON, filling gaps with defaults."""
    try:
        data = parse_json_object(text)
    except ValueError:
        score = _scan_score(text)
        return ComprehensiveGradingResult(
            score=score,
            feedback=text or "Unable to process comprehensive response.",
            is_correct=score >= _PASSING_SCORE,
            model_used=model,
            topic_analysis=[
                _general_topic(score, "Detailed analysis unavailable", "Shows basic understanding")
            ],
            improvement_suggestions=[
                "Review the material thoroughly",
                "Practice similar questions",
            ],
            reasoning_chain=["Fallback analysis due to parsing error"],
            confidence_level=30,
        )

    score = _clamp_score(data.get("score"))
    raw_topics = data.get("topic_analysis")
    if isinstance(raw_topics, list):
        topics = [t for t in (_parse_topic(item) for item in raw_topics) if t is not None]
    else:
        topics = [_general_topic(score, "Analysis unavailable", "Shows understanding")]

    return ComprehensiveGradingResult(
        score=score,
        feedback=str(data.get("feedback") or "Comprehensive feedback unavailable."),
        is_correct=bool(data.get("is_correct")),
        model_used=model,
        topic_analysis=topics,
        improvement_suggestions=_string_list(
            data.get("improvement_suggestions"), ["Review the material and practice more"]
        ),
        reasoning_chain=_string_list(
            data.get("reasoning_chain"), ["Basic analysis performed"]
        ),
        confidence_level=_clamp_score(data.get("confidence_level") or 50),
    )


# ============================================================
# Fallback
# ============================================================


def word_set_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity of the whitespace-separated word sets."""
    words1 = set(text1.split())
    words2 = set(text2.split())
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def fallback_grading(expected_answer: str, user_response: str) -> GradingResult:
    """Grade without the LLM by word overlap with the expected answer."""
    if not user_response.strip():
        return GradingResult(
            score=0,
            feedback="No response provided.",
            is_correct=False,
            model_used=FALLBACK_MODEL,
        )

    if not expected_answer:
        return GradingResult(
            score=50,
            feedback=(
                "Response recorded. Unable to grade automatically without "
                "expected answer."
            ),
            is_correct=False,
            model_used=FALLBACK_MODEL,
        )

    similarity = word_set_similarity(expected_answer.lower(), user_response.lower())
    is_correct = similarity > _SIMILARITY_CORRECT_THRESHOLD
    return GradingResult(
        score=round_half_up(similarity * 100),
        feedback=(
            "Your response shows good understanding of the concept."
            if is_correct
            else "Your response needs improvement. Review the material and try "
            "to be more specific."
        ),
        is_correct=is_correct,
        model_used=FALLBACK_MODEL,
    )


# ============================================================
# Public API
# ============================================================


def grade_response(
    question: str,
    user_response: str,
    *,
    client: LLMClient,
    expected_answer: str = "",
    context: str = "",
) -> GradingResult:
    """Grade one open-ended answer. LLM errors use fallback_grading()."""
    prompt = build_grading_prompt(
        question, user_response, expected_answer=expected_answer, context=context
    )
    try:
        response = client.generate(prompt)
    except AIServiceError as e:
        logger.error("AI grading failed, using fallback: %s", e)
        return fallback_grading(expected_answer, user_response)

    return parse_grading_response(response.text, model=response.model)


def grade_response_comprehensive(
    question: str,
    user_response: str,
    *,
    client: LLMClient,
    expected_answer: str = "",
    context: str = "",
) -> ComprehensiveGradingResult:
    """Grade one answer with topic analysis and improvement suggestions.

    LLM errors degrade to fallback_grading() wrapped in a generic analysis.
    """
    prompt = build_comprehensive_grading_prompt(
        question, user_response, expected_answer=expected_answer, context=context
    )
    try:
        response = client.generate(prompt)
    except AIServiceError as e:
        logger.error("Comprehensive AI grading failed, using fallback: %s", e)
        basic = fallback_grading(expected_answer, user_response)
        return ComprehensiveGradingResult(
            **basic.model_dump(),
            topic_analysis=[
                _general_topic(
                    basic.score,
                    "Unable to analyze due to AI service error",
                    "Shows basic understanding",
                )
            ],
            improvement_suggestions=["Review the material and try again"],
            reasoning_chain=["Fallback analysis due to service error"],
            confidence_level=50,
        )

    return parse_comprehensive_grading_response(response.text, model=response.model)
