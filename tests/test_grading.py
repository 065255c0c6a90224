"""Tests for neuroleaf.testmode.grading.

Tests cover:
- Prompt builders (optional expected answer and context)
- parse_grading_response() / parse_comprehensive_grading_response()
- word_set_similarity() and fallback_grading()
- grade_response() / grade_response_comprehensive() with LLM failures
"""

from __future__ import annotations

import json

import pytest

from neuroleaf.config import AppConfig
from neuroleaf.cost import MODEL_HAIKU
from neuroleaf.errors import AIServiceError
from neuroleaf.llm import LLMClient
from neuroleaf.testmode.grading import (
    FALLBACK_MODEL,
    build_comprehensive_grading_prompt,
    build_grading_prompt,
    fallback_grading,
    grade_response,
    grade_response_comprehensive,
    parse_comprehensive_grading_response,
    parse_grading_response,
    performance_for_score,
    word_set_similarity,
)
from neuroleaf.testmode.models import Performance

from conftest import make_mock_client

COMPREHENSIVE_JSON = json.dumps(
    {
        "score": 88,
        "feedback": "Solid answer.",
        "is_correct": True,
        "topic_analysis": [
            {
                "topic": "Cell division",
                "performance": "good",
                "understanding_level": 85,
                "specific_gaps": ["Cytokinesis"],
                "strengths": ["Phases"],
            },
            {"topic": "Genetics", "performance": "superb", "understanding_level": 140},
            "junk",
        ],
        "improvement_suggestions": ["Review cytokinesis"],
        "reasoning_chain": ["Assessment: good"],
        "confidence_level": 75,
    }
)


# ============================================================
# Prompt Tests
# ============================================================


class TestGradingPrompts:
    def test_basic_prompt(self) -> None:
        prompt = build_grading_prompt("What is ATP?", "Energy")
        assert "QUESTION: What is ATP?" in prompt
        assert "STUDENT'S RESPONSE: Energy" in prompt
        assert "EXPECTED ANSWER" not in prompt
        assert "CONTEXT" not in prompt

    def test_expected_and_context(self) -> None:
        prompt = build_grading_prompt(
            "What is ATP?", "Energy", expected_answer="Adenosine triphosphate", context="Bio"
        )
        assert "EXPECTED ANSWER: Adenosine triphosphate" in prompt
        assert "CONTEXT: Bio" in prompt

    def test_comprehensive_prompt(self) -> None:
        prompt = build_comprehensive_grading_prompt(
            "What is ATP?", "Energy", expected_answer="Adenosine triphosphate"
        )
        assert "EXPECTED RESPONSE: Adenosine triphosphate" in prompt
        assert "STUDENT'S ANSWER: Energy" in prompt
        assert '"topic_analysis"' in prompt


# ============================================================
# Parsing Tests
# ============================================================


class TestParseGradingResponse:
    def test_json(self) -> None:
        text = '{"score": 85, "feedback": "Good", "is_correct": true}'
        result = parse_grading_response(text, model="m")
        assert (result.score, result.feedback, result.is_correct) == (85, "Good", True)
        assert result.model_used == "m"

    @pytest.mark.parametrize(("raw", "expected"), [(150, 100), (-5, 0), ("abc", 0), (72.9, 72)])
    def test_score_clamped(self, raw: object, expected: int) -> None:
        text = json.dumps({"score": raw, "feedback": "f", "is_correct": False})
        assert parse_grading_response(text, model="m").score == expected

    def test_missing_feedback(self) -> None:
        result = parse_grading_response('{"score": 10}', model="m")
        assert result.feedback == "No feedback provided."
        assert result.is_correct is False

    def test_score_scan_fallback(self) -> None:
        result = parse_grading_response("Score: 75 - decent answer", model="m")
        assert result.score == 75
        assert result.is_correct is True
        assert result.feedback == "Score: 75 - decent answer"

    def test_no_score_found(self) -> None:
        result = parse_grading_response("", model="m")
        assert result.score == 0
        assert result.feedback == "Unable to process response."


class TestParseComprehensiveGradingResponse:
    def test_full_response(self) -> None:
        result = parse_comprehensive_grading_response(COMPREHENSIVE_JSON, model="m")
        assert result.score == 88
        assert result.confidence_level == 75
        assert result.improvement_suggestions == ["Review cytokinesis"]
        assert [t.topic for t in result.topic_analysis] == ["Cell division", "Genetics"]
        assert result.topic_analysis[0].specific_gaps == ["Cytokinesis"]

    def test_topic_defaults(self) -> None:
        result = parse_comprehensive_grading_response(COMPREHENSIVE_JSON, model="m")
        genetics = result.topic_analysis[1]
        assert genetics.performance == Performance.FAIR
        assert genetics.understanding_level == 100
        assert genetics.strengths == []

    def test_missing_sections(self) -> None:
        result = parse_comprehensive_grading_response('{"score": 82}', model="m")
        assert result.feedback == "Comprehensive feedback unavailable."
        assert result.improvement_suggestions == ["Review the material and practice more"]
        assert result.reasoning_chain == ["Basic analysis performed"]
        assert result.confidence_level == 50
        topic = result.topic_analysis[0]
        assert topic.topic == "General Knowledge"
        assert topic.performance == Performance.GOOD
        assert topic.strengths == ["Shows understanding"]

    def test_unparseable(self) -> None:
        result = parse_comprehensive_grading_response("score 40, weak", model="m")
        assert result.score == 40
        assert result.is_correct is False
        assert result.confidence_level == 30
        assert result.reasoning_chain == ["Fallback analysis due to parsing error"]
        topic = result.topic_analysis[0]
        assert topic.performance == Performance.POOR
        assert topic.specific_gaps == ["Detailed analysis unavailable"]
        assert topic.strengths == []


class TestPerformanceForScore:
    @pytest.mark.parametrize(
        ("score", "expected"),
        [(80, Performance.GOOD), (79, Performance.FAIR), (60, Performance.FAIR), (59, Performance.POOR)],
    )
    def test_bands(self, score: int, expected: Performance) -> None:
        assert performance_for_score(score) == expected


# ============================================================
# Fallback Tests
# ============================================================


class TestWordSetSimilarity:
    def test_jaccard(self) -> None:
        assert word_set_similarity("a b c", "a b d") == pytest.approx(0.5)

    def test_empty(self) -> None:
        assert word_set_similarity("", " ") == 0.0


class TestFallbackGrading:
    def test_empty_response(self) -> None:
        result = fallback_grading("expected", "  ")
        assert result.score == 0
        assert result.feedback == "No response provided."
        assert result.model_used == FALLBACK_MODEL

    def test_no_expected_answer(self) -> None:
        result = fallback_grading("", "some answer")
        assert result.score == 50
        assert result.is_correct is False

    def test_matching_answer(self) -> None:
        result = fallback_grading("The cell makes ATP", "the cell makes atp")
        assert result.score == 100
        assert result.is_correct is True
        assert result.feedback == "Your response shows good understanding of the concept."

    def test_partial_answer(self) -> None:
        result = fallback_grading("a b c", "a b d")
        assert result.score == 50
        assert result.is_correct is False
        assert result.feedback.startswith("Your response needs improvement.")


# ============================================================
# Public API Tests
# ============================================================


class TestGradeResponse:
    def test_llm_result(self) -> None:
        client = make_mock_client('{"score": 91, "feedback": "Great", "is_correct": true}')
        result = grade_response("Q?", "A", client=client)
        assert result.score == 91
        assert result.model_used == MODEL_HAIKU

    def test_service_error_falls_back(self) -> None:
        client = make_mock_client()
        client.generate.side_effect = AIServiceError("down")
        result = grade_response("Q?", "a b c", client=client, expected_answer="a b c")
        assert result.model_used == FALLBACK_MODEL
        assert result.score == 100

    def test_missing_api_key_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.delenv("ANTHROPIC_AUTH_TOKEN", raising=False)
        client = LLMClient(AppConfig(max_retries=0))

        result = grade_response("Q?", "a b c", client=client, expected_answer="a b c")

        assert result.model_used == FALLBACK_MODEL
        assert result.score == 100


class TestGradeResponseComprehensive:
    def test_llm_result(self) -> None:
        result = grade_response_comprehensive(
            "Q?", "A", client=make_mock_client(COMPREHENSIVE_JSON)
        )
        assert result.score == 88
        assert result.model_used == MODEL_HAIKU

    def test_service_error_falls_back(self) -> None:
        client = make_mock_client()
        client.generate.side_effect = AIServiceError("down")
        result = grade_response_comprehensive("Q?", "answer", client=client)
        assert client.generate.call_count == 1
        assert result.score == 50
        assert result.model_used == FALLBACK_MODEL
        assert result.confidence_level == 50
        assert result.reasoning_chain == ["Fallback analysis due to service error"]
        assert result.topic_analysis[0].specific_gaps == [
            "Unable to analyze due to AI service error"
        ]
