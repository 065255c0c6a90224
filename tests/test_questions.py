"""Tests for neuroleaf.testmode.questions."""

from __future__ import annotations

import json

import pytest

from neuroleaf.errors import AIServiceError
from neuroleaf.schemas import Difficulty, Flashcard
from neuroleaf.testmode.questions import (
    build_questions_prompt,
    extract_questions_from_text,
    fallback_questions,
    generate_questions,
    parse_questions_response,
)

from conftest import make_mock_client

CARDS = [
    Flashcard(front="Mitosis", back="Division producing two identical cells"),
    Flashcard(front="Osmosis", back="Diffusion of water across a membrane"),
]


# ============================================================
# Prompt Tests
# ============================================================


class TestBuildQuestionsPrompt:
    def test_lists_cards_and_count(self) -> None:
        prompt = build_questions_prompt(CARDS, 5, Difficulty.HARD)
        assert "1. Q: Mitosis\n   A: Division producing two identical cells" in prompt
        assert "2. Q: Osmosis" in prompt
        assert "Generate exactly 5 thought-provoking questions" in prompt
        assert "DIFFICULTY LEVEL: HARD" in prompt
        assert "analysis and synthesis" in prompt

    def test_easy_instruction(self) -> None:
        prompt = build_questions_prompt(CARDS, 1, Difficulty.EASY)
        assert "recall and basic understanding" in prompt


# ============================================================
# Parsing Tests
# ============================================================


class TestExtractQuestionsFromText:
    def test_numbered_and_question_lines(self) -> None:
        text = (
            "1. What is the role of ATP in cells?\n"
            "not a question\n"
            "Why do cells divide at all?\n"
            "2. Short?\n"
        )
        questions = extract_questions_from_text(text, 10)
        assert [q.question for q in questions] == [
            "What is the role of ATP in cells?",
            "Why do cells divide at all?",
        ]

    def test_respects_count(self) -> None:
        text = "\n".join(f"{i}. Question number {i} about cells?" for i in range(1, 6))
        assert len(extract_questions_from_text(text, 3)) == 3


class TestParseQuestionsResponse:
    def test_json(self) -> None:
        text = json.dumps(
            {
                "questions": [
                    {"question": "Why does osmosis matter?", "suggested_answer": "Water balance", "difficulty": "hard"},
                    {"question": "", "difficulty": "extreme"},
                    "junk",
                ]
            }
        )
        questions = parse_questions_response(text, 5)
        assert len(questions) == 2
        assert questions[0].suggested_answer == "Water balance"
        assert questions[0].difficulty == Difficulty.HARD
        assert questions[1].question == "Generated question"
        assert questions[1].suggested_answer is None
        assert questions[1].difficulty == Difficulty.MEDIUM

    def test_truncated_to_expected_count(self) -> None:
        text = json.dumps({"questions": [{"question": f"Q{i}?"} for i in range(4)]})
        assert len(parse_questions_response(text, 2)) == 2

    def test_line_scan_without_json(self) -> None:
        questions = parse_questions_response("1. How does mitosis differ from meiosis?", 3)
        assert [q.question for q in questions] == ["How does mitosis differ from meiosis?"]

    def test_line_scan_when_questions_missing(self) -> None:
        text = '{"items": []}\nWhat limits the rate of osmosis?'
        questions = parse_questions_response(text, 3)
        assert [q.question for q in questions] == ["What limits the rate of osmosis?"]


# ============================================================
# Fallback Tests
# ============================================================


class TestFallbackQuestions:
    def test_cycles_cards_before_templates(self) -> None:
        questions = fallback_questions(CARDS, 3)
        assert [q.question for q in questions] == [
            "Explain the concept of Mitosis in your own words.",
            "Explain the concept of Osmosis in your own words.",
            "How does Mitosis relate to other concepts you've learned?",
        ]
        assert questions[0].suggested_answer == (
            "Consider the definition: Division producing two identical cells"
        )

    def test_capped_by_templates(self) -> None:
        assert len(fallback_questions(CARDS, 50)) == 16

    def test_no_cards(self) -> None:
        assert fallback_questions([], 5) == []


# ============================================================
# generate_questions Tests
# ============================================================


class TestGenerateQuestions:
    @pytest.mark.parametrize("count", [0, 51])
    def test_count_out_of_range(self, count: int) -> None:
        with pytest.raises(ValueError, match="question_count"):
            generate_questions(CARDS, count, client=make_mock_client())

    def test_parses_llm_output(self) -> None:
        text = json.dumps({"questions": [{"question": "Why does osmosis matter?"}]})
        questions = generate_questions(CARDS, 1, client=make_mock_client(text))
        assert [q.question for q in questions] == ["Why does osmosis matter?"]

    def test_service_error_uses_templates(self) -> None:
        client = make_mock_client()
        client.generate.side_effect = AIServiceError("down")
        questions = generate_questions(CARDS, 2, client=client)
        assert questions == fallback_questions(CARDS, 2)
