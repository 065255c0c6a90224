"""Critical-thinking question generation from a deck of flashcards."""

from __future__ import annotations

import logging
import re

from neuroleaf.errors import AIServiceError
from neuroleaf.llm import LLMClient
from neuroleaf.parser import parse_json_object, to_difficulty
from neuroleaf.schemas import Difficulty, Flashcard
from neuroleaf.testmode.models import TestQuestion

logger = logging.getLogger(__name__)

MAX_QUESTIONS = 50

_DIFFICULTY_INSTRUCTIONS: dict[Difficulty, str] = {
    Difficulty.EASY: (
        "Focus on recall and basic understanding. Ask straightforward questions "
        "about the main concepts."
    ),
    Difficulty.MEDIUM: (
        "Focus on comprehension and application. Ask questions that require "
        "understanding relationships between concepts."
    ),
    Difficulty.HARD: (
        "Focus on analysis and synthesis. Ask questions that require critical "
        "thinking, comparison, and deeper analysis."
    ),
}

_FALLBACK_TEMPLATES = [
    "Explain the concept of {front} in your own words.",
    "How does {front} relate to other concepts you've learned?",
    "What would happen if {front} was different? Explain your reasoning.",
    "Compare and contrast {front} with similar concepts.",
    "Provide an example of {front} and explain why it fits.",
    "What are the key characteristics of {front}?",
    "Describe a real-world application of {front}.",
    "What questions would you ask to better understand {front}?",
]

_NUMBERED_LINE_RE = re.compile(r"^\d+\.")
_NUMBER_PREFIX_RE = re.compile(r"^\d+\.\s*")
_MIN_QUESTION_LENGTH = 10


def build_questions_prompt(
    flashcards: list[Flashcard],
    question_count: int,
    difficulty: Difficulty,
) -> str:
    deck = "\n\n".join(
        f"{i}. Q: {card.front}\n   A: {card.back}"
        for i, card in enumerate(flashcards, start=1)
    )
    return f"""\
You are an expert educator creating {difficulty} level test questions from flashcard content.

FLASHCARD CONTENT:
{deck}

INSTRUCTIONS:
- Generate exactly {question_count} thought-provoking questions
- {_DIFFICULTY_INSTRUCTIONS[difficulty]}
- Questions should encourage critical thinking, not just memorization
- Make questions that test understanding of concepts, not exact wording
- Vary question types: analysis, application, comparison, synthesis
- Each question should be clear and specific

DIFFICULTY LEVEL: {difficulty.upper()}

Please respond in the following JSON format:
{{
  "questions": [
    {{
      "question": "Your question here",
      "suggested_answer": "Brief guidance on what a good answer should include",
      "difficulty": "{difficulty}"
    }}
  ]
}}

Generate {question_count} questions that promote deep understanding of the material."""


def extract_questions_from_text(text: str, count: int) -> list[TestQuestion]:
    """Pick numbered or question-mark lines longer than 10 chars."""
    questions: list[TestQuestion] = []
    for line in text.split("\n"):
        if len(questions) >= count:
            break
        if not line.strip():
            continue
        if _NUMBERED_LINE_RE.match(line) or "?" in line:
            cleaned = _NUMBER_PREFIX_RE.sub("", line, count=1).strip()
            if len(cleaned) > _MIN_QUESTION_LENGTH:
                questions.append(TestQuestion(question=cleaned))
    return questions


def parse_questions_response(text: str, expected_count: int) -> list[TestQuestion]:
    """Read {"questions": [...]} from the response, else scan its lines."""
    try:
        data = parse_json_object(text)
    except ValueError as e:
        logger.debug("No questions JSON in response: %s", e)
        return extract_questions_from_text(text, expected_count)

    items = data.get("questions")
    if not isinstance(items, list):
        return extract_questions_from_text(text, expected_count)

    questions: list[TestQuestion] = []
    for item in items[:expected_count]:
        if not isinstance(item, dict):
            continue
        suggested = item.get("suggested_answer")
        questions.append(
            TestQuestion(
                question=str(item.get("question") or "Generated question"),
                suggested_answer=str(suggested) if suggested else None,
                difficulty=to_difficulty(item.get("difficulty")),
            )
        )
    return questions


def fallback_questions(flashcards: list[Flashcard], count: int) -> list[TestQuestion]:
    """Template questions over card fronts, cycling cards before templates."""
    if not flashcards:
        return []

    limit = min(count, len(flashcards) * len(_FALLBACK_TEMPLATES))
    questions: list[TestQuestion] = []
    for i in range(limit):
        card = flashcards[i % len(flashcards)]
        template = _FALLBACK_TEMPLATES[(i // len(flashcards)) % len(_FALLBACK_TEMPLATES)]
        questions.append(
            TestQuestion(
                question=template.format(front=card.front),
                suggested_answer=f"Consider the definition: {card.back}",
            )
        )
    return questions


def generate_questions(
    flashcards: list[Flashcard],
    question_count: int,
    difficulty: Difficulty = Difficulty.MEDIUM,
    *,
    client: LLMClient,
) -> list[TestQuestion]:
    """Generate open test questions from flashcards.

    Any LLM failure falls back to template questions built from card fronts.

    Raises:
        ValueError: If question_count is outside 1..50.
    """
    if not 1 <= question_count <= MAX_QUESTIONS:
        raise ValueError(f"question_count must be 1-{MAX_QUESTIONS}, got {question_count}")

    prompt = build_questions_prompt(flashcards, question_count, difficulty)
    try:
        response = client.generate(prompt)
    except AIServiceError as e:
        logger.error("AI question generation failed, using templates: %s", e)
        return fallback_questions(flashcards, question_count)

    questions = parse_questions_response(response.text, question_count)
    logger.info("Generated %d/%d test questions", len(questions), question_count)
    return questions
