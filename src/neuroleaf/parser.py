"""Tolerant parsing of LLM flashcard responses for neuroleaf.

Models do not always return clean JSON. parse_flashcards_response() tries
progressively looser strategies and returns the first non-empty result:

1. parse_simple_json: first JSON array in the text, with light repair
2. parse_from_any_format: regex over "q"/"a" style key-value triplets
3. extract_qa_patterns: "Q:" / "A:" line scanning
4. emergency_fallback_parser: question-like sentence pairs, at most 5 cards
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from typing import Any

from neuroleaf.schemas import Difficulty, Flashcard

logger = logging.getLogger(__name__)

_ARRAY_RE = re.compile(r"\[[\s\S]*?\]")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)
_FENCE_RE = re.compile(r"```json|```")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_BROKEN_STRING_RE = re.compile(r'"\s*\n\s*"')

_FRONT_KEYS = ("q", "question", "front")
_BACK_KEYS = ("a", "answer", "back")

_TRIPLET_PATTERNS = [
    re.compile(r'"q":\s*"([^"]+)"\s*,\s*"a":\s*"([^"]+)"\s*,\s*"difficulty":\s*"([^"]+)"'),
    re.compile(
        r'"question":\s*"([^"]+)"\s*,\s*"answer":\s*"([^"]+)"\s*,\s*"difficulty":\s*"([^"]+)"'
    ),
    re.compile(r'"front":\s*"([^"]+)"\s*,\s*"back":\s*"([^"]+)"\s*,\s*"difficulty":\s*"([^"]+)"'),
]
_PAIR_PATTERNS = [
    re.compile(r'"q":\s*"([^"]+)"\s*,\s*"a":\s*"([^"]+)"'),
    re.compile(r'"question":\s*"([^"]+)"\s*,\s*"answer":\s*"([^"]+)"'),
    re.compile(r'"front":\s*"([^"]+)"\s*,\s*"back":\s*"([^"]+)"'),
]

# "Q:", "Q1.", "Question 2:" ... (a delimiter is required)
_QUESTION_LINE_RE = re.compile(r"^(?:question|q)\s*\d*\s*[:.)]\s*", re.IGNORECASE)
_ANSWER_LINE_RE = re.compile(r"^(?:answer|a)\s*\d*\s*[:.)]\s*", re.IGNORECASE)

_QUESTION_WORD_RE = re.compile(
    r"^(?:what|who|when|where|why|how|which|define|explain)", re.IGNORECASE
)
_LEADING_NON_WORD_RE = re.compile(r"^[^\w]*")

_EMERGENCY_MAX_CARDS = 5


def to_difficulty(value: Any) -> Difficulty:
    """Coerce a raw difficulty value, defaulting to medium."""
    try:
        return Difficulty(value)
    except ValueError:
        return Difficulty.MEDIUM


def _first_value(item: dict[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = item.get(key)
        if value:
            return str(value).strip()
    return ""


def _cards_from_items(data: Any) -> list[Flashcard]:
    if not isinstance(data, list):
        return []

    cards: list[Flashcard] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        front = _first_value(item, _FRONT_KEYS)
        back = _first_value(item, _BACK_KEYS)
        if front and back:
            cards.append(
                Flashcard(
                    front=front,
                    back=back,
                    difficulty=to_difficulty(item.get("difficulty")),
                )
            )
    return cards


def parse_simple_json(text: str) -> list[Flashcard]:
    """Parse the first JSON array in the response, repairing common damage.

    Cleans markdown fences, trailing commas, escaped quotes and strings
    broken across lines. If the array is still invalid, retries with
    everything after the last "}" replaced by "]".
    """
    match = _ARRAY_RE.search(text)
    if not match:
        return []

    cleaned = _FENCE_RE.sub("", match.group(0))
    cleaned = _TRAILING_COMMA_RE.sub(r"\1", cleaned)
    cleaned = cleaned.replace('\\"', '"')
    cleaned = _BROKEN_STRING_RE.sub('" "', cleaned).strip()

    try:
        return _cards_from_items(json.loads(cleaned))
    except json.JSONDecodeError as e:
        logger.debug("Initial JSON parse failed, attempting repair: %s", e)

    last_brace = cleaned.rfind("}")
    if last_brace <= 0:
        return []

    try:
        return _cards_from_items(json.loads(cleaned[: last_brace + 1] + "]"))
    except json.JSONDecodeError as e:
        logger.debug("JSON repair failed: %s", e)
        return []


def parse_from_any_format(text: str) -> list[Flashcard]:
    """Extract key-value triplets/pairs from malformed JSON-like text."""
    cards: list[Flashcard] = []

    for pattern in _TRIPLET_PATTERNS:
        for match in pattern.finditer(text):
            front, back = match.group(1).strip(), match.group(2).strip()
            if front and back:
                cards.append(
                    Flashcard(
                        front=front,
                        back=back,
                        difficulty=to_difficulty(match.group(3)),
                    )
                )

    if cards:
        return cards

    for pattern in _PAIR_PATTERNS:
        for match in pattern.finditer(text):
            front, back = match.group(1).strip(), match.group(2).strip()
            if front and back:
                cards.append(Flashcard(front=front, back=back))

    return cards


def extract_qa_patterns(text: str) -> list[Flashcard]:
    """Scan "Q:" / "A:" lines, appending continuation lines to the open side."""
    cards: list[Flashcard] = []
    question = ""
    answer = ""

    for line in (ln.strip() for ln in text.split("\n")):
        if not line:
            continue
        if _QUESTION_LINE_RE.match(line):
            if question and answer:
                cards.append(Flashcard(front=question, back=answer))
            question = _QUESTION_LINE_RE.sub("", line, count=1).strip()
            answer = ""
        elif _ANSWER_LINE_RE.match(line):
            answer = _ANSWER_LINE_RE.sub("", line, count=1).strip()
        elif question and not answer:
            question += " " + line
        elif answer:
            answer += " " + line

    if question and answer:
        cards.append(Flashcard(front=question, back=answer))

    return cards


def emergency_fallback_parser(text: str) -> list[Flashcard]:
    """Last resort: pair sentences opening with a question word with the next one.

    If no sentence pair qualifies, pairs consecutive lines longer than
    20 characters. Returns at most 5 cards.
    """
    cards: list[Flashcard] = []

    sentences = [s.strip() for s in re.split(r"[.!?]+", text) if s.strip()]
    for current, following in zip(sentences, sentences[1:]):
        if not _QUESTION_WORD_RE.match(current):
            continue
        if len(following) <= 10:
            continue
        front = _LEADING_NON_WORD_RE.sub("", current).strip()
        back = _LEADING_NON_WORD_RE.sub("", following).strip()
        if front and back:
            cards.append(Flashcard(front=front, back=back))

    if not cards:
        lines = [ln.strip() for ln in text.split("\n") if len(ln.strip()) > 20]
        for i in range(0, len(lines) - 1, 2):
            cards.append(Flashcard(front=lines[i], back=lines[i + 1]))

    logger.debug("Emergency parser extracted %d cards", len(cards))
    return cards[:_EMERGENCY_MAX_CARDS]


_STRATEGIES: list[tuple[str, Callable[[str], list[Flashcard]]]] = [
    ("simple_json", parse_simple_json),
    ("any_format", parse_from_any_format),
    ("qa_patterns", extract_qa_patterns),
    ("emergency", emergency_fallback_parser),
]


def parse_flashcards_response(text: str) -> list[Flashcard]:
    """Parse an LLM response into flashcards using the strategy cascade.

    Args:
        text: Raw model output.

    Returns:
        Cards from the first strategy that yields any, or [] if none do.
    """
    logger.debug("Parsing response of %d chars", len(text))

    for name, strategy in _STRATEGIES:
        try:
            cards = strategy(text)
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("Parse strategy %s failed: %s", name, e)
            continue
        if cards:
            logger.info("Parse strategy %s produced %d cards", name, len(cards))
            return cards
        logger.debug("Parse strategy %s returned 0 cards", name)

    logger.warning("All parsing strategies failed")
    return []


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse the JSON object in a response, tolerating code fences and prose.

    Raises:
        ValueError: If no JSON object can be parsed.
    """
    stripped = text.strip()
    block = _JSON_BLOCK_RE.search(stripped)
    if block:
        stripped = block.group(1).strip()

    match = _OBJECT_RE.search(stripped)
    if not match:
        raise ValueError("No JSON object found in response")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse JSON object: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data
