"""Per-card quality validation for neuroleaf.

Rejects meta-questions about the document itself, structural references,
vague answers, too-short sides, and questions without a clear educational
pattern or a reference to an extracted concept.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from pydantic import BaseModel

from neuroleaf.schemas import ContentAnalysis, Flashcard

logger = logging.getLogger(__name__)

_META_QUESTION_PATTERNS = [
    re.compile(r"what (?:are )?the main topics covered"),
    re.compile(r"what topics (?:are )?(?:discussed|covered)"),
    re.compile(r"what is (?:the )?(?:main )?(?:focus|purpose) of"),
    re.compile(r"what (?:does )?this (?:lecture|document|text) cover"),
    re.compile(r"what (?:comes|happens) (?:after|before|next)"),
    re.compile(r"what is (?:the )?overview of"),
    re.compile(r"what is (?:the )?introduction to"),
    re.compile(r"what are (?:the )?learning objectives"),
    re.compile(r"what is (?:the )?structure of"),
    re.compile(r"what (?:page|slide) (?:discusses|covers)"),
]

_STRUCTURAL_PATTERNS = [
    re.compile(r"(?:page|slide)\s*\d+"),
    re.compile(r"table of contents"),
    re.compile(r"learning objectives"),
    re.compile(r"course outline"),
    re.compile(r"next topic"),
    re.compile(r"previous topic"),
]

_VAGUE_ANSWER_PATTERNS = [
    re.compile(r"^(?:various|different|multiple|several)\s+\w+$"),
    re.compile(r"^(?:many|some|few)\s+\w+$"),
    re.compile(r"concepts?$"),
    re.compile(r"topics?$"),
    re.compile(r"principles?$"),
    re.compile(r"^it (?:covers|discusses|explains)"),
]

_EDUCATIONAL_PATTERNS = [
    re.compile(r"what is\s+(?:the\s+)?(?:definition|meaning|purpose|function|role)\s+of"),
    re.compile(r"how (?:does|do|is|are)\s+\w+.*(?:work|function|operate|affect|influence)"),
    re.compile(r"why (?:does|do|is|are)\s+\w+.*(?:important|necessary|effective|used)"),
    re.compile(r"when (?:does|do|did|was|were)\s+\w+.*(?:occur|happen|develop|discovered)"),
    re.compile(r"where (?:does|do|is|are)\s+\w+.*(?:located|found|used|applied)"),
    re.compile(r"define\s+(?:the\s+term\s+)?\w+"),
    re.compile(r"calculate\s+(?:the\s+)?\w+"),
    re.compile(r"what\s+(?:is\s+the\s+)?formula\s+for"),
    re.compile(r"(?:give\s+an?\s+)?example\s+of"),
    re.compile(r"what\s+(?:are\s+the\s+)?steps\s+(?:to|for|in)"),
    re.compile(r"what\s+(?:is\s+the\s+)?relationship\s+between"),
    re.compile(r"what\s+(?:is\s+the\s+)?difference\s+between"),
    re.compile(r"according\s+to.*what\s+(?:is|are)"),
    re.compile(r"what.*(?:primary\s+function|main\s+purpose|key\s+role|primary\s+effect)"),
    re.compile(r"which.*(?:type\s+of|kind\s+of|method\s+of)"),
    re.compile(r"name\s+(?:the\s+)?(?:main\s+)?(?:components|parts|elements|factors)"),
    re.compile(r"list\s+(?:the\s+)?(?:main\s+)?(?:factors|reasons|steps|components)"),
]

_MIN_QUESTION_LENGTH = 10
_MIN_ANSWER_LENGTH = 5
_MIN_SUBSTANTIVE_ANSWER_LENGTH = 20
_MIN_ANSWER_WORDS = 4
_CONCEPTS_CHECKED = 5


@dataclass(frozen=True, slots=True)
class CardValidation:
    """Outcome of validating one card."""

    is_valid: bool
    reason: str


class RejectedCard(BaseModel, frozen=True):
    card: Flashcard
    reason: str


class ValidationReport(BaseModel, frozen=True):
    """Accepted and rejected cards from one validation pass."""

    accepted: list[Flashcard]
    rejected: list[RejectedCard]

    @property
    def total_cards(self) -> int:
        return len(self.accepted) + len(self.rejected)

    @property
    def pass_rate(self) -> float:
        if self.total_cards == 0:
            return 0.0
        return len(self.accepted) / self.total_cards


def _references_concept(question: str, analysis: ContentAnalysis | None) -> bool:
    if analysis is None:
        return False
    for concept in analysis.educational_concepts[:_CONCEPTS_CHECKED]:
        words = concept.concept.lower().split(" ")
        if any(len(word) > 3 and word in question for word in words):
            return True
    return False


def validate_card(
    card: Flashcard,
    analysis: ContentAnalysis | None = None,
) -> CardValidation:
    """Check one card against the quality rules, first failure wins.

    Args:
        card: Card to check.
        analysis: Optional analysis whose top concepts can vouch for a
            question that lacks an educational pattern.

    Returns:
        CardValidation with the rejection reason, or "Valid educational flashcard".
    """
    question = card.front.lower()
    answer = card.back.lower()

    for pattern in _META_QUESTION_PATTERNS:
        if pattern.search(question):
            return CardValidation(False, f"Meta-question detected: {pattern.pattern}")

    for pattern in _STRUCTURAL_PATTERNS:
        if pattern.search(question) or pattern.search(answer):
            return CardValidation(
                False, f"Structural reference detected: {pattern.pattern}"
            )

    stripped_answer = answer.strip()
    for pattern in _VAGUE_ANSWER_PATTERNS:
        if pattern.search(stripped_answer):
            return CardValidation(False, f"Vague answer detected: {pattern.pattern}")

    if len(card.front.strip()) < _MIN_QUESTION_LENGTH:
        return CardValidation(False, "Question too short")

    if len(card.back.strip()) < _MIN_ANSWER_LENGTH:
        return CardValidation(False, "Answer too short")

    has_pattern = any(p.search(question) for p in _EDUCATIONAL_PATTERNS)
    if not has_pattern and not _references_concept(question, analysis):
        return CardValidation(
            False, "No clear educational question pattern or concept reference"
        )

    if (
        len(answer) < _MIN_SUBSTANTIVE_ANSWER_LENGTH
        or len(answer.split(" ")) < _MIN_ANSWER_WORDS
    ):
        return CardValidation(False, "Answer lacks sufficient detail or substance")

    if card.back.strip() == card.front.strip():
        return CardValidation(False, "Question and answer are identical")

    return CardValidation(True, "Valid educational flashcard")


def validate_flashcards(
    cards: list[Flashcard],
    analysis: ContentAnalysis | None = None,
) -> ValidationReport:
    """Validate every card and report accepted and rejected ones in order."""
    accepted: list[Flashcard] = []
    rejected: list[RejectedCard] = []

    for card in cards:
        result = validate_card(card, analysis)
        if result.is_valid:
            accepted.append(card)
        else:
            rejected.append(RejectedCard(card=card, reason=result.reason))

    report = ValidationReport(accepted=accepted, rejected=rejected)

    if rejected:
        logger.info(
            "Rejected %d/%d cards (%.1f%%), e.g. %s",
            len(rejected),
            report.total_cards,
            (1 - report.pass_rate) * 100,
            [(r.card.front[:60], r.reason) for r in rejected[:5]],
        )
    logger.info(
        "Validation completed: %d/%d cards passed",
        len(accepted),
        report.total_cards,
    )
    return report


def validate_flashcard_quality(
    cards: list[Flashcard],
    analysis: ContentAnalysis | None = None,
) -> list[Flashcard]:
    """Return only the cards that pass validate_card(), in order."""
    return validate_flashcards(cards, analysis).accepted
