"""Near-duplicate removal for neuroleaf.

Compares cards with a token-overlap ratio on questions and answers, and
trims oversized card sets down to the best ones.
"""

from __future__ import annotations

import logging

from neuroleaf.quality.selection import select_best_cards
from neuroleaf.schemas import Flashcard

logger = logging.getLogger(__name__)

QUESTION_SIMILARITY_THRESHOLD = 0.75
ANSWER_SIMILARITY_THRESHOLD = 0.8

_MIN_OPTIMIZATION_THRESHOLD = 40
_MAX_OPTIMIZED_CARDS = 30


def calculate_similarity(text1: str, text2: str) -> float:
    """Token overlap ratio between two texts.

    The numerator counts tokens of text1 (with repeats) that occur in
    text2; the denominator is the number of distinct tokens across both.
    Can exceed 1.0 when text1 repeats shared words.
    """
    words1 = text1.lower().split()
    words2 = text2.lower().split()

    union = set(words1) | set(words2)
    if not union:
        return 1.0 if text1.strip() == text2.strip() else 0.0

    shared = set(words2)
    intersection = sum(1 for word in words1 if word in shared)
    return intersection / len(union)


def is_duplicate(card: Flashcard, existing: Flashcard) -> bool:
    """True if either the questions or the answers are near-identical."""
    return (
        calculate_similarity(card.front, existing.front) > QUESTION_SIMILARITY_THRESHOLD
        or calculate_similarity(card.back, existing.back) > ANSWER_SIMILARITY_THRESHOLD
    )


def deduplicate_and_optimize(
    cards: list[Flashcard],
    target_count: int,
) -> list[Flashcard]:
    """Drop near-duplicates, then select the best cards if far over target.

    Earlier cards win over later duplicates. When more than
    max(target * 1.5, 40) unique cards remain, the best min(target, 30)
    are selected with a balanced difficulty mix.
    """
    unique: list[Flashcard] = []
    for card in cards:
        if not any(is_duplicate(card, kept) for kept in unique):
            unique.append(card)

    logger.info(
        "Deduplication: %d -> %d unique cards (target %d)",
        len(cards),
        len(unique),
        target_count,
    )

    threshold = max(target_count * 1.5, _MIN_OPTIMIZATION_THRESHOLD)
    if len(unique) > threshold:
        optimized = select_best_cards(unique, min(target_count, _MAX_OPTIMIZED_CARDS))
        logger.info(
            "Optimized %d cards above threshold %.0f down to %d",
            len(unique),
            threshold,
            len(optimized),
        )
        return optimized

    return unique
