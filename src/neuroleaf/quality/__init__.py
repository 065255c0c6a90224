"""Flashcard quality control for neuroleaf.

Provides per-card validation, near-duplicate removal, and best-card
selection with a balanced difficulty mix.
"""

from neuroleaf.quality.duplicate import (
    calculate_similarity,
    deduplicate_and_optimize,
    is_duplicate,
)
from neuroleaf.quality.selection import (
    ensure_difficulty_distribution,
    score_card,
    select_best_cards,
)
from neuroleaf.quality.validation import (
    CardValidation,
    RejectedCard,
    ValidationReport,
    validate_card,
    validate_flashcard_quality,
    validate_flashcards,
)

__all__ = [
    "CardValidation",
    "RejectedCard",
    "ValidationReport",
    "calculate_similarity",
    "deduplicate_and_optimize",
    "ensure_difficulty_distribution",
    "is_duplicate",
    "score_card",
    "select_best_cards",
    "validate_card",
    "validate_flashcard_quality",
    "validate_flashcards",
]
