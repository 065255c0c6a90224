"""Best-card selection for neuroleaf.

Scores cards on length, difficulty and tag/word variety, then picks the
top cards while aiming for a 30/50/20 easy/medium/hard mix.
"""

from __future__ import annotations

from neuroleaf.schemas import Difficulty, Flashcard
from neuroleaf.textutil import round_half_up

_COMMON_QUESTION_WORDS = frozenset(
    {"what", "when", "where", "who", "why", "how", "is", "are", "the", "a", "an"}
)

# Share of the target per difficulty; hard takes the remainder
_EASY_SHARE = 0.3
_MEDIUM_SHARE = 0.5

_RARE_TAG_SHARE = 0.3


def score_card(card: Flashcard, all_cards: list[Flashcard]) -> float:
    """Heuristic quality score of a card relative to its batch."""
    score = 0.0

    question_length = len(card.front)
    if 20 <= question_length <= 100:
        score += 2
    elif 10 <= question_length <= 150:
        score += 1

    answer_length = len(card.back)
    if 20 <= answer_length <= 200:
        score += 2
    elif 10 <= answer_length <= 300:
        score += 1

    if card.difficulty == Difficulty.MEDIUM:
        score += 1

    rare_tags = [
        tag for tag in card.tags
        if sum(1 for c in all_cards if tag in c.tags) <= len(all_cards) * _RARE_TAG_SHARE
    ]
    score += len(rare_tags) * 0.5

    content_words = [
        w for w in card.front.lower().split() if w not in _COMMON_QUESTION_WORDS
    ]
    score += min(2.0, len(content_words) * 0.1)

    return score


def ensure_difficulty_distribution(
    cards: list[Flashcard],
    target_count: int,
) -> list[Flashcard]:
    """Pick up to target_count cards, preferring a 30/50/20 difficulty mix.

    Cards are taken in the given order within each difficulty; shortfalls
    are filled with the earliest cards not yet selected.
    """
    target_easy = round_half_up(target_count * _EASY_SHARE)
    target_medium = round_half_up(target_count * _MEDIUM_SHARE)
    target_hard = target_count - target_easy - target_medium

    quotas = {
        Difficulty.EASY: target_easy,
        Difficulty.MEDIUM: target_medium,
        Difficulty.HARD: target_hard,
    }

    selected_ids: set[int] = set()
    for difficulty, quota in quotas.items():
        matching = [i for i, c in enumerate(cards) if c.difficulty == difficulty]
        selected_ids.update(matching[: max(quota, 0)])

    by_difficulty = sorted(
        selected_ids,
        key=lambda i: (list(quotas).index(cards[i].difficulty), i),
    )
    selected = [cards[i] for i in by_difficulty]

    needed = target_count - len(selected)
    if needed > 0:
        remaining = [c for i, c in enumerate(cards) if i not in selected_ids]
        selected.extend(remaining[:needed])

    return selected[:target_count]


def select_best_cards(cards: list[Flashcard], target_count: int) -> list[Flashcard]:
    """Return the best target_count cards by score with a balanced difficulty mix."""
    ranked = sorted(cards, key=lambda c: score_card(c, cards), reverse=True)
    return ensure_difficulty_distribution(ranked, target_count)
