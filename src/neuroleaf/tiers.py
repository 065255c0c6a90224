"""Subscription tier limits and monthly token usage for neuroleaf.

Callers supply current counts; this module only decides whether another
deck, card, AI generation or test session fits the tier. A limit of -1
means unlimited.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from neuroleaf.textutil import round_half_up

UNLIMITED = -1
DEFAULT_MONTHLY_TOKEN_LIMIT = 10_000


class Tier(StrEnum):
    FREE = "free"
    PRO = "pro"


@dataclass(frozen=True, slots=True)
class TierLimits:
    """Per-tier quotas. Monthly quotas reset on the first of the month."""

    max_decks: int
    max_flashcards_per_deck: int
    max_ai_generations_per_month: int
    max_test_sessions_per_month: int
    has_unlimited_tests: bool


TIER_LIMITS: dict[Tier, TierLimits] = {
    Tier.FREE: TierLimits(
        max_decks=3,
        max_flashcards_per_deck=50,
        max_ai_generations_per_month=10,
        max_test_sessions_per_month=5,
        has_unlimited_tests=False,
    ),
    Tier.PRO: TierLimits(
        max_decks=UNLIMITED,
        max_flashcards_per_deck=UNLIMITED,
        max_ai_generations_per_month=UNLIMITED,
        max_test_sessions_per_month=UNLIMITED,
        has_unlimited_tests=True,
    ),
}


@dataclass(frozen=True, slots=True)
class LimitCheck:
    allowed: bool
    limit: int
    current: int


@dataclass(frozen=True, slots=True)
class TokenUsage:
    """Monthly token usage snapshot. remaining is -1 when unlimited."""

    current_usage: int
    limit: int
    percentage: int
    remaining: int
    is_unlimited: bool

    def can_consume(self, tokens_requested: int) -> bool:
        """True if tokens_requested more tokens stay within the limit."""
        if self.is_unlimited:
            return True
        return self.current_usage + tokens_requested <= self.limit


def is_unlimited(limit: int) -> bool:
    return limit == UNLIMITED


def get_tier_limits(tier: str | None) -> TierLimits:
    """Limits for a tier name; unknown or missing tiers get the free limits."""
    try:
        return TIER_LIMITS[Tier(tier)]
    except ValueError:
        return TIER_LIMITS[Tier.FREE]


def _check(limit: int, current: int) -> LimitCheck:
    return LimitCheck(
        allowed=is_unlimited(limit) or current < limit,
        limit=limit,
        current=current,
    )


def check_deck_limit(tier: str | None, current_decks: int) -> LimitCheck:
    return _check(get_tier_limits(tier).max_decks, current_decks)


def check_flashcard_limit(tier: str | None, current_cards: int) -> LimitCheck:
    """Check whether one more card fits in a deck holding current_cards."""
    return _check(get_tier_limits(tier).max_flashcards_per_deck, current_cards)


def check_ai_generation_limit(tier: str | None, generations_this_month: int) -> LimitCheck:
    return _check(get_tier_limits(tier).max_ai_generations_per_month, generations_this_month)


def check_test_session_limit(tier: str | None, sessions_this_month: int) -> LimitCheck:
    return _check(get_tier_limits(tier).max_test_sessions_per_month, sessions_this_month)


def token_usage(
    tier: str | None,
    current_usage: int,
    monthly_limit: int = DEFAULT_MONTHLY_TOKEN_LIMIT,
) -> TokenUsage:
    """Summarize monthly token usage.

    Pro tier or a monthly_limit of -1 is unlimited and reports zero usage.
    """
    if get_tier_limits(tier) is TIER_LIMITS[Tier.PRO] or is_unlimited(monthly_limit):
        return TokenUsage(
            current_usage=0,
            limit=UNLIMITED,
            percentage=0,
            remaining=UNLIMITED,
            is_unlimited=True,
        )

    percentage = current_usage / monthly_limit * 100 if monthly_limit > 0 else 100.0
    return TokenUsage(
        current_usage=current_usage,
        limit=monthly_limit,
        percentage=round_half_up(percentage),
        remaining=max(0, monthly_limit - current_usage),
        is_unlimited=False,
    )
