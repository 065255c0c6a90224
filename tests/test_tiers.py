"""Tests for neuroleaf.tiers."""

from __future__ import annotations

import pytest

from neuroleaf.tiers import (
    TIER_LIMITS,
    UNLIMITED,
    Tier,
    TokenUsage,
    check_ai_generation_limit,
    check_deck_limit,
    check_flashcard_limit,
    check_test_session_limit,
    get_tier_limits,
    is_unlimited,
    token_usage,
)

# ============================================================
# Limits Tests
# ============================================================


class TestTierLimits:
    def test_free_limits(self) -> None:
        limits = TIER_LIMITS[Tier.FREE]
        assert limits.max_decks == 3
        assert limits.max_flashcards_per_deck == 50
        assert limits.max_ai_generations_per_month == 10
        assert limits.max_test_sessions_per_month == 5
        assert limits.has_unlimited_tests is False

    def test_pro_is_unlimited(self) -> None:
        limits = TIER_LIMITS[Tier.PRO]
        assert is_unlimited(limits.max_decks)
        assert is_unlimited(limits.max_test_sessions_per_month)
        assert limits.has_unlimited_tests is True

    @pytest.mark.parametrize("tier", [None, "", "enterprise"])
    def test_unknown_tier_is_free(self, tier: str | None) -> None:
        assert get_tier_limits(tier) is TIER_LIMITS[Tier.FREE]

    def test_tier_by_name(self) -> None:
        assert get_tier_limits("pro") is TIER_LIMITS[Tier.PRO]


class TestLimitChecks:
    def test_deck_below_limit(self) -> None:
        check = check_deck_limit("free", 2)
        assert check.allowed is True
        assert (check.limit, check.current) == (3, 2)

    def test_deck_at_limit(self) -> None:
        assert check_deck_limit("free", 3).allowed is False

    def test_flashcard_limit(self) -> None:
        assert check_flashcard_limit("free", 49).allowed is True
        assert check_flashcard_limit("free", 50).allowed is False

    def test_ai_generation_limit(self) -> None:
        assert check_ai_generation_limit(None, 10).allowed is False

    def test_test_session_limit(self) -> None:
        assert check_test_session_limit("free", 4).allowed is True
        assert check_test_session_limit("free", 5).allowed is False

    def test_pro_always_allowed(self) -> None:
        check = check_deck_limit("pro", 10_000)
        assert check.allowed is True
        assert check.limit == UNLIMITED


# ============================================================
# Token usage Tests
# ============================================================


class TestTokenUsage:
    def test_free_usage(self) -> None:
        usage = token_usage("free", 2_500)
        assert usage == TokenUsage(
            current_usage=2_500, limit=10_000, percentage=25, remaining=7_500, is_unlimited=False
        )

    def test_percentage_rounds_half_up(self) -> None:
        assert token_usage("free", 5, monthly_limit=1_000).percentage == 1

    def test_over_limit(self) -> None:
        usage = token_usage("free", 12_000)
        assert usage.remaining == 0
        assert usage.percentage == 120

    @pytest.mark.parametrize(("tier", "limit"), [("pro", 10_000), ("free", UNLIMITED)])
    def test_unlimited(self, tier: str, limit: int) -> None:
        usage = token_usage(tier, 5_000, monthly_limit=limit)
        assert usage == TokenUsage(
            current_usage=0, limit=UNLIMITED, percentage=0, remaining=UNLIMITED, is_unlimited=True
        )

    def test_can_consume(self) -> None:
        usage = token_usage("free", 9_000)
        assert usage.can_consume(1_000) is True
        assert usage.can_consume(1_001) is False
        assert token_usage("pro", 0).can_consume(10**9) is True
