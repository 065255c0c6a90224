"""Cost tracking and token accounting for neuroleaf.

Provides immutable CostTracker, per-model cost estimation, and the
~4 characters per token estimate used when the API does not report usage.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Model ID constants
MODEL_SONNET = "claude-sonnet-4-5-20250929"
MODEL_HAIKU = "claude-haiku-4-5-20251001"
MODEL_OPUS = "claude-opus-4-6"

# Pricing per 1M tokens (USD)
MODEL_PRICING: dict[str, dict[str, float]] = {
    MODEL_SONNET: {"input": 3.00, "output": 15.00},
    MODEL_HAIKU: {"input": 0.80, "output": 4.00},
    MODEL_OPUS: {"input": 15.00, "output": 75.00},
}

# Fallback pricing (most expensive to avoid underestimation)
_FALLBACK_PRICING = {"input": 15.00, "output": 75.00}

_CHARS_PER_TOKEN = 4


@dataclass(frozen=True, slots=True)
class CostRecord:
    """A single API call cost record. Immutable."""

    model: str
    input_tokens: int
    output_tokens: int
    cost_usd: float


@dataclass(frozen=True, slots=True)
class CostTracker:
    """Immutable cost tracker with budget enforcement.

    Use add() to create a new tracker with an additional record.
    Original instance is never mutated.
    """

    budget_limit: float = 1.00
    records: tuple[CostRecord, ...] = ()

    @property
    def total_cost(self) -> float:
        """Sum of all recorded costs."""
        return sum(r.cost_usd for r in self.records)

    @property
    def total_tokens(self) -> int:
        """Sum of input and output tokens over all records."""
        return sum(r.input_tokens + r.output_tokens for r in self.records)

    @property
    def request_count(self) -> int:
        """Number of recorded API calls."""
        return len(self.records)

    @property
    def is_within_budget(self) -> bool:
        """True if total cost is at or below budget limit."""
        return self.total_cost <= self.budget_limit

    @property
    def budget_remaining(self) -> float:
        """Remaining budget in USD."""
        return self.budget_limit - self.total_cost

    def add(self, record: CostRecord) -> CostTracker:
        """Return a new CostTracker with the record appended."""
        return CostTracker(
            budget_limit=self.budget_limit,
            records=(*self.records, record),
        )


def estimate_tokens(text: str) -> int:
    """Estimate tokens at ~4 characters per token. Blank text is 0."""
    if not text or not text.strip():
        return 0
    return math.ceil(len(text) / _CHARS_PER_TOKEN)


def estimate_cost(
    model: str,
    input_tokens: int,
    output_tokens: int,
) -> float:
    """Estimate the cost of an API call in USD.

    Args:
        model: Model ID.
        input_tokens: Number of input tokens.
        output_tokens: Number of output tokens.

    Returns:
        Estimated cost in USD.
    """
    pricing = MODEL_PRICING.get(model, _FALLBACK_PRICING)
    input_cost = (input_tokens / 1_000_000) * pricing["input"]
    output_cost = (output_tokens / 1_000_000) * pricing["output"]
    return input_cost + output_cost


def format_token_count(token_count: int) -> str:
    """Format a token count for display, e.g. "1.2k tokens"."""
    if token_count >= 1_000_000:
        return f"{token_count / 1_000_000:.1f}M tokens"
    if token_count >= 1_000:
        return f"{token_count / 1_000:.1f}k tokens"
    return f"{token_count} tokens"
