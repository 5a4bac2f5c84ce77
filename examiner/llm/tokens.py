"""Token counting and cost estimation utilities."""

from __future__ import annotations

import decimal
from dataclasses import dataclass

# (input_price, output_price) per 1M tokens; models served locally cost nothing
MODEL_PRICING: dict[str, tuple[decimal.Decimal, decimal.Decimal]] = {
    "gpt-4o": (decimal.Decimal("2.50"), decimal.Decimal("10.00")),
    "gpt-4o-mini": (decimal.Decimal("0.15"), decimal.Decimal("0.60")),
    "gpt-4.1": (decimal.Decimal("2.00"), decimal.Decimal("8.00")),
    "gpt-4.1-mini": (decimal.Decimal("0.40"), decimal.Decimal("1.60")),
    "claude-3-5-haiku-20241022": (decimal.Decimal("0.80"), decimal.Decimal("4.00")),
    "claude-sonnet-4-20250514": (decimal.Decimal("3.00"), decimal.Decimal("15.00")),
}


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


def estimate_cost(model: str, usage: TokenUsage) -> decimal.Decimal:
    """Estimated USD cost of one call; zero for models without known pricing"""
    if model not in MODEL_PRICING:
        return decimal.Decimal("0")

    input_price, output_price = MODEL_PRICING[model]
    return (decimal.Decimal(usage.input_tokens) * input_price
            + decimal.Decimal(usage.output_tokens) * output_price) / 1_000_000


def estimate_tokens(text: str) -> int:
    """Rough token estimation without API call.

    Uses the approximation of ~4 characters per token for English text.
    """
    return len(text) // 4 + 1
