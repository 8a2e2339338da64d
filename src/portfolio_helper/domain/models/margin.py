"""Margin interest rate tables."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RateTier:
    """One tier of a margin schedule; ``up_to`` is None for the top tier."""

    up_to: Optional[float]
    rate: float  # percent, e.g. 5.14


@dataclass(frozen=True)
class CurrencyRates:
    """Ordered tiers (lowest threshold first) for a single loan currency."""

    currency: str
    tiers: tuple[RateTier, ...]

    @property
    def base_rate(self) -> float:
        return self.tiers[0].rate

    def blended_rate(self, amount: float) -> float:
        """
        Effective rate for borrowing ``amount``.

        Each tier charges its own rate on the slice of the loan that falls
        inside it; the result is total interest divided by the amount.
        """
        if amount <= 0:
            return self.base_rate

        remaining = amount
        total_interest = 0.0
        prev_up_to = 0.0
        for tier in self.tiers:
            capacity = tier.up_to - prev_up_to if tier.up_to is not None else float("inf")
            in_tier = min(remaining, capacity)
            total_interest += in_tier * tier.rate / 100.0
            remaining -= in_tier
            if remaining <= 0 or tier.up_to is None:
                break
            prev_up_to = tier.up_to
        return total_interest / amount * 100.0

    def blended_rate_if_multi_tier(self, amount: float) -> Optional[float]:
        """Blended rate only when ``amount`` exceeds the base tier cap."""
        base_cap = self.tiers[0].up_to
        if base_cap is None or amount <= base_cap:
            return None
        return self.blended_rate(amount)


# Currency code -> rates; replaced wholesale on every successful refresh
MarginRateTable = dict[str, CurrencyRates]
