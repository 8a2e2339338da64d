"""Holding domain model."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LeveragedComponent:
    """One (multiplier, underlying symbol) leg of a leveraged instrument."""

    multiplier: float
    symbol: str


@dataclass(frozen=True)
class Holding:
    """
    A single portfolio position as read from the holdings source.

    Prices are never stored here; they live in the quote cache and are
    merged in by the snapshot assembler.
    """

    symbol: str
    quantity: float
    target_weight: Optional[float] = None
    leveraged_components: Optional[tuple[LeveragedComponent, ...]] = None

    def __post_init__(self) -> None:
        if isinstance(self.leveraged_components, list):
            object.__setattr__(self, "leveraged_components", tuple(self.leveraged_components))

    @property
    def is_leveraged(self) -> bool:
        """Return True if this holding carries leveraged components."""
        return bool(self.leveraged_components)
