"""Core utilities and shared functionality."""

from portfolio_helper.core.timezone import (
    now_eastern,
    to_eastern,
    epoch_ms,
    EASTERN_TZ,
)
from portfolio_helper.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    MissingMainPortfolioError,
    FetchError,
    EmptyParseError,
    WatcherSetupError,
    RateLimitedError,
)

__all__ = [
    "now_eastern",
    "to_eastern",
    "epoch_ms",
    "EASTERN_TZ",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "MissingMainPortfolioError",
    "FetchError",
    "EmptyParseError",
    "WatcherSetupError",
    "RateLimitedError",
]
