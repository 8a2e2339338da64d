"""Application-level exceptions."""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when a holdings or cash source cannot be parsed."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class MissingMainPortfolioError(AppError):
    """Raised when the required "main" portfolio was never registered."""

    def __init__(self):
        super().__init__("Main portfolio is not registered", code="MISSING_MAIN_PORTFOLIO")


class FetchError(AppError):
    """Raised by a provider when one key cannot be fetched."""

    def __init__(self, key: str, reason: str, code: str = "FETCH_ERROR"):
        self.key = key
        super().__init__(f"Failed to fetch {key}: {reason}", code=code)


class EmptyParseError(FetchError):
    """Raised when a fetched document parses into nothing usable."""

    def __init__(self, key: str, reason: str = "no usable data in document"):
        super().__init__(key, reason, code="EMPTY_PARSE")


class WatcherSetupError(AppError):
    """Raised when a file watcher cannot be armed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot watch {path}: {reason}", code="WATCHER_SETUP_ERROR")


class RateLimitedError(AppError):
    """Raised when a manual refresh is requested inside its cooldown window."""

    def __init__(self, action: str, retry_after_seconds: Optional[float] = None):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"{action} not allowed yet", code="RATE_LIMITED")
