"""Application settings and configuration."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory (``./data`` next to the working directory)."""
    return Path.cwd() / "data"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Portfolio Helper"
    app_version: str = "0.1.0"

    # Data directory (stocks.csv, cash.txt and one subfolder per extra portfolio)
    data_dir: Optional[Path] = None

    port: int = Field(
        default=8080,
        validation_alias=AliasChoices("PORTFOLIO_HELPER_PORT", "port"),
    )
    log_level: str = "INFO"

    # Polling intervals (seconds)
    price_update_interval: int = 60
    nav_update_interval: int = 300
    nav_schedule: Literal["interval", "trading_day"] = "interval"
    margin_rate_update_interval: int = 24 * 60 * 60
    margin_reload_cooldown: int = 10 * 60

    # File watching
    file_watch_debounce_ms: int = 500
    file_watch_poll_interval_ms: int = 100

    # Live stream
    stream_buffer_size: int = 256
    stream_keepalive_seconds: float = 15.0

    # Market data source ("stub" serves deterministic offline prices)
    market_data_provider: Literal["yahoo", "stub"] = "yahoo"

    # Network
    fetch_workers: int = 8
    http_timeout_seconds: float = 15.0

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance (used by tests and the entrypoint)."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
