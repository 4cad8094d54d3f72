"""
Configuration Management

Settings are loaded from environment variables (and an optional .env file)
through Pydantic Settings, so "1.5" becomes 1.5 and missing values fall back
to the defaults below.
"""

from pydantic_settings import BaseSettings
from typing import Optional


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """
    Application Settings

    Variable names match field names (case-insensitive), e.g.
    POLL_INTERVAL_SECONDS=2 or TARGET_HANDLE=@somechannel.
    """

    log_level: str = "INFO"
    log_categories: Optional[str] = None  # Comma-separated categories (bootstrap,chat,http,poller,system). If None, show all logs.

    # Polling
    poll_interval_seconds: float = 1.0  # Base delay between batch fetches
    max_retries: int = 5  # Transient failures retried before falling back to the error path

    # YouTube transport
    youtube_base_url: str = "https://www.youtube.com"
    request_timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT

    # Default target for livechat.main (set exactly one)
    target_channel_id: Optional[str] = None
    target_live_id: Optional[str] = None
    target_handle: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Allow extra env vars without validation errors


# Loaded once at import and reused everywhere
settings = Settings()
