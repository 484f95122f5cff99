"""Configuration management using pydantic-settings."""
from datetime import datetime
from typing import Optional

from pydantic_settings import BaseSettings


def _compute_current_year() -> int:
    """
    Default season year for season-scoped lookups (recruiting, ratings, records).

    CFBD keys every aggregate by calendar year, so the current year is used.
    """
    return datetime.now().year


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Upstream providers
    espn_base_url: str = "http://site.api.espn.com/apis/site/v2/sports"
    cfbd_base_url: str = "https://api.collegefootballdata.com"
    cfbd_api_key: Optional[str] = None
    ncaa_base_url: str = "https://site.api.espn.com/apis/site/v2/sports"
    user_agent: str = "SportsDataHub/1.0"

    # Every upstream call gets an explicit timeout
    request_timeout_seconds: float = 15.0

    # Bot tool endpoint authentication
    mcp_api_key: str = "default-key-change-me"

    # Cache settings
    coalesce_timeout_seconds: float = 30.0
    # Hard ceiling on any entry's age, independent of its volatility class
    cache_max_age_seconds: Optional[int] = 24 * 60 * 60
    # LRU bound per provider namespace (None = unbounded)
    cache_max_entries: Optional[int] = None

    # Freshness overrides (seconds). None keeps the per-domain defaults.
    ttl_live_seconds: Optional[int] = None
    ttl_upcoming_seconds: Optional[int] = None
    ttl_completed_seconds: Optional[int] = None
    ttl_mixed_seconds: Optional[int] = None
    ttl_static_seconds: Optional[int] = None

    # Logging
    log_level: str = "INFO"

    # Default season year for CFBD lookups
    current_year: int = _compute_current_year()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
