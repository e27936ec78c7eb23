"""Configuration management for the scraper API."""

from pathlib import Path
from typing import List, Optional
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    log_file: Optional[Path] = Field(default=None)

    # API Configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=5000)
    api_reload: bool = Field(default=False)
    api_prefix: str = Field(default="/api")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Browser Configuration
    browser_headless: bool = Field(default=True)
    browser_locale: str = Field(default="en-US")
    browser_user_agent: str = Field(default=DEFAULT_USER_AGENT)
    viewport_width: int = Field(default=1920, gt=0)
    viewport_height: int = Field(default=1080, gt=0)
    ignore_https_errors: bool = Field(default=True)
    browser_stealth: bool = Field(default=True)

    # Navigation Configuration
    default_timeout_ms: int = Field(default=30000, gt=0)
    network_idle_cap_ms: int = Field(default=10000, gt=0)
    navigation_referer: Optional[str] = Field(default="https://www.google.com/")

    # Retry Configuration
    max_retries: int = Field(default=3, ge=0)
    retry_delay_ms: int = Field(default=2000, ge=0)

    # Cache Configuration
    cache_ttl_seconds: int = Field(default=1800, gt=0)

    # Rate Limit Configuration
    rate_limit_max_requests: int = Field(default=100, ge=0)
    rate_limit_window_seconds: int = Field(default=900, gt=0)

    # Response Compression
    gzip_minimum_size: int = Field(default=1000, ge=0)

    # Policy Configuration
    policy_file: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent / "config" / "scrape_policy.yaml"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
