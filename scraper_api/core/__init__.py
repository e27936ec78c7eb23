"""Core services for the scraper API."""

from .config import Settings, get_settings
from .logging import setup_logging, get_logger
from .exceptions import (
    ScraperError,
    PolicyError,
    SessionError,
    NavigationError,
    RetryExhaustedError,
)
from .policy import ScrapePolicy, BlockPolicy, LaunchPolicy, get_policy, load_policy

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "ScraperError",
    "PolicyError",
    "SessionError",
    "NavigationError",
    "RetryExhaustedError",
    "ScrapePolicy",
    "BlockPolicy",
    "LaunchPolicy",
    "get_policy",
    "load_policy",
]
