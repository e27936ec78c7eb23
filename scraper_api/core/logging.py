"""Logging configuration for the scraper API."""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory

from .config import get_settings


def setup_logging() -> None:
    """Setup structured logging configuration."""
    settings = get_settings()

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )

    # Persistent log file is optional
    if settings.log_file is None:
        return

    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(settings.log_file)
    file_handler.setLevel(logging.DEBUG)

    if settings.log_format == "json":
        formatter = logging.Formatter('%(message)s')
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    file_handler.setFormatter(formatter)
    logging.getLogger().addHandler(file_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class ScrapeLogger:
    """Specialized logger for a single scrape call."""

    def __init__(self, url: str):
        self.logger = get_logger("scrape")
        self.url = url
        self.context = {"url": url}

    def bind_attempt(self, attempt: int) -> None:
        """Attach the current attempt number to every subsequent event."""
        self.context["attempt"] = attempt

    def state(self, state: str, **kwargs: Any) -> None:
        """Log a scrape attempt state transition."""
        self.logger.debug("Scrape state", state=state, **self.context, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message with scrape context."""
        self.logger.info(message, **self.context, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message with scrape context."""
        self.logger.error(message, **self.context, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message with scrape context."""
        self.logger.warning(message, **self.context, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message with scrape context."""
        self.logger.debug(message, **self.context, **kwargs)
