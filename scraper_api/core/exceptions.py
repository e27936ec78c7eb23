"""Error types raised by the scraping core."""

from typing import Optional


class ScraperError(Exception):
    """Base class for scraping failures."""


class PolicyError(ScraperError):
    """The blocking/launch policy file could not be loaded."""


class SessionError(ScraperError):
    """The browser process or shared context could not be established."""


class NavigationError(ScraperError):
    """The target could not be loaded within the navigation timeout."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Navigation to {url} failed: {message}")
        self.url = url


class RetryExhaustedError(ScraperError):
    """Every attempt of a retried operation failed."""

    def __init__(self, attempts: int, last_error: Optional[BaseException]):
        self.attempts = attempts
        self.last_error = last_error
        detail = str(last_error) if last_error is not None else "unknown error"
        super().__init__(f"Failed after {attempts} attempts: {detail}")
