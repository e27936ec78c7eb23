"""REST API for headless-browser scraping."""

__version__ = "1.0.0"
