"""Data models for the scraper API."""

from .scrape import (
    FieldDescriptor,
    FieldKind,
    ResultBundle,
    ScrapeOptions,
    ScrapeRequest,
)

__all__ = [
    "FieldDescriptor",
    "FieldKind",
    "ResultBundle",
    "ScrapeOptions",
    "ScrapeRequest",
]
