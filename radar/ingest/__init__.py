"""Fetcher registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from radar.ingest.base import BaseFetcher

FETCHERS: dict[str, type[BaseFetcher]] = {}


def register_fetcher(name: str):
    """Decorator to register a fetcher."""

    def decorator(cls):
        FETCHERS[name] = cls
        return cls

    return decorator


# Import implementations to trigger registration
from radar.ingest.rss import RSSFetcher  # noqa: E402, F401
from radar.ingest.web import WebPageFetcher  # noqa: E402, F401
