"""Abstract base class for source fetchers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from radar.config import SourceConfig
from radar.ingest.http import DomainRateLimiter


@dataclass
class FetchedDocument:
    """Normalized output of a fetcher: markup already stripped."""

    url: str
    title: str
    content: str
    published_at: datetime | None = None


class BaseFetcher(ABC):
    """Base class for fetchers that turn a configured source into documents."""

    def __init__(self, limiter: DomainRateLimiter | None = None):
        self.limiter = limiter or DomainRateLimiter()

    @abstractmethod
    async def fetch(self, source: SourceConfig) -> list[FetchedDocument]:
        """Fetch documents for a source. Returns an empty list when nothing is found."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Fetcher name."""
        ...
