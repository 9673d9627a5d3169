"""RSS/Atom feed fetcher for blogs and newsrooms."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import feedparser

from radar.config import SourceConfig
from radar.ingest import register_fetcher
from radar.ingest.base import BaseFetcher, FetchedDocument
from radar.ingest.http import fetch_text
from radar.text import strip_html

logger = logging.getLogger(__name__)

FEED_PATHS = ("/feed", "/rss", "/feed.xml", "/rss.xml")
FEED_TIMEOUT = 10.0


def candidate_feed_urls(base_url: str) -> list[str]:
    base = base_url.rstrip("/")
    return [f"{base}{path}" for path in FEED_PATHS]


def _entry_datetime(entry) -> datetime | None:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return None
    return datetime(*parsed[:6], tzinfo=timezone.utc)


def _entry_content(entry) -> str:
    for block in entry.get("content") or []:
        value = block.get("value")
        if value:
            return value
    return entry.get("summary") or entry.get("title") or ""


@register_fetcher("rss")
class RSSFetcher(BaseFetcher):
    """Try the conventional feed paths under a source's base URL."""

    @property
    def name(self) -> str:
        return "rss"

    async def fetch(self, source: SourceConfig) -> list[FetchedDocument]:
        for feed_url in candidate_feed_urls(source.base_url):
            try:
                documents = await self.fetch_feed(feed_url)
            except Exception as exc:
                logger.debug("No feed at %s: %s", feed_url, exc)
                continue
            if documents:
                logger.info("Feed %s yielded %d entries", feed_url, len(documents))
                return documents
        return []

    async def fetch_feed(self, feed_url: str) -> list[FetchedDocument]:
        body = await fetch_text(feed_url, self.limiter, timeout=FEED_TIMEOUT)
        feed = feedparser.parse(body)

        documents = []
        for entry in feed.entries:
            documents.append(
                FetchedDocument(
                    url=entry.get("link") or feed_url,
                    title=(entry.get("title") or "Untitled").strip(),
                    content=strip_html(_entry_content(entry)),
                    published_at=_entry_datetime(entry),
                )
            )
        return documents
