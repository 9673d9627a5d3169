"""Single-page fetcher: main text, title and date via trafilatura."""

from __future__ import annotations

from datetime import datetime, timezone

import trafilatura

from radar.config import SourceConfig
from radar.ingest import register_fetcher
from radar.ingest.base import BaseFetcher, FetchedDocument
from radar.ingest.http import fetch_text
from radar.text import strip_html

PAGE_TIMEOUT = 15.0
MAX_CONTENT_CHARS = 50_000


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def extract_page(url: str, html: str) -> FetchedDocument:
    """Turn a page's HTML into a document. Falls back to the whole body text."""
    text = trafilatura.extract(html, include_comments=False, include_tables=False)
    if not text:
        text = strip_html(html)

    title = ""
    published_at = None
    metadata = trafilatura.extract_metadata(html)
    if metadata is not None:
        title = metadata.title or ""
        published_at = _parse_date(metadata.date)

    return FetchedDocument(
        url=url,
        title=title.strip() or "Untitled",
        content=text[:MAX_CONTENT_CHARS],
        published_at=published_at,
    )


@register_fetcher("web")
class WebPageFetcher(BaseFetcher):
    """Scrape a source's base URL as one document."""

    @property
    def name(self) -> str:
        return "web"

    async def fetch(self, source: SourceConfig) -> list[FetchedDocument]:
        html = await fetch_text(source.base_url, self.limiter, timeout=PAGE_TIMEOUT)
        return [extract_page(source.base_url, html)]
