"""Fetch stage: sync the source catalog and store new raw items."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from dataclasses import dataclass, field

from radar.config import RadarSnapshot, SourceConfig
from radar.db import insert_raw_item, raw_item_exists, upsert_source
from radar.ingest import FETCHERS
from radar.ingest.base import FetchedDocument
from radar.ingest.http import DomainRateLimiter
from radar.models import RawItem, Source
from radar.text import slugify

logger = logging.getLogger(__name__)

# Source types that usually publish a feed worth trying before scraping
FEED_SOURCE_TYPES = ("official", "industry")


@dataclass
class FetchResult:
    items_fetched: int = 0
    errors: list[str] = field(default_factory=list)


def sync_sources(conn: sqlite3.Connection, snapshot: RadarSnapshot) -> int:
    """Upsert every configured source. Returns the number synced."""
    for cfg in snapshot.sources:
        upsert_source(
            conn,
            Source(
                id=slugify(cfg.name),
                name=cfg.name,
                base_url=cfg.base_url,
                source_type=cfg.source_type,
                trust_tier=cfg.trust_tier,
            ),
        )
    return len(snapshot.sources)


async def fetch_source(
    source: SourceConfig, limiter: DomainRateLimiter,
) -> list[FetchedDocument]:
    """Feeds first for official/industry sources, then the page itself."""
    documents: list[FetchedDocument] = []
    if source.source_type in FEED_SOURCE_TYPES:
        documents = await FETCHERS["rss"](limiter).fetch(source)
    if not documents:
        documents = await FETCHERS["web"](limiter).fetch(source)
    return documents


def store_documents(
    conn: sqlite3.Connection, source_id: str, documents: list[FetchedDocument],
) -> int:
    """Insert documents whose URL is new. Returns how many were stored."""
    stored = 0
    for doc in documents:
        if raw_item_exists(conn, doc.url):
            continue
        item = RawItem(
            url=doc.url,
            source_id=source_id,
            title=doc.title,
            raw_text=doc.content,
            published_at=doc.published_at,
        )
        if insert_raw_item(conn, item) is not None:
            stored += 1
    return stored


async def fetch_sources(
    conn: sqlite3.Connection,
    snapshot: RadarSnapshot,
    limiter: DomainRateLimiter | None = None,
) -> FetchResult:
    """Fetch every configured source concurrently and store new items.

    A failing source is logged and reported in ``errors``; it never aborts
    the batch.
    """
    limiter = limiter or DomainRateLimiter()
    result = FetchResult()
    sync_sources(conn, snapshot)

    async def _fetch(source: SourceConfig) -> list[FetchedDocument]:
        try:
            return await fetch_source(source, limiter)
        except Exception as exc:
            logger.exception("Error fetching %s", source.name)
            result.errors.append(f"Error fetching {source.name}: {exc}")
            return []

    batches = await asyncio.gather(*[_fetch(s) for s in snapshot.sources])

    for source, documents in zip(snapshot.sources, batches):
        stored = store_documents(conn, slugify(source.name), documents)
        result.items_fetched += stored
        if documents:
            logger.info(
                "%s: %d documents, %d new", source.name, len(documents), stored,
            )

    logger.info(
        "Fetched %d new items from %d sources (%d errors)",
        result.items_fetched, len(snapshot.sources), len(result.errors),
    )
    return result
