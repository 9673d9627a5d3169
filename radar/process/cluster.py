"""Group unprocessed items into story clusters by detected competitor."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta

from radar.analyze.classifier import competitor_key
from radar.config import CompetitorConfig
from radar.db import (
    find_recent_cluster,
    get_unprocessed_items,
    insert_cluster,
    insert_link,
    mark_item_processed,
    touch_cluster,
)
from radar.models import RawItem, StoryCluster, utcnow
from radar.process import register_processor
from radar.process.base import BaseProcessor

logger = logging.getLogger(__name__)

CLUSTER_WINDOW = timedelta(hours=24)


@dataclass
class ClusterResult:
    clusters_created: int = 0
    items_linked: int = 0


def group_by_competitor(
    items: list[RawItem], competitors: tuple[CompetitorConfig, ...],
) -> dict[str, list[RawItem]]:
    """Competitor key -> items, in first-seen order. Unmatched items go to 'unknown'."""
    groups: dict[str, list[RawItem]] = {}
    for item in items:
        key = competitor_key(f"{item.title} {item.raw_text or ''}", competitors)
        groups.setdefault(key, []).append(item)
    return groups


def default_title(competitor: str, now: datetime) -> str:
    return f"{competitor} Updates - {now.date().isoformat()}"


@register_processor("cluster")
class ClusterProcessor(BaseProcessor):
    """Attach items to a recent cluster for the same competitor, or open a new one.

    A cluster is reused when its canonical title contains the competitor key
    and it was created within the last 24 hours. Links are idempotent, so
    re-running over the same items creates nothing new.
    """

    batch_setting = "cluster_batch_size"

    @property
    def name(self) -> str:
        return "cluster"

    async def process(self, conn: sqlite3.Connection) -> ClusterResult:
        return self.cluster_items(conn, get_unprocessed_items(conn, self.batch_size))

    def cluster_items(
        self,
        conn: sqlite3.Connection,
        items: list[RawItem],
        now: datetime | None = None,
    ) -> ClusterResult:
        now = now or utcnow()
        result = ClusterResult()

        for key, group in group_by_competitor(items, self.snapshot.competitors).items():
            if not group:
                continue
            cluster_id = self._resolve_cluster(conn, key, group, now, result)

            for item in group:
                if insert_link(conn, cluster_id, item.id):
                    result.items_linked += 1
                mark_item_processed(conn, item.id)

        if items:
            logger.info(
                "Clustered %d items: %d new clusters, %d new links",
                len(items), result.clusters_created, result.items_linked,
            )
        return result

    def _resolve_cluster(
        self,
        conn: sqlite3.Connection,
        key: str,
        group: list[RawItem],
        now: datetime,
        result: ClusterResult,
    ) -> int:
        existing = find_recent_cluster(conn, key, since=now - CLUSTER_WINDOW)
        if existing is not None:
            touch_cluster(conn, existing.id, now)
            logger.debug("Reusing cluster #%d for %s", existing.id, key)
            return existing.id

        title = group[0].title or default_title(key, now)
        cluster_id = insert_cluster(
            conn, StoryCluster(canonical_title=title, created_at=now, updated_at=now),
        )
        result.clusters_created += 1
        logger.debug("Created cluster #%d '%s' for %s", cluster_id, title, key)
        return cluster_id
