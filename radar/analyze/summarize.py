"""Analyze stage: one summary per cluster that has none yet."""

from __future__ import annotations

import logging
import sqlite3

from radar.analyze.base import BaseAnalyzer
from radar.db import get_clusters_without_summary, insert_summary
from radar.models import StorySummary

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50


async def summarize_pending(
    conn: sqlite3.Connection,
    analyzer: BaseAnalyzer,
    limit: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Analyze clusters lacking a summary. Returns the number of summaries created.

    Clusters with no linked items are skipped silently.
    """
    created = 0
    for cluster in get_clusters_without_summary(conn, limit):
        if not cluster.items:
            logger.debug("Cluster #%d has no items, skipping", cluster.id)
            continue

        result = await analyzer.analyze(cluster.items)
        summary_id = insert_summary(conn, StorySummary.from_analysis(cluster.id, result))
        if summary_id is None:
            # Another runner summarized it first
            continue

        created += 1
        logger.info(
            "Cluster #%d '%s': %s, %s, confidence %d, competitor %s",
            cluster.id, cluster.canonical_title, result.priority,
            result.verification_status, result.confidence_score,
            result.competitor_name or "none",
        )

    logger.info("Created %d summaries using '%s' analyzer", created, analyzer.name)
    return created
