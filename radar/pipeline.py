"""Job runner: each stage runs as a named job under a persisted run log."""

from __future__ import annotations

import logging
import sqlite3
from typing import Awaitable, Callable

from radar.alerts import process_alerts
from radar.analyze import get_analyzer
from radar.analyze.summarize import summarize_pending
from radar.config import RadarSnapshot, get_db_path, get_pipeline_setting, load_snapshot
from radar.db import finish_job_run, get_connection, insert_job_run
from radar.ingest.collect import fetch_sources
from radar.models import JobRun, utcnow
from radar.process import PROCESSORS
from radar.process.cluster import ClusterResult

logger = logging.getLogger(__name__)

MAX_ERROR_CHARS = 1000

JobFunc = Callable[[sqlite3.Connection, dict, RadarSnapshot], Awaitable[int]]

JOBS: dict[str, JobFunc] = {}


def register_job(name: str):
    """Decorator to register a job by name."""

    def decorator(func: JobFunc) -> JobFunc:
        JOBS[name] = func
        return func

    return decorator


# --- Stages ---


@register_job("fetch_sources")
async def fetch_job(conn: sqlite3.Connection, config: dict, snapshot: RadarSnapshot) -> int:
    result = await fetch_sources(conn, snapshot)
    return result.items_fetched


@register_job("normalize")
async def normalize_job(conn: sqlite3.Connection, config: dict, snapshot: RadarSnapshot) -> int:
    return await PROCESSORS["normalize"](config, snapshot).process(conn)


async def _cluster(conn: sqlite3.Connection, config: dict, snapshot: RadarSnapshot) -> ClusterResult:
    return await PROCESSORS["cluster"](config, snapshot).process(conn)


@register_job("dedupe_and_cluster")
async def cluster_job(conn: sqlite3.Connection, config: dict, snapshot: RadarSnapshot) -> int:
    result = await _cluster(conn, config, snapshot)
    return result.clusters_created + result.items_linked


@register_job("summarize_and_analyze")
async def summarize_job(conn: sqlite3.Connection, config: dict, snapshot: RadarSnapshot) -> int:
    analyzer = get_analyzer(config, snapshot)
    limit = int(get_pipeline_setting(config, "analyze_batch_size", 50))
    return await summarize_pending(conn, analyzer, limit=limit)


@register_job("alerts")
async def alerts_job(conn: sqlite3.Connection, config: dict, snapshot: RadarSnapshot) -> int:
    window = float(get_pipeline_setting(config, "alert_window_hours", 6))
    return process_alerts(conn, window_hours=window)


@register_job("full_pipeline")
async def full_pipeline(conn: sqlite3.Connection, config: dict, snapshot: RadarSnapshot) -> int:
    """All five stages in order. Counts fetched, normalized, linked, summarized and alerted."""
    fetched = await fetch_job(conn, config, snapshot)
    normalized = await normalize_job(conn, config, snapshot)
    clustered = await _cluster(conn, config, snapshot)
    summarized = await summarize_job(conn, config, snapshot)
    alerted = await alerts_job(conn, config, snapshot)

    logger.info(
        "Pipeline: %d fetched, %d normalized, %d clusters / %d links, "
        "%d summaries, %d alerts",
        fetched, normalized, clustered.clusters_created, clustered.items_linked,
        summarized, alerted,
    )
    return fetched + normalized + clustered.items_linked + summarized + alerted


# --- Runner ---


async def run_job(config: dict, name: str) -> JobRun:
    """Run a job by name, recording it in job_runs.

    The catalog snapshot is loaded inside the run, so a bad catalog is
    recorded as a failed run. Errors are re-raised after being recorded.
    """
    if name not in JOBS:
        available = ", ".join(JOBS)
        raise ValueError(f"Unknown job: {name} (available: {available})")

    conn = get_connection(get_db_path(config))
    run = JobRun(job_name=name)
    run.id = insert_job_run(conn, run)
    logger.info("Job '%s' run #%d started", name, run.id)

    try:
        snapshot = load_snapshot(config)
        run.items_processed = await JOBS[name](conn, config, snapshot)
        run.status = "COMPLETED"
        run.finished_at = utcnow()
        finish_job_run(conn, run.id, run)
        logger.info(
            "Job '%s' run #%d completed: %d items",
            name, run.id, run.items_processed,
        )
        return run

    except Exception as exc:
        logger.exception("Job '%s' run #%d failed", name, run.id)
        run.status = "FAILED"
        run.items_processed = 0
        run.error_message = str(exc)[:MAX_ERROR_CHARS]
        run.finished_at = utcnow()
        finish_job_run(conn, run.id, run)
        raise
    finally:
        conn.close()
