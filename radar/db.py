"""SQLite database schema and query helpers."""

from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from radar.models import (
    Citation,
    JobRun,
    Notification,
    RawItem,
    Source,
    StoryCluster,
    StoryItem,
    StorySummary,
    UserAlert,
)

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS sources (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    base_url TEXT NOT NULL,
    source_type TEXT NOT NULL,
    trust_tier TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS raw_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    source_id TEXT NOT NULL,
    url TEXT UNIQUE NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    raw_text TEXT,
    published_at TEXT,
    fetched_at TEXT NOT NULL,
    checksum TEXT,
    processed INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (source_id) REFERENCES sources(id)
);

CREATE TABLE IF NOT EXISTS story_clusters (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    canonical_title TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS story_item_links (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    cluster_id INTEGER NOT NULL,
    raw_item_id INTEGER NOT NULL,
    UNIQUE (cluster_id, raw_item_id),
    FOREIGN KEY (cluster_id) REFERENCES story_clusters(id),
    FOREIGN KEY (raw_item_id) REFERENCES raw_items(id)
);

CREATE TABLE IF NOT EXISTS story_summaries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    cluster_id INTEGER UNIQUE NOT NULL,
    competitor TEXT,
    vertical TEXT,
    ai_capabilities TEXT NOT NULL DEFAULT '[]',
    summary TEXT NOT NULL,
    key_points TEXT NOT NULL DEFAULT '[]',
    why_it_matters TEXT NOT NULL,
    recommended_actions TEXT NOT NULL DEFAULT '[]',
    priority TEXT NOT NULL,
    confidence_score INTEGER NOT NULL,
    verification_status TEXT NOT NULL,
    citations TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL,
    FOREIGN KEY (cluster_id) REFERENCES story_clusters(id)
);

CREATE TABLE IF NOT EXISTS user_alerts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    verticals TEXT NOT NULL DEFAULT '[]',
    competitors TEXT NOT NULL DEFAULT '[]',
    ai_capabilities TEXT NOT NULL DEFAULT '[]',
    min_priority TEXT NOT NULL DEFAULT 'P1',
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS notifications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    story_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    message TEXT NOT NULL,
    is_read INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    UNIQUE (user_id, story_id),
    FOREIGN KEY (story_id) REFERENCES story_summaries(id)
);

CREATE TABLE IF NOT EXISTS job_runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    job_name TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'RUNNING',
    started_at TEXT NOT NULL,
    finished_at TEXT,
    items_processed INTEGER NOT NULL DEFAULT 0,
    error_message TEXT
);

CREATE INDEX IF NOT EXISTS idx_raw_items_processed ON raw_items(processed);
CREATE INDEX IF NOT EXISTS idx_raw_items_checksum ON raw_items(checksum);
CREATE INDEX IF NOT EXISTS idx_story_clusters_created_at ON story_clusters(created_at);
CREATE INDEX IF NOT EXISTS idx_story_summaries_created_at ON story_summaries(created_at);
"""


def get_connection(db_path: str) -> sqlite3.Connection:
    """Get a SQLite connection with WAL mode enabled."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str) -> None:
    """Create all tables and set schema version."""
    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA_SQL)
        conn.execute(
            "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
        conn.commit()
    finally:
        conn.close()


def _dt_str(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.isoformat()


def _parse_dt(s: str | None) -> datetime | None:
    if s is None:
        return None
    return datetime.fromisoformat(s)


# --- Source helpers ---


def upsert_source(conn: sqlite3.Connection, source: Source) -> None:
    """Insert a source or refresh its URL, type and trust tier."""
    conn.execute(
        """INSERT INTO sources (id, name, base_url, source_type, trust_tier)
           VALUES (?, ?, ?, ?, ?)
           ON CONFLICT(id) DO UPDATE SET
               base_url = excluded.base_url,
               source_type = excluded.source_type,
               trust_tier = excluded.trust_tier""",
        (source.id, source.name, source.base_url, source.source_type, source.trust_tier),
    )
    conn.commit()


def get_source(conn: sqlite3.Connection, source_id: str) -> Source | None:
    row = conn.execute("SELECT * FROM sources WHERE id = ?", (source_id,)).fetchone()
    if row is None:
        return None
    return Source(**dict(row))


# --- RawItem helpers ---


def insert_raw_item(conn: sqlite3.Connection, item: RawItem) -> int | None:
    """Insert a raw item. Returns its ID, or None if the URL is already stored."""
    cur = conn.execute(
        """INSERT OR IGNORE INTO raw_items
           (source_id, url, title, raw_text, published_at, fetched_at, checksum, processed)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            item.source_id,
            item.url,
            item.title,
            item.raw_text,
            _dt_str(item.published_at),
            _dt_str(item.fetched_at),
            item.checksum,
            int(item.processed),
        ),
    )
    conn.commit()
    if cur.rowcount == 0:
        return None
    return cur.lastrowid


def raw_item_exists(conn: sqlite3.Connection, url: str) -> bool:
    row = conn.execute("SELECT 1 FROM raw_items WHERE url = ?", (url,)).fetchone()
    return row is not None


def get_raw_item(conn: sqlite3.Connection, item_id: int) -> RawItem | None:
    row = conn.execute("SELECT * FROM raw_items WHERE id = ?", (item_id,)).fetchone()
    return _row_to_raw_item(row) if row else None


def get_unnormalized_items(conn: sqlite3.Connection, limit: int = 100) -> list[RawItem]:
    rows = conn.execute(
        "SELECT * FROM raw_items WHERE checksum IS NULL ORDER BY id LIMIT ?", (limit,)
    ).fetchall()
    return [_row_to_raw_item(row) for row in rows]


def update_normalized_text(
    conn: sqlite3.Connection, item_id: int, text: str, checksum: str,
) -> None:
    conn.execute(
        "UPDATE raw_items SET raw_text = ?, checksum = ? WHERE id = ?",
        (text, checksum, item_id),
    )
    conn.commit()


def get_unprocessed_items(conn: sqlite3.Connection, limit: int = 100) -> list[RawItem]:
    """Normalized items with text that have not been clustered yet."""
    rows = conn.execute(
        """SELECT * FROM raw_items
           WHERE processed = 0 AND checksum IS NOT NULL
             AND raw_text IS NOT NULL AND raw_text != ''
           ORDER BY id LIMIT ?""",
        (limit,),
    ).fetchall()
    return [_row_to_raw_item(row) for row in rows]


def mark_item_processed(conn: sqlite3.Connection, item_id: int) -> None:
    conn.execute("UPDATE raw_items SET processed = 1 WHERE id = ?", (item_id,))
    conn.commit()


def _row_to_raw_item(row: sqlite3.Row) -> RawItem:
    return RawItem(
        id=row["id"],
        source_id=row["source_id"],
        url=row["url"],
        title=row["title"],
        raw_text=row["raw_text"],
        published_at=_parse_dt(row["published_at"]),
        fetched_at=_parse_dt(row["fetched_at"]),
        checksum=row["checksum"],
        processed=bool(row["processed"]),
    )


# --- Cluster helpers ---


def insert_cluster(conn: sqlite3.Connection, cluster: StoryCluster) -> int:
    cur = conn.execute(
        "INSERT INTO story_clusters (canonical_title, created_at, updated_at) VALUES (?, ?, ?)",
        (cluster.canonical_title, _dt_str(cluster.created_at), _dt_str(cluster.updated_at)),
    )
    conn.commit()
    return cur.lastrowid


def find_recent_cluster(
    conn: sqlite3.Connection, title_fragment: str, since: datetime,
) -> StoryCluster | None:
    """Oldest cluster created since `since` whose title contains the fragment.

    The match is case-sensitive.
    """
    row = conn.execute(
        """SELECT * FROM story_clusters
           WHERE instr(canonical_title, ?) > 0 AND created_at >= ?
           ORDER BY created_at, id LIMIT 1""",
        (title_fragment, _dt_str(since)),
    ).fetchone()
    return _row_to_cluster(row) if row else None


def touch_cluster(conn: sqlite3.Connection, cluster_id: int, when: datetime) -> None:
    conn.execute(
        "UPDATE story_clusters SET updated_at = ? WHERE id = ?", (_dt_str(when), cluster_id)
    )
    conn.commit()


def get_cluster(conn: sqlite3.Connection, cluster_id: int) -> StoryCluster | None:
    row = conn.execute("SELECT * FROM story_clusters WHERE id = ?", (cluster_id,)).fetchone()
    return _row_to_cluster(row) if row else None


def count_clusters(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) FROM story_clusters").fetchone()[0]


def get_clusters_without_summary(
    conn: sqlite3.Connection, limit: int = 50,
) -> list[StoryCluster]:
    """Clusters lacking a summary, with their items and source trust attached."""
    rows = conn.execute(
        """SELECT c.* FROM story_clusters c
           LEFT JOIN story_summaries s ON s.cluster_id = c.id
           WHERE s.id IS NULL
           ORDER BY c.id LIMIT ?""",
        (limit,),
    ).fetchall()
    clusters = [_row_to_cluster(row) for row in rows]
    for cluster in clusters:
        cluster.items = get_cluster_items(conn, cluster.id)
    return clusters


def _row_to_cluster(row: sqlite3.Row) -> StoryCluster:
    return StoryCluster(
        id=row["id"],
        canonical_title=row["canonical_title"],
        created_at=_parse_dt(row["created_at"]),
        updated_at=_parse_dt(row["updated_at"]),
    )


# --- Link helpers ---


def insert_link(conn: sqlite3.Connection, cluster_id: int, raw_item_id: int) -> bool:
    """Link an item to a cluster. Returns False if the link already existed."""
    cur = conn.execute(
        "INSERT OR IGNORE INTO story_item_links (cluster_id, raw_item_id) VALUES (?, ?)",
        (cluster_id, raw_item_id),
    )
    conn.commit()
    return cur.rowcount > 0


def count_links(conn: sqlite3.Connection, cluster_id: int | None = None) -> int:
    if cluster_id is None:
        return conn.execute("SELECT COUNT(*) FROM story_item_links").fetchone()[0]
    return conn.execute(
        "SELECT COUNT(*) FROM story_item_links WHERE cluster_id = ?", (cluster_id,)
    ).fetchone()[0]


def get_cluster_items(conn: sqlite3.Connection, cluster_id: int) -> list[StoryItem]:
    rows = conn.execute(
        """SELECT r.id, r.url, r.title, r.raw_text, s.name AS source_name, s.trust_tier
           FROM story_item_links l
           JOIN raw_items r ON r.id = l.raw_item_id
           JOIN sources s ON s.id = r.source_id
           WHERE l.cluster_id = ?
           ORDER BY l.id""",
        (cluster_id,),
    ).fetchall()
    return [
        StoryItem(
            id=row["id"],
            url=row["url"],
            title=row["title"] or "",
            text=row["raw_text"] or "",
            source_name=row["source_name"],
            trust_tier=row["trust_tier"],
        )
        for row in rows
    ]


# --- Summary helpers ---


def insert_summary(conn: sqlite3.Connection, summary: StorySummary) -> int | None:
    """Insert a summary. Returns None if the cluster already has one."""
    cur = conn.execute(
        """INSERT OR IGNORE INTO story_summaries
           (cluster_id, competitor, vertical, ai_capabilities, summary, key_points,
            why_it_matters, recommended_actions, priority, confidence_score,
            verification_status, citations, created_at)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            summary.cluster_id,
            summary.competitor,
            summary.vertical,
            json.dumps(summary.ai_capabilities),
            summary.summary,
            json.dumps(summary.key_points),
            summary.why_it_matters,
            json.dumps(summary.recommended_actions),
            summary.priority,
            summary.confidence_score,
            summary.verification_status,
            json.dumps([asdict(c) for c in summary.citations]),
            _dt_str(summary.created_at),
        ),
    )
    conn.commit()
    if cur.rowcount == 0:
        return None
    return cur.lastrowid


def get_summary_for_cluster(conn: sqlite3.Connection, cluster_id: int) -> StorySummary | None:
    row = conn.execute(
        "SELECT * FROM story_summaries WHERE cluster_id = ?", (cluster_id,)
    ).fetchone()
    return _row_to_summary(row) if row else None


def get_recent_summaries(
    conn: sqlite3.Connection, since: datetime, priorities: tuple[str, ...] = ("P0", "P1"),
) -> list[StorySummary]:
    placeholders = ", ".join("?" for _ in priorities)
    rows = conn.execute(
        f"""SELECT * FROM story_summaries
            WHERE priority IN ({placeholders}) AND created_at >= ?
            ORDER BY id""",
        (*priorities, _dt_str(since)),
    ).fetchall()
    return [_row_to_summary(row) for row in rows]


def get_latest_summaries(conn: sqlite3.Connection, limit: int = 20) -> list[StorySummary]:
    """Most urgent first (P0 < P1 < P2), newest first within a priority."""
    rows = conn.execute(
        "SELECT * FROM story_summaries ORDER BY priority, created_at DESC, id DESC LIMIT ?",
        (limit,),
    ).fetchall()
    return [_row_to_summary(row) for row in rows]


def _row_to_summary(row: sqlite3.Row) -> StorySummary:
    return StorySummary(
        id=row["id"],
        cluster_id=row["cluster_id"],
        competitor=row["competitor"],
        vertical=row["vertical"],
        ai_capabilities=json.loads(row["ai_capabilities"]),
        summary=row["summary"],
        key_points=json.loads(row["key_points"]),
        why_it_matters=row["why_it_matters"],
        recommended_actions=json.loads(row["recommended_actions"]),
        priority=row["priority"],
        confidence_score=row["confidence_score"],
        verification_status=row["verification_status"],
        citations=[Citation(**c) for c in json.loads(row["citations"])],
        created_at=_parse_dt(row["created_at"]),
    )


# --- Alert helpers ---


def insert_alert(conn: sqlite3.Connection, alert: UserAlert) -> int:
    cur = conn.execute(
        """INSERT INTO user_alerts
           (user_id, verticals, competitors, ai_capabilities, min_priority, is_active)
           VALUES (?, ?, ?, ?, ?, ?)""",
        (
            alert.user_id,
            json.dumps(alert.verticals),
            json.dumps(alert.competitors),
            json.dumps(alert.ai_capabilities),
            alert.min_priority,
            int(alert.is_active),
        ),
    )
    conn.commit()
    return cur.lastrowid


def get_active_alerts(conn: sqlite3.Connection) -> list[UserAlert]:
    rows = conn.execute("SELECT * FROM user_alerts WHERE is_active = 1 ORDER BY id").fetchall()
    return [
        UserAlert(
            id=row["id"],
            user_id=row["user_id"],
            verticals=json.loads(row["verticals"]),
            competitors=json.loads(row["competitors"]),
            ai_capabilities=json.loads(row["ai_capabilities"]),
            min_priority=row["min_priority"],
            is_active=bool(row["is_active"]),
        )
        for row in rows
    ]


def insert_notification(conn: sqlite3.Connection, notification: Notification) -> bool:
    """Insert a notification. Returns False if the user was already notified."""
    cur = conn.execute(
        """INSERT OR IGNORE INTO notifications
           (user_id, story_id, title, message, is_read, created_at)
           VALUES (?, ?, ?, ?, ?, ?)""",
        (
            notification.user_id,
            notification.story_id,
            notification.title,
            notification.message,
            int(notification.is_read),
            _dt_str(notification.created_at),
        ),
    )
    conn.commit()
    return cur.rowcount > 0


def get_notifications(conn: sqlite3.Connection, user_id: str) -> list[Notification]:
    rows = conn.execute(
        "SELECT * FROM notifications WHERE user_id = ? ORDER BY id", (user_id,)
    ).fetchall()
    return [
        Notification(
            id=row["id"],
            user_id=row["user_id"],
            story_id=row["story_id"],
            title=row["title"],
            message=row["message"],
            is_read=bool(row["is_read"]),
            created_at=_parse_dt(row["created_at"]),
        )
        for row in rows
    ]


# --- JobRun helpers ---


def insert_job_run(conn: sqlite3.Connection, run: JobRun) -> int:
    cur = conn.execute(
        "INSERT INTO job_runs (job_name, status, started_at) VALUES (?, ?, ?)",
        (run.job_name, run.status, _dt_str(run.started_at)),
    )
    conn.commit()
    return cur.lastrowid


def finish_job_run(conn: sqlite3.Connection, run_id: int, run: JobRun) -> None:
    conn.execute(
        """UPDATE job_runs SET
           finished_at = ?, status = ?, items_processed = ?, error_message = ?
           WHERE id = ?""",
        (
            _dt_str(run.finished_at),
            run.status,
            run.items_processed,
            run.error_message,
            run_id,
        ),
    )
    conn.commit()


def get_recent_runs(conn: sqlite3.Connection, limit: int = 10) -> list[dict]:
    """Fetch recent job runs for stats display."""
    rows = conn.execute(
        "SELECT * FROM job_runs ORDER BY started_at DESC, id DESC LIMIT ?", (limit,)
    ).fetchall()
    return [dict(row) for row in rows]
