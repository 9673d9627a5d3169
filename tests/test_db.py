"""Tests for database operations."""

from __future__ import annotations

from datetime import timedelta

from radar.db import (
    count_links,
    find_recent_cluster,
    finish_job_run,
    get_active_alerts,
    get_cluster_items,
    get_clusters_without_summary,
    get_latest_summaries,
    get_notifications,
    get_raw_item,
    get_recent_runs,
    get_source,
    get_summary_for_cluster,
    get_unnormalized_items,
    get_unprocessed_items,
    insert_alert,
    insert_cluster,
    insert_job_run,
    insert_link,
    insert_notification,
    insert_raw_item,
    insert_summary,
    upsert_source,
)
from radar.models import (
    Citation,
    JobRun,
    Notification,
    RawItem,
    Source,
    StoryCluster,
    StorySummary,
    UserAlert,
    utcnow,
)


def _summary(cluster_id: int, priority: str = "P1", **overrides) -> StorySummary:
    fields = dict(
        cluster_id=cluster_id,
        competitor="ServiceTitan",
        vertical="Home Services",
        ai_capabilities=["AI_VOICE_AGENT"],
        summary="ServiceTitan shipped a voice agent.",
        key_points=["Voice agent"],
        why_it_matters="It matters.",
        recommended_actions=["Benchmark voice AI capabilities"],
        priority=priority,
        confidence_score=4,
        verification_status="VERIFIED",
        citations=[Citation(url="https://x.example.com", title="X", retrieved_at="2026-01-01")],
    )
    fields.update(overrides)
    return StorySummary(**fields)


def test_upsert_source_updates_tier(db_conn):
    upsert_source(
        db_conn,
        Source(
            id="trade-news", name="Trade News", base_url="https://new.example.com",
            source_type="industry", trust_tier="HIGH",
        ),
    )
    source = get_source(db_conn, "trade-news")
    assert source.trust_tier == "HIGH"
    assert source.base_url == "https://new.example.com"


def test_duplicate_url_skipped(db_conn):
    """Duplicate URLs are silently skipped."""
    item = RawItem(url="https://example.com/a", source_id="trade-news", title="A", raw_text="x")
    assert insert_raw_item(db_conn, item) is not None
    assert insert_raw_item(db_conn, item) is None


def test_unnormalized_and_unprocessed_queues(db_conn, add_raw_item):
    pending = add_raw_item("Pending", "<p>raw</p>", normalized=False)
    ready = add_raw_item("Ready", "clean text")
    empty = add_raw_item("Empty", "")

    assert [i.id for i in get_unnormalized_items(db_conn)] == [pending]
    unprocessed = [i.id for i in get_unprocessed_items(db_conn)]
    assert ready in unprocessed
    assert empty not in unprocessed
    assert pending not in unprocessed
    assert get_raw_item(db_conn, ready).title == "Ready"


def test_find_recent_cluster_matches_title_substring(db_conn):
    now = utcnow()
    old = insert_cluster(
        db_conn,
        StoryCluster(canonical_title="ServiceTitan Updates - old", created_at=now - timedelta(hours=30)),
    )
    first = insert_cluster(
        db_conn, StoryCluster(canonical_title="ServiceTitan launches voice", created_at=now - timedelta(hours=2)),
    )
    insert_cluster(
        db_conn, StoryCluster(canonical_title="More ServiceTitan news", created_at=now - timedelta(hours=1)),
    )

    found = find_recent_cluster(db_conn, "ServiceTitan", since=now - timedelta(hours=24))
    assert found.id == first
    assert found.id != old
    assert find_recent_cluster(db_conn, "servicetitan", since=now - timedelta(hours=24)) is None


def test_links_are_unique(db_conn, add_raw_item):
    item_id = add_raw_item("A", "text")
    cluster_id = insert_cluster(db_conn, StoryCluster(canonical_title="A"))

    assert insert_link(db_conn, cluster_id, item_id) is True
    assert insert_link(db_conn, cluster_id, item_id) is False
    assert count_links(db_conn, cluster_id) == 1


def test_cluster_items_carry_source_trust(db_conn, add_raw_item):
    item_id = add_raw_item("Launch", "text", source_id="servicetitan-blog")
    cluster_id = insert_cluster(db_conn, StoryCluster(canonical_title="Launch"))
    insert_link(db_conn, cluster_id, item_id)

    items = get_cluster_items(db_conn, cluster_id)
    assert len(items) == 1
    assert items[0].source_name == "ServiceTitan Blog"
    assert items[0].trust_tier == "HIGH"


def test_one_summary_per_cluster(db_conn):
    cluster_id = insert_cluster(db_conn, StoryCluster(canonical_title="A"))
    assert insert_summary(db_conn, _summary(cluster_id)) is not None
    assert insert_summary(db_conn, _summary(cluster_id, priority="P0")) is None

    stored = get_summary_for_cluster(db_conn, cluster_id)
    assert stored.priority == "P1"
    assert stored.ai_capabilities == ["AI_VOICE_AGENT"]
    assert stored.citations[0].url == "https://x.example.com"
    assert get_clusters_without_summary(db_conn) == []


def test_latest_summaries_ordered_by_priority(db_conn):
    ids = [insert_cluster(db_conn, StoryCluster(canonical_title=str(i))) for i in range(3)]
    insert_summary(db_conn, _summary(ids[0], priority="P2"))
    insert_summary(db_conn, _summary(ids[1], priority="P0"))
    insert_summary(db_conn, _summary(ids[2], priority="P1"))

    assert [s.priority for s in get_latest_summaries(db_conn)] == ["P0", "P1", "P2"]


def test_alerts_and_notifications(db_conn):
    insert_alert(db_conn, UserAlert(user_id="u1", competitors=["ServiceTitan"]))
    insert_alert(db_conn, UserAlert(user_id="u2", is_active=False))
    alerts = get_active_alerts(db_conn)
    assert [a.user_id for a in alerts] == ["u1"]
    assert alerts[0].competitors == ["ServiceTitan"]

    cluster_id = insert_cluster(db_conn, StoryCluster(canonical_title="A"))
    story_id = insert_summary(db_conn, _summary(cluster_id))
    note = Notification(user_id="u1", story_id=story_id, title="t", message="m")
    assert insert_notification(db_conn, note) is True
    assert insert_notification(db_conn, note) is False
    assert len(get_notifications(db_conn, "u1")) == 1


def test_job_run_lifecycle(db_conn):
    run = JobRun(job_name="normalize")
    run_id = insert_job_run(db_conn, run)

    run.status = "COMPLETED"
    run.items_processed = 7
    run.finished_at = utcnow()
    finish_job_run(db_conn, run_id, run)

    runs = get_recent_runs(db_conn)
    assert len(runs) == 1
    assert runs[0]["status"] == "COMPLETED"
    assert runs[0]["items_processed"] == 7
    assert runs[0]["job_name"] == "normalize"
