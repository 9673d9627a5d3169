"""Tests for alert matching and notification creation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from radar.alerts import alert_matches, build_notification, process_alerts
from radar.db import get_notifications, insert_alert, insert_cluster, insert_summary
from radar.models import StoryCluster, StorySummary, UserAlert, utcnow


def _summary(priority="P0", competitor="ServiceTitan", vertical="Home Services",
             capabilities=("AI_VOICE_AGENT",), **overrides) -> StorySummary:
    fields = dict(
        id=1,
        cluster_id=1,
        competitor=competitor,
        vertical=vertical,
        ai_capabilities=list(capabilities),
        summary="ServiceTitan launched a voice agent for contractors.",
        key_points=[],
        why_it_matters="",
        recommended_actions=[],
        priority=priority,
        confidence_score=5,
        verification_status="VERIFIED",
    )
    fields.update(overrides)
    return StorySummary(**fields)


@pytest.mark.parametrize(
    "alert,summary,expected",
    [
        (UserAlert(user_id="u"), _summary(), True),
        (UserAlert(user_id="u"), _summary(priority="P2"), False),
        (UserAlert(user_id="u"), _summary(priority="P1"), True),
        (UserAlert(user_id="u", min_priority="P0"), _summary(priority="P1"), False),
        (UserAlert(user_id="u", min_priority="P0"), _summary(priority="P0"), True),
        (UserAlert(user_id="u", min_priority="P2"), _summary(priority="P1"), True),
        (UserAlert(user_id="u", min_priority="P2"), _summary(priority="P2"), False),
        (UserAlert(user_id="u", verticals=["Auto"]), _summary(), False),
        (UserAlert(user_id="u", verticals=["Home Services"]), _summary(), True),
        (UserAlert(user_id="u", verticals=["Auto"]), _summary(vertical=None), False),
        (UserAlert(user_id="u", competitors=["Jobber"]), _summary(), False),
        (UserAlert(user_id="u", ai_capabilities=["AI_CHAT_AGENT"]), _summary(), False),
        (
            UserAlert(user_id="u", ai_capabilities=["AI_CHAT_AGENT", "AI_VOICE_AGENT"]),
            _summary(),
            True,
        ),
    ],
)
def test_alert_matches(alert, summary, expected):
    assert alert_matches(alert, summary) is expected


def test_notification_text():
    note = build_notification(UserAlert(user_id="u"), _summary(competitor=None, summary="x" * 300))
    assert note.title == "P0: Competitor Update"
    assert note.message == "x" * 200
    assert note.story_id == 1


def _store_summary(conn, priority="P0", created_at=None) -> int:
    cluster_id = insert_cluster(conn, StoryCluster(canonical_title="c"))
    summary = _summary(priority=priority, id=None, cluster_id=cluster_id)
    if created_at is not None:
        summary.created_at = created_at
    return insert_summary(conn, summary)


def test_process_alerts_notifies_once(db_conn):
    insert_alert(db_conn, UserAlert(user_id="u1"))
    insert_alert(db_conn, UserAlert(user_id="u1", competitors=["ServiceTitan"]))
    insert_alert(db_conn, UserAlert(user_id="u2", verticals=["Auto"]))
    story_id = _store_summary(db_conn)

    assert process_alerts(db_conn) == 1
    assert process_alerts(db_conn) == 0

    notes = get_notifications(db_conn, "u1")
    assert len(notes) == 1
    assert notes[0].story_id == story_id
    assert notes[0].title == "P0: ServiceTitan Update"
    assert get_notifications(db_conn, "u2") == []


def test_process_alerts_respects_window(db_conn):
    insert_alert(db_conn, UserAlert(user_id="u1"))
    _store_summary(db_conn, created_at=utcnow() - timedelta(hours=7))
    _store_summary(db_conn, priority="P2")

    assert process_alerts(db_conn, window_hours=6) == 0


def test_inactive_alerts_ignored(db_conn):
    insert_alert(db_conn, UserAlert(user_id="u1", is_active=False))
    _store_summary(db_conn)
    assert process_alerts(db_conn) == 0
