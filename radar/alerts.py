"""Match new story summaries against standing user alert rules."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timedelta

from radar.db import get_active_alerts, get_recent_summaries, insert_notification
from radar.models import Notification, StorySummary, UserAlert, priority_rank, utcnow

logger = logging.getLogger(__name__)

ALERT_WINDOW_HOURS = 6
MESSAGE_MAX_CHARS = 200
# P2 stories never alert, whatever the rule asks for
ALERT_MAX_PRIORITY = "P1"


def alert_matches(alert: UserAlert, summary: StorySummary) -> bool:
    """True when every non-empty filter of the alert accepts the summary."""
    if alert.verticals and summary.vertical not in alert.verticals:
        return False
    if alert.competitors and summary.competitor not in alert.competitors:
        return False
    threshold = min(priority_rank(alert.min_priority), priority_rank(ALERT_MAX_PRIORITY))
    if priority_rank(summary.priority) > threshold:
        return False
    if alert.ai_capabilities and not set(alert.ai_capabilities) & set(summary.ai_capabilities):
        return False
    return True


def build_notification(alert: UserAlert, summary: StorySummary) -> Notification:
    return Notification(
        user_id=alert.user_id,
        story_id=summary.id,
        title=f"{summary.priority}: {summary.competitor or 'Competitor'} Update",
        message=summary.summary[:MESSAGE_MAX_CHARS],
    )


def process_alerts(
    conn: sqlite3.Connection,
    window_hours: float = ALERT_WINDOW_HOURS,
    now: datetime | None = None,
) -> int:
    """Notify users about recent P0/P1 stories. Returns notifications created.

    A user is notified about a story at most once, however many of their
    alerts match it or however often this runs.
    """
    now = now or utcnow()
    summaries = get_recent_summaries(conn, since=now - timedelta(hours=window_hours))
    alerts = get_active_alerts(conn)

    sent = 0
    for summary in summaries:
        for alert in alerts:
            if not alert_matches(alert, summary):
                continue
            if insert_notification(conn, build_notification(alert, summary)):
                sent += 1
                logger.info(
                    "Notified %s about story #%d (%s)",
                    alert.user_id, summary.id, summary.priority,
                )

    logger.info(
        "Checked %d summaries against %d alerts: %d notifications",
        len(summaries), len(alerts), sent,
    )
    return sent
