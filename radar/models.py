"""Core data models for the competitor radar pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

PRIORITIES = ("P0", "P1", "P2")

VERIFIED = "VERIFIED"
CLAIM_UNVERIFIED = "CLAIM_UNVERIFIED"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def priority_rank(priority: str) -> int:
    """Sort key for priorities: P0 sorts first."""
    try:
        return PRIORITIES.index(priority)
    except ValueError:
        return len(PRIORITIES)


@dataclass
class Source:
    """A configured content origin, synced from the source catalog."""

    id: str
    name: str
    base_url: str
    source_type: str  # official, industry, reviews, jobs
    trust_tier: str  # HIGH, MEDIUM, LOW


@dataclass
class RawItem:
    """A fetched document awaiting normalization and clustering."""

    url: str
    source_id: str
    title: str = ""
    raw_text: str | None = None
    published_at: datetime | None = None
    fetched_at: datetime = field(default_factory=utcnow)
    checksum: str | None = None
    processed: bool = False
    id: int | None = None


@dataclass
class StoryItem:
    """A raw item as seen by the analyzer, carrying its source's trust."""

    url: str
    title: str
    text: str
    source_name: str
    trust_tier: str
    id: int | None = None


@dataclass
class StoryCluster:
    """A deduplicated story grouping one or more raw items."""

    canonical_title: str
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    items: list[StoryItem] = field(default_factory=list)
    id: int | None = None


@dataclass
class Citation:
    url: str
    title: str
    retrieved_at: str


@dataclass
class AnalysisResult:
    """Structured intelligence derived from one cluster's items."""

    competitor_name: str | None
    verticals: list[str]
    ai_capabilities: list[str]
    summary: str
    key_points: list[str]
    why_it_matters: str
    recommended_actions: list[str]
    priority: str  # P0, P1, P2
    confidence_score: int  # 1-5
    verification_status: str  # VERIFIED, CLAIM_UNVERIFIED
    citations: list[Citation] = field(default_factory=list)


@dataclass
class StorySummary:
    """The persisted analysis of a cluster. One per cluster."""

    cluster_id: int
    competitor: str | None
    vertical: str | None
    ai_capabilities: list[str]
    summary: str
    key_points: list[str]
    why_it_matters: str
    recommended_actions: list[str]
    priority: str
    confidence_score: int
    verification_status: str
    citations: list[Citation] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    id: int | None = None

    @classmethod
    def from_analysis(cls, cluster_id: int, result: AnalysisResult) -> StorySummary:
        return cls(
            cluster_id=cluster_id,
            competitor=result.competitor_name,
            vertical=result.verticals[0] if result.verticals else None,
            ai_capabilities=list(result.ai_capabilities),
            summary=result.summary,
            key_points=list(result.key_points),
            why_it_matters=result.why_it_matters,
            recommended_actions=list(result.recommended_actions),
            priority=result.priority,
            confidence_score=result.confidence_score,
            verification_status=result.verification_status,
            citations=list(result.citations),
        )


@dataclass
class UserAlert:
    """A standing alert rule. Empty filters match everything."""

    user_id: str
    verticals: list[str] = field(default_factory=list)
    competitors: list[str] = field(default_factory=list)
    ai_capabilities: list[str] = field(default_factory=list)
    min_priority: str = "P1"
    is_active: bool = True
    id: int | None = None


@dataclass
class Notification:
    user_id: str
    story_id: int
    title: str
    message: str
    is_read: bool = False
    created_at: datetime = field(default_factory=utcnow)
    id: int | None = None


@dataclass
class JobRun:
    """Record of a single job execution."""

    job_name: str
    started_at: datetime = field(default_factory=utcnow)
    finished_at: datetime | None = None
    status: str = "RUNNING"  # RUNNING, COMPLETED, FAILED
    items_processed: int = 0
    error_message: str | None = None
    id: int | None = None
