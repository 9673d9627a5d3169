"""Rule-based analyzer: the reference behavior, no network calls."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from radar.analyze import register_analyzer
from radar.analyze.base import BaseAnalyzer
from radar.analyze.classifier import (
    calculate_confidence,
    combined_text,
    detect_capabilities,
    detect_competitor,
    detect_priority,
    determine_verification,
)
from radar.analyze.narrative import (
    extractive_summary,
    key_points,
    recommended_actions,
    why_it_matters,
)
from radar.config import CompetitorConfig
from radar.models import AnalysisResult, Citation, StoryItem, utcnow


def build_citations(items: Sequence[StoryItem], now: datetime | None = None) -> list[Citation]:
    retrieved_at = (now or utcnow()).isoformat()
    return [
        Citation(url=item.url, title=item.title or item.source_name, retrieved_at=retrieved_at)
        for item in items
    ]


def analyze_items(
    items: Sequence[StoryItem],
    competitors: Iterable[CompetitorConfig],
    now: datetime | None = None,
) -> AnalysisResult:
    """Classify and summarize a cluster's items.

    Deterministic for a given input except for the citation timestamps,
    which use ``now`` (wall clock when omitted).
    """
    text = combined_text(items)

    competitor = detect_competitor(text, competitors)
    capabilities = detect_capabilities(text)
    verification = determine_verification(items, has_ai_claims=bool(capabilities))
    priority = detect_priority(text, capabilities)
    confidence = calculate_confidence(items, verification)

    return AnalysisResult(
        competitor_name=competitor.name if competitor else None,
        verticals=list(competitor.verticals) if competitor else [],
        ai_capabilities=capabilities,
        summary=extractive_summary(items),
        key_points=key_points(items),
        why_it_matters=why_it_matters(competitor, capabilities, priority),
        recommended_actions=recommended_actions(priority, capabilities),
        priority=priority,
        confidence_score=confidence,
        verification_status=verification,
        citations=build_citations(items, now),
    )


@register_analyzer("rules")
class RuleBasedAnalyzer(BaseAnalyzer):
    """Pattern tables plus extractive summarization."""

    @property
    def name(self) -> str:
        return "rules"

    async def analyze(self, items: Sequence[StoryItem]) -> AnalysisResult:
        return analyze_items(items, self.snapshot.competitors)
