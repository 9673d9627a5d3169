"""Competitor, capability, priority, verification and confidence detection."""

from __future__ import annotations

import math
import re
from typing import Iterable, Mapping, Sequence

from radar.analyze import rules
from radar.config import CompetitorConfig
from radar.models import CLAIM_UNVERIFIED, VERIFIED, StoryItem

BASE_CONFIDENCE = 3.0
MIN_CONFIDENCE = 1
MAX_CONFIDENCE = 5

UNKNOWN_COMPETITOR = "unknown"


def combined_text(items: Sequence[StoryItem]) -> str:
    """Title and body of every item, joined for detection."""
    return " ".join(f"{item.title} {item.text}" for item in items)


def detect_competitor(
    text: str, competitors: Iterable[CompetitorConfig],
) -> CompetitorConfig | None:
    """First configured competitor whose name or keyword appears in the text.

    Configuration order breaks ties: this is first match, not best match.
    """
    lowered = text.lower()
    for competitor in competitors:
        if competitor.name.lower() in lowered:
            return competitor
        for keyword in competitor.keywords:
            if keyword.lower() in lowered:
                return competitor
    return None


def competitor_key(text: str, competitors: Iterable[CompetitorConfig]) -> str:
    """Competitor name used to group items, or 'unknown'."""
    competitor = detect_competitor(text, competitors)
    return competitor.name if competitor else UNKNOWN_COMPETITOR


def _any_match(patterns: Iterable[re.Pattern], text: str) -> bool:
    return any(p.search(text) for p in patterns)


def match_table(
    table: Mapping[str, Sequence[re.Pattern]], text: str,
) -> list[str]:
    """Every key of the table with at least one matching pattern, in table order."""
    return [key for key, patterns in table.items() if _any_match(patterns, text)]


def detect_capabilities(text: str) -> list[str]:
    capabilities = match_table(rules.CAPABILITY_PATTERNS, text)
    if not capabilities and rules.GENERIC_AI_PATTERN.search(text):
        capabilities.append(rules.GENERIC_AI_TAG)
    return capabilities


def detect_priority(text: str, capabilities: Sequence[str]) -> str:
    """P0 patterns, then P1 patterns, then capability floor, then P2."""
    for priority, patterns in rules.PRIORITY_PATTERNS:
        if _any_match(patterns, text):
            return priority
    for capability, priority in rules.CAPABILITY_PRIORITY_FLOOR.items():
        if capability in capabilities:
            return priority
    return rules.DEFAULT_PRIORITY


def determine_verification(items: Sequence[StoryItem], has_ai_claims: bool) -> str:
    """AI claims need a HIGH-trust source or two independent source names."""
    if not has_ai_claims:
        return VERIFIED
    if any(item.trust_tier == "HIGH" for item in items):
        return VERIFIED
    if len({item.source_name for item in items}) >= 2:
        return VERIFIED
    return CLAIM_UNVERIFIED


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_confidence(items: Sequence[StoryItem], verification_status: str) -> int:
    high = sum(1 for item in items if item.trust_tier == "HIGH")
    medium = sum(1 for item in items if item.trust_tier == "MEDIUM")

    score = BASE_CONFIDENCE
    if high >= 2:
        score += 1.0
    if high >= 1:
        score += 0.5
    if medium >= 2:
        score += 0.5

    if verification_status == VERIFIED:
        score += 1.0
    elif verification_status == CLAIM_UNVERIFIED:
        score -= 0.5

    # Corroboration
    if len(items) >= 3:
        score += 0.5

    return min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, _round_half_up(score)))
