"""Rule tables for the deterministic analyzer.

Every table is immutable ordered data. Matching logic lives in
``radar.analyze.classifier``; swapping a taxonomy means swapping a table here.
"""

from __future__ import annotations

import re
from types import MappingProxyType


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


AI_VOICE_AGENT = "AI_VOICE_AGENT"
AI_CHAT_AGENT = "AI_CHAT_AGENT"
AI_LEAD_RESPONSE = "AI_LEAD_RESPONSE"
AI_SCHEDULING_BOOKING = "AI_SCHEDULING_BOOKING"
AI_DISPATCH_ROUTING = "AI_DISPATCH_ROUTING"
AI_MARKETING_AUTOMATION = "AI_MARKETING_AUTOMATION"
AI_REPUTATION_REVIEWS = "AI_REPUTATION_REVIEWS"
AI_ANALYTICS_INSIGHTS = "AI_ANALYTICS_INSIGHTS"
AI_PAYMENTS_COLLECTIONS = "AI_PAYMENTS_COLLECTIONS"
AI_WORKFLOW_AUTOMATION = "AI_WORKFLOW_AUTOMATION"

# Tag -> patterns. Iteration order is the order tags are reported in.
CAPABILITY_PATTERNS: MappingProxyType[str, tuple[re.Pattern, ...]] = MappingProxyType({
    AI_VOICE_AGENT: _compile(
        r"voice\s*(ai|agent|assistant|bot)",
        r"ai\s*voice",
        r"conversational\s*ai.*voice",
        r"phone\s*(ai|bot|agent)",
        r"virtual\s*receptionist",
        r"ai\s*calling",
        r"voice\s*automation",
    ),
    AI_CHAT_AGENT: _compile(
        r"chat\s*(ai|bot|agent)",
        r"ai\s*chat",
        r"conversational\s*ai",
        r"live\s*chat.*ai",
        r"messaging\s*ai",
        r"ai\s*messaging",
    ),
    AI_LEAD_RESPONSE: _compile(
        r"lead\s*response.*ai",
        r"ai.*lead\s*(response|follow|nurtur)",
        r"instant\s*lead",
        r"automated\s*lead",
        r"lead\s*engagement",
    ),
    AI_SCHEDULING_BOOKING: _compile(
        r"ai\s*schedul",
        r"schedul.*ai",
        r"ai\s*book",
        r"book.*ai",
        r"automated\s*schedul",
        r"smart\s*schedul",
        r"intelligent\s*schedul",
    ),
    AI_DISPATCH_ROUTING: _compile(
        r"ai\s*dispatch",
        r"dispatch.*ai",
        r"intelligent\s*routing",
        r"ai\s*rout",
        r"smart\s*dispatch",
        r"automated\s*dispatch",
    ),
    AI_MARKETING_AUTOMATION: _compile(
        r"ai\s*market",
        r"market.*ai",
        r"ai\s*campaign",
        r"automated\s*market",
        r"intelligent\s*market",
        r"ai\s*email",
        r"ai\s*sms",
    ),
    AI_REPUTATION_REVIEWS: _compile(
        r"ai\s*review",
        r"review.*ai",
        r"reputation.*ai",
        r"ai\s*reputation",
        r"sentiment\s*analysis",
        r"review\s*management.*ai",
    ),
    AI_ANALYTICS_INSIGHTS: _compile(
        r"ai\s*analytic",
        r"analytic.*ai",
        r"ai\s*insight",
        r"predictive\s*analytic",
        r"ai\s*reporting",
        r"intelligent\s*analytic",
        r"data\s*ai",
    ),
    AI_PAYMENTS_COLLECTIONS: _compile(
        r"ai\s*payment",
        r"payment.*ai",
        r"ai\s*collection",
        r"collection.*ai",
        r"automated\s*billing",
        r"smart\s*payment",
    ),
    AI_WORKFLOW_AUTOMATION: _compile(
        r"ai\s*workflow",
        r"workflow.*ai",
        r"process\s*automation.*ai",
        r"ai\s*automation",
        r"intelligent\s*workflow",
        r"ai\s*process",
    ),
})

# Used when nothing specific matched but the story still mentions AI.
GENERIC_AI_PATTERN = re.compile(r"\bai\b", re.IGNORECASE)
GENERIC_AI_TAG = AI_WORKFLOW_AUTOMATION

# Priority cascade: first bucket with any match wins.
PRIORITY_PATTERNS: tuple[tuple[str, tuple[re.Pattern, ...]], ...] = (
    ("P0", _compile(
        r"launch",
        r"announc",
        r"acqui",
        r"merger",
        r"pricing\s*(change|update|new)",
        r"major\s*(update|release|feature)",
        r"revolutionary",
        r"game\s*chang",
        r"industry\s*first",
        r"raises?\s*\$?\d+\s*(million|m|billion|b)",
        r"funding\s*round",
        r"series\s*[a-z]",
    )),
    ("P1", _compile(
        r"new\s*feature",
        r"improvement",
        r"enhanc",
        r"updat",
        r"integrat",
        r"partner",
        r"expand",
        r"add.*capabilit",
        r"beta",
        r"early\s*access",
    )),
)

# Capabilities that lift an otherwise unremarkable story to this priority.
CAPABILITY_PRIORITY_FLOOR = MappingProxyType({AI_VOICE_AGENT: "P1"})

DEFAULT_PRIORITY = "P2"

# Scored by presence (not count) in each sentence.
RELEVANCE_KEYWORDS = (
    "ai",
    "voice",
    "launch",
    "announce",
    "new",
    "feature",
    "update",
    "release",
    "integration",
    "platform",
    "automat",
    "intelligen",
)

# Key point indicators, tried in order; a sentence counts once.
KEY_POINT_INDICATORS: tuple[tuple[str, re.Pattern], ...] = tuple(
    (label, re.compile(pattern, re.IGNORECASE))
    for label, pattern in (
        ("Now offers", r"now\s+(offer|support|include|feature)"),
        ("New capability", r"new\s+(feature|capability|function)"),
        ("Integration", r"integrat"),
        ("Launch", r"launch"),
        ("Announcement", r"announc"),
    )
)

PRIORITY_NARRATIVE = MappingProxyType({
    "P0": "This is a significant development that could shift competitive dynamics.",
    "P1": "This represents meaningful progress in competitive capabilities.",
})

CAPABILITY_NARRATIVE = MappingProxyType({
    AI_VOICE_AGENT: "Voice AI capabilities are a key differentiator in the market.",
})

NARRATIVE_FALLBACK = "Monitor for potential competitive impact."

PRIORITY_ACTIONS = MappingProxyType({
    "P0": (
        "Schedule executive briefing to discuss implications",
        "Assess competitive response options",
        "Monitor customer sentiment and reactions",
    ),
    "P1": (
        "Add to next competitive review agenda",
        "Evaluate feature for potential roadmap consideration",
    ),
})

CAPABILITY_ACTIONS = MappingProxyType({
    AI_VOICE_AGENT: ("Benchmark voice AI capabilities",),
})

ACTION_FALLBACK = "Continue monitoring for developments."

SUMMARY_SENTENCES = 3
SUMMARY_MAX_CHARS = 500
SUMMARY_FALLBACK = "No summary available"
KEY_POINT_SCAN_LIMIT = 20
KEY_POINT_LIMIT = 5
KEY_POINT_MAX_CHARS = 150
ACTION_LIMIT = 5
