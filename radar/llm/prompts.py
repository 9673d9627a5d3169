"""Prompt templates for LLM tasks."""

SYSTEM_ANALYST = """You are a competitive intelligence analyst briefing a product and \
go-to-market team. Be concise and factual. Only use what the sources say; \
never invent features, numbers or dates."""

ANALYZE_STORY = """\
Write up the following story about a competitor.

Detected competitor: {competitor}
Detected AI capabilities: {capabilities}
Assigned priority: {priority} (P0 critical, P1 important, P2 monitor)

SOURCES:
{items}

Respond in EXACTLY this JSON format (no markdown, no extra text):
{{
    "summary": "2-3 sentences on what happened",
    "key_points": ["up to 5 short factual points"],
    "why_it_matters": "1-2 sentences on competitive significance",
    "recommended_actions": ["up to 5 concrete next steps for our team"]
}}"""
