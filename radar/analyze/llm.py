"""LLM-backed analyzer that falls back to the rules on any failure.

Classification (competitor, capabilities, priority, verification, confidence)
always comes from the rule tables. The model only rewrites the narrative
fields: summary, key points, why it matters and recommended actions.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import replace
from typing import Sequence

from radar.analyze import register_analyzer, rules
from radar.analyze.base import BaseAnalyzer
from radar.analyze.deterministic import analyze_items
from radar.config import get_analysis_config
from radar.llm import get_provider_for_task
from radar.llm.prompts import ANALYZE_STORY, SYSTEM_ANALYST
from radar.models import AnalysisResult, StoryItem
from radar.text import format_capability, truncate_text

logger = logging.getLogger(__name__)

MAX_PROMPT_ITEMS = 10
MAX_ITEM_CHARS = 800


def _normalize_quotes(text: str) -> str:
    """Replace smart quotes with straight quotes for JSON parsing."""
    return (
        text
        .replace("\u201c", '"')
        .replace("\u201d", '"')
        .replace("\u2018", "'")
        .replace("\u2019", "'")
    )


def _try_parse(text: str) -> dict | None:
    for candidate in (text, _normalize_quotes(text)):
        try:
            data = json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(data, dict):
            return data
    return None


def extract_json(text: str) -> dict | None:
    """Extract a JSON object from output that may carry code fences or chatter."""
    result = _try_parse(text)
    if result is not None:
        return result

    fenced = re.search(r"```(?:json)?\s*\n?(.*?)\n?```", text, re.DOTALL)
    if fenced:
        result = _try_parse(fenced.group(1))
        if result is not None:
            return result

    brace = re.search(r"\{.*\}", text, re.DOTALL)
    if brace:
        return _try_parse(brace.group(0))
    return None


def _string_list(value, limit: int, max_chars: int | None = None) -> list[str]:
    if not isinstance(value, list):
        return []
    out = [str(v).strip() for v in value if isinstance(v, str) and v.strip()]
    if max_chars:
        out = [truncate_text(v, max_chars) for v in out]
    return out[:limit]


def merge_narrative(base: AnalysisResult, data: dict) -> AnalysisResult:
    """Overlay model-written narrative onto the rule-based result.

    Missing or malformed fields keep the rule-based value.
    """
    summary = data.get("summary")
    why = data.get("why_it_matters")
    points = _string_list(data.get("key_points"), rules.KEY_POINT_LIMIT, rules.KEY_POINT_MAX_CHARS)
    actions = _string_list(data.get("recommended_actions"), rules.ACTION_LIMIT)

    return replace(
        base,
        summary=(
            truncate_text(summary.strip(), rules.SUMMARY_MAX_CHARS)
            if isinstance(summary, str) and summary.strip() else base.summary
        ),
        key_points=points or base.key_points,
        why_it_matters=why.strip() if isinstance(why, str) and why.strip() else base.why_it_matters,
        recommended_actions=actions or base.recommended_actions,
    )


@register_analyzer("llm")
class LLMAnalyzer(BaseAnalyzer):
    """Rules for classification, a language model for the write-up."""

    @property
    def name(self) -> str:
        return "llm"

    async def analyze(self, items: Sequence[StoryItem]) -> AnalysisResult:
        base = analyze_items(items, self.snapshot.competitors)
        timeout = get_analysis_config(self.config)["llm_timeout"]

        try:
            data = await asyncio.wait_for(self._ask_model(items, base), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("LLM analysis timed out after %.0fs, using rules", timeout)
            return base
        except Exception:
            logger.warning("LLM analysis failed, using rules", exc_info=True)
            return base

        if data is None:
            logger.warning("Unparseable LLM analysis response, using rules")
            return base
        return merge_narrative(base, data)

    async def _ask_model(
        self, items: Sequence[StoryItem], base: AnalysisResult,
    ) -> dict | None:
        provider = get_provider_for_task(self.config, "analyze")

        item_texts = []
        for i, item in enumerate(items[:MAX_PROMPT_ITEMS], 1):
            item_texts.append(
                f"[{i}] {item.title} (Source: {item.source_name}, trust: {item.trust_tier})\n"
                f"{item.text[:MAX_ITEM_CHARS]}"
            )

        prompt = ANALYZE_STORY.format(
            competitor=base.competitor_name or "unknown",
            capabilities=", ".join(format_capability(c) for c in base.ai_capabilities) or "none",
            priority=base.priority,
            items="\n\n".join(item_texts),
        )
        response = await provider.complete(prompt, system=SYSTEM_ANALYST)
        logger.debug(
            "LLM analysis used %d input / %d output tokens",
            response.input_tokens, response.output_tokens,
        )
        return extract_json(response.text)
