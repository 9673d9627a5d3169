"""Extractive summary, key points and template narrative for a story."""

from __future__ import annotations

from typing import Sequence

from radar.analyze import rules
from radar.config import CompetitorConfig
from radar.models import StoryItem
from radar.text import format_capability, split_sentences, truncate_text


def story_sentences(items: Sequence[StoryItem]) -> list[str]:
    """Sentences of every item's body, falling back to its title."""
    return split_sentences(" ".join(item.text or item.title for item in items))


def _relevance(sentence: str) -> int:
    lowered = sentence.lower()
    return sum(1 for keyword in rules.RELEVANCE_KEYWORDS if keyword in lowered)


def extractive_summary(items: Sequence[StoryItem]) -> str:
    sentences = story_sentences(items)
    if not sentences:
        if items and items[0].title:
            return items[0].title
        return rules.SUMMARY_FALLBACK

    # sorted() is stable, so equal scores keep document order
    ranked = sorted(
        (s.strip() for s in sentences), key=_relevance, reverse=True,
    )
    top = " ".join(ranked[: rules.SUMMARY_SENTENCES])
    return truncate_text(top, rules.SUMMARY_MAX_CHARS)


def key_points(items: Sequence[StoryItem]) -> list[str]:
    sentences = story_sentences(items)
    points: list[str] = []

    for sentence in sentences[: rules.KEY_POINT_SCAN_LIMIT]:
        if len(points) >= rules.KEY_POINT_LIMIT:
            break
        if any(p.search(sentence) for _, p in rules.KEY_POINT_INDICATORS):
            points.append(truncate_text(sentence.strip(), rules.KEY_POINT_MAX_CHARS))

    if not points and sentences:
        points.append(truncate_text(sentences[0].strip(), rules.KEY_POINT_MAX_CHARS))
    return points


def why_it_matters(
    competitor: CompetitorConfig | None,
    capabilities: Sequence[str],
    priority: str,
) -> str:
    parts: list[str] = []

    if priority in rules.PRIORITY_NARRATIVE:
        parts.append(rules.PRIORITY_NARRATIVE[priority])

    if competitor is not None:
        if competitor.verticals:
            parts.append(
                f"{competitor.name} is active in {', '.join(competitor.verticals)}."
            )
        else:
            parts.append(f"{competitor.name} is a tracked competitor.")

    for capability, sentence in rules.CAPABILITY_NARRATIVE.items():
        if capability in capabilities:
            parts.append(sentence)

    if capabilities:
        names = ", ".join(format_capability(c) for c in capabilities)
        parts.append(f"AI capabilities involved: {names}.")

    return " ".join(parts) or rules.NARRATIVE_FALLBACK


def recommended_actions(priority: str, capabilities: Sequence[str]) -> list[str]:
    actions = list(rules.PRIORITY_ACTIONS.get(priority, ()))
    for capability, extra in rules.CAPABILITY_ACTIONS.items():
        if capability in capabilities:
            actions.extend(extra)
    if not actions:
        actions.append(rules.ACTION_FALLBACK)
    return actions[: rules.ACTION_LIMIT]
