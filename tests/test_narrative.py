"""Tests for extractive summaries, key points and template narrative."""

from __future__ import annotations

from radar.analyze.narrative import (
    extractive_summary,
    key_points,
    recommended_actions,
    why_it_matters,
)
from radar.config import CompetitorConfig
from radar.text import split_sentences, strip_html, truncate_text


def test_split_sentences_drops_unterminated_tail():
    assert split_sentences("One. Two! Three") == ["One.", " Two!"]


def test_truncate_text():
    assert truncate_text("short", 10) == "short"
    assert truncate_text("a" * 20, 10) == "aaaaaaa..."


def test_strip_html():
    markup = "<script>x()</script><p>Fish &amp; <b>chips</b></p>\n\n<style>p{}</style>"
    assert strip_html(markup) == "Fish & chips"


def test_summary_prefers_relevant_sentences(make_item):
    item = make_item(
        text="The weather was mild. The company will launch a new AI platform. "
        "Lunch was served. Staff went home."
    )
    summary = extractive_summary([item])
    assert summary.startswith("The company will launch a new AI platform.")
    # Ties keep document order
    assert summary.endswith("The weather was mild. Lunch was served.")


def test_summary_falls_back_to_title(make_item):
    assert extractive_summary([make_item(title="Headline only", text="")]) == "Headline only"


def test_summary_fallback_when_nothing(make_item):
    assert extractive_summary([make_item(title="", text="")]) == "No summary available"


def test_summary_capped(make_item):
    sentence = "AI " + "word " * 60 + "end."
    summary = extractive_summary([make_item(text=sentence * 3)])
    assert len(summary) <= 500
    assert summary.endswith("...")


def test_key_points_match_indicators(make_item):
    item = make_item(
        text="Nothing here. It now offers online booking. A new capability arrived. "
        "The integration with QuickBooks is live."
    )
    assert key_points([item]) == [
        "It now offers online booking.",
        "A new capability arrived.",
        "The integration with QuickBooks is live.",
    ]


def test_key_points_fallback_to_first_sentence(make_item):
    assert key_points([make_item(text="Plain first. Plain second.")]) == ["Plain first."]


def test_key_points_capped_at_five(make_item):
    text = " ".join(f"We launch thing {i}." for i in range(10))
    assert len(key_points([make_item(text=text)])) == 5


def test_why_it_matters_without_competitor():
    assert why_it_matters(None, [], "P2") == "Monitor for potential competitive impact."


def test_why_it_matters_lists_capabilities():
    comp = CompetitorConfig(
        name="Podium", verticals=["Auto", "Med Spa"], keywords=[], category="AI_CHAT",
    )
    text = why_it_matters(comp, ["AI_CHAT_AGENT", "AI_LEAD_RESPONSE"], "P1")
    assert text == (
        "This represents meaningful progress in competitive capabilities. "
        "Podium is active in Auto, Med Spa. "
        "AI capabilities involved: chat agent, lead response."
    )


def test_why_it_matters_competitor_without_verticals():
    comp = CompetitorConfig(name="Acme", verticals=[], keywords=[], category="CRM")
    assert why_it_matters(comp, [], "P2") == "Acme is a tracked competitor."


def test_recommended_actions():
    assert recommended_actions("P1", ["AI_VOICE_AGENT"]) == [
        "Add to next competitive review agenda",
        "Evaluate feature for potential roadmap consideration",
        "Benchmark voice AI capabilities",
    ]
    assert recommended_actions("P2", []) == ["Continue monitoring for developments."]
