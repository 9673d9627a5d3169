"""Text helpers shared by ingest, normalization and analysis."""

from __future__ import annotations

import hashlib
import html
import re

_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")

# A sentence is a run of non-terminators closed by one or more terminators.
# Trailing text with no terminator is not a sentence.
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")


def compute_checksum(text: str) -> str:
    """SHA-256 hex digest of the text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def strip_html(markup: str) -> str:
    """Remove scripts, styles and tags, decode entities, collapse whitespace."""
    text = _SCRIPT_RE.sub("", markup)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text)
    return _WS_RE.sub(" ", text).strip()


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def split_sentences(text: str) -> list[str]:
    return _SENTENCE_RE.findall(text)


def slugify(name: str) -> str:
    """Source id from its display name: 'Service Titan Blog' -> 'service-titan-blog'."""
    return _WS_RE.sub("-", name.lower())


def format_capability(tag: str) -> str:
    """AI_VOICE_AGENT -> 'voice agent'."""
    return tag.replace("AI_", "", 1).replace("_", " ").lower()
