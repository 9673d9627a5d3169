#!/usr/bin/env python3
"""Live check of configured sources without touching the database.

Run from a machine with internet access:

    python scripts/check_sources.py
    python scripts/check_sources.py --source "ServiceTitan Blog"
    python scripts/check_sources.py --classify
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from radar.analyze.deterministic import analyze_items
from radar.config import load_config, load_snapshot
from radar.ingest.collect import fetch_source
from radar.ingest.http import DomainRateLimiter
from radar.models import StoryItem


def _print_documents(source, documents: list, competitors, classify: bool) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {source.name} [{source.source_type}/{source.trust_tier}]: {len(documents)} documents")
    print(f"{'=' * 60}")
    for i, doc in enumerate(documents, 1):
        print(f"\n  {i}. {doc.title[:80]}")
        print(f"     URL:     {doc.url[:80]}")
        print(f"     Date:    {doc.published_at or 'N/A'}")
        preview = (doc.content or "")[:120].replace("\n", " ")
        print(f"     Content: {preview}...")
        if classify:
            item = StoryItem(
                url=doc.url, title=doc.title, text=doc.content,
                source_name=source.name, trust_tier=source.trust_tier,
            )
            result = analyze_items([item], competitors)
            caps = ", ".join(result.ai_capabilities) or "none"
            print(
                f"     Rules:   {result.priority} {result.competitor_name or '-'} "
                f"[{caps}] confidence {result.confidence_score}"
            )


async def main() -> None:
    parser = argparse.ArgumentParser(description="Fetch configured sources and print results")
    parser.add_argument(
        "--source", default=None,
        help="Only check the source with this name (default: all)",
    )
    parser.add_argument(
        "--classify", action="store_true",
        help="Run the rule-based analyzer on each document",
    )
    parser.add_argument(
        "--config", default=None,
        help="Config file path (default: config.yaml or CONFIG_PATH env)",
    )
    args = parser.parse_args()

    config_path = args.config or os.environ.get("CONFIG_PATH", "config.yaml")
    snapshot = load_snapshot(load_config(config_path))
    limiter = DomainRateLimiter()

    sources = [s for s in snapshot.sources if args.source in (None, s.name)]
    if not sources:
        print(f"No source named '{args.source}'")
        sys.exit(1)

    for source in sources:
        try:
            documents = await fetch_source(source, limiter)
        except Exception as exc:
            print(f"\n[{source.name}] failed: {exc}")
            continue
        _print_documents(source, documents, snapshot.competitors, args.classify)

    print("\nDone.")


if __name__ == "__main__":
    asyncio.run(main())
