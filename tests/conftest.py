"""Shared test fixtures."""

from __future__ import annotations

import pytest

from radar.config import load_config, load_snapshot
from radar.db import get_connection, init_db, insert_raw_item, upsert_source
from radar.models import RawItem, Source, StoryItem
from radar.text import compute_checksum


@pytest.fixture
def sample_config(tmp_path):
    """Minimal config with an inline catalog (no real API keys)."""
    config_text = """
llm:
  providers:
    mock:
      type: "openai_compatible"
      api_key: "test-key"
      base_url: "http://localhost:9999"
      default_model: "test-model"
  tasks:
    analyze: { provider: "mock" }

analysis:
  strategy: rules
  llm_timeout: 5

pipeline:
  cluster_batch_size: 100
  normalize_batch_size: 100
  analyze_batch_size: 50
  alert_window_hours: 6

competitors:
  - name: ServiceTitan
    website: https://www.servicetitan.com
    verticals: [Home Services]
    keywords: [servicetitan, titan intelligence]
    category: FSM
  - name: Housecall Pro
    verticals: [Home Services]
    keywords: [housecallpro]
    category: FSM
  - name: Tekmetric
    verticals: [Auto]
    keywords: [tekmetric]
    category: PLATFORM

sources:
  - name: ServiceTitan Blog
    base_url: https://www.servicetitan.com/blog
    source_type: official
    trust_tier: HIGH
  - name: Trade News
    base_url: https://tradenews.example.com
    source_type: industry
    trust_tier: MEDIUM
  - name: Review Site
    base_url: https://reviews.example.com
    source_type: reviews
    trust_tier: LOW

database:
  path: "DB_PATH_PLACEHOLDER"
"""
    db_path = str(tmp_path / "test.db")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(config_text.replace("DB_PATH_PLACEHOLDER", db_path))
    return load_config(str(cfg_path))


@pytest.fixture
def snapshot(sample_config):
    return load_snapshot(sample_config)


@pytest.fixture
def db_conn(sample_config):
    """Initialized test database connection with the sample sources synced."""
    db_path = sample_config["database"]["path"]
    init_db(db_path)
    conn = get_connection(db_path)
    for source_id, name, tier in (
        ("servicetitan-blog", "ServiceTitan Blog", "HIGH"),
        ("trade-news", "Trade News", "MEDIUM"),
        ("review-site", "Review Site", "LOW"),
    ):
        upsert_source(
            conn,
            Source(
                id=source_id,
                name=name,
                base_url=f"https://{source_id}.example.com",
                source_type="official",
                trust_tier=tier,
            ),
        )
    yield conn
    conn.close()


@pytest.fixture
def make_item():
    """Factory for analyzer input items."""

    def _make(
        title: str = "",
        text: str = "",
        source_name: str = "Trade News",
        trust_tier: str = "MEDIUM",
        url: str | None = None,
    ) -> StoryItem:
        _make.counter += 1
        return StoryItem(
            url=url or f"https://example.com/story-{_make.counter}",
            title=title,
            text=text,
            source_name=source_name,
            trust_tier=trust_tier,
        )

    _make.counter = 0
    return _make


@pytest.fixture
def add_raw_item(db_conn):
    """Insert a normalized, unprocessed raw item and return its ID."""
    counter = {"n": 0}

    def _add(
        title: str,
        text: str,
        source_id: str = "trade-news",
        url: str | None = None,
        normalized: bool = True,
    ) -> int:
        counter["n"] += 1
        item = RawItem(
            url=url or f"https://example.com/raw-{counter['n']}",
            source_id=source_id,
            title=title,
            raw_text=text,
            checksum=compute_checksum(text) if normalized else None,
        )
        return insert_raw_item(db_conn, item)

    return _add
