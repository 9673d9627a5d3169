"""Normalization: strip leftover markup and set content checksums."""

from __future__ import annotations

import logging
import sqlite3

from radar.db import get_unnormalized_items, update_normalized_text
from radar.process import register_processor
from radar.process.base import BaseProcessor
from radar.text import compute_checksum, strip_html

logger = logging.getLogger(__name__)


@register_processor("normalize")
class NormalizeProcessor(BaseProcessor):
    """Normalize items that have no checksum yet."""

    batch_setting = "normalize_batch_size"

    @property
    def name(self) -> str:
        return "normalize"

    async def process(self, conn: sqlite3.Connection) -> int:
        """Returns the number of items examined, including ones without text.

        Items without text get the checksum of the empty string so they leave
        the queue; clustering skips them for having no text.
        """
        items = get_unnormalized_items(conn, self.batch_size)
        normalized = 0
        for item in items:
            text = strip_html(item.raw_text) if item.raw_text else ""
            update_normalized_text(conn, item.id, text, compute_checksum(text))
            if text:
                normalized += 1

        if items:
            logger.info(
                "Normalized %d of %d items (%d without text)",
                normalized, len(items), len(items) - normalized,
            )
        return len(items)
