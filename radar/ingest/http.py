"""HTTP fetching with per-domain politeness."""

from __future__ import annotations

import asyncio
import logging
import time
from urllib.parse import urlparse

import httpx

from radar.retry import retry_async

logger = logging.getLogger(__name__)

USER_AGENT = "CompetitorRadar/1.0 (compatible)"
MIN_DOMAIN_INTERVAL = 2.0


class DomainRateLimiter:
    """Keep at least `min_interval` seconds between requests to one host."""

    def __init__(self, min_interval: float = MIN_DOMAIN_INTERVAL):
        self.min_interval = min_interval
        self._last: dict[str, float] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def wait(self, url: str) -> None:
        domain = urlparse(url).hostname or url
        lock = self._locks.setdefault(domain, asyncio.Lock())
        async with lock:
            last = self._last.get(domain)
            if last is not None:
                elapsed = time.monotonic() - last
                if elapsed < self.min_interval:
                    await asyncio.sleep(self.min_interval - elapsed)
            self._last[domain] = time.monotonic()


async def _get(url: str, timeout: float) -> str:
    async with httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    ) as client:
        resp = await client.get(url)
        resp.raise_for_status()
        return resp.text


async def fetch_text(
    url: str,
    limiter: DomainRateLimiter,
    timeout: float = 15.0,
    max_retries: int = 2,
) -> str:
    """GET a URL politely and return the body. Raises on final failure."""
    await limiter.wait(url)
    return await retry_async(_get, url, timeout, max_retries=max_retries, base_delay=0.5)
