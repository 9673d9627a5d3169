"""Exponential backoff for HTTP fetches and LLM calls."""

from __future__ import annotations

import asyncio
import logging

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_HTTP_CODES = {429, 500, 502, 503, 504}
RETRYABLE_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
    ConnectionError,
    TimeoutError,
)
# Matched by class name so the anthropic SDK stays an optional import here
RETRYABLE_SDK_ERRORS = {
    "RateLimitError",
    "OverloadedError",
    "InternalServerError",
    "APIConnectionError",
}


def _backoff(attempt: int, base_delay: float, max_delay: float) -> float:
    return min(base_delay * (2**attempt), max_delay)


def _retry_after(exc: httpx.HTTPStatusError, default: float, max_delay: float) -> float:
    header = exc.response.headers.get("retry-after")
    if not header:
        return default
    try:
        return min(float(header), max_delay)
    except ValueError:
        return default


async def retry_async(
    fn,
    *args,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    **kwargs,
):
    """Await ``fn(*args, **kwargs)``, retrying transient failures.

    Retries network timeouts and connection errors, HTTP 429 and 5xx
    responses, and the SDK's rate-limit/overload errors. Anything else,
    and the last transient failure once retries run out, is raised.
    """
    for attempt in range(max_retries + 1):
        try:
            return await fn(*args, **kwargs)
        except RETRYABLE_EXCEPTIONS as exc:
            if attempt == max_retries:
                raise
            delay = _backoff(attempt, base_delay, max_delay)
            logger.warning(
                "Retry %d/%d after %s: %s (waiting %.1fs)",
                attempt + 1, max_retries, type(exc).__name__, exc, delay,
            )
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code not in RETRYABLE_HTTP_CODES or attempt == max_retries:
                raise
            delay = _retry_after(exc, _backoff(attempt, base_delay, max_delay), max_delay)
            logger.warning(
                "Retry %d/%d after HTTP %d (waiting %.1fs)",
                attempt + 1, max_retries, exc.response.status_code, delay,
            )
        except Exception as exc:
            if type(exc).__name__ not in RETRYABLE_SDK_ERRORS or attempt == max_retries:
                raise
            delay = _backoff(attempt, base_delay, max_delay)
            logger.warning(
                "Retry %d/%d after %s (waiting %.1fs)",
                attempt + 1, max_retries, type(exc).__name__, delay,
            )
        await asyncio.sleep(delay)
