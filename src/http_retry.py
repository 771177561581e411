"""
src/http_retry.py
==================
HTTP retry utility — Shadowing Audio

Wraps a ``requests`` call and retries it on transient failures (connection
errors, timeouts, 429 rate-limit and 5xx server errors) with exponential
back-off.

Usage::

    from src.http_retry import call_with_retry

    resp = call_with_retry(requests.post, url, files=files, timeout=60)

This module does NOT:
    - Retry anything in the audio conditioning stages (they do no I/O)
    - Interpret response bodies
"""

import logging
import time
from typing import Any, Callable

import requests

logger = logging.getLogger("shadowing.http_retry")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

MAX_RETRIES: int = 3          # total attempts = MAX_RETRIES + 1 (initial)
BASE_DELAY: float = 1.0       # seconds — first back-off delay
MAX_DELAY: float = 10.0
BACKOFF_FACTOR: float = 2.0

# HTTP status codes worth retrying on
_RETRYABLE_STATUS_CODES: set[int] = {429, 500, 502, 503, 504}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_retryable(exc: Exception) -> bool:
    """Return True if the exception is a transient HTTP failure."""
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True

    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code in _RETRYABLE_STATUS_CODES

    return False


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def call_with_retry(
    fn: Callable[..., requests.Response],
    *args: Any,
    max_retries: int = MAX_RETRIES,
    **kwargs: Any,
) -> requests.Response:
    """
    Call ``fn(*args, **kwargs)``, raise for HTTP error status, retry transient failures.

    Args:
        fn:          A ``requests`` call (``requests.post``, ``session.post``...).
        max_retries: Retries after the first attempt.

    Returns:
        The successful ``requests.Response``.

    Raises:
        The last exception if all retries are exhausted, or the first
        non-retryable one.
    """
    last_exc: Exception | None = None
    delay = BASE_DELAY

    for attempt in range(max_retries + 1):
        try:
            resp = fn(*args, **kwargs)
            resp.raise_for_status()
            return resp
        except requests.RequestException as exc:
            last_exc = exc

            if not _is_retryable(exc):
                logger.warning("HTTP call failed with non-retryable error: %s", exc)
                raise

            if attempt < max_retries:
                logger.warning(
                    "HTTP call failed (attempt %d/%d): %s — retrying in %.1fs",
                    attempt + 1,
                    max_retries + 1,
                    exc,
                    delay,
                )
                time.sleep(delay)
                delay = min(delay * BACKOFF_FACTOR, MAX_DELAY)
            else:
                logger.error("HTTP call failed after %d attempts: %s", max_retries + 1, exc)

    # All retries exhausted
    raise last_exc  # type: ignore[misc]
