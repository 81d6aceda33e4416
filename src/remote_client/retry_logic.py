"""Backoff for HTTP 429 answers from the documentation service."""

import time
import logging
from typing import Callable, TypeVar

from .errors import APIAccessError, RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Retries after the first attempt; waits are 1s, 2s, 4s
MAX_RETRIES = 3


def retry_on_rate_limit(func: Callable[..., T], *args, **kwargs) -> T:
    """Call func, sleeping and retrying while it raises RateLimitError.

    Raises:
        APIAccessError: If the call is still rate limited after MAX_RETRIES
    """
    attempt = 0
    while True:
        try:
            return func(*args, **kwargs)
        except RateLimitError as e:
            if attempt >= MAX_RETRIES:
                logger.error(f"{e.method} {e.endpoint} still rate limited after {MAX_RETRIES} retries")
                raise APIAccessError(
                    f"Rate limited on {e.method} {e.endpoint} (after {MAX_RETRIES} retries)"
                ) from e

            wait_time = 2 ** attempt
            attempt += 1
            logger.info(f"429 on {e.method} {e.endpoint}, waiting {wait_time}s (retry {attempt}/{MAX_RETRIES})")
            time.sleep(wait_time)
