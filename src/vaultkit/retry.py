"""Fixed-interval retry loop shared by every endpoint operation."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from vaultkit.errors import ConfigurationError, VaultError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry(
    operation: Callable[[int], T],
    max_retries: int,
    retry_interval_ms: int,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the retry budget is spent.

    The operation receives the 0-based attempt index, which responses record
    as their retry count. Attempt 0 runs immediately; after each failure the
    loop sleeps ``retry_interval_ms`` (a constant interval, not a backoff)
    and tries again, for at most ``max_retries`` retries.

    Args:
        operation: Performs one attempt given the attempt index
        max_retries: Number of retries after the first attempt
        retry_interval_ms: Pause between attempts, in milliseconds
        sleep: Sleep function, in seconds

    Returns:
        The result of the first successful attempt

    Raises:
        ConfigurationError: Immediately, without retrying
        VaultError: The last failure once retries are exhausted; failures
            that are not already a VaultError are wrapped, keeping the cause
    """
    attempt = 0
    while True:
        try:
            return operation(attempt)
        except ConfigurationError:
            raise
        except Exception as e:
            if attempt < max_retries:
                attempt += 1
                logger.debug(
                    "Attempt %d of %d failed (%s), retrying in %d ms",
                    attempt,
                    max_retries + 1,
                    e,
                    retry_interval_ms,
                )
                sleep(retry_interval_ms / 1000)
            elif isinstance(e, VaultError):
                raise
            else:
                raise VaultError(str(e)) from e
