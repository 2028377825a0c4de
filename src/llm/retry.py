# src/llm/retry.py - v2
"""Per-provider retry policy with exponential backoff.

Only transient errors are retried on the same provider. Parse errors and
anything unclassified fail straight through so the chain can fall back.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class LLMRetryExhausted(Exception):
    """All retries exhausted for a provider call."""

    def __init__(self, provider: str, error_type: str, attempts: int, last_error: Exception):
        self.provider = provider
        self.error_type = error_type
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Provider '{provider}' failed after {attempts} attempt(s) ({error_type}): {last_error}"
        )


@dataclass(frozen=True)
class RetryConfig:
    """Retry configuration for a specific error type."""

    max_retries: int
    base_delay_s: float
    backoff_factor: float = 2.0
    jitter: bool = True


DEFAULT_RETRY_CONFIGS: dict[str, RetryConfig] = {
    "rate_limit": RetryConfig(max_retries=1, base_delay_s=1.0),
    "server_error": RetryConfig(max_retries=1, base_delay_s=0.5),
}

NO_RETRY: dict[str, RetryConfig] = {}


def classify_error(error: Exception) -> str:
    """Classify an exception into a retry error type."""
    msg = str(error).lower()
    name = type(error).__name__.lower()

    if "429" in msg or "rate limit" in msg or "ratelimit" in name:
        return "rate_limit"
    if "timeout" in name or "timed out" in msg:
        return "timeout"
    if any(c in msg for c in ("500", "502", "503", "504")) or "internalserver" in name:
        return "server_error"
    if "json" in msg or "parse" in msg or "decode" in msg:
        return "parse_error"
    return "unknown"


def _compute_delay(config: RetryConfig, attempt: int) -> float:
    """Compute delay for a given attempt (0-based)."""
    delay = config.base_delay_s * (config.backoff_factor ** attempt)
    if config.jitter:
        delay *= 0.5 + random.random()  # noqa: S311
    return delay


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    provider: str = "unknown",
    retry_configs: dict[str, RetryConfig] | None = None,
    timeout_s: float | None = None,
    **kwargs: Any,
) -> Any:
    """Execute an async function with retry logic.

    Each attempt is bounded by ``timeout_s`` when given.

    Raises:
        LLMRetryExhausted: If all retries are exhausted.
    """
    configs = DEFAULT_RETRY_CONFIGS if retry_configs is None else retry_configs
    attempts = 0

    while True:
        try:
            if timeout_s is None:
                return await fn(*args, **kwargs)
            return await asyncio.wait_for(fn(*args, **kwargs), timeout=timeout_s)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error_type = classify_error(e)
            attempts += 1
            config = configs.get(error_type)

            if config is None or attempts > config.max_retries:
                raise LLMRetryExhausted(provider, error_type, attempts, e) from e

            delay = _compute_delay(config, attempts - 1)
            logger.warning(
                "Provider '%s': %s (attempt %d/%d), retrying in %.1fs",
                provider, error_type, attempts, config.max_retries, delay,
            )
            await asyncio.sleep(delay)
