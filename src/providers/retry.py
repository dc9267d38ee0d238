# src/providers/retry.py - v1
"""Bounded-attempt retry with exponential backoff and uniform error translation.

Attempt ``k`` (1-indexed) that fails with attempts remaining is followed by a
``backoff_base ** k`` second sleep: 2s, 4s, 8s... with the default base.
Credential and schema failures are not transient and are raised at once.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from labeliq.core.errors import ProviderError, ProviderUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_TIMEOUT_S = 30.0

SleepFn = Callable[[float], Awaitable[Any]]


def translate_error(error: BaseException, provider: str) -> ProviderError:
    """Map any exception raised by a round trip onto the provider error taxonomy."""
    if isinstance(error, ProviderError):
        return error

    status = _status_code(error)
    if status is not None:
        if status in (401, 403):
            return ProviderError("AUTH", provider, f"HTTP {status}: credentials rejected", error)
        if status == 429:
            return ProviderError("RATE_LIMIT", provider, "HTTP 429: rate limited", error)
        return ProviderError("TRANSPORT", provider, f"HTTP {status}", error)

    if isinstance(error, json.JSONDecodeError):
        return ProviderError("MALFORMED_RESPONSE", provider, f"invalid JSON body: {error}", error)
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
        return ProviderError("TRANSPORT", provider, "request timed out", error)
    return ProviderError("TRANSPORT", provider, f"{type(error).__name__}: {error}", error)


def _status_code(error: BaseException) -> int | None:
    """HTTP status from httpx or provider SDK errors, if the error carries one."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status
    return None


def backoff_delay(attempt: int, base: float = 2.0) -> float:
    """Delay before retrying after failed attempt ``attempt`` (1-indexed)."""
    return base ** attempt


class RetryExecutor:
    """Runs one outbound call with retries.

    Args:
        max_attempts: Default attempt budget (overridable per call).
        timeout_s: Bound on each individual attempt.
        backoff_base: Base of the exponential backoff.
        sleep: Awaitable sleep, injectable for tests.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        backoff_base: float = 2.0,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._max_attempts = max_attempts
        self._timeout_s = timeout_s
        self._backoff_base = backoff_base
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def execute(
        self,
        fn: Callable[[], Awaitable[T]],
        max_attempts: int | None = None,
        provider: str = "unknown",
    ) -> T:
        """Call ``fn`` until it succeeds or the budget runs out.

        Raises:
            ProviderError: AUTH or MALFORMED_RESPONSE, without retrying.
            ProviderUnavailable: After ``max_attempts`` transient failures.
        """
        budget = max_attempts or self._max_attempts
        if budget < 1:
            raise ValueError("max_attempts must be >= 1")
        failures: list[ProviderError] = []

        for attempt in range(1, budget + 1):
            try:
                return await asyncio.wait_for(fn(), timeout=self._timeout_s)
            except Exception as e:
                error = translate_error(e, provider)
                if not error.retryable:
                    logger.error("%s call failed (%s), not retrying: %s",
                                 provider, error.kind, error.message)
                    if error is e:
                        raise
                    raise error from e
                failures.append(error)

            if attempt < budget:
                delay = backoff_delay(attempt, self._backoff_base)
                logger.warning(
                    "%s - %s (attempt %d/%d), retrying in %.1fs",
                    provider, error.message, attempt, budget, delay,
                )
                await self._sleep(delay)

        last_error = failures[-1]
        logger.error("%s unavailable after %d attempts: %s",
                     provider, budget, last_error.message)
        raise ProviderUnavailable(provider, budget, last_error) from last_error
