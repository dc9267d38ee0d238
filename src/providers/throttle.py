# src/providers/throttle.py - v1
"""Per-provider minimum spacing between dispatched calls."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from labeliq.providers.retry import SleepFn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThrottlePolicy:
    """Minimum interval between two dispatches to one provider."""

    provider: str
    min_interval_s: float


# USDA allows ~1000 requests/hour, Edamam ~200 requests/minute.
USDA_POLICY = ThrottlePolicy("usda", 0.1)
EDAMAM_POLICY = ThrottlePolicy("edamam", 0.3)


class Throttler:
    """Blocks the caller until a provider's interval since its last dispatch has elapsed.

    Call ``throttle`` immediately before each dispatch, never after. Callers
    for the same provider are serialized, so concurrent scans share one quota.
    Providers without a policy pass straight through.
    """

    def __init__(
        self,
        policies: Iterable[ThrottlePolicy] = (USDA_POLICY, EDAMAM_POLICY),
        clock: Callable[[], float] = time.monotonic,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._intervals = {p.provider: p.min_interval_s for p in policies}
        self._clock = clock
        self._sleep = sleep
        self._last_dispatch: dict[str, float] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def interval_for(self, provider_id: str) -> float:
        return self._intervals.get(provider_id, 0.0)

    async def throttle(self, provider_id: str) -> None:
        interval = self.interval_for(provider_id)
        if interval <= 0:
            return

        lock = self._locks.setdefault(provider_id, asyncio.Lock())
        async with lock:
            last = self._last_dispatch.get(provider_id)
            if last is not None:
                wait = interval - (self._clock() - last)
                if wait > 0:
                    logger.debug("Throttling %s for %.3fs", provider_id, wait)
                    await self._sleep(wait)
            self._last_dispatch[provider_id] = self._clock()
