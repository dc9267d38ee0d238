# src/providers/base_adapter.py - v1
"""Abstract provider adapter: cache, throttle, retried dispatch, normalize.

Every adapter runs the same sequence in ``call``:
  1. fingerprint the request
  2. cache lookup (a hit returns with no network activity)
  3. build the provider-specific request
  4. throttle (if a throttler is attached), then dispatch through the
     RetryExecutor
  5. normalize the raw response into a domain model
  6. store the normalized model in the cache
  7. return it
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from labeliq.cache.base_cache_store import BaseCacheStore
from labeliq.cache.fingerprint import compute_fingerprint
from labeliq.cache.models import CacheEntry
from labeliq.core.errors import ProviderError
from labeliq.core.models import ProviderStats
from labeliq.providers.retry import RetryExecutor
from labeliq.providers.throttle import Throttler

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT", bound=BaseModel)


class BaseProviderAdapter(ABC, Generic[InputT, OutputT]):
    """Unified call sequence shared by all four providers."""

    #: Provider identifier: cache namespace, throttle key, log label.
    provider_id: str = "unknown"
    #: Model the normalized response (and cached payload) validates into.
    result_type: type[BaseModel]

    def __init__(
        self,
        cache: BaseCacheStore,
        retry: RetryExecutor,
        throttler: Throttler | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self._cache = cache
        self._retry = retry
        self._throttler = throttler
        self._max_attempts = max_attempts
        self.stats = ProviderStats()

    async def call(self, request: InputT) -> OutputT:
        """Return the normalized response for ``request``.

        Raises:
            ProviderError: Network-level failure, or a response body that
                cannot be normalized (MALFORMED_RESPONSE).
        """
        key = compute_fingerprint(self.provider_id, self.fingerprint_payload(request))

        cached = await self._cache.get(key)
        if cached is not None:
            self.stats.cache_hits += 1
            logger.debug("%s cache hit %s", self.provider_id, key[:24])
            return self.result_type.model_validate(cached.payload)  # type: ignore[return-value]

        built = self.build_request(request)
        if self._throttler is not None:
            await self._throttler.throttle(self.provider_id)

        self.stats.calls += 1
        try:
            raw = await self._retry.execute(
                lambda: self.send(built),
                max_attempts=self._max_attempts,
                provider=self.provider_id,
            )
            result = self._normalize_checked(raw, request)
        except ProviderError:
            self.stats.failures += 1
            raise

        if self.is_cacheable(result):
            await self._cache.put(
                key,
                CacheEntry(
                    fingerprint=key,
                    provider=self.provider_id,
                    payload=result.model_dump(mode="json"),
                ),
            )
        return result

    def _normalize_checked(self, raw: Any, request: InputT) -> OutputT:
        """Run ``normalize``; a body that does not fit the expected shape is MALFORMED_RESPONSE."""
        try:
            return self.normalize(raw, request)
        except (KeyError, IndexError, TypeError, AttributeError, ValidationError) as e:
            raise ProviderError(
                "MALFORMED_RESPONSE", self.provider_id,
                f"unexpected response shape: {type(e).__name__}: {e}", e,
            ) from e

    # --- Provider-specific hooks ---

    @abstractmethod
    def fingerprint_payload(self, request: InputT) -> Any:
        """JSON-compatible description of everything that changes the response."""

    @abstractmethod
    def build_request(self, request: InputT) -> Any:
        """Provider-specific request, built once and reused across attempts."""

    @abstractmethod
    async def send(self, built: Any) -> Any:
        """Perform exactly one round trip; raise on non-success."""

    @abstractmethod
    def normalize(self, raw: Any, request: InputT) -> OutputT:
        """Convert the raw response into the provider-agnostic model."""

    def is_cacheable(self, result: OutputT) -> bool:
        return True


@dataclass(frozen=True)
class HttpRequest:
    """One JSON-over-HTTP request."""

    method: str
    url: str
    params: dict[str, Any] = field(default_factory=dict)
    json: Any = None
    headers: dict[str, str] = field(default_factory=dict)


class HttpProviderAdapter(BaseProviderAdapter[InputT, OutputT]):
    """Adapter for providers spoken to directly over HTTP with httpx."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: BaseCacheStore,
        retry: RetryExecutor,
        throttler: Throttler | None = None,
        max_attempts: int | None = None,
    ) -> None:
        super().__init__(cache, retry, throttler=throttler, max_attempts=max_attempts)
        self._http = http

    async def send(self, built: HttpRequest) -> Any:
        response = await self._http.request(
            built.method,
            built.url,
            params=built.params or None,
            json=built.json,
            headers=built.headers or None,
        )
        response.raise_for_status()
        return response.json()

    def _malformed(self, message: str) -> ProviderError:
        return ProviderError("MALFORMED_RESPONSE", self.provider_id, message)
