# src/providers/vision_adapter.py - v1
"""Google Cloud Vision adapter: label photo to raw text.

Requests TEXT_DETECTION (full text is the first annotation) and
PRODUCT_SEARCH (candidate product identifications) in one call.
"""

from __future__ import annotations

import base64
import re
from typing import Any

import httpx

from labeliq.cache.base_cache_store import BaseCacheStore
from labeliq.core.models import ExtractionResult
from labeliq.providers.base_adapter import HttpProviderAdapter, HttpRequest
from labeliq.providers.retry import RetryExecutor

DEFAULT_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"
DEFAULT_LANGUAGE_HINTS = ("en", "es", "fr", "de", "it")

_DATA_URL_PREFIX = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,")


def encode_image(image: str | bytes) -> str:
    """Return bare base64 content for raw bytes or a (data URL) base64 string."""
    if isinstance(image, bytes):
        return base64.b64encode(image).decode("ascii")
    return _DATA_URL_PREFIX.sub("", image.strip())


class VisionTextAdapter(HttpProviderAdapter[str | bytes, ExtractionResult]):
    """Text-extraction provider."""

    provider_id = "google_vision"
    result_type = ExtractionResult

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: BaseCacheStore,
        retry: RetryExecutor,
        api_key: str = "",
        endpoint: str = DEFAULT_ENDPOINT,
        language_hints: list[str] | tuple[str, ...] = DEFAULT_LANGUAGE_HINTS,
        max_products: int = 5,
        **kwargs: Any,
    ) -> None:
        super().__init__(http, cache, retry, **kwargs)
        self._api_key = api_key
        self._endpoint = endpoint
        self._language_hints = list(language_hints)
        self._max_products = max_products

    def fingerprint_payload(self, request: str | bytes) -> Any:
        return {"image": encode_image(request), "hints": self._language_hints}

    def build_request(self, request: str | bytes) -> HttpRequest:
        body = {
            "requests": [
                {
                    "image": {"content": encode_image(request)},
                    "features": [
                        {"type": "TEXT_DETECTION", "maxResults": 1},
                        {"type": "PRODUCT_SEARCH", "maxResults": self._max_products},
                    ],
                    "imageContext": {"languageHints": self._language_hints},
                }
            ]
        }
        return HttpRequest(
            method="POST",
            url=self._endpoint,
            params={"key": self._api_key},
            json=body,
        )

    def normalize(self, raw: Any, request: str | bytes) -> ExtractionResult:
        if not isinstance(raw, dict):
            raise self._malformed("response body is not a JSON object")

        responses = raw.get("responses") or [{}]
        if not isinstance(responses, list):
            raise self._malformed("'responses' is not a list")
        first = responses[0] if isinstance(responses[0], dict) else {}

        # Per-image failures come back inside a 200 response
        error = first.get("error")
        if error:
            message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
            raise self._malformed(f"annotation error: {message}")

        annotations = [a for a in first.get("textAnnotations") or [] if isinstance(a, dict)]
        product_results = first.get("productSearchResults") or {}

        if not annotations:
            return ExtractionResult(text="", confidence=0.0, products=_products(product_results))

        full = annotations[0]
        return ExtractionResult(
            text=str(full.get("description") or "").strip(),
            confidence=_clamp(full.get("confidence")),
            products=_products(product_results),
            bounding_regions=[
                a["boundingPoly"] for a in annotations if isinstance(a.get("boundingPoly"), dict)
            ],
        )


def _products(product_results: Any) -> list[dict[str, Any]]:
    if not isinstance(product_results, dict):
        return []
    return [r for r in product_results.get("results") or [] if isinstance(r, dict)]


def _clamp(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    return min(max(confidence, 0.0), 1.0)
