# src/providers/edamam_adapter.py - v1
"""Edamam Food Database adapter (enhanced nutrition lookup)."""

from __future__ import annotations

from typing import Any

import httpx

from labeliq.cache.base_cache_store import BaseCacheStore
from labeliq.core.models import NutrientAmount, NutritionRecord
from labeliq.providers.base_adapter import HttpProviderAdapter, HttpRequest
from labeliq.providers.retry import RetryExecutor

DEFAULT_ENDPOINT = "https://api.edamam.com/api/food-database/v2"

# Edamam reports nutrients by code, per 100 g.
NUTRIENT_UNITS: dict[str, str] = {
    "ENERC_KCAL": "kcal",
    "PROCNT": "g",
    "FAT": "g",
    "CHOCDF": "g",
    "FIBTG": "g",
    "SUGAR": "g",
    "NA": "mg",
}


class EdamamNutritionAdapter(HttpProviderAdapter[str, NutritionRecord]):
    """Parses one ingredient name into Edamam's food record."""

    provider_id = "edamam"
    result_type = NutritionRecord

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: BaseCacheStore,
        retry: RetryExecutor,
        app_id: str = "",
        app_key: str = "",
        endpoint: str = DEFAULT_ENDPOINT,
        **kwargs: Any,
    ) -> None:
        super().__init__(http, cache, retry, **kwargs)
        self._app_id = app_id
        self._app_key = app_key
        self._endpoint = endpoint.rstrip("/")

    def fingerprint_payload(self, request: str) -> Any:
        return {"ingredient": request}

    def build_request(self, request: str) -> HttpRequest:
        return HttpRequest(
            method="GET",
            url=f"{self._endpoint}/parser",
            params={"ingr": request.strip(), "app_id": self._app_id, "app_key": self._app_key},
        )

    def normalize(self, raw: Any, request: str) -> NutritionRecord:
        if not isinstance(raw, dict):
            raise self._malformed("response body is not a JSON object")

        ingredient = request.strip()
        parsed = raw.get("parsed") or []
        if not isinstance(parsed, list):
            raise self._malformed("'parsed' is not a list")
        food = parsed[0].get("food") if parsed and isinstance(parsed[0], dict) else None
        if not isinstance(food, dict):
            return NutritionRecord.not_found(ingredient, self.provider_id)

        raw_nutrients = food.get("nutrients") or {}
        if not isinstance(raw_nutrients, dict):
            raise self._malformed("'nutrients' is not an object")
        nutrients = {
            code: NutrientAmount(amount=value, unit=NUTRIENT_UNITS.get(code, ""))
            for code, value in raw_nutrients.items()
            if isinstance(value, (int, float))
        }
        metadata = {
            "foodId": food.get("foodId"),
            "label": food.get("label"),
            "category": food.get("category"),
            "categoryLabel": food.get("categoryLabel"),
            "image": food.get("image"),
        }
        return NutritionRecord(
            ingredient=ingredient,
            provider=self.provider_id,
            nutrients=nutrients,
            metadata={k: v for k, v in metadata.items() if v is not None},
        )
