# src/providers/usda_adapter.py - v1
"""USDA FoodData Central adapter (primary nutrition lookup)."""

from __future__ import annotations

from typing import Any

import httpx

from labeliq.cache.base_cache_store import BaseCacheStore
from labeliq.core.models import NutrientAmount, NutritionRecord
from labeliq.providers.base_adapter import HttpProviderAdapter, HttpRequest
from labeliq.providers.retry import RetryExecutor

DEFAULT_ENDPOINT = "https://api.nal.usda.gov/fdc/v1"


class UsdaNutritionAdapter(HttpProviderAdapter[str, NutritionRecord]):
    """Looks up the best-matching food for one ingredient name."""

    provider_id = "usda"
    result_type = NutritionRecord

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: BaseCacheStore,
        retry: RetryExecutor,
        api_key: str = "",
        endpoint: str = DEFAULT_ENDPOINT,
        **kwargs: Any,
    ) -> None:
        super().__init__(http, cache, retry, **kwargs)
        self._api_key = api_key
        self._endpoint = endpoint.rstrip("/")

    def fingerprint_payload(self, request: str) -> Any:
        return {"ingredient": request}

    def build_request(self, request: str) -> HttpRequest:
        return HttpRequest(
            method="GET",
            url=f"{self._endpoint}/foods/search",
            params={"query": request.strip(), "pageSize": 1, "api_key": self._api_key},
        )

    def normalize(self, raw: Any, request: str) -> NutritionRecord:
        if not isinstance(raw, dict):
            raise self._malformed("response body is not a JSON object")

        ingredient = request.strip()
        foods = raw.get("foods") or []
        if not isinstance(foods, list):
            raise self._malformed("'foods' is not a list")
        if not foods or not isinstance(foods[0], dict):
            return NutritionRecord.not_found(ingredient, self.provider_id)

        food = foods[0]
        nutrients: dict[str, NutrientAmount] = {}
        food_nutrients = food.get("foodNutrients") or []
        if not isinstance(food_nutrients, list):
            raise self._malformed("'foodNutrients' is not a list")
        for nutrient in food_nutrients:
            if not isinstance(nutrient, dict) or not nutrient.get("nutrientName"):
                continue
            nutrients[nutrient["nutrientName"]] = NutrientAmount(
                amount=nutrient.get("value"),
                unit=str(nutrient.get("unitName") or "").lower(),
            )

        metadata = {
            "foodDescription": food.get("description"),
            "fdcId": food.get("fdcId"),
            "dataType": food.get("dataType"),
            "publishedDate": food.get("publishedDate"),
        }
        return NutritionRecord(
            ingredient=ingredient,
            provider=self.provider_id,
            nutrients=nutrients,
            metadata={k: v for k, v in metadata.items() if v is not None},
        )
