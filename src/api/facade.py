# src/api/facade.py - v1
"""Public API facade: composition root and one-shot analysis entry point.

Usage:
    from labeliq.api.facade import analyze
    result = await analyze(image_b64, UserProfile(allergies=["peanuts"]))

Long-lived processes build one coordinator and reuse it, so that the
response cache and throttling state are shared across scans:

    async with httpx.AsyncClient(timeout=30) as http:
        coordinator = build_coordinator(settings, http)
        result = await coordinator.run(image_b64, profile)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from labeliq.cache.cache_factory import create_cache_store
from labeliq.config.settings import Settings
from labeliq.core.models import AnalysisResult, UserProfile
from labeliq.pipeline.coordinator import AnalysisCoordinator
from labeliq.providers.analysis_adapter import IngredientAnalysisAdapter
from labeliq.providers.edamam_adapter import EdamamNutritionAdapter
from labeliq.providers.retry import RetryExecutor
from labeliq.providers.throttle import ThrottlePolicy, Throttler
from labeliq.providers.usda_adapter import UsdaNutritionAdapter
from labeliq.providers.vision_adapter import VisionTextAdapter

if TYPE_CHECKING:
    from labeliq.cache.base_cache_store import BaseCacheStore
    from labeliq.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)


def build_throttler(settings: Settings) -> Throttler:
    """Throttler with the configured nutrition-provider spacing."""
    return Throttler(
        policies=[
            ThrottlePolicy("usda", settings.usda_min_interval_ms / 1000),
            ThrottlePolicy("edamam", settings.edamam_min_interval_ms / 1000),
        ]
    )


def build_coordinator(
    settings: Settings,
    http: httpx.AsyncClient,
    cache: BaseCacheStore | None = None,
    llm_client: BaseLLMClient | None = None,
) -> AnalysisCoordinator:
    """Wire cache, retry executor, throttler and adapters into a coordinator.

    Args:
        settings: Application settings (credentials, endpoints, tuning).
        http: Shared HTTP client; the caller owns its lifetime.
        cache: Response cache. Built from settings if None.
        llm_client: Analysis LLM client. Built from settings if None.
    """
    if cache is None:
        cache = create_cache_store(settings)
    if llm_client is None:
        from labeliq.llm.client_factory import create_llm_client

        llm_client = create_llm_client(settings)

    retry = RetryExecutor(
        max_attempts=settings.max_retries, timeout_s=settings.request_timeout_s
    )
    throttler = build_throttler(settings)

    extractor = VisionTextAdapter(
        http, cache, retry,
        api_key=settings.google_vision_api_key,
        endpoint=settings.google_vision_endpoint,
        language_hints=settings.vision_language_hints_list,
    )
    analyzer = IngredientAnalysisAdapter(
        llm_client, cache, retry, max_tokens=settings.llm_max_tokens,
    )
    nutrition = UsdaNutritionAdapter(
        http, cache, retry,
        api_key=settings.usda_api_key,
        endpoint=settings.usda_endpoint,
        throttler=throttler,
    )
    enhanced = None
    if settings.enhanced_nutrition_enabled:
        enhanced = EdamamNutritionAdapter(
            http, cache, retry,
            app_id=settings.edamam_app_id,
            app_key=settings.edamam_app_key,
            endpoint=settings.edamam_endpoint,
            throttler=throttler,
        )

    logger.debug(
        "Coordinator built: llm=%s:%s, enhanced=%s, cache=%s",
        llm_client.provider_name, llm_client.model,
        enhanced is not None, settings.cache_backend,
    )
    return AnalysisCoordinator(
        extractor=extractor,
        analyzer=analyzer,
        nutrition=nutrition,
        enhanced=enhanced,
        cache=cache,
    )


async def analyze(
    image: str | bytes,
    user_profile: UserProfile | None = None,
    settings: Settings | None = None,
    cache: BaseCacheStore | None = None,
) -> AnalysisResult:
    """Analyze one label image end-to-end with a short-lived HTTP client.

    Raises:
        NoTextFound: The image contains no readable text.
        ProviderError: Extraction failed, or nutrition credentials were rejected.
    """
    settings = settings or Settings()
    async with httpx.AsyncClient(timeout=settings.request_timeout_s) as http:
        coordinator = build_coordinator(settings, http, cache=cache)
        return await coordinator.run(image, user_profile)
