# src/pipeline/coordinator.py - v1
"""Pipeline coordinator: label photo to AnalysisResult.

Stages run strictly in sequence:

  extracting -> analyzing -> fetching_nutrition -> [fetching_enhanced] -> aggregated

* Empty extraction text ends the run with NoTextFound; nothing else runs.
* A ProviderError from extraction propagates unwrapped, with ``stage`` set.
* The analysis stage never fails the run: provider errors and unusable
  model output both become the degraded default.
* Nutrition lookups go one ingredient at a time, each throttled by its
  adapter. A failing ingredient, whatever the error kind, becomes an
  error-marked record and the batch continues.
* Enhanced lookups start only after every primary lookup has finished,
  and only when an enhanced adapter is configured.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable

from labeliq.cache.base_cache_store import BaseCacheStore
from labeliq.core.errors import NoTextFound, ProviderError
from labeliq.core.models import (
    AnalysisResult,
    ExtractionResult,
    IngredientAnalysis,
    NutritionRecord,
    UsageStats,
    UserProfile,
)
from labeliq.logging.context import clear_context, set_scan_context
from labeliq.pipeline.state import PipelineState
from labeliq.providers.analysis_adapter import AnalysisRequest, IngredientAnalysisAdapter
from labeliq.providers.base_adapter import BaseProviderAdapter
from labeliq.providers.vision_adapter import VisionTextAdapter

logger = logging.getLogger(__name__)

NutritionAdapter = BaseProviderAdapter[str, NutritionRecord]


class AnalysisCoordinator:
    """Sequences the four provider adapters into one analysis run.

    Args:
        extractor: Text-extraction adapter.
        analyzer: Language-model analysis adapter.
        nutrition: Primary nutrition adapter.
        enhanced: Enhanced nutrition adapter; None disables that stage.
        cache: Shared response cache (for diagnostics and clearing).
        clock: Monotonic clock used for processing time.
    """

    def __init__(
        self,
        extractor: VisionTextAdapter,
        analyzer: IngredientAnalysisAdapter,
        nutrition: NutritionAdapter,
        cache: BaseCacheStore,
        enhanced: NutritionAdapter | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._extractor = extractor
        self._analyzer = analyzer
        self._nutrition = nutrition
        self._enhanced = enhanced
        self._cache = cache
        self._clock = clock
        self._active_runs = 0
        self._pending_lookups = 0

    async def run(
        self,
        image: str | bytes,
        user_profile: UserProfile | None = None,
    ) -> AnalysisResult:
        """Run the full pipeline on one label image.

        Raises:
            NoTextFound: Extraction produced no text.
            ProviderError: Unrecoverable extraction failure; ``stage`` names
                the failing stage.
        """
        profile = user_profile or UserProfile()
        state = PipelineState(started_at=self._clock())
        set_scan_context(state.scan_id)
        self._active_runs += 1
        logger.info("Scan %s started", state.scan_id)

        try:
            extraction = state.extraction = await self._extract(state, image)
            if not extraction.text:
                state.advance("no_text_found")
                logger.warning("Scan %s: no text found in image", state.scan_id)
                raise NoTextFound(confidence=extraction.confidence)

            analysis = state.analysis = await self._analyze(state, extraction.text, profile)
            names = [i.name for i in analysis.ingredients]

            state.advance("fetching_nutrition", self._nutrition.provider_id)
            state.nutrition = await self._fetch_nutrition(self._nutrition, names)

            if self._enhanced is not None:
                state.advance("fetching_enhanced", self._enhanced.provider_id)
                state.enhanced = await self._fetch_nutrition(self._enhanced, names)

            result = self._aggregate(state, extraction, analysis)
            state.advance("aggregated")
            logger.info(
                "Scan %s complete: %d ingredients, score %d, %dms",
                state.scan_id, len(result.ingredients), result.overall_score,
                result.processing_time_ms,
            )
            return result
        except ProviderError as e:
            if e.stage is None:
                e.stage = state.stage
            state.advance("failed")
            logger.error("Scan %s failed in %s: %s", state.scan_id, e.stage, e)
            raise
        finally:
            self._active_runs -= 1
            clear_context()

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _extract(self, state: PipelineState, image: str | bytes) -> ExtractionResult:
        state.advance("extracting", self._extractor.provider_id)
        extraction = await self._extractor.call(image)
        logger.info(
            "Extracted %d chars (confidence %.2f, %d product candidates)",
            len(extraction.text), extraction.confidence, len(extraction.products),
        )
        return extraction

    async def _analyze(
        self, state: PipelineState, text: str, profile: UserProfile
    ) -> IngredientAnalysis:
        state.advance("analyzing", self._analyzer.provider_id)
        try:
            analysis = await self._analyzer.call(AnalysisRequest(text=text, profile=profile))
        except ProviderError as e:
            logger.warning("Analysis provider failed, using degraded default: %s", e)
            return IngredientAnalysis.degraded_default()
        logger.info(
            "Analyzed %d ingredients (overall score %d%s)",
            len(analysis.ingredients), analysis.overall_score,
            ", degraded" if analysis.degraded else "",
        )
        return analysis

    async def _fetch_nutrition(
        self,
        adapter: NutritionAdapter,
        names: list[str],
    ) -> list[NutritionRecord]:
        """Look up each ingredient in order; one failure never voids the others."""
        records: list[NutritionRecord] = []
        remaining = len(names)
        self._pending_lookups += remaining
        try:
            for name in names:
                try:
                    record = await adapter.call(name)
                except ProviderError as e:
                    logger.warning("%s lookup failed for %r: %s", adapter.provider_id, name, e)
                    record = NutritionRecord.failed(name, adapter.provider_id, str(e))
                finally:
                    remaining -= 1
                    self._pending_lookups -= 1
                records.append(record)
        finally:
            # Cancelled runs leave no pending lookups behind
            self._pending_lookups -= remaining
        found = sum(1 for r in records if r.found)
        logger.info("%s: %d/%d ingredients found", adapter.provider_id, found, len(names))
        return records

    def _aggregate(
        self,
        state: PipelineState,
        extraction: ExtractionResult,
        analysis: IngredientAnalysis,
    ) -> AnalysisResult:
        elapsed_ms = max(0, int((self._clock() - state.started_at) * 1000))
        return AnalysisResult(
            timestamp=datetime.now(timezone.utc),
            raw_text=extraction.text,
            confidence=extraction.confidence,
            products=extraction.products,
            ingredients=analysis.ingredients,
            health_assessment=analysis.health_assessment,
            nutrition_data=state.nutrition,
            enhanced_data=state.enhanced,
            recommendations=analysis.recommendations,
            overall_score=analysis.overall_score,
            processing_time_ms=elapsed_ms,
            analysis_degraded=analysis.degraded,
        )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def usage_stats(self) -> UsageStats:
        """Snapshot of cache size, outstanding lookups and activity."""
        adapters = [self._extractor, self._analyzer, self._nutrition]
        if self._enhanced is not None:
            adapters.append(self._enhanced)
        return UsageStats(
            cache_size=self._cache.size(),
            queue_length=self._pending_lookups,
            is_processing=self._active_runs > 0,
            providers={a.provider_id: a.stats.model_copy() for a in adapters},
        )

    async def clear_cache(self) -> None:
        await self._cache.clear()
        logger.info("Response cache cleared")
