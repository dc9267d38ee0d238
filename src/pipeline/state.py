# src/pipeline/state.py - v1
"""Per-run pipeline state: current stage plus the outputs gathered so far.

One PipelineState exists per ``run`` call and is discarded once the
AnalysisResult has been assembled.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Literal

from pydantic import BaseModel, Field

from labeliq.core.models import ExtractionResult, IngredientAnalysis, NutritionRecord
from labeliq.logging.context import set_stage_context

logger = logging.getLogger(__name__)

Stage = Literal[
    "pending",
    "extracting",
    "analyzing",
    "fetching_nutrition",
    "fetching_enhanced",
    "aggregated",
    "no_text_found",
    "failed",
]

TERMINAL_STAGES: frozenset[str] = frozenset({"aggregated", "no_text_found", "failed"})

# Legal forward transitions; terminal failures are reachable from any live stage.
_NEXT: dict[str, set[str]] = {
    "pending": {"extracting"},
    "extracting": {"analyzing", "no_text_found"},
    "analyzing": {"fetching_nutrition"},
    "fetching_nutrition": {"fetching_enhanced", "aggregated"},
    "fetching_enhanced": {"aggregated"},
}


class InvalidTransition(RuntimeError):
    """A stage change that the pipeline state machine does not allow."""


class PipelineState(BaseModel):
    """Mutable state of one pipeline run."""

    scan_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    stage: Stage = "pending"
    history: list[str] = Field(default_factory=list)
    started_at: float = Field(default_factory=time.monotonic)

    extraction: ExtractionResult | None = None
    analysis: IngredientAnalysis | None = None
    nutrition: list[NutritionRecord] = Field(default_factory=list)
    enhanced: list[NutritionRecord] = Field(default_factory=list)

    def advance(self, stage: Stage, provider: str | None = None) -> None:
        """Move to ``stage``, enforcing the state machine."""
        if self.stage in TERMINAL_STAGES:
            raise InvalidTransition(f"run already finished in {self.stage!r}")
        if stage != "failed" and stage not in _NEXT.get(self.stage, set()):
            raise InvalidTransition(f"{self.stage!r} -> {stage!r}")
        self.history.append(self.stage)
        self.stage = stage
        set_stage_context(stage, provider)
        logger.debug("Scan %s -> %s", self.scan_id, stage)

    @property
    def finished(self) -> bool:
        return self.stage in TERMINAL_STAGES
