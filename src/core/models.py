# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
Every model serializes with camelCase aliases (``safetyScore``,
``overallScore``...) and accepts either spelling on input.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _round_score(v: Any) -> Any:
    """Accept float scores from providers (``62.0``) as integers."""
    if isinstance(v, float):
        return int(round(v))
    return v


# === USER INPUT ===


class UserProfile(BaseModel):
    """Personal modifiers supplied by the capture/UI layer."""

    model_config = _MODEL_CONFIG

    allergies: list[str] = Field(default_factory=list)
    dietary_restrictions: list[str] = Field(default_factory=list)
    health_goals: list[str] = Field(default_factory=list)
    sensitivity_level: str = "standard"


# === TEXT EXTRACTION ===


class ExtractionResult(BaseModel):
    """Normalized output of the text-extraction provider."""

    model_config = _MODEL_CONFIG

    text: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    products: list[dict[str, Any]] = Field(default_factory=list)
    bounding_regions: list[dict[str, Any]] = Field(default_factory=list)


# === INGREDIENT ANALYSIS ===


class IngredientRecord(BaseModel):
    """One detected ingredient, as classified by the language model."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    name: str
    category: str = "unknown"
    e_number: str | None = None
    safety_score: int = Field(default=50, ge=0, le=100)
    concerns: list[str] = Field(default_factory=list)
    regulatory_status: dict[str, str] = Field(default_factory=dict)

    @field_validator("safety_score", mode="before")
    @classmethod
    def _coerce_score(cls, v: Any) -> Any:
        return _round_score(v)

    @field_validator("e_number", mode="before")
    @classmethod
    def _blank_e_number(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class HealthAssessment(BaseModel):
    """Overall verdict produced alongside the ingredient records."""

    model_config = _MODEL_CONFIG

    overall_health_score: int = Field(default=50, ge=0, le=100)
    summary: str = ""
    warnings: list[str] = Field(default_factory=list)
    positives: list[str] = Field(default_factory=list)

    @field_validator("overall_health_score", mode="before")
    @classmethod
    def _coerce_score(cls, v: Any) -> Any:
        return _round_score(v)


class Recommendation(BaseModel):
    """Personalized advice line."""

    model_config = _MODEL_CONFIG

    type: Literal["warning", "info", "success"] = "info"
    message: str


class IngredientAnalysis(BaseModel):
    """Normalized output of the language-model analysis provider."""

    model_config = _MODEL_CONFIG

    ingredients: list[IngredientRecord] = Field(default_factory=list)
    health_assessment: HealthAssessment = Field(default_factory=HealthAssessment)
    recommendations: list[Recommendation] = Field(default_factory=list)
    overall_score: int = Field(default=50, ge=0, le=100)
    degraded: bool = False

    @field_validator("overall_score", mode="before")
    @classmethod
    def _coerce_score(cls, v: Any) -> Any:
        return _round_score(v)

    @classmethod
    def degraded_default(cls) -> IngredientAnalysis:
        """Minimal well-formed substitute used when the model output is unusable."""
        return cls(
            ingredients=[],
            health_assessment=HealthAssessment(
                overall_health_score=50, summary="Analysis failed"
            ),
            recommendations=[],
            overall_score=50,
            degraded=True,
        )


# === NUTRITION ===


class NutrientAmount(BaseModel):
    """Quantity of one nutrient."""

    amount: float | None = None
    unit: str = ""


class NutritionRecord(BaseModel):
    """Nutrition facts for one ingredient from one provider.

    ``found`` is False for both the provider "no results" marker and a
    per-ingredient failure; ``error`` tells them apart.
    """

    model_config = _MODEL_CONFIG

    ingredient: str
    provider: str
    nutrients: dict[str, NutrientAmount] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    found: bool = True
    error: str | None = None

    @classmethod
    def not_found(cls, ingredient: str, provider: str) -> NutritionRecord:
        return cls(
            ingredient=ingredient, provider=provider, found=False,
            error="No data found",
        )

    @classmethod
    def failed(cls, ingredient: str, provider: str, message: str) -> NutritionRecord:
        return cls(ingredient=ingredient, provider=provider, found=False, error=message)


# === AGGREGATE ===


class AnalysisResult(BaseModel):
    """Terminal aggregate of one pipeline run. Never mutated after assembly."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    timestamp: datetime
    raw_text: str
    confidence: float = 0.0
    products: list[dict[str, Any]] = Field(default_factory=list)
    ingredients: list[IngredientRecord] = Field(default_factory=list)
    health_assessment: HealthAssessment = Field(default_factory=HealthAssessment)
    nutrition_data: list[NutritionRecord] = Field(default_factory=list)
    enhanced_data: list[NutritionRecord] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    overall_score: int = 50
    processing_time_ms: int = Field(default=0, ge=0)
    analysis_degraded: bool = False


# === DIAGNOSTICS ===


class ProviderStats(BaseModel):
    """Per-provider call counters."""

    model_config = _MODEL_CONFIG

    calls: int = 0
    cache_hits: int = 0
    failures: int = 0


class UsageStats(BaseModel):
    """Operational snapshot of the pipeline."""

    model_config = _MODEL_CONFIG

    cache_size: int
    queue_length: int
    is_processing: bool
    providers: dict[str, ProviderStats] = Field(default_factory=dict)
