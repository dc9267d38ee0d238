# tests/unit/core/test_unit_core_models.py - v1
"""Tests for core/models.py: shared Pydantic models.

Also covers version.py import validation.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from labeliq.core.models import (
    AnalysisResult,
    ExtractionResult,
    HealthAssessment,
    IngredientAnalysis,
    IngredientRecord,
    NutritionRecord,
    ProviderStats,
    Recommendation,
    UsageStats,
    UserProfile,
)


class TestVersion:
    def test_version_string(self):
        from labeliq.version import __version__

        assert __version__ == "0.1.0"


class TestUserProfile:
    def test_defaults(self):
        p = UserProfile()
        assert p.allergies == []
        assert p.sensitivity_level == "standard"

    def test_camel_case_input(self):
        p = UserProfile.model_validate(
            {"dietaryRestrictions": ["vegan"], "healthGoals": ["low sodium"]}
        )
        assert p.dietary_restrictions == ["vegan"]
        assert p.health_goals == ["low sodium"]


class TestExtractionResult:
    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            ExtractionResult(text="x", confidence=1.5)

    def test_empty_default(self):
        assert ExtractionResult().text == ""


class TestIngredientRecord:
    def test_aliases(self):
        r = IngredientRecord.model_validate(
            {"name": "Red 40", "eNumber": "E129", "safetyScore": 20,
             "regulatoryStatus": {"eu": "approved"}}
        )
        assert r.e_number == "E129"
        assert r.model_dump(by_alias=True)["safetyScore"] == 20

    def test_blank_e_number_is_none(self):
        assert IngredientRecord(name="Water", e_number="  ").e_number is None

    def test_float_score_rounded(self):
        assert IngredientRecord(name="Sugar", safety_score=69.6).safety_score == 70

    def test_score_out_of_range(self):
        with pytest.raises(ValidationError):
            IngredientRecord(name="Sugar", safety_score=101)

    def test_frozen(self):
        r = IngredientRecord(name="Water")
        with pytest.raises(ValidationError):
            r.name = "Salt"


class TestRecommendation:
    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            Recommendation(type="danger", message="x")


class TestIngredientAnalysis:
    def test_degraded_default(self):
        d = IngredientAnalysis.degraded_default()
        assert d.degraded
        assert d.ingredients == []
        assert d.recommendations == []
        assert d.overall_score == 50
        assert d.health_assessment == HealthAssessment(
            overall_health_score=50, summary="Analysis failed"
        )

    def test_missing_optional_sections(self):
        a = IngredientAnalysis.model_validate({"ingredients": [{"name": "Water"}]})
        assert a.overall_score == 50
        assert a.ingredients[0].category == "unknown"


class TestNutritionRecord:
    def test_not_found_marker(self):
        r = NutritionRecord.not_found("Red 40", "usda")
        assert not r.found
        assert r.error == "No data found"
        assert r.nutrients == {}

    def test_failed_marker(self):
        r = NutritionRecord.failed("Sugar", "usda", "timed out")
        assert not r.found
        assert r.error == "timed out"


class TestAnalysisResult:
    def _result(self, **kwargs) -> AnalysisResult:
        defaults = {"timestamp": datetime(2026, 1, 1, tzinfo=timezone.utc), "raw_text": "Water"}
        defaults.update(kwargs)
        return AnalysisResult(**defaults)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            self._result().overall_score = 10

    def test_negative_processing_time_rejected(self):
        with pytest.raises(ValidationError):
            self._result(processing_time_ms=-1)

    def test_serializes_camel_case(self):
        dumped = self._result(overall_score=62).model_dump(mode="json", by_alias=True)
        assert dumped["rawText"] == "Water"
        assert dumped["overallScore"] == 62
        assert dumped["nutritionData"] == []
        assert dumped["analysisDegraded"] is False


class TestUsageStats:
    def test_aliases(self):
        stats = UsageStats(
            cache_size=3, queue_length=1, is_processing=True,
            providers={"usda": ProviderStats(calls=2, cache_hits=1)},
        )
        dumped = stats.model_dump(by_alias=True)
        assert dumped["cacheSize"] == 3
        assert dumped["queueLength"] == 1
        assert dumped["isProcessing"] is True
        assert dumped["providers"]["usda"]["cacheHits"] == 1
