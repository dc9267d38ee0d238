# src/providers/analysis_adapter.py - v1
"""Language-model ingredient analysis adapter.

The model is asked for one JSON object; its reply is scanned for that
object, validated against the IngredientAnalysis schema and, when either
step fails, replaced by the degraded default instead of raising. Only
network-level failures surface as ProviderError.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from labeliq.cache.base_cache_store import BaseCacheStore
from labeliq.core.models import IngredientAnalysis, UserProfile
from labeliq.llm.base_client import BaseLLMClient
from labeliq.llm.models import LLMResponse, Message
from labeliq.providers.base_adapter import BaseProviderAdapter
from labeliq.providers.json_scan import find_json_object
from labeliq.providers.retry import RetryExecutor

logger = logging.getLogger(__name__)

_PROMPT_TEMPLATE = """\
Analyze the following ingredient list and provide a comprehensive health assessment:

INGREDIENT TEXT:
"{text}"

USER PROFILE:
- Allergies: {allergies}
- Dietary Restrictions: {restrictions}
- Health Goals: {goals}
- Sensitivity Level: {sensitivity}

ANALYSIS REQUIREMENTS:
1. Parse and identify individual ingredients, in label order
2. Identify E-numbers and food additives
3. Flag controversial or banned substances (EU/US differences)
4. Assess health impact based on user profile
5. Provide overall safety score (0-100)
6. Generate personalized recommendations

RESPONSE FORMAT (JSON):
{{
  "ingredients": [
    {{
      "name": "ingredient name",
      "category": "additive/natural/processed",
      "eNumber": "E### if applicable",
      "safetyScore": 0-100,
      "concerns": ["health concern 1", "health concern 2"],
      "regulatoryStatus": {{"eu": "approved/banned", "us": "approved/banned"}}
    }}
  ],
  "healthAssessment": {{
    "overallHealthScore": 0-100,
    "summary": "brief assessment",
    "warnings": ["warning 1", "warning 2"],
    "positives": ["positive aspect 1", "positive aspect 2"]
  }},
  "recommendations": [
    {{"type": "warning/info/success", "message": "recommendation text"}}
  ],
  "overallScore": 0-100
}}

Consider current regulatory changes, including US synthetic food dye
phase-outs and the EU titanium dioxide (E171) ban."""


class AnalysisRequest(BaseModel):
    """Input of the analysis stage."""

    text: str
    profile: UserProfile = Field(default_factory=UserProfile)


def build_prompt(text: str, profile: UserProfile) -> str:
    """Render the analysis prompt for one label."""
    return _PROMPT_TEMPLATE.format(
        text=text,
        allergies=", ".join(profile.allergies) or "None specified",
        restrictions=", ".join(profile.dietary_restrictions) or "None specified",
        goals=", ".join(profile.health_goals) or "General health",
        sensitivity=profile.sensitivity_level or "Standard",
    )


def parse_analysis(content: str) -> IngredientAnalysis:
    """Extract and validate the analysis object; degraded default on any failure."""
    payload = find_json_object(content)
    if payload is None:
        logger.warning("No JSON object found in model output (%d chars)", len(content))
        return IngredientAnalysis.degraded_default()
    try:
        analysis = IngredientAnalysis.model_validate(payload)
    except ValidationError as e:
        logger.warning("Model output failed schema validation: %d errors", e.error_count())
        return IngredientAnalysis.degraded_default()
    # ``degraded`` is ours to set, never the model's
    return analysis.model_copy(update={"degraded": False})


class IngredientAnalysisAdapter(BaseProviderAdapter[AnalysisRequest, IngredientAnalysis]):
    """Language-model analysis provider."""

    provider_id = "llm_analysis"
    result_type = IngredientAnalysis

    def __init__(
        self,
        client: BaseLLMClient,
        cache: BaseCacheStore,
        retry: RetryExecutor,
        max_tokens: int = 1000,
        temperature: float = 0.2,
        **kwargs: Any,
    ) -> None:
        super().__init__(cache, retry, **kwargs)
        self._client = client
        self._max_tokens = max_tokens
        self._temperature = temperature

    def fingerprint_payload(self, request: AnalysisRequest) -> Any:
        return {
            "model": f"{self._client.provider_name}:{self._client.model}",
            "text": request.text,
            "profile": request.profile,
        }

    def build_request(self, request: AnalysisRequest) -> list[Message]:
        return [Message(role="user", content=build_prompt(request.text, request.profile))]

    async def send(self, built: list[Message]) -> LLMResponse:
        return await self._client.complete(
            built, max_tokens=self._max_tokens, temperature=self._temperature
        )

    def normalize(self, raw: LLMResponse, request: AnalysisRequest) -> IngredientAnalysis:
        return parse_analysis(raw.content)

    def is_cacheable(self, result: IngredientAnalysis) -> bool:
        # A degraded reply is retried on the next scan rather than pinned.
        return not result.degraded
