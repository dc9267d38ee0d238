# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for provider credentials, endpoint overrides,
resilience tuning, cache and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === TEXT EXTRACTION (Google Cloud Vision) ===
    google_vision_api_key: str = ""
    google_vision_endpoint: str = "https://vision.googleapis.com/v1/images:annotate"
    vision_language_hints: str = "en,es,fr,de,it"

    # === INGREDIENT ANALYSIS (LLM) ===
    llm_provider: Literal["anthropic", "openai"] = "anthropic"
    llm_model: str = "claude-3-5-sonnet-20241022"
    llm_max_tokens: int = 1000
    anthropic_api_key: str = ""
    anthropic_base_url: str = ""
    openai_api_key: str = ""
    openai_base_url: str = ""

    # === NUTRITION: USDA FoodData Central ===
    usda_api_key: str = ""
    usda_endpoint: str = "https://api.nal.usda.gov/fdc/v1"
    usda_min_interval_ms: int = 100

    # === NUTRITION: Edamam (enhanced, optional) ===
    edamam_app_id: str = ""
    edamam_app_key: str = ""
    edamam_endpoint: str = "https://api.edamam.com/api/food-database/v2"
    edamam_min_interval_ms: int = 300

    # === Resilience ===
    max_retries: int = 3
    request_timeout_s: float = 30.0

    # === Cache ===
    cache_backend: Literal["memory", "json"] = "memory"
    cache_root: Path = Path("~/.labeliq/cache")
    cache_max_entries: int | None = None

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_retries must be >= 1")
        return v

    @field_validator("usda_min_interval_ms", "edamam_min_interval_ms")
    @classmethod
    def validate_intervals(cls, v: int) -> int:
        if v < 0:
            raise ValueError("throttle intervals must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if bool(self.edamam_app_id) != bool(self.edamam_app_key):
            errors.append("EDAMAM_APP_ID and EDAMAM_APP_KEY must be set together")

        if self.request_timeout_s <= 0:
            errors.append("REQUEST_TIMEOUT_S must be > 0")

        if self.cache_max_entries is not None and self.cache_max_entries < 1:
            errors.append("CACHE_MAX_ENTRIES must be >= 1 when set")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def enhanced_nutrition_enabled(self) -> bool:
        """Edamam lookups run only when the deployment has credentials for it."""
        return bool(self.edamam_app_id and self.edamam_app_key)

    @property
    def vision_language_hints_list(self) -> list[str]:
        """Parse comma-separated OCR language hints."""
        return [h.strip() for h in self.vision_language_hints.split(",") if h.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
