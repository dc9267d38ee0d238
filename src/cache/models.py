# src/cache/models.py - v1
"""Cache domain model: one stored provider response."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CacheEntry(BaseModel):
    """Normalized provider response keyed by its request fingerprint.

    Entries are created once, on the first successful normalization, and
    never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    fingerprint: str
    provider: str
    payload: dict[str, Any]
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
