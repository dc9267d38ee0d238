# src/logging/context.py - v1
"""Contextual logging support: attach scan_id, stage and provider to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Set per pipeline run; asyncio tasks inherit a copy, so concurrent scans
# never see each other's values.
_scan_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "scan_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)
_provider: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "provider", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    scan_id: str | None = None
    stage: str | None = None
    provider: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        scan_id=_scan_id.get(),
        stage=_stage.get(),
        provider=_provider.get(),
    )


def set_scan_context(scan_id: str) -> None:
    """Set run-level context (called once per pipeline run)."""
    _scan_id.set(scan_id)
    _stage.set(None)
    _provider.set(None)


def set_stage_context(stage: str, provider: str | None = None) -> None:
    """Set stage-level context (called on every stage transition)."""
    _stage.set(stage)
    _provider.set(provider)


def clear_context() -> None:
    """Reset all context variables."""
    _scan_id.set(None)
    _stage.set(None)
    _provider.set(None)
