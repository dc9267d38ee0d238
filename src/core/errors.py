# src/core/errors.py - v1
"""Exception hierarchy shared by adapters, retry executor and coordinator."""

from __future__ import annotations

from typing import Literal

ErrorKind = Literal[
    "AUTH", "RATE_LIMIT", "MALFORMED_RESPONSE", "TRANSPORT", "UNAVAILABLE"
]


class ProviderError(Exception):
    """An external provider call failed.

    ``stage`` is filled in by the coordinator when the error escapes a
    pipeline stage.
    """

    def __init__(
        self,
        kind: ErrorKind,
        provider: str,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        self.kind = kind
        self.provider = provider
        self.message = message
        self.cause = cause
        self.stage: str | None = None
        super().__init__(f"[{provider}] {kind}: {message}")

    @property
    def retryable(self) -> bool:
        return self.kind in ("TRANSPORT", "RATE_LIMIT")

    def __str__(self) -> str:
        base = super().__str__()
        if self.stage:
            return f"{base} (stage={self.stage})"
        return base


class ProviderUnavailable(ProviderError):
    """Retry budget exhausted; wraps the last underlying failure."""

    def __init__(
        self, provider: str, attempts: int, last_error: BaseException
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            "UNAVAILABLE",
            provider,
            f"failed after {attempts} attempts: {last_error}",
            cause=last_error,
        )

    @property
    def last_kind(self) -> ErrorKind | None:
        """Kind of the wrapped failure, when it was a ProviderError."""
        if isinstance(self.last_error, ProviderError):
            return self.last_error.kind
        return None


class NoTextFound(Exception):
    """Text extraction returned no label text; the pipeline stops here."""

    def __init__(self, confidence: float = 0.0) -> None:
        self.confidence = confidence
        self.stage = "extracting"
        super().__init__("No ingredient text found in image")
