# src/cache/fingerprint.py - v1
"""Request fingerprinting for provider response caching.

A fingerprint is the SHA-256 of a canonical JSON encoding of the request
payload, prefixed with the provider namespace. Identical logical requests
always fingerprint identically: dict key order and surrounding whitespace
in text fields do not matter.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from pydantic import BaseModel


def compute_fingerprint(namespace: str, payload: Any) -> str:
    """Compute the cache key for a request.

    Args:
        namespace: Provider identifier (keeps providers' keys disjoint).
        payload: JSON-compatible request description. Pydantic models and
            bytes are accepted and normalized.

    Returns:
        ``"<namespace>_<hex digest>"``.
    """
    canonical = json.dumps(
        _normalize(payload),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{namespace}_{digest}"


def _normalize(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return _normalize(value.model_dump(mode="json"))
    if isinstance(value, bytes):
        return {"__bytes_sha256__": hashlib.sha256(value).hexdigest()}
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value
