# src/providers/json_scan.py - v1
"""Locate the first JSON object embedded in free-form model output.

Language models wrap the requested JSON in narrative text or markdown
fences. The scanner walks balanced braces (ignoring braces inside string
literals) and returns the first top-level ``{...}`` span that parses as a
JSON object.
"""

from __future__ import annotations

import json
from typing import Any


def find_json_object(text: str) -> dict[str, Any] | None:
    """Return the first parseable top-level JSON object in ``text``, else None."""
    start = text.find("{")
    while start != -1:
        end = _matching_brace(text, start)
        parsed = None
        if end is not None:
            try:
                parsed = json.loads(text[start : end + 1])
            except json.JSONDecodeError:
                parsed = None
        if isinstance(parsed, dict):
            return parsed
        start = text.find("{", start + 1)
    return None


def _matching_brace(text: str, start: int) -> int | None:
    """Index of the brace closing the one at ``start``; None if unbalanced."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None
