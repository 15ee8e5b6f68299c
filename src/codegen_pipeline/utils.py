"""Utility helpers."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable

REDACTED = "[REDACTED]"


def redact(text: str | None, secrets: Iterable[str | None]) -> str:
    """Replaces every occurrence of each secret in text."""
    result = text or ""
    for secret in secrets:
        if secret:
            result = result.replace(secret, REDACTED)
    return result


def clip(text: str | None, limit: int = 200) -> str:
    text = text or ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."


def json_dumps(data: Dict[str, Any] | list[Any] | None) -> str:
    return json.dumps(data or {}, ensure_ascii=False, indent=2)
