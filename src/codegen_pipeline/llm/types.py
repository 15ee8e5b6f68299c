"""Shared LLM data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..errors import ErrorType, GenerationError, error_type_for_status


@dataclass
class LLMRequest:
    messages: List[Dict[str, str]]
    model: str
    temperature: float
    top_p: float
    max_tokens: int
    timeout_seconds: float
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMResult:
    text: str
    provider: str
    model: str
    tokens_in: int = 0
    tokens_out: int = 0
    latency_ms: int = 0
    raw: Dict[str, Any] = field(default_factory=dict)


class ProviderError(GenerationError):
    """Provider failed to return a valid generation."""

    @classmethod
    def from_status(cls, provider: str, status: int, body: str | None) -> "ProviderError":
        error_type = error_type_for_status(status)
        return cls(
            f"{provider} API error ({status})",
            error_type=error_type,
            http_status=status,
            body=body,
            provider=provider,
        )

    @classmethod
    def timeout(cls, provider: str, seconds: float) -> "ProviderError":
        return cls(
            f"{provider} API request timed out after {seconds:g}s",
            error_type=ErrorType.TIMEOUT,
            provider=provider,
        )

    @classmethod
    def malformed(cls, provider: str, detail: str, body: str | None = None) -> "ProviderError":
        return cls(
            f"Malformed {provider} response: {detail}",
            error_type=ErrorType.UNKNOWN,
            body=body,
            provider=provider,
        )
