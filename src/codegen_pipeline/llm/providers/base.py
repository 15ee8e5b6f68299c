"""LLM provider interface."""

from __future__ import annotations

from typing import Any, Dict, Protocol

from ..types import LLMRequest, LLMResult


class LLMProvider(Protocol):
    name: str

    def generate(self, request: LLMRequest) -> LLMResult:
        ...

    def probe(self) -> Dict[str, Any]:
        ...


def extract_generated_text(data: Any) -> str | None:
    """Pulls the generated text out of a provider response envelope.

    Accepts the chat-completion shape (``choices[0].message.content``) and the
    older text-generation shapes (``[{"generated_text": ...}]`` or
    ``{"generated_text": ...}``). Returns None for anything else.
    """
    if isinstance(data, list):
        if data and isinstance(data[0], dict) and isinstance(data[0].get("generated_text"), str):
            return data[0]["generated_text"]
        return None
    if not isinstance(data, dict):
        return None

    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        return None

    if isinstance(data.get("generated_text"), str):
        return data["generated_text"]
    return None
