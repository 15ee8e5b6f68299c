"""Request and result data structures for code generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

DEFAULT_TECHNOLOGY = "web development"
DEFAULT_APP_TYPE = "application"
DEFAULT_LANGUAGE = "text"


class InvalidRequestError(ValueError):
    """The inbound request cannot enter the pipeline."""


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class GenerationRequest:
    prompt: str
    technology: str = DEFAULT_TECHNOLOGY
    app_type: str = DEFAULT_APP_TYPE
    features: List[str] = field(default_factory=list)
    model_id: str | None = None
    max_length: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.prompt, str) or not self.prompt.strip():
            raise InvalidRequestError("Prompt is required")
        self.technology = _optional_text(self.technology) or DEFAULT_TECHNOLOGY
        self.app_type = _optional_text(self.app_type) or DEFAULT_APP_TYPE
        self.features = [f.strip() for f in (self.features or []) if isinstance(f, str) and f.strip()]
        self.model_id = _optional_text(self.model_id)
        if self.max_length is not None:
            try:
                self.max_length = int(self.max_length)
            except (TypeError, ValueError) as exc:
                raise InvalidRequestError(f"maxLength must be an integer, got {self.max_length!r}") from exc
            if self.max_length <= 0:
                raise InvalidRequestError("maxLength must be positive")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "GenerationRequest":
        """Builds a request from a JSON body using the HTTP field names."""
        if not isinstance(payload, Mapping):
            raise InvalidRequestError("Request body is missing")
        features = payload.get("features")
        if features is not None and not isinstance(features, list):
            raise InvalidRequestError("features must be a list of strings")
        return cls(
            prompt=payload.get("prompt") or "",
            technology=payload.get("technology"),
            app_type=payload.get("appType"),
            features=features or [],
            model_id=payload.get("modelId"),
            max_length=payload.get("maxLength"),
        )


@dataclass
class GeneratedFile:
    name: str
    content: str
    language: str = DEFAULT_LANGUAGE

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "content": self.content, "language": self.language}


@dataclass
class GenerationResult:
    """Decoded reply: the untouched model text plus files in detection order.

    Files sharing a name are all kept; which one wins is up to the consumer.
    """

    generated_text: str
    files: List[GeneratedFile] = field(default_factory=list)
    provider: str | None = None
    model: str | None = None

    def to_response(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "files": [f.to_dict() for f in self.files],
            "generated_text": self.generated_text,
            "provider": self.provider,
            "model": self.model,
        }
