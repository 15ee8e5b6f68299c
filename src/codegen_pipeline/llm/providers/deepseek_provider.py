"""DeepSeek chat completions through the OpenAI-compatible SDK."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict

import openai
from openai import OpenAI

from ...errors import ErrorType
from ...utils import clip, redact
from ..types import LLMRequest, LLMResult, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.deepseek.com"


def _error_body(exc: openai.APIStatusError) -> str:
    if exc.body is None:
        return exc.message
    if isinstance(exc.body, str):
        return exc.body
    return json.dumps(exc.body, default=str)


class DeepSeekProvider:
    name = "deepseek"

    def __init__(self, api_key: str, base_url: str | None = None, client: Any = None) -> None:
        self._api_key = api_key
        # The core never retries; the SDK default of two retries is switched off.
        self._client = client or OpenAI(api_key=api_key, base_url=base_url or DEFAULT_BASE_URL, max_retries=0)

    def generate(self, request: LLMRequest) -> LLMResult:
        start = time.perf_counter()
        try:
            response = self._client.chat.completions.create(
                model=request.model,
                messages=request.messages,
                temperature=request.temperature,
                top_p=request.top_p,
                max_tokens=request.max_tokens,
                timeout=request.timeout_seconds,
            )
        except openai.APITimeoutError as exc:
            raise ProviderError.timeout(self.name, request.timeout_seconds) from exc
        except openai.APIStatusError as exc:
            body = redact(_error_body(exc), [self._api_key])
            logger.error("DeepSeek API error %s: %s", exc.status_code, body)
            raise ProviderError.from_status(self.name, exc.status_code, body) from exc
        except openai.APIConnectionError as exc:
            raise ProviderError(
                f"deepseek API connection failed: {redact(str(exc), [self._api_key])}",
                error_type=ErrorType.UNKNOWN,
                provider=self.name,
            ) from exc

        latency_ms = int((time.perf_counter() - start) * 1000)
        choices = getattr(response, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        text = getattr(message, "content", None)
        if not isinstance(text, str):
            raise ProviderError.malformed(self.name, "missing choices[0].message.content", clip(str(response)))

        usage = getattr(response, "usage", None)
        tokens_in = int(getattr(usage, "prompt_tokens", 0) or 0)
        tokens_out = int(getattr(usage, "completion_tokens", 0) or 0)

        return LLMResult(
            text=text,
            provider=self.name,
            model=request.model,
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            latency_ms=latency_ms,
            raw={"id": getattr(response, "id", None)},
        )

    def probe(self) -> Dict[str, Any]:
        """Lists models to check that the key is accepted."""
        try:
            self._client.models.list()
        except openai.APIStatusError as exc:
            return {"ok": False, "provider": self.name, "status": exc.status_code}
        except openai.APIConnectionError as exc:
            return {"ok": False, "provider": self.name, "status": None, "error": redact(str(exc), [self._api_key])}
        return {"ok": True, "provider": self.name, "status": 200}
