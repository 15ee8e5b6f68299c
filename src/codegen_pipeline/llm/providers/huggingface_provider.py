"""Hugging Face hosted chat completions provider."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict

import requests

from ...errors import ErrorType
from ...utils import clip, redact
from ..types import LLMRequest, LLMResult, ProviderError
from .base import extract_generated_text

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://router.huggingface.co/v1/chat/completions"
DEFAULT_WHOAMI_URL = "https://huggingface.co/api/whoami-v2"


class HuggingFaceProvider:
    name = "huggingface"

    def __init__(self, api_key: str, url: str | None = None, whoami_url: str | None = None) -> None:
        self._api_key = api_key
        self._url = url or DEFAULT_URL
        self._whoami_url = whoami_url or DEFAULT_WHOAMI_URL

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def generate(self, request: LLMRequest) -> LLMResult:
        payload = {
            "model": request.model,
            "messages": request.messages,
            "temperature": request.temperature,
            "top_p": request.top_p,
            "max_tokens": request.max_tokens,
            "stream": False,
        }

        start = time.perf_counter()
        try:
            res = requests.post(self._url, headers=self._headers(), json=payload, timeout=request.timeout_seconds)
        except requests.Timeout as exc:
            raise ProviderError.timeout(self.name, request.timeout_seconds) from exc
        except requests.RequestException as exc:
            raise ProviderError(
                f"huggingface API request failed: {redact(str(exc), [self._api_key])}",
                error_type=ErrorType.UNKNOWN,
                provider=self.name,
            ) from exc

        body = redact(res.text, [self._api_key])
        if not 200 <= res.status_code < 300:
            logger.error("Hugging Face API error %s: %s", res.status_code, body)
            raise ProviderError.from_status(self.name, res.status_code, body)

        try:
            data = res.json()
        except ValueError as exc:
            raise ProviderError.malformed(self.name, "body is not JSON", clip(body)) from exc

        latency_ms = int((time.perf_counter() - start) * 1000)
        text = extract_generated_text(data)
        if text is None:
            raise ProviderError.malformed(self.name, "missing choices[0].message.content", clip(body))

        usage = data.get("usage") if isinstance(data, dict) else None
        if not isinstance(usage, dict):
            usage = {}
        tokens_in = int(usage.get("prompt_tokens", 0) or 0)
        tokens_out = int(usage.get("completion_tokens", 0) or 0)

        return LLMResult(
            text=text,
            provider=self.name,
            model=request.model,
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            latency_ms=latency_ms,
            raw={"id": data.get("id") if isinstance(data, dict) else None},
        )

    def probe(self) -> Dict[str, Any]:
        """Calls whoami to check that the token is accepted."""
        try:
            res = requests.get(self._whoami_url, headers=self._headers(), timeout=10)
        except requests.RequestException as exc:
            return {"ok": False, "provider": self.name, "status": None, "error": redact(str(exc), [self._api_key])}
        return {"ok": 200 <= res.status_code < 300, "provider": self.name, "status": res.status_code}
