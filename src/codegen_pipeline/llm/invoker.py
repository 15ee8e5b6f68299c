"""Remote invocation of the provider picked by the credential resolver."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Mapping

from ..config import PipelineConfig
from ..credentials import ProviderCredential
from ..models import GenerationRequest
from ..prompts import build_messages
from .providers.base import LLMProvider
from .providers.deepseek_provider import DeepSeekProvider
from .providers.huggingface_provider import HuggingFaceProvider
from .types import LLMRequest, LLMResult, ProviderError

logger = logging.getLogger(__name__)

TEMPERATURE = 0.7
TOP_P = 0.95

DEFAULT_MODELS = {
    "deepseek": "deepseek-chat",
    "huggingface": "deepseek-ai/DeepSeek-V3-0324",
}

ProviderFactory = Callable[[ProviderCredential, Dict[str, Any]], LLMProvider]


def _deepseek_factory(credential: ProviderCredential, settings: Dict[str, Any]) -> LLMProvider:
    return DeepSeekProvider(credential.secret, base_url=settings.get("base_url"))


def _huggingface_factory(credential: ProviderCredential, settings: Dict[str, Any]) -> LLMProvider:
    return HuggingFaceProvider(credential.secret, url=settings.get("url"), whoami_url=settings.get("whoami_url"))


class RemoteInvoker:
    def __init__(
        self,
        config: PipelineConfig,
        factories: Mapping[str, ProviderFactory] | None = None,
    ) -> None:
        self.config = config
        self.factories = dict(factories or self._default_factories())

    def _default_factories(self) -> Dict[str, ProviderFactory]:
        return {
            "deepseek": _deepseek_factory,
            "huggingface": _huggingface_factory,
        }

    def provider_for(self, credential: ProviderCredential) -> LLMProvider:
        factory = self.factories.get(credential.provider)
        if factory is None:
            raise ProviderError(f"No provider registered for '{credential.provider}'", provider=credential.provider)
        return factory(credential, self.config.provider_settings(credential.provider))

    def model_for(self, credential: ProviderCredential, request: GenerationRequest) -> str:
        if request.model_id:
            return request.model_id
        configured = self.config.provider_settings(credential.provider).get("model")
        return str(configured or DEFAULT_MODELS.get(credential.provider, ""))

    def build_request(self, credential: ProviderCredential, prompt: str, request: GenerationRequest) -> LLMRequest:
        return LLMRequest(
            messages=build_messages(prompt, credential.provider),
            model=self.model_for(credential, request),
            temperature=TEMPERATURE,
            top_p=TOP_P,
            max_tokens=request.max_length or self.config.max_tokens,
            timeout_seconds=self.config.timeout_seconds,
            meta={"credential": credential.env_name},
        )

    async def invoke(self, credential: ProviderCredential, prompt: str, request: GenerationRequest) -> LLMResult:
        provider = self.provider_for(credential)
        llm_request = self.build_request(credential, prompt, request)
        timeout = llm_request.timeout_seconds

        logger.info(
            "Requesting generation from %s model=%s prompt_chars=%d max_tokens=%d",
            credential.provider,
            llm_request.model,
            len(prompt),
            llm_request.max_tokens,
        )
        try:
            result = await asyncio.wait_for(asyncio.to_thread(provider.generate, llm_request), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise ProviderError.timeout(credential.provider, timeout) from exc

        if not result.text.strip():
            raise ProviderError.malformed(credential.provider, "empty generated text")

        logger.info(
            "Received %d chars from %s in %dms (%d->%d tokens)",
            len(result.text),
            result.provider,
            result.latency_ms,
            result.tokens_in,
            result.tokens_out,
        )
        return result
