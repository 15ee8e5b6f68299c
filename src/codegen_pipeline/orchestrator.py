"""Request orchestration: credential -> prompt -> invoke -> decode."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Mapping

from .classifier import classify_error
from .config import PipelineConfig
from .credentials import ProviderCredential, resolve_credential
from .decoder import decode_response
from .llm.invoker import RemoteInvoker
from .models import GenerationRequest, InvalidRequestError
from .prompts import build_generation_prompt

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    RESOLVING_CREDENTIAL = "resolving_credential"
    BUILDING_PROMPT = "building_prompt"
    INVOKING = "invoking"
    DECODING = "decoding"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _enter(state: PipelineState) -> PipelineState:
    logger.debug("Pipeline state -> %s", state.value)
    return state


class GenerationOrchestrator:
    """Runs one generation request end to end.

    The instance holds only read-only configuration, so concurrent calls to
    ``generate`` share nothing mutable. Each call yields either the success
    payload or the failure payload, never both, and nothing is retried.
    """

    def __init__(self, config: PipelineConfig, invoker: RemoteInvoker | None = None) -> None:
        self.config = config
        self.invoker = invoker or RemoteInvoker(config)

    async def generate(self, request: GenerationRequest) -> Dict[str, Any]:
        state = PipelineState.IDLE
        credential: ProviderCredential | None = None
        try:
            state = _enter(PipelineState.RESOLVING_CREDENTIAL)
            credential = resolve_credential(self.config)

            state = _enter(PipelineState.BUILDING_PROMPT)
            prompt = build_generation_prompt(request, credential.provider)

            state = _enter(PipelineState.INVOKING)
            llm_result = await self.invoker.invoke(credential, prompt, request)

            state = _enter(PipelineState.DECODING)
            result = decode_response(llm_result.text)
            result.provider = credential.provider
            result.model = llm_result.model
        except Exception as exc:
            error = classify_error(
                exc,
                credential=credential,
                stage=state.value,
                timeout_seconds=self.config.timeout_seconds,
            )
            _enter(PipelineState.FAILED)
            logger.warning(
                "Generation failed in %s: %s (%s)",
                state.value,
                error.error_type.value,
                error.message,
            )
            return error.to_response()

        _enter(PipelineState.SUCCEEDED)
        logger.info(
            "Generation succeeded via %s: %d file(s) [%s]",
            result.provider,
            len(result.files),
            ", ".join(f.name for f in result.files),
        )
        return result.to_response()

    async def handle_payload(self, payload: Mapping[str, Any] | None) -> Dict[str, Any]:
        """Entry point for a deserialized JSON request body."""
        try:
            request = GenerationRequest.from_payload(payload)
        except InvalidRequestError as exc:
            return {"ok": False, "message": str(exc), "statusCode": 400}
        return await self.generate(request)
