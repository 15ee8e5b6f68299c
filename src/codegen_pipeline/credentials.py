"""Provider credential resolution in fixed priority order."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from .config import DEEPSEEK_ENV, HUGGINGFACE_KEY_ENV, HUGGINGFACE_TOKEN_ENV, PipelineConfig
from .errors import CredentialError

logger = logging.getLogger(__name__)

DEFAULT_DEEPSEEK_PREFIX = "sk-"


class CredentialKind(str, Enum):
    # Declaration order is resolution priority.
    DEEPSEEK_KEY = "deepseek_key"
    HUGGINGFACE_TOKEN = "huggingface_token"
    HUGGINGFACE_KEY = "huggingface_key"


_PROVIDERS = {
    CredentialKind.DEEPSEEK_KEY: "deepseek",
    CredentialKind.HUGGINGFACE_TOKEN: "huggingface",
    CredentialKind.HUGGINGFACE_KEY: "huggingface",
}

_ENV_NAMES = {
    CredentialKind.DEEPSEEK_KEY: DEEPSEEK_ENV,
    CredentialKind.HUGGINGFACE_TOKEN: HUGGINGFACE_TOKEN_ENV,
    CredentialKind.HUGGINGFACE_KEY: HUGGINGFACE_KEY_ENV,
}


@dataclass(frozen=True)
class ProviderCredential:
    kind: CredentialKind
    secret: str = field(repr=False)
    format_valid: bool = True

    @property
    def provider(self) -> str:
        return _PROVIDERS[self.kind]

    @property
    def env_name(self) -> str:
        return _ENV_NAMES[self.kind]

    def describe(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "credential": self.env_name,
            "formatValid": self.format_valid,
        }


def _candidates(config: PipelineConfig) -> List[tuple[CredentialKind, str | None]]:
    return [
        (CredentialKind.DEEPSEEK_KEY, config.deepseek_api_key),
        (CredentialKind.HUGGINGFACE_TOKEN, config.huggingface_api_token),
        (CredentialKind.HUGGINGFACE_KEY, config.huggingface_api_key),
    ]


def _deepseek_prefix(config: PipelineConfig) -> str:
    return str(config.provider_settings("deepseek").get("key_prefix") or DEFAULT_DEEPSEEK_PREFIX)


def _format_valid(kind: CredentialKind, secret: str, config: PipelineConfig) -> bool:
    if kind is CredentialKind.DEEPSEEK_KEY:
        return secret.startswith(_deepseek_prefix(config))
    return True


def resolve_credential(config: PipelineConfig) -> ProviderCredential:
    """Returns the first configured credential: DeepSeek, then HF token, then HF key.

    A DeepSeek key with the wrong prefix is still selected; the flag only
    sharpens the error message if the provider later rejects it.
    """
    for kind, secret in _candidates(config):
        if not secret or not secret.strip():
            continue
        secret = secret.strip()
        credential = ProviderCredential(kind=kind, secret=secret, format_valid=_format_valid(kind, secret, config))
        if not credential.format_valid:
            logger.warning(
                "%s does not start with %r; using it anyway",
                credential.env_name,
                _deepseek_prefix(config),
            )
        logger.debug("Resolved %s credential from %s", credential.provider, credential.env_name)
        return credential

    raise CredentialError(
        "No AI provider credential is configured. "
        f"Set {DEEPSEEK_ENV}, {HUGGINGFACE_TOKEN_ENV} or {HUGGINGFACE_KEY_ENV}."
    )


def describe_credentials(config: PipelineConfig) -> List[Dict[str, Any]]:
    """Presence, length and format check for every known secret, never the value."""
    rows: List[Dict[str, Any]] = []
    for kind, secret in _candidates(config):
        secret = (secret or "").strip()
        rows.append(
            {
                "credential": _ENV_NAMES[kind],
                "provider": _PROVIDERS[kind],
                "present": bool(secret),
                "length": len(secret),
                "formatValid": _format_valid(kind, secret, config) if secret else None,
            }
        )
    return rows
