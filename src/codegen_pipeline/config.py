"""Configuration loading and defaults."""

from __future__ import annotations

import os
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

DEEPSEEK_ENV = "DEEPSEEK_API_KEY"
HUGGINGFACE_TOKEN_ENV = "HUGGINGFACE_API_TOKEN"
HUGGINGFACE_KEY_ENV = "HUGGINGFACE_API_KEY"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "llm": {
        "max_tokens": 4096,
        "timeout_seconds": 180,
    },
    "providers": {
        "deepseek": {
            "base_url": "https://api.deepseek.com",
            "model": "deepseek-chat",
            "key_prefix": "sk-",
        },
        "huggingface": {
            "url": "https://router.huggingface.co/v1/chat/completions",
            "model": "deepseek-ai/DeepSeek-V3-0324",
            "whoami_url": "https://huggingface.co/api/whoami-v2",
        },
    },
    "logging": {
        "level": "INFO",
    },
    "output": {
        "directory": "generated",
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(settings_path: str = "config/settings.yaml") -> Dict[str, Any]:
    """Loads settings.yaml and merges it onto defaults."""
    merged = deepcopy(DEFAULT_SETTINGS)
    config_path = Path(settings_path)
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as f:
            user_cfg = yaml.safe_load(f) or {}
        merged = _deep_merge(merged, user_cfg)
    return merged


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class PipelineConfig:
    """Credentials and settings handed to the orchestrator at construction.

    Secrets are captured once; nothing downstream reads the process
    environment, so tests can build any credential combination directly.
    """

    deepseek_api_key: str | None = field(default=None, repr=False)
    huggingface_api_token: str | None = field(default=None, repr=False)
    huggingface_api_key: str | None = field(default=None, repr=False)
    settings: Dict[str, Any] = field(default_factory=lambda: deepcopy(DEFAULT_SETTINGS))

    @classmethod
    def from_env(
        cls,
        settings: Dict[str, Any] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "PipelineConfig":
        env = os.environ if environ is None else environ
        return cls(
            deepseek_api_key=_clean(env.get(DEEPSEEK_ENV)),
            huggingface_api_token=_clean(env.get(HUGGINGFACE_TOKEN_ENV)),
            huggingface_api_key=_clean(env.get(HUGGINGFACE_KEY_ENV)),
            settings=settings if settings is not None else deepcopy(DEFAULT_SETTINGS),
        )

    def provider_settings(self, provider: str) -> Dict[str, Any]:
        return dict(self.settings.get("providers", {}).get(provider, {}))

    @property
    def timeout_seconds(self) -> float:
        return float(self.settings.get("llm", {}).get("timeout_seconds", 180))

    @property
    def max_tokens(self) -> int:
        return int(self.settings.get("llm", {}).get("max_tokens", 4096))
