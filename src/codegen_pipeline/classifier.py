"""Maps any pipeline failure onto the closed error taxonomy."""

from __future__ import annotations

import asyncio

import requests

from .credentials import DEFAULT_DEEPSEEK_PREFIX, CredentialKind, ProviderCredential
from .errors import STATUS_CODES, ClassifiedError, CredentialError, ErrorType, GenerationError, error_type_for_status
from .utils import redact

AUTH_KEYWORDS = ("auth", "credential", "permission", "api key", "unauthorized", "forbidden")
TIMEOUT_KEYWORDS = ("timed out", "timeout")
AUTH_ADVICE = "Verify the credential's format and that its scope allows inference calls."


def _describe(exc: BaseException) -> str:
    return str(exc).strip() or exc.__class__.__name__


def _mentions_auth(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in AUTH_KEYWORDS)


def _is_timeout(exc: BaseException, text: str) -> bool:
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, requests.Timeout)):
        return True
    lowered = text.lower()
    return any(keyword in lowered for keyword in TIMEOUT_KEYWORDS)


def _authentication_message(
    exc: BaseException,
    text: str,
    provider: str | None,
    credential: ProviderCredential | None,
) -> str:
    if isinstance(exc, CredentialError):
        return text
    if credential is None:
        return f"{text.rstrip('.')}. {AUTH_ADVICE}"
    if credential.kind is CredentialKind.DEEPSEEK_KEY and not credential.format_valid:
        return (
            f"The DeepSeek API rejected the key in {credential.env_name}, which does not start with "
            f"'{DEFAULT_DEEPSEEK_PREFIX}'. Check that a DeepSeek API key (not another provider's token) is configured."
        )
    return (
        f"The {provider or credential.provider} credential in {credential.env_name} was not accepted ({text}). "
        f"{AUTH_ADVICE}"
    )


def _message(
    exc: BaseException,
    error_type: ErrorType,
    text: str,
    provider: str | None,
    credential: ProviderCredential | None,
    timeout_seconds: float | None,
) -> str:
    name = provider or "the provider"
    if error_type is ErrorType.AUTHENTICATION:
        return _authentication_message(exc, text, provider, credential)
    if error_type is ErrorType.RATE_LIMIT:
        return f"{name} is rate limiting requests. Wait a moment before trying again."
    if error_type is ErrorType.TIMEOUT:
        if timeout_seconds:
            return f"No response from {name} within {timeout_seconds:g} seconds."
        return f"No response from {name} before the request timed out."
    return f"Code generation failed: {text}"


def classify_error(
    exc: BaseException,
    credential: ProviderCredential | None = None,
    stage: str | None = None,
    timeout_seconds: float | None = None,
) -> ClassifiedError:
    """Returns a ClassifiedError for exc; never raises.

    Rules, most specific first: a tag set by the invoker or resolver is kept,
    then a non-2xx HTTP status decides, then authorization wording, then
    timeouts. Anything left is unknown.
    """
    secrets = [credential.secret] if credential is not None else []
    text = redact(_describe(exc), secrets)

    tagged = exc.error_type if isinstance(exc, GenerationError) else None
    http_status = getattr(exc, "http_status", None)
    if isinstance(tagged, ErrorType):
        error_type = tagged
    elif isinstance(http_status, int) and not 200 <= http_status < 300:
        error_type = error_type_for_status(http_status)
    elif _mentions_auth(text):
        error_type = ErrorType.AUTHENTICATION
    elif _is_timeout(exc, text):
        error_type = ErrorType.TIMEOUT
    else:
        error_type = ErrorType.UNKNOWN

    provider = getattr(exc, "provider", None) or (credential.provider if credential is not None else None)
    message = redact(_message(exc, error_type, text, provider, credential, timeout_seconds), secrets)

    return ClassifiedError(
        error_type=error_type,
        message=message or f"Code generation failed ({error_type.value})",
        status_code=STATUS_CODES[error_type],
        provider=provider,
        credential=credential.env_name if credential is not None else None,
        format_valid=credential.format_valid if credential is not None else None,
        stage=stage,
        http_status=http_status if isinstance(http_status, int) else None,
    )
