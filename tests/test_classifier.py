import asyncio

import pytest
import requests

from codegen_pipeline.classifier import classify_error
from codegen_pipeline.config import PipelineConfig
from codegen_pipeline.credentials import resolve_credential
from codegen_pipeline.errors import CredentialError, ErrorType
from codegen_pipeline.llm.types import ProviderError


@pytest.mark.parametrize(
    "message",
    ["huggingface API error (429)", "authentication failed", "permission denied by credential", ""],
)
def test_status_429_is_always_rate_limit(message):
    exc = ProviderError.from_status("huggingface", 429, "slow down")
    exc.args = (message,)
    error = classify_error(exc)

    assert error.error_type is ErrorType.RATE_LIMIT
    assert error.status_code == 429


def test_untagged_failure_with_429_status_is_rate_limit():
    error = classify_error(ProviderError("unauthorized burst", http_status=429))

    assert error.error_type is ErrorType.RATE_LIMIT


@pytest.mark.parametrize("status", [401, 403])
def test_rejected_credential_is_authentication(status):
    credential = resolve_credential(PipelineConfig(huggingface_api_token="hf_secret"))
    error = classify_error(ProviderError.from_status("huggingface", status, "{}"), credential=credential)

    assert error.error_type is ErrorType.AUTHENTICATION
    assert error.status_code == 401
    assert error.http_status == status
    assert "HUGGINGFACE_API_TOKEN" in error.message
    assert "format" in error.message and "scope" in error.message


def test_malformed_deepseek_key_gets_specific_message():
    credential = resolve_credential(PipelineConfig(deepseek_api_key="hf_wrong"))
    error = classify_error(ProviderError.from_status("deepseek", 401, "{}"), credential=credential)

    assert error.error_type is ErrorType.AUTHENTICATION
    assert "'sk-'" in error.message
    assert error.format_valid is False


def test_missing_credential_keeps_its_message():
    error = classify_error(CredentialError("No AI provider credential is configured."))

    assert error.error_type is ErrorType.AUTHENTICATION
    assert error.status_code == 401
    assert error.message == "No AI provider credential is configured."


def test_auth_keywords_in_untagged_errors():
    error = classify_error(RuntimeError("Invalid Authorization header"))

    assert error.error_type is ErrorType.AUTHENTICATION
    assert error.status_code == 401
    assert error.message.startswith("Invalid Authorization header. ")
    assert "format" in error.message and "scope" in error.message


@pytest.mark.parametrize(
    "exc",
    [asyncio.TimeoutError(), TimeoutError("slow"), requests.Timeout("read"), RuntimeError("socket timed out")],
)
def test_timeouts(exc):
    error = classify_error(exc, timeout_seconds=180)

    assert error.error_type is ErrorType.TIMEOUT
    assert error.status_code == 504
    assert "180" in error.message


def test_everything_else_is_unknown_with_original_text():
    error = classify_error(KeyError("choices"))

    assert error.error_type is ErrorType.UNKNOWN
    assert error.status_code == 500
    assert "choices" in error.message


def test_messages_never_contain_the_secret():
    credential = resolve_credential(PipelineConfig(deepseek_api_key="sk-topsecret"))
    error = classify_error(ValueError("bad header Bearer sk-topsecret"), credential=credential)

    assert "sk-topsecret" not in error.message
    assert "sk-topsecret" not in str(error.to_response())
    assert error.message


def test_to_response_shape():
    error = classify_error(ProviderError.from_status("deepseek", 503, "down"), stage="invoking")
    response = error.to_response()

    assert response["ok"] is False
    assert response["errorType"] == "unknown"
    assert response["statusCode"] == 500
    assert response["diagnostics"]["stage"] == "invoking"
    assert response["diagnostics"]["httpStatus"] == 503
