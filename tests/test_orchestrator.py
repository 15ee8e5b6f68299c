import asyncio

from codegen_pipeline.config import PipelineConfig
from codegen_pipeline.llm.invoker import RemoteInvoker
from codegen_pipeline.llm.types import LLMResult, ProviderError
from codegen_pipeline.models import GenerationRequest
from codegen_pipeline.orchestrator import GenerationOrchestrator

TODO_REPLY = (
    "Here is a small React todo app.\n\n"
    "```jsx filename=App.jsx\n"
    "import { useState } from 'react';\n\n"
    "export default function App() {\n"
    "  const [todos, setTodos] = useState([]);\n"
    "  return <ul>{todos.map((t) => <li key={t}>{t}</li>)}</ul>;\n"
    "}\n"
    "```\n\n"
    "```json filename=package.json\n"
    '{"name": "todo", "dependencies": {"react": "^18.2.0"}}\n'
    "```\n"
)


class ReplyProvider:
    name = "deepseek"

    def __init__(self, text):
        self.text = text
        self.prompts = []

    def generate(self, request):
        self.prompts.append(request.messages[-1]["content"])
        return LLMResult(text=self.text, provider="deepseek", model=request.model)


class RaisingProvider:
    name = "huggingface"

    def __init__(self, error):
        self.error = error

    def generate(self, request):
        raise self.error


def _orchestrator(config, **providers):
    factories = {name: (lambda p: lambda credential, settings: p)(p) for name, p in providers.items()}
    return GenerationOrchestrator(config, invoker=RemoteInvoker(config, factories=factories))


def test_react_todo_scenario_returns_two_files_in_order():
    provider = ReplyProvider(TODO_REPLY)
    orchestrator = _orchestrator(PipelineConfig(deepseek_api_key="sk-valid"), deepseek=provider)

    response = asyncio.run(orchestrator.handle_payload({"prompt": "a todo app", "technology": "react"}))

    assert response["ok"] is True
    assert response["provider"] == "deepseek"
    assert [(f["name"], f["language"]) for f in response["files"]] == [("App.jsx", "jsx"), ("package.json", "json")]
    assert response["generated_text"] == TODO_REPLY
    assert "specializing in react" in provider.prompts[0]
    assert "a todo app" in provider.prompts[0]


def test_no_credential_fails_with_authentication_and_no_secret():
    orchestrator = GenerationOrchestrator(PipelineConfig())

    response = asyncio.run(orchestrator.generate(GenerationRequest(prompt="a todo app")))

    assert response["ok"] is False
    assert response["errorType"] == "authentication"
    assert response["statusCode"] == 401
    assert response["message"]
    assert response["diagnostics"]["stage"] == "resolving_credential"
    assert "files" not in response


def test_provider_rejection_is_classified_without_leaking_the_key():
    error = ProviderError.from_status("huggingface", 403, "token hf_private lacks inference scope")
    config = PipelineConfig(huggingface_api_token="hf_private")
    orchestrator = _orchestrator(config, huggingface=RaisingProvider(error))

    response = asyncio.run(orchestrator.generate(GenerationRequest(prompt="x")))

    assert response["errorType"] == "authentication"
    assert response["statusCode"] == 401
    assert response["diagnostics"]["provider"] == "huggingface"
    assert response["diagnostics"]["credential"] == "HUGGINGFACE_API_TOKEN"
    assert response["diagnostics"]["httpStatus"] == 403
    assert "hf_private" not in str(response)


def test_rate_limit_passes_through():
    config = PipelineConfig(huggingface_api_key="hf_key")
    orchestrator = _orchestrator(config, huggingface=RaisingProvider(ProviderError.from_status("huggingface", 429, "")))

    response = asyncio.run(orchestrator.generate(GenerationRequest(prompt="x")))

    assert response["errorType"] == "rate_limit"
    assert response["statusCode"] == 429


def test_unexpected_exception_becomes_unknown():
    config = PipelineConfig(huggingface_api_key="hf_key")
    orchestrator = _orchestrator(config, huggingface=RaisingProvider(KeyError("choices")))

    response = asyncio.run(orchestrator.generate(GenerationRequest(prompt="x")))

    assert response["ok"] is False
    assert response["errorType"] == "unknown"
    assert response["statusCode"] == 500
    assert response["diagnostics"]["stage"] == "invoking"


def test_invalid_body_is_rejected_before_the_pipeline():
    orchestrator = GenerationOrchestrator(PipelineConfig(deepseek_api_key="sk-valid"))

    response = asyncio.run(orchestrator.handle_payload({"technology": "react"}))

    assert response == {"ok": False, "message": "Prompt is required", "statusCode": 400}


def test_concurrent_requests_do_not_interfere():
    provider = ReplyProvider(TODO_REPLY)
    orchestrator = _orchestrator(PipelineConfig(deepseek_api_key="sk-valid"), deepseek=provider)

    async def run_both():
        return await asyncio.gather(
            orchestrator.generate(GenerationRequest(prompt="first app")),
            orchestrator.generate(GenerationRequest(prompt="second app")),
        )

    first, second = asyncio.run(run_both())

    assert first["ok"] and second["ok"]
    assert first["files"] == second["files"]
    assert len(provider.prompts) == 2
