from codegen_pipeline.models import GenerationRequest
from codegen_pipeline.prompts import SYSTEM_PROMPT, build_generation_prompt, build_messages, is_web_technology


def test_prompt_uses_defaults_and_restates_request():
    request = GenerationRequest(prompt="A kanban board\nwith drag and drop")
    prompt = build_generation_prompt(request, "deepseek")

    assert prompt.startswith("You are a senior developer specializing in web development.")
    assert "Create a complete application" in prompt
    assert "A kanban board\nwith drag and drop" in prompt
    assert "Important features to include" not in prompt


def test_features_render_as_bullets():
    request = GenerationRequest(prompt="todo app", technology="react", features=["dark mode", "offline sync"])
    prompt = build_generation_prompt(request, "deepseek")

    assert "Important features to include:\n- dark mode\n- offline sync\n" in prompt


def test_web_targets_require_complete_html_documents():
    web = build_generation_prompt(GenerationRequest(prompt="x", technology="React"), "deepseek")
    backend = build_generation_prompt(GenerationRequest(prompt="x", technology="Go"), "deepseek")

    assert "<!DOCTYPE html>" in web
    assert "<!DOCTYPE html>" not in backend
    assert "filename=" in backend
    assert "stubs" in backend


def test_is_web_technology():
    assert is_web_technology("web development")
    assert is_web_technology("Vue 3 + Tailwind")
    assert not is_web_technology("rust")


def test_messages_are_provider_specific():
    deepseek = build_messages("p", "deepseek")
    huggingface = build_messages("p", "huggingface")

    assert [m["role"] for m in deepseek] == ["system", "user"]
    assert huggingface == [{"role": "user", "content": "p"}]
    assert SYSTEM_PROMPT in build_generation_prompt(GenerationRequest(prompt="p"), "huggingface")
