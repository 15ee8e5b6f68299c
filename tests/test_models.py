import pytest

from codegen_pipeline.models import GeneratedFile, GenerationRequest, InvalidRequestError


def test_optional_fields_fall_back_to_defaults():
    request = GenerationRequest.from_payload({"prompt": "todo app", "technology": "  ", "features": None})

    assert request.technology == "web development"
    assert request.app_type == "application"
    assert request.features == []
    assert request.model_id is None
    assert request.max_length is None


def test_payload_field_names_are_mapped():
    request = GenerationRequest.from_payload(
        {
            "prompt": "todo app",
            "technology": "react",
            "appType": "dashboard",
            "features": ["auth", " ", "charts"],
            "modelId": "deepseek-coder",
            "maxLength": "2048",
        }
    )

    assert request.app_type == "dashboard"
    assert request.features == ["auth", "charts"]
    assert request.model_id == "deepseek-coder"
    assert request.max_length == 2048


@pytest.mark.parametrize("payload", [{}, {"prompt": ""}, {"prompt": "   \n"}, None])
def test_blank_prompt_is_rejected(payload):
    with pytest.raises(InvalidRequestError):
        GenerationRequest.from_payload(payload)


def test_bad_max_length_is_rejected():
    with pytest.raises(InvalidRequestError):
        GenerationRequest(prompt="x", max_length=0)


def test_generated_file_defaults_to_text_language():
    assert GeneratedFile(name="notes", content="hi").to_dict() == {
        "name": "notes",
        "content": "hi",
        "language": "text",
    }
