from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.config import ConfigurationError, GenAIConfig, GuardConfig, Settings
from app.services import genai_client
from app.services.genai_client import GenerationClient, SourceImageError, get_generation_client
from tests.helpers import image_part, make_source, text_part


def _sdk_returning(parts):
    sdk = MagicMock()
    sdk.models.generate_content.return_value = SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))]
    )
    return sdk


def _config() -> GenAIConfig:
    return GenAIConfig(api_key="test-key", content_model="content-model", image_model="image-model")


def test_generate_content_sends_images_before_prompt() -> None:
    returned = [text_part("Title: one"), image_part()]
    sdk = _sdk_returning(returned)
    client = GenerationClient(_config(), client=sdk)
    poster, selfie = make_source((1, 1, 1)), make_source((2, 2, 2))

    parts = client.generate_content("make ads", [poster, selfie], expect_text=True)

    assert parts == returned
    kwargs = sdk.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "content-model"
    contents = kwargs["contents"]
    assert [part.inline_data.data for part in contents[:2]] == [poster.data, selfie.data]
    assert contents[0].inline_data.mime_type == "image/png"
    assert contents[2].text == "make ads"
    assert kwargs["config"].response_modalities == ["IMAGE", "TEXT"]


def test_image_only_stages_request_image_modality() -> None:
    sdk = _sdk_returning([])
    client = GenerationClient(_config(), client=sdk)

    assert client.generate_content("qr", []) == []

    kwargs = sdk.models.generate_content.call_args.kwargs
    assert len(kwargs["contents"]) == 1
    assert kwargs["config"].response_modalities == ["IMAGE"]


def test_generate_image_returns_first_image_bytes() -> None:
    sdk = MagicMock()
    sdk.models.generate_images.return_value = SimpleNamespace(
        generated_images=[SimpleNamespace(image=SimpleNamespace(image_bytes=b"jpeg-bytes"))]
    )
    client = GenerationClient(_config(), client=sdk)

    assert client.generate_image("a bakery") == b"jpeg-bytes"

    kwargs = sdk.models.generate_images.call_args.kwargs
    assert kwargs["model"] == "image-model"
    assert kwargs["config"].number_of_images == 1
    assert kwargs["config"].output_mime_type == "image/jpeg"
    assert kwargs["config"].aspect_ratio == "1:1"


@pytest.mark.parametrize(
    "response",
    [
        SimpleNamespace(generated_images=[]),
        SimpleNamespace(generated_images=None),
        SimpleNamespace(generated_images=[SimpleNamespace(image=None)]),
        SimpleNamespace(generated_images=[SimpleNamespace(image=SimpleNamespace(image_bytes=b""))]),
    ],
)
def test_generate_image_without_bytes_raises(response) -> None:
    sdk = MagicMock()
    sdk.models.generate_images.return_value = response
    client = GenerationClient(_config(), client=sdk)

    with pytest.raises(SourceImageError, match="AI image generation failed to return an image."):
        client.generate_image("a bakery")


def test_get_generation_client_requires_api_key(monkeypatch) -> None:
    monkeypatch.setattr(genai_client, "_CLIENT", None)
    settings = Settings(
        environment="test",
        allowed_origins=["*"],
        genai=GenAIConfig(api_key=None),
        guard=GuardConfig(max_body_bytes=0),
    )

    with pytest.raises(ConfigurationError, match="API_KEY environment variable is not set."):
        get_generation_client(settings)


def test_get_generation_client_is_cached(monkeypatch) -> None:
    monkeypatch.setattr(genai_client, "_CLIENT", None)
    monkeypatch.setattr(genai_client.genai, "Client", MagicMock())
    settings = Settings(
        environment="test",
        allowed_origins=["*"],
        genai=_config(),
        guard=GuardConfig(max_body_bytes=0),
    )

    first = get_generation_client(settings)
    second = get_generation_client(settings)

    assert first is second
    genai_client.genai.Client.assert_called_once_with(api_key="test-key")
