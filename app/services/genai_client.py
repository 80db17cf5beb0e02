"""google-genai SDK wrapper used by every kit stage."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from google import genai
from google.genai import types

from app.config import GenAIConfig, Settings, get_settings, require_api_key
from app.models import SourceAsset
from app.services.response_parser import response_parts

log = logging.getLogger("kit-service")

SOURCE_IMAGE_MEDIA_TYPE = "image/jpeg"
SOURCE_IMAGE_ASPECT = "1:1"


class SourceImageError(RuntimeError):
    """Raised when the image model returns no image for the source prompt."""


class GenerationClient:
    """One outbound call per method; no retries, caching or rate limiting."""

    def __init__(self, config: GenAIConfig, client: Any | None = None) -> None:
        self.content_model = config.content_model
        self.image_model = config.image_model
        self.client = client or genai.Client(api_key=config.api_key)

    def generate_content(
        self,
        prompt: str,
        images: Sequence[SourceAsset] = (),
        *,
        expect_text: bool = False,
    ) -> list[Any]:
        """Send ``images`` followed by ``prompt``; return the response parts in order."""

        contents: list[Any] = [
            types.Part.from_bytes(data=image.data, mime_type=image.media_type) for image in images
        ]
        contents.append(types.Part.from_text(text=prompt))
        modalities = ["IMAGE", "TEXT"] if expect_text else ["IMAGE"]

        log.debug(
            "[genai.content] model=%s images=%s prompt_len=%s modalities=%s",
            self.content_model,
            len(images),
            len(prompt),
            modalities,
        )
        response = self.client.models.generate_content(
            model=self.content_model,
            contents=contents,
            config=types.GenerateContentConfig(response_modalities=modalities),
        )
        return response_parts(response)

    def generate_image(self, prompt: str) -> bytes:
        """Text-to-image call returning a single square JPEG."""

        log.debug("[genai.image] model=%s prompt_len=%s", self.image_model, len(prompt))
        response = self.client.models.generate_images(
            model=self.image_model,
            prompt=prompt,
            config=types.GenerateImagesConfig(
                number_of_images=1,
                output_mime_type=SOURCE_IMAGE_MEDIA_TYPE,
                aspect_ratio=SOURCE_IMAGE_ASPECT,
            ),
        )

        generated = getattr(response, "generated_images", None) or []
        if generated:
            image = getattr(generated[0], "image", None)
            data = getattr(image, "image_bytes", None)
            if isinstance(data, (bytes, bytearray)) and data:
                return bytes(data)

        raise SourceImageError("AI image generation failed to return an image.")


_CLIENT: Optional[GenerationClient] = None


def get_generation_client(settings: Settings | None = None) -> GenerationClient:
    """Return the cached client, checking the credential before anything else."""

    global _CLIENT
    resolved = settings or get_settings()
    require_api_key(resolved)
    if _CLIENT is None:
        _CLIENT = GenerationClient(resolved.genai)
        log.info(
            "[genai] client ready content_model=%s image_model=%s",
            resolved.genai.content_model,
            resolved.genai.image_model,
        )
    return _CLIENT


def reset_generation_client() -> None:
    global _CLIENT
    _CLIENT = None


__all__ = [
    "GenerationClient",
    "SourceImageError",
    "get_generation_client",
    "reset_generation_client",
]
