from __future__ import annotations

import base64
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Sequence

from google.genai import types
from PIL import Image

from app.models import SourceAsset


def image_bytes(
    color: tuple[int, ...] = (200, 30, 30),
    *,
    size: tuple[int, int] = (16, 16),
    fmt: str = "PNG",
    mode: str = "RGB",
) -> bytes:
    image = Image.new(mode, size, color)
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def make_data_url(color: tuple[int, ...] = (200, 30, 30), *, fmt: str = "PNG") -> str:
    media_type = "image/jpeg" if fmt == "JPEG" else f"image/{fmt.lower()}"
    encoded = base64.b64encode(image_bytes(color, fmt=fmt)).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def make_source(color: tuple[int, int, int] = (10, 120, 200)) -> SourceAsset:
    return SourceAsset(data=image_bytes(color), media_type="image/png")


def text_part(text: str) -> types.Part:
    return types.Part.from_text(text=text)


def image_part(color: tuple[int, int, int] = (0, 200, 0), mime_type: str = "image/png") -> types.Part:
    return types.Part.from_bytes(data=image_bytes(color), mime_type=mime_type)


def images(count: int) -> list[types.Part]:
    return [image_part((index * 40 % 255, 80, 160)) for index in range(count)]


def titled(*titles: str) -> list[types.Part]:
    parts: list[types.Part] = []
    for index, title in enumerate(titles):
        parts.append(text_part(title))
        parts.append(image_part((90, index * 50 % 255, 30)))
    return parts


@dataclass
class RecordedCall:
    prompt: str
    images: list[SourceAsset]
    expect_text: bool


@dataclass
class FakeKitClient:
    """Replays queued responses in call order and records every request.

    A queued exception is raised instead of returned; an exhausted queue
    yields an empty response.
    """

    responses: list[Any] = field(default_factory=list)
    source_image: bytes | None = None
    calls: list[RecordedCall] = field(default_factory=list)
    image_prompts: list[str] = field(default_factory=list)

    def generate_content(
        self,
        prompt: str,
        images: Sequence[SourceAsset] = (),
        *,
        expect_text: bool = False,
    ) -> list[Any]:
        self.calls.append(RecordedCall(prompt=prompt, images=list(images), expect_text=expect_text))
        if not self.responses:
            return []
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def generate_image(self, prompt: str) -> bytes:
        self.image_prompts.append(prompt)
        if self.source_image is None:
            return image_bytes((250, 250, 0), fmt="JPEG")
        return self.source_image
