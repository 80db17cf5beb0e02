"""Turn the ordered parts of a generate_content response into assets."""

from __future__ import annotations

import base64
import enum
import re
from typing import Any, Iterable, Optional

from app.schemas import GeneratedAsset
from app.services.encoding import to_data_url

_EMPHASIS_RX = re.compile(r"\*+")
_TITLE_LABEL = "Title:"


class _SlotState(enum.Enum):
    EMPTY = "no_pending_title"
    PENDING = "pending_title"


class PendingTitle:
    """Single-slot holder pairing a text part with the image that follows it.

    A new text overwrites an unconsumed one; taking the title for an image
    always returns the slot to ``EMPTY``.
    """

    def __init__(self) -> None:
        self.state = _SlotState.EMPTY
        self.text: Optional[str] = None

    def offer(self, text: str) -> None:
        self.state = _SlotState.PENDING
        self.text = text

    def take(self, default: Optional[str]) -> Optional[str]:
        title = self.text if self.state is _SlotState.PENDING else None
        self.state = _SlotState.EMPTY
        self.text = None
        return title or default


def normalise_title(text: str) -> str:
    """Drop markdown emphasis and a leading ``Title:`` label."""

    cleaned = _EMPHASIS_RX.sub("", text).strip()
    if cleaned.startswith(_TITLE_LABEL):
        cleaned = cleaned[len(_TITLE_LABEL):].strip()
    return cleaned


def _inline_image(part: Any) -> tuple[bytes, str] | None:
    blob = getattr(part, "inline_data", None)
    if blob is None:
        return None
    data = getattr(blob, "data", None)
    if not data:
        return None
    if isinstance(data, str):
        data = base64.b64decode(data)
    media_type = getattr(blob, "mime_type", None) or "image/png"
    return bytes(data), media_type


def parse_image_parts(
    parts: Iterable[Any] | None,
    default_title: Optional[str] = None,
) -> list[GeneratedAsset]:
    """Pair each image part with the text part immediately preceding it.

    The result has exactly one entry per image part. Text after the last
    image is dropped, and parts that carry neither text nor inline image data
    are skipped.
    """

    assets: list[GeneratedAsset] = []
    slot = PendingTitle()

    for part in parts or ():
        image = _inline_image(part)
        if image is not None:
            data, media_type = image
            assets.append(
                GeneratedAsset(image=to_data_url(data, media_type), title=slot.take(default_title))
            )
            continue

        text = getattr(part, "text", None)
        if isinstance(text, str) and text:
            slot.offer(normalise_title(text))

    return assets


def response_parts(response: Any) -> list[Any]:
    """Return the parts of the first candidate, or an empty list."""

    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    if content is None:
        return []
    return list(getattr(content, "parts", None) or [])


__all__ = ["PendingTitle", "normalise_title", "parse_image_parts", "response_parts"]
