"""Data URL helpers shared by the kit pipeline, the API layer and exports."""

from __future__ import annotations

import base64
import binascii
import re
from io import BytesIO
from typing import Any

from PIL import Image, UnidentifiedImageError

DATA_URL_RX = re.compile(r"^data:(?P<media_type>[^;,]+)(?P<params>(?:;[^;,]*)*),(?P<payload>.*)$", re.S)
DEFAULT_MEDIA_TYPE = "image/png"


class InvalidImagePayload(ValueError):
    """Raised when an inline image cannot be decoded."""

    def __init__(self, reason: str, *, hint: str | None = None) -> None:
        detail: dict[str, Any] = {"ok": False, "error": "INVALID_IMAGE", "reason": reason}
        if hint:
            detail["hint"] = hint
        super().__init__(f"Invalid image payload: {reason}")
        self.detail = detail


def to_data_url(data: bytes, media_type: str) -> str:
    encoded = base64.b64encode(bytes(data)).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def split_data_url(data_url: str) -> tuple[str, bytes]:
    """Return ``(media_type, raw_bytes)`` for a base64 data URL."""

    if not isinstance(data_url, str):
        raise InvalidImagePayload("data URL must be a string")

    match = DATA_URL_RX.match(data_url.strip())
    if not match:
        raise InvalidImagePayload(
            "missing data: prefix or comma separator",
            hint="Send images as data:<media-type>;base64,<payload>.",
        )

    params = [item.strip().lower() for item in match.group("params").split(";") if item.strip()]
    if "base64" not in params:
        raise InvalidImagePayload("only base64-encoded data URLs are supported")

    payload = re.sub(r"\s+", "", match.group("payload"))
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImagePayload("payload is not valid base64") from exc

    if not raw:
        raise InvalidImagePayload("payload is empty")

    return match.group("media_type").strip().lower(), raw


def media_type_of(data_url: str) -> str:
    return split_data_url(data_url)[0]


def sniff_media_type(data: bytes, fallback: str | None = None) -> str:
    """Identify an image's MIME type from its bytes using Pillow."""

    try:
        with Image.open(BytesIO(data)) as image:
            fmt = image.format
    except (UnidentifiedImageError, OSError) as exc:
        if fallback:
            return fallback
        raise InvalidImagePayload("bytes are not a recognised image") from exc

    media_type = Image.MIME.get(fmt or "")
    if media_type:
        return media_type
    if fallback:
        return fallback
    raise InvalidImagePayload(f"unsupported image format: {fmt}")
