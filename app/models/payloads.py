"""Payload-facing models shared between the API layer and the kit pipeline."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from app.services.encoding import sniff_media_type, split_data_url, to_data_url


class SourceAsset(BaseModel):
    """An encoded image handed to the generative API as an input part.

    Instances are immutable: the same source may be attached to several
    requests, and every stage that reuses a generated poster builds a new one
    from the poster's data URL.
    """

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., min_length=1, description="Raw image bytes")
    media_type: str = Field(..., description="MIME type of the image bytes")

    @classmethod
    def from_bytes(cls, data: bytes, media_type: str | None = None) -> "SourceAsset":
        resolved = media_type or sniff_media_type(data)
        return cls(data=bytes(data), media_type=resolved)

    @classmethod
    def from_data_url(cls, data_url: str) -> "SourceAsset":
        media_type, raw = split_data_url(data_url)
        return cls(data=raw, media_type=media_type)

    @classmethod
    def from_path(cls, path: Path) -> "SourceAsset":
        raw = path.read_bytes()
        return cls.from_bytes(raw)

    def to_data_url(self) -> str:
        return to_data_url(self.data, self.media_type)
