from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator

from app.schemas.base import _CompatModel, _rename_keys
from app.schemas.campaign import CampaignSpec
from app.services.encoding import split_data_url


def _require_data_url(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    split_data_url(text)
    return text


class GeneratedAsset(_CompatModel):
    """One generated image plus the title the model put in front of it."""

    image: str = Field(..., description="Self-contained data URL of the image")
    title: Optional[str] = Field(None, description="Title parsed from the response, if any")


class GeneratedFormatAsset(_CompatModel):
    """A poster adapted to one output channel."""

    format: str = Field(..., description="Human readable channel label")
    image: str = Field(..., description="Self-contained data URL of the image")


class MarketingKit(_CompatModel):
    """Every asset category produced by one submission."""

    posters: list[GeneratedAsset] = Field(default_factory=list)
    social_media: list[GeneratedFormatAsset] = Field(default_factory=list)
    mockups: list[GeneratedAsset] = Field(default_factory=list)
    customer_ads: list[GeneratedAsset] = Field(default_factory=list)
    multilingual_versions: list[GeneratedAsset] = Field(default_factory=list)
    renders: list[GeneratedAsset] = Field(default_factory=list)
    qr_code: Optional[GeneratedAsset] = None

    def counts(self) -> dict[str, int]:
        return {
            "posters": len(self.posters),
            "social_media": len(self.social_media),
            "mockups": len(self.mockups),
            "customer_ads": len(self.customer_ads),
            "multilingual_versions": len(self.multilingual_versions),
            "renders": len(self.renders),
            "qr_code": int(self.qr_code is not None),
        }


class GenerateKitRequest(_CompatModel):
    campaign: CampaignSpec = Field(default_factory=CampaignSpec)
    source_image: str = Field(..., description="Uploaded or generated source image (data URL)")
    customer_selfie: Optional[str] = Field(
        None, description="Optional customer selfie (data URL) for customer ads"
    )

    @model_validator(mode="before")
    @classmethod
    def _accept_camel_case(cls, values):
        return _rename_keys(
            values,
            {
                "formData": "campaign",
                "sourceImage": "source_image",
                "customerSelfie": "customer_selfie",
            },
        )

    @field_validator("source_image", "customer_selfie")
    @classmethod
    def _validate_data_url(cls, value: str | None) -> str | None:
        return _require_data_url(value)

    @field_validator("source_image")
    @classmethod
    def _source_required(cls, value: str | None) -> str:
        if not value:
            raise ValueError("Please upload or generate an image first.")
        return value


class GenerateSourceImageRequest(_CompatModel):
    campaign: CampaignSpec = Field(default_factory=CampaignSpec)

    @model_validator(mode="before")
    @classmethod
    def _accept_camel_case(cls, values):
        return _rename_keys(values, {"formData": "campaign"})


class GenerateSourceImageResponse(_CompatModel):
    image: str = Field(..., description="Generated source image as a data URL")
    media_type: str = Field("image/jpeg")


class ConvertImageRequest(_CompatModel):
    image: str = Field(..., description="Data URL of the asset to download")
    format: Literal["png", "jpeg"] = "png"
    filename: Optional[str] = Field(None, description="Suggested download filename")

    @field_validator("format", mode="before")
    @classmethod
    def _normalise_format(cls, value):
        if isinstance(value, str):
            text = value.strip().lower()
            return "jpeg" if text == "jpg" else text
        return value

    @field_validator("image")
    @classmethod
    def _validate_image(cls, value: str) -> str:
        checked = _require_data_url(value)
        if not checked:
            raise ValueError("image is required")
        return checked


class FormatOption(_CompatModel):
    name: str
    label: str


__all__ = [
    "ConvertImageRequest",
    "FormatOption",
    "GenerateKitRequest",
    "GenerateSourceImageRequest",
    "GenerateSourceImageResponse",
    "GeneratedAsset",
    "GeneratedFormatAsset",
    "MarketingKit",
]
