from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from app.schemas.base import _CompatModel, _rename_keys

# Declaration order matters: format prompts list labels in this order.
FORMAT_LABELS: dict[str, str] = {
    "instagram_post": "Instagram Post (1080x1080px)",
    "instagram_story": "Instagram Story (1080x1920px)",
    "facebook_ad": "Facebook Ad Banner (1200x628px)",
    "linked_in_banner": "LinkedIn Banner (1584x396px)",
    "twitter_header": "Twitter/X Post Header (1600x900px)",
    "youtube_thumbnail": "YouTube Thumbnail (1280x720px)",
    "website_hero": "Website Hero Banner (1920x1080px)",
    "flyer_a5": "Printed Flyer A5 (148x210mm)",
    "poster_a3": "Printed Poster A3 (297x420mm)",
    "postcard": "Postcard (4x6 inches)",
    "business_card": "Business Card (3.5x2 inches)",
    "whatsapp_share": "WhatsApp/Telegram Share Image (800x800px)",
}

_FORMAT_ALIASES = {
    "instagramPost": "instagram_post",
    "instagramStory": "instagram_story",
    "facebookAd": "facebook_ad",
    "linkedInBanner": "linked_in_banner",
    "twitterHeader": "twitter_header",
    "youtubeThumbnail": "youtube_thumbnail",
    "websiteHero": "website_hero",
    "flyerA5": "flyer_a5",
    "posterA3": "poster_a3",
    "businessCard": "business_card",
    "whatsappShare": "whatsapp_share",
}

_CAMPAIGN_ALIASES = {
    "businessType": "business_type",
    "imageDescription": "image_description",
    "businessName": "business_name",
    "callToAction": "call_to_action",
    "seasonalAdaptation": "seasonal_adaptation",
    "mockupRequests": "mockup_requests",
    "formatSelections": "format_selections",
    "formats": "format_selections",
    "generateCustomerAd": "generate_customer_ad",
    "generate3dRender": "generate_3d_render",
    "neonGlowMode": "neon_glow_mode",
    "targetLanguages": "target_languages",
    "generateQrCode": "generate_qr_code",
    "qrCodeUrl": "qr_code_url",
}


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated form field, trimming and dropping empty entries."""

    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class FormatSelections(_CompatModel):
    """Output channels the user ticked in the form."""

    instagram_post: bool = False
    instagram_story: bool = False
    facebook_ad: bool = False
    linked_in_banner: bool = False
    twitter_header: bool = False
    youtube_thumbnail: bool = False
    website_hero: bool = False
    flyer_a5: bool = False
    poster_a3: bool = False
    postcard: bool = False
    business_card: bool = False
    whatsapp_share: bool = False

    @model_validator(mode="before")
    @classmethod
    def _accept_camel_case(cls, values: Any) -> Any:
        return _rename_keys(values, _FORMAT_ALIASES)

    def selected(self) -> list[str]:
        return [name for name in FORMAT_LABELS if getattr(self, name)]

    def selected_labels(self) -> list[str]:
        return [FORMAT_LABELS[name] for name in self.selected()]


class CampaignSpec(_CompatModel):
    """Everything the user typed or ticked in the campaign form."""

    business_type: str = Field("restaurant", description="Kind of business being promoted")
    image_description: str = Field(
        "", description="Free-text description used when AI-generating the source image"
    )
    business_name: str = ""
    offer: str = Field("", description="Headline offer, rendered most prominently")
    colors: str = Field("", description="Free-text colour palette description")
    call_to_action: str = ""
    width: Optional[str] = Field(None, description="Explicit poster width in pixels")
    height: Optional[str] = Field(None, description="Explicit poster height in pixels")
    seasonal_adaptation: str = Field("", description="Optional seasonal theme")
    mockup_requests: str = Field("", description="Comma-separated mockup scenarios")
    format_selections: FormatSelections = Field(default_factory=FormatSelections)
    generate_customer_ad: bool = False
    generate_3d_render: bool = False
    neon_glow_mode: bool = False
    target_languages: str = Field("", description="Comma-separated target languages")
    generate_qr_code: bool = False
    qr_code_url: str = ""

    @model_validator(mode="before")
    @classmethod
    def _accept_camel_case(cls, values: Any) -> Any:
        return _rename_keys(values, _CAMPAIGN_ALIASES)

    @field_validator("width", "height", mode="before")
    @classmethod
    def _dimension_as_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator(
        "business_type",
        "image_description",
        "business_name",
        "offer",
        "colors",
        "call_to_action",
        "seasonal_adaptation",
        "mockup_requests",
        "target_languages",
        "qr_code_url",
        mode="before",
    )
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def mockup_list(self) -> list[str]:
        return split_csv(self.mockup_requests)

    @property
    def language_list(self) -> list[str]:
        return split_csv(self.target_languages)

    @property
    def seasonal_theme(self) -> str:
        theme = (self.seasonal_adaptation or "").strip()
        if not theme or theme.lower() == "none":
            return "None"
        return theme

    @property
    def custom_size(self) -> tuple[str, str] | None:
        """Width/height pair when both are present and numeric."""

        width = (self.width or "").strip()
        height = (self.height or "").strip()
        if not (width and height):
            return None
        for value in (width, height):
            if "_" in value:
                return None
            try:
                number = float(value)
            except ValueError:
                return None
            if not math.isfinite(number):
                return None
        return width, height


__all__ = ["CampaignSpec", "FORMAT_LABELS", "FormatSelections", "split_csv"]
