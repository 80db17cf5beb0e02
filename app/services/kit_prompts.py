"""Prompt construction for every stage of the marketing kit.

Each ``build_*`` function is pure: it looks only at the campaign fields (and,
for customer ads, whether a selfie exists) and returns a :class:`PromptPlan`.
A ``None`` return means the stage's precondition failed and no remote call
should be made.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass
from typing import Literal, Optional

from app.schemas import CampaignSpec

PromptKind = Literal[
    "poster",
    "formats",
    "mockups",
    "customer_ads",
    "multilingual",
    "renders",
    "qr_code",
    "source_image",
]

POSTER_VARIATIONS = 3
CUSTOMER_AD_VARIATIONS = 2
RENDER_VARIATIONS = 2
QR_CODE_DEFAULT_TITLE = "QR Code"
DEFAULT_SOURCE_COLORS = "vibrant and appealing colors"

NEON_INSTRUCTION = (
    "Apply a special effect: dramatic neon lighting, glowing text, and a high-contrast, "
    "vibrant style suitable for a nightlife promotion (e.g., bar, club, lounge)."
)


@dataclass(frozen=True)
class PromptPlan:
    """Instruction text plus the response shape the stage expects back."""

    kind: PromptKind
    text: str
    expect_text: bool
    expected_count: int
    default_title: Optional[str] = None


def _dedent(text: str) -> str:
    return textwrap.dedent(text).strip()


def neon_instruction(campaign: CampaignSpec) -> str:
    return NEON_INSTRUCTION if campaign.neon_glow_mode else ""


def size_instruction(campaign: CampaignSpec) -> str:
    size = campaign.custom_size
    if size is None:
        return ""
    width, height = size
    return f"The output resolution for these posters must be exactly {width}px by {height}px."


def build_poster_prompt(campaign: CampaignSpec) -> PromptPlan:
    text = _dedent(
        f"""
        You are a professional marketing designer creating a full campaign kit.
        Your goal is to generate **{POSTER_VARIATIONS} distinct, high-quality poster variations** by adding text and enhancements directly onto the provided image.

        **Instructions:**
        1.  **Core Task:** Overlay text onto the image to create a seamless, single-image advertisement. Return {POSTER_VARIATIONS} separate, complete image variations in the response.
        2.  **Image Enhancement:** Subtly enhance the lighting, colors, and sharpness of the original photo to make it stand out.
        3.  **Branding:** Create and subtly place a minimal, elegant logo-style watermark for "{campaign.business_name}".
        4.  **Content to Add:**
            *   Business Name: "{campaign.business_name}"
            *   Offer: "{campaign.offer}" (This should be the most prominent text).
            *   Call to Action: "{campaign.call_to_action}"
        5.  **Styling:**
            *   Business Type Context: {campaign.business_type}
            *   Color Palette: Inspired by {campaign.colors}
            *   Seasonal Theme: {campaign.seasonal_theme}
        6.  **Special Instructions:**
            *   {neon_instruction(campaign)}
            *   {size_instruction(campaign)}
        7.  **Output:** Provide exactly {POSTER_VARIATIONS} final, edited images as separate parts in your response. Do not add descriptive text.
        """
    )
    return PromptPlan(
        kind="poster",
        text=text,
        expect_text=False,
        expected_count=POSTER_VARIATIONS,
    )


def build_format_prompt(campaign: CampaignSpec) -> PromptPlan | None:
    labels = campaign.format_selections.selected_labels()
    if not labels:
        return None

    listing = "\n".join(f"{index}. Title: {label}" for index, label in enumerate(labels, start=1))
    text = "\n".join(
        [
            "You are a professional graphic designer. Your task is to reformat the provided poster design for various digital and print channels.",
            "Ensure that the layouts adapt naturally to each size while keeping the business name, offer, and call-to-action clearly visible. Maintain consistency in style, branding, and readability across all formats.",
            "",
            f"Generate a separate, complete image for each of the following {len(labels)} formats. For each image, provide its corresponding title as a text part immediately before the image part.",
            "",
            listing,
        ]
    )
    return PromptPlan(kind="formats", text=text, expect_text=True, expected_count=len(labels))


def build_mockup_prompt(campaign: CampaignSpec) -> PromptPlan | None:
    mockups = campaign.mockup_list
    if not mockups:
        return None

    listing = "\n".join(f"{index}. {mockup}" for index, mockup in enumerate(mockups, start=1))
    text = "\n".join(
        [
            "You are a mockup specialist. Take the provided poster image and place it onto a variety of realistic mockups.",
            "",
            f"Generate a separate, final image for each of the following {len(mockups)} scenarios:",
            listing,
            "",
            'For each image, provide a short, descriptive title as a text part immediately before the image part (e.g., "Poster mockup on a city billboard.").',
        ]
    )
    return PromptPlan(kind="mockups", text=text, expect_text=True, expected_count=len(mockups))


def build_customer_ad_prompt(campaign: CampaignSpec, *, has_selfie: bool) -> PromptPlan | None:
    if not (campaign.generate_customer_ad and has_selfie):
        return None

    text = _dedent(
        f"""
        You are a creative ad designer. A customer has uploaded their selfie to be part of a promotion for "{campaign.business_name}".
        Your task is to creatively and tastefully blend the customer's selfie (second image) with the main promotional image (first image).

        **Instructions:**
        1.  **Combine Images:** The customer should look happy and engaged with the product/service. The ad should feel authentic, fun, and community-focused. Do not just place the selfie in a box; integrate it naturally.
        2.  **Maintain Branding:** Keep the main promotional text from the first image clear and readable. The offer is "{campaign.offer}" and the call to action is "{campaign.call_to_action}".
        3.  **Generate Variations:** Create {CUSTOMER_AD_VARIATIONS} fun, distinct variations of this customer-generated ad.
        4.  **Output:** Return exactly {CUSTOMER_AD_VARIATIONS} final, edited images as separate parts in your response. Do not add descriptive text.
        """
    )
    return PromptPlan(
        kind="customer_ads",
        text=text,
        expect_text=False,
        expected_count=CUSTOMER_AD_VARIATIONS,
    )


def build_multilingual_prompt(campaign: CampaignSpec) -> PromptPlan | None:
    languages = campaign.language_list
    if not languages:
        return None

    text = _dedent(
        f"""
        You are a localization expert and graphic designer. The provided poster is in English.
        Your task is to translate and adapt the text on this poster for the following languages: {", ".join(languages)}.

        **Instructions:**
        1.  **Translate Accurately:** Translate the text content (Business Name, Offer, Call to Action) into each specified language.
        2.  **Maintain Design:** Preserve the original design's style, fonts, colors, and layout as closely as possible.
        3.  **Cultural Adaptation:** Ensure translations are culturally appropriate for local markets.
        4.  **Output Format:** For each language, in this order, provide a title with the language name (e.g., "Title: Spanish") as a text part immediately before its corresponding translated image part.
        """
    )
    return PromptPlan(
        kind="multilingual",
        text=text,
        expect_text=True,
        expected_count=len(languages),
    )


def build_render_prompt(campaign: CampaignSpec) -> PromptPlan | None:
    if not campaign.generate_3d_render:
        return None

    text = _dedent(
        f"""
        You are a 3D rendering artist. Transform the provided 2D product photo into a realistic, high-fidelity 3D-like render.
        The product should look hyper-realistic with dynamic lighting, dramatic shadows, and intricate textures.
        Place it against a clean, modern studio background that complements the product.

        Generate {RENDER_VARIATIONS} different, visually stunning renders from different angles or with different lighting setups.
        For each image, provide a short, descriptive title as a text part immediately before the image part (e.g., "3D Render - Front View").
        """
    )
    return PromptPlan(kind="renders", text=text, expect_text=True, expected_count=RENDER_VARIATIONS)


def build_qr_prompt(campaign: CampaignSpec) -> PromptPlan | None:
    url = (campaign.qr_code_url or "").strip()
    if not (campaign.generate_qr_code and url):
        return None

    text = _dedent(
        f"""
        You are a utility that generates QR codes.
        Create a standard, scannable QR code image that encodes this exact URL: {url}

        **Requirements:**
        1.  The QR code must be black on a solid white background.
        2.  Include a standard quiet zone (a blank margin) around the code.
        3.  Do not add any logos, text, or other design elements to the QR code image itself.
        4.  Output a single, high-contrast, clear image that can be reliably scanned by a mobile device.
        """
    )
    return PromptPlan(
        kind="qr_code",
        text=text,
        expect_text=False,
        expected_count=1,
        default_title=QR_CODE_DEFAULT_TITLE,
    )


def build_source_image_prompt(campaign: CampaignSpec) -> PromptPlan:
    colors = campaign.colors or DEFAULT_SOURCE_COLORS
    text = _dedent(
        f"""
        A professional, high-resolution photograph for a "{campaign.business_type}" business.
        The user wants an image described as follows: "{campaign.image_description}".
        The scene should incorporate brand colors like "{colors}".
        The image must be clean, eye-catching, high-quality, and suitable as a primary asset for a marketing poster.
        Avoid any text or logos on the image. Focus on a compelling visual based on the user's description.
        """
    )
    return PromptPlan(kind="source_image", text=text, expect_text=False, expected_count=1)


__all__ = [
    "PromptPlan",
    "build_customer_ad_prompt",
    "build_format_prompt",
    "build_mockup_prompt",
    "build_multilingual_prompt",
    "build_poster_prompt",
    "build_qr_prompt",
    "build_render_prompt",
    "build_source_image_prompt",
]
