"""Sequential orchestration of the seven marketing kit stages."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence

from app.models import SourceAsset
from app.schemas import CampaignSpec, GeneratedAsset, GeneratedFormatAsset, MarketingKit
from app.services.kit_prompts import (
    PromptPlan,
    build_customer_ad_prompt,
    build_format_prompt,
    build_mockup_prompt,
    build_multilingual_prompt,
    build_poster_prompt,
    build_qr_prompt,
    build_render_prompt,
    build_source_image_prompt,
)
from app.services.genai_client import SOURCE_IMAGE_MEDIA_TYPE
from app.services.response_parser import parse_image_parts

logger = logging.getLogger(__name__)

UNTITLED_FORMAT = "Untitled Format"


class KitClient(Protocol):
    def generate_content(
        self,
        prompt: str,
        images: Sequence[SourceAsset] = (),
        *,
        expect_text: bool = False,
    ) -> list[Any]:
        ...

    def generate_image(self, prompt: str) -> bytes:
        ...


class KitGenerationError(RuntimeError):
    """Base class for failures that abort a whole submission."""

    error_code = "kit_generation_failed"


class NoPosterReturned(KitGenerationError):
    error_code = "no_poster_returned"

    def __init__(self) -> None:
        super().__init__(
            "The AI did not return any poster images. It may have refused the request."
        )


def _run_stage(
    client: KitClient,
    plan: PromptPlan,
    images: Sequence[SourceAsset],
    *,
    trace_id: str | None = None,
) -> list[GeneratedAsset]:
    parts = client.generate_content(plan.text, images, expect_text=plan.expect_text)
    assets = parse_image_parts(parts, default_title=plan.default_title)
    logger.info(
        "[kit.stage] trace=%s stage=%s inputs=%s expected=%s received=%s",
        trace_id,
        plan.kind,
        len(images),
        plan.expected_count,
        len(assets),
    )
    return assets


def _first_poster(kit: MarketingKit) -> SourceAsset:
    """Fresh input part decoded from the first poster for one downstream call."""

    return SourceAsset.from_data_url(kit.posters[0].image)


def generate_marketing_kit(
    campaign: CampaignSpec,
    source: SourceAsset,
    selfie: Optional[SourceAsset] = None,
    *,
    client: KitClient,
    trace_id: str | None = None,
) -> MarketingKit:
    """Run every stage in order and return the populated kit.

    Only an empty poster stage is fatal. Optional stages whose precondition
    fails are skipped, and an optional stage that returns no images leaves its
    collection empty. Any exception raised by the client propagates, so a
    caller never sees a partially built kit.
    """

    kit = MarketingKit()

    kit.posters = _run_stage(client, build_poster_prompt(campaign), [source], trace_id=trace_id)
    if not kit.posters:
        raise NoPosterReturned()

    plan = build_format_prompt(campaign)
    if plan is not None:
        formats = _run_stage(client, plan, [_first_poster(kit)], trace_id=trace_id)
        kit.social_media = [
            GeneratedFormatAsset(format=asset.title or UNTITLED_FORMAT, image=asset.image)
            for asset in formats
        ]

    plan = build_mockup_prompt(campaign)
    if plan is not None:
        kit.mockups = _run_stage(client, plan, [_first_poster(kit)], trace_id=trace_id)

    plan = build_customer_ad_prompt(campaign, has_selfie=selfie is not None)
    if plan is not None and selfie is not None:
        kit.customer_ads = _run_stage(
            client, plan, [_first_poster(kit), selfie], trace_id=trace_id
        )

    plan = build_multilingual_prompt(campaign)
    if plan is not None:
        kit.multilingual_versions = _run_stage(
            client, plan, [_first_poster(kit)], trace_id=trace_id
        )

    plan = build_render_prompt(campaign)
    if plan is not None:
        kit.renders = _run_stage(client, plan, [source], trace_id=trace_id)

    plan = build_qr_prompt(campaign)
    if plan is not None:
        codes = _run_stage(client, plan, [], trace_id=trace_id)
        if codes:
            kit.qr_code = codes[0]

    logger.info("[kit.done] trace=%s counts=%s", trace_id, kit.counts())
    return kit


def generate_source_image(
    campaign: CampaignSpec,
    *,
    client: KitClient,
    trace_id: str | None = None,
) -> SourceAsset:
    plan = build_source_image_prompt(campaign)
    data = client.generate_image(plan.text)
    logger.info("[kit.source] trace=%s bytes=%s", trace_id, len(data))
    return SourceAsset(data=data, media_type=SOURCE_IMAGE_MEDIA_TYPE)


__all__ = [
    "KitClient",
    "KitGenerationError",
    "NoPosterReturned",
    "generate_marketing_kit",
    "generate_source_image",
]
