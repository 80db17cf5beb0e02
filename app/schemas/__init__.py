from __future__ import annotations

from app.schemas.base import _CompatModel
from app.schemas.campaign import FORMAT_LABELS, CampaignSpec, FormatSelections, split_csv
from app.schemas.kit import (
    ConvertImageRequest,
    FormatOption,
    GenerateKitRequest,
    GeneratedAsset,
    GeneratedFormatAsset,
    GenerateSourceImageRequest,
    GenerateSourceImageResponse,
    MarketingKit,
)

__all__ = [
    "_CompatModel",
    "CampaignSpec",
    "ConvertImageRequest",
    "FORMAT_LABELS",
    "FormatOption",
    "FormatSelections",
    "GenerateKitRequest",
    "GeneratedAsset",
    "GeneratedFormatAsset",
    "GenerateSourceImageRequest",
    "GenerateSourceImageResponse",
    "MarketingKit",
    "split_csv",
]
