"""Download helpers: PNG/JPEG re-encoding and the filenames the gallery offers."""

from __future__ import annotations

import json
import logging
import re
from io import BytesIO
from pathlib import Path
from typing import Iterator, Literal, Optional

from PIL import Image, UnidentifiedImageError

from app.schemas import MarketingKit
from app.services.encoding import InvalidImagePayload, split_data_url

logger = logging.getLogger(__name__)

ExportFormat = Literal["png", "jpeg"]
EXPORT_MEDIA_TYPES: dict[str, str] = {"png": "image/png", "jpeg": "image/jpeg"}
JPEG_QUALITY = 95
JPEG_BACKGROUND = (255, 255, 255)

_NON_SLUG_RX = re.compile(r"[^a-z0-9]")


def convert_image(data_url: str, fmt: ExportFormat = "png") -> tuple[bytes, str]:
    """Re-encode a data URL image as PNG or JPEG.

    JPEG output is flattened onto a white background since it has no alpha.
    """

    if fmt not in EXPORT_MEDIA_TYPES:
        raise ValueError(f"unsupported export format: {fmt}")

    _, raw = split_data_url(data_url)
    try:
        with Image.open(BytesIO(raw)) as source:
            source.load()
            image = source.copy()
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImagePayload("bytes are not a recognised image") from exc

    buffer = BytesIO()
    if fmt == "jpeg":
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, JPEG_BACKGROUND)
        canvas.paste(rgba, mask=rgba.split()[-1])
        canvas.save(buffer, format="JPEG", quality=JPEG_QUALITY)
    else:
        if image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            image = image.convert("RGBA")
        image.save(buffer, format="PNG")

    return buffer.getvalue(), EXPORT_MEDIA_TYPES[fmt]


def download_name(filename: str, fmt: ExportFormat) -> str:
    stem = filename.split(".")[0] or "asset"
    return f"{stem}.{fmt}"


def format_filename(label: str) -> str:
    return f"format-{_NON_SLUG_RX.sub('-', label.lower())}.png"


def iter_kit_files(kit: MarketingKit) -> Iterator[tuple[str, str, Optional[str]]]:
    """Yield ``(filename, data_url, title)`` for every asset in gallery order."""

    for index, poster in enumerate(kit.posters, start=1):
        yield f"poster-variation-{index}.png", poster.image, poster.title
    for index, render in enumerate(kit.renders, start=1):
        yield f"3d-render-{index}.png", render.image, render.title
    for index, ad in enumerate(kit.customer_ads, start=1):
        yield f"customer-ad-{index}.png", ad.image, ad.title
    for index, mockup in enumerate(kit.mockups, start=1):
        yield f"mockup-{index}.png", mockup.image, mockup.title
    for index, version in enumerate(kit.multilingual_versions, start=1):
        yield f"lang-version-{index}.png", version.image, version.title
    if kit.qr_code is not None:
        yield "qr-code.png", kit.qr_code.image, kit.qr_code.title
    for social in kit.social_media:
        yield format_filename(social.format), social.image, social.format


def _unique_name(name: str, taken: set[str]) -> str:
    """``name`` or, when already used, ``stem-N.ext`` with the first free N from 2."""

    if name not in taken:
        return name
    stem, _, ext = name.rpartition(".")
    index = 2
    while f"{stem}-{index}.{ext}" in taken:
        index += 1
    return f"{stem}-{index}.{ext}"


def write_kit(kit: MarketingKit, output_dir: Path, fmt: ExportFormat = "png") -> list[Path]:
    """Write every asset plus a ``kit.json`` manifest into ``output_dir``."""

    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    manifest: list[dict[str, Optional[str]]] = []

    taken: set[str] = set()
    for filename, data_url, title in iter_kit_files(kit):
        data, media_type = convert_image(data_url, fmt)
        name = _unique_name(download_name(filename, fmt), taken)
        taken.add(name)
        path = output_dir / name
        path.write_bytes(data)
        written.append(path)
        manifest.append({"file": path.name, "media_type": media_type, "title": title})

    manifest_path = output_dir / "kit.json"
    manifest_path.write_text(
        json.dumps({"counts": kit.counts(), "assets": manifest}, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    logger.info("[export] wrote %s assets to %s", len(written), output_dir)
    return written


__all__ = [
    "convert_image",
    "download_name",
    "format_filename",
    "iter_kit_files",
    "write_kit",
]
