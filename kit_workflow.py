"""Command-line helper for generating a marketing kit.

This utility mirrors the browser workflow:

1. Load the campaign description from a JSON file.
2. Use the given source image, or generate one from the campaign's image description.
3. Run the full kit pipeline and write every asset (plus ``kit.json``) to disk.

Example usage::

    python kit_workflow.py --input campaign.json --image photo.jpg --output-dir out/
    python kit_workflow.py --input campaign.json --selfie me.png --output-dir out/ --format jpeg
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from app.models import SourceAsset
from app.schemas import CampaignSpec
from app.services.export import write_kit
from app.services.genai_client import get_generation_client
from app.services.kit import KitClient, generate_marketing_kit, generate_source_image

logger = logging.getLogger("kit-service")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a marketing campaign kit")
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Path to the JSON file containing the campaign fields",
    )
    parser.add_argument(
        "--image",
        type=Path,
        help="Source image; generated from the image description when omitted",
    )
    parser.add_argument(
        "--selfie",
        type=Path,
        help="Customer selfie used when generateCustomerAd is enabled",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        required=True,
        help="Directory to write the generated assets and kit.json manifest",
    )
    parser.add_argument(
        "--format",
        choices=("png", "jpeg"),
        default="png",
        help="Encoding used for the written assets (default: png)",
    )
    return parser.parse_args(argv)


def load_configuration(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def parse_campaign(config: Dict[str, Any]) -> CampaignSpec:
    return CampaignSpec.model_validate(config.get("campaign", config))


def run(args: argparse.Namespace, client: Optional[KitClient] = None) -> list[Path]:
    campaign = parse_campaign(load_configuration(args.input))
    kit_client = client or get_generation_client()

    if args.image:
        source = SourceAsset.from_path(args.image)
    else:
        print("=== Step 1 · Generating source image ===")
        source = generate_source_image(campaign, client=kit_client)
    selfie = SourceAsset.from_path(args.selfie) if args.selfie else None

    print("=== Step 2 · Generating campaign assets ===")
    kit = generate_marketing_kit(campaign, source, selfie, client=kit_client)
    for category, count in kit.counts().items():
        print(f"{category}: {count}")

    written = write_kit(kit, args.output_dir, args.format)
    print(f"\n=== Step 3 · Saved {len(written)} assets to {args.output_dir.resolve()} ===")
    return written


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run(parse_args())


if __name__ == "__main__":
    main()
