from types import SimpleNamespace

import pytest
from google.genai import types

from app.services.response_parser import (
    PendingTitle,
    normalise_title,
    parse_image_parts,
    response_parts,
)
from tests.helpers import image_part, text_part


@pytest.mark.parametrize(
    "layout",
    [
        "I",
        "TI",
        "TTI",
        "ITI",
        "IIT",
        "TTTT",
        "TITITIT",
        "",
        "IIII",
    ],
)
def test_one_asset_per_image_part(layout) -> None:
    parts = [text_part(f"title {i}") if kind == "T" else image_part() for i, kind in enumerate(layout)]

    assets = parse_image_parts(parts)

    assert len(assets) == layout.count("I")


def test_title_is_consumed_by_first_following_image() -> None:
    parts = [text_part("Instagram Post"), image_part(), image_part()]

    assets = parse_image_parts(parts, default_title="Fallback")

    assert [asset.title for asset in assets] == ["Instagram Post", "Fallback"]


def test_latest_text_overwrites_unconsumed_title() -> None:
    parts = [text_part("first"), text_part("second"), image_part()]

    assets = parse_image_parts(parts)

    assert assets[0].title == "second"


def test_text_only_response_yields_nothing() -> None:
    assert parse_image_parts([text_part("Sorry"), text_part("I can't do that")]) == []


def test_trailing_text_is_dropped() -> None:
    assets = parse_image_parts([image_part(), text_part("orphan")], default_title=None)

    assert len(assets) == 1
    assert assets[0].title is None


def test_image_is_exposed_as_data_url_with_media_type() -> None:
    assets = parse_image_parts([image_part(mime_type="image/webp")])

    assert assets[0].image.startswith("data:image/webp;base64,")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("**Title: Spanish**", "Spanish"),
        ("  Title:   3D Render - Front View ", "3D Render - Front View"),
        ("*Poster mockup on a city billboard.*", "Poster mockup on a city billboard."),
        ("Instagram Post (1080x1080px)", "Instagram Post (1080x1080px)"),
        ("Subtitle: keep", "Subtitle: keep"),
    ],
)
def test_normalise_title(raw, expected) -> None:
    assert normalise_title(raw) == expected


def test_title_that_normalises_to_empty_uses_default() -> None:
    assets = parse_image_parts([text_part("**"), image_part()], default_title="QR Code")

    assert assets[0].title == "QR Code"


def test_parts_without_text_or_image_are_ignored() -> None:
    parts = [text_part("kept"), types.Part(), image_part()]

    assets = parse_image_parts(parts)

    assert [asset.title for asset in assets] == ["kept"]


def test_pending_title_state_machine() -> None:
    slot = PendingTitle()
    assert slot.take("default") == "default"

    slot.offer("one")
    slot.offer("two")
    assert slot.take(None) == "two"
    assert slot.take(None) is None


def test_response_parts_handles_missing_candidates() -> None:
    assert response_parts(SimpleNamespace(candidates=None)) == []
    assert response_parts(SimpleNamespace(candidates=[SimpleNamespace(content=None)])) == []

    part = text_part("hello")
    response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])
    assert response_parts(response) == [part]
