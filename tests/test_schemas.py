import pytest
from pydantic import ValidationError

from app.schemas import FORMAT_LABELS, CampaignSpec, ConvertImageRequest, GenerateKitRequest, split_csv
from tests.helpers import make_data_url


def test_campaign_accepts_browser_camel_case_keys() -> None:
    campaign = CampaignSpec.model_validate(
        {
            "businessName": "Acme",
            "offer": "50% off",
            "callToAction": "Visit us",
            "formatSelections": {"instagramPost": True, "linkedInBanner": True},
            "generate3dRender": True,
            "qrCodeUrl": "https://acme.test",
            "somethingElse": "ignored",
        }
    )

    assert campaign.business_name == "Acme"
    assert campaign.call_to_action == "Visit us"
    assert campaign.generate_3d_render is True
    assert campaign.qr_code_url == "https://acme.test"
    assert campaign.format_selections.selected() == ["instagram_post", "linked_in_banner"]


def test_campaign_defaults_have_every_toggle_off() -> None:
    campaign = CampaignSpec()

    assert campaign.business_type == "restaurant"
    assert campaign.format_selections.selected() == []
    assert not any(
        [
            campaign.generate_customer_ad,
            campaign.generate_3d_render,
            campaign.neon_glow_mode,
            campaign.generate_qr_code,
        ]
    )


def test_selected_labels_follow_declaration_order() -> None:
    campaign = CampaignSpec.model_validate(
        {"format_selections": {"whatsapp_share": True, "instagram_post": True, "flyer_a5": True}}
    )

    assert campaign.format_selections.selected_labels() == [
        FORMAT_LABELS["instagram_post"],
        FORMAT_LABELS["flyer_a5"],
        FORMAT_LABELS["whatsapp_share"],
    ]


def test_split_csv_trims_and_drops_empty_entries() -> None:
    assert split_csv(" Spanish, ,French ,, ") == ["Spanish", "French"]
    assert split_csv("") == []
    assert split_csv(None) == []


@pytest.mark.parametrize(
    ("width", "height", "expected"),
    [
        ("1080", "1350", ("1080", "1350")),
        (1080, 1350, ("1080", "1350")),
        ("1080", "", None),
        ("wide", "1350", None),
        ("nan", "1350", None),
        ("inf", "1350", None),
        ("1080", "-Infinity", None),
        ("1_000", "1350", None),
        (None, None, None),
    ],
)
def test_custom_size_requires_two_numbers(width, height, expected) -> None:
    campaign = CampaignSpec(width=width, height=height)
    assert campaign.custom_size == expected


@pytest.mark.parametrize(("raw", "expected"), [("", "None"), ("none", "None"), ("NONE", "None"), ("Halloween", "Halloween")])
def test_seasonal_theme(raw, expected) -> None:
    assert CampaignSpec(seasonal_adaptation=raw).seasonal_theme == expected


def test_kit_request_requires_source_image() -> None:
    with pytest.raises(ValidationError):
        GenerateKitRequest.model_validate({"campaign": {}, "source_image": ""})


def test_kit_request_rejects_malformed_data_url() -> None:
    with pytest.raises(ValidationError):
        GenerateKitRequest.model_validate({"source_image": "https://example.com/a.png"})


def test_kit_request_accepts_camel_case_and_blank_selfie() -> None:
    request = GenerateKitRequest.model_validate(
        {
            "formData": {"businessName": "Acme"},
            "sourceImage": make_data_url(),
            "customerSelfie": "  ",
        }
    )

    assert request.campaign.business_name == "Acme"
    assert request.customer_selfie is None


def test_convert_request_normalises_jpg() -> None:
    request = ConvertImageRequest.model_validate({"image": make_data_url(), "format": "JPG"})
    assert request.format == "jpeg"
