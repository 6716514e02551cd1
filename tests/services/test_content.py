"""
Tests for ad content validation.

Tests: required fields per format family, carousel card rules, Performance Max
asset group rules and caps, platform/format pairing, and character warnings.
"""

import pytest

from proofdesk.core.errors import ValidationError
from proofdesk.services.content import (
    CarouselContent,
    PerformanceMaxContent,
    StandardAdContent,
    character_warnings,
    validate_content,
    _Content,
)


def _asset_group(**overrides):
    group = {
        "finalUrl": "https://acme.com",
        "headlines": ["Buy now"],
        "descriptions": ["Great stuff"],
        "landscapeImages": ["https://cdn/l.png"],
        "squareImages": ["https://cdn/s.png"],
        "logos": ["https://cdn/logo.png"],
    }
    group.update(overrides)
    return group


# ============================================================================
# Standard formats
# ============================================================================

class TestStandardContent:
    @pytest.mark.parametrize("ad_format", ["single_image", "story", "video"])
    def test_headline_and_primary_text_accepted(self, ad_format):
        content = validate_content("facebook", ad_format, {"headline": "H", "primaryText": "P"})
        assert isinstance(content, StandardAdContent)
        assert content.primary_text == "P"

    def test_missing_headline_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_content("facebook", "single_image", {"headline": "", "primaryText": "P"})
        assert exc.value.errors == ["Headline is required"]

    def test_whitespace_only_counts_as_missing(self):
        with pytest.raises(ValidationError) as exc:
            validate_content("linkedin", "single_image", {"headline": "  ", "primaryText": " "})
        assert "Headline is required" in exc.value.errors
        assert "Primary text is required" in exc.value.errors

    def test_unknown_keys_are_kept(self):
        content = validate_content(
            "instagram", "story", {"headline": "H", "primaryText": "P", "brandColor": "#fff"}
        )
        assert content.model_extra == {"brandColor": "#fff"}

    def test_payload_is_not_modified(self):
        ad_data = {"headline": "H", "primaryText": "P", "nested": {"a": [1, 2]}}
        snapshot = {"headline": "H", "primaryText": "P", "nested": {"a": [1, 2]}}
        validate_content("facebook", "single_image", ad_data)
        assert ad_data == snapshot

    def test_wrong_field_type_reported(self):
        with pytest.raises(ValidationError) as exc:
            validate_content("facebook", "single_image", {"headline": ["H"], "primaryText": "P"})
        assert exc.value.errors[0].startswith("headline:")


# ============================================================================
# Carousel
# ============================================================================

class TestCarouselContent:
    def test_card_with_image_accepted(self):
        content = validate_content(
            "facebook", "carousel", {"primaryText": "P", "cards": [{"imageUrl": "https://cdn/1.png"}]}
        )
        assert isinstance(content, CarouselContent)
        assert len(content.cards) == 1

    def test_card_with_only_url_accepted(self):
        validate_content(
            "linkedin", "carousel", {"primaryText": "P", "cards": [{"url": "https://acme.com"}]}
        )

    def test_missing_primary_text_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_content("facebook", "carousel", {"cards": [{"imageUrl": "a.png"}]})
        assert exc.value.errors == ["Primary text is required"]

    def test_no_cards_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_content("facebook", "carousel", {"primaryText": "P", "cards": []})
        assert exc.value.errors == ["At least 1 card with an image or URL is required"]

    def test_empty_cards_rejected(self):
        with pytest.raises(ValidationError):
            validate_content(
                "facebook", "carousel", {"primaryText": "P", "cards": [{"headline": "only text"}]}
            )

    def test_facebook_caps_at_five_cards(self):
        cards = [{"imageUrl": f"https://cdn/{i}.png"} for i in range(6)]
        with pytest.raises(ValidationError) as exc:
            validate_content("facebook", "carousel", {"primaryText": "P", "cards": cards})
        assert "At most 5 cards are allowed on facebook" in exc.value.errors

    def test_linkedin_allows_ten_cards(self):
        cards = [{"imageUrl": f"https://cdn/{i}.png"} for i in range(10)]
        validate_content("linkedin", "carousel", {"primaryText": "P", "cards": cards})


# ============================================================================
# Performance Max
# ============================================================================

class TestPerformanceMaxContent:
    def test_complete_asset_group_accepted(self):
        content = validate_content("google_pmax", "pmax", {"assetGroups": [_asset_group()]})
        assert isinstance(content, PerformanceMaxContent)
        assert content.asset_groups[0].final_url == "https://acme.com"

    def test_no_asset_groups_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_content("google_pmax", "pmax", {"assetGroups": []})
        assert exc.value.errors == ["At least 1 asset group is required"]

    def test_missing_pieces_are_listed_per_group(self):
        groups = [_asset_group(), _asset_group(finalUrl="", logos=[])]
        with pytest.raises(ValidationError) as exc:
            validate_content("google_pmax", "pmax", {"assetGroups": groups})
        assert len(exc.value.errors) == 1
        message = exc.value.errors[0]
        assert message.startswith("Asset Group 2:")
        assert "Final URL is required" in message
        assert "At least 1 logo required" in message

    def test_headline_cap(self):
        group = _asset_group(headlines=[f"H{i}" for i in range(6)])
        with pytest.raises(ValidationError) as exc:
            validate_content("google_pmax", "pmax", {"assetGroups": [group]})
        assert "At most 5 headlines allowed (got 6)" in exc.value.errors[0]


# ============================================================================
# Platform / format pairing
# ============================================================================

class TestPairing:
    def test_pmax_only_on_google(self):
        with pytest.raises(ValidationError, match="not available on facebook"):
            validate_content("facebook", "pmax", {"assetGroups": [_asset_group()]})

    def test_google_only_pmax(self):
        with pytest.raises(ValidationError, match="not available on google_pmax"):
            validate_content("google_pmax", "single_image", {"headline": "H", "primaryText": "P"})

    def test_unknown_platform_and_format_both_reported(self):
        with pytest.raises(ValidationError) as exc:
            validate_content("tiktok", "banner", {})
        assert len(exc.value.errors) == 2
        assert exc.value.errors[0].startswith("Unknown platform 'tiktok'")

    def test_non_object_payload_rejected(self):
        with pytest.raises(ValidationError, match="must be an object"):
            validate_content("facebook", "single_image", ["headline"])

    def test_base_content_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            _Content()


# ============================================================================
# character_warnings
# ============================================================================

class TestCharacterWarnings:
    def test_within_limits(self):
        assert character_warnings("facebook", {"headline": "Short", "primaryText": "Also short"}) == []

    def test_long_headline_warns(self):
        warnings = character_warnings("facebook", {"headline": "x" * 41})
        assert warnings == ["headline is 41/40 characters"]

    def test_linkedin_allows_longer_headline(self):
        assert character_warnings("linkedin", {"headline": "x" * 60}) == []
        assert character_warnings("linkedin", {"headline": "x" * 71}) == ["headline is 71/70 characters"]

    def test_instagram_primary_text_limit(self):
        assert character_warnings("instagram", {"primaryText": "x" * 2000}) == []
        assert character_warnings("instagram", {"primaryText": "x" * 2201}) == [
            "primaryText is 2201/2200 characters"
        ]

    def test_other_platforms_use_default_limit(self):
        assert character_warnings("youtube", {"headline": "x" * 999}) == []
        assert character_warnings("youtube", {"headline": "x" * 1001}) == [
            "headline is 1001/1000 characters"
        ]

    def test_card_text_is_checked(self):
        ad_data = {
            "primaryText": "P",
            "cards": [
                {"imageUrl": "a.png", "headline": "ok"},
                {"imageUrl": "b.png", "headline": "x" * 41, "description": "y" * 31},
            ],
        }
        assert character_warnings("facebook", ad_data) == [
            "card 2 headline is 41/40 characters",
            "card 2 description is 31/30 characters",
        ]

    def test_ignores_non_string_values(self):
        assert character_warnings("facebook", {"headline": None, "description": 12345}) == []
