"""
Ad content payloads - one variant per (platform, format) family.

A version's ad_data is stored exactly as supplied; these models only check it
before it is persisted. Keys use the camelCase names the previews read
(``primaryText``, ``imageUrl``, ``assetGroups``...). Unknown keys are kept.

Usage:
    from proofdesk.services.content import validate_content

    validate_content("facebook", "single_image", {"headline": "H", "primaryText": "P"})
"""

from abc import abstractmethod
from typing import Any, Dict, List, Optional, Type, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import ValidationError
from .models import AdFormat, Platform

# Display-only limits; exceeding them is a warning, never an error
CHARACTER_LIMITS = {
    Platform.FACEBOOK: {"headline": 40, "primaryText": 125, "description": 30},
    Platform.INSTAGRAM: {"headline": 40, "primaryText": 2200, "description": 30},
    Platform.LINKEDIN: {"headline": 70, "primaryText": 600, "description": 100},
}
DEFAULT_CHARACTER_LIMIT = 1000
CARD_TEXT_FIELDS = ("headline", "description")

CAROUSEL_MAX_CARDS = {
    Platform.FACEBOOK: 5,
    Platform.INSTAGRAM: 5,
}
CAROUSEL_DEFAULT_MAX_CARDS = 10

PMAX_LIMITS = {
    "headlines": 5,
    "descriptions": 4,
    "landscape_images": 20,
    "square_images": 20,
    "portrait_images": 20,
    "logos": 5,
    "videos": 5,
}


def _filled(value: Optional[str]) -> bool:
    return bool(value and value.strip())


class _Content(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @abstractmethod
    def problems(self, platform: Platform) -> List[str]:
        """Every rule the content breaks on the given platform."""


class StandardAdContent(_Content):
    """Single image, story and video ads."""
    name: Optional[str] = None
    headline: Optional[str] = None
    primary_text: Optional[str] = Field(None, alias="primaryText")
    description: Optional[str] = None
    link_url: Optional[str] = Field(None, alias="linkUrl")
    call_to_action: Optional[str] = Field(None, alias="callToAction")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    video_url: Optional[str] = Field(None, alias="videoUrl")

    def problems(self, platform: Platform) -> List[str]:
        errors = []
        if not _filled(self.headline):
            errors.append("Headline is required")
        if not _filled(self.primary_text):
            errors.append("Primary text is required")
        return errors


class CarouselCard(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    image_url: Optional[str] = Field(None, alias="imageUrl")
    headline: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    call_to_action: Optional[str] = Field(None, alias="callToAction")

    @property
    def has_media_or_link(self) -> bool:
        return _filled(self.image_url) or _filled(self.url)


class CarouselContent(_Content):
    """Swipeable multi-card ads."""
    name: Optional[str] = None
    primary_text: Optional[str] = Field(None, alias="primaryText")
    link_url: Optional[str] = Field(None, alias="linkUrl")
    call_to_action: Optional[str] = Field(None, alias="callToAction")
    cards: List[CarouselCard] = Field(default_factory=list)

    def problems(self, platform: Platform) -> List[str]:
        errors = []
        if not _filled(self.primary_text):
            errors.append("Primary text is required")
        if not any(card.has_media_or_link for card in self.cards):
            errors.append("At least 1 card with an image or URL is required")
        max_cards = CAROUSEL_MAX_CARDS.get(platform, CAROUSEL_DEFAULT_MAX_CARDS)
        if len(self.cards) > max_cards:
            errors.append(f"At most {max_cards} cards are allowed on {platform.value}")
        return errors


class AssetGroup(BaseModel):
    """Performance Max bundle of headlines, descriptions, images and a destination URL."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: Optional[str] = None
    final_url: Optional[str] = Field(None, alias="finalUrl")
    mobile_url: Optional[str] = Field(None, alias="mobileUrl")
    headlines: List[str] = Field(default_factory=list)
    long_headline: Optional[str] = Field(None, alias="longHeadline")
    descriptions: List[str] = Field(default_factory=list)
    business_name: Optional[str] = Field(None, alias="businessName")
    landscape_images: List[str] = Field(default_factory=list, alias="landscapeImages")
    square_images: List[str] = Field(default_factory=list, alias="squareImages")
    portrait_images: List[str] = Field(default_factory=list, alias="portraitImages")
    logos: List[str] = Field(default_factory=list)
    videos: List[str] = Field(default_factory=list)
    cta: Optional[str] = None
    display_path1: Optional[str] = Field(None, alias="displayPath1")
    display_path2: Optional[str] = Field(None, alias="displayPath2")

    def problems(self) -> List[str]:
        errors = []
        if not _filled(self.final_url):
            errors.append("Final URL is required")
        if not self.landscape_images:
            errors.append("At least 1 landscape image required")
        if not self.square_images:
            errors.append("At least 1 square image required")
        if not self.logos:
            errors.append("At least 1 logo required")
        if not any(_filled(h) for h in self.headlines):
            errors.append("At least 1 headline required")
        if not any(_filled(d) for d in self.descriptions):
            errors.append("At least 1 description required")

        for field, limit in PMAX_LIMITS.items():
            count = len(getattr(self, field))
            if count > limit:
                label = field.replace("_", " ")
                errors.append(f"At most {limit} {label} allowed (got {count})")
        return errors


class PerformanceMaxContent(_Content):
    """Google Performance Max campaign made of one or more asset groups."""
    asset_groups: List[AssetGroup] = Field(default_factory=list, alias="assetGroups")

    def problems(self, platform: Platform) -> List[str]:
        if not self.asset_groups:
            return ["At least 1 asset group is required"]
        errors = []
        for index, group in enumerate(self.asset_groups, 1):
            group_errors = group.problems()
            if group_errors:
                errors.append(f"Asset Group {index}: {', '.join(group_errors)}")
        return errors


AdContent = Union[StandardAdContent, CarouselContent, PerformanceMaxContent]

_VARIANTS: Dict[AdFormat, Type[_Content]] = {
    AdFormat.SINGLE_IMAGE: StandardAdContent,
    AdFormat.STORY: StandardAdContent,
    AdFormat.VIDEO: StandardAdContent,
    AdFormat.CAROUSEL: CarouselContent,
    AdFormat.PMAX: PerformanceMaxContent,
}


def _coerce_enum(enum_cls, value, label: str, errors: List[str]):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        errors.append(f"Unknown {label} '{value}'. Must be one of: {allowed}")
        return None


def validate_content(
    platform: Union[Platform, str],
    ad_format: Union[AdFormat, str],
    ad_data: Dict[str, Any],
) -> AdContent:
    """
    Check an ad_data payload against its (platform, format) variant.

    Args:
        platform: Platform enum or its value
        ad_format: AdFormat enum or its value
        ad_data: Content payload as it will be stored

    Returns:
        The parsed content variant

    Raises:
        ValidationError: With every problem found
    """
    errors: List[str] = []
    platform = _coerce_enum(Platform, platform, "platform", errors)
    ad_format = _coerce_enum(AdFormat, ad_format, "ad format", errors)
    if not isinstance(ad_data, dict):
        errors.append("Ad content must be an object")
    if errors:
        raise ValidationError(errors)

    if (platform == Platform.GOOGLE_PMAX) != (ad_format == AdFormat.PMAX):
        raise ValidationError(
            [f"Format '{ad_format.value}' is not available on {platform.value}"]
        )

    variant = _VARIANTS[ad_format]
    try:
        content = variant.model_validate(ad_data)
    except pydantic.ValidationError as e:
        raise ValidationError([
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]) from e

    problems = content.problems(platform)
    if problems:
        raise ValidationError(problems)
    return content


def _limit_for(platform: Optional[Platform], field: str) -> int:
    return CHARACTER_LIMITS.get(platform, {}).get(field, DEFAULT_CHARACTER_LIMIT)


def _over_limit(label: str, value: Any, limit: int) -> Optional[str]:
    if isinstance(value, str) and len(value) > limit:
        return f"{label} is {len(value)}/{limit} characters"
    return None


def character_warnings(platform: Union[Platform, str], ad_data: Dict[str, Any]) -> List[str]:
    """
    List text fields longer than the platform's display limit.

    Checks the top-level headline, primary text and description, and each
    carousel card's headline and description. Platforms without their own
    table fall back to DEFAULT_CHARACTER_LIMIT.
    """
    try:
        platform = Platform(platform)
    except ValueError:
        platform = None

    warnings = []
    for field in ("headline", "primaryText", "description"):
        warning = _over_limit(field, ad_data.get(field), _limit_for(platform, field))
        if warning:
            warnings.append(warning)

    cards = ad_data.get("cards")
    if isinstance(cards, list):
        for index, card in enumerate(cards, 1):
            if not isinstance(card, dict):
                continue
            for field in CARD_TEXT_FIELDS:
                warning = _over_limit(
                    f"card {index} {field}", card.get(field), _limit_for(platform, field)
                )
                if warning:
                    warnings.append(warning)
    return warnings
