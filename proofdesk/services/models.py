"""
Pydantic models for Proofdesk services.

These models provide validated views of the rows stored in Supabase:
- Agency data (Client, Campaign)
- Ad proofs and their immutable versions (AdProof, AdProofVersion)
- Client feedback pinned to a version (Approval, Comment)
- Share-link views (SharedProof, SharedCampaign)

All models use Pydantic v2. Rows coming back from Supabase carry extra
columns or embedded relations at times; those are ignored.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================

class Platform(str, Enum):
    """Ad platforms a proof can be mocked for."""
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"
    GOOGLE_PMAX = "google_pmax"
    YOUTUBE = "youtube"


class AdFormat(str, Enum):
    """Ad formats; which ones apply depends on the platform."""
    SINGLE_IMAGE = "single_image"
    STORY = "story"
    CAROUSEL = "carousel"
    PMAX = "pmax"
    VIDEO = "video"


class Decision(str, Enum):
    """Client decision on a version."""
    APPROVED = "approved"
    REVISION = "revision"

    @classmethod
    def parse(cls, value: str) -> Optional["Decision"]:
        """Map accepted spellings to a Decision, or None if unrecognised."""
        aliases = {
            "approved": cls.APPROVED,
            "revision": cls.REVISION,
            "revision-requested": cls.REVISION,
        }
        return aliases.get((value or "").strip())


class _Row(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ============================================================================
# Agency Data
# ============================================================================

class Client(_Row):
    """An agency client; owns campaigns."""
    id: str
    name: str
    logo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Campaign(_Row):
    """
    A group of ad proofs for one client.

    share_token stays null until the campaign is first shared.
    """
    id: str
    name: str
    client_id: str
    platform: Optional[str] = None
    share_token: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# Ad Proofs and Versions
# ============================================================================

class AdProof(_Row):
    """
    A single mocked advertisement awaiting client sign-off.

    current_version is 0 until the first version is appended and always
    equals the highest version_number afterwards.
    """
    id: str
    campaign_id: str
    platform: Platform
    ad_format: AdFormat
    share_token: str
    status: str = "pending"
    current_version: int = Field(default=0, ge=0)
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdProofVersion(_Row):
    """Immutable content snapshot of an ad proof."""
    id: str
    ad_proof_id: str
    version_number: int = Field(..., ge=1)
    ad_data: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None


# ============================================================================
# Feedback
# ============================================================================

class Approval(_Row):
    """Append-only decision + comment on one version of an ad proof."""
    id: str
    ad_proof_id: str
    version_number: int
    decision: Decision
    comment: str
    approver_name: str
    approver_email: Optional[str] = None
    created_at: Optional[datetime] = None


class Comment(_Row):
    """Append-only annotation, optionally on a single content field."""
    id: str
    ad_proof_id: str
    version_number: int
    commenter_name: str
    commenter_email: Optional[str] = None
    comment_text: str
    comment_type: str = "general"
    field_name: Optional[str] = None
    created_at: Optional[datetime] = None


# ============================================================================
# Share-link Views
# ============================================================================

class SharedProof(BaseModel):
    """What a share-link viewer sees for a single ad proof."""
    ad_proof: AdProof
    version: AdProofVersion
    campaign_name: Optional[str] = None
    client_name: Optional[str] = None
    client_logo_url: Optional[str] = None

    @property
    def is_current(self) -> bool:
        return self.version.version_number == self.ad_proof.current_version


class SharedCampaignProof(BaseModel):
    """One proof within a shared campaign; version is None if none exists yet."""
    ad_proof: AdProof
    version: Optional[AdProofVersion] = None


class SharedCampaign(BaseModel):
    """What a share-link viewer sees for a whole campaign."""
    campaign: Campaign
    client: Optional[Client] = None
    ad_proofs: List[SharedCampaignProof] = Field(default_factory=list)
