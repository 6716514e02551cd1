"""
API Request and Response Models.

Pydantic models for FastAPI request/response validation and
automatic OpenAPI documentation generation.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..services.models import (
    AdFormat,
    AdProof,
    AdProofVersion,
    Approval,
    Client,
    Platform,
)


# ============================================================================
# Operator Requests
# ============================================================================

class ClientCreateRequest(BaseModel):
    """Request model for creating a client."""
    name: str = Field(..., description="Client name")
    logo_url: Optional[str] = Field(None, description="Explicit logo URL")
    website: Optional[str] = Field(
        None,
        description="Client website; used to guess a logo when logo_url is empty",
        examples=["acme.com"]
    )


class CampaignCreateRequest(BaseModel):
    """Request model for creating a campaign."""
    client_id: str = Field(..., description="Owning client UUID")
    name: str = Field(..., description="Campaign name")
    platform: Optional[Platform] = Field(None, description="Optional platform tag")


class AdProofCreateRequest(BaseModel):
    """
    Request model for creating an ad proof with its first version.

    ad_data keys depend on the format, e.g. headline/primaryText/imageUrl for
    single_image, cards for carousel, assetGroups for pmax.
    """
    platform: Platform
    ad_format: AdFormat
    ad_data: Dict[str, Any] = Field(..., description="Initial content payload")
    name: Optional[str] = Field(None, description="Optional display name")

    class Config:
        json_schema_extra = {
            "example": {
                "platform": "facebook",
                "ad_format": "single_image",
                "ad_data": {"headline": "Spring Sale", "primaryText": "Up to 30% off"},
                "name": "Spring hero"
            }
        }


class AdProofVersionRequest(BaseModel):
    """Request model for saving edited content as a new version."""
    ad_data: Dict[str, Any] = Field(..., description="Full content payload")


class ClientUpdateRequest(BaseModel):
    """Request model for editing a client. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, description="New client name")
    logo_url: Optional[str] = Field(None, description="New logo URL; empty string clears it")


class CampaignUpdateRequest(BaseModel):
    """Request model for editing a campaign. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, description="New campaign name")
    platform: Optional[Platform] = Field(None, description="New platform tag")


class AdProofUpdateRequest(BaseModel):
    """Request model for renaming an ad proof or changing its status label."""
    name: Optional[str] = Field(None, description="Display name; empty string clears it")
    status: Optional[str] = Field(None, description="Informational status", examples=["pending"])


# ============================================================================
# Public (share link) Requests
# ============================================================================

class ApprovalRequest(BaseModel):
    """Feedback submitted from a share link."""
    version_number: int = Field(..., ge=1, description="Version the feedback applies to")
    decision: str = Field(..., description="'approved' or 'revision'", examples=["approved"])
    comment: str = Field(..., description="Required comment")
    approver_name: str = Field(..., description="Reviewer name")
    approver_email: Optional[str] = Field(None, description="Reviewer email")

    class Config:
        json_schema_extra = {
            "example": {
                "version_number": 1,
                "decision": "approved",
                "comment": "Looks good",
                "approver_name": "Jane",
                "approver_email": "jane@acme.com"
            }
        }


class CommentRequest(BaseModel):
    """Comment on a version, optionally pinned to one content field."""
    version_number: int = Field(..., ge=1, description="Version the comment applies to")
    comment_text: str = Field(..., description="Comment body")
    commenter_name: str = Field(..., description="Reviewer name")
    commenter_email: Optional[str] = Field(None, description="Reviewer email")
    field_name: Optional[str] = Field(None, description="Content field, e.g. headline", examples=["headline"])


# ============================================================================
# Responses
# ============================================================================

class AdProofResponse(BaseModel):
    """An ad proof with its share URL."""
    ad_proof: AdProof
    share_url: str
    warnings: List[str] = Field(
        default_factory=list,
        description="Non-blocking notices such as over-length text"
    )


class CampaignShareResponse(BaseModel):
    campaign_id: str
    share_token: str
    share_url: str


class VersionSummary(BaseModel):
    """Entry for a version selector."""
    version_number: int
    created_at: Optional[datetime] = None


class SharedProofResponse(BaseModel):
    """Public view of one ad proof version."""
    ad_proof_id: str
    name: Optional[str] = None
    platform: Platform
    ad_format: AdFormat
    status: str
    current_version: int
    version: AdProofVersion
    is_current: bool
    campaign_name: Optional[str] = None
    client_name: Optional[str] = None
    client_logo_url: Optional[str] = None


class SharedCampaignProofResponse(BaseModel):
    ad_proof: AdProof
    version: Optional[AdProofVersion] = None
    share_url: str


class SharedCampaignResponse(BaseModel):
    """Public view of a whole campaign."""
    campaign_id: str
    campaign_name: str
    client: Optional[Client] = None
    ad_proofs: List[SharedCampaignProofResponse] = Field(default_factory=list)


class ApprovalListResponse(BaseModel):
    approvals: List[Approval] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(default_factory=datetime.now)
    services: Dict[str, str] = Field(
        default_factory=dict,
        description="Status of dependent services"
    )


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    errors: List[str] = Field(default_factory=list, description="Validation problems, if any")
    timestamp: datetime = Field(default_factory=datetime.now)

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Ad Proof Not Found",
                "detail": "This share link may be invalid or expired.",
                "errors": [],
                "timestamp": "2026-01-18T12:00:00Z"
            }
        }
