"""
Services layer for Proofdesk.

Each service wraps one group of Supabase tables; business rules
(content validation, version numbering, feedback checks) live here.
"""

from .models import (
    Platform,
    AdFormat,
    Decision,
    Client,
    Campaign,
    AdProof,
    AdProofVersion,
    Approval,
    Comment,
    SharedProof,
    SharedCampaign,
    SharedCampaignProof,
)
from .content import validate_content, character_warnings
from .ad_proof_service import AdProofService
from .approval_service import ApprovalService
from .campaign_service import CampaignService
from .client_service import ClientService
from .share_service import ShareService
from .storage_service import StorageService

__all__ = [
    "Platform",
    "AdFormat",
    "Decision",
    "Client",
    "Campaign",
    "AdProof",
    "AdProofVersion",
    "Approval",
    "Comment",
    "SharedProof",
    "SharedCampaign",
    "SharedCampaignProof",
    "validate_content",
    "character_warnings",
    # Services
    "AdProofService",
    "ApprovalService",
    "CampaignService",
    "ClientService",
    "ShareService",
    "StorageService",
]
