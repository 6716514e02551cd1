"""
Share Service - resolve public share links.

A share token is a capability: whoever holds it can read the proof (or the
whole campaign) and leave feedback, without signing in. Tokens never expire;
deleting the proof or campaign is the only revocation.

Links:
    /proof/{share_token}  single ad proof
    /c/{share_token}      whole campaign
"""

import logging
from typing import Optional

from proofdesk.core.config import Config
from proofdesk.core.database import get_supabase_client, run_query
from proofdesk.core.errors import NotFoundError

from .ad_proof_service import AdProofService
from .campaign_service import CampaignService
from .client_service import ClientService
from .models import AdProof, Campaign, SharedCampaign, SharedCampaignProof, SharedProof
from .share_tokens import generate_share_token, is_well_formed

logger = logging.getLogger(__name__)


def proof_share_url(share_token: str) -> str:
    return f"{Config.PUBLIC_BASE_URL.rstrip('/')}/proof/{share_token}"


def campaign_share_url(share_token: str) -> str:
    return f"{Config.PUBLIC_BASE_URL.rstrip('/')}/c/{share_token}"


class ShareService:
    """Service for share-token lookups."""

    def __init__(self, supabase_client=None):
        self._db = supabase_client or get_supabase_client()
        self.ad_proofs = AdProofService(self._db)
        self.campaigns = CampaignService(self._db)
        self.clients = ClientService(self._db)

    def find_proof_by_token(self, share_token: str) -> AdProof:
        """
        Exact, case-sensitive lookup of an ad proof by its share token.

        Raises:
            NotFoundError: If no proof carries this token.
        """
        if not is_well_formed(share_token):
            raise NotFoundError("Ad Proof", share_token)
        result = run_query(
            self._db.table("ad_proofs").select("*").eq("share_token", share_token).limit(1),
            "resolve share link",
        )
        if not result.data:
            raise NotFoundError("Ad Proof", share_token)
        return AdProof.model_validate(result.data[0])

    def resolve_proof_by_token(
        self,
        share_token: str,
        version_number: Optional[int] = None,
    ) -> SharedProof:
        """
        Resolve a /proof/{token} link.

        Args:
            share_token: Token from the link.
            version_number: Historical version to show (default: current).

        Returns:
            SharedProof with the version content and campaign/client display info.

        Raises:
            NotFoundError: Unknown token, a proof without versions, or a missing version.
        """
        proof = self.find_proof_by_token(share_token)
        if version_number is None:
            version = self.ad_proofs.get_current_version(proof)
        else:
            version = self.ad_proofs.get_version(proof.id, version_number)

        campaign = self.campaigns.get_campaign(proof.campaign_id)
        client = self.clients.get_client(campaign.client_id)
        return SharedProof(
            ad_proof=proof,
            version=version,
            campaign_name=campaign.name,
            client_name=client.name,
            client_logo_url=client.logo_url,
        )

    def resolve_campaign_by_token(self, share_token: str) -> SharedCampaign:
        """
        Resolve a /c/{token} link to the campaign and all of its ad proofs.

        Proofs that have no version yet are listed without content.

        Raises:
            NotFoundError: If no campaign carries this token.
        """
        if not is_well_formed(share_token):
            raise NotFoundError("Campaign", share_token)
        result = run_query(
            self._db.table("campaigns").select("*").eq("share_token", share_token).limit(1),
            "resolve campaign share link",
        )
        if not result.data:
            raise NotFoundError("Campaign", share_token)
        campaign = Campaign.model_validate(result.data[0])
        client = self.clients.get_client(campaign.client_id)

        proofs = []
        for proof in self.ad_proofs.list_ad_proofs(campaign.id):
            version = None
            if proof.current_version > 0:
                try:
                    version = self.ad_proofs.get_current_version(proof)
                except NotFoundError:
                    logger.warning(
                        f"Ad proof {proof.id} points at missing version {proof.current_version}"
                    )
            proofs.append(SharedCampaignProof(ad_proof=proof, version=version))

        return SharedCampaign(campaign=campaign, client=client, ad_proofs=proofs)

    def ensure_campaign_share_token(self, campaign_id: str) -> str:
        """Return the campaign's share token, minting one on first share."""
        campaign = self.campaigns.get_campaign(campaign_id)
        if campaign.share_token:
            return campaign.share_token

        token = generate_share_token()
        self.campaigns.set_share_token(campaign_id, token)
        logger.info(f"Campaign {campaign_id} shared")
        return token
