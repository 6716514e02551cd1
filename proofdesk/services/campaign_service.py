"""
Campaign Service - groups of ad proofs for a client.
"""

import logging
from typing import List, Optional

from proofdesk.core.database import get_supabase_client, run_query
from proofdesk.core.errors import NotFoundError, ValidationError

from .models import Campaign, Platform

logger = logging.getLogger(__name__)


def _check_platform(platform: Optional[str]) -> Optional[str]:
    if platform is None or platform == "":
        return None
    try:
        return Platform(platform).value
    except ValueError:
        allowed = ", ".join(p.value for p in Platform)
        raise ValidationError([f"Unknown platform '{platform}'. Must be one of: {allowed}"])


class CampaignService:
    """Service for campaigns."""

    def __init__(self, supabase_client=None):
        self._db = supabase_client or get_supabase_client()

    def create_campaign(
        self,
        client_id: str,
        name: str,
        platform: Optional[str] = None,
    ) -> Campaign:
        """
        Create a campaign for a client.

        The campaign has no share token until it is first shared.
        """
        if not name or not name.strip():
            raise ValidationError(["Campaign name is required"])

        result = run_query(
            self._db.table("campaigns").insert({
                "client_id": client_id,
                "name": name.strip(),
                "platform": _check_platform(platform),
            }),
            "create campaign",
        )
        campaign = Campaign.model_validate(result.data[0])
        logger.info(f"Created campaign: {campaign.name} ({campaign.id})")
        return campaign

    def get_campaign(self, campaign_id: str) -> Campaign:
        result = run_query(
            self._db.table("campaigns").select("*").eq("id", campaign_id).limit(1),
            "load campaign",
        )
        if not result.data:
            raise NotFoundError("Campaign", campaign_id)
        return Campaign.model_validate(result.data[0])

    def list_campaigns(self, client_id: Optional[str] = None) -> List[Campaign]:
        """List campaigns, newest first, optionally for one client."""
        query = self._db.table("campaigns").select("*")
        if client_id:
            query = query.eq("client_id", client_id)
        result = run_query(query.order("created_at", desc=True), "list campaigns")
        return [Campaign.model_validate(row) for row in result.data or []]

    def update_campaign(
        self,
        campaign_id: str,
        name: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> Campaign:
        updates = {}
        if name is not None:
            if not name.strip():
                raise ValidationError(["Campaign name is required"])
            updates["name"] = name.strip()
        if platform is not None:
            updates["platform"] = _check_platform(platform)
        if not updates:
            return self.get_campaign(campaign_id)

        result = run_query(
            self._db.table("campaigns").update(updates).eq("id", campaign_id),
            "update campaign",
        )
        if not result.data:
            raise NotFoundError("Campaign", campaign_id)
        return Campaign.model_validate(result.data[0])

    def set_share_token(self, campaign_id: str, share_token: str) -> Campaign:
        result = run_query(
            self._db.table("campaigns")
            .update({"share_token": share_token})
            .eq("id", campaign_id),
            "store campaign share token",
        )
        if not result.data:
            raise NotFoundError("Campaign", campaign_id)
        return Campaign.model_validate(result.data[0])

    def delete_campaign(self, campaign_id: str) -> None:
        """Delete a campaign; its ad proofs and versions cascade."""
        run_query(
            self._db.table("campaigns").delete().eq("id", campaign_id),
            "delete campaign",
        )
        logger.info(f"Deleted campaign {campaign_id}")
