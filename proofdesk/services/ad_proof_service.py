"""
Ad Proof Service - versioned ad content.

Every save inserts a new immutable row in ad_proof_versions and advances
ad_proofs.current_version. Both writes happen inside the
``append_ad_proof_version`` Postgres RPC so concurrent saves cannot hand out
the same version number.

Usage:
    from proofdesk.services.ad_proof_service import AdProofService

    service = AdProofService()
    proof = service.create_ad_proof(campaign_id, "facebook", "single_image",
                                    {"headline": "H", "primaryText": "P"})
    service.append_version(proof.id, {"headline": "H2", "primaryText": "P"})
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Union

from proofdesk.core.database import get_supabase_client, run_query
from proofdesk.core.errors import NotFoundError, ValidationError

from .content import validate_content
from .models import AdFormat, AdProof, AdProofVersion, Platform
from .share_tokens import generate_share_token

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "pending"


class AdProofService:
    """Service for ad proofs and their version history."""

    def __init__(self, supabase_client=None):
        self._db = supabase_client or get_supabase_client()

    # =========================================================================
    # Ad proofs
    # =========================================================================

    def create_ad_proof(
        self,
        campaign_id: str,
        platform: Union[Platform, str],
        ad_format: Union[AdFormat, str],
        ad_data: Dict[str, Any],
        name: Optional[str] = None,
    ) -> AdProof:
        """
        Create an ad proof together with its first version.

        Args:
            campaign_id: Owning campaign UUID.
            platform: Target platform.
            ad_format: Ad format for the platform.
            ad_data: Initial content payload.
            name: Optional display name.

        Returns:
            The created AdProof with current_version == 1.

        Raises:
            ValidationError: If content is missing required fields for
                the (platform, format) combination.
            TransientIOError: If a database write fails.
        """
        validate_content(platform, ad_format, ad_data)
        platform = Platform(platform)
        ad_format = AdFormat(ad_format)

        result = run_query(
            self._db.table("ad_proofs").insert({
                "campaign_id": campaign_id,
                "platform": platform.value,
                "ad_format": ad_format.value,
                "share_token": generate_share_token(),
                "status": DEFAULT_STATUS,
                "current_version": 0,
                "name": name or None,
            }),
            "create ad proof",
        )
        proof = AdProof.model_validate(result.data[0])

        version = self._insert_next_version(proof.id, ad_data)
        logger.info(
            f"Created ad proof {proof.id} ({platform.value}/{ad_format.value}) "
            f"in campaign {campaign_id}"
        )
        return proof.model_copy(update={"current_version": version.version_number})

    def get_ad_proof(self, ad_proof_id: str) -> AdProof:
        """
        Get an ad proof by ID.

        Raises:
            NotFoundError: If no proof has this ID.
        """
        result = run_query(
            self._db.table("ad_proofs").select("*").eq("id", ad_proof_id).limit(1),
            "load ad proof",
        )
        if not result.data:
            raise NotFoundError("Ad proof", ad_proof_id)
        return AdProof.model_validate(result.data[0])

    def list_ad_proofs(self, campaign_id: str) -> List[AdProof]:
        """List a campaign's ad proofs, newest first."""
        result = run_query(
            self._db.table("ad_proofs")
            .select("*")
            .eq("campaign_id", campaign_id)
            .order("created_at", desc=True),
            "list ad proofs",
        )
        return [AdProof.model_validate(row) for row in result.data or []]

    def update_details(
        self,
        ad_proof_id: str,
        name: Optional[str] = None,
        status: Optional[str] = None,
    ) -> AdProof:
        """
        Update display name and/or informational status.

        Content is never changed here; use append_version.
        """
        updates = {}
        if name is not None:
            updates["name"] = name.strip() or None
        if status is not None:
            if not status.strip():
                raise ValidationError(["Status cannot be empty"])
            updates["status"] = status.strip()
        if not updates:
            return self.get_ad_proof(ad_proof_id)

        result = run_query(
            self._db.table("ad_proofs").update(updates).eq("id", ad_proof_id),
            "update ad proof",
        )
        if not result.data:
            raise NotFoundError("Ad proof", ad_proof_id)
        return AdProof.model_validate(result.data[0])

    def delete_ad_proof(self, ad_proof_id: str) -> None:
        """Delete an ad proof; its versions are removed by the database cascade."""
        run_query(
            self._db.table("ad_proofs").delete().eq("id", ad_proof_id),
            "delete ad proof",
        )
        logger.info(f"Deleted ad proof {ad_proof_id}")

    # =========================================================================
    # Versions
    # =========================================================================

    def append_version(self, ad_proof_id: str, ad_data: Dict[str, Any]) -> AdProofVersion:
        """
        Save edited content as the next version of an ad proof.

        Args:
            ad_proof_id: Ad proof UUID.
            ad_data: Full content payload for the new version.

        Returns:
            The inserted AdProofVersion (version_number == old current_version + 1).

        Raises:
            NotFoundError: If the ad proof does not exist.
            ValidationError: If content is invalid for the proof's platform/format.
            TransientIOError: If the RPC fails.
        """
        proof = self.get_ad_proof(ad_proof_id)
        validate_content(proof.platform, proof.ad_format, ad_data)
        version = self._insert_next_version(ad_proof_id, ad_data)
        logger.info(f"Saved version {version.version_number} of ad proof {ad_proof_id}")
        return version

    def list_versions(self, ad_proof_id: str) -> List[AdProofVersion]:
        """All versions of an ad proof, highest version_number first."""
        result = run_query(
            self._db.table("ad_proof_versions")
            .select("*")
            .eq("ad_proof_id", ad_proof_id)
            .order("version_number", desc=True),
            "list versions",
        )
        return [AdProofVersion.model_validate(row) for row in result.data or []]

    def get_version(self, ad_proof_id: str, version_number: int) -> AdProofVersion:
        """
        Get one version of an ad proof.

        Raises:
            NotFoundError: If that version does not exist.
        """
        result = run_query(
            self._db.table("ad_proof_versions")
            .select("*")
            .eq("ad_proof_id", ad_proof_id)
            .eq("version_number", version_number)
            .limit(1),
            "load version",
        )
        if not result.data:
            raise NotFoundError("Version", f"{ad_proof_id} v{version_number}")
        return AdProofVersion.model_validate(result.data[0])

    def get_current_version(self, ad_proof: AdProof) -> AdProofVersion:
        """
        Get the version the proof's current_version pointer refers to.

        Raises:
            NotFoundError: If the proof has no versions yet.
        """
        if ad_proof.current_version < 1:
            raise NotFoundError("Version", f"{ad_proof.id} has no versions")
        return self.get_version(ad_proof.id, ad_proof.current_version)

    def _insert_next_version(self, ad_proof_id: str, ad_data: Dict[str, Any]) -> AdProofVersion:
        result = run_query(
            self._db.rpc(
                "append_ad_proof_version",
                {
                    "p_ad_proof_id": ad_proof_id,
                    "p_ad_data": copy.deepcopy(ad_data),
                },
            ),
            "save version",
        )
        row = result.data[0] if isinstance(result.data, list) else result.data
        return AdProofVersion.model_validate(row)
