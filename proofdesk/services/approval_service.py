"""
Approval Service - append-only client feedback.

Approvals and comments are pinned to an (ad proof, version number) pair and
are never updated or deleted. Several approvals for the same version are all
kept as historical facts; no "final" status is derived from them.

Submitting an approval emails the agency in the background. The email is
best-effort: its failure is logged and never fails the submission.
"""

import asyncio
import logging
from typing import List, Optional, Set

from proofdesk.core.database import get_supabase_client, run_query
from proofdesk.core.errors import ValidationError

from .ad_proof_service import AdProofService
from .campaign_service import CampaignService
from .client_service import ClientService
from .email_service import ApprovalEmailContent, EmailService
from .models import AdProof, Approval, Comment, Decision
from .share_service import proof_share_url

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


class ApprovalService:
    """Service for approvals and comments."""

    def __init__(self, supabase_client=None, email_service: Optional[EmailService] = None):
        self._db = supabase_client or get_supabase_client()
        self.ad_proofs = AdProofService(self._db)
        self._email_service = email_service
        self._pending: Set[asyncio.Task] = set()

    @property
    def email_service(self) -> EmailService:
        if self._email_service is None:
            self._email_service = EmailService()
        return self._email_service

    # =========================================================================
    # Approvals
    # =========================================================================

    async def submit_approval(
        self,
        ad_proof_id: str,
        version_number: int,
        decision: str,
        comment: str,
        approver_name: str,
        approver_email: Optional[str] = None,
    ) -> Approval:
        """
        Record a client's decision on one version of an ad proof.

        Args:
            ad_proof_id: Ad proof UUID.
            version_number: Version the feedback applies to (may be older than current).
            decision: 'approved', 'revision' or 'revision-requested'.
            comment: Required free-text comment.
            approver_name: Required reviewer name.
            approver_email: Optional reviewer email.

        Returns:
            The stored Approval.

        Raises:
            ValidationError: Blank name/comment, unknown decision, or a version
                outside 1..current_version.
            NotFoundError: If the ad proof does not exist.
            TransientIOError: If the insert fails.
        """
        errors = []
        if _blank(approver_name):
            errors.append("Approver name is required")
        if _blank(comment):
            errors.append("Comment is required")
        parsed = Decision.parse(decision)
        if parsed is None:
            errors.append(f"Invalid decision '{decision}'. Must be 'approved' or 'revision'")
        if errors:
            raise ValidationError(errors)

        proof = self.ad_proofs.get_ad_proof(ad_proof_id)
        self._check_version(proof, version_number)

        result = run_query(
            self._db.table("approvals").insert({
                "ad_proof_id": ad_proof_id,
                "version_number": version_number,
                "decision": parsed.value,
                "comment": comment.strip(),
                "approver_name": approver_name.strip(),
                "approver_email": (approver_email or "").strip() or None,
            }),
            "submit approval",
        )
        approval = Approval.model_validate(result.data[0])
        logger.info(
            f"Approval recorded: proof={ad_proof_id} v{version_number} "
            f"decision={parsed.value} by {approval.approver_name}"
        )

        self._schedule_notification(proof, approval)
        return approval

    def list_approvals(self, ad_proof_id: str) -> List[Approval]:
        """All approvals for an ad proof, newest first."""
        result = run_query(
            self._db.table("approvals")
            .select("*")
            .eq("ad_proof_id", ad_proof_id)
            .order("created_at", desc=True),
            "list approvals",
        )
        return [Approval.model_validate(row) for row in result.data or []]

    def list_approvals_by_share_token(self, share_token: str) -> List[Approval]:
        """Approval history for the proof behind a share token, newest first."""
        result = run_query(
            self._db.rpc("get_approvals_by_share_token", {"p_share_token": share_token}),
            "list approvals",
        )
        return [Approval.model_validate(row) for row in result.data or []]

    # =========================================================================
    # Comments
    # =========================================================================

    def add_comment(
        self,
        ad_proof_id: str,
        version_number: int,
        commenter_name: str,
        comment_text: str,
        comment_type: str = "general",
        field_name: Optional[str] = None,
        commenter_email: Optional[str] = None,
    ) -> Comment:
        """Attach a comment to a version, optionally to one content field."""
        errors = []
        if _blank(commenter_name):
            errors.append("Commenter name is required")
        if _blank(comment_text):
            errors.append("Comment is required")
        if errors:
            raise ValidationError(errors)

        proof = self.ad_proofs.get_ad_proof(ad_proof_id)
        self._check_version(proof, version_number)

        result = run_query(
            self._db.table("comments").insert({
                "ad_proof_id": ad_proof_id,
                "version_number": version_number,
                "commenter_name": commenter_name.strip(),
                "commenter_email": (commenter_email or "").strip() or None,
                "comment_text": comment_text.strip(),
                "comment_type": comment_type,
                "field_name": field_name or None,
            }),
            "add comment",
        )
        return Comment.model_validate(result.data[0])

    def list_comments(
        self,
        ad_proof_id: str,
        version_number: Optional[int] = None,
    ) -> List[Comment]:
        """Comments for an ad proof (optionally one version), oldest first."""
        query = self._db.table("comments").select("*").eq("ad_proof_id", ad_proof_id)
        if version_number is not None:
            query = query.eq("version_number", version_number)
        result = run_query(query.order("created_at"), "list comments")
        return [Comment.model_validate(row) for row in result.data or []]

    # =========================================================================
    # Notification
    # =========================================================================

    async def wait_for_notifications(self) -> None:
        """Wait for any notification emails still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @staticmethod
    def _check_version(proof: AdProof, version_number: int) -> None:
        if not isinstance(version_number, int) or not 1 <= version_number <= proof.current_version:
            raise ValidationError([
                f"Version {version_number} does not exist "
                f"(latest is {proof.current_version})"
            ])

    def _schedule_notification(self, proof: AdProof, approval: Approval) -> None:
        task = asyncio.get_running_loop().create_task(self._notify(proof, approval))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _notify(self, proof: AdProof, approval: Approval) -> None:
        try:
            campaign = CampaignService(self._db).get_campaign(proof.campaign_id)
            client = ClientService(self._db).get_client(campaign.client_id)
            result = await self.email_service.send_approval_notification(
                ApprovalEmailContent(
                    client_name=client.name,
                    campaign_name=campaign.name,
                    approver_name=approval.approver_name,
                    decision=approval.decision,
                    comment=approval.comment,
                    version_number=approval.version_number,
                    proof_url=proof_share_url(proof.share_token),
                )
            )
            if not result.success:
                logger.warning(f"Approval notification not sent for {approval.id}: {result.error}")
        except Exception as e:
            logger.error(f"Approval notification failed for {approval.id}: {e}")
