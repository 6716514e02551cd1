"""
EmailService - Send emails using Resend API.

Sends the agency an email whenever a client approves a version or asks for
a revision.
"""

import html
import logging
from dataclasses import dataclass
from typing import Optional

import resend

from ..core.config import Config
from .models import Decision

logger = logging.getLogger(__name__)


@dataclass
class EmailResult:
    """Result of an email send operation."""
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ApprovalEmailContent:
    """Content for an approval notification email."""
    client_name: str
    campaign_name: str
    approver_name: str
    decision: Decision
    comment: str
    version_number: Optional[int] = None
    proof_url: Optional[str] = None


class EmailService:
    """
    Service for sending emails via Resend API.

    Example:
        >>> service = EmailService()
        >>> result = await service.send_approval_notification(
        ...     ApprovalEmailContent(
        ...         client_name="Acme Inc",
        ...         campaign_name="Spring Launch",
        ...         approver_name="Jane",
        ...         decision=Decision.APPROVED,
        ...         comment="Looks good",
        ...     )
        ... )
        >>> print(result.success)
        True
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        agency_email: Optional[str] = None,
    ):
        """
        Initialize EmailService.

        Args:
            api_key: Resend API key (if None, uses Config.RESEND_API_KEY)
            from_email: Sender (if None, uses Config.EMAIL_FROM)
            agency_email: Notification recipient (if None, uses Config.AGENCY_NOTIFICATION_EMAIL)
        """
        self.api_key = api_key or Config.RESEND_API_KEY
        if not self.api_key:
            logger.warning("RESEND_API_KEY not found - EmailService will be disabled")
            self._enabled = False
        else:
            self._enabled = True
            resend.api_key = self.api_key

        self.from_email = from_email or Config.EMAIL_FROM
        self.agency_email = agency_email or Config.AGENCY_NOTIFICATION_EMAIL

        logger.info(f"EmailService initialized (enabled={self._enabled}, from={self.from_email})")

    @property
    def enabled(self) -> bool:
        """Check if email service is enabled (has valid API key)."""
        return self._enabled

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None
    ) -> EmailResult:
        """
        Send a basic email.

        Returns:
            EmailResult with success status and message ID or error
        """
        if not self._enabled:
            return EmailResult(
                success=False,
                error="EmailService is disabled - RESEND_API_KEY not configured"
            )

        try:
            logger.info(f"Sending email to {to_email}: {subject}")

            params = {
                "from": self.from_email,
                "to": [to_email],
                "subject": subject,
                "html": html_body,
            }

            if text_body:
                params["text"] = text_body

            response = resend.Emails.send(params)

            message_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)

            logger.info(f"Email sent successfully: {message_id}")
            return EmailResult(success=True, message_id=message_id)

        except Exception as e:
            error_msg = str(e)
            logger.error(f"Failed to send email: {error_msg}")
            return EmailResult(success=False, error=error_msg)

    async def send_approval_notification(self, content: ApprovalEmailContent) -> EmailResult:
        """Email the agency about a new approval or revision request."""
        if not self.agency_email:
            return EmailResult(
                success=False,
                error="AGENCY_NOTIFICATION_EMAIL not configured"
            )

        approved = content.decision == Decision.APPROVED
        label = "✅ Approval" if approved else "📝 Revision Request"
        subject = f"{label} - {content.client_name} / {content.campaign_name}"

        return await self.send_email(
            to_email=self.agency_email,
            subject=subject,
            html_body=self._build_approval_html(content),
            text_body=self._build_approval_text(content),
        )

    def _build_approval_html(self, content: ApprovalEmailContent) -> str:
        """Build HTML email body for an approval notification."""
        approved = content.decision == Decision.APPROVED
        heading = "Approval" if approved else "Revision Request"
        status = "Approved ✅" if approved else "Revision Requested 📝"

        version_row = ""
        if content.version_number is not None:
            version_row = f"<p><strong>Version:</strong> {content.version_number}</p>"

        link_section = ""
        if content.proof_url:
            link_section = f"""
            <p style="margin: 20px 0;">
                <a href="{html.escape(content.proof_url)}" style="color: #007bff;">View ad proof</a>
            </p>
            """

        return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #333;">New {heading}</h2>
            <div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
                <p><strong>Client:</strong> {html.escape(content.client_name)}</p>
                <p><strong>Campaign:</strong> {html.escape(content.campaign_name)}</p>
                <p><strong>Submitted by:</strong> {html.escape(content.approver_name)}</p>
                {version_row}
                <p><strong>Status:</strong> {status}</p>
            </div>
            <div style="margin: 20px 0;">
                <h3 style="color: #666;">Comment:</h3>
                <p style="background-color: #fff; padding: 15px; border-left: 4px solid #007bff; border-radius: 4px;">
                    {html.escape(content.comment)}
                </p>
            </div>
            {link_section}
            <p style="color: #999; font-size: 12px; margin-top: 30px;">
                This is an automated notification from your Ad Proof system.
            </p>
        </div>
        """

    def _build_approval_text(self, content: ApprovalEmailContent) -> str:
        """Build plain text email body for an approval notification."""
        approved = content.decision == Decision.APPROVED
        lines = [
            f"New {'Approval' if approved else 'Revision Request'}",
            "",
            f"Client: {content.client_name}",
            f"Campaign: {content.campaign_name}",
            f"Submitted by: {content.approver_name}",
        ]
        if content.version_number is not None:
            lines.append(f"Version: {content.version_number}")
        lines.extend([
            f"Status: {'Approved' if approved else 'Revision Requested'}",
            "",
            "Comment:",
            content.comment,
        ])
        if content.proof_url:
            lines.extend(["", f"View ad proof: {content.proof_url}"])
        return "\n".join(lines)
