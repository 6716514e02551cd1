"""
Client Service - agency clients.

Usage:
    from proofdesk.services.client_service import ClientService

    service = ClientService()
    client = service.create_client("Acme", website="acme.com")
"""

import logging
from typing import List, Optional
from urllib.parse import urlparse

from proofdesk.core.database import get_supabase_client, run_query
from proofdesk.core.errors import NotFoundError, ValidationError

from .models import Client

logger = logging.getLogger(__name__)

LOGO_SERVICE_URL = "https://logo.clearbit.com"


def resolve_logo_url(website: Optional[str]) -> Optional[str]:
    """
    Guess a logo URL from a client's website.

    Examples:
        >>> resolve_logo_url("https://www.acme.com/about")
        'https://logo.clearbit.com/acme.com'
        >>> resolve_logo_url("acme.com")
        'https://logo.clearbit.com/acme.com'

    Returns:
        Logo URL, or None if the website cannot be parsed
    """
    if not website or not website.strip():
        return None
    website = website.strip()
    if not website.startswith("http"):
        website = f"https://{website}"

    hostname = urlparse(website).hostname
    if not hostname or "." not in hostname:
        return None
    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return f"{LOGO_SERVICE_URL}/{hostname}"


class ClientService:
    """Service for agency clients."""

    def __init__(self, supabase_client=None):
        self._db = supabase_client or get_supabase_client()

    def create_client(
        self,
        name: str,
        logo_url: Optional[str] = None,
        website: Optional[str] = None,
    ) -> Client:
        """
        Create a client.

        Args:
            name: Client name (required)
            logo_url: Explicit logo URL (e.g. an uploaded file)
            website: Used to guess a logo when logo_url is not given

        Returns:
            Created Client
        """
        if not name or not name.strip():
            raise ValidationError(["Client name is required"])

        logo_url = logo_url or resolve_logo_url(website)
        result = run_query(
            self._db.table("clients").insert({
                "name": name.strip(),
                "logo_url": logo_url or None,
            }),
            "create client",
        )
        client = Client.model_validate(result.data[0])
        logger.info(f"Created client: {client.name} ({client.id})")
        return client

    def get_client(self, client_id: str) -> Client:
        result = run_query(
            self._db.table("clients").select("*").eq("id", client_id).limit(1),
            "load client",
        )
        if not result.data:
            raise NotFoundError("Client", client_id)
        return Client.model_validate(result.data[0])

    def list_clients(self) -> List[Client]:
        result = run_query(
            self._db.table("clients").select("*").order("name"),
            "list clients",
        )
        return [Client.model_validate(row) for row in result.data or []]

    def update_client(
        self,
        client_id: str,
        name: Optional[str] = None,
        logo_url: Optional[str] = None,
    ) -> Client:
        updates = {}
        if name is not None:
            if not name.strip():
                raise ValidationError(["Client name is required"])
            updates["name"] = name.strip()
        if logo_url is not None:
            updates["logo_url"] = logo_url or None
        if not updates:
            return self.get_client(client_id)

        result = run_query(
            self._db.table("clients").update(updates).eq("id", client_id),
            "update client",
        )
        if not result.data:
            raise NotFoundError("Client", client_id)
        return Client.model_validate(result.data[0])

    def delete_client(self, client_id: str) -> None:
        """Delete a client; campaigns, proofs and versions cascade."""
        run_query(
            self._db.table("clients").delete().eq("id", client_id),
            "delete client",
        )
        logger.info(f"Deleted client {client_id}")
