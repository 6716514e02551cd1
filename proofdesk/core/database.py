"""
Database client and utilities
"""

import logging
from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import create_client, Client

from .config import Config
from .errors import TransientIOError

logger = logging.getLogger(__name__)

_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get or create Supabase client (singleton pattern)

    Returns:
        Supabase client instance
    """
    global _supabase_client

    if _supabase_client is None:
        Config.validate()
        _supabase_client = create_client(
            Config.SUPABASE_URL,
            Config.SUPABASE_SERVICE_KEY
        )

    return _supabase_client


def reset_supabase_client():
    """Reset the Supabase client (useful for testing)"""
    global _supabase_client
    _supabase_client = None


def run_query(query: Any, action: str) -> Any:
    """
    Execute a PostgREST query or RPC builder.

    Args:
        query: Any builder exposing ``execute()``
        action: Short description used in logs and error messages

    Returns:
        The API response (``.data`` holds the rows)

    Raises:
        TransientIOError: If the database or the transport rejects the call
    """
    try:
        return query.execute()
    except (APIError, httpx.HTTPError) as e:
        logger.error(f"Database call failed ({action}): {e}")
        raise TransientIOError(f"Failed to {action}: {e}") from e
