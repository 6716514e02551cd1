"""
Share token generation and shape checks.

Possession of a token grants read + feedback access to a proof or campaign,
so tokens come from the ``secrets`` CSPRNG.
"""

import secrets
import string
from typing import Optional

from ..core.config import Config

TOKEN_ALPHABET = string.ascii_letters + string.digits


def generate_share_token(length: Optional[int] = None) -> str:
    """Return a random alphanumeric token."""
    length = length or Config.SHARE_TOKEN_LENGTH
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def is_well_formed(token: Optional[str]) -> bool:
    """True if the token could have been issued by generate_share_token."""
    return bool(token) and all(ch in TOKEN_ALPHABET for ch in token)
