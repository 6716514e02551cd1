"""
Error taxonomy shared by services, the API and the CLI.
"""

from typing import List, Optional


class ProofdeskError(Exception):
    """Base class for all Proofdesk errors."""


class ValidationError(ProofdeskError):
    """Raised when user-supplied data is incomplete or malformed.

    Recoverable: the caller fixes the input and tries again.
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Validation failed")


class NotFoundError(ProofdeskError):
    """Raised when a share token, ad proof or version does not exist."""

    def __init__(self, resource: str, key: Optional[str] = None):
        self.resource = resource
        self.key = key
        message = f"{resource} not found" if key is None else f"{resource} not found: {key}"
        super().__init__(message)


class TransientIOError(ProofdeskError):
    """Raised when a persistence or storage call fails.

    The caller keeps its in-memory state so the user can retry.
    """
