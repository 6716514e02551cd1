"""
Core module - Database, configuration, and errors
"""

from .database import get_supabase_client
from .config import Config
from .errors import ProofdeskError, ValidationError, NotFoundError, TransientIOError

__all__ = [
    'get_supabase_client',
    'Config',
    'ProofdeskError',
    'ValidationError',
    'NotFoundError',
    'TransientIOError',
]
