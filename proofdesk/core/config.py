"""
Configuration management for Proofdesk
"""

import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration"""

    # Supabase
    SUPABASE_URL: str = os.getenv('SUPABASE_URL', '')
    SUPABASE_SERVICE_KEY: str = os.getenv('SUPABASE_SERVICE_KEY', '')

    # Storage
    STORAGE_BUCKET: str = os.getenv('STORAGE_BUCKET', 'ad-media')

    # Email (Resend)
    RESEND_API_KEY: str = os.getenv('RESEND_API_KEY', '')
    EMAIL_FROM: str = os.getenv('EMAIL_FROM', 'Ad Proofs <onboarding@resend.dev>')
    AGENCY_NOTIFICATION_EMAIL: str = os.getenv('AGENCY_NOTIFICATION_EMAIL', '')

    # Share links
    PUBLIC_BASE_URL: str = os.getenv('PUBLIC_BASE_URL', 'http://localhost:8000')
    SHARE_TOKEN_LENGTH: int = int(os.getenv('SHARE_TOKEN_LENGTH', '16'))

    # Editor
    AUTOSAVE_INTERVAL_SECONDS: float = float(os.getenv('AUTOSAVE_INTERVAL_SECONDS', '180'))

    # API
    APPROVAL_RATE_LIMIT: str = os.getenv('APPROVAL_RATE_LIMIT', '10/minute')
    CORS_ORIGINS: str = os.getenv('CORS_ORIGINS', '*')

    @classmethod
    def validate(cls) -> bool:
        """Validate required configuration"""
        required = {
            'SUPABASE_URL': cls.SUPABASE_URL,
            'SUPABASE_SERVICE_KEY': cls.SUPABASE_SERVICE_KEY,
        }

        missing = [k for k, v in required.items() if not v]

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return True

    @classmethod
    def get(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get configuration value"""
        return getattr(cls, key, default)
