"""
Storage Service - ad media and client logos in Supabase Storage.

Paths inside the bucket:
    {campaign_id}/{share_token}/{filename}   ad media
    client-logos/{uuid}.{ext}                client logos

Public URLs are returned as soon as the upload finishes.
"""

import logging
import mimetypes
import uuid
from pathlib import PurePosixPath
from typing import Optional

from proofdesk.core.config import Config
from proofdesk.core.database import get_supabase_client
from proofdesk.core.errors import TransientIOError, ValidationError

logger = logging.getLogger(__name__)


class StorageService:
    """Service for uploading ad media."""

    def __init__(self, supabase_client=None, bucket: Optional[str] = None):
        self._db = supabase_client or get_supabase_client()
        self.bucket = bucket or Config.STORAGE_BUCKET

    @staticmethod
    def ad_media_path(campaign_id: str, share_token: str, filename: str) -> str:
        name = PurePosixPath(filename).name
        if not name:
            raise ValidationError(["File name is required"])
        return f"{campaign_id}/{share_token}/{name}"

    def upload_ad_media(
        self,
        campaign_id: str,
        share_token: str,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload an image or video for an ad proof.

        Returns:
            Public URL of the uploaded file
        """
        path = self.ad_media_path(campaign_id, share_token, filename)
        return self._upload(path, data, content_type)

    def upload_client_logo(
        self,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Upload a client logo under a random name; returns its public URL."""
        ext = PurePosixPath(filename).suffix.lstrip(".") or "png"
        path = f"client-logos/{uuid.uuid4()}.{ext}"
        return self._upload(path, data, content_type or mimetypes.guess_type(filename)[0])

    def _upload(self, path: str, data: bytes, content_type: Optional[str]) -> str:
        content_type = content_type or mimetypes.guess_type(path)[0] or "application/octet-stream"
        bucket = self._db.storage.from_(self.bucket)
        try:
            bucket.upload(path, data, {"content-type": content_type})
            url = bucket.get_public_url(path)
        except Exception as e:
            logger.error(f"Upload failed for {self.bucket}/{path}: {e}")
            raise TransientIOError(f"Failed to upload {path}: {e}") from e

        logger.info(f"Uploaded {self.bucket}/{path}")
        return url
