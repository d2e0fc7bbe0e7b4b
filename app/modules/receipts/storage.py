from supabase import Client
from app.config import settings
from typing import Optional, Tuple
import time
import logging

logger = logging.getLogger(__name__)


class ReceiptStorage:
    """Receipt images in the Supabase Storage bucket (public read, owner write)."""

    def __init__(self, supabase: Client, bucket_name: Optional[str] = None):
        self.supabase = supabase
        self.bucket_name = bucket_name or settings.receipts_bucket

    @property
    def _bucket(self):
        return self.supabase.storage.from_(self.bucket_name)

    def build_path(self, user_id: str) -> str:
        return f"{user_id}/{int(time.time() * 1000)}.jpg"

    def upload_file(self, file_content: bytes, key: str, content_type: str = "image/jpeg") -> str:
        """Upload file to the bucket and return its public URL"""
        try:
            self._bucket.upload(
                key,
                file_content,
                {"content-type": content_type, "upsert": "true"},
            )
        except Exception as e:
            logger.error(f"Failed to upload receipt to storage: {str(e)}")
            raise
        return self._bucket.get_public_url(key)

    def upload_receipt(self, user_id: str, file_content: bytes) -> Tuple[str, str]:
        key = self.build_path(user_id)
        return key, self.upload_file(file_content, key)

    def delete_file(self, key: str) -> bool:
        """Delete file from the bucket"""
        try:
            self._bucket.remove([key])
            return True
        except Exception as e:
            logger.warning("Failed to delete receipt from storage (%s): %s", key, e)
            return False

    def path_from_public_url(self, url: Optional[str]) -> Optional[str]:
        """Object key for a public URL of this bucket, None for foreign URLs."""
        if not url:
            return None
        marker = f"/object/public/{self.bucket_name}/"
        if marker not in url:
            return None
        key = url.split(marker, 1)[1].split("?", 1)[0]
        return key or None
