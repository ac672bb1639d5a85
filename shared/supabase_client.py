"""
Supabase client singleton for database and storage operations.
"""

import os
import logging
from typing import Optional
from supabase import create_client, Client
from .config import get_signed_url_expiry

logger = logging.getLogger(__name__)

# Singleton instance
_supabase_client: Optional[Client] = None


def get_supabase_url() -> str:
    """Get the Supabase URL from environment variables."""
    url = os.environ.get("SUPABASE_URL")
    if not url:
        raise ValueError("SUPABASE_URL environment variable not set")
    return url


def get_supabase_service_key() -> str:
    """Get the Supabase service key from environment variables."""
    key = os.environ.get("SUPABASE_SERVICE_KEY")
    if not key:
        raise ValueError("SUPABASE_SERVICE_KEY environment variable not set")
    return key


def get_storage_bucket() -> str:
    """Get the Supabase storage bucket name from environment variables."""
    return os.environ.get("SUPABASE_STORAGE_BUCKET", "twin-files")


def get_supabase_client() -> Client:
    """
    Get the Supabase client singleton.
    Uses service role key for full database access.

    Returns:
        Supabase Client instance
    """
    global _supabase_client

    if _supabase_client is None:
        url = get_supabase_url()
        key = get_supabase_service_key()
        _supabase_client = create_client(url, key)
        logger.info("Supabase client initialized")

    return _supabase_client


class SupabaseService:
    """
    Base service class for Supabase operations.
    Provides common database and storage utilities.
    """

    def __init__(self, client: Optional[Client] = None, storage_bucket: Optional[str] = None):
        self.client = client or get_supabase_client()
        self.storage_bucket = storage_bucket or get_storage_bucket()

    @property
    def storage(self):
        """Get the storage client."""
        return self.client.storage

    def table(self, table_name: str):
        """Get a table reference for queries."""
        return self.client.table(table_name)

    async def upload_file(self, path: str, file_data: bytes, content_type: str) -> str:
        """
        Upload a file to Supabase Storage, replacing an existing object.

        Args:
            path: Storage path (e.g., "twin_id/photos/filename")
            file_data: File content as bytes
            content_type: MIME type of the file

        Returns:
            Signed URL of the uploaded file
        """
        bucket = self.storage.from_(self.storage_bucket)
        try:
            bucket.upload(path, file_data, {"content-type": content_type})
        except Exception as e:
            if "already exists" not in str(e).lower():
                logger.error(f"Error uploading file {path}: {str(e)}")
                raise
            logger.info(f"Replacing existing object at {path}")
            bucket.update(path, file_data, {"content-type": content_type})

        return await self.get_signed_url(path)

    async def delete_file(self, path: str) -> bool:
        """
        Delete a file from Supabase Storage.

        Args:
            path: Storage path of the file to delete

        Returns:
            True if successful
        """
        try:
            self.storage.from_(self.storage_bucket).remove([path])
            return True
        except Exception as e:
            logger.error(f"Error deleting file {path}: {str(e)}")
            raise

    async def get_signed_url(self, path: str, expires_in: Optional[int] = None) -> str:
        """
        Get a signed URL for a file in storage.

        Args:
            path: Storage path of the file
            expires_in: URL validity in seconds (default: SIGNED_URL_EXPIRY_SECONDS)

        Returns:
            Signed URL for the file
        """
        try:
            result = self.storage.from_(self.storage_bucket).create_signed_url(
                path, expires_in or get_signed_url_expiry()
            )
            return result.get("signedURL", "")
        except Exception as e:
            logger.error(f"Error getting signed URL: {str(e)}")
            raise

    async def try_signed_url(self, path: Optional[str]) -> Optional[str]:
        """Signed URL for listings, where one broken object must not fail the page."""
        if not path:
            return None
        try:
            return await self.get_signed_url(path)
        except Exception as e:
            logger.warning(f"Failed to generate signed URL for {path}: {str(e)}")
            return None
