"""
Supabase Storage helper functions for file uploads.

Handles all interactions with Supabase Storage buckets:
- portfolio-optimized: Public WebP images served by the site
- portfolio-originals: Untouched uploads kept for re-processing
"""

from typing import Optional

from supabase import Client

from portfolio_upload.core.config import settings
from portfolio_upload.core.errors import StorageWriteFailed
from portfolio_upload.core.logger import logger
from portfolio_upload.core.supabase_client import get_supabase


class StorageManager:
    """Handles file uploads to Supabase Storage buckets."""

    BUCKET_OPTIMIZED = settings.BUCKET_OPTIMIZED
    BUCKET_ORIGINALS = settings.BUCKET_ORIGINALS

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    def get_public_url(self, bucket: str, file_path: str) -> str:
        """
        Get the public URL for a file in storage.

        Args:
            bucket: Bucket name
            file_path: File path within bucket

        Returns:
            Public URL to access the file
        """
        return self.client.storage.from_(bucket).get_public_url(file_path)

    def upload_file(
        self,
        bucket: str,
        file_path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        target: str = "optimized",
    ) -> str:
        """
        Upload a file to Supabase Storage.

        Args:
            bucket: Bucket name
            file_path: Destination path within bucket
            data: File contents
            content_type: MIME type of the file
            target: Which artifact is being written (optimized or original)

        Returns:
            Public URL of the uploaded file

        Raises:
            StorageWriteFailed: If upload fails
        """
        client = self.client

        try:
            client.storage.from_(bucket).upload(
                path=file_path,
                file=data,
                file_options={"content-type": content_type, "upsert": "true"},
            )
            public_url = self.get_public_url(bucket, file_path)
        except Exception as e:
            logger.error(f"Failed to upload file to {bucket}/{file_path}: {str(e)}")
            raise StorageWriteFailed(target, f"Failed to upload {target} image: {str(e)}") from e

        logger.info(f"Uploaded file to {bucket}/{file_path}")
        return public_url

    def delete_file(self, bucket: str, file_path: str, target: str = "optimized"):
        """Remove a file from a bucket."""
        client = self.client

        try:
            client.storage.from_(bucket).remove([file_path])
        except Exception as e:
            logger.error(f"Failed to delete {bucket}/{file_path}: {str(e)}")
            raise StorageWriteFailed(target, f"Failed to delete {file_path}: {str(e)}") from e

        logger.info(f"Deleted file {bucket}/{file_path}")
