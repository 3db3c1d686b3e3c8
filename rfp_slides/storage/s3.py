"""
S3 Service - Async wrapper for S3 file storage operations.

Keeps permanent copies of uploaded documents.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from rfp_slides.core.config import get_settings
from rfp_slides.core.errors import StorageUnavailable

logger = logging.getLogger(__name__)

# Global singleton
_s3_service_instance = None


def get_s3_service() -> 'S3Service':
    """Get singleton instance of S3Service."""
    global _s3_service_instance
    if _s3_service_instance is None:
        _s3_service_instance = S3Service()
    return _s3_service_instance


class S3Service:
    """
    S3 service for upload archival.

    Objects are keyed by the caller-supplied stored filename.
    """

    def __init__(self):
        self.session = None
        self.bucket_name: Optional[str] = None
        self._initialized = False

    async def initialize(
        self,
        bucket_name: Optional[str] = None,
        region_name: Optional[str] = None
    ):
        """
        Initialize S3 session.

        Credentials come from the standard AWS environment variables.

        Args:
            bucket_name: S3 bucket name (defaults to env S3_BUCKET_NAME)
            region_name: AWS region (defaults to env AWS_REGION or us-east-1)
        """
        if self._initialized:
            logger.debug("S3 already initialized")
            return

        self.bucket_name = bucket_name or get_settings().s3_bucket_name
        if not self.bucket_name:
            raise ValueError("S3 bucket name is required")

        region_name = region_name or os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1"

        try:
            self.session = aioboto3.Session(region_name=region_name)

            # Verify bucket exists
            async with self.session.client('s3') as client:
                await client.head_bucket(Bucket=self.bucket_name)

            self._initialized = True
            logger.info(f"S3 initialized: bucket={self.bucket_name}")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 initialization failed: {e}")
            raise StorageUnavailable("Upload archive unavailable", str(e)) from e

    def url_for(self, s3_key: str) -> str:
        return f"s3://{self.bucket_name}/{s3_key}"

    async def upload_file(
        self,
        file_path: Path,
        s3_key: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> str:
        """
        Upload a local file to S3.

        Args:
            file_path: Local file path
            s3_key: Destination object key
            metadata: Optional object metadata

        Returns:
            s3:// URL of the uploaded object
        """
        if not self._initialized:
            raise RuntimeError("S3 not initialized")

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        extra_args = {}
        if metadata:
            extra_args['Metadata'] = metadata

        try:
            async with self.session.client('s3') as client:
                await client.upload_file(
                    str(file_path),
                    self.bucket_name,
                    s3_key,
                    ExtraArgs=extra_args
                )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Upload failed: {e}")
            raise StorageUnavailable("Failed to archive upload", str(e)) from e

        logger.info(f"Uploaded file: {file_path.name} -> {s3_key}")
        return self.url_for(s3_key)

    async def delete_file(self, s3_key: str) -> bool:
        """
        Delete a file from S3.

        Args:
            s3_key: S3 object key

        Returns:
            True if deleted
        """
        if not self._initialized:
            raise RuntimeError("S3 not initialized")

        try:
            async with self.session.client('s3') as client:
                await client.delete_object(
                    Bucket=self.bucket_name,
                    Key=s3_key
                )
            logger.info(f"Deleted file: {s3_key}")
            return True
        except ClientError as e:
            logger.error(f"Delete failed: {e}")
            return False
