"""
Upload archive: permanent copies of uploaded documents.

Uploads land in a local directory unless an S3 bucket is configured.
"""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Optional, Protocol

from rfp_slides.core.errors import StorageUnavailable
from rfp_slides.storage.s3 import S3Service, get_s3_service

logger = logging.getLogger(__name__)


class UploadArchive(Protocol):
    async def initialize(self) -> None: ...

    async def store(self, source: Path, saved_filename: str) -> str:
        """Copy ``source`` under ``saved_filename``; return its location."""
        ...

    async def remove(self, saved_filename: str) -> None: ...


class LocalUploadArchive:
    """Archive into a directory on the local filesystem."""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    async def initialize(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    async def store(self, source: Path, saved_filename: str) -> str:
        target = self.directory / saved_filename
        try:
            await asyncio.to_thread(shutil.copyfile, source, target)
        except OSError as e:
            raise StorageUnavailable("Failed to archive upload", str(e)) from e
        return str(target)

    async def remove(self, saved_filename: str) -> None:
        (self.directory / saved_filename).unlink(missing_ok=True)


class S3UploadArchive:
    """Archive into an S3 bucket, keyed by the stored filename."""

    def __init__(self, s3: Optional[S3Service] = None):
        self.s3 = s3 or get_s3_service()

    async def initialize(self) -> None:
        await self.s3.initialize()

    async def store(self, source: Path, saved_filename: str) -> str:
        return await self.s3.upload_file(source, saved_filename)

    async def remove(self, saved_filename: str) -> None:
        await self.s3.delete_file(saved_filename)
