"""
Document Ingestion Service

Handles upload of RFP documents and brand guides:
validate, stage to a temp file, extract text, archive the upload, store.
"""

import logging
import os
import re
import tempfile
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Optional

from rfp_slides.core.errors import (
    ExtractionFailed,
    SlideServiceError,
    UnsupportedMediaType,
    ValidationError,
)
from rfp_slides.core.extraction import ContentExtractor
from rfp_slides.storage.archive import UploadArchive
from rfp_slides.storage.base import DocumentStore
from rfp_slides.utils.schemas import (
    BrandGuide,
    DocumentType,
    RFPDocument,
    UploadResult,
)

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
PDF_SUFFIX = ".pdf"


def timestamp_prefix(now: Optional[datetime] = None) -> str:
    """UTC timestamp like 2024-05-01T10-20-30-123Z, safe inside filenames."""
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
    return re.sub(r"[:.]", "-", stamp)


def brand_name_from_filename(filename: str) -> str:
    return re.sub(r"\.pdf$", "", filename, flags=re.IGNORECASE)


def is_pdf(filename: str, content_type: Optional[str]) -> bool:
    return content_type == PDF_MIME_TYPE or Path(filename).suffix.lower() == PDF_SUFFIX


def parse_document_type(value: Optional[str]) -> DocumentType:
    if not value:
        return DocumentType.RFP
    try:
        return DocumentType(value)
    except ValueError:
        raise ValidationError(
            f"Invalid documentType {value!r}; expected 'rfp' or 'brand-guide'"
        ) from None


def check_upload_size(size: int, max_upload_bytes: int) -> None:
    if size > max_upload_bytes:
        raise ValidationError(
            f"File too large; limit is {max_upload_bytes // (1024 * 1024)}MB"
        )


@asynccontextmanager
async def staged_upload(data: bytes, suffix: str = PDF_SUFFIX) -> AsyncIterator[Path]:
    """Write upload bytes to a temp file, removed on every exit path."""
    fd, path = tempfile.mkstemp(suffix=suffix)
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
        yield Path(path)
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass


class DocumentIngestionService:
    """
    Service for ingesting uploaded PDFs into the document store.

    Workflow:
    1. Validate file name, media type, size and document type
    2. Stage the bytes in a temp file
    3. Extract text and page count
    4. Archive the uploaded file under a timestamp-prefixed name
    5. Store RFPDocument or BrandGuide (archive rolled back on failure)
    """

    def __init__(
        self,
        store: DocumentStore,
        archive: UploadArchive,
        extractor: ContentExtractor,
        max_upload_bytes: int = 50 * 1024 * 1024,
    ):
        self.store = store
        self.archive = archive
        self.extractor = extractor
        self.max_upload_bytes = max_upload_bytes

    def _validate(self, filename: Optional[str], content_type: Optional[str], data: Optional[bytes]) -> None:
        if not filename or data is None:
            raise ValidationError("No file uploaded")
        if not is_pdf(filename, content_type):
            raise UnsupportedMediaType("Only PDF files are allowed!")
        check_upload_size(len(data), self.max_upload_bytes)

    async def ingest_upload(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        data: Optional[bytes],
        document_type: Optional[str] = None,
    ) -> UploadResult:
        """
        Ingest one uploaded PDF.

        Args:
            filename: Client-supplied file name
            content_type: Client-supplied media type
            data: File bytes
            document_type: 'rfp' (default) or 'brand-guide'

        Returns:
            UploadResult with filename, document type and page count

        Raises:
            ValidationError: Missing file, too large, or unknown document type
            UnsupportedMediaType: Not a PDF
            ExtractionFailed: Text extraction failed
            StorageUnavailable: Archive or store write failed
        """
        self._validate(filename, content_type, data)
        doc_type = parse_document_type(document_type)
        original_name = Path(filename).name

        logger.info(f"[UPLOAD] {doc_type.value}: {original_name} ({len(data)} bytes)")

        async with staged_upload(data) as temp_path:
            try:
                extracted = await self.extractor.extract(temp_path)
            except SlideServiceError:
                raise
            except Exception as e:
                raise ExtractionFailed(f"Could not read PDF: {e}") from e

            saved_filename = f"{timestamp_prefix()}_{original_name}"
            file_path = await self.archive.store(temp_path, saved_filename)

            try:
                if doc_type is DocumentType.BRAND_GUIDE:
                    await self.store.insert_brand_guide(BrandGuide(
                        brand_name=brand_name_from_filename(original_name),
                        content=extracted.text,
                        filename=original_name,
                    ))
                else:
                    await self.store.insert_rfp_document(RFPDocument(
                        content=extracted.text,
                        filename=original_name,
                        saved_filename=saved_filename,
                        file_path=file_path,
                    ))
            except Exception:
                logger.error(f"[UPLOAD] Store failed, rolling back archive: {saved_filename}")
                await self.archive.remove(saved_filename)
                raise

        logger.info(f"[UPLOAD] ✅ Stored {doc_type.value}: {original_name} ({extracted.pages} pages)")
        return UploadResult(filename=original_name, document_type=doc_type, pages=extracted.pages)
