"""
PDF text extraction (PyMuPDF).
"""

import asyncio
import logging
from pathlib import Path
from typing import Protocol

import pymupdf

from rfp_slides.core.errors import ExtractionFailed
from rfp_slides.utils.schemas import ExtractedDocument

logger = logging.getLogger(__name__)


class ContentExtractor(Protocol):
    async def extract(self, path: Path) -> ExtractedDocument: ...


class PdfTextExtractor:
    """Extract plain text and page count from a PDF file."""

    async def extract(self, path: Path) -> ExtractedDocument:
        return await asyncio.to_thread(self._extract, Path(path))

    def _extract(self, path: Path) -> ExtractedDocument:
        try:
            with pymupdf.open(path, filetype="pdf") as doc:
                text = "\n".join(page.get_text() for page in doc)
                pages = doc.page_count
        except (RuntimeError, ValueError, OSError) as e:
            logger.error(f"PDF extraction failed | file={path.name}: {e}")
            raise ExtractionFailed(f"Could not read PDF: {e}") from e

        if not text.strip():
            logger.warning(f"PDF has no extractable text | file={path.name} pages={pages}")

        logger.info(f"📄 Extracted PDF | file={path.name} pages={pages} chars={len(text)}")
        return ExtractedDocument(text=text, pages=pages)
