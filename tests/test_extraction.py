import importlib
import warnings

import pymupdf
import pytest

from rfp_slides.core import extraction
from rfp_slides.core.errors import ExtractionFailed
from rfp_slides.core.extraction import PdfTextExtractor


@pytest.fixture
def rfp_pdf(tmp_path):
    path = tmp_path / "specs.pdf"
    doc = pymupdf.open()
    for text in ("Request for Proposal: Data Platform", "Budget: 2 million"):
        page = doc.new_page()
        page.insert_text((72, 72), text)
    doc.save(str(path))
    doc.close()
    return path


class TestPdfTextExtractor:
    @pytest.mark.asyncio
    async def test_extracts_text_and_pages(self, rfp_pdf):
        extracted = await PdfTextExtractor().extract(rfp_pdf)

        assert extracted.pages == 2
        assert "Request for Proposal" in extracted.text
        assert "Budget: 2 million" in extracted.text

    @pytest.mark.asyncio
    async def test_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf")

        with pytest.raises(ExtractionFailed):
            await PdfTextExtractor().extract(path)

    def test_module_import_emits_no_warnings(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            importlib.reload(extraction)
