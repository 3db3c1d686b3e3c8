"""
Pytest configuration and in-memory fakes for the RFP slide generator.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import pytest

from rfp_slides.core.config import Settings
from rfp_slides.core.errors import StorageUnavailable
from rfp_slides.orchestrator import SlideDeckOrchestrator
from rfp_slides.storage.base import BRAND_GUIDE_COLLECTION, GENERATION_COLLECTION, RFP_COLLECTION
from rfp_slides.utils.schemas import (
    BrandGuide,
    BrandGuideSummary,
    ExtractedDocument,
    RFPDocument,
    RFPDocumentSummary,
    SlideGeneration,
    SlideGenerationSummary,
)

SAMPLE_SLIDES: List[Dict[str, Any]] = [
    {
        "slideNumber": 1,
        "title": "Cloud Migration Proposal",
        "contentType": "text",
        "content": "Response to RFP 2024-17\nConfidential",
        "layout": "title",
        "notes": "Open with the client's goals",
    },
    {
        "slideNumber": 2,
        "title": "Scope of Work",
        "contentType": "bullets",
        "content": ["Assess current estate", "Migrate 40 workloads", "Decommission data centre"],
        "layout": "bullets",
    },
    {
        "slideNumber": 3,
        "title": "Budget by Phase",
        "contentType": "chart",
        "content": {
            "chartType": "bar",
            "data": [{"label": "Assess", "value": 120}, {"label": "Migrate", "value": 480}],
        },
        "layout": "chart",
    },
    {
        "slideNumber": 4,
        "title": "Team and Timeline",
        "contentType": "bullets",
        "content": ["Lead architect", "Four engineers", "Q1 start", "Q3 cut-over"],
        "layout": "twoColumn",
    },
    {
        "slideNumber": 5,
        "title": "Next Steps",
        "contentType": "text",
        "content": "Schedule a discovery workshop.",
        "layout": "bullets",
    },
]

SAMPLE_RESPONSE = "Here are your slides:\n```json\n" + json.dumps(SAMPLE_SLIDES, indent=2) + "\n```\nLet me know!"

PDF_BYTES = b"%PDF-1.4\n% fake pdf body\n"


class FakeDocumentStore:
    """In-memory DocumentStore; ``fail_on`` names collections whose inserts fail."""

    def __init__(self):
        self.rfp_documents: List[RFPDocument] = []
        self.brand_guides: List[BrandGuide] = []
        self.generations: List[SlideGeneration] = []
        self.fail_on: Set[str] = set()
        self.initialized = False
        self.closed = False

    async def initialize(self) -> None:
        self.initialized = True

    def _check(self, collection: str) -> None:
        if collection in self.fail_on:
            raise StorageUnavailable(f"Failed to store {collection}", "store offline")

    async def insert_rfp_document(self, document: RFPDocument) -> str:
        self._check(RFP_COLLECTION)
        self.rfp_documents.append(document)
        return str(len(self.rfp_documents))

    async def insert_brand_guide(self, guide: BrandGuide) -> str:
        self._check(BRAND_GUIDE_COLLECTION)
        self.brand_guides.append(guide)
        return str(len(self.brand_guides))

    async def insert_generation(self, generation: SlideGeneration) -> str:
        self._check(GENERATION_COLLECTION)
        self.generations.append(generation)
        return str(len(self.generations))

    async def find_rfp_document(self, filename: str) -> Optional[RFPDocument]:
        matches = [d for d in self.rfp_documents if d.filename == filename]
        return max(matches, key=lambda d: d.upload_date, default=None)

    async def find_brand_guide(self, filename: str) -> Optional[BrandGuide]:
        matches = [g for g in self.brand_guides if g.filename == filename]
        return max(matches, key=lambda g: g.upload_date, default=None)

    async def list_rfp_documents(self, limit: int = 100) -> List[RFPDocumentSummary]:
        return [RFPDocumentSummary(filename=d.filename, upload_date=d.upload_date) for d in self.rfp_documents][:limit]

    async def list_brand_guides(self, limit: int = 100) -> List[BrandGuideSummary]:
        return [
            BrandGuideSummary(filename=g.filename, brand_name=g.brand_name, upload_date=g.upload_date)
            for g in self.brand_guides
        ][:limit]

    async def list_generations(self, limit: int = 50) -> List[SlideGenerationSummary]:
        return [
            SlideGenerationSummary(
                rfp_filename=g.rfp_filename,
                brand_guide_filename=g.brand_guide_filename,
                slide_count=g.slide_count,
                generated_date=g.generated_date,
                status=g.status,
            )
            for g in self.generations
        ][:limit]

    async def close(self) -> None:
        self.closed = True


class FakeGenerationClient:
    """Returns scripted responses in order (the last one repeats); exceptions are raised."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = responses or [SAMPLE_RESPONSE]
        self.prompts: List[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        response = self.responses[min(len(self.prompts), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


class FakeExtractor:
    def __init__(self, text: str = "RFP: migrate 40 workloads to the cloud by Q3.", pages: int = 3):
        self.text = text
        self.pages = pages
        self.error: Optional[Exception] = None
        self.seen_paths: List[Path] = []

    async def extract(self, path: Path) -> ExtractedDocument:
        assert Path(path).exists()
        self.seen_paths.append(Path(path))
        if self.error is not None:
            raise self.error
        return ExtractedDocument(text=self.text, pages=self.pages)


class FakeArchive:
    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.removed: List[str] = []

    async def initialize(self) -> None:
        pass

    async def store(self, source: Path, saved_filename: str) -> str:
        self.files[saved_filename] = Path(source).read_bytes()
        return f"memory://{saved_filename}"

    async def remove(self, saved_filename: str) -> None:
        self.removed.append(saved_filename)
        self.files.pop(saved_filename, None)


@pytest.fixture
def store():
    return FakeDocumentStore()


@pytest.fixture
def generation_client():
    return FakeGenerationClient()


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def archive():
    return FakeArchive()


@pytest.fixture
def orchestrator(store, generation_client, extractor, archive):
    return SlideDeckOrchestrator(
        store=store,
        generation_client=generation_client,
        extractor=extractor,
        archive=archive,
        settings=Settings(),
    )


@pytest.fixture
def test_client(orchestrator):
    """FastAPI test client serving the fake-backed orchestrator."""
    from fastapi.testclient import TestClient
    from rfp_slides.api import create_app

    with TestClient(create_app(orchestrator)) as client:
        yield client
