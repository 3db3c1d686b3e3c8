"""
Document store interface shared by the MongoDB and Qdrant backends.
"""

from typing import List, Optional, Protocol

from rfp_slides.utils.schemas import (
    BrandGuide,
    BrandGuideSummary,
    RFPDocument,
    RFPDocumentSummary,
    SlideGeneration,
    SlideGenerationSummary,
)

# Collection names, one per stored model
RFP_COLLECTION = "RFPDocument"
BRAND_GUIDE_COLLECTION = "BrandGuide"
GENERATION_COLLECTION = "SlideGeneration"

COLLECTIONS = [RFP_COLLECTION, BRAND_GUIDE_COLLECTION, GENERATION_COLLECTION]

DOCUMENT_LIST_LIMIT = 100
GENERATION_LIST_LIMIT = 50


class DocumentStore(Protocol):
    """Create-only persistence for RFPs, brand guides and generation history."""

    async def initialize(self) -> None: ...

    async def insert_rfp_document(self, document: RFPDocument) -> str: ...

    async def insert_brand_guide(self, guide: BrandGuide) -> str: ...

    async def insert_generation(self, generation: SlideGeneration) -> str: ...

    async def find_rfp_document(self, filename: str) -> Optional[RFPDocument]: ...

    async def find_brand_guide(self, filename: str) -> Optional[BrandGuide]: ...

    async def list_rfp_documents(self, limit: int = DOCUMENT_LIST_LIMIT) -> List[RFPDocumentSummary]: ...

    async def list_brand_guides(self, limit: int = DOCUMENT_LIST_LIMIT) -> List[BrandGuideSummary]: ...

    async def list_generations(self, limit: int = GENERATION_LIST_LIMIT) -> List[SlideGenerationSummary]: ...

    async def close(self) -> None: ...
