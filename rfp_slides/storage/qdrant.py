"""
Qdrant Service - Async wrapper for vector database operations.

The document store needs point lookup by filename and listing only, so
points carry the full model as payload and a constant placeholder vector.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from qdrant_client import AsyncQdrantClient
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
from qdrant_client.models import (
    Direction,
    Distance,
    FieldCondition,
    Filter,
    MatchValue,
    OrderBy,
    PayloadSchemaType,
    PointStruct,
    VectorParams,
)

from rfp_slides.core.config import get_settings
from rfp_slides.core.errors import StorageUnavailable
from rfp_slides.storage.base import (
    BRAND_GUIDE_COLLECTION,
    COLLECTIONS,
    DOCUMENT_LIST_LIMIT,
    GENERATION_COLLECTION,
    GENERATION_LIST_LIMIT,
    RFP_COLLECTION,
)
from rfp_slides.utils.schemas import (
    BrandGuide,
    BrandGuideSummary,
    RFPDocument,
    RFPDocumentSummary,
    SlideGeneration,
    SlideGenerationSummary,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_VECTOR = [1.0]
# Payload field each collection is listed by, newest first
DATE_FIELDS = {
    RFP_COLLECTION: "uploadDate",
    BRAND_GUIDE_COLLECTION: "uploadDate",
    GENERATION_COLLECTION: "generatedDate",
}

QDRANT_ERRORS = (UnexpectedResponse, ResponseHandlingException)

# Global singleton
_qdrant_service_instance: Optional['QdrantService'] = None


def get_qdrant_service() -> 'QdrantService':
    """Get singleton instance of QdrantService."""
    global _qdrant_service_instance
    if _qdrant_service_instance is None:
        _qdrant_service_instance = QdrantService()
    return _qdrant_service_instance


class QdrantService:
    """
    Qdrant service holding the async client.

    Pass ``location=":memory:"`` for a local in-process instance.
    """

    def __init__(self, url: Optional[str] = None, api_key: Optional[str] = None, location: Optional[str] = None):
        """Initialize Qdrant async client."""
        if location:
            self.client = AsyncQdrantClient(location=location)
            logger.info(f"Qdrant async client initialized: {location}")
            return

        settings = get_settings()
        qdrant_uri = url or settings.qdrant_uri
        qdrant_api_key = api_key or settings.qdrant_api_key

        if not qdrant_uri:
            raise ValueError("QDRANT_URI environment variable must be set")

        self.client = AsyncQdrantClient(url=qdrant_uri, api_key=qdrant_api_key)
        logger.info(f"Qdrant async client initialized: {qdrant_uri}")

    async def ensure_collection(self, name: str) -> None:
        """Create a payload-only collection if it does not exist."""
        collections = await self.client.get_collections()
        if name in [c.name for c in collections.collections]:
            logger.debug(f"Qdrant collection already exists: {name}")
            return

        await self.client.create_collection(
            collection_name=name,
            vectors_config=VectorParams(size=len(PLACEHOLDER_VECTOR), distance=Distance.DOT),
        )
        await self.client.create_payload_index(
            collection_name=name,
            field_name="filename" if name != GENERATION_COLLECTION else "rfpFilename",
            field_schema=PayloadSchemaType.KEYWORD,
        )
        await self.client.create_payload_index(
            collection_name=name,
            field_name=DATE_FIELDS[name],
            field_schema=PayloadSchemaType.DATETIME,
        )
        logger.info(f"Created Qdrant collection: {name}")

    async def insert_payload(self, collection_name: str, payload: Dict[str, Any]) -> str:
        point_id = str(uuid.uuid4())
        await self.client.upsert(
            collection_name=collection_name,
            points=[PointStruct(id=point_id, vector=PLACEHOLDER_VECTOR, payload=payload)],
        )
        return point_id

    async def scroll_payloads(
        self,
        collection_name: str,
        limit: int,
        match: Optional[Dict[str, str]] = None,
        newest_by: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Read payloads, optionally filtered by exact keyword matches.

        Args:
            collection_name: Collection name
            limit: Max points to read
            match: Field -> value equality conditions
            newest_by: Datetime payload field to order by, descending

        Returns:
            List of point payloads
        """
        scroll_filter = None
        if match:
            scroll_filter = Filter(
                must=[FieldCondition(key=key, match=MatchValue(value=value)) for key, value in match.items()]
            )

        records, _ = await self.client.scroll(
            collection_name=collection_name,
            scroll_filter=scroll_filter,
            limit=limit,
            order_by=OrderBy(key=newest_by, direction=Direction.DESC) if newest_by else None,
            with_payload=True,
            with_vectors=False,
        )
        return [record.payload or {} for record in records]

    async def close(self):
        await self.client.close()
        logger.info("Qdrant connection closed")


class QdrantDocumentStore:
    """Document store backed by Qdrant payloads."""

    def __init__(self, qdrant: Optional[QdrantService] = None):
        self.qdrant = qdrant or get_qdrant_service()

    async def initialize(self) -> None:
        try:
            for name in COLLECTIONS:
                await self.qdrant.ensure_collection(name)
        except QDRANT_ERRORS as e:
            raise StorageUnavailable("Document store unavailable", str(e)) from e
        logger.info("Qdrant document store ready")

    async def _insert(self, collection_name: str, payload: Dict[str, Any]) -> str:
        try:
            return await self.qdrant.insert_payload(collection_name, payload)
        except QDRANT_ERRORS as e:
            logger.error(f"Insert into {collection_name} failed: {e}")
            raise StorageUnavailable(f"Failed to store {collection_name}", str(e)) from e

    async def _newest(self, collection_name: str, limit: int, match: Optional[Dict[str, str]] = None):
        try:
            return await self.qdrant.scroll_payloads(
                collection_name, limit, match, newest_by=DATE_FIELDS[collection_name]
            )
        except QDRANT_ERRORS as e:
            raise StorageUnavailable(f"Failed to read {collection_name}", str(e)) from e

    async def insert_rfp_document(self, document: RFPDocument) -> str:
        return await self._insert(RFP_COLLECTION, document.to_document())

    async def insert_brand_guide(self, guide: BrandGuide) -> str:
        return await self._insert(BRAND_GUIDE_COLLECTION, guide.to_document())

    async def insert_generation(self, generation: SlideGeneration) -> str:
        return await self._insert(GENERATION_COLLECTION, generation.to_document())

    async def find_rfp_document(self, filename: str) -> Optional[RFPDocument]:
        payloads = await self._newest(RFP_COLLECTION, 1, {"filename": filename})
        return RFPDocument.model_validate(payloads[0]) if payloads else None

    async def find_brand_guide(self, filename: str) -> Optional[BrandGuide]:
        payloads = await self._newest(BRAND_GUIDE_COLLECTION, 1, {"filename": filename})
        return BrandGuide.model_validate(payloads[0]) if payloads else None

    async def list_rfp_documents(self, limit: int = DOCUMENT_LIST_LIMIT) -> List[RFPDocumentSummary]:
        payloads = await self._newest(RFP_COLLECTION, limit)
        return [RFPDocumentSummary.model_validate(p) for p in payloads]

    async def list_brand_guides(self, limit: int = DOCUMENT_LIST_LIMIT) -> List[BrandGuideSummary]:
        payloads = await self._newest(BRAND_GUIDE_COLLECTION, limit)
        return [BrandGuideSummary.model_validate(p) for p in payloads]

    async def list_generations(self, limit: int = GENERATION_LIST_LIMIT) -> List[SlideGenerationSummary]:
        payloads = await self._newest(GENERATION_COLLECTION, limit)
        return [SlideGenerationSummary.model_validate(p) for p in payloads]

    async def close(self) -> None:
        await self.qdrant.close()
