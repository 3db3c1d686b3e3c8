"""
MongoDB Service - Async wrapper for MongoDB operations.

Stores RFP documents, brand guides and generation history in one database,
one collection per model.
"""

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from rfp_slides.core.config import get_settings
from rfp_slides.core.errors import StorageUnavailable
from rfp_slides.storage.base import (
    BRAND_GUIDE_COLLECTION,
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

# Global singleton
_mongo_service_instance = None


def get_mongo_service() -> 'MongoDBService':
    """Get singleton instance of MongoDBService."""
    global _mongo_service_instance
    if _mongo_service_instance is None:
        _mongo_service_instance = MongoDBService()
    return _mongo_service_instance


class MongoDBService:
    """
    Thin connection holder for the MongoDB client.

    Supports dynamic database access per operation.
    """

    def __init__(self, connection_string: Optional[str] = None):
        self.connection_string = connection_string
        self.client: Optional[AsyncIOMotorClient] = None
        self._initialized = False

    async def initialize(self):
        """Initialize MongoDB connection."""
        if self._initialized:
            logger.debug("MongoDB already initialized")
            return

        connection_string = self.connection_string or get_settings().mongodb_uri

        try:
            self.client = AsyncIOMotorClient(connection_string, tz_aware=True)
            self._initialized = True
            logger.info("MongoDB initialized")
        except PyMongoError as e:
            logger.error(f"MongoDB initialization failed: {e}")
            raise StorageUnavailable("Document store unavailable", str(e)) from e

    def get_collection(self, collection_name: str, database_name: str) -> AsyncIOMotorCollection:
        """
        Get a collection reference from the specified database.

        Args:
            collection_name: Name of the collection
            database_name: Name of the database

        Returns:
            Collection reference
        """
        if not self._initialized or self.client is None:
            raise RuntimeError("MongoDB not initialized. Call await mongo_service.initialize() first.")

        db = self.client[database_name]
        return db[collection_name]

    async def close(self):
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            self._initialized = False
            logger.info("MongoDB connection closed")


class MongoDocumentStore:
    """
    Document store backed by MongoDB.

    Documents keep the camelCase field names of the API. Lookups by filename
    return the most recent upload when several share a name.
    """

    def __init__(self, mongo: Optional[MongoDBService] = None, database_name: Optional[str] = None):
        self.mongo = mongo or get_mongo_service()
        self.database_name = database_name or get_settings().mongodb_database

    def _collection(self, name: str) -> AsyncIOMotorCollection:
        return self.mongo.get_collection(name, self.database_name)

    async def initialize(self) -> None:
        await self.mongo.initialize()
        try:
            await self._collection(RFP_COLLECTION).create_index([("filename", ASCENDING)])
            await self._collection(BRAND_GUIDE_COLLECTION).create_index([("filename", ASCENDING)])
            await self._collection(GENERATION_COLLECTION).create_index([("generatedDate", DESCENDING)])
        except PyMongoError as e:
            raise StorageUnavailable("Document store unavailable", str(e)) from e
        logger.info(f"MongoDB document store ready (database: {self.database_name})")

    async def _insert(self, collection_name: str, document: Dict[str, Any]) -> str:
        try:
            result = await self._collection(collection_name).insert_one(document)
        except PyMongoError as e:
            logger.error(f"Insert into {collection_name} failed: {e}")
            raise StorageUnavailable(f"Failed to store {collection_name}", str(e)) from e
        return str(result.inserted_id)

    async def _find_latest(self, collection_name: str, filename: str) -> Optional[Dict[str, Any]]:
        try:
            doc = await self._collection(collection_name).find_one(
                {"filename": filename},
                sort=[("uploadDate", DESCENDING)],
            )
        except PyMongoError as e:
            raise StorageUnavailable(f"Failed to read {collection_name}", str(e)) from e
        if doc:
            doc.pop("_id", None)
        return doc

    async def _find_many(
        self,
        collection_name: str,
        fields: List[str],
        sort_field: str,
        limit: int,
    ) -> List[Dict[str, Any]]:
        projection = {field: 1 for field in fields}
        projection["_id"] = 0
        try:
            cursor = (
                self._collection(collection_name)
                .find({}, projection, sort=[(sort_field, DESCENDING)])
                .limit(limit)
            )
            return await cursor.to_list(length=limit)
        except PyMongoError as e:
            raise StorageUnavailable(f"Failed to list {collection_name}", str(e)) from e

    async def insert_rfp_document(self, document: RFPDocument) -> str:
        return await self._insert(RFP_COLLECTION, document.model_dump(by_alias=True))

    async def insert_brand_guide(self, guide: BrandGuide) -> str:
        return await self._insert(BRAND_GUIDE_COLLECTION, guide.model_dump(by_alias=True))

    async def insert_generation(self, generation: SlideGeneration) -> str:
        return await self._insert(GENERATION_COLLECTION, generation.model_dump(mode="python", by_alias=True))

    async def find_rfp_document(self, filename: str) -> Optional[RFPDocument]:
        doc = await self._find_latest(RFP_COLLECTION, filename)
        return RFPDocument.model_validate(doc) if doc else None

    async def find_brand_guide(self, filename: str) -> Optional[BrandGuide]:
        doc = await self._find_latest(BRAND_GUIDE_COLLECTION, filename)
        return BrandGuide.model_validate(doc) if doc else None

    async def list_rfp_documents(self, limit: int = DOCUMENT_LIST_LIMIT) -> List[RFPDocumentSummary]:
        docs = await self._find_many(RFP_COLLECTION, ["filename", "uploadDate"], "uploadDate", limit)
        return [RFPDocumentSummary.model_validate(doc) for doc in docs]

    async def list_brand_guides(self, limit: int = DOCUMENT_LIST_LIMIT) -> List[BrandGuideSummary]:
        docs = await self._find_many(
            BRAND_GUIDE_COLLECTION, ["filename", "brandName", "uploadDate"], "uploadDate", limit
        )
        return [BrandGuideSummary.model_validate(doc) for doc in docs]

    async def list_generations(self, limit: int = GENERATION_LIST_LIMIT) -> List[SlideGenerationSummary]:
        docs = await self._find_many(
            GENERATION_COLLECTION,
            ["rfpFilename", "brandGuideFilename", "slideCount", "generatedDate", "status"],
            "generatedDate",
            limit,
        )
        return [SlideGenerationSummary.model_validate(doc) for doc in docs]

    async def close(self) -> None:
        await self.mongo.close()
