"""
RFP Slide Generator Package

Turns uploaded RFP documents into slide decks: ingestion, generation,
history and .pptx rendering.
"""

# Core services (imported first; models and storage depend on core modules)
from rfp_slides.core import (
    DocumentIngestionService,
    SlideGenerationService,
    GenerationRecorder,
    DeckRenderer,
    SlideServiceError,
)

# Unified orchestrator
from rfp_slides.orchestrator import (
    SlideDeckOrchestrator,
)

# Schemas
from rfp_slides.utils.schemas import (
    RFPDocument,
    BrandGuide,
    SlideGeneration,
    GenerationResult,
    UploadResult,
)

# Storage services
from rfp_slides.storage import (
    MongoDBService,
    S3Service,
    QdrantService,
    get_mongo_service,
    get_s3_service,
    get_qdrant_service,
)

__all__ = [
    # Core services
    "DocumentIngestionService",
    "SlideGenerationService",
    "GenerationRecorder",
    "DeckRenderer",
    "SlideServiceError",
    # Orchestrator
    "SlideDeckOrchestrator",
    # Schemas
    "RFPDocument",
    "BrandGuide",
    "SlideGeneration",
    "GenerationResult",
    "UploadResult",
    # Storage services
    "MongoDBService",
    "S3Service",
    "QdrantService",
    "get_mongo_service",
    "get_s3_service",
    "get_qdrant_service",
]
