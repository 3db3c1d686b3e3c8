"""
RFP Slide Generator Orchestrator

Unified interface for all operations with mode-based execution.
Supports: upload, generate, files, history and render modes.
"""

import logging
from typing import Any, Dict, List, Literal, Optional

from rfp_slides.core.config import Settings, get_settings
from rfp_slides.core.extraction import ContentExtractor, PdfTextExtractor
from rfp_slides.core.generation import SlideGenerationService
from rfp_slides.core.ingestion import DocumentIngestionService
from rfp_slides.core.prompts import DEFAULT_SLIDE_COUNT
from rfp_slides.core.recorder import GenerationRecorder
from rfp_slides.core.rendering import DeckRenderer
from rfp_slides.models.gemini import GeminiGenerationClient, GenerationClient
from rfp_slides.storage import (
    DocumentStore,
    LocalUploadArchive,
    MongoDocumentStore,
    QdrantDocumentStore,
    S3UploadArchive,
    UploadArchive,
)
from rfp_slides.utils.schemas import (
    BrandColors,
    GenerationResult,
    RenderedDeck,
    SlideGenerationSummary,
    UploadResult,
)

logger = logging.getLogger(__name__)

# Mode type
Mode = Literal["upload", "generate", "files", "history", "render"]


def create_document_store(settings: Settings) -> DocumentStore:
    if settings.store_backend == "qdrant":
        return QdrantDocumentStore()
    if settings.store_backend == "mongodb":
        return MongoDocumentStore()
    raise ValueError(f"Unknown STORE_BACKEND: {settings.store_backend}. Must be one of: mongodb, qdrant")


def create_upload_archive(settings: Settings) -> UploadArchive:
    if settings.s3_bucket_name:
        return S3UploadArchive()
    return LocalUploadArchive(settings.user_uploads_dir)


class SlideDeckOrchestrator:
    """
    Unified orchestrator for RFP slide operations.

    Modes:
    - 'upload': Extract and store an RFP or brand guide PDF
    - 'generate': Generate slides from a stored RFP
    - 'files': List stored RFPs and brand guides
    - 'history': List past generations
    - 'render': Render slides into a .pptx deck

    Collaborators are created once (or injected, e.g. fakes in tests) and
    held for the life of the process.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        generation_client: Optional[GenerationClient] = None,
        extractor: Optional[ContentExtractor] = None,
        archive: Optional[UploadArchive] = None,
        renderer: Optional[DeckRenderer] = None,
        settings: Optional[Settings] = None,
        auto_initialize: bool = True
    ):
        """
        Initialize unified orchestrator.

        Args:
            store: Document store (if None, chosen by STORE_BACKEND)
            generation_client: Model client (if None, Gemini)
            extractor: PDF text extractor (if None, PyMuPDF)
            archive: Upload archive (if None, S3 when S3_BUCKET_NAME is set, else local)
            renderer: Deck renderer
            settings: Settings override
            auto_initialize: Whether to initialize store and archive on first use
        """
        self.settings = settings or get_settings()
        self.store = store
        self.generation_client = generation_client
        self.extractor = extractor
        self.archive = archive
        self.renderer = renderer or DeckRenderer()
        self.auto_initialize = auto_initialize
        self._initialized = False

        # Lazy-initialized services
        self._ingestion: Optional[DocumentIngestionService] = None
        self._generation: Optional[SlideGenerationService] = None

        logger.info("SlideDeckOrchestrator initialized")

    async def _ensure_initialized(self):
        """Ensure storage and services are initialized."""
        if self._initialized:
            return

        if self.store is None:
            self.store = create_document_store(self.settings)
        if self.archive is None:
            self.archive = create_upload_archive(self.settings)
        if self.extractor is None:
            self.extractor = PdfTextExtractor()
        if self.generation_client is None:
            self.generation_client = GeminiGenerationClient()

        if self.auto_initialize:
            await self.store.initialize()
            await self.archive.initialize()

        self._ingestion = DocumentIngestionService(
            store=self.store,
            archive=self.archive,
            extractor=self.extractor,
            max_upload_bytes=self.settings.max_upload_bytes,
        )
        self._generation = SlideGenerationService(
            store=self.store,
            generation_client=self.generation_client,
            recorder=GenerationRecorder(self.store),
        )

        self._initialized = True
        logger.info("Orchestrator services initialized")

    async def execute(
        self,
        mode: Mode,
        **kwargs
    ) -> Any:
        """
        Execute operation based on mode.

        Args:
            mode: Operation mode ('upload', 'generate', 'files', 'history', 'render')
            **kwargs: Mode-specific parameters

        Returns:
            Mode-specific results

        Raises:
            ValueError: If mode is invalid
        """
        await self._ensure_initialized()

        if mode == "upload":
            return await self._execute_upload(**kwargs)
        elif mode == "generate":
            return await self._execute_generate(**kwargs)
        elif mode == "files":
            return await self._execute_files(**kwargs)
        elif mode == "history":
            return await self._execute_history(**kwargs)
        elif mode == "render":
            return await self._execute_render(**kwargs)
        else:
            raise ValueError(f"Invalid mode: {mode}. Must be one of: upload, generate, files, history, render")

    async def _execute_upload(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        data: Optional[bytes],
        document_type: Optional[str] = None,
        **kwargs
    ) -> UploadResult:
        return await self._ingestion.ingest_upload(
            filename=filename,
            content_type=content_type,
            data=data,
            document_type=document_type,
        )

    async def _execute_generate(
        self,
        rfp_filename: Optional[str],
        brand_guide_filename: Optional[str] = None,
        slide_count: int = DEFAULT_SLIDE_COUNT,
        **kwargs
    ) -> GenerationResult:
        return await self._generation.generate(
            rfp_filename=rfp_filename,
            brand_guide_filename=brand_guide_filename,
            slide_count=slide_count,
        )

    async def _execute_files(self, **kwargs) -> Dict[str, List[Any]]:
        """
        List stored documents.

        Returns:
            Dict with 'rfp_documents' and 'brand_guides' summaries
        """
        rfp_documents = await self.store.list_rfp_documents()
        brand_guides = await self.store.list_brand_guides()
        logger.info(f"[FILES] {len(rfp_documents)} RFPs, {len(brand_guides)} brand guides")
        return {"rfp_documents": rfp_documents, "brand_guides": brand_guides}

    async def _execute_history(self, **kwargs) -> List[SlideGenerationSummary]:
        generations = await self.store.list_generations()
        logger.info(f"[HISTORY] {len(generations)} generations")
        return generations

    async def _execute_render(
        self,
        slides: Optional[List[Any]],
        rfp_filename: Optional[str] = None,
        brand_colors: Optional[BrandColors] = None,
        **kwargs
    ) -> RenderedDeck:
        logger.info(f"[RENDER] Rendering {len(slides or [])} slides")
        return await self.renderer.render(slides, rfp_filename=rfp_filename, brand_colors=brand_colors)

    async def close(self):
        """Close storage connections."""
        if self.store and self._initialized:
            await self.store.close()
            self._initialized = False
            logger.info("Orchestrator closed")
