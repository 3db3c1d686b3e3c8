"""
Slide Generation Service

Sequences one generation request: fetch RFP (and brand guide), build the
prompt, call the model, parse the slide array, record history.
"""

import logging
from typing import Optional

from rfp_slides.core.errors import MalformedGenerationOutput, NotFoundError, ValidationError
from rfp_slides.core.parsing import parse_and_validate
from rfp_slides.core.prompts import DEFAULT_SLIDE_COUNT, build_slide_prompt, check_slide_count
from rfp_slides.core.recorder import GenerationRecorder
from rfp_slides.models.gemini import GenerationClient
from rfp_slides.storage.base import DocumentStore
from rfp_slides.utils.schemas import BrandGuide, GenerationResult

logger = logging.getLogger(__name__)

DEFAULT_BRAND_LABEL = "Default"


class SlideGenerationService:
    """
    Generates slides for a stored RFP.

    No locking or dedup per filename: concurrent requests for one RFP make
    independent model calls and write independent history records.
    """

    def __init__(
        self,
        store: DocumentStore,
        generation_client: GenerationClient,
        recorder: Optional[GenerationRecorder] = None,
    ):
        self.store = store
        self.generation_client = generation_client
        self.recorder = recorder or GenerationRecorder(store)

    async def _find_brand_guide(self, brand_guide_filename: Optional[str]) -> Optional[BrandGuide]:
        if not brand_guide_filename:
            return None
        brand_guide = await self.store.find_brand_guide(brand_guide_filename)
        if brand_guide is None:
            logger.warning(f"[GENERATE] Brand guide not found, using default styling: {brand_guide_filename}")
        return brand_guide

    async def generate(
        self,
        rfp_filename: Optional[str],
        brand_guide_filename: Optional[str] = None,
        slide_count: int = DEFAULT_SLIDE_COUNT,
    ) -> GenerationResult:
        """
        Generate slides from a stored RFP document.

        Args:
            rfp_filename: Filename of an uploaded RFP (exact match)
            brand_guide_filename: Optional brand guide filename; unknown names
                fall back to default styling
            slide_count: Requested number of slides (3-15)

        Returns:
            GenerationResult whose slide_count is the number of slides produced

        Raises:
            ValidationError: Missing filename, bad slide count or empty RFP text
            NotFoundError: No RFP with that filename
            GenerationUnavailable / GenerationTimeout: Model call failed
            MalformedGenerationOutput: Response held no parseable slide array
        """
        if not rfp_filename or not rfp_filename.strip():
            raise ValidationError("RFP filename is required")
        check_slide_count(slide_count)

        logger.info(f"[GENERATE] Generating {slide_count} slides from RFP: {rfp_filename}")

        rfp_document = await self.store.find_rfp_document(rfp_filename)
        if rfp_document is None:
            raise NotFoundError("RFP document not found. Please upload it first.")

        brand_guide = await self._find_brand_guide(brand_guide_filename)

        prompt = build_slide_prompt(
            rfp_text=rfp_document.content,
            slide_count=slide_count,
            brand_guide=brand_guide,
        )

        raw_text = await self.generation_client.complete(prompt)

        try:
            slides = parse_and_validate(raw_text)
        except MalformedGenerationOutput:
            logger.error(f"[GENERATE] Failed to parse model response for {rfp_filename}")
            raise

        await self.recorder.record(rfp_filename, brand_guide_filename, slides)

        logger.info(f"[GENERATE] ✅ Generated {len(slides)} slides")
        return GenerationResult(
            rfp_filename=rfp_filename,
            brand_guide_filename=brand_guide_filename or DEFAULT_BRAND_LABEL,
            slide_count=len(slides),
            slides=slides,
        )
