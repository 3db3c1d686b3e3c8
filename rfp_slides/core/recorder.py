"""
Generation Recorder

Writes the append-only SlideGeneration history.
"""

import json
import logging
from typing import Any, List, Optional

from rfp_slides.core.errors import SlideServiceError
from rfp_slides.storage.base import DocumentStore
from rfp_slides.utils.schemas import GenerationStatus, SlideGeneration

logger = logging.getLogger(__name__)

NO_BRAND_GUIDE = "None"


class GenerationRecorder:
    """Persist one SlideGeneration per successful generation."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def build_record(
        self,
        rfp_filename: str,
        brand_guide_filename: Optional[str],
        slides: List[Any],
    ) -> SlideGeneration:
        # slideCount reflects what the model produced, not what was requested
        return SlideGeneration(
            rfp_filename=rfp_filename,
            brand_guide_filename=brand_guide_filename or NO_BRAND_GUIDE,
            slide_count=len(slides),
            slides=json.dumps(slides),
            status=GenerationStatus.COMPLETED,
        )

    async def record(
        self,
        rfp_filename: str,
        brand_guide_filename: Optional[str],
        slides: List[Any],
    ) -> Optional[SlideGeneration]:
        """
        Store the generation record.

        A store failure is logged and does not propagate; the caller still
        returns the slides.

        Returns:
            The stored record, or None if persistence failed
        """
        generation = self.build_record(rfp_filename, brand_guide_filename, slides)
        try:
            await self.store.insert_generation(generation)
        except SlideServiceError as e:
            logger.error(f"Failed to record generation for {rfp_filename}: {e}")
            return None

        logger.info(f"Recorded generation: {rfp_filename} ({generation.slide_count} slides)")
        return generation
