"""
Core services for the RFP slide generator.
"""

from .config import Settings, get_settings, setup_logging
from .errors import (
    SlideServiceError,
    ValidationError,
    UnsupportedMediaType,
    ExtractionFailed,
    NotFoundError,
    UpstreamUnavailable,
    StorageUnavailable,
    GenerationUnavailable,
    GenerationTimeout,
    MalformedGenerationOutput,
)
from .prompts import build_slide_prompt
from .parsing import coerce_slides, find_json_array, parse_and_validate, parse_slide_array, validate_slides
from .extraction import ContentExtractor, PdfTextExtractor
from .recorder import GenerationRecorder
from .generation import SlideGenerationService
from .ingestion import DocumentIngestionService
from .rendering import DeckRenderer, chart_series

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "setup_logging",
    # Errors
    "SlideServiceError",
    "ValidationError",
    "UnsupportedMediaType",
    "ExtractionFailed",
    "NotFoundError",
    "UpstreamUnavailable",
    "StorageUnavailable",
    "GenerationUnavailable",
    "GenerationTimeout",
    "MalformedGenerationOutput",
    # Prompting and parsing
    "build_slide_prompt",
    "coerce_slides",
    "find_json_array",
    "parse_and_validate",
    "parse_slide_array",
    "validate_slides",
    # Services
    "ContentExtractor",
    "PdfTextExtractor",
    "GenerationRecorder",
    "SlideGenerationService",
    "DocumentIngestionService",
    "DeckRenderer",
    "chart_series",
]
