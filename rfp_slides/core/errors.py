"""
Error taxonomy for the slide generation service.

Every error carries the HTTP status and the message placed in the
``{"success": false, "error": ..., "details": ...}`` envelope.
"""

from typing import Any, Dict, Optional


class SlideServiceError(Exception):
    """Base class for all errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, error: str, details: Optional[str] = None):
        super().__init__(error)
        self.error = error
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": False, "error": self.error}
        if self.details is not None:
            data["details"] = self.details
        return data

    def __str__(self) -> str:
        if self.details:
            return f"{self.error}: {self.details}"
        return self.error


class ValidationError(SlideServiceError):
    """Bad or missing input."""
    status_code = 400


class UnsupportedMediaType(ValidationError):
    """Uploaded file is not a PDF."""


class ExtractionFailed(ValidationError):
    """The content extractor could not read the uploaded document."""


class NotFoundError(SlideServiceError):
    status_code = 404


class UpstreamUnavailable(SlideServiceError):
    """An external collaborator (store, archive, model) failed."""
    status_code = 502


class StorageUnavailable(UpstreamUnavailable):
    pass


class GenerationUnavailable(UpstreamUnavailable):
    pass


class GenerationTimeout(UpstreamUnavailable):
    pass


class MalformedGenerationOutput(SlideServiceError):
    """Model response could not be parsed into a slide array."""
    status_code = 500

    def __init__(self, details: Optional[str] = None):
        super().__init__("Failed to generate valid slide structure", details)
