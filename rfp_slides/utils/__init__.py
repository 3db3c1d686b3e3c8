from .schemas import (
    BrandColors,
    BrandGuide,
    DocumentType,
    GenerationResult,
    RFPDocument,
    Slide,
    SlideGeneration,
    UploadResult,
)

__all__ = [
    "BrandColors",
    "BrandGuide",
    "DocumentType",
    "GenerationResult",
    "RFPDocument",
    "Slide",
    "SlideGeneration",
    "UploadResult",
]
