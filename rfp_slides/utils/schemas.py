"""
RFP Slide Generator Schemas

Pydantic models for stored documents, generation records and slides.
Field names are camelCase on the wire and in the document store.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        """JSON-safe dict using the stored (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# Stored documents
# ============================================================================

class DocumentType(str, Enum):
    RFP = "rfp"
    BRAND_GUIDE = "brand-guide"


class RFPDocument(CamelModel):
    """Extracted RFP text plus where the uploaded original was archived."""
    content: str
    filename: str = Field(description="Original upload name, not globally unique")
    saved_filename: str = Field(description="Timestamp-prefixed archive name")
    upload_date: datetime = Field(default_factory=utcnow)
    file_path: str = Field(description="Local path or s3:// URL of the archived upload")


class BrandGuide(CamelModel):
    """
    Brand style guidelines.

    Style fields are placeholders set at upload time; they are not extracted
    from the guide's content.
    """
    brand_name: str
    content: str
    filename: str
    color_palette: str = "To be extracted"
    typography: str = "Standard"
    voice_tone: str = "Professional"
    upload_date: datetime = Field(default_factory=utcnow)


class GenerationStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class SlideGeneration(CamelModel):
    """Append-only audit record of one generation run."""
    rfp_filename: str
    brand_guide_filename: str = "None"
    slide_count: int
    slides: str = Field(description="JSON-serialized slide array")
    generated_date: datetime = Field(default_factory=utcnow)
    status: GenerationStatus = GenerationStatus.COMPLETED


class RFPDocumentSummary(CamelModel):
    filename: str
    upload_date: Optional[datetime] = None


class BrandGuideSummary(CamelModel):
    filename: str
    brand_name: Optional[str] = None
    upload_date: Optional[datetime] = None


class SlideGenerationSummary(CamelModel):
    rfp_filename: str
    brand_guide_filename: Optional[str] = None
    slide_count: int
    generated_date: Optional[datetime] = None
    status: GenerationStatus = GenerationStatus.COMPLETED


# ============================================================================
# Slides
# ============================================================================

SlideLayout = Literal["title", "bullets", "twoColumn", "chart", "default"]

KNOWN_LAYOUTS = ("title", "bullets", "twoColumn", "chart")


class ChartContent(CamelModel):
    """Chart payload as emitted by the model."""
    chart_type: str = Field(default="bar")
    data: Any = Field(default_factory=list)


class SlideBase(CamelModel):
    slide_number: int = Field(ge=1)
    title: str = ""
    layout: SlideLayout = "default"
    notes: Optional[str] = None


class BulletsSlide(SlideBase):
    content_type: Literal["bullets"] = "bullets"
    content: List[str]


class TextSlide(SlideBase):
    content_type: Literal["text"] = "text"
    content: str


class ChartSlide(SlideBase):
    content_type: Literal["chart"] = "chart"
    content: ChartContent


Slide = Union[BulletsSlide, TextSlide, ChartSlide]


class BrandColors(CamelModel):
    """Hex colors applied by the deck renderer."""
    primary: str = Field(default="#1B3A5C", description="Titles and title-slide band")
    secondary: str = Field(default="#333333", description="Body text")
    accent: str = Field(default="#8B7355", description="Chart series and rules")


# ============================================================================
# Results
# ============================================================================

class ExtractedDocument(BaseModel):
    """Plain text and page count returned by the content extractor."""
    text: str
    pages: int


class UploadResult(CamelModel):
    filename: str
    document_type: DocumentType
    pages: int


class GenerationResult(CamelModel):
    rfp_filename: str
    brand_guide_filename: str
    slide_count: int
    slides: List[Any]
    generated_at: datetime = Field(default_factory=utcnow)


class RenderedDeck(BaseModel):
    filename: str
    data: bytes
