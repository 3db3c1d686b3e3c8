"""
Prompt templates for RFP slide generation.
"""

from typing import Any, Optional

from rfp_slides.core.errors import ValidationError
from rfp_slides.utils.schemas import BrandGuide

MIN_SLIDES = 3
MAX_SLIDES = 15
DEFAULT_SLIDE_COUNT = 5

SLIDE_DESIGNER_SYSTEM_PROMPT = "You are an expert presentation designer for RFP responses."

DEFAULT_STYLING_CLAUSE = "Use professional corporate styling."

SLIDE_REQUIREMENTS = [
    "Start with a compelling title slide",
    "Include executive summary",
    "Address key RFP requirements",
    "Use clear hierarchy (headings, subheadings)",
    "Mix content types: bullets for lists, text for narrative, charts for data",
    "Keep slides concise and impactful",
    "Add CONFIDENTIAL disclaimer on first slide",
    "Maintain brand voice throughout",
]

SLIDE_OUTPUT_FORMAT = """Return ONLY a valid JSON array:
[
  {
    "slideNumber": 1,
    "title": "Slide Title",
    "contentType": "bullets|text|chart",
    "content": ["Point 1", "Point 2"] or "Text" or {"chartType": "bar", "data": [...]},
    "layout": "title|bullets|twoColumn|chart",
    "notes": "Presenter notes"
  }
]"""


def _brand_clause(brand_guide: Optional[BrandGuide]) -> str:
    if brand_guide is None:
        return DEFAULT_STYLING_CLAUSE
    return (
        "Brand Guidelines:\n"
        f"- Brand: {brand_guide.brand_name}\n"
        f"- Voice: {brand_guide.voice_tone}\n"
        f"- Colors: {brand_guide.color_palette}\n"
        f"- Typography: {brand_guide.typography}"
    )


def check_slide_count(slide_count: Any) -> int:
    if isinstance(slide_count, bool) or not isinstance(slide_count, int):
        raise ValidationError("slideCount must be an integer")
    if not MIN_SLIDES <= slide_count <= MAX_SLIDES:
        raise ValidationError(f"slideCount must be between {MIN_SLIDES} and {MAX_SLIDES}")
    return slide_count


def build_slide_prompt(
    rfp_text: str,
    slide_count: int = DEFAULT_SLIDE_COUNT,
    brand_guide: Optional[BrandGuide] = None,
) -> str:
    """
    Compose the generation instruction for one slide deck.

    Args:
        rfp_text: Extracted RFP content
        slide_count: Number of slides to request (3-15)
        brand_guide: Optional brand guide whose style fields are embedded verbatim

    Returns:
        Single prompt string: instructions, output contract and RFP content

    Raises:
        ValidationError: If the RFP text is blank or slide_count is out of range
    """
    if not rfp_text or not rfp_text.strip():
        raise ValidationError("RFP document has no extractable text")
    check_slide_count(slide_count)

    requirements = "\n".join(
        f"{i}. {requirement}" for i, requirement in enumerate(SLIDE_REQUIREMENTS, 1)
    )

    return f"""Create {slide_count} professional slides from the RFP content provided.

{_brand_clause(brand_guide)}

Requirements:
{requirements}

{SLIDE_OUTPUT_FORMAT}

RFP Content:
{rfp_text}

Generate {slide_count} slides. Return ONLY valid JSON."""
