"""
Slide Parser/Validator

Turns free-form model output into the slide array. Models wrap JSON in prose
and markdown fences, so the array region is located before parsing.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from rfp_slides.core.errors import MalformedGenerationOutput
from rfp_slides.utils.schemas import (
    KNOWN_LAYOUTS,
    BulletsSlide,
    ChartContent,
    ChartSlide,
    Slide,
    TextSlide,
)

logger = logging.getLogger(__name__)

# First "[" followed by "{" through the last "}" followed by "]"
JSON_ARRAY_PATTERN = re.compile(r"\[\s*\{.*\}\s*\]", re.DOTALL)

REQUIRED_FIELDS = ("slideNumber", "title", "contentType", "content", "layout")
CONTENT_TYPES = ("bullets", "text", "chart")
CONFIDENTIAL_MARKER = "confidential"


def find_json_array(raw_text: str) -> Optional[str]:
    """
    Locate the JSON-array-of-objects region in model output.

    Args:
        raw_text: Free-form model response

    Returns:
        The matched substring, or None if no array-like region exists
    """
    match = JSON_ARRAY_PATTERN.search(raw_text or "")
    return match.group(0) if match else None


def parse_slide_array(raw_text: str) -> List[Any]:
    """
    Parse the slide array out of model output.

    The bracketed region is parsed when present; otherwise the whole text is
    parsed. The array is returned verbatim.

    Raises:
        MalformedGenerationOutput: No array region and the text is not JSON,
            the region is not valid JSON, or the value is not an array
    """
    region = find_json_array(raw_text)

    if region is not None:
        try:
            value = json.loads(region)
        except json.JSONDecodeError as e:
            raise MalformedGenerationOutput(f"JSON array region is not valid JSON: {e}") from e
    else:
        try:
            value = json.loads(raw_text)
        except (json.JSONDecodeError, TypeError) as e:
            raise MalformedGenerationOutput("No JSON array found in model output") from e

    if not isinstance(value, list):
        raise MalformedGenerationOutput(
            f"Expected a JSON array of slides, got {type(value).__name__}"
        )
    return value


@dataclass
class SlideIssue:
    """A structural problem found in one generated slide."""
    index: int
    message: str

    def __str__(self) -> str:
        return f"slide[{self.index}]: {self.message}"


def _content_matches(content_type: str, content: Any) -> bool:
    if content_type == "bullets":
        return isinstance(content, list)
    if content_type == "text":
        return isinstance(content, str)
    if content_type == "chart":
        return isinstance(content, dict)
    return False


def _mentions_confidential(slide: Dict[str, Any]) -> bool:
    text = json.dumps([slide.get("content"), slide.get("notes"), slide.get("title")])
    return CONFIDENTIAL_MARKER in text.lower()


def validate_slides(slides: List[Any]) -> List[SlideIssue]:
    """
    Check generated slides against the slide schema.

    Slides are never rejected; the issues are reported so callers can log
    them. Checks required fields, contentType/content agreement, dense
    1..N numbering and the confidentiality marker on a title first slide.
    """
    issues: List[SlideIssue] = []

    for index, slide in enumerate(slides):
        if not isinstance(slide, dict):
            issues.append(SlideIssue(index, f"expected an object, got {type(slide).__name__}"))
            continue

        missing = [field for field in REQUIRED_FIELDS if field not in slide]
        if missing:
            issues.append(SlideIssue(index, f"missing fields: {', '.join(missing)}"))

        content_type = slide.get("contentType")
        if content_type is not None and content_type not in CONTENT_TYPES:
            issues.append(SlideIssue(index, f"unknown contentType {content_type!r}"))
        elif content_type is not None and "content" in slide:
            if not _content_matches(content_type, slide["content"]):
                issues.append(SlideIssue(index, f"content shape does not match contentType {content_type!r}"))

        layout = slide.get("layout")
        if layout is not None and layout not in KNOWN_LAYOUTS:
            issues.append(SlideIssue(index, f"unknown layout {layout!r}"))

        if index == 0 and layout == "title" and not _mentions_confidential(slide):
            issues.append(SlideIssue(index, "title slide has no confidentiality marker"))

    numbers = [s.get("slideNumber") for s in slides if isinstance(s, dict)]
    if numbers != list(range(1, len(slides) + 1)):
        issues.append(SlideIssue(-1, f"slideNumber values are not 1..{len(slides)}: {numbers}"))

    return issues


def parse_and_validate(raw_text: str) -> List[Any]:
    """Parse model output and log (but keep) any structurally invalid slides."""
    slides = parse_slide_array(raw_text)
    for issue in validate_slides(slides):
        logger.warning(f"Generated slide issue: {issue}")
    return slides


# ============================================================================
# Coercion into the tagged slide union
# ============================================================================

def _as_bullets(content: Any) -> List[str]:
    if isinstance(content, list):
        return [item if isinstance(item, str) else json.dumps(item) for item in content]
    if isinstance(content, dict):
        return [f"{key}: {value}" for key, value in content.items()]
    if content is None:
        return []
    return [line.strip() for line in str(content).splitlines() if line.strip()]


def _as_text(content: Any) -> str:
    if isinstance(content, list):
        return "\n".join(str(item) for item in content)
    if content is None:
        return ""
    if isinstance(content, dict):
        return json.dumps(content)
    return str(content)


def _slide_number(value: Any, position: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 1:
        return value
    if isinstance(value, str) and value.isdigit() and int(value) >= 1:
        return int(value)
    return position


def coerce_slide(item: Any, position: int) -> Slide:
    """
    Normalize one raw slide into BulletsSlide, TextSlide or ChartSlide.

    Unknown layouts become "default"; when contentType is missing or unknown
    the variant is inferred from the content shape.

    Args:
        item: Raw slide element from the parsed array
        position: 1-based position, used when slideNumber is unusable
    """
    if not isinstance(item, dict):
        return TextSlide(slide_number=position, content=_as_text(item))

    content = item.get("content")
    content_type = item.get("contentType")
    if content_type not in CONTENT_TYPES:
        if isinstance(content, list):
            content_type = "bullets"
        elif isinstance(content, dict):
            content_type = "chart"
        else:
            content_type = "text"

    layout = item.get("layout")
    notes = item.get("notes")
    common = {
        "slide_number": _slide_number(item.get("slideNumber"), position),
        "title": _as_text(item.get("title")),
        "layout": layout if layout in KNOWN_LAYOUTS else "default",
        "notes": _as_text(notes) if notes is not None else None,
    }

    if content_type == "chart":
        if isinstance(content, dict):
            chart = ChartContent(
                chart_type=str(content.get("chartType") or "bar"),
                data=content.get("data", []),
            )
            return ChartSlide(content=chart, **common)
        if isinstance(content, list):
            return ChartSlide(content=ChartContent(data=content), **common)
        return TextSlide(content=_as_text(content), **common)

    if content_type == "bullets":
        return BulletsSlide(content=_as_bullets(content), **common)

    return TextSlide(content=_as_text(content), **common)


def coerce_slides(items: List[Any]) -> List[Slide]:
    return [coerce_slide(item, position) for position, item in enumerate(items, 1)]
