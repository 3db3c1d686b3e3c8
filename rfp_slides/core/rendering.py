"""
Deck Renderer

Builds a .pptx from generated slides with python-pptx. Each slide's layout
tag picks the slide layout; contentType picks how the body is filled.
"""

import asyncio
import io
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pptx import Presentation
from pptx.chart.data import CategoryChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.enum.shapes import MSO_SHAPE
from pptx.util import Inches, Pt

from rfp_slides.core.errors import ValidationError
from rfp_slides.core.parsing import CONFIDENTIAL_MARKER, coerce_slides
from rfp_slides.utils.schemas import (
    BrandColors,
    BulletsSlide,
    ChartContent,
    ChartSlide,
    RenderedDeck,
    Slide,
)

logger = logging.getLogger(__name__)

PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

# Indexes into the default template's slide layouts
LAYOUT_INDEX = {
    "title": 0,      # Title Slide
    "bullets": 1,    # Title and Content
    "twoColumn": 3,  # Two Content
    "chart": 5,      # Title Only
    "default": 1,
}

CHART_TYPES = {
    "bar": XL_CHART_TYPE.COLUMN_CLUSTERED,
    "column": XL_CHART_TYPE.COLUMN_CLUSTERED,
    "horizontalbar": XL_CHART_TYPE.BAR_CLUSTERED,
    "stackedbar": XL_CHART_TYPE.COLUMN_STACKED,
    "line": XL_CHART_TYPE.LINE_MARKERS,
    "area": XL_CHART_TYPE.AREA,
    "pie": XL_CHART_TYPE.PIE,
    "doughnut": XL_CHART_TYPE.DOUGHNUT,
    "donut": XL_CHART_TYPE.DOUGHNUT,
}
SINGLE_SERIES_CHARTS = (XL_CHART_TYPE.PIE, XL_CHART_TYPE.DOUGHNUT)

LABEL_KEYS = ("label", "category", "name", "x", "year", "quarter", "month", "period")

BODY_FONT_PT = 20
FOOTER_TEXT = "CONFIDENTIAL"
DEFAULT_COLORS = BrandColors()

HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")

ChartSeriesData = Tuple[List[str], List[Tuple[str, List[Optional[float]]]]]


def _rgb(value: Optional[str], fallback: str) -> RGBColor:
    match = HEX_COLOR.match((value or "").strip()) or HEX_COLOR.match(fallback)
    return RGBColor.from_string(match.group(1).upper())


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "").strip("%$€£ ")
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None


def _series_from_records(records: List[Dict[str, Any]]) -> Optional[ChartSeriesData]:
    label_key = next((k for k in LABEL_KEYS if any(k in r for r in records)), None)
    if label_key is None:
        label_key = next((k for k, v in records[0].items() if isinstance(v, str)), None)

    series_names: List[str] = []
    for record in records:
        for key, value in record.items():
            if key != label_key and key not in series_names and _number(value) is not None:
                series_names.append(key)
    if not series_names:
        return None

    categories = [
        str(record.get(label_key, i)) if label_key else f"Item {i}"
        for i, record in enumerate(records, 1)
    ]
    series = [(name, [_number(record.get(name)) for record in records]) for name in series_names]
    return categories, series


def chart_series(content: ChartContent) -> Optional[ChartSeriesData]:
    """
    Normalize model chart data into categories and named series.

    Accepts a list of records ({"label": "Q1", "value": 10}), a plain list
    of numbers, a {label: number} mapping, {"labels"/"categories", "values"},
    {"categories", "series": [{name, values}]} and Chart.js style
    {"labels", "datasets": [{label, data}]}.

    Returns:
        (categories, [(series_name, values)]) or None if nothing is plottable
    """
    data = content.data

    if isinstance(data, list) and data:
        if all(isinstance(item, dict) for item in data):
            return _series_from_records(data)
        values = [_number(item) for item in data]
        if any(v is not None for v in values):
            return [f"Item {i}" for i in range(1, len(values) + 1)], [("Value", values)]
        return None

    if isinstance(data, dict) and data:
        categories = data.get("labels") or data.get("categories")
        if isinstance(categories, list):
            categories = [str(c) for c in categories]
            if isinstance(data.get("values"), list):
                return categories, [("Value", [_number(v) for v in data["values"]])]
            raw_series = data.get("series") or data.get("datasets")
            if isinstance(raw_series, list):
                series = []
                for i, entry in enumerate(raw_series, 1):
                    if not isinstance(entry, dict):
                        continue
                    name = str(entry.get("name") or entry.get("label") or f"Series {i}")
                    values = entry.get("values") or entry.get("data")
                    if not isinstance(values, list):
                        continue
                    series.append((name, [_number(v) for v in values]))
                return (categories, series) if series else None
            return None

        numeric = {str(k): _number(v) for k, v in data.items()}
        if any(v is not None for v in numeric.values()):
            return list(numeric), [("Value", list(numeric.values()))]

    return None


def _chart_type(name: str):
    key = re.sub(r"[^a-z]", "", (name or "").lower())
    return CHART_TYPES.get(key, XL_CHART_TYPE.COLUMN_CLUSTERED)


def _content_lines(slide: Slide) -> List[str]:
    if isinstance(slide, BulletsSlide):
        return slide.content
    if isinstance(slide, ChartSlide):
        series = chart_series(slide.content)
        if series is None:
            return [str(slide.content.data)]
        categories, values = series
        return [
            f"{name} - " + ", ".join(f"{c}: {v:g}" for c, v in zip(categories, vals) if v is not None)
            for name, vals in values
        ]
    return [line for line in slide.content.splitlines() if line.strip()] or [slide.content]


def _slide_text(slide: Slide) -> str:
    return " ".join([slide.title, *_content_lines(slide), slide.notes or ""]).lower()


class DeckRenderer:
    """Render validated slides into presentation bytes."""

    def __init__(self, template_path: Optional[str] = None):
        self.template_path = template_path

    async def render(
        self,
        slides: Optional[List[Any]],
        rfp_filename: Optional[str] = None,
        brand_colors: Optional[BrandColors] = None,
    ) -> RenderedDeck:
        """
        Render slides to a .pptx file.

        Args:
            slides: Raw slide dicts as returned by generation
            rfp_filename: Used to name the download
            brand_colors: Optional title/body/accent colors

        Raises:
            ValidationError: If slides is missing or empty
        """
        if not slides:
            raise ValidationError("Slides array is required")

        data = await asyncio.to_thread(self.render_bytes, coerce_slides(slides), brand_colors or DEFAULT_COLORS)
        stem = re.sub(r"[^A-Za-z0-9._-]", "_", Path(rfp_filename).stem) if rfp_filename else ""
        filename = f"slides_{stem}.pptx" if stem else "slides.pptx"
        logger.info(f"Rendered deck: {filename} ({len(slides)} slides, {len(data)} bytes)")
        return RenderedDeck(filename=filename, data=data)

    def render_bytes(self, slides: List[Slide], colors: BrandColors) -> bytes:
        prs = Presentation(self.template_path) if self.template_path else Presentation()
        for slide in slides:
            self._add_slide(prs, slide, colors)

        buffer = io.BytesIO()
        prs.save(buffer)
        return buffer.getvalue()

    def _add_slide(self, prs, slide: Slide, colors: BrandColors) -> None:
        layout = prs.slide_layouts[LAYOUT_INDEX.get(slide.layout, LAYOUT_INDEX["default"])]
        pptx_slide = prs.slides.add_slide(layout)

        if pptx_slide.shapes.title is not None:
            pptx_slide.shapes.title.text = slide.title
            for paragraph in pptx_slide.shapes.title.text_frame.paragraphs:
                for run in paragraph.runs:
                    run.font.color.rgb = _rgb(colors.primary, DEFAULT_COLORS.primary)

        if slide.layout == "title":
            self._fill_title_slide(prs, pptx_slide, slide, colors)
        elif slide.layout == "twoColumn":
            self._fill_two_column(prs, pptx_slide, slide, colors)
        elif slide.layout == "chart":
            self._fill_chart_slide(prs, pptx_slide, slide, colors)
        else:
            self._fill_body(prs, pptx_slide, slide, colors, placeholder_idx=1)

        if slide.notes:
            pptx_slide.notes_slide.notes_text_frame.text = slide.notes

    # ------------------------------------------------------------------ layouts

    def _fill_title_slide(self, prs, pptx_slide, slide: Slide, colors: BrandColors) -> None:
        subtitle = self._placeholder(pptx_slide, 1)
        if subtitle is not None:
            subtitle.text_frame.text = "\n".join(_content_lines(slide))
            self._color_text(subtitle.text_frame, colors.secondary)

        band = pptx_slide.shapes.add_shape(
            MSO_SHAPE.RECTANGLE, 0, 0, prs.slide_width, Inches(0.35)
        )
        band.fill.solid()
        band.fill.fore_color.rgb = _rgb(colors.primary, DEFAULT_COLORS.primary)
        band.line.fill.background()

        if CONFIDENTIAL_MARKER not in _slide_text(slide):
            footer = pptx_slide.shapes.add_textbox(
                Inches(0.5), prs.slide_height - Inches(0.8), prs.slide_width - Inches(1), Inches(0.4)
            )
            footer.text_frame.text = FOOTER_TEXT
            run = footer.text_frame.paragraphs[0].runs[0]
            run.font.size = Pt(12)
            run.font.bold = True
            run.font.color.rgb = _rgb(colors.accent, DEFAULT_COLORS.accent)

    def _fill_two_column(self, prs, pptx_slide, slide: Slide, colors: BrandColors) -> None:
        left = self._placeholder(pptx_slide, 1)
        right = self._placeholder(pptx_slide, 2)

        if isinstance(slide, ChartSlide) and chart_series(slide.content) is not None:
            self._remove(left)
            self._add_chart_in(pptx_slide, right, slide.content, colors)
            return

        lines = _content_lines(slide)
        if isinstance(slide, BulletsSlide) and len(lines) > 1:
            half = (len(lines) + 1) // 2
            self._write_lines(left, lines[:half], colors)
            self._write_lines(right, lines[half:], colors)
        else:
            self._write_lines(left, lines, colors)
            self._remove(right)

    def _fill_chart_slide(self, prs, pptx_slide, slide: Slide, colors: BrandColors) -> None:
        left, top = Inches(0.5), Inches(1.5)
        width, height = prs.slide_width - Inches(1), prs.slide_height - Inches(2)

        if isinstance(slide, ChartSlide) and self._add_chart(pptx_slide, slide.content, colors, left, top, width, height):
            return

        box = pptx_slide.shapes.add_textbox(left, top, width, height)
        box.text_frame.word_wrap = True
        self._write_lines(box, _content_lines(slide), colors)

    def _fill_body(self, prs, pptx_slide, slide: Slide, colors: BrandColors, placeholder_idx: int) -> None:
        body = self._placeholder(pptx_slide, placeholder_idx)
        if isinstance(slide, ChartSlide) and chart_series(slide.content) is not None:
            self._add_chart_in(pptx_slide, body, slide.content, colors)
            return
        self._write_lines(body, _content_lines(slide), colors)

    # ------------------------------------------------------------------ helpers

    @staticmethod
    def _placeholder(pptx_slide, idx: int):
        for placeholder in pptx_slide.placeholders:
            if placeholder.placeholder_format.idx == idx:
                return placeholder
        return None

    @staticmethod
    def _remove(shape) -> None:
        if shape is not None:
            element = shape._element
            element.getparent().remove(element)

    @staticmethod
    def _color_text(text_frame, color: str) -> None:
        for paragraph in text_frame.paragraphs:
            for run in paragraph.runs:
                run.font.color.rgb = _rgb(color, DEFAULT_COLORS.secondary)

    def _write_lines(self, shape, lines: List[str], colors: BrandColors) -> None:
        if shape is None:
            return
        text_frame = shape.text_frame
        text_frame.clear()
        for i, line in enumerate(lines):
            paragraph = text_frame.paragraphs[0] if i == 0 else text_frame.add_paragraph()
            paragraph.text = line
            for run in paragraph.runs:
                run.font.size = Pt(BODY_FONT_PT)
                run.font.color.rgb = _rgb(colors.secondary, DEFAULT_COLORS.secondary)

    def _add_chart_in(self, pptx_slide, placeholder, content: ChartContent, colors: BrandColors) -> bool:
        if placeholder is None:
            return False
        left, top, width, height = placeholder.left, placeholder.top, placeholder.width, placeholder.height
        self._remove(placeholder)
        return self._add_chart(pptx_slide, content, colors, left, top, width, height)

    def _add_chart(self, pptx_slide, content: ChartContent, colors: BrandColors, left, top, width, height) -> bool:
        series_data = chart_series(content)
        if series_data is None:
            logger.warning(f"Chart data not plottable, rendering as text: {content.data!r}")
            return False

        categories, series = series_data
        chart_type = _chart_type(content.chart_type)
        if chart_type in SINGLE_SERIES_CHARTS:
            series = series[:1]

        chart_data = CategoryChartData()
        chart_data.categories = categories
        for name, values in series:
            chart_data.add_series(name, values)

        chart = pptx_slide.shapes.add_chart(chart_type, left, top, width, height, chart_data).chart
        chart.has_legend = len(series) > 1 or chart_type in SINGLE_SERIES_CHARTS
        if chart.has_legend:
            chart.legend.position = XL_LEGEND_POSITION.BOTTOM
            chart.legend.include_in_layout = False

        if chart_type not in SINGLE_SERIES_CHARTS:
            first = chart.plots[0].series[0]
            first.format.fill.solid()
            first.format.fill.fore_color.rgb = _rgb(colors.accent, DEFAULT_COLORS.accent)
            if chart_type == XL_CHART_TYPE.LINE_MARKERS:
                first.format.line.color.rgb = _rgb(colors.accent, DEFAULT_COLORS.accent)
        return True
