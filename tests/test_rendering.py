"""
Tests for the python-pptx deck renderer. Decks are reopened with
python-pptx and inspected.
"""

import io

import pytest
from pptx import Presentation
from pptx.dml.color import RGBColor

from rfp_slides.core.errors import ValidationError
from rfp_slides.core.rendering import DeckRenderer, chart_series
from rfp_slides.utils.schemas import BrandColors, ChartContent

from tests.conftest import SAMPLE_SLIDES


def _texts(slide):
    return [shape.text_frame.text for shape in slide.shapes if shape.has_text_frame]


@pytest.fixture
def renderer():
    return DeckRenderer()


class TestRender:
    @pytest.mark.asyncio
    async def test_renders_one_slide_per_entry(self, renderer):
        deck = await renderer.render(SAMPLE_SLIDES, rfp_filename="specs.pdf")

        assert deck.filename == "slides_specs.pptx"
        prs = Presentation(io.BytesIO(deck.data))
        assert len(prs.slides) == len(SAMPLE_SLIDES)
        assert prs.slides[0].shapes.title.text == "Cloud Migration Proposal"

    @pytest.mark.asyncio
    async def test_bullets_and_notes(self, renderer):
        deck = await renderer.render(SAMPLE_SLIDES)
        prs = Presentation(io.BytesIO(deck.data))

        assert deck.filename == "slides.pptx"
        assert "Migrate 40 workloads" in "\n".join(_texts(prs.slides[1]))
        assert prs.slides[0].notes_slide.notes_text_frame.text == "Open with the client's goals"

    @pytest.mark.asyncio
    async def test_chart_slide_has_chart(self, renderer):
        deck = await renderer.render(SAMPLE_SLIDES)
        prs = Presentation(io.BytesIO(deck.data))

        charts = [shape.chart for shape in prs.slides[2].shapes if shape.has_chart]
        assert len(charts) == 1
        assert list(charts[0].plots[0].categories) == ["Assess", "Migrate"]

    @pytest.mark.asyncio
    async def test_two_column_splits_bullets(self, renderer):
        deck = await renderer.render(SAMPLE_SLIDES)
        prs = Presentation(io.BytesIO(deck.data))

        body = [text for text in _texts(prs.slides[3]) if text != "Team and Timeline"]
        assert body == ["Lead architect\nFour engineers", "Q1 start\nQ3 cut-over"]

    @pytest.mark.asyncio
    async def test_confidential_footer_added_when_missing(self, renderer):
        slides = [{"slideNumber": 1, "title": "Proposal", "contentType": "text", "content": "Acme", "layout": "title"}]
        deck = await renderer.render(slides)
        prs = Presentation(io.BytesIO(deck.data))

        assert "CONFIDENTIAL" in _texts(prs.slides[0])

    @pytest.mark.asyncio
    async def test_no_duplicate_footer(self, renderer):
        deck = await renderer.render(SAMPLE_SLIDES[:1])
        prs = Presentation(io.BytesIO(deck.data))

        assert "CONFIDENTIAL" not in _texts(prs.slides[0])

    @pytest.mark.asyncio
    async def test_brand_colors_applied_to_titles(self, renderer):
        deck = await renderer.render(SAMPLE_SLIDES[1:2], brand_colors=BrandColors(primary="#FF0000"))
        prs = Presentation(io.BytesIO(deck.data))

        run = prs.slides[0].shapes.title.text_frame.paragraphs[0].runs[0]
        assert run.font.color.rgb == RGBColor(0xFF, 0x00, 0x00)

    @pytest.mark.asyncio
    async def test_unplottable_chart_falls_back_to_text(self, renderer):
        slides = [{
            "slideNumber": 1, "title": "Risks", "contentType": "chart",
            "content": {"chartType": "pie", "data": "see appendix"}, "layout": "chart",
        }]
        deck = await renderer.render(slides)
        prs = Presentation(io.BytesIO(deck.data))

        assert not any(shape.has_chart for shape in prs.slides[0].shapes)
        assert "see appendix" in "\n".join(_texts(prs.slides[0]))

    @pytest.mark.asyncio
    async def test_filename_is_sanitized(self, renderer):
        deck = await renderer.render(SAMPLE_SLIDES[:1], rfp_filename='big "deal" rfp.pdf')
        assert deck.filename == "slides_big__deal__rfp.pptx"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slides", [None, []])
    async def test_empty_slides_rejected(self, renderer, slides):
        with pytest.raises(ValidationError) as exc_info:
            await renderer.render(slides)
        assert exc_info.value.error == "Slides array is required"


class TestChartSeries:
    def test_records(self):
        data = [{"quarter": "Q1", "revenue": 10, "cost": "4"}, {"quarter": "Q2", "revenue": 12, "cost": 5}]
        assert chart_series(ChartContent(data=data)) == (
            ["Q1", "Q2"],
            [("revenue", [10.0, 12.0]), ("cost", [4.0, 5.0])],
        )

    def test_number_list(self):
        assert chart_series(ChartContent(data=[3, "4%"])) == (["Item 1", "Item 2"], [("Value", [3.0, 4.0])])

    def test_label_mapping(self):
        assert chart_series(ChartContent(data={"North": 5, "South": 7})) == (
            ["North", "South"],
            [("Value", [5.0, 7.0])],
        )

    def test_labels_and_values(self):
        data = {"labels": ["A", "B"], "values": [1, 2]}
        assert chart_series(ChartContent(data=data)) == (["A", "B"], [("Value", [1.0, 2.0])])

    def test_chartjs_datasets(self):
        data = {"labels": ["2023", "2024"], "datasets": [{"label": "Users", "data": [100, 150]}]}
        assert chart_series(ChartContent(data=data)) == (["2023", "2024"], [("Users", [100.0, 150.0])])

    @pytest.mark.parametrize("data", [[], {}, "text", ["a", "b"], {"labels": ["A"]}])
    def test_unplottable(self, data):
        assert chart_series(ChartContent(data=data)) is None

    def test_series_with_scalar_values_skipped(self):
        data = {
            "categories": ["A", "B"],
            "series": [{"name": "S", "values": 5}, {"name": "T", "values": [1, 2]}],
        }
        assert chart_series(ChartContent(data=data)) == (["A", "B"], [("T", [1.0, 2.0])])

    def test_only_scalar_series_is_unplottable(self):
        data = {"categories": ["A", "B"], "series": [{"name": "S", "values": 5}]}
        assert chart_series(ChartContent(data=data)) is None


class TestRenderChartShapes:
    @pytest.mark.asyncio
    async def test_scalar_series_values_render_as_text(self, renderer):
        slides = [{
            "slideNumber": 1, "title": "Budget", "contentType": "chart",
            "content": {"chartType": "bar", "data": {"categories": ["A", "B"], "series": [{"name": "S", "values": 5}]}},
            "layout": "chart",
        }]
        deck = await renderer.render(slides)
        prs = Presentation(io.BytesIO(deck.data))

        assert len(prs.slides) == 1
        assert not any(shape.has_chart for shape in prs.slides[0].shapes)
