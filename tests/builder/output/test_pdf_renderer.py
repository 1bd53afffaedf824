"""
Unit Tests for PDF Rendering

Tests for drawing paginated layouts with reportlab.
"""

import pytest

from paper_toolkit.builder.arrangement import arrange_paper
from paper_toolkit.builder.controller import layout_paper
from paper_toolkit.builder.layout import LayoutConfig, LayoutResult
from paper_toolkit.builder.output import render_pdf_bytes, render_to_pdf
from paper_toolkit.core.models import PaperHeader, Question


@pytest.fixture
def long_paper(make_question, sample_header):
    questions = [
        make_question(marks=2, type="short", text=f"Explain phenomenon {i} in detail. " * 6)
        for i in range(40)
    ]
    return arrange_paper(sample_header, questions)


def _page_texts(data: bytes):
    fitz = pytest.importorskip("fitz")
    with fitz.open(stream=data, filetype="pdf") as doc:
        return [page.get_text() for page in doc]


class TestRenderPdf:
    """Tests for render_pdf_bytes / render_to_pdf."""

    def test_when_rendered_then_pdf_bytes(self, long_paper, plain_math):
        layout = layout_paper(long_paper, LayoutConfig(), math=plain_math)

        data = render_pdf_bytes(layout)

        assert data.startswith(b"%PDF")

    def test_when_rendered_then_one_pdf_page_per_plan(self, long_paper, plain_math):
        layout = layout_paper(long_paper, LayoutConfig(), math=plain_math)

        texts = _page_texts(render_pdf_bytes(layout))

        assert layout.page_count > 1
        assert len(texts) == layout.page_count

    def test_when_rendered_then_footer_shows_page_of_total(self, long_paper, plain_math):
        # Arrange
        layout = layout_paper(long_paper, LayoutConfig(), math=plain_math)
        total = layout.page_count

        # Act
        texts = _page_texts(render_pdf_bytes(layout))

        # Assert
        for index, text in enumerate(texts, start=1):
            assert f"Page {index} of {total}" in text

    def test_when_rendered_then_question_numbers_present(self, long_paper, plain_math):
        layout = layout_paper(long_paper, LayoutConfig(), math=plain_math)

        combined = "\n".join(_page_texts(render_pdf_bytes(layout)))

        assert "Q1." in combined
        assert "Q40." in combined
        assert "Unit Test" in combined

    def test_when_degraded_then_math_source_visible(self, plain_math):
        paper = arrange_paper(PaperHeader(), [Question(id="m", text="Find $x+1$ here", marks=1)])
        layout = layout_paper(paper, LayoutConfig(), math=plain_math)

        text = _page_texts(render_pdf_bytes(layout))[0]

        assert layout.degraded
        assert "$x+1$" in text

    def test_when_math_rendered_then_image_drawn(self):
        pytest.importorskip("matplotlib")
        fitz = pytest.importorskip("fitz")
        paper = arrange_paper(PaperHeader(), [Question(id="m", text="Find $\\frac{a}{b}$", marks=1)])
        layout = layout_paper(paper, LayoutConfig())

        with fitz.open(stream=render_pdf_bytes(layout), filetype="pdf") as doc:
            images = doc[0].get_images()

        assert not layout.degraded
        assert len(images) >= 1

    def test_when_generator_note_enabled_then_drawn(self, plain_math):
        config = LayoutConfig(show_generator_note=True)
        paper = arrange_paper(PaperHeader(), [Question(id="q", text="Hi", marks=1)])
        layout = layout_paper(paper, config, math=plain_math)

        text = _page_texts(render_pdf_bytes(layout, config))[0]

        assert "Generated with Paper Toolkit" in text

    def test_when_written_to_path_then_parent_created(self, tmp_path, long_paper, plain_math):
        layout = layout_paper(long_paper, LayoutConfig(), math=plain_math)
        target = tmp_path / "nested" / "paper.pdf"

        path = render_to_pdf(layout, target, title="Unit Test")

        assert path == target
        assert target.read_bytes().startswith(b"%PDF")

    def test_when_layout_empty_then_valid_pdf(self):
        data = render_pdf_bytes(LayoutResult(pages=()))

        assert data.startswith(b"%PDF")
