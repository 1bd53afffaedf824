"""
Module: builder.output.renderer

Purpose:
    Render LayoutResult to PDF using ReportLab.
    Each PagePlan becomes one PDF page; text runs are drawn as text,
    math runs as images, and every page gets the "Page X of N" footer
    in the reserved strip.

Key Functions:
    - render_to_pdf(): Write PDF file
    - render_pdf_bytes(): Render PDF into memory

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling
    - builder.layout.models: LayoutResult, PagePlan

Used By:
    - builder.controller: Pipeline orchestration
    - builder.workflow: Export step
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from paper_toolkit.builder.layout.config import LayoutConfig
from paper_toolkit.builder.layout.models import (
    BlockKind,
    BlockPlacement,
    LayoutResult,
    PagePlan,
    TextRun,
)

logger = logging.getLogger(__name__)

# Baseline position inside a text run box, as a fraction of font size
ASCENT_RATIO = 0.78
GENERATOR_FONT_SIZE = 7
RULE_GREY = 0.13
BOX_STROKE_GREY = 0.85
BOX_FILL_GREY = 0.98
CHIP_FILL_GREY = 0.96


def _get_footer_note() -> str:
    """Generator note with current version number."""
    try:
        from paper_toolkit import __version__
        version = __version__
    except ImportError:
        version = "unknown"
    return f"Generated with Paper Toolkit v{version}"


def render_pdf_bytes(
    layout: LayoutResult,
    config: Optional[LayoutConfig] = None,
    *,
    title: Optional[str] = None,
) -> bytes:
    """
    Render layout result to PDF bytes.

    Example:
        >>> data = render_pdf_bytes(layout)
        >>> data[:5]
        b'%PDF-'
    """
    buf = io.BytesIO()
    _render(buf, layout, config or LayoutConfig(), title)
    return buf.getvalue()


def render_to_pdf(
    layout: LayoutResult,
    output_path: Union[str, Path],
    config: Optional[LayoutConfig] = None,
    *,
    title: Optional[str] = None,
) -> Path:
    """
    Render layout result to PDF file.

    Args:
        layout: Layout result from paginator
        output_path: Path to write PDF
        config: Layout configuration used for pagination
        title: PDF document title metadata

    Returns:
        The written path

    Raises:
        OSError: If PDF cannot be written

    Example:
        >>> render_to_pdf(layout, Path("output/Physics_All_Question_Paper.pdf"))
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _render(str(output_path), layout, config or LayoutConfig(), title)
    logger.info(f"Rendered {layout.page_count} pages to {output_path}")
    return output_path


def _render(target, layout: LayoutResult, config: LayoutConfig, title: Optional[str]) -> None:
    if layout.page_count == 0:
        logger.warning("Empty layout, creating empty PDF")

    c = canvas.Canvas(target, pagesize=(config.page_width, config.page_height))
    if title:
        c.setTitle(title)

    for page in layout.pages:
        _render_page(c, page, config)
        c.showPage()

    c.save()


def _render_page(c: canvas.Canvas, page: PagePlan, config: LayoutConfig) -> None:
    """Render a single page: decorations, runs, then the footer."""
    for placement in page.placements:
        _draw_decorations(c, placement, config)
        for line in placement.block.lines:
            line_top = placement.top + line.top
            for run in line.runs:
                _draw_run(c, run, line_top, config)

    _draw_footer(c, page, config)


def _draw_run(c: canvas.Canvas, run: TextRun, line_top: float, config: LayoutConfig) -> None:
    x_pt = config.margin_left + run.x
    box_top = line_top + run.offset

    if run.is_math:
        y_pt = _transform_y(config.page_height, box_top, run.height)
        c.drawImage(
            _pil_to_reader(run.image),
            x_pt,
            y_pt,
            width=run.width,
            height=run.height,
            mask="auto",
        )
        return

    c.saveState()
    if run.boxed:
        _draw_chip(c, run, x_pt, box_top, config)
        text_width = c.stringWidth(run.text, run.font_name, run.font_size)
        x_pt += (run.width - text_width) / 2

    c.setFont(run.font_name, run.font_size)
    c.setFillGray(run.color)
    baseline = config.page_height - (box_top + run.font_size * ASCENT_RATIO)
    c.drawString(x_pt, baseline, run.text)
    c.restoreState()


def _draw_chip(c: canvas.Canvas, run: TextRun, x_pt: float, box_top: float, config: LayoutConfig) -> None:
    height = run.height + 4
    y_pt = _transform_y(config.page_height, box_top - 2, height)
    c.setStrokeGray(BOX_STROKE_GREY)
    c.setFillGray(CHIP_FILL_GREY)
    c.roundRect(x_pt, y_pt, run.width, height, radius=height / 2, stroke=1, fill=1)


def _draw_decorations(c: canvas.Canvas, placement: BlockPlacement, config: LayoutConfig) -> None:
    """Block-level decorations drawn underneath the text."""
    block = placement.block
    left = config.margin_left
    width = config.available_width

    c.saveState()
    if block.kind is BlockKind.HEADER:
        c.setStrokeGray(RULE_GREY)
        c.setLineWidth(0.8)
        y_pt = config.page_height - placement.bottom + 1
        c.line(left, y_pt, left + width, y_pt)

    elif block.kind is BlockKind.INSTRUCTIONS:
        c.setStrokeGray(BOX_STROKE_GREY)
        c.setFillGray(BOX_FILL_GREY)
        y_pt = _transform_y(config.page_height, placement.top, block.height)
        c.roundRect(left, y_pt, width, block.height, radius=4, stroke=1, fill=1)

    elif block.kind is BlockKind.SECTION_TITLE:
        c.setFillGray(RULE_GREY)
        y_pt = _transform_y(config.page_height, placement.top, block.height)
        c.rect(left, y_pt, 3, block.height, stroke=0, fill=1)
    c.restoreState()


def _draw_footer(c: canvas.Canvas, page: PagePlan, config: LayoutConfig) -> None:
    """
    Draw the page label centered in the footer strip.

    The strip sits between the content area and the bottom margin and is
    never used by content (except by an overflowing block).
    """
    label = page.footer_label
    size = config.footer_font_size
    y_pt = config.margin_bottom + (config.footer_height - size) / 2

    c.saveState()
    c.setFont(config.font_name, size)
    c.setFillGray(0.4)
    text_width = c.stringWidth(label, config.font_name, size)
    c.drawString((config.page_width - text_width) / 2, y_pt, label)

    if config.show_generator_note:
        c.setFont(config.font_name, GENERATOR_FONT_SIZE)
        c.drawString(config.margin_left, y_pt, _get_footer_note())
    c.restoreState()


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Args:
        img: PIL Image object

    Returns:
        ImageReader for use with ReportLab
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def _transform_y(page_height_pt: float, top_pt: float, height_pt: float) -> float:
    """
    Convert a top-down Y coordinate to bottom-up PDF Y.

    Args:
        page_height_pt: Page height in points
        top_pt: Y position of the element top, from page top
        height_pt: Height of element

    Returns:
        Y position of the element bottom, from page bottom
    """
    return page_height_pt - top_pt - height_pt
