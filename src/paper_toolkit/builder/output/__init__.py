"""
Module: builder.output

Purpose:
    Output generation: PDF rendering with ReportLab, math rendering,
    font selection and the HTML review preview.

Key Functions:
    - render_to_pdf(): Render layout to PDF file
    - render_pdf_bytes(): Render layout to PDF bytes
    - render_html(): Paper preview as HTML
    - split_math_segments(): Text -> text / math segments

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling
    - matplotlib: Math rendering (optional at runtime)

Used By:
    - builder.controller: Pipeline orchestration
    - builder.workflow: Export step
"""

from .math_renderer import MathRenderer, MathRenderError, MathSegment, SegmentKind, split_math_segments
from .renderer import render_pdf_bytes, render_to_pdf
from .preview import render_html

__all__ = [
    "MathRenderer",
    "MathRenderError",
    "MathSegment",
    "SegmentKind",
    "split_math_segments",
    "render_pdf_bytes",
    "render_to_pdf",
    "render_html",
]
