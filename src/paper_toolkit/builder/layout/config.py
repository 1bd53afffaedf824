"""
Module: builder.layout.config

Purpose:
    Configuration for the page layout engine.
    Defines page dimensions, margins, the reserved footer strip,
    fonts and spacing. All lengths are PDF points (1/72 inch).

Key Classes:
    - LayoutConfig: Immutable layout configuration

Dependencies:
    - dataclasses (std)

Used By:
    - builder.layout.composer: Block measurement
    - builder.layout.paginator: Page arrangement
    - builder.output.renderer: PDF drawing
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


# A4 in points
A4_WIDTH_PT = 595.2756
A4_HEIGHT_PT = 841.8898


@dataclass(frozen=True)
class LayoutConfig:
    """
    Configuration for page layout (immutable).

    Attributes:
        page_width: Page width in points
        page_height: Page height in points
        margin_top / margin_bottom / margin_left / margin_right: Margins
        footer_height: Strip reserved on every page for "Page X of N"
        block_spacing: Vertical gap between consecutive blocks
        body_font_size: Question text size
        title_font_size: Paper title size
        section_font_size: Section heading size
        meta_font_size: Question metadata line size
        footer_font_size: Footer label size
        line_spacing: Leading as a multiple of font size
        number_column: Width reserved for "Q12." before question text
        block_padding: Inner padding for boxed blocks (instructions)
        math_dpi: Resolution for rendered math images
        font_name / bold_font_name: Base-14 fonts for Latin text
        unicode_font_path: Optional TTF used for complex-script text
        show_marks_distribution: Whether to include the marks summary
        show_generator_note: Whether to print the generator note in the footer

    Example:
        >>> config = LayoutConfig()
        >>> round(config.usable_height)
        732
    """

    # Page dimensions
    page_width: float = A4_WIDTH_PT
    page_height: float = A4_HEIGHT_PT

    # Margins
    margin_top: float = 40
    margin_bottom: float = 40
    margin_left: float = 45
    margin_right: float = 45
    footer_height: float = 30

    # Spacing
    block_spacing: float = 10
    block_padding: float = 6
    number_column: float = 28
    line_spacing: float = 1.35

    # Typography
    body_font_size: float = 11
    title_font_size: float = 18
    section_font_size: float = 13
    meta_font_size: float = 8.5
    footer_font_size: float = 9
    font_name: str = "Helvetica"
    bold_font_name: str = "Helvetica-Bold"
    unicode_font_path: Optional[Path] = None

    # Behaviour
    math_dpi: int = 200
    show_marks_distribution: bool = True
    show_generator_note: bool = False

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width <= 0:
            raise ValueError(f"page_width must be positive: {self.page_width}")
        if self.page_height <= 0:
            raise ValueError(f"page_height must be positive: {self.page_height}")
        if self.footer_height < 0:
            raise ValueError(f"footer_height must be non-negative: {self.footer_height}")
        if self.available_width <= self.number_column:
            raise ValueError("Margins exceed page width")
        if self.usable_height <= 0:
            raise ValueError("Margins and footer exceed page height")
        if self.body_font_size <= 0:
            raise ValueError(f"body_font_size must be positive: {self.body_font_size}")

    @property
    def available_width(self) -> float:
        """Width available for content (excluding margins)."""
        return self.page_width - self.margin_left - self.margin_right

    @property
    def usable_height(self) -> float:
        """Content height per page (excluding margins and footer strip)."""
        return self.page_height - self.margin_top - self.margin_bottom - self.footer_height

    @property
    def content_bottom(self) -> float:
        """Y (from page top) where the footer strip begins."""
        return self.margin_top + self.usable_height
