"""
Module: builder.layout.models

Purpose:
    Data models for page layout.
    Immutable dataclasses for measured blocks, their placements on pages,
    and the final layout result.

Key Classes:
    - BlockKind: Header, instructions, marks summary, titles, questions
    - TextRun: A positioned piece of text or a math image on a line
    - Line: One measured line inside a block
    - Block: Measured, unbreakable unit of content
    - BlockPlacement: Block positioned on a page
    - PagePlan: Complete page layout (1-based index, footer label)
    - LayoutResult: Final layout output

Dependencies:
    - PIL: Image type for math runs
    - dataclasses (std)

Used By:
    - builder.layout.composer: Creates Blocks
    - builder.layout.paginator: Creates PagePlans
    - builder.output.renderer: Draws them
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from PIL import Image


class BlockKind(Enum):
    """Kind of content a block carries; drives decorations when drawing."""

    HEADER = "header"
    INSTRUCTIONS = "instructions"
    MARKS_SUMMARY = "marks_summary"
    SECTION_TITLE = "section_title"
    SUBSECTION_TITLE = "subsection_title"
    QUESTION = "question"


@dataclass(frozen=True)
class TextRun:
    """
    Positioned run on a line (immutable).

    Represents either:
    - Text in one font (image is None)
    - A rendered math expression (image is set)

    Attributes:
        text: Text to draw (source expression for math runs)
        x: Left offset from the content left edge
        offset: Offset of the run box top from the line top
        width: Run width
        height: Run height (font size for text)
        font_name: Font for text runs
        font_size: Font size for text runs
        image: Rendered math image
        boxed: Draw a rounded chip around the run
        color: Grey level 0 (black) .. 1 (white)
    """

    text: str
    x: float
    offset: float
    width: float
    height: float
    font_name: str
    font_size: float
    image: Optional[Image.Image] = None
    boxed: bool = False
    color: float = 0.0

    @property
    def is_math(self) -> bool:
        return self.image is not None


@dataclass(frozen=True)
class Line:
    """
    One measured line.

    Attributes:
        top: Offset from the block top
        height: Line height
        runs: Runs in left-to-right order
    """

    top: float
    height: float
    runs: tuple[TextRun, ...]

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class Block:
    """
    Measured unit of content that is never split across pages.

    Attributes:
        kind: What the block holds
        lines: Measured lines
        height: Total height including padding
        question_id: Question id for QUESTION blocks
        number: Global question number for QUESTION blocks
        keep_with_next: Must share a page with the following block
            (section and subsection titles)
    """

    kind: BlockKind
    lines: tuple[Line, ...]
    height: float
    question_id: Optional[str] = None
    number: Optional[int] = None
    keep_with_next: bool = False


@dataclass(frozen=True)
class BlockPlacement:
    """
    A block positioned on a page.

    Attributes:
        block: The Block to place
        top: Y offset from page top (in points)

    Example:
        >>> placement = BlockPlacement(block, top=40)
        >>> placement.bottom
        88.5  # top + block.height
    """

    block: Block
    top: float

    @property
    def bottom(self) -> float:
        """Bottom Y coordinate (top + height)."""
        return self.top + self.block.height


@dataclass(frozen=True)
class PagePlan:
    """
    Complete layout plan for a single page.

    Attributes:
        index: Page number (1-based)
        placements: Tuple of BlockPlacements on this page
        height_used: Vertical content space used
        total_pages: Page count of the whole document
        overflows: True if a block runs past the content area

    Example:
        >>> page.footer_label
        'Page 2 of 3'
    """

    index: int
    placements: tuple[BlockPlacement, ...]
    height_used: float
    total_pages: int
    overflows: bool = False

    @property
    def is_last(self) -> bool:
        return self.index == self.total_pages

    @property
    def footer_label(self) -> str:
        return f"Page {self.index} of {self.total_pages}"

    @property
    def placement_count(self) -> int:
        """Number of blocks on this page."""
        return len(self.placements)

    @property
    def is_empty(self) -> bool:
        """Check if page has no placements."""
        return len(self.placements) == 0


@dataclass(frozen=True)
class LayoutResult:
    """
    Final layout output with diagnostics.

    Attributes:
        pages: Tuple of PagePlans
        content_height: Measured height of the flowed content
        warnings: Warning messages (degraded rendering, overflow)
        degraded: True when math rendering fell back to plain text
        question_page_map: Question id -> page numbers (1-based)

    Example:
        >>> result = LayoutResult(pages=(page1, page2), content_height=900.0)
        >>> result.page_count
        2
    """

    pages: tuple[PagePlan, ...]
    content_height: float = 0.0
    warnings: tuple[str, ...] = ()
    degraded: bool = False
    question_page_map: dict[str, list[int]] = field(default_factory=dict)

    @property
    def page_count(self) -> int:
        """Number of pages in layout."""
        return len(self.pages)

    @property
    def total_placements(self) -> int:
        """Total number of block placements across all pages."""
        return sum(p.placement_count for p in self.pages)
