"""
Module: builder.layout.paginator

Purpose:
    Arrange measured blocks onto fixed-size pages in two passes.
    Page count must be known before any footer ("Page X of N") is drawn,
    so measuring and slicing are kept strictly apart.

Key Functions:
    - measure(): Pass 1, flow atomic groups on a virtual page column
    - slice_pages(): Pass 2, cut the column into exactly N PagePlans
    - paginate(): Both passes

Algorithm:
    1. Group blocks atomically: a title block always travels with the
       block after it (chains of titles included).
    2. Flow groups down a continuous column made of page-sized windows
       of usable_height (page minus margins minus footer strip).
       A group that would straddle a window boundary is pushed to the
       start of the next window.
    3. A group taller than a window starts a fresh window, is kept whole
       (it overflows into the footer area) and occupies exactly one page.
    4. total_pages = ceil(content_height / usable_height)
    5. Each group lands on page floor(top / usable_height); tops are
       translated into page coordinates below margin_top.

Dependencies:
    - builder.layout.models: Block, PagePlan, LayoutResult
    - builder.layout.config: LayoutConfig

Used By:
    - builder.controller: Main build controller
    - builder.workflow: Assembly session
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Sequence

from .config import LayoutConfig
from .models import Block, BlockPlacement, LayoutResult, PagePlan

logger = logging.getLogger(__name__)

_EPS = 1e-6


@dataclass(frozen=True)
class PlacedGroup:
    """
    Atomic group positioned on the virtual column.

    Attributes:
        blocks: Blocks that must share a page
        tops: Virtual top of each block (same order as blocks)
        height: Group height including inner spacing
        overflows: Group is taller than one page
    """

    blocks: tuple[Block, ...]
    tops: tuple[float, ...]
    height: float
    overflows: bool = False

    @property
    def top(self) -> float:
        return self.tops[0]


@dataclass(frozen=True)
class ContentMeasure:
    """
    Result of the measuring pass.

    Attributes:
        groups: Placed groups in reading order
        content_height: Virtual height of the flowed content
        usable_height: Page window height used for flowing
        total_pages: Number of pages the content needs
        warnings: Overflow warnings
    """

    groups: tuple[PlacedGroup, ...]
    content_height: float
    usable_height: float
    total_pages: int
    warnings: tuple[str, ...] = ()

    def page_of(self, virtual_top: float) -> int:
        """0-based page index for a virtual y position."""
        return int(math.floor((virtual_top + _EPS) / self.usable_height))


def atomic_groups(blocks: Sequence[Block]) -> List[List[Block]]:
    """
    Split blocks into groups that must stay on one page.

    Example:
        >>> [len(g) for g in atomic_groups([section_title, sub_title, q1, q2])]
        [3, 1]
    """
    groups: List[List[Block]] = []
    current: List[Block] = []
    for block in blocks:
        current.append(block)
        if not block.keep_with_next:
            groups.append(current)
            current = []
    if current:
        groups.append(current)
    return groups


def _group_height(group: Sequence[Block], spacing: float) -> float:
    return sum(b.height for b in group) + spacing * (len(group) - 1)


def measure(blocks: Sequence[Block], config: LayoutConfig) -> ContentMeasure:
    """
    Pass 1: flow atomic groups down the virtual page column.

    Args:
        blocks: Measured blocks in reading order
        config: Layout configuration

    Returns:
        ContentMeasure with group positions and total page count
    """
    usable = config.usable_height
    spacing = config.block_spacing

    placed: List[PlacedGroup] = []
    warnings: List[str] = []
    page_start = 0.0
    cursor = 0.0
    page_has_content = False

    for group in atomic_groups(blocks):
        height = _group_height(group, spacing)
        top = cursor + spacing if page_has_content else cursor

        if page_has_content and top + height > page_start + usable + _EPS:
            # Push to next page boundary
            page_start += usable
            top = page_start

        overflows = height > usable + _EPS
        if overflows:
            message = (
                f"Content block overflows page {round(page_start / usable) + 1}: "
                f"{height:.1f}pt needed, {usable:.1f}pt available"
            )
            logger.warning(message)
            warnings.append(message)

        tops = []
        y = top
        for block in group:
            tops.append(y)
            y += block.height + spacing

        placed.append(PlacedGroup(blocks=tuple(group), tops=tuple(tops), height=height, overflows=overflows))
        # An overflowing group owns exactly one page window
        cursor = top + min(height, usable)
        page_has_content = True

    content_height = cursor
    total_pages = math.ceil((content_height - _EPS) / usable) if placed else 0

    logger.debug(f"Measured {len(placed)} groups: {content_height:.1f}pt over {total_pages} pages")
    return ContentMeasure(
        groups=tuple(placed),
        content_height=content_height,
        usable_height=usable,
        total_pages=total_pages,
        warnings=tuple(warnings),
    )


def slice_pages(measured: ContentMeasure, config: LayoutConfig, *, degraded: bool = False,
                warnings: Sequence[str] = ()) -> LayoutResult:
    """
    Pass 2: cut the measured column into exactly ``total_pages`` pages.

    Args:
        measured: Output of measure()
        config: Layout configuration (must match the one used to measure)
        degraded: Carried through from composition
        warnings: Earlier warnings to carry into the result

    Returns:
        LayoutResult whose pages are numbered 1..N
    """
    total = measured.total_pages
    page_placements: List[List[BlockPlacement]] = [[] for _ in range(total)]
    page_overflows = [False] * total
    question_page_map: Dict[str, List[int]] = {}

    for group in measured.groups:
        index = measured.page_of(group.top)
        origin = index * measured.usable_height
        for block, top in zip(group.blocks, group.tops):
            page_placements[index].append(BlockPlacement(block=block, top=config.margin_top + top - origin))
            if block.question_id is not None:
                pages = question_page_map.setdefault(block.question_id, [])
                if index + 1 not in pages:
                    pages.append(index + 1)
        if group.overflows:
            page_overflows[index] = True

    pages = []
    for index, placements in enumerate(page_placements):
        height_used = (placements[-1].bottom - config.margin_top) if placements else 0.0
        pages.append(PagePlan(
            index=index + 1,
            placements=tuple(placements),
            height_used=height_used,
            total_pages=total,
            overflows=page_overflows[index],
        ))

    logger.info(f"Paginated {sum(len(p) for p in page_placements)} blocks onto {total} pages")
    return LayoutResult(
        pages=tuple(pages),
        content_height=measured.content_height,
        warnings=tuple(warnings) + measured.warnings,
        degraded=degraded,
        question_page_map=question_page_map,
    )


def paginate(
    blocks: Sequence[Block],
    config: LayoutConfig,
    *,
    degraded: bool = False,
    warnings: Sequence[str] = (),
) -> LayoutResult:
    """
    Measure then slice.

    Example:
        >>> layout = paginate(document.blocks, LayoutConfig())
        >>> [p.footer_label for p in layout.pages]
        ['Page 1 of 2', 'Page 2 of 2']
    """
    return slice_pages(measure(blocks, config), config, degraded=degraded, warnings=warnings)
