"""
Module: builder.layout

Purpose:
    Page layout for paper building.
    Converts an arranged Paper into measured blocks and then into
    positioned, numbered pages.

Key Functions:
    - compose_paper(): Paper -> measured blocks
    - measure() / slice_pages(): Two-phase pagination
    - paginate(): Both phases

Key Classes:
    - LayoutConfig: Configuration for page layout
    - Block: Measured, unbreakable content unit
    - PagePlan: Single page layout plan

Dependencies:
    - reportlab: Text measurement
    - PIL: Math images
    - paper_toolkit.core.models: Paper

Used By:
    - builder.controller: Main build controller
    - builder.workflow: Assembly session
"""

from .config import LayoutConfig
from .models import (
    Block,
    BlockKind,
    BlockPlacement,
    LayoutResult,
    Line,
    PagePlan,
    TextRun,
)
from .composer import ComposedDocument, compose_paper, layout_text
from .paginator import ContentMeasure, PlacedGroup, atomic_groups, measure, paginate, slice_pages

__all__ = [
    # Config
    "LayoutConfig",
    # Models
    "Block",
    "BlockKind",
    "BlockPlacement",
    "LayoutResult",
    "Line",
    "PagePlan",
    "TextRun",
    "ComposedDocument",
    "ContentMeasure",
    "PlacedGroup",
    # Functions
    "compose_paper",
    "layout_text",
    "atomic_groups",
    "measure",
    "slice_pages",
    "paginate",
]
