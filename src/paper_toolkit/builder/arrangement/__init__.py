"""
Module: builder.arrangement

Purpose:
    Section arrangement: groups selected questions into lettered sections
    with continuous question numbering.

Key Functions:
    - arrange(): Questions -> sections
    - arrange_paper(): Questions -> Paper
    - build_paper_document(): Sections -> Paper

Key Classes:
    - ArrangeMode, CustomSection, CustomSubsection

Used By:
    - builder.controller, builder.workflow
"""

from .arranger import (
    DIFFICULTY_ORDER,
    TYPE_ORDER,
    ArrangeMode,
    CustomSection,
    CustomSubsection,
    arrange,
    arrange_paper,
    build_paper_document,
    section_letter,
)

__all__ = [
    "DIFFICULTY_ORDER",
    "TYPE_ORDER",
    "ArrangeMode",
    "CustomSection",
    "CustomSubsection",
    "arrange",
    "arrange_paper",
    "build_paper_document",
    "section_letter",
]
