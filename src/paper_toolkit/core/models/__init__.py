"""
Core Models Package

Immutable, validated data models shared by every pipeline stage.

All models in this package are frozen dataclasses. This ensures:
1. No accidental mutation while a paper is being assembled
2. Re-generation always produces a new Paper instead of editing the old one
3. Totals are calculated from items, never stored
"""

from .questions import Question, CanonicalType, canonical_type, format_marks, NO_TEXT_PLACEHOLDER
from .selection import SelectionResult
from .paper import PaperHeader, PaperItem, Subsection, Section, Paper

__all__ = [
    "Question",
    "CanonicalType",
    "canonical_type",
    "format_marks",
    "NO_TEXT_PLACEHOLDER",
    "SelectionResult",
    "PaperHeader",
    "PaperItem",
    "Subsection",
    "Section",
    "Paper",
]
