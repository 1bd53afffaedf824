"""
Paper Toolkit Core Package

Shared data models and utilities. These models are the single source of
truth for the normaliser, selectors, arranger and layout engine.

1. **Immutable Data Models**
   - Frozen dataclasses; edits create new instances

2. **Calculated Totals (Never Stored)**
   - Paper.total_marks / total_questions are derived from items
"""

from .models import (
    Question,
    CanonicalType,
    canonical_type,
    SelectionResult,
    PaperHeader,
    Section,
    Paper,
)

__all__ = [
    "Question",
    "CanonicalType",
    "canonical_type",
    "SelectionResult",
    "PaperHeader",
    "Section",
    "Paper",
]
