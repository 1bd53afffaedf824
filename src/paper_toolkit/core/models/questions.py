"""
Module: questions

Purpose:
    Provides the Question dataclass - the uniform record every pipeline stage
    works on - and the canonical type classification used to group questions
    into MCQ / Short / Long / Other buckets.

Key Functions:
    - canonical_type(label): Map a free-text type label to a CanonicalType
    - Question.is_eligible: Finite, non-negative marks
    - Question.display_text: Text with placeholder for empty questions
    - Question.with_changes(): Copy with edited text/marks

Dependencies:
    - dataclasses (std)
    - enum (std)
    - math (std)

Used By:
    - builder.loading.normalizer: Creates Questions from raw records
    - builder.selection: Selector and allocator
    - core.models.paper: Paper items
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


NO_TEXT_PLACEHOLDER = "[No question text]"


class CanonicalType(str, Enum):
    """
    Normalised question category.

    Values double as the labels written into papers, so
    ``canonical_type(CanonicalType.SHORT.value)`` is ``CanonicalType.SHORT``.
    """

    MCQ = "MCQ"
    SHORT = "Short"
    LONG = "Long"
    OTHER = "Other"


# Evaluated in order; first hit wins.
_TYPE_RULES: tuple[tuple[tuple[str, ...], CanonicalType], ...] = (
    (("mcq", "multiple", "objective"), CanonicalType.MCQ),
    (("short",), CanonicalType.SHORT),
    (("long", "descriptive"), CanonicalType.LONG),
)


def canonical_type(label: Optional[str]) -> CanonicalType:
    """
    Classify a free-text type label.

    Case-insensitive substring matching in fixed priority order:
    mcq/multiple/objective, then short, then long/descriptive.
    Anything else is ``Other``.

    Example:
        >>> canonical_type("Short Answer")
        <CanonicalType.SHORT: 'Short'>
        >>> canonical_type("multiple_choice")
        <CanonicalType.MCQ: 'MCQ'>
    """
    lowered = (label or "").lower()
    for needles, result in _TYPE_RULES:
        if any(needle in lowered for needle in needles):
            return result
    return CanonicalType.OTHER


def format_marks(value: float) -> str:
    """Render a mark value without a trailing ``.0`` for whole numbers."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class Question:
    """
    Normalised question record (immutable).

    Attributes:
        id: Opaque identifier, unique within one pool
        text: Question text, may embed ``$...$`` and ``$$...$$`` math
        type: Raw type label as supplied upstream
        difficulty: Raw difficulty label ("easy", "medium", ...)
        chapter: Chapter name
        topic: Topic name
        marks: Mark value (may be invalid; see is_eligible)
        canonical_type: Derived from ``type`` unless given explicitly

    Invariants:
        - id is non-empty
        - canonical_type == canonical_type(type) unless overridden

    Example:
        >>> q = Question(id="q1", text="State Ohm's law.", type="short_answer", marks=2)
        >>> q.canonical_type
        <CanonicalType.SHORT: 'Short'>
    """

    id: str
    text: str = ""
    type: str = "-"
    difficulty: str = "-"
    chapter: str = "-"
    topic: str = "-"
    marks: float = 0
    canonical_type: CanonicalType = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        """Validate and derive the canonical type."""
        if self.id is None or str(self.id) == "":
            raise ValueError("Question id must be non-empty")
        if not isinstance(self.id, str):
            object.__setattr__(self, "id", str(self.id))
        if self.canonical_type is None:
            object.__setattr__(self, "canonical_type", canonical_type(self.type))

    @property
    def is_eligible(self) -> bool:
        """True when marks are a finite number >= 0."""
        return _is_number(self.marks) and math.isfinite(self.marks) and self.marks >= 0

    @property
    def has_positive_marks(self) -> bool:
        """True when the question can contribute to a target-sum selection."""
        return self.is_eligible and self.marks > 0

    @property
    def display_text(self) -> str:
        """Question text, or an explicit placeholder when nothing was extracted."""
        return self.text if self.text.strip() else NO_TEXT_PLACEHOLDER

    @property
    def type_label(self) -> str:
        """Label used in metadata lines: raw type, or canonical value if unset."""
        return self.type if self.type and self.type != "-" else self.canonical_type.value

    def with_changes(
        self,
        *,
        text: Optional[str] = None,
        marks: Optional[float] = None,
    ) -> Question:
        """
        Return a copy with edited text and/or marks.

        Used by the review step; the original record is left untouched.
        """
        changes = {}
        if text is not None:
            changes["text"] = text
        if marks is not None:
            changes["marks"] = marks
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Serialise to a JSON-ready dictionary."""
        return {
            "id": self.id,
            "question": self.text,
            "type": self.type,
            "canonical_type": self.canonical_type.value,
            "difficulty": self.difficulty,
            "chapter": self.chapter,
            "topic": self.topic,
            "marks": self.marks,
        }

    def __repr__(self) -> str:
        return (
            f"Question({self.id}, {self.canonical_type.value}, "
            f"marks={format_marks(self.marks) if _is_number(self.marks) else self.marks})"
        )


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
