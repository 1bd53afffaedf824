"""
Module: paper

Purpose:
    Immutable document model for an assembled exam paper: header metadata,
    lettered sections (optionally split into numbered subsections) and
    globally numbered question items.

Key Classes:
    - PaperHeader: Title, institution, board, standard, subject, ...
    - PaperItem: A question with its global number (Q1, Q2, ...)
    - Subsection: Numbered group inside a section ("A.1")
    - Section: Lettered group ("Section A")
    - Paper: Complete document with calculated totals

Dependencies:
    - dataclasses (std)
    - functools (std)
    - .questions.Question

Used By:
    - builder.arrangement.arranger: Builds sections and papers
    - builder.layout.composer: Turns papers into measured blocks
    - core.utils.serialization: Paper summaries
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from functools import cached_property
from typing import Optional

from .questions import Question


@dataclass(frozen=True)
class PaperHeader:
    """
    Header metadata printed at the top of the first page.

    Attributes:
        title: Paper title (defaults to "Question Paper")
        institution: School / institute name
        board: Examination board
        standard: Class / grade
        subject: Subject name (also used for the export filename)
        duration: Free text such as "2 Hours"
        instructions: Free text instructions, omitted when empty
        chapter: Chapter name, or None for all chapters
    """

    title: str = "Question Paper"
    institution: str = ""
    board: str = ""
    standard: str = ""
    subject: str = ""
    duration: str = ""
    instructions: str = ""
    chapter: Optional[str] = None


@dataclass(frozen=True)
class PaperItem:
    """A question placed in the paper with its global number."""

    number: int
    question: Question

    @property
    def label(self) -> str:
        return f"Q{self.number}."


@dataclass(frozen=True)
class Subsection:
    """
    Numbered subsection inside a section.

    Attributes:
        label: Contiguous label like "A.1"
        title: Caller-supplied or derived title
        items: Ordered items (never empty once arranged)
    """

    label: str
    title: str
    items: tuple[PaperItem, ...]

    @property
    def heading(self) -> str:
        return f"{self.label} {self.title}".strip()


@dataclass(frozen=True)
class Section:
    """
    Lettered section of the paper.

    Items placed directly in the section are listed before any subsections.

    Attributes:
        label: Contiguous label like "Section A"
        title: Title such as "MCQ" or a user-authored string
        items: Items placed directly in the section
        subsections: Optional numbered subsections

    Example:
        >>> section.heading
        'Section A: MCQ'
    """

    label: str
    title: str
    items: tuple[PaperItem, ...] = ()
    subsections: tuple[Subsection, ...] = ()

    @property
    def heading(self) -> str:
        return f"{self.label}: {self.title}" if self.title else self.label

    @property
    def all_items(self) -> tuple[PaperItem, ...]:
        """Direct items followed by subsection items, in paper order."""
        result = list(self.items)
        for sub in self.subsections:
            result.extend(sub.items)
        return tuple(result)

    @property
    def is_empty(self) -> bool:
        return not self.all_items


@dataclass(frozen=True)
class Paper:
    """
    Assembled document (immutable).

    Built fresh per generation run. Edits produce a new Paper.

    Attributes:
        header: Header metadata
        sections: Ordered, non-empty sections
        paper_type: Paper type label for summaries ("Mixed", "MCQ", ...)

    Invariants:
        - total_marks and total_questions are always calculated
        - Item numbers run 1..total_questions across sections
    """

    header: PaperHeader
    sections: tuple[Section, ...]
    paper_type: str = "Mixed"

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties (NEVER stored)
    # ─────────────────────────────────────────────────────────────────────────

    @cached_property
    def items(self) -> tuple[PaperItem, ...]:
        """All items across all sections in paper order."""
        result: list[PaperItem] = []
        for section in self.sections:
            result.extend(section.all_items)
        return tuple(result)

    @property
    def questions(self) -> tuple[Question, ...]:
        return tuple(item.question for item in self.items)

    @cached_property
    def total_marks(self) -> float:
        """Sum of all item marks (ineligible marks count as zero)."""
        return sum(item.question.marks for item in self.items if item.question.is_eligible)

    @property
    def total_questions(self) -> int:
        return len(self.items)

    @cached_property
    def marks_distribution(self) -> tuple[tuple[float, int], ...]:
        """
        Count of questions per identical mark value, ascending by marks.

        Mark values <= 0 (and invalid marks) are left out.

        Example:
            >>> paper.marks_distribution
            ((1, 5), (2, 3))
        """
        counter: Counter = Counter(
            item.question.marks
            for item in self.items
            if item.question.is_eligible and item.question.marks > 0
        )
        return tuple(sorted(counter.items()))

    @property
    def chapters(self) -> tuple[str, ...]:
        """Distinct chapters in first-seen order, excluding placeholders."""
        seen: list[str] = []
        for q in self.questions:
            if q.chapter and q.chapter != "-" and q.chapter not in seen:
                seen.append(q.chapter)
        return tuple(seen)

    def __repr__(self) -> str:
        return (
            f"Paper({self.header.title!r}, sections={len(self.sections)}, "
            f"questions={self.total_questions}, marks={self.total_marks})"
        )
