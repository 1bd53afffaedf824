"""
Module: builder.arrangement.arranger

Purpose:
    Group a finalised question list into ordered, labelled sections and
    assign continuous question numbers (Q1..QN across the whole paper).

Key Functions:
    - arrange(): Questions -> ordered sections
    - arrange_paper(): Arrange and wrap into a Paper
    - build_paper_document(): Wrap sections into a Paper

Key Classes:
    - ArrangeMode: DEFAULT / BY_TYPE / CUSTOM
    - CustomSection, CustomSubsection: Caller-authored structure

Modes:
    DEFAULT: "MCQ" section, then "Others" sorted ascending by marks
    BY_TYPE: one section per raw type, subsections per difficulty
    CUSTOM: caller-supplied sections -> subsections -> questions

    In every mode empty sections and subsections are dropped before
    letters and numbers are assigned, so labels are always contiguous.

Dependencies:
    - core.models: Question, PaperItem, Section, Subsection, Paper

Used By:
    - builder.controller: Main build controller
    - builder.workflow: Assembly session
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from itertools import count
from typing import Iterable, Iterator, List, Optional, Sequence

from paper_toolkit.core.models import (
    CanonicalType,
    Paper,
    PaperHeader,
    PaperItem,
    Question,
    Section,
    Subsection,
)

logger = logging.getLogger(__name__)

# Section order used when grouping by raw type
TYPE_ORDER: tuple[str, ...] = (
    "very_short",
    "short_answer",
    "long_answer",
    "mcq",
    "true_false",
    "fill_blank",
    "descriptive",
    "Mixed",
    "-",
)
DIFFICULTY_ORDER: tuple[str, ...] = ("easy", "medium", "hard", "-")


class ArrangeMode(Enum):
    """How questions are grouped into sections."""

    DEFAULT = "default"
    BY_TYPE = "by_type"
    CUSTOM = "custom"


@dataclass(frozen=True)
class CustomSubsection:
    """User-authored subsection: a title and its questions."""

    title: str
    questions: tuple[Question, ...] = ()


@dataclass(frozen=True)
class CustomSection:
    """
    User-authored section.

    Attributes:
        title: Title string, preserved verbatim
        subsections: Ordered subsections
        questions: Questions placed directly in the section (before subsections)
    """

    title: str
    subsections: tuple[CustomSubsection, ...] = ()
    questions: tuple[Question, ...] = ()


def section_letter(index: int) -> str:
    """
    Letter for the index-th emitted section (0 -> "A", 25 -> "Z", 26 -> "AA").
    """
    letters = ""
    index += 1
    while index > 0:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def arrange(
    questions: Sequence[Question] = (),
    mode: ArrangeMode = ArrangeMode.DEFAULT,
    custom: Optional[Sequence[CustomSection]] = None,
) -> tuple[Section, ...]:
    """
    Arrange questions into labelled sections.

    Args:
        questions: Finalised question list (ignored in CUSTOM mode)
        mode: Grouping mode
        custom: Section tree for CUSTOM mode

    Returns:
        Non-empty sections labelled "Section A", "Section B", ... with
        items numbered 1..N in paper order

    Raises:
        ValueError: If CUSTOM mode is requested without a section tree

    Example:
        >>> sections = arrange(questions)
        >>> [s.heading for s in sections]
        ['Section A: MCQ', 'Section B: Others']
    """
    numbers = count(1)

    if mode is ArrangeMode.CUSTOM:
        if custom is None:
            raise ValueError("CUSTOM arrangement requires a section tree")
        sections = _arrange_custom(custom, numbers)
    elif mode is ArrangeMode.BY_TYPE:
        sections = _arrange_by_type(questions, numbers)
    else:
        sections = _arrange_default(questions, numbers)

    logger.debug(
        f"Arranged {sum(len(s.all_items) for s in sections)} questions "
        f"into {len(sections)} sections ({mode.value})"
    )
    return tuple(sections)


def build_paper_document(
    header: PaperHeader,
    sections: Sequence[Section],
    *,
    paper_type: str = "Mixed",
) -> Paper:
    """Wrap already-arranged sections in a new Paper."""
    return Paper(header=header, sections=tuple(sections), paper_type=paper_type)


def arrange_paper(
    header: PaperHeader,
    questions: Sequence[Question] = (),
    *,
    mode: ArrangeMode = ArrangeMode.DEFAULT,
    custom: Optional[Sequence[CustomSection]] = None,
    paper_type: str = "Mixed",
) -> Paper:
    """
    Arrange questions and wrap the result in a new Paper.

    Example:
        >>> paper = arrange_paper(PaperHeader(subject="Physics"), questions)
        >>> paper.total_questions
        4
    """
    sections = arrange(questions, mode=mode, custom=custom)
    return build_paper_document(header, sections, paper_type=paper_type)


# ─────────────────────────────────────────────────────────────────────────────
# Modes
# ─────────────────────────────────────────────────────────────────────────────

def _number(questions: Iterable[Question], numbers: Iterator[int]) -> tuple[PaperItem, ...]:
    return tuple(PaperItem(number=next(numbers), question=q) for q in questions)


def _sort_key_marks(question: Question) -> float:
    return question.marks if question.is_eligible else math.inf


def _arrange_default(questions: Sequence[Question], numbers: Iterator[int]) -> List[Section]:
    mcq = [q for q in questions if q.canonical_type is CanonicalType.MCQ]
    others = sorted(
        (q for q in questions if q.canonical_type is not CanonicalType.MCQ),
        key=_sort_key_marks,
    )

    sections: List[Section] = []
    for title, bucket in (("MCQ", mcq), ("Others", others)):
        if not bucket:
            continue
        label = f"Section {section_letter(len(sections))}"
        sections.append(Section(label=label, title=title, items=_number(bucket, numbers)))
    return sections


def _arrange_custom(custom: Sequence[CustomSection], numbers: Iterator[int]) -> List[Section]:
    sections: List[Section] = []
    for entry in custom:
        non_empty_subs = [sub for sub in entry.subsections if sub.questions]
        if not entry.questions and not non_empty_subs:
            logger.debug(f"Dropping empty custom section {entry.title!r}")
            continue

        letter = section_letter(len(sections))
        items = _number(entry.questions, numbers)
        subsections = tuple(
            Subsection(
                label=f"{letter}.{index}",
                title=sub.title,
                items=_number(sub.questions, numbers),
            )
            for index, sub in enumerate(non_empty_subs, start=1)
        )
        sections.append(Section(
            label=f"Section {letter}",
            title=entry.title,
            items=items,
            subsections=subsections,
        ))
    return sections


def _ordered_labels(labels: Iterable[str], preferred: Sequence[str]) -> List[str]:
    """Preferred labels first (in that order), then the rest sorted."""
    present = set(labels)
    head = [label for label in preferred if label in present]
    tail = sorted(label for label in present if label not in preferred)
    return head + tail


def _type_title(raw_type: str) -> str:
    return "General" if raw_type == "-" else raw_type.replace("_", " ")


def _difficulty_title(difficulty: str) -> str:
    return "" if difficulty == "-" else difficulty.replace("_", " ").capitalize()


def _arrange_by_type(questions: Sequence[Question], numbers: Iterator[int]) -> List[Section]:
    sections: List[Section] = []
    for raw_type in _ordered_labels((q.type or "-" for q in questions), TYPE_ORDER):
        in_section = [q for q in questions if (q.type or "-") == raw_type]
        letter = section_letter(len(sections))

        subsections = []
        difficulties = _ordered_labels((q.difficulty or "-" for q in in_section), DIFFICULTY_ORDER)
        for index, difficulty in enumerate(difficulties, start=1):
            in_sub = [q for q in in_section if (q.difficulty or "-") == difficulty]
            subsections.append(Subsection(
                label=f"{letter}.{index}",
                title=_difficulty_title(difficulty),
                items=_number(in_sub, numbers),
            ))

        sections.append(Section(
            label=f"Section {letter}",
            title=_type_title(raw_type),
            subsections=tuple(subsections),
        ))
    return sections
