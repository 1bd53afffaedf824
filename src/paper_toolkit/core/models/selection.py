"""
Module: selection

Purpose:
    Provides the SelectionResult dataclass returned by the target-sum
    selector and the allocators. Tracks which questions were picked and how
    far the achieved mark total is from what was requested.

Key Functions:
    - SelectionResult.total_marks: Sum across selected questions
    - SelectionResult.mark_difference: Signed drift from target
    - SelectionResult.is_exact: Target hit exactly

Dependencies:
    - dataclasses (std)
    - functools (std)
    - .questions.Question

Used By:
    - builder.selection.selector
    - builder.selection.allocator
    - builder.controller
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from functools import cached_property
from typing import Dict, Optional

from .questions import Question


@dataclass(frozen=True)
class SelectionResult:
    """
    Result of a selection run.

    Attributes:
        questions: Selected questions in pick order
        target_marks: Requested mark total (None for count-driven allocation)

    Invariants:
        - No duplicate question ids
        - total_marks is always calculated, never stored

    Example:
        >>> result = SelectionResult(questions=(q1, q2), target_marks=7)
        >>> result.total_marks
        7
        >>> result.is_exact
        True
    """

    questions: tuple[Question, ...]
    target_marks: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate selection result on construction."""
        ids = [q.id for q in self.questions]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate questions in selection result")

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties (NEVER stored)
    # ─────────────────────────────────────────────────────────────────────────

    @cached_property
    def total_marks(self) -> float:
        """Sum of marks over eligible selected questions."""
        return sum(q.marks for q in self.questions if q.is_eligible)

    @property
    def question_count(self) -> int:
        """Number of questions in selection."""
        return len(self.questions)

    @property
    def mark_difference(self) -> Optional[float]:
        """
        How far total is from target (signed).

        Returns:
            Positive if over target, negative if under, None without a target
        """
        if self.target_marks is None:
            return None
        return self.total_marks - self.target_marks

    @property
    def is_exact(self) -> bool:
        """True when a target was given and hit exactly."""
        difference = self.mark_difference
        return difference is not None and abs(difference) < 1e-9

    @cached_property
    def counts_by_type(self) -> Dict[str, int]:
        """Number of selected questions per canonical type value."""
        return dict(Counter(q.canonical_type.value for q in self.questions))

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(q.id for q in self.questions)

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return (
            f"SelectionResult(questions={self.question_count}, "
            f"marks={self.total_marks}/{self.target_marks})"
        )
