"""
Module: builder.selection.selector

Purpose:
    Target-sum selection. Picks a subset of the pool whose mark total
    approximates a requested value without exceeding it.

Key Functions:
    - select_for_target(): Main entry point for target-mark selection

Key Classes:
    - SelectionError: Base error for selection failures
    - EmptyPoolError: Nothing could be selected

Algorithm:
    1. Keep questions with finite marks > 0
    2. Shuffle (Fisher-Yates), then sort by marks descending (stable),
       so equal-mark questions are taken in random order
    3. Greedy pass: accept while the running sum stays <= target,
       stop on an exact match
    4. Below target: second pass over the not-yet-picked remainder,
       same rule, stop on an exact match
    5. Nothing picked: take the single smallest question even though
       it overshoots the target

    This is best effort, not an optimal subset-sum solve. The achieved
    total is always reported next to the target (SelectionResult).

Dependencies:
    - core.models: Question, SelectionResult

Used By:
    - builder.controller: Main build controller
    - builder.workflow: Assembly session
"""

from __future__ import annotations

import logging
import math
import random
from typing import Iterable, List, Optional

from paper_toolkit.core.models import Question, SelectionResult

logger = logging.getLogger(__name__)

# Float marks (e.g. 0.5) accumulate rounding error
_EPS = 1e-9


class SelectionError(Exception):
    """Error during question selection."""
    pass


class EmptyPoolError(SelectionError):
    """Selection produced zero questions; the user must pick at least one."""

    def __init__(self, message: str = "Select at least one question") -> None:
        super().__init__(message)


def select_for_target(
    pool: Iterable[Question],
    target_marks: float,
    *,
    seed: Optional[int] = None,
) -> SelectionResult:
    """
    Select questions whose marks sum to at most ``target_marks``.

    Args:
        pool: Available questions
        target_marks: Requested mark total (> 0)
        seed: Optional seed for the pre-shuffle; None draws from
            system entropy so unseeded runs vary between equal-mark questions

    Returns:
        SelectionResult carrying the achieved total and the target

    Raises:
        ValueError: If target_marks is not a positive finite number
        EmptyPoolError: If no question has positive finite marks

    Invariants:
        - result.total_marks <= target_marks unless the fallback fired
        - result is non-empty

    Example:
        >>> result = select_for_target(pool, 7)
        >>> (result.total_marks, result.is_exact)
        (7, True)
    """
    if not isinstance(target_marks, (int, float)) or not math.isfinite(target_marks) or target_marks <= 0:
        raise ValueError(f"target_marks must be positive: {target_marks}")

    eligible = [q for q in pool if q.has_positive_marks]
    if not eligible:
        raise EmptyPoolError("No questions with positive marks available")

    random.Random(seed).shuffle(eligible)
    by_marks_desc = sorted(eligible, key=lambda q: q.marks, reverse=True)

    picked: List[Question] = []
    total = _greedy_fill(by_marks_desc, picked, 0, target_marks)

    if total < target_marks - _EPS:
        picked_ids = {q.id for q in picked}
        remaining = [q for q in by_marks_desc if q.id not in picked_ids]
        total = _greedy_fill(remaining, picked, total, target_marks)

    if not picked:
        smallest = by_marks_desc[-1]
        picked.append(smallest)
        total = smallest.marks
        logger.info(
            f"No question fits under {target_marks} marks; "
            f"falling back to smallest question {smallest.id} ({smallest.marks} marks)"
        )

    result = SelectionResult(questions=tuple(picked), target_marks=target_marks)

    if result.is_exact:
        logger.info(f"Selected {result.question_count} questions, exactly {total} marks")
    else:
        logger.info(
            f"Selected {result.question_count} questions, "
            f"achieved {total}/{target_marks} marks (difference {result.mark_difference:+g})"
        )
    return result


def _greedy_fill(
    candidates: List[Question],
    picked: List[Question],
    total: float,
    target: float,
) -> float:
    """Append candidates that keep the sum <= target; stop on exact match."""
    for question in candidates:
        if total + question.marks <= target + _EPS:
            picked.append(question)
            total += question.marks
            if abs(total - target) <= _EPS:
                break
    return total
