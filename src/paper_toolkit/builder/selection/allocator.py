"""
Module: builder.selection.allocator

Purpose:
    Count-driven selection. Partitions the pool into buckets (by type or
    by difficulty) and draws a bounded, uniformly random subset from each.

Key Functions:
    - allocate(): Per-type bounded random draw
    - allocate_by_difficulty(): Per-difficulty bounded random draw
    - clamp_allocation(): Clamp requested counts to availability
    - paper_type_counts(): Type counts for "MCQ" / "Short Answer" / "Mixed"
    - mixed_type_counts(): 60/40 MCQ/Short split
    - difficulty_counts(): Percentage split into easy/medium/hard counts

Algorithm:
    For each requested label with count n, the matching bucket is
    shuffled with random.Random.shuffle (Fisher-Yates, uniform over all
    orderings) and the first min(n, len(bucket)) items are taken.
    Requests above availability are clamped, never rejected.

Dependencies:
    - core.models: Question, CanonicalType, SelectionResult
    - builder.selection.selector: EmptyPoolError

Used By:
    - builder.controller: Main build controller
    - builder.workflow: Assembly session
"""

from __future__ import annotations

import logging
import math
import random
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from paper_toolkit.core.models import CanonicalType, Question, SelectionResult, canonical_type

from .selector import EmptyPoolError

logger = logging.getLogger(__name__)

DIFFICULTY_LEVELS: tuple[str, ...] = ("easy", "medium", "hard")

_CANONICAL_BY_NAME = {t.value.lower(): t for t in CanonicalType}


# ─────────────────────────────────────────────────────────────────────────────
# Bucketing
# ─────────────────────────────────────────────────────────────────────────────

def type_bucket_matcher(label: str) -> Callable[[Question], bool]:
    """
    Build the membership test for a requested type label.

    A label naming a canonical type ("MCQ", "short", ...) matches on the
    canonical type; anything else matches the raw type case-insensitively.
    """
    key = label.strip().lower()
    canonical = _CANONICAL_BY_NAME.get(key)
    if canonical is not None:
        return lambda q: q.canonical_type is canonical
    return lambda q: q.type.strip().lower() == key


def type_buckets(pool: Iterable[Question], labels: Iterable[str]) -> Dict[str, List[Question]]:
    """
    Partition the pool into one bucket per requested label.

    A question lands in the first bucket whose label matches it, so
    overlapping labels never draw the same question twice.
    """
    labels = list(labels)
    matchers = [(label, type_bucket_matcher(label)) for label in labels]
    buckets: Dict[str, List[Question]] = {label: [] for label in labels}
    for question in pool:
        for label, matches in matchers:
            if matches(question):
                buckets[label].append(question)
                break
    return buckets


def difficulty_buckets(pool: Iterable[Question], levels: Iterable[str]) -> Dict[str, List[Question]]:
    """Partition the pool by difficulty label (case-insensitive)."""
    buckets: Dict[str, List[Question]] = {level: [] for level in levels}
    index = {level.lower(): level for level in buckets}
    for question in pool:
        level = index.get(question.difficulty.strip().lower())
        if level is not None:
            buckets[level].append(question)
    return buckets


def clamp_allocation(
    requested: Mapping[str, int],
    available: Mapping[str, int],
) -> Dict[str, int]:
    """
    Clamp requested counts into ``0 <= n <= available``.

    Example:
        >>> clamp_allocation({"MCQ": 5, "Short": -1}, {"MCQ": 3, "Short": 4})
        {'MCQ': 3, 'Short': 0}
    """
    clamped: Dict[str, int] = {}
    for label, count in requested.items():
        limit = available.get(label, 0)
        value = max(0, min(int(count), limit))
        if value != count:
            logger.info(f"Requested {count} {label} questions, {limit} available; using {value}")
        clamped[label] = value
    return clamped


# ─────────────────────────────────────────────────────────────────────────────
# Drawing
# ─────────────────────────────────────────────────────────────────────────────

def _draw(
    buckets: Mapping[str, List[Question]],
    counts: Mapping[str, int],
    rng: random.Random,
) -> List[Question]:
    picked: List[Question] = []
    for label, count in counts.items():
        bucket = list(buckets.get(label, ()))
        rng.shuffle(bucket)
        picked.extend(bucket[:count])
    return picked


def allocate(
    pool: Iterable[Question],
    requested_counts: Mapping[str, int],
    *,
    seed: Optional[int] = None,
) -> SelectionResult:
    """
    Draw a bounded random subset per type.

    Args:
        pool: Available questions
        requested_counts: Requested count per canonical-or-raw type label
        seed: Optional seed for reproducible draws

    Returns:
        SelectionResult (no mark target) with questions grouped by label
        in request order

    Raises:
        EmptyPoolError: If the combined draw is empty

    Invariants:
        - count for label t == min(requested[t], available[t])

    Example:
        >>> result = allocate(pool, {"MCQ": 5})  # only 3 MCQ in pool
        >>> result.question_count
        3
    """
    pool = list(pool)
    buckets = type_buckets(pool, requested_counts.keys())
    available = {label: len(bucket) for label, bucket in buckets.items()}
    counts = clamp_allocation(requested_counts, available)

    picked = _draw(buckets, counts, random.Random(seed))
    if not picked:
        raise EmptyPoolError()

    logger.info(
        f"Allocated {len(picked)} questions: "
        + ", ".join(f"{label}={n}" for label, n in counts.items())
    )
    return SelectionResult(questions=tuple(picked))


def allocate_by_difficulty(
    pool: Iterable[Question],
    requested_counts: Mapping[str, int],
    *,
    seed: Optional[int] = None,
) -> SelectionResult:
    """
    Draw a bounded random subset per difficulty level.

    Same clamping and shuffling rules as allocate().

    Raises:
        EmptyPoolError: If the combined draw is empty
    """
    pool = list(pool)
    buckets = difficulty_buckets(pool, requested_counts.keys())
    available = {label: len(bucket) for label, bucket in buckets.items()}
    counts = clamp_allocation(requested_counts, available)

    picked = _draw(buckets, counts, random.Random(seed))
    if not picked:
        raise EmptyPoolError()

    logger.info(f"Allocated {len(picked)} questions by difficulty: {counts}")
    return SelectionResult(questions=tuple(picked))


# ─────────────────────────────────────────────────────────────────────────────
# Count Derivation
# ─────────────────────────────────────────────────────────────────────────────

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def mixed_type_counts(total: int, mcq_share: float = 0.6) -> Dict[str, int]:
    """
    Split a question count between MCQ and Short for a "Mixed" paper.

    Example:
        >>> mixed_type_counts(10)
        {'MCQ': 6, 'Short': 4}
    """
    total = max(0, total)
    mcq = min(total, math.ceil(total * mcq_share - 1e-9))
    return {CanonicalType.MCQ.value: mcq, CanonicalType.SHORT.value: total - mcq}


def paper_type_counts(paper_type: str, total: int) -> Dict[str, int]:
    """
    Derive per-type counts from a paper type label.

    "Mixed" splits MCQ/Short; any other label puts every question in the
    bucket of its canonical type ("Short Answer" -> Short).
    """
    if paper_type.strip().lower() == "mixed":
        return mixed_type_counts(total)
    return {canonical_type(paper_type).value: max(0, total)}


def difficulty_counts(total: int, ratio: Mapping[str, float]) -> Dict[str, int]:
    """
    Split a question count by difficulty percentages.

    easy and medium are rounded (half up); hard takes the remainder.

    Example:
        >>> difficulty_counts(10, {"easy": 50, "medium": 30, "hard": 20})
        {'easy': 5, 'medium': 3, 'hard': 2}
    """
    total = max(0, total)
    easy = min(total, _round_half_up(ratio.get("easy", 0) / 100 * total))
    medium = min(total - easy, _round_half_up(ratio.get("medium", 0) / 100 * total))
    return {"easy": easy, "medium": medium, "hard": total - easy - medium}
