"""
Module: builder.selection.config

Purpose:
    Configuration dataclass for question selection. Immutable
    configuration with validation on construction.

Key Classes:
    - SelectionMode: Which selector drives the run
    - SelectionConfig: Main configuration for question selection

Dependencies:
    - dataclasses (std)

Used By:
    - builder.controller: Build controller
    - builder.workflow: Assembly session
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class SelectionMode(Enum):
    """
    How the subset is chosen.

    Attributes:
        TARGET_MARKS: Greedy target-sum selection over the whole pool
        TYPE_COUNTS: Bounded random draw per question type
        DIFFICULTY: Bounded random draw per difficulty level
    """

    TARGET_MARKS = "target_marks"
    TYPE_COUNTS = "type_counts"
    DIFFICULTY = "difficulty"


@dataclass(frozen=True)
class SelectionConfig:
    """
    Configuration for selection (immutable).

    Attributes:
        mode: Which selector to run
        target_marks: Target mark total (TARGET_MARKS mode)
        type_counts: Requested count per type label (TYPE_COUNTS mode)
        question_count: Total question count used to derive type or
            difficulty counts when none are given explicitly
        paper_type: "MCQ", "Short Answer" or "Mixed" (derives type counts)
        difficulty_ratio: Percentages per difficulty (DIFFICULTY mode)
        seed: Random seed for reproducible draws (None = fresh entropy)

    Invariants:
        - target_marks > 0 in TARGET_MARKS mode
        - counts and ratios are non-negative

    Example:
        >>> config = SelectionConfig(target_marks=50)
        >>> config.mode
        <SelectionMode.TARGET_MARKS: 'target_marks'>
    """

    mode: SelectionMode = SelectionMode.TARGET_MARKS
    target_marks: Optional[float] = None
    type_counts: Dict[str, int] = field(default_factory=dict)
    question_count: Optional[int] = None
    paper_type: str = "Mixed"
    difficulty_ratio: Dict[str, float] = field(
        default_factory=lambda: {"easy": 50.0, "medium": 30.0, "hard": 20.0}
    )
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.mode is SelectionMode.TARGET_MARKS:
            if self.target_marks is None:
                raise ValueError("target_marks is required for target-mark selection")
            if not math.isfinite(self.target_marks) or self.target_marks <= 0:
                raise ValueError(f"target_marks must be positive: {self.target_marks}")
        if self.question_count is not None and self.question_count < 0:
            raise ValueError(f"question_count must be non-negative: {self.question_count}")
        if self.mode is SelectionMode.TYPE_COUNTS and not self.type_counts and self.question_count is None:
            raise ValueError("type_counts or question_count is required for type allocation")
        if self.mode is SelectionMode.DIFFICULTY and self.question_count is None:
            raise ValueError("question_count is required for difficulty allocation")
        for label, value in self.difficulty_ratio.items():
            if not 0 <= value <= 100:
                raise ValueError(f"difficulty ratio for {label!r} must be 0-100: {value}")
