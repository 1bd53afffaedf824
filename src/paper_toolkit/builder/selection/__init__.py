"""
Module: builder.selection

Purpose:
    Question selection for building papers: greedy target-sum selection
    over the pool, and bounded random draws per type or difficulty.

Key Functions:
    - select_for_target(): Target-mark selection
    - allocate(): Per-type bounded random draw
    - allocate_by_difficulty(): Per-difficulty bounded random draw
    - select_questions(): Dispatch on SelectionConfig.mode

Key Classes:
    - SelectionConfig: Configuration for selection
    - SelectionError / EmptyPoolError: Selection failures

Dependencies:
    - paper_toolkit.core.models: Question, SelectionResult

Used By:
    - builder.controller: Main build controller
    - builder.workflow: Assembly session
"""

from .config import SelectionConfig, SelectionMode
from .selector import select_for_target, SelectionError, EmptyPoolError
from .allocator import (
    allocate,
    allocate_by_difficulty,
    clamp_allocation,
    difficulty_counts,
    mixed_type_counts,
    paper_type_counts,
    type_buckets,
)
from .runner import select_questions

__all__ = [
    "SelectionConfig",
    "SelectionMode",
    "select_for_target",
    "SelectionError",
    "EmptyPoolError",
    "allocate",
    "allocate_by_difficulty",
    "clamp_allocation",
    "difficulty_counts",
    "mixed_type_counts",
    "paper_type_counts",
    "type_buckets",
    "select_questions",
]
