"""
Module: builder.selection.runner

Purpose:
    Dispatch a SelectionConfig to the matching selector.

Key Functions:
    - select_questions(): Pool + config -> SelectionResult

Used By:
    - builder.controller: Main build controller
    - builder.workflow: Assembly session
"""

from __future__ import annotations

import logging
from typing import Iterable

from paper_toolkit.core.models import Question, SelectionResult

from .allocator import allocate, allocate_by_difficulty, difficulty_counts, paper_type_counts
from .config import SelectionConfig, SelectionMode
from .selector import select_for_target

logger = logging.getLogger(__name__)


def select_questions(pool: Iterable[Question], config: SelectionConfig) -> SelectionResult:
    """
    Run the selector named by ``config.mode``.

    TYPE_COUNTS uses explicit ``type_counts`` when given, otherwise
    derives them from ``paper_type`` and ``question_count``.

    Raises:
        EmptyPoolError: If nothing could be selected
    """
    pool = list(pool)

    if config.mode is SelectionMode.TARGET_MARKS:
        return select_for_target(pool, config.target_marks, seed=config.seed)

    if config.mode is SelectionMode.TYPE_COUNTS:
        counts = dict(config.type_counts) or paper_type_counts(config.paper_type, config.question_count or 0)
        logger.debug(f"Type allocation request: {counts}")
        return allocate(pool, counts, seed=config.seed)

    counts = difficulty_counts(config.question_count or 0, config.difficulty_ratio)
    logger.debug(f"Difficulty allocation request: {counts}")
    return allocate_by_difficulty(pool, counts, seed=config.seed)
