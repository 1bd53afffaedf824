"""
Module: builder.workflow

Purpose:
    Explicit state machine for interactive paper assembly.
    A session moves a question pool through selection, arrangement,
    review edits, pagination and export; every step checks the
    transition table so steps cannot run out of order.

Key Classes:
    - AssemblyState: Workflow states
    - AssemblySession: Drives one paper through the workflow
    - WorkflowError: Illegal transition

Transitions:
    CONFIG      -> SELECTING, ALLOCATING
    SELECTING   -> ALLOCATING, ARRANGING, CONFIG
    ALLOCATING  -> ARRANGING, CONFIG
    ARRANGING   -> REVIEWING
    REVIEWING   -> ARRANGING (edits), PAGINATING, CONFIG
    PAGINATING  -> REVIEWING, CONFIG

Dependencies:
    - builder.selection, builder.arrangement, builder.controller, builder.output

Used By:
    - cli: review flow
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Union

from paper_toolkit.core.models import Paper, PaperHeader, Question, SelectionResult
from paper_toolkit.core.utils import paper_filename, serialize_paper_summary

from .arrangement import ArrangeMode, CustomSection, CustomSubsection, arrange_paper
from .controller import layout_paper
from .layout import LayoutConfig, LayoutResult
from .output import MathRenderer, render_html, render_pdf_bytes
from .selection import EmptyPoolError, SelectionError, allocate, select_for_target

logger = logging.getLogger(__name__)


class WorkflowError(Exception):
    """Raised when a workflow step is attempted from the wrong state."""
    pass


class AssemblyState(Enum):
    CONFIG = "config"
    SELECTING = "selecting"
    ALLOCATING = "allocating"
    ARRANGING = "arranging"
    REVIEWING = "reviewing"
    PAGINATING = "paginating"


TRANSITIONS: Dict[AssemblyState, FrozenSet[AssemblyState]] = {
    AssemblyState.CONFIG: frozenset({AssemblyState.SELECTING, AssemblyState.ALLOCATING}),
    AssemblyState.SELECTING: frozenset({AssemblyState.ALLOCATING, AssemblyState.ARRANGING, AssemblyState.CONFIG}),
    AssemblyState.ALLOCATING: frozenset({AssemblyState.ARRANGING, AssemblyState.CONFIG}),
    AssemblyState.ARRANGING: frozenset({AssemblyState.REVIEWING}),
    AssemblyState.REVIEWING: frozenset({AssemblyState.ARRANGING, AssemblyState.PAGINATING, AssemblyState.CONFIG}),
    AssemblyState.PAGINATING: frozenset({AssemblyState.REVIEWING, AssemblyState.CONFIG}),
}


class AssemblySession:
    """
    One paper moving through the assembly workflow.

    Attributes:
        state: Current AssemblyState
        pool: Questions available to select from
        header: Paper header
        selection: Latest selection result
        paper: Latest arranged paper (replaced on every edit)
        layout: Latest pagination result

    Example:
        >>> session = AssemblySession(pool, PaperHeader(subject="Physics"))
        >>> session.select(20)
        >>> session.arrange()
        >>> session.edit_question("q7", marks=3)
        >>> layout = session.paginate()
        >>> pdf = session.export_bytes()
    """

    def __init__(
        self,
        pool: Iterable[Question],
        header: Optional[PaperHeader] = None,
        *,
        layout_config: Optional[LayoutConfig] = None,
        math: Optional[MathRenderer] = None,
        paper_type: str = "Mixed",
    ) -> None:
        self.pool: List[Question] = list(pool)
        self.header = header or PaperHeader()
        self.layout_config = layout_config or LayoutConfig()
        self.math = math
        self.paper_type = paper_type

        self.state = AssemblyState.CONFIG
        self.selection: Optional[SelectionResult] = None
        self.paper: Optional[Paper] = None
        self.layout: Optional[LayoutResult] = None

        self._questions: List[Question] = []
        self._mode = ArrangeMode.DEFAULT
        self._custom: Optional[tuple[CustomSection, ...]] = None

    # ─────────────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────────────

    def can_transition(self, target: AssemblyState) -> bool:
        return target in TRANSITIONS[self.state]

    def _transition(self, target: AssemblyState) -> None:
        if not self.can_transition(target):
            raise WorkflowError(f"Cannot move from {self.state.value} to {target.value}")
        logger.debug(f"Workflow: {self.state.value} -> {target.value}")
        self.state = target

    def reset(self) -> None:
        """Return to CONFIG, discarding selection, paper and layout."""
        if self.state is not AssemblyState.CONFIG:
            self._transition(AssemblyState.CONFIG)
        self.selection = None
        self.paper = None
        self.layout = None
        self._questions = []

    @property
    def questions(self) -> tuple[Question, ...]:
        """Working question list (selection after review edits)."""
        return tuple(self._questions)

    # ─────────────────────────────────────────────────────────────────────────
    # Selection
    # ─────────────────────────────────────────────────────────────────────────

    def select(self, target_marks: float, *, seed: Optional[int] = None) -> SelectionResult:
        """
        Target-sum selection over the pool.

        Raises:
            WorkflowError: If not in CONFIG
            EmptyPoolError: If no question has positive marks (session
                returns to CONFIG)
        """
        self._transition(AssemblyState.SELECTING)
        try:
            result = select_for_target(self.pool, target_marks, seed=seed)
        except (SelectionError, ValueError):
            self._transition(AssemblyState.CONFIG)
            raise
        self.selection = result
        self._questions = list(result.questions)
        return result

    def allocate(self, requested_counts: Mapping[str, int], *, seed: Optional[int] = None) -> SelectionResult:
        """
        Per-type bounded draw.

        Draws from the current selection when called after select(),
        otherwise from the whole pool.

        Raises:
            WorkflowError: If not in CONFIG or SELECTING
            EmptyPoolError: If nothing could be drawn (session returns to CONFIG)
        """
        source = self._questions if self.state is AssemblyState.SELECTING else self.pool
        self._transition(AssemblyState.ALLOCATING)
        try:
            result = allocate(source, requested_counts, seed=seed)
        except SelectionError:
            self._transition(AssemblyState.CONFIG)
            raise
        self.selection = result
        self._questions = list(result.questions)
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Arrangement and Review
    # ─────────────────────────────────────────────────────────────────────────

    def arrange(
        self,
        mode: ArrangeMode = ArrangeMode.DEFAULT,
        custom: Optional[Sequence[CustomSection]] = None,
    ) -> Paper:
        """
        Arrange the working list into sections and enter REVIEWING.

        In CUSTOM mode the section tree becomes the working list.

        Raises:
            WorkflowError: If not SELECTING, ALLOCATING or REVIEWING
            EmptyPoolError: If the arrangement holds no questions (session
                state and working list are left unchanged)
        """
        if not self.can_transition(AssemblyState.ARRANGING):
            raise WorkflowError(f"Cannot arrange from {self.state.value}")
        if mode is ArrangeMode.CUSTOM:
            if custom is None:
                raise ValueError("CUSTOM arrangement requires a section tree")
            tree: Optional[tuple[CustomSection, ...]] = tuple(custom)
            questions = _custom_questions(tree)
        else:
            tree = None
            questions = list(self._questions)
        return self._rearrange(questions, mode, tree)

    def _rearrange(
        self,
        questions: List[Question],
        mode: ArrangeMode,
        custom: Optional[tuple[CustomSection, ...]],
    ) -> Paper:
        paper = arrange_paper(
            self.header,
            questions,
            mode=mode,
            custom=custom,
            paper_type=self.paper_type,
        )
        if paper.total_questions == 0:
            logger.warning("Arrangement produced no questions; keeping the previous paper")
            raise EmptyPoolError()

        self._transition(AssemblyState.ARRANGING)
        self._questions = questions
        self._mode = mode
        self._custom = custom
        self.paper = paper
        self.layout = None
        self._transition(AssemblyState.REVIEWING)
        return paper

    def _require(self, state: AssemblyState) -> None:
        if self.state is not state:
            raise WorkflowError(f"Step requires {state.value}, session is {self.state.value}")

    def edit_question(
        self,
        question_id: str,
        *,
        text: Optional[str] = None,
        marks: Optional[float] = None,
    ) -> Paper:
        """
        Edit a question's text and/or marks and re-arrange.

        Raises:
            WorkflowError: If not REVIEWING
            KeyError: If the question is not in the paper
        """
        self._require(AssemblyState.REVIEWING)
        index = self._index_of(question_id)
        updated = self._questions[index].with_changes(text=text, marks=marks)
        questions = list(self._questions)
        questions[index] = updated
        custom = self._custom
        if custom is not None:
            custom = _replace_in_custom(custom, question_id, updated)
        logger.info(f"Edited question {question_id}")
        return self._rearrange(questions, self._mode, custom)

    def remove_question(self, question_id: str) -> Paper:
        """
        Remove a question and re-arrange.

        Raises:
            WorkflowError: If not REVIEWING
            KeyError: If the question is not in the paper
            EmptyPoolError: If it is the last question
        """
        self._require(AssemblyState.REVIEWING)
        index = self._index_of(question_id)
        questions = self._questions[:index] + self._questions[index + 1:]
        custom = self._custom
        if custom is not None:
            custom = _replace_in_custom(custom, question_id, None)
        paper = self._rearrange(questions, self._mode, custom)
        logger.info(f"Removed question {question_id}")
        return paper

    def _index_of(self, question_id: str) -> int:
        for index, question in enumerate(self._questions):
            if question.id == question_id:
                return index
        raise KeyError(question_id)

    def preview_html(self) -> str:
        """HTML preview of the current paper."""
        if self.paper is None:
            raise WorkflowError("Nothing arranged yet")
        return render_html(self.paper)

    # ─────────────────────────────────────────────────────────────────────────
    # Pagination and Export
    # ─────────────────────────────────────────────────────────────────────────

    def paginate(self) -> LayoutResult:
        """Lay the reviewed paper out onto pages."""
        self._transition(AssemblyState.PAGINATING)
        self.layout = layout_paper(self.paper, self.layout_config, math=self.math)
        return self.layout

    def back_to_review(self) -> None:
        self._transition(AssemblyState.REVIEWING)

    def export_bytes(self) -> bytes:
        """Render the paginated paper to PDF bytes."""
        self._require(AssemblyState.PAGINATING)
        return render_pdf_bytes(self.layout, self.layout_config, title=self.header.title)

    def export(self, output_dir: Union[str, Path]) -> Path:
        """
        Write the PDF into ``output_dir`` using the standard filename.

        Returns:
            Path of the written PDF
        """
        data = self.export_bytes()
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / paper_filename(self.header)
        path.write_bytes(data)
        logger.info(f"Exported {self.layout.page_count} pages to {path}")
        return path

    def summary(self, paper_id: Optional[str] = None) -> dict:
        """Persistence summary of the current paper."""
        if self.paper is None:
            raise WorkflowError("Nothing arranged yet")
        return serialize_paper_summary(self.paper, paper_id=paper_id)


def _custom_questions(custom: Sequence[CustomSection]) -> List[Question]:
    result: List[Question] = []
    for section in custom:
        result.extend(section.questions)
        for sub in section.subsections:
            result.extend(sub.questions)
    return result


def _replace_in_custom(
    custom: Sequence[CustomSection],
    question_id: str,
    new: Optional[Question],
) -> tuple[CustomSection, ...]:
    """Replace (or drop, when ``new`` is None) a question throughout a section tree."""

    def swap(questions: Sequence[Question]) -> tuple[Question, ...]:
        out = []
        for q in questions:
            if q.id != question_id:
                out.append(q)
            elif new is not None:
                out.append(new)
        return tuple(out)

    return tuple(
        replace(
            section,
            questions=swap(section.questions),
            subsections=tuple(
                CustomSubsection(title=sub.title, questions=swap(sub.questions))
                for sub in section.subsections
            ),
        )
        for section in custom
    )
