"""
Module: builder.controller

Purpose:
    Orchestrate the complete paper building pipeline.
    Load → Normalize → Select → Arrange → Compose → Paginate → Render

Key Functions:
    - build_paper(): Main entry point for building a paper
    - layout_paper(): Compose and paginate an arranged Paper

Key Classes:
    - BuildResult: Complete build result
    - BuildError: Exception for build failures

Dependencies:
    - builder.loading: Question loading and normalization
    - builder.selection: Question selection
    - builder.arrangement: Sections and numbering
    - builder.layout: Composition and pagination
    - builder.output: PDF rendering

Used By:
    - cli: Command line entry point
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, List, Optional

from paper_toolkit.core.models import Paper, Question, SelectionResult
from paper_toolkit.core.utils import paper_filename, serialize_paper_summary

from .arrangement import ArrangeMode, arrange_paper
from .config import BuilderConfig
from .layout import LayoutConfig, LayoutResult, compose_paper, paginate
from .loading import LoaderError, load_questions, normalize_pool
from .output import MathRenderer, render_html, render_to_pdf
from .selection import SelectionError, select_questions

logger = logging.getLogger(__name__)


class BuildError(Exception):
    """Error during build pipeline."""
    pass


@dataclass(frozen=True)
class BuildResult:
    """
    Complete build result (immutable).

    Attributes:
        pdf_path: Path to generated paper PDF
        paper: Arranged paper
        selection: Selection result (achieved vs target marks)
        layout: Paginated layout
        metadata: Build metadata dictionary
        warnings: Any warnings during build
        preview_path: HTML preview (if written)

    Example:
        >>> result = build_paper(config)
        >>> print(f"Generated {result.page_count} pages with {result.total_marks} marks")
    """

    pdf_path: Path
    paper: Paper
    selection: SelectionResult
    layout: LayoutResult
    metadata: dict
    warnings: tuple[str, ...]
    preview_path: Optional[Path] = None

    @property
    def total_marks(self) -> float:
        return self.paper.total_marks

    @property
    def page_count(self) -> int:
        return self.layout.page_count


def layout_paper(
    paper: Paper,
    config: Optional[LayoutConfig] = None,
    *,
    math: Optional[MathRenderer] = None,
) -> LayoutResult:
    """
    Compose and paginate an arranged paper.

    Composition warnings (degraded math, fonts) are carried into the
    layout result alongside pagination warnings.
    """
    config = config or LayoutConfig()
    document = compose_paper(paper, config, math)
    return paginate(document.blocks, config, degraded=document.degraded, warnings=document.warnings)


def build_paper(
    config: BuilderConfig,
    pool: Optional[Iterable[Any]] = None,
    *,
    math: Optional[MathRenderer] = None,
) -> BuildResult:
    """
    Build a paper from start to finish.

    Pipeline:
    1. Load questions (from ``pool`` or ``config.source_path``)
    2. Filter by chapters
    3. Select questions (target marks, type counts or difficulty)
    4. Arrange into sections
    5. Compose and paginate
    6. Render to PDF
    7. Write metadata (and optional preview)

    In CUSTOM arrangement steps 1-3 are skipped: the configured section
    tree is the paper and the reported selection is its question list.

    Args:
        config: Build configuration
        pool: Already-fetched questions or raw records (optional)
        math: Math renderer override

    Returns:
        BuildResult with paths and metadata

    Raises:
        BuildError: If any step fails

    Example:
        >>> result = build_paper(config)
        >>> result.pdf_path.name
        'Physics_All_Question_Paper.pdf'
    """
    warnings: List[str] = []
    start_time = time.perf_counter()
    header = config.effective_header

    if config.arrange_mode is ArrangeMode.CUSTOM:
        # The section tree is the paper; the pool and selection settings are unused
        logger.info("Custom arrangement: questions taken from the section tree, selection skipped")
        paper = arrange_paper(
            header,
            mode=ArrangeMode.CUSTOM,
            custom=config.custom_sections,
            paper_type=config.selection.paper_type,
        )
        try:
            selection = SelectionResult(questions=paper.questions)
        except ValueError as e:
            raise BuildError(f"Invalid custom sections: {e}") from e
    else:
        # 1. Load questions
        questions = _load_pool(config, pool)
        logger.info(f"Loaded {len(questions)} questions")

        # 2. Apply chapter filter
        if config.chapters:
            wanted = set(config.chapters)
            questions = [q for q in questions if q.chapter in wanted]
            logger.debug(f"Filtered by chapters: {len(questions)} remaining")

        if not questions:
            raise BuildError("No questions match the specified filters")

        # 3. Select questions
        try:
            selection = select_questions(questions, config.selection)
        except SelectionError as e:
            raise BuildError(f"Selection failed: {e}") from e

        if selection.target_marks is not None:
            logger.info(
                f"Selected {selection.question_count} questions, "
                f"achieved {selection.total_marks}/{selection.target_marks} marks"
            )
            if not selection.is_exact:
                warnings.append(
                    f"Target of {selection.target_marks} marks not reachable exactly; "
                    f"selected {selection.total_marks}"
                )

        # 4. Arrange
        paper = arrange_paper(
            header,
            selection.questions,
            mode=config.arrange_mode,
            paper_type=config.selection.paper_type,
        )

    if paper.total_questions == 0:
        raise BuildError("Arranged paper has no questions")

    # 5. Compose and paginate
    math = math or MathRenderer(dpi=config.layout.math_dpi, enabled=config.render_math)
    layout = layout_paper(paper, config.layout, math=math)
    warnings.extend(layout.warnings)
    logger.info(f"Paginated onto {layout.page_count} pages")

    # 6. Render
    output_dir = _generate_output_dir(config.output_dir or Path("output"), config)
    output_dir.mkdir(parents=True, exist_ok=True)
    pdf_path = output_dir / paper_filename(header)
    try:
        render_to_pdf(layout, pdf_path, config.layout, title=header.title)
    except OSError as e:
        raise BuildError(f"Failed to write PDF: {e}") from e

    preview_path = None
    if config.write_preview:
        preview_path = pdf_path.with_suffix(".html")
        preview_path.write_text(render_html(paper), encoding="utf-8")
        logger.info(f"Wrote preview: {preview_path}")

    elapsed = time.perf_counter() - start_time
    logger.info(f"Paper generation completed in {elapsed:.2f}s")

    # 7. Metadata
    metadata = _build_metadata(config, paper, selection, layout)
    if config.write_metadata:
        _write_metadata(output_dir, metadata)

    return BuildResult(
        pdf_path=pdf_path,
        paper=paper,
        selection=selection,
        layout=layout,
        metadata=metadata,
        warnings=tuple(warnings),
        preview_path=preview_path,
    )


def _load_pool(config: BuilderConfig, pool: Optional[Iterable[Any]]) -> List[Question]:
    if pool is not None:
        records = list(pool)
        if all(isinstance(r, Question) for r in records):
            return records
        if any(isinstance(r, Question) for r in records):
            raise BuildError("Pool mixes Question objects and raw records")
        return normalize_pool(records)

    if config.source_path is None:
        raise BuildError("No question pool given and no source_path configured")
    try:
        return load_questions(config.source_path)
    except LoaderError as e:
        raise BuildError(f"Failed to load questions: {e}") from e


def _mode_label(config: BuilderConfig) -> str:
    if config.arrange_mode is ArrangeMode.CUSTOM:
        return "custom"
    return config.selection.mode.value


def _generate_output_dir(base_dir: Path, config: BuilderConfig) -> Path:
    """
    Timestamped output folder inside ``base_dir``.

    Example:
        >>> _generate_output_dir(Path("output"), config)
        Path('output/20250116-103045__target_marks__physics')
    """
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    subject = re.sub(r"[^A-Za-z0-9]+", "-", config.header.subject or "").strip("-").lower() or "paper"
    folder_name = f"{timestamp}__{_mode_label(config)}__{subject}"

    candidate = base_dir / folder_name
    suffix = 1
    while candidate.exists():
        candidate = base_dir / f"{folder_name} ({suffix})"
        suffix += 1
    return candidate


def _build_metadata(
    config: BuilderConfig,
    paper: Paper,
    selection: SelectionResult,
    layout: LayoutResult,
) -> dict:
    """
    Build metadata dictionary for a generated paper.

    Contains the paper summary handed to persistence, selection
    statistics and a page manifest.
    """
    manifest = [
        {"page": page.index, "question_id": placement.block.question_id, "number": placement.block.number}
        for page in layout.pages
        for placement in page.placements
        if placement.block.question_id is not None
    ]
    return {
        "generated_at": datetime.now().isoformat(),
        "selection_mode": _mode_label(config),
        "target_marks": selection.target_marks,
        "actual_marks": selection.total_marks,
        "mark_difference": selection.mark_difference,
        "seed": config.selection.seed,
        "question_count": paper.total_questions,
        "counts_by_type": selection.counts_by_type,
        "page_count": layout.page_count,
        "degraded_rendering": layout.degraded,
        "chapters": list(config.chapters) or None,
        "paper": serialize_paper_summary(paper),
        "manifest": manifest,
    }


def _write_metadata(output_dir: Path, metadata: dict) -> None:
    """
    Write metadata JSON file to output directory.

    Raises:
        BuildError: If writing fails
    """
    metadata_path = output_dir / "build_metadata.json"
    try:
        with open(metadata_path, "w", encoding="utf-8") as f:
            json.dump(metadata, f, indent=2, ensure_ascii=False)
        logger.debug(f"Wrote metadata to {metadata_path}")
    except OSError as e:
        raise BuildError(f"Failed to write metadata: {e}") from e
