"""
Module: cli

Purpose:
    Command line entry point (``paper-toolkit``).

Commands:
    build   Build a paper PDF from a JSON / JSONL question pool
    papers  List papers saved in a paper store

Example:
    paper-toolkit build pool.json --target-marks 20 --subject Physics
    paper-toolkit build pool.json --type-counts MCQ=5,Short=3 --arrange by_type
    paper-toolkit papers workspace/papers.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from paper_toolkit import __version__
from paper_toolkit.core.models import PaperHeader, format_marks
from paper_toolkit.builder import (
    BuildError,
    BuilderConfig,
    SelectionConfig,
    SelectionMode,
    build_paper,
)
from paper_toolkit.builder.arrangement import ArrangeMode
from paper_toolkit.builder.layout import LayoutConfig
from paper_toolkit.store import PaperStore, PaperStoreError

logger = logging.getLogger(__name__)


def _parse_counts(value: str) -> Dict[str, int]:
    """Parse ``MCQ=5,Short=3`` into a mapping."""
    counts: Dict[str, int] = {}
    for pair in filter(None, (p.strip() for p in value.split(","))):
        label, sep, number = pair.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"expected LABEL=COUNT, got {pair!r}")
        try:
            counts[label.strip()] = int(number)
        except ValueError as e:
            raise argparse.ArgumentTypeError(f"count for {label!r} must be an integer") from e
    return counts


def _parse_ratio(value: str) -> Dict[str, float]:
    """Parse ``50:30:20`` into easy/medium/hard percentages."""
    parts = value.split(":")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError("ratio must be EASY:MEDIUM:HARD, e.g. 50:30:20")
    try:
        easy, medium, hard = (float(p) for p in parts)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid ratio {value!r}") from e
    return {"easy": easy, "medium": medium, "hard": hard}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paper-toolkit",
        description="Assemble question papers from a question pool.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    build = commands.add_parser("build", help="Build a paper PDF")
    build.add_argument("pool", type=Path, help="JSON / JSONL file of question records")

    # Selection (one mode)
    mode = build.add_mutually_exclusive_group(required=True)
    mode.add_argument("--target-marks", type=float, help="Greedy selection towards a mark total")
    mode.add_argument("--type-counts", type=_parse_counts, help="Per-type counts, e.g. MCQ=5,Short=3")
    mode.add_argument("--paper-type", choices=["MCQ", "Short Answer", "Mixed"],
                      help="Derive type counts from --question-count")
    mode.add_argument("--difficulty", action="store_true", help="Split --question-count by --ratio")
    build.add_argument("--question-count", type=int, help="Total questions (paper type / difficulty modes)")
    build.add_argument("--ratio", type=_parse_ratio, default=None, help="EASY:MEDIUM:HARD percentages")
    build.add_argument("--seed", type=int, default=None, help="Random seed for reproducible draws")
    build.add_argument("--chapter", action="append", default=[], help="Restrict to chapter (repeatable)")

    # Header
    build.add_argument("--title", default="Question Paper")
    build.add_argument("--institution", default="")
    build.add_argument("--board", default="")
    build.add_argument("--standard", default="")
    build.add_argument("--subject", default="")
    build.add_argument("--duration", default="")
    build.add_argument("--instructions", default="")

    # Layout and output
    build.add_argument("--arrange", choices=["default", "by_type"], default="default", help="Section grouping")
    build.add_argument("--unicode-font", type=Path, help="TTF for Gujarati / Devanagari / ... text")
    build.add_argument("--no-math", action="store_true", help="Show $...$ math as plain text")
    build.add_argument("--output-dir", type=Path, default=Path("output"))
    build.add_argument("--preview", action="store_true", help="Also write an HTML preview")
    build.add_argument("--save", type=Path, metavar="STORE", help="Save the paper summary to a JSON store")

    papers = commands.add_parser("papers", help="List saved papers")
    papers.add_argument("store", type=Path, help="Paper store JSON file")
    return parser


def _selection_config(args: argparse.Namespace) -> SelectionConfig:
    if args.target_marks is not None:
        return SelectionConfig(target_marks=args.target_marks, seed=args.seed)
    if args.type_counts is not None:
        return SelectionConfig(mode=SelectionMode.TYPE_COUNTS, type_counts=args.type_counts, seed=args.seed)
    if args.paper_type is not None:
        return SelectionConfig(
            mode=SelectionMode.TYPE_COUNTS,
            paper_type=args.paper_type,
            question_count=args.question_count,
            seed=args.seed,
        )
    extra = {"difficulty_ratio": args.ratio} if args.ratio else {}
    return SelectionConfig(
        mode=SelectionMode.DIFFICULTY,
        question_count=args.question_count,
        seed=args.seed,
        **extra,
    )


def _run_build(args: argparse.Namespace) -> int:
    try:
        config = BuilderConfig(
            selection=_selection_config(args),
            source_path=args.pool,
            chapters=list(args.chapter),
            header=PaperHeader(
                title=args.title,
                institution=args.institution,
                board=args.board,
                standard=args.standard,
                subject=args.subject,
                duration=args.duration,
                instructions=args.instructions,
            ),
            arrange_mode=ArrangeMode(args.arrange),
            layout=LayoutConfig(unicode_font_path=args.unicode_font),
            render_math=not args.no_math,
            output_dir=args.output_dir,
            write_preview=args.preview,
        )
    except ValueError as e:
        logger.error(f"Invalid options: {e}")
        return 2

    try:
        result = build_paper(config)
    except BuildError as e:
        logger.error(str(e))
        return 1

    for warning in result.warnings:
        logger.warning(warning)
    print(
        f"{result.pdf_path}  ({result.paper.total_questions} questions, "
        f"{format_marks(result.total_marks)} marks, {result.page_count} pages)"
    )

    if args.save:
        try:
            saved = PaperStore(args.save).save(result.paper)
        except PaperStoreError as e:
            logger.error(str(e))
            return 1
        print(f"Saved as {saved['id']}")
    return 0


def _run_papers(args: argparse.Namespace) -> int:
    try:
        papers = PaperStore(args.store).list()
    except PaperStoreError as e:
        logger.error(str(e))
        return 1
    for paper in papers:
        print(
            f"{paper.get('id', '-')}  {paper.get('createdAt', '')[:19]}  {paper.get('subject') or '-'}  "
            f"{paper.get('type', '-')}  {paper.get('totalQuestions', 0)}Q / {paper.get('totalMarks', 0)}M"
        )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    if args.command == "build":
        return _run_build(args)
    return _run_papers(args)


if __name__ == "__main__":
    sys.exit(main())
