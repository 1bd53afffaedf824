"""
Module: builder.layout.composer

Purpose:
    Compose measured Blocks from an arranged Paper.
    Wraps question text to the content width, flows inline math images
    with the words, and measures every block so the paginator only has
    to deal with heights.

Key Functions:
    - compose_paper(): Paper -> ComposedDocument
    - layout_text(): Wrap rich text into measured Lines

Key Classes:
    - ComposedDocument: Ordered blocks plus warnings

Block order:
    header, [instructions], [marks distribution],
    then per section: title, direct questions, per subsection: title, questions

Dependencies:
    - reportlab: pdfmetrics.stringWidth for text measurement
    - builder.output.math_renderer: Math segments and images
    - builder.output.fonts: Font selection

Used By:
    - builder.controller: Main build controller
    - builder.workflow: Assembly session
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import List, Optional

from reportlab.pdfbase.pdfmetrics import stringWidth

from paper_toolkit.core.models import Paper, PaperItem, format_marks
from paper_toolkit.core.utils import marks_chip
from paper_toolkit.builder.output.fonts import (
    FontSet,
    contains_complex_script,
    pick_font,
    resolve_fonts,
)
from paper_toolkit.builder.output.math_renderer import (
    MathRenderer,
    MathRenderError,
    RenderedMath,
    SegmentKind,
    split_math_segments,
)

from .config import LayoutConfig
from .models import Block, BlockKind, Line, TextRun

logger = logging.getLogger(__name__)

CHIP_PADDING = 6.0
CHIP_GAP = 6.0
META_COLOR = 0.35
SECTION_BAR_INDENT = 8.0
META_SEPARATOR = " • "

_TOKEN = re.compile(r"\S+|\s+")


@dataclass(frozen=True)
class ComposedDocument:
    """
    Measured content of a paper, ready for pagination.

    Attributes:
        blocks: Blocks in reading order
        warnings: Composition warnings (degraded math, missing fonts)
        degraded: True when math was laid out as plain text because
            the rendering backend is unavailable
    """

    blocks: tuple[Block, ...]
    warnings: tuple[str, ...] = ()
    degraded: bool = False

    @property
    def question_blocks(self) -> tuple[Block, ...]:
        return tuple(b for b in self.blocks if b.kind is BlockKind.QUESTION)

    @property
    def content_height(self) -> float:
        """Sum of block heights (no inter-block spacing)."""
        return sum(b.height for b in self.blocks)


# ─────────────────────────────────────────────────────────────────────────────
# Line Building
# ─────────────────────────────────────────────────────────────────────────────

class _LineBuilder:
    """Greedy word wrapper producing measured Lines."""

    def __init__(self, x0: float, width: float, leading: float, *, center: bool = False, top: float = 0.0):
        self.x0 = x0
        self.width = width
        self.leading = leading
        self.center = center
        self.top = top
        self.lines: List[Line] = []
        self._runs: List[TextRun] = []
        self._x = 0.0

    @property
    def is_line_empty(self) -> bool:
        return not self._runs

    def add_word(self, word: str, font: str, size: float, *, space_before: bool, color: float = 0.0) -> None:
        width = stringWidth(word, font, size)
        space = stringWidth(" ", font, size) if space_before and self._runs else 0.0

        if self._runs and self._x + space + width > self.width:
            self.newline()
            space = 0.0

        if not self._runs and width > self.width:
            self._add_long_word(word, font, size, color)
            return

        last = self._runs[-1] if self._runs else None
        if (
            last is not None
            and not last.is_math
            and not last.boxed
            and last.font_name == font
            and last.font_size == size
            and last.color == color
        ):
            text = last.text + (" " if space else "") + word
            self._runs[-1] = replace(last, text=text, width=stringWidth(text, font, size))
        else:
            self._runs.append(TextRun(
                text=word, x=self._x + space, offset=0.0, width=width,
                height=size, font_name=font, font_size=size, color=color,
            ))
        self._x += space + width

    def _add_long_word(self, word: str, font: str, size: float, color: float) -> None:
        # Hard-break a word wider than the line
        chunk = ""
        for char in word:
            if chunk and stringWidth(chunk + char, font, size) > self.width:
                self.add_word(chunk, font, size, space_before=False, color=color)
                self.newline()
                chunk = ""
            chunk += char
        if chunk:
            self._runs.append(TextRun(
                text=chunk, x=0.0, offset=0.0, width=stringWidth(chunk, font, size),
                height=size, font_name=font, font_size=size, color=color,
            ))
            self._x = self._runs[-1].width

    def add_image(self, rendered: RenderedMath, source: str, *, space_before: bool, font: str, size: float) -> None:
        space = stringWidth(" ", font, size) if space_before and self._runs else 0.0
        if self._runs and self._x + space + rendered.width > self.width:
            self.newline()
            space = 0.0
        self._runs.append(TextRun(
            text=source, x=self._x + space, offset=0.0, width=rendered.width,
            height=rendered.height, font_name=font, font_size=size, image=rendered.image,
        ))
        self._x += space + rendered.width

    def add_chip(self, text: str, font: str, size: float) -> None:
        width = stringWidth(text, font, size) + 2 * CHIP_PADDING
        gap = CHIP_GAP if self._runs else 0.0
        if self._runs and self._x + gap + width > self.width:
            self.newline()
            gap = 0.0
        self._runs.append(TextRun(
            text=text, x=self._x + gap, offset=0.0, width=width,
            height=size, font_name=font, font_size=size, boxed=True,
        ))
        self._x += gap + width

    def add_centered_image(self, rendered: RenderedMath, source: str, font: str, size: float) -> None:
        """Block math: its own line, centered in the text column."""
        self.newline()
        self._runs.append(TextRun(
            text=source, x=max(0.0, (self.width - rendered.width) / 2), offset=0.0,
            width=rendered.width, height=rendered.height,
            font_name=font, font_size=size, image=rendered.image,
        ))
        self._x = self.width
        self.newline()

    def newline(self, *, force: bool = False) -> None:
        """Close the current line; ``force`` emits an empty line when nothing is pending."""
        if not self._runs:
            if force:
                self.lines.append(Line(top=self.top, height=self.leading, runs=()))
                self.top += self.leading
            return

        boxed = any(r.boxed for r in self._runs)
        tallest = max(r.height + (4.0 if boxed else 0.0) for r in self._runs)
        height = max(self.leading, tallest + 2.0)

        used = max(r.x + r.width for r in self._runs)
        shift = (self.width - used) / 2 if self.center and used < self.width else 0.0

        runs = tuple(
            replace(r, x=self.x0 + r.x + shift, offset=(height - r.height) / 2)
            for r in self._runs
        )
        self.lines.append(Line(top=self.top, height=height, runs=runs))
        self.top += height
        self._runs = []
        self._x = 0.0

    def finish(self) -> List[Line]:
        self.newline()
        return self.lines


# ─────────────────────────────────────────────────────────────────────────────
# Composer
# ─────────────────────────────────────────────────────────────────────────────

class _Composer:
    def __init__(self, config: LayoutConfig, fonts: FontSet, math: MathRenderer, use_math: bool):
        self.config = config
        self.fonts = fonts
        self.math = math
        self.use_math = use_math
        self.warnings: List[str] = []
        self._warned_script = False

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def _font(self, text: str, *, bold: bool = False) -> str:
        if not self.fonts.unicode and not self._warned_script and contains_complex_script(text):
            self._warned_script = True
            self._warn("Text uses a complex script but no Unicode font is configured; glyphs may be missing")
        return pick_font(text, self.fonts, bold=bold)

    def _add_plain(self, builder: _LineBuilder, text: str, size: float, *, bold: bool = False,
                   color: float = 0.0, space_before: bool = False) -> bool:
        """Flow plain text; returns whether trailing whitespace is pending."""
        pending = space_before
        for index, paragraph in enumerate(text.split("\n")):
            if index > 0:
                builder.newline(force=builder.is_line_empty and index > 1)
                pending = False
            for match in _TOKEN.finditer(paragraph):
                token = match.group(0)
                if token.isspace():
                    pending = True
                    continue
                builder.add_word(token, self._font(token, bold=bold), size, space_before=pending, color=color)
                pending = False
        return pending

    def flow(self, builder: _LineBuilder, text: str, size: float, *, bold: bool = False, color: float = 0.0) -> None:
        """Flow text containing $...$ and $$...$$ math into the builder."""
        pending = False
        for segment in split_math_segments(text.strip()):
            if segment.kind is SegmentKind.TEXT:
                pending = self._add_plain(builder, segment.content, size, bold=bold, color=color, space_before=pending)
                continue
            if not segment.content:
                continue

            rendered = self._render(segment.content, size, display=segment.kind is SegmentKind.BLOCK, raw=segment.raw)
            if segment.kind is SegmentKind.BLOCK:
                if rendered is None:
                    builder.newline()
                    self._add_plain(builder, segment.raw, size, color=color)
                    builder.newline()
                else:
                    builder.add_centered_image(rendered, segment.raw, self.fonts.regular, size)
            elif rendered is None:
                self._add_plain(builder, segment.raw, size, color=color, space_before=pending)
            else:
                builder.add_image(rendered, segment.raw, space_before=pending, font=self.fonts.regular, size=size)
            pending = False

    def _render(self, expr: str, size: float, *, display: bool, raw: str) -> Optional[RenderedMath]:
        if not self.use_math:
            return None
        try:
            return self.math.render(expr, size, display=display)
        except MathRenderError as e:
            self._warn(f"Could not render math {raw!r}, showing source text: {e}")
            return None

    def _leading(self, size: float) -> float:
        return size * self.config.line_spacing

    # ─────────────────────────────────────────────────────────────────────────
    # Blocks
    # ─────────────────────────────────────────────────────────────────────────

    def header_block(self, paper: Paper) -> Block:
        cfg = self.config
        header = paper.header
        width = cfg.available_width

        builder = _LineBuilder(0.0, width, self._leading(cfg.title_font_size), center=True)
        self._add_plain(builder, header.title or "Question Paper", cfg.title_font_size, bold=True)
        builder.newline()

        fields = [
            ("School", header.institution),
            ("Board", header.board),
            ("Standard", header.standard),
            ("Subject", header.subject),
            ("Duration", header.duration),
        ]
        info = [f"{label}: {value}" for label, value in fields if value]
        info.append(f"Total Marks: {format_marks(paper.total_marks)}")
        info.append(f"Questions: {paper.total_questions}")

        builder.leading = self._leading(cfg.body_font_size)
        builder.top += cfg.block_padding / 2
        self._add_plain(builder, "  |  ".join(info), cfg.body_font_size)
        lines = builder.finish()
        return Block(kind=BlockKind.HEADER, lines=tuple(lines), height=builder.top + cfg.block_padding)

    def instructions_block(self, instructions: str) -> Block:
        cfg = self.config
        pad = cfg.block_padding
        builder = _LineBuilder(pad, cfg.available_width - 2 * pad, self._leading(cfg.body_font_size), top=pad)
        builder.add_word("Instructions:", self.fonts.bold, cfg.body_font_size, space_before=False)
        self._add_plain(builder, instructions, cfg.body_font_size, space_before=True)
        builder.finish()
        return Block(kind=BlockKind.INSTRUCTIONS, lines=tuple(builder.lines), height=builder.top + pad)

    def marks_summary_block(self, paper: Paper) -> Optional[Block]:
        distribution = paper.marks_distribution
        if not distribution:
            return None
        cfg = self.config
        builder = _LineBuilder(0.0, cfg.available_width, self._leading(cfg.body_font_size))
        builder.add_word("Marks Distribution:", self.fonts.bold, cfg.body_font_size, space_before=False)
        builder.newline()
        builder.top += 2.0
        for marks, count in distribution:
            builder.add_chip(marks_chip(marks, count), self.fonts.regular, cfg.meta_font_size)
        builder.finish()
        return Block(kind=BlockKind.MARKS_SUMMARY, lines=tuple(builder.lines), height=builder.top)

    def title_block(self, text: str, kind: BlockKind) -> Block:
        cfg = self.config
        size = cfg.section_font_size if kind is BlockKind.SECTION_TITLE else cfg.body_font_size
        indent = SECTION_BAR_INDENT if kind is BlockKind.SECTION_TITLE else 0.0
        builder = _LineBuilder(indent, cfg.available_width - indent, self._leading(size))
        self._add_plain(builder, text, size, bold=True)
        builder.finish()
        return Block(kind=kind, lines=tuple(builder.lines), height=builder.top, keep_with_next=True)

    def question_block(self, item: PaperItem) -> Block:
        cfg = self.config
        question = item.question
        column = cfg.number_column
        size = cfg.body_font_size

        builder = _LineBuilder(column, cfg.available_width - column, self._leading(size))
        self.flow(builder, question.display_text, size)
        builder.finish()

        # Question number sits in the left column of the first line
        first = builder.lines[0] if builder.lines else Line(top=0.0, height=self._leading(size), runs=())
        number = TextRun(
            text=item.label, x=0.0, offset=(first.height - size) / 2,
            width=stringWidth(item.label, self.fonts.bold, size),
            height=size, font_name=self.fonts.bold, font_size=size,
        )
        lines = [replace(first, runs=(number,) + first.runs)] + builder.lines[1:]
        top = builder.top if builder.lines else first.height

        meta = _LineBuilder(column, cfg.available_width - column, self._leading(cfg.meta_font_size), top=top + 1.0)
        self._add_plain(meta, _meta_line(item), cfg.meta_font_size, color=META_COLOR)
        lines.extend(meta.finish())

        return Block(
            kind=BlockKind.QUESTION,
            lines=tuple(lines),
            height=meta.top,
            question_id=question.id,
            number=item.number,
        )


def _meta_line(item: PaperItem) -> str:
    question = item.question
    marks = format_marks(question.marks) if question.is_eligible else "-"
    parts = [f"{marks} Marks"]
    if question.difficulty and question.difficulty != "-":
        parts.append(question.difficulty.capitalize())
    parts.append(question.type_label)
    return META_SEPARATOR.join(parts)


def _paper_has_math(paper: Paper) -> bool:
    return any(
        segment.is_math
        for question in paper.questions
        for segment in split_math_segments(question.text)
    )


def layout_text(
    text: str,
    width: float,
    config: Optional[LayoutConfig] = None,
    *,
    math: Optional[MathRenderer] = None,
) -> List[Line]:
    """
    Wrap rich text into measured lines at body size.

    Example:
        >>> lines = layout_text("A long question ...", width=200)
        >>> all(r.x + r.width <= 200 for line in lines for r in line.runs)
        True
    """
    config = config or LayoutConfig()
    math = math or MathRenderer(dpi=config.math_dpi)
    composer = _Composer(config, resolve_fonts(config), math, use_math=math.available)
    builder = _LineBuilder(0.0, width, config.body_font_size * config.line_spacing)
    composer.flow(builder, text, config.body_font_size)
    return builder.finish()


def compose_paper(
    paper: Paper,
    config: Optional[LayoutConfig] = None,
    math: Optional[MathRenderer] = None,
) -> ComposedDocument:
    """
    Compose measured blocks for every part of the paper.

    Args:
        paper: Arranged paper
        config: Layout configuration (defaults to A4)
        math: Math renderer; a default mathtext renderer is created if None

    Returns:
        ComposedDocument with blocks in reading order

    Example:
        >>> document = compose_paper(paper, LayoutConfig())
        >>> len(document.question_blocks) == paper.total_questions
        True
    """
    config = config or LayoutConfig()
    math = math or MathRenderer(dpi=config.math_dpi)

    has_math = _paper_has_math(paper)
    use_math = has_math and math.available
    composer = _Composer(config, resolve_fonts(config), math, use_math)

    degraded = has_math and not use_math
    if degraded:
        composer._warn("Math rendering unavailable; expressions are shown as plain text")

    blocks: List[Block] = [composer.header_block(paper)]
    if paper.header.instructions.strip():
        blocks.append(composer.instructions_block(paper.header.instructions.strip()))
    if config.show_marks_distribution:
        summary = composer.marks_summary_block(paper)
        if summary is not None:
            blocks.append(summary)

    for section in paper.sections:
        blocks.append(composer.title_block(section.heading, BlockKind.SECTION_TITLE))
        for item in section.items:
            blocks.append(composer.question_block(item))
        for subsection in section.subsections:
            blocks.append(composer.title_block(subsection.heading, BlockKind.SUBSECTION_TITLE))
            for item in subsection.items:
                blocks.append(composer.question_block(item))

    logger.info(
        f"Composed {len(blocks)} blocks for {paper.total_questions} questions"
        + (" (plain-text math)" if degraded else "")
    )
    return ComposedDocument(blocks=tuple(blocks), warnings=tuple(composer.warnings), degraded=degraded)
