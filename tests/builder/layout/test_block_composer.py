"""
Unit Tests for Block Composition

Tests for turning an arranged paper into measured blocks.
"""

import pytest

from paper_toolkit.builder.arrangement import arrange_paper
from paper_toolkit.builder.layout import BlockKind, LayoutConfig, compose_paper, layout_text
from paper_toolkit.builder.layout.composer import META_SEPARATOR
from paper_toolkit.core.models import NO_TEXT_PLACEHOLDER, PaperHeader, Question


def _texts(line):
    return [run.text for run in line.runs]


@pytest.fixture
def paper(sample_pool, sample_header):
    return arrange_paper(sample_header, sample_pool)


class TestComposePaper:
    """Tests for compose_paper."""

    def test_when_composed_then_blocks_in_reading_order(self, paper, plain_math):
        # Act
        document = compose_paper(paper, LayoutConfig(), plain_math)

        # Assert
        kinds = [b.kind for b in document.blocks]
        assert kinds == (
            [BlockKind.HEADER, BlockKind.INSTRUCTIONS, BlockKind.MARKS_SUMMARY, BlockKind.SECTION_TITLE]
            + [BlockKind.QUESTION] * 5
            + [BlockKind.SECTION_TITLE]
            + [BlockKind.QUESTION] * 3
        )

    def test_when_composed_then_one_block_per_question(self, paper, plain_math):
        document = compose_paper(paper, LayoutConfig(), plain_math)

        blocks = document.question_blocks
        assert [b.number for b in blocks] == list(range(1, 9))
        assert [b.question_id for b in blocks] == [q.id for q in paper.questions]
        assert all(b.height > 0 for b in document.blocks)

    def test_when_title_blocks_then_kept_with_next(self, paper, plain_math):
        document = compose_paper(paper, LayoutConfig(), plain_math)

        for block in document.blocks:
            assert block.keep_with_next is (block.kind is BlockKind.SECTION_TITLE)

    def test_when_question_block_then_number_in_left_column(self, paper, plain_math):
        config = LayoutConfig()

        block = compose_paper(paper, config, plain_math).question_blocks[0]

        number = block.lines[0].runs[0]
        assert number.text == "Q1."
        assert number.x == 0.0
        assert number.font_name == config.bold_font_name
        assert block.lines[0].runs[1].x == config.number_column

    def test_when_question_block_then_meta_line_last(self, paper, plain_math):
        block = compose_paper(paper, LayoutConfig(), plain_math).question_blocks[0]

        meta = " ".join(_texts(block.lines[-1]))
        assert meta == META_SEPARATOR.join(["1 Marks", "Easy", "mcq"])

    def test_when_no_math_in_paper_then_not_degraded(self, paper, plain_math):
        document = compose_paper(paper, LayoutConfig(), plain_math)

        assert not document.degraded
        assert document.warnings == ()

    def test_when_math_and_backend_unavailable_then_degraded_plain_text(self, plain_math):
        # Arrange
        question = Question(id="m", text="Solve $x^2$ now", type="short", marks=2)
        paper = arrange_paper(PaperHeader(), [question])

        # Act
        document = compose_paper(paper, LayoutConfig(), plain_math)

        # Assert
        assert document.degraded
        assert any("Math rendering unavailable" in w for w in document.warnings)
        block = document.question_blocks[0]
        assert _texts(block.lines[0]) == ["Q1.", "Solve $x^2$ now"]
        assert not any(run.is_math for line in block.lines for run in line.runs)

    def test_when_text_empty_then_placeholder_rendered(self, plain_math):
        paper = arrange_paper(PaperHeader(), [Question(id="e", text="", marks=1)])

        block = compose_paper(paper, LayoutConfig(), plain_math).question_blocks[0]

        assert NO_TEXT_PLACEHOLDER in " ".join(_texts(block.lines[0]))

    def test_when_marks_summary_disabled_then_omitted(self, paper, plain_math):
        config = LayoutConfig(show_marks_distribution=False)

        document = compose_paper(paper, config, plain_math)

        assert BlockKind.MARKS_SUMMARY not in [b.kind for b in document.blocks]

    def test_when_marks_summary_then_chips_ascending(self, paper, plain_math):
        document = compose_paper(paper, LayoutConfig(), plain_math)
        summary = next(b for b in document.blocks if b.kind is BlockKind.MARKS_SUMMARY)

        chips = [run.text for line in summary.lines for run in line.runs if run.boxed]
        assert chips == ["1-mark × 5", "2-mark × 3"]

    def test_when_no_instructions_then_block_omitted(self, sample_pool, plain_math):
        paper = arrange_paper(PaperHeader(), sample_pool)

        document = compose_paper(paper, LayoutConfig(), plain_math)

        assert BlockKind.INSTRUCTIONS not in [b.kind for b in document.blocks]

    def test_when_header_composed_then_totals_listed(self, paper, plain_math):
        header = compose_paper(paper, LayoutConfig(), plain_math).blocks[0]

        text = " ".join(run.text for line in header.lines for run in line.runs)
        assert "Unit Test" in text
        assert "Subject: Physics" in text
        assert "Total Marks: 11" in text
        assert "Questions: 8" in text

    def test_when_complex_script_without_unicode_font_then_warned_once(self, plain_math):
        questions = [
            Question(id="g1", text="બળ એટલે શું?", marks=1),
            Question(id="g2", text="કાર્ય એટલે શું?", marks=1),
        ]
        paper = arrange_paper(PaperHeader(), questions)

        document = compose_paper(paper, LayoutConfig(), plain_math)

        assert sum("complex script" in w for w in document.warnings) == 1


class TestLayoutText:
    """Tests for wrapping."""

    def test_when_text_long_then_wrapped_within_width(self, plain_math):
        lines = layout_text("measure " * 120, width=200, math=plain_math)

        assert len(lines) > 1
        for line in lines:
            for run in line.runs:
                assert run.x + run.width <= 200 + 1e-6

    def test_when_lines_stacked_then_tops_increase(self, plain_math):
        lines = layout_text("word " * 200, width=150, math=plain_math)

        tops = [line.top for line in lines]
        assert tops == sorted(tops)
        assert all(b.top == pytest.approx(a.bottom) for a, b in zip(lines, lines[1:]))

    def test_when_word_wider_than_line_then_hard_broken(self, plain_math):
        lines = layout_text("x" * 400, width=100, math=plain_math)

        assert len(lines) > 1
        assert "".join(run.text for line in lines for run in line.runs) == "x" * 400

    def test_when_explicit_newline_then_new_line(self, plain_math):
        lines = layout_text("first\nsecond", width=400, math=plain_math)

        assert [_texts(line) for line in lines] == [["first"], ["second"]]
