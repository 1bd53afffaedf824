"""
Unit Tests for Selection Dispatch

Tests for SelectionConfig validation and select_questions().
"""

import pytest

from paper_toolkit.builder.selection import SelectionConfig, SelectionMode, select_questions


class TestSelectionConfig:
    """Tests for configuration validation."""

    def test_when_default_mode_without_target_then_raises(self):
        with pytest.raises(ValueError, match="target_marks is required"):
            SelectionConfig()

    def test_when_target_not_positive_then_raises(self):
        with pytest.raises(ValueError, match="positive"):
            SelectionConfig(target_marks=0)

    def test_when_type_mode_without_counts_then_raises(self):
        with pytest.raises(ValueError, match="type_counts or question_count"):
            SelectionConfig(mode=SelectionMode.TYPE_COUNTS)

    def test_when_difficulty_mode_without_count_then_raises(self):
        with pytest.raises(ValueError, match="question_count is required"):
            SelectionConfig(mode=SelectionMode.DIFFICULTY)

    def test_when_ratio_out_of_range_then_raises(self):
        with pytest.raises(ValueError, match="0-100"):
            SelectionConfig(
                mode=SelectionMode.DIFFICULTY,
                question_count=4,
                difficulty_ratio={"easy": 150, "medium": 0, "hard": 0},
            )

    def test_when_negative_question_count_then_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            SelectionConfig(mode=SelectionMode.TYPE_COUNTS, question_count=-1)


class TestSelectQuestions:
    """Tests for mode dispatch."""

    def test_when_target_mode_then_target_reported(self, sample_pool):
        result = select_questions(sample_pool, SelectionConfig(target_marks=7))

        assert result.target_marks == 7
        assert result.total_marks == 7

    def test_when_explicit_type_counts_then_used(self, sample_pool):
        config = SelectionConfig(mode=SelectionMode.TYPE_COUNTS, type_counts={"Short": 2}, seed=5)

        result = select_questions(sample_pool, config)

        assert result.counts_by_type == {"Short": 2}

    def test_when_paper_type_mixed_then_counts_derived(self, sample_pool):
        # Mixed 5 -> 3 MCQ + 2 Short
        config = SelectionConfig(mode=SelectionMode.TYPE_COUNTS, question_count=5, seed=1)

        result = select_questions(sample_pool, config)

        assert result.counts_by_type == {"MCQ": 3, "Short": 2}

    def test_when_paper_type_mcq_then_only_mcq(self, sample_pool):
        config = SelectionConfig(mode=SelectionMode.TYPE_COUNTS, paper_type="MCQ", question_count=4)

        result = select_questions(sample_pool, config)

        assert result.counts_by_type == {"MCQ": 4}

    def test_when_difficulty_mode_then_split_by_ratio(self, sample_pool):
        config = SelectionConfig(
            mode=SelectionMode.DIFFICULTY,
            question_count=4,
            difficulty_ratio={"easy": 50, "medium": 50, "hard": 0},
            seed=2,
        )

        result = select_questions(sample_pool, config)

        difficulties = sorted(q.difficulty for q in result.questions)
        assert difficulties == ["easy", "easy", "medium", "medium"]
