"""
Unit Tests for Build Controller

Tests for the complete load -> select -> arrange -> paginate -> render pipeline.
"""

import json

import pytest

from paper_toolkit.builder import BuildError, BuilderConfig, SelectionConfig, SelectionMode, build_paper
from paper_toolkit.builder.arrangement import ArrangeMode, CustomSection
from paper_toolkit.core.models import PaperHeader, Question


@pytest.fixture
def config(tmp_path):
    return BuilderConfig(
        selection=SelectionConfig(target_marks=7),
        header=PaperHeader(title="Unit Test", subject="Physics"),
        output_dir=tmp_path / "output",
    )


class TestBuilderConfig:
    def test_when_custom_mode_without_sections_then_raises(self):
        with pytest.raises(ValueError, match="custom_sections"):
            BuilderConfig(selection=SelectionConfig(target_marks=5), arrange_mode=ArrangeMode.CUSTOM)

    def test_when_paths_are_strings_then_coerced(self):
        config = BuilderConfig(selection=SelectionConfig(target_marks=5), source_path="pool.json", output_dir="out")

        assert config.source_path.name == "pool.json"
        assert config.output_dir.name == "out"

    def test_when_single_chapter_then_header_chapter_filled(self):
        config = BuilderConfig(selection=SelectionConfig(target_marks=5), chapters=["Optics"])

        assert config.effective_header.chapter == "Optics"

    def test_when_several_chapters_then_header_untouched(self):
        config = BuilderConfig(selection=SelectionConfig(target_marks=5), chapters=["Optics", "Waves"])

        assert config.effective_header.chapter is None


class TestBuildPaper:
    """Tests for build_paper."""

    def test_when_built_then_pdf_and_metadata_written(self, config, sample_pool, plain_math):
        # Act
        result = build_paper(config, sample_pool, math=plain_math)

        # Assert
        assert result.pdf_path.name == "Physics_All_Question_Paper.pdf"
        assert result.pdf_path.read_bytes().startswith(b"%PDF")
        assert result.total_marks == 7
        assert result.page_count >= 1
        assert result.warnings == ()

        metadata = json.loads((result.pdf_path.parent / "build_metadata.json").read_text(encoding="utf-8"))
        assert metadata["selection_mode"] == "target_marks"
        assert metadata["target_marks"] == 7
        assert metadata["actual_marks"] == 7
        assert metadata["page_count"] == result.page_count
        assert metadata["degraded_rendering"] is False
        assert metadata["paper"]["totalQuestions"] == 4
        assert [m["number"] for m in metadata["manifest"]] == [1, 2, 3, 4]

    def test_when_built_then_output_folder_timestamped(self, config, sample_pool, plain_math):
        result = build_paper(config, sample_pool, math=plain_math)

        folder = result.pdf_path.parent
        assert folder.parent == config.output_dir
        assert folder.name.endswith("__target_marks__physics")

    def test_when_target_not_reachable_then_warning(self, config, sample_pool, plain_math):
        config = BuilderConfig(
            selection=SelectionConfig(target_marks=100),
            output_dir=config.output_dir,
        )

        result = build_paper(config, sample_pool, math=plain_math)

        assert result.selection.mark_difference == -89
        assert any("not reachable exactly" in w for w in result.warnings)

    def test_when_raw_records_given_then_normalised(self, config, plain_math):
        records = [
            {"id": 1, "question": "Define force.", "type": "mcq", "marks": "3"},
            {"id": 2, "question": "Define work.", "type": "short_answer", "marks": 4},
        ]

        result = build_paper(config, records, math=plain_math)

        assert sorted(q.id for q in result.paper.questions) == ["1", "2"]

    def test_when_pool_mixes_questions_and_records_then_raises(self, config, plain_math):
        pool = [Question(id="a", marks=1), {"id": "b", "marks": 1}]

        with pytest.raises(BuildError, match="mixes"):
            build_paper(config, pool, math=plain_math)

    def test_when_loaded_from_file_then_built(self, tmp_path, config, plain_math):
        path = tmp_path / "pool.json"
        path.write_text(json.dumps({"questions": [
            {"id": "a", "text": "One", "type": "mcq", "marks": 3},
            {"id": "b", "text": "Two", "type": "mcq", "marks": 4},
        ]}), encoding="utf-8")
        config = BuilderConfig(selection=config.selection, source_path=path, output_dir=config.output_dir)

        result = build_paper(config, math=plain_math)

        assert result.total_marks == 7

    def test_when_source_missing_then_build_error(self, tmp_path, config, plain_math):
        config = BuilderConfig(
            selection=config.selection,
            source_path=tmp_path / "missing.json",
            output_dir=config.output_dir,
        )

        with pytest.raises(BuildError, match="Failed to load"):
            build_paper(config, math=plain_math)

    def test_when_no_pool_and_no_source_then_build_error(self, config, plain_math):
        with pytest.raises(BuildError, match="No question pool"):
            build_paper(config, math=plain_math)

    def test_when_chapter_filter_matches_nothing_then_build_error(self, config, sample_pool, plain_math):
        config = BuilderConfig(selection=config.selection, chapters=["Nowhere"], output_dir=config.output_dir)

        with pytest.raises(BuildError, match="No questions match"):
            build_paper(config, sample_pool, math=plain_math)

    def test_when_no_positive_marks_then_build_error(self, config, plain_math):
        pool = [Question(id="a", marks=0)]

        with pytest.raises(BuildError, match="Selection failed"):
            build_paper(config, pool, math=plain_math)

    def test_when_type_counts_mode_then_allocated(self, config, sample_pool, plain_math):
        config = BuilderConfig(
            selection=SelectionConfig(mode=SelectionMode.TYPE_COUNTS, type_counts={"MCQ": 2, "Short": 1}, seed=4),
            arrange_mode=ArrangeMode.BY_TYPE,
            output_dir=config.output_dir,
        )

        result = build_paper(config, sample_pool, math=plain_math)

        assert result.selection.counts_by_type == {"MCQ": 2, "Short": 1}
        assert result.metadata["target_marks"] is None

    def test_when_custom_sections_then_used(self, config, sample_pool, plain_math):
        custom = (CustomSection(title="Everything", questions=tuple(sample_pool[:2])),)
        config = BuilderConfig(
            selection=SelectionConfig(target_marks=2),
            arrange_mode=ArrangeMode.CUSTOM,
            custom_sections=custom,
            output_dir=config.output_dir,
        )

        result = build_paper(config, sample_pool, math=plain_math)

        assert [s.heading for s in result.paper.sections] == ["Section A: Everything"]

    def test_when_custom_sections_then_metadata_describes_tree(self, config, make_question, plain_math):
        # Arrange
        pool = [make_question(marks=1, type="mcq") for _ in range(5)]
        custom = (CustomSection(title="Long", questions=(make_question(marks=5, type="long_answer", id="big"),)),)
        config = BuilderConfig(
            selection=SelectionConfig(target_marks=3),
            arrange_mode=ArrangeMode.CUSTOM,
            custom_sections=custom,
            output_dir=config.output_dir,
        )

        # Act
        result = build_paper(config, pool, math=plain_math)

        # Assert
        assert result.total_marks == 5
        assert result.selection.ids == frozenset({"big"})
        assert result.metadata["selection_mode"] == "custom"
        assert result.metadata["actual_marks"] == 5
        assert result.metadata["target_marks"] is None
        assert result.metadata["counts_by_type"] == {"Long": 1}
        assert result.warnings == ()
        assert result.pdf_path.parent.name.endswith("__custom__paper")

    def test_when_custom_sections_then_pool_not_required(self, config, plain_math):
        custom = (CustomSection(title="Only", questions=(Question(id="a", text="One", marks=2),)),)
        config = BuilderConfig(
            selection=SelectionConfig(target_marks=9),
            arrange_mode=ArrangeMode.CUSTOM,
            custom_sections=custom,
            output_dir=config.output_dir,
        )

        result = build_paper(config, [Question(id="z", marks=0)], math=plain_math)

        assert [q.id for q in result.paper.questions] == ["a"]

    def test_when_custom_sections_all_empty_then_build_error(self, config, plain_math):
        config = BuilderConfig(
            selection=config.selection,
            arrange_mode=ArrangeMode.CUSTOM,
            custom_sections=(CustomSection(title="Empty"),),
            output_dir=config.output_dir,
        )

        with pytest.raises(BuildError, match="no questions"):
            build_paper(config, math=plain_math)

    def test_when_preview_requested_then_html_written(self, config, sample_pool, plain_math):
        config = BuilderConfig(
            selection=config.selection,
            header=config.header,
            output_dir=config.output_dir,
            write_preview=True,
        )

        result = build_paper(config, sample_pool, math=plain_math)

        assert result.preview_path.suffix == ".html"
        assert "Section" in result.preview_path.read_text(encoding="utf-8")

    def test_when_math_unavailable_then_degraded_reported(self, config, plain_math):
        pool = [Question(id="m", text="Simplify $a^2 - b^2$", type="short", marks=7)]

        result = build_paper(config, pool, math=plain_math)

        assert result.layout.degraded
        assert result.metadata["degraded_rendering"] is True
        assert any("Math rendering unavailable" in w for w in result.warnings)
