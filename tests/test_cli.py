"""
Unit Tests for Command Line Interface

Tests for argument parsing and the build / papers commands.
"""

import argparse
import json

import pytest

from paper_toolkit.cli import _parse_counts, _parse_ratio, main


@pytest.fixture
def pool_file(tmp_path):
    path = tmp_path / "pool.json"
    records = [{"id": f"m{i}", "question": f"MCQ {i}", "type": "mcq", "marks": 1} for i in range(5)]
    records += [{"id": f"s{i}", "question": f"Short {i}", "type": "short_answer", "marks": 2} for i in range(3)]
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


class TestArgumentParsing:
    def test_when_counts_given_then_parsed(self):
        assert _parse_counts("MCQ=5, Short=3") == {"MCQ": 5, "Short": 3}

    def test_when_count_malformed_then_argument_error(self):
        with pytest.raises(argparse.ArgumentTypeError, match="LABEL=COUNT"):
            _parse_counts("MCQ5")

    def test_when_ratio_given_then_parsed(self):
        assert _parse_ratio("50:30:20") == {"easy": 50.0, "medium": 30.0, "hard": 20.0}

    def test_when_ratio_has_wrong_arity_then_argument_error(self):
        with pytest.raises(argparse.ArgumentTypeError, match="EASY:MEDIUM:HARD"):
            _parse_ratio("50:50")

    def test_when_no_selection_mode_then_exit(self, pool_file):
        with pytest.raises(SystemExit):
            main(["build", str(pool_file)])


class TestBuildCommand:
    """Tests for `paper-toolkit build`."""

    def test_when_target_marks_then_pdf_written(self, pool_file, tmp_path, capsys):
        # Act
        code = main([
            "build", str(pool_file),
            "--target-marks", "7",
            "--subject", "Physics",
            "--no-math",
            "--output-dir", str(tmp_path / "out"),
        ])

        # Assert
        out = capsys.readouterr().out
        assert code == 0
        assert "Physics_All_Question_Paper.pdf" in out
        assert "7 marks" in out
        assert list((tmp_path / "out").rglob("*.pdf"))

    def test_when_type_counts_and_save_then_paper_stored(self, pool_file, tmp_path, capsys):
        store = tmp_path / "papers.json"

        code = main([
            "build", str(pool_file),
            "--type-counts", "MCQ=2,Short=1",
            "--seed", "3",
            "--no-math",
            "--output-dir", str(tmp_path / "out"),
            "--save", str(store),
        ])

        assert code == 0
        assert "Saved as" in capsys.readouterr().out
        assert len(json.loads(store.read_text(encoding="utf-8"))["papers"]) == 1

    def test_when_difficulty_without_count_then_invalid_options(self, pool_file, tmp_path):
        code = main(["build", str(pool_file), "--difficulty", "--output-dir", str(tmp_path)])

        assert code == 2

    def test_when_pool_missing_then_build_failure(self, tmp_path):
        code = main(["build", str(tmp_path / "missing.json"), "--target-marks", "5", "--output-dir", str(tmp_path)])

        assert code == 1


class TestPapersCommand:
    def test_when_store_has_papers_then_listed(self, pool_file, tmp_path, capsys):
        store = tmp_path / "papers.json"
        main([
            "build", str(pool_file), "--paper-type", "MCQ", "--question-count", "3",
            "--subject", "Physics", "--no-math", "--output-dir", str(tmp_path / "out"), "--save", str(store),
        ])
        capsys.readouterr()

        code = main(["papers", str(store)])

        out = capsys.readouterr().out
        assert code == 0
        assert "Physics" in out
        assert "3Q / 3M" in out
