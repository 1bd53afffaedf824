"""
Unit Tests for Question Loader

Tests for reading JSON / JSONL pools from disk.
"""

import json

import pytest

from paper_toolkit.builder.loading import LoaderError, load_questions, read_records


class TestReadRecords:
    """Tests for raw record reading."""

    def test_when_top_level_array_then_records_returned(self, tmp_path):
        path = tmp_path / "pool.json"
        path.write_text(json.dumps([{"id": "a"}, {"id": "b"}]), encoding="utf-8")

        assert read_records(path) == [{"id": "a"}, {"id": "b"}]

    @pytest.mark.parametrize("key", ["questions", "data", "items", "results"])
    def test_when_wrapped_then_unwrapped(self, tmp_path, key):
        path = tmp_path / "pool.json"
        path.write_text(json.dumps({"total": 1, key: [{"id": "a"}]}), encoding="utf-8")

        assert read_records(path) == [{"id": "a"}]

    def test_when_jsonl_then_one_record_per_line(self, tmp_path):
        path = tmp_path / "pool.jsonl"
        path.write_text('{"id": "a"}\n\n{"id": "b"}\n', encoding="utf-8")

        assert [r["id"] for r in read_records(path)] == ["a", "b"]

    def test_when_missing_file_then_raises(self, tmp_path):
        with pytest.raises(LoaderError, match="does not exist"):
            read_records(tmp_path / "missing.json")

    def test_when_invalid_json_then_raises(self, tmp_path):
        path = tmp_path / "pool.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(LoaderError, match="invalid JSON"):
            read_records(path)

    def test_when_jsonl_line_invalid_then_line_reported(self, tmp_path):
        path = tmp_path / "pool.jsonl"
        path.write_text('{"id": "a"}\n{oops\n', encoding="utf-8")

        with pytest.raises(LoaderError, match="pool.jsonl:2"):
            read_records(path)

    def test_when_object_without_list_then_raises(self, tmp_path):
        path = tmp_path / "pool.json"
        path.write_text(json.dumps({"count": 3}), encoding="utf-8")

        with pytest.raises(LoaderError, match="expected a list"):
            read_records(path)


class TestLoadQuestions:
    """Tests for load + normalise."""

    def test_when_loaded_then_normalised(self, tmp_path):
        # Arrange
        path = tmp_path / "pool.json"
        path.write_text(json.dumps([
            {"id": 1, "question": "Define force.", "type": "mcq", "marks": "1", "chapter": "Forces"},
            {"id": 2, "question": "Define work.", "type": "short_answer", "marks": 2, "chapter": "Work"},
        ]), encoding="utf-8")

        # Act
        questions = load_questions(path)

        # Assert
        assert [q.id for q in questions] == ["1", "2"]
        assert [q.marks for q in questions] == [1, 2]

    def test_when_chapter_filter_then_applied(self, tmp_path):
        path = tmp_path / "pool.json"
        path.write_text(json.dumps([
            {"id": 1, "chapter": "Forces"},
            {"id": 2, "chapter": "Work"},
        ]), encoding="utf-8")

        questions = load_questions(path, chapters=["Work"])

        assert [q.id for q in questions] == ["2"]
