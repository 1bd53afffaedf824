"""
Unit Tests for Paper Store

Tests for JSON-file persistence of paper summaries.
"""

import json

import portalocker
import pytest

from paper_toolkit.builder.arrangement import arrange_paper
from paper_toolkit.core.models import PaperHeader
from paper_toolkit.store import PaperStore, PaperStoreError
from paper_toolkit.store.file_locking import (
    StoreLockTimeout,
    lock_path_for,
    locked_read_json,
    locked_read_modify_write_json,
)


@pytest.fixture
def paper(sample_pool):
    return arrange_paper(PaperHeader(title="Unit Test", subject="Physics"), sample_pool)


class TestFileLocking:
    def test_when_file_missing_then_default(self, tmp_path):
        assert locked_read_json(tmp_path / "none.json", lambda: {"papers": []}) == {"papers": []}

    def test_when_modified_then_written_back(self, tmp_path):
        path = tmp_path / "nested" / "store.json"

        def add(data):
            data.setdefault("items", []).append(1)
            return data

        locked_read_modify_write_json(path, add)
        locked_read_modify_write_json(path, add)

        assert json.loads(path.read_text(encoding="utf-8")) == {"items": [1, 1]}

    def test_when_modifier_fails_then_previous_document_kept(self, tmp_path):
        # Arrange
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"items": [1]}), encoding="utf-8")

        def explode(data):
            data["items"].append(2)
            raise RuntimeError("boom")

        # Act
        with pytest.raises(RuntimeError):
            locked_read_modify_write_json(path, explode)

        # Assert
        assert json.loads(path.read_text(encoding="utf-8")) == {"items": [1]}
        assert not list(tmp_path.glob("*.tmp"))

    def test_when_document_not_serialisable_then_previous_document_kept(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"items": [1]}), encoding="utf-8")

        with pytest.raises(TypeError):
            locked_read_modify_write_json(path, lambda data: {"items": {object()}})

        assert json.loads(path.read_text(encoding="utf-8")) == {"items": [1]}
        assert not list(tmp_path.glob("*.tmp"))

    def test_when_lock_held_elsewhere_then_timeout(self, tmp_path):
        path = tmp_path / "store.json"

        with portalocker.Lock(str(lock_path_for(path)), mode="a", timeout=1):
            with pytest.raises(StoreLockTimeout, match="locked"):
                locked_read_modify_write_json(path, lambda data: data, timeout=0.2)

        assert not path.exists()


class TestPaperStore:
    """Tests for PaperStore."""

    def test_when_saved_then_retrievable(self, tmp_path, paper):
        # Arrange
        store = PaperStore(tmp_path / "papers.json")

        # Act
        saved = store.save(paper)

        # Assert
        stored = store.get(saved["id"])
        assert stored["totalMarks"] == 11
        assert stored["totalQuestions"] == 8
        assert stored["subject"] == "Physics"

    def test_when_saved_with_same_id_then_replaced(self, tmp_path, paper):
        store = PaperStore(tmp_path / "papers.json")

        store.save(paper, paper_id="p1")
        store.save(paper, paper_id="p1")

        assert len(store.list()) == 1

    def test_when_listed_then_newest_first(self, tmp_path, paper):
        path = tmp_path / "papers.json"
        path.write_text(json.dumps({"papers": [
            {"id": "old", "createdAt": "2024-01-01T00:00:00+00:00"},
            {"id": "new", "createdAt": "2025-01-01T00:00:00+00:00"},
        ]}), encoding="utf-8")

        assert [p["id"] for p in PaperStore(path).list()] == ["new", "old"]

    def test_when_deleted_then_gone(self, tmp_path, paper):
        store = PaperStore(tmp_path / "papers.json")
        saved = store.save(paper)

        assert store.delete(saved["id"]) is True
        assert store.get(saved["id"]) is None
        assert store.delete(saved["id"]) is False

    def test_when_store_missing_then_empty_list(self, tmp_path):
        assert PaperStore(tmp_path / "absent.json").list() == []

    def test_when_file_corrupt_then_store_error(self, tmp_path):
        path = tmp_path / "papers.json"
        path.write_text("{broken", encoding="utf-8")

        with pytest.raises(PaperStoreError, match="Failed to read"):
            PaperStore(path).list()

    def test_when_store_locked_then_store_error(self, tmp_path, paper):
        path = tmp_path / "papers.json"
        store = PaperStore(path, lock_timeout=0.2)

        with portalocker.Lock(str(lock_path_for(path)), mode="a", timeout=1):
            with pytest.raises(PaperStoreError, match="Failed to update"):
                store.save(paper)

        assert store.list() == []

    def test_when_document_not_a_store_then_store_error(self, tmp_path):
        path = tmp_path / "papers.json"
        path.write_text(json.dumps(["not", "a", "store"]), encoding="utf-8")

        with pytest.raises(PaperStoreError, match="not a paper store"):
            PaperStore(path).list()
