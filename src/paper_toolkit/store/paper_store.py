"""
Module: store.paper_store

Purpose:
    JSON-file persistence for finished papers. Stores the paper summary
    (title, subject, type, difficulty, chapters, totals, questions,
    createdAt) that a listing of created papers needs.

Key Classes:
    - PaperStore: Save / list / get / delete summaries
    - PaperStoreError: Store I/O failures

Dependencies:
    - store.file_locking: portalocker-guarded JSON access
    - core.utils.serialization: Paper summary

Used By:
    - cli: --save option
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from paper_toolkit.core.models import Paper
from paper_toolkit.core.utils import serialize_paper_summary

from .file_locking import DEFAULT_LOCK_TIMEOUT, StoreLockTimeout, locked_read_json, locked_read_modify_write_json

logger = logging.getLogger(__name__)


class PaperStoreError(Exception):
    """Raised when the store file cannot be read or written."""
    pass


def _empty_store() -> Dict[str, Any]:
    return {"papers": []}


def _papers(document: Any, path: Path) -> List[Dict[str, Any]]:
    """The ``papers`` list of a store document."""
    papers = document.get("papers", []) if isinstance(document, dict) else None
    if not isinstance(papers, list):
        raise PaperStoreError(f"{path} is not a paper store (expected {{\"papers\": [...]}})")
    return papers


class PaperStore:
    """
    Paper summaries in a single JSON file.

    Example:
        >>> store = PaperStore(Path("workspace/papers.json"))
        >>> saved = store.save(paper)
        >>> store.get(saved["id"])["totalMarks"]
        7
    """

    def __init__(self, path: Union[str, Path], lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.path = Path(path)
        self.lock_timeout = lock_timeout

    def save(self, paper: Paper, paper_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Store a paper summary, replacing any record with the same id.

        Returns:
            The stored summary (including its id)
        """
        summary = serialize_paper_summary(paper, paper_id=paper_id or uuid.uuid4().hex)

        def add(existing: Dict[str, Any]) -> Dict[str, Any]:
            papers = [p for p in _papers(existing, self.path) if p.get("id") != summary["id"]]
            papers.append(summary)
            existing["papers"] = papers
            return existing

        self._write(add)
        logger.info(f"Saved paper {summary['id']} ({summary['totalQuestions']} questions)")
        return summary

    def list(self) -> List[Dict[str, Any]]:
        """All stored summaries, newest first."""
        papers = _papers(self._read(), self.path)
        return sorted(papers, key=lambda p: p.get("createdAt", ""), reverse=True)

    def get(self, paper_id: str) -> Optional[Dict[str, Any]]:
        for paper in _papers(self._read(), self.path):
            if paper.get("id") == paper_id:
                return paper
        return None

    def delete(self, paper_id: str) -> bool:
        """
        Remove a stored paper.

        Returns:
            True if a record was removed
        """
        removed = False

        def drop(existing: Dict[str, Any]) -> Dict[str, Any]:
            nonlocal removed
            papers = _papers(existing, self.path)
            kept = [p for p in papers if p.get("id") != paper_id]
            removed = len(kept) != len(papers)
            existing["papers"] = kept
            return existing

        self._write(drop)
        if removed:
            logger.info(f"Deleted paper {paper_id}")
        return removed

    def _read(self) -> Dict[str, Any]:
        try:
            return locked_read_json(self.path, _empty_store, self.lock_timeout)
        except (OSError, json.JSONDecodeError, StoreLockTimeout) as e:
            raise PaperStoreError(f"Failed to read {self.path}: {e}") from e

    def _write(self, modifier) -> Dict[str, Any]:
        try:
            return locked_read_modify_write_json(self.path, modifier, _empty_store, self.lock_timeout)
        except (OSError, json.JSONDecodeError, StoreLockTimeout) as e:
            raise PaperStoreError(f"Failed to update {self.path}: {e}") from e
