"""
Module: builder.loading.loader

Purpose:
    Load already-fetched raw question records from disk and normalise them.
    The toolkit never talks to the question-bank service itself; callers
    save the fetched payload (JSON array, wrapped object or JSONL) and
    point the loader at it.

Key Functions:
    - load_questions(): Load and normalise a question pool file
    - read_records(): Read raw records without normalising

Key Classes:
    - LoaderError: Exception for loading failures

Dependencies:
    - json (std)
    - builder.loading.normalizer: Record normalisation

Used By:
    - builder.controller: Main build controller
    - cli: Command-line entry point
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from paper_toolkit.core.models import Question

from .normalizer import normalize_pool

logger = logging.getLogger(__name__)

# Keys commonly wrapping the record list in API payloads
_WRAPPER_KEYS = ("questions", "data", "items", "results")


class LoaderError(Exception):
    """Error loading question records from disk."""
    pass


def read_records(path: Path) -> List[Any]:
    """
    Read raw records from a JSON or JSONL file.

    Accepts a top-level array, an object wrapping the array under one of
    ``questions | data | items | results``, or one JSON object per line.

    Args:
        path: Path to the payload file

    Returns:
        List of raw records

    Raises:
        LoaderError: If the file is missing or cannot be parsed
    """
    if not path.exists():
        raise LoaderError(f"Question file does not exist: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LoaderError(f"Could not read {path}: {e}") from e

    if path.suffix.lower() == ".jsonl":
        records = []
        for line_no, line in enumerate(content.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise LoaderError(f"{path.name}:{line_no}: invalid JSON ({e})") from e
        return records

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise LoaderError(f"{path.name}: invalid JSON ({e})") from e

    return _unwrap(payload, path)


def _unwrap(payload: Any, path: Path) -> List[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in _WRAPPER_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    raise LoaderError(f"{path.name}: expected a list of question records")


def load_questions(
    path: Path,
    *,
    chapters: Optional[List[str]] = None,
) -> List[Question]:
    """
    Load and normalise a question pool.

    Args:
        path: JSON / JSONL payload file
        chapters: Optional chapter names to keep

    Returns:
        Normalised questions in file order

    Raises:
        LoaderError: If the file cannot be read

    Example:
        >>> questions = load_questions(Path("physics.json"), chapters=["Optics"])
        >>> len(questions)
        42
    """
    records = read_records(path)
    questions = normalize_pool(records)

    if chapters:
        wanted = set(chapters)
        questions = [q for q in questions if q.chapter in wanted]
        logger.debug(f"Filtered by chapters: {len(questions)} remaining")

    logger.info(f"Loaded {len(questions)} questions from {path.name}")
    return questions
