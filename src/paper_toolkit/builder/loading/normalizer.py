"""
Module: builder.loading.normalizer

Purpose:
    Convert loosely-typed raw question payloads from any upstream source
    into uniform Question records. Total: every input produces a Question,
    malformed records never raise.

Key Functions:
    - normalize_question(): Single raw record -> Question
    - normalize_pool(): List of raw records -> list of Questions
    - extract_text(): Text extraction with ordered fallbacks
    - coerce_marks(): Marks coercion (defaults to 0)

Text extraction order:
    1. Candidate field names (question, text, content, ...) and locale variants
    2. Nested ``question`` mapping, recursively
    3. First non-empty string value anywhere in the record
    4. Empty string

Dependencies:
    - core.models.questions: Question

Used By:
    - builder.loading.loader: File loading
    - builder.controller: Pipeline entry
"""

from __future__ import annotations

import logging
import math
import uuid
from typing import Any, Iterable, List, Mapping, Optional

from paper_toolkit.core.models.questions import Question

logger = logging.getLogger(__name__)


TEXT_FIELDS: tuple[str, ...] = (
    "question",
    "text",
    "content",
    "title",
    "name",
    "body",
    "prompt",
    "statement",
    "description",
)

LOCALES: tuple[str, ...] = ("en", "hi", "gu", "mr")

MARK_FIELDS: tuple[str, ...] = ("marks", "score", "points", "mark")
ID_FIELDS: tuple[str, ...] = ("id", "_id", "questionId", "question_id")
TYPE_FIELDS: tuple[str, ...] = ("type", "questionType", "question_type")
DIFFICULTY_FIELDS: tuple[str, ...] = ("difficulty", "level")
CHAPTER_FIELDS: tuple[str, ...] = ("chapter", "chapterName", "chapter_name")
TOPIC_FIELDS: tuple[str, ...] = ("topic", "topicName", "topic_name")

# Metadata keys never treated as question text by the last-resort scan.
_METADATA_KEYS = frozenset(
    key.lower()
    for key in (
        *ID_FIELDS, *TYPE_FIELDS, *DIFFICULTY_FIELDS, *CHAPTER_FIELDS,
        *TOPIC_FIELDS, *MARK_FIELDS,
        "subject", "subjectId", "board", "standard", "createdAt", "updatedAt",
        "answer", "options", "image", "imageUrl", "language", "locale",
    )
)


def _candidate_fields() -> tuple[str, ...]:
    # Base names first, then locale variants (question_en, questionEn, ...)
    names: List[str] = list(TEXT_FIELDS)
    names[1:1] = ["questionText", "question_text"]
    for base in TEXT_FIELDS:
        for locale in LOCALES:
            names.append(f"{base}_{locale}")
            names.append(f"{base}{locale.capitalize()}")
    return tuple(names)


CANDIDATE_TEXT_FIELDS = _candidate_fields()


def extract_text(raw: Any, _depth: int = 0) -> str:
    """
    Extract question text from a raw record.

    Args:
        raw: Raw record (any type; non-mappings yield "")

    Returns:
        First non-empty text found, or "" when nothing yields a string

    Example:
        >>> extract_text({"body": "What is 2+2?"})
        'What is 2+2?'
        >>> extract_text({"question": {"text_en": "Define force."}})
        'Define force.'
    """
    if not isinstance(raw, Mapping) or _depth > 8:
        return ""

    for name in CANDIDATE_TEXT_FIELDS:
        value = raw.get(name)
        if isinstance(value, str) and value.strip():
            return value

    nested = raw.get("question")
    if isinstance(nested, Mapping):
        text = extract_text(nested, _depth + 1)
        if text:
            return text

    found = _first_string(raw, _depth)
    return found or ""


def _first_string(value: Any, depth: int) -> Optional[str]:
    """Depth-first search for the first non-empty string outside metadata keys."""
    if depth > 8:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, Mapping):
        for key, item in value.items():
            if str(key).lower() in _METADATA_KEYS:
                continue
            found = _first_string(item, depth + 1)
            if found:
                return found
    elif isinstance(value, (list, tuple)):
        for item in value:
            found = _first_string(item, depth + 1)
            if found:
                return found
    return None


def coerce_marks(raw: Any) -> float:
    """
    Read marks from ``marks | score | points | mark``.

    Blank, boolean and non-numeric values are skipped so a later alias
    can supply the marks; with no usable alias the result is 0. Whole
    numbers are returned as int. Non-finite and negative values are
    passed through so that the Question can report itself ineligible.

    Example:
        >>> coerce_marks({"score": "2"})
        2
        >>> coerce_marks({"marks": "", "score": 3})
        3
        >>> coerce_marks({"marks": "two"})
        0
    """
    if not isinstance(raw, Mapping):
        return 0
    for name in MARK_FIELDS:
        if name not in raw or raw[name] is None:
            continue
        value = raw[name]
        if isinstance(value, bool):
            continue
        try:
            number = float(value.strip() if isinstance(value, str) else value)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring non-numeric {name}={value!r}")
            continue
        if math.isfinite(number) and number.is_integer():
            return int(number)
        return number
    return 0


def _first_value(raw: Mapping, names: Iterable[str], default: str) -> str:
    for name in names:
        value = raw.get(name)
        if value is None:
            continue
        if isinstance(value, Mapping):
            # e.g. {"chapter": {"name": "Optics"}}
            value = value.get("name") or value.get("title")
            if value is None:
                continue
        text = str(value).strip()
        if text:
            return text
    return default


def normalize_question(raw: Any, fallback_id: Optional[str] = None) -> Question:
    """
    Convert a raw record into a Question.

    Never raises for malformed input: missing text becomes "", missing
    marks become 0, missing type becomes "-".

    Args:
        raw: Raw record from the question bank
        fallback_id: Id used when the record carries none

    Returns:
        Normalised Question

    Example:
        >>> q = normalize_question({"_id": 7, "text": "Define work.", "type": "Short Answer", "score": 2})
        >>> (q.id, q.canonical_type.value, q.marks)
        ('7', 'Short', 2)
    """
    record: Mapping = raw if isinstance(raw, Mapping) else {}
    if not isinstance(raw, Mapping):
        logger.debug(f"Non-mapping question record of type {type(raw).__name__}")

    qid = _first_value(record, ID_FIELDS, "") or fallback_id or uuid.uuid4().hex

    return Question(
        id=qid,
        text=extract_text(record),
        type=_first_value(record, TYPE_FIELDS, "-"),
        difficulty=_first_value(record, DIFFICULTY_FIELDS, "-"),
        chapter=_first_value(record, CHAPTER_FIELDS, "-"),
        topic=_first_value(record, TOPIC_FIELDS, "-"),
        marks=coerce_marks(record),
    )


def normalize_pool(records: Iterable[Any]) -> List[Question]:
    """
    Normalise a list of raw records.

    Records without an id get ``auto-<index>``. Duplicate ids are logged;
    later duplicates are suffixed so set-membership checks stay correct.

    Args:
        records: Raw records

    Returns:
        List of Questions in input order
    """
    questions: List[Question] = []
    seen: set[str] = set()
    for index, raw in enumerate(records):
        question = normalize_question(raw, fallback_id=f"auto-{index}")
        if question.id in seen:
            new_id = f"{question.id}#{index}"
            logger.warning(f"Duplicate question id {question.id!r}, renamed to {new_id!r}")
            question = Question(
                id=new_id,
                text=question.text,
                type=question.type,
                difficulty=question.difficulty,
                chapter=question.chapter,
                topic=question.topic,
                marks=question.marks,
            )
        seen.add(question.id)
        questions.append(question)

    logger.debug(f"Normalised {len(questions)} question records")
    return questions
