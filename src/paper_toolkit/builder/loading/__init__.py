"""
Module: builder.loading

Purpose:
    Turn raw question-bank payloads into normalised Question records.

Key Functions:
    - load_questions(): Load a pool from a JSON / JSONL file
    - normalize_question(): Normalise one raw record
    - normalize_pool(): Normalise a list of raw records

Dependencies:
    - paper_toolkit.core.models: Question

Used By:
    - builder.controller: Main build controller
"""

from .loader import load_questions, read_records, LoaderError
from .normalizer import (
    normalize_question,
    normalize_pool,
    extract_text,
    coerce_marks,
)

__all__ = [
    "load_questions",
    "read_records",
    "LoaderError",
    "normalize_question",
    "normalize_pool",
    "extract_text",
    "coerce_marks",
]
