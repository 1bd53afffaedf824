"""
Serialization Utilities

Converts finished papers into the summary records handed to the paper
store, and derives the export filename.

The summary carries the fields the store keeps for a created paper:
title, subject, board, standard, type, difficulty, chapters,
totalQuestions, totalMarks, the question list and a creation timestamp.
Totals are read from the Paper (always calculated, never stored there).
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

from ..models.paper import Paper, PaperHeader
from ..models.questions import format_marks


# ─────────────────────────────────────────────────────────────────────────────
# Paper Summary
# ─────────────────────────────────────────────────────────────────────────────

def serialize_paper_summary(
    paper: Paper,
    *,
    paper_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Serialize a Paper to the summary handed to persistence.

    Args:
        paper: Finished paper
        paper_id: Identifier for the stored record (optional)
        created_at: Creation time, defaults to now (UTC)

    Returns:
        Dictionary suitable for JSON serialization

    Example:
        >>> summary = serialize_paper_summary(paper)
        >>> summary["totalMarks"]
        7
    """
    created_at = created_at or datetime.now(timezone.utc)
    difficulties = sorted({q.difficulty for q in paper.questions if q.difficulty and q.difficulty != "-"})

    summary: dict[str, Any] = {
        "title": paper.header.title,
        "subject": paper.header.subject,
        "board": paper.header.board,
        "standard": paper.header.standard,
        "type": paper.paper_type,
        "difficulty": difficulties[0] if len(difficulties) == 1 else ("Mixed" if difficulties else None),
        "chapters": list(paper.chapters),
        "totalQuestions": paper.total_questions,
        "totalMarks": paper.total_marks,
        "questions": [
            dict(item.question.to_dict(), number=item.number)
            for item in paper.items
        ],
        "createdAt": created_at.isoformat(),
    }
    if paper_id is not None:
        summary["id"] = paper_id
    return summary


# ─────────────────────────────────────────────────────────────────────────────
# Filenames
# ─────────────────────────────────────────────────────────────────────────────

_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|]+')


def paper_filename(header: PaperHeader) -> str:
    """
    Export filename: ``{subject}_{chapter or "All"}_Question_Paper.pdf``.

    Only path-unsafe characters are replaced so names stay compatible
    with previously stored papers.

    Example:
        >>> paper_filename(PaperHeader(subject="Physics"))
        'Physics_All_Question_Paper.pdf'
    """
    subject = header.subject or "Subject"
    chapter = header.chapter or "All"
    name = f"{subject}_{chapter}_Question_Paper.pdf"
    return _UNSAFE_FILENAME.sub("-", name)


def marks_chip(marks: float, count: int) -> str:
    """Text of one marks-distribution chip, e.g. ``2-mark × 3``."""
    return f"{format_marks(marks)}-mark × {count}"
