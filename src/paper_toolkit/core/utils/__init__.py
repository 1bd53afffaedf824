"""
Utils Package

Serialization helpers for paper summaries and export filenames.
"""

from .serialization import (
    serialize_paper_summary,
    paper_filename,
    marks_chip,
)

__all__ = [
    "serialize_paper_summary",
    "paper_filename",
    "marks_chip",
]
