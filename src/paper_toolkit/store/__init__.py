"""
Module: store

Purpose:
    Persistence collaborator: stores summaries of finished papers in a
    locked JSON file.
"""

from .paper_store import PaperStore, PaperStoreError

__all__ = [
    "PaperStore",
    "PaperStoreError",
]
