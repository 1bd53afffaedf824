"""
Module: builder

Purpose:
    Paper building pipeline: turns a pool of question records into a
    selected, sectioned and paginated question paper rendered to PDF.

Key Functions:
    - load_questions(): Load and normalise a question pool
    - select_questions(): Select questions per SelectionConfig
    - build_paper(): Main entry point for paper generation

Key Classes:
    - BuilderConfig: Configuration for building
    - SelectionConfig: Configuration for selection
    - AssemblySession: Step-by-step assembly with review edits

Dependencies:
    - PIL, reportlab, matplotlib
    - paper_toolkit.core.models: Question, SelectionResult, Paper

Used By:
    - paper_toolkit.cli: Command line interface
"""

from .config import BuilderConfig
from .loading.loader import load_questions, LoaderError
from .selection import SelectionConfig, SelectionMode, select_questions
from .controller import build_paper, layout_paper, BuildResult, BuildError
from .workflow import AssemblySession, AssemblyState, WorkflowError

__all__ = [
    # Config
    "BuilderConfig",
    "SelectionConfig",
    "SelectionMode",
    # Loading
    "load_questions",
    "LoaderError",
    # Selection
    "select_questions",
    # Controller
    "build_paper",
    "layout_paper",
    "BuildResult",
    "BuildError",
    # Workflow
    "AssemblySession",
    "AssemblyState",
    "WorkflowError",
]
