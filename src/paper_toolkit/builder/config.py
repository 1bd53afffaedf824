"""
Module: builder.config

Purpose:
    Configuration dataclass for the paper building pipeline. Immutable
    configuration with validation on construction.

Key Classes:
    - BuilderConfig: Main configuration for building papers

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - builder.controller: Main build controller
    - cli: Command line entry point
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional

from paper_toolkit.core.models import PaperHeader
from paper_toolkit.builder.arrangement import ArrangeMode, CustomSection
from paper_toolkit.builder.layout.config import LayoutConfig
from paper_toolkit.builder.selection.config import SelectionConfig


@dataclass(frozen=True)
class BuilderConfig:
    """
    Configuration for building papers (immutable).

    Attributes:
        selection: How questions are selected
        source_path: JSON / JSONL question pool (None when the caller
            passes an already-loaded pool)
        header: Paper header fields
        chapters: Optional chapter names to filter the pool by
        arrange_mode: Section grouping mode
        custom_sections: Section tree for CUSTOM arrangement
        layout: Page layout configuration
        output_dir: Base output directory; a timestamped folder is
            created inside it for each build
        render_math: Render $...$ math as images (False = plain text)
        write_metadata: Write build_metadata.json next to the PDF
        write_preview: Write an HTML preview next to the PDF

    Example:
        >>> config = BuilderConfig(
        ...     selection=SelectionConfig(target_marks=20),
        ...     source_path=Path("physics.json"),
        ...     header=PaperHeader(subject="Physics"),
        ... )
    """

    # Required
    selection: SelectionConfig

    # Input
    source_path: Optional[Path] = None
    chapters: List[str] = field(default_factory=list)

    # Paper
    header: PaperHeader = field(default_factory=PaperHeader)
    arrange_mode: ArrangeMode = ArrangeMode.DEFAULT
    custom_sections: Optional[tuple[CustomSection, ...]] = None

    # Layout
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    render_math: bool = True

    # Output
    output_dir: Optional[Path] = None
    write_metadata: bool = True
    write_preview: bool = False

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.arrange_mode is ArrangeMode.CUSTOM and not self.custom_sections:
            raise ValueError("custom_sections is required for CUSTOM arrangement")
        if self.source_path is not None and not isinstance(self.source_path, Path):
            object.__setattr__(self, "source_path", Path(self.source_path))
        if self.output_dir is not None and not isinstance(self.output_dir, Path):
            object.__setattr__(self, "output_dir", Path(self.output_dir))

    @property
    def effective_header(self) -> PaperHeader:
        """Header with the chapter filled from a single chapter filter."""
        if self.header.chapter is None and len(self.chapters) == 1:
            return replace(self.header, chapter=self.chapters[0])
        return self.header
