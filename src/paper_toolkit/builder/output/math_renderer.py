"""
Module: builder.output.math_renderer

Purpose:
    Split question text into plain and math segments and render math
    expressions to images with matplotlib's mathtext engine (no LaTeX
    installation needed).

Key Functions:
    - split_math_segments(): Text -> ordered text / inline / block segments
    - has_math(): Quick delimiter check

Key Classes:
    - MathSegment: One segment of split text
    - MathRenderer: Lazily-loaded mathtext backend with a render cache
    - RenderedMath: Rendered image with its size in points

Delimiters:
    $$...$$  block (display) math, laid out on its own line
    $...$    inline math, flowed with the surrounding words

Dependencies:
    - matplotlib (optional at runtime): mathtext rendering
    - PIL: Rendered images

Used By:
    - builder.layout.composer: Measuring question text
    - builder.output.preview: HTML preview
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_MATH_DPI = 200
DISPLAY_SCALE = 1.2

# Block math first so "$$x$$" is never read as two empty inline spans.
# An escaped \$ never opens or closes a span.
_MATH_PATTERN = re.compile(
    r"((?<!\\)\$\$(?:\\.|[^$\\])*\$\$|(?<!\\)\$(?:\\.|[^$\\])*\$)"
)


class SegmentKind(Enum):
    TEXT = "text"
    INLINE = "inline"
    BLOCK = "block"


@dataclass(frozen=True)
class MathSegment:
    """
    Piece of split question text.

    Attributes:
        kind: TEXT, INLINE or BLOCK
        content: Plain text, or the expression without delimiters
        raw: Source text including delimiters
    """

    kind: SegmentKind
    content: str
    raw: str

    @property
    def is_math(self) -> bool:
        return self.kind is not SegmentKind.TEXT


def split_math_segments(text: str) -> List[MathSegment]:
    r"""
    Split text into ordered plain-text and math segments.

    An unmatched ``$`` stays in the plain text. An escaped ``\$`` is a
    literal dollar sign: it never delimits math and is unescaped in
    plain-text content (``raw`` keeps the source).

    Example:
        >>> [s.kind.value for s in split_math_segments("Solve $x^2$ now")]
        ['text', 'inline', 'text']
    """
    segments: List[MathSegment] = []
    # split() with one capture group: odd indices are delimited math
    for index, part in enumerate(_MATH_PATTERN.split(text or "")):
        if not part:
            continue
        if index % 2 == 0:
            segments.append(MathSegment(SegmentKind.TEXT, part.replace("\\$", "$"), part))
        elif part.startswith("$$") and part.endswith("$$") and len(part) >= 4:
            segments.append(MathSegment(SegmentKind.BLOCK, part[2:-2].strip(), part))
        else:
            segments.append(MathSegment(SegmentKind.INLINE, part[1:-1].strip(), part))
    return segments


def has_math(text: str) -> bool:
    """Return True if text contains any delimited math."""
    return any(s.is_math for s in split_math_segments(text))


class MathRenderError(Exception):
    """Raised when a single expression cannot be rendered."""
    pass


@dataclass(frozen=True)
class RenderedMath:
    """Rendered expression; sizes are PDF points."""

    image: Image.Image
    width: float
    height: float


class MathRenderer:
    """
    mathtext-backed expression renderer.

    The backend is imported on first use. When matplotlib is missing (or
    the renderer is constructed with ``enabled=False``) ``available`` is
    False and callers lay out plain text instead.

    Example:
        >>> renderer = MathRenderer()
        >>> if renderer.available:
        ...     rendered = renderer.render("x^2", font_size=11)
    """

    def __init__(self, *, dpi: int = DEFAULT_MATH_DPI, enabled: bool = True) -> None:
        self.dpi = dpi
        self.enabled = enabled
        self._checked = False
        self._backend = None
        self._cache: Dict[Tuple[str, float, bool], RenderedMath] = {}

    @property
    def available(self) -> bool:
        """True when math can be rendered to images."""
        return self.enabled and self._load_backend() is not None

    def _load_backend(self):
        if self._checked:
            return self._backend
        self._checked = True
        try:
            from matplotlib import mathtext
            from matplotlib.font_manager import FontProperties
        except ImportError as e:
            logger.warning(f"matplotlib unavailable, math will be rendered as plain text: {e}")
            self._backend = None
        else:
            self._backend = (mathtext, FontProperties)
        return self._backend

    def render(self, expr: str, font_size: float, *, display: bool = False) -> RenderedMath:
        """
        Render an expression (without delimiters) to an image.

        Args:
            expr: mathtext expression, e.g. ``\\frac{a}{b}``
            font_size: Size of the surrounding text in points
            display: Block math is rendered slightly larger

        Returns:
            RenderedMath with width/height in points

        Raises:
            MathRenderError: If the backend is unavailable or the
                expression cannot be parsed
        """
        key = (expr, font_size, display)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        backend = self._load_backend() if self.enabled else None
        if backend is None:
            raise MathRenderError("Math backend is not available")
        mathtext, font_properties = backend

        size = font_size * DISPLAY_SCALE if display else font_size
        buf = io.BytesIO()
        try:
            mathtext.math_to_image(
                f"${expr}$",
                buf,
                prop=font_properties(size=size),
                dpi=self.dpi,
                format="png",
            )
        except (ValueError, RuntimeError) as e:
            raise MathRenderError(f"Failed to render {expr!r}: {e}") from e

        buf.seek(0)
        image = Image.open(buf)
        image.load()
        image = image.convert("RGBA")

        rendered = RenderedMath(
            image=image,
            width=image.width * 72.0 / self.dpi,
            height=image.height * 72.0 / self.dpi,
        )
        self._cache[key] = rendered
        logger.debug(f"Rendered math {expr!r} at {size}pt: {rendered.width:.1f}x{rendered.height:.1f}pt")
        return rendered
