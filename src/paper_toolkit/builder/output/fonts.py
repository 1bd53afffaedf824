"""
Module: builder.output.fonts

Purpose:
    Font selection for PDF output. Latin text uses the base-14 fonts;
    text in Indic and related scripts (Gujarati, Devanagari, Bengali,
    Tamil, ...) needs a registered TrueType font.

Key Functions:
    - contains_complex_script(): Detect text needing a Unicode font
    - resolve_fonts(): Build the FontSet for a layout configuration
    - pick_font(): Choose the font to draw a piece of text with

Dependencies:
    - reportlab: TTF registration

Used By:
    - builder.layout.composer: Measuring text
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont, TTFError

from paper_toolkit.builder.layout.config import LayoutConfig

logger = logging.getLogger(__name__)

UNICODE_FONT_NAME = "PaperUnicode"

# Gujarati, Devanagari, Bengali, Tamil, Telugu, Kannada, Malayalam, Sinhala
_COMPLEX_SCRIPT = re.compile(
    r"[\u0A80-\u0AFF\u0900-\u097F\u0980-\u09FF\u0B80-\u0BFF"
    r"\u0C00-\u0C7F\u0C80-\u0CFF\u0D00-\u0D7F\u0D80-\u0DFF]"
)


@dataclass(frozen=True)
class FontSet:
    """
    Fonts available to the composer.

    Attributes:
        regular: Body font
        bold: Heading / number font
        unicode: Registered TTF name for complex scripts, if any
    """

    regular: str
    bold: str
    unicode: Optional[str] = None


def contains_complex_script(text: str) -> bool:
    """True if text contains characters the base-14 fonts cannot draw."""
    return bool(_COMPLEX_SCRIPT.search(text or ""))


def register_unicode_font(path: Path, name: str = UNICODE_FONT_NAME) -> Optional[str]:
    """
    Register a TTF with reportlab.

    Returns:
        The registered font name, or None if the file could not be loaded
    """
    if name in pdfmetrics.getRegisteredFontNames():
        return name
    try:
        pdfmetrics.registerFont(TTFont(name, str(path)))
    except (TTFError, OSError) as e:
        logger.warning(f"Could not load Unicode font {path}: {e}")
        return None
    logger.info(f"Registered Unicode font {name} from {path}")
    return name


def resolve_fonts(config: LayoutConfig) -> FontSet:
    """Build the FontSet for a layout, registering the Unicode font if configured."""
    unicode_name = None
    if config.unicode_font_path is not None:
        unicode_name = register_unicode_font(Path(config.unicode_font_path))
    return FontSet(regular=config.font_name, bold=config.bold_font_name, unicode=unicode_name)


def pick_font(text: str, fonts: FontSet, *, bold: bool = False) -> str:
    """
    Font to draw ``text`` with.

    Complex-script text uses the Unicode font when one is registered;
    otherwise the base font is used and glyphs may be missing.
    """
    if fonts.unicode and contains_complex_script(text):
        return fonts.unicode
    return fonts.bold if bold else fonts.regular
