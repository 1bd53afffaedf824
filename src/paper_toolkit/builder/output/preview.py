"""
Module: builder.output.preview

Purpose:
    HTML preview of an arranged paper for the review step.
    Plain text is escaped; math stays delimited (\\( \\) and \\[ \\]) so a
    client-side renderer such as KaTeX auto-render can typeset it.

Key Functions:
    - render_html(): Paper -> standalone HTML document
    - question_html(): Question text -> escaped HTML fragment

Dependencies:
    - html (std): Escaping
    - builder.output.math_renderer: Segment splitting

Used By:
    - builder.workflow: Review step
    - cli: --preview option
"""

from __future__ import annotations

import html
from typing import List

from paper_toolkit.core.models import Paper, PaperItem, format_marks
from paper_toolkit.core.utils import marks_chip

from .math_renderer import SegmentKind, split_math_segments

_STYLE = """
body { font-family: 'Noto Sans Gujarati', 'Noto Sans', Helvetica, Arial, sans-serif; margin: 28px; }
.title { text-align: center; font-weight: 800; font-size: 22px; }
.info { display: flex; justify-content: center; gap: 18px; font-size: 12px; margin-top: 8px; }
.rule { height: 1px; background: #222; margin-top: 10px; }
.instructions { margin-top: 12px; font-size: 12px; border: 1px solid #ddd; padding: 10px; border-radius: 6px; }
.chip { display: inline-block; padding: 2px 10px; border: 1px solid #ddd; border-radius: 999px; font-size: 11px; margin-right: 8px; }
.section { font-weight: 700; font-size: 14px; border-left: 4px solid #222; padding-left: 8px; margin-top: 16px; }
.subsection { font-weight: 600; font-size: 12px; margin: 6px 0; }
.question { display: flex; gap: 8px; margin: 8px 0; }
.number { min-width: 26px; font-weight: 700; }
.text { flex: 1; line-height: 1.5; font-size: 13px; white-space: pre-wrap; }
.meta { font-size: 11px; color: #555; }
""".strip()


def question_html(text: str) -> str:
    """
    Escape question text for HTML, keeping math delimited.

    Example:
        >>> question_html("a < b and $x^2$")
        'a &lt; b and \\\\(x^2\\\\)'
    """
    parts: List[str] = []
    for segment in split_math_segments(text):
        if segment.kind is SegmentKind.TEXT:
            parts.append(html.escape(segment.content))
        elif segment.kind is SegmentKind.BLOCK:
            parts.append(f"\\[{html.escape(segment.content)}\\]")
        else:
            parts.append(f"\\({html.escape(segment.content)}\\)")
    return "".join(parts)


def _item_html(item: PaperItem) -> str:
    question = item.question
    marks = format_marks(question.marks) if question.is_eligible else "-"
    return (
        '<div class="question">'
        f'<div class="number">{html.escape(item.label)}</div>'
        f'<div class="text">{question_html(question.display_text)}</div>'
        f'<div class="meta">{marks} Marks</div>'
        "</div>"
    )


def render_html(paper: Paper) -> str:
    """Render a standalone HTML preview of the paper."""
    header = paper.header
    esc = html.escape

    info_fields = [
        ("School", header.institution),
        ("Board", header.board),
        ("Standard", header.standard),
        ("Subject", header.subject),
        ("Duration", header.duration),
    ]
    info = "".join(f"<div>{label}: {esc(value or '-')}</div>" for label, value in info_fields)
    info += f"<div>Total Marks: {format_marks(paper.total_marks)}</div>"

    body: List[str] = [
        f'<div class="title">{esc(header.title or "Question Paper")}</div>',
        f'<div class="info">{info}</div>',
        '<div class="rule"></div>',
    ]
    if header.instructions.strip():
        body.append(f'<div class="instructions"><strong>Instructions:</strong> {esc(header.instructions)}</div>')
    if paper.marks_distribution:
        chips = "".join(f'<span class="chip">{esc(marks_chip(m, c))}</span>' for m, c in paper.marks_distribution)
        body.append(f"<div><strong>Marks Distribution:</strong><div>{chips}</div></div>")

    for section in paper.sections:
        body.append(f'<div class="section">{esc(section.heading)}</div>')
        body.extend(_item_html(item) for item in section.items)
        for subsection in section.subsections:
            body.append(f'<div class="subsection">{esc(subsection.heading)}</div>')
            body.extend(_item_html(item) for item in subsection.items)

    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{esc(header.title or 'Question Paper')}</title>\n"
        f"<style>\n{_STYLE}\n</style>\n</head>\n<body>\n"
        + "\n".join(body)
        + "\n</body>\n</html>\n"
    )
