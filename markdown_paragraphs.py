# markdown_paragraphs.py - Paragraph-level markdown classification for PDF output
from __future__ import annotations

import re
import warnings
from typing import List, NamedTuple

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

NORMAL = 'normal'
ITALIC = 'italic'
BOLD = 'bold'

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
HEADING_MARKERS = ("# ", "## ")
# Strong markers are tried first so "**x**" never reads as italic "*x*".
WRAPPING_MARKERS = (("**", BOLD), ("__", BOLD), ("*", ITALIC), ("_", ITALIC))

# Chapter prose like "see ./notes" trips bs4's "looks like a filename" warning.
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)


class ParagraphUnit(NamedTuple):
    text: str
    format: str = NORMAL


def split_paragraphs(markdown: str) -> List[str]:
    return [chunk.strip() for chunk in PARAGRAPH_BREAK.split(markdown or "") if chunk.strip()]


def html_to_text(fragment: str) -> str:
    """Flattens inline HTML to plain text: links keep their text, images vanish,
    blockquotes are inlined as _italic_ text."""
    soup = BeautifulSoup(fragment, "html.parser")
    for image in soup.find_all("img"):
        image.decompose()
    for tag in soup.find_all("a"):
        tag.replace_with(tag.get_text())
    # innermost first, so a nested quote is still attached when it is replaced
    for tag in reversed(soup.find_all("blockquote")):
        quote = " ".join(tag.get_text().split())
        tag.replace_with(f"_{quote}_" if quote else "")
    return " ".join(soup.get_text().split())


def _unwrap(paragraph: str, marker: str):
    width = len(marker)
    if len(paragraph) <= 2 * width or not (paragraph.startswith(marker) and paragraph.endswith(marker)):
        return None
    inner = paragraph[width:-width]
    # Inside a single-marker wrap, doubled markers are nested strong emphasis, not a closing marker.
    stray = inner.replace(marker * 2, "") if width == 1 else inner
    if marker in stray or not inner.strip():
        return None
    if width > 1:
        # "***x***": drop the italic pair left inside the strong one.
        nested = _unwrap(inner.strip(), marker[0])
        if nested is not None:
            return nested
    return inner.strip()


def classify_paragraph(paragraph: str) -> ParagraphUnit:
    for marker in HEADING_MARKERS:
        if paragraph.startswith(marker):
            return ParagraphUnit(paragraph[len(marker):].strip(), BOLD)
    for marker, fmt in WRAPPING_MARKERS:
        inner = _unwrap(paragraph, marker)
        if inner is not None:
            return ParagraphUnit(inner, fmt)
    return ParagraphUnit(html_to_text(paragraph), NORMAL)


def process_markdown(markdown: str) -> List[ParagraphUnit]:
    """Splits chapter markdown on blank lines and tags each paragraph normal, italic or bold.

    Only whole-paragraph markup is interpreted: '# '/'## ' headings and paragraphs
    wrapped entirely in emphasis markers. Everything else is flattened to plain text
    with partial emphasis left as written.
    """
    units = []
    for paragraph in split_paragraphs(markdown):
        unit = classify_paragraph(paragraph)
        if unit.text:
            units.append(unit)
    return units
