# pdf_layout.py - Line wrapping and page flow for the book PDF
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Sequence

# Slack for float geometry like 257.0000001 / 7.
_EPSILON = 1e-6


class FontSpec(NamedTuple):
    family: str  # logical family: 'sans' or 'serif'
    style: str
    size: float


def wrap_text(pdf, text: str, font: FontSpec, max_width: float) -> List[str]:
    """Wraps text into lines no wider than max_width using the metrics of font.

    Breaks only at whitespace; a word wider than max_width gets a line of its own.
    Explicit newlines are kept as hard breaks. Deterministic for a given
    (text, font, max_width), which pagination relies on.
    """
    pdf.use_font(font)
    lines = []
    for hard_line in text.split("\n"):
        words = hard_line.split()
        if not words:
            lines.append("")
            continue
        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if pdf.get_string_width(candidate) <= max_width + _EPSILON:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


def fit_text(pdf, text: str, font: FontSpec, max_width: float, ellipsis: str = "...") -> str:
    """Shortens a single-line label with an ellipsis until it fits max_width."""
    pdf.use_font(font)
    if pdf.get_string_width(text) <= max_width:
        return text
    for end in range(len(text) - 1, 0, -1):
        candidate = text[:end].rstrip() + ellipsis
        if pdf.get_string_width(candidate) <= max_width:
            return candidate
    return ellipsis


@dataclass
class LayoutCursor:
    page: int
    y: float


class PageFlow:
    """Places wrapped lines down the page, starting new pages between lines when the bottom margin is reached.

    Owns the layout cursor for one document. `new_page` is called to open every
    page (the flow then resets the cursor to the top margin) and
    `draw_line(text, y)` renders one line at baseline y on the current page.
    """

    def __init__(self, page_height: float, top_margin: float, bottom_margin: float, line_height: float,
                 new_page: Callable[[], None], draw_line: Callable[[str, float], None]):
        if line_height <= 0:
            raise ValueError("line_height must be positive")
        if top_margin + line_height > page_height - bottom_margin + _EPSILON:
            raise ValueError("a single line does not fit between the top and bottom margins")
        self.page_height = page_height
        self.top_margin = top_margin
        self.bottom_margin = bottom_margin
        self.line_height = line_height
        self._new_page = new_page
        self._draw_line = draw_line
        self.cursor = LayoutCursor(page=0, y=top_margin)

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.bottom_margin

    @property
    def space_remaining(self) -> float:
        return self.bottom_limit - self.cursor.y

    def break_page(self) -> None:
        self._new_page()
        self.cursor.page += 1
        self.cursor.y = self.top_margin

    def ensure_space(self, needed: float) -> None:
        if self.cursor.y + needed > self.bottom_limit + _EPSILON:
            self.break_page()

    def lines_fitting(self) -> int:
        return max(0, math.floor((self.space_remaining + _EPSILON) / self.line_height))

    def advance(self, amount: float) -> None:
        self.cursor.y += amount

    def place_lines(self, lines: Sequence[str]) -> int:
        """Emits every line exactly once, in order. Returns the number of lines drawn."""
        emitted = 0
        while emitted < len(lines):
            batch = min(self.lines_fitting(), len(lines) - emitted)
            if batch <= 0:
                self.break_page()
                continue
            for line in lines[emitted:emitted + batch]:
                self._draw_line(line, self.cursor.y)
                self.cursor.y += self.line_height
            emitted += batch
            if emitted < len(lines):
                self.break_page()
        return emitted

    def place_paragraph(self, lines: Sequence[str], spacing_after: float) -> int:
        self.ensure_space(self.line_height)
        emitted = self.place_lines(lines)
        self.advance(spacing_after)
        return emitted
