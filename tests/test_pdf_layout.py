"""
Tests for line wrapping and page flow.
"""

import pytest

from pdf_generator import FONTS
from pdf_layout import FontSpec, LayoutCursor, PageFlow, fit_text, wrap_text


class RecordingPages:
    """Stands in for the PDF backend: remembers which lines landed on which page."""

    def __init__(self):
        self.pages = []

    def new_page(self):
        self.pages.append([])

    def draw_line(self, text, y):
        self.pages[-1].append((text, y))

    def lines(self):
        return [text for page in self.pages for text, _ in page]


def make_flow(recorder, page_height=100, top=10, bottom=10, line_height=10):
    flow = PageFlow(page_height, top, bottom, line_height, new_page=recorder.new_page, draw_line=recorder.draw_line)
    flow.break_page()
    return flow


# --------------------------------------------------------------------------- #
# Text layout
# --------------------------------------------------------------------------- #

class TestWrapText:
    def test_lines_fit_width_and_keep_every_word(self, pdf, make_prose):
        text = make_prose(1, words=200)
        lines = wrap_text(pdf, text, FONTS['normal'], pdf.epw)
        assert len(lines) > 1
        assert all(pdf.get_string_width(line) <= pdf.epw + 1e-6 for line in lines)
        assert " ".join(lines).split() == text.split()

    def test_long_word_gets_its_own_line(self, pdf):
        word = "x" * 400
        assert wrap_text(pdf, f"a {word} b", FONTS['normal'], pdf.epw) == ["a", word, "b"]

    def test_explicit_newline_is_a_hard_break(self, pdf):
        assert wrap_text(pdf, "Title\nsubtitle", FONTS['heading2'], pdf.epw) == ["Title", "subtitle"]

    def test_deterministic(self, pdf, make_prose):
        text = make_prose(1, words=150)
        first = wrap_text(pdf, text, FONTS['italic'], 120)
        assert wrap_text(pdf, text, FONTS['italic'], 120) == first

    def test_larger_font_needs_more_lines(self, pdf, make_prose):
        text = make_prose(1, words=150)
        small = wrap_text(pdf, text, FontSpec('serif', '', 10), pdf.epw)
        large = wrap_text(pdf, text, FontSpec('serif', '', 18), pdf.epw)
        assert len(large) > len(small)


class TestFitText:
    def test_short_text_unchanged(self, pdf):
        assert fit_text(pdf, "Short", FONTS['small'], 100) == "Short"

    def test_long_text_shortened_with_ellipsis(self, pdf):
        text = "A very long chapter title that will not fit into a narrow running header slot"
        fitted = fit_text(pdf, text, FONTS['small'], 40)
        assert fitted.endswith("...")
        assert pdf.get_string_width(fitted) <= 40


# --------------------------------------------------------------------------- #
# Pagination
# --------------------------------------------------------------------------- #

class TestPageFlow:
    # page_height 100, margins 10, line height 10: eight lines per page from the top.

    def test_single_line(self):
        pages = RecordingPages()
        flow = make_flow(pages)
        assert flow.place_paragraph(["only"], spacing_after=5) == 1
        assert pages.pages == [[("only", 10)]]
        assert flow.cursor == LayoutCursor(page=1, y=25)

    def test_exactly_one_page_boundary(self):
        pages = RecordingPages()
        flow = make_flow(pages)
        lines = [f"line {i}" for i in range(12)]
        assert flow.place_paragraph(lines, spacing_after=0) == 12
        assert [len(page) for page in pages.pages] == [8, 4]
        assert pages.lines() == lines

    def test_multiple_page_boundaries(self):
        pages = RecordingPages()
        flow = make_flow(pages)
        lines = [f"line {i}" for i in range(30)]
        assert flow.place_paragraph(lines, spacing_after=0) == 30
        assert [len(page) for page in pages.pages] == [8, 8, 8, 6]
        assert pages.lines() == lines
        assert flow.cursor.page == 4

    def test_page_exactly_filled_does_not_open_an_empty_page(self):
        pages = RecordingPages()
        flow = make_flow(pages)
        flow.place_lines([f"line {i}" for i in range(8)])
        assert len(pages.pages) == 1

    def test_breaks_before_paragraph_when_no_line_fits(self):
        pages = RecordingPages()
        flow = make_flow(pages)
        flow.cursor.y = 85
        flow.place_paragraph(["moved"], spacing_after=0)
        assert pages.pages == [[], [("moved", 10)]]

    def test_spacing_does_not_push_next_check_early(self):
        pages = RecordingPages()
        flow = make_flow(pages)
        flow.place_paragraph([f"a{i}" for i in range(7)], spacing_after=3)
        # y is now 83: 7 left, less than one line, so the next paragraph opens a page
        flow.place_paragraph(["b"], spacing_after=3)
        assert [len(page) for page in pages.pages] == [7, 1]

    def test_lines_never_drawn_below_bottom_margin(self):
        pages = RecordingPages()
        flow = make_flow(pages)
        for size in (3, 11, 1, 20, 5):
            flow.place_paragraph(["x"] * size, spacing_after=7)
        assert all(flow.top_margin <= y <= flow.bottom_limit - flow.line_height for page in pages.pages for _, y in page)

    @pytest.mark.parametrize("paragraphs", [[1], [8], [9], [3, 17, 2], [40, 40, 1], [0, 5]])
    def test_total_lines_emitted_equals_lines_produced(self, paragraphs):
        pages = RecordingPages()
        flow = make_flow(pages, page_height=297, top=20, bottom=20, line_height=7)
        produced = []
        for index, count in enumerate(paragraphs):
            lines = [f"p{index}-l{i}" for i in range(count)]
            produced.extend(lines)
            assert flow.place_paragraph(lines, spacing_after=7) == count
        assert pages.lines() == produced

    def test_rejects_geometry_without_room_for_one_line(self):
        with pytest.raises(ValueError):
            PageFlow(30, 10, 10, 15, new_page=lambda: None, draw_line=lambda text, y: None)
