# pdf_generator.py - Book PDF assembly: title page, table of contents, chapters, running headers
from __future__ import annotations

import datetime
import logging
import math
import os
import re
from typing import Mapping, Optional

from fpdf import FPDF

import config
from book_models import BookOutline, Chapter
from markdown_paragraphs import BOLD, ITALIC, ParagraphUnit, process_markdown
from pdf_layout import FontSpec, PageFlow, fit_text, wrap_text
from setup_fonts import installed_font_paths

logger = logging.getLogger(__name__)

FONTS = {name: FontSpec(*spec) for name, spec in config.FONTS.items()}
SPACING = config.SPACING

PARAGRAPH_FONTS = {BOLD: FONTS['heading2'], ITALIC: FONTS['italic']}

CORE_FAMILIES = {'sans': 'helvetica', 'serif': 'times'}
UNICODE_FAMILIES = {'sans': 'DejaVuSans', 'serif': 'DejaVuSerif'}

# Core PDF fonts only cover Latin-1; model output is full of typographic punctuation.
LATIN1_REPLACEMENTS = str.maketrans({
    '\u2018': "'", '\u2019': "'", '\u201c': '"', '\u201d': '"',
    '\u2013': '-', '\u2014': '--', '\u2026': '...', '\u00a0': ' ',
})


def toc_page_number(chapter_number: int) -> int:
    """Page 1 is the title page, page 2 the table of contents, then one chapter per page in order."""
    return chapter_number + 2


def dot_leader(pdf, title_width: float, number_width: float, line_width: float, gap: float = config.TOC_GAP_MM) -> str:
    dots_width = line_width - title_width - number_width - gap
    return '.' * max(0, math.floor(dots_width / pdf.get_string_width('.')))


def long_date(day: datetime.date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


def pdf_filename(title: str) -> str:
    base = re.sub(r'[^a-z0-9]+', '-', title.lower()).strip('-')
    return base + config.PDF_EXTENSION


class BookPDF(FPDF):
    """One book document. Pages are emitted in order; the header hook stamps the chapter recorded for each page."""

    def __init__(self, book: BookOutline, font_dir=None, today: Optional[datetime.date] = None):
        super().__init__(orientation='P', unit=config.PDF_UNIT, format=config.PDF_FORMAT)
        margins = config.MARGINS
        self.book = book
        self.today = today or datetime.date.today()
        self.set_auto_page_break(auto=False)
        self.set_margins(left=margins['left'], top=margins['top'], right=margins['right'])
        self.alias_nb_pages()
        self.has_unicode_fonts = self._register_fonts(font_dir)
        self.family_map = UNICODE_FAMILIES if self.has_unicode_fonts else CORE_FAMILIES
        self.current_chapter: Optional[Chapter] = None
        self.page_chapters = {}        # page number -> chapter number
        self.chapter_start_pages = {}  # chapter number -> first page
        self._body_font = FONTS['normal']
        self.flow = PageFlow(self.h, margins['top'], margins['bottom'], SPACING['paragraph'],
                             new_page=self.add_page, draw_line=self._draw_body_line)

    def _register_fonts(self, font_dir) -> bool:
        paths = installed_font_paths(font_dir)
        if not paths:
            logger.warning("DejaVu fonts not installed, falling back to core PDF fonts (Latin-1 only).")
            return False
        for (family, style), path in paths.items():
            self.add_font(family, style=style, fname=path)
        return True

    # --- Fonts & text ---
    def use_font(self, font: FontSpec) -> None:
        self.set_font(self.family_map[font.family], font.style, font.size)

    def safe_text(self, text: str) -> str:
        if self.has_unicode_fonts:
            return text
        return text.translate(LATIN1_REPLACEMENTS).encode('latin-1', 'replace').decode('latin-1')

    def _aligned_x(self, line: str, align: str) -> float:
        if align == 'C':
            return (self.w - self.get_string_width(line)) / 2
        if align == 'R':
            return self.w - self.r_margin - self.get_string_width(line)
        return self.l_margin

    def draw_text_block(self, text: str, font: FontSpec, y: float, align: str = 'L', line_height: float = None) -> float:
        """Draws wrapped text without page breaks and returns the y below it."""
        line_height = line_height or SPACING['paragraph']
        for line in wrap_text(self, self.safe_text(text), font, self.epw):
            self.text(self._aligned_x(line, align), y, line)
            y += line_height
        return y

    def _draw_body_line(self, line: str, y: float) -> None:
        self.use_font(self._body_font)
        self.text(self.l_margin, y, line)

    def place_paragraph(self, unit: ParagraphUnit) -> int:
        self._body_font = PARAGRAPH_FONTS.get(unit.format, FONTS['normal'])
        lines = wrap_text(self, self.safe_text(unit.text), self._body_font, self.epw)
        return self.flow.place_paragraph(lines, SPACING['paragraph'])

    # --- Page hooks ---
    def header(self):
        chapter = self.current_chapter
        if chapter is None:
            return
        self.page_chapters[self.page_no()] = chapter.chapter_number
        font = FONTS['small']
        half_width = self.epw / 2 - config.TOC_GAP_MM
        title = fit_text(self, self.safe_text(self.book.title), font, half_width)
        label = fit_text(self, self.safe_text(chapter.label), font, half_width)
        self.text(self.l_margin, config.HEADER_BASELINE_MM, title)
        self.text(self._aligned_x(label, 'R'), config.HEADER_BASELINE_MM, label)

    def footer(self):
        if self.page_no() == 1:
            return
        # cell() rather than text(): only cell output gets the {nb} alias replaced for embedded TTF fonts.
        self.use_font(FONTS['small'])
        self.set_y(-config.FOOTER_OFFSET_MM - config.FOOTER_CELL_HEIGHT_MM / 2)
        self.cell(0, config.FOOTER_CELL_HEIGHT_MM, f"Page {self.page_no()} of {self.str_alias_nb_pages}", align='C')

    # --- Sections ---
    def _title_page(self):
        margins = config.MARGINS
        self.flow.break_page()
        inner_w = self.w - (margins['left'] + margins['right'])
        inner_h = self.h - (margins['top'] + margins['bottom'])
        self.set_draw_color(*config.ACCENT_COLOR)
        self.set_line_width(0.5)
        self.rect(margins['left'] - 5, margins['top'] - 5, inner_w + 10, inner_h + 10)
        self.set_line_width(0.2)
        self.rect(margins['left'] - 2, margins['top'] - 2, inner_w + 4, inner_h + 4)

        y = self.draw_text_block(self.book.title, FONTS['title'], self.h / 3, align='C', line_height=SPACING['heading'])
        y += SPACING['section']
        genre = f"{self.book.genre} - {self.book.subgenre}" if self.book.subgenre else self.book.genre
        y = self.draw_text_block(genre, FONTS['subtitle'], y, align='C')
        y += SPACING['section']
        if self.book.description:
            y = self.draw_text_block(self.book.description, FONTS['italic'], y, align='C')
        y += SPACING['section']
        self.set_line_width(0.3)
        self.line(self.w / 2 - 30, y, self.w / 2 + 30, y)

        y = self.draw_text_block(config.GENERATOR_CREDIT, FONTS['small'], self.h - margins['bottom'] - 20, align='C')
        self.draw_text_block(long_date(self.today), FONTS['small'], y + 5, align='C')

    def _toc_page(self):
        self.flow.break_page()
        y = self.draw_text_block(config.TOC_HEADING, FONTS['heading1'], self.flow.cursor.y, align='C')
        y += SPACING['section']
        self.set_draw_color(*config.ACCENT_COLOR)
        self.set_line_width(0.2)
        self.line(self.w / 2 - 40, y - 10, self.w / 2 + 40, y - 10)
        self.flow.cursor.y = y
        for chapter in self.book.chapters:
            self.flow.ensure_space(SPACING['paragraph'])
            self._toc_entry(chapter, self.flow.cursor.y)
            self.flow.advance(SPACING['paragraph'])

    def _toc_entry(self, chapter: Chapter, y: float):
        font = FONTS['normal']
        page_label = str(toc_page_number(chapter.chapter_number))
        self.use_font(font)
        number_width = self.get_string_width(page_label)
        label = fit_text(self, self.safe_text(chapter.label), font, self.epw - number_width - 2 * config.TOC_GAP_MM)
        title_width = self.get_string_width(label)
        self.text(self.l_margin, y, label)
        dots = dot_leader(self, title_width, number_width, self.epw)
        if dots:
            self.text(self.l_margin + title_width + 2, y, dots)
        self.text(self.w - self.r_margin - number_width, y, page_label)

    def _chapter_pages(self, chapter: Chapter, content: Optional[str]):
        self.current_chapter = chapter
        self.flow.break_page()
        self.chapter_start_pages[chapter.chapter_number] = self.page_no()
        y = self.draw_text_block(chapter.label, FONTS['heading1'], self.flow.cursor.y, line_height=SPACING['heading'])
        self.flow.cursor.y = y + SPACING['section']

        units = process_markdown(content) if content else []
        if not units:
            logger.warning(f"Chapter {chapter.chapter_number} has no generated content. Using placeholder.")
            units = [ParagraphUnit(config.MISSING_CHAPTER_TEXT, ITALIC)]
        for unit in units:
            self.place_paragraph(unit)

    def compose(self, chapter_contents: Mapping[int, str]) -> "BookPDF":
        self._title_page()
        self._toc_page()
        for chapter in self.book.chapters:
            self._chapter_pages(chapter, chapter_contents.get(chapter.chapter_number))
        return self


def build_document(outline: BookOutline, chapter_contents: Mapping[int, str], *, font_dir=None,
                   today: Optional[datetime.date] = None) -> bytes:
    """Lays out the whole book in memory and returns the PDF bytes."""
    contents = dict(chapter_contents)
    generated = sum(1 for chapter in outline.chapters if contents.get(chapter.chapter_number))
    logger.info(f"--- Building PDF for '{outline.title}' ({generated}/{len(outline.chapters)} chapters generated) ---")
    pdf = BookPDF(outline, font_dir=font_dir, today=today).compose(contents)
    data = bytes(pdf.output())
    logger.info(f"PDF built: {pdf.page_no()} pages, {len(data)} bytes.")
    return data


def export_and_download(outline: BookOutline, chapter_contents: Mapping[int, str], filename_hint: Optional[str] = None,
                        output_dir: Optional[str] = None, **build_options) -> str:
    """Builds the PDF and saves it under output_dir. Returns the written path."""
    output_dir = output_dir or config.OUTPUT_DIR
    filename = pdf_filename(filename_hint or outline.title)
    if filename == config.PDF_EXTENSION:
        logger.warning(f"Title '{outline.title}' has no usable filename characters. Using '{config.FALLBACK_FILE_BASE}'.")
        filename = config.FALLBACK_FILE_BASE + config.PDF_EXTENSION
    data = build_document(outline, chapter_contents, **build_options)
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, filename)
    with open(path, 'wb') as f_out:
        f_out.write(data)
    logger.info(f"PDF saved to: {os.path.abspath(path)}")
    return path
