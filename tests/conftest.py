import datetime
import os
import shutil

import pytest

import config
from book_models import BookOutline
from pdf_generator import BookPDF
from setup_fonts import REQUIRED_FONTS


@pytest.fixture
def outline():
    return BookOutline.model_validate({
        "title": "The Quiet Tide",
        "genre": "Fantasy",
        "subgenre": "Magical Realism",
        "description": "A lighthouse keeper notices the sea has stopped moving.",
        "characters": [
            {"name": "Maren", "role": "Protagonist", "description": "The keeper."},
            {"name": "The Harbourmaster", "role": "antagonist", "description": "Wants the light dark."},
            {"name": "Ives", "role": "mentor", "description": "An old fisherman."},
        ],
        "chapters": [
            {"chapterNumber": 1, "title": "Low Water", "summary": "The tide does not return."},
            {"chapterNumber": 2, "title": "The Ledger", "summary": "Maren reads the old keeper's notes."},
            {"chapterNumber": 3, "title": "Turning", "summary": "The sea answers."},
        ],
    })


@pytest.fixture
def no_fonts_dir(tmp_path):
    """A font directory without DejaVu files, which pins rendering to the core PDF fonts."""
    return str(tmp_path / "no-fonts")


@pytest.fixture
def today():
    return datetime.date(2026, 10, 19)


@pytest.fixture
def pdf(outline, no_fonts_dir, today):
    doc = BookPDF(outline, font_dir=no_fonts_dir, today=today)
    doc.add_page()
    return doc


@pytest.fixture
def make_prose():
    def _make(paragraphs, words=80):
        sentence = "The lamp turned slowly over the flat grey water while gulls waited on the rocks".split()
        body = " ".join((sentence * (words // len(sentence) + 1))[:words])
        return "\n\n".join(f"{body}." for _ in range(paragraphs))
    return _make


SYSTEM_FONT_DIRS = ("/usr/share/fonts/truetype/dejavu", "/usr/share/fonts/dejavu", "/usr/local/share/fonts")


@pytest.fixture
def unicode_fonts_dir(tmp_path):
    """A complete DejaVu font directory built from whatever regular DejaVu TTFs are available."""
    font_dir = tmp_path / "dejavu"
    font_dir.mkdir()
    for (family, style), fname in REQUIRED_FONTS.items():
        source = _find_font(f"{family}.ttf")
        if source is None:
            pytest.skip(f"{family}.ttf is not installed")
        shutil.copyfile(source, font_dir / fname)
    return str(font_dir)


def _find_font(fname):
    for directory in (config.FONT_DIR,) + SYSTEM_FONT_DIRS:
        path = os.path.join(directory, fname)
        if os.path.exists(path):
            return path
    return None
