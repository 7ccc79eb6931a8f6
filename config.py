# config.py - Configuration for the Bookify book generator

# === Gemini Settings ===

# Gemini model used for outline and chapter generation.
GEMINI_MODEL = 'gemini-2.0-flash'

# Environment variable (loaded from .env) holding the API key.
GEMINI_API_KEY_ENV = 'GEMINI_API_KEY'

# === Outline Request Settings ===

# The main topic or premise of the book.
BOOK_TOPIC = "A lighthouse keeper who discovers the tide has stopped coming in"

# Primary genre and optional subgenre (leave subgenre blank to omit it).
BOOK_GENRE = "Fantasy"
BOOK_SUBGENRE = "Magical Realism"

# Number of chapters to request (1-20).
BOOK_LENGTH = 5

# Optional narrative parameters (blank strings are left out of the prompt).
BOOK_TONE = "Melancholic but hopeful"
TARGET_AUDIENCE = "Adult readers"
BOOK_SETTING = "A remote island on the North Atlantic"
WRITING_STYLE = "Lyrical"

# Ask the model for a cast of characters.
INCLUDE_CHARACTERS = True

# 'simple', 'moderate' or 'complex' ('complex' adds key events and themes).
COMPLEXITY = 'moderate'

# Chapter length: 'concise', 'standard' or 'detailed'.
CHAPTER_DETAIL_LEVEL = 'standard'


# === PDF Layout Settings ===

PDF_FORMAT = 'A4'
PDF_UNIT = 'mm'

MARGINS = {'top': 20, 'bottom': 20, 'left': 20, 'right': 20}

# paragraph doubles as the body line height.
SPACING = {'paragraph': 7, 'heading': 12, 'section': 20}

# Logical font family ('sans' or 'serif'), style and point size.
FONTS = {
    'title': ('sans', 'B', 24),
    'subtitle': ('sans', '', 16),
    'heading1': ('sans', 'B', 18),
    'heading2': ('sans', 'B', 14),
    'normal': ('serif', '', 12),
    'italic': ('serif', 'I', 12),
    'small': ('serif', '', 10),
}

ACCENT_COLOR = (0, 0, 128)

HEADER_BASELINE_MM = 7
FOOTER_OFFSET_MM = 10
FOOTER_CELL_HEIGHT_MM = 6
TOC_GAP_MM = 5

# === Fixed Text ===

GENERATOR_CREDIT = 'Generated with Bookify'
MISSING_CHAPTER_TEXT = 'Content not generated for this chapter.'
TOC_HEADING = 'Table of Contents'
PDF_EXTENSION = '.pdf'
FALLBACK_FILE_BASE = 'untitled-book'


# === Paths and Logging ===

OUTPUT_DIR = 'output'
FONT_DIR = 'fonts'
LOG_LEVEL = 'INFO'
