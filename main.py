# main.py - Bookify: outline -> chapters -> PDF, driven by config.py

import argparse
import json
import logging
import os
import time
from collections import defaultdict

import config
from book_models import BookOutline, OutlineRequest
from gemini_client import GenerationError, generate_all_chapters, generate_book_outline, generate_chapter_content, missing_chapters
from pdf_generator import export_and_download
from setup_fonts import setup_fonts

logger = logging.getLogger("bookify")


def configure_logging(level=None):
    logging.basicConfig(level=getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO),
                        format="%(asctime)s - %(levelname)s - %(message)s")


def outline_request_from_config():
    return OutlineRequest(
        topic=config.BOOK_TOPIC, genre=config.BOOK_GENRE, subgenre=config.BOOK_SUBGENRE or None,
        length=config.BOOK_LENGTH, tone=config.BOOK_TONE or None, target_audience=config.TARGET_AUDIENCE or None,
        setting=config.BOOK_SETTING or None, include_characters=config.INCLUDE_CHARACTERS,
        complexity=config.COMPLEXITY, writing_style=config.WRITING_STYLE or None,
    )


def load_outline(path):
    with open(path, 'r', encoding='utf-8') as f_in:
        return BookOutline.model_validate(json.load(f_in))


def log_outline(outline):
    logger.info(f"--- Outline: '{outline.title}' ({outline.genre}{' / ' + outline.subgenre if outline.subgenre else ''}) ---")
    for chapter in outline.chapters:
        logger.info(f"  {chapter.label}")
    cast = defaultdict(list)
    for character in outline.characters:
        cast[character.role_category].append(character.name)
    for category in ('protagonist', 'antagonist', 'supporting'):
        if cast[category]: logger.info(f"  {category.title()}: {', '.join(cast[category])}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate a book with Gemini and export it as a PDF.")
    parser.add_argument('--outline', help="Outline JSON file to use instead of generating one.")
    parser.add_argument('--skip-chapters', action='store_true', help="Export without generating chapter content.")
    parser.add_argument('--output-dir', default=config.OUTPUT_DIR, help="Directory for the exported PDF.")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    configure_logging()
    logger.info("========= Bookify Book Generator =========")
    start_time = time.time()

    if not setup_fonts():
        logger.warning("Font setup failed. The PDF will use core fonts.")

    try:
        outline = load_outline(args.outline) if args.outline else generate_book_outline(outline_request_from_config())
    except (GenerationError, OSError, ValueError) as e:
        logger.error(f"Could not obtain an outline: {e}")
        return 1
    log_outline(outline)

    chapter_contents = {}
    batch = None
    if not args.skip_chapters:
        batch = generate_all_chapters(
            outline, chapter_contents, missing_chapters(outline, chapter_contents),
            generate=lambda book, chapter: generate_chapter_content(book, chapter, config.CHAPTER_DETAIL_LEVEL),
        )

    pdf_path = export_and_download(outline, chapter_contents, output_dir=args.output_dir)

    duration = time.time() - start_time
    logger.info("========= Generation Summary =========")
    logger.info(f"Book Title: {outline.title}")
    logger.info(f"Chapters: {len(outline.chapters)}")
    if batch: logger.info(batch.summary)
    logger.info(f"PDF saved to: {os.path.abspath(pdf_path)}")
    logger.info(f"Total execution time: {duration:.2f} seconds")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
