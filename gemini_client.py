# gemini_client.py - Outline and chapter generation against the Gemini API
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, MutableMapping, Optional

import google.generativeai as genai
from dotenv import load_dotenv
from google.generativeai.types import HarmBlockThreshold, HarmCategory
from pydantic import ValidationError

import config
from book_models import BookOutline, Chapter, OutlineRequest

logger = logging.getLogger(__name__)

SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
}

DETAIL_WORD_COUNTS = {'concise': '800-1200', 'standard': '1200-1800', 'detailed': '1800-2500'}

FENCED_JSON = re.compile(r"```json\n([\s\S]*?)\n```")
BARE_JSON = re.compile(r"{[\s\S]*}")
CHAPTER_LINE = re.compile(r"^Chapter \d+|^\d+\.|^[\w\s]+:$")
CHAPTER_PREFIX = re.compile(r"^Chapter \d+[:.\s]*|^\d+\.\s*|:$")


class GenerationError(Exception):
    """Raised when the model cannot produce a usable outline or chapter."""


def get_model():
    load_dotenv()
    api_key = os.getenv(config.GEMINI_API_KEY_ENV)
    if not api_key:
        raise GenerationError(f"API key is not configured. Please set {config.GEMINI_API_KEY_ENV} in your .env file.")
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(config.GEMINI_MODEL, safety_settings=SAFETY_SETTINGS)


def generate_with_gemini(prompt_text, model=None):
    """Single request/response call. Returns the stripped response text or raises GenerationError."""
    model = model or get_model()
    logger.info(f"--- Calling Gemini API (prompt length: {len(prompt_text)} chars)...")
    try:
        text = model.generate_content(prompt_text).text.strip()
    except Exception as e:
        raise GenerationError(f"Gemini request failed: {e}") from e
    if not text:
        raise GenerationError("Gemini returned an empty response.")
    logger.info(f"--- Gemini call successful (length: {len(text)} chars)")
    return text


# --- Outline ---
def build_outline_prompt(request: OutlineRequest) -> str:
    complex_outline = request.complexity == 'complex'
    specs = [f"- Primary Genre: {request.genre}"]
    if request.subgenre: specs.append(f"- Subgenre: {request.subgenre}")
    specs.append(f"- Number of chapters: {request.length}")
    if request.tone: specs.append(f"- Tone/Mood: {request.tone}")
    if request.target_audience: specs.append(f"- Target Audience: {request.target_audience}")
    if request.setting: specs.append(f"- Setting: {request.setting}")
    if request.writing_style: specs.append(f"- Writing Style: {request.writing_style}")
    specs.append(f"- Complexity Level: {request.complexity}")

    requirements = [
        "1. Create a compelling and original title that fits the genre and topic",
        "2. Write a detailed description (3-5 sentences) that would entice readers",
        f"3. Include {request.length} well-structured chapters with logical progression",
        "4. For each chapter, provide an engaging chapter title and a detailed summary (2-4 sentences)"
        + (", plus 2-3 key events that occur in the chapter" if complex_outline else ""),
    ]
    if request.include_characters:
        requirements.append("5. Create 3-5 main characters with name, role (protagonist, antagonist, supporting), brief description and motivation")
    if complex_outline:
        requirements.append("6. Include 2-4 major themes explored in the book")

    newline = "\n"
    return f"""You are a professional book outline generator with expertise in all literary genres.
Create a detailed, well-structured book outline on the topic: "{request.topic}".

BOOK SPECIFICATIONS:
{newline.join(specs)}

REQUIREMENTS:
{newline.join(requirements)}

Format the response as JSON with the following structure:
{{
  "title": "Main book title",
  "genre": "{request.genre}",
  "description": "Overall book description",
  "chapters": [
    {{"chapterNumber": 1, "title": "Chapter title", "summary": "Detailed chapter summary"}}
  ]
}}

If subgenre, tone, targetAudience or setting are given above, include them in the JSON under those keys.
If complexity is 'complex', include a "themes" array and a "keyEvents" array for each chapter.
If characters are requested, include a "characters" array of objects with name, role, description and motivation.

Ensure the outline is coherent, engaging, and follows a logical narrative structure with proper setup, development, and resolution."""


def extract_outline_json(text: str) -> Optional[dict]:
    """Finds the outline JSON in a model reply: a ```json fence first, then the outermost braces."""
    for pattern in (FENCED_JSON, BARE_JSON):
        match = pattern.search(text)
        if not match:
            continue
        candidate = match.group(1) if match.groups() else match.group(0)
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse outline JSON: {e}")
            continue
        if isinstance(data, dict):
            return data
    return None


def fallback_outline(text: str, request: OutlineRequest) -> dict:
    """Builds an outline dict from free text when the model ignored the JSON format."""
    lines = [line.strip() for line in text.split('\n') if line.strip()]
    title = lines[0] if lines else 'Generated Book'
    description = ' '.join(lines[1:3]) or f"A book about {request.topic}"
    chapters = []; current = None
    for line in lines[3:]:
        if CHAPTER_LINE.match(line):
            if current and current['title']: chapters.append(current)
            current = {'chapterNumber': len(chapters) + 1, 'title': CHAPTER_PREFIX.sub('', line).strip(), 'summary': ''}
        elif current is not None:
            current['summary'] = f"{current['summary']} {line}".strip()
    if current and current['title']: chapters.append(current)
    if not chapters:
        logger.warning("No chapters recognised in model reply. Using default chapter list.")
        chapters = [{'chapterNumber': i, 'title': f"Chapter {i}", 'summary': f"Content for chapter {i} about {request.topic}."}
                    for i in range(1, request.length + 1)]
    return {'title': title, 'genre': request.genre, 'description': description, 'chapters': chapters}


def parse_outline_reply(text: str, request: OutlineRequest) -> BookOutline:
    data = extract_outline_json(text)
    if data is None:
        logger.warning("No JSON outline found in reply. Falling back to line parsing.")
        data = fallback_outline(text, request)
    data.setdefault('genre', request.genre)
    try:
        return BookOutline.model_validate(data)
    except ValidationError as e:
        raise GenerationError(f"Failed to parse book outline: {e}") from e


def generate_book_outline(request: OutlineRequest, model=None) -> BookOutline:
    logger.info(f"--- Generating Outline: '{request.topic}' ({request.genre}, {request.length} chapters) ---")
    text = generate_with_gemini(build_outline_prompt(request), model=model)
    outline = parse_outline_reply(text, request)
    logger.info(f"Outline ready: '{outline.title}' with {len(outline.chapters)} chapters.")
    return outline


# --- Chapters ---
def build_chapter_prompt(outline: BookOutline, chapter: Chapter, detail_level: str = 'standard') -> str:
    word_count = DETAIL_WORD_COUNTS[detail_level]
    names = chapter.characters or [character.name for character in outline.characters]
    optional = []
    if outline.tone: optional.append(f"- Tone/Mood: {outline.tone}")
    if outline.writing_style: optional.append(f"- Writing Style: {outline.writing_style}")
    cast = ""
    if names:
        cast = "CHARACTERS APPEARING IN THIS CHAPTER:\n" + "\n".join(f"- {name}" for name in names) + "\n\n"
    newline = "\n"
    return f"""You are a professional fiction writer with expertise in the {outline.genre} genre.
Write a detailed, engaging chapter for a book with the following information:

CHAPTER SPECIFICATIONS:
- Book Title: "{outline.title}"
- Genre: {outline.genre}
- Chapter Title: "{chapter.title}"
- Chapter Summary: "{chapter.summary}"
{newline.join(optional + [f"- Detail Level: {detail_level}"])}

{cast}WRITING GUIDELINES:
1. Create a well-structured, engaging chapter that fits the genre and summary provided
2. Include descriptive language, sensory details, and immersive world-building
3. Incorporate natural dialogue where appropriate
4. Maintain a consistent narrative voice and perspective
5. Balance action, description, and character development
6. The chapter should be approximately {word_count} words
7. Format the text with proper paragraphs and spacing
8. Begin and end the chapter in a compelling way

Write the chapter content only, without any additional notes or explanations."""


def generate_chapter_content(outline: BookOutline, chapter: Chapter, detail_level: str = 'standard', model=None) -> str:
    logger.info(f"--- Generating Chapter {chapter.chapter_number}: '{chapter.title}' ({detail_level}) ---")
    try:
        content = generate_with_gemini(build_chapter_prompt(outline, chapter, detail_level), model=model)
    except GenerationError as e:
        raise GenerationError(f"Failed to generate chapter content. {e}") from e
    logger.info(f"Chapter {chapter.chapter_number} word count: {len(content.split())} (target {DETAIL_WORD_COUNTS[detail_level]})")
    return content


def missing_chapters(outline: BookOutline, contents: MutableMapping[int, str]) -> List[int]:
    return [chapter.chapter_number for chapter in outline.chapters if not contents.get(chapter.chapter_number)]


@dataclass
class BatchResult:
    total: int
    succeeded: int = 0
    failed: List[int] = field(default_factory=list)

    @property
    def summary(self) -> str:
        if self.total and self.succeeded == 0:
            return "Failed to generate any chapters. Please try again."
        if self.succeeded < self.total:
            return f"Generated {self.succeeded} out of {self.total} chapters. Some chapters failed to generate."
        return f"Generated all {self.total} chapters."


def generate_all_chapters(outline: BookOutline, contents: MutableMapping[int, str],
                          chapter_numbers: Optional[Iterable[int]] = None,
                          generate: Callable[[BookOutline, Chapter], str] = generate_chapter_content) -> BatchResult:
    """Generates chapters one at a time, in order, adding each success to contents.

    A failing chapter, or a number the outline does not have, is logged and skipped;
    the remaining chapters are still attempted.
    """
    numbers = sorted(chapter_numbers) if chapter_numbers is not None else [c.chapter_number for c in outline.chapters]
    result = BatchResult(total=len(numbers))
    for position, number in enumerate(numbers, start=1):
        try:
            chapter = outline.chapter(number)
            logger.info(f">>> Processing Chapter {position}/{result.total}: '{chapter.title}'")
            contents[number] = generate(outline, chapter)
        except Exception as e:
            logger.error(f"Failed to generate chapter {number}: {e}")
            result.failed.append(number)
            continue
        result.succeeded += 1
    log = logger.info if not result.failed else logger.warning
    log(result.summary)
    return result
