# book_models.py - Outline data model shared by the generator and the PDF builder
from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

MAX_CHAPTERS = 20

# chapter number -> generated markdown; absent means "not generated yet"
ChapterContents = Dict[int, str]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Character(_CamelModel):
    name: str
    role: str = ""
    description: str = ""
    background: Optional[str] = None
    motivation: Optional[str] = None
    traits: List[str] = []

    @property
    def role_category(self) -> str:
        role = self.role.strip().lower()
        return role if role in ("protagonist", "antagonist") else "supporting"


class Chapter(_CamelModel):
    chapter_number: int = Field(..., ge=1)
    title: str
    summary: str = ""
    key_events: List[str] = []
    characters: List[str] = []

    @property
    def label(self) -> str:
        return f"Chapter {self.chapter_number}: {self.title}"


class BookOutline(_CamelModel):
    title: str
    genre: str
    subgenre: Optional[str] = None
    description: str = ""
    target_audience: Optional[str] = None
    tone: Optional[str] = None
    setting: Optional[str] = None
    timeframe: Optional[str] = None
    themes: List[str] = []
    characters: List[Character] = []
    chapters: List[Chapter] = Field(..., min_length=1, max_length=MAX_CHAPTERS)
    writing_style: Optional[str] = None
    complexity: Optional[str] = None

    @model_validator(mode='after')
    def _chapters_numbered_contiguously(self):
        self.chapters.sort(key=lambda chapter: chapter.chapter_number)
        numbers = [chapter.chapter_number for chapter in self.chapters]
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValueError(f"chapters must be numbered 1..{len(numbers)} without gaps, got {numbers}")
        return self

    def chapter(self, number: int) -> Chapter:
        for chapter in self.chapters:
            if chapter.chapter_number == number:
                return chapter
        raise KeyError(f"'{self.title}' has no chapter {number}")


class OutlineRequest(_CamelModel):
    """Narrative parameters collected before an outline is requested."""
    topic: str = Field(..., min_length=3)
    genre: str = Field(..., min_length=3)
    subgenre: Optional[str] = None
    length: int = Field(..., ge=1, le=MAX_CHAPTERS)
    tone: Optional[str] = None
    target_audience: Optional[str] = None
    setting: Optional[str] = None
    include_characters: bool = False
    complexity: Literal['simple', 'moderate', 'complex'] = 'moderate'
    writing_style: Optional[str] = None
