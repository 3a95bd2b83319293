"""
Theologos - Corpus File Schemas

Pydantic models for the JSON corpus format read by data.loaders. Keys
are camelCase in the file (``workId``, ``positionIndex``); snake_case
field names are accepted too.

Layout:
    {
        "works": [{"id", "title", "type", "author", "tradition"}],
        "units": [{"id", "workId", "positionIndex", "contentText",
                   "title", "parentUnitId", "type", "status"}],
        "references": [{"unitId", "bibleVerseId"}],
        "books": [{"id", "canonicalName", "abbreviation", "testament",
                   "canonicalOrder"}],
        "chapters": [{"id", "bookId", "chapterNumber"}],
        "verses": [{"id", "chapterId", "verseNumber",
                    "canonicalOrderIndex", "segments": [{"translation", "text"}]}]
    }

Cross-record links (unit -> work, page -> parent, verse -> chapter ->
book, reference -> unit) are checked after the individual records
validate. References to verses missing from the file are allowed; the
repository skips them when citations are joined.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from domain.entities import Testament, UnitStatus

# Chapters and verses per book/chapter never reach this bound
ORDER_STRIDE = 1000


def canonical_order_index(book_order: int, chapter_number: int, verse_number: int) -> int:
    """Global verse ordering: book, then chapter, then verse."""
    chapter_index = (book_order - 1) * ORDER_STRIDE + chapter_number
    return chapter_index * ORDER_STRIDE + verse_number


class CorpusModel(BaseModel):
    """Base for corpus records: camelCase aliases, unknown keys rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class WorkRecord(CorpusModel):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    author: Optional[str] = None
    tradition: Optional[str] = None


class UnitRecord(CorpusModel):
    id: str = Field(..., min_length=1)
    work_id: str = Field(..., min_length=1)
    position_index: int = Field(..., ge=1)
    content_text: str = ""
    title: Optional[str] = None
    parent_unit_id: Optional[str] = None
    type: Optional[str] = None
    status: str = UnitStatus.AUTO.value

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: str) -> str:
        allowed = {status.value for status in UnitStatus}
        if value not in allowed:
            raise ValueError(f"status must be one of {sorted(allowed)}")
        return value


class ReferenceRecord(CorpusModel):
    unit_id: str = Field(..., min_length=1)
    bible_verse_id: str = Field(..., min_length=1)


class BookRecord(CorpusModel):
    id: str = Field(..., min_length=1)
    canonical_name: str = Field(..., min_length=1)
    abbreviation: str = Field(..., min_length=1)
    testament: Testament
    canonical_order: int = Field(..., ge=1)


class ChapterRecord(CorpusModel):
    id: str = Field(..., min_length=1)
    book_id: str = Field(..., min_length=1)
    chapter_number: int = Field(..., ge=1)


class SegmentRecord(CorpusModel):
    """Text of a verse in one translation; a verse may carry several."""
    translation: str = Field(..., min_length=1)
    text: str


class VerseRecord(CorpusModel):
    id: str = Field(..., min_length=1)
    chapter_id: str = Field(..., min_length=1)
    verse_number: int = Field(..., ge=1)
    # Derived from book/chapter/verse when omitted
    canonical_order_index: Optional[int] = Field(default=None, ge=0)
    segments: List[SegmentRecord] = Field(default_factory=list)


class CorpusFile(CorpusModel):
    """A complete corpus document."""

    works: List[WorkRecord] = Field(default_factory=list)
    units: List[UnitRecord] = Field(default_factory=list)
    references: List[ReferenceRecord] = Field(default_factory=list)
    books: List[BookRecord] = Field(default_factory=list)
    chapters: List[ChapterRecord] = Field(default_factory=list)
    verses: List[VerseRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_links(self) -> "CorpusFile":
        work_ids = _unique_ids("work", [work.id for work in self.works])
        unit_ids = _unique_ids("unit", [unit.id for unit in self.units])
        book_ids = _unique_ids("book", [book.id for book in self.books])
        chapter_ids = _unique_ids("chapter", [chapter.id for chapter in self.chapters])
        _unique_ids("verse", [verse.id for verse in self.verses])

        units_by_id = {unit.id: unit for unit in self.units}
        for unit in self.units:
            if unit.work_id not in work_ids:
                raise ValueError(f"unit {unit.id} references unknown work {unit.work_id}")
            if unit.parent_unit_id is None:
                continue
            parent = units_by_id.get(unit.parent_unit_id)
            if parent is None:
                raise ValueError(f"unit {unit.id} references unknown parent {unit.parent_unit_id}")
            if parent.work_id != unit.work_id:
                raise ValueError(f"unit {unit.id} and its parent belong to different works")
            if parent.parent_unit_id is not None:
                raise ValueError(f"unit {unit.id} is nested more than one level deep")

        for reference in self.references:
            if reference.unit_id not in unit_ids:
                raise ValueError(f"reference points at unknown unit {reference.unit_id}")

        for chapter in self.chapters:
            if chapter.book_id not in book_ids:
                raise ValueError(f"chapter {chapter.id} references unknown book {chapter.book_id}")

        for verse in self.verses:
            if verse.chapter_id not in chapter_ids:
                raise ValueError(f"verse {verse.id} references unknown chapter {verse.chapter_id}")

        return self


def _unique_ids(kind: str, ids: List[str]) -> set:
    seen: set = set()
    for identifier in ids:
        if identifier in seen:
            raise ValueError(f"duplicate {kind} id {identifier}")
        seen.add(identifier)
    return seen
