"""
Theologos - In-Memory Repository

ILibraryRepository over entities that are already materialized, e.g. a
corpus file loaded by data.loaders or fixtures in tests.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from core.errors import NotFoundError
from db.interfaces import ILibraryRepository
from domain.entities import (
    BibleBook,
    BibleVerse,
    Chapter,
    Citation,
    Reference,
    Unit,
    Work,
)
from engine.navigator import find_page_by_position, find_unit_by_position
from engine.proof_texts import join_citation
from observability.logging import get_logger

logger = get_logger(__name__)


class InMemoryLibraryRepository(ILibraryRepository):
    """Dictionary-backed repository. Storage order is insertion order."""

    def __init__(
        self,
        works: Iterable[Work] = (),
        units: Iterable[Unit] = (),
        references: Iterable[Reference] = (),
        books: Iterable[BibleBook] = (),
        chapters: Iterable[Chapter] = (),
        verses: Iterable[BibleVerse] = (),
    ):
        self._works: Dict[str, Work] = {work.id: work for work in works}
        self._units: Dict[str, Unit] = {unit.id: unit for unit in units}
        self._references: List[Reference] = list(references)
        self._books: Dict[str, BibleBook] = {book.id: book for book in books}
        self._chapters: Dict[str, Chapter] = {chapter.id: chapter for chapter in chapters}
        self._verses: Dict[str, BibleVerse] = {verse.id: verse for verse in verses}

    def __repr__(self) -> str:
        return (
            f"<InMemoryLibraryRepository works={len(self._works)} "
            f"units={len(self._units)} references={len(self._references)}>"
        )

    def list_works(self) -> List[Work]:
        return sorted(self._works.values(), key=lambda work: work.title)

    def get_work(self, work_id: str) -> Optional[Work]:
        return self._works.get(work_id)

    def list_units(self, work_id: str) -> List[Unit]:
        return [unit for unit in self._units.values() if unit.work_id == work_id]

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return self._units.get(unit_id)

    def get_unit_by_position(self, work_id: str, position: int) -> Optional[Unit]:
        try:
            return find_unit_by_position(self.list_units(work_id), position)
        except NotFoundError:
            return None

    def get_page_by_position(self, work_id: str, position: int) -> Optional[Unit]:
        try:
            return find_page_by_position(self.list_units(work_id), position)
        except NotFoundError:
            return None

    def get_citations(self, unit_id: str, translation: str) -> List[Citation]:
        citations: List[Citation] = []
        for reference in self._references:
            if reference.unit_id != unit_id:
                continue
            verse = self._verses.get(reference.bible_verse_id)
            chapter = self._chapters.get(verse.chapter_id) if verse else None
            book = self._books.get(chapter.book_id) if chapter else None
            if verse is None or chapter is None or book is None:
                logger.warning(
                    "Dangling reference skipped",
                    unit_id=unit_id,
                    bible_verse_id=reference.bible_verse_id,
                )
                continue
            citations.append(join_citation(verse, chapter, book, translation))
        return citations

    def reference_counts(self, work_id: str) -> Dict[str, int]:
        unit_ids = {unit.id for unit in self.list_units(work_id)}
        return dict(Counter(
            reference.unit_id
            for reference in self._references
            if reference.unit_id in unit_ids
        ))

    def list_books(self) -> List[BibleBook]:
        return sorted(self._books.values(), key=lambda book: book.canonical_order or 0)

    def find_book(self, name: str) -> Optional[BibleBook]:
        wanted = name.strip().lower()
        for book in self.list_books():
            if book.canonical_name.lower() == wanted:
                return book
        return None

    def list_chapters(self, book_id: str) -> List[Chapter]:
        return sorted(
            (chapter for chapter in self._chapters.values() if chapter.book_id == book_id),
            key=lambda chapter: chapter.chapter_number,
        )

    def get_chapter(self, book_id: str, chapter_number: int) -> Optional[Chapter]:
        for chapter in self._chapters.values():
            if chapter.book_id == book_id and chapter.chapter_number == chapter_number:
                return chapter
        return None

    def has_translation(self, abbreviation: str) -> bool:
        return any(
            segment.translation_abbreviation == abbreviation
            for verse in self._verses.values()
            for segment in verse.text_segments
        )

    def list_verses(self, chapter_id: str, translation: str) -> List[BibleVerse]:
        verses = sorted(
            (verse for verse in self._verses.values() if verse.chapter_id == chapter_id),
            key=lambda verse: verse.verse_number,
        )
        return [
            replace(verse, text_segments=tuple(sorted(
                (segment for segment in verse.text_segments
                 if segment.translation_abbreviation == translation),
                key=lambda segment: segment.segment_index,
            )))
            for verse in verses
        ]
