"""
Theologos - Corpus Loaders

Read a JSON corpus file, validate it against data.schemas and turn it
into domain entities, either wrapped in an InMemoryLibraryRepository or
handed to db.repository.store_corpus for relational storage.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import ValidationError

from core.errors import CorpusFormatError
from core.validation import normalize_translation
from data.schemas import CorpusFile, canonical_order_index
from db.memory import InMemoryLibraryRepository
from domain.entities import (
    BibleBook,
    BibleVerse,
    Chapter,
    Reference,
    TextSegment,
    Unit,
    Work,
)
from observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Corpus:
    """Domain entities parsed from one corpus document."""
    works: List[Work] = field(default_factory=list)
    units: List[Unit] = field(default_factory=list)
    references: List[Reference] = field(default_factory=list)
    books: List[BibleBook] = field(default_factory=list)
    chapters: List[Chapter] = field(default_factory=list)
    verses: List[BibleVerse] = field(default_factory=list)

    def to_repository(self) -> InMemoryLibraryRepository:
        return InMemoryLibraryRepository(
            works=self.works,
            units=self.units,
            references=self.references,
            books=self.books,
            chapters=self.chapters,
            verses=self.verses,
        )

    def stats(self) -> Dict[str, int]:
        return {
            "works": len(self.works),
            "units": len(self.units),
            "references": len(self.references),
            "books": len(self.books),
            "chapters": len(self.chapters),
            "verses": len(self.verses),
        }


def parse_corpus(raw: Dict[str, Any], source: str = "<memory>") -> Corpus:
    """
    Validate a decoded corpus document and convert it to entities.

    Raises:
        CorpusFormatError: If the document fails validation
    """
    try:
        document = CorpusFile.model_validate(raw)
    except ValidationError as e:
        raise CorpusFormatError(
            f"Invalid corpus {source}: {e.error_count()} validation error(s)",
            source=source,
            cause=e,
            suggestions=[str(error["loc"]) + ": " + error["msg"] for error in e.errors()[:5]],
        ) from e

    books = [
        BibleBook(
            id=record.id,
            canonical_name=record.canonical_name,
            abbreviation=record.abbreviation,
            testament=record.testament.value,
            canonical_order=record.canonical_order,
        )
        for record in document.books
    ]
    chapters = [
        Chapter(id=record.id, book_id=record.book_id, chapter_number=record.chapter_number)
        for record in document.chapters
    ]

    books_by_id = {book.id: book for book in books}
    chapters_by_id = {chapter.id: chapter for chapter in chapters}

    verses = []
    for record in document.verses:
        order_index = record.canonical_order_index
        if order_index is None:
            chapter = chapters_by_id[record.chapter_id]
            book = books_by_id[chapter.book_id]
            order_index = canonical_order_index(
                book.canonical_order,
                chapter.chapter_number,
                record.verse_number,
            )
        verses.append(BibleVerse(
            id=record.id,
            canonical_order_index=order_index,
            chapter_id=record.chapter_id,
            verse_number=record.verse_number,
            text_segments=tuple(
                TextSegment(
                    verse_id=record.id,
                    translation_abbreviation=_translation(segment.translation, source),
                    content_text=segment.text,
                    segment_index=position,
                )
                for position, segment in enumerate(record.segments)
            ),
        ))

    return Corpus(
        works=[
            Work(
                id=record.id,
                title=record.title,
                type=record.type,
                author=record.author,
                tradition=record.tradition,
            )
            for record in document.works
        ],
        units=[
            Unit(
                id=record.id,
                work_id=record.work_id,
                position_index=record.position_index,
                content_text=record.content_text,
                title=record.title,
                parent_unit_id=record.parent_unit_id,
                type=record.type,
                status=record.status,
            )
            for record in document.units
        ],
        references=[
            Reference(unit_id=record.unit_id, bible_verse_id=record.bible_verse_id)
            for record in document.references
        ],
        books=books,
        chapters=chapters,
        verses=verses,
    )


def _translation(abbreviation: str, source: str) -> str:
    try:
        return normalize_translation(abbreviation)
    except ValueError as e:
        raise CorpusFormatError(
            f"Invalid translation abbreviation in {source}: {abbreviation!r}",
            source=source,
            cause=e,
        ) from e


def read_corpus(path: Union[str, Path]) -> Corpus:
    """
    Load and validate a corpus file.

    Raises:
        CorpusFormatError: If the file is missing, not JSON or invalid
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CorpusFormatError(f"Corpus file not found: {path}", source=str(path), cause=e) from e
    except json.JSONDecodeError as e:
        raise CorpusFormatError(
            f"Corpus file is not valid JSON: {path} (line {e.lineno})",
            source=str(path),
            cause=e,
        ) from e

    if not isinstance(raw, dict):
        raise CorpusFormatError(
            f"Corpus file must contain a JSON object: {path}",
            source=str(path),
        )

    corpus = parse_corpus(raw, source=str(path))
    logger.info("Corpus loaded", path=str(path), **corpus.stats())
    return corpus


def load_corpus(path: Union[str, Path]) -> InMemoryLibraryRepository:
    """Load a corpus file straight into an in-memory repository."""
    return read_corpus(path).to_repository()
