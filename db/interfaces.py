"""
Theologos - Persistence Interfaces

The narrow, read-only query surface the engine consumes: works and
their units, plus the scripture canon (books, chapters, verses) they
cite. Implementations materialize immutable domain entities per call;
the engine never caches or mutates what they return.

Implementations:
    - db.memory.InMemoryLibraryRepository: entities already in memory
    - db.repository.SqlAlchemyLibraryRepository: relational storage

Usage:
    from db.interfaces import ILibraryRepository

    class LibraryReader:
        def __init__(self, repository: ILibraryRepository):
            self._repository = repository
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from domain.entities import BibleBook, BibleVerse, Chapter, Citation, Unit, Work


class ILibraryRepository(ABC):
    """
    Read-only repository over works, their units and the scripture canon.

    Lookups that miss return None or an empty collection; raising
    NotFoundError is the caller's decision.
    """

    @abstractmethod
    def list_works(self) -> List[Work]:
        """All works, ordered by title."""
        pass

    @abstractmethod
    def get_work(self, work_id: str) -> Optional[Work]:
        """Retrieve a work by identifier."""
        pass

    @abstractmethod
    def list_units(self, work_id: str) -> List[Unit]:
        """Every unit of a work (top-level and children), in storage order."""
        pass

    @abstractmethod
    def get_unit(self, unit_id: str) -> Optional[Unit]:
        """Retrieve a unit by identifier."""
        pass

    @abstractmethod
    def get_unit_by_position(self, work_id: str, position: int) -> Optional[Unit]:
        """Top-level unit of a work with the given position index."""
        pass

    @abstractmethod
    def get_page_by_position(self, work_id: str, position: int) -> Optional[Unit]:
        """Page-type unit of a work with the given position index."""
        pass

    @abstractmethod
    def get_citations(self, unit_id: str, translation: str) -> List[Citation]:
        """
        References of a unit joined to verse, chapter, book and the text
        segments of ``translation``. Order is unspecified.
        """
        pass

    @abstractmethod
    def reference_counts(self, work_id: str) -> Dict[str, int]:
        """Number of references per unit id; units without references may be absent."""
        pass

    # Scripture canon

    @abstractmethod
    def list_books(self) -> List[BibleBook]:
        """All books in canonical order."""
        pass

    @abstractmethod
    def find_book(self, name: str) -> Optional[BibleBook]:
        """Book whose canonical name matches ``name`` ignoring case."""
        pass

    @abstractmethod
    def list_chapters(self, book_id: str) -> List[Chapter]:
        """Chapters of a book, ascending by chapter number."""
        pass

    @abstractmethod
    def get_chapter(self, book_id: str, chapter_number: int) -> Optional[Chapter]:
        """A chapter of a book by its number."""
        pass

    @abstractmethod
    def has_translation(self, abbreviation: str) -> bool:
        """Whether any text is stored for the (upper-case) translation."""
        pass

    @abstractmethod
    def list_verses(self, chapter_id: str, translation: str) -> List[BibleVerse]:
        """
        Verses of a chapter, ascending by verse number.

        Each verse carries only the text segments of ``translation``,
        ascending by segment index.
        """
        pass
