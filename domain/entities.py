"""
Theologos - Domain Entities

Immutable entities for the theological library and the scripture canon
it cites. They are materialized per request by a persistence collaborator
(see db.interfaces) and handed to the engine, which never mutates them.

Design Principles:
    - Value objects are frozen dataclasses
    - Identity fields are opaque strings owned by the persistence layer
    - Ordering keys (position_index, canonical_order_index) are integers
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


# =============================================================================
# ENUMS - Known values; unknown strings are still accepted on entities
# =============================================================================


class WorkType(str, Enum):
    """Literary form of a work."""
    CREED = "creed"
    CATECHISM = "catechism"
    CONFESSION = "confession"
    BOOK = "book"


class UnitType(str, Enum):
    """Kind of addressable division within a work."""
    SECTION = "section"
    QUESTION = "question"
    ARTICLE = "article"
    CHAPTER = "chapter"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCKQUOTE = "blockquote"
    PAGE = "page"


class UnitStatus(str, Enum):
    """Editorial review status of a unit."""
    AUTO = "AUTO"
    EDITED = "EDITED"
    REVIEWED = "REVIEWED"


class Testament(str, Enum):
    """Testament designation."""
    OLD_TESTAMENT = "OT"
    NEW_TESTAMENT = "NT"


# =============================================================================
# LIBRARY ENTITIES
# =============================================================================


@dataclass(frozen=True, slots=True)
class Work:
    """A single catechism, creed, confession or book in the corpus."""
    id: str
    title: str
    type: str
    author: Optional[str] = None
    tradition: Optional[str] = None

    @property
    def is_book(self) -> bool:
        return self.type == WorkType.BOOK.value


@dataclass(frozen=True, slots=True)
class Unit:
    """
    An addressable division of a work.

    Units form a two-level tree: top-level units have no parent, pages
    hang beneath a chapter-level unit. position_index is the public
    "number" and is unique within the scope it is queried in.
    """
    id: str
    work_id: str
    position_index: int
    content_text: str = ""
    title: Optional[str] = None
    parent_unit_id: Optional[str] = None
    type: Optional[str] = None
    status: str = UnitStatus.AUTO.value

    @property
    def is_top_level(self) -> bool:
        return self.parent_unit_id is None

    @property
    def is_page(self) -> bool:
        return self.type == UnitType.PAGE.value


@dataclass(frozen=True, slots=True)
class Reference:
    """Association between a unit and a verse it cites. Unordered."""
    unit_id: str
    bible_verse_id: str


# =============================================================================
# CANON ENTITIES
# =============================================================================


@dataclass(frozen=True, slots=True)
class BibleBook:
    """A book of the canon."""
    id: str
    canonical_name: str
    abbreviation: Optional[str] = None
    testament: Optional[str] = None
    canonical_order: Optional[int] = None


@dataclass(frozen=True, slots=True)
class Chapter:
    """A chapter within a book."""
    id: str
    book_id: str
    chapter_number: int


@dataclass(frozen=True, slots=True)
class TextSegment:
    """A verse's text in one translation. segment_index is storage order."""
    verse_id: str
    translation_abbreviation: str
    content_text: str
    segment_index: int = 0


@dataclass(frozen=True, slots=True)
class BibleVerse:
    """
    A verse of the canon.

    canonical_order_index is strictly increasing across the whole canon
    (book, then chapter, then verse) and is the only valid sort key.
    """
    id: str
    canonical_order_index: int
    chapter_id: str
    verse_number: int
    text_segments: Tuple[TextSegment, ...] = field(default_factory=tuple)


# =============================================================================
# ENGINE INPUT / OUTPUT VALUES
# =============================================================================


@dataclass(frozen=True, slots=True)
class ProofTextReference:
    """One verse inside a proof-text group."""
    book: str
    chapter: int
    verse: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "book": self.book,
            "chapter": self.chapter,
            "verse": self.verse,
            "text": self.text,
        }


@dataclass(frozen=True, slots=True)
class Citation:
    """
    A reference joined to its verse, chapter, book and verse text.

    This is the shape the reference clusterer consumes.
    """
    book: str
    chapter: int
    verse: int
    text: str
    canonical_order_index: int

    def to_reference(self) -> ProofTextReference:
        return ProofTextReference(
            book=self.book,
            chapter=self.chapter,
            verse=self.verse,
            text=self.text,
        )


@dataclass(frozen=True, slots=True)
class ProofTextGroup:
    """A labeled cluster of citations from a single chapter."""
    display_text: str
    references: Tuple[ProofTextReference, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "displayText": self.display_text,
            "references": [ref.to_dict() for ref in self.references],
        }
