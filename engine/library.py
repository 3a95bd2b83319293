"""
Theologos - Library Reader

Composes the persistence collaborator with the pure engine modules into
read models ready for a transport layer or the CLI:

    reader = LibraryReader(repository)
    outline = reader.get_outline("wsc")
    unit = reader.get_unit("wsc", "1")
    page = reader.get_page("calvins-institutes", 12)
    listing = reader.list_units("wsc", status="REVIEWED", limit=20)
    chapter = reader.get_chapter("WEB", "romans", 8)

Raw position values are validated before any lookup, so a malformed
number surfaces as InvalidArgumentError and a valid one that matches
nothing as NotFoundError.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from opentelemetry import trace

from core.errors import ErrorContext, InvalidArgumentError, NotFoundError
from core.validation import (
    DEFAULT_PAGE_SIZE,
    normalize_translation,
    parse_limit,
    parse_offset,
    parse_position,
)
from db.interfaces import ILibraryRepository
from domain.entities import ProofTextGroup, Unit, UnitStatus, Work
from engine.content import DISPLAY_LIMIT, parse_primary_secondary, parse_unit_display
from engine.navigator import (
    UnitNavigation,
    addressable_count,
    default_unit_type,
    filter_units,
    sibling_navigation,
    status_counts,
    top_level_units,
)
from engine.proof_texts import group_proof_texts
from engine.slugger import Slugger
from observability.logging import get_logger

logger = get_logger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(frozen=True, slots=True)
class WorkSummary:
    """One row of the works listing."""
    id: str
    title: str
    slug: str
    type: str
    author: Optional[str] = None
    tradition: Optional[str] = None
    unit_count: int = 0
    auto_count: int = 0
    edited_count: int = 0
    reviewed_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "type": self.type,
            "author": self.author,
            "tradition": self.tradition,
            "unitCount": self.unit_count,
            "autoCount": self.auto_count,
            "editedCount": self.edited_count,
            "reviewedCount": self.reviewed_count,
        }


@dataclass(frozen=True, slots=True)
class UnitSummary:
    """Outline entry for a top-level unit."""
    number: int
    display_text: str
    has_references: bool = False
    first_page: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "displayText": self.display_text,
            "hasReferences": self.has_references,
            "firstPage": self.first_page,
        }


@dataclass(frozen=True, slots=True)
class WorkOutline:
    """A work with labels for each of its top-level units."""
    slug: str
    title: str
    type: str
    author: Optional[str] = None
    tradition: Optional[str] = None
    units: Tuple[UnitSummary, ...] = field(default_factory=tuple)
    total_units: int = 0
    total_pages: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slug": self.slug,
            "title": self.title,
            "type": self.type,
            "author": self.author,
            "tradition": self.tradition,
            "units": [unit.to_dict() for unit in self.units],
            "totalUnits": self.total_units,
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True, slots=True)
class UnitDetail:
    """A top-level unit split into question/answer with its proof texts."""
    work_slug: str
    work_title: str
    number: int
    primary_text: str
    secondary_text: str = ""
    proof_texts: Tuple[ProofTextGroup, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workSlug": self.work_slug,
            "workTitle": self.work_title,
            "number": self.number,
            "primaryText": self.primary_text,
            "secondaryText": self.secondary_text,
            "proofTexts": [group.to_dict() for group in self.proof_texts],
        }


@dataclass(frozen=True, slots=True)
class PageDetail:
    """A page of a book with its enclosing chapter."""
    work_slug: str
    work_title: str
    page_number: int
    content: str
    chapter_number: Optional[int] = None
    chapter_title: Optional[str] = None
    proof_texts: Tuple[ProofTextGroup, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workSlug": self.work_slug,
            "workTitle": self.work_title,
            "pageNumber": self.page_number,
            "chapterNumber": self.chapter_number,
            "chapterTitle": self.chapter_title,
            "content": self.content,
            "proofTexts": [group.to_dict() for group in self.proof_texts],
        }


@dataclass(frozen=True, slots=True)
class UnitListItem:
    """One row of a filtered unit listing."""
    id: str
    position_index: int
    title: Optional[str] = None
    type: Optional[str] = None
    status: str = UnitStatus.AUTO.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "positionIndex": self.position_index,
            "title": self.title,
            "type": self.type,
            "status": self.status,
        }


@dataclass(frozen=True, slots=True)
class UnitListing:
    """A page of a work's units after status and type filtering."""
    work_slug: str
    unit_type: str
    status: Optional[str]
    units: Tuple[UnitListItem, ...]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.units) < self.total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workSlug": self.work_slug,
            "type": self.unit_type,
            "status": self.status,
            "workUnits": [unit.to_dict() for unit in self.units],
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "hasMore": self.has_more,
        }


@dataclass(frozen=True, slots=True)
class BookSummary:
    """A book of the canon with the chapter numbers stored for it."""
    name: str
    abbreviation: Optional[str] = None
    testament: Optional[str] = None
    canonical_order: Optional[int] = None
    chapters: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def chapter_count(self) -> int:
        return len(self.chapters)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "abbreviation": self.abbreviation,
            "testament": self.testament,
            "canonicalOrder": self.canonical_order,
            "chapterCount": self.chapter_count,
            "chapters": list(self.chapters),
        }


@dataclass(frozen=True, slots=True)
class VerseText:
    number: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"number": self.number, "text": self.text}


@dataclass(frozen=True, slots=True)
class ChapterText:
    """A chapter of a book read in one translation."""
    translation: str
    book: str
    testament: Optional[str]
    chapter_number: int
    verses: Tuple[VerseText, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "translation": {"abbreviation": self.translation},
            "book": {"name": self.book, "testament": self.testament},
            "chapter": {"number": self.chapter_number, "verseCount": len(self.verses)},
            "verses": [verse.to_dict() for verse in self.verses],
        }


class LibraryReader:
    """
    Read-side facade over a library repository.

    Holds no state beyond its collaborators; every call fetches fresh
    entities from the repository.
    """

    def __init__(
        self,
        repository: ILibraryRepository,
        slugger: Optional[Slugger] = None,
        translation: str = "WEB",
        display_limit: int = DISPLAY_LIMIT,
    ):
        self.repository = repository
        self.slugger = slugger or Slugger()
        self.translation = normalize_translation(translation)
        self.display_limit = display_limit

    def list_works(self) -> List[WorkSummary]:
        """Every work with its slug and review status counts."""
        summaries = []
        for work in self.repository.list_works():
            units = self.repository.list_units(work.id)
            counts = status_counts(units)
            summaries.append(WorkSummary(
                id=work.id,
                title=work.title,
                slug=self.slugger.slug_for_title(work.title),
                type=work.type,
                author=work.author,
                tradition=work.tradition,
                unit_count=len(units),
                auto_count=counts[UnitStatus.AUTO.value],
                edited_count=counts[UnitStatus.EDITED.value],
                reviewed_count=counts[UnitStatus.REVIEWED.value],
            ))
        return summaries

    def resolve_work(self, slug: str) -> Work:
        """
        Resolve a slug to a stored work.

        Raises:
            NotFoundError: If no work matches
            AmbiguousSlugError: If several distinct titles derive the slug
        """
        with tracer.start_as_current_span("library.resolve_work") as span:
            span.set_attribute("work.slug", slug)
            work = self.slugger.resolve_work(slug, self.repository.list_works())
            logger.debug("Work resolved", work_slug=slug, work_id=work.id)
            return work

    def get_outline(self, slug: str) -> WorkOutline:
        """Outline of a work: one label per top-level unit."""
        with tracer.start_as_current_span("library.get_outline") as span:
            span.set_attribute("work.slug", slug)
            work = self.resolve_work(slug)
            units = self.repository.list_units(work.id)
            counts = self.repository.reference_counts(work.id)

            summaries = []
            for unit in top_level_units(units):
                display = parse_unit_display(work, unit, units, limit=self.display_limit)
                summaries.append(UnitSummary(
                    number=unit.position_index,
                    display_text=display.display_text,
                    has_references=counts.get(unit.id, 0) > 0,
                    first_page=display.first_page,
                ))

            return WorkOutline(
                slug=slug,
                title=work.title,
                type=work.type,
                author=work.author,
                tradition=work.tradition,
                units=tuple(summaries),
                total_units=len(summaries),
                total_pages=addressable_count(units),
            )

    def get_unit(self, slug: str, number: Union[str, int]) -> UnitDetail:
        """
        A top-level unit by its number within the work.

        Raises:
            InvalidArgumentError: If number is not an integer >= 1
            NotFoundError: If the work or the unit does not exist
        """
        position = parse_position(number, "unit")
        with tracer.start_as_current_span("library.get_unit") as span:
            span.set_attribute("work.slug", slug)
            span.set_attribute("unit.number", position)
            work = self.resolve_work(slug)

            unit = self.repository.get_unit_by_position(work.id, position)
            if unit is None:
                raise NotFoundError(
                    f"Unit {position} not found",
                    resource="unit",
                    identifier=position,
                    context=ErrorContext.from_current_span(
                        operation="get_unit", component="library", work_slug=slug, position=position,
                    ),
                )

            text = parse_primary_secondary(unit.content_text)
            return UnitDetail(
                work_slug=slug,
                work_title=work.title,
                number=unit.position_index,
                primary_text=text.primary_text,
                secondary_text=text.secondary_text,
                proof_texts=self._proof_texts(unit),
            )

    def get_page(self, slug: str, number: Union[str, int]) -> PageDetail:
        """
        A page of a work with the chapter it belongs to.

        Raises:
            InvalidArgumentError: If number is not an integer >= 1
            NotFoundError: If the work or the page does not exist
        """
        position = parse_position(number, "page")
        with tracer.start_as_current_span("library.get_page") as span:
            span.set_attribute("work.slug", slug)
            span.set_attribute("page.number", position)
            work = self.resolve_work(slug)

            page = self.repository.get_page_by_position(work.id, position)
            if page is None:
                raise NotFoundError(
                    f"Page {position} not found",
                    resource="page",
                    identifier=position,
                    context=ErrorContext.from_current_span(
                        operation="get_page", component="library", work_slug=slug, position=position,
                    ),
                )

            chapter = None
            if page.parent_unit_id is not None:
                chapter = self.repository.get_unit(page.parent_unit_id)

            return PageDetail(
                work_slug=slug,
                work_title=work.title,
                page_number=page.position_index,
                content=page.content_text,
                chapter_number=chapter.position_index if chapter else None,
                chapter_title=chapter.title if chapter else None,
                proof_texts=self._proof_texts(page),
            )

    def get_navigation(self, unit_id: str) -> UnitNavigation:
        """
        Previous/next context for a unit among units of its type.

        Raises:
            NotFoundError: If the unit does not exist
        """
        unit = self.repository.get_unit(unit_id)
        if unit is None:
            raise NotFoundError(
                f"Unit not found: {unit_id}",
                resource="unit",
                identifier=unit_id,
            )
        return sibling_navigation(self.repository.list_units(unit.work_id), unit)

    def list_units(
        self,
        slug: str,
        status: Optional[str] = None,
        unit_type: Optional[str] = None,
        limit: Union[str, int] = DEFAULT_PAGE_SIZE,
        offset: Union[str, int] = 0,
    ) -> UnitListing:
        """
        A page of a work's units, filtered by review status and type.

        Without ``unit_type`` books list paragraphs and other works list
        questions.

        Raises:
            InvalidArgumentError: If limit is not in 1-200, offset is
                negative or status is unknown
            NotFoundError: If the work does not exist
        """
        page_size = parse_limit(limit)
        start = parse_offset(offset)
        status = _status_filter(status)
        with tracer.start_as_current_span("library.list_units") as span:
            span.set_attribute("work.slug", slug)
            work = self.resolve_work(slug)
            unit_type = unit_type or default_unit_type(work)

            matches = filter_units(self.repository.list_units(work.id), status, unit_type)
            return UnitListing(
                work_slug=slug,
                unit_type=unit_type,
                status=status,
                units=tuple(
                    UnitListItem(
                        id=unit.id,
                        position_index=unit.position_index,
                        title=unit.title,
                        type=unit.type,
                        status=unit.status,
                    )
                    for unit in matches[start:start + page_size]
                ),
                total=len(matches),
                limit=page_size,
                offset=start,
            )

    def list_books(self) -> List[BookSummary]:
        """Every book of the canon in canonical order."""
        return [
            BookSummary(
                name=book.canonical_name,
                abbreviation=book.abbreviation,
                testament=book.testament,
                canonical_order=book.canonical_order,
                chapters=tuple(
                    chapter.chapter_number for chapter in self.repository.list_chapters(book.id)
                ),
            )
            for book in self.repository.list_books()
        ]

    def get_chapter(
        self,
        translation: str,
        book_name: str,
        number: Union[str, int],
    ) -> ChapterText:
        """
        The verses of a chapter in one translation.

        The book name matches ignoring case. A verse's segments are joined
        with newlines; a verse with no text in the translation reads as "".

        Raises:
            InvalidArgumentError: If the translation or chapter number is malformed
            NotFoundError: If the translation, book or chapter does not exist
        """
        abbreviation = normalize_translation(translation)
        chapter_number = parse_position(number, "chapter")
        with tracer.start_as_current_span("library.get_chapter") as span:
            span.set_attribute("bible.translation", abbreviation)
            span.set_attribute("bible.book", book_name)
            span.set_attribute("bible.chapter", chapter_number)

            if not self.repository.has_translation(abbreviation):
                raise NotFoundError(
                    f'Translation "{translation}" not found',
                    resource="translation",
                    identifier=abbreviation,
                )
            book = self.repository.find_book(book_name)
            if book is None:
                raise NotFoundError(
                    f'Book "{book_name}" not found',
                    resource="book",
                    identifier=book_name,
                )
            chapter = self.repository.get_chapter(book.id, chapter_number)
            if chapter is None:
                raise NotFoundError(
                    f"Chapter {chapter_number} not found in {book_name}",
                    resource="chapter",
                    identifier=chapter_number,
                )

            verses = self.repository.list_verses(chapter.id, abbreviation)
            return ChapterText(
                translation=abbreviation,
                book=book.canonical_name,
                testament=book.testament,
                chapter_number=chapter.chapter_number,
                verses=tuple(
                    VerseText(
                        number=verse.verse_number,
                        text="\n".join(segment.content_text for segment in verse.text_segments),
                    )
                    for verse in verses
                ),
            )

    def _proof_texts(self, unit: Unit) -> Tuple[ProofTextGroup, ...]:
        citations = self.repository.get_citations(unit.id, self.translation)
        groups = group_proof_texts(citations)
        logger.debug(
            "Proof texts grouped",
            unit_id=unit.id,
            citations=len(citations),
            groups=len(groups),
        )
        return tuple(groups)


def _status_filter(status: Optional[str]) -> Optional[str]:
    if status is None:
        return None
    normalized = status.strip().upper()
    allowed = [member.value for member in UnitStatus]
    if normalized not in allowed:
        raise InvalidArgumentError(
            f"Invalid status '{status}' (must be one of {', '.join(allowed)})",
            field_name="status",
            actual_value=status,
        )
    return normalized
