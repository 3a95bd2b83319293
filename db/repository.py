"""
Theologos - SQLAlchemy Repository

ILibraryRepository backed by the relational schema in db.models. Every
query opens its own short-lived session from the session factory, and
rows are converted to immutable domain entities before the session
closes.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Engine, create_engine, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.errors import LibraryDatabaseError
from db import models as orm
from db.interfaces import ILibraryRepository
from domain import entities as domain
from engine.proof_texts import join_citation
from observability.logging import get_logger

logger = get_logger(__name__)


def create_library_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across sessions."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo)


def create_schema(engine: Engine) -> None:
    """Create all library tables that do not exist yet."""
    orm.Base.metadata.create_all(engine)


def _to_work(row: orm.Work) -> domain.Work:
    return domain.Work(
        id=row.id,
        title=row.title,
        type=row.type,
        author=row.author,
        tradition=row.tradition,
    )


def _to_unit(row: orm.WorkUnit) -> domain.Unit:
    return domain.Unit(
        id=row.id,
        work_id=row.work_id,
        position_index=row.position_index,
        content_text=row.content_text or "",
        title=row.title,
        parent_unit_id=row.parent_unit_id,
        type=row.type,
        status=row.status,
    )


def _to_book(row: orm.BibleBook) -> domain.BibleBook:
    return domain.BibleBook(
        id=row.id,
        canonical_name=row.canonical_name,
        abbreviation=row.abbreviation,
        testament=row.testament,
        canonical_order=row.canonical_order,
    )


def _to_chapter(row: orm.BibleChapter) -> domain.Chapter:
    return domain.Chapter(id=row.id, book_id=row.book_id, chapter_number=row.chapter_number)


def _to_verse(row: orm.BibleVerse, segments: Iterable[domain.TextSegment] = ()) -> domain.BibleVerse:
    return domain.BibleVerse(
        id=row.id,
        canonical_order_index=row.canonical_order_index,
        chapter_id=row.chapter_id,
        verse_number=row.verse_number,
        text_segments=tuple(segments),
    )


class SqlAlchemyLibraryRepository(ILibraryRepository):
    """Read-only library queries over SQLAlchemy sessions."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "SqlAlchemyLibraryRepository":
        engine = create_library_engine(database_url, echo=echo)
        return cls(sessionmaker(bind=engine, expire_on_commit=False))

    def list_works(self) -> List[domain.Work]:
        with self._session_factory() as session:
            rows = session.scalars(select(orm.Work).order_by(orm.Work.title)).all()
            return [_to_work(row) for row in rows]

    def get_work(self, work_id: str) -> Optional[domain.Work]:
        with self._session_factory() as session:
            row = session.get(orm.Work, work_id)
            return _to_work(row) if row else None

    def list_units(self, work_id: str) -> List[domain.Unit]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(orm.WorkUnit).where(orm.WorkUnit.work_id == work_id)
            ).all()
            return [_to_unit(row) for row in rows]

    def get_unit(self, unit_id: str) -> Optional[domain.Unit]:
        with self._session_factory() as session:
            row = session.get(orm.WorkUnit, unit_id)
            return _to_unit(row) if row else None

    def get_unit_by_position(self, work_id: str, position: int) -> Optional[domain.Unit]:
        with self._session_factory() as session:
            row = session.scalars(
                select(orm.WorkUnit)
                .where(
                    orm.WorkUnit.work_id == work_id,
                    orm.WorkUnit.parent_unit_id.is_(None),
                    orm.WorkUnit.position_index == position,
                )
                .limit(1)
            ).first()
            return _to_unit(row) if row else None

    def get_page_by_position(self, work_id: str, position: int) -> Optional[domain.Unit]:
        with self._session_factory() as session:
            row = session.scalars(
                select(orm.WorkUnit)
                .where(
                    orm.WorkUnit.work_id == work_id,
                    orm.WorkUnit.type == domain.UnitType.PAGE.value,
                    orm.WorkUnit.position_index == position,
                )
                .limit(1)
            ).first()
            return _to_unit(row) if row else None

    def get_citations(self, unit_id: str, translation: str) -> List[domain.Citation]:
        with self._session_factory() as session:
            rows = session.execute(
                select(orm.BibleVerse, orm.BibleChapter, orm.BibleBook)
                .join(orm.WorkUnitReference, orm.WorkUnitReference.bible_verse_id == orm.BibleVerse.id)
                .join(orm.BibleChapter, orm.BibleVerse.chapter_id == orm.BibleChapter.id)
                .join(orm.BibleBook, orm.BibleChapter.book_id == orm.BibleBook.id)
                .where(orm.WorkUnitReference.unit_id == unit_id)
            ).all()
            if not rows:
                return []

            segments = self._segments_for(session, [verse.id for verse, _, _ in rows], translation)

            citations = []
            for verse, chapter, book in rows:
                citations.append(join_citation(
                    _to_verse(verse, segments.get(verse.id, ())),
                    _to_chapter(chapter),
                    _to_book(book),
                    translation,
                ))
            return citations

    @staticmethod
    def _segments_for(
        session: Session,
        verse_ids: List[str],
        translation: str,
    ) -> Dict[str, List[domain.TextSegment]]:
        rows = session.execute(
            select(orm.TextSegment.verse_id, orm.TextSegment.content_text, orm.TextSegment.segment_index)
            .join(orm.BibleTranslation, orm.TextSegment.translation_id == orm.BibleTranslation.id)
            .where(
                orm.TextSegment.verse_id.in_(verse_ids),
                orm.BibleTranslation.abbreviation == translation,
            )
            .order_by(orm.TextSegment.verse_id, orm.TextSegment.segment_index)
        ).all()

        by_verse: Dict[str, List[domain.TextSegment]] = defaultdict(list)
        for verse_id, content_text, segment_index in rows:
            by_verse[verse_id].append(domain.TextSegment(
                verse_id=verse_id,
                translation_abbreviation=translation,
                content_text=content_text,
                segment_index=segment_index,
            ))
        return by_verse

    def reference_counts(self, work_id: str) -> Dict[str, int]:
        with self._session_factory() as session:
            rows = session.execute(
                select(orm.WorkUnitReference.unit_id, func.count(orm.WorkUnitReference.id))
                .join(orm.WorkUnit, orm.WorkUnitReference.unit_id == orm.WorkUnit.id)
                .where(orm.WorkUnit.work_id == work_id)
                .group_by(orm.WorkUnitReference.unit_id)
            ).all()
            return {unit_id: count for unit_id, count in rows}

    def list_books(self) -> List[domain.BibleBook]:
        with self._session_factory() as session:
            rows = session.scalars(select(orm.BibleBook).order_by(orm.BibleBook.canonical_order)).all()
            return [_to_book(row) for row in rows]

    def find_book(self, name: str) -> Optional[domain.BibleBook]:
        with self._session_factory() as session:
            row = session.scalars(
                select(orm.BibleBook)
                .where(func.lower(orm.BibleBook.canonical_name) == name.strip().lower())
                .order_by(orm.BibleBook.canonical_order)
                .limit(1)
            ).first()
            return _to_book(row) if row else None

    def list_chapters(self, book_id: str) -> List[domain.Chapter]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(orm.BibleChapter)
                .where(orm.BibleChapter.book_id == book_id)
                .order_by(orm.BibleChapter.chapter_number)
            ).all()
            return [_to_chapter(row) for row in rows]

    def get_chapter(self, book_id: str, chapter_number: int) -> Optional[domain.Chapter]:
        with self._session_factory() as session:
            row = session.scalars(
                select(orm.BibleChapter).where(
                    orm.BibleChapter.book_id == book_id,
                    orm.BibleChapter.chapter_number == chapter_number,
                )
            ).first()
            return _to_chapter(row) if row else None

    def has_translation(self, abbreviation: str) -> bool:
        with self._session_factory() as session:
            found = session.scalar(
                select(orm.BibleTranslation.id)
                .where(orm.BibleTranslation.abbreviation == abbreviation)
                .limit(1)
            )
            return found is not None

    def list_verses(self, chapter_id: str, translation: str) -> List[domain.BibleVerse]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(orm.BibleVerse)
                .where(orm.BibleVerse.chapter_id == chapter_id)
                .order_by(orm.BibleVerse.verse_number)
            ).all()
            if not rows:
                return []
            segments = self._segments_for(session, [row.id for row in rows], translation)
            return [_to_verse(row, segments.get(row.id, ())) for row in rows]


def store_corpus(
    session: Session,
    works: Iterable[domain.Work] = (),
    units: Iterable[domain.Unit] = (),
    references: Iterable[domain.Reference] = (),
    books: Iterable[domain.BibleBook] = (),
    chapters: Iterable[domain.Chapter] = (),
    verses: Iterable[domain.BibleVerse] = (),
) -> None:
    """
    Insert domain entities into the relational schema.

    Translations are created on demand from the abbreviations found on
    text segments. References to verses that are neither in ``verses``
    nor already stored are skipped. The caller owns the transaction.
    """
    translations: Dict[str, orm.BibleTranslation] = {
        row.abbreviation: row for row in session.scalars(select(orm.BibleTranslation)).all()
    }

    for book in books:
        session.add(orm.BibleBook(
            id=book.id,
            canonical_name=book.canonical_name,
            abbreviation=book.abbreviation,
            testament=book.testament,
            canonical_order=book.canonical_order or 0,
        ))
    for chapter in chapters:
        session.add(orm.BibleChapter(
            id=chapter.id,
            book_id=chapter.book_id,
            chapter_number=chapter.chapter_number,
        ))
    verses = list(verses)
    for verse in verses:
        session.add(orm.BibleVerse(
            id=verse.id,
            chapter_id=verse.chapter_id,
            verse_number=verse.verse_number,
            canonical_order_index=verse.canonical_order_index,
        ))
        for position, segment in enumerate(verse.text_segments):
            translation = translations.get(segment.translation_abbreviation)
            if translation is None:
                translation = orm.BibleTranslation(
                    abbreviation=segment.translation_abbreviation,
                    name=segment.translation_abbreviation,
                )
                session.add(translation)
                translations[segment.translation_abbreviation] = translation
            session.add(orm.TextSegment(
                verse_id=verse.id,
                translation=translation,
                segment_index=position,
                content_text=segment.content_text,
            ))

    for work in works:
        session.add(orm.Work(
            id=work.id,
            title=work.title,
            author=work.author,
            type=work.type,
            tradition=work.tradition,
        ))
    # Parents before children so the self-referencing key resolves
    for unit in sorted(units, key=lambda unit: unit.parent_unit_id is not None):
        session.add(orm.WorkUnit(
            id=unit.id,
            work_id=unit.work_id,
            parent_unit_id=unit.parent_unit_id,
            position_index=unit.position_index,
            type=unit.type,
            title=unit.title,
            content_text=unit.content_text,
            status=unit.status,
        ))
    stored_verses = {verse.id for verse in verses}
    references = list(references)
    missing = {reference.bible_verse_id for reference in references} - stored_verses
    if missing:
        stored_verses.update(session.scalars(
            select(orm.BibleVerse.id).where(orm.BibleVerse.id.in_(missing))
        ).all())
    for reference in references:
        if reference.bible_verse_id not in stored_verses:
            logger.warning(
                "Dangling reference skipped",
                unit_id=reference.unit_id,
                bible_verse_id=reference.bible_verse_id,
            )
            continue
        session.add(orm.WorkUnitReference(
            unit_id=reference.unit_id,
            bible_verse_id=reference.bible_verse_id,
        ))

    session.flush()
    logger.info("Corpus stored", translations=sorted(translations))


def import_corpus(database_url: str, echo: bool = False, **entities: Iterable[Any]) -> None:
    """
    Create the schema if needed and store ``entities`` in one transaction.

    Keyword arguments are those of store_corpus.

    Raises:
        LibraryDatabaseError: If the database rejects the schema or the rows
    """
    try:
        engine = create_library_engine(database_url, echo=echo)
    except SQLAlchemyError as e:
        raise LibraryDatabaseError("Invalid database URL", operation="import_corpus", cause=e) from e

    try:
        create_schema(engine)
        with Session(engine) as session, session.begin():
            store_corpus(session, **entities)
    except IntegrityError as e:
        raise LibraryDatabaseError(
            f"Import rejected by the database: {e.orig}",
            operation="import_corpus",
            cause=e,
            suggestions=[
                "The database may already hold these records; import into an empty database",
            ],
        ) from e
    except SQLAlchemyError as e:
        raise LibraryDatabaseError(
            f"Import failed: {e}",
            operation="import_corpus",
            cause=e,
        ) from e
    finally:
        engine.dispose()
