"""
Theologos - SQLAlchemy ORM Models

Relational schema for the library corpus (works, units, references) and
the scripture canon it cites (books, chapters, verses, translations,
text segments). Column types are portable so the same models run on
PostgreSQL and SQLite.
"""
from datetime import datetime
from typing import List, Optional
import uuid

from sqlalchemy import (
    DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class BibleBook(Base):
    """Canonical book, ordered by canonical_order."""
    __tablename__ = "bible_books"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    canonical_name: Mapped[str] = mapped_column(String(50), unique=True)
    abbreviation: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    testament: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    canonical_order: Mapped[int] = mapped_column(Integer, index=True)

    chapters: Mapped[List["BibleChapter"]] = relationship(back_populates="book")

    def __repr__(self) -> str:
        return f"<BibleBook {self.canonical_name}>"


class BibleChapter(Base):
    """Chapter of a book."""
    __tablename__ = "bible_chapters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    book_id: Mapped[str] = mapped_column(ForeignKey("bible_books.id", ondelete="CASCADE"), index=True)
    chapter_number: Mapped[int] = mapped_column(Integer)

    book: Mapped[BibleBook] = relationship(back_populates="chapters")
    verses: Mapped[List["BibleVerse"]] = relationship(back_populates="chapter")

    __table_args__ = (
        UniqueConstraint("book_id", "chapter_number", name="uq_chapter_book_number"),
    )


class BibleVerse(Base):
    """Verse with its canon-wide ordering key."""
    __tablename__ = "bible_verses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    chapter_id: Mapped[str] = mapped_column(ForeignKey("bible_chapters.id", ondelete="CASCADE"), index=True)
    verse_number: Mapped[int] = mapped_column(Integer)
    canonical_order_index: Mapped[int] = mapped_column(Integer, unique=True, index=True)

    chapter: Mapped[BibleChapter] = relationship(back_populates="verses")
    text_segments: Mapped[List["TextSegment"]] = relationship(
        back_populates="verse",
        order_by="TextSegment.segment_index",
    )


class BibleTranslation(Base):
    """A translation such as WEB or KJV."""
    __tablename__ = "bible_translations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    abbreviation: Mapped[str] = mapped_column(String(12), unique=True)
    name: Mapped[str] = mapped_column(String(100))


class TextSegment(Base):
    """A verse's text in one translation, split into ordered segments."""
    __tablename__ = "text_segments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    verse_id: Mapped[str] = mapped_column(ForeignKey("bible_verses.id", ondelete="CASCADE"), index=True)
    translation_id: Mapped[str] = mapped_column(ForeignKey("bible_translations.id", ondelete="CASCADE"))
    segment_index: Mapped[int] = mapped_column(Integer, default=0)
    content_text: Mapped[str] = mapped_column(Text)

    verse: Mapped[BibleVerse] = relationship(back_populates="text_segments")
    translation: Mapped[BibleTranslation] = relationship()

    __table_args__ = (
        Index("ix_text_segments_verse_translation", "verse_id", "translation_id"),
    )


class Work(Base):
    """Catechism, creed, confession or book."""
    __tablename__ = "works"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255), index=True)
    author: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    type: Mapped[str] = mapped_column(String(20))
    tradition: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    units: Mapped[List["WorkUnit"]] = relationship(back_populates="work")

    def __repr__(self) -> str:
        return f"<Work {self.title}>"


class WorkUnit(Base):
    """Addressable division of a work; pages point at their chapter."""
    __tablename__ = "work_units"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    work_id: Mapped[str] = mapped_column(ForeignKey("works.id", ondelete="CASCADE"), index=True)
    parent_unit_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("work_units.id", ondelete="CASCADE"), nullable=True, index=True
    )
    position_index: Mapped[int] = mapped_column(Integer)
    type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content_text: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(10), default="AUTO")
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    work: Mapped[Work] = relationship(back_populates="units")
    references: Mapped[List["WorkUnitReference"]] = relationship(back_populates="unit")

    __table_args__ = (
        Index("ix_work_units_work_position", "work_id", "position_index"),
    )


class WorkUnitReference(Base):
    """Many-to-many link between a unit and a cited verse."""
    __tablename__ = "work_unit_references"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    unit_id: Mapped[str] = mapped_column(ForeignKey("work_units.id", ondelete="CASCADE"), index=True)
    bible_verse_id: Mapped[str] = mapped_column(ForeignKey("bible_verses.id", ondelete="CASCADE"), index=True)

    unit: Mapped[WorkUnit] = relationship(back_populates="references")
    bible_verse: Mapped[BibleVerse] = relationship()

    __table_args__ = (
        UniqueConstraint("unit_id", "bible_verse_id", name="uq_unit_reference"),
    )
