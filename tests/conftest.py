"""
Theologos - Test Configuration

Pytest fixtures and configuration for all tests.

One small corpus document backs every fixture: the Westminster Shorter
Catechism (three questions), the Apostles' Creed (two sections) and a
book with two chapters and three pages. The same document is loaded into
the in-memory repository, written to a JSON file for the CLI and stored
in an in-memory SQLite database.
"""
import copy
import json
from pathlib import Path
from typing import Any, Dict, List

import pytest
from sqlalchemy.orm import Session, sessionmaker

from data.loaders import Corpus, parse_corpus
from db.memory import InMemoryLibraryRepository
from db.repository import (
    SqlAlchemyLibraryRepository,
    create_library_engine,
    create_schema,
    store_corpus,
)
from domain.entities import Citation, Unit, Work
from engine.library import LibraryReader
from engine.slugger import Slugger


WSC_TITLE = "Westminster Shorter Catechism"
CREED_TITLE = "Apostles' Creed"
INSTITUTES_TITLE = "Calvin's Institutes of the Christian Religion"


CORPUS_DOCUMENT: Dict[str, Any] = {
    "books": [
        {"id": "gen", "canonicalName": "Genesis", "abbreviation": "Gen", "testament": "OT", "canonicalOrder": 1},
        {"id": "psa", "canonicalName": "Psalms", "abbreviation": "Ps", "testament": "OT", "canonicalOrder": 19},
        {"id": "jhn", "canonicalName": "John", "abbreviation": "John", "testament": "NT", "canonicalOrder": 43},
        {"id": "rom", "canonicalName": "Romans", "abbreviation": "Rom", "testament": "NT", "canonicalOrder": 45},
        {"id": "1co", "canonicalName": "1 Corinthians", "abbreviation": "1Cor", "testament": "NT", "canonicalOrder": 46},
    ],
    "chapters": [
        {"id": "gen-1", "bookId": "gen", "chapterNumber": 1},
        {"id": "psa-73", "bookId": "psa", "chapterNumber": 73},
        {"id": "jhn-3", "bookId": "jhn", "chapterNumber": 3},
        {"id": "rom-8", "bookId": "rom", "chapterNumber": 8},
        {"id": "rom-11", "bookId": "rom", "chapterNumber": 11},
        {"id": "1co-10", "bookId": "1co", "chapterNumber": 10},
    ],
    "verses": [
        {"id": "gen-1-1", "chapterId": "gen-1", "verseNumber": 1, "segments": [
            {"translation": "WEB", "text": "In the beginning, God created the heavens and the earth."},
        ]},
        {"id": "psa-73-25", "chapterId": "psa-73", "verseNumber": 25, "segments": [
            {"translation": "WEB", "text": "Who do I have in heaven but you? There is no one on earth who I desire besides you."},
        ]},
        {"id": "psa-73-26", "chapterId": "psa-73", "verseNumber": 26, "segments": [
            {"translation": "WEB", "text": "My flesh and my heart fails, but God is the strength of my heart and my portion forever."},
        ]},
        {"id": "jhn-3-16", "chapterId": "jhn-3", "verseNumber": 16, "segments": [
            {"translation": "WEB", "text": "For God so loved the world, that he gave his only born Son,"},
            {"translation": "KJV", "text": "For God so loved the world, that he gave his only begotten Son,"},
            {"translation": "WEB", "text": "that whoever believes in him should not perish, but have eternal life."},
        ]},
        {"id": "jhn-3-18", "chapterId": "jhn-3", "verseNumber": 18, "segments": [
            {"translation": "WEB", "text": "He who believes in him is not judged."},
        ]},
        {"id": "rom-8-28", "chapterId": "rom-8", "verseNumber": 28, "segments": [
            {"translation": "WEB", "text": "We know that all things work together for good for those who love God,"},
            {"translation": "WEB", "text": "for those who are called according to his purpose."},
        ]},
        {"id": "rom-8-29", "chapterId": "rom-8", "verseNumber": 29, "segments": [
            {"translation": "WEB", "text": "For whom he foreknew, he also predestined to be conformed to the image of his Son."},
        ]},
        {"id": "rom-8-30", "chapterId": "rom-8", "verseNumber": 30, "segments": [
            {"translation": "WEB", "text": "Whom he predestined, those he also called."},
        ]},
        {"id": "rom-11-36", "chapterId": "rom-11", "verseNumber": 36, "segments": [
            {"translation": "WEB", "text": "For of him, and through him, and to him, are all things. To him be the glory for ever! Amen."},
        ]},
        {"id": "1co-10-31", "chapterId": "1co-10", "verseNumber": 31, "segments": [
            {"translation": "WEB", "text": "Whether therefore you eat, or drink, or whatever you do, do all to the glory of God."},
        ]},
    ],
    "works": [
        {"id": "wsc", "title": WSC_TITLE, "type": "catechism",
         "author": "Westminster Assembly", "tradition": "Reformed"},
        {"id": "apc", "title": CREED_TITLE, "type": "creed"},
        {"id": "inst", "title": INSTITUTES_TITLE, "type": "book", "author": "John Calvin"},
    ],
    "units": [
        {"id": "wsc-q1", "workId": "wsc", "positionIndex": 1, "type": "question", "status": "REVIEWED",
         "contentText": "Q. What is the chief end of man?\n"
                        "A. Man's chief end is to glorify God, and to enjoy him forever."},
        {"id": "wsc-q2", "workId": "wsc", "positionIndex": 2, "type": "question", "status": "EDITED",
         "contentText": "Q. What rule hath God given to direct us how we may glorify and enjoy him?\n"
                        "A. The Word of God is the only rule to direct us how we may glorify and enjoy him."},
        {"id": "wsc-q3", "workId": "wsc", "positionIndex": 3, "type": "question",
         "contentText": "Q. What do the scriptures principally teach?\n"
                        "A. The scriptures principally teach what man is to believe concerning God."},
        {"id": "apc-1", "workId": "apc", "positionIndex": 1, "type": "section",
         "contentText": "I believe in God, the Father Almighty, maker of heaven and earth."},
        {"id": "apc-2", "workId": "apc", "positionIndex": 2, "type": "section",
         "contentText": "And in Jesus Christ his only Son our Lord;"},
        {"id": "inst-ch1", "workId": "inst", "positionIndex": 1, "type": "chapter",
         "title": "Chapter 1\nThe Knowledge of God and of Ourselves"},
        {"id": "inst-ch2", "workId": "inst", "positionIndex": 2, "type": "chapter",
         "title": "Chapter 2\nWhat it is to Know God"},
        {"id": "inst-p1", "workId": "inst", "positionIndex": 1, "type": "page", "parentUnitId": "inst-ch1",
         "contentText": "Our wisdom consists almost entirely of two parts: the knowledge of God and of ourselves."},
        {"id": "inst-p2", "workId": "inst", "positionIndex": 2, "type": "page", "parentUnitId": "inst-ch1",
         "contentText": "Again, it is certain that man never attains to a true self-knowledge."},
        {"id": "inst-p3", "workId": "inst", "positionIndex": 3, "type": "page", "parentUnitId": "inst-ch2",
         "contentText": "By the knowledge of God, I understand that by which we not only conceive that there is a God."},
    ],
    "references": [
        {"unitId": "wsc-q1", "bibleVerseId": "1co-10-31"},
        {"unitId": "wsc-q1", "bibleVerseId": "rom-11-36"},
        {"unitId": "wsc-q1", "bibleVerseId": "psa-73-25"},
        {"unitId": "wsc-q1", "bibleVerseId": "psa-73-26"},
        {"unitId": "wsc-q2", "bibleVerseId": "rom-8-30"},
        {"unitId": "wsc-q2", "bibleVerseId": "rom-8-28"},
        {"unitId": "wsc-q2", "bibleVerseId": "rom-8-29"},
        {"unitId": "wsc-q2", "bibleVerseId": "jhn-3-18"},
        {"unitId": "wsc-q2", "bibleVerseId": "jhn-3-16"},
        {"unitId": "wsc-q2", "bibleVerseId": "gen-1-1"},
        {"unitId": "inst-p1", "bibleVerseId": "gen-1-1"},
    ],
}


def make_citation(book: str, chapter: int, verse: int, order: int, text: str = "") -> Citation:
    """Citation with the given canonical position."""
    return Citation(book=book, chapter=chapter, verse=verse, text=text, canonical_order_index=order)


@pytest.fixture
def corpus_document() -> Dict[str, Any]:
    """A fresh copy of the sample corpus document."""
    return copy.deepcopy(CORPUS_DOCUMENT)


@pytest.fixture
def corpus(corpus_document) -> Corpus:
    """The sample corpus as domain entities."""
    return parse_corpus(corpus_document, source="conftest")


@pytest.fixture
def works_by_id(corpus) -> Dict[str, Work]:
    return {work.id: work for work in corpus.works}


@pytest.fixture
def units_by_work(corpus) -> Dict[str, List[Unit]]:
    grouped: Dict[str, List[Unit]] = {}
    for unit in corpus.units:
        grouped.setdefault(unit.work_id, []).append(unit)
    return grouped


@pytest.fixture
def memory_repository(corpus) -> InMemoryLibraryRepository:
    """In-memory repository over the sample corpus."""
    return corpus.to_repository()


@pytest.fixture
def sqlite_repository(corpus) -> SqlAlchemyLibraryRepository:
    """SQLAlchemy repository over an in-memory SQLite copy of the corpus."""
    engine = create_library_engine("sqlite://")
    create_schema(engine)
    with Session(engine) as session, session.begin():
        store_corpus(
            session,
            works=corpus.works,
            units=corpus.units,
            references=corpus.references,
            books=corpus.books,
            chapters=corpus.chapters,
            verses=corpus.verses,
        )
    yield SqlAlchemyLibraryRepository(sessionmaker(bind=engine, expire_on_commit=False))
    engine.dispose()


@pytest.fixture(params=["memory", "sqlite"])
def repository(request):
    """Each repository implementation in turn."""
    return request.getfixturevalue(f"{request.param}_repository")


@pytest.fixture
def reader(memory_repository) -> LibraryReader:
    return LibraryReader(memory_repository, slugger=Slugger())


@pytest.fixture
def corpus_file(tmp_path, corpus_document) -> Path:
    """The sample corpus written to a JSON file."""
    path = tmp_path / "corpus.json"
    path.write_text(json.dumps(corpus_document), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_library_env(monkeypatch):
    """Keep a developer's environment from leaking into config-driven code."""
    for name in (
        "DATABASE_URL",
        "LIBRARY_CORPUS",
        "LIBRARY_SLUG_OVERRIDES",
        "LIBRARY_TRANSLATION",
        "LIBRARY_DISPLAY_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)

    import config
    monkeypatch.setattr(config, "_config", None)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks tests touching a database or files")
    config.addinivalue_line("markers", "property: marks property-based tests using Hypothesis")
