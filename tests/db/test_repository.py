"""
Tests for the library repositories (db/memory.py, db/repository.py).
"""
import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from core.errors import LibraryDatabaseError
from db import models as orm
from db.memory import InMemoryLibraryRepository
from db.repository import (
    SqlAlchemyLibraryRepository,
    create_library_engine,
    create_schema,
    import_corpus,
    store_corpus,
)
from domain.entities import BibleBook, BibleVerse, Chapter, Reference, TextSegment, Unit, Work


class TestRepositoryContract:
    """Behaviour shared by every ILibraryRepository implementation."""

    def test_list_works_ordered_by_title(self, repository):
        assert [work.id for work in repository.list_works()] == ["apc", "inst", "wsc"]

    def test_get_work(self, repository):
        work = repository.get_work("wsc")
        assert work.title == "Westminster Shorter Catechism"
        assert work.author == "Westminster Assembly"
        assert repository.get_work("missing") is None

    def test_list_units_includes_children(self, repository):
        ids = {unit.id for unit in repository.list_units("inst")}
        assert ids == {"inst-ch1", "inst-ch2", "inst-p1", "inst-p2", "inst-p3"}

    def test_get_unit_round_trips_fields(self, repository):
        unit = repository.get_unit("inst-p3")
        assert unit == Unit(
            id="inst-p3",
            work_id="inst",
            position_index=3,
            content_text="By the knowledge of God, I understand that by which we not only conceive that there is a God.",
            title=None,
            parent_unit_id="inst-ch2",
            type="page",
            status="AUTO",
        )

    def test_get_unit_by_position_is_top_level_only(self, repository):
        assert repository.get_unit_by_position("inst", 1).id == "inst-ch1"
        assert repository.get_unit_by_position("inst", 3) is None

    def test_get_page_by_position(self, repository):
        assert repository.get_page_by_position("inst", 1).id == "inst-p1"
        assert repository.get_page_by_position("wsc", 1) is None

    def test_get_citations(self, repository):
        citations = sorted(
            repository.get_citations("wsc-q1", "WEB"),
            key=lambda citation: citation.canonical_order_index,
        )
        assert [(c.book, c.chapter, c.verse) for c in citations] == [
            ("Psalms", 73, 25),
            ("Psalms", 73, 26),
            ("Romans", 11, 36),
            ("1 Corinthians", 10, 31),
        ]
        assert citations[0].canonical_order_index == 18073025

    def test_citations_for_unit_without_references(self, repository):
        assert repository.get_citations("wsc-q3", "WEB") == []

    def test_reference_counts(self, repository):
        assert repository.reference_counts("wsc") == {"wsc-q1": 4, "wsc-q2": 6}
        assert repository.reference_counts("apc") == {}

    def test_list_books_in_canonical_order(self, repository):
        assert [book.canonical_name for book in repository.list_books()] == [
            "Genesis", "Psalms", "John", "Romans", "1 Corinthians",
        ]

    @pytest.mark.parametrize("name", ["Romans", "romans", "ROMANS", " Romans "])
    def test_find_book_ignores_case(self, repository, name):
        book = repository.find_book(name)
        assert book.id == "rom"
        assert book.testament == "NT"

    def test_find_missing_book(self, repository):
        assert repository.find_book("Hezekiah") is None

    def test_list_chapters(self, repository):
        assert [chapter.chapter_number for chapter in repository.list_chapters("rom")] == [8, 11]
        assert repository.list_chapters("missing") == []

    def test_get_chapter(self, repository):
        assert repository.get_chapter("rom", 8).id == "rom-8"
        assert repository.get_chapter("rom", 9) is None

    def test_has_translation(self, repository):
        assert repository.has_translation("WEB")
        assert repository.has_translation("KJV")
        assert not repository.has_translation("ESV")

    def test_list_verses_by_number_with_translation_segments(self, repository):
        verses = repository.list_verses("jhn-3", "WEB")
        assert [verse.verse_number for verse in verses] == [16, 18]
        assert [segment.content_text for segment in verses[0].text_segments] == [
            "For God so loved the world, that he gave his only born Son,",
            "that whoever believes in him should not perish, but have eternal life.",
        ]
        assert all(segment.translation_abbreviation == "WEB" for segment in verses[0].text_segments)

    def test_list_verses_other_translation(self, repository):
        verses = repository.list_verses("jhn-3", "KJV")
        assert [len(verse.text_segments) for verse in verses] == [1, 0]

    def test_list_verses_of_unknown_chapter(self, repository):
        assert repository.list_verses("missing", "WEB") == []


class TestInMemoryRepository:
    """Tests specific to the in-memory repository."""

    def test_dangling_reference_skipped(self):
        repository = InMemoryLibraryRepository(
            works=[Work(id="w", title="Creed", type="creed")],
            units=[Unit(id="u", work_id="w", position_index=1)],
            references=[Reference(unit_id="u", bible_verse_id="nowhere")],
        )
        assert repository.get_citations("u", "WEB") == []

    def test_repr(self, memory_repository):
        assert "works=3" in repr(memory_repository)


@pytest.mark.integration
class TestStoreCorpus:
    """Tests for writing entities into the relational schema."""

    @pytest.fixture
    def engine(self):
        engine = create_library_engine("sqlite://")
        create_schema(engine)
        yield engine
        engine.dispose()

    def test_translations_created_once(self, engine):
        book = BibleBook(id="b", canonical_name="John", canonical_order=43)
        chapter = Chapter(id="c", book_id="b", chapter_number=3)
        verses = [
            BibleVerse(
                id=f"v{number}",
                canonical_order_index=42003000 + number,
                chapter_id="c",
                verse_number=number,
                text_segments=(TextSegment(f"v{number}", "WEB", f"verse {number}"),),
            )
            for number in (16, 17)
        ]
        with Session(engine) as session, session.begin():
            store_corpus(session, books=[book], chapters=[chapter], verses=verses)

        with Session(engine) as session:
            assert session.scalar(select(func.count()).select_from(orm.BibleTranslation)) == 1
            assert session.scalar(select(func.count()).select_from(orm.TextSegment)) == 2

    def test_children_stored_before_parents_in_input(self, engine):
        work = Work(id="w", title="Book", type="book")
        units = [
            Unit(id="p", work_id="w", position_index=1, parent_unit_id="c", type="page"),
            Unit(id="c", work_id="w", position_index=1, type="chapter"),
        ]
        with Session(engine) as session, session.begin():
            store_corpus(session, works=[work], units=units)

        repository = SqlAlchemyLibraryRepository(sessionmaker(bind=engine))
        assert repository.get_page_by_position("w", 1).parent_unit_id == "c"
        assert repository.get_unit_by_position("w", 1).id == "c"

    def test_from_url_file_database(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'library.db'}"
        engine = create_library_engine(url)
        create_schema(engine)
        with Session(engine) as session, session.begin():
            store_corpus(session, works=[Work(id="w", title="Nicene Creed", type="creed")])
        engine.dispose()

        repository = SqlAlchemyLibraryRepository.from_url(url)
        assert [work.title for work in repository.list_works()] == ["Nicene Creed"]

    def test_reference_to_unstored_verse_skipped(self, engine):
        work = Work(id="w", title="Creed", type="creed")
        unit = Unit(id="u", work_id="w", position_index=1)
        with Session(engine) as session, session.begin():
            store_corpus(
                session,
                works=[work],
                units=[unit],
                references=[Reference(unit_id="u", bible_verse_id="rev-22-21")],
            )

        with Session(engine) as session:
            assert session.scalar(select(func.count()).select_from(orm.WorkUnitReference)) == 0

    def test_reference_to_previously_stored_verse_kept(self, engine):
        book = BibleBook(id="b", canonical_name="John", canonical_order=43)
        chapter = Chapter(id="c", book_id="b", chapter_number=3)
        verse = BibleVerse(id="v", canonical_order_index=42003016, chapter_id="c", verse_number=16)
        with Session(engine) as session, session.begin():
            store_corpus(session, books=[book], chapters=[chapter], verses=[verse])
        with Session(engine) as session, session.begin():
            store_corpus(
                session,
                works=[Work(id="w", title="Creed", type="creed")],
                units=[Unit(id="u", work_id="w", position_index=1)],
                references=[Reference(unit_id="u", bible_verse_id="v")],
            )

        repository = SqlAlchemyLibraryRepository(sessionmaker(bind=engine))
        assert repository.reference_counts("w") == {"u": 1}


@pytest.mark.integration
class TestImportCorpus:
    """Tests for the transactional import into a database URL."""

    def test_import_into_file_database(self, corpus, tmp_path):
        url = f"sqlite:///{tmp_path / 'library.db'}"
        import_corpus(url, works=corpus.works, units=corpus.units)

        repository = SqlAlchemyLibraryRepository.from_url(url)
        assert len(repository.list_works()) == 3

    def test_second_import_raises_database_error(self, corpus, tmp_path):
        url = f"sqlite:///{tmp_path / 'library.db'}"
        import_corpus(url, books=corpus.books)

        with pytest.raises(LibraryDatabaseError) as exc_info:
            import_corpus(url, books=corpus.books)
        assert exc_info.value.error_code == "DATABASE_ERROR"
        assert exc_info.value.suggestions
        assert "UNIQUE" in exc_info.value.message

    def test_failed_import_rolls_back(self, corpus, tmp_path):
        url = f"sqlite:///{tmp_path / 'library.db'}"
        import_corpus(url, books=corpus.books[:1])

        with pytest.raises(LibraryDatabaseError):
            import_corpus(url, works=corpus.works, books=corpus.books)

        repository = SqlAlchemyLibraryRepository.from_url(url)
        assert repository.list_works() == []

    def test_invalid_url(self):
        with pytest.raises(LibraryDatabaseError) as exc_info:
            import_corpus("not a url")
        assert exc_info.value.message == "Invalid database URL"
