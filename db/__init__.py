"""
Theologos - Database Layer

Persistence collaborator for the engine. The engine only depends on the
read-only ILibraryRepository interface; two implementations are provided:

- InMemoryLibraryRepository: already-materialized entities (corpus files, tests)
- SqlAlchemyLibraryRepository: relational storage via SQLAlchemy

Usage:
    from db import SqlAlchemyLibraryRepository

    repository = SqlAlchemyLibraryRepository.from_url("sqlite:///library.db")
    works = repository.list_works()
"""
from db.interfaces import ILibraryRepository
from db.memory import InMemoryLibraryRepository
from db.repository import (
    SqlAlchemyLibraryRepository,
    create_library_engine,
    create_schema,
    import_corpus,
    store_corpus,
)

__all__ = [
    "ILibraryRepository",
    "InMemoryLibraryRepository",
    "SqlAlchemyLibraryRepository",
    "create_library_engine",
    "create_schema",
    "import_corpus",
    "store_corpus",
]
