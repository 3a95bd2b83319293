"""
Theologos - Domain Layer

Immutable entities describing the library (works, units, references) and
the scripture canon (books, chapters, verses, text segments), plus the
value objects the engine produces (citations, proof-text groups).

Usage:
    from domain import Work, Unit, Citation, ProofTextGroup
"""
from domain.entities import (
    # Enums
    WorkType,
    UnitType,
    UnitStatus,
    Testament,
    # Library
    Work,
    Unit,
    Reference,
    # Canon
    BibleBook,
    Chapter,
    BibleVerse,
    TextSegment,
    # Engine values
    Citation,
    ProofTextReference,
    ProofTextGroup,
)

__all__ = [
    "WorkType",
    "UnitType",
    "UnitStatus",
    "Testament",
    "Work",
    "Unit",
    "Reference",
    "BibleBook",
    "Chapter",
    "BibleVerse",
    "TextSegment",
    "Citation",
    "ProofTextReference",
    "ProofTextGroup",
]
