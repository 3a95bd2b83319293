"""
Theologos - Core Module

Foundational components shared by every other package:
- Unified error handling (errors.py)
- Input validation for user-supplied positions, codes and paging (validation.py)

Core has no dependency on any other package in this repository.

Usage:
    from core import NotFoundError, InvalidArgumentError, parse_position
"""

from core.errors import (
    LibraryError,
    NotFoundError,
    InvalidArgumentError,
    AmbiguousSlugError,
    LibraryConfigError,
    CorpusFormatError,
    LibraryDatabaseError,
    ErrorContext,
    ErrorSeverity,
)
from core.validation import (
    parse_position,
    is_valid_position,
    require_positive,
    normalize_translation,
    parse_limit,
    parse_offset,
)

__all__ = [
    # Errors
    "LibraryError",
    "NotFoundError",
    "InvalidArgumentError",
    "AmbiguousSlugError",
    "LibraryConfigError",
    "CorpusFormatError",
    "LibraryDatabaseError",
    "ErrorContext",
    "ErrorSeverity",
    # Validation
    "parse_position",
    "is_valid_position",
    "require_positive",
    "normalize_translation",
    "parse_limit",
    "parse_offset",
]
