"""
Theologos - Input Validation Utilities

Validation for user-supplied inputs that reach the engine: position
numbers taken from request paths, translation abbreviations and the
limit and offset of unit listings.

The navigator assumes a pre-validated positive integer; parsing the raw
string happens here, before any lookup.
"""

from __future__ import annotations

import re
from typing import Optional, Union

from core.errors import InvalidArgumentError


# Optional sign followed by digits; anything else is not an integer
POSITION_PATTERN = re.compile(r"^[+-]?\d+$")

# Translation abbreviations are short alphanumeric codes (WEB, KJV, ESV2011)
TRANSLATION_PATTERN = re.compile(r"^[A-Z0-9]{2,12}$")


def parse_position(raw: Union[str, int], kind: str = "unit") -> int:
    """
    Parse a user-supplied position number.

    Args:
        raw: The raw value, usually a path segment such as "12"
        kind: What the number addresses ("unit", "page"), used in messages

    Returns:
        The position as a positive integer

    Raises:
        InvalidArgumentError: If the value is not an integer or is < 1
    """
    if isinstance(raw, bool):
        raise InvalidArgumentError(
            f"Invalid {kind} number (must be >= 1)",
            field_name=kind,
            actual_value=raw,
        )

    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip()
        if not POSITION_PATTERN.match(text):
            raise InvalidArgumentError(
                f"Invalid {kind} number (must be >= 1)",
                field_name=kind,
                actual_value=raw,
            )
        value = int(text)

    if value < 1:
        raise InvalidArgumentError(
            f"Invalid {kind} number (must be >= 1)",
            field_name=kind,
            actual_value=raw,
        )
    return value


def is_valid_position(raw: Union[str, int]) -> bool:
    """Check a position without raising."""
    try:
        parse_position(raw)
        return True
    except InvalidArgumentError:
        return False


def require_positive(position: int, kind: str = "unit") -> int:
    """Guard for already-parsed integers handed to the navigator."""
    if isinstance(position, bool) or not isinstance(position, int) or position < 1:
        raise InvalidArgumentError(
            f"Invalid {kind} number (must be >= 1)",
            field_name=kind,
            actual_value=position,
        )
    return position


def normalize_translation(abbreviation: str) -> str:
    """
    Normalize a translation abbreviation to upper case.

    Raises:
        InvalidArgumentError: If the abbreviation is empty or malformed
    """
    if not abbreviation or not abbreviation.strip():
        raise InvalidArgumentError(
            "Translation abbreviation cannot be empty",
            field_name="translation",
            actual_value=abbreviation,
        )

    normalized = abbreviation.strip().upper()
    if not TRANSLATION_PATTERN.match(normalized):
        raise InvalidArgumentError(
            f"Invalid translation abbreviation '{abbreviation}'",
            field_name="translation",
            actual_value=abbreviation,
        )
    return normalized


# Listing pages hold at most this many rows
MAX_PAGE_SIZE = 200
DEFAULT_PAGE_SIZE = 50


def _as_int(raw: Union[str, int]) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    return int(text) if POSITION_PATTERN.match(text) else None


def parse_limit(raw: Union[str, int]) -> int:
    """
    Parse a listing page size.

    Raises:
        InvalidArgumentError: Unless the value is an integer in 1-200
    """
    value = _as_int(raw)
    if value is None or not 1 <= value <= MAX_PAGE_SIZE:
        raise InvalidArgumentError(
            f"Invalid limit (must be 1-{MAX_PAGE_SIZE})",
            field_name="limit",
            actual_value=raw,
        )
    return value


def parse_offset(raw: Union[str, int]) -> int:
    """
    Parse a listing offset.

    Raises:
        InvalidArgumentError: Unless the value is an integer >= 0
    """
    value = _as_int(raw)
    if value is None or value < 0:
        raise InvalidArgumentError("Invalid offset", field_name="offset", actual_value=raw)
    return value

