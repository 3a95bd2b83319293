"""
Theologos - Content Parser

Extracts display and body text from a unit's stored text.

Two independent rules apply:
    - Display text branches on the work's declared type: books show the
      first line of the unit title, everything else the first line of
      the content.
    - Primary/secondary text sniffs the content itself for a Q./A. pair
      and ignores the work type entirely.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from domain.entities import Unit, Work
from engine.navigator import first_child_page


DISPLAY_LIMIT = 150
ELLIPSIS = "..."

QUESTION_PREFIX = "Q."
ANSWER_PREFIX = "A."


@dataclass(frozen=True, slots=True)
class UnitDisplay:
    """Short label for a unit in a work outline."""
    display_text: str
    first_page: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"displayText": self.display_text, "firstPage": self.first_page}


@dataclass(frozen=True, slots=True)
class UnitText:
    """Question/answer pair, or undivided prose with an empty secondary."""
    primary_text: str
    secondary_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"primaryText": self.primary_text, "secondaryText": self.secondary_text}


def truncate(text: str, limit: int = DISPLAY_LIMIT) -> str:
    """Cut text longer than ``limit`` and append the ellipsis marker."""
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def display_source(work: Work, unit: Unit) -> str:
    """The untruncated line a unit is labeled with."""
    if work.is_book and unit.title:
        # Book titles are stored as "Title\nSubtitle"
        return unit.title.split("\n")[0]
    first_line = unit.content_text.split("\n")[0]
    return first_line or unit.content_text


def parse_unit_display(
    work: Work,
    unit: Unit,
    units: Optional[Sequence[Unit]] = None,
    limit: int = DISPLAY_LIMIT,
) -> UnitDisplay:
    """
    Build the outline label for a unit.

    Args:
        work: The owning work; its type selects the display branch
        unit: The unit to label
        units: The work's full unit list, needed to report a book
            chapter's first page
        limit: Maximum characters before truncation
    """
    first_page = None
    if work.is_book and units is not None:
        first_page = first_child_page(units, unit)

    return UnitDisplay(
        display_text=truncate(display_source(work, unit), limit),
        first_page=first_page,
    )


def parse_primary_secondary(content_text: str) -> UnitText:
    """
    Split catechism-style content into question and answer.

    Looks for the first line starting with "Q." and the first starting
    with "A." (case-sensitive). When both exist the prefixes are stripped
    and the remainder trimmed; otherwise the whole content is primary.
    """
    lines = content_text.split("\n")
    question = next((line for line in lines if line.startswith(QUESTION_PREFIX)), None)
    answer = next((line for line in lines if line.startswith(ANSWER_PREFIX)), None)

    if question is not None and answer is not None:
        return UnitText(
            primary_text=question[len(QUESTION_PREFIX):].strip(),
            secondary_text=answer[len(ANSWER_PREFIX):].strip(),
        )
    return UnitText(primary_text=content_text, secondary_text="")
