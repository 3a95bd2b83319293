"""
Theologos - Unit Tree Navigator

Locates units within a work's two-level unit tree: top-level units
(questions, articles, chapters) and the child pages beneath them.

All functions take the work's full, flat unit list as fetched from the
persistence collaborator and never mutate it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from core.errors import NotFoundError
from core.validation import require_positive
from domain.entities import Unit, UnitStatus, UnitType, Work


def _by_position(units: Sequence[Unit]) -> List[Unit]:
    # sorted() is stable, so ties keep storage order
    return sorted(units, key=lambda unit: unit.position_index)


def top_level_units(units: Sequence[Unit]) -> List[Unit]:
    """Units with no parent, ascending by position."""
    return _by_position([unit for unit in units if unit.is_top_level])


def children_of(units: Sequence[Unit], parent: Unit) -> List[Unit]:
    """Child units of ``parent``, ascending by position."""
    return _by_position([unit for unit in units if unit.parent_unit_id == parent.id])


def find_unit_by_position(units: Sequence[Unit], position: int) -> Unit:
    """
    Find the top-level unit numbered ``position``.

    Raises:
        InvalidArgumentError: If position < 1
        NotFoundError: If no top-level unit has that position
    """
    require_positive(position, "unit")
    for unit in top_level_units(units):
        if unit.position_index == position:
            return unit
    raise NotFoundError(
        f"Unit {position} not found",
        resource="unit",
        identifier=position,
    )


def find_page_by_position(units: Sequence[Unit], position: int) -> Unit:
    """
    Find the page-type unit numbered ``position``.

    Raises:
        InvalidArgumentError: If position < 1
        NotFoundError: If no page has that position
    """
    require_positive(position, "page")
    for unit in _by_position([unit for unit in units if unit.is_page]):
        if unit.position_index == position:
            return unit
    raise NotFoundError(
        f"Page {position} not found",
        resource="page",
        identifier=position,
    )


def first_child_page(units: Sequence[Unit], parent: Unit) -> Optional[int]:
    """Lowest child position beneath ``parent``, or None when it has no children."""
    positions = [unit.position_index for unit in units if unit.parent_unit_id == parent.id]
    return min(positions) if positions else None


def total_page_count(units: Sequence[Unit]) -> int:
    """Number of children across all top-level units."""
    top_ids = {unit.id for unit in units if unit.is_top_level}
    return sum(1 for unit in units if unit.parent_unit_id in top_ids)


def addressable_count(units: Sequence[Unit]) -> int:
    """
    Page count, or the top-level unit count for works without pages.

    A work with no page-level children is addressed at unit granularity.
    """
    pages = total_page_count(units)
    return pages if pages > 0 else len(top_level_units(units))


def status_counts(units: Sequence[Unit]) -> Dict[str, int]:
    """Review status tally across every unit of a work."""
    counts = {status.value: 0 for status in UnitStatus}
    for unit in units:
        if unit.status in counts:
            counts[unit.status] += 1
    return counts


def default_unit_type(work: Work) -> str:
    """Unit type a listing shows when none is requested: paragraphs for books, else questions."""
    return UnitType.PARAGRAPH.value if work.is_book else UnitType.QUESTION.value


def filter_units(
    units: Sequence[Unit],
    status: Optional[str] = None,
    unit_type: Optional[str] = None,
) -> List[Unit]:
    """Units matching the status and type filters, ascending by position. None matches all."""
    return _by_position([
        unit for unit in units
        if (status is None or unit.status == status)
        and (unit_type is None or unit.type == unit_type)
    ])


@dataclass(frozen=True, slots=True)
class UnitNavigation:
    """Previous/next context for a unit among units of the same type."""
    prev_id: Optional[str]
    next_id: Optional[str]
    position: int
    total: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prevId": self.prev_id,
            "nextId": self.next_id,
            "position": self.position,
            "total": self.total,
        }


def sibling_navigation(units: Sequence[Unit], unit: Unit) -> UnitNavigation:
    """
    Navigation context for ``unit`` within its work.

    Siblings are the units of the same work sharing the unit's type, so
    pages navigate among pages and questions among questions. position is
    1-based: the count of siblings at or before the unit.
    """
    siblings = [
        other for other in units
        if other.work_id == unit.work_id and other.type == unit.type
    ]

    previous = [other for other in siblings if other.position_index < unit.position_index]
    following = [other for other in siblings if other.position_index > unit.position_index]

    prev_unit = max(previous, key=lambda other: other.position_index, default=None)
    next_unit = min(following, key=lambda other: other.position_index, default=None)

    return UnitNavigation(
        prev_id=prev_unit.id if prev_unit else None,
        next_id=next_unit.id if next_unit else None,
        position=sum(1 for other in siblings if other.position_index <= unit.position_index),
        total=len(siblings),
    )
