"""
Tests for engine/navigator.py - locating units and pages in a unit tree.
"""
import pytest

from core.errors import InvalidArgumentError, NotFoundError
from domain.entities import Unit, Work
from engine.navigator import (
    addressable_count,
    children_of,
    default_unit_type,
    filter_units,
    find_page_by_position,
    find_unit_by_position,
    first_child_page,
    sibling_navigation,
    status_counts,
    top_level_units,
    total_page_count,
)


def unit(id, position, parent=None, type=None, status="AUTO", work_id="w"):
    return Unit(
        id=id,
        work_id=work_id,
        position_index=position,
        parent_unit_id=parent,
        type=type,
        status=status,
    )


@pytest.fixture
def book_units():
    """Two chapters, pages stored out of order."""
    return [
        unit("p3", 3, parent="c2", type="page"),
        unit("c2", 2, type="chapter"),
        unit("p1", 1, parent="c1", type="page"),
        unit("c1", 1, type="chapter"),
        unit("p2", 2, parent="c1", type="page"),
    ]


class TestTopLevelUnits:
    """Tests for top-level selection and ordering."""

    def test_sorted_by_position(self, book_units):
        assert [u.id for u in top_level_units(book_units)] == ["c1", "c2"]

    def test_ties_keep_storage_order(self):
        units = [unit("b", 1), unit("a", 1), unit("c", 0)]
        assert [u.id for u in top_level_units(units)] == ["c", "b", "a"]

    def test_children_sorted(self, book_units):
        parent = next(u for u in book_units if u.id == "c1")
        assert [u.id for u in children_of(book_units, parent)] == ["p1", "p2"]


class TestFindUnitByPosition:
    """Tests for top-level unit lookup."""

    def test_finds_top_level_unit(self, book_units):
        assert find_unit_by_position(book_units, 2).id == "c2"

    def test_ignores_children_with_same_position(self, book_units):
        """Page 1 shares position 1 with chapter 1; only the chapter is a unit."""
        assert find_unit_by_position(book_units, 1).id == "c1"

    def test_missing_position(self, book_units):
        with pytest.raises(NotFoundError) as exc_info:
            find_unit_by_position(book_units, 3)
        assert exc_info.value.message == "Unit 3 not found"

    @pytest.mark.parametrize("position", [0, -1])
    def test_non_positive_position(self, book_units, position):
        with pytest.raises(InvalidArgumentError):
            find_unit_by_position(book_units, position)

    def test_empty_work(self):
        with pytest.raises(NotFoundError):
            find_unit_by_position([], 1)


class TestFindPageByPosition:
    """Tests for page lookup."""

    def test_finds_page(self, book_units):
        page = find_page_by_position(book_units, 3)
        assert page.id == "p3"
        assert page.parent_unit_id == "c2"

    def test_chapters_are_not_pages(self):
        units = [unit("c1", 1, type="chapter")]
        with pytest.raises(NotFoundError) as exc_info:
            find_page_by_position(units, 1)
        assert exc_info.value.message == "Page 1 not found"

    def test_zero_is_invalid(self, book_units):
        with pytest.raises(InvalidArgumentError):
            find_page_by_position(book_units, 0)


class TestPageCounts:
    """Tests for page counting and the first-page pointer."""

    def test_first_child_page(self, book_units):
        c1 = next(u for u in book_units if u.id == "c1")
        c2 = next(u for u in book_units if u.id == "c2")
        assert first_child_page(book_units, c1) == 1
        assert first_child_page(book_units, c2) == 3

    def test_first_child_page_without_children(self):
        lone = unit("q1", 1)
        assert first_child_page([lone], lone) is None

    def test_total_page_count(self, book_units):
        assert total_page_count(book_units) == 3

    def test_addressable_count_uses_pages(self, book_units):
        assert addressable_count(book_units) == 3

    def test_addressable_count_falls_back_to_units(self):
        units = [unit("q1", 1), unit("q2", 2)]
        assert total_page_count(units) == 0
        assert addressable_count(units) == 2

    def test_empty(self):
        assert addressable_count([]) == 0


class TestStatusCounts:
    """Tests for review status tallies."""

    def test_counts_every_status(self):
        units = [
            unit("a", 1, status="AUTO"),
            unit("b", 2, status="REVIEWED"),
            unit("c", 3, status="REVIEWED"),
            unit("d", 4, parent="a", status="EDITED"),
        ]
        assert status_counts(units) == {"AUTO": 1, "EDITED": 1, "REVIEWED": 2}

    def test_empty(self):
        assert status_counts([]) == {"AUTO": 0, "EDITED": 0, "REVIEWED": 0}


class TestSiblingNavigation:
    """Tests for previous/next navigation among same-type units."""

    def test_middle_page(self, book_units):
        p2 = next(u for u in book_units if u.id == "p2")
        nav = sibling_navigation(book_units, p2)
        assert (nav.prev_id, nav.next_id, nav.position, nav.total) == ("p1", "p3", 2, 3)

    def test_first_and_last(self, book_units):
        c1 = next(u for u in book_units if u.id == "c1")
        c2 = next(u for u in book_units if u.id == "c2")
        assert sibling_navigation(book_units, c1).prev_id is None
        assert sibling_navigation(book_units, c2).next_id is None
        assert sibling_navigation(book_units, c2).position == 2

    def test_other_works_ignored(self):
        units = [unit("a", 1, type="question"), unit("x", 2, type="question", work_id="other")]
        nav = sibling_navigation(units, units[0])
        assert nav.next_id is None
        assert nav.total == 1

    def test_to_dict(self, book_units):
        p1 = next(u for u in book_units if u.id == "p1")
        assert sibling_navigation(book_units, p1).to_dict() == {
            "prevId": None,
            "nextId": "p2",
            "position": 1,
            "total": 3,
        }


class TestUnitFilters:
    """Tests for status/type filtering and the default listing type."""

    @pytest.fixture
    def units(self):
        return [
            unit("q3", 3, type="question", status="REVIEWED"),
            unit("q1", 1, type="question", status="REVIEWED"),
            unit("q2", 2, type="question"),
            unit("h1", 1, type="heading", status="REVIEWED"),
        ]

    def test_no_filters_sorts_everything(self, units):
        assert [u.id for u in filter_units(units)] == ["q1", "h1", "q2", "q3"]

    def test_status_and_type(self, units):
        assert [u.id for u in filter_units(units, status="REVIEWED", unit_type="question")] == ["q1", "q3"]

    def test_type_only(self, units):
        assert [u.id for u in filter_units(units, unit_type="heading")] == ["h1"]

    def test_no_match(self, units):
        assert filter_units(units, status="EDITED") == []

    @pytest.mark.parametrize("work_type,expected", [
        ("book", "paragraph"),
        ("catechism", "question"),
        ("creed", "question"),
        ("treatise", "question"),
    ])
    def test_default_unit_type(self, work_type, expected):
        assert default_unit_type(Work(id="w", title="T", type=work_type)) == expected
