"""
Tests for order_index helpers: swap, move and bulk reorder
"""
from uuid import uuid4

import pytest

from folio.core.errors import NotFoundError, ValidationError
from folio.models import NavLink, PageBlock
from folio.services import ordering


def _links(db, count, order=None):
    links = []
    for i in range(count):
        link = NavLink(label=f"Link {i}", url=f"/l{i}", order_index=order[i] if order else i)
        db.add(link)
        links.append(link)
    db.commit()
    return links


def test_sort_by_order_prefers_order_then_order_index():
    items = [{"order": 2, "id": "a"}, {"order_index": 0, "id": "b"}, {"id": "c", "order": 1}]
    assert [item["id"] for item in ordering.sort_by_order(items)] == ["b", "c", "a"]


def test_sort_by_order_is_stable_for_missing_values():
    items = [{"id": "x"}, {"id": "y"}, {"id": "z", "order": 0}]
    assert [item["id"] for item in ordering.sort_by_order(items)] == ["x", "y", "z"]


def test_next_order_index_empty_and_filled(db):
    assert ordering.next_order_index(db, NavLink) == 0
    _links(db, 3)
    assert ordering.next_order_index(db, NavLink) == 3


def test_next_order_index_is_scoped(db):
    db.add_all([
        PageBlock(page_slug="home", block_type="spacer", block_config={}, order_index=4),
        PageBlock(page_slug="about", block_type="spacer", block_config={}, order_index=9),
    ])
    db.commit()
    assert ordering.next_order_index(db, PageBlock, {"page_slug": "home"}) == 5
    assert ordering.next_order_index(db, PageBlock, {"page_slug": "blog"}) == 0
    assert ordering.order_scope(PageBlock, {"page_slug": "home", "block_type": "hero"}) == {"page_slug": "home"}
    assert ordering.order_scope(NavLink, {"label": "x"}) == {}


def test_swap_exchanges_indexes(db):
    a, b, c = _links(db, 3)
    ordering.swap_order(db, NavLink, a.id, c.id)
    assert (a.order_index, b.order_index, c.order_index) == (2, 1, 0)


def test_swap_missing_row_leaves_order_intact(db):
    a, b = _links(db, 2)
    with pytest.raises(NotFoundError):
        ordering.swap_order(db, NavLink, a.id, uuid4())
    db.refresh(a)
    assert a.order_index == 0


def test_move_up_and_down(db):
    a, b, c = _links(db, 3)
    moved = ordering.move(db, NavLink, c.id, "up")
    assert len(moved) == 2
    assert (b.order_index, c.order_index) == (2, 1)

    ordering.move(db, NavLink, a.id, "down")
    ordered = [link.label for link in db.query(NavLink).order_by(NavLink.order_index)]
    assert ordered == ["Link 2", "Link 0", "Link 1"]


def test_move_at_either_end_is_noop(db):
    a, b = _links(db, 2)
    assert ordering.move(db, NavLink, a.id, "up") == []
    assert ordering.move(db, NavLink, b.id, "down") == []
    assert (a.order_index, b.order_index) == (0, 1)


def test_move_with_duplicate_indexes_uses_positions(db):
    _links(db, 2, order=[0, 0])
    first, second = db.query(NavLink).order_by(NavLink.order_index, NavLink.id).all()
    moved = ordering.move(db, NavLink, first.id, "down")
    assert len(moved) == 2
    assert (first.order_index, second.order_index) == (1, 0)


def test_move_with_duplicates_renumbers_whole_list(db):
    _links(db, 3, order=[0, 0, 1])
    first, second, third = db.query(NavLink).order_by(NavLink.order_index, NavLink.id).all()
    ordering.move(db, NavLink, second.id, "up")
    assert (second.order_index, first.order_index, third.order_index) == (0, 1, 2)


def test_move_rejects_unknown_direction(db):
    (a,) = _links(db, 1)
    with pytest.raises(ValidationError):
        ordering.move(db, NavLink, a.id, "sideways")


def test_move_respects_scope(db):
    home = [PageBlock(page_slug="home", block_type="spacer", block_config={}, order_index=i) for i in range(2)]
    other = PageBlock(page_slug="about", block_type="spacer", block_config={}, order_index=5)
    db.add_all(home + [other])
    db.commit()

    assert ordering.move(db, PageBlock, home[1].id, "down", {"page_slug": "home"}) == []
    with pytest.raises(NotFoundError):
        ordering.move(db, PageBlock, other.id, "up", {"page_slug": "home"})


def test_apply_order_bulk_updates(db):
    a, b, c = _links(db, 3)
    ordering.apply_order(db, NavLink, [
        {"id": a.id, "order_index": 10},
        {"id": b.id, "order_index": 5},
    ])
    assert (a.order_index, b.order_index, c.order_index) == (10, 5, 2)


def test_apply_order_is_all_or_nothing(db):
    a, b = _links(db, 2)
    with pytest.raises(NotFoundError):
        ordering.apply_order(db, NavLink, [
            {"id": a.id, "order_index": 9},
            {"id": uuid4(), "order_index": 3},
        ])
    db.refresh(a)
    assert a.order_index == 0
