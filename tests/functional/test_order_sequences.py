"""Reorder engine: list moves, resequencing and write planning."""

from __future__ import annotations

import pytest

from tmf_catalog.logic.order_sequences import (
    FlushResult,
    PendingReorder,
    SortOrderUpdate,
    diff_sort_orders,
    flush_updates,
    move_item,
    plan_move,
    resequence,
    sort_by_order,
)


def _docs(*orders):
    return [{"id": i + 1, "sortOrder": o} for i, o in enumerate(orders)]


def test_move_first_to_last_yields_dense_new_order():
    items = _docs(0, 1, 2)
    plan = plan_move(items, 0, 2)
    assert [dict(d) for d in plan.arranged] == [
        {"id": 2, "sortOrder": 0},
        {"id": 3, "sortOrder": 1},
        {"id": 1, "sortOrder": 2},
    ]
    assert plan.updates == (
        SortOrderUpdate(id=2, sort_order=0),
        SortOrderUpdate(id=3, sort_order=1),
        SortOrderUpdate(id=1, sort_order=2),
    )


@pytest.mark.parametrize("source,destination", [(0, 4), (4, 0), (1, 3), (3, 1), (2, 2)])
def test_any_move_renumbers_zero_to_n_and_keeps_relative_order(source, destination):
    items = _docs(0, 1, 2, 3, 4)
    plan = plan_move(items, source, destination)
    arranged = list(plan.arranged)
    assert [d["sortOrder"] for d in arranged] == list(range(len(items)))
    moved_id = items[source]["id"]
    others_before = [d["id"] for d in items if d["id"] != moved_id]
    others_after = [d["id"] for d in arranged if d["id"] != moved_id]
    assert others_before == others_after
    assert arranged[destination]["id"] == moved_id


def test_adjacent_move_only_updates_the_two_swapped_items():
    plan = plan_move(_docs(0, 1, 2, 3), 1, 2)
    assert {u.id for u in plan.updates} == {2, 3}


@pytest.mark.parametrize("destination", [None, 1])
def test_noop_move_produces_no_writes_even_on_sparse_orders(destination):
    items = sort_by_order([{"id": 1, "sortOrder": 10}, {"id": 2, "sortOrder": 20}, {"id": 3, "sortOrder": 30}])
    plan = plan_move(items, 1, destination)
    assert plan.is_noop
    assert list(plan.arranged) == items


def test_sparse_orders_are_compacted_after_a_real_move():
    items = [{"id": 7, "sortOrder": 5}, {"id": 8, "sortOrder": 9}]
    plan = plan_move(items, 1, 0)
    assert [u.to_wire() for u in plan.updates] == [{"id": 8, "sortOrder": 0}, {"id": 7, "sortOrder": 1}]


@pytest.mark.parametrize("source,destination", [(-1, 0), (3, 0), (0, 3), (0, -1)])
def test_out_of_range_indices_are_rejected(source, destination):
    with pytest.raises(ValueError):
        plan_move(_docs(0, 1, 2), source, destination)


def test_non_integer_index_is_rejected():
    with pytest.raises(ValueError):
        move_item([1, 2, 3], True, 1)  # type: ignore[arg-type]


def test_sort_by_order_is_stable_and_treats_missing_as_zero():
    items = [
        {"id": 1, "sortOrder": 1},
        {"id": 2},
        {"id": 3, "sortOrder": 0},
        {"id": 4, "sortOrder": None},
    ]
    assert [d["id"] for d in sort_by_order(items)] == [2, 3, 4, 1]


def test_missing_previous_value_always_counts_as_changed():
    before = [{"id": 1, "sortOrder": None}, {"id": 2, "sortOrder": 1}]
    updates = diff_sort_orders(before, resequence(before))
    assert updates == [SortOrderUpdate(id=1, sort_order=0)]


def test_resequence_does_not_mutate_input():
    items = [{"id": 1, "sortOrder": 4}]
    out = resequence(items)
    assert items[0]["sortOrder"] == 4
    assert out[0]["sortOrder"] == 0


def test_pending_reorder_reset_returns_to_fetched_order():
    pending = PendingReorder.from_fetched(_docs(2, 0, 1))
    fetched_ids = pending.ids()
    staged = pending.stage_move(0, 2)
    assert staged.has_changes
    assert staged.ids() != fetched_ids
    restored = staged.reset()
    assert restored.ids() == fetched_ids
    assert not restored.has_changes
    # The original value object is untouched
    assert pending.ids() == fetched_ids


def test_pending_reorder_accumulates_moves_and_diffs_against_baseline():
    pending = PendingReorder.from_fetched(_docs(0, 1, 2, 3))
    pending = pending.stage_move(0, 3).stage_move(3, 0)
    assert pending.pending_updates() == []
    pending = pending.stage_move(3, 2)
    assert [u.to_wire() for u in pending.pending_updates()] == [
        {"id": 4, "sortOrder": 2},
        {"id": 3, "sortOrder": 3},
    ]


def test_fetched_duplicate_or_sparse_orders_are_not_pending_changes():
    pending = PendingReorder.from_fetched(_docs(0, 0, 5))
    assert not pending.has_changes
    assert pending.pending_updates() == []
    assert not pending.stage_move(1, 1).has_changes


def test_real_move_compacts_duplicate_and_sparse_orders():
    pending = PendingReorder.from_fetched(_docs(0, 0, 5)).stage_move(2, 0)
    assert pending.has_changes
    assert [u.to_wire() for u in pending.pending_updates()] == [
        {"id": 3, "sortOrder": 0},
        {"id": 1, "sortOrder": 1},
        {"id": 2, "sortOrder": 2},
    ]


def test_flush_updates_is_best_effort_and_reports_failures():
    written = []

    def write(entity_id, order):
        if entity_id == 2:
            raise RuntimeError("boom")
        written.append((entity_id, order))

    updates = [SortOrderUpdate(1, 0), SortOrderUpdate(2, 1), SortOrderUpdate(3, 2)]
    result = flush_updates(updates, write)
    assert isinstance(result, FlushResult)
    assert written == [(1, 0), (3, 2)]
    assert result.succeeded == [1, 3]
    assert result.failed == [2]
    assert "boom" in result.errors[2]
    assert not result.ok
