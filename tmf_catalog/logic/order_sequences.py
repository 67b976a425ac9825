"""Drag-and-drop reorder engine for documents and document types.

Works on wire-shaped mappings (``{"id": ..., "sortOrder": ...}``) and never
performs I/O itself. A move is the usual single-element list move: remove the
item at ``source``, insert it at ``destination`` in the shortened list, then
renumber every position with its zero-based index. Only items whose new
``sortOrder`` differs from the last known value produce an update.

``sortOrder`` values are dense (0..n-1) only within the list that was moved
in; other lists (documents of another type) keep their own numbering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

SORT_KEY = "sortOrder"
ID_KEY = "id"


@dataclass(frozen=True)
class SortOrderUpdate:
    id: int
    sort_order: int

    def to_wire(self) -> dict:
        return {ID_KEY: self.id, SORT_KEY: self.sort_order}


@dataclass(frozen=True)
class ReorderPlan:
    """Result of planning one move: the new arrangement and the writes it needs."""

    arranged: Tuple[Mapping[str, Any], ...]
    updates: Tuple[SortOrderUpdate, ...]

    @property
    def is_noop(self) -> bool:
        return not self.updates


@dataclass
class FlushResult:
    """Outcome of a best-effort flush. Failed writes are neither retried nor undone."""

    succeeded: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    errors: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def _sort_value(item: Mapping[str, Any]) -> int:
    value = item.get(SORT_KEY)
    return int(value) if value is not None else 0


def sort_by_order(items: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Stable ascending sort by ``sortOrder``; a missing value sorts as 0."""
    return sorted(items, key=_sort_value)


def _check_index(name: str, index: int, length: int) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValueError(f"{name} index must be an integer, got {index!r}")
    if not 0 <= index < length:
        raise ValueError(f"{name} index {index} out of range for list of {length}")
    return index


def move_item(items: Sequence[Any], source: int, destination: int) -> List[Any]:
    """Return a new list with the element at ``source`` moved to ``destination``."""
    _check_index("source", source, len(items))
    _check_index("destination", destination, len(items))
    working = list(items)
    moved = working.pop(source)
    working.insert(destination, moved)
    return working


def resequence(items: Iterable[Mapping[str, Any]]) -> List[dict]:
    """Copy ``items`` with ``sortOrder`` set to each element's position."""
    return [{**dict(item), SORT_KEY: index} for index, item in enumerate(items)]


def diff_sort_orders(
    before: Iterable[Mapping[str, Any]],
    arranged: Sequence[Mapping[str, Any]],
) -> List[SortOrderUpdate]:
    """Updates needed so that stored values match the positions in ``arranged``.

    ``before`` supplies the last known ``sortOrder`` per id; an id absent there,
    or known with no value, always gets an update.
    """
    known = {item[ID_KEY]: item.get(SORT_KEY) for item in before}
    updates: List[SortOrderUpdate] = []
    for index, item in enumerate(arranged):
        previous = known.get(item[ID_KEY])
        if previous is None or int(previous) != index:
            updates.append(SortOrderUpdate(id=int(item[ID_KEY]), sort_order=index))
    return updates


def plan_move(
    items: Sequence[Mapping[str, Any]],
    source: int,
    destination: Optional[int],
) -> ReorderPlan:
    """Plan a single drag-and-drop move over an already sorted list.

    No destination, or a destination equal to the source, is a no-op and
    produces no updates even when the list is not densely numbered.
    """
    _check_index("source", source, len(items))
    if destination is None or destination == source:
        return ReorderPlan(arranged=tuple(items), updates=())
    moved = move_item(items, source, destination)
    updates = diff_sort_orders(items, moved)
    return ReorderPlan(arranged=tuple(resequence(moved)), updates=tuple(updates))


@dataclass(frozen=True)
class PendingReorder:
    """Staged, not yet persisted, arrangement of one list.

    ``baseline`` is the order last fetched from the store; ``arranged`` is the
    order the user has built so far. Instances are immutable: every operation
    returns a new value.
    """

    baseline: Tuple[Mapping[str, Any], ...]
    arranged: Tuple[Mapping[str, Any], ...]

    @classmethod
    def from_fetched(cls, items: Iterable[Mapping[str, Any]]) -> "PendingReorder":
        ordered = tuple(sort_by_order(items))
        return cls(baseline=ordered, arranged=ordered)

    def stage_move(self, source: int, destination: Optional[int]) -> "PendingReorder":
        _check_index("source", source, len(self.arranged))
        if destination is None or destination == source:
            return self
        return PendingReorder(
            baseline=self.baseline,
            arranged=tuple(move_item(self.arranged, source, destination)),
        )

    def pending_updates(self) -> List[SortOrderUpdate]:
        """Writes needed to persist the staged order; none until a move changed it.

        Stored values are renumbered only once the arrangement differs from the
        fetched order, so duplicate or sparse ``sortOrder`` values on their own
        never produce writes.
        """
        if not self.has_changes:
            return []
        return diff_sort_orders(self.baseline, self.arranged)

    @property
    def has_changes(self) -> bool:
        return [item[ID_KEY] for item in self.arranged] != [item[ID_KEY] for item in self.baseline]

    def reset(self) -> "PendingReorder":
        """Discard staged moves and return to the last fetched order."""
        return PendingReorder(baseline=self.baseline, arranged=self.baseline)

    def rebase(self, items: Iterable[Mapping[str, Any]]) -> "PendingReorder":
        """Start over from a freshly fetched list (after a successful save)."""
        return PendingReorder.from_fetched(items)

    def ids(self) -> List[int]:
        return [int(item[ID_KEY]) for item in self.arranged]


def flush_updates(
    updates: Iterable[SortOrderUpdate],
    write: Callable[[int, int], Any],
) -> FlushResult:
    """Send each update through ``write(id, sort_order)`` independently.

    A failing write is logged and recorded; the remaining writes still run and
    earlier ones are not undone.
    """
    result = FlushResult()
    for update in updates:
        try:
            write(update.id, update.sort_order)
        except Exception as exc:
            logger.warning(
                "reorder.flush.write_failed id=%s sort_order=%s error=%s",
                update.id,
                update.sort_order,
                exc,
            )
            result.failed.append(update.id)
            result.errors[update.id] = str(exc)
            continue
        result.succeeded.append(update.id)
    if result.failed:
        logger.warning("reorder.flush.partial succeeded=%s failed=%s", result.succeeded, result.failed)
    return result


__all__ = [
    "SortOrderUpdate",
    "ReorderPlan",
    "FlushResult",
    "PendingReorder",
    "sort_by_order",
    "move_item",
    "resequence",
    "diff_sort_orders",
    "plan_move",
    "flush_updates",
]
