"""values.py - Identifier-addressed value storage."""

from __future__ import annotations

import copy
from bisect import bisect_left, bisect_right
from typing import Any, Iterator, Optional

from .utils import assumption

Position = tuple[int, int]
"(record id, enumeration position) of a live value"

# Order slots are rebuilt once tombstones outnumber live values
_COMPACT_MIN = 64


class ValueStore:
    """
    ValueStore: Single source of truth for stored values.

    - Maps record identifier -> value; knows nothing about keys.
    - Every stored value also gets an enumeration position from a private
      counter, so enumeration order is insertion order even after the
      identifier counter wraps.
    - Positions of erased values are never reused, which lets a cursor on an
      erased record still find its successor.
    - Removal leaves a tombstone in the order slots; slots are compacted once
      tombstones outnumber live values, so erase stays amortized O(log n).
    """

    def __init__(self) -> None:
        self._values: dict[int, Any] = {}
        self._positions: dict[int, int] = {}
        # Parallel, sorted by position; None in _order_rid marks a tombstone
        self._order_pos: list[int] = []
        self._order_rid: list[Optional[int]] = []
        self._dead = 0
        self._head = 0
        self._next_pos = 0

    def put(self, rid: int, value: Any) -> None:
        assert assumption(rid, int)
        assert rid not in self._values, f"record {rid} already stored"
        pos = self._next_pos
        self._next_pos += 1
        self._values[rid] = value
        self._positions[rid] = pos
        self._order_pos.append(pos)
        self._order_rid.append(rid)

    def get(self, rid: int) -> Any:
        assert rid in self._values, f"record {rid} is not stored"
        return self._values[rid]

    def replace(self, rid: int, value: Any) -> None:
        assert rid in self._values, f"record {rid} is not stored"
        self._values[rid] = value

    def remove(self, rid: int) -> Any:
        assert rid in self._values, f"record {rid} is not stored"
        pos = self._positions.pop(rid)
        value = self._values.pop(rid)
        i = bisect_left(self._order_pos, pos)
        self._order_rid[i] = None
        self._dead += 1
        if i == self._head:
            self._head = self._skip(i + 1)
        if self._dead >= _COMPACT_MIN and self._dead > len(self._values):
            self._compact()
        return value

    def _skip(self, i: int) -> int:
        while i < len(self._order_rid) and self._order_rid[i] is None:
            i += 1
        return i

    def _compact(self) -> None:
        live = [(p, r) for p, r in zip(self._order_pos, self._order_rid) if r is not None]
        self._order_pos = [p for p, _ in live]
        self._order_rid = [r for _, r in live]
        self._dead = 0
        self._head = 0

    def clear(self) -> None:
        self._values.clear()
        self._positions.clear()
        self._order_pos.clear()
        self._order_rid.clear()
        self._dead = 0
        self._head = 0

    def count(self) -> int:
        return len(self._values)

    def position(self, rid: int) -> int:
        return self._positions[rid]

    def holds(self, rid: int, pos: int) -> bool:
        """True if ``rid`` is live and was stored at enumeration position ``pos``."""
        return self._positions.get(rid) == pos

    def first(self) -> Optional[Position]:
        if self._head >= len(self._order_rid):
            return None
        return self._order_rid[self._head], self._order_pos[self._head]

    def next_after(self, pos: int) -> Optional[Position]:
        """Return the first live (rid, position) strictly after ``pos``."""
        i = self._skip(bisect_right(self._order_pos, pos))
        if i == len(self._order_pos):
            return None
        return self._order_rid[i], self._order_pos[i]

    def items(self) -> Iterator[tuple[int, Any]]:
        return iter(self._values.items())

    def values(self) -> Iterator[Any]:
        return iter(self._values.values())

    def copy(self, deep: bool = True, memo: Optional[dict] = None) -> ValueStore:
        clone = ValueStore()
        if deep:
            clone._values = copy.deepcopy(self._values, memo)
        else:
            clone._values = dict(self._values)
        clone._positions = dict(self._positions)
        clone._order_pos = list(self._order_pos)
        clone._order_rid = list(self._order_rid)
        clone._dead = self._dead
        clone._head = self._head
        clone._next_pos = self._next_pos
        return clone

    def __contains__(self, rid: object) -> bool:
        return rid in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)
