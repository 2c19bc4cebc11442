"""cursor.py - Positional iteration over a PolykeyMap with key introspection.

A cursor is a read-through view: it stores only the owning map, a record
identifier and that record's enumeration position. Values and keys are looked
up on demand, so cursors stay valid across inserts and erases of *other*
records. A cursor whose own record was erased can still be advanced.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, Optional

from .exceptions import KeyNotFoundError
from .paths import PathRef

if TYPE_CHECKING:
    from .polykey_map import PolykeyMap


class ConstValueCursor:
    """Read-only cursor: the value cannot be rebound through it."""

    __slots__ = ("_map", "_rid", "_pos")

    def __init__(
        self, owner: PolykeyMap, rid: Optional[int] = None, pos: Optional[int] = None
    ) -> None:
        self._map = owner
        self._rid = rid
        self._pos = pos

    @property
    def at_end(self) -> bool:
        return self._rid is None

    def _require_live(self) -> int:
        if self._rid is None:
            raise KeyNotFoundError("Cursor is at the end of the map")
        if not self._map._values.holds(self._rid, self._pos):
            raise KeyNotFoundError(f"Record {self._rid} under cursor was erased")
        return self._rid

    @property
    def value(self) -> Any:
        return self._map._values.get(self._require_live())

    def has_key(self, path: PathRef) -> bool:
        """True if the record under the cursor has a key on ``path``."""
        p = self._map._paths.resolve(path)
        return self._map._keysets.get(self._require_live()).has_key(p)

    def get_key(self, path: PathRef) -> Any:
        """Return the record's key on ``path``.

        Raises:
            KeyNotFoundError: If the record has no key on ``path``
        """
        p = self._map._paths.resolve(path)
        keyset = self._map._keysets.get(self._require_live())
        if not keyset.has_key(p):
            raise KeyNotFoundError(
                f"Record has no key for path '{self._map._paths[p].name}'", path=path
            )
        return keyset.get_key(p)

    def keys(self) -> dict[str, Any]:
        """Path name -> key for every path the record is reachable by."""
        keyset = self._map._keysets.get(self._require_live())
        return {self._map._paths[p].name: key for p, key in keyset.occupied()}

    def advance(self) -> ConstValueCursor:
        """Move to the next live record in place and return self."""
        if self._pos is None:
            raise IndexError("Cannot advance a cursor past the end of the map")
        following = self._map._values.next_after(self._pos)
        if following is None:
            self._rid = self._pos = None
        else:
            self._rid, self._pos = following
        return self

    def next(self) -> ConstValueCursor:
        """Return a new cursor one step ahead, leaving this one in place."""
        return self.copy().advance()

    def walk(self) -> Iterator[ConstValueCursor]:
        """Yield a cursor for this and every following live record."""
        cur = self.copy()
        while not cur.at_end:
            yield cur
            cur = cur.next()

    def __iter__(self) -> Iterator[ConstValueCursor]:
        return self.walk()

    def copy(self) -> ConstValueCursor:
        return type(self)(self._map, self._rid, self._pos)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConstValueCursor):
            return NotImplemented
        return self._map is other._map and self._pos == other._pos

    def __hash__(self) -> int:
        return hash((id(self._map), self._pos))

    def __repr__(self) -> str:
        if self._rid is None:
            return f"{type(self).__name__}(<end>)"
        return f"{type(self).__name__}(record={self._rid})"


class ValueCursor(ConstValueCursor):
    """Mutable cursor: ``cursor.value = ...`` rebinds the stored value."""

    __slots__ = ()

    @property
    def value(self) -> Any:
        return self._map._values.get(self._require_live())

    @value.setter
    def value(self, new_value: Any) -> None:
        self._map._values.replace(self._require_live(), new_value)

    def as_const(self) -> ConstValueCursor:
        return ConstValueCursor(self._map, self._rid, self._pos)
