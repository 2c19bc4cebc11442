"""keysets.py - Per-record key slots, one slot per access path."""

from __future__ import annotations

import copy
from typing import Any, Iterator, Optional

from .utils import assumption


class _Empty:
    """Marker for an unoccupied slot; keys may legitimately be None."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<empty>"

    def __copy__(self) -> _Empty:
        return self

    def __deepcopy__(self, memo: dict) -> _Empty:
        return self


_EMPTY: Any = _Empty()


class Keyset:
    """
    Keyset: Which access paths currently resolve to one record.

    - Fixed arity, decided at construction; each slot is empty or holds the
      record's single key for that path.
    - A live record always has at least one occupied slot; only a full erase
      clears the last one.
    """

    __slots__ = ("_slots",)

    def __init__(self, arity: int) -> None:
        assert arity > 0, "a keyset needs at least one slot"
        self._slots: list[Any] = [_EMPTY] * arity

    @property
    def arity(self) -> int:
        return len(self._slots)

    def set_key(self, path: int, key: Any) -> None:
        """Set a key (overwrites an existing one)."""
        self._slots[path] = key

    def clear_key(self, path: int) -> None:
        self._slots[path] = _EMPTY

    def has_key(self, path: int) -> bool:
        return self._slots[path] is not _EMPTY

    def get_key(self, path: int) -> Any:
        """Return the key for ``path``; only valid after has_key() is True."""
        key = self._slots[path]
        assert key is not _EMPTY, f"no key set for path {path}"
        return key

    def occupied(self) -> Iterator[tuple[int, Any]]:
        for path, key in enumerate(self._slots):
            if key is not _EMPTY:
                yield path, key

    def is_empty(self) -> bool:
        return all(key is _EMPTY for key in self._slots)

    def copy(self, memo: Optional[dict] = None) -> Keyset:
        """Slot-by-slot deep copy, so two containers never share a key object."""
        clone = Keyset(len(self._slots))
        clone._slots = [copy.deepcopy(key, memo) for key in self._slots]
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Keyset):
            return NotImplemented
        return self._slots == other._slots

    def __repr__(self) -> str:
        return f"Keyset({self._slots!r})"


class KeysetRegistry:
    """Record identifier -> Keyset."""

    def __init__(self, arity: int) -> None:
        self.arity = arity
        self._keysets: dict[int, Keyset] = {}

    def create(self, rid: int, path: int, key: Any) -> Keyset:
        """Register a new keyset for ``rid`` with only ``path`` occupied."""
        assert assumption(rid, int)
        assert rid not in self._keysets, f"keyset for record {rid} already exists"
        keyset = Keyset(self.arity)
        keyset.set_key(path, key)
        self._keysets[rid] = keyset
        return keyset

    def get(self, rid: int) -> Keyset:
        assert rid in self._keysets, f"no keyset for record {rid}"
        return self._keysets[rid]

    def discard(self, rid: int) -> None:
        keyset = self._keysets.pop(rid)
        assert keyset.is_empty(), "keyset discarded while keys are still linked"

    def clear(self) -> None:
        self._keysets.clear()

    def items(self) -> Iterator[tuple[int, Keyset]]:
        return iter(self._keysets.items())

    def copy(self, memo: Optional[dict] = None) -> KeysetRegistry:
        clone = KeysetRegistry(self.arity)
        clone._keysets = {rid: ks.copy(memo) for rid, ks in self._keysets.items()}
        return clone

    def __contains__(self, rid: object) -> bool:
        return rid in self._keysets

    def __len__(self) -> int:
        return len(self._keysets)
