r"""polykey_map.py - Many-to-one container reachable through several key paths.

Layout of one map:

    path index 0:  key --\
    path index 1:  key ---+--> record id --> keyset (one slot per path)
    path index 2:  key --/            \---> value

- A value is stored once under an internal record identifier.
- Each access path has its own unique-key index pointing at record ids.
- Each record has a keyset recording which key (if any) it has per path, so
  erasing through any one key can remove every other key of that record.

This is the relational analogue of a table with one value column and N
nullable, individually unique key columns.
"""

from __future__ import annotations

import copy
from typing import Any, Hashable, Iterator, Optional

from .config import MapConfig
from .cursor import ConstValueCursor, ValueCursor
from .exceptions import (
    CapacityExhaustedError,
    KeyConflictError,
    KeyNotFoundError,
    PathError,
    PolykeyError,
)
from .ids import IdAllocator
from .keysets import KeysetRegistry
from .logger import get_logger
from .metrics import MapMetrics
from .paths import PathIndex, PathRef, PathsArg, PathSpec, PathTable
from .utils import require_hashable
from .values import ValueStore

logger = get_logger(__name__)

_MISSING: Any = object()


class PolykeyMap:
    """
    PolykeyMap: Stores values retrievable by up to one key per access path.

    - Within a path, keys are unique; each key points to exactly one value.
    - A value is created with one key (insert) and may gain keys on other
      paths (link). It never loses a key except by being erased as a whole.
    - Not thread-safe: callers sharing a map across threads must serialize
      access themselves.

    Example:
        orders = PolykeyMap(["internal", "external"])
        orders.insert("internal", 13, {"ticker": "AAPL", "svol": 100})
        orders.link("internal", 13, "external", "1337")
        orders.at("external", "1337")["svol"] = 50
    """

    def __init__(self, paths: PathsArg, config: Optional[MapConfig] = None) -> None:
        self.config = config if config is not None else MapConfig()
        self._paths = PathTable(paths)
        self._ids = IdAllocator(self.config.id_start, self.config.id_bits)
        self._values = ValueStore()
        self._keysets = KeysetRegistry(len(self._paths))
        self._indices = [PathIndex(spec) for spec in self._paths]
        self.metrics = MapMetrics(self.config.name)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def paths(self) -> tuple[str, ...]:
        """Names of the access paths, in position order."""
        return self._paths.names

    @property
    def path_specs(self) -> tuple[PathSpec, ...]:
        return self._paths.specs

    def _path(self, path: PathRef) -> int:
        try:
            return self._paths.resolve(path)
        except PathError as e:
            raise self._refuse(e) from None

    def _name(self, p: int) -> str:
        return self._paths[p].name

    def _refuse(self, exc: PolykeyError) -> PolykeyError:
        self.metrics.record_failure(exc.kind)
        logger.debug(f"[PolykeyMap:{self.config.name}] Refused: {exc}")
        return exc

    def _check_key(self, p: int, key: Any) -> None:
        """Reject keys that could never be indexed, before anything mutates."""
        self._paths[p].check(key)
        require_hashable(key, self._name(p))

    def _require(self, p: int, key: Any) -> int:
        rid = self._indices[p].find(key)
        if rid is None:
            raise self._refuse(
                KeyNotFoundError(
                    f"Key {key!r} does not exist for path '{self._name(p)}'",
                    path=self._name(p),
                    key=key,
                )
            )
        return rid

    # ------------------------------------------------------------------
    # Container behaviour
    # ------------------------------------------------------------------

    def size(self, path: Optional[PathRef] = None) -> int:
        """Number of stored values, or number of keys on ``path`` if given.

        The two differ whenever some records have no key on ``path``.
        """
        if path is None:
            return self._values.count()
        return self._indices[self._path(path)].size()

    def __len__(self) -> int:
        return self._values.count()

    def insert(self, path: PathRef, key: Hashable, value: Any) -> None:
        """Insert a new value reachable by ``key`` on ``path``.

        Raises:
            KeyConflictError: If ``key`` already exists for ``path``
            CapacityExhaustedError: If no fresh record identifier is available
            TypeError: If ``key`` is unhashable or of the wrong type for ``path``
        """
        p = self._path(path)
        self._check_key(p, key)
        index = self._indices[p]
        if key in index:
            raise self._refuse(
                KeyConflictError(
                    f"Key {key!r} already exists for path '{self._name(p)}'",
                    path=self._name(p),
                    key=key,
                )
            )
        try:
            rid = self._ids.allocate(self._values)
        except CapacityExhaustedError as e:
            raise self._refuse(e) from None

        self._values.put(rid, value)
        self._keysets.create(rid, p, key)
        index.insert(key, rid)
        self.metrics.record("inserts")
        logger.debug(
            f"[PolykeyMap:{self.config.name}] Inserted record {rid} "
            f"via {self._name(p)}={key!r}"
        )

    def at(self, path: PathRef, key: Hashable) -> Any:
        """Return the value ``key`` points to on ``path``.

        The stored object itself is returned, so in-place mutations are
        visible through every key of the record.

        Raises:
            KeyNotFoundError: If ``key`` does not exist for ``path``
        """
        p = self._path(path)
        rid = self._require(p, key)
        self.metrics.record("lookups")
        return self._values.get(rid)

    def get(self, path: PathRef, key: Hashable, default: Any = None) -> Any:
        p = self._path(path)
        rid = self._indices[p].find(key)
        if rid is None:
            return default
        self.metrics.record("lookups")
        return self._values.get(rid)

    def set_value(self, path: PathRef, key: Hashable, value: Any) -> None:
        """Rebind the value ``key`` points to on ``path``; keys are unchanged.

        Raises:
            KeyNotFoundError: If ``key`` does not exist for ``path``
        """
        p = self._path(path)
        rid = self._require(p, key)
        self._values.replace(rid, value)

    def __getitem__(self, item: tuple[PathRef, Hashable]) -> Any:
        path, key = item
        return self.at(path, key)

    def link(
        self, path1: PathRef, key1: Hashable, path2: PathRef, key2: Hashable
    ) -> None:
        """Make two keys on different paths point to the same value.

        Exactly one of the keys must already exist; the other one is attached
        to the existing key's record. Linking is never idempotent: two
        existing keys are refused even when they already share a record.

        Raises:
            PathError: If ``path1`` and ``path2`` are the same path
            KeyNotFoundError: If neither key exists
            KeyConflictError: If both keys exist, or the existing record
                already has a key on the other path
        """
        p1 = self._path(path1)
        p2 = self._path(path2)
        if p1 == p2:
            raise self._refuse(
                PathError(
                    f"link() requires two different paths, got '{self._name(p1)}' twice",
                    path=path1,
                )
            )

        rid1 = self._indices[p1].find(key1)
        rid2 = self._indices[p2].find(key2)

        if rid1 is None and rid2 is None:
            raise self._refuse(KeyNotFoundError("link(): keys do not exist"))
        if rid1 is not None and rid2 is not None:
            raise self._refuse(KeyConflictError("link(): both keys already exist"))

        if rid1 is not None:
            self._attach(rid1, p2, key2)
        else:
            self._attach(rid2, p1, key1)

    def _attach(self, rid: int, p: int, key: Hashable) -> None:
        self._check_key(p, key)
        keyset = self._keysets.get(rid)
        if keyset.has_key(p):
            raise self._refuse(
                KeyConflictError(
                    f"link(): record already has key {keyset.get_key(p)!r} "
                    f"for path '{self._name(p)}'",
                    path=self._name(p),
                    key=key,
                )
            )
        keyset.set_key(p, key)
        self._indices[p].insert(key, rid)
        self.metrics.record("links")
        logger.debug(
            f"[PolykeyMap:{self.config.name}] Linked {self._name(p)}={key!r} "
            f"to record {rid}"
        )

    def contains(self, path: PathRef, key: Hashable) -> bool:
        """True if ``key`` exists for ``path``."""
        return key in self._indices[self._path(path)]

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, tuple) or len(item) != 2:
            raise TypeError("membership test expects a (path, key) tuple")
        path, key = item
        return self.contains(path, key)

    def is_linked(self, path1: PathRef, key1: Hashable, path2: PathRef) -> bool:
        """True if the value ``key1`` points to is also reachable via ``path2``.

        Raises:
            KeyNotFoundError: If ``key1`` does not exist for ``path1``
        """
        p1 = self._path(path1)
        p2 = self._path(path2)
        rid = self._require(p1, key1)
        return self._keysets.get(rid).has_key(p2)

    def convert_key(self, path1: PathRef, key1: Hashable, path2: PathRef) -> Any:
        """Given a key on ``path1``, return the same record's key on ``path2``.

        Raises:
            KeyNotFoundError: If ``key1`` does not exist for ``path1``, or its
                record has no key for ``path2``
        """
        p1 = self._path(path1)
        p2 = self._path(path2)
        rid = self._require(p1, key1)
        keyset = self._keysets.get(rid)
        if not keyset.has_key(p2):
            raise self._refuse(
                KeyNotFoundError(
                    f"Key {key1!r} has no linked key for path '{self._name(p2)}'",
                    path=self._name(p2),
                    key=key1,
                )
            )
        return keyset.get_key(p2)

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def _erase_record(self, rid: int) -> None:
        keyset = self._keysets.get(rid)
        for p, key in list(keyset.occupied()):
            self._indices[p].erase(key)
            keyset.clear_key(p)
        self._keysets.discard(rid)
        self._values.remove(rid)
        self.metrics.record("erases")
        logger.debug(f"[PolykeyMap:{self.config.name}] Erased record {rid}")

    def erase(self, target: Any, key: Any = _MISSING) -> Optional[ValueCursor]:
        """Remove a value together with every key pointing to it.

        Called as ``erase(path, key)`` it returns None. Called as
        ``erase(cursor)`` it returns a cursor to the next live record (or the
        end cursor), so a loop can keep going after the removal.

        Raises:
            KeyNotFoundError: If ``key`` does not exist for ``path``, or the
                cursor is at the end or its record is already gone
        """
        if key is _MISSING:
            if not isinstance(target, ConstValueCursor):
                raise TypeError("erase() takes (path, key) or a cursor")
            return self._erase_at(target)
        p = self._path(target)
        rid = self._require(p, key)
        self._erase_record(rid)
        return None

    def _erase_at(self, cursor: ConstValueCursor) -> ValueCursor:
        if not isinstance(cursor, ValueCursor):
            raise TypeError("cannot erase through a read-only cursor")
        if cursor._map is not self:
            raise ValueError("cursor belongs to a different map")
        try:
            rid = cursor._require_live()
        except KeyNotFoundError as e:
            raise self._refuse(e) from None
        pos = cursor._pos
        self._erase_record(rid)
        following = self._values.next_after(pos)
        if following is None:
            return ValueCursor(self)
        return ValueCursor(self, *following)

    def __delitem__(self, item: tuple[PathRef, Hashable]) -> None:
        path, key = item
        self.erase(path, key)

    def clear(self) -> None:
        """Erase every record. Identifiers keep counting from where they were."""
        for index in self._indices:
            index.clear()
        self._keysets.clear()
        self._values.clear()
        logger.debug(f"[PolykeyMap:{self.config.name}] Cleared")

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Any]:
        return self._values.values()

    def entries(self) -> Iterator[tuple[Any, dict[str, Any]]]:
        """Yield ``(value, {path name: key})`` for every live record."""
        for rid, value in self._values.items():
            keyset = self._keysets.get(rid)
            yield value, {self._name(p): key for p, key in keyset.occupied()}

    def _first(self, cursor_type: type[ConstValueCursor]) -> ConstValueCursor:
        first = self._values.first()
        if first is None:
            return cursor_type(self)
        return cursor_type(self, *first)

    def begin(self) -> ValueCursor:
        return self._first(ValueCursor)

    def end(self) -> ValueCursor:
        return ValueCursor(self)

    def cbegin(self) -> ConstValueCursor:
        return self._first(ConstValueCursor)

    def cend(self) -> ConstValueCursor:
        return ConstValueCursor(self)

    def find(self, path: PathRef, key: Hashable) -> ValueCursor:
        """Cursor positioned on the record ``key`` points to, or end()."""
        rid = self._indices[self._path(path)].find(key)
        if rid is None:
            return self.end()
        return ValueCursor(self, rid, self._values.position(rid))

    # ------------------------------------------------------------------
    # Copy & move
    # ------------------------------------------------------------------

    def __deepcopy__(self, memo: dict) -> PolykeyMap:
        clone = PolykeyMap.__new__(PolykeyMap)
        memo[id(self)] = clone
        clone.config = self.config
        clone._paths = self._paths
        clone._ids = self._ids.copy()
        clone._values = self._values.copy(self.config.deep_copy_values, memo)
        clone._keysets = self._keysets.copy(memo)
        clone._indices = [index.copy(memo) for index in self._indices]
        clone.metrics = self.metrics.copy()
        return clone

    def copy(self) -> PolykeyMap:
        """Independent copy: values, keysets and indices are all duplicated."""
        return copy.deepcopy(self)

    __copy__ = copy

    def move(self) -> PolykeyMap:
        """Transfer all contents to a new map and reset this one to empty.

        Afterwards this map behaves like a freshly constructed one, including
        its identifier counter.
        """
        moved = PolykeyMap.__new__(PolykeyMap)
        moved.config = self.config
        moved._paths = self._paths
        moved._ids = self._ids
        moved._values = self._values
        moved._keysets = self._keysets
        moved._indices = self._indices
        moved.metrics = self.metrics

        self._ids = IdAllocator(self.config.id_start, self.config.id_bits)
        self._values = ValueStore()
        self._keysets = KeysetRegistry(len(self._paths))
        self._indices = [PathIndex(spec) for spec in self._paths]
        self.metrics = MapMetrics(self.config.name)
        logger.debug(
            f"[PolykeyMap:{self.config.name}] Moved {len(moved)} records out"
        )
        return moved

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def view(self) -> PolykeyView:
        """Live read-only facade over this map."""
        return PolykeyView(self)

    def audit_indices(self) -> dict[str, Any]:
        """Audit that path indices, keysets and values agree with each other.

        Returns:
            Dictionary with audit results:
            - 'consistent': Overall consistency status (bool)
            - 'errors': List of error dictionaries with details
            - 'warnings': List of warning dictionaries
            - 'stats': Record, keyset and per-path key counts

        Examples:
            result = orders.audit_indices()
            if not result['consistent']:
                for error in result['errors']:
                    print(f"{error['path']}: {error['message']}")
        """
        errors: list[dict[str, Any]] = []
        warnings: list[dict[str, Any]] = []

        for p, index in enumerate(self._indices):
            name = self._name(p)
            for key, rid in index.items():
                if rid not in self._keysets:
                    errors.append({
                        "path": name,
                        "key": key,
                        "message": f"index entry points at record {rid} without keyset",
                    })
                    continue
                keyset = self._keysets.get(rid)
                if not keyset.has_key(p) or keyset.get_key(p) != key:
                    errors.append({
                        "path": name,
                        "key": key,
                        "message": f"keyset of record {rid} does not hold this key",
                    })
                if rid not in self._values:
                    errors.append({
                        "path": name,
                        "key": key,
                        "message": f"index entry points at record {rid} without value",
                    })

        for rid, keyset in self._keysets.items():
            if keyset.is_empty():
                errors.append({
                    "path": None,
                    "key": None,
                    "message": f"record {rid} has no keys",
                })
            for p, key in keyset.occupied():
                if self._indices[p].find(key) != rid:
                    errors.append({
                        "path": self._name(p),
                        "key": key,
                        "message": f"key of record {rid} is not indexed to it",
                    })
            if rid not in self._values:
                errors.append({
                    "path": None,
                    "key": None,
                    "message": f"keyset of record {rid} has no value",
                })

        for rid in self._values:
            if rid not in self._keysets:
                errors.append({
                    "path": None,
                    "key": None,
                    "message": f"value of record {rid} has no keyset",
                })

        if self._ids.peek() in self._values:
            warnings.append({
                "path": None,
                "key": None,
                "message": "identifier space wrapped; next insert will be refused",
            })

        return {
            "consistent": not errors,
            "errors": errors,
            "warnings": warnings,
            "stats": {
                "records": len(self._values),
                "keysets": len(self._keysets),
                "keys_per_path": {
                    self._name(p): index.size() for p, index in enumerate(self._indices)
                },
                "next_id": self._ids.peek(),
            },
        }

    def expose_prometheus_metrics(self, registry=None) -> list[Any]:
        details = {
            "paths": ",".join(self.paths),
            "id_bits": str(self.config.id_bits),
        }
        return self.metrics.expose_prometheus_metrics(
            len(self), registry=registry, details=details
        )

    def __repr__(self) -> str:
        return f"PolykeyMap(paths={list(self.paths)!r}, size={len(self)})"


class PolykeyView:
    """Read-only facade over a PolykeyMap; reflects later changes to it."""

    __slots__ = ("_map",)

    def __init__(self, owner: PolykeyMap) -> None:
        self._map = owner

    @property
    def paths(self) -> tuple[str, ...]:
        return self._map.paths

    def size(self, path: Optional[PathRef] = None) -> int:
        return self._map.size(path)

    def __len__(self) -> int:
        return len(self._map)

    def at(self, path: PathRef, key: Hashable) -> Any:
        return self._map.at(path, key)

    def get(self, path: PathRef, key: Hashable, default: Any = None) -> Any:
        return self._map.get(path, key, default)

    def __getitem__(self, item: tuple[PathRef, Hashable]) -> Any:
        path, key = item
        return self._map.at(path, key)

    def contains(self, path: PathRef, key: Hashable) -> bool:
        return self._map.contains(path, key)

    def __contains__(self, item: object) -> bool:
        return item in self._map

    def is_linked(self, path1: PathRef, key1: Hashable, path2: PathRef) -> bool:
        return self._map.is_linked(path1, key1, path2)

    def convert_key(self, path1: PathRef, key1: Hashable, path2: PathRef) -> Any:
        return self._map.convert_key(path1, key1, path2)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._map)

    def entries(self) -> Iterator[tuple[Any, dict[str, Any]]]:
        return self._map.entries()

    def cbegin(self) -> ConstValueCursor:
        return self._map.cbegin()

    def cend(self) -> ConstValueCursor:
        return self._map.cend()

    begin = cbegin
    end = cend

    def __repr__(self) -> str:
        return f"PolykeyView({self._map!r})"
