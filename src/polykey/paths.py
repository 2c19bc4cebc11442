"""paths.py - Access path definitions and per-path key indices.

A PolykeyMap is configured once with its access paths. Paths can be given as

- an int (that many anonymous paths named ``path0``, ``path1``, ...)
- an Enum class (one path per member, in definition order)
- a sequence of names and/or PathSpec objects

and may afterwards be addressed by position, by name, or by Enum member.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Hashable, Iterable, Iterator, Optional, Union

from .exceptions import PathError
from .utils import assumption

PathRef = Union[int, str, Enum]
PathsArg = Union[int, type, Iterable[Union[str, "PathSpec"]]]


@dataclass(frozen=True)
class PathSpec:
    """Name and optional key type of one access path."""

    name: str
    key_type: Optional[type] = None

    def check(self, key: Any) -> None:
        if self.key_type is not None and not isinstance(key, self.key_type):
            raise TypeError(
                f"Key {key!r} for path '{self.name}' must be "
                f"{self.key_type.__name__}, got {type(key).__name__}"
            )


class PathIndex:
    """Unique key -> record identifier mapping for one access path."""

    __slots__ = ("spec", "_index")

    def __init__(self, spec: PathSpec) -> None:
        self.spec = spec
        self._index: dict[Hashable, int] = {}

    def find(self, key: Hashable) -> Optional[int]:
        try:
            return self._index.get(key)
        except TypeError:
            # unhashable keys can never have been inserted
            return None

    def insert(self, key: Hashable, rid: int) -> None:
        assert key not in self._index, f"key {key!r} already indexed"
        self._index[key] = rid

    def erase(self, key: Hashable) -> int:
        return self._index.pop(key)

    def clear(self) -> None:
        self._index.clear()

    def size(self) -> int:
        return len(self._index)

    def keys(self) -> Iterator[Hashable]:
        return iter(self._index)

    def items(self) -> Iterator[tuple[Hashable, int]]:
        return iter(self._index.items())

    def copy(self, memo: Optional[dict] = None) -> PathIndex:
        clone = PathIndex(self.spec)
        clone._index = {copy.deepcopy(k, memo): rid for k, rid in self._index.items()}
        return clone

    def __contains__(self, key: object) -> bool:
        return self.find(key) is not None

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"PathIndex({self.spec.name!r}, size={len(self._index)})"


class PathTable:
    """
    PathTable: The fixed set of access paths of one map.

    - Resolves a path reference (position, name or Enum member) to its
      position; unknown references raise PathError.
    - Immutable after construction and shared between copies of a map.
    """

    def __init__(self, paths: PathsArg) -> None:
        self.enum_type: Optional[type[Enum]] = None
        specs: list[PathSpec]
        if isinstance(paths, bool):
            raise TypeError("paths must be a count, an Enum class or a sequence")
        if isinstance(paths, int):
            specs = [PathSpec(f"path{i}") for i in range(paths)]
        elif isinstance(paths, type) and issubclass(paths, Enum):
            self.enum_type = paths
            specs = [PathSpec(member.name) for member in paths]
        else:
            specs = []
            for item in paths:
                if isinstance(item, PathSpec):
                    specs.append(item)
                else:
                    assert assumption(item, str)
                    specs.append(PathSpec(item))
        if not specs:
            raise ValueError("a map needs at least one access path")
        self.specs: tuple[PathSpec, ...] = tuple(specs)
        self._by_name: dict[str, int] = {}
        for i, spec in enumerate(self.specs):
            if spec.name in self._by_name:
                raise ValueError(f"Duplicate path name '{spec.name}'")
            self._by_name[spec.name] = i

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.specs)

    def resolve(self, path: PathRef) -> int:
        """Return the position of ``path``.

        Raises:
            PathError: If ``path`` does not name one of the configured paths
        """
        if isinstance(path, Enum):
            if self.enum_type is not None and isinstance(path, self.enum_type):
                return self._by_name[path.name]
            if isinstance(path, int):
                return self._resolve_position(int(path), path)
            return self._resolve_name(path.name, path)
        if isinstance(path, bool):
            raise PathError(f"Invalid path reference {path!r}", path=path)
        if isinstance(path, int):
            return self._resolve_position(path, path)
        if isinstance(path, str):
            return self._resolve_name(path, path)
        raise PathError(f"Invalid path reference {path!r}", path=path)

    def _resolve_position(self, position: int, ref: PathRef) -> int:
        if not 0 <= position < len(self.specs):
            raise PathError(
                f"Path index {position} out of range (map has {len(self.specs)} paths)",
                path=ref,
            )
        return position

    def _resolve_name(self, name: str, ref: PathRef) -> int:
        try:
            return self._by_name[name]
        except KeyError:
            raise PathError(
                f"Unknown path '{name}'. Available: {list(self._by_name)}", path=ref
            ) from None

    def __getitem__(self, position: int) -> PathSpec:
        return self.specs[position]

    def __len__(self) -> int:
        return len(self.specs)

    def __iter__(self) -> Iterator[PathSpec]:
        return iter(self.specs)

    def __repr__(self) -> str:
        return f"PathTable({list(self.names)!r})"
