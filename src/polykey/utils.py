"""utils.py - Small contract helpers shared by the map's components."""

from __future__ import annotations

from typing import Any, Hashable


def assumption(obj: Any, *expected: type) -> bool:
    """Check ``obj`` against one or more accepted types.

    Meant for ``assert assumption(...)`` so the check vanishes under ``-O``.
    ``bool`` is never accepted as ``int``: record ids are plain integers.
    """
    if isinstance(obj, bool) and bool not in expected:
        _raise_assert(obj, expected)
    if isinstance(obj, expected):
        return True
    _raise_assert(obj, expected)
    return False


def _raise_assert(obj: Any, expected: tuple[type, ...]) -> None:
    got = f"{type(obj).__name__} (value: {obj!r})"
    if len(expected) == 1:
        raise AssertionError(f"Expected {expected[0].__name__}, instead got {got}")
    names = ", ".join(exp.__name__ for exp in expected)
    raise AssertionError(f"Expected one of ({names}), instead got {got}")


def require_hashable(key: Any, path: str) -> Hashable:
    """Return ``key`` if it can be indexed, else raise TypeError naming ``path``."""
    try:
        hash(key)
    except TypeError:
        raise TypeError(
            f"Key {key!r} for path '{path}' is unhashable ({type(key).__name__})"
        ) from None
    return key
