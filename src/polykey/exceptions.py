"""exceptions.py - Exception hierarchy for PolykeyMap operations.

Every public failure carries an explicit ``kind`` (see ``ErrorKind``) so
callers can branch on the failure category without relying on class names:

- KeyConflictError: a path-index uniqueness constraint would be violated
- KeyNotFoundError: a key that must resolve to a record does not
- CapacityExhaustedError: no fresh record identifier is available
- PathError: a path reference does not name a configured access path
"""

from __future__ import annotations

from typing import Any, Hashable

from .constants import ErrorKind


class PolykeyError(Exception):
    """Base exception for all polykey errors."""

    kind: ErrorKind

    def __init__(self, message: str, path: Any = None, key: Any = None):
        self.path = path
        self.key = key
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else ""


class KeyConflictError(PolykeyError):
    """Raised when a key already exists where it must not.

    Examples:
        - insert() with a key already present on that path
        - link() where both keys already resolve to records
        - link() onto a record that already has a key on the target path
    """

    kind = ErrorKind.KEY_CONFLICT


class KeyNotFoundError(PolykeyError, KeyError):
    """Raised when a key does not resolve to a record on its path.

    Subclasses KeyError so that mapping-style callers can keep catching that.
    """

    kind = ErrorKind.KEY_NOT_FOUND


class CapacityExhaustedError(PolykeyError, OverflowError):
    """Raised when the identifier allocator wraps onto a live identifier."""

    kind = ErrorKind.CAPACITY_EXHAUSTED

    def __init__(self, rid: int, bits: int):
        self.rid = rid
        self.bits = bits
        super().__init__(
            f"Record identifier space exhausted: {rid} is still live "
            f"({bits}-bit identifiers)"
        )


class PathError(PolykeyError, LookupError, ValueError):
    """Raised when a path reference is unknown or two paths must differ."""

    kind = ErrorKind.INVALID_PATH

    def __init__(self, message: str, path: Hashable = None):
        super().__init__(message, path=path)
