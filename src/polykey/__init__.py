"""polykey - in-memory container whose values are reachable through several key paths."""

from .config import MapConfig
from .constants import ErrorKind
from .cursor import ConstValueCursor, ValueCursor
from .exceptions import (
    CapacityExhaustedError,
    KeyConflictError,
    KeyNotFoundError,
    PathError,
    PolykeyError,
)
from .paths import PathSpec
from .polykey_map import PolykeyMap, PolykeyView

__all__ = [
    "CapacityExhaustedError",
    "ConstValueCursor",
    "ErrorKind",
    "KeyConflictError",
    "KeyNotFoundError",
    "MapConfig",
    "PathError",
    "PathSpec",
    "PolykeyError",
    "PolykeyMap",
    "PolykeyView",
    "ValueCursor",
]
