"""constants.py - Identifier constants and error kinds for polykey."""

from __future__ import annotations

from enum import Enum

# Record identifiers
ID_START: int = 0
ID_BITS: int = 64

# Metric names are prefixed so several maps can share one registry
METRICS_PREFIX = "polykey"


class ErrorKind(Enum):
    KEY_CONFLICT = "key_conflict"
    KEY_NOT_FOUND = "key_not_found"
    CAPACITY_EXHAUSTED = "capacity_exhausted"
    INVALID_PATH = "invalid_path"

    @classmethod
    def from_value(cls, value: str) -> ErrorKind:
        try:
            return cls(value)
        except ValueError as e:
            raise ValueError(f"Unknown ErrorKind value: {value}") from e
