"""config.py - Construction-time configuration for PolykeyMap."""

from __future__ import annotations

from dataclasses import dataclass, replace

from .constants import ID_BITS, ID_START


@dataclass(frozen=True)
class MapConfig:
    """Tunable parameters of a single PolykeyMap instance.

    Immutable: derive variants with with_overrides().
    """

    # Label used in log lines and exported metrics
    name: str = "polykey"
    # First record identifier handed out by the allocator
    id_start: int = ID_START
    # Identifier width; the counter wraps modulo 2**id_bits
    id_bits: int = ID_BITS
    # copy() also deep-copies stored values (False shares them)
    deep_copy_values: bool = True

    def __post_init__(self) -> None:
        if self.id_bits <= 0:
            raise ValueError(f"id_bits must be positive, got {self.id_bits}")
        if not 0 <= self.id_start < (1 << self.id_bits):
            raise ValueError(
                f"id_start {self.id_start} outside {self.id_bits}-bit identifier range"
            )

    def with_overrides(self, **changes) -> MapConfig:
        """Return a copy of this config with ``changes`` applied."""
        return replace(self, **changes)
