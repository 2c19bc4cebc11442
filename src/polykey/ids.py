"""ids.py - Record identifier allocation."""

from __future__ import annotations

from typing import Container

from .constants import ID_BITS, ID_START
from .exceptions import CapacityExhaustedError
from .logger import get_logger

logger = get_logger(__name__)


class IdAllocator:
    """
    IdAllocator: Strictly increasing record identifiers.

    - Hands out the counter value, then advances it modulo 2**bits.
    - Before handing out an identifier it checks the caller's live set, so a
      wrapped counter can never silently overwrite a live record.
    """

    __slots__ = ("start", "bits", "_next")

    def __init__(self, start: int = ID_START, bits: int = ID_BITS) -> None:
        assert 0 <= start < (1 << bits), "start must fit in the identifier width"
        self.start = start
        self.bits = bits
        self._next = start

    def peek(self) -> int:
        return self._next

    def allocate(self, taken: Container[int]) -> int:
        """Return a fresh identifier not contained in ``taken``.

        Raises:
            CapacityExhaustedError: If the counter wrapped onto a live identifier
        """
        rid = self._next
        if rid in taken:
            logger.warning(
                f"[IdAllocator] Identifier {rid} already live, allocation refused"
            )
            raise CapacityExhaustedError(rid, self.bits)
        self._next = (rid + 1) & ((1 << self.bits) - 1)
        return rid

    def reset(self) -> None:
        self._next = self.start

    def copy(self) -> IdAllocator:
        clone = IdAllocator(self.start, self.bits)
        clone._next = self._next
        return clone

    def __repr__(self) -> str:
        return f"IdAllocator(start={self.start}, bits={self.bits}, next={self._next})"
