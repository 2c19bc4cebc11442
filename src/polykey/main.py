"""main.py - Example usage and entry point for polykey

Tracks orders that are known by an internal numeric id and, once the
exchange acknowledges them, also by an external string id.

    python -m polykey.main
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .config import MapConfig
from .paths import PathSpec
from .polykey_map import PolykeyMap


class Dim(IntEnum):
    InternalOrderId = 0
    ExternalOrderId = 1


@dataclass
class Order:
    ticker: str
    svol: int

    def __str__(self) -> str:
        return f"{self.ticker}:{self.svol}"


def make_tracker() -> PolykeyMap:
    return PolykeyMap(
        [
            PathSpec("InternalOrderId", int),
            PathSpec("ExternalOrderId", str),
        ],
        MapConfig(name="orders"),
    )


def output_test(orders: PolykeyMap) -> None:
    view = orders.view()
    for order in view:
        print(order)
    if view.contains(Dim.InternalOrderId, 14):
        print(f"contains {view.at(Dim.InternalOrderId, 14)}")


def main() -> None:
    otk = make_tracker()

    otk.insert(Dim.InternalOrderId, 13, Order("AAPL", 100))
    otk.insert(Dim.InternalOrderId, 14, Order("MSFT", -100))
    otk.insert(Dim.InternalOrderId, 15, Order("TSLA", 20))
    otk.insert(Dim.InternalOrderId, 19, Order("FB", 50))

    print(otk.at(Dim.InternalOrderId, 13))

    otk.link(Dim.InternalOrderId, 13, Dim.ExternalOrderId, "1337")
    otk.link(Dim.InternalOrderId, 19, Dim.ExternalOrderId, "9865")

    print(f"{otk.size(Dim.InternalOrderId)} != {otk.size(Dim.ExternalOrderId)}")

    otk.at(Dim.ExternalOrderId, "1337").svol = 50
    print(otk.at(Dim.InternalOrderId, 13))

    otk.erase(Dim.ExternalOrderId, "1337")

    it = otk.begin()
    while not it.at_end:
        if it.value.ticker == "TSLA":
            it = otk.erase(it)
            continue
        cit = it.as_const()
        print(f"not erased={cit.value}")
        for dim in Dim:
            key = cit.get_key(dim) if cit.has_key(dim) else "N/A"
            print(f"{dim.name}={key}")
        it.advance()

    for order in otk:
        print(order)
    print(len(otk))

    otk_copy = otk.copy()
    otk_copy2 = otk.move()

    print(f"otk.size()={otk.size()}")
    print(f"otk_copy.size()={otk_copy.size()}")
    print(f"otk_copy2.size()={otk_copy2.size()}")

    output_test(otk_copy)

    print(otk_copy.is_linked(Dim.InternalOrderId, 19, Dim.ExternalOrderId))
    print(
        f"converted key={otk_copy.convert_key(Dim.InternalOrderId, 19, Dim.ExternalOrderId)}"
    )


if __name__ == "__main__":
    main()
