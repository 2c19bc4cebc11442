from enum import IntEnum

import pytest

from polykey import MapConfig, PathSpec, PolykeyMap


class Dim(IntEnum):
    InternalOrderId = 0
    ExternalOrderId = 1


@pytest.fixture
def order_paths():
    return [PathSpec("InternalOrderId", int), PathSpec("ExternalOrderId", str)]


@pytest.fixture
def tracker(order_paths):
    """Order tracker with four internal ids, two of them also linked externally."""
    otk = PolykeyMap(order_paths, MapConfig(name="orders"))
    otk.insert(Dim.InternalOrderId, 13, {"ticker": "AAPL", "svol": 100})
    otk.insert(Dim.InternalOrderId, 14, {"ticker": "MSFT", "svol": -100})
    otk.insert(Dim.InternalOrderId, 15, {"ticker": "TSLA", "svol": 20})
    otk.insert(Dim.InternalOrderId, 19, {"ticker": "FB", "svol": 50})
    otk.link(Dim.InternalOrderId, 13, Dim.ExternalOrderId, "1337")
    otk.link(Dim.InternalOrderId, 19, Dim.ExternalOrderId, "9865")
    return otk


@pytest.fixture
def pk():
    """Two anonymous paths: path1 with int keys, path2 with str keys."""
    return PolykeyMap(["path1", "path2"])
