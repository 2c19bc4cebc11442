"""Tests for identifier exhaustion handling in PolykeyMap."""

import pytest

from polykey import (
    CapacityExhaustedError,
    ErrorKind,
    KeyNotFoundError,
    MapConfig,
    PolykeyMap,
)


def test_insert_refused_when_identifiers_exhausted():
    pk = PolykeyMap(["a", "b"], MapConfig(id_bits=2))
    for i in range(4):
        pk.insert("a", i, f"v{i}")

    with pytest.raises(CapacityExhaustedError) as excinfo:
        pk.insert("a", 4, "v4")
    assert excinfo.value.kind is ErrorKind.CAPACITY_EXHAUSTED
    assert isinstance(excinfo.value, OverflowError)

    # Nothing was overwritten or half-inserted
    assert pk.size() == 4
    assert not pk.contains("a", 4)
    assert pk.at("a", 0) == "v0"
    assert pk.audit_indices()["consistent"]


def test_identifier_reused_only_after_erase():
    pk = PolykeyMap(["a"], MapConfig(id_bits=2))
    for i in range(4):
        pk.insert("a", i, i)
    pk.erase("a", 0)
    pk.insert("a", 10, 10)
    assert pk.at("a", 10) == 10
    with pytest.raises(CapacityExhaustedError):
        pk.insert("a", 11, 11)
    assert pk.metrics.get_metrics()["failures"]["capacity_exhausted"] == 1


def test_stale_cursor_does_not_follow_reused_identifier():
    """A cursor on an erased record stays stale after its id is handed out again."""
    pk = PolykeyMap(["a"], MapConfig(id_bits=2))
    for i in range(4):
        pk.insert("a", i, f"v{i}")
    stale = pk.find("a", 0)
    pk.erase("a", 0)
    pk.insert("a", 10, "v10")  # takes over id 0

    with pytest.raises(KeyNotFoundError, match="erased"):
        stale.value
    with pytest.raises(KeyNotFoundError, match="erased"):
        pk.erase(stale)
    assert pk.contains("a", 10)
    assert pk.find("a", 10).value == "v10"
    assert stale.advance().value == "v1"
