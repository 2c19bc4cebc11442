"""Tests for deep-copy isolation and move semantics."""

import copy

from polykey import MapConfig, PolykeyMap


def test_copy_is_deep(tracker):
    clone = tracker.copy()
    clone.at("InternalOrderId", 13)["svol"] = 0
    clone.erase("InternalOrderId", 14)
    clone.link("InternalOrderId", 15, "ExternalOrderId", "4242")

    assert tracker.at("InternalOrderId", 13)["svol"] == 100
    assert tracker.contains("InternalOrderId", 14)
    assert not tracker.contains("ExternalOrderId", "4242")
    assert tracker.size() == 4
    assert clone.size() == 3
    assert clone.audit_indices()["consistent"]


def test_copy_module_protocols(tracker):
    for clone in (copy.copy(tracker), copy.deepcopy(tracker)):
        assert clone is not tracker
        assert list(clone) == list(tracker)
        clone.at("InternalOrderId", 19)["ticker"] = "META"
        assert tracker.at("InternalOrderId", 19)["ticker"] == "FB"


def test_copy_continues_identifier_sequence(pk):
    pk.insert(0, 1, "a")
    pk.insert(0, 2, "b")
    clone = pk.copy()
    clone.insert(0, 3, "c")
    assert clone.audit_indices()["stats"]["next_id"] == 3
    assert pk.audit_indices()["stats"]["next_id"] == 2


def test_copy_can_share_values():
    pk = PolykeyMap(["a"], MapConfig(deep_copy_values=False))
    pk.insert("a", 1, ["shared"])
    clone = pk.copy()
    clone.at("a", 1).append("seen")
    assert pk.at("a", 1) == ["shared", "seen"]
    clone.erase("a", 1)
    assert pk.contains("a", 1)


def test_move_transfers_and_empties_source(tracker):
    before = list(tracker)
    moved = tracker.move()

    assert tracker.size() == 0
    assert tracker.size("InternalOrderId") == 0
    assert list(tracker) == []
    assert moved.size() == 4
    assert list(moved) == before
    assert moved.convert_key("InternalOrderId", 19, "ExternalOrderId") == "9865"


def test_moved_from_map_behaves_like_new(tracker):
    tracker.move()
    assert tracker.audit_indices()["stats"]["next_id"] == 0
    tracker.insert("InternalOrderId", 13, "fresh")
    assert tracker.at("InternalOrderId", 13) == "fresh"
    assert tracker.audit_indices()["consistent"]
