"""Tests for index consistency auditing."""

from polykey import MapConfig, PolykeyMap


def test_audit_empty_map(pk):
    result = pk.audit_indices()
    assert result["consistent"] is True
    assert result["errors"] == []
    assert result["warnings"] == []
    assert result["stats"]["records"] == 0
    assert result["stats"]["keys_per_path"] == {"path1": 0, "path2": 0}


def test_audit_tracker_consistent(tracker):
    result = tracker.audit_indices()
    assert result["consistent"] is True, f"Errors: {result['errors']}"
    assert result["stats"]["records"] == 4
    assert result["stats"]["keysets"] == 4
    assert result["stats"]["keys_per_path"] == {"InternalOrderId": 4, "ExternalOrderId": 2}


def test_audit_detects_dangling_index_entry(tracker):
    # Corrupt one path index behind the map's back
    tracker._indices[1].insert("ghost", 999)
    result = tracker.audit_indices()
    assert result["consistent"] is False
    assert any(
        e["key"] == "ghost" and "without keyset" in e["message"] for e in result["errors"]
    )


def test_audit_detects_unindexed_slot(tracker):
    keyset = tracker._keysets.get(tracker._indices[0].find(14))
    keyset.set_key(1, "unindexed")
    result = tracker.audit_indices()
    assert result["consistent"] is False
    assert any("not indexed" in e["message"] for e in result["errors"])


def test_audit_warns_before_exhaustion():
    pk = PolykeyMap(["a"], MapConfig(id_bits=1))
    pk.insert("a", "x", 1)
    pk.insert("a", "y", 2)
    result = pk.audit_indices()
    assert result["consistent"] is True
    assert len(result["warnings"]) == 1
    assert "wrapped" in result["warnings"][0]["message"]
