"""Tests for MapMetrics and Prometheus exposure."""

from prometheus_client import CollectorRegistry

from polykey import KeyConflictError, KeyNotFoundError, MapConfig, PolykeyMap
from polykey.metrics import MapMetrics


def test_operation_counts(tracker):
    metrics = tracker.metrics.get_metrics()
    assert metrics["inserts"] == 4
    assert metrics["links"] == 2
    assert metrics["erases"] == 0

    tracker.at("InternalOrderId", 13)
    tracker.erase("InternalOrderId", 13)
    metrics = tracker.metrics.get_metrics()
    assert metrics["lookups"] == 1
    assert metrics["erases"] == 1


def test_failure_counts(pk):
    pk.insert("path1", 1, "a")
    for call in (
        lambda: pk.insert("path1", 1, "b"),
        lambda: pk.at("path1", 2),
        lambda: pk.link("path1", 5, "path2", "x"),
    ):
        try:
            call()
        except (KeyConflictError, KeyNotFoundError):
            pass
    failures = pk.metrics.get_metrics()["failures"]
    assert failures["key_conflict"] == 1
    assert failures["key_not_found"] == 2
    assert failures["capacity_exhausted"] == 0


def test_reset():
    metrics = MapMetrics()
    metrics.record("inserts")
    metrics.reset()
    assert metrics.get_metrics()["inserts"] == 0


def test_expose_prometheus_metrics(tracker):
    registry = CollectorRegistry()
    exposed = tracker.expose_prometheus_metrics(registry)
    assert len(exposed) == 4

    assert registry.get_sample_value("polykey_records", {"map": "orders"}) == 4
    assert (
        registry.get_sample_value(
            "polykey_operations", {"map": "orders", "operation": "links"}
        )
        == 2
    )
    assert (
        registry.get_sample_value(
            "polykey_failures", {"map": "orders", "kind": "key_conflict"}
        )
        == 0
    )
    info_labels = {
        "map": "orders",
        "paths": "InternalOrderId,ExternalOrderId",
        "id_bits": "64",
    }
    assert registry.get_sample_value("polykey_map_info", info_labels) == 1


def test_expose_without_registry_uses_private_one(pk):
    # Two calls must not collide on a shared default registry
    pk.expose_prometheus_metrics()
    pk.expose_prometheus_metrics()


def test_maps_share_one_registry():
    """Each map publishes under its own label set in a common registry."""
    registry = CollectorRegistry()
    a = PolykeyMap(["k"], MapConfig(name="a"))
    b = PolykeyMap(["k"], MapConfig(name="b"))
    a.insert("k", 1, "x")
    b.insert("k", 1, "y")
    b.insert("k", 2, "z")

    a.expose_prometheus_metrics(registry)
    b.expose_prometheus_metrics(registry)

    assert registry.get_sample_value("polykey_records", {"map": "a"}) == 1
    assert registry.get_sample_value("polykey_records", {"map": "b"}) == 2
    assert (
        registry.get_sample_value(
            "polykey_operations", {"map": "b", "operation": "inserts"}
        )
        == 2
    )


def test_reexposing_updates_values():
    registry = CollectorRegistry()
    pk = PolykeyMap(["k"], MapConfig(name="again"))
    pk.expose_prometheus_metrics(registry)
    pk.insert("k", 1, "x")
    pk.expose_prometheus_metrics(registry)
    assert registry.get_sample_value("polykey_records", {"map": "again"}) == 1
