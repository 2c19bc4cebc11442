"""metrics.py - Operation counters for PolykeyMap and Prometheus exposure"""

from __future__ import annotations

import weakref
from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Gauge, Info

from .constants import METRICS_PREFIX, ErrorKind

# One collector set per registry, shared by every map exposing into it
_REGISTERED: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()


class MapMetrics:
    """
    Collects operation counts for one PolykeyMap.
    Plain integers are kept in-process; expose_prometheus_metrics() publishes
    a snapshot into a prometheus_client registry on demand.
    """

    def __init__(self, name: str = "polykey"):
        self.name = name
        self._counts = {
            "inserts": 0,
            "links": 0,
            "erases": 0,
            "lookups": 0,
        }
        self._failures = {kind: 0 for kind in ErrorKind}

    def record(self, operation: str) -> None:
        self._counts[operation] += 1

    def record_failure(self, kind: ErrorKind) -> None:
        self._failures[kind] += 1

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics snapshot."""
        snapshot: Dict[str, Any] = dict(self._counts)
        snapshot["failures"] = {kind.value: n for kind, n in self._failures.items()}
        return snapshot

    def reset(self) -> None:
        for op in self._counts:
            self._counts[op] = 0
        for kind in self._failures:
            self._failures[kind] = 0

    def copy(self) -> MapMetrics:
        clone = MapMetrics(self.name)
        clone._counts = dict(self._counts)
        clone._failures = dict(self._failures)
        return clone

    def expose_prometheus_metrics(
        self,
        size: int,
        registry: Optional[CollectorRegistry] = None,
        details: Optional[Dict[str, str]] = None,
    ) -> list[Any]:
        """
        Expose metrics for Prometheus scraping.

        Collectors are created once per registry and labelled by map name, so
        any number of maps can publish into the same registry.

        Args:
            size: Current number of live records
            registry: Target registry; a fresh one is created when omitted
            details: Extra string labels for the info metric

        Returns:
            list: The registered Prometheus metric objects.
        """
        registry = registry if registry is not None else CollectorRegistry()
        info, records, operations, failures = _collectors_for(registry)

        info.labels(self.name).info(details or {})
        records.labels(self.name).set(size)
        for op, n in self._counts.items():
            operations.labels(self.name, op).set(n)
        for kind, n in self._failures.items():
            failures.labels(self.name, kind.value).set(n)

        return [info, records, operations, failures]


def _collectors_for(registry: CollectorRegistry) -> tuple[Info, Gauge, Gauge, Gauge]:
    collectors = _REGISTERED.get(registry)
    if collectors is None:
        labels = ["map"]
        collectors = (
            Info(
                f"{METRICS_PREFIX}_map",
                "PolykeyMap information",
                labels,
                registry=registry,
            ),
            Gauge(
                f"{METRICS_PREFIX}_records",
                "Live records stored in the map",
                labels,
                registry=registry,
            ),
            Gauge(
                f"{METRICS_PREFIX}_operations",
                "Successful operations by kind",
                labels + ["operation"],
                registry=registry,
            ),
            Gauge(
                f"{METRICS_PREFIX}_failures",
                "Refused operations by error kind",
                labels + ["kind"],
                registry=registry,
            ),
        )
        _REGISTERED[registry] = collectors
    return collectors
