"""
exporter.py

Expose MetricsStore contents to Prometheus. The collector takes one snapshot
per scrape, so every family in a response reflects the same instant.

Metric families:
    dash_temp_readings{probe}                            gauge, Celsius
    dash_temp_last_reading_timestamp_seconds{probe}      gauge, epoch seconds
    dash_temp_read_errors_total{probe, error_type}       counter
"""

from prometheus_client import CollectorRegistry
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.registry import Collector

from tempmon.store import MetricsStore

READINGS_METRIC = "dash_temp_readings"
TIMESTAMP_METRIC = "dash_temp_last_reading_timestamp_seconds"
ERRORS_METRIC = "dash_temp_read_errors"


class MetricsStoreCollector(Collector):
    def __init__(self, store: MetricsStore):
        self._store = store

    def collect(self):
        snapshot = self._store.snapshot()

        readings = GaugeMetricFamily(
            READINGS_METRIC,
            "readings from the temperature probes",
            labels=["probe"],
        )
        timestamps = GaugeMetricFamily(
            TIMESTAMP_METRIC,
            "capture time of the latest reading from each probe",
            labels=["probe"],
        )
        for label, reading in sorted(snapshot.readings.items()):
            readings.add_metric([label], reading.value)
            timestamps.add_metric([label], reading.timestamp)

        errors = CounterMetricFamily(
            ERRORS_METRIC,
            "total number of failed temperature reads",
            labels=["probe", "error_type"],
        )
        for (label, kind), count in sorted(snapshot.errors.items()):
            errors.add_metric([label, kind.value], count)

        yield readings
        yield timestamps
        yield errors


def build_registry(store: MetricsStore) -> CollectorRegistry:
    """Return a fresh registry exporting only the store's metrics."""
    registry = CollectorRegistry(auto_describe=True)
    registry.register(MetricsStoreCollector(store))
    return registry
