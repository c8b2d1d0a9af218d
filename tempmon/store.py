"""
store.py

Provides the MetricsStore class, the shared registry between the polling
loop and the HTTP handlers. It keeps the latest Reading per probe and a
per-(probe, ErrorKind) error tally that only grows.

The polling loop is the single writer. Any number of request threads may
call snapshot() at the same time. The lock is held for one operation only,
never across a poll cycle, so scrapes never wait on a slow probe read.

Classes:
    Reading
    MetricsSnapshot
    MetricsStore

Usage:
    store = MetricsStore(sensor_ids=["28-aaa"], labels={"28-aaa": "tank1"})
    store.record_reading("28-aaa", 21.5, time.time())
    snap = store.snapshot()
"""

import threading
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from tempmon.exceptions import ConfigurationError
from tempmon.sensors.result import ErrorKind


@dataclass(frozen=True)
class Reading:
    sensor_id: str
    label: str
    value: float
    timestamp: float


@dataclass(frozen=True)
class MetricsSnapshot:
    """
    Immutable view of the store at one instant, keyed by probe label.

    probes lists every polled probe in poll order, including those that have
    not produced a reading yet.
    """
    probes: tuple[str, ...] = ()
    readings: Mapping[str, Reading] = field(default_factory=lambda: MappingProxyType({}))
    errors: Mapping[tuple[str, ErrorKind], int] = field(default_factory=lambda: MappingProxyType({}))
    taken_at: float = 0.0


class MetricsStore:
    """
    Thread-safe store of the latest readings and cumulative error counts.

    Args:
        sensor_ids (Iterable[str]): Probes in poll order.
        labels (Mapping[str, str]): Optional SensorId -> ProbeLabel mapping.
            Probes without a label are reported under their raw id.
    """

    def __init__(self, sensor_ids: Iterable[str] = (), labels: Mapping[str, str] | None = None):
        self._labels = dict(labels or {})
        self._sensor_ids = tuple(sensor_ids)
        self._readings: dict[str, Reading] = {}
        self._errors: dict[tuple[str, ErrorKind], int] = {}
        self._lock = threading.Lock()

        self._check_labels()

    def _check_labels(self) -> None:
        """
        Snapshots are keyed by label, so every probe must resolve to its own
        label and no label may be another probe's raw id.

        Raises:
            ConfigurationError: On the first colliding label.
        """
        known_ids = set(self._sensor_ids) | set(self._labels)
        owners: dict[str, str] = {}

        for sensor_id, label in self._labels.items():
            if label != sensor_id and label in known_ids:
                raise ConfigurationError(
                    f"Label '{label}' for '{sensor_id}' is the id of another probe",
                    key="probe_labels",
                )

        for sensor_id in dict.fromkeys((*self._sensor_ids, *self._labels)):
            label = self.label_for(sensor_id)
            if label in owners:
                raise ConfigurationError(
                    f"Label '{label}' is used by both '{owners[label]}' and '{sensor_id}'",
                    key="probe_labels",
                )
            owners[label] = sensor_id

    def label_for(self, sensor_id: str) -> str:
        return self._labels.get(sensor_id, sensor_id)

    def record_reading(self, sensor_id: str, value: float, timestamp: float) -> None:
        """Replace the stored reading for sensor_id."""
        # Build the immutable record first; the swap under the lock is atomic.
        reading = Reading(
            sensor_id=sensor_id,
            label=self.label_for(sensor_id),
            value=float(value),
            timestamp=float(timestamp),
        )
        with self._lock:
            self._readings[sensor_id] = reading

    def record_error(self, sensor_id: str, kind: ErrorKind) -> None:
        """Increment the error counter for (sensor_id, kind)."""
        kind = ErrorKind(kind)
        with self._lock:
            key = (sensor_id, kind)
            self._errors[key] = self._errors.get(key, 0) + 1

    def snapshot(self) -> MetricsSnapshot:
        """
        Return a consistent copy of all readings and error counts.

        The returned object shares nothing mutable with the store and is safe
        to render while the polling loop keeps writing.
        """
        with self._lock:
            readings = dict(self._readings)
            errors = dict(self._errors)

        return MetricsSnapshot(
            probes=tuple(self.label_for(sensor_id) for sensor_id in self._sensor_ids),
            readings=MappingProxyType({r.label: r for r in readings.values()}),
            errors=MappingProxyType({
                (self.label_for(sensor_id), kind): count
                for (sensor_id, kind), count in errors.items()
            }),
            taken_at=time.time(),
        )
