"""
scheduler.py

Defines the PollingScheduler class, responsible for running the main polling
loop. Each cycle reads every probe once, in discovery order, and records the
outcome in the MetricsStore; then the scheduler sleeps until the next cycle.

A failing probe never stops the loop or the rest of the cycle. Its failures
are counted in the store and the probe is tried again on the next cycle.

Classes:
    SchedulerState
    PollingScheduler

Usage:
    scheduler = PollingScheduler(probes, store, interval=15)
    scheduler.start()  # blocks until scheduler.stop() is called
"""

import logging
import threading
import time
from enum import Enum
from typing import Sequence

from tempmon import PACKAGE_LOGGER_NAME
from tempmon.sensors.base import BaseSensor
from tempmon.sensors.result import ProbeResult
from tempmon.store import MetricsStore

logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.scheduler")


class SchedulerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    SLEEPING = "sleeping"
    STOPPED = "stopped"


class PollingScheduler:
    """
    PollingScheduler runs the main polling loop.

    Args:
        probes (Sequence[BaseSensor]): Probes to poll, in poll order. Fixed for
            the lifetime of the scheduler.
        store (MetricsStore): Store receiving readings and error counts.
        interval (float): Seconds between the start of consecutive cycles.
    """

    def __init__(self, probes: Sequence[BaseSensor], store: MetricsStore, interval: float = 15):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.probes = tuple(probes)
        self.store = store
        self.interval = interval
        self.state = SchedulerState.IDLE
        self.cycles = 0
        self._stop_event = threading.Event()

    def start(self) -> None:
        """
        Start and run the blocking polling loop.

        On each iteration the scheduler:
          1) reads every probe and records the results,
          2) waits `interval` seconds minus the cycle runtime.

        The wait is interrupted by stop(), so shutdown takes effect between
        cycles or mid-sleep, never in the middle of a probe read.
        """
        logger.info(
            "PollingScheduler started with %d probe(s), interval %ss",
            len(self.probes), self.interval,
        )
        if not self.probes:
            logger.warning("No probes to poll. Only empty cycles will run.")

        while not self._stop_event.is_set():
            start_time = time.monotonic()
            self.run_cycle()
            elapsed = time.monotonic() - start_time
            delay = max(0.0, self.interval - elapsed)

            self.state = SchedulerState.SLEEPING
            self._stop_event.wait(delay)

        self.state = SchedulerState.STOPPED
        logger.info("PollingScheduler stopped after %d cycle(s).", self.cycles)

    def stop(self) -> None:
        """Ask the loop to exit. Safe to call from a signal handler or another thread."""
        self._stop_event.set()

    def run_cycle(self) -> list[ProbeResult]:
        """
        Poll every probe once and record each outcome.

        Returns:
            list[ProbeResult]: One result per probe that returned one. A probe
            whose read raised unexpectedly is logged and left out.
        """
        self.state = SchedulerState.POLLING
        results = []
        for probe in self.probes:
            try:
                result = probe.read()
            except Exception:
                logger.exception("Unexpected error reading probe %s", probe.sensor_id)
                continue

            self._record(result)
            results.append(result)

        self.cycles += 1
        return results

    def _record(self, result: ProbeResult) -> None:
        label = self.store.label_for(result.sensor_id)
        if result.ok:
            self.store.record_reading(result.sensor_id, result.value, result.timestamp)
            logger.debug("probe: %s, temperature: %.3f C", label, result.value)
        else:
            self.store.record_error(result.sensor_id, result.error)
            logger.warning("probe: %s, %s: %s", label, result.error.value, result.detail)
