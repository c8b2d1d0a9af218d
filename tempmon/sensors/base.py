# tempmon/sensors/base.py

from abc import ABC, abstractmethod

from tempmon.sensors.result import ProbeResult


class BaseSensor(ABC):
    """
    Abstract base class for probe drivers polled by the scheduler.

    Concrete subclasses must implement:
      - sensor_id: the 1-wire hardware address the probe was discovered under
      - name:  human-readable sensor model identifier
      - units: unit string for the reading (e.g. "C")
      - read(): one blocking read returning a ProbeResult, never raising for
        expected hardware faults
    """

    sensor_id: str

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name identifying the sensor model."""

    @property
    @abstractmethod
    def units(self) -> str:
        """Unit string for the reading."""

    @abstractmethod
    def read(self) -> ProbeResult:
        """
        Perform one read and return either a value or a classified failure.
        """
