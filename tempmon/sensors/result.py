# tempmon/sensors/result.py

"""
Tagged outcome of a single probe read. A read either carries a Celsius value
or an ErrorKind, never both, so the scheduler can record it without catching
exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of a failed probe read. Values are used as metric labels."""

    IO_FAILURE = "io_failure"
    CRC_FAILURE = "crc_failure"
    PARSE_FAILURE = "parse_failure"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class ProbeResult:
    sensor_id: str
    timestamp: float
    value: Optional[float] = None
    error: Optional[ErrorKind] = None
    detail: str = ""

    @classmethod
    def success(cls, sensor_id: str, value: float, timestamp: float) -> "ProbeResult":
        return cls(sensor_id=sensor_id, timestamp=timestamp, value=value)

    @classmethod
    def failure(cls, sensor_id: str, kind: ErrorKind, timestamp: float, detail: str = "") -> "ProbeResult":
        return cls(sensor_id=sensor_id, timestamp=timestamp, error=kind, detail=detail)

    @property
    def ok(self) -> bool:
        return self.error is None
