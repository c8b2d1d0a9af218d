"""
ds18b20.py

Provides a probe driver for the DS18B20 1-Wire temperature sensor, read
through the kernel w1_therm sysfs interface.

Reading <devices_path>/<id>/w1_slave triggers a conversion and returns two
lines: the scratchpad bytes with the driver's CRC verdict, then the same
bytes with the temperature in millidegrees Celsius:

    6d 01 55 05 7f a5 a5 66 3e : crc=3e YES
    6d 01 55 05 7f a5 a5 66 3e t=22812

Classes:
    DS18B20ReadError
    DS18B20Sensor

Usage:
    sensor = DS18B20Sensor(id="28-0316a2795bff")
    result = sensor.read()
"""

import os
import time
from typing import Callable

from tempmon.sensors.base import BaseSensor
from tempmon.sensors.discovery import W1_DEVICES_PATH
from tempmon.sensors.result import ErrorKind, ProbeResult

DATA_FILE = "w1_slave"

# Rated measurement range of the DS18B20. Anything outside it is a bus or
# wiring artifact (e.g. -127 or 4095.9375 from a floating data line).
LOWER_LIMIT = -55.0
UPPER_LIMIT = 125.0


class DS18B20ReadError(Exception):
    """Raised when the DS18B20 payload does not hold a valid reading."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


def parse_w1_slave(payload: str) -> float:
    """
    Parse a w1_slave payload and return the temperature in Celsius.

    Raises:
        DS18B20ReadError: With kind CRC_FAILURE when the driver flagged a
            corrupted transfer, PARSE_FAILURE for an unexpected layout, or
            OUT_OF_RANGE for a value outside the sensor's rated range.
    """
    lines = payload.splitlines()
    if len(lines) < 2:
        raise DS18B20ReadError(ErrorKind.PARSE_FAILURE, f"Expected 2 lines, got {len(lines)}")

    crc_line = lines[0].strip()
    if "crc=" not in crc_line:
        raise DS18B20ReadError(ErrorKind.PARSE_FAILURE, "CRC field not found")

    marker = crc_line.split()[-1]
    if marker == "NO":
        raise DS18B20ReadError(ErrorKind.CRC_FAILURE, "Sensor CRC check failed")
    if marker != "YES":
        raise DS18B20ReadError(ErrorKind.PARSE_FAILURE, f"Unexpected CRC marker {marker!r}")

    pos = lines[1].find("t=")
    if pos == -1:
        raise DS18B20ReadError(ErrorKind.PARSE_FAILURE, "Temperature reading not found")

    raw = lines[1][pos + 2:].strip()
    try:
        millidegrees = int(raw)
    except ValueError:
        raise DS18B20ReadError(ErrorKind.PARSE_FAILURE, f"Malformed temperature value {raw!r}")

    celsius = millidegrees / 1000.0
    if not LOWER_LIMIT <= celsius <= UPPER_LIMIT:
        raise DS18B20ReadError(
            ErrorKind.OUT_OF_RANGE,
            f"Temperature {celsius} outside [{LOWER_LIMIT}, {UPPER_LIMIT}]",
        )
    return celsius


class DS18B20Sensor(BaseSensor):
    """
    DS18B20 temperature probe driver.

    Parameters
    ----------
    id : str
        The 1-Wire sensor id, e.g. "28-0316a2795bff".
    path : str
        Base directory of the 1-wire device tree. The device file is
        <path>/<id>/w1_slave.
    offset : float
        Calibration offset in Celsius added to every valid reading.
    clock : callable
        Returns the capture timestamp in epoch seconds.
    """

    def __init__(self, *, id: str, path: str = W1_DEVICES_PATH, offset: float = 0.0,
                 clock: Callable[[], float] = time.time):
        self.sensor_id = id
        self.base_dir = path
        self.offset = float(offset)
        self.device_file = os.path.join(self.base_dir, self.sensor_id, DATA_FILE)
        self._clock = clock

    # --- Properties ---------------------------------------------------------

    @property
    def name(self) -> str:
        return "ds18b20"

    @property
    def units(self) -> str:
        return "C"

    # --- Public API ---------------------------------------------------------

    def read(self) -> ProbeResult:
        """
        Read the probe once.

        Returns:
            ProbeResult: The calibrated Celsius value, or the ErrorKind of the
            failure. Expected hardware faults are never raised.
        """
        try:
            with open(self.device_file, "r", encoding="ascii") as f:
                payload = f.read()
        except OSError as e:
            return ProbeResult.failure(self.sensor_id, ErrorKind.IO_FAILURE, self._clock(), str(e))
        except UnicodeDecodeError as e:
            return ProbeResult.failure(self.sensor_id, ErrorKind.PARSE_FAILURE, self._clock(), str(e))

        timestamp = self._clock()
        try:
            celsius = parse_w1_slave(payload)
        except DS18B20ReadError as e:
            return ProbeResult.failure(self.sensor_id, e.kind, timestamp, str(e))

        return ProbeResult.success(self.sensor_id, celsius + self.offset, timestamp)

    def __repr__(self) -> str:
        return f"DS18B20Sensor(id={self.sensor_id!r}, offset={self.offset})"
