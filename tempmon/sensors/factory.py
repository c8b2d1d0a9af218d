# factory.py

"""
What factory.py owns

Turning the discovered probe ids into ready-to-poll drivers, with their
calibration offsets and the shared device tree path applied.

Offsets arrive already validated by the config loader. Entries for probes
that were not discovered are reported so a typo in an id does not go
unnoticed.
"""

import logging
import time
from typing import Callable, Iterable, Mapping

from tempmon import PACKAGE_LOGGER_NAME
from tempmon.exceptions import ConfigurationError
from tempmon.sensors.discovery import W1_DEVICES_PATH, is_sensor_id
from tempmon.sensors.ds18b20 import DS18B20Sensor

logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{__name__.split('.')[-1]}")


class ProbeFactory:
    def __init__(self, *, devices_path: str = W1_DEVICES_PATH,
                 offsets: Mapping[str, float] | None = None,
                 clock: Callable[[], float] = time.time):
        self._devices_path = devices_path
        self._offsets = dict(offsets or {})
        self._clock = clock

    def build(self, sensor_id: str) -> DS18B20Sensor:
        """
        Build the driver for a single probe id.

        Raises:
            ConfigurationError: If sensor_id is not a DS18B20 id.
        """
        if not isinstance(sensor_id, str) or not is_sensor_id(sensor_id):
            raise ConfigurationError(f"Not a DS18B20 sensor id: {sensor_id!r}")

        offset = self._offsets.get(sensor_id, 0.0)
        if offset:
            logger.info("Probe %s calibrated with offset %+.3f C", sensor_id, offset)

        return DS18B20Sensor(
            id=sensor_id,
            path=self._devices_path,
            offset=offset,
            clock=self._clock,
        )

    def build_all(self, sensor_ids: Iterable[str]) -> list[DS18B20Sensor]:
        """
        Build drivers for every id, keeping the given order.
        Any id that fails to build is logged and skipped.
        """
        sensor_ids = list(sensor_ids)
        probes: list[DS18B20Sensor] = []

        for sensor_id in sensor_ids:
            try:
                probes.append(self.build(sensor_id))
            except ConfigurationError as e:
                logger.warning("Skipping probe %s: %s", sensor_id, e)
                continue

        for sensor_id in self._offsets:
            if sensor_id not in sensor_ids:
                logger.warning("Calibration offset configured for undiscovered probe %s", sensor_id)

        return probes
