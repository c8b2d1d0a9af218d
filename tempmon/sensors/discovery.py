"""
discovery.py

Enumerate DS18B20 probes attached to the 1-wire bus. The kernel w1 driver
exposes one directory per slave device under /sys/bus/w1/devices, named by
family code and hardware address, e.g. "28-0316a2795bff". Bus masters and
other device families share the directory and are skipped.

Usage:
    sensor_ids = discover_sensor_ids("/sys/bus/w1/devices")
"""

import logging
import os
import re

from tempmon import PACKAGE_LOGGER_NAME
from tempmon.exceptions import DiscoveryError

logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.discovery")

W1_DEVICES_PATH = "/sys/bus/w1/devices"
DS18B20_FAMILY_CODE = "28"
SENSOR_ID_PATTERN = re.compile(rf"^{DS18B20_FAMILY_CODE}-[0-9a-f]+$", re.IGNORECASE)


def is_sensor_id(name: str) -> bool:
    return bool(SENSOR_ID_PATTERN.match(name))


def discover_sensor_ids(devices_path: str = W1_DEVICES_PATH) -> tuple[str, ...]:
    """
    List the DS18B20 sensor ids present under devices_path.

    The result is sorted so that the poll order is stable between restarts.
    An existing directory without matching entries yields an empty tuple.

    Raises:
        DiscoveryError: If the directory itself cannot be listed.
    """
    try:
        entries = os.listdir(devices_path)
    except OSError as e:
        raise DiscoveryError(
            f"Cannot list 1-wire devices at {devices_path}: {e}. "
            "Make sure the w1-gpio and w1-therm kernel modules are loaded.",
            path=devices_path,
            cause=e,
        ) from e

    sensor_ids = tuple(sorted(name for name in entries if is_sensor_id(name)))
    logger.info("Discovered %d DS18B20 probe(s) in %s", len(sensor_ids), devices_path)
    for sensor_id in sensor_ids:
        logger.debug("Found probe %s", sensor_id)
    return sensor_ids
