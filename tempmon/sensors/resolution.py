"""
resolution.py

Apply the configured measurement resolution to every discovered probe.

The w1_therm driver accepts 9, 10, 11 or 12 bits on the per-device
"resolution" file. Higher resolutions lengthen the conversion time, up to
roughly 750 ms at 12 bits, which is paid on every read of w1_slave.

The value is validated once, before any probe is touched. A probe that
refuses the write keeps its current resolution and stays in the poll cycle.
"""

import logging
import os
from typing import Iterable

from tempmon import PACKAGE_LOGGER_NAME
from tempmon.exceptions import ConfigurationError
from tempmon.sensors.discovery import W1_DEVICES_PATH

logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.resolution")

VALID_RESOLUTIONS = (9, 10, 11, 12)
RESOLUTION_FILE = "resolution"


def validate_resolution(bits) -> int:
    """
    Return bits unchanged if it is a supported resolution.

    Raises:
        ConfigurationError: If bits is not one of 9, 10, 11 or 12.
    """
    # bool is an int subclass; True must not pass as 1 bit
    if isinstance(bits, bool) or not isinstance(bits, int) or bits not in VALID_RESOLUTIONS:
        raise ConfigurationError(
            f"probe_resolution must be one of {list(VALID_RESOLUTIONS)}, got {bits!r}",
            key="probe_resolution",
        )
    return bits


def apply_resolution(sensor_ids: Iterable[str], bits, devices_path: str = W1_DEVICES_PATH) -> tuple[str, ...]:
    """
    Write the resolution to each probe's configuration file.

    Args:
        sensor_ids: Probe ids as returned by discover_sensor_ids().
        bits: Requested resolution.
        devices_path: Root of the 1-wire device tree.

    Returns:
        tuple[str, ...]: Ids whose resolution could not be written.

    Raises:
        ConfigurationError: If bits is invalid. Nothing is written in that case.
    """
    bits = validate_resolution(bits)
    sensor_ids = list(sensor_ids)

    failed = []
    for sensor_id in sensor_ids:
        path = os.path.join(devices_path, sensor_id, RESOLUTION_FILE)
        try:
            with open(path, "w") as f:
                f.write(str(bits))
        except OSError as e:
            logger.warning("Failed to set resolution for %s: %s", sensor_id, e)
            failed.append(sensor_id)
            continue
        logger.debug("Set resolution of %s to %d bits", sensor_id, bits)

    if sensor_ids:
        logger.info(
            "Resolution %d bits applied to %d of %d probe(s)",
            bits, len(sensor_ids) - len(failed), len(sensor_ids),
        )
    return tuple(failed)
