from .result import ErrorKind, ProbeResult
from .discovery import discover_sensor_ids
from .resolution import apply_resolution, validate_resolution
from .ds18b20 import DS18B20Sensor
from .factory import ProbeFactory

__all__ = [
    "ErrorKind",
    "ProbeResult",
    "discover_sensor_ids",
    "apply_resolution",
    "validate_resolution",
    "DS18B20Sensor",
    "ProbeFactory",
]
