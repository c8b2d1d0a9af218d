"""
config_loader.py

Load configuration from a required TOML config file, with a few values
overridable from the environment (a .env file is honoured). The loader
validates every value and returns an immutable TempmonConfig.

Startup fails with ConfigurationError if the file cannot be located, read or
parsed, or if any value is invalid.

Classes:
    TempmonConfig
    ConfigLoader

Usage:
    config = ConfigLoader().load()
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from tempmon import PACKAGE_LOGGER_NAME
from tempmon.exceptions import ConfigurationError
from tempmon.sensors.discovery import W1_DEVICES_PATH
from tempmon.sensors.resolution import validate_resolution

CONFIG_PATH_ENV = "TEMPMON_CONFIG"
LOG_LEVEL_ENV = "TEMPMON_LOG_LEVEL"
DEFAULT_CONFIG_PATH = Path("/etc/tempmon/config.toml")

_default_logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.config")


@dataclass(frozen=True)
class TempmonConfig:
    metrics_port: int
    probe_interval: int
    probe_resolution: int
    probe_labels: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    calibration_offsets: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    devices_path: str = W1_DEVICES_PATH
    listen_address: str = "0.0.0.0"


def _find_config_path(logger) -> Optional[Path]:
    """
    Locate config.toml based on the environment or common fallback
    locations. Returns the resolved path or None if not found.
    """
    # 1) Env override
    p = os.environ.get(CONFIG_PATH_ENV)
    if p:
        path = Path(p).expanduser().resolve()
        if path.is_file():
            logger.info(f"ConfigLoader: using {CONFIG_PATH_ENV}={path}")
            return path
        logger.warning(f"ConfigLoader: {CONFIG_PATH_ENV} set but not a file: {path}")

    # 2) Common locations (in priority order)
    candidates = [
        Path.cwd() / "config.toml",     # run dir
        DEFAULT_CONFIG_PATH,            # system install
    ]
    for c in candidates:
        if c.is_file():
            logger.info(f"ConfigLoader: discovered config at {c}")
            return c

    logger.warning("ConfigLoader: no config.toml found via env or defaults")
    return None


def _load_toml_config(path: Path) -> Dict[str, Any]:
    """
    Load TOML configuration from the given file path.

    Raises:
        ConfigurationError: If the file cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ConfigurationError(f"Failed reading {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e


def _require_int(settings: Mapping[str, Any], key: str) -> int:
    try:
        val = settings[key]
    except KeyError:
        raise ConfigurationError(f"Missing required setting: {key}", key=key) from None
    if isinstance(val, bool) or not isinstance(val, int):
        raise ConfigurationError(f"{key} must be an integer, got {val!r}", key=key)
    return val


def _optional_str(settings: Mapping[str, Any], key: str, default: Optional[str]) -> Optional[str]:
    val = settings.get(key, default)
    if val is None:
        return None
    if not isinstance(val, str) or not val.strip():
        raise ConfigurationError(f"{key} must be a non-empty string, got {val!r}", key=key)
    return val


def _get_table(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    table = config.get(name, {})
    if not isinstance(table, dict):
        raise ConfigurationError(f"[{name}] must be a table", key=name)
    return table


def parse_probe_labels(raw: Mapping[str, Any]) -> Dict[str, str]:
    """
    Validate the SensorId -> label table. Labels must be non-empty strings
    and no two sensors may share a label.
    """
    labels: Dict[str, str] = {}
    owners: Dict[str, str] = {}
    for sensor_id, label in raw.items():
        if not isinstance(label, str) or not label.strip():
            raise ConfigurationError(
                f"Label for '{sensor_id}' must be a non-empty string", key="probe_labels"
            )
        if label in owners:
            raise ConfigurationError(
                f"Label '{label}' is used by both '{owners[label]}' and '{sensor_id}'",
                key="probe_labels",
            )
        owners[label] = sensor_id
        labels[sensor_id] = label
    return labels


def parse_calibration_offsets(raw: Mapping[str, Any]) -> Dict[str, float]:
    offsets: Dict[str, float] = {}
    for sensor_id, offset in raw.items():
        if isinstance(offset, bool) or not isinstance(offset, (int, float)):
            raise ConfigurationError(
                f"Calibration offset for '{sensor_id}' must be numeric, got {offset!r}",
                key="calibration_offsets",
            )
        offsets[sensor_id] = float(offset)
    return offsets


def parse_config(config: Mapping[str, Any], log_level_override: Optional[str] = None) -> TempmonConfig:
    """
    Validate a decoded TOML document and build a TempmonConfig.

    Raises:
        ConfigurationError: On the first missing or invalid value.
    """
    if "settings" not in config:
        raise ConfigurationError("Missing required table: [settings]", key="settings")
    settings = _get_table(config, "settings")

    metrics_port = _require_int(settings, "metrics_port")
    if not 1 <= metrics_port <= 65535:
        raise ConfigurationError(f"metrics_port must be in 1..65535, got {metrics_port}", key="metrics_port")

    probe_interval = _require_int(settings, "probe_interval")
    if probe_interval < 1:
        raise ConfigurationError(f"probe_interval must be >= 1, got {probe_interval}", key="probe_interval")

    probe_resolution = validate_resolution(_require_int(settings, "probe_resolution"))

    log_level = log_level_override or _optional_str(settings, "log_level", "INFO")
    if not isinstance(logging.getLevelName(log_level.upper()), int):
        raise ConfigurationError(f"Unknown log_level: {log_level}", key="log_level")

    return TempmonConfig(
        metrics_port=metrics_port,
        probe_interval=probe_interval,
        probe_resolution=probe_resolution,
        probe_labels=MappingProxyType(parse_probe_labels(_get_table(config, "probe_labels"))),
        calibration_offsets=MappingProxyType(
            parse_calibration_offsets(_get_table(config, "calibration_offsets"))
        ),
        log_level=log_level.upper(),
        log_dir=_optional_str(settings, "log_dir", None),
        devices_path=_optional_str(settings, "devices_path", W1_DEVICES_PATH),
        listen_address=_optional_str(settings, "listen_address", "0.0.0.0"),
    )


class ConfigLoader:
    """
    Locate, load and validate the service configuration.

    Environment:
        TEMPMON_CONFIG      path of the TOML file
        TEMPMON_LOG_LEVEL   overrides [settings].log_level

    TOML tables:
      - [settings]: metrics_port, probe_interval, probe_resolution (required);
        log_level, log_dir, devices_path, listen_address (optional)
      - [probe_labels]: SensorId -> label (optional)
      - [calibration_offsets]: SensorId -> offset in C (optional)
    """

    def __init__(self, logger=None, path: str | os.PathLike | None = None):
        """
        Args:
            logger (Logger): Logger for diagnostic output.
            path: Explicit config file, skipping discovery.
        """
        load_dotenv()
        self.logger = logger or _default_logger

        if path is not None:
            self.config_path: Optional[Path] = Path(path)
        else:
            self.config_path = _find_config_path(self.logger)
        if self.config_path is None:
            raise ConfigurationError(
                f"No configuration file found. Set {CONFIG_PATH_ENV} or create {DEFAULT_CONFIG_PATH}"
            )

        self.config: Dict[str, Any] = _load_toml_config(self.config_path)

    def load(self) -> TempmonConfig:
        """
        Return the validated configuration with environment overrides applied.

        Raises:
            ConfigurationError: If any value is missing or invalid.
        """
        override = os.getenv(LOG_LEVEL_ENV) or None
        try:
            config = parse_config(self.config, log_level_override=override)
        except ConfigurationError as e:
            self.logger.error(f"Invalid configuration in {self.config_path}: {e}")
            raise

        self.logger.info(
            f"ConfigLoader: port={config.metrics_port} interval={config.probe_interval}s "
            f"resolution={config.probe_resolution} labels={len(config.probe_labels)}"
        )
        return config
