"""
main.py

Bootstrap entry point for tempmon. Loads configuration, sets up logging,
discovers the DS18B20 probes and sets their resolution, starts the HTTP
server, and runs the polling scheduler until SIGTERM or SIGINT.

Exit codes:
    0  clean shutdown
    1  startup failure (configuration, discovery or HTTP bind)
"""

import logging
import signal
import sys

from tempmon.config_loader import ConfigLoader, TempmonConfig
from tempmon.exceptions import ConfigurationError, DiscoveryError
from tempmon.logging_setup import setup_logging
from tempmon.scheduler import PollingScheduler
from tempmon.sensors.discovery import discover_sensor_ids
from tempmon.sensors.factory import ProbeFactory
from tempmon.sensors.resolution import apply_resolution
from tempmon.server import MetricsServer, build_app
from tempmon.store import MetricsStore


def _install_signal_handlers(scheduler: PollingScheduler, logger: logging.Logger) -> None:
    def handle_signal(signum, frame):
        logger.info("Received %s, shutting down", signal.Signals(signum).name)
        scheduler.stop()

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)


def run(config: TempmonConfig, logger: logging.Logger) -> int:
    """
    Start the service from a validated configuration and block until shutdown.

    Returns:
        int: Process exit code.
    """
    logger.info("discovering ds18b20 temperature probes...")
    try:
        sensor_ids = discover_sensor_ids(config.devices_path)
    except DiscoveryError as e:
        logger.error(f"error discovering probes: {e}")
        return 1

    for sensor_id in config.probe_labels:
        if sensor_id not in sensor_ids:
            logger.warning("Label configured for undiscovered probe %s", sensor_id)

    try:
        apply_resolution(sensor_ids, config.probe_resolution, config.devices_path)
        probes = ProbeFactory(
            devices_path=config.devices_path,
            offsets=config.calibration_offsets,
        ).build_all(sensor_ids)
        store = MetricsStore(
            sensor_ids=[probe.sensor_id for probe in probes],
            labels=config.probe_labels,
        )
    except ConfigurationError as e:
        logger.error(f"invalid configuration: {e}")
        return 1

    for probe in probes:
        logger.info("probe %s -> %s", probe.sensor_id, store.label_for(probe.sensor_id))

    server = MetricsServer(build_app(store), port=config.metrics_port, address=config.listen_address)
    try:
        server.start()
    except OSError as e:
        logger.error(f"failed to start http server: {e}")
        return 1

    scheduler = PollingScheduler(probes, store, interval=config.probe_interval)
    _install_signal_handlers(scheduler, logger)

    try:
        scheduler.start()
    finally:
        server.stop()

    return 0


def main():
    """
    Initialize and run tempmon.

    This function loads configuration, configures logging and hands over to
    run(). It blocks until the process receives SIGTERM or SIGINT.
    """
    bootstrap_logger = logging.getLogger("bootstrap")
    bootstrap_logger.setLevel(logging.INFO)
    bootstrap_logger.addHandler(logging.StreamHandler())
    bootstrap_logger.propagate = False

    try:
        config = ConfigLoader(logger=bootstrap_logger).load()
    except ConfigurationError as e:
        bootstrap_logger.error(f"error loading config: {e}")
        return 1

    logger = setup_logging(
        log_dir=config.log_dir,
        log_file_name="tempmon.log",
        log_level=config.log_level,
    )

    return run(config, logger)


if __name__ == "__main__":
    sys.exit(main())
