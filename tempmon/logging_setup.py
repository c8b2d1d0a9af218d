"""
logging_setup.py

Configure application logging using a root logger with a console handler and,
when a log directory is configured, a rotating file handler. The log level is
set from the provided configuration value.

Under systemd the console output goes to the journal, so the file handler is
optional.
"""

import os
import logging
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(log_dir=None, log_file_name="tempmon.log", log_level="INFO"):
    """
    Configure the root logger with console and optional rotating file handlers.

    The log directory is created if it does not exist. If handlers are already
    configured on the root logger, no additional handlers are added.

    Args:
        log_dir (str | None): Directory where log files are stored. No file
            handler is added when None.
        log_file_name (str): Name of the log file.
        log_level (str): Logging level name.

    Returns:
        logging.Logger: The root logger instance.
    """
    formatter = logging.Formatter(LOG_FORMAT)

    handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file_path = os.path.join(log_dir, log_file_name)
        file_handler = RotatingFileHandler(log_file_path, maxBytes=5 * 1024 * 1024, backupCount=3)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if not logger.hasHandlers():
        for handler in handlers:
            logger.addHandler(handler)

    return logger
