"""
tempmon

DS18B20 1-wire temperature monitor exposing Prometheus metrics over HTTP.
"""

PACKAGE_LOGGER_NAME = "tempmon"

__version__ = "0.3.0"
