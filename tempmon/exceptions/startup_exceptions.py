"""
startup_exceptions.py

Errors that stop the service before the polling loop starts. Poll-time
failures are never raised through these; they are counted in the metrics
store instead.
"""


class TempmonError(Exception):
    """Base class for all tempmon errors."""


class DiscoveryError(TempmonError):
    """
    Raised when the 1-wire device directory cannot be listed, meaning no
    sensor could ever be read.
    """

    def __init__(self, message: str, *, path: str | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.path = path
        self.cause = cause


class ConfigurationError(TempmonError):
    """
    Raised for an invalid or missing configuration value, such as a probe
    resolution outside 9..12 bits.
    """

    def __init__(self, message: str, *, key: str | None = None):
        super().__init__(message)
        self.key = key
