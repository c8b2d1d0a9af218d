from .startup_exceptions import TempmonError, DiscoveryError, ConfigurationError

__all__ = [
    "TempmonError",
    "DiscoveryError",
    "ConfigurationError",
]
