"""Core domain types: results, error codes and configuration."""

from .config import ConfigError, DiscoveryConfig, EngineConfig, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "DiscoveryConfig",
    "EngineConfig",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
