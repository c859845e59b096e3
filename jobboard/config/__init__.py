"""Configuration management for the job board service."""

from .duration import DurationParseError, parse_duration
from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_config_dict
from .models import (
    AppConfig,
    AuthConfig,
    FeedConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    ServerConfig,
)

__all__ = [
    # Loaders
    "load_config",
    "parse_config_dict",
    "load_environment_config",
    "parse_duration",
    # Models
    "AppConfig",
    "ServerConfig",
    "AuthConfig",
    "FeedConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
    "DurationParseError",
]
