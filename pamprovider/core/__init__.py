"""Core runtime components: configuration, logging and health checks."""

from .config_manager import (
    ConfigManager,
    HealthConfig,
    LoggingConfig,
    MissingConfigurationError,
    ProviderConfig,
    ReconciliationConfig,
    ServerConfig,
    VaultConfig,
)
from .health import BuildInfo, HealthCheck
from .logging_config import get_logger, setup_logging

__all__ = [
    "ConfigManager",
    "HealthConfig",
    "LoggingConfig",
    "MissingConfigurationError",
    "ProviderConfig",
    "ReconciliationConfig",
    "ServerConfig",
    "VaultConfig",
    "BuildInfo",
    "HealthCheck",
    "get_logger",
    "setup_logging",
]
