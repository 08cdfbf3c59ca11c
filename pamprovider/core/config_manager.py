"""
Provider configuration.

Pydantic models for every setting plus the loader that layers a config file,
the environment and command-line overrides on top of the model defaults.
"""

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import IO, Any, Callable, Dict, List, Mapping, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator, ValidationError, ConfigDict

logger = logging.getLogger(__name__)


# Environment variable names for the vault connection. These are the names the
# deployment scripts and container app already set.
VAULT_ENV_VARS: Dict[str, str] = {
    "id_tenant_url": "IDTENANTURL",
    "pcloud_url": "PCLOUDURL",
    "username": "PAMUSER",
    "password": "PAMPASS",
}


class MissingConfigurationError(Exception):
    """Raised when required vault settings are not set."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"missing required environment variables: {missing}")


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.INFO
    format: str = "json"
    file: Optional[str] = None
    rotation_size: str = "10MB"
    rotation_count: int = 5
    module_levels: Optional[Dict[str, str]] = Field(
        default=None,
        description="Per-module log levels, e.g., {'httpx': 'WARNING'}"
    )


class ServerConfig(BaseModel):
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8080


class VaultConfig(BaseModel):
    """Connection settings for the Privilege Cloud vault."""
    id_tenant_url: Optional[str] = None
    pcloud_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    timeout: float = Field(default=30.0, gt=0.0, description="Per-call timeout in seconds")

    @field_validator("id_tenant_url", "pcloud_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v:
            return v.rstrip("/")
        return v

    def missing_variables(self) -> List[str]:
        """Return the environment variable names of unset vault settings."""
        missing = []
        for field_name, env_name in VAULT_ENV_VARS.items():
            value = getattr(self, field_name)
            if isinstance(value, SecretStr):
                value = value.get_secret_value()
            if not value:
                missing.append(env_name)
        return missing

    def require(self) -> None:
        """
        Ensure every vault setting is present.

        Raises:
            MissingConfigurationError: If any setting is unset
        """
        missing = self.missing_variables()
        if missing:
            raise MissingConfigurationError(missing)


class ReconciliationConfig(BaseModel):
    """Post-create polling for accounts."""
    attempts: int = Field(default=3, ge=0, description="Extra polls after the first lookup")
    delay_seconds: float = Field(default=2.0, ge=0.0, description="Delay before each extra poll")
    deadline_seconds: float = Field(default=30.0, gt=0.0, description="Upper bound for the whole poll")


class HealthConfig(BaseModel):
    """Extended health check settings."""
    public_ip_services: List[str] = Field(
        default_factory=lambda: [
            "https://ipinfo.io/ip",
            "https://api.ipify.org",
            "https://icanhazip.com",
        ]
    )
    public_ip_timeout: float = 5.0


class ProviderConfig(BaseModel):
    """Main provider configuration schema."""

    server: ServerConfig = Field(default_factory=ServerConfig)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    vault: VaultConfig = Field(default_factory=VaultConfig)

    reconciliation: ReconciliationConfig = Field(default_factory=ReconciliationConfig)

    health: HealthConfig = Field(default_factory=HealthConfig)

    model_config = ConfigDict(use_enum_values=True)


def _parse_log_level(value: str) -> str:
    return value.upper()


def _parse_log_format(value: str) -> str:
    return value.lower()


# (environment variable, config section, field, converter); later rows win,
# so PAMPROVIDER_PORT overrides the platform-injected PORT
ENV_OVERRIDES: List[Tuple[str, str, str, Callable[[str], Any]]] = [
    ("PAMPROVIDER_HOST", "server", "host", str),
    ("PORT", "server", "port", int),
    ("PAMPROVIDER_PORT", "server", "port", int),
    ("PAMPROVIDER_LOG_LEVEL", "logging", "level", _parse_log_level),
    ("PAMPROVIDER_LOG_FORMAT", "logging", "format", _parse_log_format),
    ("PAMPROVIDER_LOG_FILE", "logging", "file", str),
    *[(env_name, "vault", field_name, str) for field_name, env_name in VAULT_ENV_VARS.items()],
    ("PAMPROVIDER_VAULT_TIMEOUT", "vault", "timeout", float),
    ("PAMPROVIDER_RECONCILE_ATTEMPTS", "reconciliation", "attempts", int),
    ("PAMPROVIDER_RECONCILE_DELAY", "reconciliation", "delay_seconds", float),
]

_FILE_LOADERS: Dict[str, Callable[[IO[str]], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def read_config_file(file_path: str) -> Dict[str, Any]:
    """
    Read a YAML or JSON config file into a dict.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the extension is not .yaml, .yml or .json
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")
    loader = _FILE_LOADERS.get(path.suffix.lower())
    if loader is None:
        raise ValueError(f"Unsupported config file format: {path.suffix}")
    with path.open("r", encoding="utf-8") as f:
        return loader(f) or {}


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect config values set through environment variables."""
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    for env_name, section, field_name, convert in ENV_OVERRIDES:
        raw = environ.get(env_name)
        if raw:
            overrides.setdefault(section, {})[field_name] = convert(raw)
    return overrides


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, recursing into nested dicts."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    Loads and holds the provider configuration.

    Sources, strongest first: CLI overrides, environment variables
    (``IDTENANTURL``, ``PCLOUDURL``, ``PAMUSER``, ``PAMPASS``, ``PORT`` and
    ``PAMPROVIDER_*``), the optional YAML/JSON file, model defaults.
    """

    def __init__(self):
        self._config: Optional[ProviderConfig] = None

    def load(
        self,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None
    ) -> ProviderConfig:
        """
        Build and validate the configuration.

        Args:
            config_file: Optional YAML or JSON file
            cli_overrides: Nested dict from command-line options

        Returns:
            Validated ProviderConfig

        Raises:
            FileNotFoundError: If ``config_file`` does not exist
            ValueError: If ``config_file`` has an unsupported extension
            ValidationError: If a value is out of range or of the wrong type
        """
        layers = []
        if config_file:
            layers.append(("file", read_config_file(config_file)))
        layers.append(("environment", env_overrides()))
        if cli_overrides:
            layers.append(("cli", cli_overrides))

        merged: Dict[str, Any] = {}
        for source, values in layers:
            if values:
                logger.debug(f"Applying {source} configuration: sections {sorted(values)}")
            merged = deep_merge(merged, values)

        try:
            config = ProviderConfig(**merged)
        except ValidationError as e:
            logger.error(f"Invalid provider configuration: {e}")
            raise

        self._config = config
        logger.info(
            f"Configuration loaded (file={config_file or 'none'}, "
            f"missing vault settings={config.vault.missing_variables() or 'none'})"
        )
        logger.debug(f"Active configuration: {self._masked_dump()}")
        return config

    def _masked_dump(self) -> str:
        # SecretStr already dumps masked in json mode
        return json.dumps(self._config.model_dump(mode="json"), sort_keys=True)

    def get_config(self) -> ProviderConfig:
        """
        Raises:
            RuntimeError: If load() has not been called
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config

