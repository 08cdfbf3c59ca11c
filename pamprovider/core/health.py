"""
Provider Health Checks

Liveness payloads for ``/health`` and the diagnostic ``/healthex``.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional
import logging
import os

import httpx

from .config_manager import HealthConfig, MissingConfigurationError, VaultConfig

logger = logging.getLogger(__name__)

SERVICE_NAME = "pam-custom-provider"


@dataclass(frozen=True)
class BuildInfo:
    """Version and build date of the running process."""

    version: str
    build_date: str = "dev"

    @classmethod
    def from_env(cls, version: str) -> "BuildInfo":
        """Build info with the date stamped into the image as ``BUILD_DATE``."""
        return cls(version=version, build_date=os.getenv("BUILD_DATE", "dev"))


SessionCheck = Callable[[], Awaitable[Any]]


class HealthCheck:
    """
    Health check provider.

    ``/health`` never touches the vault; ``/healthex`` also resolves the
    container's egress IP and opens a vault session.
    """

    def __init__(
        self,
        build_info: BuildInfo,
        vault_config: VaultConfig,
        health_config: Optional[HealthConfig] = None,
        session_check: Optional[SessionCheck] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            build_info: Immutable version information
            vault_config: Vault settings to validate
            health_config: Public IP lookup settings
            session_check: Coroutine function that opens a vault session
            http_client: Client for the public IP lookup
        """
        self.build_info = build_info
        self.vault_config = vault_config
        self.health_config = health_config or HealthConfig()
        self.session_check = session_check
        self._http = http_client

    def _env_status(self) -> Dict[str, Any]:
        missing = self.vault_config.missing_variables()
        if not missing:
            return {"env_status": "ok"}
        error = str(MissingConfigurationError(missing))
        logger.warning(f"Environment validation failed during health check: {error}")
        return {"env_status": "error", "env_error": error}

    def get_health_status(self) -> Dict[str, Any]:
        """
        Basic liveness payload.

        Returns:
            Version, build date, service name and environment validity
        """
        status: Dict[str, Any] = {
            "version": self.build_info.version,
            "build_date": self.build_info.build_date,
            "status": "healthy",
            "service": SERVICE_NAME,
        }
        status.update(self._env_status())
        logger.info(
            f"Health check - Version: {self.build_info.version}, Build date: "
            f"{self.build_info.build_date}, env_status: {status['env_status']}"
        )
        return status

    async def get_extended_status(self) -> Dict[str, Any]:
        """
        Extended payload with egress IP and a vault session check.

        Returns:
            Health status plus ``public_ip`` and ``pamclientcheck``
        """
        status = self.get_health_status()
        status["public_ip"] = await self.get_public_ip()
        status["pamclientcheck"] = await self._check_vault_session()
        return status

    async def _check_vault_session(self) -> str:
        if self.session_check is None:
            return "no vault session check configured"
        try:
            await self.session_check()
        except Exception as e:
            # Diagnostic endpoint: report, do not fail
            logger.warning(f"Vault session check failed: {e}")
            return str(e)
        return "ok"

    async def get_public_ip(self) -> str:
        """Ask the IP echo services in turn; ``"unknown"`` if none answers."""
        services: List[str] = self.health_config.public_ip_services
        client = self._http or httpx.AsyncClient()
        try:
            for service in services:
                try:
                    response = await client.get(service, timeout=self.health_config.public_ip_timeout)
                except httpx.HTTPError as e:
                    logger.debug(f"Failed to get IP from {service}: {e}")
                    continue
                if response.status_code == 200:
                    ip = response.text.strip()
                    logger.debug(f"Got public IP {ip} from {service}")
                    return ip
            logger.debug("Could not determine public IP from any service")
            return "unknown"
        finally:
            if self._http is None:
                await client.aclose()
