"""
PAM Custom Provider Runtime.

Builds the FastAPI application: middleware, exception handlers, health
endpoints, the custom provider root and the catch-all 404.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse

from .. import __version__
from ..gateway.error_handlers import register_exception_handlers
from ..gateway.middleware import CorrelationMiddleware
from ..gateway.reconciler import SleepFunc
from ..gateway.router import RequestRouter, create_catch_all_router, create_router
from ..services.accounts import AccountHandler
from ..services.base import VaultFactory
from ..services.safes import SafeHandler
from ..services.vault import VaultClientFactory
from .config_manager import ConfigManager, ProviderConfig
from .health import BuildInfo, HealthCheck
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(
    config: ProviderConfig,
    build_info: Optional[BuildInfo] = None,
    vault_factory: Optional[VaultFactory] = None,
    sleep: SleepFunc = asyncio.sleep,
) -> FastAPI:
    """
    Create the provider application.

    Args:
        config: Validated provider configuration
        build_info: Version information for the health endpoints
        vault_factory: Coroutine function returning a vault client; defaults
            to a ``VaultClientFactory`` over ``config.vault``
        sleep: Sleep coroutine for the account reconciliation poll

    Returns:
        Configured FastAPI application
    """
    build_info = build_info or BuildInfo.from_env(__version__)
    owned_factory: Optional[VaultClientFactory] = None
    if vault_factory is None:
        owned_factory = VaultClientFactory(config.vault)
        vault_factory = owned_factory

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"PAM custom provider v{build_info.version} (build {build_info.build_date}) started"
        )
        try:
            yield
        finally:
            if owned_factory is not None:
                await owned_factory.aclose()
            logger.info("PAM custom provider stopped")

    app = FastAPI(
        title="PAM Custom Provider",
        description="Azure Custom Provider for CyberArk Privilege Cloud safes and accounts",
        version=build_info.version,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationMiddleware)
    register_exception_handlers(app)

    request_router = RequestRouter()
    request_router.register_handler(SafeHandler(vault_factory))
    request_router.register_handler(
        AccountHandler(vault_factory, reconciliation=config.reconciliation, sleep=sleep)
    )

    health = HealthCheck(
        build_info,
        config.vault,
        health_config=config.health,
        session_check=vault_factory,
    )
    _register_health_endpoints(app, health)

    app.include_router(create_router(request_router))
    # Must stay last: it matches every path
    app.include_router(create_catch_all_router())

    app.state.config = config
    app.state.build_info = build_info
    app.state.request_router = request_router
    app.state.health = health

    logger.debug(f"Application created with resource types: {request_router.resource_types}")
    return app


def _register_health_endpoints(app: FastAPI, health: HealthCheck) -> None:
    @app.get("/health", status_code=status.HTTP_200_OK, include_in_schema=False)
    async def health_check() -> JSONResponse:
        """Liveness; always 200 so the container is not recycled on bad settings."""
        return JSONResponse(content=health.get_health_status())

    @app.get("/healthex", status_code=status.HTTP_200_OK, include_in_schema=False)
    async def health_check_extended() -> JSONResponse:
        return JSONResponse(content=await health.get_extended_status())

    logger.debug("Health check endpoints registered at /health and /healthex")


class ProviderRuntime:
    """
    Process-level runtime.

    Loads configuration, initializes logging and builds the application once.
    """

    def __init__(self):
        self._config_manager = ConfigManager()
        self._config: Optional[ProviderConfig] = None
        self._app: Optional[FastAPI] = None
        self._build_info: Optional[BuildInfo] = None

    def initialize(
        self,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Load configuration, set up logging and create the application.

        Idempotent.

        Raises:
            ValidationError: If configuration is invalid
        """
        if self._app is not None:
            logger.info("Runtime already initialized, skipping")
            return

        self._config = self._config_manager.load(
            config_file=config_file,
            cli_overrides=cli_overrides,
        )
        setup_logging(
            level=self._config.logging.level,
            format_type=self._config.logging.format,
            log_file=self._config.logging.file,
            rotation_size=self._config.logging.rotation_size,
            rotation_count=self._config.logging.rotation_count,
            module_levels=self._config.logging.module_levels,
        )
        self._build_info = BuildInfo.from_env(__version__)
        self._app = create_app(self._config, self._build_info)
        logger.info("Runtime initialization complete")

    def get_config(self) -> ProviderConfig:
        if self._config is None:
            raise RuntimeError("Runtime not initialized. Call initialize() first.")
        return self._config

    def get_app(self) -> FastAPI:
        if self._app is None:
            raise RuntimeError("Runtime not initialized. Call initialize() first.")
        return self._app

    @property
    def build_info(self) -> Optional[BuildInfo]:
        return self._build_info


def app_factory() -> FastAPI:
    """Application factory for ``uvicorn --factory`` and reload mode."""
    runtime = ProviderRuntime()
    runtime.initialize()
    return runtime.get_app()
