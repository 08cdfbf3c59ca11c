"""
PAM Custom Provider Command-Line Interface

Commands to run the provider endpoint and to check a deployment's settings.
"""

import sys
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
import uvicorn
from pydantic import ValidationError

from pamprovider import __version__
from pamprovider.core.config_manager import ConfigManager, MissingConfigurationError
from pamprovider.core.health import BuildInfo
from pamprovider.core.runtime import ProviderRuntime
from pamprovider.gateway.request_path import RequestPathError, decode


@click.group()
@click.version_option(version=__version__, prog_name="pamprovider")
@click.pass_context
def cli(ctx):
    """
    PAM Custom Provider

    Azure Custom Provider endpoint for CyberArk Privilege Cloud safes and accounts.
    """
    ctx.ensure_object(dict)


@cli.command()
@click.option("--host", default=None, help="Host to bind to [default: 0.0.0.0]")
@click.option("--port", default=None, type=int, help="Port to bind to [default: $PORT or 8080]")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level [default: INFO]",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload on code changes (development mode)",
)
def serve(host: Optional[str], port: Optional[int], config: Optional[Path], log_level: Optional[str], reload: bool):
    """
    Start the provider endpoint.

    Vault settings (IDTENANTURL, PCLOUDURL, PAMUSER, PAMPASS) must be set.

    Examples:
        pamprovider serve
        pamprovider serve --port 8080 --log-level DEBUG
    """
    overrides: Dict[str, Any] = {}
    if host:
        overrides.setdefault("server", {})["host"] = host
    if port:
        overrides.setdefault("server", {})["port"] = port
    if log_level:
        overrides.setdefault("logging", {})["level"] = log_level.upper()

    runtime = ProviderRuntime()
    try:
        runtime.initialize(config_file=str(config) if config else None, cli_overrides=overrides)
    except (ValidationError, ValueError, FileNotFoundError) as e:
        click.echo(f"[ERROR] Invalid configuration: {e}", err=True)
        sys.exit(1)

    settings = runtime.get_config()
    logger = logging.getLogger("pamprovider.cli")
    try:
        settings.vault.require()
    except MissingConfigurationError as e:
        logger.critical(f"Environment validation failed: {e}")
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)

    build_info = runtime.build_info
    click.echo(f"Starting PAM custom provider v{build_info.version} (build {build_info.build_date})")
    click.echo(f"Listening on {settings.server.host}:{settings.server.port}")

    try:
        if reload:
            uvicorn.run(
                "pamprovider.core.runtime:app_factory",
                host=settings.server.host,
                port=settings.server.port,
                log_level=settings.logging.level.lower(),
                reload=True,
                factory=True,
            )
        else:
            uvicorn.run(
                runtime.get_app(),
                host=settings.server.host,
                port=settings.server.port,
                log_level=settings.logging.level.lower(),
                access_log=False,
            )
    except KeyboardInterrupt:
        click.echo("\nShutting down PAM custom provider...")


@cli.command("check-env")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
def check_env(config: Optional[Path]):
    """Check that every vault setting is present."""
    settings = ConfigManager().load(config_file=str(config) if config else None)
    missing = settings.vault.missing_variables()
    if missing:
        for name in missing:
            click.echo(f"missing: {name}")
        sys.exit(1)
    click.echo("environment ok")


@cli.command("parse-path")
@click.argument("request_path")
def parse_path(request_path: str):
    """
    Decode a routing header value.

    Example:
        pamprovider parse-path /subscriptions/s/resourceGroups/g/providers/Microsoft.CustomProviders/resourceProviders/p/safes/demo
    """
    try:
        address = decode(request_path)
    except RequestPathError as e:
        click.echo(f"[ERROR] {e.error_code}: {e.message}", err=True)
        sys.exit(1)

    click.echo(f"subscription_id:        {address.subscription_id}")
    click.echo(f"resource_group:         {address.resource_group}")
    click.echo(f"provider_namespace:     {address.provider_namespace}")
    click.echo(f"custom_provider_name:   {address.custom_provider_name}")
    click.echo(f"resource_type_name:     {address.resource_type_name}")
    click.echo(f"resource_instance_name: {address.resource_instance_name}")
    click.echo(f"resource_id:            {address.resource_id}")


@cli.command()
def version():
    """Show version and build date."""
    build_info = BuildInfo.from_env(__version__)
    click.echo(f"pamprovider version {build_info.version} (build {build_info.build_date})")


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
