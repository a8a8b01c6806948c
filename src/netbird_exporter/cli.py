# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Command line entry point: configure, register the exporter and serve until signalled."""
from __future__ import annotations

import logging
import signal
import sys
import threading
from pathlib import Path

import click
from pydantic import ValidationError

from . import __version__
from .config import Settings, load_config
from .exceptions import ConfigError
from .exporter import NetBirdExporter
from .logging_config import setup_logging
from .web import ExporterServer, build_registry, create_app

logger = logging.getLogger(__name__)

ENVIRONMENT_HELP = """
\b
This application is configured primarily via environment variables:
  NETBIRD_API_URL      NetBird API endpoint (default: https://api.netbird.io)
  NETBIRD_API_TOKEN    NetBird API token (required)
  NETBIRD_API_TIMEOUT  Timeout per API request in seconds (default: 30)
  LISTEN_ADDRESS       HTTP server listen address (default: :8080)
  METRICS_PATH         Metrics endpoint path (default: /metrics)
  LOG_LEVEL            Logging level (default: info)
  LOG_FILE             Also write logs to this file
  SHUTDOWN_TIMEOUT     Graceful shutdown window in seconds (default: 30)
"""


def run(settings: Settings) -> None:
    """Serve the exporter until SIGINT or SIGTERM arrives."""
    exporter = NetBirdExporter.from_settings(settings)
    app = create_app(settings, build_registry(exporter))
    server = ExporterServer(app, settings.listen_host, settings.listen_port)

    try:
        server.start()
    except OSError as exc:
        logger.critical(f"Failed to start HTTP server on {settings.listen_address}: {exc}")
        sys.exit(1)

    stop = threading.Event()

    def _signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        stop.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    while not stop.wait(0.5):
        pass

    if not server.shutdown(settings.shutdown_timeout):
        sys.exit(1)


@click.command(epilog=ENVIRONMENT_HELP)
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_file",
    default=None,
    help="YAML file with settings; environment variables take precedence.",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--listen-address",
    "listen_address",
    default=None,
    help="HTTP server listen address, e.g. ':8080' (overrides LISTEN_ADDRESS).",
    type=str,
)
@click.option(
    "--metrics-path",
    "metrics_path",
    default=None,
    help="Metrics endpoint path (overrides METRICS_PATH).",
    type=str,
)
@click.option(
    "--log-level",
    "log_level",
    default=None,
    help="Logging level: debug, info, warning, error (overrides LOG_LEVEL).",
    type=str,
)
def main(
    config_file: Path | None,
    listen_address: str | None,
    metrics_path: str | None,
    log_level: str | None,
):
    """
    NetBird API Exporter: Prometheus metrics for the NetBird management API.
    """
    try:
        settings = load_config(
            config_file,
            listen_address=listen_address,
            metrics_path=metrics_path,
            log_level=log_level,
        )
    except (ConfigError, ValidationError) as exc:
        click.echo(f"Invalid configuration: {exc}", err=True)
        sys.exit(1)

    secrets = [settings.netbird_api_token] if settings.netbird_api_token else []
    setup_logging(settings.log_level, mask_sensitive=True, log_file=settings.log_file, secrets=secrets)

    try:
        settings.require_token()
    except ConfigError as exc:
        logger.critical(str(exc))
        sys.exit(1)

    logger.info(
        f"Starting NetBird API Exporter: netbird_url={settings.netbird_api_url} "
        f"listen_addr={settings.listen_address} metrics_path={settings.metrics_path} "
        f"log_level={settings.log_level}"
    )
    run(settings)


if __name__ == "__main__":
    main()
