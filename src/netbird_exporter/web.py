# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Flask application serving the metrics endpoint, a health check and an index page."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, Response, g, jsonify, render_template_string, request
from prometheus_client import CollectorRegistry, make_wsgi_app
from werkzeug.middleware.dispatcher import DispatcherMiddleware
from werkzeug.serving import BaseWSGIServer, make_server

from .config import Settings
from .constants import DEFAULT_SHUTDOWN_TIMEOUT, HEALTH_PATH
from .exporter import NetBirdExporter

logger = logging.getLogger(__name__)

INDEX_TEMPLATE = """
<html>
<head><title>NetBird API Exporter</title></head>
<body>
<h1>NetBird API Exporter</h1>
<p>This is a Prometheus exporter for NetBird API metrics.</p>
<ul>
<li><a href="{{ metrics_path }}">Metrics</a></li>
<li><a href="{{ health_path }}">Health Check</a></li>
</ul>
<h2>Available Metrics</h2>
<ul>
<li><strong>Peers API:</strong> Connection status, OS distribution, geographic distribution, SSH status, login status</li>
<li><strong>Groups API:</strong> Group counts and membership</li>
<li><strong>Users API:</strong> User counts, roles, status, permissions</li>
<li><strong>DNS API:</strong> Nameserver groups, DNS settings, nameserver configurations</li>
<li><strong>Networks API:</strong> Network counts, routers, resources, policies, routing peers</li>
</ul>
</body>
</html>
"""


def build_registry(exporter: NetBirdExporter) -> CollectorRegistry:
    """Create a registry that exposes only the NetBird exporter."""
    registry = CollectorRegistry(auto_describe=True)
    registry.register(exporter)
    return registry


def create_app(settings: Settings, registry: CollectorRegistry) -> Flask:
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__)
    app.config["SETTINGS"] = settings

    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()
        logger.debug(
            f"HTTP request received: method={request.method} path={request.path} "
            f"remote_addr={request.remote_addr} user_agent={request.user_agent.string}"
        )

    @app.after_request
    def _log_request(response: Response) -> Response:
        started = g.get("request_started")
        duration = time.perf_counter() - started if started is not None else 0.0
        logger.debug(
            f"HTTP request completed: method={request.method} path={request.path} "
            f"status_code={response.status_code} duration={duration:.4f}s"
        )
        return response

    @app.route(HEALTH_PATH)
    def health():
        """Liveness probe; does not touch the NetBird API."""
        return jsonify(
            {
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            }
        )

    @app.route("/")
    def index():
        return render_template_string(
            INDEX_TEMPLATE,
            metrics_path=settings.metrics_path,
            health_path=HEALTH_PATH,
        )

    # Scrapes of the metrics path bypass Flask and go straight to prometheus_client
    app.wsgi_app = DispatcherMiddleware(
        app.wsgi_app, {settings.metrics_path: make_wsgi_app(registry)}
    )
    return app


class ExporterServer:
    """Threaded WSGI server running in a background thread with a bounded graceful shutdown."""

    def __init__(self, app: Flask, host: str, port: int):
        self.app = app
        self.host = host
        self.port = port
        self._server: Optional[BaseWSGIServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def server(self) -> BaseWSGIServer:
        if self._server is None:
            try:
                self._server = make_server(self.host, self.port, self.app, threaded=True)
            except SystemExit as exc:
                # werkzeug reports a failed bind by exiting instead of raising
                raise OSError(f"cannot listen on {self.host}:{self.port}") from exc
        return self._server

    def start(self) -> None:
        """Bind the socket and serve requests from a background thread."""
        server = self.server
        logger.info(f"Starting HTTP server on {self.host}:{server.server_port}")
        self._thread = threading.Thread(target=server.serve_forever, name="netbird-http", daemon=True)
        self._thread.start()

    def shutdown(self, timeout: float = DEFAULT_SHUTDOWN_TIMEOUT) -> bool:
        """Stop accepting requests and wait up to ``timeout`` seconds for the server to exit.

        Returns True when the server stopped within the window.
        """
        if self._server is None or self._thread is None:
            return True
        logger.info("Shutting down server...")
        deadline = time.monotonic() + timeout
        stopper = threading.Thread(target=self._server.shutdown, name="netbird-shutdown", daemon=True)
        stopper.start()
        stopper.join(timeout)
        self._thread.join(max(deadline - time.monotonic(), 0))
        if self._thread.is_alive():
            logger.error(f"Error during server shutdown: still running after {timeout}s")
            return False
        self._server.server_close()
        logger.info("Server stopped")
        return True
