"""Liveness endpoint for external monitoring.

    GET /health  ->  200 {"ok": true, "timestamp": "<ISO-8601 UTC>"}
    anything else -> 404 "Not Found"

The server runs on its own daemon thread and knows nothing about the
motion engine: a dead endpoint never stops alerts, and a busy engine
never delays a health check. No auth; CORS is open so browser-based
uptime dashboards can poll it.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.serving import make_server

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    """Create the liveness Flask application."""
    app = Flask(__name__)
    CORS(app)

    @app.route("/health")
    def health():
        return jsonify({
            "ok": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    @app.errorhandler(404)
    def not_found(_exc):
        return "Not Found", 404, {"Content-Type": "text/plain; charset=utf-8"}

    return app


class HealthServer:
    """Serves create_app() on a background thread until stop()."""

    def __init__(self, port: int, host: str = "0.0.0.0"):
        self.host = host
        self.port = port
        self._server = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> bool:
        """Bind and start serving. Returns False (and logs) if binding fails."""
        if self._thread and self._thread.is_alive():
            return True

        logger.info("Health server starting on port %d", self.port)
        try:
            self._server = make_server(self.host, self.port, create_app(), threaded=True)
        except (OSError, SystemExit) as exc:
            # werkzeug exits instead of raising when the port is taken
            logger.error("Health server failed to start", extra={"error": str(exc), "port": self.port})
            self._server = None
            return False

        self.port = self._server.server_port
        self._thread = threading.Thread(
            target=self._server.serve_forever, daemon=True, name="health-server"
        )
        self._thread.start()
        logger.info("Health server listening on port %d", self.port)
        return True

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        self._server = None
        if self._thread:
            self._thread.join(timeout=5)
        logger.info("Health server stopped")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
