"""Scrape endpoint serving the gauges on ``GET /metrics``."""

from __future__ import annotations

import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from prometheus_client import CONTENT_TYPE_LATEST

from phue_exporter.core.metrics import LightMetrics

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 9292
METRICS_PATH = "/metrics"
LOGGER = logging.getLogger(__name__)


class _MetricsHandler(BaseHTTPRequestHandler):
    server: MetricsServer

    def do_GET(self) -> None:
        if self.path.split("?", 1)[0] != METRICS_PATH:
            self.send_error(404)
            return

        body = self.server.metrics.render()
        self.send_response(200)
        self.send_header("Content-Type", CONTENT_TYPE_LATEST)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        LOGGER.debug("%s - %s", self.address_string(), format % args)


class MetricsServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, metrics: LightMetrics, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
        super().__init__((host, port), _MetricsHandler)
        self.metrics = metrics

    @property
    def port(self) -> int:
        return int(self.server_address[1])

    def start(self) -> threading.Thread:
        """Serve from a daemon thread; ``serve_forever`` is the blocking variant."""
        thread = threading.Thread(target=self.serve_forever, name="phue-metrics", daemon=True)
        thread.start()
        return thread
