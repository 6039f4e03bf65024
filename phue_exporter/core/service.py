"""Service layer used by the CLI: pairing, diagnostics and the exporter itself."""

from __future__ import annotations

import logging
from typing import Any

from phue_exporter.core.bridge import Bridge
from phue_exporter.core.config import ExporterSettings
from phue_exporter.core.metrics import LightMetrics
from phue_exporter.core.model import Light
from phue_exporter.core.poller import Poller
from phue_exporter.core.server import MetricsServer
from phue_exporter.transports.base import Transport
from phue_exporter.transports.http import RequestsTransport

LOGGER = logging.getLogger(__name__)


class ExporterService:
    def __init__(
        self,
        settings: ExporterSettings,
        *,
        transport: Transport | None = None,
    ) -> None:
        self.settings = settings
        self.transport = transport or RequestsTransport()

    def register(self) -> str:
        address = self.settings.require_address()
        LOGGER.info("Registering with hue bridge at %s", address)
        return Bridge.register(
            self.transport,
            address,
            devicetype=self.settings.devicetype,
            timeout_s=self.settings.request_timeout_s,
        )

    def bridge(self) -> Bridge:
        return Bridge(
            self.transport,
            self.settings.require_session(),
            timeout_s=self.settings.request_timeout_s,
        )

    def read_config(self) -> Any:
        return self.bridge().read_config()

    def list_lights(self) -> dict[str, Light]:
        return self.bridge().lights()

    def build_exporter(self) -> tuple[Poller, MetricsServer]:
        """Wire one registry into a poller and a scrape server without starting either."""
        bridge = self.bridge()
        metrics = LightMetrics(
            namespace=self.settings.namespace,
            prune_stale=self.settings.prune_stale,
        )
        poller = Poller(bridge, metrics, interval_s=self.settings.poll_interval_s)
        server = MetricsServer(
            metrics,
            host=self.settings.listen_host,
            port=self.settings.listen_port,
        )
        return poller, server

    def serve(self) -> None:
        """Run the exporter until the process is interrupted."""
        poller, server = self.build_exporter()
        LOGGER.info("Running exporter on %s:%d", self.settings.listen_host, server.port)
        poller.start()
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            LOGGER.info("Shutting down")
        finally:
            poller.stop(timeout_s=1.0)
            server.server_close()
