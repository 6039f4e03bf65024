"""Stable public API for embedding phue-exporter in other tooling.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from phue_exporter.core.bridge import Bridge
from phue_exporter.core.config import ExporterSettings, load_settings
from phue_exporter.core.errors import (
    BridgeReadError,
    ConfigError,
    HueError,
    PhueExporterError,
    RegisterError,
    RegisterProtocolError,
    SendingRequestError,
    TransportConnectError,
    TransportError,
    TransportSendError,
    TransportTimeoutError,
    UrlParsingError,
)
from phue_exporter.core.metrics import LightMetrics
from phue_exporter.core.model import (
    BridgeSession,
    HttpResponse,
    Light,
    LightCapabilities,
    LightConfig,
    LightState,
)
from phue_exporter.core.poller import Poller
from phue_exporter.core.server import MetricsServer
from phue_exporter.core.service import ExporterService
from phue_exporter.transports.base import Transport
from phue_exporter.transports.http import RequestsTransport

__all__ = [
    "PhueExporterError",
    "ConfigError",
    "TransportError",
    "TransportConnectError",
    "TransportSendError",
    "TransportTimeoutError",
    "RegisterError",
    "UrlParsingError",
    "SendingRequestError",
    "RegisterProtocolError",
    "HueError",
    "BridgeReadError",
    "BridgeSession",
    "HttpResponse",
    "Light",
    "LightCapabilities",
    "LightConfig",
    "LightState",
    "Bridge",
    "LightMetrics",
    "Poller",
    "MetricsServer",
    "ExporterService",
    "ExporterSettings",
    "load_settings",
    "Transport",
    "RequestsTransport",
]
