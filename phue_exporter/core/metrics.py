"""Gauge families for bridge lights, backed by a prometheus_client registry."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from phue_exporter.core.model import Light

LABEL_NAMES = ("unique_id", "name")
LOGGER = logging.getLogger(__name__)

LabelSet = tuple[str, str]


class LightMetrics:
    """Owns the ``lights_on`` and ``lights_brightness`` gauges.

    The registry is created once and shared by the poller (writer) and the
    scrape endpoint (reader). prometheus_client guards every metric child with
    its own lock, so concurrent scrapes never see a torn value.

    Label sets of lights that vanish from the bridge are kept (stale but
    present) unless ``prune_stale`` is set, in which case they are removed
    after the next successful poll that does not report them.
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        *,
        namespace: str = "",
        prune_stale: bool = False,
    ) -> None:
        self.registry = registry or CollectorRegistry()
        self.prune_stale = prune_stale
        self.lights_on = Gauge(
            "lights_on",
            "The State of Lights",
            LABEL_NAMES,
            namespace=namespace,
            registry=self.registry,
        )
        self.lights_brightness = Gauge(
            "lights_brightness",
            "The Brightness of Lights",
            LABEL_NAMES,
            namespace=namespace,
            registry=self.registry,
        )
        self._lock = threading.Lock()
        self._on_labels: set[LabelSet] = set()
        self._brightness_labels: set[LabelSet] = set()

    def update(self, lights: Mapping[str, Light]) -> None:
        on_labels: set[LabelSet] = set()
        brightness_labels: set[LabelSet] = set()

        with self._lock:
            for light in lights.values():
                labels = (light.unique_id, light.name)
                self.lights_on.labels(*labels).set(1.0 if light.on else 0.0)
                on_labels.add(labels)
                if light.brightness is not None:
                    self.lights_brightness.labels(*labels).set(float(light.brightness))
                    brightness_labels.add(labels)

            if self.prune_stale:
                for labels in self._on_labels - on_labels:
                    LOGGER.info("Removing stale light %s (%s)", *labels)
                    self.lights_on.remove(*labels)
                for labels in self._brightness_labels - brightness_labels:
                    self.lights_brightness.remove(*labels)
                self._on_labels = on_labels
                self._brightness_labels = brightness_labels
            else:
                self._on_labels |= on_labels
                self._brightness_labels |= brightness_labels

    def render(self) -> bytes:
        """Render the registry in the text exposition format, or ``b""`` on failure."""
        try:
            return generate_latest(self.registry)
        except Exception:
            LOGGER.exception("Error encoding metrics")
            return b""
