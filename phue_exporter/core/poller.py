"""Background loop that mirrors bridge light state into the gauges."""

from __future__ import annotations

import logging
import threading

from phue_exporter.core.bridge import Bridge
from phue_exporter.core.errors import BridgeReadError
from phue_exporter.core.metrics import LightMetrics

DEFAULT_INTERVAL_S = 5.0
LOGGER = logging.getLogger(__name__)


class Poller:
    """Polls ``bridge.lights()`` every ``interval_s`` seconds, forever.

    Every cycle stands alone: there is no backoff and no retry cap, and a
    failed poll leaves the previously published values untouched.
    """

    def __init__(
        self,
        bridge: Bridge,
        metrics: LightMetrics,
        *,
        interval_s: float = DEFAULT_INTERVAL_S,
    ) -> None:
        self.bridge = bridge
        self.metrics = metrics
        self.interval_s = interval_s
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    def poll_once(self) -> bool:
        LOGGER.info("Updating metrics")
        try:
            lights = self.bridge.lights()
        except BridgeReadError as exc:
            LOGGER.error("Loading lights failed: %s", exc)
            return False

        self.metrics.update(lights)
        LOGGER.debug("Published %d lights", len(lights))
        return True

    def run_forever(self) -> None:
        while not self._stopped.is_set():
            try:
                self.poll_once()
            except Exception:
                LOGGER.exception("Unexpected error while updating metrics")
            self._stopped.wait(self.interval_s)

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run_forever, name="phue-poller", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout_s: float | None = None) -> None:
        self._stopped.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout_s)
