"""Transport interfaces."""

from __future__ import annotations

from typing import Any, Protocol

from phue_exporter.core.model import HttpResponse


class Transport(Protocol):
    def request(
        self,
        method: str,
        url: str,
        *,
        json_body: Any = None,
        timeout_s: float = 5.0,
    ) -> HttpResponse:
        """Send one HTTP request to the bridge and return its raw response."""
