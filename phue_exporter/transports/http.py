"""HTTP transport implementation using requests."""

from __future__ import annotations

from typing import Any

import requests

from phue_exporter.core.errors import (
    TransportConnectError,
    TransportSendError,
    TransportTimeoutError,
)
from phue_exporter.core.model import HttpResponse


class RequestsTransport:
    def __init__(self, session: requests.Session | None = None) -> None:
        self.session = session or requests.Session()

    def request(
        self,
        method: str,
        url: str,
        *,
        json_body: Any = None,
        timeout_s: float = 5.0,
    ) -> HttpResponse:
        try:
            response = self.session.request(method, url, json=json_body, timeout=timeout_s)
        except requests.Timeout as exc:
            raise TransportTimeoutError(f"{method} {url} timed out after {timeout_s}s") from exc
        except requests.ConnectionError as exc:
            raise TransportConnectError(f"{method} {url} could not connect: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportSendError(f"{method} {url} failed: {exc}") from exc

        return HttpResponse(status_code=response.status_code, content=response.content)

    def close(self) -> None:
        self.session.close()
