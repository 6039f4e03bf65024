"""Client for the bridge's v1 REST API: pairing and authenticated reads."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import Any
from urllib.parse import quote, urlsplit

from jsonschema import ValidationError, validators

from phue_exporter.core.errors import (
    BridgeReadError,
    HueError,
    RegisterProtocolError,
    SendingRequestError,
    TransportError,
    UrlParsingError,
)
from phue_exporter.core.model import BridgeSession, Light
from phue_exporter.transports.base import Transport

DEFAULT_DEVICETYPE = "phue-exporter"
DEFAULT_TIMEOUT_S = 5.0
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisterSuccess:
    username: str


@dataclass(frozen=True)
class RegisterFailure:
    type: int
    description: str


def api_url(address: str, *segments: str) -> str:
    """Compose ``http://{address}/api[/segment...]``.

    Raises ``ValueError`` when ``address`` is not a bare ``host[:port]``.
    """
    if not address or any(ch.isspace() for ch in address):
        raise ValueError(f"invalid bridge address {address!r}")
    base = f"http://{address}/api"
    parts = urlsplit(base)
    # .port raises ValueError when non-numeric or out of range
    port = parts.port
    if port == 0 or not parts.hostname or parts.username or parts.path != "/api" or parts.query or parts.fragment:
        raise ValueError(f"invalid bridge address {address!r}")
    return "/".join([base, *(quote(segment, safe="") for segment in segments)])


def decode_register_entry(entry: Any) -> RegisterSuccess | RegisterFailure:
    if not isinstance(entry, dict):
        raise RegisterProtocolError(f"Pairing response entry is not an object: {entry!r}")

    if "success" in entry:
        success = entry["success"]
        if not isinstance(success, dict) or not isinstance(success.get("username"), str):
            raise RegisterProtocolError(f"Malformed pairing success object: {success!r}")
        return RegisterSuccess(username=success["username"])

    if "error" in entry:
        error = entry["error"]
        if not isinstance(error, dict):
            raise RegisterProtocolError(f"Malformed pairing error object: {error!r}")
        code = error.get("type")
        description = error.get("description")
        if isinstance(code, bool) or not isinstance(code, int) or code < 0 or not isinstance(description, str):
            raise RegisterProtocolError(f"Malformed pairing error object: {error!r}")
        return RegisterFailure(type=code, description=description)

    raise RegisterProtocolError("Pairing response has neither 'success' nor 'error'")


@lru_cache(maxsize=None)
def _lights_validator() -> Any:
    schema_text = resources.files("phue_exporter.schemas").joinpath("lights.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _bridge_error_description(doc: Any) -> str | None:
    if isinstance(doc, list) and doc and isinstance(doc[0], dict):
        error = doc[0].get("error")
        if isinstance(error, dict) and isinstance(error.get("description"), str):
            return error["description"]
    return None


def decode_lights(doc: Any) -> dict[str, Light]:
    description = _bridge_error_description(doc)
    if description is not None:
        raise BridgeReadError(f"Bridge reported error: {description}")

    try:
        _lights_validator().validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise BridgeReadError(f"Unexpected lights document{where}: {exc.message}") from exc

    return {light_id: Light.from_dict(entry) for light_id, entry in doc.items()}


class Bridge:
    def __init__(
        self,
        transport: Transport,
        session: BridgeSession,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self.transport = transport
        self.session = session
        self.timeout_s = timeout_s

    @staticmethod
    def register(
        transport: Transport,
        address: str,
        *,
        devicetype: str = DEFAULT_DEVICETYPE,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> str:
        """Pair with the bridge and return the new username token.

        The bridge only accepts pairing shortly after its link button was
        pressed; otherwise it answers with error 101, raised as ``HueError``.
        """
        try:
            url = api_url(address)
        except ValueError as exc:
            raise UrlParsingError(f"Cannot build pairing URL: {exc}") from exc

        try:
            response = transport.request(
                "POST",
                url,
                json_body={"devicetype": devicetype},
                timeout_s=timeout_s,
            )
        except TransportError as exc:
            raise SendingRequestError(exc) from exc

        if not response.ok:
            raise RegisterProtocolError(f"Pairing request returned HTTP {response.status_code}")

        try:
            content = response.json()
        except ValueError as exc:
            raise RegisterProtocolError("Pairing response is not valid JSON") from exc

        if not isinstance(content, list):
            raise RegisterProtocolError("Pairing response is not a JSON array")
        if not content:
            raise RegisterProtocolError("Pairing response is an empty array")

        result = decode_register_entry(content[0])
        if isinstance(result, RegisterFailure):
            raise HueError(description=result.description, id=result.type)
        return result.username

    def read_config(self) -> Any:
        """Return the bridge configuration document as parsed JSON."""
        return self._get_json("config")

    def lights(self) -> dict[str, Light]:
        return decode_lights(self._get_json("lights"))

    def _get_json(self, resource: str) -> Any:
        try:
            url = api_url(self.session.address, self.session.username, resource)
        except ValueError as exc:
            raise BridgeReadError(f"Cannot build {resource} URL: {exc}") from exc

        LOGGER.debug("GET %s from %s", resource, self.session.address)
        try:
            response = self.transport.request("GET", url, timeout_s=self.timeout_s)
        except TransportError as exc:
            raise BridgeReadError(str(exc)) from exc

        if not response.ok:
            raise BridgeReadError(f"GET {resource} returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise BridgeReadError(f"GET {resource} returned malformed JSON") from exc
