"""Core data models used across bridge client, poller, and CLI."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BridgeSession:
    address: str
    username: str


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decode the body as JSON; raises ``ValueError`` when malformed."""
        try:
            return json.loads(self.content.decode("utf-8"))
        except RecursionError as exc:
            raise ValueError("JSON body is nested too deeply") from exc


@dataclass(frozen=True)
class LightState:
    on: bool
    bri: int | None = None
    alert: str | None = None
    colormode: str | None = None
    ct: int | None = None
    effect: str | None = None
    hue: int | None = None
    mode: str | None = None
    reachable: bool | None = None
    sat: int | None = None
    xy: Any = None


@dataclass(frozen=True)
class LightCapabilities:
    certified: bool | None = None
    control: Any = None
    streaming: Any = None


@dataclass(frozen=True)
class LightConfig:
    archetype: str | None = None
    direction: str | None = None
    function: str | None = None
    startup: Any = None


@dataclass(frozen=True)
class Light:
    unique_id: str
    name: str
    state: LightState
    type: str | None = None
    modelid: str | None = None
    manufacturername: str | None = None
    productname: str | None = None
    productid: str | None = None
    swversion: str | None = None
    swconfigid: str | None = None
    swupdate: Any = None
    capabilities: LightCapabilities = field(default_factory=LightCapabilities)
    config: LightConfig = field(default_factory=LightConfig)

    @property
    def on(self) -> bool:
        return self.state.on

    @property
    def brightness(self) -> int | None:
        return self.state.bri

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> Light:
        """Build a light from one entry of the bridge's ``/lights`` document.

        The document is expected to have passed schema validation already, so
        only ``uniqueid``, ``name`` and ``state.on`` are accessed directly.
        """
        state = doc["state"]
        capabilities = doc.get("capabilities") or {}
        config = doc.get("config") or {}
        return cls(
            unique_id=doc["uniqueid"],
            name=doc["name"],
            state=LightState(
                on=state["on"],
                bri=state.get("bri"),
                alert=state.get("alert"),
                colormode=state.get("colormode"),
                ct=state.get("ct"),
                effect=state.get("effect"),
                hue=state.get("hue"),
                mode=state.get("mode"),
                reachable=state.get("reachable"),
                sat=state.get("sat"),
                xy=state.get("xy"),
            ),
            type=doc.get("type"),
            modelid=doc.get("modelid"),
            manufacturername=doc.get("manufacturername"),
            productname=doc.get("productname"),
            productid=doc.get("productid"),
            swversion=doc.get("swversion"),
            swconfigid=doc.get("swconfigid"),
            swupdate=doc.get("swupdate"),
            capabilities=LightCapabilities(
                certified=capabilities.get("certified"),
                control=capabilities.get("control"),
                streaming=capabilities.get("streaming"),
            ),
            config=LightConfig(
                archetype=config.get("archetype"),
                direction=config.get("direction"),
                function=config.get("function"),
                startup=config.get("startup"),
            ),
        )
