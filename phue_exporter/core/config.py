"""Settings loading: defaults, an optional YAML file, then environment variables."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from phue_exporter.core.bridge import DEFAULT_DEVICETYPE, DEFAULT_TIMEOUT_S
from phue_exporter.core.errors import ConfigError
from phue_exporter.core.model import BridgeSession
from phue_exporter.core.poller import DEFAULT_INTERVAL_S
from phue_exporter.core.server import DEFAULT_HOST, DEFAULT_PORT

ADDRESS_ENV = "HUE_ADDR"
USERNAME_ENV = "HUE_USER"
CONFIG_ENV = "HUE_CONFIG"
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class ExporterSettings:
    address: str | None = None
    username: str | None = None
    devicetype: str = DEFAULT_DEVICETYPE
    listen_host: str = DEFAULT_HOST
    listen_port: int = DEFAULT_PORT
    poll_interval_s: float = DEFAULT_INTERVAL_S
    request_timeout_s: float = DEFAULT_TIMEOUT_S
    namespace: str = ""
    prune_stale: bool = False
    log_level: str = "INFO"
    source: Path | None = None

    def require_address(self) -> str:
        if not self.address:
            raise ConfigError(f"Missing '{ADDRESS_ENV}' environment variable")
        return self.address

    def require_session(self) -> BridgeSession:
        address = self.require_address()
        if not self.username:
            raise ConfigError(f"Missing '{USERNAME_ENV}' environment variable")
        return BridgeSession(address=address, username=self.username)


def _load_schema_validator() -> Any:
    schema_text = resources.files("phue_exporter.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def default_config_path(environ: Mapping[str, str]) -> Path:
    xdg_config = Path(environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "phue-exporter/config.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at root")
    return loaded


def _validate(doc: dict[str, Any], source: Path) -> None:
    try:
        _load_schema_validator().validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigError(f"Schema validation failed for {source}{where}: {exc.message}") from exc


def _resolve_config_path(config_path: Path | None, environ: Mapping[str, str]) -> Path | None:
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"Config file {config_path} does not exist")
        return config_path

    from_env = environ.get(CONFIG_ENV)
    if from_env:
        path = Path(from_env)
        if not path.is_file():
            raise ConfigError(f"Config file {path} (from {CONFIG_ENV}) does not exist")
        return path

    default = default_config_path(environ)
    return default if default.is_file() else None


def load_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ExporterSettings:
    """Merge defaults, the YAML config file and ``HUE_ADDR``/``HUE_USER``."""
    env = os.environ if environ is None else environ
    settings = ExporterSettings()

    path = _resolve_config_path(config_path, env)
    if path is not None:
        doc = _read_yaml(path)
        _validate(doc, path)
        if "poll_interval_s" in doc:
            doc["poll_interval_s"] = float(doc["poll_interval_s"])
        if "request_timeout_s" in doc:
            doc["request_timeout_s"] = float(doc["request_timeout_s"])
        settings = replace(settings, source=path, **doc)
        LOGGER.debug("Loaded settings from %s", path)

    overrides: dict[str, str] = {}
    if env.get(ADDRESS_ENV):
        overrides["address"] = env[ADDRESS_ENV]
    if env.get(USERNAME_ENV):
        overrides["username"] = env[USERNAME_ENV]
    for key in overrides:
        if getattr(settings, key) is not None:
            LOGGER.info("Environment overrides '%s' from %s", key, path)

    return replace(settings, **overrides)
