"""Typer CLI entrypoint."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

import typer

from phue_exporter.core.config import load_settings
from phue_exporter.core.errors import HueError, PhueExporterError
from phue_exporter.core.service import ExporterService

app = typer.Typer(help="Prometheus exporter for Hue bridge lights")

_CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to a YAML config file")
_LOG_LEVEL_OPTION = typer.Option(None, "--log-level", help="Override the configured log level")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _build_service(config: Path | None, log_level: str | None = None, **overrides: Any) -> ExporterService:
    _configure_logging(log_level or "INFO")
    settings = load_settings(config)
    if log_level is None:
        logging.getLogger().setLevel(settings.log_level)
    if overrides:
        settings = replace(settings, **overrides)
    return ExporterService(settings)


@app.command("register")
def register(
    config: Path | None = _CONFIG_OPTION,
    log_level: str | None = _LOG_LEVEL_OPTION,
) -> None:
    """Pair with the bridge. Press its link button first."""
    try:
        service = _build_service(config, log_level)
        username = service.register()
        typer.echo(f"Registered with username: {username}")
    except HueError as exc:
        typer.echo(f"Error: bridge refused pairing ({exc.id}): {exc.description}", err=True)
        raise typer.Exit(code=1) from None
    except PhueExporterError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("run")
def run_exporter(
    config: Path | None = _CONFIG_OPTION,
    log_level: str | None = _LOG_LEVEL_OPTION,
    port: int | None = typer.Option(None, "--port", min=0, max=65535, help="Listen port for /metrics"),
) -> None:
    """Poll the bridge and serve light metrics on /metrics."""
    try:
        overrides = {} if port is None else {"listen_port": port}
        service = _build_service(config, log_level, **overrides)
        service.serve()
    except PhueExporterError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    except (OSError, OverflowError) as exc:
        typer.echo(f"Error: cannot start metrics server: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("config")
def show_config(
    config: Path | None = _CONFIG_OPTION,
    log_level: str | None = _LOG_LEVEL_OPTION,
) -> None:
    """Print the bridge configuration document as JSON."""
    try:
        service = _build_service(config, log_level)
        typer.echo(json.dumps(service.read_config(), indent=2, sort_keys=True))
    except PhueExporterError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("lights")
def list_lights(
    config: Path | None = _CONFIG_OPTION,
    log_level: str | None = _LOG_LEVEL_OPTION,
) -> None:
    """List the lights the bridge reports and the values that would be exported."""
    try:
        service = _build_service(config, log_level)
        lights = service.list_lights()
        if not lights:
            typer.echo("No lights reported by the bridge")
            return

        for light_id, light in sorted(lights.items()):
            brightness = "-" if light.brightness is None else str(light.brightness)
            state = "on" if light.on else "off"
            typer.echo(f"{light_id}: {light.name} [{light.unique_id}] {state} bri={brightness}")
    except PhueExporterError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
