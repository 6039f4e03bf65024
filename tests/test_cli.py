from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from phue_exporter import cli
from phue_exporter.core.config import ExporterSettings
from phue_exporter.core.errors import BridgeReadError, HueError
from phue_exporter.core.model import Light, LightState


class FakeService:
    served_with: ExporterSettings | None = None

    def __init__(self, settings: ExporterSettings, *, transport=None) -> None:
        self.settings = settings

    def register(self) -> str:
        self.settings.require_address()
        return "abc123"

    def read_config(self):
        self.settings.require_session()
        return {"name": "Philips hue", "apiversion": "1.56.0"}

    def list_lights(self):
        self.settings.require_session()
        return {
            "2": Light(unique_id="P7", name="Plug", state=LightState(on=False)),
            "1": Light(unique_id="L1", name="Lamp", state=LightState(on=True, bri=128)),
        }

    def serve(self) -> None:
        self.settings.require_session()
        FakeService.served_with = self.settings


runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.delenv("HUE_CONFIG", raising=False)
    monkeypatch.setenv("HUE_ADDR", "192.168.1.2")
    monkeypatch.setenv("HUE_USER", "abc123")
    monkeypatch.setattr(cli, "ExporterService", FakeService)


def test_register_command_prints_username() -> None:
    result = runner.invoke(cli.app, ["register"])
    assert result.exit_code == 0
    assert "Registered with username: abc123" in result.stdout


def test_register_command_reports_bridge_error(monkeypatch: pytest.MonkeyPatch) -> None:
    class RefusingService(FakeService):
        def register(self) -> str:
            raise HueError(description="link button not pressed", id=101)

    monkeypatch.setattr(cli, "ExporterService", RefusingService)
    result = runner.invoke(cli.app, ["register"])
    assert result.exit_code == 1
    assert "bridge refused pairing (101): link button not pressed" in result.output
    assert "Traceback" not in result.output


def test_missing_address_is_fatal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("HUE_ADDR")
    result = runner.invoke(cli.app, ["register"])
    assert result.exit_code == 1
    assert "Missing 'HUE_ADDR' environment variable" in result.output


def test_run_requires_username(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("HUE_USER")
    FakeService.served_with = None
    result = runner.invoke(cli.app, ["run"])
    assert result.exit_code == 1
    assert "Missing 'HUE_USER' environment variable" in result.output
    assert FakeService.served_with is None


def test_run_command_applies_port_override() -> None:
    result = runner.invoke(cli.app, ["run", "--port", "9999"])
    assert result.exit_code == 0
    assert FakeService.served_with is not None
    assert FakeService.served_with.listen_port == 9999
    assert FakeService.served_with.address == "192.168.1.2"


def test_run_command_uses_config_file(tmp_path: Path) -> None:
    config = tmp_path / "exporter.yaml"
    config.write_text("listen_port: 9400\npoll_interval_s: 30\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["run", "--config", str(config)])
    assert result.exit_code == 0
    assert FakeService.served_with is not None
    assert FakeService.served_with.listen_port == 9400
    assert FakeService.served_with.poll_interval_s == 30.0


def test_invalid_config_file_is_clean_error(tmp_path: Path) -> None:
    config = tmp_path / "exporter.yaml"
    config.write_text("listen_port: nope\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["run", "--config", str(config)])
    assert result.exit_code == 1
    assert "Error: Schema validation failed" in result.output


def test_config_command_prints_json() -> None:
    result = runner.invoke(cli.app, ["config"])
    assert result.exit_code == 0
    assert '"apiversion": "1.56.0"' in result.stdout


def test_lights_command_lists_lights() -> None:
    result = runner.invoke(cli.app, ["lights"])
    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert lines == [
        "1: Lamp [L1] on bri=128",
        "2: Plug [P7] off bri=-",
    ]


def test_lights_command_read_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    class OfflineService(FakeService):
        def list_lights(self):
            raise BridgeReadError("GET http://192.168.1.2/api/abc123/lights could not connect")

    monkeypatch.setattr(cli, "ExporterService", OfflineService)
    result = runner.invoke(cli.app, ["lights"])
    assert result.exit_code == 1
    assert "Error: GET http://192.168.1.2/api/abc123/lights could not connect" in result.output


def test_run_rejects_out_of_range_port() -> None:
    FakeService.served_with = None
    result = runner.invoke(cli.app, ["run", "--port", "99999"])
    assert result.exit_code == 2
    assert "Invalid value" in result.output
    assert FakeService.served_with is None


def test_run_bind_failure_is_clean_error(monkeypatch: pytest.MonkeyPatch) -> None:
    class BusyService(FakeService):
        def serve(self) -> None:
            raise OSError(98, "Address already in use")

    monkeypatch.setattr(cli, "ExporterService", BusyService)
    result = runner.invoke(cli.app, ["run"])
    assert result.exit_code == 1
    assert "Error: cannot start metrics server" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_logging_is_configured_before_settings_load(monkeypatch: pytest.MonkeyPatch) -> None:
    order: list[str] = []
    real_load_settings = cli.load_settings

    def configure(level: str) -> None:
        order.append(f"logging:{level}")

    def load(config):
        order.append("settings")
        return real_load_settings(config)

    monkeypatch.setattr(cli, "_configure_logging", configure)
    monkeypatch.setattr(cli, "load_settings", load)
    result = runner.invoke(cli.app, ["register", "--log-level", "DEBUG"])
    assert result.exit_code == 0
    assert order == ["logging:DEBUG", "settings"]
