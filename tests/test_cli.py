import httpx
import pytest

from conftest import RecordingTransport
from rollbar_reporter import __main__ as cli


def test_cli_sends_single_item(monkeypatch: pytest.MonkeyPatch) -> None:
    transport = RecordingTransport()
    monkeypatch.setattr(cli, "build_transport", lambda timeout: transport)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    monkeypatch.setenv("ROLLBAR_ACCESS_TOKEN", "cli-token")

    exit_code = cli.main(["--message", "deploy finished", "--level", "warning", "--environment", "ci"])

    assert exit_code == 0
    data = transport.payloads()[0]["data"]
    assert data["body"] == {"message": {"body": "deploy finished"}}
    assert data["level"] == "warning"
    assert data["environment"] == "ci"
    assert transport.calls[0][1].headers["X-Rollbar-Access-Token"] == "cli-token"


def test_cli_reports_delivery_failure(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    transport = RecordingTransport(httpx.Response(401, text="bad token"))
    monkeypatch.setattr(cli, "build_transport", lambda timeout: transport)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)

    exit_code = cli.main(["--message", "hello"])

    assert exit_code == 1
    assert "Failed to log to Rollbar: bad token" in capsys.readouterr().err
