from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any
from urllib.parse import urlsplit

import httpx
import pytest
from starlette.requests import Request

from rollbar_reporter.config import get_settings
from rollbar_reporter.models.schemas import ReportTemplate
from rollbar_reporter.observability.metrics import reset_metrics
from rollbar_reporter.transport import OutboundRequest


class CountingReceive:
    """ASGI receive channel over a fixed body that counts upstream reads."""

    def __init__(self, body: bytes, chunk_size: int | None = None) -> None:
        if chunk_size and body:
            chunks = [body[i : i + chunk_size] for i in range(0, len(body), chunk_size)]
        else:
            chunks = [body]
        self.messages = [
            {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
            for i, chunk in enumerate(chunks)
        ]
        self.calls = 0

    async def __call__(self) -> dict[str, Any]:
        self.calls += 1
        if self.calls > len(self.messages):
            return {"type": "http.disconnect"}
        return self.messages[self.calls - 1]


def make_request(
    url: str,
    *,
    method: str = "GET",
    headers: dict[str, str] | list[tuple[str, str]] | None = None,
    body: bytes = b"",
    chunk_size: int | None = None,
) -> tuple[Request, CountingReceive]:
    parts = urlsplit(url)
    port = parts.port or (443 if parts.scheme == "https" else 80)
    items = headers.items() if isinstance(headers, dict) else (headers or [])
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": parts.scheme,
        "server": (parts.hostname, port),
        "path": parts.path or "/",
        "raw_path": (parts.path or "/").encode(),
        "query_string": parts.query.encode(),
        "root_path": "",
        "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in items],
        "client": ("127.0.0.1", 50000),
    }
    receive = CountingReceive(body, chunk_size)
    return Request(scope, receive), receive


def encode_form(data: dict[str, str], files: dict[str, Any] | None = None) -> tuple[bytes, str]:
    """Encode a form the way an HTTP client would: (body, content-type)."""
    request = httpx.Request("POST", "https://example.com/", data=data, files=files)
    return request.read(), request.headers["content-type"]


class RecordingTransport:
    def __init__(self, *responses: httpx.Response) -> None:
        self.calls: list[tuple[str, OutboundRequest]] = []
        self._responses = list(responses)

    async def __call__(self, url: str, request: OutboundRequest) -> httpx.Response:
        self.calls.append((url, request))
        if self._responses:
            return self._responses.pop(0)
        return httpx.Response(200, json={"err": 0})

    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(request.body) for _, request in self.calls]


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "ROLLBAR_ENDPOINT",
        "ROLLBAR_ACCESS_TOKEN",
        "ROLLBAR_ENVIRONMENT",
        "ROLLBAR_CODE_VERSION",
        "ROLLBAR_PLATFORM",
        "ROLLBAR_FRAMEWORK",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    reset_metrics()

    yield

    get_settings.cache_clear()
    reset_metrics()


@pytest.fixture
def template() -> ReportTemplate:
    return ReportTemplate(
        environment="rollbar-reporter-tests",
        code_version="0.0.0",
        platform="linux",
        framework="pytest",
    )


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()
