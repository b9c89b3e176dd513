from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import httpx


@dataclass(frozen=True)
class OutboundRequest:
    method: str
    headers: dict[str, str]
    body: str


class TransportResponse(Protocol):
    @property
    def is_success(self) -> bool: ...

    @property
    def status_code(self) -> int: ...

    @property
    def text(self) -> str: ...


class Transport(Protocol):
    async def __call__(self, url: str, request: OutboundRequest) -> TransportResponse: ...


class HttpxTransport:
    """Sends items with httpx.

    Uses the given client when there is one (the caller owns its lifecycle),
    otherwise opens a short-lived client per call.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    async def __call__(self, url: str, request: OutboundRequest) -> httpx.Response:
        if self._client is not None:
            return await self._send(self._client, url, request)

        async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
            return await self._send(client, url, request)

    @staticmethod
    async def _send(client: httpx.AsyncClient, url: str, request: OutboundRequest) -> httpx.Response:
        return await client.request(request.method, url, headers=request.headers, content=request.body)
