from __future__ import annotations

import asyncio
import logging

from starlette.requests import Request

from rollbar_reporter.models.schemas import RequestSnapshot
from rollbar_reporter.request.body import ParsedBody, TextBody, decode_body
from rollbar_reporter.request.clone import clone_request

logger = logging.getLogger(__name__)


def _headers(request: Request) -> dict[str, str]:
    headers: dict[str, str] = {}
    for key in request.headers.keys():
        name = key.lower()
        if name not in headers:
            headers[name] = ", ".join(request.headers.getlist(name))
    return headers


async def snapshot_request(request: Request) -> RequestSnapshot:
    """Read and decode a request into a JSON-safe snapshot.

    Drains the request body, so call it at most once per request instance.
    """
    decoded = await decode_body(request.stream(), request.headers.get("content-type"))
    query = request.url.query

    fields: dict[str, object] = {}
    if isinstance(decoded, ParsedBody):
        fields["POST"] = decoded.value
    elif isinstance(decoded, TextBody):
        fields["body"] = decoded.text

    snapshot = RequestSnapshot(
        url=str(request.url),
        method=request.method,
        headers=_headers(request),
        params={},
        GET=dict(request.query_params),
        query_string=f"?{query}" if query else "",
        user_ip=request.headers.get("x-forwarded-for") or None,
        **fields,
    )
    logger.debug("rollbar.request.snapshot", extra={"method": snapshot.method, "url": snapshot.url})
    return snapshot


class RequestSnapshotter:
    """Clones a request up front and snapshots the clone once, on demand.

    Concurrent callers share one in-flight read; later callers get the cached
    result (or the cached failure, since the body cannot be read again).
    """

    def __init__(self, request: Request) -> None:
        self._request = clone_request(request)
        self._task: asyncio.Task[RequestSnapshot] | None = None

    async def snapshot(self) -> RequestSnapshot:
        if self._task is None:
            self._task = asyncio.ensure_future(snapshot_request(self._request))
        return await asyncio.shield(self._task)
