from __future__ import annotations

import asyncio

from starlette.requests import Request
from starlette.types import Message, Receive

from rollbar_reporter.errors import BodyConsumedError


class ReceiveTee:
    """Fan a single ASGI receive channel out to independent readers.

    Every branch observes the full message sequence; the upstream channel is
    awaited at most once per message no matter how many branches read it.
    """

    def __init__(self, receive: Receive) -> None:
        self._receive = receive
        self._messages: list[Message] = []
        self._lock = asyncio.Lock()

    def branch(self) -> Receive:
        position = 0

        async def receive() -> Message:
            nonlocal position
            if position >= len(self._messages):
                async with self._lock:
                    if position >= len(self._messages):
                        self._messages.append(await self._receive())
            message = self._messages[position]
            position += 1
            return message

        return receive


def _replay(body: bytes) -> Receive:
    sent = False

    async def receive() -> Message:
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return receive


def clone_request(request: Request) -> Request:
    """Duplicate a request so the copy can read the body independently.

    Must run before anything else drains the body. The source request keeps
    working: its receive channel is swapped for one branch of a tee.
    """
    # Starlette keeps the drained body on the instance after `await request.body()`.
    cached = getattr(request, "_body", None)
    if cached is not None:
        return Request(request.scope, receive=_replay(cached))

    if getattr(request, "_stream_consumed", False):
        raise BodyConsumedError("Request body has already been consumed")

    tee = ReceiveTee(request.receive)
    request._receive = tee.branch()
    return Request(request.scope, receive=tee.branch())
