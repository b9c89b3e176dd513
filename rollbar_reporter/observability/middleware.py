from __future__ import annotations

import uuid
from typing import Any, Callable

import structlog
from starlette.datastructures import MutableHeaders
from starlette.requests import Request

from rollbar_reporter.config import DEFAULT_ENDPOINT
from rollbar_reporter.dispatcher import Rollbar
from rollbar_reporter.models.schemas import ReportTemplate
from rollbar_reporter.transport import Transport

logger = structlog.get_logger("rollbar")


class RollbarMiddleware:
    """Reports unhandled exceptions together with the request that raised them.

    Each HTTP request gets its own reporter at `request.state.rollbar`; the
    application and the reporter read independent copies of the body.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        *,
        data: ReportTemplate,
        transport: Transport,
        access_token: str | None = None,
        url: str = DEFAULT_ENDPOINT,
    ) -> None:
        self.app = app
        self._data = data
        self._transport = transport
        self._access_token = access_token
        self._url = url

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=scope.get("path"),
            method=scope.get("method"),
        )

        request = Request(scope, receive)
        rollbar = Rollbar(
            self._data,
            transport=self._transport,
            request=request,
            access_token=self._access_token,
            url=self._url,
        )
        request.state.rollbar = rollbar

        async def send_wrapper(message: dict[str, Any]) -> None:
            if message.get("type") == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id

            await send(message)

        try:
            # Cloning swapped the request's receive channel for a tee branch.
            await self.app(scope, request.receive, send_wrapper)
        except Exception as exc:
            rollbar.error(exc)
            raise
        finally:
            try:
                await rollbar.wait()
            except Exception:
                # Never let a reporting failure replace the application's own outcome.
                logger.exception("rollbar.wait.failed")
            structlog.contextvars.clear_contextvars()
