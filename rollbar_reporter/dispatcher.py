from __future__ import annotations

import asyncio
import functools
import time
from collections.abc import Callable
from time import perf_counter

import structlog
from starlette.requests import Request

from rollbar_reporter.config import DEFAULT_ENDPOINT, Settings, get_settings
from rollbar_reporter.errors import DeliveryError
from rollbar_reporter.models.schemas import Level, Payload, ReportTemplate
from rollbar_reporter.observability.metrics import get_metrics
from rollbar_reporter.report.builder import LogMessage, build_payload
from rollbar_reporter.request.snapshot import RequestSnapshotter
from rollbar_reporter.transport import OutboundRequest, Transport

logger = structlog.get_logger("rollbar")


class Rollbar:
    """Fire-and-forget item reporter.

    `log` schedules delivery and returns the delivery task immediately;
    `wait` joins everything logged so far and raises the first failure.
    Must be used from inside a running event loop.
    """

    def __init__(
        self,
        data: ReportTemplate,
        *,
        transport: Transport,
        request: Request | None = None,
        access_token: str | None = None,
        url: str = DEFAULT_ENDPOINT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._data = data
        self._transport = transport
        self._access_token = access_token
        self._url = url
        self._clock = clock
        # Cloned now, before application code gets a chance to read the body.
        self._snapshotter = RequestSnapshotter(request) if request is not None else None
        self._pending: dict[int, asyncio.Task[None]] = {}
        self._next_item_id = 0

    @classmethod
    def from_settings(
        cls,
        transport: Transport,
        *,
        request: Request | None = None,
        settings: Settings | None = None,
    ) -> Rollbar:
        settings = settings or get_settings()
        return cls(
            settings.report_template(),
            transport=transport,
            request=request,
            access_token=settings.access_token or None,
            url=settings.endpoint,
        )

    @property
    def pending(self) -> int:
        return len(self._pending)

    def debug(self, log_message: LogMessage) -> asyncio.Task[None]:
        return self.log(log_message, "debug")

    def info(self, log_message: LogMessage) -> asyncio.Task[None]:
        return self.log(log_message, "info")

    def warning(self, log_message: LogMessage) -> asyncio.Task[None]:
        return self.log(log_message, "warning")

    def error(self, log_message: LogMessage) -> asyncio.Task[None]:
        return self.log(log_message, "error")

    def critical(self, log_message: LogMessage) -> asyncio.Task[None]:
        return self.log(log_message, "critical")

    def log(self, log_message: LogMessage, level: Level = "debug") -> asyncio.Task[None]:
        if not isinstance(log_message, (str, BaseException)):
            raise TypeError("must be string or Exception")

        item_id = self._next_item_id
        self._next_item_id += 1

        task = asyncio.create_task(self._post_item(log_message, level))
        self._pending[item_id] = task
        task.add_done_callback(functools.partial(self._settle, item_id, level))

        get_metrics().observe_logged()
        logger.debug("rollbar.item.queued", item_id=item_id, level=level)
        return task

    async def wait(self) -> None:
        """Wait for the items pending right now; raise the first failure.

        A failure raised here is dropped from the registry. Items logged after
        the call starts are not waited for.
        """
        in_flight = list(self._pending.items())
        if not in_flight:
            return

        try:
            await asyncio.gather(*(asyncio.shield(task) for _, task in in_flight))
        except Exception as exc:
            for item_id, task in in_flight:
                if task.done() and not task.cancelled() and task.exception() is exc:
                    self._pending.pop(item_id, None)
            raise

    async def to_payload(
        self,
        log_message: LogMessage,
        level: Level = "debug",
        timestamp: int | None = None,
    ) -> Payload:
        request = await self._snapshotter.snapshot() if self._snapshotter is not None else None
        return build_payload(self._data, log_message, request, level=level, timestamp=timestamp)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._access_token:
            headers["X-Rollbar-Access-Token"] = self._access_token
        return headers

    async def _post_item(self, log_message: LogMessage, level: Level) -> None:
        # Timestamp is taken when the item is built, not when the reporter is created.
        payload = await self.to_payload(log_message, level, timestamp=round(self._clock()))
        outbound = OutboundRequest(method="POST", headers=self._headers(), body=payload.to_json())

        start = perf_counter()
        try:
            response = await self._transport(self._url, outbound)
        except Exception as exc:
            raise DeliveryError(str(exc)) from exc
        finally:
            get_metrics().observe_delivery(elapsed_ms=(perf_counter() - start) * 1000.0)

        if not response.is_success:
            raise DeliveryError(response.text, status_code=response.status_code)

    def _settle(self, item_id: int, level: Level, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            self._pending.pop(item_id, None)
            return

        exc = task.exception()
        get_metrics().observe_settled(delivered=exc is None)
        if exc is None:
            self._pending.pop(item_id, None)
            logger.info("rollbar.item.delivered", item_id=item_id, level=level)
            return

        # Failed items stay registered until `wait` surfaces them.
        logger.warning("rollbar.item.failed", item_id=item_id, level=level, error=str(exc))
