from __future__ import annotations

from rollbar_reporter.models.schemas import (
    Body,
    Data,
    Level,
    Message,
    MessageBody,
    Notifier,
    Payload,
    ReportTemplate,
    RequestSnapshot,
    TraceBody,
    TraceChainBody,
)
from rollbar_reporter.report.frames import traces_from_exception

NOTIFIER_NAME = "rollbar-reporter"
NOTIFIER_VERSION = "0.1.0"

LogMessage = BaseException | str


def build_body(log_message: LogMessage) -> Body:
    if isinstance(log_message, str):
        return MessageBody(message=Message(body=log_message))

    if isinstance(log_message, BaseException):
        traces = traces_from_exception(log_message)
        if len(traces) == 1:
            return TraceBody(trace=traces[0])
        return TraceChainBody(trace_chain=traces)

    raise TypeError("must be string or Exception")


def build_payload(
    template: ReportTemplate,
    log_message: LogMessage,
    request: RequestSnapshot | None = None,
    *,
    level: Level | None = None,
    timestamp: int | None = None,
) -> Payload:
    """
    Combine template metadata, a message or exception and an optional request
    snapshot into an item payload.

    The result depends only on its arguments. Body, request, level and
    timestamp always come from the call, never from the template.
    """
    body = build_body(log_message)

    fields = template.model_dump(exclude_none=True)
    fields.setdefault("language", "python")
    fields.setdefault("notifier", Notifier(name=NOTIFIER_NAME, version=NOTIFIER_VERSION))
    fields.update(body=body, request=request, level=level, timestamp=timestamp)
    return Payload(data=Data.model_validate(fields))
