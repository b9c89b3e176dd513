from __future__ import annotations

import logging
import sys
from typing import Any, Literal

import structlog

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

# structlog events go to "rollbar"; module loggers live under "rollbar_reporter".
REPORTER_LOGGERS = ("rollbar", "rollbar_reporter")


def configure_logging(level: LogLevel = "INFO", *, attach_handler: bool = True) -> None:
    """Route the reporter's own log events through structlog as JSON lines.

    Only the reporter's loggers are touched; the root logger is left alone.
    With `attach_handler=False` the events propagate to whatever handlers the
    host application already set up, and only their level is applied.
    """
    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler: logging.Handler | None = None
    if attach_handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=shared,
            )
        )

    for name in REPORTER_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers = [handler] if handler is not None else []
        logger.propagate = handler is None
