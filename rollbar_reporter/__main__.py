from __future__ import annotations

import argparse
import asyncio
import sys
from typing import get_args

from rollbar_reporter.config import get_settings
from rollbar_reporter.dispatcher import Rollbar
from rollbar_reporter.errors import DeliveryError
from rollbar_reporter.models.schemas import Level
from rollbar_reporter.observability.logging import configure_logging
from rollbar_reporter.transport import HttpxTransport, Transport


def build_transport(timeout: float) -> Transport:
    return HttpxTransport(timeout=timeout)


async def send_item(message: str, level: Level, environment: str | None = None) -> None:
    settings = get_settings()
    if environment:
        settings = settings.model_copy(update={"environment": environment})

    rollbar = Rollbar.from_settings(build_transport(settings.timeout_seconds), settings=settings)
    rollbar.log(message, level)
    await rollbar.wait()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send a single item to Rollbar")
    parser.add_argument("--message", required=True, help="Message text to report")
    parser.add_argument("--level", default="info", choices=get_args(Level), help="Severity level")
    parser.add_argument("--environment", default=None, help="Override ROLLBAR_ENVIRONMENT")
    args = parser.parse_args(argv)

    configure_logging(get_settings().log_level)

    try:
        asyncio.run(send_item(args.message, args.level, environment=args.environment))
    except DeliveryError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
