"""Error reporting client for Rollbar's item API."""

from rollbar_reporter.dispatcher import Rollbar
from rollbar_reporter.errors import BodyConsumedError, DeliveryError, RollbarError
from rollbar_reporter.models.schemas import Payload, ReportTemplate, RequestSnapshot
from rollbar_reporter.observability.middleware import RollbarMiddleware
from rollbar_reporter.report.builder import NOTIFIER_VERSION as __version__
from rollbar_reporter.request.snapshot import RequestSnapshotter, snapshot_request
from rollbar_reporter.transport import HttpxTransport, OutboundRequest

__all__ = [
    "BodyConsumedError",
    "DeliveryError",
    "HttpxTransport",
    "OutboundRequest",
    "Payload",
    "ReportTemplate",
    "RequestSnapshot",
    "RequestSnapshotter",
    "Rollbar",
    "RollbarError",
    "RollbarMiddleware",
    "__version__",
    "snapshot_request",
]
