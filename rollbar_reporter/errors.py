from __future__ import annotations


class RollbarError(Exception):
    """Base class for errors raised by the reporter."""


class BodyConsumedError(RollbarError):
    """The request body stream was drained before it could be duplicated."""


class DeliveryError(RollbarError):
    """An item was not accepted by the collection endpoint."""

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(f"Failed to log to Rollbar: {detail}")
        self.detail = detail
        self.status_code = status_code
