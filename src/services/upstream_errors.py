from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    UPSTREAM_STATUS_ERROR = "UPSTREAM_STATUS_ERROR"
    PAYLOAD_SHAPE_ERROR = "PAYLOAD_SHAPE_ERROR"
    PARTIAL_UPSTREAM_FAILURE = "PARTIAL_UPSTREAM_FAILURE"
    INVALID_START_DATE = "INVALID_START_DATE"


class UpstreamError(RuntimeError):
    """Base for every failure talking to a price upstream. Never retried here."""

    kind: ErrorKind = ErrorKind.TRANSPORT_FAILURE

    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class TransportFailure(UpstreamError):
    kind = ErrorKind.TRANSPORT_FAILURE


class UpstreamStatusError(UpstreamError):
    kind = ErrorKind.UPSTREAM_STATUS_ERROR


class PayloadShapeError(UpstreamError):
    kind = ErrorKind.PAYLOAD_SHAPE_ERROR


class PartialUpstreamFailure(UpstreamError):
    kind = ErrorKind.PARTIAL_UPSTREAM_FAILURE

    def __init__(self, message: str, *, failed_request: str, cause_kind: ErrorKind) -> None:
        super().__init__(message)
        self.failed_request = failed_request
        self.cause_kind = cause_kind


__all__ = [
    "ErrorKind",
    "PartialUpstreamFailure",
    "PayloadShapeError",
    "TransportFailure",
    "UpstreamError",
    "UpstreamStatusError",
]
