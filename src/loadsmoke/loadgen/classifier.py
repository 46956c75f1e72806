from __future__ import annotations

from dataclasses import dataclass

from loadsmoke.config import CheckVariant
from loadsmoke.metrics import ErrorBucket, ErrorSample

AUTH_STATUSES = frozenset({401, 403})
MAX_MESSAGE_CHARS = 200


@dataclass(frozen=True, slots=True)
class Success:
    status: int


@dataclass(frozen=True, slots=True)
class ErrorStatus:
    status: int
    message: str


@dataclass(frozen=True, slots=True)
class TransportFailure:
    message: str


ResponseOutcome = Success | ErrorStatus | TransportFailure


def status_ok(status: int, variant: CheckVariant) -> bool:
    limit = 500 if variant is CheckVariant.MINIMAL else 400
    return status != 0 and status < limit


def outcome_for(status: int, message: str) -> ResponseOutcome:
    if status == 0 or status >= 400:
        return ErrorStatus(status=status, message=message)
    return Success(status=status)


def is_bucketed(status: int, variant: CheckVariant) -> bool:
    if variant is CheckVariant.MINIMAL:
        return status >= 500
    return status == 0 or status >= 400


def bucket_for(outcome: ResponseOutcome) -> ErrorBucket | None:
    if isinstance(outcome, Success):
        return None
    if isinstance(outcome, TransportFailure):
        return ErrorBucket.SERVER
    return classify_status(outcome.status)


def classify_status(status: int) -> ErrorBucket:
    if status in AUTH_STATUSES:
        return ErrorBucket.AUTH
    if status >= 500 or status == 0:
        return ErrorBucket.SERVER
    return ErrorBucket.CLIENT


def sample_for(outcome: ErrorStatus | TransportFailure, url: str) -> ErrorSample:
    if isinstance(outcome, TransportFailure):
        status = 0
        message = outcome.message
    else:
        status = outcome.status
        message = outcome.message or f"HTTP {outcome.status}"
    return ErrorSample(status=status, message=_truncate(message), url=url)


def _truncate(message: str) -> str:
    if len(message) <= MAX_MESSAGE_CHARS:
        return message
    return message[: MAX_MESSAGE_CHARS - 3] + "..."
