from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorType(str, Enum):
    TIMEOUT = "timeout"
    CONNECT = "connect"
    READ = "read"
    OTHER = "other"


class ErrorBucket(str, Enum):
    AUTH = "auth"
    CLIENT = "client"
    SERVER = "server"


@dataclass(frozen=True, slots=True)
class ErrorSample:
    status: int
    message: str
    url: str


@dataclass(frozen=True, slots=True)
class RequestEvent:
    mono_time: float
    latency_ms: float
    status_code: int | None
    error_type: ErrorType | None
    bytes_sent: int
    bytes_received: int
    error: str = ""

    @property
    def failed(self) -> bool:
        # status None marks a transport failure that never produced a response
        if self.status_code is None or self.status_code == 0:
            return True
        return self.status_code >= 400


@dataclass(frozen=True, slots=True)
class RunStatistics:
    """End-of-run snapshot produced by the runtime.

    Every field is optional; the reporter renders absent values as ``n/a``.
    """

    requests: float | None = None
    request_rate: float | None = None
    failed_rate: float | None = None
    latency_avg: float | None = None
    latency_min: float | None = None
    latency_max: float | None = None
    latency_med: float | None = None
    latency_p75: float | None = None
    latency_p90: float | None = None
    latency_p95: float | None = None
    latency_p99: float | None = None
    iterations: float | None = None
    iteration_rate: float | None = None
    data_sent: float | None = None
    data_received: float | None = None
    vus: float | None = None
    vus_max: float | None = None
    checks_passed: float | None = None
    checks_failed: float | None = None
