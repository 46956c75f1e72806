from __future__ import annotations

import logging
import time

import httpx

from loadsmoke.config import RequestDescriptor
from loadsmoke.metrics import ErrorType, RequestEvent

logger = logging.getLogger(__name__)


async def send_request(client: httpx.AsyncClient, request: RequestDescriptor) -> RequestEvent:
    """Issue one request and describe the response.

    Every failure to obtain a response propagates: network errors, bad URLs,
    and requests that cannot be encoded (non-ASCII headers, unencodable body).
    """
    if request.url is None:
        msg = "Request has no target URL"
        raise ValueError(msg)
    start_mono = time.perf_counter()
    content = request.body.encode() if request.body is not None else None
    resp = await client.request(
        request.method,
        request.url,
        content=content,
        headers=dict(request.headers),
        timeout=request.timeout_sec,
    )
    latency_ms = (time.perf_counter() - start_mono) * 1000.0
    logger.debug("%s %s -> %s in %.1fms", request.method, request.url, resp.status_code, latency_ms)
    return RequestEvent(
        mono_time=time.perf_counter(),
        latency_ms=latency_ms,
        status_code=resp.status_code,
        error_type=None,
        bytes_sent=len(resp.request.content or b""),
        bytes_received=len(resp.content or b""),
        error="" if resp.is_success or resp.is_redirect else resp.reason_phrase,
    )


def error_type_for(exc: BaseException) -> ErrorType:
    if isinstance(exc, httpx.TimeoutException):
        return ErrorType.TIMEOUT
    if isinstance(exc, httpx.ConnectError):
        return ErrorType.CONNECT
    if isinstance(exc, httpx.ReadError):
        return ErrorType.READ
    return ErrorType.OTHER
