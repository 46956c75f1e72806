from __future__ import annotations

import asyncio
import logging
import time

import httpx

from loadsmoke.config import CheckVariant, RequestDescriptor
from loadsmoke.loadgen.classifier import (
    ErrorStatus,
    ResponseOutcome,
    TransportFailure,
    bucket_for,
    is_bucketed,
    outcome_for,
    sample_for,
    status_ok,
)
from loadsmoke.loadgen.client import error_type_for, send_request
from loadsmoke.metrics import MetricsAggregator, RequestEvent, SampleCollector

logger = logging.getLogger(__name__)

MIN_SKIP_PAUSE_SEC = 0.1


async def run_iteration(
    client: httpx.AsyncClient,
    request: RequestDescriptor,
    aggregator: MetricsAggregator,
    collector: SampleCollector,
    variant: CheckVariant = CheckVariant.EXTENDED,
    pause_sec: float = 1.0,
) -> ResponseOutcome | None:
    """One virtual-user iteration: request, classify, record, pause.

    Returns the classified outcome, or ``None`` when no target is set.
    """
    if request.url is None:
        logger.info("Skipping load test: TARGET_URL/API_BASE_URL is not set.")
        await _pause(max(pause_sec, MIN_SKIP_PAUSE_SEC))
        return None

    start_mono = time.perf_counter()
    try:
        event = await send_request(client, request)
    # ValueError covers requests httpx cannot encode (UnicodeEncodeError)
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
        message = str(exc) or type(exc).__name__
        logger.warning("Request to %s raised %s: %s", request.url, type(exc).__name__, message)
        outcome: ResponseOutcome = TransportFailure(message=message)
        collector.add_event(
            RequestEvent(
                mono_time=time.perf_counter(),
                latency_ms=(time.perf_counter() - start_mono) * 1000.0,
                status_code=None,
                error_type=error_type_for(exc),
                bytes_sent=0,
                bytes_received=0,
                error=message,
            )
        )
        aggregator.record_error(bucket_for(outcome), sample_for(outcome, request.url))
        await _pause(pause_sec)
        return outcome

    status = event.status_code if event.status_code is not None else 0
    collector.add_event(event)
    collector.add_check(status_ok(status, variant))
    aggregator.record_status(status)
    outcome = outcome_for(status, event.error)
    if isinstance(outcome, ErrorStatus) and is_bucketed(status, variant):
        aggregator.record_error(bucket_for(outcome), sample_for(outcome, request.url))
    await _pause(pause_sec)
    return outcome


async def _pause(pause_sec: float) -> None:
    if pause_sec > 0:
        await asyncio.sleep(pause_sec)
