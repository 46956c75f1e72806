from __future__ import annotations

import pytest

from loadsmoke.metrics import (
    ErrorBucket,
    ErrorSample,
    ErrorType,
    MetricsAggregator,
    RequestEvent,
    SampleCollector,
    status_distribution,
    summarize_run,
)


def _sample(status: int, tag: str = "") -> ErrorSample:
    return ErrorSample(status=status, message=f"HTTP {status}{tag}", url="http://svc")


def _event(latency_ms: float, status: int | None) -> RequestEvent:
    return RequestEvent(
        mono_time=0.0,
        latency_ms=latency_ms,
        status_code=status,
        error_type=None if status else ErrorType.OTHER,
        bytes_sent=10,
        bytes_received=100,
    )


def test_status_order_is_first_seen() -> None:
    aggregator = MetricsAggregator()
    for status in (500, 200, 500, 404, 200, 200):
        aggregator.record_status(status)
    assert aggregator.status_order == [500, 200, 404]
    assert aggregator.status_counts == {500: 2, 200: 3, 404: 1}
    assert aggregator.total_responses() == 6


def test_samples_capped_in_insertion_order() -> None:
    aggregator = MetricsAggregator()
    for i in range(5):
        aggregator.record_error(ErrorBucket.CLIENT, _sample(404, f"#{i}"))
    assert aggregator.client_error_count == 5
    assert [s.message for s in aggregator.samples_for(ErrorBucket.CLIENT)] == [
        "HTTP 404#0",
        "HTTP 404#1",
        "HTTP 404#2",
    ]


def test_merge_sums_and_recaps() -> None:
    left = MetricsAggregator()
    right = MetricsAggregator()
    left.record_status(200)
    left.record_status(500)
    right.record_status(404)
    right.record_status(200)
    for i in range(2):
        left.record_error(ErrorBucket.SERVER, _sample(500, f"L{i}"))
        right.record_error(ErrorBucket.SERVER, _sample(500, f"R{i}"))
    right.record_error(ErrorBucket.AUTH, _sample(401))

    merged = left.merge(right)
    assert merged.status_counts == {200: 2, 500: 1, 404: 1}
    assert merged.status_order == [200, 500, 404]
    assert merged.server_error_count == 4
    assert merged.auth_error_count == 1
    assert [s.message for s in merged.samples_for(ErrorBucket.SERVER)] == [
        "HTTP 500L0",
        "HTTP 500L1",
        "HTTP 500R0",
    ]
    assert left.server_error_count == 2


def test_summarize_run() -> None:
    collector = SampleCollector(iterations=4, checks_passed=3, checks_failed=1)
    for latency, status in ((10.0, 200), (20.0, 200), (30.0, 500), (40.0, None)):
        collector.add_event(_event(latency, status))
    stats = summarize_run(collector, elapsed_sec=2.0, vus=2, vus_max=2)
    assert stats.requests == 4
    assert stats.request_rate == pytest.approx(2.0)
    assert stats.failed_rate == pytest.approx(0.5)
    assert stats.latency_avg == pytest.approx(25.0)
    assert stats.latency_min == 10.0
    assert stats.latency_max == 40.0
    assert stats.latency_med == pytest.approx(25.0)
    assert stats.latency_p95 == pytest.approx(38.5)
    assert stats.data_sent == 40
    assert stats.data_received == 400
    assert stats.iteration_rate == pytest.approx(2.0)
    assert (stats.checks_passed, stats.checks_failed) == (3, 1)


def test_summarize_empty_run_has_no_latency() -> None:
    stats = summarize_run(SampleCollector(), elapsed_sec=1.0, vus=1, vus_max=1)
    assert stats.requests == 0
    assert stats.failed_rate is None
    assert stats.latency_p95 is None


def test_status_distribution() -> None:
    aggregator = MetricsAggregator()
    assert status_distribution(aggregator) is None
    for status in [200] * 9 + [500]:
        aggregator.record_status(status)
    dist = status_distribution(aggregator)
    assert dist is not None
    assert dist["min"] == 200
    assert dist["max"] == 500
    assert dist["med"] == 200
