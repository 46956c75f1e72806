from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from loadsmoke.metrics.models import ErrorBucket, ErrorSample, RequestEvent, RunStatistics

MAX_SAMPLES_PER_BUCKET = 3


@dataclass(slots=True)
class MetricsAggregator:
    """Run-wide classification state shared by every virtual user."""

    status_counts: dict[int, int] = field(default_factory=dict)
    status_order: list[int] = field(default_factory=list)
    auth_error_count: int = 0
    client_error_count: int = 0
    server_error_count: int = 0
    error_samples: dict[ErrorBucket, list[ErrorSample]] = field(
        default_factory=lambda: {bucket: [] for bucket in ErrorBucket}
    )

    def record_status(self, status: int) -> None:
        if status not in self.status_counts:
            self.status_counts[status] = 0
            self.status_order.append(status)
        self.status_counts[status] += 1

    def record_error(self, bucket: ErrorBucket, sample: ErrorSample) -> None:
        samples = self.error_samples.setdefault(bucket, [])
        if len(samples) < MAX_SAMPLES_PER_BUCKET:
            samples.append(sample)
        if bucket is ErrorBucket.AUTH:
            self.auth_error_count += 1
        elif bucket is ErrorBucket.CLIENT:
            self.client_error_count += 1
        else:
            self.server_error_count += 1

    def count_for(self, bucket: ErrorBucket) -> int:
        if bucket is ErrorBucket.AUTH:
            return self.auth_error_count
        if bucket is ErrorBucket.CLIENT:
            return self.client_error_count
        return self.server_error_count

    def samples_for(self, bucket: ErrorBucket) -> list[ErrorSample]:
        return self.error_samples.get(bucket, [])

    def has_samples(self) -> bool:
        return any(self.error_samples.get(bucket) for bucket in ErrorBucket)

    def total_responses(self) -> int:
        return sum(self.status_counts.values())

    def merge(self, other: MetricsAggregator) -> MetricsAggregator:
        merged = MetricsAggregator(
            auth_error_count=self.auth_error_count + other.auth_error_count,
            client_error_count=self.client_error_count + other.client_error_count,
            server_error_count=self.server_error_count + other.server_error_count,
        )
        for source in (self, other):
            for status in source.status_order:
                if status not in merged.status_counts:
                    merged.status_counts[status] = 0
                    merged.status_order.append(status)
                merged.status_counts[status] += source.status_counts[status]
        for bucket in ErrorBucket:
            combined = self.samples_for(bucket) + other.samples_for(bucket)
            merged.error_samples[bucket] = combined[:MAX_SAMPLES_PER_BUCKET]
        return merged


@dataclass(slots=True)
class SampleCollector:
    """Raw samples the runtime keeps alongside the aggregator."""

    events: list[RequestEvent] = field(default_factory=list)
    checks_passed: int = 0
    checks_failed: int = 0
    iterations: int = 0

    def add_event(self, event: RequestEvent) -> None:
        self.events.append(event)

    def add_check(self, passed: bool) -> None:
        if passed:
            self.checks_passed += 1
        else:
            self.checks_failed += 1


def summarize_run(
    collector: SampleCollector,
    elapsed_sec: float,
    vus: int,
    vus_max: int,
) -> RunStatistics:
    events = collector.events
    elapsed = max(elapsed_sec, 1e-9)
    requests = len(events)
    latencies = np.array([e.latency_ms for e in events if e.latency_ms >= 0], dtype=float)
    if latencies.size:
        p50, p75, p90, p95, p99 = (float(v) for v in np.percentile(latencies, [50, 75, 90, 95, 99]))
        avg = float(latencies.mean())
        low = float(latencies.min())
        high = float(latencies.max())
    else:
        p50 = p75 = p90 = p95 = p99 = avg = low = high = None
    failed = sum(1 for e in events if e.failed)
    return RunStatistics(
        requests=float(requests),
        request_rate=requests / elapsed,
        failed_rate=(failed / requests) if requests else None,
        latency_avg=avg,
        latency_min=low,
        latency_max=high,
        latency_med=p50,
        latency_p75=p75,
        latency_p90=p90,
        latency_p95=p95,
        latency_p99=p99,
        iterations=float(collector.iterations),
        iteration_rate=collector.iterations / elapsed,
        data_sent=float(sum(e.bytes_sent for e in events)),
        data_received=float(sum(e.bytes_received for e in events)),
        vus=float(vus),
        vus_max=float(vus_max),
        checks_passed=float(collector.checks_passed),
        checks_failed=float(collector.checks_failed),
    )


def status_distribution(aggregator: MetricsAggregator) -> dict[str, float] | None:
    """Min/max/median/p90/p99 over every recorded status code."""
    if not aggregator.status_counts:
        return None
    codes = np.array(list(aggregator.status_counts.keys()), dtype=float)
    counts = np.array(list(aggregator.status_counts.values()), dtype=int)
    values = np.repeat(codes, counts)
    if not values.size:
        return None
    med, p90, p99 = (float(v) for v in np.percentile(values, [50, 90, 99]))
    return {
        "min": float(values.min()),
        "max": float(values.max()),
        "med": med,
        "p90": p90,
        "p99": p99,
    }
