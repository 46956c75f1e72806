from __future__ import annotations

from loadsmoke.metrics.aggregator import (
    MAX_SAMPLES_PER_BUCKET,
    MetricsAggregator,
    SampleCollector,
    status_distribution,
    summarize_run,
)
from loadsmoke.metrics.models import ErrorBucket, ErrorSample, ErrorType, RequestEvent, RunStatistics

__all__ = [
    "MAX_SAMPLES_PER_BUCKET",
    "ErrorBucket",
    "ErrorSample",
    "ErrorType",
    "MetricsAggregator",
    "RequestEvent",
    "RunStatistics",
    "SampleCollector",
    "status_distribution",
    "summarize_run",
]
