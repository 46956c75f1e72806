from __future__ import annotations

import asyncio

import httpx

from loadsmoke.config import (
    ENFORCED_THRESHOLDS,
    HarnessSettings,
    Profile,
    RequestDescriptor,
    RunConfig,
)
from loadsmoke.loadgen.runner import evaluate_thresholds, run_scenario
from loadsmoke.metrics import RunStatistics


def _settings(url: str | None = "http://svc.test/", enforce: bool = False) -> HarnessSettings:
    run = RunConfig(
        profile=Profile.CUSTOM,
        vus=3,
        duration_sec=1,
        thresholds=ENFORCED_THRESHOLDS if enforce else None,
    )
    return HarnessSettings(
        run=run,
        request=RequestDescriptor(url=url),
        enforce_thresholds=enforce,
        pause_sec=0.05,
    )


def test_run_collects_statistics() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"ok"))
    result = asyncio.run(run_scenario(_settings(), transport=transport))
    stats = result.stats
    assert result.passed
    assert stats.requests is not None and stats.requests > 0
    assert stats.iterations == stats.requests
    assert stats.failed_rate == 0.0
    assert stats.vus == 3
    assert result.aggregator.status_counts == {200: int(stats.requests)}
    assert stats.data_received == 2 * stats.requests


def test_enforced_thresholds_fail_the_run() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    result = asyncio.run(run_scenario(_settings(enforce=True), transport=transport))
    assert not result.passed
    assert any("http_req_failed" in v for v in result.violations)
    assert result.aggregator.server_error_count == result.stats.requests


def test_advisory_run_never_fails() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    result = asyncio.run(run_scenario(_settings(enforce=False), transport=transport))
    assert result.passed


def test_unset_target_runs_no_requests() -> None:
    result = asyncio.run(run_scenario(_settings(url=None)))
    assert result.stats.requests == 0
    assert result.stats.iterations is not None and result.stats.iterations > 0
    assert result.aggregator.status_counts == {}


def test_evaluate_thresholds_is_strict() -> None:
    at_limit = RunStatistics(failed_rate=0.05, latency_p95=3500.0)
    assert len(evaluate_thresholds(ENFORCED_THRESHOLDS, at_limit)) == 2
    below = RunStatistics(failed_rate=0.01, latency_p95=100.0)
    assert evaluate_thresholds(ENFORCED_THRESHOLDS, below) == []
    assert evaluate_thresholds(ENFORCED_THRESHOLDS, RunStatistics()) == []


def test_unencodable_request_still_produces_statistics() -> None:
    base = _settings()
    settings = HarnessSettings(
        run=base.run,
        request=RequestDescriptor(url="http://svc.test/", headers={"X-User": "café"}),
        pause_sec=base.pause_sec,
    )
    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    result = asyncio.run(run_scenario(settings, transport=transport))
    assert result.stats.requests is not None and result.stats.requests > 0
    assert result.stats.failed_rate == 1.0
    assert result.aggregator.status_counts == {}
    assert result.aggregator.server_error_count == result.stats.requests
