from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass

import httpx

from loadsmoke.config import HarnessSettings, Thresholds
from loadsmoke.loadgen.scenario import run_iteration
from loadsmoke.metrics import MetricsAggregator, RunStatistics, SampleCollector, summarize_run

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RunResult:
    run_id: str
    aggregator: MetricsAggregator
    stats: RunStatistics
    violations: list[str]

    @property
    def passed(self) -> bool:
        return not self.violations


def _new_run_id() -> str:
    return uuid.uuid4().hex


async def run_scenario(
    settings: HarnessSettings,
    transport: httpx.AsyncBaseTransport | None = None,
    run_id: str | None = None,
) -> RunResult:
    run = settings.run
    run_id = run_id or _new_run_id()
    logger.info(
        "Starting run %s: profile=%s vus=%d duration=%s target=%s",
        run_id,
        run.profile.value,
        run.vus,
        run.duration,
        settings.request.url or "<unset>",
    )
    aggregator = MetricsAggregator()
    collector = SampleCollector()
    started_mono = time.perf_counter()
    stop_at = started_mono + run.duration_sec
    active = 0
    peak_active = 0

    async def virtual_user(vu_id: int) -> None:
        nonlocal active, peak_active
        active += 1
        peak_active = max(peak_active, active)
        try:
            while time.perf_counter() < stop_at:
                await run_iteration(
                    client,
                    settings.request,
                    aggregator,
                    collector,
                    variant=settings.variant,
                    pause_sec=settings.pause_sec,
                )
                collector.iterations += 1
        finally:
            active -= 1

    async with httpx.AsyncClient(transport=transport) as client:
        tasks = [asyncio.create_task(virtual_user(i)) for i in range(run.vus)]
        await asyncio.gather(*tasks)

    elapsed = time.perf_counter() - started_mono
    stats = summarize_run(collector, elapsed, vus=run.vus, vus_max=max(peak_active, run.vus))
    violations = evaluate_thresholds(run.thresholds, stats) if run.thresholds else []
    for violation in violations:
        logger.error("Threshold crossed: %s", violation)
    logger.info(
        "Run %s finished in %.1fs: %d iterations, %d requests",
        run_id,
        elapsed,
        collector.iterations,
        len(collector.events),
    )
    return RunResult(run_id=run_id, aggregator=aggregator, stats=stats, violations=violations)


def evaluate_thresholds(thresholds: Thresholds, stats: RunStatistics) -> list[str]:
    violations: list[str] = []
    if stats.failed_rate is not None and not thresholds.failed_rate_ok(stats.failed_rate):
        violations.append(
            f"http_req_failed rate {stats.failed_rate:.4f} exceeds {thresholds.max_failed_rate}"
        )
    if stats.latency_p95 is not None and not thresholds.latency_ok(stats.latency_p95):
        violations.append(
            f"http_req_duration p(95) {stats.latency_p95:.2f}ms exceeds "
            f"{thresholds.max_p95_latency_ms:.0f}ms"
        )
    return violations

