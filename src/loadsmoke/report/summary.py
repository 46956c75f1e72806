from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from loadsmoke.config import ADVISORY_THRESHOLDS, ENFORCED_THRESHOLDS, Thresholds
from loadsmoke.metrics import (
    ErrorBucket,
    MetricsAggregator,
    RunStatistics,
    status_distribution,
)

logger = logging.getLogger(__name__)

# ANSI color codes
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BOLD = "\033[1m"
RESET = "\033[0m"

NA = "n/a"
TOP_STATUS_CODES = 5
NO_SAMPLES_DIAGNOSTIC = (
    "failures detected but no error samples captured "
    "(likely a connectivity or auth issue the classifier never saw)"
)

_BUCKET_LABELS = {
    ErrorBucket.AUTH: "auth errors (401/403)",
    ErrorBucket.CLIENT: "client errors (4xx)",
    ErrorBucket.SERVER: "server errors (5xx/0)",
}

_LATENCY_ROWS = (
    ("p95", "latency_p95"),
    ("p99", "latency_p99"),
    ("p75", "latency_p75"),
    ("avg", "latency_avg"),
    ("min", "latency_min"),
    ("max", "latency_max"),
    ("p50", "latency_med"),
    ("p90", "latency_p90"),
)


@dataclass(frozen=True, slots=True)
class Summary:
    text: str
    warnings: tuple[str, ...] = ()


def render_summary(
    aggregated: MetricsAggregator,
    run_stats: RunStatistics,
    enforce_thresholds: bool,
    color: bool = True,
    title: str = "loadsmoke summary",
) -> Summary:
    """Render the end-of-run report.

    Sections are emitted in a fixed order: header, Errors, Latency, Checks,
    Throughput, Resources and Status codes, followed by any advisory
    threshold warnings. Missing statistics render as ``n/a``.
    """
    painter = _Painter(color)
    thresholds = ENFORCED_THRESHOLDS if enforce_thresholds else ADVISORY_THRESHOLDS
    lines: list[str] = []
    lines.extend(_header(painter, title, thresholds, enforce_thresholds))
    lines.extend(_errors_section(painter, aggregated, run_stats, thresholds))
    lines.extend(_latency_section(painter, run_stats, thresholds))
    lines.extend(_checks_section(painter, run_stats))
    lines.extend(_throughput_section(run_stats))
    lines.extend(_resources_section(run_stats))
    lines.extend(_status_section(painter, aggregated))

    warnings: list[str] = []
    if not enforce_thresholds:
        warnings = advisory_warnings(run_stats, thresholds)
        if warnings:
            lines.append("")
            lines.append(painter.bold("Threshold warnings"))
            for warning in warnings:
                logger.warning(warning)
                lines.append(f"  {painter.paint(YELLOW, 'WARN')} {warning}")
    return Summary(text="\n".join(lines) + "\n", warnings=tuple(warnings))


def advisory_warnings(stats: RunStatistics, thresholds: Thresholds = ADVISORY_THRESHOLDS) -> list[str]:
    warnings: list[str] = []
    failed = _num(stats.failed_rate)
    if failed is not None and not thresholds.failed_rate_ok(failed):
        warnings.append(
            f"failed rate {_fmt_pct(failed)} is above {_fmt_pct(thresholds.max_failed_rate)} "
            "(not enforced, run continues)"
        )
    p95 = _num(stats.latency_p95)
    if p95 is not None and not thresholds.latency_ok(p95):
        warnings.append(
            f"p95 latency {_fmt_ms(p95)} is above {_fmt_ms(thresholds.max_p95_latency_ms)} "
            "(not enforced, run continues)"
        )
    return warnings


def _header(painter: _Painter, title: str, thresholds: Thresholds, enforced: bool) -> list[str]:
    op = "<=" if thresholds.inclusive else "<"
    mode = "enforced" if enforced else "advisory"
    return [
        painter.bold(f"== {title} =="),
        f"  thresholds ({mode}): failed rate {op} {_fmt_pct(thresholds.max_failed_rate)}, "
        f"p95 {op} {_fmt_ms(thresholds.max_p95_latency_ms)}",
    ]


def _errors_section(
    painter: _Painter,
    aggregated: MetricsAggregator,
    stats: RunStatistics,
    thresholds: Thresholds,
) -> list[str]:
    failed = _num(stats.failed_rate)
    success = 1.0 - failed if failed is not None else None
    rate_ok = failed is None or thresholds.failed_rate_ok(failed)
    lines = [
        "",
        painter.bold("Errors"),
        f"  requests ............ {_fmt_count(stats.requests)} ({_fmt_rate(stats.request_rate)})",
        f"  failed rate ......... {painter.flag(_fmt_pct(failed), rate_ok, failed is not None)}",
        f"  success rate ........ {painter.flag(_fmt_pct(success), rate_ok, success is not None)}",
    ]
    for bucket in ErrorBucket:
        count = aggregated.count_for(bucket)
        samples = aggregated.samples_for(bucket)
        first = "none"
        if samples:
            sample = samples[0]
            first = f"{sample.status} {sample.message} ({sample.url})"
        label = _BUCKET_LABELS[bucket]
        lines.append(f"  {label:<22} {count}  first: {first}")
    if failed is not None and failed > 0 and not aggregated.has_samples():
        lines.append(f"  {painter.paint(YELLOW, '!')} {NO_SAMPLES_DIAGNOSTIC}")
    return lines


def _latency_section(painter: _Painter, stats: RunStatistics, thresholds: Thresholds) -> list[str]:
    lines = ["", painter.bold("Latency")]
    for label, attr in _LATENCY_ROWS:
        value = _num(getattr(stats, attr))
        ok = value is None or thresholds.latency_ok(value)
        lines.append(f"  {label:<4} {painter.flag(_fmt_ms(value), ok, value is not None)}")
    return lines


def _checks_section(painter: _Painter, stats: RunStatistics) -> list[str]:
    failed = _num(stats.checks_failed)
    return [
        "",
        painter.bold("Checks"),
        f"  passed  {_fmt_count(stats.checks_passed)}",
        f"  failed  {painter.flag(_fmt_count(failed), not failed, failed is not None)}",
    ]


def _throughput_section(stats: RunStatistics) -> list[str]:
    return [
        "",
        "Throughput",
        f"  iterations  {_fmt_count(stats.iterations)} ({_fmt_rate(stats.iteration_rate)})",
        f"  data sent   {_fmt_bytes(stats.data_sent)}",
        f"  data recv   {_fmt_bytes(stats.data_received)}",
    ]


def _resources_section(stats: RunStatistics) -> list[str]:
    return [
        "",
        "Resources",
        f"  vus      {_fmt_count(stats.vus)}",
        f"  vus max  {_fmt_count(stats.vus_max)}",
    ]


def _status_section(painter: _Painter, aggregated: MetricsAggregator) -> list[str]:
    lines = ["", painter.bold("Status codes")]
    dist = status_distribution(aggregated)
    if dist is None:
        lines.append(f"  distribution  {NA}")
    else:
        lines.append(
            "  distribution  "
            + "  ".join(f"{key}={_fmt_status(dist[key])}" for key in ("min", "max", "med", "p90", "p99"))
        )
    top = aggregated.status_order[:TOP_STATUS_CODES]
    if top:
        rendered = []
        for status in top:
            ok = 0 < status < 400
            rendered.append(f"{painter.flag(str(status), ok, True)} x{aggregated.status_counts[status]}")
        lines.append("  top codes     " + ", ".join(rendered))
    else:
        lines.append("  top codes     none")
    lines.append(
        f"  errors        auth={aggregated.auth_error_count} "
        f"client={aggregated.client_error_count} server={aggregated.server_error_count}"
    )
    return lines


class _Painter:
    def __init__(self, enabled: bool) -> None:
        self.enabled = enabled

    def paint(self, code: str, text: str) -> str:
        if not self.enabled:
            return text
        return f"{code}{text}{RESET}"

    def bold(self, text: str) -> str:
        return self.paint(BOLD, text)

    def flag(self, text: str, ok: bool, known: bool) -> str:
        if not known:
            return text
        return self.paint(GREEN if ok else RED, text)


def _num(value: float | None) -> float | None:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def _fmt_ms(value: float | None) -> str:
    number = _num(value)
    return NA if number is None else f"{number:.2f}ms"


def _fmt_pct(value: float | None) -> str:
    number = _num(value)
    return NA if number is None else f"{number * 100:.2f}%"


def _fmt_rate(value: float | None) -> str:
    number = _num(value)
    return NA if number is None else f"{number:.2f}/s"


def _fmt_count(value: float | None) -> str:
    number = _num(value)
    if number is None:
        return NA
    if number.is_integer():
        return str(int(number))
    return f"{number:.2f}"


def _fmt_status(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"


def _fmt_bytes(value: float | None) -> str:
    number = _num(value)
    if number is None:
        return NA
    for unit in ("B", "kB", "MB"):
        if abs(number) < 1000:
            return f"{number:.0f} {unit}" if unit == "B" else f"{number:.1f} {unit}"
        number /= 1000
    return f"{number:.1f} GB"
