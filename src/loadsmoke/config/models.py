from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class Profile(str, Enum):
    SMOKE = "SMOKE"
    STRESS = "STRESS"
    SOAK = "SOAK"
    SPIKE = "SPIKE"
    CUSTOM = "CUSTOM"


class CheckVariant(str, Enum):
    MINIMAL = "minimal"  # status ok below 500, only 5xx classified
    EXTENDED = "extended"  # status ok below 400, 0 and 4xx/5xx classified


HTTP_METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"})
BODYLESS_METHODS = frozenset({"GET", "HEAD"})


@dataclass(frozen=True, slots=True)
class ProfileDefaults:
    vus: int
    duration_sec: int


PROFILE_DEFAULTS: Mapping[Profile, ProfileDefaults] = {
    Profile.SMOKE: ProfileDefaults(vus=2, duration_sec=30),
    Profile.STRESS: ProfileDefaults(vus=5, duration_sec=60),
    Profile.SOAK: ProfileDefaults(vus=3, duration_sec=120),
    Profile.SPIKE: ProfileDefaults(vus=10, duration_sec=20),
    Profile.CUSTOM: ProfileDefaults(vus=20, duration_sec=60),
}


@dataclass(frozen=True, slots=True)
class Thresholds:
    max_failed_rate: float
    max_p95_latency_ms: float
    # strict thresholds fail on equality, advisory ones only when exceeded
    inclusive: bool = False

    def failed_rate_ok(self, value: float) -> bool:
        if self.inclusive:
            return value <= self.max_failed_rate
        return value < self.max_failed_rate

    def latency_ok(self, value_ms: float) -> bool:
        if self.inclusive:
            return value_ms <= self.max_p95_latency_ms
        return value_ms < self.max_p95_latency_ms


ENFORCED_THRESHOLDS = Thresholds(max_failed_rate=0.05, max_p95_latency_ms=3500.0)
ADVISORY_THRESHOLDS = Thresholds(max_failed_rate=0.05, max_p95_latency_ms=2200.0, inclusive=True)


def format_duration(total_seconds: int) -> str:
    """Render whole seconds as ``1m5s`` / ``1m`` / ``45s``."""
    safe_seconds = max(1, total_seconds)
    minutes, seconds = divmod(safe_seconds, 60)
    parts: list[str] = []
    if minutes > 0:
        parts.append(f"{minutes}m")
    if seconds > 0 or not parts:
        parts.append(f"{seconds}s")
    return "".join(parts)


@dataclass(frozen=True, slots=True)
class RunConfig:
    profile: Profile
    vus: int
    duration_sec: int
    thresholds: Thresholds | None = None

    @property
    def duration(self) -> str:
        return format_duration(self.duration_sec)

    def to_metadata(self) -> Mapping[str, Any]:
        thresholds = None
        if self.thresholds is not None:
            thresholds = {
                "max_failed_rate": self.thresholds.max_failed_rate,
                "max_p95_latency_ms": self.thresholds.max_p95_latency_ms,
            }
        return {
            "profile": self.profile.value,
            "vus": self.vus,
            "duration": self.duration,
            "duration_sec": self.duration_sec,
            "thresholds": thresholds,
        }


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    url: str | None
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str | None = None
    timeout_sec: float = 60.0

    def __post_init__(self) -> None:
        if self.method in BODYLESS_METHODS and self.body is not None:
            object.__setattr__(self, "body", None)

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "url": self.url,
            "method": self.method,
            "header_names": sorted(self.headers),
            "has_body": self.body is not None,
            "timeout_sec": self.timeout_sec,
        }


@dataclass(frozen=True, slots=True)
class HarnessSettings:
    run: RunConfig
    request: RequestDescriptor
    enforce_thresholds: bool = False
    variant: CheckVariant = CheckVariant.EXTENDED
    pause_sec: float = 1.0

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "run": dict(self.run.to_metadata()),
            "request": dict(self.request.to_metadata()),
            "enforce_thresholds": self.enforce_thresholds,
            "variant": self.variant.value,
            "pause_sec": self.pause_sec,
        }
