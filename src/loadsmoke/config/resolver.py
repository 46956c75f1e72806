from __future__ import annotations

from dataclasses import dataclass
import math

from loadsmoke.config.models import (
    ENFORCED_THRESHOLDS,
    PROFILE_DEFAULTS,
    Profile,
    RunConfig,
)


@dataclass(frozen=True, slots=True)
class Overrides:
    vus: float | None = None
    duration_seconds: float | None = None


def resolve(
    mode: str | None,
    overrides: Overrides | None = None,
    enforce_thresholds: bool = False,
) -> RunConfig:
    profile = _profile_for(mode)
    defaults = PROFILE_DEFAULTS[profile]
    vus = defaults.vus
    duration_sec = defaults.duration_sec
    if profile is Profile.CUSTOM and overrides is not None:
        if _is_positive(overrides.vus):
            vus = max(1, _round_half_up(overrides.vus))
        if _is_positive(overrides.duration_seconds):
            duration_sec = max(1, _round_half_up(overrides.duration_seconds))
    thresholds = ENFORCED_THRESHOLDS if enforce_thresholds else None
    return RunConfig(profile=profile, vus=vus, duration_sec=duration_sec, thresholds=thresholds)


def parse_number(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _profile_for(mode: str | None) -> Profile:
    name = (mode or "").strip().upper()
    try:
        return Profile(name)
    except ValueError:
        return Profile.SMOKE


def _is_positive(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
