from __future__ import annotations

from loadsmoke.config.env import load_request, load_settings, parse_headers
from loadsmoke.config.models import (
    ADVISORY_THRESHOLDS,
    ENFORCED_THRESHOLDS,
    PROFILE_DEFAULTS,
    CheckVariant,
    HarnessSettings,
    Profile,
    RequestDescriptor,
    RunConfig,
    Thresholds,
    format_duration,
)
from loadsmoke.config.resolver import Overrides, resolve

__all__ = [
    "ADVISORY_THRESHOLDS",
    "ENFORCED_THRESHOLDS",
    "PROFILE_DEFAULTS",
    "CheckVariant",
    "HarnessSettings",
    "Overrides",
    "Profile",
    "RequestDescriptor",
    "RunConfig",
    "Thresholds",
    "format_duration",
    "load_request",
    "load_settings",
    "parse_headers",
    "resolve",
]
