from __future__ import annotations

import json
import logging
import math
from typing import Mapping

from loadsmoke.config.models import (
    HTTP_METHODS,
    CheckVariant,
    HarnessSettings,
    RequestDescriptor,
)
from loadsmoke.config.resolver import Overrides, parse_number, resolve

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 60.0
DEFAULT_PAUSE_SEC = 1.0


def load_settings(environ: Mapping[str, str]) -> HarnessSettings:
    """Build validated harness settings from an environment mapping.

    Never raises on bad input: malformed values fall back to defaults and
    are logged.
    """
    enforce = _get(environ, "ENFORCE_THRESHOLDS", "false").lower() == "true"
    overrides = Overrides(
        vus=parse_number(_get(environ, "CUSTOM_VUS")),
        duration_seconds=parse_number(_get(environ, "CUSTOM_DURATION_SECONDS")),
    )
    run = resolve(_get(environ, "MODE", "SMOKE"), overrides, enforce_thresholds=enforce)
    request = load_request(environ)
    return HarnessSettings(
        run=run,
        request=request,
        enforce_thresholds=enforce,
        variant=_variant(_get(environ, "CHECK_VARIANT")),
        pause_sec=_non_negative(
            parse_number(_get(environ, "ITERATION_PAUSE_SECONDS")), DEFAULT_PAUSE_SEC
        ),
    )


def load_request(environ: Mapping[str, str]) -> RequestDescriptor:
    url = _get(environ, "TARGET_URL") or _get(environ, "API_BASE_URL")
    method = _get(environ, "HTTP_METHOD", "GET").upper()
    if method not in HTTP_METHODS:
        logger.warning("Unsupported HTTP_METHOD %r, falling back to GET", method)
        method = "GET"
    timeout = parse_number(_get(environ, "HTTP_TIMEOUT_SECONDS"))
    if timeout is None or not math.isfinite(timeout) or timeout <= 0:
        timeout = DEFAULT_TIMEOUT_SEC
    return RequestDescriptor(
        url=url,
        method=method,
        headers=parse_headers(_get(environ, "HTTP_HEADERS")),
        body=_get(environ, "HTTP_BODY"),
        timeout_sec=timeout,
    )


def parse_headers(raw: str | None) -> dict[str, str]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Unable to parse HTTP_HEADERS (%s). Falling back to no headers.", exc)
        return {}
    if not isinstance(parsed, dict):
        logger.warning(
            "HTTP_HEADERS must be a JSON object, got %s. Falling back to no headers.",
            type(parsed).__name__,
        )
        return {}
    headers: dict[str, str] = {}
    for key, value in parsed.items():
        name, text = str(key), str(value)
        if not (name.isascii() and text.isascii()):
            logger.warning("Dropping HTTP_HEADERS entry %r: header names and values must be ASCII.", name)
            continue
        headers[name] = text
    return headers


def _get(environ: Mapping[str, str], name: str, default: str | None = None) -> str | None:
    value = environ.get(name)
    if value is None or value == "":
        return default
    return value


def _variant(raw: str | None) -> CheckVariant:
    if raw is None:
        return CheckVariant.EXTENDED
    try:
        return CheckVariant(raw.strip().lower())
    except ValueError:
        logger.warning("Unknown CHECK_VARIANT %r, using %s", raw, CheckVariant.EXTENDED.value)
        return CheckVariant.EXTENDED


def _non_negative(value: float | None, default: float) -> float:
    if value is None or not math.isfinite(value) or value < 0:
        return default
    return value
