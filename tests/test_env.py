from __future__ import annotations

import logging

import pytest

from loadsmoke.config import CheckVariant, Profile, load_settings, parse_headers


def test_malformed_headers_fall_back_to_empty(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        headers = parse_headers("{not json")
    assert headers == {}
    assert "HTTP_HEADERS" in caplog.text


def test_non_object_headers_fall_back_to_empty(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        assert parse_headers("[1, 2]") == {}
    assert "JSON object" in caplog.text


def test_headers_are_parsed() -> None:
    assert parse_headers('{"Authorization": "Bearer x", "X-Retry": 3}') == {
        "Authorization": "Bearer x",
        "X-Retry": "3",
    }


def test_defaults_without_environment() -> None:
    settings = load_settings({})
    assert settings.run.profile is Profile.SMOKE
    assert settings.request.url is None
    assert settings.request.method == "GET"
    assert settings.request.headers == {}
    assert settings.enforce_thresholds is False
    assert settings.run.thresholds is None
    assert settings.variant is CheckVariant.EXTENDED
    assert settings.pause_sec == 1.0


def test_body_dropped_for_get_and_head() -> None:
    for method in ("get", "HEAD"):
        settings = load_settings({"TARGET_URL": "http://svc", "HTTP_METHOD": method, "HTTP_BODY": "{}"})
        assert settings.request.body is None


def test_body_kept_for_post() -> None:
    settings = load_settings({"TARGET_URL": "http://svc", "HTTP_METHOD": "post", "HTTP_BODY": '{"a": 1}'})
    assert settings.request.method == "POST"
    assert settings.request.body == '{"a": 1}'


def test_api_base_url_fallback() -> None:
    settings = load_settings({"API_BASE_URL": "http://fallback"})
    assert settings.request.url == "http://fallback"
    settings = load_settings({"TARGET_URL": "http://primary", "API_BASE_URL": "http://fallback"})
    assert settings.request.url == "http://primary"


def test_unknown_method_falls_back_to_get(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        settings = load_settings({"HTTP_METHOD": "BREW"})
    assert settings.request.method == "GET"
    assert "BREW" in caplog.text


def test_custom_overrides_and_enforcement() -> None:
    settings = load_settings(
        {
            "MODE": "custom",
            "CUSTOM_VUS": "7.6",
            "CUSTOM_DURATION_SECONDS": "125",
            "ENFORCE_THRESHOLDS": "TRUE",
            "CHECK_VARIANT": "minimal",
        }
    )
    assert settings.run.vus == 8
    assert settings.run.duration == "2m5s"
    assert settings.enforce_thresholds is True
    assert settings.run.thresholds is not None
    assert settings.variant is CheckVariant.MINIMAL


def test_garbage_numbers_are_ignored() -> None:
    settings = load_settings(
        {"MODE": "CUSTOM", "CUSTOM_VUS": "lots", "CUSTOM_DURATION_SECONDS": "", "HTTP_TIMEOUT_SECONDS": "-1"}
    )
    assert settings.run.vus == 20
    assert settings.run.duration == "1m"
    assert settings.request.timeout_sec == 60.0


def test_non_ascii_header_values_are_dropped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        headers = parse_headers('{"X-User": "café", "X-Trace": "abc"}')
    assert headers == {"X-Trace": "abc"}
    assert "X-User" in caplog.text
