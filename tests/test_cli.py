from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from loadsmoke import cli
from loadsmoke.loadgen import runner


def test_flags_override_environment() -> None:
    args = cli._parser().parse_args(["--mode", "custom", "--vus", "4", "--enforce-thresholds"])
    environ = cli._build_environ(args, {"MODE": "SMOKE", "TARGET_URL": "http://env"})
    assert environ["MODE"] == "CUSTOM"
    assert environ["CUSTOM_VUS"] == "4.0"
    assert environ["ENFORCE_THRESHOLDS"] == "true"
    assert environ["TARGET_URL"] == "http://env"


def test_main_prints_report_and_saves(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    real_run = runner.run_scenario

    async def fake_run(settings, transport=None, run_id=None):
        mock = httpx.MockTransport(lambda request: httpx.Response(204))
        return await real_run(settings, transport=mock, run_id="cli-run")

    monkeypatch.setattr(cli, "run_scenario", fake_run)
    monkeypatch.setenv("ITERATION_PAUSE_SECONDS", "0.1")
    db = tmp_path / "cli.duckdb"
    code = cli.main(
        ["--mode", "custom", "--vus", "1", "--duration", "1", "--target", "http://svc.test", "--db", str(db)]
    )
    out = capsys.readouterr().out
    assert code == 0
    assert "Status codes" in out
    assert "Run complete: cli-run" in out
    assert db.exists()
