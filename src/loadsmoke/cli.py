from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from loadsmoke.config import CheckVariant, HarnessSettings, Profile, load_settings
from loadsmoke.loadgen.runner import run_scenario
from loadsmoke.report import render_summary
from loadsmoke.storage import Storage, default_storage


def _build_environ(args: argparse.Namespace, base: Mapping[str, str]) -> dict[str, str]:
    environ = dict(base)
    flags = {
        "MODE": args.mode,
        "TARGET_URL": args.target,
        "CUSTOM_VUS": args.vus,
        "CUSTOM_DURATION_SECONDS": args.duration,
        "CHECK_VARIANT": args.variant,
    }
    for name, value in flags.items():
        if value is not None:
            environ[name] = str(value)
    if args.enforce_thresholds:
        environ["ENFORCE_THRESHOLDS"] = "true"
    return environ


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Single-scenario HTTP load test harness")
    parser.add_argument("--mode", choices=[p.value for p in Profile], type=str.upper)
    parser.add_argument("--target", help="Target URL (overrides TARGET_URL)")
    parser.add_argument("--vus", type=float, help="CUSTOM profile virtual users")
    parser.add_argument("--duration", type=float, help="CUSTOM profile duration in seconds")
    parser.add_argument("--variant", choices=[v.value for v in CheckVariant])
    parser.add_argument("--enforce-thresholds", action="store_true")
    parser.add_argument("--env-file", type=Path, default=None)
    parser.add_argument("--db", type=Path, default=None, help="Run history database path")
    parser.add_argument("--no-save", action="store_true")
    parser.add_argument("--no-color", action="store_true")
    parser.add_argument("--log-level", default="INFO")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv(args.env_file)
    settings: HarnessSettings = load_settings(_build_environ(args, os.environ))

    result = asyncio.run(run_scenario(settings))
    summary = render_summary(
        result.aggregator,
        result.stats,
        settings.enforce_thresholds,
        color=not args.no_color and sys.stdout.isatty(),
    )
    sys.stdout.write(summary.text)

    if not args.no_save:
        storage = Storage(args.db) if args.db else default_storage()
        storage.save_run(
            result.run_id,
            settings,
            result.stats,
            result.aggregator,
            passed=result.passed,
        )
    print(f"Run complete: {result.run_id}")
    return 0 if result.passed else 1


if __name__ == "__main__":
    sys.exit(main())
