"""Command-line entrypoints for the ISS pass lookup."""
from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
import tomllib
import uuid
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

try:
    import uvloop
except ImportError:  # pragma: no cover - uvloop optional on some platforms
    uvloop = None

from isspass.display import format_pass_times
from isspass.errors import PassLookupError
from isspass.fetch.endpoints import Endpoints
from isspass.fetch.session import create_api_session
from isspass.models import PassWindow
from isspass.observability.log import configure_logging, get_logger
from isspass.observability.metrics import MetricsRegistry, record_duration
from isspass.orchestrator.pipeline import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    next_pass_times_for_current_location,
    next_pass_times_with_callback,
)

LOGGER = get_logger(__name__)

DEFAULT_SETTINGS_PATH = Path("config/settings.toml")
DEFAULT_LOGGING_PATH = Path("config/logging.yaml")


def load_settings(path: Path) -> Dict[str, object]:
    """Read the TOML configuration file, returning no settings when absent."""
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def build_arg_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(prog="isspass", description="Upcoming ISS passes for your location")
    sub = parser.add_subparsers(dest="command", required=True)

    passes = sub.add_parser("passes", help="Look up upcoming ISS passes")
    passes.add_argument(
        "--style",
        choices=("await", "callback"),
        default="await",
        help="Drive the lookup as an awaited chain or through a completion callback",
    )
    passes.add_argument("--json", action="store_true", help="Print the pass windows as JSON")
    passes.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    passes.add_argument("--metrics-out", help="Write run counters to this JSON file")

    sub.add_parser("endpoints", help="Show the configured upstream endpoints")

    return parser


async def _lookup_with_callback(
    session, *, endpoints: Endpoints, metrics: MetricsRegistry, run_id: str
) -> List[PassWindow]:
    outcome: "asyncio.Future[List[PassWindow]]" = asyncio.get_running_loop().create_future()

    def _on_done(error: Optional[BaseException], passes: Optional[List[PassWindow]]) -> None:
        if error is not None:
            outcome.set_exception(error)
        else:
            outcome.set_result(passes or [])

    next_pass_times_with_callback(_on_done, session=session, endpoints=endpoints, metrics=metrics, run_id=run_id)
    return await outcome


async def run_passes(args: argparse.Namespace, settings: Dict[str, object]) -> List[PassWindow]:
    """Execute the passes command end-to-end and return the windows found."""
    fetch_cfg = settings.get("fetch", {})
    endpoints = Endpoints.from_config(settings.get("endpoints", {}))
    timeout = getattr(args, "timeout", None)
    if timeout is None:
        timeout = float(fetch_cfg.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS))
    metrics = MetricsRegistry()
    run_id = uuid.uuid4().hex

    try:
        with record_duration(metrics, "run_duration_ms"):
            async with create_api_session(
                user_agent=str(fetch_cfg.get("user_agent", DEFAULT_USER_AGENT)),
                timeout=timeout,
            ) as session:
                if getattr(args, "style", "await") == "callback":
                    passes = await _lookup_with_callback(
                        session, endpoints=endpoints, metrics=metrics, run_id=run_id
                    )
                else:
                    passes = await next_pass_times_for_current_location(
                        session, endpoints=endpoints, metrics=metrics, run_id=run_id
                    )
    finally:
        if getattr(args, "metrics_out", None):
            metrics.export(path=Path(args.metrics_out), run_id=run_id)

    if getattr(args, "json", False):
        print(json.dumps([window.as_dict() for window in passes], indent=2))
    else:
        for line in format_pass_times(passes):
            print(line)
    return passes


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    load_dotenv()
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    settings = load_settings(Path(os.getenv("ISSPASS_SETTINGS", str(DEFAULT_SETTINGS_PATH))))
    configure_logging(Path(os.getenv("ISSPASS_LOGGING", str(DEFAULT_LOGGING_PATH))))

    if args.command == "endpoints":
        endpoints = Endpoints.from_config(settings.get("endpoints", {}))
        print(json.dumps(endpoints.as_dict(), indent=2))
        return

    runner = uvloop.run if uvloop is not None else asyncio.run

    if args.command == "passes":
        try:
            runner(run_passes(args, settings))
        except PassLookupError as exc:
            LOGGER.error("lookup_failed", stage=exc.stage, url=exc.url, error=str(exc))
            print(f"It didn't work! {exc}", file=sys.stderr)
            raise SystemExit(1)


if __name__ == "__main__":
    main()
