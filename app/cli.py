"""
Command-line runner: simulate a request stored as JSON and print the response.

Run: scenario-sim request.json --seed 7 --no-insights
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from core.config import EngineConfig
from core.logging_setup import configure_logging
from insights.narrative import NullInsightGenerator

from .assembler import handle_request


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a Monte Carlo scenario simulation from a JSON request")
    parser.add_argument("request", help="Path to the request JSON ('-' for stdin)")
    parser.add_argument("--seed", type=int, default=None, help="Override simulationParams.seed")
    parser.add_argument("--workers", type=int, default=None, help="Thread pool size (default: CPU count)")
    parser.add_argument("--no-insights", action="store_true", help="Skip the narrative insight service")
    parser.add_argument("--attribution", choices=("impact", "name"), default=None)
    parser.add_argument("--output", default=None, help="Write the response here instead of stdout")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    raw = sys.stdin.read() if args.request == "-" else Path(args.request).read_text(encoding="utf-8")
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as exc:
        print(json.dumps({"error": f"Invalid JSON: {exc}", "results": None}), file=sys.stderr)
        return 2

    if args.seed is not None and isinstance(body, dict) and isinstance(body.get("simulationParams"), dict):
        body["simulationParams"]["seed"] = args.seed

    overrides = {}
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    if args.attribution is not None:
        overrides["attribution"] = args.attribution
    config = EngineConfig.from_env(**overrides)

    generator = NullInsightGenerator() if args.no_insights else None
    status, payload = handle_request(body, config, insight_generator=generator)

    text = json.dumps(payload, indent=2, allow_nan=False)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
    else:
        print(text)
    return 0 if status == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
