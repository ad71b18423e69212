#!/usr/bin/env python3
"""
Command line entry point for the step counter.

    stepcounter replay walk.csv --algorithm peak_valley --prime-gravity
    stepcounter replay walk.csv --compare
    stepcounter serve --port 8000
"""

import argparse
import json
import logging
import sys

from .core.config import build_pipeline_config, settings
from .core.models.samples import StepDetectionAlgorithm
from .core.services import get_replay_service
from .main import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stepcounter", description="Accelerometer step counter")
    parser.add_argument("--log-level", default=None, help="Logging level (default from settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay = subparsers.add_parser("replay", help="Replay a recorded CSV/Parquet file")
    replay.add_argument("file", help="Recording with x, y, z and optional time columns")
    replay.add_argument(
        "--algorithm",
        choices=[algo.value for algo in StepDetectionAlgorithm],
        default=None,
        help="Step detection strategy (default from settings)",
    )
    replay.add_argument("--sample-period-ms", type=float, default=None,
                        help="Sample period when the file has no time column")
    replay.add_argument("--prime-gravity", action="store_true",
                        help="Seed the gravity estimate with the first sample")
    replay.add_argument("--compare", action="store_true", help="Run every strategy and compare")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.api_host)
    serve.add_argument("--port", type=int, default=settings.api_port)
    serve.add_argument("--reload", action="store_true", default=settings.debug)
    return parser


def run_replay(args: argparse.Namespace) -> int:
    algorithm = StepDetectionAlgorithm(args.algorithm) if args.algorithm else None
    overrides = {"prime_gravity": True} if args.prime_gravity else None
    config = build_pipeline_config(algorithm=algorithm, overrides=overrides)

    ReplayService = get_replay_service()
    service = ReplayService(sample_period_ms=args.sample_period_ms)
    try:
        frame = service.load_data_file(args.file)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Cannot replay %s: %s", args.file, e)
        return 1

    result = service.compare(frame, config) if args.compare else service.replay(frame, config)
    print(json.dumps(result, indent=2))
    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("stepcounter.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "replay":
        return run_replay(args)
    return run_serve(args)


if __name__ == "__main__":
    sys.exit(main())
