"""
Command-line interface for the benchmark.

Usage patterns:
    python -m msbench.cli.commands run <token-or-url> <instrumentation-key>
    python -m msbench.cli.commands run ./MethodScript.jar null --cycles 5
    python -m msbench.cli.commands scheduled
"""

from __future__ import annotations

import argparse
import logging

from msbench.config import RunConfig, parse_cycles
from msbench.invocation import invoke, run_scheduled
from msbench.logs.transcript import LoggerObserver, print_observer


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        token, source = args.token, None
        if _looks_like_path(token):
            token, source = None, args.token
        config = RunConfig.from_values(
            token=token,
            instrumentation_key=args.instrumentation_key,
            cycles=args.cycles,
            artifact_source=source,
        )
        response = invoke(config, observers=[print_observer])
        if not response.ok:
            print(response.body)
        return 0 if response.ok else 1
    elif args.command == "scheduled":
        logging.basicConfig(level=logging.INFO)
        logger = logging.getLogger("msbench.scheduled")
        run_scheduled(RunConfig.from_env(), observers=[LoggerObserver(logger)])
        return 0
    else:  # pragma: no cover - argparse ensures command is valid
        parser.error(f"Unknown command: {args.command}")
    return 2  # pragma: no cover


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="msbench-cli", description="MethodScript startup benchmark"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser(
        "run", help="Run one benchmark locally and print the transcript"
    )
    run.add_argument(
        "token",
        help=(
            "Token sent with the download request; a value starting with "
            "'http' or a path to an existing jar replaces the artifact source"
        ),
    )
    run.add_argument(
        "instrumentation_key",
        help="Telemetry instrumentation key, or 'null' to skip telemetry",
    )
    run.add_argument(
        "--cycles",
        type=_positive_cycles,
        default=1,
        help="Number of measured cycles",
    )

    subparsers.add_parser(
        "scheduled",
        help="Run with environment configuration and discard the result",
    )

    return parser


def _looks_like_path(value: str) -> bool:
    return value.startswith("file://") or value.endswith(".jar")


def _positive_cycles(value: str) -> int:
    try:
        return parse_cycles(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
