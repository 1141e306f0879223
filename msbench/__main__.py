"""
Entry point for local runs, scheduled runs and the HTTP service.

Running behaviours:
    python -m msbench run <token-or-url> <instrumentation-key> [--cycles N]
    python -m msbench scheduled
    python -m msbench serve --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from msbench.cli import commands

_CLI_COMMANDS = {"run", "scheduled"}


def main(argv: Sequence[str] | None = None) -> None:
    args = list(argv if argv is not None else sys.argv[1:])
    if not args:
        _build_parser().print_help()
        return

    if args[0] in _CLI_COMMANDS:
        raise SystemExit(commands.main(args))

    parser = _build_parser()
    parsed = parser.parse_args(args)

    if parsed.entrypoint == "serve":
        _run_api(host=parsed.host, port=parsed.port, reload=parsed.reload)
        return

    parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="msbench",
        description="MethodScript benchmark entry point.",
    )
    subparsers = parser.add_subparsers(dest="entrypoint")

    serve = subparsers.add_parser(
        "serve", help="Start the FastAPI service via uvicorn."
    )
    serve.add_argument("--host", default="127.0.0.1", help="Host interface to bind.")
    serve.add_argument("--port", type=int, default=8000, help="Port to listen on.")
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload (development only).",
    )

    subparsers.add_parser("run", help="Run one benchmark locally.")
    subparsers.add_parser(
        "scheduled", help="Run with environment configuration, discard the result."
    )

    return parser


def _run_api(*, host: str, port: int, reload: bool) -> None:
    import uvicorn

    if reload:
        # uvicorn needs an import string to reload.
        uvicorn.run("msbench.api.router:app", host=host, port=port, reload=True)
        return

    from msbench.api.router import create_app

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":  # pragma: no cover - module execution guard
    main()
