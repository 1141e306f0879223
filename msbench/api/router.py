"""FastAPI application exposing the benchmark as an on-demand HTTP trigger."""

from __future__ import annotations

import logging
from typing import Callable, Literal

from fastapi import APIRouter, FastAPI, Query
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from msbench.api.models import BenchmarkReport
from msbench.config import RunConfig
from msbench.invocation import invoke
from msbench.logs.transcript import LoggerObserver
from msbench.runner.benchmark import BenchmarkRunner
from msbench.telemetry.reporter import TelemetryReporter

_logger = logging.getLogger(__name__)


def create_app(
    *,
    config_factory: Callable[[], RunConfig] = RunConfig.from_env,
    runner_factory: Callable[[], BenchmarkRunner] = BenchmarkRunner,
    reporter_factory: Callable[[], TelemetryReporter] = TelemetryReporter,
) -> FastAPI:
    router = APIRouter()

    # Sync handler: FastAPI runs it in a worker thread, and every request gets
    # its own config, runner and transcript.
    @router.get("/api/benchmark")
    def benchmark(
        format: Literal["text", "json"] = Query(default="text"),
    ) -> Response:
        _logger.info("HTTP trigger processed a request.")
        response = invoke(
            config_factory(),
            runner=runner_factory(),
            reporter=reporter_factory(),
            observers=[LoggerObserver(_logger)],
        )
        if format == "json":
            report = BenchmarkReport.from_response(response)
            return JSONResponse(
                report.model_dump(by_alias=True), status_code=response.status_code
            )
        return PlainTextResponse(response.body, status_code=response.status_code)

    app = FastAPI(title="MethodScript Benchmark", version="0.1.0")
    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


# Convenience application instance for ASGI servers
app = create_app()
