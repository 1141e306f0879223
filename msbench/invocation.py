"""
Invocation boundary shared by the HTTP, CLI and scheduled entry points.

``invoke`` turns one benchmark run into a status code and a text body: 200 with
the transcript when the run completes, 500 with the transcript followed by the
traceback when anything raises. ``run_scheduled`` is the variant with no caller
waiting for a response.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from msbench.config import RunConfig
from msbench.fetch.workspace import purge_expired
from msbench.logs.transcript import LogObserver, LogTranscript
from msbench.runner.benchmark import BenchmarkOutcome, BenchmarkRunner
from msbench.telemetry.reporter import TelemetryReporter

_logger = logging.getLogger(__name__)

LOG_HEADER = "Log:\n"


@dataclass(slots=True)
class InvocationResponse:
    status_code: int
    body: str
    transcript: list[str]
    outcome: BenchmarkOutcome | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.status_code == 200


def invoke(
    config: RunConfig,
    *,
    runner: BenchmarkRunner | None = None,
    reporter: TelemetryReporter | None = None,
    observers: Iterable[LogObserver] = (),
) -> InvocationResponse:
    """Run one benchmark and shape the result for the caller."""
    transcript = LogTranscript()
    for observer in observers:
        transcript.add_observer(observer)
    transcript.reset()
    transcript.append("Starting function")

    runner = runner or BenchmarkRunner()
    reporter = reporter or TelemetryReporter()
    outcome: BenchmarkOutcome | None = None
    try:
        outcome = runner.run(config, transcript)
        reporter.report(outcome, config.telemetry, transcript)
    except Exception as exc:
        body = transcript.render() + "".join(traceback.format_exception(exc))
        return InvocationResponse(
            status_code=500,
            body=body,
            transcript=transcript.snapshot(),
            outcome=outcome,
            error=exc,
        )

    return InvocationResponse(
        status_code=200,
        body=LOG_HEADER + transcript.render(),
        transcript=transcript.snapshot(),
        outcome=outcome,
    )


def run_scheduled(
    config: RunConfig,
    *,
    runner: BenchmarkRunner | None = None,
    reporter: TelemetryReporter | None = None,
    observers: Iterable[LogObserver] = (),
) -> None:
    """Timer-triggered run: nobody receives the response, so it is only logged."""
    if config.workspace_root:
        for stale in purge_expired(root=Path(config.workspace_root)):
            _logger.info("Removed stale workspace %s", stale)
    response = invoke(config, runner=runner, reporter=reporter, observers=observers)
    if response.error is not None:
        _logger.error(
            "Scheduled benchmark failed", exc_info=response.error
        )
    elif response.outcome is not None and not response.outcome.ok:
        _logger.warning(
            "Scheduled benchmark aborted: %s", response.outcome.describe()
        )
    else:
        _logger.info("Scheduled benchmark completed")
