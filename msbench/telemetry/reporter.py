"""
Forwarding of the run's mean duration to the telemetry backend.

Each report builds a fresh client context, sends a single event and waits for
the send to complete. A failed send is raised to the caller: the metric was
computed, so losing it should be visible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

import httpx

from msbench.config import TelemetrySettings
from msbench.logs.transcript import LogTranscript
from msbench.runner.benchmark import BenchmarkOutcome
from msbench.telemetry.models import TelemetryEvent

_logger = logging.getLogger(__name__)


class TelemetrySendFailed(Exception):
    """The telemetry event could not be delivered."""


class TelemetrySink(Protocol):
    """Deliver one event and flush before returning."""

    def send(self, event: TelemetryEvent, settings: TelemetrySettings) -> None:
        ...


@dataclass(slots=True)
class ApplicationInsightsSink:
    """Post events to an Application Insights compatible ingestion endpoint."""

    client_factory: Callable[..., httpx.Client] = httpx.Client

    def send(self, event: TelemetryEvent, settings: TelemetrySettings) -> None:
        if not settings.instrumentation_key:
            raise TelemetrySendFailed("No instrumentation key configured")
        envelope = event.to_envelope(settings.instrumentation_key)
        try:
            with self.client_factory(timeout=httpx.Timeout(settings.timeout)) as client:
                response = client.post(
                    settings.endpoint,
                    json=[envelope],
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TelemetrySendFailed(
                f"Telemetry endpoint returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TelemetrySendFailed(f"Telemetry send failed: {exc}") from exc
        _logger.debug("Sent %s (session %s)", event.name, event.session_id)


@dataclass(slots=True)
class TelemetryReporter:
    """Send the mean of a successful run as a single named event."""

    sink_factory: Callable[[], TelemetrySink] = ApplicationInsightsSink

    def report(
        self,
        outcome: BenchmarkOutcome,
        settings: TelemetrySettings,
        transcript: LogTranscript,
    ) -> TelemetryEvent | None:
        if not settings.enabled:
            return None
        if not outcome.ok or outcome.mean is None:
            transcript.append("Skipping telemetry, run failed")
            return None

        transcript.append("Sending telemetry data")
        # New context per send: the session id never outlives this call.
        event = TelemetryEvent.for_mean(settings.event_name, outcome.mean)
        sink = self.sink_factory()
        sink.send(event, settings)
        transcript.append("Telemetry data sent")
        return event
