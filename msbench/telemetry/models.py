"""
Pydantic models describing the telemetry event sent once per run.

The event carries a single measurement, the mean cycle duration, and a session
identifier generated for that one send. ``to_envelope`` renders it in the
Application Insights track format expected by the ingestion endpoint.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

CYCLE_MEASUREMENT = "cycle"


def _new_session_id() -> str:
    return str(uuid4())


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TelemetryEvent(BaseModel):
    """A named event with one numeric measurement."""

    name: str = Field(min_length=1)
    measurements: dict[str, float]
    session_id: str = Field(default_factory=_new_session_id)
    timestamp: datetime = Field(default_factory=_utc_now)

    @field_validator("measurements")
    @classmethod
    def _validate_measurements(cls, value: dict[str, float]) -> dict[str, float]:
        if set(value) != {CYCLE_MEASUREMENT}:
            raise ValueError(
                f"measurements must contain exactly '{CYCLE_MEASUREMENT}'."
            )
        if value[CYCLE_MEASUREMENT] < 0:
            raise ValueError("cycle measurement must be a non-negative duration.")
        return value

    @classmethod
    def for_mean(cls, name: str, mean: float) -> TelemetryEvent:
        return cls(name=name, measurements={CYCLE_MEASUREMENT: mean})

    def to_envelope(self, instrumentation_key: str) -> dict[str, Any]:
        """Render as an Application Insights ``EventData`` envelope."""
        compact_key = instrumentation_key.replace("-", "")
        return {
            "name": f"Microsoft.ApplicationInsights.{compact_key}.Event",
            "time": self.timestamp.isoformat(),
            "iKey": instrumentation_key,
            "tags": {
                "ai.session.id": self.session_id,
                "ai.session.isFirst": "true",
                "ai.cloud.roleInstance": "",
                "ai.internal.nodeName": self.session_id,
            },
            "data": {
                "baseType": "EventData",
                "baseData": {
                    "ver": 2,
                    "name": self.name,
                    "properties": {},
                    "measurements": dict(self.measurements),
                },
            },
        }
