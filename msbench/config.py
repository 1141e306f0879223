"""
Configuration management for msbench.

Provides per-invocation configuration for the artifact source, cycle count,
launch command and telemetry destination through environment variables and
defaults. A fresh RunConfig is built for every invocation; nothing here is a
process-wide singleton.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_ARTIFACT_URL = "https://methodscript.com/MethodScript.jar"
DEFAULT_TELEMETRY_ENDPOINT = "https://dc.services.visualstudio.com/v2/track"
DEFAULT_EVENT_NAME = "ext.methodscript.perf"
DISABLED_KEY = "null"


@dataclass(frozen=True, slots=True)
class TelemetrySettings:
    """Destination of the summary event."""

    instrumentation_key: str | None = None
    endpoint: str = DEFAULT_TELEMETRY_ENDPOINT
    event_name: str = DEFAULT_EVENT_NAME
    timeout: float = 30.0

    @property
    def enabled(self) -> bool:
        return bool(self.instrumentation_key)

    @classmethod
    def from_env(cls) -> TelemetrySettings:
        """Create telemetry settings from environment variables."""
        return cls(
            instrumentation_key=normalize_instrumentation_key(
                os.environ.get("INSTRUMENTATION_KEY")
            ),
            endpoint=os.environ.get(
                "MSBENCH_TELEMETRY_ENDPOINT", DEFAULT_TELEMETRY_ENDPOINT
            ),
            event_name=os.environ.get("MSBENCH_EVENT_NAME", DEFAULT_EVENT_NAME),
            timeout=float(os.environ.get("MSBENCH_TELEMETRY_TIMEOUT", "30")),
        )


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Immutable description of a single benchmark invocation."""

    # Remote URL or local path; the shape decides whether we download.
    artifact_source: str = DEFAULT_ARTIFACT_URL
    auth_token: str | None = None
    auth_header: str = "User-Agent"
    cycles: int = 1

    java_executable: str = "java"
    benchmark_argument: str = "cycle"

    fetch_timeout: float | None = None
    workspace_root: str | None = None

    telemetry: TelemetrySettings = field(default_factory=TelemetrySettings)

    def __post_init__(self) -> None:
        if self.cycles < 1:
            raise ValueError(f"cycles must be >= 1, got {self.cycles}")

    @property
    def launch_command(self) -> tuple[str, ...]:
        return (self.java_executable, "-jar")

    @classmethod
    def from_values(
        cls,
        *,
        token: str | None,
        instrumentation_key: str | None,
        cycles: int | str | None = None,
        **overrides: object,
    ) -> RunConfig:
        """
        Build a configuration from the raw token / key pair.

        A token that starts with ``http`` is not a credential but a replacement
        artifact URL, in which case no token is sent.
        """
        source = overrides.pop("artifact_source", None)
        if token is not None and token.startswith("http"):
            source = token
            token = None
        telemetry = overrides.pop("telemetry", None)
        if telemetry is None:
            telemetry = TelemetrySettings(
                instrumentation_key=normalize_instrumentation_key(instrumentation_key)
            )
        return cls(
            artifact_source=str(source) if source else DEFAULT_ARTIFACT_URL,
            auth_token=token or None,
            cycles=parse_cycles(cycles),
            telemetry=telemetry,  # type: ignore[arg-type]
            **overrides,  # type: ignore[arg-type]
        )

    @classmethod
    def from_env(cls) -> RunConfig:
        """Create run configuration from environment variables."""
        timeout = os.environ.get("MSBENCH_FETCH_TIMEOUT", "").strip()
        telemetry = TelemetrySettings.from_env()
        return cls.from_values(
            token=os.environ.get("USERAGENT"),
            instrumentation_key=telemetry.instrumentation_key,
            cycles=os.environ.get("CYCLES"),
            artifact_source=os.environ.get("MSBENCH_ARTIFACT_URL"),
            auth_header=os.environ.get("MSBENCH_AUTH_HEADER", "User-Agent"),
            java_executable=os.environ.get("MSBENCH_JAVA", "java"),
            fetch_timeout=float(timeout) if timeout else None,
            workspace_root=os.environ.get("MSBENCH_WORKSPACE") or None,
            telemetry=telemetry,
        )


def normalize_instrumentation_key(value: str | None) -> str | None:
    """Map absent, blank and the literal ``null`` to None."""
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == DISABLED_KEY:
        return None
    return value


def parse_cycles(value: int | str | None) -> int:
    if value is None or value == "":
        return 1
    try:
        cycles = int(value)
    except ValueError as exc:
        raise ValueError(f"cycles must be an integer, got {value!r}") from exc
    if cycles < 1:
        raise ValueError(f"cycles must be >= 1, got {cycles}")
    return cycles
