"""
Single timed execution of the benchmarked artifact.

A cycle launches the artifact in benchmark mode and succeeds when the process
prints exactly ``0``. Failures are returned as values so the caller decides
what to do with them.
"""

from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Protocol, Sequence

from msbench.logs.transcript import LogTranscript

EXPECTED_OUTPUT = "0"


class FailureKind(str, Enum):
    """Ways a cycle can fail."""

    EXCEPTION = "exception"
    BAD_OUTPUT = "bad_output"

    @property
    def sentinel(self) -> int:
        """Legacy negative code, for display only."""
        return _SENTINELS[self]


_SENTINELS = {FailureKind.EXCEPTION: -1, FailureKind.BAD_OUTPUT: -2}


@dataclass(frozen=True, slots=True)
class CycleResult:
    """Outcome of one cycle: a duration in seconds, or a failure kind."""

    duration: float | None = None
    failure: FailureKind | None = None

    def __post_init__(self) -> None:
        if (self.duration is None) == (self.failure is None):
            raise ValueError("CycleResult needs exactly one of duration or failure")
        if self.duration is not None and self.duration < 0:
            raise ValueError("duration must be >= 0")

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, duration: float) -> CycleResult:
        return cls(duration=duration)

    @classmethod
    def failed(cls, kind: FailureKind) -> CycleResult:
        return cls(failure=kind)

    def describe(self) -> str:
        if self.failure is not None:
            return f"{self.failure.value} ({self.failure.sentinel})"
        return f"{self.duration} seconds"


class Launcher(Protocol):
    """Run a command to completion and return its combined output."""

    def __call__(self, command: Sequence[str]) -> str:
        ...


def run_command(command: Sequence[str]) -> str:
    """Default launcher: stdout and stderr interleaved, decoded as text."""
    completed = subprocess.run(
        list(command),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        stdin=subprocess.DEVNULL,
    )
    return completed.stdout.decode("utf-8", errors="replace")


def is_expected_output(output: str) -> bool:
    return output.replace("\r", "").replace("\n", "") == EXPECTED_OUTPUT


class CycleExecutor:
    """Launch the artifact once and time it."""

    def __init__(
        self,
        *,
        command: Sequence[str] = ("java", "-jar"),
        argument: str = "cycle",
        launcher: Launcher = run_command,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._command = tuple(command)
        self._argument = argument
        self._launcher = launcher
        self._clock = clock

    def build_command(self, artifact_path: Path) -> list[str]:
        return [*self._command, str(artifact_path), self._argument]

    def run_once(self, artifact_path: Path, transcript: LogTranscript) -> CycleResult:
        command = self.build_command(artifact_path)
        start = self._clock()
        try:
            output = self._launcher(command)
        except (OSError, subprocess.SubprocessError) as exc:
            transcript.append(f"Cycle failed to execute: {exc!r}")
            return CycleResult.failed(FailureKind.EXCEPTION)
        stop = self._clock()

        if not is_expected_output(output):
            transcript.append("Got bad output, output was:")
            transcript.append(output)
            return CycleResult.failed(FailureKind.BAD_OUTPUT)

        return CycleResult.success(max(stop - start, 0.0))
