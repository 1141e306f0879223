"""
Benchmark orchestration.

One run fetches the artifact, executes a discarded warmup cycle, then the
configured number of measured cycles, and reduces them to a mean. The first
measured failure ends the run. A warmup failure is only logged.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from msbench.config import RunConfig
from msbench.fetch.artifact import ArtifactFetcher, FetchFailed, is_remote
from msbench.fetch.workspace import ArtifactWorkspace
from msbench.logs.transcript import LogTranscript
from msbench.runner.cycle import CycleExecutor, CycleResult, FailureKind


class Executor(Protocol):
    def run_once(self, artifact_path: Path, transcript: LogTranscript) -> CycleResult:
        ...


@dataclass(frozen=True, slots=True)
class BenchmarkOutcome:
    """Aggregate of one run: a mean duration, or the first failure."""

    mean: float | None
    failure: FailureKind | None = None
    durations: tuple[float, ...] = ()
    warmup: CycleResult | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def succeeded(
        cls, durations: list[float], warmup: CycleResult | None = None
    ) -> BenchmarkOutcome:
        if not durations:
            raise ValueError("At least one measured duration is required")
        return cls(
            mean=sum(durations) / len(durations),
            durations=tuple(durations),
            warmup=warmup,
        )

    @classmethod
    def aborted(
        cls,
        kind: FailureKind,
        durations: list[float],
        warmup: CycleResult | None = None,
    ) -> BenchmarkOutcome:
        return cls(mean=None, failure=kind, durations=tuple(durations), warmup=warmup)

    def describe(self) -> str:
        if self.failure is not None:
            return f"{self.failure.value} ({self.failure.sentinel})"
        return f"{self.mean}"


@dataclass(slots=True)
class BenchmarkRunner:
    """Fetch the artifact and run warmup plus measured cycles against it."""

    fetcher: ArtifactFetcher | None = None
    executor: Executor | None = None

    def run(self, config: RunConfig, transcript: LogTranscript) -> BenchmarkOutcome:
        fetcher = self.fetcher or ArtifactFetcher(
            auth_header=config.auth_header, timeout=config.fetch_timeout
        )
        executor = self.executor or CycleExecutor(
            command=config.launch_command, argument=config.benchmark_argument
        )

        with ArtifactWorkspace.create(config.workspace_root) as workspace:
            artifact = self._fetch(fetcher, config, workspace, transcript)
            transcript.append("Downloaded, running tests")
            outcome = self._run_cycles(executor, artifact, config.cycles, transcript)

        if outcome.ok:
            transcript.append(f"Tests completed, average runtime {outcome.mean}")
        else:
            transcript.append(f"Tests aborted: {outcome.describe()}")
        return outcome

    def _fetch(
        self,
        fetcher: ArtifactFetcher,
        config: RunConfig,
        workspace: ArtifactWorkspace,
        transcript: LogTranscript,
    ) -> Path:
        source = config.artifact_source
        if is_remote(source):
            transcript.append(
                f"Downloading latest MethodScript jar from {source} "
                f"to {workspace.artifact_path}"
            )
        else:
            transcript.append(f"Using local artifact {source}")
        try:
            return fetcher.fetch(
                source, workspace.artifact_path, token=config.auth_token
            )
        except FetchFailed as exc:
            transcript.append(str(exc))
            raise

    def _run_cycles(
        self,
        executor: Executor,
        artifact: Path,
        cycles: int,
        transcript: LogTranscript,
    ) -> BenchmarkOutcome:
        # The first run installs things and does other first-time setup, so it
        # is not counted.
        transcript.append("First run")
        warmup = executor.run_once(artifact, transcript)
        if warmup.ok:
            transcript.append(f"First run took {warmup.duration} seconds")
        else:
            transcript.append(f"First run failed: {warmup.describe()}")

        transcript.append(f"Beginning cycles, {cycles} total.")
        durations: list[float] = []
        for _ in range(cycles):
            result = executor.run_once(artifact, transcript)
            if result.failure is not None:
                return BenchmarkOutcome.aborted(result.failure, durations, warmup)
            assert result.duration is not None
            durations.append(result.duration)

        return BenchmarkOutcome.succeeded(durations, warmup)
