from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from msbench.config import RunConfig
from msbench.fetch.artifact import ArtifactFetcher, FetchFailed
from msbench.logs.transcript import LogTranscript
from msbench.runner.benchmark import BenchmarkOutcome, BenchmarkRunner
from msbench.runner.cycle import CycleExecutor, FailureKind

ExecutorFactory = Callable[[list[Any]], Any]


class FailingFetcher(ArtifactFetcher):
    def fetch(self, source: str, destination: Path, *, token: str | None = None) -> Path:
        raise FetchFailed(source, "HTTP 503")


def _config(base: RunConfig, cycles: int) -> RunConfig:
    return RunConfig(
        artifact_source=base.artifact_source,
        cycles=cycles,
        workspace_root=base.workspace_root,
    )


@pytest.mark.parametrize("cycles", [1, 2, 3, 7])
def test_mean_excludes_warmup(
    local_config: RunConfig,
    transcript: LogTranscript,
    scripted_executor: ExecutorFactory,
    cycles: int,
) -> None:
    durations = [0.1 * (index + 1) for index in range(cycles)]
    executor = scripted_executor([99.0, *durations])

    outcome = BenchmarkRunner(executor=executor).run(
        _config(local_config, cycles), transcript
    )

    assert outcome.ok
    assert outcome.mean == pytest.approx(sum(durations) / cycles)
    assert outcome.durations == tuple(durations)
    assert outcome.warmup is not None and outcome.warmup.duration == 99.0
    assert len(executor.calls) == cycles + 1


def test_scenario_all_cycles_succeed(
    local_config: RunConfig,
    transcript: LogTranscript,
    scripted_executor: ExecutorFactory,
) -> None:
    executor = scripted_executor([2.0, 0.5, 0.7, 0.6])

    outcome = BenchmarkRunner(executor=executor).run(
        _config(local_config, 3), transcript
    )

    assert outcome.mean == pytest.approx(0.6)
    assert transcript.snapshot() == [
        f"Using local artifact {local_config.artifact_source}",
        "Downloaded, running tests",
        "First run",
        "First run took 2.0 seconds",
        "Beginning cycles, 3 total.",
        f"Tests completed, average runtime {outcome.mean}",
    ]


@pytest.mark.parametrize("kind", [FailureKind.BAD_OUTPUT, FailureKind.EXCEPTION])
def test_measured_failure_stops_immediately(
    local_config: RunConfig,
    transcript: LogTranscript,
    scripted_executor: ExecutorFactory,
    kind: FailureKind,
) -> None:
    executor = scripted_executor([1.0, 0.4, kind, 0.4, 0.4])

    outcome = BenchmarkRunner(executor=executor).run(
        _config(local_config, 4), transcript
    )

    assert not outcome.ok
    assert outcome.failure is kind
    assert outcome.mean is None
    assert outcome.durations == (0.4,)
    # warmup + two measured cycles; the remaining two never run
    assert len(executor.calls) == 3
    assert transcript.snapshot()[-1] == f"Tests aborted: {kind.value} ({kind.sentinel})"


def test_scenario_bad_output_in_first_measured_cycle(
    local_config: RunConfig, transcript: LogTranscript
) -> None:
    outputs = iter(["0\n", "1\n", "0\n"])
    launched: list[list[str]] = []

    def launcher(command: list[str]) -> str:
        launched.append(list(command))
        return next(outputs)

    executor = CycleExecutor(launcher=launcher)

    outcome = BenchmarkRunner(executor=executor).run(
        _config(local_config, 2), transcript
    )

    assert outcome.failure is FailureKind.BAD_OUTPUT
    assert len(launched) == 2
    lines = transcript.snapshot()
    assert "Got bad output, output was:" in lines
    assert "1\n" in lines


def test_warmup_failure_does_not_abort(
    local_config: RunConfig,
    transcript: LogTranscript,
    scripted_executor: ExecutorFactory,
) -> None:
    executor = scripted_executor([FailureKind.BAD_OUTPUT, 0.3, 0.5])

    outcome = BenchmarkRunner(executor=executor).run(
        _config(local_config, 2), transcript
    )

    assert outcome.ok
    assert outcome.mean == pytest.approx(0.4)
    assert outcome.warmup is not None
    assert outcome.warmup.failure is FailureKind.BAD_OUTPUT
    assert "First run failed: bad_output (-2)" in transcript.snapshot()


def test_scenario_fetch_failure_runs_no_cycles(
    transcript: LogTranscript,
    scripted_executor: ExecutorFactory,
    tmp_path: Path,
) -> None:
    executor = scripted_executor([])
    runner = BenchmarkRunner(fetcher=FailingFetcher(), executor=executor)
    config = RunConfig(cycles=2, workspace_root=str(tmp_path / "ws"))

    with pytest.raises(FetchFailed):
        runner.run(config, transcript)

    assert executor.calls == []
    lines = transcript.snapshot()
    assert len(lines) == 2
    assert lines[0].startswith("Downloading latest MethodScript jar from https://")
    assert lines[1] == f"Failed to fetch {config.artifact_source}: HTTP 503"


def test_workspace_removed_after_run(
    local_config: RunConfig,
    transcript: LogTranscript,
    scripted_executor: ExecutorFactory,
) -> None:
    BenchmarkRunner(executor=scripted_executor([0.1, 0.1])).run(local_config, transcript)

    assert local_config.workspace_root is not None
    assert list(Path(local_config.workspace_root).iterdir()) == []


def test_workspace_removed_after_fetch_failure(
    transcript: LogTranscript,
    scripted_executor: ExecutorFactory,
    tmp_path: Path,
) -> None:
    root = tmp_path / "ws"
    runner = BenchmarkRunner(fetcher=FailingFetcher(), executor=scripted_executor([]))

    with pytest.raises(FetchFailed):
        runner.run(RunConfig(workspace_root=str(root)), transcript)

    assert list(root.iterdir()) == []


def test_outcome_requires_durations() -> None:
    with pytest.raises(ValueError):
        BenchmarkOutcome.succeeded([])
