"""Shared pytest fixtures for the msbench project."""

from __future__ import annotations

from pathlib import Path

import pytest

from msbench.config import RunConfig
from msbench.logs.transcript import LogTranscript
from msbench.runner.cycle import CycleResult, FailureKind


class ScriptedExecutor:
    """Executor returning pre-programmed results and recording each call."""

    def __init__(self, results: list[CycleResult | float | FailureKind]) -> None:
        self._results = list(results)
        self.calls: list[Path] = []

    def run_once(self, artifact_path: Path, transcript: LogTranscript) -> CycleResult:
        self.calls.append(artifact_path)
        if not self._results:
            raise AssertionError("Executor called more often than scripted")
        result = self._results.pop(0)
        if isinstance(result, FailureKind):
            return CycleResult.failed(result)
        if isinstance(result, CycleResult):
            return result
        return CycleResult.success(result)


@pytest.fixture
def scripted_executor() -> type[ScriptedExecutor]:
    return ScriptedExecutor


@pytest.fixture
def transcript() -> LogTranscript:
    return LogTranscript()


@pytest.fixture
def local_jar(tmp_path: Path) -> Path:
    jar = tmp_path / "MethodScript.jar"
    jar.write_bytes(b"PK\x03\x04fake-jar")
    return jar


@pytest.fixture
def local_config(local_jar: Path, tmp_path: Path) -> RunConfig:
    return RunConfig(
        artifact_source=str(local_jar),
        cycles=1,
        workspace_root=str(tmp_path / "workspaces"),
    )
