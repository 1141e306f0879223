"""Response schema for the JSON flavour of the benchmark endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from msbench.invocation import InvocationResponse


class BenchmarkReport(BaseModel):
    """Structured view of one invocation."""

    model_config = ConfigDict(populate_by_name=True)

    status: int
    mean_seconds: float | None = Field(default=None, ge=0.0, alias="meanSeconds")
    failure: str | None = None
    cycles: list[float] = Field(default_factory=list)
    log: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _mean_xor_failure(self) -> "BenchmarkReport":
        if self.mean_seconds is not None and self.failure is not None:
            raise ValueError("A report cannot carry both a mean and a failure.")
        return self

    @classmethod
    def from_response(cls, response: InvocationResponse) -> BenchmarkReport:
        outcome = response.outcome
        mean = outcome.mean if outcome is not None and response.ok else None
        failure: str | None = None
        if outcome is not None and outcome.failure is not None:
            failure = outcome.failure.value
        elif response.error is not None:
            failure = type(response.error).__name__
        return cls(
            status=response.status_code,
            mean_seconds=mean,
            failure=failure,
            cycles=list(outcome.durations) if outcome is not None else [],
            log=response.transcript,
        )
