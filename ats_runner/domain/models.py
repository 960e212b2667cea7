"""Typed domain models shared across orchestration layer boundaries.

All contracts are immutable and request-scoped: they are created fresh for one
orchestration call and discarded once the verdict has been returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class JobTrigger:
    """Inputs required to start one ATS job from a job template.

    Attributes:
        app_id: ATS application identifier.
        api_token: ATS application API token.
        job_template_id: Job template identifier configured in ATS.
        base_url: ATS service base URL without the `/ws` suffix.
    """

    app_id: str
    api_token: str
    job_template_id: str
    base_url: str

    def __post_init__(self) -> None:
        for field_name in ("app_id", "api_token", "job_template_id", "base_url"):
            if not str(getattr(self, field_name)).strip():
                raise ValueError(f"{field_name} must not be blank")


@dataclass(frozen=True)
class JobHandle:
    """Outcome of a RunJob or RerunNotPassed request.

    Attributes:
        started: Whether ATS accepted the request and assigned a job id.
        job_id: Assigned job id; present only when started.
        error_message: Rejection message; present only when not started.
    """

    started: bool
    job_id: str | None = None
    error_message: str | None = None

    def __post_init__(self) -> None:
        if self.started:
            if self.job_id is None or not self.job_id.strip():
                raise ValueError("started job handle requires a non-blank job_id")
            if self.error_message is not None:
                raise ValueError("started job handle must not carry an error_message")
        else:
            if self.job_id is not None:
                raise ValueError("job handle that did not start must not carry a job_id")
            if self.error_message is None:
                raise ValueError("job handle that did not start requires an error_message")

    @classmethod
    def handle_started(cls, job_id: str) -> JobHandle:
        """Build a handle for an accepted request."""

        return cls(started=True, job_id=job_id)

    @classmethod
    def handle_rejected(cls, error_message: str) -> JobHandle:
        """Build a handle for a rejected request."""

        return cls(started=False, error_message=error_message)


@dataclass(frozen=True)
class RunStatus:
    """Snapshot of one GetJobStatus response.

    Attributes:
        done: Whether ATS reports the job execution as Done.
        passed: Whether all test cases passed. Only meaningful when done.
        error_message: Optional error message carried by the response.
    """

    done: bool
    passed: bool = False
    error_message: str | None = None

    def __post_init__(self) -> None:
        if self.passed and not self.done:
            raise ValueError("run status cannot be passed before it is done")


@dataclass(frozen=True)
class RerunRequest:
    """Request to rerun the not-passed test cases of a finished job.

    Attributes:
        finished_job_id: Id of the finished job whose failures are rerun.
    """

    finished_job_id: str

    def __post_init__(self) -> None:
        if not self.finished_job_id.strip():
            raise ValueError("finished_job_id must not be blank")


@dataclass(frozen=True)
class TestRunResult:
    """Final outcome of one orchestration call.

    Attributes:
        passed: Final verdict.
        job_id: Job id of the initial run.
        rerun_count: Number of reruns that were started.
        stage_timeline: Structured stage events in emission order.
    """

    __test__ = False

    passed: bool
    job_id: str
    rerun_count: int = 0
    stage_timeline: list[dict[str, Any]] = field(default_factory=list)
