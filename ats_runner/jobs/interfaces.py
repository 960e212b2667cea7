"""Typed interfaces for job-layer orchestration responsibilities."""

from typing import Protocol

from ats_runner.domain import RunStatus, TestRunResult


class PollSleeperPort(Protocol):
    """Port definition for the suspension points between status polls."""

    def sleeper_sleep(self, seconds: float) -> None:
        """Suspend the caller for the given duration.

        Args:
            seconds: Wait duration in seconds.

        Raises:
            AtsRunCancelledError: Raised when cancellation is observed while waiting.
        """


class JobStatusPollerPort(Protocol):
    """Port definition for polling one ATS job until it reports completion."""

    def job_poll_until_done(self, job_id: str) -> RunStatus | None:
        """Poll job status until Done or until the attempt budget is exhausted.

        Args:
            job_id: ATS job id.

        Returns:
            RunStatus | None: Completed status, or None when polling timed out.
        """


class TestRunOrchestratorPort(Protocol):
    """Port definition for driving one test run to a final verdict."""

    def job_run_tests(self) -> TestRunResult:
        """Trigger, poll and optionally rerun until a verdict is known.

        Returns:
            TestRunResult: Final verdict with structured stage timeline.

        Raises:
            AtsAdapterError: Raised when no verdict could be determined.
        """
