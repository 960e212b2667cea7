"""Job-layer test-run orchestrator: trigger, poll and sequential reruns."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Callable, Final

from ats_runner.adapters import (
    AtsAdapterError,
    AtsPollTimeoutError,
    AtsRerunStartError,
    AtsRerunTimeoutError,
    AtsServicePort,
    AtsStartError,
)
from ats_runner.domain import (
    RerunRequest,
    RunStage,
    RunStatus,
    StageStatus,
    TestRunResult,
    domain_build_stage_event,
)

from .interfaces import JobStatusPollerPort, TestRunOrchestratorPort

logger = logging.getLogger(__name__)

MAX_RERUN_ATTEMPTS: Final[int] = 2


class OrchestrationState(str, Enum):
    """States of one orchestration call."""

    IDLE = "idle"
    TRIGGERING = "triggering"
    POLLING = "polling"
    RERUNNING = "rerunning"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


TERMINAL_STATES: Final[frozenset[OrchestrationState]] = frozenset(
    {OrchestrationState.PASSED, OrchestrationState.FAILED, OrchestrationState.ERROR}
)


@dataclass(frozen=True)
class AttemptOutcome:
    """Completed outcome of the initial run (index 0) or of rerun N (index N).

    Attributes:
        attempt_index: 0 for the initial run, otherwise the rerun number.
        job_id: Job id of the attempt.
        passed: Whether the attempt completed with all tests passed.
    """

    attempt_index: int
    job_id: str
    passed: bool


def job_next_state(outcome: AttemptOutcome, rerun_enabled: bool) -> OrchestrationState:
    """Return the state that follows one completed attempt.

    A passed initial run is final. A failed initial run is final unless reruns
    are enabled. A failed rerun is always final; a passed rerun leads to the
    next rerun until the last one, whose outcome is the verdict.

    Args:
        outcome: Completed attempt outcome.
        rerun_enabled: Whether failing test cases are rerun automatically.

    Returns:
        OrchestrationState: PASSED, FAILED or RERUNNING.
    """

    if outcome.attempt_index == 0:
        if outcome.passed:
            return OrchestrationState.PASSED
        return OrchestrationState.RERUNNING if rerun_enabled else OrchestrationState.FAILED

    if not outcome.passed:
        return OrchestrationState.FAILED
    if outcome.attempt_index < MAX_RERUN_ATTEMPTS:
        return OrchestrationState.RERUNNING
    return OrchestrationState.PASSED


@dataclass(frozen=True)
class TestRunOrchestratorConfig:
    """Configuration values for one orchestration call.

    Attributes:
        job_template_id: ATS job template being run; used for progress lines.
        rerun_automatically: Whether not-passed test cases are rerun up to twice.
    """

    __test__ = False

    job_template_id: str
    rerun_automatically: bool = False


class TestRunOrchestrator(TestRunOrchestratorPort):
    """Drive trigger, poll and optional reruns to a boolean verdict.

    Every state transition emits exactly one progress line to the line sink,
    in order. Fatal conditions emit one explanatory line and then propagate.
    """

    __test__ = False

    def __init__(
        self,
        service: AtsServicePort,
        poller: JobStatusPollerPort,
        config: TestRunOrchestratorConfig,
        log_sink: Callable[[str], None] | None = None,
    ):
        """Initialize orchestrator dependencies.

        Args:
            service: ATS service adapter.
            poller: Job status poller.
            config: Orchestration configuration.
            log_sink: Optional line-oriented sink for human-readable progress lines.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if service is None:
            raise ValueError("service must not be None")
        if poller is None:
            raise ValueError("poller must not be None")
        if not config.job_template_id.strip():
            raise ValueError("config.job_template_id must not be blank")

        self._service = service
        self._poller = poller
        self._config = config
        self._log_sink = log_sink
        self._state = OrchestrationState.IDLE

    @property
    def state(self) -> OrchestrationState:
        """Return the current orchestration state.

        Returns:
            OrchestrationState: `IDLE` before a run, a terminal state after one.
        """

        return self._state

    def job_run_tests(self) -> TestRunResult:
        """Run the configured job template and return the final verdict.

        Returns:
            TestRunResult: Verdict, initial job id, rerun count and stage timeline.

        Raises:
            AtsStartError: Raised when ATS rejected the trigger or a rerun.
            AtsPollTimeoutError: Raised when a job did not report Done within the poll budget.
            AtsTransportError: Raised when ATS could not be reached.
            AtsRunCancelledError: Raised when the run was cancelled while waiting.
        """

        timeline: list[dict[str, object]] = []
        self._state = OrchestrationState.IDLE
        try:
            return self._job_run_state_machine(timeline)
        except AtsAdapterError as error:
            self._state = OrchestrationState.ERROR
            timeline.append(
                domain_build_stage_event(
                    stage=RunStage.RUN,
                    status=StageStatus.ERROR,
                    job_id=error.job_id,
                    details={"error_type": type(error).__name__, "error_message": str(error)},
                )
            )
            self._job_log(f"ATS:   ERROR: {error}")
            raise

    def _job_run_state_machine(self, timeline: list[dict[str, object]]) -> TestRunResult:
        self._state = OrchestrationState.TRIGGERING
        self._job_log(f"ATS: running tests for template |{self._config.job_template_id}|")
        timeline.append(domain_build_stage_event(stage=RunStage.TRIGGER, status=StageStatus.STARTED))

        handle = self._service.adapter_run_job()
        if not handle.started:
            raise AtsStartError(
                f"Error while trying to start tests: {handle.error_message}",
                remote_message=handle.error_message,
            )
        finished_job_id = str(handle.job_id)
        timeline.append(domain_build_stage_event(stage=RunStage.TRIGGER, status=StageStatus.COMPLETED, job_id=finished_job_id))
        self._job_log(f"ATS:   tests started with job id: |{finished_job_id}|")

        attempt_index = 0
        current_job_id = finished_job_id
        while True:
            run_status = self._job_await_completion(current_job_id, attempt_index, timeline)
            outcome = AttemptOutcome(attempt_index=attempt_index, job_id=current_job_id, passed=run_status.passed)
            if attempt_index > 0:
                self._job_log(f"ATS:      rerun {attempt_index} is {'' if outcome.passed else 'NOT '}passed.")

            next_state = job_next_state(outcome, rerun_enabled=self._config.rerun_automatically)
            if next_state in TERMINAL_STATES:
                break

            if attempt_index == 0:
                self._job_log(
                    "ATS:   not all tests passed. not passing test cases will be rerun automatically "
                    f"up to {MAX_RERUN_ATTEMPTS} times."
                )
            attempt_index += 1
            self._state = OrchestrationState.RERUNNING
            current_job_id = self._job_start_rerun(RerunRequest(finished_job_id=finished_job_id), attempt_index, timeline)

        self._state = next_state
        verdict = next_state is OrchestrationState.PASSED
        timeline.append(
            domain_build_stage_event(
                stage=RunStage.RUN,
                status=StageStatus.PASSED if verdict else StageStatus.FAILED,
                job_id=finished_job_id,
                details={"rerun_count": attempt_index},
            )
        )
        self._job_log("ATS: tests passed." if verdict else "ATS: tests failed.")
        return TestRunResult(
            passed=verdict,
            job_id=finished_job_id,
            rerun_count=attempt_index,
            stage_timeline=timeline,
        )

    def _job_start_rerun(
        self,
        request: RerunRequest,
        rerun_index: int,
        timeline: list[dict[str, object]],
    ) -> str:
        """Issue one rerun and return the new job id.

        Raises:
            AtsRerunStartError: Raised when ATS rejected the rerun.
        """

        timeline.append(
            domain_build_stage_event(
                stage=RunStage.RERUN,
                status=StageStatus.STARTED,
                job_id=request.finished_job_id,
                rerun_index=rerun_index,
            )
        )
        rerun_handle = self._service.adapter_rerun_not_passed(request)
        if not rerun_handle.started:
            raise AtsRerunStartError(
                f"Rerun {rerun_index} failed to start. {rerun_handle.error_message}",
                rerun_index=rerun_index,
                remote_message=rerun_handle.error_message,
                job_id=request.finished_job_id,
            )
        rerun_job_id = str(rerun_handle.job_id)
        timeline.append(
            domain_build_stage_event(
                stage=RunStage.RERUN,
                status=StageStatus.COMPLETED,
                job_id=rerun_job_id,
                rerun_index=rerun_index,
            )
        )
        self._job_log(f"ATS:      rerun {rerun_index} successfully started with id: |{rerun_job_id}|")
        return rerun_job_id

    def _job_await_completion(
        self,
        job_id: str,
        attempt_index: int,
        timeline: list[dict[str, object]],
    ) -> RunStatus:
        """Poll one job to completion.

        Raises:
            AtsPollTimeoutError: Raised when the initial run timed out.
            AtsRerunTimeoutError: Raised when a rerun timed out.
        """

        self._state = OrchestrationState.POLLING
        rerun_index = attempt_index or None
        timeline.append(
            domain_build_stage_event(
                stage=RunStage.POLL,
                status=StageStatus.STARTED,
                job_id=job_id,
                rerun_index=rerun_index,
            )
        )
        run_status = self._poller.job_poll_until_done(job_id)
        if run_status is None or not run_status.done:
            if attempt_index == 0:
                raise AtsPollTimeoutError(
                    f"Timed out while waiting for test result for job |{job_id}|",
                    job_id=job_id,
                )
            raise AtsRerunTimeoutError(
                f"Rerun {attempt_index} timed out while waiting for test result for job |{job_id}|",
                rerun_index=attempt_index,
                job_id=job_id,
            )
        timeline.append(
            domain_build_stage_event(
                stage=RunStage.POLL,
                status=StageStatus.COMPLETED,
                job_id=job_id,
                rerun_index=rerun_index,
                details={"passed": run_status.passed},
            )
        )
        return run_status

    def _job_log(self, message: str) -> None:
        logger.info(message)
        if self._log_sink is not None:
            self._log_sink(message)
