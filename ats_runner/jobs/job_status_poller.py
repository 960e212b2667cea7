"""Bounded tiered polling of ATS job status."""

from __future__ import annotations

import logging

from ats_runner.adapters import AtsServicePort
from ats_runner.domain import RunStatus

from .interfaces import JobStatusPollerPort, PollSleeperPort
from .poll_schedule import PollSchedule

logger = logging.getLogger(__name__)


class JobStatusPoller(JobStatusPollerPort):
    """Turn single GetJobStatus queries into a bounded polling loop."""

    def __init__(
        self,
        service: AtsServicePort,
        sleeper: PollSleeperPort,
        schedule: PollSchedule | None = None,
        skip_trailing_sleep: bool = False,
    ):
        """Initialize poller.

        Args:
            service: ATS service adapter used for status queries.
            sleeper: Suspension point used for every wait.
            schedule: Tiered wait schedule; defaults to the 3s/15s/30s/60s schedule with 350 attempts.
            skip_trailing_sleep: Return as soon as Done is observed instead of sleeping out that attempt's wait.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if service is None:
            raise ValueError("service must not be None")
        if sleeper is None:
            raise ValueError("sleeper must not be None")

        self._service = service
        self._sleeper = sleeper
        self._schedule = schedule or PollSchedule()
        self._skip_trailing_sleep = skip_trailing_sleep

    @property
    def schedule(self) -> PollSchedule:
        """Return the wait schedule used by this poller.

        Returns:
            PollSchedule: Initial delay, attempt cap and tiers.
        """

        return self._schedule

    def job_poll_until_done(self, job_id: str) -> RunStatus | None:
        """Poll job status until Done or until the attempt budget is exhausted.

        Each attempt queries status, then sleeps the tier wait for that attempt,
        then stops if the status was Done.

        Args:
            job_id: ATS job id.

        Returns:
            RunStatus | None: First Done status, or None when every attempt reported not Done.

        Raises:
            AtsTransportError: Raised when a status query could not be delivered.
            AtsRunCancelledError: Raised when cancellation is observed during a wait.
        """

        self._sleeper.sleeper_sleep(self._schedule.initial_wait_seconds)

        for attempt_index in range(self._schedule.max_attempts):
            run_status = self._service.adapter_get_job_status(job_id)
            wait_seconds = self._schedule.schedule_wait_seconds(attempt_index)
            logger.debug(
                "ATS job status job_id=%s attempt=%d done=%s passed=%s error=%s",
                job_id,
                attempt_index + 1,
                run_status.done,
                run_status.passed,
                run_status.error_message,
            )

            if run_status.done and self._skip_trailing_sleep:
                return run_status

            self._sleeper.sleeper_sleep(wait_seconds)

            if run_status.done:
                return run_status

        logger.warning(
            "ATS job %s did not report Done after %d status queries",
            job_id,
            self._schedule.max_attempts,
        )
        return None
