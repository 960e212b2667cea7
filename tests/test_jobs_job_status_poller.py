"""Regression tests for bounded tiered job status polling."""

from __future__ import annotations

import threading

import pytest

from ats_runner.adapters import AtsRunCancelledError, AtsTransportError
from ats_runner.domain import RunStatus
from ats_runner.jobs import CancellableSleeper, JobStatusPoller, PollSchedule, PollTier


class _StatusServiceStub:
    """Service stub replaying status snapshots; the last snapshot repeats forever."""

    def __init__(self, statuses: list[object]):
        self._statuses = list(statuses)
        self.status_queries: list[str] = []

    def adapter_get_job_status(self, job_id: str) -> RunStatus:
        self.status_queries.append(job_id)
        status = self._statuses.pop(0) if len(self._statuses) > 1 else self._statuses[0]
        if isinstance(status, Exception):
            raise status
        return status


class _RecordingSleeper:
    """Sleeper that records requested waits instead of sleeping."""

    def __init__(self):
        self.sleep_calls: list[float] = []

    def sleeper_sleep(self, seconds: float) -> None:
        self.sleep_calls.append(seconds)


_RUNNING = RunStatus(done=False)
_DONE_PASSED = RunStatus(done=True, passed=True)
_DONE_FAILED = RunStatus(done=True, passed=False)


def test_jobs_poller_sleeps_initial_delay_then_tier_wait_after_completing_attempt() -> None:
    """Wait 3s first, then the tier wait after every query including the completing one.

    Returns:
        None: Assertions validate sleep sequence and returned status.

    Raises:
        AssertionError: Raised when the trailing sleep is skipped or the order drifts.
    """

    service = _StatusServiceStub([_RUNNING, _RUNNING, _DONE_FAILED])
    sleeper = _RecordingSleeper()
    poller = JobStatusPoller(service=service, sleeper=sleeper)

    run_status = poller.job_poll_until_done("J1")

    assert run_status == _DONE_FAILED
    assert service.status_queries == ["J1", "J1", "J1"]
    assert sleeper.sleep_calls == [3.0, 15.0, 15.0, 15.0]


def test_jobs_poller_skip_trailing_sleep_returns_immediately_on_done() -> None:
    """Return without the trailing wait when configured to skip it."""

    service = _StatusServiceStub([_RUNNING, _DONE_PASSED])
    sleeper = _RecordingSleeper()
    poller = JobStatusPoller(service=service, sleeper=sleeper, skip_trailing_sleep=True)

    run_status = poller.job_poll_until_done("J1")

    assert run_status == _DONE_PASSED
    assert sleeper.sleep_calls == [3.0, 15.0]


def test_jobs_poller_exhausted_budget_returns_none_not_last_status() -> None:
    """Return the timed-out sentinel after 350 not-done queries with the full tiered schedule.

    Returns:
        None: Assertions validate attempt cap and schedule consumption.

    Raises:
        AssertionError: Raised when the budget or sentinel behavior drifts.
    """

    service = _StatusServiceStub([_RUNNING])
    sleeper = _RecordingSleeper()
    poller = JobStatusPoller(service=service, sleeper=sleeper)

    run_status = poller.job_poll_until_done("J1")

    assert run_status is None
    assert len(service.status_queries) == 350
    assert sleeper.sleep_calls == [3.0] + [15.0] * 41 + [30.0] * 40 + [60.0] * 269


def test_jobs_poller_done_on_late_attempt_uses_that_attempt_tier() -> None:
    """Apply the 30s tier to the completing attempt at index 41."""

    service = _StatusServiceStub([_RUNNING] * 41 + [_DONE_PASSED])
    sleeper = _RecordingSleeper()
    poller = JobStatusPoller(service=service, sleeper=sleeper)

    run_status = poller.job_poll_until_done("J1")

    assert run_status == _DONE_PASSED
    assert len(service.status_queries) == 42
    assert sleeper.sleep_calls[-1] == 30.0


def test_jobs_poller_respects_custom_schedule() -> None:
    """Use configured attempt cap instead of the default budget."""

    service = _StatusServiceStub([_RUNNING])
    sleeper = _RecordingSleeper()
    poller = JobStatusPoller(
        service=service,
        sleeper=sleeper,
        schedule=PollSchedule(initial_wait_seconds=0, max_attempts=3),
    )

    assert poller.job_poll_until_done("J1") is None
    assert len(service.status_queries) == 3
    assert sleeper.sleep_calls == [0, 15.0, 15.0, 15.0]


def test_jobs_poller_transport_error_propagates() -> None:
    """Propagate transport failures from status queries without retrying."""

    service = _StatusServiceStub([AtsTransportError("connection refused")])
    poller = JobStatusPoller(service=service, sleeper=_RecordingSleeper())

    with pytest.raises(AtsTransportError):
        poller.job_poll_until_done("J1")
    assert len(service.status_queries) == 1


def test_jobs_poller_cancellation_during_wait_aborts_loop() -> None:
    """Abort the loop at the next wait once cancellation is requested.

    Returns:
        None: Assertions validate prompt unwinding.

    Raises:
        AssertionError: Raised when polling continues after cancellation.
    """

    cancel_event = threading.Event()
    sleeper = CancellableSleeper(cancel_event=cancel_event)

    class _CancellingService(_StatusServiceStub):
        def adapter_get_job_status(self, job_id: str) -> RunStatus:
            status = super().adapter_get_job_status(job_id)
            if len(self.status_queries) == 2:
                cancel_event.set()
            return status

    service = _CancellingService([_RUNNING])
    poller = JobStatusPoller(
        service=service,
        sleeper=sleeper,
        schedule=PollSchedule(initial_wait_seconds=0, max_attempts=10, tiers=(PollTier(0, 0.0),)),
    )

    with pytest.raises(AtsRunCancelledError):
        poller.job_poll_until_done("J1")
    assert len(service.status_queries) == 2


def test_jobs_cancellable_sleeper_returns_when_not_cancelled_and_raises_when_cancelled() -> None:
    """Return after a zero wait, and raise once the event is set."""

    sleeper = CancellableSleeper()

    sleeper.sleeper_sleep(0)
    assert sleeper.sleeper_is_cancelled() is False

    sleeper.sleeper_cancel()
    with pytest.raises(AtsRunCancelledError, match="cancelled"):
        sleeper.sleeper_sleep(60)
