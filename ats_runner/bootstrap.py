"""Application bootstrap wiring for settings validation and dependency assembly."""

from __future__ import annotations

from typing import Callable

from ats_runner.adapters import AtsHttpTransport, AtsTransportPort, AtsWebServiceAdapter
from ats_runner.config import AtsSettings, config_load_settings
from ats_runner.domain import JobTrigger
from ats_runner.jobs import (
    CancellableSleeper,
    JobStatusPoller,
    PollSchedule,
    PollSleeperPort,
    PollTier,
    TestRunOrchestrator,
    TestRunOrchestratorConfig,
)


def bootstrap_create_poll_schedule(settings: AtsSettings) -> PollSchedule:
    """Build the tiered poll schedule from settings.

    Args:
        settings: Validated settings.

    Returns:
        PollSchedule: Schedule with configured tiers and attempt cap.
    """

    return PollSchedule(
        initial_wait_seconds=settings.ats_poll_initial_wait_seconds,
        max_attempts=settings.ats_poll_max_attempts,
        tiers=(
            PollTier(start_index=0, wait_seconds=settings.ats_poll_first_tier_seconds),
            PollTier(
                start_index=settings.ats_poll_second_tier_start_index,
                wait_seconds=settings.ats_poll_second_tier_seconds,
            ),
            PollTier(
                start_index=settings.ats_poll_third_tier_start_index,
                wait_seconds=settings.ats_poll_third_tier_seconds,
            ),
        ),
    )


def bootstrap_create_orchestrator(
    settings: AtsSettings,
    log_sink: Callable[[str], None] | None = None,
    sleeper: PollSleeperPort | None = None,
    transport: AtsTransportPort | None = None,
) -> TestRunOrchestrator:
    """Assemble a fully wired test-run orchestrator.

    Args:
        settings: Validated settings.
        log_sink: Optional line sink for progress lines.
        sleeper: Optional sleeper; defaults to a fresh cancellable sleeper.
        transport: Optional transport; defaults to the httpx transport.

    Returns:
        TestRunOrchestrator: Orchestrator for exactly one run.
    """

    resolved_sleeper = sleeper or CancellableSleeper()
    service = AtsWebServiceAdapter(
        trigger=JobTrigger(
            app_id=settings.ats_app_id,
            api_token=settings.ats_api_token,
            job_template_id=settings.ats_job_template_id,
            base_url=settings.ats_base_url,
        ),
        transport=transport or AtsHttpTransport(request_timeout_seconds=settings.ats_request_timeout_seconds),
        escape_values=settings.ats_escape_request_values,
        transport_retry_attempts=settings.ats_transport_retry_attempts,
        transport_backoff_base_seconds=settings.ats_transport_backoff_base_seconds,
        transport_backoff_max_seconds=settings.ats_transport_backoff_max_seconds,
        sleep_provider=resolved_sleeper.sleeper_sleep,
    )
    poller = JobStatusPoller(
        service=service,
        sleeper=resolved_sleeper,
        schedule=bootstrap_create_poll_schedule(settings),
        skip_trailing_sleep=settings.ats_poll_skip_trailing_sleep,
    )
    return TestRunOrchestrator(
        service=service,
        poller=poller,
        config=TestRunOrchestratorConfig(
            job_template_id=settings.ats_job_template_id,
            rerun_automatically=settings.ats_rerun_automatically,
        ),
        log_sink=log_sink,
    )


def run_test_and_get_result(
    app_id: str,
    api_token: str,
    job_template_id: str,
    rerun: bool,
    base_url: str,
    log_sink: Callable[[str], None] | None = print,
    sleeper: PollSleeperPort | None = None,
    transport: AtsTransportPort | None = None,
) -> bool:
    """Run one ATS job template and return whether all tests passed.

    Poll tiers and transport settings not passed here come from the environment.

    Args:
        app_id: ATS application identifier.
        api_token: ATS application API token.
        job_template_id: ATS job template identifier.
        rerun: Whether not-passed test cases are rerun automatically up to twice.
        base_url: ATS service base URL.
        log_sink: Line sink for progress lines; defaults to stdout.
        sleeper: Optional sleeper, e.g. a `CancellableSleeper` the caller can cancel.
        transport: Optional transport override.

    Returns:
        bool: True when the final verdict is passed.

    Raises:
        SettingsLoadError: Raised when inputs fail validation.
        AtsAdapterError: Raised when no verdict could be determined.
    """

    settings = config_load_settings(
        ats_app_id=app_id,
        ats_api_token=api_token,
        ats_job_template_id=job_template_id,
        ats_rerun_automatically=rerun,
        ats_base_url=base_url,
    )
    orchestrator = bootstrap_create_orchestrator(
        settings=settings,
        log_sink=log_sink,
        sleeper=sleeper,
        transport=transport,
    )
    return orchestrator.job_run_tests().passed
