"""ATS web service adapter implementation for job trigger, status and rerun calls."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import random
import time
from typing import Callable

from ats_runner.domain import JobHandle, JobTrigger, RerunRequest, RunStatus

from .ats_errors import AtsTransportError
from .ats_wire_codec import (
    AtsOperation,
    codec_build_request,
    codec_parse_job_handle,
    codec_parse_run_status,
)
from .interfaces import AtsServicePort, AtsTransportPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _TransportRetryStrategy:
    """Immutable transport retry config and calculation helpers.

    Attributes:
        retry_attempts: Total delivery attempts per call; 1 disables retrying.
        backoff_base_seconds: Base delay for exponential backoff.
        max_backoff_seconds: Exponential delay cap before jitter.
        jitter_min_multiplier: Minimum jitter multiplier.
        jitter_max_multiplier: Maximum jitter multiplier.
        random_unit_interval_provider: Provider returning value in [0.0, 1.0].
    """

    retry_attempts: int
    backoff_base_seconds: float
    max_backoff_seconds: float
    jitter_min_multiplier: float
    jitter_max_multiplier: float
    random_unit_interval_provider: Callable[[], float]

    def strategy_calculate_retry_wait_seconds(self, retry_index: int) -> float:
        """Calculate exponential retry wait with cap and jitter.

        Args:
            retry_index: Zero-based retry index.

        Returns:
            float: Wait seconds before the retry.

        Raises:
            ValueError: Raised when retry index is negative.
            RuntimeError: Raised when jitter provider returns out-of-range value.
        """

        if retry_index < 0:
            raise ValueError("retry_index must be >= 0")

        backoff_seconds = self.backoff_base_seconds * (2**retry_index)
        capped_backoff_seconds = min(backoff_seconds, self.max_backoff_seconds)
        return capped_backoff_seconds * self.strategy_calculate_jitter_multiplier()

    def strategy_calculate_jitter_multiplier(self) -> float:
        """Return jitter multiplier using configured min/max bounds.

        Raises:
            RuntimeError: Raised when jitter source returns value outside [0.0, 1.0].
        """

        random_ratio = float(self.random_unit_interval_provider())
        if random_ratio < 0.0 or random_ratio > 1.0:
            raise RuntimeError("random_unit_interval_provider must return a value in [0.0, 1.0]")

        jitter_span = self.jitter_max_multiplier - self.jitter_min_multiplier
        return self.jitter_min_multiplier + (random_ratio * jitter_span)


class AtsWebServiceAdapter(AtsServicePort):
    """Adapter for the ATS `RunJob`, `GetJobStatus` and `RerunNotPassed` operations."""

    def __init__(
        self,
        trigger: JobTrigger,
        transport: AtsTransportPort,
        escape_values: bool = True,
        transport_retry_attempts: int = 1,
        transport_backoff_base_seconds: float = 2.0,
        transport_backoff_max_seconds: float = 30.0,
        jitter_min_multiplier: float = 0.5,
        jitter_max_multiplier: float = 1.5,
        random_unit_interval_provider: Callable[[], float] | None = None,
        sleep_provider: Callable[[float], None] | None = None,
    ):
        """Initialize ATS web service adapter.

        Args:
            trigger: Application credentials, job template and service base URL.
            transport: Transport used to deliver request bodies.
            escape_values: Whether request parameter values are XML-escaped.
            transport_retry_attempts: Delivery attempts per call; 1 means transport failures are fatal at once.
            transport_backoff_base_seconds: Base delay between delivery attempts.
            transport_backoff_max_seconds: Delay cap before jitter.
            jitter_min_multiplier: Minimum jitter multiplier.
            jitter_max_multiplier: Maximum jitter multiplier.
            random_unit_interval_provider: Optional provider returning random values in [0.0, 1.0].
            sleep_provider: Optional sleep function used between delivery attempts.

        Raises:
            ValueError: Raised when retry config values are invalid.
        """

        if transport is None:
            raise ValueError("transport must not be None")
        if transport_retry_attempts < 1:
            raise ValueError("transport_retry_attempts must be >= 1")
        if transport_backoff_base_seconds < 0:
            raise ValueError("transport_backoff_base_seconds must be >= 0")
        if transport_backoff_max_seconds <= 0:
            raise ValueError("transport_backoff_max_seconds must be > 0")
        if jitter_min_multiplier <= 0:
            raise ValueError("jitter_min_multiplier must be > 0")
        if jitter_max_multiplier < jitter_min_multiplier:
            raise ValueError("jitter_max_multiplier must be >= jitter_min_multiplier")

        self._trigger = trigger
        self._transport = transport
        self._escape_values = escape_values
        self._base_url = trigger.base_url.strip().rstrip("/")
        self._retry_strategy = _TransportRetryStrategy(
            retry_attempts=transport_retry_attempts,
            backoff_base_seconds=transport_backoff_base_seconds,
            max_backoff_seconds=transport_backoff_max_seconds,
            jitter_min_multiplier=jitter_min_multiplier,
            jitter_max_multiplier=jitter_max_multiplier,
            random_unit_interval_provider=random_unit_interval_provider or random.random,
        )
        self._sleep_provider = sleep_provider or time.sleep

    def adapter_operation_url(self, operation: AtsOperation) -> str:
        """Return endpoint URL for one ATS operation.

        Args:
            operation: ATS operation.

        Returns:
            str: `{base_url}/ws/{operation}`.
        """

        return f"{self._base_url}/ws/{operation.value}"

    def adapter_run_job(self) -> JobHandle:
        """Trigger the configured job template.

        Returns:
            JobHandle: Started handle with the new job id, or a rejected handle with the remote error.

        Raises:
            AtsTransportError: Raised when the request could not be delivered.
        """

        request_body = codec_build_request(
            AtsOperation.RUN_JOB,
            {
                "AppAPIToken": self._trigger.api_token,
                "AppId": self._trigger.app_id,
                "JobTemplateID": self._trigger.job_template_id,
            },
            escape_values=self._escape_values,
        )
        response_body = self._adapter_post(AtsOperation.RUN_JOB, request_body)
        return codec_parse_job_handle(response_body)

    def adapter_get_job_status(self, job_id: str) -> RunStatus:
        """Query execution status of one job.

        Args:
            job_id: ATS job id.

        Returns:
            RunStatus: Done and passed flags plus any remote error message.

        Raises:
            AtsTransportError: Raised when the request could not be delivered.
        """

        request_body = codec_build_request(
            AtsOperation.GET_JOB_STATUS,
            {
                "AppAPIToken": self._trigger.api_token,
                "JobID": job_id,
                "AppId": self._trigger.app_id,
            },
            escape_values=self._escape_values,
        )
        response_body = self._adapter_post(AtsOperation.GET_JOB_STATUS, request_body)
        return codec_parse_run_status(response_body)

    def adapter_rerun_not_passed(self, request: RerunRequest) -> JobHandle:
        """Start a rerun of the not-passed test cases of a finished job.

        Args:
            request: Rerun request naming the finished job.

        Returns:
            JobHandle: Started handle with the rerun job id, or a rejected handle with the remote error.

        Raises:
            AtsTransportError: Raised when the request could not be delivered.
        """

        request_body = codec_build_request(
            AtsOperation.RERUN_NOT_PASSED,
            {
                "AppAPIToken": self._trigger.api_token,
                "AppId": self._trigger.app_id,
                "FinishedJobID": request.finished_job_id,
            },
            escape_values=self._escape_values,
        )
        response_body = self._adapter_post(AtsOperation.RERUN_NOT_PASSED, request_body)
        return codec_parse_job_handle(response_body)

    def _adapter_post(self, operation: AtsOperation, request_body: str) -> str:
        """Deliver one request body, retrying transport failures when configured.

        Args:
            operation: ATS operation being called.
            request_body: Encoded request body.

        Returns:
            str: Raw response body.

        Raises:
            AtsTransportError: Raised when every delivery attempt failed.
        """

        url = self.adapter_operation_url(operation)
        retry_attempts = self._retry_strategy.retry_attempts
        for attempt_index in range(retry_attempts):
            try:
                return self._transport.transport_post(url, request_body)
            except AtsTransportError as error:
                if attempt_index + 1 >= retry_attempts:
                    raise
                wait_seconds = self._retry_strategy.strategy_calculate_retry_wait_seconds(retry_index=attempt_index)
                logger.warning(
                    "ATS %s delivery attempt %d/%d failed: %s; retrying in %.1fs",
                    operation.value,
                    attempt_index + 1,
                    retry_attempts,
                    error,
                    wait_seconds,
                )
                self._sleep_provider(wait_seconds)

        raise AtsTransportError(f"ATS {operation.value} was not attempted")
