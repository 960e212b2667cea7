"""Typed interfaces for adapter-layer responsibilities."""

from typing import Protocol

from ats_runner.domain import JobHandle, RerunRequest, RunStatus


class AtsTransportPort(Protocol):
    """Port definition for posting request bodies to ATS endpoints."""

    def transport_post(self, url: str, body: str) -> str:
        """Send one request body and return the raw response body.

        Args:
            url: Absolute endpoint URL.
            body: Request body.

        Returns:
            str: Raw response body.

        Raises:
            AtsTransportError: Raised on network, I/O or non-200 HTTP failures.
        """


class AtsServicePort(Protocol):
    """Port definition for the three ATS web service operations."""

    def adapter_run_job(self) -> JobHandle:
        """Start one job from the configured job template.

        Returns:
            JobHandle: Started or rejected handle.

        Raises:
            AtsTransportError: Raised when the request could not be delivered.
        """

    def adapter_get_job_status(self, job_id: str) -> RunStatus:
        """Query execution status of one job.

        Args:
            job_id: ATS job id.

        Returns:
            RunStatus: Parsed job status.

        Raises:
            AtsTransportError: Raised when the request could not be delivered.
        """

    def adapter_rerun_not_passed(self, request: RerunRequest) -> JobHandle:
        """Rerun the not-passed test cases of a finished job.

        Args:
            request: Rerun request carrying the finished job id.

        Returns:
            JobHandle: Started or rejected handle for the rerun job.

        Raises:
            AtsTransportError: Raised when the request could not be delivered.
        """
