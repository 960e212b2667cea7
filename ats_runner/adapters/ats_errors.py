"""Project-native typed exceptions for ATS orchestration failures."""

from __future__ import annotations


class AtsAdapterError(Exception):
    """Base exception for fatal ATS orchestration failures.

    A failed test verdict is never represented by this hierarchy; only
    conditions where no verdict could be determined are.

    Attributes:
        job_id: Optional ATS job id the failure relates to.
    """

    def __init__(self, message: str, job_id: str | None = None):
        super().__init__(message)
        self.job_id = job_id


class AtsTransportError(AtsAdapterError, ConnectionError):
    """Network or HTTP failure while talking to the ATS web service."""


class AtsStartError(AtsAdapterError, RuntimeError):
    """ATS rejected a trigger request and reported an error message.

    Attributes:
        remote_message: Error message supplied by the remote service.
    """

    def __init__(self, message: str, remote_message: str | None = None, job_id: str | None = None):
        super().__init__(message=message, job_id=job_id)
        self.remote_message = remote_message


class AtsRerunStartError(AtsStartError):
    """ATS rejected a rerun request for a finished job."""

    def __init__(
        self,
        message: str,
        rerun_index: int,
        remote_message: str | None = None,
        job_id: str | None = None,
    ):
        super().__init__(message=message, remote_message=remote_message, job_id=job_id)
        self.rerun_index = rerun_index


class AtsPollTimeoutError(AtsAdapterError, TimeoutError):
    """Status polling exhausted its attempt budget without the job reporting Done."""


class AtsRerunTimeoutError(AtsPollTimeoutError):
    """Status polling for a rerun exhausted its attempt budget."""

    def __init__(self, message: str, rerun_index: int, job_id: str | None = None):
        super().__init__(message=message, job_id=job_id)
        self.rerun_index = rerun_index


class AtsRunCancelledError(AtsAdapterError):
    """Orchestration was cancelled while waiting between status polls."""
