"""Cancellable sleeping used at every orchestration suspension point."""

from __future__ import annotations

import threading

from ats_runner.adapters import AtsRunCancelledError

from .interfaces import PollSleeperPort


class CancellableSleeper(PollSleeperPort):
    """Sleeper backed by a `threading.Event`; setting the event aborts any wait."""

    def __init__(self, cancel_event: threading.Event | None = None):
        self._cancel_event = cancel_event or threading.Event()

    def sleeper_sleep(self, seconds: float) -> None:
        """Wait for `seconds` unless cancellation is requested first.

        Args:
            seconds: Wait duration in seconds.

        Raises:
            AtsRunCancelledError: Raised when the cancel event is set before or during the wait.
        """

        if self._cancel_event.wait(timeout=max(0.0, float(seconds))):
            raise AtsRunCancelledError("ATS orchestration cancelled while waiting for job status")

    def sleeper_cancel(self) -> None:
        """Request cancellation of the current and every later wait."""

        self._cancel_event.set()

    def sleeper_is_cancelled(self) -> bool:
        """Return whether cancellation has been requested.

        Returns:
            bool: True once `sleeper_cancel` was called.
        """

        return self._cancel_event.is_set()
