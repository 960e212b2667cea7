"""Stage timeline events recorded while orchestrating one ATS test run."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Final


class RunStage(str, Enum):
    """Orchestration stages that emit timeline events."""

    TRIGGER = "trigger"
    POLL = "poll"
    RERUN = "rerun"
    RUN = "run"


class StageStatus(str, Enum):
    """Status markers attached to a stage event."""

    STARTED = "started"
    COMPLETED = "completed"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


_STAGE_STATUSES: Final[dict[RunStage, frozenset[StageStatus]]] = {
    RunStage.TRIGGER: frozenset({StageStatus.STARTED, StageStatus.COMPLETED}),
    RunStage.POLL: frozenset({StageStatus.STARTED, StageStatus.COMPLETED}),
    RunStage.RERUN: frozenset({StageStatus.STARTED, StageStatus.COMPLETED}),
    RunStage.RUN: frozenset({StageStatus.PASSED, StageStatus.FAILED, StageStatus.ERROR}),
}


def domain_build_stage_event(
    stage: RunStage,
    status: StageStatus,
    job_id: str | None = None,
    rerun_index: int | None = None,
    details: dict[str, Any] | None = None,
    clock: Callable[[], datetime] | None = None,
) -> dict[str, object]:
    """Build one structured timeline event for an orchestration stage.

    Per-stage (trigger, poll, rerun) events report `started`/`completed`; the
    closing `run` event reports the verdict or `error`.

    Args:
        stage: Orchestration stage.
        status: Stage status marker allowed for that stage.
        job_id: ATS job id the event refers to, when known.
        rerun_index: Rerun number (1-based) when the event belongs to a rerun.
        details: Optional extra structured details.
        clock: Optional provider of the event timestamp; defaults to current UTC time.

    Returns:
        dict[str, object]: Structured timeline event.

    Raises:
        ValueError: Raised when status does not belong to stage or rerun index is not positive.
    """

    stage = RunStage(stage)
    status = StageStatus(status)
    if status not in _STAGE_STATUSES[stage]:
        raise ValueError(f"status {status.value!r} is not valid for stage {stage.value!r}")
    if rerun_index is not None and rerun_index < 1:
        raise ValueError("rerun_index must be >= 1")

    event_time = clock() if clock is not None else datetime.now(timezone.utc)
    event_payload: dict[str, object] = {
        "stage": stage.value,
        "status": status.value,
        "at_utc": event_time.isoformat(),
    }
    if job_id is not None:
        event_payload["job_id"] = job_id
    if rerun_index is not None:
        event_payload["rerun_index"] = rerun_index
    if details:
        event_payload["details"] = details
    return event_payload
