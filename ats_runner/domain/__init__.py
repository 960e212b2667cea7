"""Domain models used across orchestration layer boundaries."""

from .models import JobHandle, JobTrigger, RerunRequest, RunStatus, TestRunResult
from .timeline import RunStage, StageStatus, domain_build_stage_event

__all__ = [
	"JobHandle",
	"JobTrigger",
	"RerunRequest",
	"RunStage",
	"RunStatus",
	"StageStatus",
	"TestRunResult",
	"domain_build_stage_event",
]
