"""Job layer package for test-run orchestration boundaries."""

from .cancellation import CancellableSleeper
from .interfaces import JobStatusPollerPort, PollSleeperPort, TestRunOrchestratorPort
from .job_status_poller import JobStatusPoller
from .poll_schedule import DEFAULT_POLL_TIERS, PollSchedule, PollTier
from .run_orchestrator import (
	MAX_RERUN_ATTEMPTS,
	AttemptOutcome,
	OrchestrationState,
	TestRunOrchestrator,
	TestRunOrchestratorConfig,
	job_next_state,
)

__all__ = [
	"AttemptOutcome",
	"CancellableSleeper",
	"DEFAULT_POLL_TIERS",
	"JobStatusPoller",
	"JobStatusPollerPort",
	"MAX_RERUN_ATTEMPTS",
	"OrchestrationState",
	"PollSchedule",
	"PollSleeperPort",
	"PollTier",
	"TestRunOrchestrator",
	"TestRunOrchestratorConfig",
	"TestRunOrchestratorPort",
	"job_next_state",
]
