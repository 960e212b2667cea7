"""Tiered status polling schedule."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterator


@dataclass(frozen=True)
class PollTier:
    """One step of the tiered schedule.

    Attributes:
        start_index: First zero-based attempt index the tier applies to.
        wait_seconds: Wait after each attempt within the tier.
    """

    start_index: int
    wait_seconds: float


DEFAULT_POLL_TIERS: Final[tuple[PollTier, ...]] = (
    PollTier(start_index=0, wait_seconds=15.0),
    PollTier(start_index=41, wait_seconds=30.0),
    PollTier(start_index=81, wait_seconds=60.0),
)


@dataclass(frozen=True)
class PollSchedule:
    """Deterministic wait sequence consumed one entry per status query.

    The last tier whose `start_index` is not greater than the attempt index
    decides the wait, so later tiers override earlier ones as attempts grow.

    Attributes:
        initial_wait_seconds: Delay before the first status query.
        max_attempts: Hard cap on status queries.
        tiers: Ascending tiers; the first one must start at index 0.
    """

    initial_wait_seconds: float = 3.0
    max_attempts: int = 350
    tiers: tuple[PollTier, ...] = DEFAULT_POLL_TIERS

    def __post_init__(self) -> None:
        if self.initial_wait_seconds < 0:
            raise ValueError("initial_wait_seconds must be >= 0")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if not self.tiers:
            raise ValueError("tiers must not be empty")
        if self.tiers[0].start_index != 0:
            raise ValueError("first tier must start at attempt index 0")
        for previous_tier, tier in zip(self.tiers, self.tiers[1:]):
            if tier.start_index <= previous_tier.start_index:
                raise ValueError("tier start indices must be strictly ascending")
        if any(tier.wait_seconds < 0 for tier in self.tiers):
            raise ValueError("tier wait_seconds must be >= 0")

    def schedule_wait_seconds(self, attempt_index: int) -> float:
        """Return the wait that follows one status query.

        Args:
            attempt_index: Zero-based attempt index.

        Returns:
            float: Wait seconds.

        Raises:
            ValueError: Raised when the index is negative or beyond the attempt cap.
        """

        if attempt_index < 0:
            raise ValueError("attempt_index must be >= 0")
        if attempt_index >= self.max_attempts:
            raise ValueError(f"attempt_index must be < max_attempts={self.max_attempts}")

        wait_seconds = self.tiers[0].wait_seconds
        for tier in self.tiers:
            if attempt_index >= tier.start_index:
                wait_seconds = tier.wait_seconds
        return wait_seconds

    def schedule_iter_waits(self) -> Iterator[float]:
        """Yield the wait after every attempt, in attempt order."""

        for attempt_index in range(self.max_attempts):
            yield self.schedule_wait_seconds(attempt_index)

    def schedule_worst_case_seconds(self) -> float:
        """Return total wall-clock sleep when the job never completes."""

        return self.initial_wait_seconds + sum(self.schedule_iter_waits())
