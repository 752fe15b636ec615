"""
Retry policy and state for provider calls.

Retries are driven as a small state machine:

    ATTEMPTING -> SUCCEEDED
    ATTEMPTING -> BACKING_OFF -> ATTEMPTING
    ATTEMPTING -> EXHAUSTED

Only retryable failures move to BACKING_OFF, and only while retries remain.
"""

from dataclasses import dataclass
from enum import Enum, auto


class RetryState(Enum):
    """States of a single completion's retry loop."""
    ATTEMPTING = auto()
    BACKING_OFF = auto()
    SUCCEEDED = auto()
    EXHAUSTED = auto()


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff policy.

    The default allows 3 attempts with 1s and 2s pauses between them.
    """
    max_retries: int = 2
    base_delay: float = 1.0
    multiplier: float = 2.0

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Backoff before the attempt following `attempt` (1-based)."""
        return self.base_delay * (self.multiplier ** (attempt - 1))

    def next_state(self, attempt: int, retryable: bool) -> RetryState:
        """State to enter after attempt number `attempt` failed."""
        if retryable and attempt < self.max_attempts:
            return RetryState.BACKING_OFF
        return RetryState.EXHAUSTED
