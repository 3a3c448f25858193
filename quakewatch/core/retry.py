"""Retry policy for feed fetches - Pure functions.

The feed is polled on a fixed interval, so retries only need to cover
short hiccups inside one cycle. After the last attempt the cycle gives
up and the next timer tick tries again.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff.

    Attributes:
        max_retries: Extra attempts after the first one (0 = no retry)
        base_delay_seconds: Delay before the first retry
        max_delay_seconds: Upper bound on any single delay
        multiplier: Growth factor between consecutive delays
    """
    max_retries: int = 2
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 10.0
    multiplier: float = 2.0

    @property
    def max_attempts(self) -> int:
        """Total number of attempts including the first."""
        return max(self.max_retries, 0) + 1


def compute_backoff_delay(policy: RetryPolicy, retry_number: int) -> float:
    """Delay before the given retry (1-based).

    Pure function.

    Args:
        policy: Retry policy
        retry_number: 1 for the first retry, 2 for the second, ...

    Returns:
        Delay in seconds, capped at policy.max_delay_seconds
    """
    if retry_number < 1:
        return 0.0
    delay = policy.base_delay_seconds * (policy.multiplier ** (retry_number - 1))
    return min(delay, policy.max_delay_seconds)
