"""
Backoff policies for the retry executor.

A backoff policy is stateful: each ``next_delay()`` call advances it, and
``reset()`` returns it to the initial interval. Policies are not safe to
share between calls; the executor builds a new one per call.
"""

import random
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class BackOffPolicy(Protocol):
    """
    Protocol for backoff policies.

    Implementations compute the wait before the next attempt. Every delay
    returned must be <= the policy's max interval.
    """

    def next_delay(self) -> float:
        """Return the next delay in seconds and advance the policy."""
        ...

    def reset(self) -> None:
        """Return the policy to its initial state."""
        ...


class ExponentialBackOff:
    """
    Exponential backoff with randomization, capped at ``max_interval``.

    Delay = current * random(1 - randomization_factor, 1 + randomization_factor),
    then current = min(current * multiplier, max_interval). The randomized
    delay is clamped to ``max_interval`` as well.

    With the defaults (0.5s, x1.5, +/-50%) the first delays are roughly
    0.5, 0.75, 1.1, 1.7, 2.5, 3.8 seconds.

    Attributes:
        initial_interval: First delay in seconds (before randomization)
        multiplier: Growth factor per call to next_delay()
        randomization_factor: Jitter ratio in [0, 1]; 0 disables jitter
        max_interval: Upper bound for every delay returned
    """

    def __init__(
        self,
        initial_interval: float = 0.5,
        multiplier: float = 1.5,
        randomization_factor: float = 0.5,
        max_interval: float = 30.0,
        rng: Optional[random.Random] = None,
    ):
        if max_interval <= 0:
            raise ValueError("max_interval must be > 0")
        if not 0 <= randomization_factor <= 1:
            raise ValueError("randomization_factor must be within [0, 1]")

        self.initial_interval = initial_interval
        self.multiplier = multiplier
        self.randomization_factor = randomization_factor
        self.max_interval = max_interval
        self._rng = rng or random.Random()
        self._current = min(initial_interval, max_interval)

    @property
    def current_interval(self) -> float:
        return self._current

    def next_delay(self) -> float:
        delay = self._randomize(self._current)
        self._current = min(self._current * self.multiplier, self.max_interval)
        return min(delay, self.max_interval)

    def reset(self) -> None:
        self._current = min(self.initial_interval, self.max_interval)

    def _randomize(self, interval: float) -> float:
        if self.randomization_factor == 0:
            return interval
        delta = self.randomization_factor * interval
        return self._rng.uniform(interval - delta, interval + delta)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"initial_interval={self.initial_interval}, "
            f"multiplier={self.multiplier}, "
            f"max_interval={self.max_interval})"
        )
