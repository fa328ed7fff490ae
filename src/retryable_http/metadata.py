"""
Attempt metadata tracking.

This module defines the AttemptMetadata record that a retried call updates
in place, so that callers can read how many attempts a call took and how
long the successful attempt ran.
"""

from dataclasses import dataclass


@dataclass
class AttemptMetadata:
    """
    Mutable per-call attempt bookkeeping.

    Unlike an audit record, this is written while the call is running: the
    executor bumps ``attempts`` as each attempt starts and sets
    ``success_duration`` once, when an attempt succeeds.

    Not safe for concurrent use. One instance must back exactly one
    in-flight call; obtain a fresh context per call.

    Attributes:
        attempts: Number of attempts started for the current call
        success_duration: Duration of the successful attempt in seconds
            (0.0 until a call succeeds)
    """

    attempts: int = 0
    success_duration: float = 0.0

    def reset(self) -> None:
        self.attempts = 0
        self.success_duration = 0.0
