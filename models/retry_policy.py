"""Polling retry policy."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded polling budget for JobClient.await_completion().

    Attributes:
        max_attempts: Total number of status checks allowed (>= 1)
        delay_seconds: Fixed pause between two status checks (>= 0)
    """

    max_attempts: int = 30
    delay_seconds: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {self.delay_seconds}")

    @property
    def max_wait_seconds(self) -> float:
        """Upper bound on time spent sleeping (no sleep after the last attempt)."""
        return (self.max_attempts - 1) * self.delay_seconds
