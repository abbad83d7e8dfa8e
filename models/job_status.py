"""
Job status data models.

These models describe where a remote job is in its lifecycle, from two
points of view:

    JobStatus   - what the service reports for a job on one status check
    HandleState - what the JobClient knows about a handle it issued

Lifecycle (client side):
    SUBMITTED -> (COMPLETED | FAILED | TIMED_OUT | CANCELLED)

Terminal states never transition again.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class JobHandle:
    """
    Opaque identifier for one submitted job.

    Returned by JobClient.submit() and owned by the caller for the
    lifetime of the job.
    """

    job_id: str

    def __str__(self) -> str:
        return self.job_id


class JobState(Enum):
    """State of a job as reported by the remote service."""

    PENDING = "pending"
    """Job is queued or still processing."""

    COMPLETED = "completed"
    """Job finished and a result is available."""

    FAILED = "failed"
    """Job failed on the service side."""


@dataclass(frozen=True)
class JobStatus:
    """
    Result of a single status check.

    Use the constructors rather than building instances by hand:

        JobStatus.pending()
        JobStatus.completed()
        JobStatus.failed("Model not initialized")
    """

    state: JobState
    reason: str = ""

    @classmethod
    def pending(cls) -> "JobStatus":
        return cls(JobState.PENDING)

    @classmethod
    def completed(cls) -> "JobStatus":
        return cls(JobState.COMPLETED)

    @classmethod
    def failed(cls, reason: str) -> "JobStatus":
        return cls(JobState.FAILED, reason or "unknown error")

    @property
    def is_terminal(self) -> bool:
        """True once the job can no longer change state."""
        return self.state is not JobState.PENDING


class HandleState(Enum):
    """
    Client-side lifecycle of a job handle.

    A handle the client never issued is "unsubmitted" and has no entry.
    """

    SUBMITTED = "submitted"
    """Accepted by the service, not yet known to be finished."""

    COMPLETED = "completed"
    """await_completion() observed COMPLETED. fetch() is allowed."""

    FAILED = "failed"
    """The service reported failure or stopped recognizing the handle."""

    TIMED_OUT = "timed_out"
    """Retry budget ran out while the job was still pending."""

    CANCELLED = "cancelled"
    """The caller cancelled waiting."""

    @property
    def is_terminal(self) -> bool:
        return self is not HandleState.SUBMITTED
