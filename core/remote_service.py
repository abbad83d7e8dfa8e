"""
RemoteService capability.

The job client talks to the generation service only through this
three-operation surface. The transport and wire encoding are owned by
whoever implements it (see core.http_service for the HTTP binding; tests
use an in-memory fake).

Error contract for implementations:
    - ServiceTransportError: the service could not be reached
    - ServiceResponseError:  the service answered with a non-success status
                             (404 means "unknown job")
"""

from __future__ import annotations

from typing import Protocol

from models.job_request import JobRequest
from models.job_status import JobStatus


class RemoteService(Protocol):
    """Capability surface of the image generation service."""

    def submit_job(self, request: JobRequest) -> str:
        """Start a job and return its identifier."""
        ...

    def get_status(self, job_id: str) -> JobStatus:
        """Return the current status of a job."""
        ...

    def get_result(self, job_id: str) -> bytes:
        """Return the result payload of a completed job."""
        ...
