"""Shared fixtures: an in-memory RemoteService with scripted behaviour."""

import logging
from typing import Dict, List, Optional, Union

import pytest

from core.exceptions import ServiceResponseError, ServiceTransportError
from models.job_request import JobRequest
from models.job_status import JobStatus


StatusStep = Union[JobStatus, Exception]


class FakeRemoteService:
    """
    RemoteService fake.

    Status checks replay `statuses` in order; the last entry repeats once
    the script runs out. Exceptions in the script are raised instead of
    returned.
    """

    def __init__(
        self,
        statuses: Optional[List[StatusStep]] = None,
        result: Union[bytes, Exception] = b"",
        submit_error: Optional[Exception] = None,
    ):
        self.statuses = list(statuses or [JobStatus.completed()])
        self.result = result
        self.submit_error = submit_error
        self.submitted: List[JobRequest] = []
        self.status_calls: List[str] = []
        self.result_calls: List[str] = []
        self._jobs: Dict[str, JobRequest] = {}

    def submit_job(self, request: JobRequest) -> str:
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(request)
        job_id = f"task_{len(self.submitted)}"
        self._jobs[job_id] = request
        return job_id

    def get_status(self, job_id: str) -> JobStatus:
        self.status_calls.append(job_id)
        if job_id not in self._jobs:
            raise ServiceResponseError(404, "Task not found", "get_status")
        index = min(len(self.status_calls) - 1, len(self.statuses) - 1)
        step = self.statuses[index]
        if isinstance(step, Exception):
            raise step
        return step

    def get_result(self, job_id: str) -> bytes:
        self.result_calls.append(job_id)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def logger():
    """Create a test logger."""
    return logging.getLogger("test")


@pytest.fixture
def sample_request():
    """The 64x64 request used throughout the tests."""
    return JobRequest(
        prompt="x",
        width=64,
        height=64,
        num_inference_steps=10,
        guidance_scale=7.5,
        seed=12345,
    )


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays."""
    calls = []

    def _sleep(seconds):
        calls.append(seconds)

    _sleep.calls = calls
    return _sleep


@pytest.fixture
def transport_error():
    return ServiceTransportError("connection refused", "get_status")
