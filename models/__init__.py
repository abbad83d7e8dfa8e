"""
Data models for the diffusion job client.

This module contains immutable dataclasses for:
- JobRequest: Generation parameters (validated on construction)
- JobHandle / JobStatus / HandleState: Job lifecycle
- RetryPolicy: Polling budget
- ImageBuffer: Complete image file bytes plus geometry
- GenerationResult: Outcome of one generate run
"""

from .job_request import JobRequest
from .job_status import JobHandle, JobState, JobStatus, HandleState
from .retry_policy import RetryPolicy
from .image_buffer import ImageBuffer, ImageSource
from .generation_result import GenerationResult

__all__ = [
    # Request
    "JobRequest",
    # Lifecycle
    "JobHandle",
    "JobState",
    "JobStatus",
    "HandleState",
    "RetryPolicy",
    # Images
    "ImageBuffer",
    "ImageSource",
    "GenerationResult",
]
