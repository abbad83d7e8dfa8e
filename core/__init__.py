"""
Core module for the diffusion job client.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- remote_service: RemoteService capability (Protocol)
- http_service: HTTP binding of RemoteService
- job_client: submit / poll / await / fetch lifecycle

Only the exceptions are re-exported here; import the other modules
directly (they depend on models, which depends on core.exceptions).
"""

from .exceptions import (
    DiffusionClientError,
    InvalidJobRequestError,
    ServiceError,
    ServiceTransportError,
    ServiceResponseError,
    SubmitError,
    SubmitTransportError,
    RejectedByServiceError,
    PollError,
    PollTransportError,
    UnknownHandleError,
    AwaitError,
    JobFailedError,
    AwaitTimeoutError,
    AwaitCancelledError,
    HandleClosedError,
    FetchError,
    FetchTransportError,
    EmptyPayloadError,
    HandleNotCompletedError,
    EncodeError,
    DimensionMismatchError,
    DimensionTooLargeError,
    InvalidDimensionsError,
    InvalidPixelError,
    InvalidBitmapError,
    PayloadFormatError,
)

__all__ = [
    "DiffusionClientError",
    "InvalidJobRequestError",
    "ServiceError",
    "ServiceTransportError",
    "ServiceResponseError",
    "SubmitError",
    "SubmitTransportError",
    "RejectedByServiceError",
    "PollError",
    "PollTransportError",
    "UnknownHandleError",
    "AwaitError",
    "JobFailedError",
    "AwaitTimeoutError",
    "AwaitCancelledError",
    "HandleClosedError",
    "FetchError",
    "FetchTransportError",
    "EmptyPayloadError",
    "HandleNotCompletedError",
    "EncodeError",
    "DimensionMismatchError",
    "DimensionTooLargeError",
    "InvalidDimensionsError",
    "InvalidPixelError",
    "InvalidBitmapError",
    "PayloadFormatError",
]
