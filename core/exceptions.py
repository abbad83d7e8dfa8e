"""
Custom exceptions for the diffusion job client.

Exception Hierarchy:
    DiffusionClientError (base)
    ├── InvalidJobRequestError     - Request parameters out of range
    ├── ServiceError               - Raised by RemoteService implementations
    │   ├── ServiceTransportError  - Service unreachable
    │   └── ServiceResponseError   - Service answered with a non-success status
    ├── SubmitError                - submit() failed
    │   ├── SubmitTransportError
    │   └── RejectedByServiceError
    ├── PollError                  - poll() failed
    │   ├── PollTransportError
    │   └── UnknownHandleError
    ├── AwaitError                 - await_completion() failed
    │   ├── JobFailedError         - Remote job reported failure (terminal)
    │   ├── AwaitTimeoutError      - Retry budget exhausted (terminal)
    │   ├── AwaitCancelledError    - Cancel signal observed between attempts
    │   └── HandleClosedError      - Handle already in a terminal failure state
    ├── FetchError                 - fetch() failed
    │   ├── FetchTransportError
    │   ├── EmptyPayloadError
    │   └── HandleNotCompletedError
    ├── EncodeError                - Bitmap encoding/decoding failed
    │   ├── DimensionMismatchError
    │   ├── DimensionTooLargeError
    │   ├── InvalidDimensionsError
    │   ├── InvalidPixelError
    │   └── InvalidBitmapError
    └── PayloadFormatError         - Fetched bytes are neither BMP nor raw RGB

Usage:
    Transport errors may be retried by the caller with a new call.
    Logic errors (unknown handle, out-of-order fetch) are never retried.
    Timeout means the handle is spent - submit a new job instead.
"""

from typing import Optional, Dict, Any


class DiffusionClientError(Exception):
    """
    Base exception for all diffusion client errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def kind(self) -> str:
        """Short failure kind shown to the user (the class name)."""
        return type(self).__name__

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidJobRequestError(DiffusionClientError, ValueError):
    """A JobRequest was constructed with out-of-range parameters."""

    def __init__(self, field_name: str, value: Any, constraint: str):
        message = f"Invalid job request: {field_name}={value!r} ({constraint})"
        super().__init__(message, {"field": field_name, "value": value})
        self.field_name = field_name
        self.value = value


# =============================================================================
# SERVICE ERRORS - Raised by RemoteService implementations
# =============================================================================

class ServiceError(DiffusionClientError):
    """Base class for errors raised by a RemoteService binding."""


class ServiceTransportError(ServiceError):
    """
    The remote service could not be reached.

    Typical causes:
    - Network connectivity issues
    - DNS failure or wrong service URL
    - Request timed out
    """

    def __init__(self, message: str, operation: str = ""):
        details = {"operation": operation} if operation else {}
        super().__init__(message, details)
        self.operation = operation


class ServiceResponseError(ServiceError):
    """The remote service answered, but with a non-success status."""

    def __init__(self, status_code: int, message: str = "", operation: str = ""):
        text = message or f"Service returned status {status_code}"
        details: Dict[str, Any] = {"status_code": status_code}
        if operation:
            details["operation"] = operation
        super().__init__(text, details)
        self.status_code = status_code
        self.operation = operation


# =============================================================================
# SUBMIT ERRORS
# =============================================================================

class SubmitError(DiffusionClientError):
    """Base class for job submission failures."""


class SubmitTransportError(SubmitError):
    """Service unreachable while submitting. Safe to call submit() again."""

    def __init__(self, message: str):
        details = {"resolution": "Check service connectivity and submit again"}
        super().__init__(f"Job submission failed: {message}", details)


class RejectedByServiceError(SubmitError):
    """The service refused the job request."""

    def __init__(self, status_code: int, reason: str = ""):
        message = f"Job rejected by service (status {status_code})"
        if reason:
            message = f"{message}: {reason}"
        details = {
            "status_code": status_code,
            "resolution": "Check the request parameters; resubmitting unchanged will fail again",
        }
        super().__init__(message, details)
        self.status_code = status_code
        self.reason = reason


# =============================================================================
# POLL ERRORS
# =============================================================================

class PollError(DiffusionClientError):
    """Base class for status check failures."""

    def __init__(self, message: str, job_id: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        if job_id:
            error_details["job_id"] = job_id
        super().__init__(message, error_details)
        self.job_id = job_id


class PollTransportError(PollError):
    """Service unreachable during a status check."""

    def __init__(self, job_id: str, message: str):
        super().__init__(f"Status check failed: {message}", job_id)


class UnknownHandleError(PollError):
    """The service does not recognize the job handle."""

    def __init__(self, job_id: str):
        details = {"resolution": "The handle was not issued by this service; submit a new job"}
        super().__init__(f"Service does not recognize job {job_id}", job_id, details)


# =============================================================================
# AWAIT ERRORS
# =============================================================================

class AwaitError(DiffusionClientError):
    """Base class for await_completion() failures. All are terminal for the handle."""

    def __init__(self, message: str, job_id: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        if job_id:
            error_details["job_id"] = job_id
        super().__init__(message, error_details)
        self.job_id = job_id


class JobFailedError(AwaitError):
    """The remote job reported failure."""

    def __init__(self, job_id: str, reason: str):
        super().__init__(f"Job {job_id} failed: {reason}", job_id)
        self.reason = reason


class AwaitTimeoutError(AwaitError):
    """
    The job was still pending when the retry budget ran out.

    The handle must not be polled again. The job might still complete on
    the service side - submit a new job to retry.
    """

    def __init__(self, job_id: str, attempts: int, delay_seconds: float):
        message = f"Job {job_id} not completed after {attempts} status checks"
        details = {
            "attempts": attempts,
            "delay_seconds": delay_seconds,
            "resolution": "Submit a new job or raise the retry budget",
        }
        super().__init__(message, job_id, details)
        self.attempts = attempts


class AwaitCancelledError(AwaitError):
    """Waiting was cancelled by the caller between attempts."""

    def __init__(self, job_id: str, attempts: int):
        super().__init__(
            f"Waiting for job {job_id} cancelled after {attempts} status checks",
            job_id,
            {"attempts": attempts},
        )
        self.attempts = attempts


class HandleClosedError(AwaitError):
    """The handle already reached a terminal failure state and cannot be awaited again."""

    def __init__(self, job_id: str, state: str):
        super().__init__(
            f"Job {job_id} is {state}; it cannot be awaited again",
            job_id,
            {"state": state, "resolution": "Submit a new job"},
        )
        self.state = state


# =============================================================================
# FETCH ERRORS
# =============================================================================

class FetchError(DiffusionClientError):
    """Base class for result retrieval failures."""

    def __init__(self, message: str, job_id: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        if job_id:
            error_details["job_id"] = job_id
        super().__init__(message, error_details)
        self.job_id = job_id


class FetchTransportError(FetchError):
    """Service unreachable while downloading the result."""

    def __init__(self, job_id: str, message: str):
        super().__init__(f"Result download failed: {message}", job_id)


class EmptyPayloadError(FetchError):
    """The service returned a zero-length result."""

    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} returned an empty payload", job_id)


class HandleNotCompletedError(FetchError):
    """fetch() was called before await_completion() succeeded for the handle."""

    def __init__(self, job_id: str, state: Optional[str] = None):
        details = {
            "state": state or "unsubmitted",
            "resolution": "Call await_completion() and wait for it to succeed before fetch()",
        }
        super().__init__(f"Job {job_id} has not completed", job_id, details)
        self.state = state


# =============================================================================
# ENCODE ERRORS
# =============================================================================

class EncodeError(DiffusionClientError):
    """Base class for bitmap encoding failures."""


class DimensionMismatchError(EncodeError):
    """Pixel count does not match width * height."""

    def __init__(self, width: int, height: int, pixel_count: int):
        message = (
            f"Expected {width * height} pixels for {width}x{height}, "
            f"got {pixel_count}"
        )
        super().__init__(message, {"width": width, "height": height, "pixels": pixel_count})
        self.pixel_count = pixel_count


class DimensionTooLargeError(EncodeError):
    """Width or height exceeds the 16-bit limit."""

    def __init__(self, width: int, height: int, limit: int):
        super().__init__(
            f"Image {width}x{height} exceeds the maximum dimension {limit}",
            {"width": width, "height": height, "limit": limit},
        )


class InvalidDimensionsError(EncodeError):
    """Width or height is zero or negative."""

    def __init__(self, width: int, height: int):
        super().__init__(
            f"Image dimensions must be positive, got {width}x{height}",
            {"width": width, "height": height},
        )


class InvalidPixelError(EncodeError):
    """A pixel channel is not an integer in 0..255."""

    def __init__(self, index: int, pixel: Any):
        super().__init__(
            f"Pixel {index} has a channel outside 0..255: {pixel!r}",
            {"index": index, "pixel": pixel},
        )
        self.index = index


class InvalidBitmapError(EncodeError):
    """Bytes do not form a supported 24-bit uncompressed bitmap."""


class PayloadFormatError(DiffusionClientError):
    """Fetched payload is neither a bitmap nor raw RGB data of the requested size."""

    def __init__(self, size: int, width: int, height: int):
        message = (
            f"Unrecognized payload of {size} bytes "
            f"(expected a bitmap or {width * height * 3} bytes of RGB data)"
        )
        details = {
            "size": size,
            "resolution": "Run with --placeholder to write a demo image instead",
        }
        super().__init__(message, details)
        self.size = size
