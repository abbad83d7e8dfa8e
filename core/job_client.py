"""
Job lifecycle client for the image generation service.

This module drives a single job through submit -> poll -> fetch against
an injected RemoteService, enforcing a bounded retry budget and raising
precise, typed failures.

STATE MACHINE (per handle):
    (unsubmitted) -> SUBMITTED -> (COMPLETED | FAILED | TIMED_OUT | CANCELLED)

    - submit() creates a handle in SUBMITTED
    - await_completion() moves it to exactly one terminal state
    - fetch() is only allowed from COMPLETED
    - terminal states never transition

RETRY POLICY:
    Retries live only inside await_completion(). Every status check, whether
    it answers "pending" or fails at the transport level, consumes one
    attempt. The loop sleeps between attempts, never after the last one.
    submit(), poll() and fetch() make exactly one service call each.

Usage:
    client = JobClient(HttpRemoteService(base_url))

    handle = client.submit(JobRequest(prompt="mountains at dusk"))
    client.await_completion(handle, RetryPolicy(max_attempts=30, delay_seconds=2))
    payload = client.fetch(handle)
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Optional

from models.job_request import JobRequest
from models.job_status import HandleState, JobHandle, JobState, JobStatus
from models.retry_policy import RetryPolicy

from .exceptions import (
    AwaitCancelledError,
    AwaitTimeoutError,
    EmptyPayloadError,
    FetchTransportError,
    HandleClosedError,
    HandleNotCompletedError,
    JobFailedError,
    PollTransportError,
    RejectedByServiceError,
    ServiceResponseError,
    ServiceTransportError,
    SubmitTransportError,
    UnknownHandleError,
)
from .remote_service import RemoteService


class JobClient:
    """
    Client for one caller driving jobs through their lifecycle.

    Not thread-safe: a single caller is assumed. The only cross-thread
    interaction supported is setting the cancel event passed to
    await_completion().

    Attributes:
        service: The RemoteService all calls go through
    """

    def __init__(
        self,
        service: RemoteService,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the job client.

        Args:
            service: RemoteService implementation (HTTP binding or fake)
            sleep: Delay function used between status checks. Tests inject
                a no-op to run the retry loop instantly.
            logger: Logger instance (creates default if not provided)

        Raises:
            ValueError: If service is None
        """
        if service is None:
            raise ValueError("service is required")

        self._service = service
        self._sleep = sleep
        self._logger = logger or logging.getLogger("diffusion_client.core.job_client")
        self._states: Dict[JobHandle, HandleState] = {}

    @property
    def service(self) -> RemoteService:
        return self._service

    def state_of(self, handle: JobHandle) -> Optional[HandleState]:
        """Client-side state of a handle, or None if this client never issued it."""
        return self._states.get(handle)

    def submit(self, request: JobRequest) -> JobHandle:
        """
        Submit a generation job.

        Args:
            request: Validated job request

        Returns:
            Handle for status polling and result retrieval

        Raises:
            SubmitTransportError: If the service is unreachable
            RejectedByServiceError: If the service refuses the request
        """
        self._logger.debug(
            f"Submitting job: {request.width}x{request.height}, "
            f"steps={request.num_inference_steps}, seed={request.seed}"
        )

        try:
            job_id = self._service.submit_job(request)
        except ServiceTransportError as e:
            self._logger.error(f"submit_job failed: {e.message}")
            raise SubmitTransportError(e.message) from e
        except ServiceResponseError as e:
            self._logger.error(f"submit_job rejected: status={e.status_code} {e.message}")
            raise RejectedByServiceError(e.status_code, e.message) from e

        handle = JobHandle(job_id)
        self._states[handle] = HandleState.SUBMITTED
        self._logger.info(f"Job submitted: handle={job_id}")
        return handle

    def poll(self, handle: JobHandle) -> JobStatus:
        """
        Check job status once (non-blocking).

        Args:
            handle: Handle from submit()

        Returns:
            Status reported by the service

        Raises:
            PollTransportError: If the service is unreachable
            UnknownHandleError: If the service does not recognize the handle
        """
        try:
            status = self._service.get_status(handle.job_id)
        except ServiceTransportError as e:
            raise PollTransportError(handle.job_id, e.message) from e
        except ServiceResponseError as e:
            if e.status_code == 404:
                raise UnknownHandleError(handle.job_id) from e
            raise PollTransportError(
                handle.job_id, f"status {e.status_code}: {e.message}"
            ) from e

        self._logger.debug(f"Status for {handle}: {status.state.value}")
        return status

    def await_completion(
        self,
        handle: JobHandle,
        policy: RetryPolicy,
        cancel_event: Optional[threading.Event] = None
    ) -> None:
        """
        Poll job status until completion, failure or budget exhaustion.

        Makes at most policy.max_attempts status checks and stops as soon as
        the service reports a terminal status.

        Args:
            handle: Handle from submit()
            policy: Attempt budget and delay between attempts
            cancel_event: Optional event checked between attempts; when set,
                waiting stops with AwaitCancelledError

        Raises:
            JobFailedError: Service reported the job as failed
            AwaitTimeoutError: Budget exhausted while still pending
            AwaitCancelledError: cancel_event was set
            UnknownHandleError: Service stopped recognizing the handle
            HandleClosedError: Handle already failed, timed out or was cancelled
        """
        state = self._states.get(handle)
        if state is HandleState.COMPLETED:
            return
        if state is not None and state.is_terminal:
            raise HandleClosedError(handle.job_id, state.value)

        self._logger.info(
            f"Waiting for job {handle} "
            f"(max_attempts={policy.max_attempts}, delay={policy.delay_seconds}s)"
        )

        attempt = 0
        while attempt < policy.max_attempts:
            attempt += 1

            try:
                status = self.poll(handle)
            except PollTransportError as e:
                # Counts toward the budget, same as a pending answer
                self._logger.warning(
                    f"Job {handle} attempt {attempt}/{policy.max_attempts}: "
                    f"service unreachable ({e.message})"
                )
            except UnknownHandleError:
                self._states[handle] = HandleState.FAILED
                self._logger.error(f"Job {handle} unknown to service")
                raise
            else:
                if status.state is JobState.COMPLETED:
                    self._states[handle] = HandleState.COMPLETED
                    self._logger.info(f"Job {handle} completed after {attempt} status checks")
                    return

                if status.state is JobState.FAILED:
                    self._states[handle] = HandleState.FAILED
                    self._logger.error(f"Job {handle} failed: {status.reason}")
                    raise JobFailedError(handle.job_id, status.reason)

                self._logger.debug(
                    f"Job {handle} attempt {attempt}/{policy.max_attempts}: still pending"
                )

            if attempt >= policy.max_attempts:
                break

            if self._wait(policy.delay_seconds, cancel_event):
                self._states[handle] = HandleState.CANCELLED
                self._logger.warning(f"Waiting for job {handle} cancelled after {attempt} attempts")
                raise AwaitCancelledError(handle.job_id, attempt)

        self._states[handle] = HandleState.TIMED_OUT
        self._logger.error(f"Job {handle} timed out after {attempt} status checks")
        raise AwaitTimeoutError(handle.job_id, attempt, policy.delay_seconds)

    def fetch(self, handle: JobHandle) -> bytes:
        """
        Download the result payload of a completed job.

        The bytes are returned as-is; this client does not inspect them.

        Args:
            handle: Handle for which await_completion() succeeded

        Returns:
            Non-empty result payload

        Raises:
            HandleNotCompletedError: If the handle is not COMPLETED (no service call made)
            FetchTransportError: If the download fails
            EmptyPayloadError: If the service returns zero bytes
        """
        state = self._states.get(handle)
        if state is not HandleState.COMPLETED:
            raise HandleNotCompletedError(handle.job_id, state.value if state else None)

        try:
            payload = self._service.get_result(handle.job_id)
        except ServiceTransportError as e:
            self._logger.error(f"get_result failed for {handle}: {e.message}")
            raise FetchTransportError(handle.job_id, e.message) from e
        except ServiceResponseError as e:
            self._logger.error(f"get_result rejected for {handle}: status={e.status_code}")
            raise FetchTransportError(
                handle.job_id, f"status {e.status_code}: {e.message}"
            ) from e

        if not payload:
            raise EmptyPayloadError(handle.job_id)

        self._logger.info(f"Retrieved {len(payload)} bytes for job {handle}")
        return bytes(payload)

    def _wait(self, delay_seconds: float, cancel_event: Optional[threading.Event]) -> bool:
        """
        Pause between attempts.

        Returns:
            True if the cancel event is set
        """
        if cancel_event is None:
            if delay_seconds > 0:
                self._sleep(delay_seconds)
            return False

        if cancel_event.is_set():
            return True
        # Event.wait wakes early on cancellation
        if delay_seconds > 0:
            cancel_event.wait(delay_seconds)
        return cancel_event.is_set()
