"""
HTTP binding of the RemoteService capability.

Talks to the generation service's JSON gateway:

    POST {base}/generate      body: JobRequest.to_dict()
                              -> {"success": true, "data": "<task id>", "error": null}
    GET  {base}/task/{id}     -> {"success": true, "data": {"status": "Pending", "error": null, ...}}
    GET  {base}/image/{id}    -> raw image bytes (404 while not available)

Every endpoint answers 404 for unknown tasks. Service statuses
"Pending" and "Processing" both mean the job is not ready yet.

Limitation: the ic-stable-diff canister's own HTTP handler answers every
`POST /generate` with 400 ("Use the canister's generate_image method
directly"); jobs are created there through the canister call interface.
This binding needs a gateway that exposes the three routes above, and run
against the bare canister every submit ends in RejectedByServiceError(400).

Errors are mapped onto the RemoteService contract:
    - connection errors / timeouts -> ServiceTransportError
    - non-2xx or success=false      -> ServiceResponseError(status_code)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from models.job_request import JobRequest
from models.job_status import JobStatus

from .exceptions import ServiceResponseError, ServiceTransportError


# Service statuses that mean "not ready yet"
_PENDING_STATUSES = {"pending", "processing"}


class HttpRemoteService:
    """
    RemoteService implementation over HTTP using a requests.Session.

    Attributes:
        base_url: Gateway root URL (no trailing slash)
    """

    def __init__(
        self,
        base_url: str,
        request_timeout: float = 30.0,
        result_timeout: float = 60.0,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the HTTP binding.

        Args:
            base_url: Gateway root URL
            request_timeout: Timeout in seconds for submit and status calls
            result_timeout: Timeout in seconds for the result download
            session: Optional pre-configured session (tests inject a mock)
            logger: Logger instance (creates default if not provided)

        Raises:
            ValueError: If base_url is empty
        """
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self._request_timeout = request_timeout
        self._result_timeout = result_timeout
        self._session = session or requests.Session()
        self._logger = logger or logging.getLogger("diffusion_client.core.http_service")

    def submit_job(self, request: JobRequest) -> str:
        response = self._send(
            "POST",
            "generate",
            operation="submit_job",
            timeout=self._request_timeout,
            json=request.to_dict(),
        )
        body = self._json_body(response, "submit_job")
        task_id = body.get("data")
        if not task_id:
            raise ServiceResponseError(
                response.status_code, "Response carries no task id", "submit_job"
            )
        return str(task_id)

    def get_status(self, job_id: str) -> JobStatus:
        response = self._send(
            "GET",
            f"task/{job_id}",
            operation="get_status",
            timeout=self._request_timeout,
        )
        body = self._json_body(response, "get_status")
        task = body.get("data") or {}
        return self._parse_status(task)

    def get_result(self, job_id: str) -> bytes:
        response = self._send(
            "GET",
            f"image/{job_id}",
            operation="get_result",
            timeout=self._result_timeout,
        )
        return response.content

    def close(self) -> None:
        self._session.close()

    def _send(self, method: str, path: str, operation: str, timeout: float,
              **kwargs: Any) -> requests.Response:
        """
        Perform one HTTP request.

        Raises:
            ServiceTransportError: Connection failure or timeout
            ServiceResponseError: Non-2xx response
        """
        url = f"{self.base_url}/{path}"
        self._logger.debug(f"{method} {url}")

        try:
            response = self._session.request(method, url, timeout=timeout, **kwargs)
        except requests.RequestException as e:
            self._logger.warning(f"{operation}: {method} {url} failed: {e}")
            raise ServiceTransportError(str(e), operation) from e

        if not response.ok:
            raise ServiceResponseError(
                response.status_code, self._error_text(response), operation
            )
        return response

    @staticmethod
    def _json_body(response: requests.Response, operation: str) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise ServiceResponseError(
                response.status_code, f"Invalid JSON in response: {e}", operation
            ) from e

        if not isinstance(body, dict):
            raise ServiceResponseError(response.status_code, "Unexpected response shape", operation)
        if not body.get("success", False):
            raise ServiceResponseError(
                response.status_code, body.get("error") or "Request not successful", operation
            )
        return body

    @staticmethod
    def _parse_status(task: Dict[str, Any]) -> JobStatus:
        status = str(task.get("status", "")).lower()
        if status in _PENDING_STATUSES:
            return JobStatus.pending()
        if status == "completed":
            return JobStatus.completed()
        if status == "failed":
            return JobStatus.failed(task.get("error") or "generation failed")
        # Unknown status strings are treated as not-ready-yet
        return JobStatus.pending()

    @staticmethod
    def _error_text(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.text[:200]
